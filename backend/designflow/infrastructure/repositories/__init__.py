from .memory import InMemoryRecordStore
from .rest import RestRecordStore

__all__ = ["InMemoryRecordStore", "RestRecordStore"]
