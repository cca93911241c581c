from .memory import InMemoryObjectStorage
from .rest import RestObjectStorage
from .s3 import S3ObjectStorage

__all__ = ["InMemoryObjectStorage", "RestObjectStorage", "S3ObjectStorage"]
