"""Structured failures raised by backend adapters.

Adapters never retry; recovery policy belongs to the pipeline controller.
"""

from __future__ import annotations


class StoreError(RuntimeError):
    """Base error for hosted backend failures."""


class FetchFailure(StoreError):
    """A query or point read failed."""


class MutationFailure(StoreError):
    """A write against a record failed."""


class UploadFailure(StoreError):
    """Storing an object payload failed."""


class StorageFailure(StoreError):
    """Deleting or otherwise managing a stored object failed."""


class ReferenceResolutionFailure(StoreError):
    """A file reference could not be mapped back to a stored object."""


class AuthenticationRequired(PermissionError):
    """Raised when a view is opened without an authenticated session."""
