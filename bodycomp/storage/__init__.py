"""Storage package: JSON document store and its write queue."""

from bodycomp.storage.json_store import JsonDocumentStore
from bodycomp.storage.write_queue import (
    DocumentValidationError,
    StorageError,
    StorageWriteError,
    WriteQueue,
)

__all__ = [
    "DocumentValidationError",
    "JsonDocumentStore",
    "StorageError",
    "StorageWriteError",
    "WriteQueue",
]
