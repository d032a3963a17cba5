"""
Indexing core: native document building, batching and the session lifecycle.
"""

from .batch import BatchBuffer, validate_batch_size
from .builder import build_native_document
from .session import (
    IndexingError,
    IndexingSession,
    SessionState,
    SessionStateError,
    SessionStats,
)

__all__ = [
    "BatchBuffer",
    "validate_batch_size",
    "build_native_document",
    "IndexingError",
    "IndexingSession",
    "SessionState",
    "SessionStateError",
    "SessionStats",
]
