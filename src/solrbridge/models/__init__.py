"""
Data models for solrbridge.
"""

from .document import (
    FieldType,
    IndexDocument,
    IndexField,
    validate_boost,
)

__all__ = [
    "FieldType",
    "IndexDocument",
    "IndexField",
    "validate_boost",
]
