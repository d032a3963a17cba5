"""
Framework-side document models.

An ``IndexDocument`` is an ordered set of ``IndexField`` descriptors. Each field
carries its internal id, the destination name written to Solr, a semantic
type used to pick a normalizer, and an optional boost. The document carries
its own optional boost, independent of the field boosts.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Dict, Iterator, List, Optional, Tuple


class FieldType(str, Enum):
    """Semantic field types known to the normalizer registry."""

    STRING = "string"
    TEXT = "text"
    DATE = "date"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"


def validate_boost(boost: Any) -> Optional[float]:
    """
    Validate a relevance boost.

    ``None`` means "use the backend default" and is returned as-is.

    Raises:
        ValueError: If the boost is not a positive number
    """
    if boost is None:
        return None
    if isinstance(boost, bool) or not isinstance(boost, Real):
        raise ValueError(f"Boost must be a number, got {type(boost).__name__}")
    if not math.isfinite(boost) or boost <= 0:
        raise ValueError(f"Boost must be a finite number greater than 0, got {boost}")
    return float(boost)


@dataclass
class IndexField:
    """
    A field of the source data being indexed.

    Attributes:
        field_id: Identifier of the field inside the document
        value: Raw field value
        name: Destination name written to Solr (defaults to ``field_id``)
        field_type: Semantic type, selects the normalizer
        boost: Field level boost (None = backend default)
    """
    field_id: str
    value: Any
    name: Optional[str] = None
    field_type: str = FieldType.STRING.value
    boost: Optional[float] = None

    def __post_init__(self):
        if not self.field_id:
            raise ValueError("field_id is required")
        if not self.name:
            self.name = self.field_id
        if isinstance(self.field_type, FieldType):
            self.field_type = self.field_type.value
        self.boost = validate_boost(self.boost)

    def set_boost(self, boost: Optional[float]) -> "IndexField":
        self.boost = validate_boost(boost)
        return self

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)


@dataclass
class IndexDocument:
    """
    A document containing the source data being indexed.

    Iterating yields ``(field_id, value)`` pairs in insertion order.

    Example:
        >>> doc = IndexDocument(boost=2.0)
        >>> doc.add_field(IndexField("title", "Solr in Action", boost=1.5))
        >>> doc.add_field(IndexField("created", "2024-01-15", field_type="date"))
        >>> [field_id for field_id, _ in doc]
        ['title', 'created']
    """
    fields: Dict[str, IndexField] = field(default_factory=dict)
    boost: Optional[float] = None

    def __post_init__(self):
        self.boost = validate_boost(self.boost)

    def add_field(self, index_field: IndexField) -> "IndexDocument":
        """Add a field; an existing field with the same id is replaced in place."""
        self.fields[index_field.field_id] = index_field
        return self

    def get_field(self, field_id: str) -> IndexField:
        """
        Resolve a field descriptor by id.

        Raises:
            KeyError: If the document has no such field
        """
        try:
            return self.fields[field_id]
        except KeyError:
            raise KeyError(f"Field not found in document: {field_id}") from None

    def get_field_boost(self, field_id: str) -> Optional[float]:
        return self.get_field(field_id).boost

    def set_boost(self, boost: Optional[float]) -> "IndexDocument":
        self.boost = validate_boost(boost)
        return self

    def items(self) -> List[Tuple[str, Any]]:
        return list(self)

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        for field_id, index_field in self.fields.items():
            yield field_id, index_field.value

    def __contains__(self, field_id: str) -> bool:
        return field_id in self.fields

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"IndexDocument(fields={list(self.fields)}, boost={self.boost})"
