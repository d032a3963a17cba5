"""Conversion of framework documents into engine-native documents."""

from typing import Optional

from solrbridge.adapters.search.base import NativeDocument
from solrbridge.logger import get_logger
from solrbridge.models.document import IndexDocument
from solrbridge.normalizers import NormalizerRegistry

logger = get_logger(__name__)


def build_native_document(
    document: IndexDocument,
    native: NativeDocument,
    normalizers: Optional[NormalizerRegistry] = None
) -> NativeDocument:
    """
    Copy a framework document into an empty native document.

    Fields are written in document order under their destination names, so
    when two fields share a destination name the later one wins (value and
    boost). The document boost and the field boosts are applied independently
    and only when set.

    Args:
        document: Source document
        native: Empty native document created by the open update request
        normalizers: Registry consulted once per field by field type

    Returns:
        ``native``, fully populated
    """
    if document.boost is not None:
        native.set_boost(document.boost)

    for field_id, value in document:
        index_field = document.get_field(field_id)
        if normalizers is not None:
            value = normalizers.normalize(index_field.field_type, value)

        native.set_field(index_field.name, value)

        if index_field.boost is not None:
            native.set_field_boost(index_field.name, index_field.boost)

    logger.trace(f"Built native document with {len(document)} fields (boost={document.boost})")
    return native
