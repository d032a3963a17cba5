"""
Field value normalizers.

A normalizer maps a raw field value to the representation Solr expects for a
field type. Normalizers never raise: a value that cannot be normalized is
passed through unchanged so a single odd value does not abort an indexing run.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from dateutil import parser as dateparser

from solrbridge.logger import get_logger

logger = get_logger(__name__)


def format_solr_date(value: datetime) -> str:
    """
    Render a datetime as ``YYYY-MM-DDThh:mm:ssZ`` in UTC.

    Naive values are taken as UTC. The year is always four digits, which
    ``strftime("%Y")`` does not guarantee below year 1000.

    Raises:
        ValueError, OverflowError: If the value cannot be expressed in UTC
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return f"{value.year:04d}-{value:%m-%dT%H:%M:%S}Z"


@runtime_checkable
class Normalizer(Protocol):
    """Protocol for field value normalizers."""

    def normalize(self, value: Any) -> Any:
        """
        Normalize a raw field value.

        Args:
            value: Raw value from the source document

        Returns:
            The normalized value, or ``value`` itself when it cannot be normalized
        """
        ...


class DateNormalizer:
    """
    Renders dates in Solr's transport format, ``YYYY-MM-DDThh:mm:ssZ`` (UTC).

    Accepted inputs:
    - Unix timestamps, as ``int`` or as a string of digits
    - ``datetime`` objects (naive values are taken as UTC)
    - Any date/time string ``dateutil`` can parse

    Example:
        >>> DateNormalizer().normalize("2024-01-15 10:30:00")
        '2024-01-15T10:30:00Z'
        >>> DateNormalizer().normalize(1705314600)
        '2024-01-15T10:30:00Z'
    """

    def normalize(self, value: Any) -> Any:
        if not value:
            return value

        try:
            parsed = self._to_datetime(value)
            if parsed is None:
                return value
            return format_solr_date(parsed)
        except (ValueError, OverflowError, OSError) as e:
            logger.trace(f"Date value left as-is: {value!r} ({e})")
            return value

    def _to_datetime(self, value: Any) -> Optional[datetime]:
        if isinstance(value, bool):
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, int):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        if isinstance(value, str):
            if value.isascii() and value.isdigit():
                return datetime.fromtimestamp(int(value), tz=timezone.utc)
            return dateparser.parse(value)
        return None


class NormalizerRegistry:
    """
    Maps field types to normalizers.

    Consulted once per field when a native document is built; field types
    without a registered normalizer keep their values unchanged.
    """

    def __init__(self, normalizers: Optional[Dict[str, Normalizer]] = None):
        self._normalizers: Dict[str, Normalizer] = {}
        for field_type, normalizer in (normalizers or {}).items():
            self.attach(field_type, normalizer)

    def attach(self, field_type: str, normalizer: Normalizer) -> None:
        """Register ``normalizer`` for ``field_type``, replacing any previous one."""
        if not isinstance(normalizer, Normalizer):
            raise TypeError(f"{type(normalizer).__name__} does not implement normalize()")
        self._normalizers[field_type] = normalizer
        logger.debug(f"Attached {type(normalizer).__name__} to field type '{field_type}'")

    def detach(self, field_type: str) -> None:
        self._normalizers.pop(field_type, None)

    def get(self, field_type: str) -> Optional[Normalizer]:
        return self._normalizers.get(field_type)

    def normalize(self, field_type: str, value: Any) -> Any:
        """Run the normalizer registered for ``field_type``, if any."""
        normalizer = self._normalizers.get(field_type)
        if normalizer is None:
            return value
        return normalizer.normalize(value)

    def __contains__(self, field_type: str) -> bool:
        return field_type in self._normalizers

    def __len__(self) -> int:
        return len(self._normalizers)


def default_registry() -> NormalizerRegistry:
    """Registry with the normalizers Solr needs out of the box (dates)."""
    return NormalizerRegistry({"date": DateNormalizer()})
