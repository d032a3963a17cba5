"""Pending-document buffer and its flush policy."""

from typing import Generic, List, Tuple, TypeVar

T = TypeVar("T")


def validate_batch_size(batch_size) -> int:
    """
    Raises:
        ValueError: If ``batch_size`` is not a non-negative integer
    """
    if isinstance(batch_size, bool) or not isinstance(batch_size, int):
        raise ValueError(f"Batch size must be an integer, got {type(batch_size).__name__}")
    if batch_size < 0:
        raise ValueError(f"Batch size must be >= 0, got {batch_size}")
    return batch_size


class BatchBuffer(Generic[T]):
    """
    Holds native documents until they are sent.

    ``batch_size`` bounds how many documents are held before ``add`` reports
    that a flush is due; 0 disables mid-stream flushes entirely. The buffer
    counts additions since the last drain explicitly, so a batch size changed
    mid-session applies from the next ``add``.

    Example:
        >>> buffer = BatchBuffer(batch_size=2)
        >>> buffer.add("d1")
        False
        >>> buffer.add("d2")
        True
        >>> buffer.drain()
        ['d1', 'd2']
    """

    def __init__(self, batch_size: int = 0):
        self._batch_size = validate_batch_size(batch_size)
        self._pending: List[T] = []
        self._since_flush = 0

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @batch_size.setter
    def batch_size(self, value: int) -> None:
        self._batch_size = validate_batch_size(value)

    @property
    def pending(self) -> Tuple[T, ...]:
        return tuple(self._pending)

    def add(self, document: T) -> bool:
        """
        Append a document.

        Returns:
            True if the buffer reached ``batch_size`` and should be flushed
        """
        self._pending.append(document)
        self._since_flush += 1
        return self.is_full()

    def is_full(self) -> bool:
        return self._batch_size > 0 and self._since_flush >= self._batch_size

    def drain(self) -> List[T]:
        """Return pending documents in insertion order and empty the buffer."""
        documents, self._pending = self._pending, []
        self._since_flush = 0
        return documents

    def clear(self) -> None:
        self._pending = []
        self._since_flush = 0

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)
