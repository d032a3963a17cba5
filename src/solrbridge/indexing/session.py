"""
Indexing session lifecycle.

A session spans one indexing run against the backend:

    IDLE --start()--> OPEN --index()*--> OPEN --end()--> IDLE

While open, the session owns a single update request. Documents are built
into native documents, buffered, and sent without commit whenever the buffer
reaches the batch size. ``end()`` sends whatever is left together with the
one commit of the run.

Failures are not retried. When a send fails the exception propagates, the
buffered documents are kept and the session stays open, so calling ``end()``
again resends them. The next ``index()`` after a failed flush retries that
batch before buffering the new document, so no flush exceeds the batch size.

Usage:
    session = IndexingSession(client, batch_size=100)
    session.start()
    for document in documents:
        session.index(document)
    session.end()

    # or
    with IndexingSession(client, batch_size=100) as session:
        for document in documents:
            session.index(document)
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from solrbridge.adapters.search.base import EngineClient, NativeDocument, UpdateRequest
from solrbridge.indexing.batch import BatchBuffer
from solrbridge.indexing.builder import build_native_document
from solrbridge.logger import get_logger
from solrbridge.models.document import IndexDocument
from solrbridge.normalizers import NormalizerRegistry, default_registry

logger = get_logger(__name__)


class IndexingError(Exception):
    """Base error of the indexing core."""
    pass


class SessionStateError(IndexingError):
    """A lifecycle operation was called in the wrong session state."""
    pass


class SessionState(str, Enum):
    """Indexing session states."""

    IDLE = "idle"
    OPEN = "open"


@dataclass
class SessionStats:
    """Counters for the current (or last) session."""

    documents: int = 0
    flushes: int = 0
    sends: int = 0
    commits: int = 0
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at is None or self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()


class IndexingSession:
    """
    Batches documents into update requests and commits once per run.

    Not thread-safe: a session belongs to one caller at a time.
    """

    def __init__(
        self,
        client: EngineClient,
        batch_size: int = 0,
        normalizers: Optional[NormalizerRegistry] = None
    ):
        """
        Args:
            client: Engine client executing the requests
            batch_size: Documents buffered before a no-commit flush (0 = flush only at end)
            normalizers: Field normalizers; defaults to the date normalizer

        Raises:
            ValueError: If ``batch_size`` is not a non-negative integer
        """
        self._client = client
        self._buffer: BatchBuffer[NativeDocument] = BatchBuffer(batch_size)
        self._normalizers = normalizers if normalizers is not None else default_registry()
        self._update: Optional[UpdateRequest] = None
        self._state = SessionState.IDLE
        self._runs = 0
        self.stats = SessionStats()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SessionState.OPEN

    @property
    def batch_size(self) -> int:
        return self._buffer.batch_size

    @batch_size.setter
    def batch_size(self, value: int) -> None:
        self._buffer.batch_size = value

    @property
    def pending_count(self) -> int:
        return len(self._buffer)

    @property
    def normalizers(self) -> NormalizerRegistry:
        return self._normalizers

    def _require_open(self, operation: str) -> UpdateRequest:
        if self._state is not SessionState.OPEN or self._update is None:
            raise SessionStateError(f"Cannot {operation}: no indexing session is open")
        return self._update

    def start(self) -> None:
        """
        Open the session with a fresh update request.

        Raises:
            SessionStateError: If the session is already open
        """
        if self._state is SessionState.OPEN:
            raise SessionStateError("Cannot start: indexing session is already open")

        self._update = self._client.create_update()
        self._buffer.clear()
        self._runs += 1
        self.stats = SessionStats(started_at=datetime.now())
        self._state = SessionState.OPEN
        logger.info(
            f"Indexing session #{self._runs} started on {self._client.name} "
            f"(batch_size={self.batch_size})"
        )

    def index(self, document: IndexDocument) -> None:
        """
        Build and buffer one document, flushing when the batch is full.

        Raises:
            SessionStateError: If the session is not open
        """
        update = self._require_open("index document")

        # Still full after a failed flush or a lowered batch size
        if self._buffer.is_full():
            self._flush(update)

        native = build_native_document(document, update.create_document(), self._normalizers)
        self.stats.documents += 1

        if self._buffer.add(native):
            self._flush(update)

    def flush(self) -> None:
        """
        Send pending documents without committing; no-op when nothing is pending.

        Raises:
            SessionStateError: If the session is not open
        """
        update = self._require_open("flush")
        if self._buffer:
            self._flush(update)

    def _flush(self, update: UpdateRequest) -> None:
        documents = list(self._buffer.pending)
        update.add_documents(documents)

        with logger.context(session=self._runs, batch=self.stats.flushes + 1):
            logger.debug(f"Flushing {len(documents)} documents without commit")
            self._client.execute(update)

        self._buffer.drain()
        self.stats.flushes += 1
        self.stats.sends += 1

    def end(self) -> Any:
        """
        Send the remaining documents with a commit and close the session.

        A commit is sent even when nothing is pending.

        Returns:
            The client's response to the final update

        Raises:
            SessionStateError: If the session is not open
        """
        update = self._require_open("end session")

        remaining = len(self._buffer)
        if remaining:
            update.add_documents(list(self._buffer.pending))
        update.add_commit()

        with logger.context(session=self._runs):
            logger.debug(f"Sending final {remaining} documents with commit")
            result = self._client.execute(update)

        self._buffer.drain()
        self.stats.sends += 1
        self.stats.commits += 1
        self.stats.ended_at = datetime.now()
        self._update = None
        self._state = SessionState.IDLE

        logger.info(
            f"Indexing session #{self._runs} committed: {self.stats.documents} documents, "
            f"{self.stats.sends} sends"
        )
        return result

    def abort(self) -> int:
        """
        Close the session without sending anything.

        Returns:
            Number of buffered documents discarded

        Raises:
            SessionStateError: If the session is not open
        """
        self._require_open("abort session")

        discarded = len(self._buffer.drain())
        self._update = None
        self._state = SessionState.IDLE
        self.stats.ended_at = datetime.now()
        logger.warning(f"Indexing session #{self._runs} aborted, {discarded} buffered documents discarded")
        return discarded

    def __enter__(self) -> "IndexingSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.end()
        elif self.is_open:
            self.abort()
        return False

    def __repr__(self) -> str:
        return (
            f"IndexingSession(state={self._state.value}, "
            f"batch_size={self.batch_size}, pending={len(self._buffer)})"
        )
