"""
Search engine client interfaces.

The indexing core talks to the backend only through these protocols:
- ``EngineClient`` creates requests and executes them over the wire
- ``UpdateRequest`` queues add/commit/delete commands for one write
- ``NativeDocument`` is the engine-side document built from an IndexDocument
- ``SelectRequest`` carries a keyword query
- ``SearchEngine`` is the capability set offered to content pipelines
"""

from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from solrbridge.models.document import IndexDocument, IndexField


@runtime_checkable
class NativeDocument(Protocol):
    """Engine-specific write payload for one document."""

    def set_boost(self, boost: float) -> None:
        """Set the document level boost."""
        ...

    def set_field(self, name: str, value: Any) -> None:
        """Write ``value`` under destination ``name`` (last write wins)."""
        ...

    def set_field_boost(self, name: str, boost: float) -> None:
        """Set the boost of field ``name``."""
        ...


@runtime_checkable
class UpdateRequest(Protocol):
    """A write request queuing commands until it is executed."""

    def create_document(self) -> NativeDocument:
        """
        Create an empty native document bound to this request.

        Returns:
            New native document
        """
        ...

    def add_documents(self, documents: List[NativeDocument]) -> None:
        """Queue an add command for ``documents``."""
        ...

    def add_commit(self) -> None:
        """Queue a commit command."""
        ...

    def add_delete_query(self, query: str) -> None:
        """Queue a delete-by-query command."""
        ...


@runtime_checkable
class SelectRequest(Protocol):
    """A read request."""

    def set_query(self, query: str) -> None:
        ...


@runtime_checkable
class EngineClient(Protocol):
    """
    Protocol for engine clients.

    Implementations own the wire protocol; the indexing core only issues
    request-building calls and ``execute``.
    """

    @property
    def name(self) -> str:
        """
        Name of the backend.

        Returns:
            Backend name (e.g., 'solr', 'mock-solr')
        """
        ...

    def create_update(self) -> UpdateRequest:
        ...

    def create_select(self) -> SelectRequest:
        ...

    def execute(self, request: Any) -> Dict[str, Any]:
        """
        Send a request to the backend.

        The request's queued commands are consumed by the call, whether or not
        the send succeeds.

        Args:
            request: An UpdateRequest or SelectRequest created by this client

        Returns:
            The backend's decoded response, unmodified

        Raises:
            Exception: Transport and backend errors propagate unchanged
        """
        ...

    def is_available(self) -> bool:
        ...

    def get_version(self) -> str:
        ...


@runtime_checkable
class SearchEngine(Protocol):
    """
    Capability set a content pipeline uses to index into a search backend.

    The pipeline calls ``start()`` once, ``index_document()`` for every
    document, then ``end()``; ``index()`` runs that whole sequence.
    """

    @property
    def name(self) -> str:
        ...

    @property
    def batch_size(self) -> int:
        ...

    def new_document(self, boost: Optional[float] = None) -> IndexDocument:
        ...

    def new_field(
        self,
        field_id: str,
        value: Any,
        name: Optional[str] = None,
        field_type: str = "string",
        boost: Optional[float] = None
    ) -> IndexField:
        ...

    def create_index(self, name: str, options: Optional[Dict[str, Any]] = None) -> None:
        ...

    def start(self) -> None:
        ...

    def index_document(self, document: IndexDocument) -> None:
        ...

    def end(self) -> Any:
        ...

    def index(self, documents: Iterable[IndexDocument]) -> Any:
        ...

    def search(self, keywords: str) -> Any:
        """
        Run a keyword query.

        Returns:
            The backend's native result, unmodified
        """
        ...

    def delete_all(self) -> Any:
        """
        Delete every document and commit.

        Warning:
            This operation is irreversible!
        """
        ...
