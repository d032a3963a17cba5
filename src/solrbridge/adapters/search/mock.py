"""In-memory Solr client for testing."""

from typing import Any, Dict, List, Optional

from solrbridge.adapters.search.solr import (
    MATCH_ALL_QUERY,
    Command,
    SolrSelectRequest,
    SolrUpdateRequest,
)
from solrbridge.logger import get_logger

logger = get_logger(__name__)


class MockSolrClient:
    """
    Engine client that keeps an in-memory index.

    Useful for testing without a running Solr server. Every executed update is
    recorded in ``requests`` so tests can check exactly what was sent. Added
    documents stay invisible to ``select`` until a commit, like in Solr.
    """

    def __init__(self, unique_key: str = "id"):
        self.unique_key = unique_key
        self.requests: List[List[Command]] = []
        self.selects: List[str] = []
        self._uncommitted: Dict[str, Dict[str, Any]] = {}
        self._committed: Dict[str, Dict[str, Any]] = {}
        self._auto_id = 0
        self._failure: Optional[Exception] = None
        logger.debug("Initialized MockSolrClient with in-memory storage")

    @property
    def name(self) -> str:
        return "mock-solr"

    def create_update(self) -> SolrUpdateRequest:
        return SolrUpdateRequest()

    def create_select(self) -> SolrSelectRequest:
        return SolrSelectRequest()

    def fail_next(self, error: Exception) -> None:
        """Make the next ``execute`` call raise ``error``."""
        self._failure = error

    def execute(self, request: Any) -> Dict[str, Any]:
        if isinstance(request, SolrUpdateRequest):
            commands = request.take_commands()
            if not commands:
                raise ValueError("Update request has no commands to send")
            self._raise_pending_failure()
            self.requests.append(commands)
            for kind, payload in commands:
                self._apply(kind, payload)
            return {"responseHeader": {"status": 0, "QTime": 0}}

        if isinstance(request, SolrSelectRequest):
            self._raise_pending_failure()
            self.selects.append(request.query)
            docs = [doc for doc in self._committed.values() if self._matches(doc, request.query)]
            logger.debug(f"Mock select '{request.query}' found {len(docs)} documents")
            return {
                "responseHeader": {"status": 0, "QTime": 0, "params": request.params()},
                "response": {"numFound": len(docs), "start": 0, "docs": docs},
            }

        raise TypeError(f"Unsupported request type: {type(request).__name__}")

    def _raise_pending_failure(self) -> None:
        if self._failure is not None:
            error, self._failure = self._failure, None
            raise error

    def _apply(self, kind: str, payload: Any) -> None:
        if kind == "add":
            for document in payload:
                data = document.to_dict()
                key = data.get(self.unique_key)
                if key is None:
                    self._auto_id += 1
                    key = f"_auto_{self._auto_id}"
                self._uncommitted[str(key)] = data
            logger.debug(f"Mock added {len(payload)} documents (uncommitted)")
        elif kind == "commit":
            self._committed.update(self._uncommitted)
            self._uncommitted.clear()
            logger.debug(f"Mock commit, {len(self._committed)} documents visible")
        elif kind == "delete":
            for store in (self._uncommitted, self._committed):
                for key in [k for k, doc in store.items() if self._matches(doc, payload)]:
                    del store[key]
        else:
            raise ValueError(f"Unknown update command: {kind}")

    def _matches(self, doc: Dict[str, Any], query: str) -> bool:
        if query == MATCH_ALL_QUERY:
            return True
        if ":" in query:
            field_name, _, expected = query.partition(":")
            value = doc.get(field_name)
            values = value if isinstance(value, (list, tuple)) else [value]
            return any(str(v) == expected for v in values if v is not None)
        needle = query.lower()
        return any(needle in str(v).lower() for v in doc.values() if v is not None)

    @property
    def sent_batches(self) -> List[List[Dict[str, Any]]]:
        """Documents of every add command, one list per add, in send order."""
        return [
            [document.to_dict() for document in payload]
            for commands in self.requests
            for kind, payload in commands
            if kind == "add"
        ]

    @property
    def commit_count(self) -> int:
        return sum(1 for commands in self.requests for kind, _ in commands if kind == "commit")

    def count_documents(self, committed: bool = True) -> int:
        return len(self._committed if committed else self._uncommitted)

    def is_available(self) -> bool:
        """Always available."""
        return True

    def get_version(self) -> str:
        return "9.0.0-mock"

    def close(self) -> None:
        pass
