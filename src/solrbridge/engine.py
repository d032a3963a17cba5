"""
Solr search engine facade.

``SolrSearchEngine`` is what a content pipeline talks to: it hands out
documents and fields, drives the indexing session, and passes searches and
delete-all requests straight to the engine client.

Example:
    >>> from solrbridge.adapters.search import SolrClient
    >>> engine = SolrSearchEngine(SolrClient("http://localhost:8983/solr/articles"), batch_size=100)
    >>> doc = engine.new_document(boost=1.2)
    >>> doc.add_field(engine.new_field("id", "a-1"))
    >>> doc.add_field(engine.new_field("published", "2024-01-15 10:30:00", field_type="date"))
    >>> engine.index([doc])
    >>> engine.search("solr")
"""

from typing import Any, Dict, Iterable, Optional

from solrbridge.adapters.search.base import EngineClient
from solrbridge.adapters.search.mock import MockSolrClient
from solrbridge.adapters.search.solr import MATCH_ALL_QUERY, SolrClient
from solrbridge.config import Config
from solrbridge.indexing.session import IndexingSession, SessionStats
from solrbridge.logger import get_logger
from solrbridge.models.document import FieldType, IndexDocument, IndexField
from solrbridge.normalizers import Normalizer, NormalizerRegistry, default_registry

logger = get_logger(__name__)


class SolrSearchEngine:
    """Indexes framework documents into Solr and runs keyword searches."""

    def __init__(
        self,
        client: EngineClient,
        batch_size: int = 0,
        normalizers: Optional[NormalizerRegistry] = None
    ):
        """
        Args:
            client: Engine client (SolrClient or MockSolrClient)
            batch_size: Documents per no-commit flush, 0 = send everything at end
            normalizers: Field normalizers; defaults to the date normalizer

        Raises:
            ValueError: If ``batch_size`` is not a non-negative integer
        """
        self._client = client
        self._normalizers = normalizers if normalizers is not None else default_registry()
        self._session = IndexingSession(client, batch_size=batch_size, normalizers=self._normalizers)

    @classmethod
    def from_config(cls, config: Config) -> "SolrSearchEngine":
        """Build an engine and its client from loaded configuration."""
        solr = config.solr
        if solr.engine == "mock":
            client = MockSolrClient()
        else:
            client = SolrClient(solr.endpoint.base_url, timeout_seconds=solr.timeout_seconds)
        logger.info(f"Using {client.name} engine (batch_size={solr.batch_size})")
        return cls(client, batch_size=solr.batch_size)

    @property
    def name(self) -> str:
        return "solr"

    @property
    def client(self) -> EngineClient:
        return self._client

    @property
    def session(self) -> IndexingSession:
        return self._session

    @property
    def batch_size(self) -> int:
        return self._session.batch_size

    @batch_size.setter
    def batch_size(self, value: int) -> None:
        self._session.batch_size = value

    def set_batch_size(self, batch_size: int) -> "SolrSearchEngine":
        self.batch_size = batch_size
        return self

    def attach_normalizer(self, field_type: str, normalizer: Normalizer) -> "SolrSearchEngine":
        self._normalizers.attach(field_type, normalizer)
        return self

    def new_document(self, boost: Optional[float] = None) -> IndexDocument:
        return IndexDocument(boost=boost)

    def new_field(
        self,
        field_id: str,
        value: Any,
        name: Optional[str] = None,
        field_type: str = FieldType.STRING.value,
        boost: Optional[float] = None
    ) -> IndexField:
        return IndexField(field_id=field_id, value=value, name=name, field_type=field_type, boost=boost)

    def create_index(self, name: str, options: Optional[Dict[str, Any]] = None) -> None:
        """Solr cores cannot be created from the client application; no-op."""
        logger.debug(f"create_index('{name}') ignored: Solr cores are provisioned server-side")

    def start(self) -> None:
        self._session.start()

    def index_document(self, document: IndexDocument) -> None:
        self._session.index(document)

    def end(self) -> Any:
        return self._session.end()

    def index(self, documents: Iterable[IndexDocument]) -> SessionStats:
        """
        Run one complete session over ``documents``.

        If iterating or indexing fails, the session is aborted without a
        commit and the error propagates. Documents already flushed stay sent.

        Returns:
            Counters of the finished session
        """
        with logger.timer("index_collection", slow_threshold_ms=60000):
            with self._session as session:
                for document in documents:
                    session.index(document)
        return self._session.stats

    def search(self, keywords: str) -> Any:
        select = self._client.create_select()
        select.set_query(keywords)
        return self._client.execute(select)

    def delete_all(self) -> Any:
        """
        Delete every document in the core and commit.

        Uses its own update request, independent of any open session.

        Warning:
            This operation is irreversible!
        """
        update = self._client.create_update()
        update.add_delete_query(MATCH_ALL_QUERY)
        update.add_commit()
        logger.warning(f"Deleting all documents from {self._client.name}")
        return self._client.execute(update)

    def close(self) -> None:
        if self._session.is_open:
            self._session.abort()
        close = getattr(self._client, "close", None)
        if close is not None:
            close()

    def __repr__(self) -> str:
        return f"SolrSearchEngine(client={self._client.name}, session={self._session!r})"
