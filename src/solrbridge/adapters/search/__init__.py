"""Search engine client module."""

from solrbridge.adapters.search.base import (
    EngineClient,
    NativeDocument,
    SearchEngine,
    SelectRequest,
    UpdateRequest,
)
from solrbridge.adapters.search.solr import (
    MATCH_ALL_QUERY,
    SolrClient,
    SolrDocument,
    SolrSelectRequest,
    SolrUpdateRequest,
)
from solrbridge.adapters.search.mock import MockSolrClient

__all__ = [
    'EngineClient',
    'NativeDocument',
    'SearchEngine',
    'SelectRequest',
    'UpdateRequest',
    'MATCH_ALL_QUERY',
    'SolrClient',
    'SolrDocument',
    'SolrSelectRequest',
    'SolrUpdateRequest',
    'MockSolrClient',
]
