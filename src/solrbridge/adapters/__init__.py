"""
Backend adapters for solrbridge.

Engine clients implement the ``EngineClient`` protocol so the indexing
session can run against a real Solr core or the in-memory mock.
"""

from solrbridge.adapters.search import (
    EngineClient,
    MockSolrClient,
    SearchEngine,
    SolrClient,
)

__all__ = [
    'EngineClient',
    'MockSolrClient',
    'SearchEngine',
    'SolrClient',
]
