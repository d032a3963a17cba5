"""
Demonstration of the indexing session.

Indexes a small collection into the in-memory Solr client, showing batched
flushes, the single commit, boosts, date normalization and search.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from solrbridge.logger import get_logger, reconfigure_logger
from solrbridge.adapters.search import MockSolrClient, SolrUpdateRequest
from solrbridge.engine import SolrSearchEngine

reconfigure_logger(level='DEBUG')
logger = get_logger(__name__)


ARTICLES = [
    ("a-1", "Getting started with Solr", "2024-01-15 10:30:00", 1.5),
    ("a-2", "Schema design for search", 1705401000, None),
    ("a-3", "Relevancy tuning with boosts", "2024-01-17T08:00:00+01:00", 2.0),
    ("a-4", "Batching updates", "not a date", None),
    ("a-5", "Commit strategies", "2024-01-19", None),
]


def build_documents(engine):
    for article_id, title, published, boost in ARTICLES:
        doc = engine.new_document(boost=boost)
        doc.add_field(engine.new_field("id", article_id))
        doc.add_field(engine.new_field("title", title, name="title_t", boost=3.0))
        doc.add_field(engine.new_field("published", published, name="published_dt", field_type="date"))
        yield doc


def demo_batched_session(engine, client):
    """Index a collection with batch size 2."""
    logger.info("=" * 60)
    logger.info("DEMO 1: Batched indexing session")
    logger.info("=" * 60)

    stats = engine.index(build_documents(engine))

    logger.info(f"Documents: {stats.documents}, sends: {stats.sends}, commits: {stats.commits}")
    for i, commands in enumerate(client.requests, 1):
        logger.info(f"  Request {i}: {[kind for kind, _ in commands]}")
    for batch in client.sent_batches:
        logger.info(f"  Batch: {[doc['id'] for doc in batch]}")

    first = client.sent_batches[0][0]
    logger.info(f"Normalized date: {first['published_dt']}")


def demo_update_xml():
    """Show the XML message sent to /update."""
    logger.info("\n" + "=" * 60)
    logger.info("DEMO 2: Update message")
    logger.info("=" * 60)

    update = SolrUpdateRequest()
    doc = update.create_document()
    doc.set_field("id", "a-1")
    doc.set_field("title_t", "Getting started with Solr")
    doc.set_boost(1.5)
    doc.set_field_boost("title_t", 3.0)
    update.add_documents([doc])
    update.add_commit()

    logger.info(update.to_xml().decode("utf-8"))


def demo_search_and_delete(engine, client):
    """Search the committed documents, then wipe the core."""
    logger.info("\n" + "=" * 60)
    logger.info("DEMO 3: Search and delete")
    logger.info("=" * 60)

    result = engine.search("boosts")
    logger.info(f"'boosts' matched {result['response']['numFound']} documents")
    for doc in result["response"]["docs"]:
        logger.info(f"  {doc['id']}: {doc['title_t']}")

    engine.delete_all()
    logger.info(f"Documents after delete_all: {client.count_documents()}")


def main():
    client = MockSolrClient()
    engine = SolrSearchEngine(client, batch_size=2)
    logger.info(f"Engine: {engine!r}")
    logger.info(f"Backend version: {client.get_version()}")

    demo_batched_session(engine, client)
    demo_update_xml()
    demo_search_and_delete(engine, client)

    engine.close()
    logger.info("\nAll demos completed")


if __name__ == "__main__":
    main()
