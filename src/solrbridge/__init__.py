"""
solrbridge - Batched Solr indexing for content pipelines

Converts framework-neutral documents into Solr update requests, buffers them
in bounded batches and commits once per indexing session.
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Version info
VERSION = __version__
