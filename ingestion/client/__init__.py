"""
Outbound access to the upstream feed: SSRF guard, metadata discovery,
HTTP client with retry and the page stream.
"""

from ingestion.client.ssrf_guard import assert_allowed
from ingestion.client.metadata import Collection, CollectionRegistry, parse_metadata
from ingestion.client.http import FeedHttpClient
from ingestion.client.pagination import PageStream, fetch_all_pages

__all__ = [
    "assert_allowed",
    "Collection",
    "CollectionRegistry",
    "parse_metadata",
    "FeedHttpClient",
    "PageStream",
    "fetch_all_pages",
]
