"""
Pull-based page stream over one feed collection.

A PageStream walks a collection one page at a time:

1. The first URL is built from $top/$skip plus the query options
2. A server continuation link (@odata.nextLink, or odata.nextLink from
   older JSON formats) is followed verbatim,
   absolute or relative to the service root
3. Without a link, a full page advances $skip by the page size
4. A short or empty page ends the stream

Only one page is in flight at a time, with a polite delay between
requests. The cursor (next_url, skip) is exposed so a caller can
checkpoint it and build a new stream that resumes from the same place.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode, urljoin
import logging

from ingestion.client.http import FeedHttpClient
from ingestion.client.metadata import Collection

logger = logging.getLogger(__name__)

NEXT_LINK_KEYS = ("@odata.nextLink", "odata.nextLink")


def next_link(body: Any) -> Optional[str]:
    """Continuation link of a page envelope, if the server sent one."""
    if not isinstance(body, dict):
        return None
    for key in NEXT_LINK_KEYS:
        if body.get(key):
            return body[key]
    return None


@dataclass
class QueryOptions:
    """Optional OData system query options"""
    filter: Optional[str] = None
    orderby: Optional[str] = None
    expand: Optional[str] = None
    select: Optional[str] = None
    count: bool = False
    
    def as_params(self) -> Dict[str, str]:
        params = {}
        if self.filter:
            params["$filter"] = self.filter
        if self.orderby:
            params["$orderby"] = self.orderby
        if self.expand:
            params["$expand"] = self.expand
        if self.select:
            params["$select"] = self.select
        if self.count:
            params["$count"] = "true"
        return params


class PageStream:
    """
    Lazy, finite sequence of record pages.

    Not restartable mid-stream: a fresh PageStream starts from page one
    unless it is given a saved cursor.

    Usage:
        stream = PageStream(http, collection.url, page_size=50)
        async for page in stream:
            ...
    """
    
    def __init__(
        self,
        http: FeedHttpClient,
        collection_url: str,
        query: Optional[QueryOptions] = None,
        page_size: Optional[int] = None,
        next_url: Optional[str] = None,
        skip: int = 0,
    ):
        self.http = http
        self.collection_url = collection_url.rstrip("/")
        self.service_root = self.collection_url.rsplit("/", 1)[0] + "/"
        self.query = query or QueryOptions()
        self.page_size = page_size or http.settings.PAGE_SIZE
        
        # Cursor
        self.next_url = next_url
        self.skip = skip
        
        self.pages_fetched = 0
        self.records_fetched = 0
        self.exhausted = False
    
    def build_url(self, skip: int) -> str:
        params: Dict[str, Any] = {"$top": self.page_size, "$skip": skip}
        params.update(self.query.as_params())
        return f"{self.collection_url}?{urlencode(params, quote_via=quote, safe='$')}"
    
    def resolve_link(self, link: str) -> str:
        return urljoin(self.service_root, link)
    
    async def next_page(self) -> Optional[List[Dict[str, Any]]]:
        """
        Fetch the next page.

        Returns:
            A non-empty list of records, or None when the stream is done

        Raises:
            FetchError subclasses from the HTTP client; the cursor is left
            pointing at the page that failed
        """
        if self.exhausted:
            return None
        
        if self.pages_fetched > 0:
            await self.http.polite_pause()
        
        url = self.next_url or self.build_url(self.skip)
        body = await self.http.get_json(url)
        
        records = body.get("value") if isinstance(body, dict) else body
        records = records or []
        self.pages_fetched += 1
        self.records_fetched += len(records)
        
        logger.debug(
            f"Page {self.pages_fetched} of {self.collection_url}: "
            f"{len(records)} records (skip={self.skip})"
        )
        
        if not records:
            self.exhausted = True
            self.next_url = None
            return None
        
        self.skip += len(records)
        link = next_link(body)
        
        if link:
            self.next_url = self.resolve_link(link)
        elif len(records) >= self.page_size:
            self.next_url = None
        else:
            self.exhausted = True
            self.next_url = None
        
        return records
    
    def __aiter__(self):
        return self
    
    async def __anext__(self) -> List[Dict[str, Any]]:
        page = await self.next_page()
        if page is None:
            raise StopAsyncIteration
        return page


def fetch_all_pages(
    http: FeedHttpClient,
    collection: Collection,
    query: Optional[QueryOptions] = None,
    page_size: Optional[int] = None,
) -> PageStream:
    """Start a fresh stream over a discovered collection."""
    return PageStream(http, collection.url, query=query, page_size=page_size)
