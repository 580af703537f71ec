"""
HTTP client for the upstream feed with SSRF gating and retry.

Retry policy:
- HTTP 429, 5xx, timeouts and connection errors are retried with
  exponential backoff: min(base * factor ** attempt, max_delay)
- Any other non-2xx status is fatal for the request and never retried
- Redirects are not followed, so a 3xx cannot bypass the allow-list
"""

import httpx
import asyncio
from typing import Any, Dict, Optional
from urllib.parse import quote
import logging

from core.config import Settings
from core.exceptions import FatalFetchError, MetadataError, TransientFetchError
from ingestion.client.metadata import CollectionRegistry, parse_metadata
from ingestion.client.ssrf_guard import assert_allowed

logger = logging.getLogger(__name__)

USER_AGENT = "KnessetVote-ETL/1.0"

JSON_HEADERS = {
    "Accept": "application/json",
    "OData-MaxVersion": "4.0",
    "OData-Version": "4.0",
    "User-Agent": USER_AGENT,
}

XML_HEADERS = {
    "Accept": "application/xml, text/xml",
    "User-Agent": USER_AGENT,
}


def is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class FeedHttpClient:
    """
    Thin wrapper over httpx.AsyncClient owned by one PipelineContext.

    Attributes:
        settings: Retry, timeout and allow-list configuration
        max_retries: Retries after the first attempt
    """
    
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.max_retries = settings.RETRY_MAX_ATTEMPTS
        self.base_delay = settings.RETRY_BASE_DELAY
        self.backoff_factor = settings.RETRY_BACKOFF_FACTOR
        self.max_delay = settings.RETRY_MAX_DELAY
        self.page_delay = settings.REQUEST_DELAY_SECONDS
        
        self._client = httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT,
            follow_redirects=False,
            transport=transport,
        )
    
    async def aclose(self):
        await self._client.aclose()
    
    def check_url(self, url: str) -> str:
        """Run the SSRF gate for one URL."""
        return assert_allowed(
            url,
            self.settings.allowed_domains,
            https_only=self.settings.https_only,
            resolve_dns=self.settings.SSRF_RESOLVE_DNS,
        )
    
    def backoff_delay(self, attempt: int) -> float:
        return min(self.base_delay * (self.backoff_factor ** attempt), self.max_delay)
    
    async def polite_pause(self):
        """Fixed delay between consecutive page requests."""
        if self.page_delay > 0:
            await asyncio.sleep(self.page_delay)
    
    async def _request_with_retry(
        self,
        url: str,
        headers: Dict[str, str],
        allow_not_found: bool = False,
    ) -> Optional[httpx.Response]:
        """
        GET a URL with the retry policy.

        Returns:
            The 2xx response, or None for a 404 when allow_not_found is set

        Raises:
            DisallowedHost / InvalidUrl: URL rejected before any request
            TransientFetchError: Retryable failure after all retries
            FatalFetchError: Non-retryable HTTP status
        """
        self.check_url(url)
        
        attempts = self.max_retries + 1
        
        for attempt in range(attempts):
            try:
                logger.debug(f"Request attempt {attempt + 1}/{attempts} to {url}")
                response = await self._client.get(url, headers=headers)
            
            except (httpx.TimeoutException, httpx.TransportError) as e:
                if attempt < attempts - 1:
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        f"{type(e).__name__} for {url}. "
                        f"Retrying in {delay}s (attempt {attempt + 1}/{attempts})"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise TransientFetchError(
                    f"Request failed after {self.max_retries} retries",
                    context={"url": url},
                    original_exception=e,
                    retry_count=attempt
                )
            
            if response.is_success:
                return response
            
            if response.status_code == 404 and allow_not_found:
                return None
            
            if is_retryable_status(response.status_code):
                if attempt < attempts - 1:
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        f"HTTP {response.status_code} for {url}. "
                        f"Retrying in {delay}s (attempt {attempt + 1}/{attempts})"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise TransientFetchError(
                    f"HTTP {response.status_code} after {self.max_retries} retries",
                    context={"url": url},
                    status_code=response.status_code,
                    retry_count=attempt
                )
            
            raise FatalFetchError(
                f"HTTP {response.status_code}",
                context={"url": url, "response_body": response.text[:500]},
                status_code=response.status_code
            )
        
        # Loop always returns or raises
        raise TransientFetchError("Max retries exceeded", context={"url": url})
    
    async def get_json(self, url: str) -> Dict[str, Any]:
        response = await self._request_with_retry(url, JSON_HEADERS)
        try:
            return response.json()
        except ValueError as e:
            raise FatalFetchError(
                "Response body is not JSON",
                context={"url": url},
                original_exception=e,
                status_code=response.status_code
            )
    
    async def fetch_metadata(self, metadata_url: Optional[str] = None) -> CollectionRegistry:
        """Fetch and parse the $metadata document into a registry."""
        metadata_url = metadata_url or self.settings.metadata_url
        logger.info(f"Fetching metadata from {metadata_url}")
        
        response = await self._request_with_retry(metadata_url, XML_HEADERS)
        text = response.text
        if not text.strip():
            raise MetadataError("Empty metadata document", context={"url": metadata_url})
        
        base_url = metadata_url.replace("/$metadata", "")
        return parse_metadata(text, base_url)
    
    async def fetch_one(self, collection_url: str, record_id: Any) -> Optional[Dict[str, Any]]:
        """
        Fetch a single record by key.

        Returns:
            The record, or None when the feed answers 404
        """
        key = quote(str(record_id), safe="")
        url = f"{collection_url.rstrip('/')}({key})"
        response = await self._request_with_retry(url, JSON_HEADERS, allow_not_found=True)
        if response is None:
            return None
        return response.json()
