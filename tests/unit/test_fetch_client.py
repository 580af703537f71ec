"""
Unit tests for the HTTP client retry policy and the page stream
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from core.exceptions import DisallowedHost, FatalFetchError, MetadataError, TransientFetchError
from ingestion.client.http import FeedHttpClient
from ingestion.client.metadata import Collection
from ingestion.client.pagination import PageStream, QueryOptions, fetch_all_pages, next_link

BASE = "https://knesset.gov.il/OdataV4/ParliamentInfo"
BILLS = f"{BASE}/KNS_Bill"


def make_client(settings, handler) -> FeedHttpClient:
    return FeedHttpClient(settings, transport=httpx.MockTransport(handler))


def records(start, count):
    return [{"Id": i} for i in range(start, start + count)]


class TestRetryPolicy:
    """Backoff and retry classification"""
    
    def test_backoff_delay_doubles_and_caps(self, settings):
        settings = settings.model_copy(update={
            "RETRY_BASE_DELAY": 1.0, "RETRY_BACKOFF_FACTOR": 2.0, "RETRY_MAX_DELAY": 5.0,
        })
        client = FeedHttpClient(settings)
        
        assert [client.backoff_delay(a) for a in range(4)] == [1.0, 2.0, 4.0, 5.0]
    
    @pytest.mark.asyncio
    async def test_429_then_success_is_retried(self, settings):
        responses = [httpx.Response(429), httpx.Response(503), httpx.Response(200, json={"value": []})]
        calls = []
        
        def handler(request):
            calls.append(request)
            return responses.pop(0)
        
        client = make_client(settings, handler)
        body = await client.get_json(BILLS)
        await client.aclose()
        
        assert body == {"value": []}
        assert len(calls) == 3
    
    @pytest.mark.asyncio
    async def test_retries_exhausted_raise_transient_error(self, settings):
        calls = []
        
        def handler(request):
            calls.append(request)
            return httpx.Response(500)
        
        client = make_client(settings, handler)
        with pytest.raises(TransientFetchError) as exc_info:
            await client.get_json(BILLS)
        await client.aclose()
        
        assert len(calls) == settings.RETRY_MAX_ATTEMPTS + 1
        assert exc_info.value.status_code == 500
    
    @pytest.mark.asyncio
    async def test_client_error_is_fatal_and_not_retried(self, settings):
        calls = []
        
        def handler(request):
            calls.append(request)
            return httpx.Response(400, text="bad filter")
        
        client = make_client(settings, handler)
        with pytest.raises(FatalFetchError) as exc_info:
            await client.get_json(BILLS)
        await client.aclose()
        
        assert len(calls) == 1
        assert exc_info.value.status_code == 400
    
    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self, settings):
        attempts = []
        
        def handler(request):
            attempts.append(request)
            if len(attempts) < 2:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"value": [{"Id": 1}]})
        
        client = make_client(settings, handler)
        body = await client.get_json(BILLS)
        await client.aclose()
        
        assert body["value"] == [{"Id": 1}]
        assert len(attempts) == 2
    
    @pytest.mark.asyncio
    async def test_backoff_sleeps_between_attempts(self, settings):
        responses = [httpx.Response(502), httpx.Response(200, json={})]
        client = make_client(settings, lambda request: responses.pop(0))
        
        with patch("ingestion.client.http.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            await client.get_json(BILLS)
        await client.aclose()
        
        mock_sleep.assert_awaited_once_with(client.backoff_delay(0))
    
    @pytest.mark.asyncio
    async def test_disallowed_host_blocked_before_request(self, settings):
        calls = []
        client = make_client(settings, lambda request: calls.append(request) or httpx.Response(200))
        
        with pytest.raises(DisallowedHost):
            await client.get_json("https://evil.example/KNS_Bill")
        await client.aclose()
        
        assert calls == []
    
    @pytest.mark.asyncio
    async def test_redirects_are_not_followed(self, settings):
        def handler(request):
            return httpx.Response(302, headers={"Location": "http://169.254.169.254/latest"})
        
        client = make_client(settings, handler)
        with pytest.raises(FatalFetchError):
            await client.get_json(BILLS)
        await client.aclose()


class TestSingleRecordAndMetadata:
    
    @pytest.mark.asyncio
    async def test_fetch_one_returns_record(self, settings):
        seen = []
        
        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"Id": 42, "Name": "x"})
        
        client = make_client(settings, handler)
        record = await client.fetch_one(BILLS, 42)
        await client.aclose()
        
        assert record == {"Id": 42, "Name": "x"}
        assert seen == [f"{BILLS}(42)"]
    
    @pytest.mark.asyncio
    async def test_fetch_one_not_found_returns_none(self, settings):
        client = make_client(settings, lambda request: httpx.Response(404))
        
        assert await client.fetch_one(BILLS, 42) is None
        await client.aclose()
    
    @pytest.mark.asyncio
    async def test_empty_metadata_document_raises(self, settings):
        client = make_client(settings, lambda request: httpx.Response(200, text="  "))
        
        with pytest.raises(MetadataError):
            await client.fetch_metadata()
        await client.aclose()


class TestPageStream:
    """Continuation links, offset paging and termination"""
    
    @pytest.mark.asyncio
    async def test_three_pages_by_offset_yield_all_records_in_order(self, settings):
        source = records(0, 5)
        requested_skips = []
        
        def handler(request):
            skip = int(request.url.params["$skip"])
            top = int(request.url.params["$top"])
            requested_skips.append(skip)
            return httpx.Response(200, json={"value": source[skip:skip + top]})
        
        client = make_client(settings, handler)
        stream = PageStream(client, BILLS, page_size=2)
        pages = [page async for page in stream]
        await client.aclose()
        
        assert [len(p) for p in pages] == [2, 2, 1]
        assert [r for p in pages for r in p] == source
        assert requested_skips == [0, 2, 4]
        assert stream.exhausted
    
    @pytest.mark.asyncio
    async def test_full_last_page_ends_on_empty_page(self, settings):
        source = records(0, 4)
        
        def handler(request):
            skip = int(request.url.params["$skip"])
            return httpx.Response(200, json={"value": source[skip:skip + 2]})
        
        client = make_client(settings, handler)
        pages = [page async for page in PageStream(client, BILLS, page_size=2)]
        await client.aclose()
        
        assert [r for p in pages for r in p] == source
    
    @pytest.mark.asyncio
    async def test_follows_absolute_and_relative_next_links(self, settings):
        urls = []
        
        def handler(request):
            urls.append(str(request.url))
            if "token=abs" in str(request.url):
                return httpx.Response(200, json={
                    "value": records(2, 2),
                    "@odata.nextLink": "KNS_Bill?token=rel",
                })
            if "token=rel" in str(request.url):
                return httpx.Response(200, json={"value": records(4, 1)})
            return httpx.Response(200, json={
                "value": records(0, 2),
                "@odata.nextLink": f"{BILLS}?token=abs",
            })
        
        client = make_client(settings, handler)
        pages = [page async for page in PageStream(client, BILLS, page_size=2)]
        await client.aclose()
        
        assert [r["Id"] for p in pages for r in p] == [0, 1, 2, 3, 4]
        assert urls[1] == f"{BILLS}?token=abs"
        assert urls[2] == f"{BILLS}?token=rel"
    
    @pytest.mark.asyncio
    async def test_follows_legacy_next_link_key(self, settings):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            if "token=v3" in str(request.url):
                return httpx.Response(200, json={"value": records(2, 1)})
            return httpx.Response(200, json={
                "value": records(0, 2),
                "odata.nextLink": f"{BILLS}?token=v3",
            })

        client = make_client(settings, handler)
        pages = [page async for page in PageStream(client, BILLS, page_size=2)]
        await client.aclose()

        assert [r["Id"] for p in pages for r in p] == [0, 1, 2]
        assert urls[1] == f"{BILLS}?token=v3"
        assert len(urls) == 2

    @pytest.mark.parametrize("body,expected", [
        ({"value": [], "@odata.nextLink": "a"}, "a"),
        ({"value": [], "odata.nextLink": "b"}, "b"),
        ({"value": [], "@odata.nextLink": "a", "odata.nextLink": "b"}, "a"),
        ({"value": [], "@odata.nextLink": ""}, None),
        ({"value": []}, None),
        ([], None),
    ])
    def test_next_link(self, body, expected):
        assert next_link(body) == expected

    @pytest.mark.asyncio
    async def test_query_options_are_sent(self, settings):
        params = []
        
        def handler(request):
            params.append(dict(request.url.params))
            return httpx.Response(200, json={"value": []})
        
        client = make_client(settings, handler)
        query = QueryOptions(filter="PositionID eq 39", orderby="Id", select="Id,Name", count=True)
        pages = [page async for page in PageStream(client, BILLS, query=query, page_size=10)]
        await client.aclose()
        
        assert pages == []
        assert params[0]["$filter"] == "PositionID eq 39"
        assert params[0]["$orderby"] == "Id"
        assert params[0]["$select"] == "Id,Name"
        assert params[0]["$count"] == "true"
        assert params[0]["$top"] == "10"
        assert params[0]["$skip"] == "0"
    
    @pytest.mark.asyncio
    async def test_polite_pause_between_pages_only(self, settings):
        source = records(0, 3)
        
        def handler(request):
            skip = int(request.url.params["$skip"])
            return httpx.Response(200, json={"value": source[skip:skip + 1]})
        
        client = make_client(settings, handler)
        client.polite_pause = AsyncMock()
        pages = [page async for page in PageStream(client, BILLS, page_size=1)]
        await client.aclose()
        
        # Three data pages plus the empty page that ends the stream
        assert len(pages) == 3
        assert client.polite_pause.await_count == 3
    
    @pytest.mark.asyncio
    async def test_resumes_from_saved_cursor(self, settings):
        source = records(0, 6)
        skips = []
        
        def handler(request):
            skip = int(request.url.params["$skip"])
            skips.append(skip)
            return httpx.Response(200, json={"value": source[skip:skip + 2]})
        
        client = make_client(settings, handler)
        pages = [page async for page in PageStream(client, BILLS, page_size=2, skip=4)]
        await client.aclose()
        
        assert [r["Id"] for p in pages for r in p] == [4, 5]
        assert skips[0] == 4
    
    @pytest.mark.asyncio
    async def test_fatal_page_error_propagates_with_cursor_kept(self, settings):
        def handler(request):
            if int(request.url.params["$skip"]) == 0:
                return httpx.Response(200, json={"value": records(0, 2)})
            return httpx.Response(403)
        
        client = make_client(settings, handler)
        stream = PageStream(client, BILLS, page_size=2)
        first = await stream.next_page()
        with pytest.raises(FatalFetchError):
            await stream.next_page()
        await client.aclose()
        
        assert len(first) == 2
        assert stream.skip == 2
    
    @pytest.mark.asyncio
    async def test_fetch_all_pages_uses_collection_url(self, settings):
        collection = Collection(name="KNS_Bill", url=BILLS)
        client = make_client(settings, lambda request: httpx.Response(200, json={"value": records(0, 1)}))
        
        pages = [page async for page in fetch_all_pages(client, collection, page_size=5)]
        await client.aclose()
        
        assert pages == [[{"Id": 0}]]
