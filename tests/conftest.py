"""
Pytest configuration and fixtures
"""

from typing import Any, AsyncGenerator, Callable, Dict, List, Optional, Union

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from core.context import PipelineContext
from core.database import create_engine, create_schema, create_session_factory
from ingestion.client.http import FeedHttpClient

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
BASE_URL = "https://knesset.gov.il/OdataV4/ParliamentInfo"

Rows = Union[List[Dict[str, Any]], Callable[[Optional[str]], List[Dict[str, Any]]]]


class FakeFeed:
    """
    In-process OData feed for httpx.MockTransport.

    collections maps a collection name to its rows, or to a callable that
    receives the $filter value and returns the rows. $top/$skip are honored.
    """
    
    def __init__(self, collections: Dict[str, Rows], base_url: str = BASE_URL):
        self.collections = collections
        self.base_url = base_url
        self.requests: List[httpx.Request] = []
        self.overrides: Dict[str, List[httpx.Response]] = {}
    
    def metadata_xml(self) -> str:
        types = "".join(
            f'<EntityType Name="{name}"><Key><PropertyRef Name="Id"/></Key>'
            f'<Property Name="Id" Type="Edm.Int32" Nullable="false"/></EntityType>'
            for name in self.collections
        )
        sets = "".join(
            f'<EntitySet Name="{name}" EntityType="ParliamentInfo.{name}"/>'
            for name in self.collections
        )
        return (
            '<?xml version="1.0" encoding="utf-8"?>'
            '<edmx:Edmx Version="4.0" xmlns:edmx="http://docs.oasis-open.org/odata/ns/edmx">'
            '<edmx:DataServices>'
            '<Schema Namespace="ParliamentInfo" xmlns="http://docs.oasis-open.org/odata/ns/edm">'
            f'{types}<EntityContainer Name="Container">{sets}</EntityContainer>'
            '</Schema></edmx:DataServices></edmx:Edmx>'
        )
    
    def queue(self, name: str, *responses: httpx.Response):
        """Serve these responses for the next requests to a collection."""
        self.overrides.setdefault(name, []).extend(responses)
    
    def paths(self, name: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(f"/{name}")]
    
    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        name = request.url.path.rsplit("/", 1)[-1]
        
        if self.overrides.get(name):
            return self.overrides[name].pop(0)
        
        if name == "$metadata":
            return httpx.Response(200, text=self.metadata_xml())
        
        if name not in self.collections:
            return httpx.Response(404, json={"error": "not found"})
        
        params = request.url.params
        rows = self.collections[name]
        if callable(rows):
            rows = rows(params.get("$filter"))
        
        top = int(params.get("$top", 50))
        skip = int(params.get("$skip", 0))
        return httpx.Response(200, json={"value": rows[skip:skip + top]})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=TEST_DATABASE_URL,
        ODATA_BASE_URL=BASE_URL,
        ENVIRONMENT="test",
        REQUEST_DELAY_SECONDS=0,
        RETRY_BASE_DELAY=0,
        RETRY_MAX_DELAY=0,
        SYNC_CONCURRENCY=1,
        SCHEDULER_ENABLED=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_engine(settings):
    """In-memory SQLite engine with every table created"""
    engine = create_engine(settings.DATABASE_URL)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def make_context(settings, session_factory, test_engine):
    """Build a PipelineContext whose HTTP client is served by a FakeFeed."""
    clients: List[FeedHttpClient] = []

    def _make(feed: Optional[FakeFeed] = None) -> PipelineContext:
        feed = feed or FakeFeed({})
        http = FeedHttpClient(settings, transport=httpx.MockTransport(feed.handler))
        clients.append(http)
        return PipelineContext(
            settings=settings,
            session_factory=session_factory,
            http=http,
            engine=test_engine,
        )

    yield _make

    for http in clients:
        await http.aclose()


@pytest.fixture
def pipeline_context(make_context) -> PipelineContext:
    return make_context()


# ============================================================================
# Sample feed data
# ============================================================================

@pytest.fixture
def sample_collections() -> Dict[str, Rows]:
    """A small, internally consistent parliament."""
    factions = [
        {"FactionID": 1, "Name": "Alpha", "ShortName": "A", "KnessetNum": 25, "CountOfMembers": 2, "IsCurrent": True},
        {"FactionID": 2, "Name": "Beta", "ShortName": "B", "KnessetNum": 25, "CountOfMembers": 1, "IsCurrent": True},
    ]
    people = [
        {"PersonID": 101, "FirstName": "Dana", "LastName": "Levi", "GenderID": 2, "IsCurrent": True, "FactionID": 1},
        {"PersonID": 102, "FirstName": "Avi", "LastName": "Cohen", "GenderID": 1, "IsCurrent": True, "FactionID": 1},
        {"PersonID": 103, "FirstName": "Noa", "LastName": "Mizrahi", "GenderID": 2, "IsCurrent": True, "FactionID": 2},
    ]
    bills = [
        {"BillID": 1001, "Name": "חוק הדיור הציבורי", "StatusID": 118, "KnessetNum": 25},
        {"BillID": 1002, "Name": "חוק שכירות הוגנת", "StatusID": 104, "KnessetNum": 25},
        {"BillID": 1003, "Name": "חוק תקציב המדינה", "StatusID": 113, "KnessetNum": 25},
    ]
    initiators = [
        {"BillInitiatorID": 1, "BillID": 1001, "PersonID": 101, "IsInitiator": True},
        {"BillInitiatorID": 2, "BillID": 1002, "PersonID": 103, "IsInitiator": True},
        {"BillInitiatorID": 3, "BillID": 1003, "PersonID": 102, "IsInitiator": False},
        # Unknown member: skipped by the sync, kept for the backfill
        {"BillInitiatorID": 4, "BillID": 1003, "PersonID": 999, "IsInitiator": True},
    ]
    committees = [{"CommitteeID": 7, "Name": "ועדת הכספים", "KnessetNum": 25, "IsCurrent": True}]
    memberships = [
        {"PersonToPositionID": 5001, "PersonID": 101, "FactionID": 1, "KnessetNum": 25, "IsCurrent": True},
        {"PersonToPositionID": 5002, "PersonID": 103, "FactionID": 2, "KnessetNum": 25, "IsCurrent": True},
    ]
    committee_members = [
        {"PersonToPositionID": 6001, "PersonID": 102, "CommitteeID": 7, "DutyDesc": "חבר ועדה", "IsCurrent": True},
    ]
    ministers = [
        {"PersonToPositionID": 7001, "PersonID": 101, "PositionID": 39, "GovMinistryName": "משרד הבינוי והשיכון",
         "GovernmentNum": 37, "KnessetNum": 25, "IsCurrent": True},
    ]
    votes = [
        {"Id": 9001, "VoteTitle": "חוק הדיור הציבורי", "TotalFor": 60, "TotalAgainst": 40, "KnessetNum": 25},
    ]
    
    def person_to_position(filter_value: Optional[str]) -> List[Dict[str, Any]]:
        if filter_value == "FactionID ne null":
            return memberships
        if filter_value == "CommitteeID ne null":
            return committee_members
        if filter_value == "PositionID eq 39":
            return ministers
        return []
    
    return {
        "KNS_Faction": factions,
        "KNS_Person": people,
        "KNS_PersonToPosition": person_to_position,
        "KNS_Bill": bills,
        "KNS_BillInitiator": initiators,
        "KNS_Committee": committees,
        "KNS_PlenumVote": votes,
    }


@pytest.fixture
def fake_feed():
    """The FakeFeed class, for tests that build their own feed."""
    return FakeFeed
