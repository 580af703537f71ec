"""
Integration tests for natural-key upserts and raw snapshots
"""

import pytest
from sqlalchemy import func, select

from ingestion.loaders.snapshot import hash_payload, save_snapshot
from ingestion.loaders.upsert_store import UpsertStore
from ingestion.mappers import map_bill, map_legislator, map_membership, map_party
from models import Bill, Party, PartyMembership, RawSnapshot, SourceLink


async def count(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestUpsertStore:
    """Same input twice → one row, same id"""
    
    @pytest.mark.asyncio
    async def test_party_upsert_is_idempotent(self, db_session):
        store = UpsertStore(db_session)
        record = map_party({"FactionID": 1, "Name": "Alpha", "CountOfMembers": 4})
        
        first = await store.upsert_party(record)
        second = await store.upsert_party(record)
        await db_session.commit()
        
        assert first.created is True
        assert second.created is False
        assert first.id == second.id
        assert await count(db_session, Party) == 1
    
    @pytest.mark.asyncio
    async def test_update_changes_values_in_place(self, db_session):
        store = UpsertStore(db_session)
        first = await store.upsert_party(map_party({"FactionID": 1, "Name": "Alpha", "CountOfMembers": 4}))
        await store.upsert_party(map_party({"FactionID": 1, "Name": "Alpha Renamed", "CountOfMembers": 6}))
        await db_session.commit()
        
        db_session.expire_all()
        party = await db_session.get(Party, first.id)
        assert party.name == "Alpha Renamed"
        assert party.seat_count == 6
    
    @pytest.mark.asyncio
    async def test_same_external_id_different_source_is_distinct(self, db_session):
        store = UpsertStore(db_session)
        
        a = await store.upsert_bill(map_bill({"BillID": 5, "Name": "חוק"}, external_source="knesset_odata"))
        b = await store.upsert_bill(map_bill({"BillID": 5, "Name": "חוק"}, external_source="other_feed"))
        await db_session.commit()
        
        assert a.id != b.id
        assert await count(db_session, Bill) == 2
    
    @pytest.mark.asyncio
    async def test_membership_keyed_by_term(self, db_session):
        store = UpsertStore(db_session)
        party = await store.upsert_party(map_party({"FactionID": 1, "Name": "Alpha"}))
        legislator = await store.upsert_legislator(map_legislator({"PersonID": 101, "LastName": "Levi"}))
        
        inline = await store.upsert_inline_membership(legislator.id, party.id, True)
        detailed = await store.upsert_membership(
            legislator.id, party.id, map_membership({"PersonID": 101, "FactionID": 1, "KnessetNum": 25})
        )
        again = await store.upsert_membership(
            legislator.id, party.id, map_membership({"PersonID": 101, "FactionID": 1, "KnessetNum": 25})
        )
        await db_session.commit()
        
        assert inline.id != detailed.id
        assert again.id == detailed.id and again.created is False
        assert await count(db_session, PartyMembership) == 2
    
    @pytest.mark.asyncio
    async def test_source_link_upsert(self, db_session):
        store = UpsertStore(db_session)
        party = await store.upsert_party(map_party({"FactionID": 1, "Name": "Alpha"}))
        
        await store.upsert_source_link("party", party.id, "knesset_odata", "https://knesset.gov.il/a", "1")
        await store.upsert_source_link("party", party.id, "knesset_odata", "https://knesset.gov.il/b", "1")
        await db_session.commit()
        
        links = (await db_session.execute(select(SourceLink))).scalars().all()
        assert len(links) == 1
        assert links[0].url == "https://knesset.gov.il/b"
        assert links[0].label == "Knesset OData"


class TestSnapshots:
    
    def test_hash_ignores_key_order(self):
        assert hash_payload({"a": 1, "b": "ש"}) == hash_payload({"b": "ש", "a": 1})
        assert hash_payload({"a": 1}) != hash_payload({"a": 2})
        assert len(hash_payload({})) == 64
    
    @pytest.mark.asyncio
    async def test_snapshots_are_append_only(self, session_factory):
        payload = {"FactionID": 1, "Name": "Alpha"}
        
        first = await save_snapshot(session_factory, "party", payload, "knesset_odata", external_id="1")
        second = await save_snapshot(session_factory, "party", payload, "knesset_odata", external_id="1")
        
        async with session_factory() as session:
            rows = (await session.execute(select(RawSnapshot))).scalars().all()
        
        assert first != second
        assert len(rows) == 2
        assert {row.content_hash for row in rows} == {hash_payload(payload)}
        assert rows[0].payload == payload
        assert rows[0].payload_size > 0
