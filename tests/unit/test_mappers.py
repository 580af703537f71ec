"""
Unit tests for raw record → canonical record mapping
"""

from datetime import datetime

import pytest

from core.exceptions import MappingError
from ingestion.mappers import (
    derive_vote_result, infer_topic, map_ballot, map_bill, map_bill_role, map_bill_stage,
    map_committee, map_committee_membership, map_government_role, map_legislator,
    map_membership, map_party, map_status, map_vote, map_vote_value,
)
from ingestion.mappers.common import parse_datetime


class TestStatusMapping:
    
    @pytest.mark.parametrize("status_id,expected", [
        (104, "submitted"),
        (108, "first_reading"),
        (120, "committee_review"),
        (113, "second_reading"),
        (115, "third_reading"),
        (118, "passed"),
        (110, "rejected"),
        (122, "withdrawn"),
    ])
    def test_known_codes(self, status_id, expected):
        assert map_status(status_id) == expected
    
    def test_code_wins_over_text(self):
        assert map_status(118, "נדחה") == "passed"
    
    def test_text_fallback_for_unknown_code(self):
        assert map_status(9999, "הצעת החוק התקבלה בכנסת") == "passed"
        assert map_status(None, "אושרה בקריאה ראשונה") == "first_reading"
        assert map_status(None, "הועברה לוועדה") == "committee_review"
    
    def test_unknown_without_text(self):
        assert map_status(None) == "unknown"
        assert map_status(9999, "") == "unknown"


class TestTopicInference:
    
    def test_empty_text_has_no_topic(self):
        assert infer_topic(None) is None
        assert infer_topic("  ", "") is None
    
    def test_unmatched_text_is_other(self):
        assert infer_topic("הצעת חוק כללית") == "other"
    
    def test_keyword_match(self):
        assert infer_topic("חוק שכירות הוגנת") == "housing"
        assert infer_topic("חוק תקציב המדינה") == "economy"
    
    def test_description_is_scanned(self):
        assert infer_topic("הצעת חוק", "הרחבת שירותי בית חולים") == "healthcare"
    
    def test_first_topic_in_scan_order_wins(self):
        # Both economy and housing keywords present
        assert infer_topic("מס על דירה שנייה") == "economy"


class TestEntityMappers:
    
    def test_party(self):
        party = map_party({
            "FactionID": 7, "Name": " הליכוד ", "ShortName": "ל", "KnessetNum": 25,
            "CountOfMembers": 32, "IsCurrent": False,
        })
        
        assert party.external_id == "7"
        assert party.name == "הליכוד"
        assert party.seat_count == 32
        assert party.is_active is False
        assert party.source_url.endswith("/KNS_Faction(7)")
    
    def test_party_missing_is_current_means_active(self):
        assert map_party({"FactionID": 1, "Name": "x"}).is_active is True
    
    def test_party_without_id_fails(self):
        with pytest.raises(MappingError):
            map_party({"Name": "No id"})
    
    def test_legislator_builds_full_name_and_gender(self):
        legislator = map_legislator({
            "PersonID": 101, "FirstName": "Dana", "LastName": "Levi", "GenderID": 2,
            "IsCurrent": True, "FactionID": 1,
        })
        
        assert legislator.full_name == "Dana Levi"
        assert legislator.gender == "female"
        assert legislator.is_current is True
        assert legislator.faction_external_id == "1"
    
    def test_legislator_gender_from_description(self):
        legislator = map_legislator({"PersonID": 5, "LastName": "Cohen", "GenderDesc": "זכר"})
        
        assert legislator.gender == "male"
        assert legislator.full_name == "Cohen"
    
    def test_membership_defaults_knesset_number(self):
        membership = map_membership({"PersonID": 101, "FactionID": 1})
        
        assert membership.knesset_number == -1
        assert membership.is_current is True
    
    def test_membership_with_end_date_is_not_current(self):
        membership = map_membership({
            "PersonID": 101, "FactionID": 1, "KnessetNum": 24, "FinishDate": "2022-11-15T00:00:00Z",
        })
        
        assert membership.is_current is False
        assert membership.end_date == datetime(2022, 11, 15)
    
    def test_membership_missing_faction_fails(self):
        with pytest.raises(MappingError):
            map_membership({"PersonID": 101})
    
    def test_bill(self):
        bill = map_bill({
            "BillID": 1001, "Name": "חוק הדיור הציבורי", "StatusID": 118,
            "KnessetNum": 25, "SubmitDate": "2023-01-02T10:00:00",
        })
        
        assert bill.external_id == "1001"
        assert bill.status == "passed"
        assert bill.topic == "housing"
        assert bill.submitted_date == datetime(2023, 1, 2, 10, 0)
    
    def test_bill_role(self):
        assert map_bill_role({"BillID": 1, "PersonID": 2, "IsInitiator": True}).role == "initiator"
        assert map_bill_role({"BillID": 1, "PersonID": 2, "IsInitiator": False}).role == "cosponsor"
        assert map_bill_role({"BillID": 1, "PersonID": 2}).role == "cosponsor"
    
    def test_bill_role_missing_person_fails(self):
        with pytest.raises(MappingError):
            map_bill_role({"BillID": 1})
    
    def test_bill_stage_without_id_is_dropped(self):
        assert map_bill_stage({"BillID": 1, "StageDesc": "קריאה ראשונה"}) is None
    
    def test_bill_stage(self):
        stage = map_bill_stage({"BillID": 1, "BillHistoryID": 55, "StageDesc": "קריאה שנייה"})
        
        assert stage.external_id == "55"
        assert stage.status == "second_reading"
    
    def test_committee_activity_from_finish_date(self):
        assert map_committee({"CommitteeID": 7, "Name": "כספים"}).is_active is True
        assert map_committee({"CommitteeID": 7, "FinishDate": "2020-01-01"}).is_active is False
    
    def test_committee_membership(self):
        member = map_committee_membership({
            "PersonID": 102, "CommitteeID": 7, "DutyDesc": "יו\"ר", "IsCurrent": True,
        })
        
        assert member.committee_external_id == "7"
        assert member.position == 'יו"ר'
        assert member.is_current is True
    
    def test_government_role(self):
        role = map_government_role({
            "PersonToPositionID": 7001, "PersonID": 101, "PositionID": 45,
            "GovMinistryName": " משרד ראש הממשלה ", "IsCurrent": True,
        })
        
        assert role.external_id == "7001"
        assert role.position_label == "ראש הממשלה"
        assert role.ministry_name == "משרד ראש הממשלה"
    
    def test_government_role_accepts_v4_key(self):
        assert map_government_role({"Id": 3, "PersonID": 1, "PositionID": 39}).external_id == "3"
    
    def test_government_role_missing_position_fails(self):
        with pytest.raises(MappingError):
            map_government_role({"PersonToPositionID": 1, "PersonID": 1})
    
    def test_vote_uses_counts(self):
        vote = map_vote({"Id": 9001, "VoteTitle": "חוק", "TotalFor": 60, "TotalAgainst": 40})
        
        assert vote.external_id == "9001"
        assert vote.result == "passed"
        assert vote.external_source == "knesset_v4"

    def test_vote_source_url_is_percent_encoded(self):
        vote = map_vote({"Id": 9001, "VoteTitle": "חוק"}, "https://knesset.gov.il/OdataV4/ParliamentInfo/")

        assert vote.source_url == (
            "https://knesset.gov.il/OdataV4/ParliamentInfo/KNS_PlenumVote?$filter=Id%20eq%209001"
        )
        assert " " not in vote.source_url

    def test_ballot(self):
        ballot = map_ballot({"VoteID": 9001, "MkId": 101, "ResultCode": 8})
        
        assert ballot.vote_external_id == "9001"
        assert ballot.value == "no"


class TestVoteHelpers:
    
    def test_vote_values(self):
        assert map_vote_value(7) == "yes"
        assert map_vote_value(11) == "yes"
        assert map_vote_value(9) == "abstain"
        assert map_vote_value(None) == "did_not_vote"
    
    def test_tie_is_unknown(self):
        assert derive_vote_result(None, None, 10, 10) == "unknown"
    
    def test_result_from_wording(self):
        assert derive_vote_result("להעביר לוועדה", "לדחות") == "passed"
        assert derive_vote_result("לדחות את ההצעה", "") == "rejected"
        assert derive_vote_result("", "") == "unknown"


class TestMalformedRecords:
    
    def test_non_object_record(self):
        with pytest.raises(MappingError):
            map_party(["not", "a", "dict"])
    
    def test_wrong_field_type(self):
        with pytest.raises(MappingError) as exc_info:
            map_bill({"BillID": 1, "StatusID": "not-a-number"})
        
        assert exc_info.value.context["entity_type"] == "bill"
    
    def test_unparsable_date_is_none(self):
        assert parse_datetime("yesterday") is None
        assert parse_datetime("2024-03-01T12:00:00+02:00") == datetime(2024, 3, 1, 10, 0)
