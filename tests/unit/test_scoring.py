"""
Unit tests for the pure scoring functions
"""

import pytest

from schemas.recommendation import TopicWeight
from scoring.aggregation import AggregateRow, aggregate_rows, compute_bill_points, role_weight
from scoring.constants import TOPICS, get_topic
from scoring.recommendation import (
    compute_personal_score, confidence_tier, map_free_text, normalize_scores,
    scoring_topics, topic_keys_for,
)


def weights(**kwargs):
    return [TopicWeight(id=topic_id, weight=weight) for topic_id, weight in kwargs.items()]


class TestBillPoints:
    
    def test_status_points(self):
        assert compute_bill_points("passed") == 5
        assert compute_bill_points("third_reading") == 3
        assert compute_bill_points("first_reading") == 2
        assert compute_bill_points("submitted") == 1
        assert compute_bill_points("rejected") == 0
        assert compute_bill_points("unknown") == 0
    
    def test_role_weights(self):
        assert role_weight("initiator") == 1.0
        assert role_weight("cosponsor") == 0.5
        assert role_weight("observer") == 0.0


class TestAggregateRows:
    
    def test_sums_points_by_party_and_topic(self):
        facts = [
            ("p1", "b1", "housing", "passed", "initiator"),
            ("p1", "b2", "housing", "submitted", "cosponsor"),
            ("p1", "b3", "economy", "second_reading", "cosponsor"),
            ("p2", "b1", "housing", "passed", "cosponsor"),
        ]
        
        assert aggregate_rows(facts) == [
            AggregateRow("p1", "economy", 1.5, 1),
            AggregateRow("p1", "housing", 5.5, 2),
            AggregateRow("p2", "housing", 2.5, 1),
        ]
    
    def test_bill_count_is_distinct(self):
        facts = [
            ("p1", "b1", "housing", "passed", "initiator"),
            ("p1", "b1", "housing", "passed", "cosponsor"),
        ]
        
        [row] = aggregate_rows(facts)
        assert row.raw_score == 7.5
        assert row.bill_count == 1
    
    def test_untagged_and_other_topics_excluded(self):
        facts = [
            ("p1", "b1", None, "passed", "initiator"),
            ("p1", "b2", "other", "passed", "initiator"),
        ]
        
        assert aggregate_rows(facts) == []
    
    def test_zero_score_rows_not_written(self):
        facts = [("p1", "b1", "housing", "rejected", "initiator")]
        
        assert aggregate_rows(facts) == []


class TestNormalization:
    
    def test_min_max_per_topic(self):
        normalized = normalize_scores([
            ("p1", "housing", 10), ("p2", "housing", 5), ("p3", "housing", 2),
        ])
        
        assert normalized["p1"]["housing"] == 1.0
        assert normalized["p2"]["housing"] == pytest.approx(0.375)
        assert normalized["p3"]["housing"] == 0.0
    
    def test_all_zero_gives_zero(self):
        normalized = normalize_scores([("p1", "economy", 0), ("p2", "economy", 0), ("p3", "economy", 0)])
        
        assert {p: v["economy"] for p, v in normalized.items()} == {"p1": 0.0, "p2": 0.0, "p3": 0.0}
    
    def test_all_equal_gives_one(self):
        normalized = normalize_scores([("p1", "economy", 4), ("p2", "economy", 4), ("p3", "economy", 4)])
        
        assert {p: v["economy"] for p, v in normalized.items()} == {"p1": 1.0, "p2": 1.0, "p3": 1.0}
    
    def test_topics_normalized_independently(self):
        normalized = normalize_scores([
            ("p1", "housing", 10), ("p2", "housing", 0),
            ("p1", "economy", 1), ("p2", "economy", 3),
        ])
        
        assert normalized["p1"] == {"housing": 1.0, "economy": 0.0}
        assert normalized["p2"] == {"housing": 0.0, "economy": 1.0}


class TestPersonalScore:
    
    @pytest.fixture
    def normalized(self):
        return normalize_scores([
            ("p1", "housing", 10), ("p2", "housing", 5), ("p3", "housing", 2),
            ("p1", "economy", 8), ("p2", "economy", 4), ("p3", "economy", 6),
        ])
    
    def test_weighted_ranking(self, normalized):
        topics = weights(housing_prices=5, cost_of_living=3)
        
        scores = {
            party: compute_personal_score(party, topics, normalized, {})[0]
            for party in ("p1", "p2", "p3")
        }
        
        assert scores["p1"] == pytest.approx(100.0)
        assert scores["p2"] == pytest.approx(23.4375)
        assert scores["p3"] == pytest.approx(18.75)
        assert max(scores, key=scores.get) == "p1"
    
    def test_breakdown_per_topic(self, normalized):
        topics = weights(housing_prices=5, cost_of_living=3)
        
        _, breakdown, _ = compute_personal_score("p2", topics, normalized, {"p2": {"housing": 4}})
        
        assert [b.topic_id for b in breakdown] == ["housing_prices", "cost_of_living"]
        assert breakdown[0].normalized_score == pytest.approx(0.375)
        assert breakdown[0].bill_count == 4
        assert breakdown[1].bill_count == 0
    
    def test_multi_key_topic_averages_keys(self):
        normalized = {"p1": {"security_defense": 1.0}}
        
        score, breakdown, _ = compute_personal_score(
            "p1", weights(haredi_integration=2), normalized, {}
        )
        
        assert breakdown[0].normalized_score == 0.5
        assert score == 50.0
    
    def test_party_without_rows_scores_zero(self, normalized):
        score, _, confidence = compute_personal_score(
            "p9", weights(housing_prices=5), normalized, {}
        )
        
        assert score == 0.0
        assert confidence == "low"
    
    def test_ui_only_topic_ignored(self, normalized):
        with_ideology = weights(housing_prices=5, ideology=5)
        
        score, breakdown, _ = compute_personal_score("p2", with_ideology, normalized, {})
        
        assert score == pytest.approx(37.5)
        assert [b.topic_id for b in breakdown] == ["housing_prices"]
    
    def test_confidence_from_coverage(self):
        normalized = {"p1": {}}
        counts = {"p1": {"housing": 3, "security_defense": 2, "infrastructure": 5, "economy": 1}}
        
        _, _, high = compute_personal_score(
            "p1",
            weights(housing_prices=1, personal_national_security=1, transport_reform=1, cost_of_living=1),
            normalized, counts,
        )
        _, _, low = compute_personal_score(
            "p1",
            weights(housing_prices=1, cost_of_living=1, healthcare=1),
            {"p1": {}}, {"p1": {"housing": 2}},
        )
        
        assert high == "high"
        assert low == "low"
    
    @pytest.mark.parametrize("coverage,tier", [
        (1.0, "high"), (0.75, "high"), (0.5, "medium"), (0.4, "medium"), (0.39, "low"), (0.0, "low"),
    ])
    def test_confidence_thresholds(self, coverage, tier):
        assert confidence_tier(coverage) == tier


class TestTopics:
    
    def test_catalog(self):
        assert len(TOPICS) == 11
        assert get_topic("ideology").scorable is False
        assert get_topic("haredi_integration").topic_keys == ("security_defense", "religion_state")
        assert get_topic("nope") is None
    
    def test_unknown_and_ui_only_topics_not_scored(self):
        topics = weights(ideology=3, nope=2, education=4)
        
        assert [t.id for t in scoring_topics(topics)] == ["education"]
    
    def test_topic_keys_deduplicated(self):
        topics = weights(personal_national_security=1, haredi_integration=1, cost_of_living=1, economy_innovation=1)
        
        assert topic_keys_for(topics) == ["security_defense", "religion_state", "economy"]


class TestFreeText:
    
    def test_blank_text(self):
        assert map_free_text(None) == []
        assert map_free_text("   ") == []
    
    def test_one_suggestion_per_topic(self):
        suggestions = map_free_text("אני רוצה דיור זול, שכירות הוגנת ותחבורה")
        
        assert [(s.suggested_topic_id, s.matched_keyword) for s in suggestions] == [
            ("housing_prices", "דיור"),
            ("transport_reform", "תחבורה"),
        ]
        assert suggestions[0].label == get_topic("housing_prices").label
    
    def test_no_match(self):
        assert map_free_text("hello world") == []
