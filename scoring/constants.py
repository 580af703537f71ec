"""
Scoring tables for party activity rankings.

Rankings are built from legislative bill activity only. The ideology topic
exists for the preference form and carries no aggregate topics, so it is
never scored.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ScoringTopic:
    id: str
    label: str
    topic_keys: Tuple[str, ...]
    ui_only: bool = False
    
    @property
    def scorable(self) -> bool:
        return not self.ui_only and len(self.topic_keys) > 0


TOPICS: List[ScoringTopic] = [
    ScoringTopic("housing_prices", "הורדת מחירי הדיור", ("housing",)),
    ScoringTopic("personal_national_security", "ביטחון אישי/לאומי", ("security_defense",)),
    ScoringTopic(
        "haredi_integration",
        'שילוב חרדים בצה"ל / שירות לאומי',
        ("security_defense", "religion_state"),
    ),
    ScoringTopic("transport_reform", "רפורמות תחבורה ציבורית", ("infrastructure",)),
    ScoringTopic("cost_of_living", "הורדת חסמי יבוא / יוקר המחיה", ("economy",)),
    ScoringTopic("healthcare", "בריאות", ("healthcare",)),
    ScoringTopic("education", "חינוך", ("education",)),
    ScoringTopic("religion_state", "דת ומדינה", ("religion_state",)),
    ScoringTopic("rule_of_law", "שלטון חוק / רפורמות משפטיות", ("justice_law",)),
    ScoringTopic("economy_innovation", "כלכלה/חדשנות", ("economy",)),
    ScoringTopic("ideology", "העדפה אידאולוגית (ימין/מרכז/שמאל)", (), ui_only=True),
]

TOPICS_BY_ID: Dict[str, ScoringTopic] = {topic.id: topic for topic in TOPICS}


def get_topic(topic_id: str) -> Optional[ScoringTopic]:
    return TOPICS_BY_ID.get(topic_id)


# Points per bill status; anything not listed scores 0
BILL_STATUS_POINTS: Dict[str, int] = {
    "passed": 5,
    "second_reading": 3,
    "third_reading": 3,
    "committee_review": 2,
    "first_reading": 2,
    "submitted": 1,
}

ROLE_WEIGHTS: Dict[str, float] = {
    "initiator": 1.0,
    "cosponsor": 0.5,
}

# Hebrew keyword → scoring topic, for free-text suggestions
FREE_TEXT_KEYWORD_MAP: List[Tuple[Tuple[str, ...], str]] = [
    (("דיור", "שכירות", "דירה", "משכנתה", 'נדל"ן'), "housing_prices"),
    (("ביטחון", "טרור", "משטרה", "פשע", "ביטחון אישי"), "personal_national_security"),
    (("חרדים", "גיוס", "שירות לאומי", "שירות צבאי", "ישיבה"), "haredi_integration"),
    (("תחבורה", "רכבת", "אוטובוס", "מטרו", "פקק", "אובר"), "transport_reform"),
    (("יוקר מחיה", "מחירים", "יבוא", "מונופול", "אינפלציה"), "cost_of_living"),
    (("בריאות", "רופא", "בית חולים", "תרופות", "קופת חולים"), "healthcare"),
    (("חינוך", "בית ספר", "מורה", "תלמיד", "אוניברסיטה"), "education"),
    (("דת", "מדינה", "כשרות", "שבת", "גיור", "רבנות"), "religion_state"),
    (("שלטון חוק", "רפורמה משפטית", 'בג"ץ', "שופטים", "מינויים"), "rule_of_law"),
    (("כלכלה", "חדשנות", "היי-טק", "סטארטאפ", "מיסים", "תעסוקה"), "economy_innovation"),
]

TOP_N_PARTIES = 3
HIGHLIGHT_LIMIT = 4
HIGHLIGHT_CANDIDATES = 50
MIN_BILLS_FOR_COVERAGE = 2

HIGH_CONFIDENCE_COVERAGE = 0.75
MEDIUM_CONFIDENCE_COVERAGE = 0.40

SCORING_WARNING = (
    "Scores reflect legislative bill activity only. They do not represent "
    "political endorsements or ideological alignment. Data may be incomplete."
)

METHODOLOGY_PATH = "/methodology#my-election-scoring"
