"""
Bill, bill-initiator and bill-stage mappers.

Status comes from the numeric StatusID when it is known, otherwise from a
Hebrew free-text fallback; topic is inferred from title and summary by
keyword scan. Both are MVP heuristics, not classification.
"""

from typing import Any, Dict, List, Optional

from ingestion.mappers.common import (
    DEFAULT_BASE_URL, DEFAULT_SOURCE, clean_str, first_present, parse_datetime,
    parse_raw, record_url, require_id, to_external_id,
)
from schemas.canonical import BillRecord, BillRoleRecord, BillStageRecord
from schemas.raw import RawBill, RawBillInitiator, RawBillStage
from core.exceptions import MappingError

BILL_CANDIDATES = ["KNS_Bill", "KnssBill", "Bill", "PrivateBill", "GovernmentBill", "LawBill"]

BILL_INITIATOR_CANDIDATES = [
    "KNS_BillInitiator", "KnssBillInitiator", "BillInitiator", "BillMember", "BillSponsor",
]

BILL_STAGE_CANDIDATES = [
    "KNS_BillHistory", "KnssBillHistoryByStage", "BillStage", "BillHistory", "LawHistory",
]

# KNS_Status codes for bills (TypeID=2)
STATUS_MAP: Dict[int, str] = {
    104: "submitted",
    150: "submitted",
    101: "first_reading",
    108: "first_reading",
    109: "first_reading",
    111: "first_reading",
    141: "first_reading",
    167: "first_reading",
    106: "committee_review",
    120: "committee_review",
    142: "committee_review",
    158: "committee_review",
    161: "committee_review",
    162: "committee_review",
    165: "committee_review",
    175: "committee_review",
    181: "committee_review",
    113: "second_reading",
    114: "second_reading",
    130: "second_reading",
    178: "second_reading",
    179: "second_reading",
    115: "third_reading",
    117: "third_reading",
    131: "third_reading",
    118: "passed",
    110: "rejected",
    176: "rejected",
    122: "withdrawn",
    124: "withdrawn",
    140: "withdrawn",
    143: "withdrawn",
    177: "withdrawn",
}

# Checked in order; first hit wins
STATUS_TEXT_FALLBACK = [
    (("התקבלה",), "passed"),
    (("נדחה", "לא עבר"), "rejected"),
    (("נעצרה", "מוזגה", "הוסבה"), "withdrawn"),
    (("קריאה שלישית",), "third_reading"),
    (("קריאה שנייה",), "second_reading"),
    (("קריאה ראשונה",), "first_reading"),
    (("ועדה",), "committee_review"),
    (("הונחה", "הוגשה"), "submitted"),
]

# Keys are scanned in insertion order
TOPIC_KEYWORDS: Dict[str, List[str]] = {
    "economy": ["כלכלה", "מס", "תקציב", "אוצר", "מיסוי", "פיננסי", "בנק"],
    "security_defense": [
        "ביטחון", "צבא", "הגנה", "מיליטרי", "ביטחון לאומי", "חרדים", "שירות לאומי", "גיוס",
    ],
    "social_welfare": ["רווחה", "סיוע", "קצבה", "עוני", "שוויון חברתי"],
    "healthcare": ["בריאות", "רפואה", "בית חולים", "תרופה", "רופא"],
    "education": ["חינוך", "בית ספר", "אוניברסיטה", "תלמיד", "מורה"],
    "environment": ["סביבה", "אקלים", "זיהום", "אנרגיה", "טבע"],
    "justice_law": ["משפט", "עונשין", "פלילי", "אזרחי", "שופט", "בית משפט"],
    "foreign_affairs": ["חוץ", "דיפלומטי", "בינלאומי", "אמנה", "שגריר"],
    "housing": ["דיור", "שכירות", "דירה", "נדל", "בנייה"],
    "infrastructure": ["תשתית", "כביש", "רכבת", "תחבורה", "חשמל"],
    "religion_state": [
        "דת", "מדינה", "הלכה", "כשרות", "שבת", "דתי", "שירות לאומי", "גיוס חרדים",
    ],
    "immigration": ["עלייה", "הגירה", "פליט", "אזרחות"],
    "civil_rights": ["זכויות", "אזרחי", "חופש", "ביטוי", "שוויון"],
    "local_government": ["עירייה", "מועצה", "מקומי", "רשות"],
}


def map_status(status_id: Optional[int], status_desc: Optional[str] = None) -> str:
    """Numeric status code → semantic status, with a free-text fallback."""
    if status_id is not None and status_id in STATUS_MAP:
        return STATUS_MAP[status_id]
    
    if status_desc:
        for needles, status in STATUS_TEXT_FALLBACK:
            if any(needle in status_desc for needle in needles):
                return status
    
    return "unknown"


def infer_topic(title: Optional[str], description: Optional[str] = None) -> Optional[str]:
    """
    Keyword topic tag for a bill.

    Returns None for empty text and "other" when no keyword matches.
    """
    text = f"{title or ''} {description or ''}".lower()
    if not text.strip():
        return None
    
    for topic, keywords in TOPIC_KEYWORDS.items():
        for keyword in keywords:
            if keyword in text:
                return topic
    return "other"


def map_bill(
    raw: Dict[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    external_source: str = DEFAULT_SOURCE,
) -> BillRecord:
    record = parse_raw(RawBill, raw, "bill")
    external_id = require_id("bill", record.BillID, record.ID, record.Id)
    
    title = clean_str(first_present(record.Name, record.Title, record.BillName)) or "Unknown"
    description = clean_str(record.SummaryLaw)
    
    return BillRecord(
        external_id=external_id,
        external_source=external_source,
        title=title,
        description=description,
        status=map_status(record.StatusID, record.StatusDesc or record.SubTypeDesc),
        topic=infer_topic(title, description),
        knesset_number=record.KnessetNum,
        submitted_date=parse_datetime(first_present(record.SubmitDate, record.PublicationDate)),
        last_status_date=parse_datetime(record.LastUpdatedDate),
        source_url=record_url(base_url, "KNS_Bill", external_id),
    )


def map_bill_role(raw: Dict[str, Any]) -> BillRoleRecord:
    record = parse_raw(RawBillInitiator, raw, "bill_role")
    bill_id = to_external_id(record.BillID)
    legislator_id = to_external_id(record.PersonID, record.MemberID)
    
    if not bill_id or not legislator_id:
        raise MappingError(
            "Bill initiator record missing bill or person id",
            context={"bill_id": bill_id, "person_id": legislator_id}
        )
    
    return BillRoleRecord(
        bill_external_id=bill_id,
        legislator_external_id=legislator_id,
        role="initiator" if record.IsInitiator else "cosponsor",
    )


def map_bill_stage(raw: Dict[str, Any]) -> Optional[BillStageRecord]:
    """
    Returns None for stages without an external id: there is no
    idempotency key to upsert them by.
    """
    record = parse_raw(RawBillStage, raw, "bill_stage")
    bill_id = to_external_id(record.BillID)
    if not bill_id:
        raise MappingError("Bill stage record missing BillID")
    
    stage_id = to_external_id(record.BillHistoryInitiatorID, record.BillHistoryID)
    if not stage_id:
        return None
    
    description = clean_str(first_present(record.ReasonDesc, record.StageDesc, record.StageName))
    
    return BillStageRecord(
        bill_external_id=bill_id,
        external_id=stage_id,
        status=map_status(None, description),
        description=description,
        stage_date=parse_datetime(first_present(record.StartDate, record.StageDate)),
    )
