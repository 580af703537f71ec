"""
Shared coercion helpers for the mapper layer.

All helpers are pure; none of them touch the store or the network.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type, TypeVar, Union
from pydantic import BaseModel, ValidationError

from core.exceptions import MappingError

DEFAULT_BASE_URL = "https://knesset.gov.il/OdataV4/ParliamentInfo"
DEFAULT_SOURCE = "knesset_odata"

R = TypeVar("R", bound=BaseModel)


def parse_raw(model: Type[R], raw: Union[Dict[str, Any], BaseModel], entity_type: str) -> R:
    """Validate a raw feed dict into its all-optional raw model."""
    if isinstance(raw, model):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    if not isinstance(raw, dict):
        raise MappingError(
            f"Expected an object for {entity_type}",
            context={"entity_type": entity_type, "got": type(raw).__name__}
        )
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise MappingError(
            f"Unexpected {entity_type} record shape",
            context={"entity_type": entity_type, "errors": e.error_count()},
            original_exception=e
        )


def first_present(*values: Any) -> Any:
    """First value that is neither None nor an empty string."""
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def to_external_id(*values: Any) -> Optional[str]:
    value = first_present(*values)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def require_id(entity_type: str, *values: Any) -> str:
    external_id = to_external_id(*values)
    if not external_id:
        raise MappingError(
            f"{entity_type} record missing ID",
            context={"entity_type": entity_type}
        )
    return external_id


def clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce a date-like value to a naive UTC datetime, or None.

    Accepts ISO-8601 strings with or without a 'Z' / offset suffix.
    Unparsable input yields None rather than an error.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def current_flag(is_current: Optional[bool], end_date: Any) -> bool:
    """Explicit IsCurrent when the feed sends it, else 'no end date'."""
    if is_current is not None:
        return bool(is_current)
    return end_date is None


def record_url(base_url: str, collection: str, external_id: str) -> str:
    return f"{base_url.rstrip('/')}/{collection}({external_id})"
