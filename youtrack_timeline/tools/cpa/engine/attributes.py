"""Classification of YouTrack custom-field values.

Custom fields arrive as loosely shaped JSON (`{"name": ..., "value": ...}`).
`classify_attribute` turns each one into exactly one variant of `Attribute`
so the task builder never has to inspect raw values itself.
"""
import logging
from datetime import date, datetime, time, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

START_DATE_ALIASES = {"start date", "startdate", "start_date"}
DUE_DATE_ALIASES = {
    "due date", "duedate", "due_date",
    "end date", "enddate", "end_date",
    "target date", "targetdate", "target_date",
}


class DateAttribute(BaseModel):
    kind: Literal["date"] = "date"
    name: str
    role: Literal["start", "due", "other"] = "other"
    value: Optional[datetime] = None


class DurationAttribute(BaseModel):
    kind: Literal["duration"] = "duration"
    name: str
    role: Literal["estimation", "spent", "other"] = "other"
    minutes: float


class EnumAttribute(BaseModel):
    kind: Literal["enum"] = "enum"
    name: str
    value: str
    is_resolved: bool = False


class UserAttribute(BaseModel):
    kind: Literal["user"] = "user"
    name: str
    user_id: Optional[str] = None
    login: Optional[str] = None
    full_name: Optional[str] = None


class ScalarAttribute(BaseModel):
    kind: Literal["scalar"] = "scalar"
    name: str
    value: Any = None


Attribute = Annotated[
    Union[DateAttribute, DurationAttribute, EnumAttribute, UserAttribute, ScalarAttribute],
    Field(discriminator="kind"),
]


def normalize_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def is_start_date_name(name: str) -> bool:
    n = normalize_name(name)
    return ("start" in n and "date" in n) or n in START_DATE_ALIASES


def is_due_date_name(name: str) -> bool:
    n = normalize_name(name)
    if "date" in n and any(word in n for word in ("due", "end", "target")):
        return True
    return n in DUE_DATE_ALIASES


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a YouTrack date value into an aware UTC datetime.

    Accepts epoch milliseconds, ISO-8601 strings, `{"timestamp": ms}` and
    date/datetime objects. Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.lstrip("-").isdigit():
            return parse_timestamp(int(s))
        try:
            parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    if isinstance(value, dict):
        return parse_timestamp(value.get("timestamp"))
    return None


def _duration_role(name: str) -> str:
    n = normalize_name(name)
    if n == "estimation":
        return "estimation"
    if n == "spent time":
        return "spent"
    return "other"


def classify_attribute(field: dict) -> Optional[Attribute]:
    """Classify one custom field. Fields without a value classify to None."""
    name = field.get("name") or ""
    value = field.get("value")
    if value is None:
        return None

    if is_start_date_name(name) or is_due_date_name(name):
        parsed = parse_timestamp(value)
        if parsed is None:
            logger.debug("Unparseable date value for field %r: %r", name, value)
        return DateAttribute(name=name, role="start" if is_start_date_name(name) else "due", value=parsed)

    if isinstance(value, dict):
        if isinstance(value.get("minutes"), (int, float)) and not isinstance(value.get("minutes"), bool):
            return DurationAttribute(name=name, role=_duration_role(name), minutes=value["minutes"])
        if "login" in value or "fullName" in value:
            return UserAttribute(
                name=name,
                user_id=value.get("id"),
                login=value.get("login"),
                full_name=value.get("fullName"),
            )
        if value.get("name") is not None:
            return EnumAttribute(
                name=name,
                value=str(value.get("name")),
                is_resolved=bool(value.get("isResolved")),
            )
        if "timestamp" in value:
            return DateAttribute(name=name, value=parse_timestamp(value))

    if "Date" in (field.get("$type") or ""):
        return DateAttribute(name=name, value=parse_timestamp(value))

    return ScalarAttribute(name=name, value=value)
