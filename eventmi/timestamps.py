"""Wire timestamp codec.

Event forms carry timestamps as ``MM/dd/yyyy hh:mm tt``: a 12-hour clock
with an AM/PM marker and no zone. Both sides agree on a configured wire
timezone instead of the host locale, so the marker is rendered by hand
rather than through ``%p``.
"""

from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

WIRE_DATE_FORMAT = "%m/%d/%Y"
WIRE_CLOCK_FORMAT = "%I:%M"
HTML_LOCAL_FORMAT = "%Y-%m-%dT%H:%M"  # <input type="datetime-local">


def resolve_zone(tz) -> tzinfo:
    """Accept either an IANA zone name or a tzinfo."""
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def to_wire_zone(value: datetime, tz="UTC") -> datetime:
    """Normalize to a naive wire-zone datetime at minute precision."""
    if value.tzinfo is not None:
        value = value.astimezone(resolve_zone(tz)).replace(tzinfo=None)
    return value.replace(second=0, microsecond=0)


def format_wire_timestamp(value: datetime, tz="UTC") -> str:
    value = to_wire_zone(value, tz)
    marker = "AM" if value.hour < 12 else "PM"
    return f"{value.strftime(WIRE_DATE_FORMAT)} {value.strftime(WIRE_CLOCK_FORMAT)} {marker}"


def parse_wire_timestamp(text: str) -> datetime:
    """Parse a wire timestamp into a naive datetime.

    Also accepts the ``YYYY-MM-DDTHH:MM`` form browsers submit from
    ``datetime-local`` inputs. Raises ValueError on anything else.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("timestamp is empty")

    if "T" in text:
        return datetime.strptime(text, HTML_LOCAL_FORMAT)

    parts = text.split()
    if len(parts) != 3:
        raise ValueError(f"timestamp {text!r} is not in MM/dd/yyyy hh:mm tt form")
    date_part, clock_part, marker = parts
    marker = marker.upper()
    if marker not in ("AM", "PM"):
        raise ValueError(f"timestamp {text!r} has no AM/PM marker")

    parsed = datetime.strptime(f"{date_part} {clock_part}", f"{WIRE_DATE_FORMAT} {WIRE_CLOCK_FORMAT}")
    hour = parsed.hour % 12
    if marker == "PM":
        hour += 12
    return parsed.replace(hour=hour)
