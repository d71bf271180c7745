"""Location tag embedded at the start of entry notes."""

import re
from enum import StrEnum

LOCATION_MARKER = "\N{ROUND PUSHPIN}"

_LOCATION_PATTERN = re.compile(rf"{LOCATION_MARKER} (\w+)[ \t]*(?:\n|$)")


class Location(StrEnum):
    """Where a meal was eaten."""

    HOME = "home"
    WORK = "work"
    RESTAURANT = "restaurant"
    EVENT = "event"


def split_location(notes: str | None) -> tuple[Location | None, str]:
    """Return the embedded location, if any, and the remaining notes."""
    if not notes:
        return None, ""
    match = _LOCATION_PATTERN.match(notes)
    if match is None:
        return None, notes.strip()
    try:
        location = Location(match.group(1).lower())
    except ValueError:
        return None, notes.strip()
    return location, notes[match.end() :].strip()


def compose_notes(location: Location | None, body: str | None) -> str | None:
    """Build notes with the location tag prefixed; ``None`` when empty."""
    body = (body or "").strip()
    if location is None:
        return body or None
    tag = f"{LOCATION_MARKER} {location.value}"
    if not body:
        return tag
    return f"{tag}\n{body}"
