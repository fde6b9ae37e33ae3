"""Text formatting helpers: counted nouns and last-access timestamps."""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from email.utils import format_datetime
from typing import Final

__all__ = [
    "LAST_ACCESS_FORMATS",
    "format_humanize",
    "format_timestamp",
    "humanize_delta",
]

LAST_ACCESS_FORMATS: Final[tuple[str, ...]] = (
    "humanize",
    "relative",
    "iso",
    "iso8601",
    "rfc2822",
    "rfc3339",
)

_MINUTE: Final[int] = 60
_HOUR: Final[int] = 60 * _MINUTE
_DAY: Final[int] = 24 * _HOUR


def format_humanize(count: int, singular: str, plural: str) -> str:
    """Return ``"1 repository"`` / ``"3 repositories"`` style text."""

    noun = singular if count == 1 else plural
    return f"{count} {noun}"


def humanize_delta(delta: timedelta) -> str:
    """Render ``delta`` (positive means in the past) as ``"3 days ago"`` / ``"in an hour"``."""

    seconds = int(delta.total_seconds())
    past = seconds >= 0
    magnitude = abs(seconds)
    if magnitude <= 10:
        return "now"

    text = _magnitude_text(magnitude)
    return f"{text} ago" if past else f"in {text}"


def _magnitude_text(seconds: int) -> str:
    if seconds < 45:
        return "seconds"
    if seconds < 90:
        return "a minute"
    if seconds < 45 * _MINUTE:
        return f"{round(seconds / _MINUTE)} minutes"
    if seconds < 90 * _MINUTE:
        return "an hour"
    if seconds < 22 * _HOUR:
        return f"{round(seconds / _HOUR)} hours"
    if seconds < 36 * _HOUR:
        return "a day"
    days = seconds // _DAY
    if days < 26:
        return f"{days} days"
    if days < 45:
        return "a month"
    if days < 320:
        return f"{round(days / 30)} months"
    if days < 548:
        return "a year"
    return f"{round(days / 365)} years"


def format_timestamp(
    value: datetime,
    style: str,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> str:
    """
    Render ``value`` using a ``catalog.last_access_format`` style.

    ``strftime(<pattern>)`` applies ``<pattern>`` verbatim. Unknown styles fall
    back to ``str(datetime)``. Absolute styles are rendered in ``tz`` (local time
    when ``None``).
    """

    lowered = style.strip().lower()
    if lowered in {"humanize", "relative"}:
        reference = now if now is not None else datetime.now(tz=value.tzinfo)
        return humanize_delta(reference - value)

    local = value.astimezone(tz)
    if lowered.startswith("strftime(") and lowered.endswith(")"):
        pattern = style.strip()[len("strftime(") : -1]
        return local.strftime(pattern)
    if lowered in {"iso", "iso8601", "rfc3339"}:
        return local.isoformat()
    if lowered == "rfc2822":
        return format_datetime(local)
    return str(local)
