"""Event time resolution from forum date tags.

Posts carry machine-readable date markers inserted by the forum editor:

    [date-range from=2025-12-09T18:00:00 to=2025-12-09T20:00:00 timezone="America/Chicago"]
    [date=2025-12-09 time=180000 timezone="America/Chicago"]

The resolver turns the first usable marker into a TemporalWindow and
falls back to the post creation time when no marker can be used.
Malformed values never raise; they drop to the next fallback.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.event_extraction.config import ExtractionConfig
from src.event_extraction.schemas import TemporalWindow

logger = logging.getLogger(__name__)

_DATE_RANGE_TAG = re.compile(r"\[date-range\s+(?P<attrs>[^\]]*)\]", re.IGNORECASE)
_DATE_TAG = re.compile(
    r"\[date=(?P<date>\d{4}-\d{2}-\d{2})(?P<attrs>[^\]]*)\]", re.IGNORECASE
)
_ATTRIBUTE = re.compile(r'(?P<key>[\w-]+)=(?:"(?P<quoted>[^"]*)"|(?P<bare>[^\s"\]]+))')


def _parse_attributes(text: str) -> dict[str, str]:
    """Parse ``key=value`` / ``key="value"`` pairs from a tag body."""
    attrs: dict[str, str] = {}
    for m in _ATTRIBUTE.finditer(text):
        key = m.group("key").lower()
        value = m.group("quoted") if m.group("quoted") is not None else m.group("bare")
        attrs.setdefault(key, value.strip())
    return attrs


def _split_time_digits(raw: str | None) -> tuple[int, int, int]:
    """Interpret 2/4/6 time digits as HH, HHMM or HHMMSS; anything else is midnight."""
    digits = (raw or "").replace(":", "")
    if len(digits) == 2:
        return int(digits), 0, 0
    if len(digits) == 4:
        return int(digits[:2]), int(digits[2:4]), 0
    if len(digits) == 6:
        return int(digits[:2]), int(digits[2:4]), int(digits[4:6])
    return 0, 0, 0


def parse_datetime(value: str | None, zone: tzinfo) -> datetime | None:
    """
    Parse an ISO-8601 string as a datetime in ``zone``.

    Naive values are read as wall-clock time in ``zone``; values with an
    offset are converted into it.

    Returns:
        Timezone-aware datetime, or None when the value does not parse.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    return parsed.astimezone(zone)


class TemporalResolver:
    """
    Resolves the start/end/timezone of an event post.

    Resolution order, first match wins:
    1. ``[date-range from=... to=... timezone="..."]``
    2. ``[date=YYYY-MM-DD time=HHMMSS timezone="..."]``
    3. The post creation time in the default zone.

    Args:
        config: Extraction config carrying the default zone and duration.
    """

    def __init__(self, config: ExtractionConfig | None = None):
        self._config = config or ExtractionConfig()
        self._default_zone = self._config.default_zone
        self._duration = self._config.default_duration

    @property
    def default_timezone(self) -> str:
        return self._config.default_timezone

    def resolve(self, raw: str, created_at: datetime | None) -> TemporalWindow | None:
        """
        Resolve the event window for a post.

        Args:
            raw: Post body text.
            created_at: Post creation time; naive values are taken as UTC.

        Returns:
            TemporalWindow, or None when no start can be derived at all
            (no usable tag and no creation time).
        """
        fallback_start = self._creation_time(created_at)

        text = raw or ""
        m = _DATE_RANGE_TAG.search(text)
        if m:
            return self._from_range(_parse_attributes(m.group("attrs")), fallback_start)

        m = _DATE_TAG.search(text)
        if m:
            window = self._from_date(m.group("date"), _parse_attributes(m.group("attrs")))
            if window is not None:
                return window
            logger.debug("Unusable date tag %r, falling back to creation time", m.group(0))

        if fallback_start is None:
            return None
        return TemporalWindow(
            start=fallback_start,
            end=fallback_start + self._duration,
            timezone=self.default_timezone,
        )

    def _creation_time(self, created_at: datetime | None) -> datetime | None:
        if created_at is None:
            return None
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return created_at.astimezone(self._default_zone)

    def _zone_for(self, name: str | None) -> tuple[tzinfo, str]:
        """Return the zone and zone name to use for a tag's timezone attribute."""
        if name:
            try:
                return ZoneInfo(name), name
            except (ZoneInfoNotFoundError, ValueError, OSError):
                logger.debug("Unknown timezone %r, using %s", name, self.default_timezone)
        return self._default_zone, self.default_timezone

    def _from_range(
        self, attrs: dict[str, str], fallback_start: datetime | None
    ) -> TemporalWindow | None:
        zone, tz_name = self._zone_for(attrs.get("timezone"))

        start = parse_datetime(attrs.get("from"), zone) or fallback_start
        if start is None:
            return None

        end = parse_datetime(attrs.get("to"), zone)
        if end is None or end < start:
            end = start + self._duration

        return TemporalWindow(start=start, end=end, timezone=tz_name)

    def _from_date(self, date_str: str, attrs: dict[str, str]) -> TemporalWindow | None:
        zone, tz_name = self._zone_for(attrs.get("timezone"))
        try:
            day = date.fromisoformat(date_str)
            hh, mm, ss = _split_time_digits(attrs.get("time"))
            start = datetime.combine(day, time(hh, mm, ss), tzinfo=zone)
        except ValueError:
            return None

        return TemporalWindow(start=start, end=start + self._duration, timezone=tz_name)
