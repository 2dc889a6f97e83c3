"""Labeled field extraction from semi-structured post text.

Posts describe events with lines such as::

    **Location:** Discovery Green
    - Address: 1500 McKinney St, Houston, TX
    Visibility: Public

Each label is matched case-insensitively in either the bold-markup form
or the plain form, after stripping a leading "- " bullet. The first
matching line wins; later lines with the same label are ignored.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from src.event_extraction.schemas import ExtractedFields

logger = logging.getLogger(__name__)

_BULLET = re.compile(r"^-\s*")
_EVENT_DETAILS_HEADER = re.compile(
    r"^(?:\*\*event details\*\*|#*\s*event details:?$)", re.IGNORECASE
)

# Field name -> labels tried in order; the first label present wins.
FIELD_LABELS: dict[str, tuple[str, ...]] = {
    "visibility": ("Visibility",),
    "location_name": ("Location", "Location name"),
    "address": ("Address",),
    "city": ("City",),
    "state": ("State",),
    "zip": ("ZIP", "Zip"),
    "external_url": ("RSVP / More info", "URL"),
    "graphic_url": ("Graphic",),
}


@lru_cache(maxsize=64)
def _label_patterns(label: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    """Compile the bold and plain patterns for a label."""
    escaped = re.escape(label)
    bold = re.compile(rf"\*\*{escaped}:\*\*\s*(.+?)\s*$", re.IGNORECASE)
    plain = re.compile(rf"^{escaped}:\s*(.+?)\s*$", re.IGNORECASE)
    return bold, plain


def extract_field(raw: str, label: str) -> str | None:
    """
    Return the value of the first line labeled ``label``.

    Args:
        raw: Post body text.
        label: Field label without the trailing colon, e.g. "Address".

    Returns:
        The trimmed value, or None when no line carries the label.
    """
    if not raw:
        return None

    bold, plain = _label_patterns(label)
    for line in raw.splitlines():
        text = _BULLET.sub("", line.strip())

        m = bold.search(text) or plain.match(text)
        if m:
            return m.group(1).strip()
    return None


def extract_title(raw: str) -> str | None:
    """
    Return the first line usable as an event title.

    Blank lines, date tags and the "Event Details" header are skipped.
    Returns None when nothing qualifies; callers fall back to the topic title.
    """
    if not raw:
        return None

    for line in raw.splitlines():
        text = line.strip()
        if not text:
            continue
        if text.lower().startswith("[date"):
            continue
        if _EVENT_DETAILS_HEADER.match(text):
            continue
        return text
    return None


class FieldExtractor:
    """
    Stateless extractor for the fixed set of event fields.

    Args:
        field_labels: Field name -> ordered label aliases. Defaults to
            FIELD_LABELS.
    """

    def __init__(self, field_labels: dict[str, tuple[str, ...]] | None = None):
        self._field_labels = field_labels or FIELD_LABELS

    def extract_first(self, raw: str, labels: tuple[str, ...]) -> str | None:
        """Try each label alias in turn and return the first value found."""
        for label in labels:
            value = extract_field(raw, label)
            if value is not None:
                return value
        return None

    def extract(self, raw: str) -> ExtractedFields:
        """
        Extract every known field from a post body.

        Args:
            raw: Post body text.

        Returns:
            ExtractedFields with None for each label that is absent.
        """
        values = {
            name: self.extract_first(raw, labels)
            for name, labels in self._field_labels.items()
        }
        fields = ExtractedFields(title=extract_title(raw), **values)
        logger.debug("Extracted fields: %s", sorted(fields.to_dict()))
        return fields
