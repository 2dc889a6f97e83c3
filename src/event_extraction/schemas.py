"""Schema definitions for values pulled out of post text.

Provides the ExtractedFields dataclass (labeled values found in a post)
and TemporalWindow (resolved start/end/timezone).
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any


@dataclass
class ExtractedFields:
    """
    Labeled values found in a post body.

    A field is None when its label does not appear in the text, which
    is distinct from an empty string. Values are already trimmed.

    Attributes:
        title: First content line of the post (not a date tag or header).
        visibility: Raw "Visibility:" value, e.g. "Public".
        location_name: Venue name ("Location:" or "Location name:").
        address: Street address.
        city: City name.
        state: State or region.
        zip: Postal code.
        external_url: RSVP / more-info link.
        graphic_url: Flyer or image link.
    """

    title: str | None = None
    visibility: str | None = None
    location_name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    external_url: str | None = None
    graphic_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary, keeping only the labels that were found."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class TemporalWindow:
    """
    Resolved start/end instants of an event.

    Attributes:
        start: Timezone-aware start instant.
        end: Timezone-aware end instant, never before start.
        timezone: IANA name of the zone the times were resolved in.
    """

    start: datetime
    end: datetime
    timezone: str

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TemporalWindow requires timezone-aware datetimes")
        if self.end < self.start:
            raise ValueError(
                f"TemporalWindow end {self.end.isoformat()} precedes start "
                f"{self.start.isoformat()}"
            )
