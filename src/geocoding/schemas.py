"""Coordinate types and the validation predicates applied before trusting them."""

from dataclasses import dataclass
from typing import Any


def coerce_coordinate(value: Any) -> float | None:
    """
    Coerce a provider coordinate value to float.

    None, blank strings, exact zero and unparseable values are treated as
    absent: providers use 0/"0" as a "no match" sentinel, so a literal
    Equator or Prime Meridian value is never trusted.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if number == 0.0 or number != number:  # zero sentinel or NaN
        return None
    return number


def is_valid_coordinate(lat: float | None, lng: float | None) -> bool:
    """Both parts present and within [-90, 90] / [-180, 180]."""
    if lat is None or lng is None:
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


@dataclass(frozen=True)
class GeoCoordinate:
    """A validated latitude/longitude pair."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not is_valid_coordinate(self.lat, self.lng):
            raise ValueError(f"Invalid coordinate: lat={self.lat!r}, lng={self.lng!r}")

    @classmethod
    def from_raw(cls, raw_lat: Any, raw_lng: Any) -> "GeoCoordinate | None":
        """
        Build a coordinate from untrusted provider values.

        Returns:
            GeoCoordinate, or None unless both values coerce and are in range.
        """
        lat = coerce_coordinate(raw_lat)
        lng = coerce_coordinate(raw_lng)
        if not is_valid_coordinate(lat, lng):
            return None
        return cls(lat=lat, lng=lng)


@dataclass(frozen=True)
class BoundingBox:
    """Rectangular lat/lng region used as a plausibility filter."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def __post_init__(self) -> None:
        if self.min_lat > self.max_lat or self.min_lng > self.max_lng:
            raise ValueError(f"Inverted bounding box: {self}")

    def contains(self, coordinate: GeoCoordinate) -> bool:
        """True when the coordinate lies inside the box (edges inclusive)."""
        return (
            self.min_lat <= coordinate.lat <= self.max_lat
            and self.min_lng <= coordinate.lng <= self.max_lng
        )
