"""
Domain models for the response team dashboard.

Pure data classes with no dependencies on HTTP or the refresh machinery.
"""
from __future__ import annotations

import dataclasses
import enum
import math
from decimal import ROUND_HALF_UP, Decimal

from .const import IMAGE_SUFFIXES


def _round_half_up(value: float, step: str) -> Decimal:
    # Decimal(float) keeps the exact binary value, so 2.125 is a real tie
    return Decimal(value).quantize(Decimal(step), rounding=ROUND_HALF_UP)


@dataclasses.dataclass(frozen=True)
class Coordinate:
    """A WGS84 point. Rejects non-finite and out-of-range values."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        lat = float(self.latitude)
        lng = float(self.longitude)
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise ValueError(f"Coordinate must be finite, got ({self.latitude}, {self.longitude})")
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"Latitude out of range: {lat}")
        if not -180.0 <= lng <= 180.0:
            raise ValueError(f"Longitude out of range: {lng}")
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lng)

    def as_lng_lat(self) -> str:
        """Return "lng,lat" as used in directions URLs."""
        return f"{self.longitude},{self.latitude}"


class ReportKind(str, enum.Enum):
    EMERGENCY = "Emergency"
    COMPLAINT = "Complaint"


# ReportKind → upstream field carrying the report category text
_CATEGORY_FIELDS: dict[ReportKind, str] = {
    ReportKind.EMERGENCY: "EmergencyType",
    ReportKind.COMPLAINT: "ComplaintType",
}


@dataclasses.dataclass(frozen=True)
class Report:
    """A confirmed field report (emergency or complaint)."""

    id: str
    name: str
    address: str
    kind: ReportKind
    category: str
    location: Coordinate
    media_url: str | None = None

    @property
    def media_is_image(self) -> bool:
        """True when the attached media can be shown inline as a picture."""
        return bool(self.media_url) and self.media_url.endswith(IMAGE_SUFFIXES)

    @classmethod
    def from_api(cls, record: dict, kind: ReportKind, position: int) -> Report:
        """
        Build a Report from one upstream record.

        Records without an id get one derived from their kind and position in
        the upstream collection.

        Raises KeyError, TypeError or ValueError on malformed records.
        """
        if not isinstance(record, dict):
            raise TypeError(f"expected an object, got {record!r}")
        report_id = next(
            (record[key] for key in ("id", "_id") if record.get(key) not in (None, "")),
            f"{kind.value.lower()}-{position}",
        )
        return cls(
            id=str(report_id),
            name=record.get("Name") or "",
            address=record.get("Address") or "",
            kind=kind,
            category=record.get(_CATEGORY_FIELDS[kind]) or "",
            location=Coordinate(record["Latitude"], record["Longitude"]),
            media_url=record.get("MediaUrl") or None,
        )


@dataclasses.dataclass(frozen=True)
class Notification:
    id: str
    message: str

    @classmethod
    def from_api(cls, record: dict) -> Notification:
        return cls(id=str(record["id"]), message=str(record["message"]))


@dataclasses.dataclass(frozen=True)
class RouteDetails:
    """Distance and ETA shown next to a report."""

    distance_km: float
    duration_minutes: int


@dataclasses.dataclass(frozen=True)
class RouteResult:
    """A decoded driving route between the team and a report."""

    polyline: tuple[Coordinate, ...]
    distance_km: float
    duration_minutes: int

    @classmethod
    def from_provider_units(
        cls, polyline: tuple[Coordinate, ...], meters: float, seconds: float
    ) -> RouteResult:
        """Convert meters/seconds into kilometers (2 decimals) and whole minutes, ties rounding up."""
        return cls(
            polyline=tuple(polyline),
            distance_km=float(_round_half_up(meters / 1000, "0.01")),
            duration_minutes=int(_round_half_up(seconds / 60, "1")),
        )

    @property
    def details(self) -> RouteDetails:
        return RouteDetails(self.distance_km, self.duration_minutes)
