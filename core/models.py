from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Union

from utils.data_processing import (
    is_grounded,
    parse_number,
    resolve_altitude_ft,
    resolve_ground_speed_kt,
    resolve_track,
)
from utils.registration_links import normalize_hex, normalize_registration


def _clean_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


class AircraftSnapshot(BaseModel):
    """One feed observation. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    hex: Optional[str] = Field(None, description="Lowercase ICAO 24-bit address")
    flight: Optional[str] = None
    registration: Optional[str] = None
    aircraft_type: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    altitude_ft: Optional[float] = None
    ground_speed_kt: Optional[float] = None
    track: Optional[float] = None
    db_flags: int = 0
    operator: Optional[str] = None
    on_ground: bool = False
    observed_at: int = Field(..., description="Epoch milliseconds of the observation")

    raw: Dict[str, Any] = Field(default_factory=dict, description="Raw record from the feed")

    @classmethod
    def from_feed(cls, raw: Dict[str, Any], observed_at: int) -> "AircraftSnapshot":
        flags = parse_number(raw.get("dbFlags"))
        return cls(
            hex=normalize_hex(raw.get("hex")),
            flight=_clean_text(raw.get("flight")),
            registration=normalize_registration(raw.get("registration") or raw.get("r")),
            aircraft_type=_clean_text(raw.get("t")),
            description=_clean_text(raw.get("desc")),
            category=_clean_text(raw.get("category")),
            altitude_ft=resolve_altitude_ft(raw),
            ground_speed_kt=resolve_ground_speed_kt(raw),
            track=resolve_track(raw),
            db_flags=int(flags) if flags is not None and flags >= 0 else 0,
            operator=_clean_text(raw.get("ownOp")),
            on_ground=is_grounded(raw),
            observed_at=observed_at,
            raw=dict(raw),
        )

    @property
    def is_military(self) -> bool:
        return bool(self.db_flags & 1)

    @property
    def is_interesting(self) -> bool:
        return bool(self.db_flags & 2)


class SightingRecord(BaseModel):
    hex: str
    timestamps: List[Union[int, float]] = Field(default_factory=list)


class HistoryStats(BaseModel):
    total: int = 0
    last_hour: int = 0
    last_day: int = 0
    last_week: int = 0
    first_seen: Optional[float] = None
    last_seen: Optional[float] = None
    average_interval_ms: Optional[float] = None


class PhotoResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    image_url: str
    page_url: str
    source: str
    photographer: Optional[str] = None


class Attachment(BaseModel):
    url: str
    alt_text: Optional[str] = None
    page_url: Optional[str] = None
    source: Optional[str] = None


class NotificationMessage(BaseModel):
    title: Optional[str] = None
    body: str
    attachments: List[Attachment] = Field(default_factory=list)


class CycleSummary(BaseModel):
    aircraft_count: int = 0
    inspected: int = 0
    rejected: int = 0
    notified: int = 0
    tracking: int = 0
    elapsed_ms: int = 0
    skipped: bool = False
    persisted: bool = False
    error: Optional[str] = None
