"""Helpers that turn raw airplanes.live records into clean numbers and labels."""

from __future__ import annotations

import math
from typing import Any, Mapping


KNOTS_TO_MPH = 1.15078

COMPASS_POINTS = (
    "north",
    "northeast",
    "east",
    "southeast",
    "south",
    "southwest",
    "west",
    "northwest",
)

# Words kept upper case when display-casing operator names and descriptions.
ABBREVIATIONS = {"IAI", "II", "III", "LLC", "PHI", "PSA", "TT", "XLS", "USA", "US", "UK", "CAP"}
LOWERCASE_WORDS = {"of", "the", "and"}

_ALTITUDE_FIELDS = ("alt_baro", "alt_geom", "alt")
_SPEED_FIELDS = ("gs", "speed", "spd")
_TRACK_FIELDS = ("track", "trak", "dir", "true_heading", "mag_heading")


def parse_number(value: Any) -> float | None:
    """Return a finite float for numbers or numeric strings, otherwise None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return None
        try:
            parsed = float(candidate)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _first_number(raw: Mapping[str, Any], fields: tuple[str, ...]) -> float | None:
    for field in fields:
        parsed = parse_number(raw.get(field))
        if parsed is not None:
            return parsed
    return None


def resolve_altitude_ft(raw: Mapping[str, Any]) -> float | None:
    return _first_number(raw, _ALTITUDE_FIELDS)


def resolve_ground_speed_kt(raw: Mapping[str, Any]) -> float | None:
    return _first_number(raw, _SPEED_FIELDS)


def resolve_track(raw: Mapping[str, Any]) -> float | None:
    return _first_number(raw, _TRACK_FIELDS)


def is_grounded(raw: Mapping[str, Any]) -> bool:
    altitude = raw.get("alt_baro")
    return isinstance(altitude, str) and altitude.strip().lower() == "ground"


def is_above_ceiling(altitude_ft: float | None, ceiling_ft: float | None) -> bool:
    """A ceiling that is missing, non-finite or not positive disables the check."""
    if ceiling_ft is None or not math.isfinite(ceiling_ft) or ceiling_ft <= 0:
        return False
    return altitude_ft is not None and altitude_ft > ceiling_ft


def knots_to_mph(knots: float | None) -> int | None:
    if knots is None or not math.isfinite(knots):
        return None
    return round(knots * KNOTS_TO_MPH)


def bearing_to_compass(bearing: float | None) -> str | None:
    if bearing is None or isinstance(bearing, bool) or not math.isfinite(bearing):
        return None
    normalized = bearing % 360
    index = round(normalized / 45) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]


def format_feet(value: float) -> str:
    return f"{round(value):,}"


def get_carrier_code(flight: Any) -> str | None:
    """Three-letter carrier prefix of a callsign such as ``UAL123``."""
    if not isinstance(flight, str):
        return None
    callsign = flight.strip()
    if len(callsign) < 3:
        return None
    return callsign[:3].upper()


def format_display_name(value: Any) -> str | None:
    """Sentence-case an all-caps registry string ("CESSNA 172 SKYHAWK" -> "Cessna 172 Skyhawk")."""
    if not isinstance(value, str):
        return None
    cleaned = " ".join(value.replace("''", "'").split())
    if not cleaned:
        return None

    words = []
    for index, word in enumerate(cleaned.split(" ")):
        if word.upper() in ABBREVIATIONS:
            words.append(word.upper())
        elif index > 0 and word.lower() in LOWERCASE_WORDS:
            words.append(word.lower())
        elif any(char.isdigit() or char in "#@.-/&" for char in word):
            words.append(word)
        else:
            words.append(word[0].upper() + word[1:].lower())
    return " ".join(words)
