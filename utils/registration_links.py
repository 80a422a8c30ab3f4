"""Helpers for normalising aircraft identifiers and mapping them to gallery URLs."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote


PROVIDER_FLIGHTAWARE = "flightaware"
PROVIDER_PLANESPOTTERS = "planespotters"
DEFAULT_GALLERY_PROVIDER = PROVIDER_FLIGHTAWARE


_NULLISH_VALUES = {"", "null", "none"}
_HEX_PATTERN = re.compile(r"~?[0-9a-z]{1,16}")


_PROVIDER_GALLERY_URLS: dict[str, str] = {
    PROVIDER_FLIGHTAWARE: "https://www.flightaware.com/photos/aircraft/{registration}",
    PROVIDER_PLANESPOTTERS: "https://www.planespotters.net/photos/reg/{registration}",
}


def normalize_registration(value: Any) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip().upper()
    if not normalized:
        return None
    if normalized.lower() in _NULLISH_VALUES:
        return None
    return normalized


def normalize_hex(value: Any) -> str | None:
    """Lowercase hex address, or None when the value cannot key a sighting."""
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    if normalized in _NULLISH_VALUES:
        return None
    if not _HEX_PATTERN.fullmatch(normalized):
        return None
    return normalized


def resolve_registration_gallery_url(registration: object, provider: str | None = None) -> str | None:
    normalized = normalize_registration(registration)
    if not normalized:
        return None

    requested = (provider or "").strip().lower()
    provider_key = requested if requested in _PROVIDER_GALLERY_URLS else DEFAULT_GALLERY_PROVIDER
    template = _PROVIDER_GALLERY_URLS[provider_key]
    return template.format(registration=quote(normalized, safe=""))


def build_details_url(base: str | None, hex_code: object) -> str | None:
    """Tracker link for an aircraft, e.g. ``https://globe.airplanes.live/?icao=abc123``."""
    normalized = normalize_hex(hex_code)
    if not normalized or not base:
        return None
    return f"{base.strip()}{normalized}"
