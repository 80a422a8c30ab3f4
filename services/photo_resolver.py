"""
Locate an illustrative aircraft photo with caching and graceful fallbacks.

Lookup order:
  1. FlightAware gallery page (registration, og:image scrape)
  2. Planespotters API (hex first, registration retry when an API key is set)
"""

import asyncio
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp
import cloudscraper
from bs4 import BeautifulSoup
from loguru import logger

from core.models import PhotoResult
from utils.registration_links import (
    PROVIDER_FLIGHTAWARE,
    PROVIDER_PLANESPOTTERS,
    normalize_hex,
    normalize_registration,
    resolve_registration_gallery_url,
)

FLIGHTAWARE_BASE = "https://www.flightaware.com/photos/aircraft"
FLIGHTAWARE_SORT_SUFFIX = "/sort/date"
FLIGHTAWARE_PLACEHOLDER = "https://www.flightaware.com/images/og_default_image.png"

PLANESPOTTERS_PUBLIC_BASE = "https://api.planespotters.net/pub/photos"
PLANESPOTTERS_API_BASE = "https://api.planespotters.net/v1/photos"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def extract_og_image(html: Any) -> Optional[str]:
    if not isinstance(html, str) or not html:
        return None
    soup = BeautifulSoup(html, "lxml")
    tag = soup.find("meta", attrs={"property": "og:image"})
    if not tag:
        return None
    url = (tag.get("content") or "").strip()
    if not url or url == FLIGHTAWARE_PLACEHOLDER or url.endswith("/og_default_image.png"):
        return None
    return url


def _thumbnail_src(photo: Dict[str, Any], field: str) -> Optional[str]:
    thumbnail = photo.get(field)
    if isinstance(thumbnail, dict) and isinstance(thumbnail.get("src"), str):
        return thumbnail["src"].strip() or None
    return None


def parse_planespotters_payload(payload: Any, registration: Optional[str]) -> Optional[PhotoResult]:
    """First usable photo entry: an image (large thumbnail preferred) plus a page to link."""
    photos = payload.get("photos") if isinstance(payload, dict) else None
    if not isinstance(photos, list):
        return None

    for photo in photos:
        if not isinstance(photo, dict):
            continue

        image_url = _thumbnail_src(photo, "thumbnail_large") or _thumbnail_src(photo, "thumbnail")
        if not image_url:
            continue

        resolved_registration = registration or normalize_registration(photo.get("registration"))
        page_url = resolve_registration_gallery_url(resolved_registration, PROVIDER_PLANESPOTTERS)
        if not page_url and isinstance(photo.get("link"), str):
            page_url = photo["link"].strip() or None
        if not page_url:
            continue

        photographer = photo.get("photographer")
        return PhotoResult(
            image_url=image_url,
            page_url=page_url,
            source=PROVIDER_PLANESPOTTERS,
            photographer=photographer.strip() if isinstance(photographer, str) and photographer.strip() else None,
        )
    return None


class PhotoResolver:
    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout_seconds: float = 10,
        user_agent: str = DEFAULT_USER_AGENT,
        enabled: bool = True,
    ):
        self.api_key = api_key or None
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.enabled = enabled
        # Unbounded for the process lifetime.
        self._results: Dict[str, Optional[PhotoResult]] = {}
        self._flightaware: Dict[str, Optional[str]] = {}
        self._planespotters: Dict[str, Optional[PhotoResult]] = {}

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PhotoResolver":
        photos = config.get("photos", {}) or {}
        return cls(
            api_key=photos.get("planespotters_api_key"),
            timeout_seconds=photos.get("request_timeout_seconds", 10),
            user_agent=photos.get("user_agent") or DEFAULT_USER_AGENT,
            enabled=bool(photos.get("enabled", True)),
        )

    # -- FlightAware --------------------------------------------------------

    def _scrape_flightaware(self, registration: str) -> Optional[str]:
        url = f"{FLIGHTAWARE_BASE}/{quote(registration, safe='')}{FLIGHTAWARE_SORT_SUFFIX}"
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": "en-US,en;q=0.9",
        }
        scraper = cloudscraper.create_scraper()
        response = scraper.get(url, headers=headers, timeout=self.timeout_seconds)
        if response.status_code != 200:
            logger.debug(f"FlightAware returned HTTP {response.status_code} for {registration}")
            return None
        return extract_og_image(response.text)

    async def _fetch_flightaware(self, registration: str) -> Optional[str]:
        if registration in self._flightaware:
            return self._flightaware[registration]
        try:
            image_url = await asyncio.to_thread(self._scrape_flightaware, registration)
        except Exception as e:
            logger.warning(f"Failed to fetch FlightAware photo for {registration}: {e}")
            image_url = None
        self._flightaware[registration] = image_url
        return image_url

    # -- Planespotters ------------------------------------------------------

    async def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Optional[Any]:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        headers = {"Accept": "application/json", "User-Agent": self.user_agent}
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url, headers=headers, params=params) as response:
                if response.status != 200:
                    logger.debug(f"Planespotters returned HTTP {response.status} for {url}")
                    return None
                return await response.json(content_type=None)

    async def _fetch_planespotters_by(
        self, lookup: str, value: str, registration: Optional[str]
    ) -> Optional[PhotoResult]:
        cache_key = f"{lookup}:{value}"
        if cache_key in self._planespotters:
            return self._planespotters[cache_key]

        base = PLANESPOTTERS_API_BASE if self.api_key else PLANESPOTTERS_PUBLIC_BASE
        url = f"{base}/{lookup}/{quote(value, safe='')}"
        params = {"api_key": self.api_key} if self.api_key else None
        try:
            payload = await self._get_json(url, params=params)
            photo = parse_planespotters_payload(payload, registration)
        except Exception as e:
            logger.warning(f"Failed to fetch Planespotters photo for {lookup} {value}: {e}")
            photo = None

        self._planespotters[cache_key] = photo
        return photo

    async def _fetch_planespotters(self, hex_code: Optional[str], registration: Optional[str]) -> Optional[PhotoResult]:
        photo = None
        if hex_code:
            photo = await self._fetch_planespotters_by("hex", hex_code, registration)
        if photo is None and self.api_key and registration:
            photo = await self._fetch_planespotters_by("reg", registration, registration)
        return photo

    # -- Public -------------------------------------------------------------

    async def resolve(self, hex: Any = None, registration: Any = None) -> Optional[PhotoResult]:
        """Best available photo for the aircraft, or None. Never raises."""
        if not self.enabled:
            return None

        normalized_registration = normalize_registration(registration)
        normalized_hex = normalize_hex(hex)

        cache_keys: List[str] = []
        if normalized_registration:
            cache_keys.append(f"reg:{normalized_registration}")
        if normalized_hex:
            cache_keys.append(f"hex:{normalized_hex}")

        for key in cache_keys:
            if key in self._results:
                return self._results[key]

        result = None
        try:
            if normalized_registration:
                image_url = await self._fetch_flightaware(normalized_registration)
                if image_url:
                    result = PhotoResult(
                        image_url=image_url,
                        page_url=resolve_registration_gallery_url(normalized_registration, PROVIDER_FLIGHTAWARE),
                        source=PROVIDER_FLIGHTAWARE,
                    )

            if result is None:
                result = await self._fetch_planespotters(normalized_hex, normalized_registration)
        except Exception as e:
            logger.error(f"Photo lookup failed for {normalized_registration or normalized_hex}: {e}")
            result = None

        for key in cache_keys:
            self._results[key] = result

        if result:
            logger.success(f"Photo found for {normalized_registration or normalized_hex} via {result.source}")
        return result
