import aiohttp
from typing import List, Dict, Any, Optional, Callable
from loguru import logger
from core.clock import Clock, SystemClock
from core.interfaces import FeedSource, FeedUnavailableError
from core.models import AircraftSnapshot

DEFAULT_BASE_URL = "https://api.airplanes.live/v2"


class AirplanesLiveClient(FeedSource):
    def __init__(
        self,
        latitude: float,
        longitude: float,
        radius: float,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10,
        user_agent: Optional[str] = None,
        clock: Optional[Clock] = None,
        session_factory: Optional[Callable[..., aiohttp.ClientSession]] = None,
    ):
        self.latitude = latitude
        self.longitude = longitude
        self.radius = radius
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.clock = clock or SystemClock()
        self.session_factory = session_factory or aiohttp.ClientSession

    @classmethod
    def from_config(cls, config: Dict[str, Any], clock: Optional[Clock] = None) -> "AirplanesLiveClient":
        feed = config["feed"]
        return cls(
            latitude=feed["latitude"],
            longitude=feed["longitude"],
            radius=feed["radius"],
            base_url=feed.get("base_url", DEFAULT_BASE_URL),
            timeout_seconds=feed.get("request_timeout_seconds", 10),
            user_agent=feed.get("user_agent"),
            clock=clock,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/point/{self.latitude}/{self.longitude}/{self.radius}"

    async def fetch_raw(self) -> List[Dict[str, Any]]:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with self.session_factory(timeout=timeout) as session:
                async with session.get(self.url, headers=headers) as response:
                    if response.status != 200:
                        body = await response.text()
                        raise FeedUnavailableError(f"airplanes.live returned HTTP {response.status}: {body[:200]}")
                    payload = await response.json(content_type=None)
        except FeedUnavailableError:
            raise
        except Exception as e:
            raise FeedUnavailableError(f"airplanes.live request failed: {e}") from e

        aircraft = payload.get("ac") if isinstance(payload, dict) else None
        if not isinstance(aircraft, list):
            raise FeedUnavailableError("airplanes.live payload has no 'ac' list")
        return [entry for entry in aircraft if isinstance(entry, dict)]

    async def fetch_aircraft(self) -> List[AircraftSnapshot]:
        raw_aircraft = await self.fetch_raw()
        observed_at = self.clock.now()
        snapshots = [AircraftSnapshot.from_feed(raw, observed_at) for raw in raw_aircraft]
        logger.debug(f"Fetched {len(snapshots)} aircraft within {self.radius} nm of {self.latitude},{self.longitude}")
        return snapshots
