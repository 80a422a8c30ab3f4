from __future__ import annotations

from typing import Any

import aiohttp
from loguru import logger


VARIANT_START = "start"
VARIANT_SUCCESS = "success"
VARIANT_FAIL = "fail"


class HealthcheckPinger:
    """Healthchecks.io pinger. Pings are best effort: failures are logged, never raised."""

    def __init__(self, ping_url: str | None, timeout_seconds: float = 10):
        self.ping_url = (ping_url or "").strip().rstrip("/") or None
        self.timeout_seconds = timeout_seconds

    @property
    def enabled(self) -> bool:
        return self.ping_url is not None

    def build_url(self, variant: str) -> str | None:
        if not self.ping_url:
            return None
        if variant == VARIANT_START:
            return f"{self.ping_url}/start"
        if variant == VARIANT_FAIL:
            return f"{self.ping_url}/fail"
        return self.ping_url

    async def _send(self, variant: str, payload: dict[str, Any] | None = None) -> bool:
        url = self.build_url(variant)
        if not url:
            return False

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                if payload:
                    request = session.post(url, json=payload)
                else:
                    request = session.get(url)
                async with request as response:
                    if response.status >= 400:
                        logger.warning(f"Healthchecks {variant} ping failed with HTTP {response.status}")
                        return False
            return True
        except Exception as e:
            logger.warning(f"Healthchecks {variant} ping threw: {e}")
            return False

    async def ping_start(self) -> bool:
        return await self._send(VARIANT_START)

    async def ping_success(self, payload: dict[str, Any] | None = None) -> bool:
        return await self._send(VARIANT_SUCCESS, payload)

    async def ping_failure(self, payload: dict[str, Any] | None = None) -> bool:
        return await self._send(VARIANT_FAIL, payload)
