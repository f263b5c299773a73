"""
Backend liveness probe.

Advisory only: callers use it to decide up front whether to go straight to
fallback mode. It never raises.
"""

import logging

import aiohttp

from deepguard.config import settings
from deepguard.integrations import http_client as http_module

logger = logging.getLogger(__name__)


class AvailabilityProbe:
    def __init__(self, path: str = "/health"):
        self.path = path

    async def check(self, base_url: str, timeout_ms: int = settings.probe_timeout_ms) -> bool:
        url = f"{base_url}{self.path}"
        try:
            url = f"{base_url.rstrip('/')}{self.path}"
            timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000.0)
            async with http_module.request_session() as sess:
                async with sess.get(url, timeout=timeout) as response:
                    available = 200 <= response.status < 300
        except Exception as e:
            logger.warning(f"[PROBE] {url} is not available: {e!r}")
            return False

        if not available:
            logger.warning(f"[PROBE] {url} answered {response.status}")
        return available
