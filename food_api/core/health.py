"""
core/health.py – HealthChecker class.
healthy ⇔ (one outbound URL answers 2xx within 3 s) and (SELECT 1 works).

Probe failures are reported in the body, never as an error status.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import httpx

from ..models import ServerHealth, ServerHealthDetails
from .config import APP_NAME, VERSION
from .errors import UpstreamFailure
from .store import FoodStore

logger = logging.getLogger(__name__)

CHECK_TIMEOUT_SECONDS = 3.0
REPORT_TZ = timezone(timedelta(hours=3))


class HealthChecker:

    def __init__(
        self,
        store: FoodStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        documentation: str = "",
        source_code: Optional[str] = None,
    ) -> None:
        self._store = store
        self._transport = transport
        self._documentation = documentation
        self._source_code = source_code

    async def check(self, urls: Iterable[str]) -> ServerHealth:
        internet = await self.check_internet(urls)
        database = await self._store.ping()
        return ServerHealth(
            name=APP_NAME,
            version=VERSION,
            status="healthy" if internet and database else "unhealthy",
            details=ServerHealthDetails(internet_connection=internet, database_functionality=database),
            documentation=self._documentation,
            source_code=self._source_code,
            last_updated=datetime.now(REPORT_TZ).isoformat(),
        )

    async def check_internet(self, urls: Iterable[str]) -> bool:
        """True on the first URL that answers 2xx; URLs are tried one by one."""
        async with httpx.AsyncClient(
            timeout=CHECK_TIMEOUT_SECONDS,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            for url in urls:
                try:
                    await self._probe(client, url)
                except UpstreamFailure as e:
                    logger.debug(f"Health probe failed: {e}")
                    continue
                return True
        return False

    @staticmethod
    async def _probe(client: httpx.AsyncClient, url: str) -> None:
        # httpx timeouts are per phase (connect, each read); the ceiling is for the whole request
        try:
            response = await asyncio.wait_for(client.get(url), CHECK_TIMEOUT_SECONDS)
        except asyncio.TimeoutError as e:
            raise UpstreamFailure(f"{url}: no answer within {CHECK_TIMEOUT_SECONDS}s") from e
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"{url}: {e!r}") from e
        if not response.is_success:
            raise UpstreamFailure(f"{url}: HTTP {response.status_code}")
