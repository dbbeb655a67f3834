# dealscout/services/health_checker.py

"""Platform connectivity health checker."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi.requests import AsyncSession

from dealscout.config.settings import Settings
from dealscout.scrapers.registry import PLATFORMS, PlatformConfig

logger = logging.getLogger("dealscout.health")


@dataclass
class HealthResult:
    """Result of a single platform health check."""

    platform: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


async def probe_platform(
    config: PlatformConfig,
    session: AsyncSession,
) -> HealthResult:
    """GET the platform homepage and classify the response."""
    start = time.monotonic()
    try:
        resp = await session.get(
            config.origin + "/",
            headers=Settings.DEFAULT_HEADERS,
            timeout=Settings.HEALTH_TIMEOUT,
        )
    except Exception as exc:
        return HealthResult(
            platform=config.name,
            status="down",
            latency_ms=(time.monotonic() - start) * 1000,
            message=str(exc)[:80],
        )

    elapsed_ms = (time.monotonic() - start) * 1000
    if resp.status_code != 200:
        return HealthResult(
            platform=config.name,
            status="down",
            latency_ms=elapsed_ms,
            message=f"HTTP {resp.status_code}",
        )
    if elapsed_ms > Settings.HEALTH_SLOW_MS:
        return HealthResult(
            platform=config.name,
            status="slow",
            latency_ms=elapsed_ms,
            message="High latency",
        )
    return HealthResult(
        platform=config.name,
        status="ok",
        latency_ms=elapsed_ms,
        message="JS rendering required" if config.requires_js else "",
    )


class HealthChecker:
    """Runs concurrent health probes against registered platforms."""

    def __init__(self, platforms: list[str] | None = None) -> None:
        names = platforms or list(PLATFORMS)
        self.configs = [PLATFORMS[n] for n in names if n in PLATFORMS]

    async def check_all(self) -> list[HealthResult]:
        """Probe every selected platform concurrently."""
        async with AsyncSession(
            impersonate=Settings.IMPERSONATE_BROWSER
        ) as session:
            results: list[HealthResult] = list(
                await asyncio.gather(
                    *(probe_platform(c, session) for c in self.configs)
                )
            )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.platform,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
