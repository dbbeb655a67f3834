# dealscout/browser/interception.py

"""Request filtering for rendered fetches.

Blocking heavy assets and trackers keeps page loads fast and memory
flat when several platforms render at once. It is not a security
boundary.
"""

from urllib.parse import urlparse

from playwright.async_api import Route

from dealscout.config.settings import Settings


def should_block(resource_type: str, url: str) -> bool:
    """True when a request is a heavy asset or goes to a tracker host."""
    if resource_type in Settings.BLOCKED_RESOURCE_TYPES:
        return True
    host = urlparse(url).hostname or ""
    return any(
        host == tracker or host.endswith(f".{tracker}")
        for tracker in Settings.BLOCKED_TRACKER_HOSTS
    )


async def block_heavy_resources(route: Route) -> None:
    """Playwright route handler that aborts blocked requests."""
    request = route.request
    if should_block(request.resource_type, request.url):
        await route.abort()
    else:
        await route.continue_()
