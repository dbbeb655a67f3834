# dealscout/config/settings.py

"""Central configuration for the dealscout engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    """Read a float override from the environment."""
    raw = os.getenv(name)
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    """Read an int override from the environment."""
    raw = os.getenv(name)
    return int(raw) if raw else default


class Settings:
    """Central configuration for the dealscout engine."""

    # --- Static fetch ---
    REQUEST_TIMEOUT: int = _env_int("DEALSCOUT_REQUEST_TIMEOUT", 10)
    MAX_RETRIES: int = 3                # Retries after the first attempt
    RETRY_BASE_DELAY: float = 1.0       # Linear backoff unit (secs)
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Rendered fetch ---
    BROWSER_MODE: str = os.getenv("DEALSCOUT_BROWSER_MODE", "shared")
    NAVIGATION_TIMEOUT: float = _env_float(
        "DEALSCOUT_NAVIGATION_TIMEOUT", 30.0
    )
    SELECTOR_TIMEOUT: float = 5.0       # Non-fatal container wait
    SETTLE_DELAY: float = 2.0           # Let late XHR content land
    WORKER_TIMEOUT: float = 45.0        # Hard cap on an isolated worker
    SHUTDOWN_GRACE_PERIOD: float = 10.0
    BROWSER_ARGS: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
    ]
    BLOCKED_RESOURCE_TYPES: list[str] = [
        "image",
        "stylesheet",
        "font",
        "media",
    ]
    BLOCKED_TRACKER_HOSTS: list[str] = [
        "google-analytics.com",
        "googletagmanager.com",
        "doubleclick.net",
        "facebook.net",
        "hotjar.com",
        "scorecardresearch.com",
    ]

    # --- Cache ---
    SEARCH_CACHE_TTL: int = _env_int("DEALSCOUT_SEARCH_CACHE_TTL", 1800)
    ANALYSIS_CACHE_TTL: int = _env_int(
        "DEALSCOUT_ANALYSIS_CACHE_TTL", 3600
    )

    # --- Orchestration ---
    DEFAULT_MAX_RESULTS: int = 10
    QUICK_PLATFORMS: list[str] = ["jumia", "konga", "jiji"]
    QUICK_MAX_RESULTS: int = 4
    QUICK_TIMEOUT: float = 15.0

    # --- Deal ranking ---
    SCAM_FLAG_CUTOFF: int = 2
    SCAM_PRICE_STDDEV: float = 2.0
    SCAM_LOW_RATING: float = 2.0
    SCAM_MIN_REVIEWS_FOR_PERFECT: int = 5
    SUSPICIOUS_SELLER_KEYWORDS: list[str] = [
        "wholesale",
        "dropship",
        "replica",
        "fake",
        "copy",
        "imitation",
        "clone",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    DEFAULT_HEADERS: dict[str, str] = {
        "User-Agent": USER_AGENT,
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Health checks ---
    HEALTH_TIMEOUT: int = 10
    HEALTH_SLOW_MS: float = 5000.0

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv("DEALSCOUT_LOG_LEVEL", "WARNING")

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"
