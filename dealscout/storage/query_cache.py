# dealscout/storage/query_cache.py

"""In-memory key-value cache with per-entry TTL expiry."""

import hashlib
import json
import logging
import time
from dataclasses import dataclass

from dealscout.config.settings import Settings
from dealscout.models.listing import ProductListing

logger = logging.getLogger("dealscout.cache")


@dataclass
class CacheEntry:
    """A serialised value and the wall-clock time it stops being valid."""

    value: str
    expires_at: float


class QueryCache:
    """Pass-through read/write cache shared by concurrent platform scrapes.

    Keys never collide across platforms because search keys embed the
    platform id, so no locking is needed. Last write wins.
    """

    def __init__(self, default_ttl: float | None = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._default_ttl: float = (
            default_ttl or Settings.SEARCH_CACHE_TTL
        )

    @staticmethod
    def search_key(query: str, platform: str) -> str:
        """Key for a search result: ``{query-lowercased}:{platform}``."""
        return f"{query.strip().lower()}:{platform}"

    @staticmethod
    def content_hash(data: str | bytes) -> str:
        """SHA-256 hex digest, used for content-addressed entries."""
        raw = data.encode("utf-8") if isinstance(data, str) else data
        return hashlib.sha256(raw).hexdigest()

    def get(self, key: str) -> str | None:
        """Return the cached value, or ``None`` on miss or expiry."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if time.time() >= entry.expires_at:
            del self._entries[key]
            logger.debug("Cache entry expired: %s", key)
            return None
        return entry.value

    def set(self, key: str, value: str, ttl: float | None = None) -> None:
        """Store *value* for *ttl* seconds after sweeping expired entries."""
        lifetime = ttl if ttl is not None else self._default_ttl
        now = time.time()
        self._evict_expired(now)
        self._entries[key] = CacheEntry(value=value, expires_at=now + lifetime)

    def delete(self, key: str) -> bool:
        """Drop one entry; returns whether it existed."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Purge all cached entries.

        Returns the number of entries that were removed.
        """
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cache manually purged (%d entries removed)", count)
        return count

    def stats(self) -> dict[str, object]:
        """Size and live keys, for debugging."""
        self._evict_expired(time.time())
        return {
            "size": len(self._entries),
            "keys": sorted(self._entries),
        }

    # ── Listing helpers ──────────────────────────────────

    def get_listings(
        self, query: str, platform: str
    ) -> list[ProductListing] | None:
        """Rehydrate the cached listings for a search, if any."""
        raw = self.get(self.search_key(query, platform))
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            listings = [
                ProductListing.from_dict(item)
                for item in payload["products"]
            ]
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning(
                "Discarding unreadable cache entry for '%s' on %s: %s",
                query,
                platform,
                exc,
            )
            self.delete(self.search_key(query, platform))
            return None
        logger.info(
            "Cache hit for '%s' on %s (%d listings)",
            query,
            platform,
            len(listings),
        )
        return listings

    def store_listings(
        self,
        query: str,
        platform: str,
        listings: list[ProductListing],
        ttl: float | None = None,
    ) -> None:
        """Serialise and cache the listings found for a search."""
        payload = json.dumps(
            {"products": [item.to_dict() for item in listings]},
            ensure_ascii=False,
        )
        self.set(self.search_key(query, platform), payload, ttl)
        logger.info(
            "Cached %d results for '%s' on %s",
            len(listings),
            query,
            platform,
        )

    def _evict_expired(self, now: float) -> None:
        """Remove entries older than their TTL."""
        before = len(self._entries)
        self._entries = {
            key: entry
            for key, entry in self._entries.items()
            if now < entry.expires_at
        }
        evicted = before - len(self._entries)
        if evicted:
            logger.debug(
                "Evicted %d expired cache entries", evicted
            )
