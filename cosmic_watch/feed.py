"""
Near-Earth object feed client.

Two data sources share one interface: ``LiveNeoSource`` talks to NASA's
NeoWs service and ``FixtureNeoSource`` serves the fixed fallback dataset.
``FeedClient`` scores, sorts and caches whatever the source returns, and
masks live failures with the fixture data when a fallback is configured.
"""

import logging
import time
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from cosmic_watch import fixtures
from cosmic_watch.config import Settings
from cosmic_watch.models import NearEarthObject
from cosmic_watch.risk import score_object

logger = logging.getLogger("cosmic_watch.feed")

FEED_WINDOW_DAYS = 7
FEED_CACHE_KEY = "feed"


class FeedError(Exception):
    """Base class for feed failures."""


class FeedUnavailable(FeedError):
    """The data source could not be reached or answered with an error."""


class NeoNotFound(FeedError):
    """No object with the requested id exists in the source."""

    def __init__(self, neo_id: str):
        super().__init__(f"Object {neo_id} not found")
        self.neo_id = neo_id


# === CACHE ===

class TTLCache:
    """Key to (payload, timestamp) mapping with a freshness window.

    Entries are never evicted, only overwritten.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        payload, stored_at = entry
        if self._clock() - stored_at < self.ttl:
            return payload
        return None

    def set(self, key: str, payload: Any) -> None:
        self._entries[key] = (payload, self._clock())


def object_cache_key(neo_id: str) -> str:
    return f"object:{neo_id}"


# === DATA SOURCES ===

class NeoSource:
    """Where raw NeoWs-shaped records come from."""

    name = "abstract"

    async def feed(self, start_date: str, end_date: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def lookup(self, neo_id: str) -> Dict[str, Any]:
        raise NotImplementedError


class LiveNeoSource(NeoSource):
    """Client for NASA's Near Earth Object Web Service."""

    name = "live"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def _get(self, endpoint: str, params: Optional[dict] = None) -> dict:
        params = dict(params or {})
        params["api_key"] = self.api_key
        url = f"{self.base_url}/{endpoint}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()

    async def feed(self, start_date: str, end_date: str) -> List[Dict[str, Any]]:
        """Retrieve the feed for a date range, flattened across dates."""
        try:
            data = await self._get("feed", {"start_date": start_date, "end_date": end_date})
        except httpx.HTTPStatusError as e:
            raise FeedUnavailable(f"NeoWs feed returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FeedUnavailable(f"NeoWs feed request failed: {e}") from e

        records = []
        for day in data["near_earth_objects"]:
            records.extend(data["near_earth_objects"][day])
        return records

    async def lookup(self, neo_id: str) -> Dict[str, Any]:
        """Look up one object by id."""
        try:
            return await self._get(f"neo/{neo_id}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise NeoNotFound(neo_id) from e
            raise FeedUnavailable(f"NeoWs lookup returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FeedUnavailable(f"NeoWs lookup request failed: {e}") from e


class FixtureNeoSource(NeoSource):
    """Serves the fixed fallback dataset regardless of dates."""

    name = "fixture"

    async def feed(self, start_date: str, end_date: str) -> List[Dict[str, Any]]:
        return fixtures.fallback_records()

    async def lookup(self, neo_id: str) -> Dict[str, Any]:
        try:
            return fixtures.fallback_record(neo_id)
        except KeyError:
            raise NeoNotFound(neo_id)

    def has(self, neo_id: str) -> bool:
        return neo_id in fixtures.FALLBACK_IDS


# Errors that the fallback masks: transport failures and malformed payloads
_MASKED_ERRORS = (FeedError, httpx.HTTPError, KeyError, TypeError, ValueError, ValidationError)


# === CLIENT ===

def _score_all(records: List[Dict[str, Any]]) -> List[NearEarthObject]:
    scored = [score_object(NearEarthObject.model_validate(record)) for record in records]
    scored.sort(key=lambda neo: neo.risk_score, reverse=True)
    return scored


class FeedClient:
    """Scored, sorted and cached access to a ``NeoSource``."""

    def __init__(
        self,
        source: NeoSource,
        cache: TTLCache,
        fallback: Optional[FixtureNeoSource] = None,
        today: Callable[[], date] = date.today,
    ):
        self.source = source
        self.cache = cache
        self.fallback = fallback
        self._today = today

    def feed_window(self) -> Tuple[str, str]:
        start = self._today()
        end = start + timedelta(days=FEED_WINDOW_DAYS)
        return start.isoformat(), end.isoformat()

    async def fetch_feed(self) -> List[NearEarthObject]:
        """Objects approaching from today through the next 7 days, riskiest first."""
        cached = self.cache.get(FEED_CACHE_KEY)
        if cached is not None:
            logger.debug("Cache hit for feed")
            return cached

        start_date, end_date = self.feed_window()
        try:
            objects = _score_all(await self.source.feed(start_date, end_date))
            logger.info(f"Feed retrieved from {self.source.name}: {len(objects)} objects for {start_date} to {end_date}")
        except _MASKED_ERRORS as e:
            if self.fallback is None:
                raise
            logger.error(f"Error fetching NEO feed, using fallback data: {e}")
            objects = _score_all(await self.fallback.feed(start_date, end_date))

        self.cache.set(FEED_CACHE_KEY, objects)
        return objects

    async def fetch_one(self, neo_id: str) -> NearEarthObject:
        """One object by id. Raises NeoNotFound or FeedUnavailable when it cannot be served."""
        key = object_cache_key(neo_id)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        try:
            neo = score_object(NearEarthObject.model_validate(await self.source.lookup(neo_id)))
        except _MASKED_ERRORS as e:
            logger.error(f"Error fetching object {neo_id}: {e}")
            if self.fallback is None or not self.fallback.has(neo_id):
                raise
            neo = score_object(NearEarthObject.model_validate(await self.fallback.lookup(neo_id)))

        self.cache.set(key, neo)
        return neo


def build_feed_client(settings: Settings) -> FeedClient:
    """Assemble the client the settings ask for."""
    cache = TTLCache(settings.cache_ttl)

    if settings.data_source == "fixture":
        return FeedClient(FixtureNeoSource(), cache)

    source = LiveNeoSource(settings.nasa_base_url, settings.nasa_api_key, timeout=settings.http_timeout)
    fallback = FixtureNeoSource() if settings.feed_fallback else None
    return FeedClient(source, cache, fallback=fallback)
