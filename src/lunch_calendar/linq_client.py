"""HTTP client for the LINQ Connect family menu API."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import date
from enum import Enum
from typing import Any, TypeVar

import requests

from lunch_calendar.feed import parse_allergen_catalog, parse_district_lookup, parse_menu_feed
from lunch_calendar.models import AllergyItem, DistrictLookup, MenuFeed

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.linqconnect.com/api"
PUBLIC_MENU_URL = "https://linqconnect.com/public/menu"
DEFAULT_CACHE_TTL = 3600
REQUEST_TIMEOUT = 30

T = TypeVar("T")


class FeedErrorKind(Enum):
    FETCH_FAILED = "fetch-failed"
    DECODE_FAILED = "decode-failed"
    NOT_FOUND = "not-found"


class FeedError(Exception):
    """A feed, catalog, or lookup request that could not be satisfied."""

    def __init__(self, kind: FeedErrorKind, message: str):
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.message = message


def api_date(d: date) -> str:
    """Format a date the way the API query string expects (M-d-yyyy)."""
    return f"{d.month}-{d.day}-{d.year}"


def public_menu_url(identifier: str, building_id: str) -> str:
    return f"{PUBLIC_MENU_URL}/{identifier}?buildingId={building_id}"


def _decode(parse: Callable[[Any], T], data: Any, endpoint: str) -> T:
    """Run a body parser, reporting a malformed structure as a decode failure."""
    try:
        return parse(data)
    except (AttributeError, TypeError, ValueError) as e:
        logger.error("Unexpected %s response structure: %s", endpoint, e)
        raise FeedError(FeedErrorKind.DECODE_FAILED, f"{endpoint} response has an unexpected structure") from e


class LinqConnectClient:
    """Fetches menu data, caching each decoded response body by URL.

    Failures raise :class:`FeedError` and are never retried.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        user_agent: str | None = None,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session or requests.Session()
        self.cache_ttl = cache_ttl
        self._clock = clock
        self._cache: dict[str, tuple[Any, float]] = {}
        self.session.headers["Accept"] = "application/json"
        if user_agent:
            self.session.headers["User-Agent"] = user_agent

    def fetch_district_lookup(self, identifier: str) -> DistrictLookup:
        logger.info("Looking up district for identifier %s", identifier)
        data = self._get_json("FamilyMenuIdentifier", {"identifier": identifier})
        if not isinstance(data, dict) or not data.get("DistrictId"):
            raise FeedError(FeedErrorKind.NOT_FOUND, f"No district found for identifier {identifier!r}")
        return _decode(parse_district_lookup, data, "FamilyMenuIdentifier")

    def fetch_allergen_catalog(self, district_id: str) -> list[AllergyItem]:
        logger.info("Fetching allergen catalog for district %s", district_id)
        data = self._get_json("FamilyAllergy", {"districtId": district_id})
        if not isinstance(data, list):
            raise FeedError(FeedErrorKind.DECODE_FAILED, "Allergen catalog is not a list")
        return _decode(parse_allergen_catalog, data, "FamilyAllergy")

    def fetch_menu(self, building_id: str, district_id: str, start: date, end: date) -> MenuFeed:
        logger.info("Fetching menu for building %s from %s to %s", building_id, start, end)
        params = {
            "buildingId": building_id,
            "districtId": district_id,
            "startDate": api_date(start),
            "endDate": api_date(end),
        }
        data = self._get_json("FamilyMenu", params)
        if not isinstance(data, dict):
            raise FeedError(FeedErrorKind.DECODE_FAILED, "Menu response is not an object")
        return _decode(parse_menu_feed, data, "FamilyMenu")

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("Response cache cleared")

    def prune_expired(self) -> int:
        """Drop expired cache entries; returns how many were removed."""
        now = self._clock()
        expired = [url for url, (_, expires_at) in self._cache.items() if expires_at <= now]
        for url in expired:
            del self._cache[url]
        if expired:
            logger.debug("Pruned %d expired cache entries", len(expired))
        return len(expired)

    def _get_json(self, endpoint: str, params: dict[str, str]) -> Any:
        url = requests.Request("GET", f"{API_BASE_URL}/{endpoint}", params=params).prepare().url

        cached = self._cache.get(url)
        if cached is not None:
            data, expires_at = cached
            if expires_at > self._clock():
                logger.debug("Cache hit: %s", url)
                return data
            logger.debug("Cache expired: %s", url)
            del self._cache[url]

        logger.debug("Cache miss, fetching %s", url)
        try:
            response = self.session.get(url, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            logger.error("Request failed for %s: %s", url, e)
            raise FeedError(FeedErrorKind.FETCH_FAILED, str(e)) from e

        if response.status_code == 404:
            raise FeedError(FeedErrorKind.NOT_FOUND, f"{endpoint} returned 404")
        if not 200 <= response.status_code < 300:
            logger.error("HTTP %d for %s", response.status_code, url)
            raise FeedError(FeedErrorKind.FETCH_FAILED, f"{endpoint} returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Could not decode response from %s: %s", url, e)
            raise FeedError(FeedErrorKind.DECODE_FAILED, f"{endpoint} returned invalid JSON") from e

        self._cache[url] = (data, self._clock() + self.cache_ttl)
        return data
