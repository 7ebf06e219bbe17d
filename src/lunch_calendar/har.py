"""Load menu data from a browser network capture (HAR file) for offline use."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from lunch_calendar.feed import parse_allergen_catalog, parse_district_lookup, parse_menu_feed
from lunch_calendar.linq_client import FeedError, FeedErrorKind
from lunch_calendar.models import AllergyItem, DistrictLookup, MenuFeed

logger = logging.getLogger(__name__)


@dataclass
class CaptureResult:
    feed: MenuFeed
    allergens: list[AllergyItem]
    district: DistrictLookup
    user_agent: str | None = None


def _body_text(entry: dict) -> str | None:
    content = entry.get("response", {}).get("content", {})
    text = content.get("text")
    if not text:
        return None
    if content.get("encoding") == "base64":
        try:
            return base64.b64decode(text).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None
    return text


def _user_agent(request: dict) -> str | None:
    for header in request.get("headers") or []:
        if str(header.get("name", "")).lower() == "user-agent":
            return header.get("value") or None
    return None


def parse_capture(text: str) -> CaptureResult:
    """Extract the menu, allergen catalog and district lookup from HAR JSON.

    The first matching response of each kind wins. A body that fails to
    decode is logged and skipped so a later matching entry can be used.
    """
    try:
        entries = json.loads(text)["log"]["entries"]
    except (ValueError, KeyError, TypeError) as e:
        raise FeedError(FeedErrorKind.DECODE_FAILED, f"Not a HAR document: {e}") from e

    feed: MenuFeed | None = None
    allergens: list[AllergyItem] | None = None
    district: DistrictLookup | None = None
    user_agent: str | None = None

    for entry in entries:
        request = entry.get("request", {})
        url = request.get("url", "")

        if user_agent is None and "linqconnect.com" in url.lower():
            user_agent = _user_agent(request)
            if user_agent:
                logger.info("Using User-Agent from capture: %s", user_agent)

        body = _body_text(entry)
        if body is None:
            continue

        try:
            if feed is None and "FamilyMenu?" in url and "startDate" in url:
                feed = parse_menu_feed(json.loads(body))
                logger.info("Parsed FamilyMenu response (%d chars)", len(body))
            elif allergens is None and "FamilyAllergy" in url and "districtId" in url:
                allergens = parse_allergen_catalog(json.loads(body))
                logger.info("Parsed FamilyAllergy response with %d allergens", len(allergens))
            elif district is None and "FamilyMenuIdentifier" in url:
                district = parse_district_lookup(json.loads(body))
                logger.info("Parsed FamilyMenuIdentifier response for %s", district.district_name)
        except (ValueError, AttributeError, TypeError) as e:
            logger.warning("Skipping unreadable capture entry %s: %s", url, e)

    if feed is None:
        raise FeedError(FeedErrorKind.NOT_FOUND, "Capture does not contain a FamilyMenu response")
    if allergens is None:
        raise FeedError(FeedErrorKind.NOT_FOUND, "Capture does not contain a FamilyAllergy response")
    if district is None:
        raise FeedError(FeedErrorKind.NOT_FOUND, "Capture does not contain a FamilyMenuIdentifier response")

    return CaptureResult(feed=feed, allergens=allergens, district=district, user_agent=user_agent)


def load_capture(path: Path) -> CaptureResult:
    logger.info("Loading capture from %s", path)
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise FeedError(FeedErrorKind.FETCH_FAILED, f"Cannot read {path}: {e}") from e
    return parse_capture(text)
