from datetime import date

import pytest
import requests

from lunch_calendar.linq_client import (
    FeedError,
    FeedErrorKind,
    LinqConnectClient,
    api_date,
    public_menu_url,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid = invalid

    def json(self):
        if self._invalid:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; records requested URLs."""

    def __init__(self, *responses):
        self.headers = {}
        self.urls = []
        self._responses = list(responses)

    def get(self, url, timeout=None):
        self.urls.append(url)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


LOOKUP = {"DistrictId": "d-1", "DistrictName": "ISD 194", "Buildings": [{"BuildingId": "b-1", "Name": "MS"}]}


def test_api_date_has_no_padding():
    assert api_date(date(2026, 2, 1)) == "2-1-2026"
    assert api_date(date(2025, 12, 31)) == "12-31-2025"


def test_public_menu_url():
    assert public_menu_url("YVAM38", "b-1") == "https://linqconnect.com/public/menu/YVAM38?buildingId=b-1"


class TestHeaders:
    def test_accept_json(self):
        session = FakeSession()
        LinqConnectClient(session=session)
        assert session.headers["Accept"] == "application/json"
        assert "User-Agent" not in session.headers

    def test_user_agent(self):
        session = FakeSession()
        LinqConnectClient(session=session, user_agent="Firefox/140")
        assert session.headers["User-Agent"] == "Firefox/140"


class TestFetch:
    def test_district_lookup(self):
        session = FakeSession(FakeResponse(payload=LOOKUP))
        lookup = LinqConnectClient(session=session).fetch_district_lookup("YVAM38")
        assert lookup.district_id == "d-1"
        assert session.urls == [
            "https://api.linqconnect.com/api/FamilyMenuIdentifier?identifier=YVAM38"
        ]

    def test_unknown_identifier(self):
        session = FakeSession(FakeResponse(payload={"DistrictId": None}))
        with pytest.raises(FeedError) as exc:
            LinqConnectClient(session=session).fetch_district_lookup("NOPE")
        assert exc.value.kind is FeedErrorKind.NOT_FOUND

    def test_allergen_catalog(self):
        session = FakeSession(FakeResponse(payload=[{"AllergyId": "milk", "Name": "Milk"}]))
        items = LinqConnectClient(session=session).fetch_allergen_catalog("d-1")
        assert [i.name for i in items] == ["Milk"]

    def test_allergen_catalog_not_a_list(self):
        session = FakeSession(FakeResponse(payload={"oops": True}))
        with pytest.raises(FeedError) as exc:
            LinqConnectClient(session=session).fetch_allergen_catalog("d-1")
        assert exc.value.kind is FeedErrorKind.DECODE_FAILED

    def test_menu_query(self):
        session = FakeSession(FakeResponse(payload={"FamilyMenuSessions": []}))
        feed = LinqConnectClient(session=session).fetch_menu(
            "b-1", "d-1", date(2026, 2, 1), date(2026, 2, 28)
        )
        assert feed.sessions == []
        url = session.urls[0]
        assert url.startswith("https://api.linqconnect.com/api/FamilyMenu?")
        assert "startDate=2-1-2026" in url
        assert "endDate=2-28-2026" in url
        assert "buildingId=b-1" in url


class TestErrors:
    def test_404(self):
        session = FakeSession(FakeResponse(status_code=404))
        with pytest.raises(FeedError) as exc:
            LinqConnectClient(session=session).fetch_allergen_catalog("d-1")
        assert exc.value.kind is FeedErrorKind.NOT_FOUND

    def test_server_error(self):
        session = FakeSession(FakeResponse(status_code=503))
        with pytest.raises(FeedError) as exc:
            LinqConnectClient(session=session).fetch_allergen_catalog("d-1")
        assert exc.value.kind is FeedErrorKind.FETCH_FAILED
        assert "503" in exc.value.message

    def test_network_error(self):
        session = FakeSession(requests.ConnectionError("connection refused"))
        with pytest.raises(FeedError) as exc:
            LinqConnectClient(session=session).fetch_district_lookup("YVAM38")
        assert exc.value.kind is FeedErrorKind.FETCH_FAILED

    def test_invalid_json(self):
        session = FakeSession(FakeResponse(invalid=True))
        with pytest.raises(FeedError) as exc:
            LinqConnectClient(session=session).fetch_district_lookup("YVAM38")
        assert exc.value.kind is FeedErrorKind.DECODE_FAILED

    def test_malformed_menu_structure(self):
        session = FakeSession(FakeResponse(payload={"FamilyMenuSessions": ["oops"]}))
        with pytest.raises(FeedError) as exc:
            LinqConnectClient(session=session).fetch_menu("b-1", "d-1", date(2026, 2, 1), date(2026, 2, 28))
        assert exc.value.kind is FeedErrorKind.DECODE_FAILED

    def test_malformed_allergen_sort_order(self):
        session = FakeSession(FakeResponse(payload=[{"AllergyId": "milk", "Name": "Milk", "SortOrder": "first"}]))
        with pytest.raises(FeedError) as exc:
            LinqConnectClient(session=session).fetch_allergen_catalog("d-1")
        assert exc.value.kind is FeedErrorKind.DECODE_FAILED

    def test_malformed_building_list(self):
        session = FakeSession(FakeResponse(payload={"DistrictId": "d-1", "Buildings": ["Kenwood"]}))
        with pytest.raises(FeedError) as exc:
            LinqConnectClient(session=session).fetch_district_lookup("YVAM38")
        assert exc.value.kind is FeedErrorKind.DECODE_FAILED

    def test_failures_are_not_cached(self):
        session = FakeSession(FakeResponse(status_code=500), FakeResponse(payload=LOOKUP))
        client = LinqConnectClient(session=session)
        with pytest.raises(FeedError):
            client.fetch_district_lookup("YVAM38")
        assert client.fetch_district_lookup("YVAM38").district_name == "ISD 194"
        assert len(session.urls) == 2


class TestCache:
    def test_hit_within_ttl(self):
        clock = FakeClock()
        session = FakeSession(FakeResponse(payload=LOOKUP))
        client = LinqConnectClient(session=session, cache_ttl=60, clock=clock)
        client.fetch_district_lookup("YVAM38")
        clock.now += 59
        client.fetch_district_lookup("YVAM38")
        assert len(session.urls) == 1

    def test_expired_entry_refetched(self):
        clock = FakeClock()
        session = FakeSession(FakeResponse(payload=LOOKUP), FakeResponse(payload=LOOKUP))
        client = LinqConnectClient(session=session, cache_ttl=60, clock=clock)
        client.fetch_district_lookup("YVAM38")
        clock.now += 60
        client.fetch_district_lookup("YVAM38")
        assert len(session.urls) == 2

    def test_different_urls_cached_separately(self):
        session = FakeSession(FakeResponse(payload=LOOKUP), FakeResponse(payload=LOOKUP))
        client = LinqConnectClient(session=session)
        client.fetch_district_lookup("YVAM38")
        client.fetch_district_lookup("ABC123")
        assert len(session.urls) == 2

    def test_clear_cache(self):
        session = FakeSession(FakeResponse(payload=LOOKUP), FakeResponse(payload=LOOKUP))
        client = LinqConnectClient(session=session)
        client.fetch_district_lookup("YVAM38")
        client.clear_cache()
        client.fetch_district_lookup("YVAM38")
        assert len(session.urls) == 2

    def test_prune_expired(self):
        clock = FakeClock()
        session = FakeSession(FakeResponse(payload=LOOKUP), FakeResponse(payload=[]))
        client = LinqConnectClient(session=session, cache_ttl=60, clock=clock)
        client.fetch_district_lookup("YVAM38")
        clock.now += 30
        client.fetch_allergen_catalog("d-1")
        clock.now += 31
        assert client.prune_expired() == 1
        assert client.prune_expired() == 0
