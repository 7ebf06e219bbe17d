import json
from datetime import date, datetime

import pytest

from lunch_calendar import generate
from lunch_calendar.generate import (
    GenerationRunner,
    build_calendar,
    format_allergens_table,
    month_bounds,
    past_day_cutoff,
    pick_building,
    resolve_allergens,
    resolve_theme,
    run_allergens,
    run_generate,
    run_lookup,
)
from lunch_calendar.linq_client import FeedError, FeedErrorKind
from lunch_calendar.models import (
    AllergyItem,
    Building,
    CalendarRenderOptions,
    DistrictLookup,
)
from lunch_calendar.themes import DEFAULT_THEME

CATALOG = [AllergyItem("milk-uuid", "Milk", 1), AllergyItem("egg-uuid", "Egg", 2)]
DISTRICT = DistrictLookup(
    district_id="d-1",
    district_name="ISD 194",
    identifier="YVAM38",
    buildings=[Building("b-1", "Kenwood Trail MS"), Building("b-2", "Lakeville North HS")],
)


def _recipes(*pairs):
    return [{"RecipeName": name, "Allergens": allergens} for name, allergens in pairs]


def _capture_entry(url, body):
    return {"request": {"url": url, "headers": []}, "response": {"content": {"text": json.dumps(body)}}}


@pytest.fixture
def har_file(tmp_path):
    menu = {
        "FamilyMenuSessions": [
            {
                "ServingSession": "Lunch",
                "MenuPlans": [
                    {
                        "MenuPlanName": "Lunch - MS",
                        "Days": [
                            {
                                "Date": f"2/{day}/2026",
                                "MenuMeals": [{"RecipeCategories": [
                                    {"CategoryName": "Entree", "IsEntree": True, "Recipes": _recipes(*recipes)}
                                ]}],
                            }
                            for day, recipes in [
                                (2, [("Pizza", [])]),
                                (3, [("Mac and Cheese", ["milk-uuid"])]),
                            ]
                        ],
                    }
                ],
            }
        ],
        "AcademicCalendars": [{"Days": [{"Date": "2/16/2026", "Note": "Presidents Day - No School"}]}],
    }
    lookup = {
        "DistrictId": "d-1",
        "DistrictName": "ISD 194",
        "Identifier": "YVAM38",
        "Buildings": [{"BuildingId": "b-1", "Name": "Kenwood Trail MS"}],
    }
    allergy = [{"AllergyId": "milk-uuid", "Name": "Milk", "SortOrder": 1}]
    capture = {"log": {"entries": [
        _capture_entry("https://api.linqconnect.com/api/FamilyMenuIdentifier?identifier=YVAM38", lookup),
        _capture_entry("https://api.linqconnect.com/api/FamilyAllergy?districtId=d-1", allergy),
        _capture_entry(
            "https://api.linqconnect.com/api/FamilyMenu?buildingId=b-1&districtId=d-1"
            "&startDate=2-1-2026&endDate=2-28-2026",
            menu,
        ),
    ]}}
    path = tmp_path / "menu.har"
    path.write_text(json.dumps(capture), encoding="utf-8")
    return path


class FailingClient:
    def __init__(self, user_agent=None):
        pass

    def fetch_district_lookup(self, identifier):
        raise FeedError(FeedErrorKind.FETCH_FAILED, "connection refused")


class TestPastDayCutoff:
    def test_before_school_is_out(self):
        assert past_day_cutoff(datetime(2026, 2, 10, 14, 59)) == date(2026, 2, 9)

    def test_after_school_is_out(self):
        assert past_day_cutoff(datetime(2026, 2, 10, 15, 0)) == date(2026, 2, 10)

    def test_month_bounds(self):
        assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))


class TestResolve:
    def test_allergens_case_insensitive(self):
        ids, names = resolve_allergens(CATALOG, ["milk", "Peanut"])
        assert ids == frozenset({"milk-uuid"})
        assert names == ["Milk"]

    def test_building_query(self):
        assert pick_building(DISTRICT, "north").building_id == "b-2"

    def test_building_defaults_to_first(self):
        assert pick_building(DISTRICT, None).building_id == "b-1"

    def test_building_not_found(self):
        with pytest.raises(FeedError) as exc:
            pick_building(DISTRICT, "elementary")
        assert exc.value.kind is FeedErrorKind.NOT_FOUND

    def test_district_without_buildings(self):
        assert pick_building(DistrictLookup("d-1", "Empty"), "any") is None

    def test_theme_by_name(self):
        assert resolve_theme({"theme": "cats"}, 10).name == "Cats"

    def test_unknown_theme_uses_suggestion(self):
        assert resolve_theme({"theme": "Plaid"}, 10).name == "Spooky"

    def test_hidden_suggestion(self):
        assert resolve_theme({"theme": None, "hidden_themes": ["Spooky"]}, 10) is DEFAULT_THEME


class TestBuildCalendar:
    def test_analyzes_and_renders(self, february_feed, milk_free):
        processed, html = build_calendar(
            february_feed, milk_free, 2026, 2, DEFAULT_THEME, CalendarRenderOptions(), ["Milk"]
        )
        assert len(processed.days) == 20
        assert processed.building_name == "Kenwood Trail MS"
        assert "Dairy-Free" in html
        assert "Tacos" in html

    def test_runner_returns_result(self, february_feed, milk_free):
        with GenerationRunner() as runner:
            future = runner.submit(
                february_feed, milk_free, 2026, 2, DEFAULT_THEME, CalendarRenderOptions(),
                allergen_names=["Milk"],
            )
            processed, html = future.result()
        assert processed.month == 2
        assert html.startswith("<!DOCTYPE html>")

    def test_runner_latest_request_wins(self, february_feed, milk_free):
        with GenerationRunner() as runner:
            futures = [
                runner.submit(february_feed, milk_free, 2026, month, DEFAULT_THEME, CalendarRenderOptions())
                for month in (1, 2, 3)
            ]
            processed, _ = futures[-1].result()
        assert processed.month == 3
        assert all(f.cancelled() or f.done() for f in futures)


class TestRunGenerate:
    def test_from_capture(self, tmp_path, har_file, capsys):
        out = tmp_path / "calendar.html"
        path = run_generate(
            settings_path=tmp_path / "absent.yaml",
            year=2026,
            month=2,
            har=har_file,
            output=out,
            now=datetime(2026, 2, 10, 9),
            allergens="Milk",
        )
        assert path == out
        html = out.read_text(encoding="utf-8")
        assert "<h2>Kenwood Trail MS</h2>" in html
        assert "Dairy-Free" in html
        assert "Pizza" in html
        assert "Mac and Cheese" not in html
        assert f"Calendar saved to {out}" in capsys.readouterr().out

    def test_default_file_name(self, tmp_path, har_file, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = run_generate(
            settings_path=tmp_path / "absent.yaml",
            year=2026,
            month=2,
            har=har_file,
            now=datetime(2026, 2, 10, 9),
        )
        assert path.name == "LunchCalendar_2026-02.html"
        assert (tmp_path / "LunchCalendar_2026-02.html").exists()

    def test_download_failure_suggests_capture(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(generate, "LinqConnectClient", FailingClient)
        with pytest.raises(SystemExit) as exc:
            run_generate(settings_path=tmp_path / "absent.yaml", year=2026, month=2)
        assert exc.value.code == 1
        assert "--har" in capsys.readouterr().err

    def test_invalid_settings(self, tmp_path, capsys):
        settings = tmp_path / "settings.yaml"
        settings.write_text("layout: Sideways\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            run_generate(settings_path=settings, year=2026, month=2)
        assert "Invalid settings" in capsys.readouterr().err


class TestOtherCommands:
    def test_allergens_table(self):
        table = format_allergens_table(CATALOG)
        assert "Milk" in table
        assert "egg-uuid" in table

    def test_run_allergens_json(self, tmp_path, har_file, capsys):
        run_allergens(settings_path=tmp_path / "absent.yaml", har=har_file, output_format="json")
        data = json.loads(capsys.readouterr().out)
        assert data == [{"id": "milk-uuid", "name": "Milk", "sort_order": 1}]

    def test_lookup_failure_exits(self, monkeypatch, capsys):
        monkeypatch.setattr(generate, "LinqConnectClient", FailingClient)
        with pytest.raises(SystemExit):
            run_lookup("YVAM38")
        assert "fetch-failed" in capsys.readouterr().err

    def test_lookup_json(self, monkeypatch, capsys):
        class Client(FailingClient):
            def fetch_district_lookup(self, identifier):
                return DISTRICT

        monkeypatch.setattr(generate, "LinqConnectClient", Client)
        run_lookup("YVAM38", output_format="json")
        data = json.loads(capsys.readouterr().out)
        assert data["district_name"] == "ISD 194"
        assert [b["name"] for b in data["buildings"]] == ["Kenwood Trail MS", "Lakeville North HS"]
