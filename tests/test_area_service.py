from collections import Counter
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from groomroute.errors import InvalidRequestError, NotFoundError, PolicyViolationError
from groomroute.models.domain import AreaDateOverride, AreaDayAssignment, Customer, Groomer, ServiceArea
from groomroute.schemas.booking import CheckAddressRequest
from groomroute.services.areas import service as area_service
from groomroute.services.geocoding.client import GeocodingResult

TZ = ZoneInfo("America/New_York")
NOW = datetime(2026, 6, 1, 14, 0, tzinfo=timezone.utc)  # Monday morning in New York
GROOMER = Groomer(id="g1", account_id="acct", name="Sam", booking_slug="sam", booking_enabled=True)
NORTH = ServiceArea(id="north", account_id="acct", name="North", zip_codes=["10001"])
SOUTH = ServiceArea(
    id="south", account_id="acct", name="South", center_lat=40.60, center_lng=-74.00, radius_miles=3.0
)


@pytest.fixture
def storage(monkeypatch):
    state = {
        "areas": [SOUTH, NORTH],
        "customers": {},
        "assignments": [
            AreaDayAssignment(groomer_id="g1", day_of_week=1, area=NORTH),
            AreaDayAssignment(groomer_id="g1", day_of_week=4, area=SOUTH),
        ],
        "overrides": [],
        "zip_codes": {},
        "updates": [],
    }
    monkeypatch.setattr(area_service, "get_account_timezone", lambda account_id: TZ)
    monkeypatch.setattr(area_service, "get_service_areas", lambda account_id, active_only=True: list(state["areas"]))
    monkeypatch.setattr(
        area_service,
        "get_service_area",
        lambda account_id, area_id: next((a for a in state["areas"] if a.id == area_id), None),
    )
    monkeypatch.setattr(
        area_service,
        "get_unassigned_customers",
        lambda account_id: [c for c in state["customers"].values() if c.service_area_id is None],
    )
    monkeypatch.setattr(area_service, "get_customer", lambda account_id, cid: state["customers"].get(cid))
    monkeypatch.setattr(
        area_service,
        "update_customer_area",
        lambda account_id, cid, area_id: state["updates"].append((cid, area_id)),
    )
    monkeypatch.setattr(area_service, "get_groomer", lambda account_id, groomer_id=None: GROOMER)
    monkeypatch.setattr(area_service, "get_groomer_by_slug", lambda slug: GROOMER if slug == "sam" else None)
    monkeypatch.setattr(area_service, "get_area_day_assignments", lambda account_id, groomer_id: state["assignments"])
    monkeypatch.setattr(
        area_service,
        "get_area_date_overrides",
        lambda account_id, groomer_id, start, end: [o for o in state["overrides"] if start <= o.date <= end],
    )
    monkeypatch.setattr(area_service, "get_area_customer_zip_codes", lambda account_id: state["zip_codes"])
    return state


def _customer(cid, name, **kwargs):
    return Customer(id=cid, account_id="acct", name=name, **kwargs)


def test_auto_assign_by_zip_then_radius(storage):
    storage["customers"] = {
        "c1": _customer("c1", "Zip Match", zip_code="10001", lat=40.60, lng=-74.00),
        "c2": _customer("c2", "Radius Match", zip_code="11111", lat=40.61, lng=-74.01),
        "c3": _customer("c3", "Nowhere", zip_code="99999"),
    }
    response = area_service.auto_assign_customers("acct")
    assert storage["updates"] == [("c1", "north"), ("c2", "south")]
    assert response.assigned_count == 2
    assert response.unmatched_count == 1
    assert response.unmatched[0].id == "c3"
    assert response.total_processed == 3


def test_auto_assign_requires_areas(storage):
    storage["areas"] = []
    with pytest.raises(InvalidRequestError):
        area_service.auto_assign_customers("acct")


def test_assign_and_clear_customer_area(storage):
    storage["customers"]["c1"] = _customer("c1", "Pat")
    assigned = area_service.assign_customer_area("acct", "c1", "north")
    assert assigned.area_name == "North"
    cleared = area_service.assign_customer_area("acct", "c1", None)
    assert cleared.area_id is None
    assert storage["updates"] == [("c1", "north"), ("c1", None)]
    with pytest.raises(NotFoundError):
        area_service.assign_customer_area("acct", "c1", "missing")
    with pytest.raises(NotFoundError):
        area_service.assign_customer_area("acct", "nobody", "north")


def test_suggest_area_from_customer_zip_codes(storage):
    storage["zip_codes"] = {"north": (Counter({"10001": 2}), 2), "south": (Counter({"10004": 1}), 1)}
    response = area_service.suggest_area("acct", "10001")
    assert response.suggestion.id == "north"
    assert response.suggestion.confidence == "exact"
    assert response.reason == "2 other customers in North share this zip code"
    assert [alt.id for alt in response.alternatives] == ["south"]

    none = area_service.suggest_area("acct", "90210")
    assert none.suggestion is None
    assert {a.id for a in none.all_areas} == {"north", "south"}
    with pytest.raises(InvalidRequestError):
        area_service.suggest_area("acct", "  ")


def test_next_area_date_with_override(storage):
    storage["overrides"] = [
        AreaDateOverride(groomer_id="g1", date=date(2026, 6, 1), area=None),
        AreaDateOverride(groomer_id="g1", date=date(2026, 6, 3), area=NORTH),
    ]
    response = area_service.get_next_area_date("acct", "north", now=NOW)
    assert response.next_date.date == "2026-06-03"
    assert response.next_date.is_override
    assert response.upcoming[1].date == "2026-06-08"
    assert response.area_day_names == "Monday"
    with pytest.raises(NotFoundError):
        area_service.get_next_area_date("acct", "missing", now=NOW)


def test_area_schedule_bounds(storage):
    schedule = area_service.get_area_schedule("acct", "2026-06-01", "2026-06-07")
    assert len(schedule.days) == 7
    assert schedule.days[0].area_id == "north"
    assert schedule.days[3].area_id == "south"
    assert schedule.days[1].area_id is None
    with pytest.raises(InvalidRequestError):
        area_service.get_area_schedule("acct", "2026-06-07", "2026-06-01")
    with pytest.raises(InvalidRequestError):
        area_service.get_area_schedule("acct", "2026-01-01", "2026-12-31")


def test_suggest_date_starts_tomorrow(storage):
    storage["customers"]["c1"] = _customer("c1", "Pat", service_area_id="north")
    response = area_service.suggest_date_for_customer("acct", "c1", "g1", now=NOW)
    # Today is Monday, so the next Monday is a week out.
    assert response.next_suggested_date == "2026-06-08"
    assert response.suggested_days == [1]
    assert response.reason == "Sam works in North on Monday"

    storage["customers"]["c2"] = _customer("c2", "No Area")
    assert area_service.suggest_date_for_customer("acct", "c2", "g1", now=NOW).service_area_id is None


def test_check_address_matches_area(storage, monkeypatch):
    def fail_geocode(address):
        raise AssertionError("coordinates were supplied")

    monkeypatch.setattr(area_service, "geocode_address", fail_geocode)
    payload = CheckAddressRequest(
        groomer_slug="sam", address="1 Main St", lat=40.601, lng=-74.001, zip_code="11111"
    )
    response = area_service.check_address(payload, now=NOW)
    assert response.in_service_area
    assert response.area_id == "south"
    assert [d.day_name for d in response.recommended_days] == ["Thursday"]
    assert response.upcoming_dates[0] == "2026-06-04"


def test_check_address_geocodes_and_reports_outside(storage, monkeypatch):
    monkeypatch.setattr(
        area_service,
        "geocode_address",
        lambda address: GeocodingResult(success=True, lat=45.0, lng=-70.0, formatted_address=address, zip_code="04401"),
    )
    response = area_service.check_address(CheckAddressRequest(groomer_slug="sam", address="Far away"), now=NOW)
    assert response.geocoded
    assert not response.in_service_area
    assert response.message == "This address is outside the current service areas."


def test_check_address_geocode_failure_and_policies(storage, monkeypatch):
    monkeypatch.setattr(
        area_service, "geocode_address", lambda address: GeocodingResult(success=False, error="No results")
    )
    response = area_service.check_address(CheckAddressRequest(groomer_slug="sam", address="???"), now=NOW)
    assert not response.geocoded and not response.in_service_area

    with pytest.raises(NotFoundError):
        area_service.check_address(CheckAddressRequest(groomer_slug="ghost", address="x"), now=NOW)

    closed = Groomer(id="g2", account_id="acct", name="Kim", booking_enabled=False)
    monkeypatch.setattr(area_service, "get_groomer_by_slug", lambda slug: closed)
    with pytest.raises(PolicyViolationError) as excinfo:
        area_service.check_address(CheckAddressRequest(groomer_slug="kim", address="x"), now=NOW)
    assert excinfo.value.status_code == 403


def test_check_address_without_areas_accepts_everyone(storage):
    storage["areas"] = []
    response = area_service.check_address(
        CheckAddressRequest(groomer_slug="sam", address="Anywhere", lat=1.0, lng=1.0), now=NOW
    )
    assert response.in_service_area
    assert response.all_days_available
    assert [d.day_of_week for d in response.recommended_days] == [1, 4]


def test_groomer_calendar_lookups(storage):
    storage["overrides"] = [AreaDateOverride(groomer_id="g1", date=date(2026, 6, 8), area=SOUTH)]
    assert area_service.get_groomer_assigned_area("acct", "g1", 1) is NORTH
    assert area_service.get_groomer_assigned_area("acct", "g1", 2) is None
    with pytest.raises(InvalidRequestError):
        area_service.get_groomer_assigned_area("acct", "g1", 7)

    override = area_service.get_groomer_area_for_date("acct", "g1", date(2026, 6, 8))
    assert override.area is SOUTH and override.is_override
    assert area_service.get_groomer_area_days("acct", "g1", "south") == [4]
    # The Monday override sends the groomer south, so North resumes a week later.
    assert area_service.find_next_area_day("acct", "g1", "north", date(2026, 6, 2)) == (date(2026, 6, 15), False)
    assert area_service.find_next_area_day("acct", "g1", "north", date(2026, 6, 2), max_days_ahead=5) is None
