"""Database persistence for scheduling records.

Every query here filters by ``account_id``; callers never see rows that
belong to another tenant. Tables (Supabase/PostgREST):

    accounts, groomers, customers, pets, appointments, service_areas,
    area_day_assignments, area_date_overrides, routes, breaks,
    customer_waitlist, appointment_events
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from ..db.supabase import get_supabase_client
from ..models.domain import (
    INACTIVE_STATUSES,
    Appointment,
    AppointmentEvent,
    AppointmentStatus,
    AreaDateOverride,
    AreaDayAssignment,
    Break,
    BreakType,
    Customer,
    CustomerHistory,
    GroomIntensity,
    Groomer,
    Pet,
    Route,
    ServiceArea,
    TimeOfDay,
    WaitlistEntry,
)
from ..services.dates import get_timezone, parse_timestamp

logger = logging.getLogger(__name__)

_APPOINTMENT_SELECT = (
    "*, pet:pets(id, name, weight, breed, groom_intensity), customer:customers(name, phone, lat, lng)"
)


def _client():
    supabase = get_supabase_client()
    if not supabase:
        raise RuntimeError(
            "Supabase not configured. Set GROOMROUTE_SUPABASE_URL and GROOMROUTE_SUPABASE_KEY."
        )
    return supabase


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _row_to_pet(row: dict | None) -> Optional[Pet]:
    if not row:
        return None
    return Pet(
        id=str(row["id"]),
        name=row.get("name") or "Pet",
        weight=_optional_float(row.get("weight")),
        breed=row.get("breed"),
        groom_intensity=GroomIntensity(row["groom_intensity"]) if row.get("groom_intensity") else None,
    )


def _row_to_appointment(row: dict) -> Appointment:
    customer = row.get("customer") or {}
    return Appointment(
        id=str(row["id"]),
        account_id=str(row["account_id"]),
        groomer_id=str(row["groomer_id"]),
        customer_id=str(row["customer_id"]),
        start_at=parse_timestamp(row["start_at"]),
        service_minutes=int(row.get("service_minutes") or 0),
        status=AppointmentStatus(row["status"]),
        pet=_row_to_pet(row.get("pet")),
        customer_name=customer.get("name"),
        customer_phone=customer.get("phone"),
        customer_lat=_optional_float(customer.get("lat")),
        customer_lng=_optional_float(customer.get("lng")),
        notes=row.get("notes"),
        price=_optional_float(row.get("price")),
        version=int(row.get("version") or 0),
    )


def _row_to_customer(row: dict) -> Customer:
    return Customer(
        id=str(row["id"]),
        account_id=str(row["account_id"]),
        name=row.get("name") or "",
        phone=row.get("phone"),
        email=row.get("email"),
        address=row.get("address"),
        zip_code=row.get("zip_code"),
        lat=_optional_float(row.get("lat")),
        lng=_optional_float(row.get("lng")),
        service_area_id=row.get("service_area_id"),
        cancellation_count=int(row.get("cancellation_count") or 0),
        no_show_count=int(row.get("no_show_count") or 0),
        notes=row.get("notes"),
        pets=[pet for pet in (_row_to_pet(p) for p in row.get("pets") or []) if pet],
    )


def _row_to_area(row: dict) -> ServiceArea:
    return ServiceArea(
        id=str(row["id"]),
        account_id=str(row["account_id"]),
        name=row.get("name") or "",
        color=row.get("color") or "#3B82F6",
        zip_codes=[str(z) for z in row.get("zip_codes") or []],
        center_lat=_optional_float(row.get("center_lat")),
        center_lng=_optional_float(row.get("center_lng")),
        radius_miles=_optional_float(row.get("radius_miles")),
        is_active=bool(row.get("is_active", True)),
    )


def _row_to_groomer(row: dict) -> Groomer:
    limit = row.get("large_dog_daily_limit")
    intensity_limit = row.get("daily_intensity_limit")
    return Groomer(
        id=str(row["id"]),
        account_id=str(row["account_id"]),
        name=row.get("name") or "",
        working_hours_start=row.get("working_hours_start"),
        working_hours_end=row.get("working_hours_end"),
        large_dog_daily_limit=int(limit) if limit is not None else None,
        daily_intensity_limit=int(intensity_limit) if intensity_limit is not None else None,
        default_has_assistant=bool(row.get("default_has_assistant", False)),
        booking_slug=row.get("booking_slug"),
        booking_enabled=bool(row.get("booking_enabled", False)),
        base_lat=_optional_float(row.get("base_lat")),
        base_lng=_optional_float(row.get("base_lng")),
        phone=row.get("phone"),
        email=row.get("email"),
    )


def _row_to_break(row: dict) -> Break:
    return Break(
        id=str(row["id"]),
        account_id=str(row["account_id"]),
        groomer_id=str(row["groomer_id"]),
        break_date=date.fromisoformat(str(row["break_date"])[:10]),
        break_type=BreakType(row.get("break_type") or BreakType.SHORT_BREAK.value),
        start_time=parse_timestamp(row.get("start_time")),
        end_time=parse_timestamp(row.get("end_time")),
        taken=bool(row.get("taken", False)),
        taken_at=parse_timestamp(row.get("taken_at")),
        duration_minutes=row.get("duration_minutes"),
    )


def _row_to_route(row: dict) -> Route:
    return Route(
        account_id=str(row["account_id"]),
        groomer_id=str(row["groomer_id"]),
        route_date=date.fromisoformat(str(row["route_date"])[:10]),
        workday_started=bool(row.get("workday_started", False)),
        has_assistant=bool(row.get("has_assistant", False)),
    )


def _isoformat(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat()


# --- accounts & groomers -------------------------------------------------


def get_account_timezone(account_id: str) -> ZoneInfo:
    response = _client().table("accounts").select("timezone").eq("id", account_id).limit(1).execute()
    rows = response.data or []
    return get_timezone(rows[0].get("timezone") if rows else None)


def get_groomer(account_id: str, groomer_id: str | None = None) -> Optional[Groomer]:
    """Fetch a groomer in the account; without an id, the account's first active groomer."""
    query = _client().table("groomers").select("*").eq("account_id", account_id)
    if groomer_id:
        query = query.eq("id", groomer_id)
    else:
        query = query.eq("is_active", True).order("created_at")
    rows = query.limit(1).execute().data or []
    return _row_to_groomer(rows[0]) if rows else None


def get_groomer_by_slug(slug: str) -> Optional[Groomer]:
    rows = _client().table("groomers").select("*").eq("booking_slug", slug).limit(1).execute().data or []
    return _row_to_groomer(rows[0]) if rows else None


def update_groomer_default_assistant(account_id: str, groomer_id: str, has_assistant: bool) -> None:
    (
        _client()
        .table("groomers")
        .update({"default_has_assistant": has_assistant})
        .eq("id", groomer_id)
        .eq("account_id", account_id)
        .execute()
    )


# --- appointments --------------------------------------------------------


def get_appointments_between(
    account_id: str,
    groomer_id: str,
    start: datetime,
    end: datetime,
    *,
    exclude_statuses: Iterable[AppointmentStatus] = INACTIVE_STATUSES,
    exclude_ids: Sequence[str] = (),
) -> list[Appointment]:
    """Appointments with ``start <= start_at < end``, ordered by start time."""
    query = (
        _client()
        .table("appointments")
        .select(_APPOINTMENT_SELECT)
        .eq("account_id", account_id)
        .eq("groomer_id", groomer_id)
        .gte("start_at", _isoformat(start))
        .lt("start_at", _isoformat(end))
    )
    statuses = [status.value for status in exclude_statuses]
    if statuses:
        query = query.not_.in_("status", statuses)
    if exclude_ids:
        query = query.not_.in_("id", list(exclude_ids))
    rows = query.order("start_at").execute().data or []
    return [_row_to_appointment(row) for row in rows]


def get_appointments_by_ids(
    account_id: str,
    groomer_id: str,
    appointment_ids: Sequence[str],
    *,
    exclude_statuses: Iterable[AppointmentStatus] = INACTIVE_STATUSES,
) -> list[Appointment]:
    if not appointment_ids:
        return []
    query = (
        _client()
        .table("appointments")
        .select(_APPOINTMENT_SELECT)
        .eq("account_id", account_id)
        .eq("groomer_id", groomer_id)
        .in_("id", list(appointment_ids))
    )
    statuses = [status.value for status in exclude_statuses]
    if statuses:
        query = query.not_.in_("status", statuses)
    rows = query.execute().data or []
    return [_row_to_appointment(row) for row in rows]


def get_appointment(account_id: str, appointment_id: str) -> Optional[Appointment]:
    rows = (
        _client()
        .table("appointments")
        .select(_APPOINTMENT_SELECT)
        .eq("account_id", account_id)
        .eq("id", appointment_id)
        .limit(1)
        .execute()
        .data
        or []
    )
    return _row_to_appointment(rows[0]) if rows else None


def update_appointment_start(
    account_id: str, appointment_id: str, new_start: datetime, expected_version: int
) -> bool:
    """Write a new start time if the row still carries ``expected_version``.

    Returns False when the row was changed concurrently (no row matched).
    """
    response = (
        _client()
        .table("appointments")
        .update({"start_at": _isoformat(new_start), "version": expected_version + 1})
        .eq("id", appointment_id)
        .eq("account_id", account_id)
        .eq("version", expected_version)
        .execute()
    )
    return bool(response.data)


def update_appointment_status(
    account_id: str, appointment_id: str, status: AppointmentStatus, notes: Optional[str]
) -> None:
    (
        _client()
        .table("appointments")
        .update({"status": status.value, "notes": notes})
        .eq("id", appointment_id)
        .eq("account_id", account_id)
        .execute()
    )


def record_appointment_event(event: AppointmentEvent) -> None:
    _client().table("appointment_events").insert(
        {
            "account_id": event.account_id,
            "appointment_id": event.appointment_id,
            "customer_id": event.customer_id,
            "actor": event.actor,
            "action": event.action,
            "reason": event.reason,
            "notes": event.notes,
            "occurred_at": _isoformat(event.occurred_at),
        }
    ).execute()


# --- customers -----------------------------------------------------------


def get_customer(account_id: str, customer_id: str) -> Optional[Customer]:
    rows = (
        _client()
        .table("customers")
        .select("*")
        .eq("account_id", account_id)
        .eq("id", customer_id)
        .limit(1)
        .execute()
        .data
        or []
    )
    return _row_to_customer(rows[0]) if rows else None


def get_unassigned_customers(account_id: str) -> list[Customer]:
    rows = (
        _client()
        .table("customers")
        .select("*")
        .eq("account_id", account_id)
        .is_("service_area_id", "null")
        .execute()
        .data
        or []
    )
    return [_row_to_customer(row) for row in rows]


def update_customer_area(account_id: str, customer_id: str, area_id: Optional[str]) -> None:
    (
        _client()
        .table("customers")
        .update({"service_area_id": area_id})
        .eq("id", customer_id)
        .eq("account_id", account_id)
        .execute()
    )


def update_customer_reliability(
    account_id: str,
    customer_id: str,
    *,
    cancellation_count: int,
    no_show_count: int,
    notes: Optional[str],
    last_cancellation_at: Optional[datetime] = None,
    last_no_show_at: Optional[datetime] = None,
) -> None:
    payload: dict[str, Any] = {
        "cancellation_count": cancellation_count,
        "no_show_count": no_show_count,
        "notes": notes,
    }
    if last_cancellation_at is not None:
        payload["last_cancellation_at"] = _isoformat(last_cancellation_at)
    if last_no_show_at is not None:
        payload["last_no_show_at"] = _isoformat(last_no_show_at)
    (
        _client()
        .table("customers")
        .update(payload)
        .eq("id", customer_id)
        .eq("account_id", account_id)
        .execute()
    )


def get_customer_histories(account_id: str, customer_ids: Sequence[str]) -> dict[str, CustomerHistory]:
    """Appointment count plus completed-visit revenue and recency per customer."""
    histories = {cid: CustomerHistory(customer_id=cid) for cid in customer_ids}
    if not customer_ids:
        return histories
    rows = (
        _client()
        .table("appointments")
        .select("customer_id, status, price, start_at")
        .eq("account_id", account_id)
        .in_("customer_id", list(customer_ids))
        .execute()
        .data
        or []
    )
    for row in rows:
        history = histories.get(str(row["customer_id"]))
        if history is None:
            continue
        history.appointment_count += 1
        if row.get("status") == AppointmentStatus.COMPLETED.value:
            history.completed_count += 1
            history.total_revenue += _optional_float(row.get("price")) or 0.0
            started = parse_timestamp(row.get("start_at"))
            if started and (history.last_completed_at is None or started > history.last_completed_at):
                history.last_completed_at = started
    return histories


# --- service areas -------------------------------------------------------


def get_service_areas(account_id: str, *, active_only: bool = True) -> list[ServiceArea]:
    """Areas ordered by name, the order area matching relies on."""
    query = _client().table("service_areas").select("*").eq("account_id", account_id)
    if active_only:
        query = query.eq("is_active", True)
    rows = query.order("name").execute().data or []
    return [_row_to_area(row) for row in rows]


def get_service_area(account_id: str, area_id: str) -> Optional[ServiceArea]:
    rows = (
        _client()
        .table("service_areas")
        .select("*")
        .eq("account_id", account_id)
        .eq("id", area_id)
        .limit(1)
        .execute()
        .data
        or []
    )
    return _row_to_area(rows[0]) if rows else None


def get_area_customer_zip_codes(account_id: str) -> dict[str, tuple[Counter, int]]:
    """Per area id: (zip code counts of its customers, total customer count)."""
    rows = (
        _client()
        .table("customers")
        .select("service_area_id, zip_code")
        .eq("account_id", account_id)
        .not_.is_("service_area_id", "null")
        .execute()
        .data
        or []
    )
    profiles: dict[str, tuple[Counter, int]] = {}
    for row in rows:
        area_id = str(row["service_area_id"])
        zips, total = profiles.get(area_id, (Counter(), 0))
        zip_code = (row.get("zip_code") or "").strip()
        if zip_code:
            zips[zip_code] += 1
        profiles[area_id] = (zips, total + 1)
    return profiles


def get_area_day_assignments(account_id: str, groomer_id: str) -> list[AreaDayAssignment]:
    rows = (
        _client()
        .table("area_day_assignments")
        .select("groomer_id, day_of_week, area:service_areas(*)")
        .eq("account_id", account_id)
        .eq("groomer_id", groomer_id)
        .execute()
        .data
        or []
    )
    return [
        AreaDayAssignment(
            groomer_id=str(row["groomer_id"]),
            day_of_week=int(row["day_of_week"]),
            area=_row_to_area(row["area"]),
        )
        for row in rows
        if row.get("area")
    ]


def get_area_date_overrides(
    account_id: str, groomer_id: str, start: date, end: date
) -> list[AreaDateOverride]:
    """Overrides with ``start <= date <= end``."""
    rows = (
        _client()
        .table("area_date_overrides")
        .select("groomer_id, date, area:service_areas(*)")
        .eq("account_id", account_id)
        .eq("groomer_id", groomer_id)
        .gte("date", start.isoformat())
        .lte("date", end.isoformat())
        .execute()
        .data
        or []
    )
    return [
        AreaDateOverride(
            groomer_id=str(row["groomer_id"]),
            date=date.fromisoformat(str(row["date"])[:10]),
            area=_row_to_area(row["area"]) if row.get("area") else None,
        )
        for row in rows
    ]


# --- routes & breaks -----------------------------------------------------


def get_route(account_id: str, groomer_id: str, route_date: date) -> Optional[Route]:
    rows = (
        _client()
        .table("routes")
        .select("*")
        .eq("account_id", account_id)
        .eq("groomer_id", groomer_id)
        .eq("route_date", route_date.isoformat())
        .limit(1)
        .execute()
        .data
        or []
    )
    return _row_to_route(rows[0]) if rows else None


def upsert_route(route: Route) -> Route:
    response = (
        _client()
        .table("routes")
        .upsert(
            {
                "account_id": route.account_id,
                "groomer_id": route.groomer_id,
                "route_date": route.route_date.isoformat(),
                "workday_started": route.workday_started,
                "has_assistant": route.has_assistant,
            },
            on_conflict="groomer_id,route_date",
        )
        .execute()
    )
    rows = response.data or []
    return _row_to_route(rows[0]) if rows else route


def get_breaks(account_id: str, groomer_id: str, break_date: date) -> list[Break]:
    rows = (
        _client()
        .table("breaks")
        .select("*")
        .eq("account_id", account_id)
        .eq("groomer_id", groomer_id)
        .eq("break_date", break_date.isoformat())
        .order("start_time")
        .execute()
        .data
        or []
    )
    return [_row_to_break(row) for row in rows]


def create_break(
    account_id: str,
    groomer_id: str,
    break_date: date,
    break_type: BreakType,
    *,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    taken: bool = False,
    taken_at: Optional[datetime] = None,
    duration_minutes: Optional[int] = None,
) -> Break:
    response = (
        _client()
        .table("breaks")
        .insert(
            {
                "account_id": account_id,
                "groomer_id": groomer_id,
                "break_date": break_date.isoformat(),
                "break_type": break_type.value,
                "start_time": _isoformat(start_time) if start_time else None,
                "end_time": _isoformat(end_time) if end_time else None,
                "taken": taken,
                "taken_at": _isoformat(taken_at) if taken_at else None,
                "duration_minutes": duration_minutes,
            }
        )
        .execute()
    )
    return _row_to_break(response.data[0])


def mark_break_taken(
    account_id: str,
    groomer_id: str,
    break_date: date,
    break_id: str,
    taken_at: datetime,
    duration_minutes: int,
) -> Optional[Break]:
    """Mark one of the groomer's breaks for ``break_date`` as taken; None when no such break."""
    response = (
        _client()
        .table("breaks")
        .update({"taken": True, "taken_at": _isoformat(taken_at), "duration_minutes": duration_minutes})
        .eq("id", break_id)
        .eq("account_id", account_id)
        .eq("groomer_id", groomer_id)
        .eq("break_date", break_date.isoformat())
        .execute()
    )
    rows = response.data or []
    return _row_to_break(rows[0]) if rows else None


# --- waitlist ------------------------------------------------------------


def get_active_waitlist(account_id: str) -> list[WaitlistEntry]:
    rows = (
        _client()
        .table("customer_waitlist")
        .select("*, customer:customers(*, pets(id, name, weight, breed))")
        .eq("account_id", account_id)
        .eq("is_active", True)
        .execute()
        .data
        or []
    )
    entries: list[WaitlistEntry] = []
    for row in rows:
        if not row.get("customer"):
            logger.warning(f"Skipping waitlist entry {row.get('id')} without a customer")
            continue
        try:
            preferred_times = [TimeOfDay(value) for value in row.get("preferred_times") or []]
        except ValueError as e:
            logger.warning(f"Ignoring invalid time preference on waitlist entry {row.get('id')}: {e}")
            preferred_times = []
        entries.append(
            WaitlistEntry(
                id=str(row["id"]),
                account_id=str(row["account_id"]),
                customer=_row_to_customer(row["customer"]),
                preferred_days=[str(day).upper() for day in row.get("preferred_days") or []],
                preferred_times=preferred_times,
                flexible_timing=bool(row.get("flexible_timing", False)),
                max_distance_miles=_optional_float(row.get("max_distance")),
                is_active=True,
            )
        )
    return entries
