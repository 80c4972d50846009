"""Appointment endpoints: conflict check, skip and date suggestion."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import SchedulingError
from ...schemas.appointments import SkipRequest, SkipResponse
from ...schemas.areas import SuggestDateResponse
from ...schemas.scheduling import ConflictCheckResponse
from ...services.appointments.service import skip_appointment
from ...services.areas.service import suggest_date_for_customer
from ...services.scheduling.service import check_conflict
from ..deps import get_account_id, to_http_exception

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("/check-conflict", response_model=ConflictCheckResponse, status_code=status.HTTP_200_OK)
def conflict_check(
    date: str = Query(..., description="YYYY-MM-DD"),
    time: str = Query(..., description="HH:MM, 24-hour"),
    duration: int | None = Query(default=None),
    exclude_id: str | None = Query(default=None, alias="excludeId", description="Appointment being edited"),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> ConflictCheckResponse:
    try:
        return check_conflict(account_id, date, time, duration, exclude_id, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error checking conflicts: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check conflicts",
        ) from exc


@router.get("/suggest-date", response_model=SuggestDateResponse, status_code=status.HTTP_200_OK)
def suggest_date(
    customer_id: str = Query(..., alias="customerId"),
    groomer_id: str = Query(..., alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> SuggestDateResponse:
    try:
        return suggest_date_for_customer(account_id, customer_id, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error suggesting date: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to suggest date",
        ) from exc


@router.post("/{appointment_id}/skip", response_model=SkipResponse, status_code=status.HTTP_200_OK)
def skip(appointment_id: str, payload: SkipRequest, account_id: str = Depends(get_account_id)) -> SkipResponse:
    """Cancel or mark a no-show and update the customer's reliability record."""
    try:
        return skip_appointment(account_id, appointment_id, payload)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error skipping appointment {appointment_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to skip appointment",
        ) from exc
