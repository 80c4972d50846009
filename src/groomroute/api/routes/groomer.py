"""Groomer day checks: working hours, large-dog capacity and intensity budget."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import SchedulingError
from ...schemas.scheduling import LargeDogCountResponse, WorkingHoursCheckResponse
from ...schemas.workload import IntensityCheckResponse
from ...services.scheduling.service import check_groomer_working_hours, get_large_dog_count
from ...services.workload.service import check_intensity
from ..deps import get_account_id, to_http_exception

router = APIRouter(prefix="/groomer", tags=["groomer"])


@router.get("/working-hours-check", response_model=WorkingHoursCheckResponse, status_code=status.HTTP_200_OK)
def working_hours_check(
    time: str = Query(..., description="HH:MM, 24-hour"),
    duration: int | None = Query(default=None),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> WorkingHoursCheckResponse:
    try:
        return check_groomer_working_hours(account_id, time, duration, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error checking working hours: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check working hours",
        ) from exc


@router.get("/large-dog-count", response_model=LargeDogCountResponse, status_code=status.HTTP_200_OK)
def large_dog_count(
    date: str = Query(..., description="YYYY-MM-DD"),
    exclude_appointment_id: str | None = Query(default=None, alias="excludeAppointmentId"),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> LargeDogCountResponse:
    try:
        return get_large_dog_count(account_id, date, exclude_appointment_id, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error counting large dogs: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to count large dogs",
        ) from exc


@router.get("/intensity-check", response_model=IntensityCheckResponse, status_code=status.HTTP_200_OK)
def intensity_check(
    date: str = Query(..., description="YYYY-MM-DD"),
    intensity: str = Query(..., description="LIGHT | MODERATE | DEMANDING | INTENSIVE"),
    exclude_appointment_id: str | None = Query(default=None, alias="excludeAppointmentId"),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> IntensityCheckResponse:
    try:
        return check_intensity(account_id, date, intensity, groomer_id, exclude_appointment_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error checking intensity budget: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check intensity budget",
        ) from exc
