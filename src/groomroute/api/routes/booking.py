"""Public booking endpoints: available slots, duration estimate and service-area address check."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from ...errors import SchedulingError
from ...schemas.booking import AvailableSlotsResponse, CheckAddressRequest, CheckAddressResponse
from ...schemas.workload import DurationEstimateResponse
from ...services.areas.service import check_address as check_service_address
from ...services.scheduling.service import get_available_slots
from ...services.workload.service import estimate_booking_duration
from ..deps import to_http_exception

router = APIRouter(prefix="/book", tags=["booking"])


@router.get("/available-slots", response_model=AvailableSlotsResponse, status_code=status.HTTP_200_OK)
def available_slots(
    groomer_slug: str = Query(..., alias="groomerSlug", description="Public booking slug of the groomer"),
    date: str = Query(..., description="YYYY-MM-DD"),
    duration: int | None = Query(default=None, description="Requested service length in minutes"),
) -> AvailableSlotsResponse:
    try:
        return get_available_slots(groomer_slug, date, duration)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error computing available slots: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch available slots",
        ) from exc


@router.post("/check-address", response_model=CheckAddressResponse, status_code=status.HTTP_200_OK)
def check_address(payload: CheckAddressRequest) -> CheckAddressResponse:
    """Whether the address is inside one of the groomer's service areas, with the days served."""
    try:
        return check_service_address(payload)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error checking address: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check address",
        ) from exc


@router.get("/estimate-duration", response_model=DurationEstimateResponse, status_code=status.HTTP_200_OK)
def estimate_duration(
    species: str = Query(..., description="dog | cat"),
    size: str = Query(..., description="small | medium | large | giant"),
    breed: str | None = Query(default=None),
) -> DurationEstimateResponse:
    """Suggested appointment length for a public booking request."""
    try:
        return estimate_booking_duration(species, breed, size)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error estimating duration: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to estimate duration",
        ) from exc
