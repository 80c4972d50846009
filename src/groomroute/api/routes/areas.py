"""Service area endpoints: bulk assignment, zip suggestion and area calendar."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import SchedulingError
from ...schemas.areas import AreaScheduleResponse, AreaSuggestResponse, AutoAssignResponse, NextAreaDateResponse
from ...services.areas.service import auto_assign_customers, get_area_schedule, get_next_area_date, suggest_area
from ..deps import get_account_id, to_http_exception

router = APIRouter(prefix="/areas", tags=["areas"])


@router.post("/auto-assign", response_model=AutoAssignResponse, status_code=status.HTTP_200_OK)
def auto_assign(account_id: str = Depends(get_account_id)) -> AutoAssignResponse:
    """Assign every unassigned customer to the first matching active area."""
    try:
        return auto_assign_customers(account_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error auto-assigning customers: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to auto-assign customers",
        ) from exc


@router.get("/suggest", response_model=AreaSuggestResponse, status_code=status.HTTP_200_OK)
def suggest(
    zip_code: str | None = Query(default=None, alias="zipCode"),
    account_id: str = Depends(get_account_id),
) -> AreaSuggestResponse:
    try:
        return suggest_area(account_id, zip_code)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error suggesting area: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to suggest area",
        ) from exc


@router.get("/next-date", response_model=NextAreaDateResponse, status_code=status.HTTP_200_OK)
def next_date(
    area_id: str = Query(..., alias="areaId"),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    from_date: str | None = Query(default=None, alias="fromDate", description="YYYY-MM-DD, defaults to today"),
    account_id: str = Depends(get_account_id),
) -> NextAreaDateResponse:
    try:
        return get_next_area_date(account_id, area_id, groomer_id, from_date)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error finding next area date: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to find next area date",
        ) from exc


@router.get("/schedule", response_model=AreaScheduleResponse, status_code=status.HTTP_200_OK)
def schedule(
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> AreaScheduleResponse:
    """Area for every date in the range, overrides applied."""
    try:
        return get_area_schedule(account_id, start_date, end_date, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error building area schedule: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build area schedule",
        ) from exc
