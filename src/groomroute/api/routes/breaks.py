"""Break endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import SchedulingError
from ...schemas.breaks import (
    BreakListResponse,
    BreakModel,
    BreakSuggestResponse,
    ScheduleBreakRequest,
    TakeBreakRequest,
    TakeBreakResponse,
)
from ...services.breaks.service import list_breaks, schedule_break, suggest_break, take_break
from ..deps import get_account_id, to_http_exception

router = APIRouter(prefix="/breaks", tags=["breaks"])


@router.get("", response_model=BreakListResponse, status_code=status.HTTP_200_OK)
def breaks_for_day(
    date: str | None = Query(default=None, description="YYYY-MM-DD, defaults to today"),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> BreakListResponse:
    try:
        return list_breaks(account_id, date, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error listing breaks: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch breaks",
        ) from exc


@router.post("", response_model=BreakModel, status_code=status.HTTP_201_CREATED)
def create(payload: ScheduleBreakRequest, account_id: str = Depends(get_account_id)) -> BreakModel:
    try:
        return schedule_break(account_id, payload)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error scheduling break: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to schedule break",
        ) from exc


@router.get("/suggest", response_model=BreakSuggestResponse, status_code=status.HTTP_200_OK)
def suggest(
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> BreakSuggestResponse:
    try:
        return suggest_break(account_id, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error suggesting break: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get break suggestion",
        ) from exc


@router.post("/take", response_model=TakeBreakResponse, status_code=status.HTTP_200_OK)
def take(payload: TakeBreakRequest, account_id: str = Depends(get_account_id)) -> TakeBreakResponse:
    try:
        return take_break(account_id, payload)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error recording break: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record break",
        ) from exc
