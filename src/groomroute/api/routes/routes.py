"""Route endpoints: reorder, workday start, assistant toggle and day workload."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import SchedulingError
from ...schemas.routing import (
    AssistantRequest,
    AssistantStatusResponse,
    GroomerDayRequest,
    ReorderRequest,
    ReorderResponse,
    RouteStatusResponse,
)
from ...schemas.workload import WorkloadResponse
from ...services.routing.service import get_assistant_status, reorder_route, set_assistant, start_workday
from ...services.workload.service import get_day_workload
from ..deps import get_account_id, to_http_exception

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/reorder", response_model=ReorderResponse, status_code=status.HTTP_200_OK)
def reorder(payload: ReorderRequest, account_id: str = Depends(get_account_id)) -> ReorderResponse:
    """Re-sequence today's stops; the set of start times is kept."""
    try:
        return reorder_route(account_id, payload)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error reordering route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reorder route",
        ) from exc


@router.post("/start-workday", response_model=RouteStatusResponse, status_code=status.HTTP_200_OK)
def start(payload: GroomerDayRequest | None = None, account_id: str = Depends(get_account_id)) -> RouteStatusResponse:
    try:
        return start_workday(account_id, payload.groomer_id if payload else None)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error starting workday: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to start workday",
        ) from exc


@router.get("/assistant", response_model=AssistantStatusResponse, status_code=status.HTTP_200_OK)
def assistant_status(
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> AssistantStatusResponse:
    try:
        return get_assistant_status(account_id, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error reading assistant status: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read assistant status",
        ) from exc


@router.post("/assistant", response_model=AssistantStatusResponse, status_code=status.HTTP_200_OK)
def assistant_update(payload: AssistantRequest, account_id: str = Depends(get_account_id)) -> AssistantStatusResponse:
    try:
        return set_assistant(account_id, payload)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error updating assistant status: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update assistant status",
        ) from exc


@router.get("/workload", response_model=WorkloadResponse, status_code=status.HTTP_200_OK)
def workload(
    date: str | None = Query(default=None, description="YYYY-MM-DD; defaults to today"),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> WorkloadResponse:
    """How demanding the day is, given the route's assistant setting."""
    try:
        return get_day_workload(account_id, date, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error assessing workload: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assess workload",
        ) from exc
