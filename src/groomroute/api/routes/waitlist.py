"""Waitlist fill-in suggestions and schedule gaps."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import SchedulingError
from ...schemas.scheduling import GapsResponse
from ...schemas.watchlist import WatchlistResponse
from ...services.scheduling.service import get_schedule_gaps
from ...services.watchlist.service import get_watchlist_suggestions
from ..deps import get_account_id, to_http_exception

router = APIRouter(tags=["waitlist"])


@router.get("/waitlist/suggest", response_model=WatchlistResponse, status_code=status.HTTP_200_OK)
def suggest(
    date: str = Query(..., description="YYYY-MM-DD"),
    limit: int = Query(default=10),
    min_reliability: str | None = Query(default=None, alias="minReliability"),
    value_tiers: list[str] | None = Query(default=None, alias="valueTier"),
    max_distance: float | None = Query(default=None, alias="maxDistance", description="Miles"),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> WatchlistResponse:
    """Ranked waitlist customers for the day's area and route."""
    try:
        return get_watchlist_suggestions(
            account_id,
            date,
            limit=limit,
            min_reliability_tier=min_reliability,
            value_tiers=value_tiers,
            max_distance_miles=max_distance,
            groomer_id=groomer_id,
        )
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error ranking waitlist: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get waitlist suggestions",
        ) from exc


@router.get("/gaps", response_model=GapsResponse, status_code=status.HTTP_200_OK)
def gaps(
    date: str = Query(..., description="YYYY-MM-DD"),
    min_gap: int | None = Query(default=None, alias="minGap", description="Minutes"),
    groomer_id: str | None = Query(default=None, alias="groomerId"),
    account_id: str = Depends(get_account_id),
) -> GapsResponse:
    try:
        return get_schedule_gaps(account_id, date, min_gap, groomer_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error finding schedule gaps: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to find schedule gaps",
        ) from exc
