"""Customer endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...errors import SchedulingError
from ...schemas.areas import AssignAreaRequest, AssignAreaResponse
from ...services.areas.service import assign_customer_area
from ..deps import get_account_id, to_http_exception

router = APIRouter(prefix="/customers", tags=["customers"])


@router.post("/{customer_id}/assign-area", response_model=AssignAreaResponse, status_code=status.HTTP_200_OK)
def assign_area(
    customer_id: str, payload: AssignAreaRequest, account_id: str = Depends(get_account_id)
) -> AssignAreaResponse:
    try:
        return assign_customer_area(account_id, customer_id, payload.area_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error assigning area to customer {customer_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign area",
        ) from exc
