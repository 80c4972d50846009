"""Shared request dependencies and error translation for the routers."""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, status

from ..errors import PartialUpdateError, SchedulingError


def get_account_id(x_account_id: Optional[str] = Header(default=None)) -> str:
    """Account of the authenticated caller, set by the upstream auth layer."""
    if not x_account_id or not x_account_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_account_id.strip()


def to_http_exception(exc: SchedulingError) -> HTTPException:
    if isinstance(exc, PartialUpdateError):
        return HTTPException(status_code=exc.status_code, detail={"message": str(exc), "results": exc.results})
    return HTTPException(status_code=exc.status_code, detail=str(exc))
