"""Error taxonomy shared by the scheduling services and the HTTP layer."""

from __future__ import annotations

from typing import Any


class SchedulingError(ValueError):
    """Base class for expected, caller-facing failures."""

    status_code = 400


class NotFoundError(SchedulingError):
    """A referenced record does not exist or belongs to another account."""

    status_code = 404


class InvalidRequestError(SchedulingError):
    """Malformed input: bad date/time strings, out-of-range durations, missing ids."""

    status_code = 400


class PolicyViolationError(SchedulingError):
    """The request is well-formed but not allowed by business policy."""

    status_code = 400

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class PartialUpdateError(SchedulingError):
    """A multi-row write failed part way; carries the per-item outcome."""

    status_code = 409

    def __init__(self, message: str, results: list[dict[str, Any]]) -> None:
        super().__init__(message)
        self.results = results
