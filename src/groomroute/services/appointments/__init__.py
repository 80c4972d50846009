"""Appointment skip flow."""

from .service import skip_appointment

__all__ = ["skip_appointment"]
