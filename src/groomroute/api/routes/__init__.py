"""Route group exports."""

from . import appointments, areas, booking, breaks, customers, groomer, health, routes, waitlist

__all__ = ["appointments", "areas", "booking", "breaks", "customers", "groomer", "health", "routes", "waitlist"]
