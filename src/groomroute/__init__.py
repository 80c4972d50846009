"""Scheduling and route management core for mobile pet-grooming businesses."""
