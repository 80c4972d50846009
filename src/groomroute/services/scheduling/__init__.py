"""Slot generation, conflict detection and schedule gaps."""
