"""Waitlist ranking."""
