"""Storage access for accounts, schedules, areas, breaks and the waitlist."""
