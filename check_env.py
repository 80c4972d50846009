#!/usr/bin/env python3
"""Report which GROOMROUTE_ settings are set and write a template .env when none exists."""

from pathlib import Path

TEMPLATE = """# Supabase (required for storage)
GROOMROUTE_SUPABASE_URL=https://your-project-id.supabase.co
GROOMROUTE_SUPABASE_KEY=your-service-role-key-here

# API
GROOMROUTE_API_PREFIX=/api
GROOMROUTE_LOG_LEVEL=INFO
# Comma-separated or JSON array
# GROOMROUTE_FRONTEND_ALLOWED_ORIGINS=http://localhost:3000

# Scheduling defaults
GROOMROUTE_DEFAULT_TIMEZONE=America/New_York
GROOMROUTE_DEFAULT_WORKING_HOURS_START=09:00
GROOMROUTE_DEFAULT_WORKING_HOURS_END=17:00
GROOMROUTE_LEGACY_NOTE_LOG=true

# Geocoding
GROOMROUTE_NOMINATIM_BASE_URL=https://nominatim.openstreetmap.org
GROOMROUTE_GEOCODING_USER_AGENT=GroomRoute/1.0 (support@example.com)
"""


def _mask(value: str) -> str:
    return value if len(value) <= 20 else f"{value[:12]}...{value[-6:]}"


def main():
    env_file = Path(__file__).parent / ".env"
    if not env_file.exists():
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"Created template .env at {env_file}; add your Supabase credentials and rerun.")
        return

    from groomroute.config import settings

    print(f"Using .env at {env_file}")
    print(f"  timezone:      {settings.default_timezone}")
    print(f"  working hours: {settings.default_working_hours_start}-{settings.default_working_hours_end}")
    print(f"  api prefix:    {settings.api_prefix}")
    print(f"  geocoder:      {settings.nominatim_base_url}")
    if settings.supabase_url and settings.supabase_key:
        print(f"  supabase:      {settings.supabase_url} (key {_mask(settings.supabase_key)})")
        print("Supabase is configured.")
    else:
        print("Supabase is NOT configured: set GROOMROUTE_SUPABASE_URL and GROOMROUTE_SUPABASE_KEY.")


if __name__ == "__main__":
    main()
