"""Root pytest configuration.

Test settings must be in the environment before any ``libs`` module is
imported, since ``get_settings()`` and the rate limiter are built on import.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TIMEZONE"] = "Asia/Kolkata"
os.environ["AI_DEFAULT_MODEL"] = ""
os.environ["AI_API_KEY"] = ""
os.environ["OPENWEATHER_API_KEY"] = ""

from libs.common.config import get_settings  # noqa: E402

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()
