"""
OpenWeatherMap client for current conditions at the gym.

Used as extra context for AI insights. When ``OPENWEATHER_API_KEY`` is unset
the client is disabled and ``current()`` returns None without any I/O.
"""

from datetime import datetime
from typing import Optional

import httpx
from fastapi import Request
from libs.common.config import Settings, get_settings
from libs.common.datetime_utils import utc_now
from libs.common.errors import UpstreamError, UpstreamTimeout
from libs.common.logging import get_logger
from services.ai_service.schemas import WeatherSnapshot

logger = get_logger(__name__)


class WeatherClient:
    """Async client for the OpenWeatherMap current-weather endpoint."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.api_key = self.settings.OPENWEATHER_API_KEY
        self._http = http or httpx.AsyncClient(
            timeout=self.settings.EXTERNAL_CALL_TIMEOUT_SECONDS
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def current(self) -> Optional[WeatherSnapshot]:
        """Current temperature and humidity at the configured coordinates."""
        if not self.enabled:
            return None

        params = {
            "lat": self.settings.GYM_LATITUDE,
            "lon": self.settings.GYM_LONGITUDE,
            "appid": self.api_key,
            "units": "metric",
        }
        try:
            response = await self._http.get(self.settings.OPENWEATHER_URL, params=params)
        except httpx.TimeoutException as exc:
            logger.error("Weather API timed out")
            raise UpstreamTimeout("Weather lookup timed out") from exc
        except httpx.HTTPError as exc:
            logger.error(f"Weather API error: {exc}")
            raise UpstreamError(f"Weather lookup failed: {exc}") from exc

        if not response.is_success:
            logger.error(f"Weather API error: {response.status_code} - {response.text}")
            raise UpstreamError(f"Weather lookup failed with HTTP {response.status_code}")

        try:
            data = response.json()
            main = data["main"]
            weather = data.get("weather") or [{}]
            observed = data.get("dt")
            return WeatherSnapshot(
                temperature=main["temp"],
                humidity=main["humidity"],
                description=weather[0].get("description", ""),
                observed_at=(
                    datetime.fromtimestamp(observed, tz=utc_now().tzinfo)
                    if observed
                    else utc_now()
                ),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise UpstreamError("Weather API returned an unexpected payload") from exc

    async def aclose(self) -> None:
        await self._http.aclose()


def get_weather_client(request: Request) -> WeatherClient:
    """Dependency: the client created in the application lifespan."""
    return request.app.state.weather
