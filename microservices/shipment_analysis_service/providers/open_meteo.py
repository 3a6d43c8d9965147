"""
Open-Meteo Historical Weather Source

Hourly observations from the Open-Meteo archive API (no API key required).
"""

import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional

import httpx

from core.retry import RetryExhaustedError, RetryPolicy, is_http_retryable, is_network_error, retry_with_backoff

from ..models import WeatherData, WeatherOutcome
from ..protocols import WeatherApiError

logger = logging.getLogger(__name__)

ARCHIVE_URL = "https://archive-api.open-meteo.com/v1/archive"
HOURLY_VARIABLES = "temperature_2m,wind_speed_10m,wind_direction_10m"
KMH_PER_MS = 3.6


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def round_tenth(value: float) -> float:
    """Round half up to one decimal"""
    return math.floor(value * 10 + 0.5) / 10


def is_retryable_weather_error(error: BaseException) -> bool:
    """Network failures, 429 and 5xx are retried; API-level errors are not"""
    if isinstance(error, WeatherApiError):
        return is_http_retryable(error.status_code)
    return is_network_error(error)


def parse_weather_response(payload: Dict[str, Any], timestamp: datetime) -> WeatherOutcome:
    """
    Pick the hourly slot for the timestamp's UTC hour.

    Temperature stays in Celsius; wind speed arrives in km/h and is reported in m/s.
    """
    hourly = payload.get("hourly") or {}
    times = hourly.get("time") or []
    if not times:
        return WeatherOutcome.no_data("No hourly data returned from API")

    hour = f"{timestamp.astimezone(timezone.utc).hour:02d}"
    index = next((i for i, t in enumerate(times) if f"T{hour}:" in t), -1)
    if index < 0:
        return WeatherOutcome.no_data(f"No data found for hour {hour}:00 UTC")

    def _value(key: str) -> Optional[float]:
        values = hourly.get(key) or []
        return values[index] if index < len(values) else None

    temperature = _value("temperature_2m")
    wind_speed_kmh = _value("wind_speed_10m")
    wind_direction = _value("wind_direction_10m")

    if temperature is None:
        return WeatherOutcome.no_data("Temperature data is null")
    if wind_speed_kmh is None:
        return WeatherOutcome.no_data("Wind speed data is null")

    return WeatherOutcome.success(WeatherData(
        temperature=round_tenth(temperature),
        wind_speed=round_tenth(wind_speed_kmh / KMH_PER_MS),
        wind_direction=wind_direction,
    ))


class OpenMeteoWeatherSource:
    """Weather source backed by the Open-Meteo archive"""

    def __init__(
        self,
        retry_policy: RetryPolicy,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = ARCHIVE_URL,
        today: Callable[[], date] = _utc_today,
        sleep=None,
    ):
        self.retry_policy = retry_policy
        self.base_url = base_url
        self._today = today
        self._sleep = sleep
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=30.0)

    async def close(self):
        """Close HTTP client"""
        if self._owns_client:
            await self.http_client.aclose()

    async def get_weather(self, latitude: float, longitude: float, timestamp: datetime) -> WeatherOutcome:
        """
        Fetch the observed weather at a port for the hour of arrival.

        Args:
            latitude: Port latitude
            longitude: Port longitude
            timestamp: Arrival time

        Returns:
            SUCCESS with rounded measurements, NO_DATA_AVAILABLE for future
            dates or missing values, RETRY_EXHAUSTED or FATAL_ERROR otherwise
        """
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        requested = timestamp.astimezone(timezone.utc).date()

        if requested > self._today():
            return WeatherOutcome.no_data(
                f"Archive API only supports historical data. Requested date {requested.isoformat()} is in the future."
            )

        kwargs = {"sleep": self._sleep} if self._sleep else {}
        try:
            payload = await retry_with_backoff(
                lambda: self._fetch(latitude, longitude, requested),
                self.retry_policy,
                is_retryable_weather_error,
                **kwargs,
            )
        except RetryExhaustedError as e:
            logger.error(f"Weather fetch for ({latitude}, {longitude}) gave up after {e.attempts} attempts")
            return WeatherOutcome.retry_exhausted(
                f"Failed to fetch weather data after {e.attempts} attempts: {e.last_error}"
            )
        except Exception as e:
            logger.error(f"Weather fetch for ({latitude}, {longitude}) failed: {e}")
            return WeatherOutcome.fatal(str(e) or type(e).__name__)

        return parse_weather_response(payload, timestamp)

    async def _fetch(self, latitude: float, longitude: float, day: date) -> Dict[str, Any]:
        """Fetch one day of hourly data from the archive"""
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "start_date": day.isoformat(),
            "end_date": day.isoformat(),
            "hourly": HOURLY_VARIABLES,
            "timezone": "UTC",
        }
        response = await self.http_client.get(self.base_url, params=params)
        if not response.is_success:
            raise WeatherApiError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        data = response.json()
        if data.get("error") is True:
            raise WeatherApiError(f"Open-Meteo API error: {data.get('reason') or 'Unknown error'}")
        return data


__all__ = [
    "ARCHIVE_URL",
    "OpenMeteoWeatherSource",
    "is_retryable_weather_error",
    "parse_weather_response",
    "round_tenth",
]
