"""
Component Tests: Open-Meteo Weather Source

The HTTP boundary is served by httpx.MockTransport; retry delays go through a
recording sleep.
"""

from datetime import date, datetime, timezone

import httpx
import pytest

from core.retry import RetryPolicy
from microservices.shipment_analysis_service.models import WeatherFetchStatus
from microservices.shipment_analysis_service.providers.open_meteo import ARCHIVE_URL, OpenMeteoWeatherSource

pytestmark = [pytest.mark.component, pytest.mark.asyncio]

ARRIVAL = datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)
POLICY = RetryPolicy(max_retries=2, base_delay=100, max_delay=1000, jitter_factor=0.1)


class RecordingTransport:
    """Answers each request with the next scripted handler result"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses[min(len(self.requests), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


def _make_source(transport: RecordingTransport, no_sleep, today=date(2024, 6, 1)) -> OpenMeteoWeatherSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
    return OpenMeteoWeatherSource(
        retry_policy=POLICY,
        http_client=client,
        today=lambda: today,
        sleep=no_sleep,
    )


class TestRequestShape:

    async def test_query_parameters(self, factory, no_sleep):
        transport = RecordingTransport(httpx.Response(200, json=factory.make_open_meteo_payload()))
        source = _make_source(transport, no_sleep)

        await source.get_weather(51.9, 4.5, ARRIVAL)

        request = transport.requests[0]
        assert str(request.url).startswith(ARCHIVE_URL)
        params = request.url.params
        assert params["latitude"] == "51.9"
        assert params["longitude"] == "4.5"
        assert params["start_date"] == "2024-01-15"
        assert params["end_date"] == "2024-01-15"
        assert params["hourly"] == "temperature_2m,wind_speed_10m,wind_direction_10m"
        assert params["timezone"] == "UTC"


class TestConversion:

    @pytest.mark.parametrize("kmh,ms", [(10.8, 3.0), (14.4, 4.0), (0.0, 0.0)])
    async def test_wind_speed_km_h_to_m_s(self, factory, no_sleep, kmh, ms):
        payload = factory.make_open_meteo_payload(wind_speeds=[kmh] * 24)
        source = _make_source(RecordingTransport(httpx.Response(200, json=payload)), no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.SUCCESS
        assert outcome.data.wind_speed == ms

    async def test_picks_arrival_hour_and_rounds_temperature(self, factory, no_sleep):
        temperatures = [0.0] * 24
        temperatures[14] = 7.26
        directions = [0.0] * 24
        directions[14] = 225.0
        payload = factory.make_open_meteo_payload(temperatures=temperatures, wind_directions=directions)
        source = _make_source(RecordingTransport(httpx.Response(200, json=payload)), no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.data.temperature == 7.3
        assert outcome.data.wind_direction == 225.0

    async def test_null_temperature_is_no_data(self, factory, no_sleep):
        payload = factory.make_open_meteo_payload(temperatures=[None] * 24)
        source = _make_source(RecordingTransport(httpx.Response(200, json=payload)), no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.NO_DATA_AVAILABLE
        assert outcome.error == "Temperature data is null"

    async def test_null_wind_is_no_data(self, factory, no_sleep):
        payload = factory.make_open_meteo_payload(wind_speeds=[None] * 24)
        source = _make_source(RecordingTransport(httpx.Response(200, json=payload)), no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.NO_DATA_AVAILABLE
        assert outcome.error == "Wind speed data is null"

    async def test_missing_hourly_block_is_no_data(self, no_sleep):
        source = _make_source(RecordingTransport(httpx.Response(200, json={"latitude": 1.0})), no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.NO_DATA_AVAILABLE
        assert outcome.data is None


class TestFutureDates:

    async def test_future_date_makes_no_request(self, no_sleep):
        transport = RecordingTransport(httpx.Response(500))
        source = _make_source(transport, no_sleep, today=date(2024, 1, 14))

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.NO_DATA_AVAILABLE
        assert outcome.error == (
            "Archive API only supports historical data. Requested date 2024-01-15 is in the future."
        )
        assert transport.requests == []

    async def test_same_day_is_allowed(self, factory, no_sleep):
        transport = RecordingTransport(httpx.Response(200, json=factory.make_open_meteo_payload()))
        source = _make_source(transport, no_sleep, today=date(2024, 1, 15))

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.SUCCESS
        assert len(transport.requests) == 1


class TestRetries:

    async def test_server_error_is_retried_until_exhausted(self, no_sleep):
        transport = RecordingTransport(httpx.Response(503))
        source = _make_source(transport, no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.RETRY_EXHAUSTED
        assert len(transport.requests) == POLICY.max_retries + 1
        assert len(no_sleep.delays) == POLICY.max_retries
        assert outcome.error.startswith("Failed to fetch weather data after 3 attempts: HTTP 503")

    async def test_rate_limit_then_success(self, factory, no_sleep):
        transport = RecordingTransport(
            httpx.Response(429),
            httpx.Response(200, json=factory.make_open_meteo_payload()),
        )
        source = _make_source(transport, no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.SUCCESS
        assert len(transport.requests) == 2

    async def test_network_error_is_retried(self, factory, no_sleep):
        transport = RecordingTransport(
            httpx.ConnectError("connection refused"),
            httpx.Response(200, json=factory.make_open_meteo_payload()),
        )
        source = _make_source(transport, no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.SUCCESS
        assert len(transport.requests) == 2

    async def test_client_error_is_fatal_without_retry(self, no_sleep):
        transport = RecordingTransport(httpx.Response(400))
        source = _make_source(transport, no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.FATAL_ERROR
        assert outcome.error == "HTTP 400: Bad Request"
        assert len(transport.requests) == 1
        assert no_sleep.delays == []

    async def test_api_error_body_is_fatal_without_retry(self, no_sleep):
        transport = RecordingTransport(
            httpx.Response(200, json={"error": True, "reason": "Latitude must be in range of -90 to 90°."})
        )
        source = _make_source(transport, no_sleep)

        outcome = await source.get_weather(51.9, 4.5, ARRIVAL)

        assert outcome.status == WeatherFetchStatus.FATAL_ERROR
        assert outcome.error == "Open-Meteo API error: Latitude must be in range of -90 to 90°."
        assert len(transport.requests) == 1


class TestLifecycle:

    async def test_injected_client_is_left_open(self, factory, no_sleep):
        transport = RecordingTransport(httpx.Response(200, json=factory.make_open_meteo_payload()))
        source = _make_source(transport, no_sleep)

        await source.close()

        assert not source.http_client.is_closed

    async def test_owned_client_is_closed(self):
        source = OpenMeteoWeatherSource(retry_policy=POLICY)

        await source.close()

        assert source.http_client.is_closed
