"""
Mock Weather Source

Offline stand-in for demos: temperature falls with latitude, wind is random.
"""

import math
import random
from datetime import datetime
from typing import Callable

from ..models import WeatherData, WeatherOutcome
from .open_meteo import round_tenth


class MockWeatherSource:
    """Always answers SUCCESS"""

    def __init__(self, rand: Callable[[], float] = random.random):
        self._rand = rand

    async def get_weather(self, latitude: float, longitude: float, timestamp: datetime) -> WeatherOutcome:
        temperature = 20 - abs(latitude) / 3
        wind_speed = 5 + self._rand() * 10
        return WeatherOutcome.success(WeatherData(
            temperature=round_tenth(temperature),
            wind_speed=round_tenth(wind_speed),
            wind_direction=math.floor(self._rand() * 360),
        ))


__all__ = ["MockWeatherSource"]
