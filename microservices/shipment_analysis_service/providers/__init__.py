"""
Data sources for the shipment analysis service

- TmsJsonShipmentSource: shipments from a TMS JSON export
- WindwardJsonTrackingSource: container tracking from a Windward JSON export
- OpenMeteoWeatherSource: historical weather from the Open-Meteo archive
- MockWeatherSource: offline weather for demos
"""

from .mock_weather import MockWeatherSource
from .open_meteo import OpenMeteoWeatherSource
from .tms_json import TmsJsonShipmentSource
from .windward_json import WindwardJsonTrackingSource

__all__ = [
    "TmsJsonShipmentSource",
    "WindwardJsonTrackingSource",
    "OpenMeteoWeatherSource",
    "MockWeatherSource",
]
