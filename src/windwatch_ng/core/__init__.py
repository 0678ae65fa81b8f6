"""
Core application components for WindWatch-NG.
"""

from .config import AppConfig, NWSApiConfig, FilteringConfig, LoggingConfig, DatabaseConfig
from .models import WeatherAlert, StationReading, EnrichedAlert, kmh_to_mph, KMH_PER_MPH

__all__ = [
    "AppConfig",
    "NWSApiConfig",
    "FilteringConfig",
    "LoggingConfig",
    "DatabaseConfig",
    "WeatherAlert",
    "StationReading",
    "EnrichedAlert",
    "kmh_to_mph",
    "KMH_PER_MPH",
]
