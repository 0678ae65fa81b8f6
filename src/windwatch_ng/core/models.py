"""
Core data models for WindWatch-NG.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, computed_field

# NWS reports wind speed in km/h; mph is derived with this factor.
KMH_PER_MPH = 1.609


def kmh_to_mph(kmh: Optional[float]) -> float:
    """Convert km/h to mph. Zero or missing readings convert to 0."""
    return kmh / KMH_PER_MPH if kmh else 0.0


class WeatherAlert(BaseModel):
    """Active alert as published by the NWS alerts feed."""

    id: str = Field(..., description="Alert identifier")
    event: str = Field(..., description="Alert event type")
    headline: Optional[str] = Field(None, description="Alert headline")
    sent: Optional[datetime] = Field(None, description="Alert sent timestamp")
    affected_zones: List[str] = Field(
        default_factory=list, description="Zone URLs affected by the alert"
    )


class StationReading(BaseModel):
    """Latest wind observation for one station."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    station_url: str = Field(..., alias="stationUrl", description="Station URL")
    coordinates: Optional[Tuple[float, float]] = Field(
        None, description="Longitude/latitude of the station, None when unusable"
    )
    wind_speed_kmh: float = Field(0.0, alias="windSpeedKmh", description="Wind speed in km/h")

    @computed_field(alias="windSpeedMph")
    @property
    def wind_speed_mph(self) -> float:
        return kmh_to_mph(self.wind_speed_kmh)

    @property
    def usable(self) -> bool:
        return self.coordinates is not None

    @classmethod
    def unusable(cls, station_url: str) -> "StationReading":
        """Reading that is always excluded from aggregation."""
        return cls(station_url=station_url, coordinates=None, wind_speed_kmh=0.0)


class EnrichedAlert(BaseModel):
    """Alert together with the stations that qualified for it."""

    id: str
    event: str
    headline: Optional[str] = None
    sent: Optional[datetime] = None
    affected_zones: List[str] = Field(default_factory=list)
    stations: List[StationReading] = Field(default_factory=list)

    @computed_field
    @property
    def observation_stations(self) -> List[str]:
        return [station.station_url for station in self.stations]

    @classmethod
    def from_alert(cls, alert: WeatherAlert, stations: List[StationReading]) -> "EnrichedAlert":
        return cls(
            id=alert.id,
            event=alert.event,
            headline=alert.headline,
            sent=alert.sent,
            affected_zones=list(alert.affected_zones),
            stations=list(stations),
        )

    def to_details(self) -> Dict[str, Any]:
        """JSON-ready document with the field names downstream consumers read."""
        return {
            "id": self.id,
            "event": self.event,
            "headline": self.headline,
            "sent": self.sent.isoformat() if self.sent else None,
            "affectedZones": list(self.affected_zones),
            "observationStations": self.observation_stations,
            "stations": [
                station.model_dump(mode="json", by_alias=True) for station in self.stations
            ],
        }
