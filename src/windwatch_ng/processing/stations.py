"""
Zone resolution, station observations and per-alert station aggregation.
"""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from ..api.nws_client import NWSClient, NWSClientError
from ..core.models import StationReading

logger = logging.getLogger(__name__)


class ZoneResolver:
    """Resolves a zone URL to the observation stations it contains."""

    def __init__(self, client: NWSClient):
        self.client = client

    async def resolve_zone(self, zone_url: str) -> List[str]:
        """
        Fetch the station URLs for a zone.

        Returns an empty list on any failure so that one unreachable zone
        does not affect the others.
        """
        try:
            return await self.client.fetch_zone_stations(zone_url)
        except NWSClientError as e:
            logger.warning(f"Could not get stations for zone {zone_url}: {e}")
            return []


@dataclass(frozen=True)
class ObservationOutcome:
    """Result of fetching one station: a reading or a failure reason."""

    station_url: str
    reading: Optional[StationReading] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reading is not None

    def as_reading(self) -> StationReading:
        """Collapse to a reading; failures become the unusable sentinel."""
        if self.reading is not None:
            return self.reading
        return StationReading.unusable(self.station_url)


class ObservationClient:
    """Fetches the latest observation of a station."""

    def __init__(self, client: NWSClient):
        self.client = client

    async def fetch(self, station_url: str) -> ObservationOutcome:
        try:
            reading = await self.client.fetch_latest_observation(station_url)
        except NWSClientError as e:
            logger.warning(f"Could not get observations for station {station_url}: {e}")
            return ObservationOutcome(station_url=station_url, error=str(e))
        return ObservationOutcome(station_url=station_url, reading=reading)

    async def fetch_observation(self, station_url: str) -> StationReading:
        """Latest reading for a station, or the unusable sentinel on failure."""
        return (await self.fetch(station_url)).as_reading()


def qualifies(reading: StationReading, threshold_mph: float) -> bool:
    """Whether a reading has coordinates and reaches the wind threshold."""
    return reading.coordinates is not None and reading.wind_speed_mph >= threshold_mph


class StationAggregator:
    """Collects the stations of a set of zones that report strong wind."""

    def __init__(self, zone_resolver: ZoneResolver, observation_client: ObservationClient):
        self.zone_resolver = zone_resolver
        self.observation_client = observation_client

    async def resolve_stations(self, zone_urls: Iterable[str]) -> List[str]:
        """Resolve all zones concurrently and return the unique station URLs."""
        zone_results = await asyncio.gather(
            *(self.zone_resolver.resolve_zone(zone_url) for zone_url in zone_urls)
        )

        seen: Set[str] = set()
        unique_stations = []
        for stations in zone_results:
            for station_url in stations:
                if station_url not in seen:
                    seen.add(station_url)
                    unique_stations.append(station_url)
        return unique_stations

    async def aggregate(
        self, zone_urls: Iterable[str], threshold_mph: float
    ) -> List[StationReading]:
        """
        Find the qualifying stations across the given zones.

        Args:
            zone_urls: Zones referenced by an alert
            threshold_mph: Minimum wind speed in mph

        Returns:
            Readings with coordinates and wind speed >= threshold_mph, in no
            guaranteed order; empty when no station qualifies
        """
        station_urls = await self.resolve_stations(zone_urls)
        if not station_urls:
            return []

        outcomes = await asyncio.gather(
            *(self.observation_client.fetch(station_url) for station_url in station_urls)
        )

        failures = Counter(outcome.error for outcome in outcomes if not outcome.ok)
        if failures:
            logger.debug(
                f"{sum(failures.values())} of {len(outcomes)} stations unavailable: "
                f"{dict(failures)}"
            )

        readings = [outcome.as_reading() for outcome in outcomes]
        return [reading for reading in readings if qualifies(reading, threshold_mph)]
