"""
NWS API client for fetching alerts, zones and station observations.
"""

from datetime import datetime
from typing import List, Optional, Dict, Any, Set, Tuple
import logging
import asyncio
import httpx
from dateutil import parser

from ..core.config import NWSApiConfig
from ..core.models import WeatherAlert, StationReading

logger = logging.getLogger(__name__)


class NWSClientError(Exception):
    """NWS API client error."""

    pass


class NWSClient:
    """NWS API client.

    Every request is a single attempt: failures surface as NWSClientError and
    callers decide how to degrade. In-flight requests are capped by a
    semaphore sized from the configuration.
    """

    def __init__(
        self,
        config: NWSApiConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize NWS client.

        Args:
            config: NWS API configuration
            transport: Optional httpx transport (used to inject fakes in tests)
        """
        self.config = config
        self._semaphore = asyncio.Semaphore(config.max_concurrent_requests)
        self.client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            headers={
                "User-Agent": config.user_agent,
                "Accept": "application/geo+json",
            },
            follow_redirects=True,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def _parse_datetime(self, dt_str: str) -> datetime:
        """Parse ISO datetime string to datetime object."""
        try:
            return parser.isoparse(dt_str)
        except (ValueError, TypeError) as e:
            raise NWSClientError(f"Invalid datetime {dt_str!r}: {e}") from e

    def _parse_alert(self, feature: Dict[str, Any]) -> WeatherAlert:
        """Parse a GeoJSON feature into a WeatherAlert."""
        if not isinstance(feature, dict):
            raise NWSClientError("Feature is not an object")

        props = feature.get("properties")
        if not isinstance(props, dict):
            raise NWSClientError("Feature missing or invalid 'properties'")

        alert_id = feature.get("id") or props.get("id")
        if not alert_id:
            raise NWSClientError("Feature missing required field: id")
        if not isinstance(props.get("event"), str):
            raise NWSClientError("Feature properties missing required field: event")

        sent = None
        if props.get("sent") is not None:
            sent = self._parse_datetime(props["sent"])

        zones = props.get("affectedZones")
        if not isinstance(zones, list):
            zones = []

        return WeatherAlert(
            id=alert_id,
            event=props["event"],
            headline=props.get("headline"),
            sent=sent,
            affected_zones=[zone for zone in zones if isinstance(zone, str)],
        )

    def _parse_coordinates(self, geometry: Any) -> Optional[Tuple[float, float]]:
        """Extract a (longitude, latitude) pair from a GeoJSON point geometry."""
        if not isinstance(geometry, dict):
            return None
        coords = geometry.get("coordinates")
        if not isinstance(coords, (list, tuple)) or len(coords) < 2:
            return None
        lon, lat = coords[0], coords[1]
        for value in (lon, lat):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return None
        return float(lon), float(lat)

    def _parse_observation(self, station_url: str, data: Dict[str, Any]) -> StationReading:
        """Parse a latest-observation payload into a StationReading."""
        props = data.get("properties")
        if not isinstance(props, dict):
            props = {}

        wind_speed = props.get("windSpeed")
        value = wind_speed.get("value") if isinstance(wind_speed, dict) else None
        if value is None:
            value = 0.0
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            raise NWSClientError(f"Invalid windSpeed value {value!r}")

        return StationReading(
            station_url=station_url,
            coordinates=self._parse_coordinates(data.get("geometry")),
            wind_speed_kmh=float(value),
        )

    async def _fetch_json(self, url: str) -> Dict[str, Any]:
        """
        Fetch a JSON object from the NWS API.

        Args:
            url: Absolute URL or path relative to the configured base URL

        Returns:
            Decoded JSON object

        Raises:
            NWSClientError: On transport errors, non-2xx responses or
                payloads that are not JSON objects
        """
        async with self._semaphore:
            try:
                response = await self.client.get(url)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as e:
                raise NWSClientError(
                    f"HTTP error {e.response.status_code} for {url}"
                ) from e
            except httpx.RequestError as e:
                raise NWSClientError(f"Request failed for {url}: {e!r}") from e
            except ValueError as e:
                raise NWSClientError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(data, dict):
            raise NWSClientError(f"Unexpected payload from {url}: not an object")
        return data

    async def fetch_active_alerts(self, area: Optional[str] = None) -> List[WeatherAlert]:
        """
        Fetch active alerts for a state/area.

        Args:
            area: Area code (e.g., "CA"); defaults to the configured area

        Returns:
            Parsed alerts, duplicates and unparseable features removed

        Raises:
            NWSClientError: If the feed itself cannot be fetched
        """
        area = area or self.config.area
        logger.debug(f"Fetching active alerts for area: {area}")

        data = await self._fetch_json(f"/alerts/active?area={area}")
        features = data.get("features")
        if not isinstance(features, list):
            raise NWSClientError("Alerts feed missing 'features' list")

        alerts = []
        seen_alert_ids: Set[str] = set()

        for feature in features:
            try:
                alert = self._parse_alert(feature)
            except NWSClientError as e:
                logger.debug("Skipping invalid alert feature: %s", e)
                continue
            if alert.id in seen_alert_ids:
                continue
            alerts.append(alert)
            seen_alert_ids.add(alert.id)

        logger.debug(f"Retrieved {len(alerts)} active alerts for area {area}")
        return alerts

    async def fetch_zone_stations(self, zone_url: str) -> List[str]:
        """
        Fetch the observation station URLs for a zone.

        Args:
            zone_url: Zone URL as listed in an alert's affectedZones

        Returns:
            Station URLs

        Raises:
            NWSClientError: On fetch failure or a missing station list
        """
        data = await self._fetch_json(zone_url)
        props = data.get("properties")
        stations = props.get("observationStations") if isinstance(props, dict) else None
        if not isinstance(stations, list):
            raise NWSClientError(f"Zone {zone_url} missing 'observationStations'")
        return [station for station in stations if isinstance(station, str)]

    async def fetch_latest_observation(self, station_url: str) -> StationReading:
        """
        Fetch the latest observation for a station.

        Args:
            station_url: Station URL

        Returns:
            Station reading (coordinates may be None if the station
            reported no geometry)

        Raises:
            NWSClientError: On fetch failure or malformed payload
        """
        data = await self._fetch_json(f"{station_url.rstrip('/')}/observations/latest")
        return self._parse_observation(station_url, data)

    async def test_connection(self) -> bool:
        """
        Test connection to the NWS API.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            await self._fetch_json(f"/alerts/active?area={self.config.area}")
            logger.info("NWS API connection test successful")
            return True
        except NWSClientError as e:
            logger.error(f"NWS API connection test failed: {e}")
            return False
