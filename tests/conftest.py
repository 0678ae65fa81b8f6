"""Shared fixtures: a fake NWS API served through httpx.MockTransport."""
from collections import Counter

import httpx
import pytest

from windwatch_ng.api.nws_client import NWSClient
from windwatch_ng.core.config import NWSApiConfig

BASE = "https://api.weather.gov"


def zone_url(name):
    return f"{BASE}/zones/forecast/{name}"


def station_url(name):
    return f"{BASE}/stations/{name}"


def alert_feature(alert_id, event, zones, headline=None, sent="2025-01-10T08:00:00-08:00"):
    return {
        "id": f"{BASE}/alerts/{alert_id}",
        "type": "Feature",
        "properties": {
            "id": alert_id,
            "event": event,
            "headline": headline or f"{event} issued",
            "sent": sent,
            "affectedZones": list(zones),
        },
    }


def zone_payload(stations):
    return {"properties": {"observationStations": list(stations)}}


def observation_payload(kmh, coordinates=(-118.25, 34.05)):
    geometry = {"type": "Point", "coordinates": list(coordinates)} if coordinates else None
    return {
        "geometry": geometry,
        "properties": {"windSpeed": {"unitCode": "wmoUnit:km_h-1", "value": kmh}},
    }


class FakeNWS:
    """Routes request URLs to canned JSON, status codes or transport errors."""

    def __init__(self):
        self.routes = {}
        self.calls = Counter()

    def json(self, url, payload, status=200):
        self.routes[url] = (status, payload)

    def fail(self, url, status=500):
        self.routes[url] = (status, {"title": "Server Error"})

    def disconnect(self, url):
        self.routes[url] = httpx.ConnectError("connection refused")

    def alerts(self, features, area="CA"):
        self.json(f"{BASE}/alerts/active?area={area}", {"features": list(features)})

    def zone(self, name, stations):
        self.json(zone_url(name), zone_payload(station_url(s) for s in stations))

    def observation(self, name, kmh, coordinates=(-118.25, 34.05)):
        self.json(f"{station_url(name)}/observations/latest", observation_payload(kmh, coordinates))

    def observation_url_calls(self, name):
        return self.calls[f"{station_url(name)}/observations/latest"]

    @property
    def total_calls(self):
        return sum(self.calls.values())

    def handler(self, request):
        url = str(request.url)
        self.calls[url] += 1
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, json={"title": "Not Found"})
        if isinstance(route, Exception):
            raise route
        status, payload = route
        return httpx.Response(status, json=payload)


@pytest.fixture
def fake_nws():
    return FakeNWS()


@pytest.fixture
def nws_config():
    return NWSApiConfig(area="CA", timeout=5, max_concurrent_requests=4)


@pytest.fixture
async def nws_client(fake_nws, nws_config):
    client = NWSClient(nws_config, transport=httpx.MockTransport(fake_nws.handler))
    yield client
    await client.close()
