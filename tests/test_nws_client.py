"""NWSClient request handling and payload parsing."""
import pytest

from windwatch_ng.api.nws_client import NWSClientError

from conftest import BASE, alert_feature, station_url, zone_url


async def test_fetch_active_alerts_parses_features(fake_nws, nws_client):
    fake_nws.alerts([
        alert_feature("a1", "High Wind Warning", [zone_url("CAZ041")]),
        alert_feature("a1", "High Wind Warning", [zone_url("CAZ041")]),
        {"id": "broken", "properties": {"headline": "no event"}},
        alert_feature("a2", "Flood Watch", []),
    ])

    alerts = await nws_client.fetch_active_alerts()

    assert [alert.id for alert in alerts] == [f"{BASE}/alerts/a1", f"{BASE}/alerts/a2"]
    assert alerts[0].affected_zones == [zone_url("CAZ041")]
    assert alerts[0].sent.utcoffset().total_seconds() == -8 * 3600


async def test_fetch_active_alerts_skips_invalid_sent(fake_nws, nws_client):
    fake_nws.alerts([alert_feature("a1", "Wind Advisory", [], sent="yesterday-ish")])
    assert await nws_client.fetch_active_alerts() == []


async def test_feed_http_error_raises(fake_nws, nws_client):
    fake_nws.fail(f"{BASE}/alerts/active?area=CA", status=503)
    with pytest.raises(NWSClientError):
        await nws_client.fetch_active_alerts()


async def test_feed_without_features_raises(fake_nws, nws_client):
    fake_nws.json(f"{BASE}/alerts/active?area=CA", {"title": "odd"})
    with pytest.raises(NWSClientError):
        await nws_client.fetch_active_alerts()


async def test_fetch_zone_stations(fake_nws, nws_client):
    fake_nws.zone("CAZ041", ["KLAX", "KBUR"])
    assert await nws_client.fetch_zone_stations(zone_url("CAZ041")) == [
        station_url("KLAX"), station_url("KBUR"),
    ]


async def test_zone_missing_station_list_raises(fake_nws, nws_client):
    fake_nws.json(zone_url("CAZ041"), {"properties": {}})
    with pytest.raises(NWSClientError):
        await nws_client.fetch_zone_stations(zone_url("CAZ041"))


async def test_observation_parsed(fake_nws, nws_client):
    fake_nws.observation("KLAX", 40.0, coordinates=(-118.4, 33.9))
    reading = await nws_client.fetch_latest_observation(station_url("KLAX"))
    assert reading.station_url == station_url("KLAX")
    assert reading.coordinates == (-118.4, 33.9)
    assert reading.wind_speed_kmh == 40.0


async def test_observation_null_wind_speed_is_zero(fake_nws, nws_client):
    fake_nws.observation("KLAX", None)
    reading = await nws_client.fetch_latest_observation(station_url("KLAX"))
    assert reading.wind_speed_kmh == 0
    assert reading.wind_speed_mph == 0


async def test_observation_without_geometry_has_no_coordinates(fake_nws, nws_client):
    fake_nws.observation("KLAX", 50.0, coordinates=None)
    reading = await nws_client.fetch_latest_observation(station_url("KLAX"))
    assert reading.coordinates is None


async def test_transport_error_raises(fake_nws, nws_client):
    fake_nws.disconnect(f"{station_url('KLAX')}/observations/latest")
    with pytest.raises(NWSClientError):
        await nws_client.fetch_latest_observation(station_url("KLAX"))


async def test_requests_are_not_retried(fake_nws, nws_client):
    url = f"{BASE}/alerts/active?area=CA"
    fake_nws.fail(url, status=500)
    with pytest.raises(NWSClientError):
        await nws_client.fetch_active_alerts()
    assert fake_nws.calls[url] == 1


async def test_user_agent_header_sent(nws_client):
    assert nws_client.client.headers["User-Agent"] == "WindWatch-NG"


async def test_connection_check(fake_nws, nws_client):
    assert await nws_client.test_connection() is False
    fake_nws.alerts([])
    assert await nws_client.test_connection() is True
