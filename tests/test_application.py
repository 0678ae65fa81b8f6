"""Poll cycle wiring: pipeline run plus storage."""
import httpx
import pytest

from windwatch_ng.api.nws_client import NWSClient
from windwatch_ng.core.application import WindWatchApplication
from windwatch_ng.core.config import AppConfig

from conftest import BASE, alert_feature, zone_url


@pytest.fixture
def config(tmp_path):
    return AppConfig(
        data_dir=tmp_path,
        nws={"area": "CA"},
        logging={"level": "DEBUG", "format": "text"},
    )


@pytest.fixture
async def app(config, fake_nws):
    application = WindWatchApplication(config)
    client = NWSClient(config.nws, transport=httpx.MockTransport(fake_nws.handler))
    await application.initialize(nws_client=client)
    yield application
    await application.shutdown()


async def test_run_once_stores_enriched_alerts(fake_nws, app, caplog):
    fake_nws.alerts([alert_feature("a1", "High Wind Warning", [zone_url("Z1")])])
    fake_nws.zone("Z1", ["S1"])
    fake_nws.observation("S1", 50.0)

    run = await app.run_once()

    assert len(run.alerts) == 1
    record = await app.database_manager.get_alert(f"{BASE}/alerts/a1")
    assert record is not None
    assert record.is_processed is False
    assert "poll_cycle_complete" in caplog.text


async def test_run_once_without_alerts_stores_nothing(fake_nws, app):
    fake_nws.alerts([])

    run = await app.run_once()

    assert run.alerts == []
    assert await app.database_manager.get_unprocessed_alerts() == []


async def test_run_once_reports_feed_failure(fake_nws, app):
    fake_nws.fail(f"{BASE}/alerts/active?area=CA", status=502)

    run = await app.run_once()

    assert not run.feed_ok


async def test_storage_can_be_disabled(config, fake_nws):
    application = WindWatchApplication(config, store=False)
    client = NWSClient(config.nws, transport=httpx.MockTransport(fake_nws.handler))
    await application.initialize(nws_client=client)
    try:
        assert application.database_manager is None
        fake_nws.alerts([])
        assert (await application.run_once()).alerts == []
    finally:
        await application.shutdown()


def test_config_from_missing_yaml_uses_defaults(tmp_path):
    config = AppConfig.from_yaml(tmp_path / "missing.yaml")
    assert config.nws.area == "CA"
    assert config.filtering.event_keywords == ["wind"]
    assert config.filtering.wind_threshold_mph == 15.0


def test_config_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "nws:\n  area: TX\n  max_concurrent_requests: 3\n"
        "filtering:\n  event_keywords: [wind, winter]\n  wind_threshold_mph: 20\n"
    )

    config = AppConfig.from_yaml(path)

    assert config.nws.area == "TX"
    assert config.nws.max_concurrent_requests == 3
    assert config.filtering.event_keywords == ["wind", "winter"]
    assert config.filtering.wind_threshold_mph == 20
