from __future__ import annotations

from pathlib import Path

import httpx
from typer.testing import CliRunner

from mawaqit_cli import cli, config
from mawaqit_cli.cache import MemoryStore, PrayerTimesCache
from mawaqit_cli.prayer_logic import get_time_zone_now
from mawaqit_cli.providers import AlAdhanProvider
from mawaqit_cli.service import SmartPrayerTimes

from payloads import aladhan_day

runner = CliRunner()


def _use_tmp_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(config, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config.json")
    monkeypatch.setattr(cli, "CONFIG_PATH", tmp_path / "config.json")


def _service_with(handler) -> SmartPrayerTimes:
    provider = AlAdhanProvider(transport=httpx.MockTransport(handler))
    return SmartPrayerTimes([provider], cache=PrayerTimesCache(MemoryStore()))


def _healthy(request: httpx.Request) -> httpx.Response:
    if "/calendar/" in request.url.path:
        days = [aladhan_day(day, 2, 2024) for day in range(1, 30)]
        return httpx.Response(200, json={"code": 200, "data": days})
    return httpx.Response(200, json={"code": 200, "data": aladhan_day(1, 2, 2024)})


def test_cities_lists_directory() -> None:
    result = runner.invoke(cli.app, ["cities"])

    assert result.exit_code == 0
    assert "Alexandria" in result.output


def test_today_uses_service(tmp_path: Path, monkeypatch) -> None:
    _use_tmp_config(tmp_path, monkeypatch)
    monkeypatch.setattr(cli, "build_service", lambda cfg: _service_with(_healthy))

    result = runner.invoke(cli.app, ["--city", "Giza"])

    assert result.exit_code == 0
    assert "الجيزة" in result.output
    assert "AlAdhan API" in result.output


def test_unknown_city_is_rejected(tmp_path: Path, monkeypatch) -> None:
    _use_tmp_config(tmp_path, monkeypatch)

    result = runner.invoke(cli.app, ["--city", "Atlantis", "next", "--once"])

    assert result.exit_code != 0


def test_month_exports_csv(tmp_path: Path, monkeypatch) -> None:
    _use_tmp_config(tmp_path, monkeypatch)
    monkeypatch.setattr(cli, "build_service", lambda cfg: _service_with(_healthy))
    csv_path = tmp_path / "feb.csv"

    result = runner.invoke(
        cli.app, ["month", "--month", "2", "--year", "2024", "--csv", str(csv_path)]
    )

    assert result.exit_code == 0
    assert csv_path.exists()


def test_month_failure_exits_with_error(tmp_path: Path, monkeypatch) -> None:
    _use_tmp_config(tmp_path, monkeypatch)
    monkeypatch.setattr(
        cli, "build_service", lambda cfg: _service_with(lambda request: httpx.Response(500))
    )

    result = runner.invoke(cli.app, ["month", "--month", "2", "--year", "2024"])

    assert result.exit_code == 1
    assert "retry" in result.output


def test_config_updates_are_saved(tmp_path: Path, monkeypatch) -> None:
    _use_tmp_config(tmp_path, monkeypatch)

    result = runner.invoke(
        cli.app, ["config", "--language", "en", "--time-format", "24h", "--include-sunrise"]
    )

    assert result.exit_code == 0
    saved = config.load_config()
    assert saved.language == "en"
    assert saved.time_format == "24h"
    assert saved.include_sunrise is True


def test_config_show_prints_without_saving(tmp_path: Path, monkeypatch) -> None:
    _use_tmp_config(tmp_path, monkeypatch)

    result = runner.invoke(cli.app, ["config", "--show", "--language", "en"])

    assert result.exit_code == 0
    assert '"language": "ar"' in result.output
    assert config.load_config().language == "ar"


def test_service_today_follows_configured_time_zone(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(cli, "CACHE_PATH", tmp_path / "cache.json")
    zone = "Pacific/Kiritimati"

    service = cli.build_service(config.Config(time_zone=zone))

    zone_today = get_time_zone_now(zone).date()
    assert service._today() == zone_today
    assert service.cache is not None
    assert service.cache.key_for(30.0444, 31.2357).endswith(f"@{zone_today.isoformat()}")
