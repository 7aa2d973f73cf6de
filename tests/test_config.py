from __future__ import annotations

from pathlib import Path

import pytest

from ms5607.commands import OversamplingRate
from ms5607.config import DriverConfig, load_config
from ms5607.errors import ConfigError


def test_defaults_without_file() -> None:
    cfg = load_config()
    assert cfg == DriverConfig()
    assert cfg.bus.address == 0x76
    assert cfg.sensor.rate is OversamplingRate.OSR4096


def test_load_config_overrides(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(
        """
        {
          "bus": {"number": 3, "address": "0x77"},
          "sensor": {"oversampling": 512},
          "poll": {"count": 5, "interval_sec": 0.25},
          "output_csv": "out/samples.csv"
        }
        """,
        encoding="utf-8",
    )
    cfg = load_config(cfg_path, ["sensor.oversampling=2048", "bus.address=0x76", "poll.count=2"])
    assert cfg.bus.number == 3
    assert cfg.bus.address == 0x76
    assert cfg.sensor.oversampling == 2048
    assert cfg.sensor.reset_delay_ms == 20.0
    assert cfg.poll.count == 2
    assert cfg.poll.interval_sec == 0.25
    assert cfg.output_csv == Path("out/samples.csv")


@pytest.mark.parametrize(
    "override",
    [
        "sensor.oversampling=300",
        "bus.address=0x80",
        "bus.address=nope",
        "sensor.reset_delay_ms=1",
        "poll.count=0",
        "missing_equals",
        "=3",
        "bus={oops}",
    ],
)
def test_invalid_values_raise_config_error(override: str) -> None:
    with pytest.raises(ConfigError):
        load_config(overrides=[override])


def test_invalid_json(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(bad)


def test_example_config_loads() -> None:
    example = Path(__file__).resolve().parents[1] / "config" / "ms5607.json"
    cfg = load_config(example)
    assert cfg.poll.count == 10
    assert cfg.output_csv is None


def test_numeric_output_name_stays_a_path() -> None:
    cfg = load_config(overrides=["output_csv=2024"])
    assert cfg.output_csv == Path("2024")
