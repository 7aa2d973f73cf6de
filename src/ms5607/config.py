from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .commands import RESET_DELAY_MS, RESET_MIN_DELAY_MS, OversamplingRate
from .errors import ConfigError


@dataclass
class BusConfig:
    number: int = 1
    address: int = 0x76


@dataclass
class SensorConfig:
    oversampling: int = 4096  # ratio, 256..4096
    reset_delay_ms: float = RESET_DELAY_MS

    @property
    def rate(self) -> OversamplingRate:
        return OversamplingRate.from_ratio(self.oversampling)


@dataclass
class PollConfig:
    count: int = 1
    interval_sec: float = 1.0


@dataclass
class DriverConfig:
    bus: BusConfig = field(default_factory=BusConfig)
    sensor: SensorConfig = field(default_factory=SensorConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    output_csv: Optional[Path] = None

    def validate(self) -> "DriverConfig":
        if not 0 <= self.bus.address <= 0x7F:
            raise ConfigError(f"bus.address must be a 7-bit address, got 0x{self.bus.address:X}")
        if self.bus.number < 0:
            raise ConfigError(f"bus.number must be non-negative, got {self.bus.number}")
        OversamplingRate.from_ratio(self.sensor.oversampling)
        if self.sensor.reset_delay_ms < RESET_MIN_DELAY_MS:
            raise ConfigError(f"sensor.reset_delay_ms must be >= {RESET_MIN_DELAY_MS}")
        if self.poll.count < 1:
            raise ConfigError("poll.count must be at least 1")
        if self.poll.interval_sec < 0:
            raise ConfigError("poll.interval_sec may not be negative")
        return self


def _load_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {**base}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = _merge(base[key], value)  # type: ignore[index]
        else:
            merged[key] = value
    return merged


def _to_int(value: Any, key: str) -> int:
    try:
        if isinstance(value, str):
            return int(value, 0)
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(value)
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc


def _to_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number, got {value!r}") from exc


def load_config(path: Path | str | None = None, overrides: Sequence[str] | None = None) -> DriverConfig:
    """
    Load the driver configuration from JSON and apply CLI-style overrides.

    Overrides are dotted `key=value` pairs, e.g.:
        ["bus.address=0x77", "sensor.oversampling=1024"]
    Without a path the defaults are used as the base.
    """
    data = _load_json(Path(path)) if path is not None else {}
    override_data: Dict[str, Any] = {}
    for override in overrides or []:
        key, raw_value = _parse_override(override)
        _assign_nested(override_data, key, raw_value)
    merged = _merge(data, override_data)
    bus_data = merged.get("bus") or {}
    sensor_data = merged.get("sensor") or {}
    poll_data = merged.get("poll") or {}
    config = DriverConfig(
        bus=BusConfig(
            number=_to_int(bus_data.get("number", 1), "bus.number"),
            address=_to_int(bus_data.get("address", 0x76), "bus.address"),
        ),
        sensor=SensorConfig(
            oversampling=_to_int(sensor_data.get("oversampling", 4096), "sensor.oversampling"),
            reset_delay_ms=_to_float(sensor_data.get("reset_delay_ms", RESET_DELAY_MS), "sensor.reset_delay_ms"),
        ),
        poll=PollConfig(
            count=_to_int(poll_data.get("count", 1), "poll.count"),
            interval_sec=_to_float(poll_data.get("interval_sec", 1.0), "poll.interval_sec"),
        ),
        output_csv=Path(str(merged["output_csv"])) if merged.get("output_csv") not in (None, "") else None,
    )
    return config.validate()


def _parse_override(item: str) -> tuple[str, Any]:
    if "=" not in item:
        raise ConfigError(f"Override '{item}' must use key=value syntax")
    key, raw_value = item.split("=", 1)
    key = key.strip()
    if not key:
        raise ConfigError("Override key may not be empty")
    return key, _coerce_value(raw_value.strip())


def _coerce_value(raw: str) -> Any:
    if raw.lower() in {"true", "false"}:
        return raw.lower() == "true"
    try:
        if raw.lower().startswith(("0x", "0o", "0b")):
            return int(raw, 0)
        if "." in raw or "e" in raw.lower():
            return float(raw)
        return int(raw)
    except ValueError:
        pass
    if raw.startswith("{") and raw.endswith("}"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Override value {raw!r} is not valid JSON: {exc}") from exc
    return raw


def _assign_nested(target: Dict[str, Any], dotted_key: str, value: Any) -> None:
    cursor = target
    parts = dotted_key.split(".")
    for part in parts[:-1]:
        cursor = cursor.setdefault(part, {})
    cursor[parts[-1]] = value
