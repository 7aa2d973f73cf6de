"""Command line interface for the ms5607 package."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional

import typer

from .bus import SMBusTransport
from .config import DriverConfig, load_config
from .errors import ConfigError, MS5607Error
from .records import CsvLogger, SampleRecord, calibration_metadata, summarize
from .sensor import MS5607


app = typer.Typer(
    add_completion=False,
    help="MS5607 barometric sensor utilities.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

CONFIG_OPTION = typer.Option(None, "--config", "-c", help="JSON driver configuration.")
SET_OPTION = typer.Option(None, "--set", help="Override config keys, e.g. --set sensor.oversampling=1024")
BUS_OPTION = typer.Option(None, "--bus", "-b", help="I2C bus number (/dev/i2c-N).")
ADDRESS_OPTION = typer.Option(None, "--address", "-a", help="7-bit device address, e.g. 0x76.")


def open_transport(config: DriverConfig) -> SMBusTransport:
    return SMBusTransport.open(config.bus.number)


def _resolve_config(
    config_path: Optional[Path],
    override: Optional[List[str]],
    extra: List[str],
) -> DriverConfig:
    try:
        return load_config(config_path, list(override or []) + extra)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _bus_overrides(bus: Optional[int], address: Optional[str]) -> List[str]:
    overrides = []
    if bus is not None:
        overrides.append(f"bus.number={bus}")
    if address is not None:
        overrides.append(f"bus.address={address}")
    return overrides


def _fail(exc: MS5607Error) -> None:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1) from exc


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def read(
    config_path: Optional[Path] = CONFIG_OPTION,
    override: Optional[List[str]] = SET_OPTION,
    bus: Optional[int] = BUS_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
    osr: Optional[int] = typer.Option(None, "--osr", help="Oversampling ratio: 256|512|1024|2048|4096."),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Number of samples."),
    interval: Optional[float] = typer.Option(None, "--interval", "-i", help="Seconds between samples."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write samples to this CSV file."),
) -> None:
    """Read calibrated temperature and pressure."""

    extra = _bus_overrides(bus, address)
    if osr is not None:
        extra.append(f"sensor.oversampling={osr}")
    if count is not None:
        extra.append(f"poll.count={count}")
    if interval is not None:
        extra.append(f"poll.interval_sec={float(interval)}")
    if out is not None:
        extra.append(f"output_csv={out}")
    cfg = _resolve_config(config_path, override, extra)

    csv_logger = CsvLogger(cfg.output_csv) if cfg.output_csv else None
    records: List[SampleRecord] = []
    try:
        with open_transport(cfg) as transport:
            sensor = MS5607.from_config(cfg, transport)
            coefficients = sensor.initialize()
            if csv_logger:
                csv_logger.set_metadata(calibration_metadata(cfg.bus.address, coefficients))
            for idx in range(cfg.poll.count):
                reading = sensor.read()
                record = SampleRecord.from_reading(time.time() * 1000.0, reading)
                records.append(record)
                if csv_logger:
                    csv_logger.append(record)
                typer.echo(f"{record.temperature_c:8.2f} °C  {record.pressure_mbar:9.2f} mbar")
                if idx + 1 < cfg.poll.count:
                    time.sleep(cfg.poll.interval_sec)
    except MS5607Error as exc:
        _fail(exc)
    finally:
        if csv_logger:
            csv_logger.close()

    if len(records) > 1:
        for name, stats in summarize(records).items():
            typer.echo(
                f"{name}: mean={stats.mean:.2f} std={stats.std:.3f} min={stats.minimum:.2f} max={stats.maximum:.2f}"
            )
    if cfg.output_csv:
        typer.echo(f"Samples written to {cfg.output_csv}")


@app.command()
def calib(
    config_path: Optional[Path] = CONFIG_OPTION,
    override: Optional[List[str]] = SET_OPTION,
    bus: Optional[int] = BUS_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
) -> None:
    """Print the factory calibration coefficients C1..C6."""

    cfg = _resolve_config(config_path, override, _bus_overrides(bus, address))
    try:
        with open_transport(cfg) as transport:
            coefficients = MS5607.from_config(cfg, transport).initialize()
    except MS5607Error as exc:
        _fail(exc)
    typer.echo(f"Device: 0x{cfg.bus.address:02X} on bus {cfg.bus.number}")
    for key, value in coefficients.as_dict().items():
        typer.echo(f"{key}: {value}")


@app.command()
def reset(
    config_path: Optional[Path] = CONFIG_OPTION,
    override: Optional[List[str]] = SET_OPTION,
    bus: Optional[int] = BUS_OPTION,
    address: Optional[str] = ADDRESS_OPTION,
) -> None:
    """Send the reset command."""

    cfg = _resolve_config(config_path, override, _bus_overrides(bus, address))
    try:
        with open_transport(cfg) as transport:
            MS5607.from_config(cfg, transport).reset()
    except MS5607Error as exc:
        _fail(exc)
    typer.echo(f"Reset sent to 0x{cfg.bus.address:02X}")


def run() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    run()
