"""
MS5607 barometric pressure sensor driver.

The package splits the driver into the command table (`commands`), the I2C
transport seam (`bus`), PROM coefficients (`calibration`), the raw
acquisition sequence (`sequencer`) and the pure datasheet arithmetic
(`compensation`). `MS5607` in `sensor` ties them together.
"""

from importlib.metadata import PackageNotFoundError, version

from .bus import BusTransport, SMBusTransport
from .calibration import CalibrationCoefficients
from .commands import Channel, OversamplingRate
from .compensation import (
    CompensationResult,
    SecondOrderTerms,
    compensate,
    compensate_pressure,
    compensate_temperature,
)
from .config import DriverConfig, load_config
from .errors import BusError, CalibrationError, ConfigError, MS5607Error
from .sensor import MS5607, Reading

try:  # pragma: no cover - fallback when package metadata missing
    __version__ = version("ms5607")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "BusTransport",
    "SMBusTransport",
    "CalibrationCoefficients",
    "Channel",
    "OversamplingRate",
    "CompensationResult",
    "SecondOrderTerms",
    "compensate",
    "compensate_pressure",
    "compensate_temperature",
    "DriverConfig",
    "load_config",
    "BusError",
    "CalibrationError",
    "ConfigError",
    "MS5607Error",
    "MS5607",
    "Reading",
]
