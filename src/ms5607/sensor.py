from __future__ import annotations

import contextlib
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, ContextManager, Optional, Union

from .bus import BusTransport
from .calibration import CalibrationCoefficients, read_coefficients
from .commands import CMD_RESET, RESET_DELAY_MS, RESET_MIN_DELAY_MS, Channel, OversamplingRate
from .compensation import compensate, compensate_temperature, corrected_temperature
from .errors import CalibrationError, ConfigError
from .sequencer import ConversionSequencer

if TYPE_CHECKING:
    from .config import DriverConfig

logger = logging.getLogger(__name__)

ADDRESS_MAX = 0x7F


@dataclass(frozen=True)
class Reading:
    """One paired temperature + pressure acquisition."""

    d1: int
    d2: int
    temp: int  # 0.01 °C
    pressure: int  # 0.01 mbar
    rate: OversamplingRate

    @property
    def temperature(self) -> float:
        return self.temp / 100.0

    @property
    def pressure_mbar(self) -> float:
        return self.pressure / 100.0


def _check_address(address: int) -> int:
    if isinstance(address, bool) or not isinstance(address, int) or not 0 <= address <= ADDRESS_MAX:
        raise ConfigError(f"I2C address must be a 7-bit integer, got {address!r}")
    return address


class MS5607:
    """
    Driver for one MS5607 on one I2C address.

    Typical use::

        with SMBusTransport.open(1) as bus:
            sensor = MS5607(bus)
            sensor.initialize(0x76)
            sensor.set_oversampling_rate(OversamplingRate.OSR4096)
            print(sensor.get_temperature(), sensor.get_pressure())

    Every measurement blocks for the conversion delay of the selected
    oversampling rate. `get_pressure` and `read` issue two conversions,
    temperature first, because pressure compensation needs the temperature
    delta of the same cycle.
    """

    def __init__(
        self,
        transport: BusTransport,
        address: Optional[int] = None,
        *,
        oversampling: Union[OversamplingRate, int] = OversamplingRate.OSR256,
        reset_delay_ms: float = RESET_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
        lock: Optional[ContextManager] = None,
    ) -> None:
        if reset_delay_ms < RESET_MIN_DELAY_MS:
            raise ConfigError(f"Reset delay must be at least {RESET_MIN_DELAY_MS} ms, got {reset_delay_ms}")
        self.transport = transport
        self._address = _check_address(address) if address is not None else None
        self._rate = OversamplingRate.parse(oversampling)
        self._reset_delay_ms = float(reset_delay_ms)
        self._sleep = sleep
        self._lock = lock
        self._calibration: Optional[CalibrationCoefficients] = None
        self._last_reading: Optional[Reading] = None

    @classmethod
    def from_config(
        cls,
        config: "DriverConfig",
        transport: BusTransport,
        *,
        sleep: Callable[[float], None] = time.sleep,
        lock: Optional[ContextManager] = None,
    ) -> "MS5607":
        return cls(
            transport,
            config.bus.address,
            oversampling=OversamplingRate.from_ratio(config.sensor.oversampling),
            reset_delay_ms=config.sensor.reset_delay_ms,
            sleep=sleep,
            lock=lock,
        )

    @property
    def address(self) -> Optional[int]:
        return self._address

    @property
    def calibration(self) -> Optional[CalibrationCoefficients]:
        return self._calibration

    @property
    def initialized(self) -> bool:
        return self._calibration is not None

    @property
    def oversampling_rate(self) -> OversamplingRate:
        return self._rate

    @property
    def conversion_delay_ms(self) -> int:
        return self._rate.delay_ms

    @property
    def last_reading(self) -> Optional[Reading]:
        return self._last_reading

    def initialize(self, address: Optional[int] = None) -> CalibrationCoefficients:
        """
        Reset the device at `address` and load its PROM coefficients. The
        address is bound only once the coefficients validate.

        Raises `BusError` on transport failure and `CalibrationError` when the
        coefficients are implausible. On any failure the driver is left
        uninitialized; calling again re-reads everything.
        """
        target = _check_address(address) if address is not None else self._require_address()
        self._calibration = None
        self._last_reading = None
        self._reset(target)
        with self._bus_lock():
            coefficients = read_coefficients(self.transport, target)
        coefficients.validate()
        self._address = target
        self._calibration = coefficients
        logger.info("MS5607 at 0x%02X initialized", target)
        logger.debug("Calibration: %s", coefficients.as_dict())
        return coefficients

    def reset(self) -> None:
        """Send the reset command and wait for the PROM reload."""
        self._reset(self._require_address())

    def _reset(self, target: int) -> None:
        with self._bus_lock():
            self.transport.write_command(target, CMD_RESET)
            self._sleep(self._reset_delay_ms / 1000.0)
        logger.debug("Reset sent to 0x%02X", target)

    def set_oversampling_rate(self, rate: Union[OversamplingRate, int]) -> None:
        """Select the oversampling rate; unsupported values raise `ConfigError` and change nothing."""
        self._rate = OversamplingRate.parse(rate)
        logger.debug("Oversampling OSR%d, conversion delay %d ms", self._rate.ratio, self._rate.delay_ms)

    def get_compensated_temperature(self) -> int:
        """One temperature conversion; returns TEMP in 0.01 °C."""
        calib = self._require_calibration()
        d2 = self._sequencer().acquire(Channel.TEMPERATURE, self._rate)
        temp, dt = compensate_temperature(d2, calib)
        return corrected_temperature(temp, dt)

    def get_temperature(self) -> float:
        """One temperature conversion; returns °C."""
        return self.get_compensated_temperature() / 100.0

    def read(self) -> Reading:
        """Temperature conversion followed by pressure conversion (two bus transactions)."""
        calib = self._require_calibration()
        sequencer = self._sequencer()
        d2 = sequencer.acquire(Channel.TEMPERATURE, self._rate)
        d1 = sequencer.acquire(Channel.PRESSURE, self._rate)
        result = compensate(d1, d2, calib)
        reading = Reading(d1=d1, d2=d2, temp=result.temperature, pressure=result.pressure, rate=self._rate)
        self._last_reading = reading
        return reading

    def get_compensated_pressure(self) -> int:
        """Two conversions (temperature, then pressure); returns P in 0.01 mbar."""
        return self.read().pressure

    def get_pressure(self) -> float:
        """Two conversions (temperature, then pressure); returns mbar."""
        return self.read().pressure_mbar

    def _sequencer(self) -> ConversionSequencer:
        return ConversionSequencer(self.transport, self._require_address(), sleep=self._sleep, lock=self._lock)

    def _bus_lock(self) -> ContextManager:
        return self._lock if self._lock is not None else contextlib.nullcontext()

    def _require_address(self) -> int:
        if self._address is None:
            raise ConfigError("No I2C address bound; pass one to initialize()")
        return self._address

    def _require_calibration(self) -> CalibrationCoefficients:
        if self._calibration is None:
            raise CalibrationError("Sensor is not initialized; call initialize() first")
        return self._calibration
