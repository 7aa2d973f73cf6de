"""
First- and second-order compensation from the MS5607 datasheet.

Everything here is a pure function of the raw ADC values and the PROM
coefficients. All scaling is integer; divisions by powers of two are
arithmetic right shifts, as in the datasheet reference code. Python integers
do not overflow, so OFF and SENS keep the full 64-bit range the datasheet
asks for.

Units: TEMP in 0.01 °C (2000 = 20.00 °C), P in 0.01 mbar (110002 = 1100.02 mbar).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .calibration import CalibrationCoefficients

ADC_MAX = 0xFFFFFF

TEMP_REFERENCE = 2000
TEMP_LOW = 2000
TEMP_VERY_LOW = -1500


@dataclass(frozen=True)
class SecondOrderTerms:
    t2: int = 0
    off2: int = 0
    sens2: int = 0


@dataclass(frozen=True)
class CompensationResult:
    dt: int
    temp: int  # first-order TEMP, before T2
    off: int  # after OFF2
    sens: int  # after SENS2
    terms: SecondOrderTerms
    pressure: int

    @property
    def temperature(self) -> int:
        """Fully compensated TEMP (first order minus T2)."""
        return self.temp - self.terms.t2


def _check_adc(name: str, value: int) -> None:
    if not 0 <= value <= ADC_MAX:
        raise ValueError(f"{name}={value} is outside the 24-bit ADC range")


def compensate_temperature(d2: int, calib: CalibrationCoefficients) -> Tuple[int, int]:
    """Return (TEMP, dT) for a raw temperature sample D2."""
    _check_adc("D2", d2)
    dt = d2 - (calib.c5 << 8)
    temp = TEMP_REFERENCE + ((dt * calib.c6) >> 23)
    return temp, dt


def second_order(temp: int, dt: int) -> SecondOrderTerms:
    """Low-temperature correction terms; all zero at or above 20.00 °C."""
    if temp >= TEMP_LOW:
        return SecondOrderTerms()
    t2 = (dt * dt) >> 31
    delta = (temp - TEMP_REFERENCE) ** 2
    off2 = (61 * delta) >> 4
    sens2 = 2 * delta
    if temp < TEMP_VERY_LOW:
        cold = (temp - TEMP_VERY_LOW) ** 2
        off2 += 15 * cold
        sens2 += 8 * cold
    return SecondOrderTerms(t2=t2, off2=off2, sens2=sens2)


def corrected_temperature(temp: int, dt: int) -> int:
    return temp - second_order(temp, dt).t2


def _pressure_terms(d1: int, dt: int, temp: int, calib: CalibrationCoefficients) -> Tuple[int, int, SecondOrderTerms, int]:
    _check_adc("D1", d1)
    off = (calib.c2 << 17) + ((calib.c4 * dt) >> 6)
    sens = (calib.c1 << 16) + ((calib.c3 * dt) >> 7)
    terms = second_order(temp, dt)
    off -= terms.off2
    sens -= terms.sens2
    pressure = (((d1 * sens) >> 21) - off) >> 15
    return off, sens, terms, pressure


def compensate_pressure(d1: int, dt: int, temp: int, calib: CalibrationCoefficients) -> int:
    """
    Return P for a raw pressure sample D1.

    `dt` and `temp` must come from `compensate_temperature` on the temperature
    sample taken together with D1; `temp` is the first-order value.
    """
    return _pressure_terms(d1, dt, temp, calib)[3]


def compensate(d1: int, d2: int, calib: CalibrationCoefficients) -> CompensationResult:
    temp, dt = compensate_temperature(d2, calib)
    off, sens, terms, pressure = _pressure_terms(d1, dt, temp, calib)
    return CompensationResult(dt=dt, temp=temp, off=off, sens=sens, terms=terms, pressure=pressure)
