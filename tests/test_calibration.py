from __future__ import annotations

import pytest

from conftest import DATASHEET_PROM, FakeBus
from ms5607.calibration import CalibrationCoefficients, read_coefficients
from ms5607.errors import CalibrationError


def test_read_coefficients_big_endian() -> None:
    bus = FakeBus(prom=[0x0102, 0x0304, 0x0506, 0x0708, 0x090A, 0x0B0C])
    coeff = read_coefficients(bus, 0x76)
    assert coeff.as_dict() == {"C1": 0x0102, "C2": 0x0304, "C3": 0x0506, "C4": 0x0708, "C5": 0x090A, "C6": 0x0B0C}


def test_validate_accepts_datasheet_values() -> None:
    coeff = CalibrationCoefficients(*DATASHEET_PROM)
    assert coeff.validate() is coeff


def test_validate_rejects_all_zero_and_all_ones() -> None:
    with pytest.raises(CalibrationError):
        CalibrationCoefficients(0, 0, 0, 0, 0, 0).validate()
    with pytest.raises(CalibrationError):
        CalibrationCoefficients(*([0xFFFF] * 6)).validate()
    # a single zero word is plausible
    CalibrationCoefficients(0, 1, 2, 3, 4, 5).validate()


@pytest.mark.parametrize("bad", [-1, 0x10000, 1.5, True])
def test_rejects_values_outside_word_range(bad) -> None:
    with pytest.raises(CalibrationError):
        CalibrationCoefficients(bad, 1, 2, 3, 4, 5)


def test_from_words_requires_six() -> None:
    with pytest.raises(CalibrationError):
        CalibrationCoefficients.from_words([1, 2, 3])


def test_coefficients_are_immutable() -> None:
    coeff = CalibrationCoefficients(*DATASHEET_PROM)
    with pytest.raises(AttributeError):
        coeff.c1 = 0  # type: ignore[misc]
