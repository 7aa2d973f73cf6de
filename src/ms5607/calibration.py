from __future__ import annotations

import logging
from dataclasses import astuple, dataclass
from typing import Dict, List

from .bus import BusTransport, read_exact
from .commands import PROM_COEFFICIENTS, PROM_WORD_LENGTH, prom_command
from .errors import CalibrationError

logger = logging.getLogger(__name__)

WORD_MAX = 0xFFFF


@dataclass(frozen=True)
class CalibrationCoefficients:
    """Factory PROM coefficients C1..C6 of one physical sensor."""

    c1: int  # pressure sensitivity, SENS_T1
    c2: int  # pressure offset, OFF_T1
    c3: int  # temperature coefficient of pressure sensitivity, TCS
    c4: int  # temperature coefficient of pressure offset, TCO
    c5: int  # reference temperature, T_REF
    c6: int  # temperature coefficient of the temperature, TEMPSENS

    def __post_init__(self) -> None:
        for name, value in zip(("c1", "c2", "c3", "c4", "c5", "c6"), astuple(self)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise CalibrationError(f"{name.upper()} must be an integer, got {value!r}")
            if not 0 <= value <= WORD_MAX:
                raise CalibrationError(f"{name.upper()}={value} is outside the 16-bit range")

    @classmethod
    def from_words(cls, words: List[int]) -> "CalibrationCoefficients":
        if len(words) != PROM_COEFFICIENTS:
            raise CalibrationError(f"Expected {PROM_COEFFICIENTS} PROM words, got {len(words)}")
        return cls(*words)

    def validate(self) -> "CalibrationCoefficients":
        """
        Reject sets that cannot come from a responding device.

        All zeros means nothing answered (or the read raced the reset); all
        0xFFFF means the bus lines were floating high.
        """
        words = astuple(self)
        if all(word == 0 for word in words):
            raise CalibrationError("PROM returned all-zero coefficients (device not responding or wrong address)")
        if all(word == WORD_MAX for word in words):
            raise CalibrationError("PROM returned all-0xFFFF coefficients (bus lines floating)")
        return self

    def as_dict(self) -> Dict[str, int]:
        return {f"C{idx}": value for idx, value in enumerate(astuple(self), start=1)}


def read_coefficients(transport: BusTransport, address: int) -> CalibrationCoefficients:
    """Read C1..C6 from PROM, most significant byte first. Does not validate."""
    words: List[int] = []
    for index in range(1, PROM_COEFFICIENTS + 1):
        command = prom_command(index)
        transport.write_command(address, command)
        data = read_exact(transport, address, PROM_WORD_LENGTH, command=command)
        words.append(int.from_bytes(data, "big"))
    logger.debug("PROM words from 0x%02X: %s", address, words)
    return CalibrationCoefficients.from_words(words)
