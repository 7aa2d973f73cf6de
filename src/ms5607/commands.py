from __future__ import annotations

import enum
from typing import Dict, Union

from .errors import ConfigError

CMD_RESET = 0x1E
CMD_CONVERT_D1 = 0x40
CMD_CONVERT_D2 = 0x50
CMD_ADC_READ = 0x00
CMD_PROM_READ_BASE = 0xA0

ADC_READ_LENGTH = 3
PROM_WORD_LENGTH = 2
PROM_COEFFICIENTS = 6

# Datasheet reset time is 2.8 ms; 20 ms keeps the first PROM read clear of
# floating bus levels.
RESET_MIN_DELAY_MS = 3.0
RESET_DELAY_MS = 20.0


class Channel(str, enum.Enum):
    PRESSURE = "pressure"
    TEMPERATURE = "temperature"


class OversamplingRate(enum.IntEnum):
    """Oversampling ratio, valued as the offset added to the convert command."""

    OSR256 = 0x00
    OSR512 = 0x02
    OSR1024 = 0x04
    OSR2048 = 0x06
    OSR4096 = 0x08

    @property
    def ratio(self) -> int:
        return 256 << (self.value // 2)

    @property
    def delay_ms(self) -> int:
        return CONVERSION_DELAY_MS[self]

    @classmethod
    def parse(cls, value: Union["OversamplingRate", int]) -> "OversamplingRate":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"Unsupported oversampling rate {value!r}")
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(str(member.value) for member in cls)
            raise ConfigError(f"Unsupported oversampling rate {value!r} (expected one of {supported})") from exc

    @classmethod
    def from_ratio(cls, ratio: int) -> "OversamplingRate":
        for member in cls:
            if member.ratio == ratio:
                return member
        supported = ", ".join(str(member.ratio) for member in cls)
        raise ConfigError(f"Unsupported oversampling ratio {ratio!r} (expected one of {supported})")


# Milliseconds, rounded up from the datasheet maximum conversion time.
CONVERSION_DELAY_MS: Dict[OversamplingRate, int] = {
    OversamplingRate.OSR256: 1,
    OversamplingRate.OSR512: 2,
    OversamplingRate.OSR1024: 3,
    OversamplingRate.OSR2048: 5,
    OversamplingRate.OSR4096: 10,
}


def delay_ms(rate: Union[OversamplingRate, int]) -> int:
    return CONVERSION_DELAY_MS[OversamplingRate.parse(rate)]


def convert_command(channel: Channel, rate: Union[OversamplingRate, int]) -> int:
    base = CMD_CONVERT_D1 if channel is Channel.PRESSURE else CMD_CONVERT_D2
    return base + OversamplingRate.parse(rate).value


def prom_command(index: int) -> int:
    """PROM read command for coefficient C<index>, index in 1..6."""
    if not 1 <= index <= PROM_COEFFICIENTS:
        raise ValueError(f"PROM coefficient index must be 1..{PROM_COEFFICIENTS}, got {index}")
    return CMD_PROM_READ_BASE + index * 2
