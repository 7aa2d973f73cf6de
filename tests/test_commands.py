from __future__ import annotations

import pytest

from ms5607.commands import (
    CONVERSION_DELAY_MS,
    Channel,
    OversamplingRate,
    convert_command,
    delay_ms,
    prom_command,
)
from ms5607.errors import ConfigError


def test_delay_table_matches_datasheet() -> None:
    assert {rate.value: delay for rate, delay in CONVERSION_DELAY_MS.items()} == {0: 1, 2: 2, 4: 3, 6: 5, 8: 10}
    delays = [delay_ms(rate) for rate in sorted(OversamplingRate)]
    assert delays == sorted(delays)
    assert len(set(delays)) == len(delays)


def test_convert_commands() -> None:
    assert convert_command(Channel.PRESSURE, OversamplingRate.OSR256) == 0x40
    assert convert_command(Channel.PRESSURE, OversamplingRate.OSR4096) == 0x48
    assert convert_command(Channel.TEMPERATURE, OversamplingRate.OSR256) == 0x50
    assert convert_command(Channel.TEMPERATURE, 6) == 0x56


def test_prom_commands() -> None:
    assert [prom_command(idx) for idx in range(1, 7)] == [0xA2, 0xA4, 0xA6, 0xA8, 0xAA, 0xAC]
    with pytest.raises(ValueError):
        prom_command(0)
    with pytest.raises(ValueError):
        prom_command(7)


def test_ratio_mapping() -> None:
    assert [rate.ratio for rate in OversamplingRate] == [256, 512, 1024, 2048, 4096]
    assert OversamplingRate.from_ratio(1024) is OversamplingRate.OSR1024
    with pytest.raises(ConfigError):
        OversamplingRate.from_ratio(8192)


@pytest.mark.parametrize("value", [1, 3, 10, 256, -2, True, 2.0, "4"])
def test_parse_rejects_unsupported_values(value: int) -> None:
    with pytest.raises(ConfigError):
        OversamplingRate.parse(value)
    with pytest.raises(ValueError):
        delay_ms(value)
