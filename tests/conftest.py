from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from ms5607.errors import BusError

# Reference coefficients from the MS5607-02BA03 datasheet example.
DATASHEET_PROM = [46372, 43981, 29059, 27842, 31553, 28165]
DATASHEET_D1 = 6465444
DATASHEET_D2 = 8077636

PROM_COMMANDS = [0xA2, 0xA4, 0xA6, 0xA8, 0xAA, 0xAC]


class FakeBus:
    """
    In-memory MS5607: answers PROM reads from `prom` and ADC reads with the
    value of the last conversion command, looked up in `pressure` or
    `temperature` by conversion base (0x40 / 0x50).
    """

    def __init__(
        self,
        prom: Sequence[int] = DATASHEET_PROM,
        *,
        pressure: int = DATASHEET_D1,
        temperature: int = DATASHEET_D2,
        address: int = 0x76,
    ) -> None:
        self.prom = list(prom)
        self.pressure = pressure
        self.temperature = temperature
        self.address = address
        self.writes: List[Tuple[int, int]] = []
        self.reads: List[Tuple[int, int]] = []
        self.fail_writes: Set[int] = set()
        self.fail_read_after: Set[int] = set()
        self.short_read_after: Set[int] = set()
        self._last_command: Optional[int] = None
        self._conversion: Optional[int] = None

    @property
    def commands(self) -> List[int]:
        return [command for _, command in self.writes]

    def write_command(self, address: int, command: int) -> None:
        if address != self.address:
            raise BusError("NACK", address=address, command=command)
        if command in self.fail_writes:
            raise BusError("injected NACK on write", address=address, command=command)
        self.writes.append((address, command))
        self._last_command = command
        if command & 0xF0 in (0x40, 0x50):
            self._conversion = command & 0xF0

    def read_bytes(self, address: int, count: int) -> bytes:
        self.reads.append((address, count))
        command = self._last_command
        if command in self.fail_read_after:
            raise BusError("injected NACK on read", address=address)
        if command in PROM_COMMANDS:
            value = self.prom[PROM_COMMANDS.index(command)]
        elif command == 0x00:
            if self._conversion == 0x40:
                value = self.pressure
            elif self._conversion == 0x50:
                value = self.temperature
            else:
                value = 0
            self._conversion = None
        else:
            value = 0
        data = value.to_bytes(count, "big")
        if command in self.short_read_after:
            return data[:-1]
        return data


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_bus() -> FakeBus:
    return FakeBus()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()
