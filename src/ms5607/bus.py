"""
I2C transport used by the driver.

The driver only needs two primitives: an addressed single-byte write and an
addressed raw read of a fixed length. Anything implementing `BusTransport`
can be injected, which is how the tests replace the hardware.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from smbus2 import SMBus, i2c_msg

from .errors import BusError

logger = logging.getLogger(__name__)


class BusTransport(Protocol):
    def write_command(self, address: int, command: int) -> None:
        ...

    def read_bytes(self, address: int, count: int) -> bytes:
        ...


class SMBusTransport:
    """`BusTransport` backed by a Linux i2c-dev bus through smbus2."""

    def __init__(self, bus: SMBus, *, owns_bus: bool = False) -> None:
        self._bus = bus
        self._owns_bus = owns_bus

    @classmethod
    def open(cls, bus_number: int) -> "SMBusTransport":
        try:
            bus = SMBus(bus_number)
        except OSError as exc:
            raise BusError(f"Cannot open I2C bus {bus_number}: {exc}") from exc
        logger.debug("Opened I2C bus %d", bus_number)
        return cls(bus, owns_bus=True)

    def write_command(self, address: int, command: int) -> None:
        try:
            self._bus.write_byte(address, command)
        except OSError as exc:
            logger.warning("I2C write failed (addr=0x%02X cmd=0x%02X): %s", address, command, exc)
            raise BusError(f"Write failed: {exc}", address=address, command=command) from exc

    def read_bytes(self, address: int, count: int) -> bytes:
        msg = i2c_msg.read(address, count)
        try:
            self._bus.i2c_rdwr(msg)
        except OSError as exc:
            logger.warning("I2C read of %d bytes failed (addr=0x%02X): %s", count, address, exc)
            raise BusError(f"Read failed: {exc}", address=address) from exc
        data = bytes(list(msg))
        if len(data) != count:
            raise BusError(f"Short read: expected {count} bytes, got {len(data)}", address=address)
        return data

    def close(self) -> None:
        if self._owns_bus:
            self._bus.close()

    def __enter__(self) -> "SMBusTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def read_exact(transport: BusTransport, address: int, count: int, *, command: Optional[int] = None) -> bytes:
    """Read `count` bytes, treating any other length as a bus failure."""
    data = transport.read_bytes(address, count)
    if len(data) != count:
        raise BusError(
            f"Short read: expected {count} bytes, got {len(data)}",
            address=address,
            command=command,
        )
    return bytes(data)
