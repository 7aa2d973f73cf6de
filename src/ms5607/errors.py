"""Exception hierarchy shared by the driver, configuration and CLI."""
from __future__ import annotations

from typing import Optional


class MS5607Error(Exception):
    """Base class for every error raised by this package."""


class BusError(MS5607Error):
    """A transport-level failure: NACK, timeout, short read or arbitration loss."""

    def __init__(self, message: str, *, address: Optional[int] = None, command: Optional[int] = None) -> None:
        super().__init__(message)
        self.address = address
        self.command = command

    def __str__(self) -> str:
        base = super().__str__()
        details = []
        if self.address is not None:
            details.append(f"address=0x{self.address:02X}")
        if self.command is not None:
            details.append(f"command=0x{self.command:02X}")
        if not details:
            return base
        return f"{base} ({' '.join(details)})"


class CalibrationError(MS5607Error):
    """PROM coefficients are missing or implausible."""


class ConfigError(MS5607Error, ValueError):
    """Unsupported configuration value (oversampling rate, address, delay)."""
