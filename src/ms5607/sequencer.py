from __future__ import annotations

import contextlib
import logging
import time
from typing import Callable, ContextManager, Optional

from .bus import BusTransport, read_exact
from .commands import ADC_READ_LENGTH, CMD_ADC_READ, Channel, OversamplingRate, convert_command, delay_ms

logger = logging.getLogger(__name__)


class ConversionSequencer:
    """
    Runs one raw acquisition: convert command, fixed wait, ADC read.

    The part has no ready flag, so the wait is the only synchronisation. If
    several sensors share a bus, pass the same lock to each sequencer; it is
    held for the full command/delay/read sequence.
    """

    def __init__(
        self,
        transport: BusTransport,
        address: int,
        *,
        sleep: Callable[[float], None] = time.sleep,
        lock: Optional[ContextManager] = None,
    ) -> None:
        self.transport = transport
        self.address = address
        self._sleep = sleep
        self._lock = lock

    def acquire(self, channel: Channel, rate: OversamplingRate) -> int:
        command = convert_command(channel, rate)
        wait_ms = delay_ms(rate)
        with self._lock if self._lock is not None else contextlib.nullcontext():
            self.transport.write_command(self.address, command)
            self._sleep(wait_ms / 1000.0)
            self.transport.write_command(self.address, CMD_ADC_READ)
            data = read_exact(self.transport, self.address, ADC_READ_LENGTH, command=CMD_ADC_READ)
        value = int.from_bytes(data, "big")
        if value == 0:
            logger.warning(
                "ADC returned 0 for %s at 0x%02X (conversion not finished?)", channel.value, self.address
            )
        else:
            logger.debug("%s raw=%d (cmd=0x%02X, %d ms)", channel.value, value, command, wait_ms)
        return value
