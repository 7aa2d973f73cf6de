from __future__ import annotations

import csv
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO

import numpy as np

from .calibration import CalibrationCoefficients
from .sensor import Reading


@dataclass
class SampleRecord:
    """One polled reading, ready for persistence."""

    ts_ms: float
    d1: int
    d2: int
    temperature_c: float
    pressure_mbar: float
    osr: int

    @classmethod
    def from_reading(cls, ts_ms: float, reading: Reading) -> "SampleRecord":
        return cls(
            ts_ms=ts_ms,
            d1=reading.d1,
            d2=reading.d2,
            temperature_c=reading.temperature,
            pressure_mbar=reading.pressure_mbar,
            osr=reading.rate.ratio,
        )


FIELDNAMES = ["ts_ms", "d1", "d2", "temperature_c", "pressure_mbar", "osr"]


def calibration_metadata(address: int, coefficients: CalibrationCoefficients) -> Dict[str, str]:
    metadata = {"address": f"0x{address:02X}"}
    metadata.update({key: str(value) for key, value in coefficients.as_dict().items()})
    return metadata


class CsvLogger:
    """
    Lazily creates the CSV file when the first record arrives, so a run that
    fails during initialization leaves no empty file behind.
    """

    def __init__(self, path: Path):
        self.path = path
        self._writer: Optional[csv.DictWriter] = None
        self._file_handle: Optional[TextIO] = None
        self._pending_metadata: List[str] = []

    def set_metadata(self, metadata: Dict[str, str]) -> None:
        if not metadata:
            return
        line = "# " + " ".join(f"{key}={value}" for key, value in metadata.items())
        if self._file_handle is None:
            self._pending_metadata.append(line)
            return
        self._file_handle.write(line + "\n")
        self._file_handle.flush()

    def append(self, record: SampleRecord) -> None:
        if self._writer is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = self.path.open("w", newline="", encoding="utf-8")
            for line in self._pending_metadata:
                self._file_handle.write(line + "\n")
            self._pending_metadata.clear()
            self._writer = csv.DictWriter(self._file_handle, fieldnames=FIELDNAMES)
            self._writer.writeheader()
        assert self._writer is not None and self._file_handle is not None
        self._writer.writerow(asdict(record))
        self._file_handle.flush()

    def close(self) -> None:
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None
            self._writer = None


@dataclass(frozen=True)
class ChannelSummary:
    mean: float
    std: float
    minimum: float
    maximum: float


def summarize(records: Sequence[SampleRecord]) -> Dict[str, ChannelSummary]:
    """Mean, population std, min and max of temperature and pressure."""
    if not records:
        raise ValueError("Cannot summarize an empty sample set")
    summary: Dict[str, ChannelSummary] = {}
    for name in ("temperature_c", "pressure_mbar"):
        values = np.array([getattr(record, name) for record in records], dtype=float)
        summary[name] = ChannelSummary(
            mean=float(values.mean()),
            std=float(values.std()),
            minimum=float(values.min()),
            maximum=float(values.max()),
        )
    return summary
