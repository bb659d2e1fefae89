import csv
import os
from pathlib import Path
from typing import Optional, Union

import pandas as pd


class EnergyTraceWriter:
    """
    Append-only writer of the energy trace.
    One line per sample, `timestamp,deviceIdentity,remainingEnergyJoules`, no header.
    The file is kept open for the whole run and flushed after every record,
    so a reader (or a crash) never sees a partial line.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file = None
        self._writer = None
        self.records_written = 0

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self) -> "EnergyTraceWriter":
        if self._file is not None:
            return self
        directory = os.path.dirname(self.path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)
        self._file = open(self.path, "a", newline="")
        self._writer = csv.writer(self._file, lineterminator="\n")
        return self

    def write(self, timestamp: float, device: str, remaining_energy_joules: float) -> None:
        if self._file is None:
            raise OSError(f"energy trace {self.path} is not open")
        self._writer.writerow([timestamp, device, remaining_energy_joules])
        self._file.flush()
        self.records_written += 1

    def close(self) -> None:
        if self._file is None:
            return
        try:
            self._file.flush()
        finally:
            self._file.close()
            self._file = None
            self._writer = None

    def __enter__(self) -> "EnergyTraceWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None


ENERGY_TRACE_COLUMNS = ["time", "device", "remaining_J"]


def read_energy_trace(path: Union[str, Path]) -> pd.DataFrame:
    """
    Loads an energy trace written by EnergyTraceWriter, rows in file order.
    """
    if os.path.getsize(path) == 0:  # run without energy samples
        return pd.DataFrame(columns=ENERGY_TRACE_COLUMNS)
    return pd.read_csv(
        path,
        header=None,
        names=ENERGY_TRACE_COLUMNS,
        dtype={"device": str},
    )
