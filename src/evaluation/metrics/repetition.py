from pathlib import Path
from typing import Dict
import json

import pandas as pd

from telemetry.trace_writer import read_energy_trace
from experiments import config


def _read_optional_csv(path: Path) -> pd.DataFrame:
    # monitors do not write empty logs
    if not path.exists():
        return pd.DataFrame()
    return pd.read_csv(path)


class RepetitionResults:
    """
    Results of one saved run folder: summary, monitor logs and energy trace.
    """

    def __init__(
        self,
        id: str,
        summary: dict,
        acl_df: pd.DataFrame,
        energy_df: pd.DataFrame,
        energy_trace: pd.DataFrame,
    ):
        self.id = id
        self.summary = summary
        self.acl_df = acl_df
        self.energy_df = energy_df
        self.energy_trace = energy_trace

    @classmethod
    def from_folder(cls, folder_path: Path) -> "RepetitionResults":
        folder_path = Path(folder_path)
        id = folder_path.name

        with open(folder_path / config.SUMMARY_FILE, "r") as f:
            summary = json.load(f)

        acl_df = _read_optional_csv(folder_path / "log_acl.csv")
        energy_df = _read_optional_csv(folder_path / "log_energy.csv")

        trace_path = folder_path / config.ENERGY_TRACE_FILE
        energy_trace = read_energy_trace(trace_path) if trace_path.exists() else pd.DataFrame()

        return cls(id, summary, acl_df, energy_df, energy_trace)

    @property
    def delivery_ratio(self) -> float:
        return float(self.summary["delivery_ratio_percent"])

    @property
    def average_energy(self) -> float:
        return float(self.summary["average_energy_consumed_joules"])

    def classification_counts(self) -> Dict[str, int]:
        """packets per classification, recomputed from the classifier log"""
        if self.acl_df.empty:
            return {}
        return {str(k): int(v) for k, v in self.acl_df["classification"].value_counts().items()}

    def consumption_rate(self) -> Dict[str, float]:
        """
        Mean energy consumption rate (J/s) of each device, from its first to its last sample.
        Devices with a single sample have rate 0.
        """
        rates = {}
        if self.energy_trace.empty:
            return rates
        for device, samples in self.energy_trace.groupby("device", sort=True):
            t = samples["time"].to_numpy(dtype=float)
            e = samples["remaining_J"].to_numpy(dtype=float)
            elapsed = t[-1] - t[0]
            rates[str(device)] = float((e[0] - e[-1]) / elapsed) if elapsed > 0 else 0.0
        return rates

    def __repr__(self):
        return f"RepetitionResults(id={self.id})"
