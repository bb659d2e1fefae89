from pathlib import Path
from typing import Dict

import numpy as np

from experiments import config
from .repetition import RepetitionResults


class SimulationResults:
    def __init__(self, id: str, repetitions: list[RepetitionResults]):
        self.id = id
        self.repetitions = repetitions

    @classmethod
    def from_folder(cls, folder_path: Path) -> "SimulationResults":
        folder_path = Path(folder_path)
        repetitions = []

        print(f"Loading run results from folder: {folder_path}")
        for rep_folder in sorted(folder_path.iterdir()):
            if rep_folder.is_dir() and (rep_folder / config.SUMMARY_FILE).exists():
                repetition = RepetitionResults.from_folder(rep_folder)
                repetitions.append(repetition)

        return cls(id=folder_path.name, repetitions=repetitions)

    @staticmethod
    def _stats(values: np.ndarray) -> Dict[str, float]:
        if values.size == 0:
            nan = float("nan")
            return {"mean": nan, "std": nan, "n": 0}
        return {
            "mean": float(np.mean(values)),
            "std": float(np.std(values, ddof=1)) if values.size > 1 else 0.0,
            "n": int(values.size),
        }

    def delivery_ratio_stats(self) -> Dict[str, float]:
        return self._stats(np.array([r.delivery_ratio for r in self.repetitions], dtype=float))

    def average_energy_stats(self) -> Dict[str, float]:
        return self._stats(np.array([r.average_energy for r in self.repetitions], dtype=float))

    def __repr__(self) -> str:
        return f"SimulationResults(id={self.id}, repetitions={self.repetitions})"
