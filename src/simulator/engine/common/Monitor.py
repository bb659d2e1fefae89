import os
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple, Type, TYPE_CHECKING

import pandas as pd

# Avoid circular import issues at type-checking time
if TYPE_CHECKING:
    from simulator.entities.common import Entity, EntitySignal


class Monitor(ABC):
    """
    Consumer of the signals emitted by an observable entity.

    A concrete monitor lists the signal classes it cares about in `signal_types`
    and implements on_signal(); anything else delivered by the entity is dropped
    by update(). Records kept for later analysis go to self.log, one dict per row.
    """

    signal_types: Tuple[Type["EntitySignal"], ...] = ()

    def __init__(self, monitor_name: str = "base_monitor", verbose: bool = True):
        self.log: List[dict] = []
        self.verbose = verbose
        self.monitor_name = monitor_name

    def update(self, entity: "Entity", signal: "EntitySignal"):
        """
        Called by the entity for every emitted signal
        """
        if self.signal_types and not isinstance(signal, self.signal_types):
            return
        self.on_signal(entity, signal)

    @abstractmethod
    def on_signal(self, entity: "Entity", signal: "EntitySignal"):
        pass

    def get_dataframe(self) -> pd.DataFrame:
        """
        Log as a DataFrame indexed by time. Rows with the same time keep their arrival order.
        """
        if not self.log:
            return pd.DataFrame()

        df = pd.DataFrame(self.log)
        if "time" in df.columns:
            df = df.set_index("time").sort_index(kind="stable")
        return df

    def reset(self):
        self.log = []

    def save_to_csv(self, base_path: str) -> Optional[str]:
        """
        Writes the log to '<base_path>_<monitor_name>.csv'.
        Returns the written path, None when there was nothing to save.
        """
        df = self.get_dataframe()
        if df.empty:
            return None

        file_path = f"{base_path}_{self.monitor_name}.csv"
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        df.to_csv(file_path)
        return file_path
