from .AccessControlMonitor import AccessControlMonitor
from .EnergyMonitor import EnergyMonitor

__all__ = ["AccessControlMonitor", "EnergyMonitor"]
