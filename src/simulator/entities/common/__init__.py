from .entity import Entity
from .entity_signal import EntitySignal

__all__ = ["Entity", "EntitySignal"]
