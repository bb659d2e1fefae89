from dataclasses import dataclass, asdict


@dataclass
class ClassificationCounters:
    """
    Per-run packet accounting.

    Attributes:
        authorized: packets whose sender is in the allow-list
        unauthorized: packets from any other sender
        received: every classified packet, the delivered tally used for the PDR
        rejected: malformed events refused before classification (not in received)
    """
    authorized: int = 0
    unauthorized: int = 0
    received: int = 0
    rejected: int = 0

    def reset(self):
        self.authorized = 0
        self.unauthorized = 0
        self.received = 0
        self.rejected = 0

    def snapshot(self) -> "ClassificationCounters":
        return ClassificationCounters(**asdict(self))
