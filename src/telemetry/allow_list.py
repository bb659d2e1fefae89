from pathlib import Path
from typing import Any, FrozenSet, Iterable, Iterator, Union

from telemetry.identity import normalize_identity


class AllowList:
    """
    Address-based authorization policy: the set of identities considered authorized.
    The set is built once from canonical identities and never changes afterwards,
    a different policy means a new AllowList.
    """

    def __init__(self, identities: Iterable[Any] = ()):
        self._identities: FrozenSet[str] = frozenset(
            normalize_identity(identity) for identity in identities
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AllowList":
        """
        One identity per line, blank lines and '#' comments are ignored
        """
        identities = []
        with open(path, "r") as f:
            for line in f:
                entry = line.split("#", 1)[0].strip()
                if entry:
                    identities.append(entry)
        return cls(identities)

    def is_authorized(self, identity: Any) -> bool:
        return normalize_identity(identity) in self._identities

    def __contains__(self, identity: Any) -> bool:
        return self.is_authorized(identity)

    def __len__(self) -> int:
        return len(self._identities)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._identities))

    def __repr__(self) -> str:
        return f"AllowList({sorted(self._identities)})"
