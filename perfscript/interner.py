from typing import Callable, Dict, Generic, TypeVar

K = TypeVar('K')
V = TypeVar('V')


class Interner:
    """Hands out one shared instance per distinct string."""

    def __init__(self):
        self._table: Dict[str, str] = {}

    def intern(self, raw: str) -> str:
        return self._table.setdefault(raw, raw)

    def __len__(self):
        return len(self._table)

    def __contains__(self, raw):
        return raw in self._table


class Cache(Generic[K, V]):
    """Maps a key to the value computed on its first lookup."""

    def __init__(self):
        self._values: Dict[K, V] = {}

    def get(self, key: K, compute: Callable[[K], V]) -> V:
        try:
            return self._values[key]
        except KeyError:
            value = self._values[key] = compute(key)
            return value

    def __len__(self):
        return len(self._values)

    def __contains__(self, key):
        return key in self._values

    def values(self):
        return self._values.values()
