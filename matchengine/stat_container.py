from __future__ import annotations

"""Historical stat storage with O(1) running max / average per key.

Every write appends to the key's history, updates the running max, and moves the
running average incrementally (avg += (x - avg) / n), so reads during simulation
never rescan the history.
"""

from dataclasses import dataclass, field
from typing import Dict, Generic, Hashable, Iterable, List, Mapping, TypeVar, Union

K = TypeVar("K", bound=Hashable)
Number = Union[int, float]


@dataclass
class _StatSeries:
    values: List[Number] = field(default_factory=list)
    max_value: Number = 0
    avg_value: float = 0.0

    def add(self, value: Number) -> None:
        self.values.append(value)
        n = len(self.values)
        if n == 1:
            self.max_value = value
            self.avg_value = float(value)
            return
        if value > self.max_value:
            self.max_value = value
        self.avg_value += (float(value) - self.avg_value) / n


class StatContainer(Generic[K]):
    """Keyed stat history. Unknown or empty keys read as 0 for sum/average."""

    def __init__(self) -> None:
        self._series: Dict[K, _StatSeries] = {}

    # -------------------------
    # Writes
    # -------------------------
    def update_stat(self, key: K, value: Number) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"stat value must be a number, got {type(value).__name__}")
        series = self._series.get(key)
        if series is None:
            series = self._series[key] = _StatSeries()
        series.add(value)

    def update_many(self, values: Mapping[K, Number]) -> None:
        for key, value in values.items():
            self.update_stat(key, value)

    # -------------------------
    # Reads
    # -------------------------
    def stat_exists(self, key: K) -> bool:
        return key in self._series

    def stat_is_empty(self, key: K) -> bool:
        series = self._series.get(key)
        return series is None or not series.values

    def count(self, key: K) -> int:
        series = self._series.get(key)
        return len(series.values) if series else 0

    def keys(self) -> Iterable[K]:
        return list(self._series.keys())

    def get_sum(self, key: K) -> Number:
        series = self._series.get(key)
        if series is None:
            return 0
        return sum(series.values)

    def get_average(self, key: K) -> float:
        series = self._series.get(key)
        if series is None or not series.values:
            return 0.0
        return series.avg_value

    def get_max(self, key: K) -> Number:
        series = self._series.get(key)
        if series is None:
            raise KeyError(f"no values recorded for stat {key!r}")
        return series.max_value

    def get_all_values(self, key: K) -> List[Number]:
        series = self._series.get(key)
        if series is None:
            raise KeyError(f"no values recorded for stat {key!r}")
        return list(series.values)

    def get_nth_value(self, key: K, n: int) -> Number:
        """0-based index into the key's history."""
        values = self.get_all_values(key)
        if n < 0 or n >= len(values):
            raise IndexError(f"stat {key!r} has {len(values)} values; index {n} out of range")
        return values[n]

    def __len__(self) -> int:
        return len(self._series)

    def __str__(self) -> str:
        lines = ["Stat History:"]
        for key, series in self._series.items():
            label = getattr(key, "value", key)
            history = ", ".join(str(v) for v in series.values)
            lines.append(
                f"{label}   Best: {series.max_value}   Average Value: {round(series.avg_value, 2)}"
                f"   Historical Values: {history}"
            )
        return "\n".join(lines)
