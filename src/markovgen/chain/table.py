"""Exact (context -> next token) occurrence counts."""

from collections import Counter
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Tuple

from markovgen.types import Context, State

_EMPTY: Mapping[State, int] = MappingProxyType({})


class TransitionTable:
    """Flat mapping from a context tuple to a counter of observed successors.

    A context is only ever inserted together with its first successor, so every
    stored context has at least one next-token entry with a count >= 1.
    """

    def __init__(self) -> None:
        self._counts: Dict[Context, Counter] = {}

    def record(self, context: Context, next_token: State) -> None:
        key = tuple(context)
        dist = self._counts.get(key)
        if dist is None:
            dist = self._counts[key] = Counter()
        dist[next_token] += 1

    def lookup(self, context: Context) -> Mapping[State, int]:
        """Read-only next-token distribution for `context`, empty if never observed."""
        dist = self._counts.get(tuple(context))
        if dist is None:
            return _EMPTY
        return MappingProxyType(dist)

    def count(self, context: Context, next_token: State) -> int:
        dist = self._counts.get(tuple(context))
        if dist is None:
            return 0
        return dist.get(next_token, 0)

    def context_total(self, context: Context) -> int:
        dist = self._counts.get(tuple(context))
        if dist is None:
            return 0
        return sum(dist.values())

    def total_contexts(self) -> int:
        return len(self._counts)

    def total_transitions(self) -> int:
        return sum(sum(dist.values()) for dist in self._counts.values())

    def contexts(self) -> Iterator[Context]:
        return iter(self._counts)

    def items(self) -> Iterator[Tuple[Context, Mapping[State, int]]]:
        for ctx, dist in self._counts.items():
            yield ctx, MappingProxyType(dist)

    def clear(self) -> None:
        self._counts.clear()

    def to_dict(self) -> Dict[Context, Dict[State, int]]:
        return {ctx: dict(dist) for ctx, dist in self._counts.items()}

    @classmethod
    def from_dict(cls, data: Mapping[Context, Mapping[State, int]]) -> "TransitionTable":
        table = cls()
        for ctx, dist in data.items():
            for tok, n in dist.items():
                if not isinstance(n, int) or isinstance(n, bool) or n < 1:
                    raise ValueError(f"count for {ctx!r} -> {tok!r} must be a positive int, got {n!r}.")
                table._counts.setdefault(tuple(ctx), Counter())[tok] += n
        return table

    def __contains__(self, context: Any) -> bool:
        return tuple(context) in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransitionTable):
            return NotImplemented
        return self._counts == other._counts

    def __repr__(self) -> str:
        return f"TransitionTable(contexts={self.total_contexts()}, transitions={self.total_transitions()})"


def sorted_items(table: Any) -> List[Tuple[Context, Mapping[State, int]]]:
    """Items of a table (or `Chain.table` view) in a stable order, for exports and display."""
    return sorted(table.items(), key=lambda kv: repr(kv[0]))
