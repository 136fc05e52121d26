import logging
from itertools import islice
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Iterator, List, Mapping, Optional, Sequence

from markovgen.types import END, START, Context, Sentinel, State, Token
from markovgen.utils.rng import seeded_rng

from .protocols import Sampler
from .table import TransitionTable

LOGGER = logging.getLogger(__name__)


class ReservedTokenError(ValueError):
    """A training sequence contained one of the reserved START/END sentinels."""


def _validate_tokens(tokens: Sequence[Token]) -> None:
    for i, tok in enumerate(tokens):
        if isinstance(tok, Sentinel):
            raise ReservedTokenError(
                f"Token {tok!r} at index {i} is a reserved sentinel and cannot be fed to a chain."
            )
        try:
            hash(tok)
        except TypeError as exc:
            raise TypeError(
                f"Chain tokens must be hashable; got {type(tok).__name__} at index {i}."
            ) from exc


def _is_hashable(obj: object) -> bool:
    try:
        hash(obj)
    except TypeError:
        return False
    return True


def _check_placement(ctx: Context, dist: Mapping[State, int]) -> None:
    if END in ctx:
        raise ValueError(f"Context {ctx!r} contains the END sentinel.")
    lead = 0
    while lead < len(ctx) and ctx[lead] is START:
        lead += 1
    if START in ctx[lead:]:
        raise ValueError(f"Context {ctx!r} has a START sentinel after a regular token.")
    if START in dist:
        raise ValueError(f"Context {ctx!r} lists the START sentinel as a successor.")


def _draw(dist: Mapping[State, int], rng: Sampler) -> State:
    total = sum(dist.values())
    cap = rng.randrange(total)
    running = 0
    for tok, n in dist.items():
        running += n
        if running > cap:
            return tok
    raise RuntimeError(f"Weighted draw {cap} fell outside total count {total}.")


class Chain:
    """Markov chain over arbitrary hashable tokens with a fixed history window.

    Training pads every sequence with `order` START sentinels and one END
    sentinel, so generation always begins from the all-START context and stops
    when END is drawn.
    """

    def __init__(self, order: int = 2, seed: Optional[int] = None):
        if isinstance(order, bool) or not isinstance(order, int):
            raise TypeError(f"order must be an int, got {type(order).__name__}.")
        if order < 1:
            raise ValueError(f"order must be >= 1, got {order}.")
        self._order = order
        self._table = TransitionTable()
        self._rng = seeded_rng(seed)

    @property
    def order(self) -> int:
        return self._order

    @property
    def table(self) -> Mapping[Context, Mapping[State, int]]:
        """Read-only view of the transition counts."""
        return MappingProxyType({ctx: dist for ctx, dist in self._table.items()})

    def _start(self) -> Context:
        return (START,) * self._order

    # Training

    def feed(self, tokens: Iterable[Token]) -> "Chain":
        seq = list(tokens)
        _validate_tokens(seq)

        padded: List[State] = [START] * self._order
        padded.extend(seq)
        padded.append(END)
        k = self._order
        for i in range(len(padded) - k):
            self._table.record(tuple(padded[i : i + k]), padded[i + k])

        LOGGER.debug("Fed %d tokens (order=%d, contexts=%d)", len(seq), k, len(self._table))
        return self

    def feed_many(self, sequences: Iterable[Iterable[Token]]) -> "Chain":
        for seq in sequences:
            self.feed(seq)
        return self

    def reset(self) -> None:
        LOGGER.debug("Resetting chain with %d contexts", len(self._table))
        self._table.clear()

    # Generation

    def walk(self, rng: Optional[Sampler] = None, start: Optional[Context] = None) -> Iterator[Token]:
        """Lazily yield generated tokens until END is drawn or the context is unknown."""
        rng = rng if rng is not None else self._rng
        context = tuple(start) if start is not None else self._start()
        while True:
            dist = self._table.lookup(context)
            if not dist:
                return
            nxt = _draw(dist, rng)
            if nxt is END:
                return
            yield nxt
            context = context[1:] + (nxt,)

    def generate(self, rng: Optional[Sampler] = None, max_length: Optional[int] = None) -> List[Token]:
        if max_length is not None and max_length < 0:
            raise ValueError(f"max_length must be >= 0, got {max_length}.")
        return list(islice(self.walk(rng), max_length))

    def generate_from_token(
        self,
        token: Token,
        rng: Optional[Sampler] = None,
        max_length: Optional[int] = None,
    ) -> List[Token]:
        """Generate a sequence that begins with `token`; empty if it never led anything."""
        if isinstance(token, Sentinel):
            raise ReservedTokenError(f"Token {token!r} is a reserved sentinel and cannot start generation.")
        if max_length is not None and max_length < 0:
            raise ValueError(f"max_length must be >= 0, got {max_length}.")
        start = (token,) * self._order
        if start not in self._table or max_length == 0:
            return []
        remaining = None if max_length is None else max_length - 1
        out = [token]
        out.extend(islice(self.walk(rng, start=start), remaining))
        return out

    def iter(self, rng: Optional[Sampler] = None) -> Iterator[List[Token]]:
        while True:
            yield self.generate(rng)

    def iter_for(self, size: int, rng: Optional[Sampler] = None) -> Iterator[List[Token]]:
        if size < 0:
            raise ValueError(f"size must be >= 0, got {size}.")
        return islice(self.iter(rng), size)

    # Queries

    def lookup(self, context: Sequence[State]) -> Mapping[State, int]:
        """Read-only successor counts for one context (empty when unseen or unhashable)."""
        ctx = tuple(context)
        if not _is_hashable(ctx):
            return MappingProxyType({})
        return self._table.lookup(ctx)

    def probability(self, context: Sequence[State], next_token: Hashable) -> float:
        ctx = tuple(context)
        if len(ctx) != self._order or not _is_hashable(next_token):
            return 0.0
        dist = self.lookup(ctx)
        total = sum(dist.values())
        if total == 0:
            return 0.0
        return dist.get(next_token, 0) / total

    def distribution(self, context: Sequence[State]) -> Dict[State, float]:
        dist = self.lookup(context)
        total = sum(dist.values())
        if total == 0:
            return {}
        return {tok: n / total for tok, n in dist.items()}

    def total_contexts(self) -> int:
        return self._table.total_contexts()

    def total_transitions(self) -> int:
        return self._table.total_transitions()

    def is_empty(self) -> bool:
        return self._table.total_contexts() == 0

    def __len__(self) -> int:
        return self._table.total_contexts()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chain):
            return NotImplemented
        return self._order == other._order and self._table == other._table

    def __repr__(self) -> str:
        return f"Chain(order={self._order}, contexts={len(self._table)})"

    @classmethod
    def from_table(cls, order: int, table: TransitionTable, seed: Optional[int] = None) -> "Chain":
        for ctx, dist in table.items():
            if len(ctx) != order:
                raise ValueError(f"Context {ctx!r} has {len(ctx)} tokens; expected order {order}.")
            _check_placement(ctx, dist)
        chain = cls(order=order, seed=seed)
        chain._table = table
        return chain
