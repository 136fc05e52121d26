import math
from typing import Mapping, Sequence

from markovgen.chain import Chain
from markovgen.types import State


def _entropy(dist: Mapping[State, int], log_base: float) -> float:
    total = sum(dist.values())
    if total <= 0:
        return 0.0
    h = 0.0
    for n in dist.values():
        p = n / total
        h -= p * math.log(p)
    if log_base != math.e:
        h /= math.log(log_base)
    return h


def context_entropy(chain: Chain, context: Sequence[State], log_base: float = math.e) -> float:
    """Entropy of the next-token distribution after `context` (0.0 when unseen)."""
    return _entropy(chain.lookup(context), log_base)


def mean_branching_entropy(chain: Chain, log_base: float = math.e) -> float:
    """
    Unweighted mean over contexts of

        H(X_{t+1} | C_t=c) = - sum_x p(x|c) log p(x|c)

    log_base:
      - math.e -> nats
      - 2.0    -> bits
    """
    table = chain.table
    if not table:
        return 0.0
    return sum(_entropy(dist, log_base) for dist in table.values()) / len(table)


def mean_branching_entropy_weighted(chain: Chain, log_base: float = math.e) -> float:
    """
    Same entropy weighted by how often each context was observed in training,
    i.e. the expected branching entropy per generated step.
    """
    total_w = 0
    total = 0.0
    for dist in chain.table.values():
        w = sum(dist.values())
        total_w += w
        total += w * _entropy(dist, log_base)
    if total_w <= 0:
        return 0.0
    return total / total_w
