from .engine import Chain, ReservedTokenError
from .protocols import Sampler
from .table import TransitionTable

__all__ = [
    "Chain",
    "ReservedTokenError",
    "TransitionTable",
    "Sampler",
]
