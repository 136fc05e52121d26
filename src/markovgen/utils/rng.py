import random
from typing import Optional


def seeded_rng(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)
