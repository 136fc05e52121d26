from typing import Protocol


class Sampler(Protocol):
    """Randomness source for weighted draws; `random.Random` satisfies it."""

    def randrange(self, stop: int) -> int:
        ...
