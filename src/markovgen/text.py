"""Word-level helpers for chains over strings."""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from markovgen.chain import Chain, Sampler

LOGGER = logging.getLogger(__name__)


def split_words(line: str) -> List[str]:
    return [w for w in line.split() if w]


def join_tokens(tokens: Sequence[object], sep: str = " ") -> str:
    return sep.join(str(t) for t in tokens)


def feed_str(chain: Chain, text: str) -> Chain:
    """Feed one sentence, splitting on single spaces."""
    return chain.feed(text.split(" "))


def feed_file(chain: Chain, path: Path, *, chars: bool = False) -> int:
    """Feed every line of `path` as its own sequence; returns the number of lines fed.

    Lines are split into words, or into characters when `chars` is set.
    """
    n_lines = 0
    with Path(path).open("r", encoding="utf-8") as handle:
        for line in handle:
            line = line.rstrip("\r\n")
            chain.feed(list(line) if chars else split_words(line))
            n_lines += 1
    LOGGER.debug("Fed %d lines from %s", n_lines, path)
    return n_lines


def generate_str(chain: Chain, rng: Optional[Sampler] = None, max_length: Optional[int] = None) -> str:
    return join_tokens(chain.generate(rng, max_length=max_length))


def generate_str_from_token(
    chain: Chain,
    word: str,
    rng: Optional[Sampler] = None,
    max_length: Optional[int] = None,
) -> str:
    return join_tokens(chain.generate_from_token(word, rng, max_length=max_length))


def str_iter(chain: Chain, rng: Optional[Sampler] = None) -> Iterator[str]:
    return map(join_tokens, chain.iter(rng))


def str_iter_for(chain: Chain, size: int, rng: Optional[Sampler] = None) -> Iterator[str]:
    return map(join_tokens, chain.iter_for(size, rng))
