import math

import numpy as np
import pytest

from markovgen.chain import Chain
from markovgen.metrics import (
    context_entropy,
    mean_branching_entropy,
    mean_branching_entropy_weighted,
    transition_matrix,
    transitions_frame,
)
from markovgen.types import END, START


def _chain() -> Chain:
    chain = Chain(order=1)
    chain.feed(["a", "b"]).feed(["a", "c"])
    return chain


def test_transitions_frame_columns_and_probabilities():
    df = transitions_frame(_chain())
    assert list(df.columns) == ["context", "next_token", "count", "probability"]
    assert len(df) == 5
    sums = df.groupby("context")["probability"].sum()
    assert np.allclose(sums.to_numpy(), 1.0)

    row = df[(df["context"] == "a") & (df["next_token"] == "b")].iloc[0]
    assert row["count"] == 1
    assert row["probability"] == pytest.approx(0.5)
    assert set(df["context"]) == {"<START>", "a", "b", "c"}


def test_transitions_frame_of_empty_chain():
    df = transitions_frame(Chain())
    assert df.empty
    assert list(df.columns) == ["context", "next_token", "count", "probability"]


def test_transition_matrix_is_row_stochastic():
    contexts, tokens, mat = transition_matrix(_chain())
    assert mat.shape == (len(contexts), len(tokens))
    assert np.allclose(mat.sum(axis=1), 1.0)
    assert END in tokens
    i = contexts.index((START,))
    assert mat[i, tokens.index("a")] == 1.0


def test_transition_matrix_empty():
    contexts, tokens, mat = transition_matrix(Chain(order=2))
    assert contexts == [] and tokens == []
    assert mat.shape == (0, 0)


def test_branching_entropy():
    chain = _chain()
    assert context_entropy(chain, (START,)) == 0.0
    assert context_entropy(chain, ("a",), log_base=2.0) == pytest.approx(1.0)
    assert context_entropy(chain, ("missing",)) == 0.0

    # contexts: START (0 bits), a (1 bit), b (0), c (0)
    assert mean_branching_entropy(chain, log_base=2.0) == pytest.approx(0.25)
    # weights: START 2, a 2, b 1, c 1
    assert mean_branching_entropy_weighted(chain, log_base=2.0) == pytest.approx(2 / 6)
    assert mean_branching_entropy(Chain()) == 0.0
    assert mean_branching_entropy_weighted(Chain()) == 0.0


def test_entropy_nonnegative_and_finite():
    chain = Chain(order=2)
    for line in ["the cat sat on the mat", "the dog sat on the log", "a cat and a dog"]:
        chain.feed(line.split())
    h = mean_branching_entropy_weighted(chain)
    assert math.isfinite(h)
    assert h >= 0.0
