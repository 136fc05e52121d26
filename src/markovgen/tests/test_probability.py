import math

from markovgen.chain import Chain
from markovgen.types import END, START


def _trained(order: int) -> Chain:
    chain = Chain(order=order)
    for line in ["I like cats", "I like dogs", "I hate cats", "cats are cute", ""]:
        chain.feed(line.split())
    return chain


def test_probabilities_sum_to_one_per_context():
    for order in (1, 2, 3):
        chain = _trained(order)
        for ctx, dist in chain.table.items():
            total = sum(chain.probability(ctx, tok) for tok in dist)
            assert math.isfinite(total)
            assert abs(total - 1.0) < 1e-9, f"P(* | {ctx}) sums to {total}, not 1."
            assert abs(sum(chain.distribution(ctx).values()) - 1.0) < 1e-9


def test_probability_is_count_ratio():
    chain = _trained(1)
    assert chain.probability((START,), "I") == 3 / 5
    assert chain.probability((START,), END) == 1 / 5
    assert chain.probability(("like",), "cats") == 0.5
    assert chain.distribution(("cats",)) == {END: 2 / 3, "are": 1 / 3}


def test_unseen_queries_return_zero_or_empty():
    chain = _trained(2)
    assert chain.probability(("never", "seen"), "x") == 0.0
    assert chain.probability((START, START), "zebra") == 0.0
    assert chain.probability((START,), "I") == 0.0  # wrong context length
    assert chain.distribution(("never", "seen")) == {}


def test_unhashable_queries_return_zero_or_empty():
    chain = _trained(1)
    assert chain.probability(("I",), ["like"]) == 0.0
    assert chain.probability((["I"],), "like") == 0.0
    assert chain.distribution((["I"],)) == {}
    assert dict(chain.lookup((["I"],))) == {}


def test_lookup_returns_read_only_counts():
    chain = _trained(1)
    assert dict(chain.lookup((START,))) == {"I": 3, "cats": 1, END: 1}
    assert dict(chain.lookup(["like"])) == {"cats": 1, "dogs": 1}
    assert dict(chain.lookup(("zebra",))) == {}
    try:
        chain.lookup((START,))["I"] = 0  # type: ignore[index]
    except TypeError:
        pass
    else:
        raise AssertionError("Chain.lookup must not allow mutation.")


def test_size_accessors():
    chain = _trained(1)
    assert chain.order == 1
    assert chain.total_transitions() == sum(sum(d.values()) for d in chain.table.values())
    assert chain.total_contexts() == len(chain.table) == len(chain)
    assert not chain.is_empty()


def test_table_view_is_read_only():
    chain = _trained(1)
    try:
        chain.table[("x",)] = {}  # type: ignore[index]
    except TypeError:
        pass
    else:
        raise AssertionError("Chain.table must not allow mutation.")
