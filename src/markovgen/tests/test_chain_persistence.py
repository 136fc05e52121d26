import json
from pathlib import Path

import pytest

from markovgen.chain import Chain
from markovgen.types import END, START
from markovgen.utils.io import chain_from_dict, load_chain, save_chain


def test_save_and_load_chain(tmp_path: Path) -> None:
    chain = Chain(order=2)
    chain.feed(["I", "like", "cats"]).feed([1, 2.5, "z", None]).feed([("x", 1), "y"]).feed([])

    path = tmp_path / "run" / "chain.json"
    save_chain(path, chain)
    loaded = load_chain(path)

    assert loaded == chain
    assert loaded.order == 2
    assert loaded.probability((START, START), END) == chain.probability((START, START), END)
    assert loaded.probability((START, ("x", 1)), "y") == 1.0


def test_saved_file_encodes_sentinels(tmp_path: Path) -> None:
    chain = Chain(order=1)
    chain.feed(["a"])
    path = tmp_path / "chain.json"
    save_chain(path, chain)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["order"] == 1
    rows = {(json.dumps(r["context"]), json.dumps(r["next"])): r["count"] for r in data["transitions"]}
    assert rows[('[{"__sentinel__": "start"}]', '"a"')] == 1
    assert rows[('["a"]', '{"__sentinel__": "end"}')] == 1


def test_unserialisable_token_raises(tmp_path: Path) -> None:
    chain = Chain(order=1)
    chain.feed([frozenset({1})])
    with pytest.raises(TypeError, match="Cannot serialise"):
        save_chain(tmp_path / "chain.json", chain)


@pytest.mark.parametrize(
    "data, match",
    [
        ({"transitions": []}, "order"),
        ({"order": 0, "transitions": []}, "invalid order"),
        ({"order": 1, "transitions": [{"context": ["a"]}]}, "Malformed transition"),
        ({"order": 1, "transitions": [{"context": ["a"], "next": "b", "count": 0}]}, "positive int"),
        ({"order": 2, "transitions": [{"context": ["a"], "next": "b", "count": 1}]}, "expected order 2"),
        (
            {"order": 1, "transitions": [{"context": [{"__sentinel__": "start"}], "next": {"__sentinel__": "start"}, "count": 1}]},
            "START sentinel as a successor",
        ),
        (
            {"order": 1, "transitions": [{"context": [{"__sentinel__": "end"}], "next": "a", "count": 1}]},
            "contains the END sentinel",
        ),
        (
            {"order": 2, "transitions": [{"context": ["a", {"__sentinel__": "start"}], "next": "b", "count": 1}]},
            "START sentinel after a regular token",
        ),
    ],
)
def test_malformed_chain_data_is_rejected(data, match):
    with pytest.raises(ValueError, match=match):
        chain_from_dict(data)


def test_load_rejects_non_json(tmp_path: Path) -> None:
    path = tmp_path / "chain.json"
    path.write_text("not json", encoding="utf-8")
    with pytest.raises(ValueError, match="not a valid chain file"):
        load_chain(path)
