from __future__ import annotations

import csv
import json
from pathlib import Path
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, List, Optional

from markovgen.chain import Chain, TransitionTable
from markovgen.chain.table import sorted_items
from markovgen.types import Sentinel

FORMAT_VERSION = 1
_SENTINEL_KEY = "__sentinel__"


def _jsonify(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)

    if isinstance(obj, Path):
        return str(obj)

    if isinstance(obj, dict):
        return {str(k): _jsonify(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set)):
        return [_jsonify(v) for v in obj]

    return obj


def save_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(_jsonify(obj), f, indent=2, sort_keys=True)


def save_csv(
    path: Path,
    rows: list[dict[str, Any]],
    fieldnames: Optional[list[str]] = None,
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    if fieldnames is None:
        keys = set()
        for r in rows:
            keys.update(r.keys())
        fieldnames = sorted(keys)

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _encode_token(tok: Any) -> Any:
    if isinstance(tok, Sentinel):
        return {_SENTINEL_KEY: tok.value}
    if isinstance(tok, tuple):
        return [_encode_token(t) for t in tok]
    if tok is None or isinstance(tok, (str, int, float, bool)):
        return tok
    raise TypeError(
        f"Cannot serialise token of type {type(tok).__name__}; "
        "only JSON scalars and tuples of them are supported."
    )


def _decode_token(raw: Any) -> Any:
    if isinstance(raw, dict):
        if set(raw) != {_SENTINEL_KEY}:
            raise ValueError(f"Unexpected object in chain file: {raw!r}")
        return Sentinel(raw[_SENTINEL_KEY])
    if isinstance(raw, list):
        return tuple(_decode_token(r) for r in raw)
    return raw


def chain_to_dict(chain: Chain) -> Dict[str, Any]:
    transitions: List[Dict[str, Any]] = []
    for ctx, dist in sorted_items(chain.table):
        for tok, n in dist.items():
            transitions.append(
                {"context": [_encode_token(t) for t in ctx], "next": _encode_token(tok), "count": n}
            )
    return {"version": FORMAT_VERSION, "order": chain.order, "transitions": transitions}


def chain_from_dict(data: Dict[str, Any]) -> Chain:
    for key in ("order", "transitions"):
        if key not in data:
            raise ValueError(f"Chain data is missing the {key!r} field.")
    order = data["order"]
    if isinstance(order, bool) or not isinstance(order, int) or order < 1:
        raise ValueError(f"Chain data has an invalid order: {order!r}")

    counts: Dict[tuple, Dict[Any, int]] = {}
    for i, row in enumerate(data["transitions"]):
        try:
            ctx = tuple(_decode_token(t) for t in row["context"])
            tok = _decode_token(row["next"])
            n = row["count"]
            dist = counts.setdefault(ctx, {})
            dist[tok] = dist.get(tok, 0) + n
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed transition at index {i}: {row!r}") from exc

    return Chain.from_table(order, TransitionTable.from_dict(counts))


def save_chain(path: Path, chain: Chain) -> None:
    save_json(path, chain_to_dict(chain))


def load_chain(path: Path) -> Chain:
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path} is not a valid chain file: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a chain object.")
    return chain_from_dict(data)
