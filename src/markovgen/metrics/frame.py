"""Tabular views of a chain's transition counts."""

from typing import List, Tuple

import numpy as np
import pandas as pd

from markovgen.chain import Chain
from markovgen.chain.table import sorted_items
from markovgen.types import Context, State

from .graph import context_label, token_label

FRAME_COLUMNS = ["context", "next_token", "count", "probability"]


def transitions_frame(chain: Chain) -> pd.DataFrame:
    """One row per (context, next token) pair, sentinels rendered as <START>/<END>."""
    rows = []
    for ctx, dist in sorted_items(chain.table):
        total = sum(dist.values())
        for tok, n in dist.items():
            rows.append(
                {
                    "context": context_label(ctx),
                    "next_token": token_label(tok),
                    "count": n,
                    "probability": n / total,
                }
            )
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    return df.sort_values(["context", "next_token"], kind="stable").reset_index(drop=True)


def transition_matrix(chain: Chain) -> Tuple[List[Context], List[State], np.ndarray]:
    """Row-stochastic matrix of P(next token | context).

    Rows follow the returned context list, columns the returned token list
    (every token seen as a successor, END included).
    """
    items = sorted_items(chain.table)
    contexts = [ctx for ctx, _ in items]
    tokens = sorted({tok for _, dist in items for tok in dist}, key=token_label)
    col = {tok: j for j, tok in enumerate(tokens)}

    mat = np.zeros((len(contexts), len(tokens)), dtype=float)
    for i, (_, dist) in enumerate(items):
        for tok, n in dist.items():
            mat[i, col[tok]] = n
    totals = mat.sum(axis=1, keepdims=True)
    if len(contexts):
        mat = mat / totals
    return contexts, tokens, mat
