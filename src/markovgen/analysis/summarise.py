"""Summarise a saved transitions.csv into one row per context."""

import argparse
import math
from pathlib import Path

import numpy as np
import pandas as pd

REQUIRED_COLUMNS = {"context", "next_token", "count", "probability"}


def load_transitions(run_root: Path) -> pd.DataFrame:
    path = run_root / "transitions.csv"
    if not path.exists():
        raise FileNotFoundError(f"Missing {path}")
    # keep_default_na off so tokens like "NA" or "null" stay strings
    df = pd.read_csv(path, dtype={"context": str, "next_token": str}, keep_default_na=False)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns in {path}: {sorted(missing)}")
    return df


def summarise_frame(df: pd.DataFrame, log_base: float = 2.0) -> pd.DataFrame:
    def entropy(p: pd.Series) -> float:
        p = p[p > 0.0].to_numpy(dtype=float)
        return float(-(p * np.log(p)).sum() / math.log(log_base))

    summary = (
        df.groupby("context", sort=True)
        .agg(
            n_successors=("next_token", "nunique"),
            total_count=("count", "sum"),
            max_probability=("probability", "max"),
            entropy_bits=("probability", entropy),
        )
        .reset_index()
    )
    return summary.sort_values(["total_count", "context"], ascending=[False, True]).reset_index(drop=True)


def summarise(run_root: Path) -> Path:
    summary = summarise_frame(load_transitions(run_root))
    out = run_root / "context_summary.csv"
    summary.to_csv(out, index=False)
    return out


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--root", type=Path, required=True, help="markgen --outdir directory")
    args = parser.parse_args()
    out = summarise(args.root)
    print(f"Wrote {out}")


if __name__ == "__main__":
    main()
