"""Bar chart of the next-token distribution after one context."""

import argparse
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt

from markovgen.analysis.summarise import load_transitions


def plot_context(run_root: Path, context: str, top: int = 20, out: Optional[Path] = None) -> Path:
    df = load_transitions(run_root)
    rows = df[df["context"] == context]
    if rows.empty:
        raise ValueError(f"Context {context!r} not found in {run_root / 'transitions.csv'}.")
    rows = rows.sort_values("probability", ascending=False).head(top)

    fig, ax = plt.subplots(figsize=(max(4.0, 0.45 * len(rows) + 2.0), 3.5))
    ax.bar(rows["next_token"], rows["probability"], color="#1f77b4")
    ax.set_ylim(0.0, 1.0)
    ax.set_ylabel("P(next | context)")
    ax.set_title(f"context: {context}")
    ax.tick_params(axis="x", labelrotation=45)
    fig.tight_layout()

    if out is None:
        safe = "".join(c if c.isalnum() else "_" for c in context)
        out = run_root / "plots" / f"context_{safe}.png"
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, dpi=200)
    plt.close(fig)
    return out


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--root", type=Path, required=True)
    parser.add_argument("--context", type=str, required=True, help='Space-joined context, e.g. "<START> <START>"')
    parser.add_argument("--top", type=int, default=20)
    parser.add_argument("--out", type=Path, default=None)
    args = parser.parse_args()
    print(f"Wrote {plot_context(args.root, args.context, top=args.top, out=args.out)}")


if __name__ == "__main__":
    main()
