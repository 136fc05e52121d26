import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from markovgen.chain import Chain
from markovgen.metrics.branching import mean_branching_entropy_weighted
from markovgen.metrics.frame import FRAME_COLUMNS, transitions_frame
from markovgen.metrics.graph import save_dot, to_dot, to_edge_list
from markovgen.text import feed_file, join_tokens
from markovgen.utils.io import save_chain, save_csv, save_json
from markovgen.utils.logging import configure_logging
from markovgen.utils.rng import seeded_rng

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="markgen",
        description="Train a Markov chain on text files (one sequence per line) and print generated lines.",
    )

    parser.add_argument("files", nargs="+", type=Path, help="Training corpora.")
    parser.add_argument("--order", type=int, default=2, help="Number of preceding tokens used as context.")
    parser.add_argument("--count", type=int, default=1, help="Number of lines to generate.")
    parser.add_argument("--start", type=str, default=None, help="Begin every generated line with this token.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for generation.")
    parser.add_argument("--max-length", type=int, default=None, help="Hard cap on tokens per generated line.")
    parser.add_argument("--chars", action="store_true", help="Tokenise lines into characters instead of words.")

    parser.add_argument("--outdir", type=Path, default=None, help="Write chain.json, transitions.csv and chain.dot here.")
    parser.add_argument("--force", action="store_true", help="Allow writing into an existing output directory.")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="CLI logging verbosity.",
    )

    return parser.parse_args(argv)


def _validate(args: argparse.Namespace) -> None:
    if args.order < 1:
        raise ValueError("--order must be >= 1.")
    if args.count < 0:
        raise ValueError("--count must be >= 0.")
    if args.max_length is not None and args.max_length < 0:
        raise ValueError("--max-length must be >= 0.")
    for path in args.files:
        if not path.is_file():
            raise FileNotFoundError(f"Training file not found: {path}")
    if args.outdir is not None and (args.outdir / "chain.json").exists() and not args.force:
        raise FileExistsError(
            f"Output directory {args.outdir} already holds a chain. Use --force or a fresh --outdir."
        )


def _write_outputs(outdir: Path, chain: Chain, args: argparse.Namespace) -> None:
    config = {
        "files": [str(p) for p in args.files],
        "order": args.order,
        "count": args.count,
        "start": args.start,
        "seed": args.seed,
        "max_length": args.max_length,
        "chars": args.chars,
        "contexts": chain.total_contexts(),
        "transitions": chain.total_transitions(),
    }
    outdir.mkdir(parents=True, exist_ok=True)
    save_json(outdir / "config.json", config)
    save_chain(outdir / "chain.json", chain)
    rows = transitions_frame(chain).to_dict(orient="records")
    save_csv(outdir / "transitions.csv", rows, fieldnames=FRAME_COLUMNS)
    label = f"order={chain.order} contexts={chain.total_contexts()}"
    save_dot(outdir / "chain.dot", to_dot(to_edge_list(chain), label=label))
    LOGGER.info("Wrote chain artefacts to %s", outdir)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    configure_logging(getattr(logging, args.log_level))
    _validate(args)

    chain = Chain(order=args.order)
    LOGGER.info("Training markgen | order=%d files=%d", args.order, len(args.files))
    for i, path in enumerate(args.files, start=1):
        n_lines = feed_file(chain, path, chars=args.chars)
        LOGGER.info("File %d/%d | %s lines=%d", i, len(args.files), path, n_lines)

    LOGGER.info(
        "Training complete | contexts=%d transitions=%d branch_entropy=%.3f bits",
        chain.total_contexts(),
        chain.total_transitions(),
        mean_branching_entropy_weighted(chain, log_base=2.0),
    )

    if args.outdir is not None:
        _write_outputs(args.outdir, chain, args)

    rng = seeded_rng(args.seed)
    sep = "" if args.chars else " "
    for _ in range(args.count):
        if args.start is not None:
            tokens = chain.generate_from_token(args.start, rng, max_length=args.max_length)
            if not tokens:
                LOGGER.warning("Start token %r never begins a context; nothing generated.", args.start)
        else:
            tokens = chain.generate(rng, max_length=args.max_length)
        sys.stdout.write(join_tokens(tokens, sep) + "\n")


if __name__ == "__main__":
    main()
