from __future__ import annotations

from dataclasses import dataclass
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import subprocess

from markovgen.chain import Chain
from markovgen.chain.table import sorted_items
from markovgen.types import END, Context, Sentinel, State

Edge = Tuple[Context, State, float]  # (context, next_token, probability)

TERMINAL = "<END>"


@dataclass(frozen=True)
class DotStyle:
    rankdir: str = "LR"
    splines: str = "true"
    overlap: str = "false"
    nodesep: float = 0.6
    ranksep: float = 0.9
    pad: float = 0.25

    fontname: str = "Helvetica"
    fontcolor: str = "#222222"
    graph_fontsize: int = 18
    node_fontsize: int = 12
    edge_fontsize: int = 10

    node_shape: str = "box"
    node_style: str = "rounded"
    node_penwidth: float = 1.4
    node_color: str = "#222222"
    start_color: str = "#1f77b4"
    terminal_shape: str = "doublecircle"

    arrowsize: float = 0.9
    edge_color: str = "#222222"
    # penwidth scales linearly with probability between these bounds
    min_penwidth: float = 0.8
    max_penwidth: float = 3.0

    prob_precision: int = 3
    strip_trailing_zeros: bool = False
    show_token: bool = True


def token_label(tok: State) -> str:
    if isinstance(tok, Sentinel):
        return f"<{tok.name}>"
    return str(tok)


def context_label(ctx: Context) -> str:
    return " ".join(token_label(t) for t in ctx)


def successor(ctx: Context, tok: State) -> Optional[Context]:
    """Context reached after emitting `tok`; None for the terminal END state."""
    if tok is END:
        return None
    return ctx[1:] + (tok,)


def to_edge_list(chain: Chain) -> List[Edge]:
    edges: List[Edge] = []
    for ctx, dist in sorted_items(chain.table):
        total = sum(dist.values())
        for tok, n in sorted(dist.items(), key=lambda kv: token_label(kv[0])):
            edges.append((ctx, tok, n / total))
    return edges


def _escape_dot(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _format_prob(p: float, precision: int, strip_trailing_zeros: bool) -> str:
    text = f"{p:.{precision}f}"
    if strip_trailing_zeros:
        text = text.rstrip("0").rstrip(".")
        if text == "-0":
            text = "0"
    return text


def _node_ids(edges: List[Edge]) -> Dict[Optional[Context], str]:
    ids: Dict[Optional[Context], str] = {}
    for ctx, tok, _ in edges:
        for node in (ctx, successor(ctx, tok)):
            if node not in ids:
                ids[node] = "end" if node is None else f"n{len(ids)}"
    return ids


def to_dot(
    edges: Iterable[Edge],
    graph_name: str = "markov_chain",
    label: Optional[str] = None,
    style: Optional[DotStyle] = None,
) -> str:
    st = style or DotStyle()
    edges_list = list(edges)
    gname = _escape_dot(graph_name)
    if not edges_list:
        return f'digraph "{gname}" {{}}'

    ids = _node_ids(edges_list)
    sources: Set[Context] = {ctx for ctx, _, _ in edges_list}
    targets: Set[Optional[Context]] = {successor(ctx, tok) for ctx, tok, _ in edges_list}

    lines: List[str] = []
    lines.append(f'digraph "{gname}" {{')
    lines.append(f"  rankdir={st.rankdir};")
    lines.append(f"  splines={st.splines};")
    lines.append(f"  overlap={st.overlap};")
    lines.append(f"  nodesep={st.nodesep};")
    lines.append(f"  ranksep={st.ranksep};")
    lines.append(f"  pad={st.pad};")
    lines.append(
        f'  graph [fontname="{st.fontname}", fontsize={st.graph_fontsize}, fontcolor="{st.fontcolor}"];'
    )
    lines.append(
        f'  node [shape={st.node_shape}, style="{st.node_style}", fontname="{st.fontname}", '
        f'fontsize={st.node_fontsize}, penwidth={st.node_penwidth}, color="{st.node_color}"];'
    )
    lines.append(
        f'  edge [fontname="{st.fontname}", fontsize={st.edge_fontsize}, '
        f'arrowsize={st.arrowsize}, color="{st.edge_color}"];'
    )

    if label is not None:
        lines.append(f'  label="{_escape_dot(label)}";')
        lines.append("  labelloc=t;")
        lines.append("  labeljust=l;")

    for node, nid in ids.items():
        if node is None:
            lines.append(f'  {nid} [label="{TERMINAL}", shape={st.terminal_shape}];')
            continue
        attrs = [f'label="{_escape_dot(context_label(node))}"']
        # contexts nothing leads into are entry points (the all-START context)
        if node in sources and node not in targets:
            attrs.append(f'color="{st.start_color}"')
        lines.append(f"  {nid} [{', '.join(attrs)}];")

    span = st.max_penwidth - st.min_penwidth
    for ctx, tok, p in edges_list:
        if math.isnan(p):
            continue
        prob_text = _format_prob(p, st.prob_precision, st.strip_trailing_zeros)
        text = f"{token_label(tok)}: {prob_text}" if st.show_token else prob_text
        attrs = [
            f'label="{_escape_dot(text)}"',
            f"penwidth={st.min_penwidth + span * p:.2f}",
        ]
        lines.append(f"  {ids[ctx]} -> {ids[successor(ctx, tok)]} [{', '.join(attrs)}];")

    lines.append("}")
    return "\n".join(lines)


def to_networkx(chain: Chain) -> Any:
    """Convert to a ``networkx.DiGraph`` keyed by context tuples.

    Edges carry ``weight`` (probability), ``count`` and the emitted ``token``;
    END transitions point at the string node ``"<END>"``.
    """
    import networkx as nx

    graph = nx.DiGraph(order=chain.order)
    for ctx, dist in chain.table.items():
        total = sum(dist.values())
        graph.add_node(ctx, label=context_label(ctx), total=total)
        for tok, n in dist.items():
            dst = successor(ctx, tok)
            graph.add_edge(ctx, TERMINAL if dst is None else dst, weight=n / total, count=n, token=tok)
    return graph


def save_dot(path: Path, dot: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dot, encoding="utf-8")


def dot_to_png(dot_path: Path, png_path: Path, dpi: int = 300) -> None:
    subprocess.run(
        ["dot", f"-Gdpi={dpi}", "-Tpng", str(dot_path), "-o", str(png_path)],
        check=True,
    )
