from .branching import context_entropy, mean_branching_entropy, mean_branching_entropy_weighted
from .frame import transition_matrix, transitions_frame
from .graph import DotStyle, dot_to_png, save_dot, to_dot, to_edge_list, to_networkx

__all__ = [
    "context_entropy",
    "mean_branching_entropy",
    "mean_branching_entropy_weighted",
    "transitions_frame",
    "transition_matrix",
    "DotStyle",
    "to_edge_list",
    "to_dot",
    "to_networkx",
    "save_dot",
    "dot_to_png",
]
