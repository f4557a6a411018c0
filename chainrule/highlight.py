from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


NODE_IDS = ("a_i", "w_ij", "z_j", "a_j", "L")

EDGES = (
    ("a_i", "z_j"),
    ("w_ij", "z_j"),
    ("z_j", "a_j"),
    ("a_j", "L"),
)

EDGE_LABELS = {
    ("a_i", "z_j"): "× wᵢⱼ",
    ("w_ij", "z_j"): "",
    ("z_j", "a_j"): "σ(·)",
    ("a_j", "L"): "MSE",
}

NODE_LABELS = {
    "a_i": "aᵢ",
    "w_ij": "wᵢⱼ",
    "z_j": "zⱼ",
    "a_j": "aⱼ",
    "L": "L",
}

FORWARD = "forward"
BACKWARD = "backward"
NEUTRAL = "neutral"
DIM = "dim"

# tags where the whole graph is lit and no edge carries a direction
WHOLE_GRAPH = {"all", "chain", "update"}

# tag -> (active nodes, edge selector, role for the selected edges)
FOCUSED = {
    "z": ({"a_i", "w_ij", "z_j"}, lambda src, dst: dst == "z_j", FORWARD),
    "a": ({"z_j", "a_j"}, lambda src, dst: (src, dst) == ("z_j", "a_j"), FORWARD),
    "loss": ({"a_j", "L"}, lambda src, dst: (src, dst) == ("a_j", "L"), FORWARD),
    "dL_da": ({"a_j", "L"}, lambda src, dst: (src, dst) == ("a_j", "L"), BACKWARD),
    "da_dz": ({"z_j", "a_j"}, lambda src, dst: (src, dst) == ("z_j", "a_j"), BACKWARD),
    "dz_dw": ({"a_i", "w_ij", "z_j"}, lambda src, dst: dst == "z_j", BACKWARD),
}


@dataclass(frozen=True)
class Highlight:
    nodes: Mapping[str, bool]
    edges: Mapping[Tuple[str, str], str]

    def __post_init__(self):
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))
        object.__setattr__(self, "edges", MappingProxyType(dict(self.edges)))

    def to_json(self):
        return {
            "nodes": [{"id": n, "active": self.nodes[n]} for n in NODE_IDS],
            "edges": [
                {"source": src, "target": dst, "role": self.edges[(src, dst)]}
                for src, dst in EDGES
            ],
        }


def highlight(tag):
    """Map a step's highlight tag to node activity and edge roles."""
    if tag in WHOLE_GRAPH:
        return Highlight(
            nodes={n: True for n in NODE_IDS},
            edges={e: NEUTRAL for e in EDGES},
        )

    active, selects, role = FOCUSED.get(tag, (set(), lambda src, dst: False, DIM))
    return Highlight(
        nodes={n: n in active for n in NODE_IDS},
        edges={(src, dst): role if selects(src, dst) else DIM for src, dst in EDGES},
    )


def node_sublabels(model):
    """Values printed under each graph node, at the precision the graph shows."""
    return {
        "a_i": f"{model.network.a_i:.1f}",
        "w_ij": f"{model.network.w_ij:.1f}",
        "z_j": f"{model.z_j:.2f}",
        "a_j": f"{model.a_j:.3f}",
        "L": f"{model.loss:.4f}",
    }
