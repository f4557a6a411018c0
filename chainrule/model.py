"""The fixed single-neuron example and every quantity derived from it.

Neuron j receives input a_i through weight w_ij, plus a lump sum from its
other inputs and a bias. Its sigmoid output is scored against a target with
half squared error, and w_ij takes one gradient-descent step.
"""

import math
from dataclasses import dataclass

from .value import Value, get_graph_json


LEARNING_RATE = 0.5


@dataclass(frozen=True)
class Network:
    a_i: float = 0.8
    w_ij: float = 0.5
    b_j: float = 0.1
    # sum of the other w*a contributions into neuron j
    other_inputs: float = 0.3
    target: float = 0.9


NETWORK = Network()


def sigmoid(x):
    return 1 / (1 + math.exp(-x))


def sigmoid_deriv(a):
    """Sigmoid derivative expressed through its output a = sigmoid(z)."""
    return a * (1 - a)


@dataclass(frozen=True)
class ScalarModel:
    network: Network
    learning_rate: float

    z_j: float
    a_j: float
    loss: float

    dL_da_j: float
    da_j_dz_j: float
    dz_j_dw_ij: float
    dL_dw_ij: float

    w_new: float

    def to_dict(self):
        return {
            "constants": {
                "a_i": self.network.a_i,
                "w_ij": self.network.w_ij,
                "b_j": self.network.b_j,
                "otherInputs": self.network.other_inputs,
                "target": self.network.target,
                "learningRate": self.learning_rate,
            },
            "forward": {
                "z_j": self.z_j,
                "a_j": self.a_j,
                "loss": self.loss,
            },
            "backward": {
                "dL_da_j": self.dL_da_j,
                "da_j_dz_j": self.da_j_dz_j,
                "dz_j_dw_ij": self.dz_j_dw_ij,
                "dL_dw_ij": self.dL_dw_ij,
            },
            "update": {
                "w_new": self.w_new,
            },
        }


def build_scalar_model(network=NETWORK, learning_rate=LEARNING_RATE):
    """Run the forward pass, the three local derivatives and the update."""
    z_j = network.w_ij * network.a_i + network.other_inputs + network.b_j
    a_j = sigmoid(z_j)
    loss = 0.5 * (a_j - network.target) ** 2

    dL_da_j = a_j - network.target
    da_j_dz_j = sigmoid_deriv(a_j)
    dz_j_dw_ij = network.a_i
    dL_dw_ij = dL_da_j * da_j_dz_j * dz_j_dw_ij

    w_new = network.w_ij - learning_rate * dL_dw_ij

    return ScalarModel(
        network=network,
        learning_rate=learning_rate,
        z_j=z_j,
        a_j=a_j,
        loss=loss,
        dL_da_j=dL_da_j,
        da_j_dz_j=da_j_dz_j,
        dz_j_dw_ij=dz_j_dw_ij,
        dL_dw_ij=dL_dw_ij,
        w_new=w_new,
    )


def build_value_graph(network=NETWORK):
    """Build the same neuron out of Value nodes and backpropagate from L.

    Returns the named leaves and intermediates so callers can read both
    .data and .grad off any of them.
    """
    a_i = Value(network.a_i).named("a_i")
    w_ij = Value(network.w_ij).named("w_ij")
    b_j = Value(network.b_j).named("b_j")
    other = Value(network.other_inputs).named("other_inputs")

    z_j = (w_ij * a_i + other + b_j).named("z_j")
    a_j = z_j.sigmoid().named("a_j")
    loss = (0.5 * (a_j - network.target) ** 2).named("L")
    loss.backward()

    return {
        "a_i": a_i,
        "w_ij": w_ij,
        "b_j": b_j,
        "other_inputs": other,
        "z_j": z_j,
        "a_j": a_j,
        "L": loss,
    }


def trace_computation(network=NETWORK):
    return get_graph_json(build_value_graph(network)["L"])
