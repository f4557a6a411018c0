"""Explanatory text for each step, filled in from a ScalarModel.

Intermediate quantities are shown to 4 decimals; the constants are shown as
written. Nothing here holds state.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Narration:
    title: str
    lead: str
    formula: str = ""
    computation: str = ""
    note: str = ""
    # (label, formatted value) pairs shown as boxes
    boxes: tuple = field(default_factory=tuple)

    def to_json(self):
        return {
            "title": self.title,
            "lead": self.lead,
            "formula": self.formula,
            "computation": self.computation,
            "note": self.note,
            "boxes": [{"label": label, "value": value} for label, value in self.boxes],
        }


def fmt(x):
    return f"{x:.4f}"


def _overview(m):
    n = m.network
    return dict(
        lead="We'll trace one weight through the entire forward and backward pass with real numbers.",
        boxes=(
            ("Input aᵢ", fmt(n.a_i)),
            ("Weight wᵢⱼ", fmt(n.w_ij)),
            ("Bias bⱼ", fmt(n.b_j)),
            ("Target", fmt(n.target)),
        ),
        note=f"Other inputs to neuron j contribute {n.other_inputs} to the weighted sum.",
    )


def _forward_z(m):
    n = m.network
    return dict(
        lead="Neuron j computes its weighted sum from all incoming connections:",
        formula="zⱼ = wᵢⱼ · aᵢ + (other inputs) + bⱼ",
        computation=f"zⱼ = {n.w_ij} × {n.a_i} + {n.other_inputs} + {n.b_j} = {fmt(m.z_j)}",
        note="This is just a linear combination. Without an activation function, "
             "this is all the neuron could do.",
    )


def _forward_a(m):
    return dict(
        lead="Now we squash zⱼ through the sigmoid activation:",
        formula="aⱼ = σ(zⱼ) = 1 / (1 + e⁻ᶻ)",
        computation=f"aⱼ = σ({fmt(m.z_j)}) = {fmt(m.a_j)}",
        note="Sigmoid maps any value to (0, 1). This is the nonlinearity that gives "
             "hidden layers their power.",
    )


def _loss(m):
    return dict(
        lead="How far off is our prediction? Using MSE loss:",
        formula="L = ½(aⱼ − target)²",
        computation=f"L = ½({fmt(m.a_j)} − {m.network.target})² = {fmt(m.loss)}",
        note="Now we need to figure out: how should we change wᵢⱼ to make this loss smaller?",
    )


def _dL_da(m):
    if m.dL_da_j < 0:
        note = ("Negative value → our prediction was too low → we need to increase aⱼ "
                "to reduce loss.")
    else:
        note = ("Positive value → our prediction was too high → we need to decrease aⱼ "
                "to reduce loss.")
    return dict(
        lead="Starting from the loss, how sensitive is it to neuron j's output?",
        formula="∂L/∂aⱼ = aⱼ − target",
        computation=f"∂L/∂aⱼ = {fmt(m.a_j)} − {m.network.target} = {fmt(m.dL_da_j)}",
        note=note,
    )


def _da_dz(m):
    a = fmt(m.a_j)
    return dict(
        lead="How sensitive is the activation to changes in the pre-activation z?",
        formula="∂aⱼ/∂zⱼ = σ(z) · (1 − σ(z)) = aⱼ · (1 − aⱼ)",
        computation=f"∂aⱼ/∂zⱼ = {a} × (1 − {a}) = {fmt(m.da_j_dz_j)}",
        note="This is the sigmoid's derivative. At extreme values (near 0 or 1) it "
             "approaches 0: the vanishing gradient problem.",
    )


def _dz_dw(m):
    return dict(
        lead="How sensitive is the weighted sum to this specific weight?",
        formula="zⱼ = wᵢⱼ · aᵢ + ...  →  ∂zⱼ/∂wᵢⱼ = aᵢ",
        computation=f"∂zⱼ/∂wᵢⱼ = aᵢ = {fmt(m.dz_j_dw_ij)}",
        note="It's just the input activation! The gradient of a weight is always the "
             "upstream neuron's value times the downstream error.",
    )


def _chain(m):
    return dict(
        lead="Now multiply all three terms together:",
        formula="∂L/∂wᵢⱼ = ∂L/∂aⱼ · ∂aⱼ/∂zⱼ · ∂zⱼ/∂wᵢⱼ",
        computation=(
            f"{fmt(m.dL_da_j)} × {fmt(m.da_j_dz_j)} × {fmt(m.dz_j_dw_ij)} = {fmt(m.dL_dw_ij)}"
        ),
        note=f"This gradient tells us: nudging wᵢⱼ up slightly will change the loss "
             f"by ≈ {fmt(m.dL_dw_ij)}.",
    )


def _update(m):
    n = m.network
    direction = "increased" if m.w_new > n.w_ij else "decreased"
    sign = "negative" if m.dL_dw_ij < 0 else "positive"
    return dict(
        lead="Finally, step in the direction that reduces loss:",
        formula="wᵢⱼ(new) = wᵢⱼ − η · ∂L/∂wᵢⱼ",
        computation=(
            f"wᵢⱼ(new) = {n.w_ij} − {m.learning_rate} × ({fmt(m.dL_dw_ij)}) = {fmt(m.w_new)}"
        ),
        boxes=(
            ("Old weight", fmt(n.w_ij)),
            ("New weight", fmt(m.w_new)),
        ),
        note=f"The weight {direction} (since gradient was {sign}), pushing the prediction "
             f"closer to the target. Learning rate η = {m.learning_rate} controls the "
             f"step size.",
    )


RENDERERS = {
    "overview": _overview,
    "forward_z": _forward_z,
    "forward_a": _forward_a,
    "loss": _loss,
    "dL_da": _dL_da,
    "da_dz": _da_dz,
    "dz_dw": _dz_dw,
    "chain": _chain,
    "update": _update,
}


def render_narration(step, model):
    return Narration(title=step.title, **RENDERERS[step.key](model))


def render_summary(model):
    """The closing one-line recap of the whole chain and the update."""
    return (
        f"Full chain: ({model.dL_da_j:.3f}) × ({model.da_j_dz_j:.3f}) × "
        f"({model.dz_j_dw_ij:.3f}) = {model.dL_dw_ij:.4f} → w = {model.w_new:.4f}"
    )
