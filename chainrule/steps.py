from dataclasses import dataclass


FORWARD = "forward"
BACKWARD = "backward"


@dataclass(frozen=True)
class Step:
    key: str
    title: str
    highlight: str
    phase: str


STEPS = (
    Step("overview", "The Setup", "all", FORWARD),
    Step("forward_z", "Step 1: Compute Weighted Sum (zⱼ)", "z", FORWARD),
    Step("forward_a", "Step 2: Apply Activation (aⱼ)", "a", FORWARD),
    Step("loss", "Step 3: Compute Loss", "loss", FORWARD),
    Step("dL_da", "Step 4: ∂L/∂aⱼ — How does loss change with activation?", "dL_da", BACKWARD),
    Step("da_dz", "Step 5: ∂aⱼ/∂zⱼ — How does activation change with z?", "da_dz", BACKWARD),
    Step("dz_dw", "Step 6: ∂zⱼ/∂wᵢⱼ — How does z change with this weight?", "dz_dw", BACKWARD),
    Step("chain", "Step 7: Multiply — The Chain Rule", "chain", BACKWARD),
    Step("update", "Step 8: Update the Weight", "update", BACKWARD),
)

LAST_INDEX = len(STEPS) - 1


def direction_caption(index):
    """Caption drawn under the graph; the setup step gets none."""
    step = STEPS[index]
    if step.phase == BACKWARD:
        return "← Backward ←"
    if index > 0:
        return "→ Forward →"
    return None


def marker_role(step):
    """Color role of a step's marker in the progress strip."""
    if step.key == "update":
        return "update"
    if step.phase == BACKWARD:
        return BACKWARD
    return FORWARD


def to_json(step):
    return {
        "key": step.key,
        "title": step.title,
        "highlight": step.highlight,
        "phase": step.phase,
    }
