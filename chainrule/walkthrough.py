import logging
from dataclasses import dataclass
from typing import Optional

from . import steps as step_table
from .highlight import EDGE_LABELS, NODE_LABELS, Highlight, highlight, node_sublabels
from .model import build_scalar_model
from .narration import Narration, render_narration, render_summary
from .sequencer import StepSequencer
from .steps import STEPS, Step


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Everything the page needs to draw one state of the walkthrough."""

    index: int
    is_playing: bool
    step: Step
    caption: Optional[str]
    narration: Narration
    highlight: Highlight
    controls: dict
    progress: list
    summary: str


def play_label(index, is_playing, last_index):
    if is_playing:
        return "Pause"
    if index >= last_index:
        return "Replay"
    return "Play"


def build_controls(index, is_playing, last_index):
    return {
        "reset": {"label": "Reset", "disabled": False},
        "back": {"label": "Back", "disabled": index == 0},
        "toggle": {"label": play_label(index, is_playing, last_index), "disabled": False},
        "next": {"label": "Next", "disabled": index >= last_index},
    }


def build_progress(index):
    return [
        {
            "index": i,
            "key": s.key,
            "role": step_table.marker_role(s),
            "reached": i <= index,
            "current": i == index,
        }
        for i, s in enumerate(STEPS)
    ]


def build_snapshot(state, model, last_index=step_table.LAST_INDEX):
    step = STEPS[state.current_index]
    return Snapshot(
        index=state.current_index,
        is_playing=state.is_playing,
        step=step,
        caption=step_table.direction_caption(state.current_index),
        narration=render_narration(step, model),
        highlight=highlight(step.highlight),
        controls=build_controls(state.current_index, state.is_playing, last_index),
        progress=build_progress(state.current_index),
        summary=render_summary(model),
    )


class Walkthrough:
    """One live view of the walkthrough.

    The snapshot is rebuilt from inside the sequencer's notification, so it
    is already current when any transition method returns. The autoplay tick
    swaps it from the timer thread, so readers take self.snapshot once and
    render everything from that one object.
    """

    def __init__(self, model=None, sequencer=None):
        self.model = model or build_scalar_model()
        self.sequencer = sequencer or StepSequencer()
        self.sublabels = node_sublabels(self.model)
        # no tick may land between the first build and the subscription
        with self.sequencer.lock:
            self.snapshot = build_snapshot(self.sequencer.state, self.model, self.sequencer.last_index)
            self._unsubscribe = self.sequencer.subscribe(self._on_change)

    def _on_change(self, state):
        self.snapshot = build_snapshot(state, self.model, self.sequencer.last_index)

    def close(self):
        self._unsubscribe()
        self.sequencer.close()
        logger.info("walkthrough closed")

    def graph(self, snap=None):
        """Nodes and edges with labels, values and the roles for snap."""
        snap = snap or self.snapshot
        hl = snap.highlight
        return {
            "nodes": [
                {
                    "id": n,
                    "label": NODE_LABELS[n],
                    "sublabel": self.sublabels[n],
                    "active": hl.nodes[n],
                }
                for n in NODE_LABELS
            ],
            "edges": [
                {
                    "source": src,
                    "target": dst,
                    "label": label,
                    "role": hl.edges[(src, dst)],
                }
                for (src, dst), label in EDGE_LABELS.items()
            ],
            "caption": snap.caption,
        }

    def to_json(self):
        snap = self.snapshot
        return {
            "index": snap.index,
            "isPlaying": snap.is_playing,
            "step": step_table.to_json(snap.step),
            "narration": snap.narration.to_json(),
            "graph": self.graph(snap),
            "controls": snap.controls,
            "progress": snap.progress,
            "summary": snap.summary,
        }
