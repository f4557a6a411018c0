"""Step sequencing for the walkthrough.

StepSequencer is the only stateful piece of the walkthrough. Every transition
replaces the immutable SequencerState, cancels whatever autoplay tick was
pending, schedules a new one if the new state is playing, and then notifies
subscribers before returning.
"""

import logging
import threading
from dataclasses import dataclass

from .steps import STEPS


logger = logging.getLogger(__name__)

AUTOPLAY_DELAY = 3.5


@dataclass(frozen=True)
class SequencerState:
    current_index: int = 0
    is_playing: bool = False


class TimerScheduler:
    """Runs each callback once on a daemon threading.Timer."""

    def schedule(self, delay, callback):
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class StepSequencer:
    def __init__(self, step_count=len(STEPS), delay=AUTOPLAY_DELAY, scheduler=None):
        self.last_index = step_count - 1
        self.delay = delay
        self._scheduler = scheduler or TimerScheduler()
        self._state = SequencerState()
        self._lock = threading.RLock()
        self._pending = None
        # bumped on every state change; a tick only acts if it still matches
        self._generation = 0
        self._subscribers = []
        self._closed = False

    @property
    def state(self):
        return self._state

    @property
    def lock(self):
        """Held across every transition and tick; reentrant."""
        return self._lock

    @property
    def closed(self):
        return self._closed

    @property
    def has_pending_tick(self):
        return self._pending is not None

    def subscribe(self, callback):
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def reset(self):
        with self._lock:
            return self._apply(SequencerState(0, False), "reset")

    def step_back(self):
        with self._lock:
            state = self._state
            if state.current_index == 0:
                return state
            return self._apply(SequencerState(state.current_index - 1, False), "back")

    def step_forward(self):
        with self._lock:
            state = self._state
            if state.current_index >= self.last_index:
                return state
            return self._apply(
                SequencerState(state.current_index + 1, state.is_playing), "next"
            )

    def toggle_autoplay(self):
        with self._lock:
            state = self._state
            if state.current_index >= self.last_index:
                # replay from the top
                return self._apply(SequencerState(0, True), "replay")
            return self._apply(
                SequencerState(state.current_index, not state.is_playing), "toggle"
            )

    def jump_to(self, index):
        with self._lock:
            index = max(0, min(int(index), self.last_index))
            return self._apply(SequencerState(index, False), "jump")

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._cancel_pending()
            self._closed = True
            self._subscribers = []
            logger.debug("sequencer closed at step %d", self._state.current_index)

    def _tick(self, generation):
        with self._lock:
            if self._closed or generation != self._generation:
                return
            self._pending = None
            state = self._state
            if state.current_index >= self.last_index:
                self._apply(SequencerState(state.current_index, False), "autoplay stop")
            else:
                self._apply(SequencerState(state.current_index + 1, True), "autoplay")

    def _cancel_pending(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _apply(self, new_state, reason):
        if self._closed:
            return self._state
        if new_state == self._state:
            return self._state

        self._cancel_pending()
        self._generation += 1
        self._state = new_state
        logger.debug(
            "%s -> step %d (%s)",
            reason,
            new_state.current_index,
            "playing" if new_state.is_playing else "paused",
        )

        if new_state.is_playing:
            generation = self._generation
            self._pending = self._scheduler.schedule(
                self.delay, lambda: self._tick(generation)
            )

        for callback in list(self._subscribers):
            try:
                callback(new_state)
            except Exception:
                # the new state is already committed
                logger.exception("subscriber %r failed on %s", callback, reason)
        return new_state
