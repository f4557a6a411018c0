"""Shared test fixtures for chainrule tests."""

import pytest

from chainrule.app import create_app
from chainrule.model import build_scalar_model
from chainrule.sequencer import StepSequencer
from chainrule.walkthrough import Walkthrough


class ManualHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose ticks only fire when the test says so."""

    def __init__(self):
        self.handles = []

    def schedule(self, delay, callback):
        handle = ManualHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def fire_next(self):
        """Fire the oldest live tick. Returns False if nothing was pending."""
        pending = self.pending
        if not pending:
            return False
        handle = pending[0]
        handle.fired = True
        handle.callback()
        return True


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def sequencer(scheduler):
    seq = StepSequencer(scheduler=scheduler)
    yield seq
    seq.close()


@pytest.fixture()
def model():
    return build_scalar_model()


@pytest.fixture()
def walkthrough(model, sequencer):
    view = Walkthrough(model=model, sequencer=sequencer)
    yield view
    view.close()


@pytest.fixture()
def app(scheduler):
    app = create_app(scheduler=scheduler)
    app.config["TESTING"] = True
    yield app
    app.extensions["walkthrough"].close()


@pytest.fixture()
def client(app):
    return app.test_client()
