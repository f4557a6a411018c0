"""Tests for the Flask routes."""

import pytest

from chainrule.app import autoplay_delay_from_env, create_app
from chainrule.sequencer import AUTOPLAY_DELAY
from chainrule.steps import LAST_INDEX


class TestStateRoutes:
    def test_state(self, client):
        resp = client.get("/api/state")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "success"
        assert body["state"]["index"] == 0
        assert body["state"]["controls"]["back"]["disabled"] is True

    def test_next_and_back(self, client):
        assert client.post("/api/next").get_json()["state"]["index"] == 1
        assert client.post("/api/next").get_json()["state"]["index"] == 2
        assert client.post("/api/back").get_json()["state"]["index"] == 1

    def test_toggle_and_tick(self, client, scheduler):
        state = client.post("/api/toggle").get_json()["state"]
        assert state["isPlaying"] is True
        scheduler.fire_next()
        state = client.get("/api/state").get_json()["state"]
        assert state["index"] == 1
        assert state["isPlaying"] is True

    def test_jump_clamps(self, client):
        assert client.post(f"/api/jump/{LAST_INDEX + 10}").get_json()["state"]["index"] == LAST_INDEX
        assert client.post("/api/jump/-3").get_json()["state"]["index"] == 0

    def test_replay_from_last(self, client):
        client.post(f"/api/jump/{LAST_INDEX}")
        state = client.post("/api/toggle").get_json()["state"]
        assert state["index"] == 0
        assert state["isPlaying"] is True

    def test_reset(self, client):
        client.post("/api/jump/5")
        client.post("/api/toggle")
        state = client.post("/api/reset").get_json()["state"]
        assert state["index"] == 0
        assert state["isPlaying"] is False

    def test_form_post_redirects(self, client):
        resp = client.post("/api/next?redirect=1")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/")

    def test_control_error_is_json(self, app, client, monkeypatch):
        def boom():
            raise RuntimeError("boom")

        monkeypatch.setattr(app.extensions["walkthrough"].sequencer, "reset", boom)
        resp = client.post("/api/reset")
        assert resp.status_code == 500
        assert resp.get_json()["status"] == "error"

    def test_failing_subscriber_still_answers_success(self, app, client):
        sequencer = app.extensions["walkthrough"].sequencer
        sequencer.subscribe(lambda state: 1 / 0)
        resp = client.post("/api/next")
        assert resp.status_code == 200
        assert resp.get_json()["state"]["index"] == 1


class TestDataRoutes:
    def test_model(self, client):
        model = client.get("/api/model").get_json()["model"]
        assert model["constants"]["a_i"] == 0.8
        assert model["update"]["w_new"] == pytest.approx(0.5180, abs=1e-3)

    def test_steps(self, client):
        steps = client.get("/api/steps").get_json()["steps"]
        assert len(steps) == LAST_INDEX + 1
        assert steps[7]["key"] == "chain"

    def test_graph(self, client):
        graph = client.get("/api/graph").get_json()["graph"]
        w = next(n for n in graph["nodes"] if n["id"] == "w_ij")
        assert w["grad"] == pytest.approx(-0.0359, abs=1e-3)


class TestPage:
    def test_index_renders(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        html = resp.get_data(as_text=True)
        assert "Chain Rule Walkthrough" in html
        assert "The Setup" in html
        assert "Full chain:" in html
        assert 'http-equiv="refresh"' not in html

    def test_index_refreshes_while_playing(self, client):
        client.post("/api/toggle")
        html = client.get("/").get_data(as_text=True)
        assert 'http-equiv="refresh"' in html
        assert "Pause" in html


class TestConfig:
    def test_delay_default(self, monkeypatch):
        monkeypatch.delenv("CHAIN_RULE_AUTOPLAY_DELAY", raising=False)
        assert autoplay_delay_from_env() == AUTOPLAY_DELAY

    def test_delay_from_env(self, monkeypatch):
        monkeypatch.setenv("CHAIN_RULE_AUTOPLAY_DELAY", "1.25")
        assert autoplay_delay_from_env() == 1.25

    def test_bad_delay_falls_back(self, monkeypatch):
        monkeypatch.setenv("CHAIN_RULE_AUTOPLAY_DELAY", "soon")
        assert autoplay_delay_from_env() == AUTOPLAY_DELAY

    def test_explicit_delay_wins(self, scheduler, monkeypatch):
        monkeypatch.setenv("CHAIN_RULE_AUTOPLAY_DELAY", "9")
        app = create_app(scheduler=scheduler, autoplay_delay=0.5)
        try:
            app.extensions["walkthrough"].sequencer.toggle_autoplay()
            assert scheduler.pending[0].delay == 0.5
        finally:
            app.extensions["walkthrough"].close()
