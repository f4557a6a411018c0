import atexit
import logging
import os

from flask import Flask, jsonify, redirect, render_template, request, url_for
from flask_cors import CORS

from .model import build_scalar_model, trace_computation
from .sequencer import AUTOPLAY_DELAY, StepSequencer
from .steps import STEPS, to_json
from .walkthrough import Walkthrough


def autoplay_delay_from_env():
    raw = os.environ.get("CHAIN_RULE_AUTOPLAY_DELAY")
    if not raw:
        return AUTOPLAY_DELAY
    try:
        return float(raw)
    except ValueError:
        logging.warning("Ignoring non-numeric CHAIN_RULE_AUTOPLAY_DELAY=%r", raw)
        return AUTOPLAY_DELAY


def create_app(scheduler=None, autoplay_delay=None):
    app = Flask(__name__)
    CORS(app)

    delay = autoplay_delay if autoplay_delay is not None else autoplay_delay_from_env()
    walkthrough = Walkthrough(
        model=build_scalar_model(),
        sequencer=StepSequencer(delay=delay, scheduler=scheduler),
    )
    app.extensions["walkthrough"] = walkthrough

    def respond():
        """Send form posts back to the page, everything else gets the state."""
        if request.args.get("redirect") == "1":
            return redirect(url_for("index"))
        return jsonify({"status": "success", "state": walkthrough.to_json()})

    def control(action, name):
        try:
            action()
            return respond()
        except Exception:
            logging.exception("Error while applying %s", name)
            return (
                jsonify(
                    {
                        "status": "error",
                        "message": f"An internal error occurred while applying {name}.",
                    }
                ),
                500,
            )

    @app.route("/", methods=["GET"])
    def index():
        """Render the walkthrough page for the current state."""
        snap = walkthrough.snapshot
        return render_template(
            "index.html",
            snap=snap,
            graph=walkthrough.graph(snap),
            steps=STEPS,
        )

    @app.route("/api/state", methods=["GET"])
    def state():
        """Return the current walkthrough state."""
        return jsonify({"status": "success", "state": walkthrough.to_json()})

    @app.route("/api/reset", methods=["POST"])
    def reset():
        return control(walkthrough.sequencer.reset, "reset")

    @app.route("/api/back", methods=["POST"])
    def back():
        return control(walkthrough.sequencer.step_back, "back")

    @app.route("/api/next", methods=["POST"])
    def next_step():
        return control(walkthrough.sequencer.step_forward, "next")

    @app.route("/api/toggle", methods=["POST"])
    def toggle():
        return control(walkthrough.sequencer.toggle_autoplay, "play/pause")

    @app.route("/api/jump/<int(signed=True):index>", methods=["POST"])
    def jump(index):
        return control(lambda: walkthrough.sequencer.jump_to(index), "jump")

    @app.route("/api/model", methods=["GET"])
    def get_model_data():
        """Return the fixed constants and every derived value."""
        return jsonify({"status": "success", "model": walkthrough.model.to_dict()})

    @app.route("/api/steps", methods=["GET"])
    def get_steps():
        return jsonify({"status": "success", "steps": [to_json(s) for s in STEPS]})

    @app.route("/api/graph", methods=["GET"])
    def get_graph():
        """Return the neuron traced through the Value engine, with gradients."""
        try:
            graph = trace_computation(walkthrough.model.network)
            return jsonify({"status": "success", "graph": graph})
        except Exception:
            logging.exception("Error while tracing the computation graph")
            return (
                jsonify(
                    {
                        "status": "error",
                        "message": "An internal error occurred while tracing the graph.",
                    }
                ),
                500,
            )

    return app


def main():
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    atexit.register(app.extensions["walkthrough"].close)
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    host = os.environ.get("CHAIN_RULE_HOST", "127.0.0.1")
    port = int(os.environ.get("CHAIN_RULE_PORT", "5000"))
    # the reloader would start a second walkthrough in a child process
    app.run(debug=debug, port=port, host=host, use_reloader=False)


if __name__ == "__main__":
    main()
