from __future__ import annotations

import logging
from typing import Any, Mapping

from coloraide import Color
from flask import Flask, jsonify, request

# Project-local solver
from .color import RGB, InvalidColorFormat
from .generator import FilterOptions, FilterResultWithRetry, generate_filter_with_retry
from .pipeline import apply_filters

log = logging.getLogger(__name__)

# upper bound on full solves a single request may trigger
MAX_ATTEMPTS_CAP = 100

# same defaults the original front end submitted with
FILTER_DEFAULTS: Mapping[str, Any] = {
    "FILTER_MAX_LOSS": 1.0,
    "FILTER_MAX_ATTEMPTS": 100,
    "FILTER_FORCE_BLACK": True,
    "FILTER_MAX_ATTEMPTS_CAP": MAX_ATTEMPTS_CAP,
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def parse_flag(val: str | None, default: bool) -> bool:
    v = (val or "").strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    return default


def to_color(rgb: RGB) -> Color:
    return Color("srgb", [c / 255.0 for c in rgb])


def describe(result: FilterResultWithRetry) -> dict[str, Any]:
    """JSON payload for one solve, plus a CIEDE2000 check of the match."""
    target = to_color(result.rgb)
    rendered = to_color(apply_filters(result.values))
    return {
        "filter": result.filter,
        "filter_raw": result.filter_raw,
        "loss": result.loss,
        "attempts": result.attempts,
        "rgb": result.rgb._asdict(),
        "values": result.values._asdict(),
        "target_hex": target.to_string(hex=True),
        "rendered_hex": rendered.to_string(hex=True, fit="clip"),
        "delta_e": target.delta_e(rendered, method="2000"),
    }


# ----------------------------- Flask app ----------------------------------


def create_app(config: Mapping[str, Any] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.update(FILTER_DEFAULTS)
    app.config.from_prefixed_env("CSS")
    if config:
        app.config.update(config)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/filter")
    def filter_():
        color = request.args.get("color", "")
        try:
            max_loss = float(request.args.get("max_loss", app.config["FILTER_MAX_LOSS"]))
            max_attempts = int(
                request.args.get("max_attempts", app.config["FILTER_MAX_ATTEMPTS"])
            )
        except ValueError:
            return jsonify({"error": "max_loss must be a number, max_attempts an integer"}), 400
        max_attempts = max(1, min(max_attempts, int(app.config["FILTER_MAX_ATTEMPTS_CAP"])))

        options = FilterOptions(
            force_black=parse_flag(
                request.args.get("force_black"), bool(app.config["FILTER_FORCE_BLACK"])
            ),
            max_loss=max_loss,
            max_attempts=max_attempts,
        )
        try:
            result = generate_filter_with_retry(color, options)
        except InvalidColorFormat as e:
            return jsonify({"error": str(e)}), 400
        except Exception as exc:
            log.exception("Filter generation failed")
            return jsonify({"error": str(exc)}), 500

        return jsonify(describe(result))

    return app


if __name__ == "__main__":
    create_app().run(debug=False, threaded=True)
