"""ETG Estimator Flask app.

Run from project root:
    python app.py
"""

import logging
import os

from flask import Flask, jsonify, request

from etg_app.calculations import GENDER_MULTIPLIER, METABOLISM_MULTIPLIER
from etg_app.drinks import AMOUNT_UNITS, DURATION_UNITS, list_drink_types
from etg_app.engine import estimate_request, run_estimate
from etg_app.errors import EtgInputError
from etg_app.graph import curve_data
from etg_app.inputs import COMMON_THRESHOLDS, DEFAULT_THRESHOLD, parse_request
from etg_app.session import WEIGHT_UNITS

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)

MIN_CURVE_STEP_HOURS = 0.1


def _default_threshold() -> int:
    try:
        return int(os.environ.get("ETG_DEFAULT_THRESHOLD", DEFAULT_THRESHOLD))
    except ValueError:
        return DEFAULT_THRESHOLD


def _input_error(e: EtgInputError):
    logger.warning("rejected request: %s", e)
    return jsonify({"error": str(e)}), 400


@app.route("/healthz")
def healthz():
    return jsonify({"ok": True})


@app.route("/api/drink-types")
def api_drink_types():
    return jsonify({
        "drink_types": [
            {"key": key, "name": name, "abv": abv} for key, name, abv in list_drink_types()
        ],
        "amount_units": list(AMOUNT_UNITS),
        "duration_units": list(DURATION_UNITS),
        "weight_units": list(WEIGHT_UNITS),
        "genders": list(GENDER_MULTIPLIER),
        "metabolism_rates": list(METABOLISM_MULTIPLIER),
        "thresholds": list(COMMON_THRESHOLDS),
        "default_threshold": _default_threshold(),
    })


@app.route("/api/calculate", methods=["POST"])
def api_calculate():
    data = request.get_json(silent=True) or {}
    try:
        result = run_estimate(data, default_threshold=_default_threshold())
    except EtgInputError as e:
        return _input_error(e)
    return jsonify(result)


@app.route("/api/curve", methods=["POST"])
def api_curve():
    data = request.get_json(silent=True) or {}
    step = request.args.get("step_hours", type=float) or 0.5
    if step <= 0:
        return jsonify({"error": "step_hours must be > 0"}), 400
    step = max(step, MIN_CURVE_STEP_HOURS)
    try:
        parsed = parse_request(data, default_threshold=_default_threshold())
        estimate, _ = estimate_request(parsed)
    except EtgInputError as e:
        return _input_error(e)
    return jsonify({
        "threshold": parsed.threshold,
        "hours_since_last_drink": round(estimate.hours_since_last_drink, 2),
        "curve": [{"t": t, "etg": etg} for t, etg in curve_data(estimate, step_hours=step)],
    })


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "0") == "1")
