"""Run a full estimate and shape it for the presentation layer."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from etg_app.calculations import EtgEstimate
from etg_app.graph import timeline_segments
from etg_app.inputs import DEFAULT_THRESHOLD, EtgRequest, parse_request
from etg_app.prediction import TestPrediction, get_advice, level_status, predict_test

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _iso(value: datetime) -> str:
    return value.strftime(TIME_FORMAT)


def prediction_to_dict(prediction: TestPrediction) -> dict[str, Any]:
    return {
        "test_time": _iso(prediction.test_time),
        "likely_pass": prediction.likely_pass,
        "estimated_etg": round(prediction.estimated_etg),
        "threshold": prediction.threshold,
        "hours_until_test": round(prediction.hours_until_test, 2),
        "margin_hours": round(prediction.margin_hours, 2),
    }


def estimate_to_dict(
    request: EtgRequest,
    estimate: EtgEstimate,
    prediction: TestPrediction | None = None,
) -> dict[str, Any]:
    model = request.session
    return {
        "weight_kg": round(model.weight_kg, 2),
        "gender": model.gender,
        "metabolism_rate": model.metabolism_rate,
        "session_count": len(model.sessions),
        "total_alcohol_grams": round(estimate.total_alcohol_grams, 1),
        "total_standard_drinks": round(model.total_standard_drinks, 1),
        "peak_etg": round(estimate.peak_etg),
        "current_etg": round(estimate.current_etg),
        "current_status": level_status(estimate.current_etg, estimate.threshold),
        "hours_until_safe": round(estimate.hours_until_safe, 2),
        "safe_time": _iso(estimate.safe_time),
        "total_elimination_hours": round(estimate.total_elimination_hours, 2),
        "last_drink_time": _iso(estimate.last_drink_time),
        "hours_since_last_drink": round(estimate.hours_since_last_drink, 2),
        "threshold": request.threshold,
        "now": _iso(estimate.now),
        "test_prediction": prediction_to_dict(prediction) if prediction else None,
        "advice": get_advice(estimate, prediction),
        "timeline": timeline_segments(estimate),
    }


def estimate_request(request: EtgRequest, now: datetime | None = None):
    """Return (estimate, prediction-or-None) for a parsed request."""
    estimate = request.session.estimate(request.threshold, now=now)
    prediction = None
    if request.test_time is not None:
        prediction = predict_test(estimate, request.test_time)

    logger.info(
        "estimate: %.1f g, peak=%.0f, current=%.0f ng/mL, safe in %.1fh (threshold %d)%s",
        estimate.total_alcohol_grams,
        estimate.peak_etg,
        estimate.current_etg,
        estimate.hours_until_safe,
        request.threshold,
        "" if prediction is None else f", test {'pass' if prediction.likely_pass else 'fail'}",
    )
    return estimate, prediction


def run_estimate(
    data: Any,
    now: datetime | None = None,
    default_threshold: int = DEFAULT_THRESHOLD,
) -> dict[str, Any]:
    """Parse raw input and return the full result payload.

    Raises :class:`etg_app.errors.EtgInputError` for invalid input.
    """
    request = parse_request(data, default_threshold=default_threshold)
    estimate, prediction = estimate_request(request, now=now)
    return estimate_to_dict(request, estimate, prediction)
