"""
ETG estimator: drink conversion, rise-then-decay ETG model and test prediction.
Use from project root: python -m etg_app.main
"""

from etg_app.drinks import (
    DRINK_TYPES,
    STANDARD_DRINK_GRAMS,
    grams_from_amount,
    list_drink_types,
    resolve_abv,
)
from etg_app.calculations import (
    EtgEstimate,
    estimate_etg,
    etg_at,
    etg_curve,
    hours_until_safe,
)
from etg_app.errors import EtgInputError
from etg_app.session import DrinkingSession, Session
from etg_app.prediction import TestPrediction, predict_test
from etg_app.graph import curve_data, save_etg_graph, timeline_segments
from etg_app.engine import run_estimate

__all__ = [
    "Session",
    "DrinkingSession",
    "EtgEstimate",
    "EtgInputError",
    "TestPrediction",
    "estimate_etg",
    "etg_at",
    "etg_curve",
    "hours_until_safe",
    "predict_test",
    "run_estimate",
    "curve_data",
    "timeline_segments",
    "save_etg_graph",
    "grams_from_amount",
    "resolve_abv",
    "list_drink_types",
    "DRINK_TYPES",
    "STANDARD_DRINK_GRAMS",
]
