"""Test-outcome prediction and advisory helpers.

Messaging is conservative. The model is a rough approximation and never
guarantees a test result.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from etg_app.calculations import EtgEstimate

# Levels below threshold * NEAR_THRESHOLD_FACTOR count as "near".
NEAR_THRESHOLD_FACTOR = 1.5

# Hourly decay applied to the current level when projecting to a test time.
TEST_DECAY_PER_HOUR = 0.75


@dataclass
class TestPrediction:
    test_time: datetime
    likely_pass: bool
    estimated_etg: float
    threshold: float
    hours_until_test: float
    margin_hours: float

    # Not a pytest test class.
    __test__ = False


def level_status(etg: float, threshold: float) -> str:
    """Return 'below', 'near' or 'above' for a level against the threshold.

    The level is compared in whole ng/mL, as it is displayed.
    """
    etg = round(etg)
    if etg < threshold:
        return "below"
    if etg < threshold * NEAR_THRESHOLD_FACTOR:
        return "near"
    return "above"


def predict_test(estimate: EtgEstimate, test_time: datetime) -> TestPrediction:
    """A test passes when it is taken after the estimate's safe time.

    The projected level decays the current level by 25% per hour until the test.
    """
    hours_until_test = (test_time - estimate.now).total_seconds() / 3600.0
    level = round(estimate.current_etg) * TEST_DECAY_PER_HOUR ** max(0.0, hours_until_test)
    return TestPrediction(
        test_time=test_time,
        likely_pass=test_time > estimate.safe_time,
        estimated_etg=level,
        threshold=estimate.threshold,
        hours_until_test=hours_until_test,
        margin_hours=(test_time - estimate.safe_time).total_seconds() / 3600.0,
    )


def get_advice(estimate: EtgEstimate, prediction: Optional[TestPrediction] = None) -> dict:
    """Return conservative guidance from the estimate and optional test prediction."""
    threshold = estimate.threshold
    status = level_status(estimate.current_etg, threshold)

    if prediction is not None and not prediction.likely_pass:
        wait_h = max(0.5, round(-prediction.margin_hours, 1))
        return {
            "status": "likely_fail",
            "title": "Test likely positive",
            "message": f"The test is before the estimated safe time. Estimated ETG at test time is about "
                       f"{round(prediction.estimated_etg)} ng/mL against a {threshold:g} ng/mL cutoff.",
            "action": f"The estimated safe time is about {wait_h}h after the scheduled test.",
        }

    if estimate.is_safe_now:
        return {
            "status": "ok",
            "title": "Below threshold",
            "message": f"Estimated ETG is below the {threshold:g} ng/mL threshold.",
            "action": "Individual results vary; allow extra margin before a test.",
        }

    # Not safe means the current level is over the threshold.
    title = "Well above threshold" if status == "above" else "Near threshold"

    return {
        "status": "wait",
        "title": title,
        "message": f"Estimated ETG stays above {threshold:g} ng/mL for about "
                   f"{round(estimate.hours_until_safe, 1)} more hours.",
        "action": "Avoid testing before the estimated safe time.",
    }
