"""ETG estimation using a linear rise to peak followed by exponential decay.

Model:
- Peak ETG (ng/mL) = total grams ethanol * 35
- Rise: linear from the end of the last drink to the peak, 5 hours later
- Decay: ETG * (1 - k) ** hours_after_peak, k = 0.25 / (gender * metabolism)
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from etg_app.errors import EtgInputError

# Peak urinary ETG is roughly 25-50 ng/mL per gram of ethanol; use the middle.
PEAK_ETG_PER_GRAM = 35.0

# Hours after the last drink at which ETG peaks.
HOURS_TO_PEAK = 5.0

# Fraction of ETG eliminated per hour after the peak, before adjustments.
BASE_ELIMINATION_RATE = 0.25

# Below this level ETG counts as fully eliminated (ng/mL).
MINIMUM_DETECTABLE_ETG = 100.0

METABOLISM_MULTIPLIER = {
    "slow": 1.3,
    "average": 1.0,
    "fast": 0.8,
}

# Females eliminate roughly 15% slower.
GENDER_MULTIPLIER = {
    "male": 1.0,
    "female": 1.15,
}


@dataclass
class EtgEstimate:
    """Result of one estimate, anchored at the reference time ``now``."""

    now: datetime
    threshold: float
    total_alcohol_grams: float
    peak_etg: float
    current_etg: float
    elimination_rate: float
    last_drink_time: datetime
    hours_since_last_drink: float
    hours_until_safe: float
    total_elimination_hours: float

    @property
    def safe_time(self) -> datetime:
        """Safe time counted from the end of the last drink."""
        return self.last_drink_time + timedelta(hours=self.hours_until_safe)

    @property
    def is_safe_now(self) -> bool:
        return self.hours_until_safe <= 0

    def etg_at(self, when: datetime) -> float:
        """Model ETG (ng/mL) at an absolute time."""
        hours = (when - self.last_drink_time).total_seconds() / 3600.0
        return etg_at(hours, self.peak_etg, self.elimination_rate)


def peak_etg(total_grams: float) -> float:
    return total_grams * PEAK_ETG_PER_GRAM


def elimination_rate(gender: str = "male", metabolism: str = "average") -> float:
    """Hourly elimination fraction adjusted for gender and metabolism."""
    try:
        g = GENDER_MULTIPLIER[gender]
    except KeyError:
        raise EtgInputError(f"Unknown gender: {gender}") from None
    try:
        m = METABOLISM_MULTIPLIER[metabolism]
    except KeyError:
        raise EtgInputError(f"Unknown metabolism rate: {metabolism}") from None
    return BASE_ELIMINATION_RATE / (g * m)


def etg_at(hours_since_last_drink: float, peak: float, rate: float) -> float:
    """ETG (ng/mL) a given number of hours after the last drink ended."""
    if hours_since_last_drink < HOURS_TO_PEAK:
        level = peak * (max(0.0, hours_since_last_drink) / HOURS_TO_PEAK)
    else:
        level = peak * (1.0 - rate) ** (hours_since_last_drink - HOURS_TO_PEAK)
    return max(0.0, level)


def hours_to_decay(from_level: float, to_level: float, rate: float) -> float:
    """Hours of decay for ETG to fall from ``from_level`` to ``to_level``."""
    if from_level <= to_level:
        return 0.0
    return math.log(to_level / from_level) / math.log(1.0 - rate)


def hours_until_safe(hours_since_last_drink: float, peak: float, rate: float, threshold: float) -> float:
    """Hours of decay left before ETG drops below ``threshold``.

    While still rising, the wait is the decay from the current level plus the
    rest of the rise; a rising level already below the threshold needs none.
    """
    current = etg_at(hours_since_last_drink, peak, rate)
    if current <= threshold:
        return 0.0
    hours = hours_to_decay(current, threshold, rate)
    if hours_since_last_drink < HOURS_TO_PEAK:
        hours += HOURS_TO_PEAK - hours_since_last_drink
    return hours


def total_elimination_hours(peak: float, rate: float) -> float:
    """Hours from the last drink until ETG drops below the detectable floor."""
    return HOURS_TO_PEAK + hours_to_decay(peak, MINIMUM_DETECTABLE_ETG, rate)


def etg_curve(
    peak: float,
    rate: float,
    start_hours: float = 0.0,
    end_hours: Optional[float] = None,
    step_hours: float = 0.5,
) -> List[Tuple[float, float]]:
    """Return (hours_since_last_drink, etg) pairs for graphing."""
    if step_hours <= 0:
        raise ValueError("step_hours must be > 0")
    end = total_elimination_hours(peak, rate) if end_hours is None else end_hours
    end = max(end, start_hours)

    points: List[Tuple[float, float]] = []
    i = 0
    t = start_hours
    while t <= end + 1e-9:
        points.append((round(t, 4), round(etg_at(t, peak, rate), 2)))
        i += 1
        t = start_hours + i * step_hours
    return points


def estimate_etg(
    sessions: Sequence,
    gender: str,
    metabolism: str,
    threshold: float,
    now: datetime,
) -> EtgEstimate:
    """Estimate current ETG and time-to-safe from drinking sessions.

    Each session needs ``time``, ``alcohol_grams`` and ``end_time``. The last
    drink is the end of the session that started last.
    """
    if not sessions:
        raise EtgInputError("Please add at least one drinking session with valid data")
    if threshold <= 0:
        raise EtgInputError("Test threshold must be positive")

    sessions = sorted(sessions, key=lambda s: s.time)
    total = sum(s.alcohol_grams for s in sessions)
    peak = peak_etg(total)
    if not math.isfinite(peak):
        raise EtgInputError("Total alcohol is too large to estimate")
    rate = elimination_rate(gender, metabolism)
    last_drink = sessions[-1].end_time
    since = (now - last_drink).total_seconds() / 3600.0

    estimate = EtgEstimate(
        now=now,
        threshold=threshold,
        total_alcohol_grams=total,
        peak_etg=peak,
        current_etg=etg_at(since, peak, rate),
        elimination_rate=rate,
        last_drink_time=last_drink,
        hours_since_last_drink=since,
        hours_until_safe=max(0.0, hours_until_safe(since, peak, rate, threshold)),
        total_elimination_hours=total_elimination_hours(peak, rate),
    )
    # safe_time must be representable
    try:
        estimate.safe_time
    except OverflowError:
        raise EtgInputError("Drink times are out of range") from None
    return estimate
