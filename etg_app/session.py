"""
Drinking log: personal profile plus the drinking sessions reported by the user.
Times are naive local datetimes, as entered.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from etg_app import calculations
from etg_app.drinks import (
    duration_hours,
    grams_from_amount,
    resolve_abv,
    standard_drinks,
)
from etg_app.errors import EtgInputError

logger = logging.getLogger(__name__)

LBS_TO_KG = 0.453592
WEIGHT_UNITS = ("kg", "lbs")


def weight_to_kg(weight: float, unit: str = "kg") -> float:
    if weight is None or not weight > 0:
        raise EtgInputError("Please enter a valid body weight")
    if unit == "lbs":
        return weight * LBS_TO_KG
    if unit == "kg":
        return float(weight)
    raise EtgInputError(f"Unknown weight unit: {unit}")


@dataclass
class DrinkingSession:
    time: datetime
    alcohol_grams: float
    duration_hours: float = 0.0
    abv: float = 0.0

    @property
    def end_time(self) -> datetime:
        return self.time + timedelta(hours=self.duration_hours)


@dataclass
class Session:
    weight_kg: float
    gender: str = "male"
    metabolism_rate: str = "average"
    _sessions: List[DrinkingSession] = field(default_factory=list)

    def __post_init__(self):
        if self.weight_kg is None or not self.weight_kg > 0:
            raise EtgInputError("Please enter a valid body weight")
        if self.gender not in calculations.GENDER_MULTIPLIER:
            raise EtgInputError(f"Unknown gender: {self.gender}")
        if self.metabolism_rate not in calculations.METABOLISM_MULTIPLIER:
            raise EtgInputError(f"Unknown metabolism rate: {self.metabolism_rate}")

    def add_session(self, time: datetime, grams: float, hours: float = 0.0, abv: float = 0.0) -> DrinkingSession:
        s = DrinkingSession(time=time, alcohol_grams=grams, duration_hours=hours, abv=abv)
        try:
            s.end_time
        except OverflowError:
            raise EtgInputError("Drink time is out of range") from None
        self._sessions.append(s)
        return s

    def add_drink(
        self,
        drink_type: str,
        amount: float,
        unit: str,
        time: datetime,
        duration: Optional[float] = None,
        duration_unit: str = "hours",
        custom_abv: Optional[float] = None,
    ) -> DrinkingSession:
        abv = resolve_abv(drink_type, custom_abv)
        grams = grams_from_amount(amount, unit, abv)
        hours = duration_hours(duration, duration_unit)
        logger.debug("session %s: %.1f %s of %s -> %.1f g over %.2f h", time, amount, unit, drink_type, grams, hours)
        return self.add_session(time, grams, hours, abv)

    @property
    def sessions(self) -> List[DrinkingSession]:
        return sorted(self._sessions, key=lambda s: s.time)

    @property
    def total_alcohol_grams(self) -> float:
        return sum(s.alcohol_grams for s in self._sessions)

    @property
    def total_standard_drinks(self) -> float:
        return standard_drinks(self.total_alcohol_grams)

    @property
    def last_drink_time(self) -> Optional[datetime]:
        """End of the session that started last."""
        ordered = self.sessions
        if not ordered:
            return None
        return ordered[-1].end_time

    def estimate(self, threshold: float, now: Optional[datetime] = None) -> calculations.EtgEstimate:
        if now is None:
            now = datetime.now()
        return calculations.estimate_etg(
            self.sessions,
            self.gender,
            self.metabolism_rate,
            threshold,
            now,
        )

    def etg_at(self, when: datetime) -> float:
        last = self.last_drink_time
        if last is None:
            return 0.0
        hours = (when - last).total_seconds() / 3600.0
        return calculations.etg_at(
            hours,
            calculations.peak_etg(self.total_alcohol_grams),
            calculations.elimination_rate(self.gender, self.metabolism_rate),
        )

    def curve(self, step_hours: float = 0.5, end_hours: Optional[float] = None):
        return calculations.etg_curve(
            calculations.peak_etg(self.total_alcohol_grams),
            calculations.elimination_rate(self.gender, self.metabolism_rate),
            step_hours=step_hours,
            end_hours=end_hours,
        )
