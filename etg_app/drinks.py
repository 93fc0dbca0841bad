"""Drink definitions and alcohol content helpers for ETG estimation.

US standard drink = 14 g ethanol.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from etg_app.errors import EtgInputError

# US standard drink in grams of pure ethanol.
STANDARD_DRINK_GRAMS = 14.0

# Ethanol density (g/mL) for volume x ABV -> grams.
ETHANOL_DENSITY = 0.789

# 1 US fl oz ~= 29.5735 mL.
ML_PER_OZ = 29.5735

AMOUNT_UNITS = ("ml", "oz", "drinks")
DURATION_UNITS = ("hours", "minutes")

# Longest drinking session accepted, in hours.
MAX_DURATION_HOURS = 72.0


@dataclass
class DrinkType:
    """A drink category with its default ABV."""

    key: str
    name: str
    abv: float  # percent, e.g. 5.0 for 5%


DRINK_TYPES = {
    "beer": DrinkType("beer", "Beer", 5.0),
    "wine": DrinkType("wine", "Wine", 12.0),
    "liquor": DrinkType("liquor", "Liquor/Spirits", 40.0),
    # ABV comes from the user.
    "custom": DrinkType("custom", "Custom", 0.0),
}


def resolve_abv(drink_type: str, custom_abv: Optional[float] = None) -> float:
    """ABV (percent) for a drink type; custom drinks must supply 0 < abv <= 100."""
    dt = DRINK_TYPES.get(drink_type)
    if dt is None:
        raise EtgInputError(f"Unknown drink type: {drink_type}")
    if dt.key != "custom":
        return dt.abv
    if custom_abv is None or not 0 < custom_abv <= 100:
        raise EtgInputError("Please enter a valid custom ABV")
    return float(custom_abv)


def grams_from_volume_ml(volume_ml: float, abv: float) -> float:
    """Convert millilitres and ABV (percent) to grams of ethanol."""
    return volume_ml * (abv / 100.0) * ETHANOL_DENSITY


def grams_from_amount(amount: float, unit: str, abv: float) -> float:
    """Return grams of ethanol for an amount in ml, oz or standard drinks."""
    if unit == "drinks":
        grams = amount * STANDARD_DRINK_GRAMS
    elif unit == "ml":
        grams = grams_from_volume_ml(amount, abv)
    elif unit == "oz":
        grams = grams_from_volume_ml(amount * ML_PER_OZ, abv)
    else:
        raise EtgInputError(f"Unknown amount unit: {unit}")
    if not math.isfinite(grams):
        raise EtgInputError("Amount consumed is too large")
    return grams


def duration_hours(value: Optional[float], unit: str = "hours") -> float:
    """Drinking duration in hours. Missing duration counts as zero."""
    if value is None:
        return 0.0
    if value < 0:
        raise EtgInputError("Drinking duration cannot be negative")
    if unit == "hours":
        hours = float(value)
    elif unit == "minutes":
        hours = value / 60.0
    else:
        raise EtgInputError(f"Unknown duration unit: {unit}")
    if hours > MAX_DURATION_HOURS:
        raise EtgInputError(f"Drinking duration must be at most {MAX_DURATION_HOURS:g} hours")
    return hours


def standard_drinks(grams: float) -> float:
    return grams / STANDARD_DRINK_GRAMS


def list_drink_types() -> List[Tuple[str, str, float]]:
    """Return list of (key, name, abv) for UI dropdowns."""
    return [(d.key, d.name, d.abv) for d in DRINK_TYPES.values()]
