"""Parse and validate raw calculator input (JSON body, form values or CLI args)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from etg_app.errors import EtgInputError
from etg_app.session import Session, weight_to_kg

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 500
COMMON_THRESHOLDS = (100, 200, 300, 500, 1000)


@dataclass
class EtgRequest:
    session: Session
    threshold: int
    test_time: datetime | None = None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_float(value: Any, field: str) -> float | None:
    """Float or None for blank input; anything else unparseable is an error."""
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise EtgInputError(f"{field} must be a number")
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise EtgInputError(f"{field} must be a number") from None
    if parsed != parsed or parsed in (float("inf"), float("-inf")):
        raise EtgInputError(f"{field} must be a number")
    return parsed


def parse_time(value: Any, field: str) -> datetime | None:
    """Naive local datetime from an ISO string or datetime; None for blank input."""
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            text = str(value).strip()
            # fromisoformat only accepts "Z" from Python 3.11
            if text[-1:] in ("Z", "z"):
                text = text[:-1] + "+00:00"
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise EtgInputError(f"{field} must be a date and time (YYYY-MM-DDTHH:MM)") from None
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone().replace(tzinfo=None)
        except (OverflowError, OSError):
            raise EtgInputError(f"{field} is out of range") from None
    return parsed


def parse_threshold(value: Any, default: int = DEFAULT_THRESHOLD) -> int:
    parsed = parse_float(value, "Test threshold")
    if parsed is None:
        return default
    threshold = int(parsed)
    if threshold <= 0:
        raise EtgInputError("Test threshold must be a positive number of ng/mL")
    return threshold


def _add_raw_session(model: Session, index: int, raw: Any) -> bool:
    """Add one raw session to ``model``; False when it is skipped as incomplete."""
    if not isinstance(raw, dict):
        logger.debug("skipping session %d: not an object", index)
        return False

    time = parse_time(raw.get("time"), "Drink time")
    amount = parse_float(raw.get("amount"), "Amount consumed")
    if time is None or amount is None or amount <= 0:
        logger.debug("skipping session %d: missing time or amount", index)
        return False

    model.add_drink(
        drink_type=str(raw.get("drink_type") or "beer").strip().lower(),
        amount=amount,
        unit=str(raw.get("unit") or "drinks").strip().lower(),
        time=time,
        duration=parse_float(raw.get("duration"), "Drinking duration"),
        duration_unit=str(raw.get("duration_unit") or "hours").strip().lower(),
        custom_abv=parse_float(raw.get("custom_abv"), "Custom ABV"),
    )
    return True


def parse_request(data: Any, default_threshold: int = DEFAULT_THRESHOLD) -> EtgRequest:
    """Build an :class:`EtgRequest` from a JSON-like dict.

    Incomplete sessions (no time, no positive amount) are skipped; other
    invalid values raise :class:`EtgInputError`.
    """
    if not isinstance(data, dict):
        raise EtgInputError("Request body must be a JSON object")

    weight = parse_float(data.get("weight"), "Body weight")
    weight_unit = str(data.get("weight_unit") or "kg").strip().lower()
    model = Session(
        weight_kg=weight_to_kg(weight, weight_unit),
        gender=str(data.get("gender") or "male").strip().lower(),
        metabolism_rate=str(data.get("metabolism_rate") or "average").strip().lower(),
    )

    raw_sessions = data.get("sessions") or []
    if not isinstance(raw_sessions, list):
        raise EtgInputError("sessions must be a list")
    added = sum(_add_raw_session(model, i, raw) for i, raw in enumerate(raw_sessions))
    if added == 0:
        raise EtgInputError("Please add at least one drinking session with valid data")

    return EtgRequest(
        session=model,
        threshold=parse_threshold(data.get("test_threshold"), default=default_threshold),
        test_time=parse_time(data.get("test_time"), "Test time"),
    )
