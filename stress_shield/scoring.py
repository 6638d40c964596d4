"""
Financial stress score.

Three sub-scores on a 0-100 stress scale (0 = no stress) are read off
piecewise-linear curves and blended with fixed weights:

    raw   = 0.55 * expense_sub + 0.25 * buffer_sub + 0.20 * debt_sub
    score = round_half_up(clamp(raw, 0, 100))

The same function backs the HTTP analysis endpoint and any local caller, so
the thresholds and rounding below are the single source of truth.
"""
import logging
import math

import numpy as np

from .models import FinancialSnapshot, RiskBand, StressResult

logger = logging.getLogger(__name__)


# CONSTANTS

STRESS_WEIGHTS = {
    "expense": 0.55,
    "buffer":  0.25,
    "debt":    0.20,
}

# (x breakpoints, stress at each breakpoint)
EXPENSE_RATIO_CURVE = (
    np.array([0.0, 0.5, 0.7, 0.85, 1.0, 1.2]),
    np.array([0.0, 10.0, 30.0, 60.0, 85.0, 100.0]),
)
BUFFER_MONTHS_CURVE = (
    np.array([0.0, 1.0, 3.0, 6.0, 12.0]),
    np.array([100.0, 70.0, 35.0, 10.0, 0.0]),
)
DEBT_RATIO_CURVE = (
    np.array([0.0, 0.1, 0.2, 0.35, 0.5]),
    np.array([0.0, 10.0, 35.0, 70.0, 100.0]),
)

# Ratio used when there is no income at all: far past the last breakpoint,
# so expense stress is maximal whatever the expenses are.
NO_INCOME_RATIO = 999.0
# Runway assumed when there are no expenses to cover.
NO_EXPENSE_BUFFER_MONTHS = 12.0

# Inclusive upper score of each band
RISK_BANDS = [
    (33, RiskBand.LOW),
    (66, RiskBand.MODERATE),
    (100, RiskBand.CRITICAL),
]


def lerp(value: float, x1: float, x2: float, y1: float, y2: float) -> float:
    """y1 at or below x1, y2 at or above x2, linear in between."""
    if value <= x1:
        return y1
    if value >= x2:
        return y2
    return y1 + ((value - x1) / (x2 - x1)) * (y2 - y1)


def piecewise(value: float, curve, side: str = "left") -> float:
    """
    Interpolate `value` on a breakpoint curve.

    side="left" puts a value sitting exactly on a breakpoint into the lower
    segment, side="right" into the upper one. Values outside the curve are
    held at the end anchors.
    """
    xs, ys = curve
    i = int(np.searchsorted(xs, value, side=side)) - 1
    i = min(max(i, 0), len(xs) - 2)
    return lerp(value, float(xs[i]), float(xs[i + 1]), float(ys[i]), float(ys[i + 1]))


def expense_ratio(snapshot: FinancialSnapshot) -> float:
    if snapshot.income > 0:
        return snapshot.total_expenses / snapshot.income
    return NO_INCOME_RATIO


def buffer_months(snapshot: FinancialSnapshot) -> float:
    total_expenses = snapshot.total_expenses
    if total_expenses > 0:
        return snapshot.total_buffer / total_expenses
    return NO_EXPENSE_BUFFER_MONTHS


def debt_ratio(snapshot: FinancialSnapshot) -> float:
    if snapshot.income > 0:
        return snapshot.debt / snapshot.income
    return 0.0


def expense_sub_score(snapshot: FinancialSnapshot) -> float:
    return min(100.0, piecewise(expense_ratio(snapshot), EXPENSE_RATIO_CURVE))


def buffer_sub_score(snapshot: FinancialSnapshot) -> float:
    # more buffer means less stress; a value on a breakpoint belongs to the
    # segment above it
    return piecewise(buffer_months(snapshot), BUFFER_MONTHS_CURVE, side="right")


def debt_sub_score(snapshot: FinancialSnapshot) -> float:
    return min(100.0, piecewise(debt_ratio(snapshot), DEBT_RATIO_CURVE))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def risk_band(score: int) -> RiskBand:
    for upper, band in RISK_BANDS:
        if score <= upper:
            return band
    return RiskBand.CRITICAL


def stress_score(snapshot: FinancialSnapshot) -> StressResult:
    """
    Score a household's monthly snapshot.

    Returns
    -------
    StressResult : integer score in [0, 100], its risk band and display
                   label, and the three weighted sub-scores.
    """
    expense_sub = expense_sub_score(snapshot)
    buffer_sub = buffer_sub_score(snapshot)
    debt_sub = debt_sub_score(snapshot)

    raw = (STRESS_WEIGHTS["expense"] * expense_sub
           + STRESS_WEIGHTS["buffer"] * buffer_sub
           + STRESS_WEIGHTS["debt"] * debt_sub)
    score = round_half_up(max(0.0, min(100.0, raw)))
    band = risk_band(score)

    logger.debug(
        "stress score %d (raw=%.4f expense=%.4f buffer=%.4f debt=%.4f)",
        score, raw, expense_sub, buffer_sub, debt_sub,
    )
    return StressResult(
        score=score,
        band=band,
        category=band.label,
        expense_sub=expense_sub,
        buffer_sub=buffer_sub,
        debt_sub=debt_sub,
        raw=raw,
    )
