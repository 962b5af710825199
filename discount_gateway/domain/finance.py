"""Interest and rate calculations for discounted-credit operations"""

from typing import Optional

DAYS_PER_YEAR = 365


def total_capital(principal: float, expenses: float) -> float:
    """Capital total is principal plus expenses"""
    return (principal or 0.0) + (expenses or 0.0)


def simple_interest(
    principal: Optional[float],
    nominal_rate_percent: Optional[float],
    days: Optional[int],
) -> Optional[float]:
    """
    Simple interest over a 365-day year.

    Returns None unless principal, rate and days are all present and positive;
    callers only flag interest as computed when a value comes back.

    Example:
        10,000 at 36% for 30 days -> 10000 * 0.36 * 30 / 365 = 295.89
    """
    if not principal or not nominal_rate_percent or not days:
        return None
    if principal <= 0 or nominal_rate_percent <= 0 or days <= 0:
        return None
    return principal * nominal_rate_percent * days / (100 * DAYS_PER_YEAR)


def effective_rate(nominal_rate_percent: Optional[float], days: Optional[int]) -> float:
    """
    Convert a simple nominal rate over `days` into an annualized compounding
    equivalent, in percent.

    effective = ((1 + r*t) ** (1/t) - 1) * 100, r = rate/100, t = days/365

    A zero or missing term returns 0 (t appears in the exponent denominator).
    A full-year term returns the nominal rate unchanged.
    """
    if not days or days <= 0:
        return 0.0

    rate = (nominal_rate_percent or 0.0) / 100
    years = days / DAYS_PER_YEAR

    return ((1 + rate * years) ** (1 / years) - 1) * 100
