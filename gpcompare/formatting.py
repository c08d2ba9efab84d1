"""Display formatting for comparison output (en-GB conventions)."""

from __future__ import annotations

from .utils import round_half_up


def format_currency(amount: float) -> str:
    """£1,957,091 (whole pounds)."""
    pounds = int(round_half_up(amount, 0))
    sign = "-" if pounds < 0 else ""
    return f"{sign}£{abs(pounds):,}"


def format_number(value: float, decimals: int = 0) -> str:
    return f"{round_half_up(value, decimals):,.{decimals}f}"


def format_percent(value: float, decimals: int = 0) -> str:
    """Ratio to percentage: 0.65 -> '65%'."""
    return f"{value * 100:.{decimals}f}%"


def format_wte(value: float) -> str:
    return f"{value:.1f}"
