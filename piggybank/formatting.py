"""Currency formatting for display and notifications."""

from __future__ import annotations

import math
from typing import Union


def format_money(amount: Union[float, int]) -> str:
    """Format an amount as whole US dollars.

    Example:
        >>> format_money(1234.4)
        '$1,234'
        >>> format_money(-200)
        '-$200'
    """
    if isinstance(amount, int):
        whole = abs(amount)
    else:
        # overflowed totals have nothing sensible to show
        if not math.isfinite(amount):
            return "$0"
        # half-up like the browser's currency formatter, not banker's rounding
        whole = int(abs(amount) + 0.5)
    sign = "-" if amount < 0 and whole else ""
    return f"{sign}${whole:,}"
