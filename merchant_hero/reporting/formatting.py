# ==============================================================================
# merchant_hero/reporting/formatting.py
# ------------------------------------------------------------------------------
# Display formatting for money, basis points and percentages. Values are
# truncated toward zero, never rounded, so a payout is never shown as more
# than what was actually computed.
# ==============================================================================

import math
from decimal import Decimal, ROUND_DOWN


def truncate_to(n, decimals):
    """Truncates `n` toward zero to `decimals` places. Non-finite input gives 0."""
    if n is None or not math.isfinite(n):
        return 0.0
    step = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(n)).quantize(step, rounding=ROUND_DOWN))


def format_money_exact(n, decimals=2):
    """1234.567 -> '$1,234.56'"""
    return f"${truncate_to(n, decimals):,.{decimals}f}"


def format_bps_exact(n, decimals=0):
    """75.9 -> '75 BPS'"""
    return f"{truncate_to(n, decimals):,.{decimals}f} BPS"


def format_percent_exact(n, decimals=2):
    """0.12345 -> '12.34%'"""
    if n is None or not math.isfinite(n):
        return f"{0:.{decimals}f}%"
    return f"{truncate_to(float(Decimal(str(n)) * 100), decimals):,.{decimals}f}%"
