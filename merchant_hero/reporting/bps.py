# ==============================================================================
# merchant_hero/reporting/bps.py
# ------------------------------------------------------------------------------
# Commission rates reach us in three shapes depending on who entered them:
# decimal (0.0075), basis points (75) or raw hundredths of a point (7500).
# These helpers bring any of them to a single representation.
# ==============================================================================


def convert_to_bps_display(stored_rate):
    """Returns the rate as whole basis points, e.g. 0.0075 -> 75."""
    if stored_rate <= 1:
        return round(stored_rate * 10000)
    if stored_rate > 100:
        return round(stored_rate / 100)
    return round(stored_rate)


def convert_to_decimal_rate(stored_rate):
    """Returns the rate as a multiplier for volume, e.g. 75 -> 0.0075."""
    if stored_rate <= 1:
        return stored_rate
    if stored_rate > 100:
        # raw hundredths of a point: 7500 is 75 BPS
        return stored_rate / 1_000_000
    return stored_rate / 10000
