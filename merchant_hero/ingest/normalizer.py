# ==============================================================================
# merchant_hero/ingest/normalizer.py
# ------------------------------------------------------------------------------
# Turns loosely-typed spreadsheet rows into the canonical triplet
# (location, volume, agent net) and user-typed months into YYYY-MM-01 keys.
# Every upload entry point goes through these functions.
# ==============================================================================

import math
import re
import numbers
from typing import NamedTuple, List

from .errors import InvalidMonthFormat, InvalidMonthRange, ArrayLengthMismatch
from .schema import LOCATION_ALIASES, VOLUME_ALIASES, AGENT_NET_ALIASES

MONTH_PATTERN = re.compile(r'([0-9]{4})-([0-9]{1,2})')
AMOUNT_PATTERN = re.compile(r'[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?')
ACCOUNTING_NEGATIVE = re.compile(r'\((.*)\)')
STRIPPED_CHARS = re.compile(r'[$,\s]')


class MappedRows(NamedTuple):
    locations: List[str]
    volumes: List[float]
    agent_nets: List[float]


def normalize_month(value):
    """
    Converts '2025-6', '2025-06' or '2025/06' into the canonical '2025-06-01'.

    Raises:
        InvalidMonthFormat: the value is not a 4-digit year and 1-2 digit month.
        InvalidMonthRange: the month is outside 1..12.
    """
    text = str(value or '').strip().replace('/', '-')
    match = MONTH_PATTERN.fullmatch(text)
    if not match:
        raise InvalidMonthFormat()

    year, month = match.group(1), int(match.group(2))
    if month < 1 or month > 12:
        raise InvalidMonthRange()

    return f"{year}-{month:02d}-01"


def parse_amount(value):
    """
    Parses a currency-formatted cell such as '$1,234.56' or '(500)'.
    Numbers pass through unchanged; anything unparsable counts as 0.
    """
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        # NaN/inf cannot be sent to storage, so they degrade like bad text
        return value if math.isfinite(value) else 0

    text = STRIPPED_CHARS.sub('', '' if value is None else str(value))
    text = ACCOUNTING_NEGATIVE.sub(r'-\1', text) if ACCOUNTING_NEGATIVE.fullmatch(text) else text

    if not AMOUNT_PATTERN.fullmatch(text):
        return 0
    amount = float(text)
    if not math.isfinite(amount) or amount == 0:
        return 0
    return amount


def _is_blank(value):
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def resolve_alias(row, aliases):
    """Returns the first populated value among `aliases`, or None."""
    for alias in aliases:
        value = row.get(alias)
        if not _is_blank(value):
            return value
    return None


def ensure_aligned(locations, volumes, agent_nets):
    if not (len(locations) == len(volumes) == len(agent_nets)):
        raise ArrayLengthMismatch(len(locations), len(volumes), len(agent_nets))


def map_rows(rows):
    """
    Maps uploaded rows onto three parallel lists in input order.
    Rows without a location name are skipped.
    """
    locations, volumes, agent_nets = [], [], []

    for row in rows:
        if not hasattr(row, 'get'):
            continue

        location = resolve_alias(row, LOCATION_ALIASES)
        name = '' if location is None else str(location).strip()
        if not name:
            continue

        locations.append(name)
        volumes.append(parse_amount(resolve_alias(row, VOLUME_ALIASES)))
        agent_nets.append(parse_amount(resolve_alias(row, AGENT_NET_ALIASES)))

    ensure_aligned(locations, volumes, agent_nets)
    return MappedRows(locations, volumes, agent_nets)
