# ==============================================================================
# merchant_hero/reporting/commissions.py
# ------------------------------------------------------------------------------
# Per-location agent commissions: location volume times the agent's rate,
# then rolled up per agent for the P&L views.
# ==============================================================================

import logging
import pandas as pd

from merchant_hero.ingest.normalizer import parse_amount
from .bps import convert_to_bps_display, convert_to_decimal_rate
from .formatting import format_money_exact, format_bps_exact


def _volume_by_account(transactions):
    """Sums volume + debit_volume per account_id."""
    if not transactions:
        return {}

    df = pd.DataFrame(transactions)
    if 'account_id' not in df.columns:
        logging.warning("Transactions carry no 'account_id'; no volume can be attributed to locations.")
        return {}

    for column in ('volume', 'debit_volume'):
        df[column] = df[column].map(parse_amount).astype(float) if column in df.columns else 0.0

    df['total_volume'] = df['volume'] + df['debit_volume']
    totals = df.groupby('account_id')['total_volume'].sum()
    logging.debug(f"Volume grouped by account_id:\n{totals.to_string()}")
    return totals.to_dict()


def calculate_location_commissions(transactions, assignments, locations):
    """
    Computes the commission of every active agent assignment.

    Args:
        transactions (list): Dicts with 'account_id', 'volume', 'debit_volume'.
        assignments (list): Dicts with 'location_id', 'agent_name',
            'commission_rate' (decimal, BPS or raw) and 'is_active'.
        locations (list): Dicts with 'id', 'name', 'account_id'.

    Returns:
        list: One dict per active assignment whose location is known.
    """
    volume_by_account = _volume_by_account(transactions)
    locations_by_id = {location.get('id'): location for location in locations}
    commissions = []

    for assignment in assignments:
        if not assignment.get('is_active'):
            continue

        location = locations_by_id.get(assignment.get('location_id'))
        if location is None:
            logging.warning(f"Location not found for assignment: {assignment.get('location_id')}")
            continue

        location_volume = float(volume_by_account.get(location.get('account_id'), 0.0))
        stored_rate = parse_amount(assignment.get('commission_rate'))
        decimal_rate = convert_to_decimal_rate(stored_rate)
        commission = location_volume * decimal_rate

        commissions.append({
            'locationId': assignment.get('location_id'),
            'locationName': location.get('name'),
            'agentName': assignment.get('agent_name'),
            'bpsRate': convert_to_bps_display(stored_rate),
            'decimalRate': decimal_rate,
            'locationVolume': location_volume,
            'commission': commission,
        })

    logging.info(f"Calculated {len(commissions)} location commissions from {len(assignments)} assignments")
    return commissions


def group_commissions_by_agent(commissions):
    """Groups location commissions per agent, highest total commission first."""
    grouped = {}
    for commission in commissions:
        summary = grouped.setdefault(commission['agentName'], {
            'agentName': commission['agentName'],
            'locations': [],
            'totalCommission': 0.0,
        })
        summary['locations'].append(commission)
        summary['totalCommission'] += commission['commission']

    return sorted(grouped.values(), key=lambda s: s['totalCommission'], reverse=True)


def prepare_commission_report(transactions, assignments, locations):
    """
    Builds the commission report served to the dashboard, with display
    strings next to the raw numbers.
    """
    commissions = calculate_location_commissions(transactions, assignments, locations)
    for commission in commissions:
        commission['display'] = {
            'volume': format_money_exact(commission['locationVolume']),
            'commission': format_money_exact(commission['commission']),
            'rate': format_bps_exact(commission['bpsRate']),
        }

    agents = group_commissions_by_agent(commissions)
    for agent in agents:
        agent['display'] = {'totalCommission': format_money_exact(agent['totalCommission'])}

    total = sum(c['commission'] for c in commissions)
    return {
        'locationCommissions': commissions,
        'agentSummaries': agents,
        'overallSummary': {
            'totalCommission': total,
            'totalCommissionDisplay': format_money_exact(total),
            'agentCount': len(agents),
            'locationCount': len(commissions),
        },
    }
