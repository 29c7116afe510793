# ==============================================================================
# merchant_hero/ingest/schema.py
# ------------------------------------------------------------------------------
# Column aliases accepted in uploaded rows, in priority order. Processor exports
# name the same field differently; the first populated alias wins.
# This schema is the single source of truth for the row mapper.
# ==============================================================================

LOCATION_ALIASES = ('location', 'DBA', 'Location')

VOLUME_ALIASES = ('volume', 'Volume', 'TPV')

AGENT_NET_ALIASES = ('agent_net', 'Agent Net Payout', 'Agent Net Revenue', 'Residuals')

DEFAULT_FILENAME = 'upload'

# Header signatures used to guess which processor produced a file.
# Checked in order; the first processor whose required patterns all appear wins.
PROCESSOR_SIGNATURES = [
    ('TRNXN', ('dba name', 'bank card volume')),
    ('NUVEI', ('merchant name', 'total volume')),
    ('PAYSAFE', ('account name', 'processing volume')),
]

# Patterns scored for the confidence of a processor guess
PROCESSOR_PATTERNS = {
    'TRNXN': ['dba name', 'bank card volume', 'debit card volume', 'agent payout'],
    'NUVEI': ['merchant name', 'total volume', 'commission'],
    'PAYSAFE': ['account name', 'processing volume', 'fees'],
    'Generic': ['volume', 'amount', 'total'],
}

DATE_FIELDS = ('date', 'transaction_date', 'processing_date', 'settlement_date')
