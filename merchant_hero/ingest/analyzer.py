# ==============================================================================
# merchant_hero/ingest/analyzer.py
# ------------------------------------------------------------------------------
# Reads uploaded spreadsheets into row objects and inspects them before upload:
# which processor exported the file, what period it covers, and which rows the
# mapper is going to skip or count as empty.
# ==============================================================================

import os
import re
import logging
import pandas as pd

from .errors import UnreadableSpreadsheet
from .normalizer import map_rows, resolve_alias
from .schema import LOCATION_ALIASES, PROCESSOR_SIGNATURES, PROCESSOR_PATTERNS, DATE_FIELDS

PREVIEW_ROWS = 100
SAMPLE_ROWS = 5
ISO_DATE_PREFIX = re.compile(r'^\d{4}-\d{2}-\d{2}')

FIELD_HINTS = [
    ('volume', re.compile(r'volume|amount|sales|transaction', re.IGNORECASE)),
    ('location', re.compile(r'location|merchant|business|name', re.IGNORECASE)),
    ('account', re.compile(r'account|mid|id', re.IGNORECASE)),
]


def read_spreadsheet(stream, filename):
    """
    Reads a .csv or .xlsx upload into a list of row dictionaries.

    Every cell is read as text so the amount parser sees exactly what the
    processor exported ('$1,234.56', '(500)'). Empty cells become None and
    fully empty rows are dropped.

    Args:
        stream: A binary file-like object.
        filename (str): Original file name, used to pick the reader.

    Returns:
        list: One dict per spreadsheet row, keyed by trimmed header names.
    """
    extension = os.path.splitext(filename or '')[1].lower()
    if extension not in ('.csv', '.xlsx'):
        raise UnreadableSpreadsheet(f"Unsupported file type '{extension or filename}': upload a .csv or .xlsx file")

    try:
        if extension == '.csv':
            df = pd.read_csv(stream, dtype=str, skip_blank_lines=True)
        else:
            df = pd.read_excel(stream, dtype=str)
    except Exception as e:
        logging.warning(f"Could not read '{filename}' as a spreadsheet: {e}")
        raise UnreadableSpreadsheet(f"The file '{filename}' could not be read: {e}") from e

    df.columns = [str(column).strip() for column in df.columns]
    df = df.dropna(how='all')
    df = df.astype(object).where(df.notna(), None)

    rows = df.to_dict(orient='records')
    logging.info(f"Read {len(rows)} rows and {len(df.columns)} columns from '{filename}'")
    return rows


def detect_processor(columns):
    """Guesses the exporting processor from the header names."""
    header = ' '.join(str(c) for c in columns).lower()

    for processor, required in PROCESSOR_SIGNATURES:
        if all(pattern in header for pattern in required):
            return processor

    if 'volume' in header or 'sales' in header:
        return 'Generic'
    return 'Unknown'


def calculate_confidence(columns, processor):
    """Percentage of the processor's signature patterns present in the header."""
    patterns = PROCESSOR_PATTERNS.get(processor)
    if not patterns:
        return 0

    header = ' '.join(str(c) for c in columns).lower()
    matches = sum(1 for pattern in patterns if pattern in header)
    return min(100.0, matches / len(patterns) * 100)


def _to_timestamp(value):
    timestamp = pd.to_datetime(value, errors='coerce')
    if pd.isna(timestamp):
        return None
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert(None)
    return timestamp


def detect_date_range(rows):
    """
    Finds the earliest and latest dates in the named date fields or in any
    value that starts like an ISO date.

    Returns:
        dict | None: {'from': 'YYYY-MM-DD', 'to': 'YYYY-MM-DD'}, or None.
    """
    dates = []
    for row in rows:
        for field in DATE_FIELDS:
            value = row.get(field)
            if value:
                timestamp = _to_timestamp(value)
                if timestamp is not None:
                    dates.append(timestamp)

        for key, value in row.items():
            if key in DATE_FIELDS:
                continue
            if isinstance(value, str) and ISO_DATE_PREFIX.match(value):
                timestamp = _to_timestamp(value)
                if timestamp is not None:
                    dates.append(timestamp)

    if not dates:
        return None
    return {'from': min(dates).date().isoformat(), 'to': max(dates).date().isoformat()}


def field_mapping_suggestions(columns):
    suggestions = []
    for kind, pattern in FIELD_HINTS:
        matched = [c for c in columns if pattern.search(str(c))]
        if matched:
            suggestions.append(f"Detected {kind} fields: {', '.join(matched)}")
    return suggestions


def validate_rows(rows):
    """Returns human-readable warnings about rows the upload will skip or zero out."""
    warnings = []

    rows_without_location = sum(1 for row in rows if resolve_alias(row, LOCATION_ALIASES) is None)
    if rows_without_location:
        warnings.append(f"{rows_without_location} rows have no location name and will be skipped")

    mapped = map_rows(rows)
    if not mapped.locations:
        warnings.append('No valid rows found: check that the file has a location, DBA or Location column')
        return warnings

    empty = sum(1 for volume, net in zip(mapped.volumes, mapped.agent_nets) if volume == 0 and net == 0)
    if empty:
        warnings.append(f"{empty} rows have no volume or payout data")

    return warnings


def analyze_rows(rows):
    """
    Summarizes an uploaded file for review before it is sent to storage.

    Detection runs over the first PREVIEW_ROWS rows; row counts and warnings
    cover the whole file.
    """
    preview = rows[:PREVIEW_ROWS]
    columns = list(preview[0].keys()) if preview else []

    processor = detect_processor(columns)
    warnings = validate_rows(rows)
    suggestions = field_mapping_suggestions(columns)
    if warnings:
        suggestions.append('Consider reviewing your source file to ensure all required '
                           'columns are present and properly formatted')

    report = {
        'suggestedProcessor': processor,
        'detectedDateRange': detect_date_range(preview),
        'rowCount': len(rows),
        'columns': columns,
        'sampleData': preview[:SAMPLE_ROWS],
        'confidence': calculate_confidence(columns, processor),
        'warnings': warnings,
        'suggestions': suggestions,
    }
    logging.info(f"File analysis: processor={processor}, rows={len(rows)}, warnings={len(warnings)}")
    return report
