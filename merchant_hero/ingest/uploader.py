# ==============================================================================
# merchant_hero/ingest/uploader.py
# ------------------------------------------------------------------------------
# Orchestrates one master upload: validates the request shape, normalizes the
# month and the rows, and hands the result to the storage collaborator.
# ==============================================================================

import logging
from typing import NamedTuple, List

from .errors import MissingInput, NoValidRows
from .normalizer import normalize_month, map_rows, ensure_aligned
from .schema import DEFAULT_FILENAME


class PreparedUpload(NamedTuple):
    month: str
    filename: str
    locations: List[str]
    volumes: List[float]
    agent_nets: List[float]

    @property
    def row_count(self):
        return len(self.locations)


def prepare_upload(month, rows, filename=None):
    """
    Validates and normalizes an upload without contacting storage.

    Args:
        month (str): User-supplied month, 'YYYY-MM' or 'YYYY/MM'.
        rows (list): Row objects as exported by the processor.
        filename (str, optional): Name of the source file.

    Returns:
        PreparedUpload: The normalized month and the three aligned arrays.
    """
    if not month or not isinstance(rows, list) or not rows:
        raise MissingInput()

    month_start = normalize_month(month)
    logging.info(f"Normalized month '{month}' to {month_start}")

    locations, volumes, agent_nets = map_rows(rows)
    logging.info(f"Mapped {len(rows)} rows: {len(locations)} locations, "
                 f"{len(volumes)} volumes, {len(agent_nets)} agent nets")

    if not locations:
        raise NoValidRows()
    ensure_aligned(locations, volumes, agent_nets)

    return PreparedUpload(month_start, filename or DEFAULT_FILENAME, locations, volumes, agent_nets)


def submit_upload(prepared, client):
    """Sends a prepared upload to storage and returns the RPC result unchanged."""
    result = client.upload_master(
        prepared.month,
        prepared.filename,
        prepared.locations,
        prepared.volumes,
        prepared.agent_nets,
    )
    logging.info(f"Upload '{prepared.filename}' for {prepared.month} accepted: {result}")
    return result


def upload_master(month, rows, filename, client):
    """Runs the whole upload: prepare, then submit. Errors propagate to the caller."""
    return submit_upload(prepare_upload(month, rows, filename), client)
