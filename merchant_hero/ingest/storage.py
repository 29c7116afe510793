# ==============================================================================
# merchant_hero/ingest/storage.py
# ------------------------------------------------------------------------------
# Client for the managed database that stores monthly facts. The only write it
# performs is the mh_upload_master RPC; aggregation happens on the other side.
# ==============================================================================

import logging
import requests

from .errors import ServerMisconfigured, StorageError

UPLOAD_RPC = 'mh_upload_master'


class StorageClient:
    """
    Calls PostgREST endpoints of the storage collaborator with the service
    credential. No retries; the timeout is whatever the configuration says.
    """

    def __init__(self, base_url, service_key, timeout=None, session=None):
        self.base_url = base_url.rstrip('/')
        self.service_key = service_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self):
        return {
            'apikey': self.service_key,
            'Authorization': f'Bearer {self.service_key}',
            'Content-Type': 'application/json',
        }

    def _url(self, path):
        return f"{self.base_url}/rest/v1/{path.lstrip('/')}"

    def upload_master(self, month, filename, locations, volumes, agent_nets):
        """
        Hands one normalized upload to the storage collaborator.

        Returns:
            The decoded JSON result of the RPC, or None for an empty body.

        Raises:
            StorageError: the RPC answered with an error, or the request failed.
        """
        payload = {
            'p_month': month,
            'p_filename': filename,
            'p_locations': locations,
            'p_volumes': volumes,
            'p_mh_nets': agent_nets,
        }
        logging.info(f"Calling {UPLOAD_RPC} RPC for {month} with {len(locations)} locations")
        try:
            response = self.session.post(self._url(f'rpc/{UPLOAD_RPC}'), json=payload,
                                         headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logging.error(f"{UPLOAD_RPC} request failed: {e}")
            raise StorageError(str(e) or 'Upload failed') from e

        if response.status_code >= 400:
            error = _error_from_response(response)
            logging.error(f"{UPLOAD_RPC} returned HTTP {response.status_code}: {error.message} (code={error.code})")
            raise error

        if not response.content:
            return None
        return response.json()

    def check_connection(self):
        """Reads a single upload id to prove the credential works. Returns (ok, error)."""
        try:
            response = self.session.get(self._url('uploads'), params={'select': 'id', 'limit': 1},
                                        headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            return False, str(e)
        if response.status_code >= 400:
            return False, _error_from_response(response).message
        return True, None

    def rpc_exists(self):
        """True when the PostgREST schema document lists the upload RPC."""
        try:
            response = self.session.get(self._url(''), headers=self._headers(), timeout=self.timeout)
            if response.status_code >= 400:
                return False
            paths = response.json().get('paths', {})
        except (requests.RequestException, ValueError):
            return False
        return f'/rpc/{UPLOAD_RPC}' in paths


def _error_from_response(response):
    try:
        body = response.json()
    except ValueError:
        body = None

    if not isinstance(body, dict):
        return StorageError(response.text or f'RPC error (HTTP {response.status_code})')

    return StorageError(
        body.get('message') or 'RPC error',
        code=body.get('code'),
        details=body.get('details'),
        hint=body.get('hint'),
    )


def client_from_config(config):
    """
    Builds a StorageClient from the Flask config.

    Raises:
        ServerMisconfigured: the endpoint or the service credential is missing.
    """
    base_url = config.get('SUPABASE_URL')
    service_key = config.get('SUPABASE_SERVICE_ROLE_KEY')
    logging.info(f"Storage configuration check: has_url={bool(base_url)}, has_key={bool(service_key)}")
    if not base_url or not service_key:
        raise ServerMisconfigured()
    return StorageClient(base_url, service_key, timeout=config.get('STORAGE_TIMEOUT'))
