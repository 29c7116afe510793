# tests/test_storage.py

import json

import pytest
import requests

from merchant_hero.ingest.errors import ServerMisconfigured, StorageError
from merchant_hero.ingest.storage import StorageClient, client_from_config


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        if text is not None:
            self.text = text
        else:
            self.text = json.dumps(body) if body is not None else ''
        self.content = self.text.encode()

    def json(self):
        if self._body is None:
            raise ValueError('No JSON body')
        return self._body


class FakeSession:
    """Records requests and answers them from a queue of canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def _answer(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        return self._answer('POST', url, **kwargs)

    def get(self, url, **kwargs):
        return self._answer('GET', url, **kwargs)


def make_client(*responses, timeout=None):
    session = FakeSession(*responses)
    return StorageClient('https://merchant-hero.supabase.co/', 'service-key', timeout=timeout, session=session), session


def test_upload_master_posts_rpc_payload():
    client, session = make_client(FakeResponse(200, {'upload_id': 42}))

    result = client.upload_master('2025-06-01', 'june.csv', ['Store A'], [100.0], [-10.0])

    assert result == {'upload_id': 42}
    method, url, kwargs = session.requests[0]
    assert method == 'POST'
    assert url == 'https://merchant-hero.supabase.co/rest/v1/rpc/mh_upload_master'
    assert kwargs['json'] == {
        'p_month': '2025-06-01',
        'p_filename': 'june.csv',
        'p_locations': ['Store A'],
        'p_volumes': [100.0],
        'p_mh_nets': [-10.0],
    }
    assert kwargs['headers']['apikey'] == 'service-key'
    assert kwargs['headers']['Authorization'] == 'Bearer service-key'
    assert kwargs['timeout'] is None


def test_upload_master_returns_none_for_empty_body():
    client, _ = make_client(FakeResponse(204))
    assert client.upload_master('2025-06-01', 'upload', ['A'], [1], [0]) is None


def test_upload_master_relays_postgrest_errors():
    error_body = {'code': 'P0001', 'message': 'month is locked', 'details': None, 'hint': 'unlock first'}
    client, _ = make_client(FakeResponse(400, error_body))

    with pytest.raises(StorageError) as excinfo:
        client.upload_master('2025-06-01', 'upload', ['A'], [1], [0])

    assert excinfo.value.message == 'month is locked'
    assert excinfo.value.code == 'P0001'
    assert excinfo.value.hint == 'unlock first'
    assert excinfo.value.to_dict() == {'error': 'month is locked', 'code': 'P0001'}


def test_upload_master_handles_non_json_error_body():
    client, _ = make_client(FakeResponse(502, text='Bad Gateway'))
    with pytest.raises(StorageError, match='Bad Gateway'):
        client.upload_master('2025-06-01', 'upload', ['A'], [1], [0])


def test_upload_master_wraps_transport_failures():
    client, _ = make_client(requests.ConnectionError('connection refused'))
    with pytest.raises(StorageError, match='connection refused'):
        client.upload_master('2025-06-01', 'upload', ['A'], [1], [0])


def test_check_connection_and_rpc_exists():
    client, session = make_client(
        FakeResponse(200, [{'id': 1}]),
        FakeResponse(200, {'paths': {'/': {}, '/rpc/mh_upload_master': {}}}),
    )

    assert client.check_connection() == (True, None)
    assert client.rpc_exists() is True
    assert session.requests[0][1] == 'https://merchant-hero.supabase.co/rest/v1/uploads'
    assert session.requests[0][2]['params'] == {'select': 'id', 'limit': 1}


def test_check_connection_reports_error_message():
    client, _ = make_client(FakeResponse(401, {'message': 'Invalid API key'}))
    assert client.check_connection() == (False, 'Invalid API key')


def test_rpc_exists_is_false_when_function_is_missing():
    client, _ = make_client(FakeResponse(200, {'paths': {'/uploads': {}}}))
    assert client.rpc_exists() is False


@pytest.mark.parametrize('config', [
    {},
    {'SUPABASE_URL': 'https://merchant-hero.supabase.co'},
    {'SUPABASE_SERVICE_ROLE_KEY': 'service-key'},
    {'SUPABASE_URL': '', 'SUPABASE_SERVICE_ROLE_KEY': 'service-key'},
])
def test_client_from_config_requires_url_and_key(config):
    with pytest.raises(ServerMisconfigured) as excinfo:
        client_from_config(config)
    assert excinfo.value.status_code == 500


def test_client_from_config_uses_configured_timeout():
    client = client_from_config({
        'SUPABASE_URL': 'https://merchant-hero.supabase.co',
        'SUPABASE_SERVICE_ROLE_KEY': 'service-key',
        'STORAGE_TIMEOUT': 30.0,
    })
    assert client.base_url == 'https://merchant-hero.supabase.co'
    assert client.timeout == 30.0
