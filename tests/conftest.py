# tests/conftest.py

import pytest

from config import Config


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SUPABASE_URL = 'https://merchant-hero.supabase.co'
    SUPABASE_SERVICE_ROLE_KEY = 'test-service-role-key'
    STORAGE_TIMEOUT = None
    UPLOAD_HISTORY_LIMIT = 50


class FakeStorageClient:
    """Stands in for StorageClient and remembers every RPC it receives."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def upload_master(self, month, filename, locations, volumes, agent_nets):
        self.calls.append({
            'month': month,
            'filename': filename,
            'locations': locations,
            'volumes': volumes,
            'agent_nets': agent_nets,
        })
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def app():
    """
    Creates a new app instance for each test with an in-memory database
    and yields it within an application context.
    """
    from merchant_hero import create_app, db

    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app  # The tests will run here
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage_client():
    return FakeStorageClient(result={'upload_id': 'c0ffee', 'locations_upserted': 2})


@pytest.fixture
def fake_storage(monkeypatch, storage_client):
    """Replaces the storage collaborator used by the views with a FakeStorageClient."""
    from merchant_hero.ingest import storage

    monkeypatch.setattr(storage, 'client_from_config', lambda config: storage_client)
    return storage_client
