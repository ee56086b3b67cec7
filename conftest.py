# conftest.py
import pytest
from fastapi.testclient import TestClient

from incident_edge.app import create_app
from incident_edge.config import Settings
from incident_edge.geocoding import GeocodingError
from incident_edge.security import CredentialHasher
from incident_edge.storage import StorageError

TEST_SETTINGS = Settings(
    supabase_url="http://supabase.test",
    service_role_key="service-role-key",
    geocode_key="geo-key",
    database_url="sqlite://",
    bcrypt_rounds=4,
)


# ---------- Collaborator doubles ----------

class FakeStorage:
    def __init__(self):
        self.objects = {}
        self.fail = False

    def upload(self, key, content, content_type=None):
        if self.fail:
            raise StorageError("bucket offline")
        self.objects[key] = (content, content_type)
        return key

    def public_url(self, path):
        return f"http://supabase.test/storage/v1/object/public/Report_Bucket/{path}"

    def list_buckets(self):
        if self.fail:
            raise StorageError("bucket offline")
        return ["Report_Bucket"]


class FakeGeocoder:
    def __init__(self):
        self.results = [{
            "country": "Kenya", "city": "Nairobi", "county": "Nairobi County",
            "state": None, "street": "Moi Avenue", "postcode": "00100", "village": None,
        }]
        self.fail = False
        self.calls = []

    def reverse(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        if self.fail:
            raise GeocodingError("geocoder down")
        return list(self.results)


# ---------- Fixtures ----------

@pytest.fixture
def storage():
    return FakeStorage()

@pytest.fixture
def geocoder():
    return FakeGeocoder()

@pytest.fixture
def app(storage, geocoder):
    """Fresh app per test: in-memory SQLite store, fake storage and geocoder."""
    return create_app(TEST_SETTINGS, storage=storage, geocoder=geocoder,
                      hasher=CredentialHasher(rounds=4))

@pytest.fixture
def store(app):
    return app.state.store

@pytest.fixture
def client(app):
    return TestClient(app)
