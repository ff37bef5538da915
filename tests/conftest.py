import pytest
from fastapi.testclient import TestClient
from main import app  # import your FastAPI app
from services.ids import SequentialIdGenerator, get_id_generator
from config import config

config.valid_tokens = ["fake-client-token"]

AUTH_HEADERS = {"Authorization": "Bearer fake-client-token"}


# Deterministic ids for every request
def override_get_id_generator():
    return SequentialIdGenerator()

app.dependency_overrides[get_id_generator] = override_get_id_generator


@pytest.fixture
def auth_headers():
    return dict(AUTH_HEADERS)

@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c

@pytest.fixture
def variant_payload():
    """Builds one variant the way the metrics storage reports it."""
    def build(variant_id, clicks, conversions, is_control=False, **overrides):
        payload = {
            "variant_id": variant_id,
            "variant_name": variant_id.title(),
            "is_control": is_control,
            "sample_size": clicks,
            "conversions": conversions,
            "clicks": clicks,
            "impressions": clicks * 20,
            "spend": 5000.0,
            "revenue": conversions * 40.0,
        }
        payload.update(overrides)
        return payload
    return build
