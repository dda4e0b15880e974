import pytest

from company_proximity.core import pipeline
from company_proximity.core.config import ConfigError, Settings
from company_proximity.core.pipeline import InvalidRequestError, ReferenceLocationError
from company_proximity.jobs import nearby_server
from company_proximity.vendors.hubspot import HubSpotError

SETTINGS = Settings(hubspot_access_token="hub", mapbox_access_token="")


@pytest.fixture(autouse=True)
def lookup(monkeypatch):
    received = {}

    def fake_lookup(context, settings=None):
        received["context"] = context
        received["settings"] = settings
        if "raise" in received:
            raise received["raise"]
        return {"companies": [{"hs_object_id": "2", "distance": 12.5, "ownerName": "Jane Doe"}]}

    monkeypatch.setattr(nearby_server, "get_settings", lambda: SETTINGS)
    monkeypatch.setattr(nearby_server, "run_lookup", fake_lookup)
    return received


def test_health_endpoint():
    client = nearby_server.app.test_client()
    response = client.get("/healthz")
    body = response.get_json()
    assert response.status_code == 200
    assert body["status"] == "ok"
    assert body["hubspot_configured"] is True
    assert body["mapbox_configured"] is False


def test_nearby_returns_companies(lookup):
    client = nearby_server.app.test_client()
    payload = {"propertiesToSend": {"hs_object_id": "1", "city": "Boston"}, "event": {"payload": {"batchSize": 5}}}

    response = client.post("/companies/nearby", json=payload)

    assert response.status_code == 200
    assert response.get_json()["data"]["companies"][0]["ownerName"] == "Jane Doe"
    assert lookup["context"] == payload
    assert lookup["settings"] is SETTINGS


@pytest.mark.parametrize(
    "error, status",
    [
        (ReferenceLocationError(), 400),
        (InvalidRequestError("batchSize must be positive"), 400),
        (ConfigError("MAPBOX_ACCESS_TOKEN must be set"), 500),
        (HubSpotError("expired"), 502),
        (RuntimeError("boom"), 500),
    ],
)
def test_nearby_maps_errors_to_status(lookup, error, status):
    lookup["raise"] = error
    client = nearby_server.app.test_client()

    response = client.post("/companies/nearby", json={"propertiesToSend": {}})

    assert response.status_code == status
    assert "error" in response.get_json()


def test_nearby_reports_reference_message(lookup):
    lookup["raise"] = ReferenceLocationError()
    client = nearby_server.app.test_client()

    response = client.post("/companies/nearby", json={"propertiesToSend": {}})

    assert response.get_json() == {
        "error": "Unable to calculate geo coordinates. Please specify an address for the record."
    }


@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"propertiesToSend": {"city": "Boston"}, "event": "click"},
        {"propertiesToSend": {"city": "Boston"}, "event": {"payload": 5}},
    ],
)
def test_nearby_rejects_malformed_bodies(monkeypatch, body):
    monkeypatch.setattr(nearby_server, "run_lookup", pipeline.main)
    monkeypatch.setattr(
        nearby_server, "get_settings", lambda: Settings(hubspot_access_token="hub", mapbox_access_token="map")
    )
    client = nearby_server.app.test_client()

    response = client.post("/companies/nearby", json=body)

    assert response.status_code == 400
    assert "error" in response.get_json()
