import pytest

from company_proximity.vendors import hubspot


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.responses = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params, headers, timeout))
        return self.responses.pop(0)


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(hubspot, "_SESSION", session)
    return session


def test_get_companies_page_requests_properties(patch_session):
    patch_session.responses.append(DummyResponse(payload={"results": [{"id": "1"}]}))

    payload = hubspot.get_companies_page(5, ["city", "state"], "token")

    assert payload["results"] == [{"id": "1"}]
    url, params, headers, timeout = patch_session.calls[0]
    assert url.endswith("/crm/v3/objects/companies")
    assert params["limit"] == 5
    assert params["properties"] == "city,state"
    assert "after" not in params
    assert headers["Authorization"] == "Bearer token"
    assert timeout == 10


def test_get_companies_page_error_status(patch_session):
    patch_session.responses.append(
        DummyResponse(status_code=401, payload={"category": "INVALID_AUTHENTICATION", "message": "expired"})
    )

    with pytest.raises(hubspot.HubSpotError, match="expired"):
        hubspot.get_companies_page(5, ["city"], "token")


def test_get_owners_by_ids_walks_pages_until_found(patch_session):
    patch_session.responses.extend(
        [
            DummyResponse(
                payload={
                    "results": [{"id": "5", "firstName": "Jane", "lastName": "Doe"}, {"id": "6"}],
                    "paging": {"next": {"after": "abc"}},
                }
            ),
            DummyResponse(
                payload={
                    "results": [{"id": "7", "firstName": "Ann", "lastName": "Lee"}],
                    "paging": {"next": {"after": "def"}},
                }
            ),
        ]
    )

    owners = hubspot.get_owners_by_ids(["5", "7"], "token")

    assert [owner["id"] for owner in owners] == ["5", "7"]
    assert len(patch_session.calls) == 2
    assert patch_session.calls[1][1]["after"] == "abc"


def test_get_owners_by_ids_stops_when_listing_exhausted(patch_session):
    patch_session.responses.append(DummyResponse(payload={"results": [{"id": 5, "firstName": "Jane"}]}))

    owners = hubspot.get_owners_by_ids(["5", "99"], "token")

    assert owners == [{"id": 5, "firstName": "Jane"}]
    assert len(patch_session.calls) == 1


def test_get_owners_by_ids_skips_request_for_empty_ids(patch_session):
    assert hubspot.get_owners_by_ids([None, ""], "token") == []
    assert patch_session.calls == []
