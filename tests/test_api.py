"""
Tests for the local control API.
"""
import httpx
import pytest
import respx
from fastapi.testclient import TestClient
from clocker.bamboohr.client import HttpError
from clocker.credentials import API_KEY, load_config
from clocker.main import app

DIRECTORY_URL = "https://api.bamboohr.com/api/gateway.php/acme/v1/employees/directory"


@pytest.fixture
def api(service, store):
    previous = (app.state.service, app.state.secret_store)
    app.state.service = service
    app.state.secret_store = store
    yield TestClient(app)
    app.state.service, app.state.secret_store = previous


def test_healthz(api):
    response = api.get("/healthz", headers={"X-Request-ID": "req-1"})
    assert response.status_code == 200
    assert response.json()["data"] == {"status": "healthy"}
    assert response.json()["requestId"] == "req-1"
    assert response.headers["X-Request-ID"] == "req-1"


def test_readyz_reports_credentials(api, store):
    data = api.get("/readyz").json()["data"]
    assert data["ready"] is True
    assert data["checks"]["credentials"] == "configured"

    store.delete(API_KEY)
    assert api.get("/readyz").json()["data"]["ready"] is False


def test_status_does_not_fetch(api, server):
    """GET /status renders the cached snapshot only."""
    data = api.get("/status").json()
    assert data["ok"] is True
    assert data["data"]["state"] == "unconfigured"
    assert data["data"]["view"]["label"] == "Loading..."
    assert server.calls == []


def test_refresh(api, server):
    server.add(start="2026-10-18T06:00:00Z", end="2026-10-18T09:30:00Z", hours=3.5)

    body = api.post("/refresh").json()

    assert body["ok"] is True
    assert body["data"]["state"] == "synced"
    assert body["data"]["status"]["isClockedIn"] is False
    assert body["data"]["status"]["todayTotalHours"] == 3.5
    assert body["data"]["view"]["label"] == "Clocked Out"
    assert body["data"]["view"]["todayHours"] == "3.5"


def test_refresh_failure_returns_error_and_last_status(api, server):
    """Degraded: the error and the last known status side by side."""
    server.add(start="2026-10-18T12:00:00Z")
    api.post("/refresh")
    server.fetch_error = HttpError(500, "Internal Server Error")

    body = api.post("/refresh").json()

    assert body["ok"] is False
    assert body["error"]["code"] == "http_error"
    assert body["error"]["details"] == {"status_code": 500}
    assert body["data"]["state"] == "degraded"
    assert body["data"]["status"]["isClockedIn"] is True


def test_toggle(api, server):
    body = api.post("/toggle").json()
    assert body["ok"] is True
    assert body["data"]["action"] == "clock_in"
    assert body["data"]["status"]["isClockedIn"] is True

    body = api.post("/toggle").json()
    assert body["data"]["action"] == "clock_out"
    assert server.count("clock_in") == 1
    assert server.count("clock_out") == 1


def test_toggle_without_credentials(api, store, server):
    store.delete(API_KEY)
    body = api.post("/toggle").json()
    assert body["ok"] is False
    assert body["error"]["code"] == "missing_credentials"
    assert body["data"]["state"] == "unconfigured"
    assert server.calls == []


def test_clock_in_and_out(api, server):
    assert api.post("/clock-in").json()["data"]["status"]["isClockedIn"] is True
    assert api.post("/clock-out").json()["data"]["status"]["isClockedIn"] is False
    assert server.calls == ["clock_in", "fetch", "clock_out", "fetch"]


def test_clock_in_rejected(api, server):
    server.add(start="2026-10-18T08:00:00Z")
    body = api.post("/clock-in").json()
    assert body["ok"] is False
    assert body["error"]["details"] == {"status_code": 409}


def test_save_credentials(api, store, built_clients):
    response = api.put(
        "/setup/credentials",
        json={"apiKey": " new ", "companyDomain": "acme", "employeeId": "43"},
    )

    body = response.json()
    assert body["ok"] is True
    assert body["data"]["state"] == "synced"
    config = load_config(store)
    assert (config.api_key, config.employee_id) == ("new", "43")
    assert built_clients[-1].config == config


def test_save_credentials_validation(api, store):
    body = api.put(
        "/setup/credentials",
        json={"apiKey": "", "companyDomain": "acme", "employeeId": "43"},
    ).json()
    assert body["ok"] is False
    assert body["error"]["code"] == "validation_error"
    assert load_config(store).api_key == "test_key"

    body = api.put(
        "/setup/credentials",
        json={"apiKey": "k", "companyDomain": "acme", "employeeId": " "},
    ).json()
    assert body["error"]["message"] == "Select an employee"


def test_delete_credentials(api, store):
    body = api.delete("/setup/credentials").json()
    assert body["ok"] is True
    assert body["data"]["state"] == "unconfigured"
    assert load_config(store) is None


@respx.mock
def test_employee_search(api):
    """Directory lookup filters by query and preselects the stored employee."""
    respx.route(host="testserver").pass_through()
    route = respx.get(DIRECTORY_URL).mock(
        return_value=httpx.Response(
            200,
            json={"employees": [
                {"id": "41", "displayName": "Ada Lovelace"},
                {"id": "42", "firstName": "Grace", "lastName": "Hopper"},
            ]},
        )
    )

    body = api.post(
        "/setup/employees",
        json={"apiKey": "setup_key", "companyDomain": "acme", "query": "hop"},
    ).json()

    assert body["ok"] is True
    assert body["data"]["employees"] == [{"id": "42", "displayName": "Grace Hopper"}]
    assert body["data"]["selectedId"] == "42"
    assert route.calls.last.request.headers["Authorization"].startswith("Basic ")


@respx.mock
def test_employee_search_unauthorized(api):
    respx.route(host="testserver").pass_through()
    respx.get(DIRECTORY_URL).mock(return_value=httpx.Response(401, text="Unauthorized"))

    body = api.post(
        "/setup/employees",
        json={"apiKey": "bad", "companyDomain": "acme"},
    ).json()

    assert body["ok"] is False
    assert body["error"]["code"] == "http_error"
    assert body["error"]["details"] == {"status_code": 401}


def test_generated_request_id_matches_header(api):
    """Without a caller id, the body and the header carry the same minted id."""
    response = api.post("/refresh")
    assert response.json()["requestId"]
    assert response.json()["requestId"] == response.headers["X-Request-ID"]


@respx.mock
def test_employee_search_other_company_has_no_selection(api):
    respx.route(host="testserver").pass_through()
    respx.get("https://api.bamboohr.com/api/gateway.php/other/v1/employees/directory").mock(
        return_value=httpx.Response(200, json={"employees": [{"id": "42", "displayName": "Grace Hopper"}]})
    )

    body = api.post(
        "/setup/employees",
        json={"apiKey": "setup_key", "companyDomain": "other"},
    ).json()

    assert body["data"]["employees"] == [{"id": "42", "displayName": "Grace Hopper"}]
    assert body["data"]["selectedId"] is None
