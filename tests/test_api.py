"""
Tests for the webhook, pairing and device control endpoints.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hubitat_bridge.api import router
from hubitat_bridge.api.dependencies import get_manager
from hubitat_bridge.api.webhook import extract_webhook_fields
from hubitat_bridge.devices.manager import DeviceManager
from hubitat_bridge.devices.models import CapabilityKey as K

from conftest import FakeHubClient, device_payload


@pytest.fixture
def hub_devices() -> FakeHubClient:
    return FakeHubClient([
        device_payload("12", "Porch Light", ["Switch"], {"switch": "off"}),
        device_payload("13", "Front Door", ["Lock", "Battery"], {"lock": "locked"}),
    ])


@pytest.fixture
def manager(hub_devices, sync, clock) -> DeviceManager:
    return DeviceManager(hub_devices, sync=sync, clock=clock)


@pytest.fixture
def client(manager):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_manager] = lambda: manager
    with TestClient(app) as test_client:
        yield test_client
        test_client.portal.call(manager.shutdown)


def _pair(client, device_id: str) -> None:
    resp = client.post("/pairing", json={"device_id": device_id})
    assert resp.status_code == 200, resp.text


class TestWebhookFields:

    def test_content_envelope_wins(self):
        body = {"content": {"deviceId": "1", "name": "switch", "value": "on"}}
        assert extract_webhook_fields(body, {"deviceId": "2"})["deviceId"] == "1"

    def test_query_before_flat_body(self):
        assert extract_webhook_fields({"deviceId": "1"}, {"deviceId": "2"})["deviceId"] == "2"

    def test_flat_body(self):
        assert extract_webhook_fields({"deviceId": "1"}, {})["deviceId"] == "1"

    def test_nothing(self):
        assert extract_webhook_fields(None, {}) == {}


class TestWebhook:

    def test_post_content_envelope(self, client, manager):
        _pair(client, "12")
        resp = client.post("/webhook", json={
            "content": {"name": "switch", "value": "on", "deviceId": 12, "displayName": "Porch Light"},
        })

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["device_found"] is True
        assert data["processed"] == {"deviceId": 12, "attributeName": "switch", "attributeValue": "on"}
        assert manager.get("12").state.get(K.ONOFF) is True

    def test_post_with_query_parameters(self, client, manager):
        _pair(client, "12")
        resp = client.post("/webhook?deviceId=12&name=switch&value=on")
        assert resp.json()["device_found"] is True
        assert manager.get("12").state.get(K.ONOFF) is True

    def test_get_with_query_parameters(self, client):
        resp = client.get("/webhook", params={"deviceId": "12", "name": "switch", "value": "on"})
        data = resp.json()
        assert data["success"] is True
        assert data["device_found"] is False

    def test_missing_parameters(self, client):
        resp = client.post("/webhook", json={"content": {"deviceId": "12", "name": "switch"}})
        assert resp.status_code == 200
        assert resp.json()["success"] is False
        assert resp.json()["error"] == "Missing parameters"

    def test_non_json_body(self, client):
        resp = client.post("/webhook", content=b"not json", headers={"Content-Type": "text/plain"})
        assert resp.status_code == 200
        assert resp.json()["error"] == "Missing parameters"


class TestPairingEndpoints:

    def test_list_pairable(self, client):
        resp = client.get("/pairing/lock")
        assert resp.status_code == 200
        assert resp.json() == [{"name": "Front Door", "stable_id": "13"}]

    def test_invalid_driver_type(self, client):
        assert client.get("/pairing/toaster").status_code == 400

    def test_hub_failure(self, client, hub_devices):
        hub_devices.fail_fetch = 1
        assert client.get("/pairing/switch").status_code == 502

    def test_pair_and_unpair(self, client, manager):
        resp = client.post("/pairing", json={"device_id": "13"})
        assert resp.json() == {"id": "13", "name": "Front Door", "driver_type": "lock"}
        assert manager.get("13").state.get(K.LOCKED) is True

        assert client.delete("/pairing/13").json() == {"success": True}
        assert client.delete("/pairing/13").status_code == 404

    def test_test_connection(self, client, hub_devices):
        assert client.get("/test-connection").json() == {"success": True}
        hub_devices.fail_fetch = 1
        assert client.get("/test-connection").json() == {"success": False}


class TestDeviceEndpoints:

    def test_state(self, client):
        _pair(client, "12")
        resp = client.get("/devices/12/state")
        assert resp.json()["state"] == {"onoff": False}
        assert client.get("/devices/99/state").status_code == 404

    def test_write_capability(self, client, hub_devices):
        _pair(client, "12")
        resp = client.post("/devices/12/capabilities/onoff", json={"value": True})

        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert hub_devices.commands == [("12", "on", [])]

    def test_write_unsupported_capability(self, client):
        _pair(client, "12")
        resp = client.post("/devices/12/capabilities/dim", json={"value": 0.5})
        assert resp.json()["error"] == "UNSUPPORTED_CAPABILITY"

    def test_write_invalid_capability_name(self, client):
        _pair(client, "12")
        assert client.post("/devices/12/capabilities/volume", json={"value": 1}).status_code == 400

    def test_list_devices(self, client):
        _pair(client, "12")
        devices = client.get("/devices/").json()
        assert devices[0]["driver_type"] == "switch"
        assert devices[0]["writable"] == ["onoff"]
