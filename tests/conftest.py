import os

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("ENABLE_FILE_LOGGING", "false")

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api import dependencies
from app.core.exceptions import UpstreamProvisioningException
from app.core.memory_repositories import InMemoryFormRepository, InMemorySchemaRepository
from app.core.schema_metrics import SchemaMetrics
from app.core.webhook_service import WebhookRelay
from main import app

ACTIVITIES_HOOK = "https://hooks.test/app-events/activities"
CUSTOM_HOOK = "https://hooks.test/app-events/custom"


class FakeIntegrationClient:
    """Records field-mapping calls instead of talking to the platform."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def get_field_mapping(self, customer_id, integration_key, instance_key, resource="objects", auto_create=True):
        self.calls.append({
            "customer_id": customer_id,
            "integration_key": integration_key,
            "instance_key": instance_key,
            "auto_create": auto_create,
        })
        if self.fail:
            raise UpstreamProvisioningException("Field mapping provisioning failed")
        return {"id": f"fm-{instance_key}", "instanceKey": instance_key}


def make_response(status_code=200, json_body=None, text=""):
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.reason = "OK" if response.ok else "Error"
    if json_body is not None:
        response.headers = {"content-type": "application/json"}
        response.json.return_value = json_body
    else:
        response.headers = {"content-type": "text/plain"}
    response.text = text
    return response


@pytest.fixture
def schema_repo():
    return InMemorySchemaRepository()


@pytest.fixture
def form_repo():
    return InMemoryFormRepository()


@pytest.fixture
def metrics():
    return SchemaMetrics()


@pytest.fixture
def integration_client():
    return FakeIntegrationClient()


@pytest.fixture
def webhook_session():
    session = MagicMock()
    session.post.return_value = make_response(200, {"received": True})
    return session


@pytest.fixture
def relay(webhook_session):
    return WebhookRelay(
        default_urls={"activities": ACTIVITIES_HOOK},
        custom_url=CUSTOM_HOOK,
        timeout=5,
        session=webhook_session,
    )


@pytest.fixture
def client(schema_repo, form_repo, metrics, integration_client, relay):
    app.dependency_overrides[dependencies.get_schema_repository] = lambda: schema_repo
    app.dependency_overrides[dependencies.get_form_repository] = lambda: form_repo
    app.dependency_overrides[dependencies.get_schema_metrics] = lambda: metrics
    app.dependency_overrides[dependencies.get_integration_client] = lambda: integration_client
    app.dependency_overrides[dependencies.get_webhook_relay] = lambda: relay
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def registered(client):
    """Client for tenant T1 with the built-in record types registered."""
    assert client.get("/api/v1/forms", params={"customerId": "T1"}).status_code == 200
    return client
