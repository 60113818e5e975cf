import json

import pytest
from fastapi.testclient import TestClient

from record_gateway.app import app
from record_gateway.handler import RecordHandler
from record_gateway.lambda_function import get_handler
from record_gateway.stores import InMemoryRecordStore


@pytest.fixture()
def store():
    return InMemoryRecordStore("id")


@pytest.fixture()
def handler(store):
    return RecordHandler(store, key_field="id")


@pytest.fixture()
def invoke(handler):
    """Call the handler and decode the envelope into (status, body)."""

    def _invoke(**event):
        envelope = handler(event)
        assert envelope["headers"] == {"Content-Type": "application/json"}
        return envelope["statusCode"], json.loads(envelope["body"])

    return _invoke


@pytest.fixture()
def client(handler):
    app.dependency_overrides[get_handler] = lambda: handler
    yield TestClient(app)
    app.dependency_overrides.clear()
