"""
Shared fixtures for the git-recipes test suite.

Nothing here touches the network: `requests` calls and the Opik client are
patched per test.
"""
import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

from git_recipes.utils.tracing import reset_opik_client_for_testing
from git_recipes.utils.weaviate_client import reset_weaviate_client_for_testing


def make_response(status_code=200, text="", reason="OK"):
    """Build a real requests.Response so .ok and .text behave normally."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture(autouse=True)
def reset_singletons():
    reset_weaviate_client_for_testing()
    reset_opik_client_for_testing()
    yield
    reset_weaviate_client_for_testing()
    reset_opik_client_for_testing()


@pytest.fixture
def weaviate_env(monkeypatch):
    monkeypatch.setenv("WEAVIATE_URL", "https://example.com")
    monkeypatch.setenv("WEAVIATE_API_KEY", "test-key")


@pytest.fixture
def opik_client(monkeypatch):
    """Patch opik.Opik so tracing runs against a MagicMock client."""
    monkeypatch.setenv("OPIK_API_KEY", "opik-key")
    monkeypatch.setenv("OPIK_WORKSPACE", "test-workspace")
    client = MagicMock()
    monkeypatch.setattr("git_recipes.utils.tracing.opik.Opik", MagicMock(return_value=client))
    return client


@pytest.fixture
def client():
    from git_recipes.main import app
    return TestClient(app)
