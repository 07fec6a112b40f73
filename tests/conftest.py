
"""Shared pytest configuration for the managed secrets test suite."""

from __future__ import annotations

from typing import Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from services.secrets import secrets_service
from services.secrets.config import get_settings
from services.secrets.store import ManagedSecretStore
from shared.ownership import DEFAULT_OWNERSHIP_LABELS
from tests.mocks.fake_kubernetes import FakeCoreV1Api

_SERVICE_ENV_VARS = (
    "MANAGED_BY_LABEL",
    "SECRETS_ENFORCE_OWNERSHIP",
    "SECRETS_STRICT_STATUS_CODES",
    "SECRETS_STATIC_DIR",
    "SECRETS_SERVICE_HOST",
    "SECRETS_SERVICE_PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test from an empty service environment."""

    for variable in _SERVICE_ENV_VARS:
        monkeypatch.delenv(variable, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def ownership_labels() -> Dict[str, str]:
    return dict(DEFAULT_OWNERSHIP_LABELS)


@pytest.fixture()
def fake_core_v1() -> FakeCoreV1Api:
    return FakeCoreV1Api()


@pytest.fixture()
def secret_store(
    fake_core_v1: FakeCoreV1Api, ownership_labels: Dict[str, str]
) -> ManagedSecretStore:
    return ManagedSecretStore(fake_core_v1, ownership_labels)


@pytest.fixture()
def api_client(secret_store: ManagedSecretStore) -> Iterator[TestClient]:
    secrets_service.configure_secret_store(secret_store)
    client = TestClient(secrets_service.app)
    try:
        yield client
    finally:
        client.close()
        secrets_service.configure_secret_store(None)
        secrets_service.app.state.settings = None
        secrets_service.app.dependency_overrides.clear()
