"""FastAPI service exposing the managed secrets resource at ``/secrets``."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from metrics import setup_metrics
from services.secrets.config import Settings, get_settings
from services.secrets.errors import (
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from services.secrets.models import SecretRecord
from services.secrets.store import ManagedSecretStore
from shared.correlation import CorrelationIdMiddleware
from shared.health import setup_health_checks


LOGGER = logging.getLogger(__name__)

SERVICE_NAME = "secrets-service"

app = FastAPI(title="Managed Secrets Service")
app.add_middleware(CorrelationIdMiddleware)
setup_metrics(app, service_name=SERVICE_NAME)

secret_store: Optional[ManagedSecretStore] = None

_UNAVAILABLE_MESSAGE = "Secret store is not configured"


def configure_secret_store(store: Optional[ManagedSecretStore]) -> None:
    """Install the store used by request handlers."""

    global secret_store
    secret_store = store


def get_secret_store() -> ManagedSecretStore:
    if secret_store is None:
        LOGGER.error("Secret store requested before initialization")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=_UNAVAILABLE_MESSAGE,
        )
    return secret_store


def get_service_settings(request: Request) -> Settings:
    """Settings installed by ``create_app``, else the process environment."""

    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        return get_settings()
    return settings


def require_namespace(namespace: Optional[str] = Query(default=None)) -> str:
    if not namespace:
        raise ValidationError("Namespace is required")
    return namespace


def require_secret_target(
    namespace: Optional[str] = Query(default=None),
    name: Optional[str] = Query(default=None),
) -> Tuple[str, str]:
    if not namespace or not name:
        raise ValidationError("Namespace and secret name are required")
    return namespace, name


def _secret_store_health() -> Dict[str, Any]:
    store = get_secret_store()
    return {
        "label_selector": store.label_selector,
        "enforce_ownership": store.enforce_ownership,
    }


setup_health_checks(app, {"secret_store": _secret_store_health})


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    return PlainTextResponse(
        str(exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> PlainTextResponse:
    LOGGER.warning(
        "Invalid secret payload for %s %s", request.method, request.url.path
    )
    return PlainTextResponse(
        "Invalid request payload", status_code=status.HTTP_400_BAD_REQUEST
    )


@app.exception_handler(ValidationError)
async def handle_invalid_request(request: Request, exc: ValidationError) -> PlainTextResponse:
    LOGGER.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)


def _store_failure(prefix: str, exc: StoreError, settings: Settings) -> HTTPException:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if settings.strict_status_codes:
        if isinstance(exc, ConflictError):
            status_code = status.HTTP_409_CONFLICT
        elif isinstance(exc, NotFoundError):
            status_code = status.HTTP_404_NOT_FOUND
    return HTTPException(status_code=status_code, detail=f"{prefix}: {exc}")


@app.get("/secrets")
def list_secrets(
    namespace: str = Depends(require_namespace),
    store: ManagedSecretStore = Depends(get_secret_store),
    settings: Settings = Depends(get_service_settings),
) -> JSONResponse:
    try:
        records: List[SecretRecord] = store.list(namespace)
    except StoreError as exc:
        LOGGER.error("Error fetching secrets in namespace %s: %s", namespace, exc)
        raise _store_failure("Error fetching secrets", exc, settings) from exc

    return JSONResponse(content=[record.model_dump() for record in records])


@app.post("/secrets", status_code=status.HTTP_201_CREATED)
def create_secret(
    payload: SecretRecord,
    store: ManagedSecretStore = Depends(get_secret_store),
    settings: Settings = Depends(get_service_settings),
) -> PlainTextResponse:
    try:
        store.create(payload.namespace, payload.name, payload.labels, payload.data)
    except StoreError as exc:
        LOGGER.error("Error creating secret %s/%s: %s", payload.namespace, payload.name, exc)
        raise _store_failure("Error creating secret", exc, settings) from exc

    return PlainTextResponse(
        f"Secret {payload.name} created successfully in namespace {payload.namespace}\n",
        status_code=status.HTTP_201_CREATED,
    )


@app.put("/secrets")
def update_secret(
    payload: SecretRecord,
    store: ManagedSecretStore = Depends(get_secret_store),
    settings: Settings = Depends(get_service_settings),
) -> PlainTextResponse:
    try:
        store.update(payload.namespace, payload.name, payload.labels, payload.data)
    except StoreError as exc:
        LOGGER.error("Error updating secret %s/%s: %s", payload.namespace, payload.name, exc)
        raise _store_failure("Error updating secret", exc, settings) from exc

    return PlainTextResponse(
        f"Secret {payload.name} updated successfully in namespace {payload.namespace}\n"
    )


@app.delete("/secrets")
def delete_secret(
    target: Tuple[str, str] = Depends(require_secret_target),
    store: ManagedSecretStore = Depends(get_secret_store),
    settings: Settings = Depends(get_service_settings),
) -> PlainTextResponse:
    namespace, name = target
    try:
        store.delete(namespace, name)
    except StoreError as exc:
        LOGGER.error("Error deleting secret %s/%s: %s", namespace, name, exc)
        raise _store_failure("Error deleting secret", exc, settings) from exc

    return PlainTextResponse(
        f"Secret {name} deleted successfully from namespace {namespace}\n"
    )


__all__ = [
    "app",
    "configure_secret_store",
    "get_secret_store",
]
