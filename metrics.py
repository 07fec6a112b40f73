"""Prometheus metrics for the managed secrets service."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator

from fastapi import FastAPI, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


logger = logging.getLogger(__name__)

_REGISTRY = CollectorRegistry()

_store_operations_total = Counter(
    "secrets_store_operations_total",
    "Kubernetes secret store operations by outcome.",
    ["service", "operation", "outcome"],
    registry=_REGISTRY,
)
_store_operation_seconds = Histogram(
    "secrets_store_operation_seconds",
    "Latency of Kubernetes secret store operations.",
    ["service", "operation"],
    registry=_REGISTRY,
)

_OPERATIONS = ("create", "update", "delete", "list")

_SERVICE_NAME = "service"


def _normalised(value: str | None, default: str) -> str:
    if value is None:
        return default
    stripped = value.strip()
    return stripped or default


def get_registry() -> CollectorRegistry:
    return _REGISTRY


def init_metrics(service_name: str = "service") -> Dict[str, Counter | Histogram]:
    """Store the configured service name and prime the core series."""

    global _SERVICE_NAME
    _SERVICE_NAME = _normalised(service_name, "service")
    for operation in _OPERATIONS:
        _store_operations_total.labels(
            service=_SERVICE_NAME, operation=operation, outcome="success"
        )
        _store_operation_seconds.labels(service=_SERVICE_NAME, operation=operation)
    return {
        "store_operations_total": _store_operations_total,
        "store_operation_seconds": _store_operation_seconds,
    }


@contextmanager
def observe_store_operation(operation: str) -> Iterator[None]:
    """Count and time one store operation; failures are labelled by error type."""

    started = time.perf_counter()
    outcome = "success"
    try:
        yield
    except Exception as exc:
        outcome = type(exc).__name__
        raise
    finally:
        _store_operation_seconds.labels(
            service=_SERVICE_NAME, operation=operation
        ).observe(time.perf_counter() - started)
        _store_operations_total.labels(
            service=_SERVICE_NAME, operation=operation, outcome=outcome
        ).inc()


def setup_metrics(app: FastAPI, service_name: str = "service") -> None:
    """Attach the Prometheus /metrics endpoint."""

    init_metrics(service_name)

    if not any(getattr(route, "path", None) == "/metrics" for route in app.routes):
        @app.get("/metrics", include_in_schema=False)
        async def metrics_endpoint() -> Response:
            payload = generate_latest(_REGISTRY)
            return Response(payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "get_registry",
    "init_metrics",
    "observe_store_operation",
    "setup_metrics",
]
