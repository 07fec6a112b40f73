"""Utilities for attaching `/healthz` endpoints to FastAPI applications."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, MutableMapping

from fastapi import FastAPI
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

HealthCheck = Callable[[], Awaitable[object | None] | object | None]


async def _execute(check: HealthCheck) -> object | None:
    """Execute *check*, awaiting the result when necessary."""

    result = check()
    if inspect.isawaitable(result):
        return await result  # type: ignore[return-value]
    return result


def setup_health_checks(
    app: FastAPI,
    checks: Mapping[str, HealthCheck] | None = None,
) -> None:
    """Attach a `/healthz` endpoint to *app* executing optional *checks*.

    A check passes when it returns without raising.  Mapping results are merged
    into the check's entry in the response payload.  Any failing check turns
    the response into a 503.
    """

    registry: MutableMapping[str, HealthCheck] = dict(checks or {})

    if any(getattr(route, "path", None) == "/healthz" for route in app.routes):
        return

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> JSONResponse:
        overall = "ok"
        results: Dict[str, Any] = {}
        for name, check in registry.items():
            try:
                payload = await _execute(check)
            except Exception as exc:
                logger.warning("Health check %s failed: %s", name, exc)
                overall = "error"
                results[name] = {"status": "error", "error": str(exc)}
                continue

            entry: Dict[str, Any] = {"status": "ok"}
            if isinstance(payload, Mapping):
                entry.update(payload)
            results[name] = entry

        status_code = 200 if overall == "ok" else 503
        return JSONResponse(
            status_code=status_code, content={"status": overall, "checks": results}
        )


__all__ = ["HealthCheck", "setup_health_checks"]
