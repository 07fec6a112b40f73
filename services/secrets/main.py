"""Process entrypoint for the managed secrets service."""
from __future__ import annotations

import logging
import os
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from services.secrets.config import Settings, get_settings
from services.secrets.secrets_service import app, configure_secret_store
from services.secrets.store import ManagedSecretStore
from shared.correlation import CorrelationIdFilter
from shared.k8s import build_core_v1_api
from shared.ownership import build_label_selector

LOGGER = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(correlation_id)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    correlation_filter = CorrelationIdFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(correlation_filter)


def _mount_static(application: FastAPI, directory: str) -> None:
    if any(getattr(route, "name", None) == "static" for route in application.routes):
        return
    if not os.path.isdir(directory):
        LOGGER.info("Static directory %s not found; serving API only", directory)
        return
    application.mount("/", StaticFiles(directory=directory, html=True), name="static")
    LOGGER.info("Serving static assets from %s", directory)


def create_app(
    settings: Optional[Settings] = None, *, core_v1: Optional[Any] = None
) -> FastAPI:
    """Wire the secret store into the service app.

    ``core_v1`` defaults to a ``CoreV1Api`` built from the in-cluster (or local)
    Kubernetes configuration.
    """

    settings = settings or get_settings()
    if core_v1 is None:
        core_v1 = build_core_v1_api()

    store = ManagedSecretStore(
        core_v1,
        settings.ownership_labels,
        enforce_ownership=settings.enforce_ownership,
    )
    configure_secret_store(store)
    app.state.settings = settings
    LOGGER.info(
        "Managing secrets labelled %s (ownership enforcement %s)",
        build_label_selector(settings.ownership_labels),
        "on" if settings.enforce_ownership else "off",
    )

    _mount_static(app, settings.static_dir)
    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    application = create_app(settings)
    LOGGER.info("Starting server on %s:%s", settings.host, settings.port)
    uvicorn.run(application, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
