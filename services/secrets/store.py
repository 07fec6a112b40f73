"""Kubernetes-backed store for secrets owned by this deployment."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, NoReturn, Optional

from kubernetes.client import ApiException

from metrics import observe_store_operation
from services.secrets.errors import ConflictError, NotFoundError, StoreError
from services.secrets.models import (
    SecretRecord,
    build_v1_secret,
    encode_secret_data,
    record_from_v1_secret,
)
from shared.ownership import build_label_selector, is_owned, merge_ownership_labels


LOGGER = logging.getLogger(__name__)
SECRETS_LOGGER = logging.getLogger("secrets_log")

# Shared by missing and non-owned secrets so responses do not tell them apart.
_NOT_FOUND_REASON = "Not Found"


def _raise_store_error(
    exc: Exception, operation: str, namespace: str, name: Optional[str] = None
) -> NoReturn:
    if isinstance(exc, ApiException):
        reason = exc.reason or str(exc)
        if exc.status == 404:
            raise NotFoundError(
                operation, namespace, name, reason=_NOT_FOUND_REASON, status=exc.status
            ) from exc
        if exc.status == 409:
            raise ConflictError(
                operation, namespace, name, reason=reason, status=exc.status
            ) from exc
        raise StoreError(operation, namespace, name, reason=reason, status=exc.status) from exc
    raise StoreError(operation, namespace, name, reason=str(exc)) from exc


class ManagedSecretStore:
    """CRUD over namespaced secrets carrying the ownership label set.

    Writes always merge the ownership labels over caller labels and reads are
    scoped with an equality label selector.  When ``enforce_ownership`` is set
    update and delete refuse to touch secrets lacking the ownership labels,
    reporting them as missing.
    """

    def __init__(
        self,
        core_v1: Any,
        ownership_labels: Mapping[str, str],
        *,
        enforce_ownership: bool = True,
    ) -> None:
        self._client = core_v1
        self._ownership = dict(ownership_labels)
        self._selector = build_label_selector(self._ownership)
        self._enforce_ownership = enforce_ownership

    @property
    def ownership_labels(self) -> Dict[str, str]:
        return dict(self._ownership)

    @property
    def label_selector(self) -> str:
        return self._selector

    @property
    def enforce_ownership(self) -> bool:
        return self._enforce_ownership

    def create(
        self,
        namespace: str,
        name: str,
        labels: Optional[Mapping[str, str]],
        data: Mapping[str, str],
    ) -> None:
        body = build_v1_secret(
            namespace, name, merge_ownership_labels(labels, self._ownership), data
        )
        with observe_store_operation("create"):
            try:
                LOGGER.info("Creating secret %s in namespace %s", name, namespace)
                self._client.create_namespaced_secret(namespace=namespace, body=body)
            except Exception as exc:
                LOGGER.warning(
                    "Failed to create secret %s in namespace %s: %s", name, namespace, exc
                )
                _raise_store_error(exc, "create", namespace, name)
        SECRETS_LOGGER.info(
            "managed secret created",
            extra={"operation": "create", "namespace": namespace, "secret": name},
        )

    def update(
        self,
        namespace: str,
        name: str,
        labels: Optional[Mapping[str, str]],
        data: Mapping[str, str],
    ) -> None:
        with observe_store_operation("update"):
            existing = self._read_owned(namespace, name, operation="update")
            existing.metadata.labels = merge_ownership_labels(labels, self._ownership)
            existing.data = encode_secret_data(data)
            existing.string_data = None
            try:
                LOGGER.info("Replacing secret %s in namespace %s", name, namespace)
                self._client.replace_namespaced_secret(
                    name=name, namespace=namespace, body=existing
                )
            except Exception as exc:
                LOGGER.warning(
                    "Failed to update secret %s in namespace %s: %s", name, namespace, exc
                )
                _raise_store_error(exc, "update", namespace, name)
        SECRETS_LOGGER.info(
            "managed secret updated",
            extra={"operation": "update", "namespace": namespace, "secret": name},
        )

    def delete(self, namespace: str, name: str) -> None:
        with observe_store_operation("delete"):
            if self._enforce_ownership:
                self._read_owned(namespace, name, operation="delete")
            try:
                LOGGER.info("Deleting secret %s from namespace %s", name, namespace)
                self._client.delete_namespaced_secret(name=name, namespace=namespace)
            except Exception as exc:
                LOGGER.warning(
                    "Failed to delete secret %s from namespace %s: %s", name, namespace, exc
                )
                _raise_store_error(exc, "delete", namespace, name)
        SECRETS_LOGGER.info(
            "managed secret deleted",
            extra={"operation": "delete", "namespace": namespace, "secret": name},
        )

    def list(self, namespace: str) -> List[SecretRecord]:
        with observe_store_operation("list"):
            try:
                response = self._client.list_namespaced_secret(
                    namespace=namespace, label_selector=self._selector
                )
            except Exception as exc:
                LOGGER.warning("Failed to list secrets in namespace %s: %s", namespace, exc)
                _raise_store_error(exc, "list", namespace)

        records: List[SecretRecord] = []
        for item in response.items or []:
            if not is_owned(item.metadata.labels, self._ownership):
                LOGGER.warning(
                    "Dropping secret %s returned without ownership labels",
                    item.metadata.name,
                )
                continue
            records.append(record_from_v1_secret(item))
        LOGGER.debug("Listed %s managed secrets in namespace %s", len(records), namespace)
        return records

    def _read_owned(self, namespace: str, name: str, *, operation: str) -> Any:
        try:
            secret = self._client.read_namespaced_secret(name=name, namespace=namespace)
        except Exception as exc:
            _raise_store_error(exc, operation, namespace, name)

        if self._enforce_ownership and not is_owned(
            secret.metadata.labels, self._ownership
        ):
            LOGGER.warning(
                "Refusing to %s secret %s in namespace %s: not managed by this service",
                operation,
                name,
                namespace,
            )
            raise NotFoundError(
                operation,
                namespace,
                name,
                reason=_NOT_FOUND_REASON,
                status=404,
            )
        return secret


__all__ = ["ManagedSecretStore"]
