"""Error kinds raised by the managed secrets service."""
from __future__ import annotations

from typing import Optional


class SecretsServiceError(Exception):
    """Base class for managed secret failures."""


class ValidationError(SecretsServiceError):
    """Request input is missing or malformed."""


class StoreError(SecretsServiceError):
    """The Kubernetes API rejected or failed an operation."""

    def __init__(
        self,
        operation: str,
        namespace: str,
        name: Optional[str] = None,
        *,
        reason: str = "",
        status: Optional[int] = None,
    ) -> None:
        self.operation = operation
        self.namespace = namespace
        self.name = name
        self.reason = reason
        self.status = status
        if name:
            message = f"failed to {operation} secret {namespace}/{name}"
        else:
            message = f"failed to {operation} secrets in namespace {namespace}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotFoundError(StoreError):
    """The targeted secret does not exist (or is not managed here)."""


class ConflictError(StoreError):
    """A secret with the same name already exists in the namespace."""


__all__ = [
    "ConflictError",
    "NotFoundError",
    "SecretsServiceError",
    "StoreError",
    "ValidationError",
]
