"""Environment-driven settings for the managed secrets service."""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shared.ownership import OWNERSHIP_ENV_VAR, resolve_ownership_labels

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

# Blank values for these variables mean "unset" and keep the field default.
_ENV_FIELDS = {
    "ownership_labels": OWNERSHIP_ENV_VAR,
    "enforce_ownership": "SECRETS_ENFORCE_OWNERSHIP",
    "strict_status_codes": "SECRETS_STRICT_STATUS_CODES",
    "static_dir": "SECRETS_STATIC_DIR",
    "host": "SECRETS_SERVICE_HOST",
    "port": "SECRETS_SERVICE_PORT",
    "log_level": "LOG_LEVEL",
}


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    ownership_labels: Dict[str, str] = Field(
        default_factory=lambda: resolve_ownership_labels(None),
        alias=OWNERSHIP_ENV_VAR,
    )
    enforce_ownership: bool = Field(default=True, alias="SECRETS_ENFORCE_OWNERSHIP")
    strict_status_codes: bool = Field(default=False, alias="SECRETS_STRICT_STATUS_CODES")
    static_dir: str = Field(default="./static", alias="SECRETS_STATIC_DIR")
    host: str = Field(default="0.0.0.0", alias="SECRETS_SERVICE_HOST")
    port: int = Field(default=8080, alias="SECRETS_SERVICE_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @model_validator(mode="before")
    @classmethod
    def _read_environment(cls, data: Any) -> Any:
        """Fill fields not given explicitly from their environment variables."""

        if not isinstance(data, dict):
            return data
        values = dict(data)
        for field_name, env_name in _ENV_FIELDS.items():
            if field_name in values or env_name in values:
                continue
            raw = os.getenv(env_name)
            if raw is None or not raw.strip():
                continue
            values[env_name] = raw
        return values

    @field_validator("ownership_labels", mode="before")
    @classmethod
    def _parse_ownership_labels(cls, value: Any) -> Dict[str, str]:
        if value is None or isinstance(value, str):
            return resolve_ownership_labels(value)
        if isinstance(value, dict):
            cleaned = {
                str(key).strip(): str(label).strip()
                for key, label in value.items()
                if str(key).strip()
            }
            return cleaned or resolve_ownership_labels(None)
        raise ValueError("ownership labels must be provided as a string or mapping")

    @field_validator("enforce_ownership", "strict_status_codes", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
            raise ValueError(f"invalid boolean flag: {value!r}")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""

    return Settings()


__all__ = ["Settings", "get_settings"]
