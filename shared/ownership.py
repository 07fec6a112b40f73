"""Ownership labels marking the secrets managed by this deployment."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

LOGGER = logging.getLogger(__name__)

OWNERSHIP_ENV_VAR = "MANAGED_BY_LABEL"
DEFAULT_OWNERSHIP_LABELS: Mapping[str, str] = {
    "authorino.kuadrant.io/managed-by": "authorino",
}


@dataclass(frozen=True)
class LabelParseResult:
    """Outcome of parsing a ``key=value`` label list."""

    labels: Dict[str, str] = field(default_factory=dict)
    skipped: int = 0


def parse_ownership_labels(raw: str) -> LabelParseResult:
    """Parse comma separated ``key=value`` pairs.

    Each entry is split on the first ``=`` only, so ``a=b=c`` yields the key
    ``a`` with value ``b=c``.  Entries lacking ``=`` or with an empty key are
    skipped and counted; blank entries are ignored.
    """

    labels: Dict[str, str] = {}
    skipped = 0
    for entry in raw.split(","):
        if not entry.strip():
            continue
        key, sep, value = entry.partition("=")
        key = key.strip()
        if not sep or not key:
            skipped += 1
            continue
        labels[key] = value.strip()
    return LabelParseResult(labels=labels, skipped=skipped)


def resolve_ownership_labels(raw: Optional[str] = None) -> Dict[str, str]:
    """Return the ownership label set for *raw*, falling back to the default."""

    if raw is None or not raw.strip():
        return dict(DEFAULT_OWNERSHIP_LABELS)

    result = parse_ownership_labels(raw)
    if result.skipped:
        LOGGER.warning(
            "Ignored %s malformed entries in %s", result.skipped, OWNERSHIP_ENV_VAR
        )
    if not result.labels:
        LOGGER.warning(
            "%s defines no usable label pairs; using default ownership labels",
            OWNERSHIP_ENV_VAR,
        )
        return dict(DEFAULT_OWNERSHIP_LABELS)
    return result.labels


def build_label_selector(labels: Mapping[str, str]) -> str:
    """Render *labels* as an equality-based Kubernetes label selector."""

    return ",".join(f"{key}={labels[key]}" for key in sorted(labels))


def merge_ownership_labels(
    labels: Optional[Mapping[str, str]], ownership: Mapping[str, str]
) -> Dict[str, str]:
    """Overlay *ownership* onto *labels*; ownership values win on conflicts."""

    merged = dict(labels or {})
    merged.update(ownership)
    return merged


def is_owned(labels: Optional[Mapping[str, str]], ownership: Mapping[str, str]) -> bool:
    present = labels or {}
    return all(present.get(key) == value for key, value in ownership.items())


__all__ = [
    "DEFAULT_OWNERSHIP_LABELS",
    "LabelParseResult",
    "OWNERSHIP_ENV_VAR",
    "build_label_selector",
    "is_owned",
    "merge_ownership_labels",
    "parse_ownership_labels",
    "resolve_ownership_labels",
]
