from __future__ import annotations

import logging

import pytest

from shared.ownership import (
    DEFAULT_OWNERSHIP_LABELS,
    LabelParseResult,
    build_label_selector,
    is_owned,
    merge_ownership_labels,
    parse_ownership_labels,
    resolve_ownership_labels,
)


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_resolve_defaults_when_unset_or_blank(raw) -> None:
    assert resolve_ownership_labels(raw) == {"authorino.kuadrant.io/managed-by": "authorino"}


def test_resolve_returns_independent_copy() -> None:
    labels = resolve_ownership_labels(None)
    labels["extra"] = "value"

    assert "extra" not in DEFAULT_OWNERSHIP_LABELS


def test_parse_trims_whitespace_and_keeps_well_formed_pairs() -> None:
    result = parse_ownership_labels(" app = secrets-ui , team=platform ")

    assert result == LabelParseResult(
        labels={"app": "secrets-ui", "team": "platform"}, skipped=0
    )


def test_parse_splits_on_first_equals_only() -> None:
    result = parse_ownership_labels("a=b=c")

    assert result.labels == {"a": "b=c"}
    assert result.skipped == 0


def test_parse_counts_malformed_entries() -> None:
    result = parse_ownership_labels("app=ui,broken,=orphan,team=core")

    assert result.labels == {"app": "ui", "team": "core"}
    assert result.skipped == 2


def test_parse_ignores_blank_entries() -> None:
    result = parse_ownership_labels("app=ui,,")

    assert result.labels == {"app": "ui"}
    assert result.skipped == 0


def test_parse_keeps_empty_values() -> None:
    assert parse_ownership_labels("managed=").labels == {"managed": ""}


def test_resolve_discards_malformed_entries(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="shared.ownership"):
        labels = resolve_ownership_labels("app=ui,nonsense")

    assert labels == {"app": "ui"}
    assert "Ignored 1 malformed entries" in caplog.text


def test_resolve_falls_back_when_nothing_parses(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="shared.ownership"):
        labels = resolve_ownership_labels("nonsense,also-nonsense")

    assert labels == dict(DEFAULT_OWNERSHIP_LABELS)
    assert "using default ownership labels" in caplog.text


def test_label_selector_joins_pairs_in_key_order() -> None:
    selector = build_label_selector({"team": "core", "app": "ui"})

    assert selector == "app=ui,team=core"


def test_merge_gives_ownership_precedence_without_mutating_input() -> None:
    caller = {"team": "x", "authorino.kuadrant.io/managed-by": "other"}

    merged = merge_ownership_labels(caller, DEFAULT_OWNERSHIP_LABELS)

    assert merged == {"team": "x", "authorino.kuadrant.io/managed-by": "authorino"}
    assert caller["authorino.kuadrant.io/managed-by"] == "other"


def test_merge_accepts_missing_labels() -> None:
    assert merge_ownership_labels(None, {"app": "ui"}) == {"app": "ui"}


def test_is_owned_requires_every_pair() -> None:
    ownership = {"app": "ui", "team": "core"}

    assert is_owned({"app": "ui", "team": "core", "extra": "1"}, ownership)
    assert not is_owned({"app": "ui"}, ownership)
    assert not is_owned({"app": "ui", "team": "other"}, ownership)
    assert not is_owned(None, ownership)
