"""Tests for the QueryTranslator — sort aliasing, missing placement, search tokens."""

from __future__ import annotations

import pytest

from src.core.types import (
    AlertStateFilter,
    QueryState,
    SeverityFilter,
    SortDirection,
    SortField,
)
from src.query.translator import (
    missing_placement,
    sort_key,
    tokenize_search,
    translate,
)


def _state(**kw: object) -> QueryState:
    return QueryState(**kw)  # type: ignore[arg-type]


# ── Sort aliasing ───────────────────────────────────────────────


class TestSortKey:
    def test_monitor_name_uses_keyword(self) -> None:
        assert sort_key(SortField.MONITOR_NAME) == "monitor_name.keyword"

    def test_trigger_name_uses_keyword(self) -> None:
        assert sort_key(SortField.TRIGGER_NAME) == "trigger_name.keyword"

    @pytest.mark.parametrize("field", [
        SortField.START_TIME,
        SortField.END_TIME,
        SortField.ACKNOWLEDGED_TIME,
        SortField.SEVERITY,
        SortField.STATE,
    ])
    def test_other_fields_pass_through(self, field: SortField) -> None:
        assert sort_key(field) == field.value


# ── Missing-value placement ─────────────────────────────────────


class TestMissingPlacement:
    def test_end_time_ascending_last(self) -> None:
        assert missing_placement(SortField.END_TIME, SortDirection.ASC) == "_last"

    def test_end_time_descending_first(self) -> None:
        assert missing_placement(SortField.END_TIME, SortDirection.DESC) == "_first"

    @pytest.mark.parametrize("direction", list(SortDirection))
    def test_acknowledged_time_always_last(self, direction: SortDirection) -> None:
        assert missing_placement(SortField.ACKNOWLEDGED_TIME, direction) == "_last"

    def test_other_fields_use_backend_default(self) -> None:
        assert missing_placement(SortField.START_TIME, SortDirection.ASC) is None
        assert missing_placement(SortField.MONITOR_NAME, SortDirection.DESC) is None


# ── Search tokenization ─────────────────────────────────────────


class TestTokenizeSearch:
    def test_two_words_become_two_wildcards(self) -> None:
        assert tokenize_search("foo bar") == "*foo* *bar*"

    def test_empty_is_match_all(self) -> None:
        assert tokenize_search("") == ""

    def test_whitespace_only_is_match_all(self) -> None:
        assert tokenize_search("   ") == ""

    def test_trims_and_collapses_whitespace(self) -> None:
        assert tokenize_search("  foo   bar\t") == "*foo* *bar*"

    def test_single_character_token(self) -> None:
        assert tokenize_search("x") == "*x*"

    def test_punctuation_only_token(self) -> None:
        assert tokenize_search("- ?") == "*-* *?*"


# ── translate ───────────────────────────────────────────────────


class TestTranslate:
    def test_carries_paging_and_filters_unchanged(self) -> None:
        params = translate(_state(
            from_index=40,
            size=20,
            severity_level=SeverityFilter.HIGHEST,
            alert_state=AlertStateFilter.ACTIVE,
        ))
        assert params.start_index == 40
        assert params.size == 20
        assert params.severity_level == SeverityFilter.HIGHEST
        assert params.alert_state == AlertStateFilter.ACTIVE

    def test_sort_by_monitor_name(self) -> None:
        params = translate(_state(sort_field=SortField.MONITOR_NAME))
        assert params.sort_string == "monitor_name.keyword"
        assert params.missing is None

    def test_sort_by_end_time_descending(self) -> None:
        params = translate(_state(
            sort_field=SortField.END_TIME, sort_direction=SortDirection.DESC,
        ))
        assert params.sort_string == "end_time"
        assert params.sort_order == SortDirection.DESC
        assert params.missing == "_first"

    def test_blank_search_has_no_wildcard_clause(self) -> None:
        query = translate(_state(search="   ")).to_query()
        assert query["searchString"] == ""

    def test_search_tokens(self) -> None:
        assert translate(_state(search="foo bar")).search_string == "*foo* *bar*"

    def test_no_monitor_scope(self) -> None:
        params = translate(_state())
        assert params.monitor_id is None
        assert "monitorId" not in params.to_query()

    def test_only_first_monitor_id_is_forwarded(self) -> None:
        # Backend scoping takes a single monitor id; extra ids are ignored.
        params = translate(_state(monitor_ids=("m1", "m2", "m3")))
        assert params.monitor_id == "m1"
        assert params.to_query()["monitorId"] == "m1"


class TestToQuery:
    def test_wire_names(self) -> None:
        query = translate(_state(
            from_index=20,
            size=20,
            search="disk",
            sort_field=SortField.ACKNOWLEDGED_TIME,
            sort_direction=SortDirection.ASC,
        )).to_query()
        assert query == {
            "startIndex": 20,
            "size": 20,
            "sortString": "acknowledged_time",
            "sortOrder": "asc",
            "missing": "_last",
            "severityLevel": "ALL",
            "alertState": "ALL",
            "searchString": "*disk*",
        }
