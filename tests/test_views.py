"""Tests for the pure derived-view functions."""

import random

import pytest

from carelog.logs import derive_view, matches_search, normalize_filter
from carelog.schemas import ALL_TYPES, CareLog, LogType

from conftest import utc


def make_log(log_id, log_type, timestamp, notes=None, caregiver=None):
    return CareLog(id=log_id, pet_id="pet-1", type=log_type, timestamp=timestamp, notes=notes, caregiver=caregiver)


@pytest.fixture
def logs():
    """Logs already in load order (timestamp descending)."""
    return [
        make_log("l5", "walking", utc(2024, 5, 5, 18, 0), notes="Park loop", caregiver="Anna"),
        make_log("l4", "feeding", utc(2024, 5, 5, 8, 0), notes="Dry food", caregiver="Ben"),
        make_log("l3", "medication", utc(2024, 5, 4, 20, 0), notes="Half a pill", caregiver="anna"),
        make_log("l2", "walking", utc(2024, 5, 4, 7, 30)),
        make_log("l1", "grooming", utc(2024, 5, 3, 12, 0), notes="Brushed, ANNA helped"),
    ]


@pytest.mark.unit
class TestDeriveView:
    """derive_view filtering and ordering."""

    def test_all_and_empty_search_returns_everything(self, logs):
        assert derive_view(logs, ALL_TYPES, "") == logs

    @pytest.mark.parametrize("filter_type", [ALL_TYPES] + [t.value for t in LogType])
    @pytest.mark.parametrize("search_term", ["", "anna", "o"])
    def test_order_is_timestamp_descending_for_any_settings(self, logs, filter_type, search_term):
        view = derive_view(logs, filter_type, search_term)
        timestamps = [log.timestamp for log in view]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_view_is_order_preserving_subsequence(self, logs):
        view = derive_view(logs, ALL_TYPES, "anna")
        positions = [logs.index(log) for log in view]
        assert positions == sorted(positions)

    def test_does_not_resort_input(self, logs):
        shuffled = list(logs)
        random.Random(7).shuffle(shuffled)
        assert derive_view(shuffled, ALL_TYPES, "") == shuffled

    @pytest.mark.parametrize("filter_type", [t.value for t in LogType])
    def test_filter_type_keeps_only_matching_type(self, logs, filter_type):
        view = derive_view(logs, filter_type, "")
        assert view == [log for log in logs if log.type == filter_type]

    def test_filter_accepts_enum_member(self, logs):
        assert [log.id for log in derive_view(logs, LogType.WALKING)] == ["l5", "l2"]

    def test_filter_and_search_are_combined(self, logs):
        view = derive_view(logs, "walking", "park")
        assert [log.id for log in view] == ["l5"]

    def test_filter_walking_only(self):
        feeding = make_log("a", "feeding", utc(2024, 1, 1, 8, 0))
        walking = make_log("b", "walking", utc(2024, 1, 1, 9, 0))
        assert derive_view([walking, feeding], "walking", "") == [walking]


@pytest.mark.unit
class TestSearch:
    """Search predicate over notes and caregiver."""

    def test_search_is_case_insensitive_on_caregiver_and_notes(self, logs):
        view = derive_view(logs, ALL_TYPES, "ANNA")
        assert [log.id for log in view] == ["l5", "l3", "l1"]

    def test_search_matches_substring(self, logs):
        assert [log.id for log in derive_view(logs, ALL_TYPES, "pil")] == ["l3"]

    def test_search_without_text_fields_never_matches(self):
        log = make_log("x", "walking", utc(2024, 1, 1))
        assert matches_search(log, "") is True
        assert matches_search(log, "a") is False

    def test_either_field_is_enough(self):
        by_notes = make_log("n", "other", utc(2024, 1, 1), notes="Vet visit")
        by_caregiver = make_log("c", "other", utc(2024, 1, 1), caregiver="Dr. Vet")
        assert matches_search(by_notes, "vet")
        assert matches_search(by_caregiver, "vet")


@pytest.mark.unit
class TestNormalizeFilter:
    def test_all_sentinel(self):
        assert normalize_filter("all") == ALL_TYPES

    def test_enum_value(self):
        assert normalize_filter(LogType.MEDICAL) == "medical"

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            normalize_filter("bathing")
