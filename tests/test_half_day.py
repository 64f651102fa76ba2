"""Half-day resolution tests across the historical field spellings."""

from __future__ import annotations

import pytest

from bickers.common.constants import HalfPeriod
from bickers.common.exceptions import ValidationException
from bickers.holidays.schemas import HalfDayDescriptor
from bickers.holidays.service import HolidayService, resolve_half_day
from tests.conftest import _make_leave


class TestPerSideHints:

    @pytest.mark.parametrize(
        "field,value,expected",
        [
            ("startHalf", "PM", HalfPeriod.pm),
            ("startAMPM", "am", HalfPeriod.am),
            ("startPeriod", "Morning", HalfPeriod.am),
            ("startHalfDay", "P.M.", HalfPeriod.pm),
            ("startPeriod", " afternoon ", HalfPeriod.pm),
        ],
    )
    def test_start_tokens(self, field, value, expected):
        descriptor = resolve_half_day(_make_leave(**{field: value}))
        assert descriptor.start_half == expected
        assert descriptor.end_half is None
        assert descriptor.start_is_half

    def test_end_tokens(self):
        descriptor = resolve_half_day(_make_leave(endAMPM="AM"))
        assert descriptor.end_half == HalfPeriod.am
        assert descriptor.start_half is None

    def test_unknown_token_is_ignored(self):
        descriptor = resolve_half_day(_make_leave(startPeriod="lunchtime"))
        assert descriptor.start_half is None
        assert not descriptor.has_half

    def test_first_matching_field_wins(self):
        descriptor = resolve_half_day(_make_leave(startHalf="AM", startAMPM="PM"))
        assert descriptor.start_half == HalfPeriod.am

    def test_boolean_side_flag_without_period(self):
        descriptor = resolve_half_day(_make_leave(endHalfDay=True))
        assert descriptor.end_half is None
        assert descriptor.end_flag
        assert descriptor.end_is_half
        assert descriptor.single_day_half

    def test_string_boolean_flag(self):
        descriptor = resolve_half_day(_make_leave(startHalfday="yes"))
        assert descriptor.start_flag


class TestSideSelector:

    def test_half_day_at_end_with_generic_type(self):
        descriptor = resolve_half_day(_make_leave(halfDayAt="end", halfDayType="AM"))
        assert descriptor.end_half == HalfPeriod.am
        assert descriptor.start_half is None

    def test_half_day_at_start_with_generic_type(self):
        descriptor = resolve_half_day(_make_leave(halfDayAt="Start", halfDayPeriod="PM"))
        assert descriptor.start_half == HalfPeriod.pm
        assert descriptor.end_half is None

    def test_half_day_at_end_with_generic_flag(self):
        descriptor = resolve_half_day(_make_leave(halfDayAt="end", halfDay=True))
        assert descriptor.end_flag
        assert not descriptor.start_is_half

    def test_explicit_side_hint_beats_selector(self):
        descriptor = resolve_half_day(
            _make_leave(endAMPM="PM", halfDayAt="end", halfDayType="AM")
        )
        assert descriptor.end_half == HalfPeriod.pm


class TestGenericDefaults:

    def test_generic_type_without_side_defaults_to_start(self):
        descriptor = resolve_half_day(_make_leave(halfDayType="PM"))
        assert descriptor.start_half == HalfPeriod.pm
        assert descriptor.end_half is None

    def test_generic_type_ignored_when_a_side_already_resolved(self):
        descriptor = resolve_half_day(_make_leave(endAMPM="AM", halfDayType="PM"))
        assert descriptor.start_half is None
        assert descriptor.end_half == HalfPeriod.am

    @pytest.mark.parametrize("field", ["halfDay", "isHalfDay", "isHalf", "half"])
    def test_generic_flag_sets_single_day_half_only(self, field):
        descriptor = resolve_half_day(_make_leave(**{field: True}))
        assert descriptor.single_day_half
        assert not descriptor.start_is_half
        assert not descriptor.end_is_half
        assert descriptor.has_half

    def test_false_flags_are_not_half_days(self):
        descriptor = resolve_half_day(
            _make_leave(halfDay=False, startHalfDay="false", endHalf="no")
        )
        assert descriptor == HalfDayDescriptor()

    def test_no_metadata(self):
        assert resolve_half_day({}) == HalfDayDescriptor()


class TestBoundary:

    def test_record_passes_through(self):
        record = HolidayService.normalize(_make_leave(startAMPM="PM"))
        assert resolve_half_day(record) is record.half_day

    def test_non_document_is_a_contract_error(self):
        with pytest.raises(ValidationException) as exc_info:
            resolve_half_day(["2024-06-03"])
        assert "request" in exc_info.value.errors
