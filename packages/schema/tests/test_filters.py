"""Tests for the filter catalogue."""

from datetime import datetime, timezone

import pytest

from docknobs_schema import (
    FILTERS,
    FieldValidationError,
    StructureError,
    Timestamp,
    register_filter,
)
from docknobs_schema import filters


def rejects(step, value):
    """Return the error a filter raises for value."""
    with pytest.raises(FieldValidationError) as exc_info:
        step(value)
    return exc_info.value


class TestTypeFilters:
    """Test the type-guard filters."""

    def test_string(self):
        step = filters.string()
        assert step("a") == "a"
        error = rejects(step, 1)
        assert error.template == "{label} must be a String."
        assert error.value == 1
        assert error.label is None

    def test_number_rejects_boolean(self):
        rejects(filters.number(), True)
        assert filters.number()(1.5) == 1.5

    def test_integer(self):
        assert filters.integer()(3) == 3
        rejects(filters.integer(), 3.5)

    def test_object_and_array(self):
        assert filters.object_()({"a": 1}) == {"a": 1}
        rejects(filters.object_(), [])
        assert filters.array()([1]) == [1]
        rejects(filters.array(), {})

    def test_timestamp(self):
        assert filters.timestamp()(Timestamp(1)) == Timestamp(1)
        rejects(filters.timestamp(), "2020-01-01")

    def test_custom_error(self):
        error = rejects(filters.boolean("{label} must be yes or no."), "yes")
        assert error.bind("subscribed").message == "subscribed must be yes or no."


class TestComparisonFilters:
    """Test equal, one_of and numeric bounds."""

    def test_equal(self):
        assert filters.equal("x")("x") == "x"
        error = rejects(filters.equal(5), 6)
        assert error.template == "{label} must equal 5."

    def test_equal_booleans_match_only_booleans(self):
        assert filters.equal(True)(True) is True
        rejects(filters.equal(1), True)
        rejects(filters.equal(True), 1)
        rejects(filters.equal(0), False)
        assert filters.equal(1)(1.0) == 1.0

    def test_one_of(self):
        step = filters.one_of(["admin", "member", 3])
        assert step("admin") == "admin"
        assert step(3) == 3
        rejects(step, "guest")

    def test_one_of_booleans_match_only_booleans(self):
        step = filters.one_of([True, 0])
        assert step(True) is True
        assert step(0) == 0
        rejects(step, 1)
        rejects(step, False)

    @pytest.mark.parametrize("values", [[], [{}], [None], [[1]], "abc", None])
    def test_one_of_malformed(self, values):
        with pytest.raises(StructureError):
            filters.one_of(values)

    def test_min_max(self):
        assert filters.min_(0)(0) == 0
        rejects(filters.min_(0), -1)
        assert filters.max_(10)(10) == 10
        rejects(filters.max_(10), 11)
        rejects(filters.min_(0), "5")

    def test_range(self):
        step = filters.range_(1, 3)
        assert step(2) == 2
        rejects(step, 0)
        rejects(step, 4)

    def test_range_inverted_bounds(self):
        with pytest.raises(StructureError):
            filters.range_(5, 1)

    def test_after_before(self):
        step = filters.after("2020-01-01")
        assert step("2020-06-01") == "2020-06-01"
        assert step(datetime(2021, 1, 1, tzinfo=timezone.utc))
        rejects(step, "2019-12-31")
        rejects(step, "not a date")

        step = filters.before(Timestamp(0))
        assert step("1969-12-31T23:59:59") == "1969-12-31T23:59:59"
        rejects(step, "1970-01-01T00:00:01")

    def test_after_bad_bound(self):
        with pytest.raises(StructureError):
            filters.after("yesterday")


class TestShapeFilters:
    """Test length and pattern filters."""

    def test_length(self):
        assert filters.length(3)("abc") == "abc"
        assert filters.length(2)([1, 2]) == [1, 2]
        rejects(filters.length(3), "ab")
        rejects(filters.length(1), 5)

    def test_min_max_length(self):
        assert filters.min_length(2)("ab") == "ab"
        rejects(filters.min_length(2), "a")
        assert filters.max_length(2)("ab") == "ab"
        rejects(filters.max_length(2), "abc")

    def test_match(self):
        step = filters.match(r"^\d{5}$")
        assert step("12345") == "12345"
        error = rejects(step, "1234")
        assert error.template == r"{label} must match ^\d{5}$ pattern."
        rejects(step, 12345)


class TestTransformFilters:
    """Test filters that change the value."""

    def test_trim_and_case(self):
        assert filters.trim()("  a b  ") == "a b"
        assert filters.to_lower_case()("AbC") == "abc"
        assert filters.to_upper_case()("AbC") == "ABC"

    def test_transform_rejects_non_strings(self):
        error = rejects(filters.trim(), 5)
        assert error.template == "Couldn't trim {label}."

    @pytest.mark.parametrize("value", ["a@b.co", "First.Last+tag@Example.org"])
    def test_email_lower_cases(self, value):
        assert filters.email()(value) == value.lower()

    @pytest.mark.parametrize("value", ["plain", "a@b", "@b.co", "a@b.c", 5])
    def test_email_invalid(self, value):
        rejects(filters.email(), value)


class TestDateFilter:
    """Test the date filter."""

    def test_with_format(self):
        step = filters.date("YYYY-MM-DD")
        assert step("2020-02-29") == "2020-02-29"
        rejects(step, "2020-02-30")
        rejects(step, "02-30-2020")
        rejects(step, datetime(2020, 1, 1))

    def test_error_mentions_format(self):
        error = rejects(filters.date("DD/MM/YYYY"), "2020-01-01")
        assert error.template == "{label} must be a valid Date in DD/MM/YYYY format."

    def test_unpadded_and_named_tokens(self):
        assert filters.date("D/M/YYYY")("5/3/2020") == "5/3/2020"
        assert filters.date("Do MMMM YYYY")("5th March 2020") == "5th March 2020"
        rejects(filters.date("Do MMMM YYYY"), "5nd March 2020")
        rejects(filters.date("D/M/YYYY"), "31/4/2020")

    @pytest.mark.parametrize("fmt", ["YYYY-Q", "GGGG-[W]WW", "YYYY-MM-DD HH:mm:ss.SSS"])
    def test_unsupported_format_tokens(self, fmt):
        with pytest.raises(StructureError, match="Unsupported date format token"):
            filters.date(fmt)

    def test_without_format(self):
        step = filters.date()
        assert step("2020-02-29T10:00:00") == "2020-02-29T10:00:00"
        rejects(step, "29/02/2020")


class TestFilterRegistry:
    """Test the registry of filter constructors."""

    def test_builtin_filters_registered(self):
        for name in ("string", "number", "one_of", "min", "range", "trim", "email", "date"):
            assert FILTERS.has(name)

    def test_type_defining_flags(self):
        assert FILTERS.lookup("string").defines_type
        assert FILTERS.lookup("one_of").defines_type
        assert not FILTERS.lookup("trim").defines_type
        assert not FILTERS.lookup("min").defines_type

    def test_unknown_filter(self):
        with pytest.raises(StructureError) as exc_info:
            FILTERS.lookup("no_such_filter")
        assert "string" in exc_info.value.context["available"]

    def test_register_filter(self):
        def even(error="{label} must be even."):
            def check(value):
                if value % 2:
                    raise FieldValidationError(error, value=value)
                return value
            return check

        spec = register_filter("test_even", even)
        try:
            assert spec.name == "test_even"
            assert FILTERS.lookup("test_even").constructor is even
        finally:
            FILTERS.unregister("test_even")

    def test_register_duplicate_rejected(self):
        from docknobs_common import OperationError

        with pytest.raises(OperationError):
            register_filter("trim", filters.trim)
