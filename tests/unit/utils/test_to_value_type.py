"""Tests for to_value_type() value conversion utility."""

import datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID

import pytest

from dbprovider.utils.schema import to_value_type

# =============================================================================
# Identity Tests - Fast Path (exact type match returns same object)
# =============================================================================


class TestIdentityConversions:
    """Tests for identity conversions where value is already the correct type."""

    def test_int_identity(self) -> None:
        value = 42
        assert to_value_type(value, int) is value

    def test_str_identity(self) -> None:
        value = "hello"
        assert to_value_type(value, str) is value

    def test_datetime_identity(self) -> None:
        value = datetime.datetime(2024, 1, 15, 12, 30, 45)
        assert to_value_type(value, datetime.datetime) is value

    def test_decimal_identity(self) -> None:
        value = Decimal("123.45")
        assert to_value_type(value, Decimal) is value

    def test_uuid_identity(self) -> None:
        value = UUID("550e8400-e29b-41d4-a716-446655440000")
        assert to_value_type(value, UUID) is value


# =============================================================================
# Subclass Tests - bool/int and datetime/date need an exact match
# =============================================================================


class TestSubclassHandling:
    def test_bool_to_int(self) -> None:
        """Boolean is converted, not passed through, when int is requested."""
        result = to_value_type(True, int)
        assert result == 1
        assert type(result) is int

    def test_datetime_to_date(self) -> None:
        """Datetime is truncated to its date when date is requested."""
        result = to_value_type(datetime.datetime(2024, 1, 15, 12, 30), datetime.date)
        assert result == datetime.date(2024, 1, 15)
        assert type(result) is datetime.date


# =============================================================================
# Conversion Tests - values as drivers commonly return them
# =============================================================================


class TestConversions:
    @pytest.mark.parametrize(("value", "expected"), [("42", 42), ("42.0", 42), (42.9, 42), (Decimal("7"), 7)])
    def test_to_int(self, value: object, expected: int) -> None:
        assert to_value_type(value, int) == expected

    @pytest.mark.parametrize(
        ("value", "expected"), [("true", True), ("YES", True), (" on ", True), ("no", False), ("0", False), (1, True)]
    )
    def test_to_bool(self, value: object, expected: bool) -> None:
        assert to_value_type(value, bool) is expected

    def test_iso_text_to_datetime(self) -> None:
        result = to_value_type("2024-01-15T08:30:00", datetime.datetime)
        assert result == datetime.datetime(2024, 1, 15, 8, 30)

    def test_date_to_datetime(self) -> None:
        result = to_value_type(datetime.date(2024, 1, 15), datetime.datetime)
        assert result == datetime.datetime(2024, 1, 15, 0, 0)

    def test_iso_text_to_time(self) -> None:
        assert to_value_type("08:30:00", datetime.time) == datetime.time(8, 30)

    def test_text_to_decimal(self) -> None:
        assert to_value_type("12.50", Decimal) == Decimal("12.50")

    def test_float_to_decimal_uses_repr(self) -> None:
        assert to_value_type(0.1, Decimal) == Decimal("0.1")

    def test_text_to_uuid(self) -> None:
        text = "550e8400-e29b-41d4-a716-446655440000"
        assert to_value_type(text, UUID) == UUID(text)

    def test_text_to_bytes(self) -> None:
        assert to_value_type("abc", bytes) == b"abc"

    def test_int_to_str(self) -> None:
        assert to_value_type(123, str) == "123"

    def test_json_text_to_dict(self) -> None:
        assert to_value_type('{"a": 1}', dict) == {"a": 1}

    def test_json_text_to_list(self) -> None:
        assert to_value_type("[1, 2]", list) == [1, 2]

    def test_tuple_to_list(self) -> None:
        assert to_value_type((1, 2), list) == [1, 2]

    def test_fallback_constructor(self) -> None:
        """Types without a registered converter are called with the value."""
        assert to_value_type("/tmp/data.db", Path) == Path("/tmp/data.db")


# =============================================================================
# Error Tests
# =============================================================================


class TestConversionErrors:
    def test_invalid_int(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert str to int"):
            to_value_type("abc", int)

    def test_invalid_datetime(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert str to datetime"):
            to_value_type("not a date", datetime.datetime)

    def test_json_of_wrong_shape(self) -> None:
        with pytest.raises(TypeError, match="did not parse to dict"):
            to_value_type("[1, 2]", dict)

    def test_fallback_constructor_failure(self) -> None:
        class NoArguments:
            pass

        with pytest.raises(TypeError, match="Cannot convert str to NoArguments"):
            to_value_type("value", NoArguments)
