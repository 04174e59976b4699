"""Tests for the cast step and its built-in casters."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional
from uuid import UUID

import pytest

from structmap import (
    CastError,
    Decoder,
    EmbeddingShapeError,
    NotConvertibleError,
    PipelineStepError,
    Ref,
)
from structmap.behavior import cast, name
from structmap.behavior.cast import cast_value


class Status(Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class Priority(Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Money:
    amount: Decimal
    currency: str


@dataclass
class Invoice:
    number: int = 0
    total: Decimal = Decimal("0")
    paid: bool = False
    issued: date | None = None
    created: datetime | None = None
    status: Status = Status.ACTIVE
    lines: list[int] = field(default_factory=list)
    ref: Ref[int] | None = None
    note: str = ""


@dataclass
class Priced:
    price: Money | None = None


class TestScalarCasters:
    def test_to_int(self):
        assert cast.to_int("42") == 42
        assert cast.to_int(" 7 ") == 7
        assert cast.to_int(3.9) == 3
        assert cast.to_int(True) == 1

    def test_to_int_rejects_garbage(self):
        with pytest.raises(ArithmeticError):
            cast.to_int("abc")

    def test_to_int_rejects_huge_exponent(self):
        with pytest.raises(NotConvertibleError):
            cast.to_int("1e999999999")

    def test_to_decimal(self):
        assert cast.to_decimal("12.50") == Decimal("12.50")
        assert cast.to_decimal(0.1) == Decimal("0.1")
        assert cast.to_decimal(3) == Decimal(3)

    def test_to_bool_words(self):
        for word in ("true", "YES", "1", "on"):
            assert cast.to_bool(word) is True
        for word in ("false", "no", "0", "off", ""):
            assert cast.to_bool(word) is False
        assert cast.to_bool(2) is True

    def test_to_bool_rejects_other_words(self):
        with pytest.raises(NotConvertibleError):
            cast.to_bool("maybe")

    def test_to_str(self):
        assert cast.to_str(True) == "true"
        assert cast.to_str(12) == "12"
        assert cast.to_str(b"raw") == "raw"
        assert cast.to_str(date(2026, 2, 1)) == "2026-02-01"
        assert cast.to_str(Status.CLOSED) == "closed"

    def test_to_str_rejects_containers(self):
        with pytest.raises(NotConvertibleError):
            cast.to_str([1])

    def test_to_datetime_epoch_millis(self):
        assert cast.to_datetime(1588791963946) == datetime(
            2020, 5, 6, 19, 6, 3, 946000, tzinfo=UTC
        )

    def test_to_datetime_iso(self):
        assert cast.to_datetime("2026-02-01T10:00:00Z") == datetime(
            2026, 2, 1, 10, 0, tzinfo=UTC
        )

    def test_to_date_formats(self):
        assert cast.to_date("2026-02-01") == date(2026, 2, 1)
        assert cast.to_date("2026/02/01") == date(2026, 2, 1)
        assert cast.to_date("02/15/2026") == date(2026, 2, 15)
        assert cast.to_date(datetime(2026, 2, 1, 10)) == date(2026, 2, 1)

    def test_to_uuid(self):
        uid = "12345678-1234-5678-1234-567812345678"
        assert cast.to_uuid(uid) == UUID(uid)


class TestCastValue:
    def test_ref_rebuilt_around_value(self):
        assert cast_value("5", Ref[int]) == Ref(5)

    def test_optional_inner_type(self):
        assert cast_value("5", Optional[int]) == 5

    def test_none_stays_none(self):
        assert cast_value(None, int) is None
        assert cast_value(Ref(), int) is None

    def test_union_first_accepting_arm(self):
        assert cast_value("x", int | str) == "x"
        assert cast_value("5", int | date) == 5
        assert cast_value("2026-02-01", int | date) == date(2026, 2, 1)

    def test_literal(self):
        assert cast_value("2", Literal[1, 2]) == 2
        with pytest.raises(NotConvertibleError):
            cast_value("3", Literal[1, 2])

    def test_enum_by_value_and_name(self):
        assert cast_value("closed", Status) is Status.CLOSED
        assert cast_value("CLOSED", Status) is Status.CLOSED
        assert cast_value("2", Priority) is Priority.HIGH

    def test_collections(self):
        assert cast_value(["1", "2"], list[int]) == [1, 2]
        assert cast_value(["1", "2"], set[int]) == {1, 2}
        assert cast_value(("a", 1), tuple[str, int]) == ("a", 1)
        assert cast_value(["1", "2", "3"], tuple[int, ...]) == (1, 2, 3)
        assert cast_value({"a": "1"}, dict[str, Ref[int]]) == {"a": Ref(1)}

    def test_fixed_tuple_length_checked(self):
        with pytest.raises(NotConvertibleError):
            cast_value([1, 2, 3], tuple[int, int])

    def test_string_is_not_a_sequence(self):
        with pytest.raises(NotConvertibleError):
            cast_value("123", list[int])

    def test_record_values_left_alone(self):
        source = {"amount": "1"}
        assert cast_value(source, Money) is source

    def test_out_of_range_epoch_not_convertible(self):
        with pytest.raises(NotConvertibleError):
            cast_value(10**20, datetime)

    def test_custom_caster(self):
        casters = {**cast.BUILTIN_CASTERS, Money: lambda v: Money(Decimal(v), "EUR")}
        assert cast_value("9.99", Money, casters) == Money(Decimal("9.99"), "EUR")


class TestCastStep:
    def test_decode_text_source(self):
        invoice = Invoice()
        decoder = Decoder(name.noop, cast.to_type())
        decoder.decode(
            {
                "number": "1001",
                "total": "250.75",
                "paid": "yes",
                "issued": "2026-02-01",
                "created": 1588791963946,
                "status": "closed",
                "lines": ["1", "2"],
                "ref": "7",
                "note": 12,
            },
            invoice,
        )
        assert invoice.number == 1001
        assert invoice.total == Decimal("250.75")
        assert invoice.paid is True
        assert invoice.issued == date(2026, 2, 1)
        assert invoice.created.year == 2020
        assert invoice.status is Status.CLOSED
        assert invoice.lines == [1, 2]
        assert invoice.ref == Ref(7)
        assert invoice.note == "12"

    def test_cast_failure_raises_cast_error(self):
        with pytest.raises(CastError) as exc_info:
            Decoder(name.noop, cast.to_type()).decode({"number": "many"}, Invoice())
        err = exc_info.value
        assert isinstance(err, PipelineStepError)
        assert err.field == "number"
        assert err.source_type == "str"
        assert err.code == "CAST_FAILED"
        assert isinstance(err.__cause__, NotConvertibleError)

    def test_out_of_range_epoch_raises_cast_error(self):
        with pytest.raises(CastError) as exc_info:
            Decoder(name.noop, cast.to_type()).decode({"created": 10**20}, Invoice())
        err = exc_info.value
        assert err.field == "created"
        assert err.source_type == "int"
        assert isinstance(err.__cause__, NotConvertibleError)

    def test_custom_caster_overrides_builtin(self):
        invoice = Invoice()
        decoder = Decoder(
            name.noop,
            cast.to_type({Decimal: lambda v: Decimal(str(v)).quantize(Decimal("0.01"))}),
        )
        decoder.decode({"total": "3.5"}, invoice)
        assert str(invoice.total) == "3.50"

    def test_cast_record_instance_is_not_a_mapping(self):
        decoder = Decoder(
            name.noop, cast.to_type({Money: lambda v: Money(Decimal(v), "EUR")})
        )
        with pytest.raises(EmbeddingShapeError):
            decoder.decode({"price": "3.50"}, Priced())

    def test_nested_record_mapping_untouched(self):
        priced = Priced()
        Decoder(name.noop, cast.to_type()).decode(
            {"price": {"amount": "3.50", "currency": "USD"}}, priced
        )
        assert priced.price == Money(Decimal("3.50"), "USD")

    def test_absent_values_not_cast(self):
        invoice = Invoice(number=5)
        Decoder(name.noop, cast.to_type()).decode({}, invoice)
        assert invoice.number == 5
