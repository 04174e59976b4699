"""Tests for record field listing and zero values."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from structmap import InvalidTargetError, Record, Ref, embedded, zero_value


@dataclass
class Inner:
    city: str = ""


@dataclass
class Outer:
    first: str = ""
    inner: Inner = embedded(default_factory=Inner)
    nested: Optional[Inner] = None
    _private: int = 0
    tagged: str = field(default="", metadata={"structmap": "alias,required"})


@dataclass
class Required:
    name: str
    count: int
    ratio: Decimal
    child: Inner
    maybe: Ref[int] | None
    items: Sequence[str]
    tags: dict[str, int]
    day: date


@dataclass
class LateChild:
    label: str = ""
    child: Inner = field(init=False)


class TestRecordFields:
    def test_fields_in_declaration_order(self):
        names = [f.name for f in Record(Outer()).fields()]
        assert names == ["first", "inner", "nested", "tagged"]

    def test_private_fields_hidden(self):
        assert "_private" not in [f.name for f in Record(Outer()).fields()]

    def test_embedded_flag(self):
        fields = {f.name: f for f in Record(Outer()).fields()}
        assert fields["inner"].embedded is True
        assert fields["nested"].embedded is False

    def test_aggregate_detection(self):
        fields = {f.name: f for f in Record(Outer()).fields()}
        assert fields["inner"].is_aggregate
        assert fields["nested"].is_aggregate
        assert not fields["first"].is_aggregate

    def test_tags_from_metadata(self):
        fields = {f.name: f for f in Record(Outer()).fields()}
        assert fields["tagged"].tags["structmap"] == "alias,required"

    def test_set_writes_through(self):
        outer = Outer()
        fields = {f.name: f for f in Record(outer).fields()}
        fields["first"].set("value")
        assert outer.first == "value"
        assert fields["first"].get() == "value"

    def test_get_unset_attribute_is_none(self):
        child = Record(LateChild()).fields()[1]
        assert child.name == "child"
        assert child.get() is None

    def test_embedded_keeps_user_metadata(self):
        @dataclass
        class Local:
            inner: Inner = embedded(default_factory=Inner, metadata={"structmap": "x"})

        (only,) = Record(Local()).fields()
        assert only.embedded
        assert only.tags["structmap"] == "x"


class TestRecordTargets:
    def test_rejects_class(self):
        with pytest.raises(InvalidTargetError) as exc_info:
            Record(Outer)
        assert exc_info.value.target_type == "Outer"

    def test_rejects_non_dataclass(self):
        with pytest.raises(InvalidTargetError):
            Record(object())

    def test_rejects_frozen(self):
        @dataclass(frozen=True)
        class Frozen:
            a: int = 0

        with pytest.raises(InvalidTargetError):
            Record(Frozen())


class TestZeroValue:
    def test_scalars(self):
        assert zero_value(int) == 0
        assert zero_value(str) == ""
        assert zero_value(Decimal) == Decimal(0)
        assert zero_value(bool) is False

    def test_indirection_is_absent(self):
        assert zero_value(Ref[int]) is None
        assert zero_value(Optional[Inner]) is None

    def test_containers(self):
        assert zero_value(list[int]) == []
        assert zero_value(dict[str, int]) == {}
        assert zero_value(Sequence[str]) == []

    def test_type_without_zero(self):
        assert zero_value(date) is None

    def test_record_with_required_fields(self):
        record = zero_value(Required)
        assert record.name == ""
        assert record.count == 0
        assert record.child == Inner()
        assert record.maybe is None
        assert record.items == []
        assert record.tags == {}
        assert record.day is None

    def test_record_with_init_false_field(self):
        record = zero_value(LateChild)
        assert record.label == ""
        assert record.child == Inner()
