"""Tests for the order field registry and sort compilation."""
import pytest

from src.om_common.errors import InvalidFilterError, InvalidSortError
from src.om_order.domain.fields import (
    DEFAULT_SORT,
    ORDER_FIELDS,
    FieldKind,
    compile_sort,
    get_field,
)
from tests.fakes import make_order


class TestRegistry:
    def test_every_order_attribute_is_registered(self) -> None:
        order = make_order(1)
        for name in ORDER_FIELDS:
            assert hasattr(order, name)

    def test_choice_fields_carry_their_options(self) -> None:
        assert ORDER_FIELDS["payment_received"].choices == ("Yes", "No")
        assert "Delivered" in ORDER_FIELDS["status"].choices
        assert ORDER_FIELDS["currency"].kind is FieldKind.CHOICE

    def test_accessor_reads_attribute(self) -> None:
        order = make_order(7, customer="EK")
        assert ORDER_FIELDS["customer"].value_of(order) == "EK"

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(InvalidFilterError) as exc_info:
            get_field("__class__")
        assert exc_info.value.code == 1002


class TestCompileSort:
    def test_empty_gives_default(self) -> None:
        assert compile_sort([]) == DEFAULT_SORT
        assert DEFAULT_SORT[0].field.name == "created_at"
        assert DEFAULT_SORT[0].descending is True

    def test_keeps_order_and_direction(self) -> None:
        keys = compile_sort([("po_value", True), ("sn", False)])
        assert [(k.field.name, k.descending) for k in keys] == [
            ("po_value", True),
            ("sn", False),
        ]

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(InvalidSortError) as exc_info:
            compile_sort([("poValue; DROP TABLE orders", False)])
        assert exc_info.value.code == 1003
        assert exc_info.value.http_status == 422
