"""Tests for random demo order generation."""
import random
from datetime import UTC, datetime

from src.om_common.enums import Currency, OrderStatus, PaymentTerm
from src.om_order.domain.generator import generate_random_order
from src.om_order.domain.profit import derive_profit

NOW = datetime(2026, 3, 15, tzinfo=UTC)


class TestGenerateRandomOrder:
    def test_deterministic_for_seed(self) -> None:
        a = generate_random_order(5, random.Random(42), NOW)
        b = generate_random_order(5, random.Random(42), NOW)
        assert a == b

    def test_identity_fields(self) -> None:
        order = generate_random_order(7, random.Random(1), NOW)
        assert order.sn == 7
        assert order.cust_po == "PO 9007"
        assert order.supplier_po == "PO240007"
        assert order.created_at == order.updated_at == order.last_edited == NOW

    def test_values_are_valid(self) -> None:
        rng = random.Random(3)
        for sn in range(1, 200):
            order = generate_random_order(sn, rng, NOW)
            assert order.status in {s.value for s in OrderStatus}
            assert order.term in {t.value for t in PaymentTerm}
            assert order.currency in {c.value for c in Currency}
            assert 100 <= order.po_value < 10100
            assert order.costs <= order.po_value
            assert 1 <= order.stability <= 10
            assert order.qty >= 1

    def test_profit_is_consistent(self) -> None:
        rng = random.Random(11)
        for sn in range(1, 50):
            order = generate_random_order(sn, rng, NOW)
            expected = derive_profit(
                order.po_value, order.costs, order.customs_duty, order.freight_cost
            )
            assert order.gross_profit == expected.gross_profit
            assert order.net_profit == expected.net_profit
            assert order.profit_percent == expected.profit_percent
