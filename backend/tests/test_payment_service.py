"""
Payment settlement tests.

Verifies:
- PAID iff paid_amount >= total_cost, method always Cash
- change / outstanding derived, never stored
- settling twice with the same amount is idempotent
- search by id or customer name, case-insensitive
"""

from datetime import datetime
from decimal import Decimal

import pytest

from printshop.permissions import PermissionDeniedError
from printshop.records import OrderRecord, PAYMENT_STATUS_PAID, PAYMENT_STATUS_UNPAID
from printshop.services import order_service, payment_service
from printshop.services.order_service import OrderDraft
from printshop.validation import ValidationError


@pytest.fixture
def banner_order(store, cashier, banner):
    draft = OrderDraft("Budi", products=store.read_all("products"))
    draft.add_item(banner.id, width="2", height="1")
    return order_service.create_order(store, draft, cashier)


class TestSettleOrder:
    def test_overpayment_is_paid_with_change(self, store, cashier, banner_order):
        settled_at = datetime(2026, 10, 18, 11, 0, 0)
        settlement = payment_service.settle_order(store, banner_order.id, "150000", cashier, now=settled_at)

        assert settlement.order.payment_status == PAYMENT_STATUS_PAID
        assert settlement.order.paid_amount == Decimal("150000")
        assert settlement.order.payment_method == "Cash"
        assert settlement.order.updated_at == settled_at
        assert settlement.change == Decimal("50000")
        assert settlement.outstanding == Decimal("0")

    def test_underpayment_stays_unpaid_with_outstanding(self, store, cashier, banner_order):
        settlement = payment_service.settle_order(store, banner_order.id, Decimal("40000"), cashier)

        assert settlement.order.payment_status == PAYMENT_STATUS_UNPAID
        assert settlement.order.paid_amount == Decimal("40000")
        assert settlement.order.payment_method == "Cash"
        assert settlement.change == Decimal("0")
        assert settlement.outstanding == Decimal("60000")

    def test_exact_payment_is_paid_without_balance(self, store, cashier, banner_order):
        settlement = payment_service.settle_order(store, banner_order.id, 100000, cashier)
        assert settlement.order.payment_status == PAYMENT_STATUS_PAID
        assert settlement.change == Decimal("0")
        assert settlement.outstanding == Decimal("0")

    def test_settling_twice_is_idempotent(self, store, cashier, banner_order):
        first = payment_service.settle_order(store, banner_order.id, "40000", cashier)
        second = payment_service.settle_order(store, banner_order.id, "40000", cashier)

        assert second.order.paid_amount == first.order.paid_amount == Decimal("40000")
        assert second.order.payment_status == first.order.payment_status
        assert second.outstanding == first.outstanding

    def test_later_settlement_replaces_earlier_amount(self, store, cashier, banner_order):
        payment_service.settle_order(store, banner_order.id, "150000", cashier)
        settlement = payment_service.settle_order(store, banner_order.id, "10000", cashier)
        assert settlement.order.payment_status == PAYMENT_STATUS_UNPAID
        assert settlement.order.paid_amount == Decimal("10000")

    @pytest.mark.parametrize("amount,status", [
        ("99999.995", PAYMENT_STATUS_PAID),
        ("99999.999", PAYMENT_STATUS_PAID),
        ("99999.994", PAYMENT_STATUS_UNPAID),
    ])
    def test_sub_cent_amount_rounded_before_status(self, store, cashier, banner_order, amount, status):
        settlement = payment_service.settle_order(store, banner_order.id, amount, cashier)

        saved = store.get("orders", banner_order.id)
        assert saved.paid_amount == settlement.order.paid_amount
        assert saved.payment_status == status
        assert (saved.paid_amount >= saved.total_cost) == (saved.payment_status == PAYMENT_STATUS_PAID)

    def test_sub_cent_amount_stored_in_cents(self, store, cashier, banner_order):
        settlement = payment_service.settle_order(store, banner_order.id, "99999.999", cashier)
        assert settlement.order.paid_amount == Decimal("100000.00")
        assert (settlement.change, settlement.outstanding) == (Decimal("0"), Decimal("0"))

    def test_total_cost_untouched(self, store, cashier, banner_order):
        payment_service.settle_order(store, banner_order.id, "150000", cashier)
        assert store.get("orders", banner_order.id).total_cost == Decimal("100000")

    @pytest.mark.parametrize("amount", ["-1", "abc", None, True])
    def test_invalid_amount_rejected(self, store, cashier, banner_order, amount):
        with pytest.raises(ValidationError):
            payment_service.settle_order(store, banner_order.id, amount, cashier)
        assert store.get("orders", banner_order.id).paid_amount == Decimal("0")

    def test_missing_order_returns_none(self, store, cashier):
        assert payment_service.settle_order(store, "P-missing", "1000", cashier) is None

    @pytest.mark.parametrize("role_fixture", ["designer", "supervisor"])
    def test_roles_without_settlement_denied(self, request, store, banner_order, role_fixture):
        with pytest.raises(PermissionDeniedError):
            payment_service.settle_order(store, banner_order.id, "1000", request.getfixturevalue(role_fixture))


class TestBalance:
    @pytest.mark.parametrize("total,paid,change,outstanding", [
        ("100000", "150000", "50000", "0"),
        ("100000", "40000", "0", "60000"),
        ("100000", "100000", "0", "0"),
        ("0", "0", "0", "0"),
    ])
    def test_settlement_balance(self, total, paid, change, outstanding):
        assert payment_service.settlement_balance(Decimal(total), Decimal(paid)) == (
            Decimal(change), Decimal(outstanding)
        )


class TestSearch:
    ORDERS = [
        OrderRecord(id="P-20261018-093015-111111", customer_name="Budi Santoso"),
        OrderRecord(id="P-20261018-101500-222222", customer_name="Sari"),
        OrderRecord(id="P-20261019-080000-333333", customer_name="budiman"),
    ]

    def test_matches_customer_name_case_insensitively(self):
        found = payment_service.search_orders(self.ORDERS, "BUDI")
        assert [o.customer_name for o in found] == ["Budi Santoso", "budiman"]

    def test_matches_order_id_substring(self):
        found = payment_service.search_orders(self.ORDERS, "p-20261018")
        assert [o.customer_name for o in found] == ["Budi Santoso", "Sari"]

    def test_empty_query_returns_everything(self):
        assert payment_service.search_orders(self.ORDERS, "") == self.ORDERS

    def test_find_orders_reads_store(self, store, cashier, banner_order):
        assert [o.id for o in payment_service.find_orders(store, "budi", cashier)] == [banner_order.id]
        assert payment_service.find_orders(store, "nobody", cashier) == []
