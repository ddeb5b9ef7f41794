"""
Receipt tests.

build_receipt() is a pure function of order, products and store profile.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from printshop.permissions import PermissionDeniedError
from printshop.records import (
    METHOD_BY_AREA,
    OrderItem,
    OrderRecord,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_UNPAID,
    ProductRecord,
    StoreSettingsRecord,
)
from printshop.services import order_service, receipt_service
from printshop.services.order_service import OrderDraft
from printshop.services.receipt_service import build_receipt, format_rupiah, render_receipt_html


BANNER = ProductRecord(id="banner", name="Banner", unit_price=Decimal("50000"), calculation_method=METHOD_BY_AREA)
SETTINGS = StoreSettingsRecord(
    store_name="Toko Printing Anda",
    address="Jl. Contoh No. 123",
    phone="081234567890",
    receipt_notes="Terima kasih atas kunjungan Anda!",
)


def _order(paid, status, items=None):
    return OrderRecord(
        id="P-20261018-093015-482913",
        customer_name="Budi",
        items=items if items is not None else (OrderItem("banner", 1, Decimal("2"), Decimal("1")),),
        total_cost=Decimal("100000"),
        paid_amount=Decimal(paid),
        payment_status=status,
        payment_method="Cash",
        created_at=datetime(2026, 10, 18, 9, 30, 15),
    )


class TestBuildReceipt:
    def test_overpaid_shows_change_only(self):
        receipt = build_receipt(_order("150000", PAYMENT_STATUS_PAID), [BANNER], SETTINGS)
        assert receipt.change == Decimal("50000")
        assert receipt.outstanding is None
        assert receipt.status_label == "Lunas"

    def test_underpaid_shows_outstanding_only(self):
        receipt = build_receipt(_order("40000", PAYMENT_STATUS_UNPAID), [BANNER], SETTINGS)
        assert receipt.change is None
        assert receipt.outstanding == Decimal("60000")
        assert receipt.status_label == "Belum Lunas"

    def test_exact_payment_shows_neither(self):
        receipt = build_receipt(_order("100000", PAYMENT_STATUS_PAID), [BANNER], SETTINGS)
        assert receipt.change is None
        assert receipt.outstanding is None

    def test_lines_and_header(self):
        items = (
            OrderItem("banner", 1, Decimal("2"), Decimal("1")),
            OrderItem("gone", 3),
        )
        receipt = build_receipt(_order("0", PAYMENT_STATUS_UNPAID, items), [BANNER], SETTINGS)

        assert [(l.name, l.quantity, l.price) for l in receipt.lines] == [
            ("Banner", 1, Decimal("100000")),
            ("N/A", 3, Decimal("0")),
        ]
        assert receipt.store_name == "Toko Printing Anda"
        assert receipt.notes == "Terima kasih atas kunjungan Anda!"
        assert receipt.order_id == "P-20261018-093015-482913"

    def test_missing_settings_render_blank_header(self):
        receipt = build_receipt(_order("0", PAYMENT_STATUS_UNPAID), [BANNER], None)
        assert receipt.store_name == ""


class TestRender:
    def test_html_contains_receipt_fields(self):
        html = render_receipt_html(build_receipt(_order("150000", PAYMENT_STATUS_PAID), [BANNER], SETTINGS))
        for text in (
            "Toko Printing Anda",
            "P-20261018-093015-482913",
            "Budi",
            "Rp 100.000",
            "Rp 150.000",
            "Rp 50.000",
            "Lunas",
            "Kembalian",
            "Terima kasih atas kunjungan Anda!",
        ):
            assert text in html
        assert "Sisa Hutang" not in html

    def test_customer_name_is_escaped(self):
        order = OrderRecord(id="P-1", customer_name="<script>x</script>", created_at=datetime(2026, 1, 1))
        html = render_receipt_html(build_receipt(order, [], SETTINGS))
        assert "<script>x</script>" not in html
        assert "&lt;script&gt;" in html

    @pytest.mark.parametrize("amount,expected", [
        ("100000", "Rp 100.000"),
        ("1234.5", "Rp 1.234,50"),
        ("0", "Rp 0"),
        ("-60000", "Rp -60.000"),
        ("1.6875", "Rp 1,69"),
        ("999.995", "Rp 1.000"),
        ("0.004", "Rp 0"),
    ])
    def test_format_rupiah(self, amount, expected):
        assert format_rupiah(Decimal(amount)) == expected

    def test_fractional_area_line_matches_saved_total(self):
        glossy = ProductRecord(id="glossy", name="Stiker Glossy", unit_price=Decimal("0.75"), calculation_method=METHOD_BY_AREA)
        order = OrderRecord(
            id="P-1",
            customer_name="Budi",
            items=(OrderItem("glossy", 1, Decimal("1.5"), Decimal("1.5")),),
            total_cost=Decimal("1.69"),
            created_at=datetime(2026, 1, 1),
        )
        html = render_receipt_html(build_receipt(order, [glossy], SETTINGS))
        assert "Rp 1,68" not in html
        assert "Rp 1,69" in html


class TestOrderReceipt:
    def test_uses_store_profile_defaults(self, store, cashier):
        order = order_service.create_order(store, OrderDraft("Budi"), cashier)
        receipt = receipt_service.order_receipt(store, order.id, cashier)
        assert receipt.store_name == "Toko Printing Anda"
        assert receipt.address == "Jl. Contoh No. 123"

    def test_missing_order(self, store, cashier):
        assert receipt_service.order_receipt(store, "P-missing", cashier) is None

    def test_anonymous_denied(self, store):
        with pytest.raises(PermissionDeniedError):
            receipt_service.order_receipt(store, "P-missing", None)
