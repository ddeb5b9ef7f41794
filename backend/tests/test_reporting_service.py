"""
Reporting aggregation tests.

Windows are half-open [start, end) in local wall-clock time.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from printshop.permissions import PermissionDeniedError
from printshop.records import ExpenseRecord, OrderRecord, PAYMENT_STATUS_PAID, PAYMENT_STATUS_UNPAID
from printshop.services import expense_service, order_service, payment_service, reporting_service
from printshop.services.order_service import OrderDraft
from printshop.services.reporting_service import ReportError, ReportView, aggregate, report_window


NOW = datetime(2026, 10, 18, 14, 0, 0)


def _order(oid, total, paid="0", status=PAYMENT_STATUS_UNPAID, created_at=NOW, name="Budi"):
    return OrderRecord(
        id=oid,
        customer_name=name,
        total_cost=Decimal(total),
        paid_amount=Decimal(paid),
        payment_status=status,
        created_at=created_at,
    )


def _expense(eid, cost, created_at=NOW, description="Tinta"):
    return ExpenseRecord(id=eid, description=description, cost=Decimal(cost), created_at=created_at)


# =============================================================================
# WINDOWS
# =============================================================================


class TestReportWindow:
    def test_daily(self):
        assert report_window("daily", NOW) == (datetime(2026, 10, 18), datetime(2026, 10, 19))

    def test_monthly(self):
        assert report_window("monthly", NOW) == (datetime(2026, 10, 1), datetime(2026, 11, 1))

    def test_monthly_in_december_rolls_year(self):
        assert report_window("monthly", datetime(2026, 12, 31, 23, 59)) == (
            datetime(2026, 12, 1), datetime(2027, 1, 1)
        )

    def test_yearly(self):
        assert report_window("yearly", NOW) == (datetime(2026, 1, 1), datetime(2027, 1, 1))

    def test_daily_on_month_end(self):
        assert report_window("daily", datetime(2026, 2, 28, 8, 0)) == (datetime(2026, 2, 28), datetime(2026, 3, 1))

    def test_unknown_period(self):
        with pytest.raises(ReportError):
            report_window("weekly", NOW)


# =============================================================================
# AGGREGATION
# =============================================================================


class TestAggregate:
    def test_paid_order_and_two_expenses(self):
        orders = [_order("o1", "100000", paid="100000", status=PAYMENT_STATUS_PAID)]
        expenses = [_expense("e1", "30000"), _expense("e2", "20000")]

        report = aggregate(orders, expenses, "daily", NOW)

        assert report.total_expenses == Decimal("50000")
        assert report.total_sales == Decimal("100000")
        assert report.profit == Decimal("50000")
        assert report.cash_in == Decimal("100000")
        assert report.cash_flow == Decimal("50000")

    def test_partially_paid_order_counts_as_sale_not_cash(self):
        orders = [_order("o1", "100000", paid="40000", status=PAYMENT_STATUS_UNPAID)]

        report = aggregate(orders, [], "daily", NOW)

        assert report.total_sales == Decimal("100000")
        assert report.cash_in == Decimal("0")
        assert report.cash_flow == Decimal("0")

    def test_window_is_half_open(self):
        start, end = report_window("daily", NOW)
        orders = [
            _order("at-start", "10", created_at=start),
            _order("at-end", "1000", created_at=end),
            _order("before", "5000", created_at=datetime(2026, 10, 17, 23, 59, 59)),
        ]
        expenses = [_expense("e-end", "7", created_at=end), _expense("e-start", "3", created_at=start)]

        report = aggregate(orders, expenses, "daily", NOW)

        assert [o.id for o in report.orders] == ["at-start"]
        assert [e.id for e in report.expenses] == ["e-start"]
        assert report.total_sales == Decimal("10")
        assert report.total_expenses == Decimal("3")

    def test_sales_include_unpaid_orders(self):
        orders = [
            _order("o1", "100000", paid="150000", status=PAYMENT_STATUS_PAID),
            _order("o2", "25000"),
        ]
        report = aggregate(orders, [], "monthly", NOW)
        assert report.total_sales == Decimal("125000")
        assert report.cash_in == Decimal("150000")

    def test_empty_inputs(self):
        report = aggregate([], [], "yearly", NOW)
        assert report.total_sales == report.total_expenses == report.profit == Decimal("0")
        assert report.orders == () and report.expenses == ()

    def test_to_dict_without_rows(self):
        data = aggregate([_order("o1", "10")], [], "daily", NOW).to_dict(include_rows=False)
        assert data["period"] == "daily"
        assert data["total_sales"] == Decimal("10")
        assert "orders" not in data


# =============================================================================
# CSV EXPORT
# =============================================================================


class TestExportCsv:
    def test_rows_signed_by_type(self):
        orders = [_order("o1", "100000", name="Budi")]
        expenses = [_expense("e1", "30000", description="Kertas A4")]
        report = aggregate(orders, expenses, "daily", NOW)

        lines = reporting_service.export_csv(report).splitlines()

        assert lines == [
            "Tipe,Tanggal,Deskripsi,Jumlah",
            "Penjualan,2026-10-18,Pesanan Budi,100000.00",
            "Pengeluaran,2026-10-18,Kertas A4,-30000.00",
        ]

    def test_description_with_comma_is_quoted(self):
        report = aggregate([], [_expense("e1", "5000", description="Lem, selotip")], "daily", NOW)
        assert '"Lem, selotip"' in reporting_service.export_csv(report)

    def test_filename(self):
        assert reporting_service.export_filename("monthly") == "laporan_monthly.csv"


# =============================================================================
# STORE-BACKED REPORTS
# =============================================================================


class TestStoreReports:
    def test_build_report_reads_store(self, store, supervisor, cashier, banner):
        draft = OrderDraft("Budi", products=store.read_all("products"))
        draft.add_item(banner.id, width="2", height="1")
        order = order_service.create_order(store, draft, cashier, now=NOW)
        payment_service.settle_order(store, order.id, "100000", cashier)
        expense_service.create_expense(store, {"description": "Tinta", "cost": "30000"}, cashier, now=NOW)
        expense_service.create_expense(store, {"description": "Kertas", "cost": "20000"}, cashier, now=NOW)

        report = reporting_service.build_report(store, "daily", supervisor, now=NOW)

        assert report.total_sales == Decimal("100000")
        assert report.cash_in == Decimal("100000")
        assert report.total_expenses == Decimal("50000")
        assert report.profit == Decimal("50000")
        assert report.cash_flow == Decimal("50000")

    @pytest.mark.parametrize("role_fixture", ["cashier", "designer"])
    def test_reports_restricted(self, request, store, role_fixture):
        actor = request.getfixturevalue(role_fixture)
        with pytest.raises(PermissionDeniedError):
            reporting_service.build_report(store, "daily", actor, now=NOW)
        with pytest.raises(PermissionDeniedError):
            reporting_service.export_report(store, "daily", actor, now=NOW)

    def test_export_report(self, store, owner):
        filename, content = reporting_service.export_report(store, "yearly", owner, now=NOW)
        assert filename == "laporan_yearly.csv"
        assert content == "Tipe,Tanggal,Deskripsi,Jumlah\n"


class TestReportView:
    def test_refreshes_on_order_and_expense_changes(self, store, owner, cashier):
        view = ReportView(store, "daily", owner, clock=lambda: NOW)
        assert view.report.total_sales == Decimal("0")

        draft = OrderDraft("Budi")
        order = order_service.create_order(store, draft, cashier, now=NOW)
        store.update("orders", order.id, {"total_cost": Decimal("75000")})
        assert view.report.total_sales == Decimal("75000")

        expense_service.create_expense(store, {"description": "Tinta", "cost": "25000"}, cashier, now=NOW)
        assert view.report.profit == Decimal("50000")

        view.set_period("yearly")
        assert view.report.period == "yearly"
        assert view.report.profit == Decimal("50000")

        view.close()
        expense_service.create_expense(store, {"description": "Lem", "cost": "1000"}, cashier, now=NOW)
        assert view.report.total_expenses == Decimal("25000")

    def test_requires_report_permission(self, store, cashier):
        with pytest.raises(PermissionDeniedError):
            ReportView(store, "daily", cashier)
