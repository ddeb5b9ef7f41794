# Overview: Service-layer reporting; period windows, sales/expense aggregation and CSV export.

"""
Reporting Service

WINDOWS (half-open [start, end), shop-local wall-clock, computed from "now"):
- daily: midnight today .. midnight tomorrow
- monthly: first of this month .. first of next month
- yearly: Jan 1 .. Jan 1 next year

FIGURES over the orders/expenses created inside the window:
- total_sales = sum(total_cost), paid or not (accrual)
- cash_in = sum(paid_amount) over PAID orders only; a partly paid UNPAID
  order contributes nothing
- total_expenses = sum(cost)
- profit = total_sales - total_expenses
- cash_flow = cash_in - total_expenses
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable

from ..document_store import DocumentStore
from ..permissions import authorize
from ..records import AccountRecord, ExpenseRecord, OrderRecord
from printshop.time_utils import localnow, to_iso
from .pricing_service import ZERO


PERIOD_DAILY = "daily"
PERIOD_MONTHLY = "monthly"
PERIOD_YEARLY = "yearly"
PERIODS = (PERIOD_DAILY, PERIOD_MONTHLY, PERIOD_YEARLY)

CSV_HEADER = ["Tipe", "Tanggal", "Deskripsi", "Jumlah"]
CSV_SALE = "Penjualan"
CSV_EXPENSE = "Pengeluaran"


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def report_window(period: str, now: datetime | None = None) -> tuple[datetime, datetime]:
    now = now or localnow()
    if period == PERIOD_DAILY:
        start = datetime(now.year, now.month, now.day)
        end = start + timedelta(days=1)
    elif period == PERIOD_MONTHLY:
        start = datetime(now.year, now.month, 1)
        if now.month == 12:
            end = datetime(now.year + 1, 1, 1)
        else:
            end = datetime(now.year, now.month + 1, 1)
    elif period == PERIOD_YEARLY:
        start = datetime(now.year, 1, 1)
        end = datetime(now.year + 1, 1, 1)
    else:
        raise ReportError(f"period must be one of {', '.join(PERIODS)}")
    return start, end


def _in_window(created_at: datetime | None, start: datetime, end: datetime) -> bool:
    return created_at is not None and start <= created_at < end


@dataclass(frozen=True)
class Report:
    period: str
    start: datetime
    end: datetime
    total_sales: Decimal = ZERO
    total_expenses: Decimal = ZERO
    profit: Decimal = ZERO
    cash_in: Decimal = ZERO
    cash_flow: Decimal = ZERO
    orders: tuple[OrderRecord, ...] = field(default_factory=tuple)
    expenses: tuple[ExpenseRecord, ...] = field(default_factory=tuple)

    def to_dict(self, include_rows: bool = True) -> dict:
        data = {
            "period": self.period,
            "start": to_iso(self.start),
            "end": to_iso(self.end),
            "total_sales": self.total_sales,
            "total_expenses": self.total_expenses,
            "profit": self.profit,
            "cash_in": self.cash_in,
            "cash_flow": self.cash_flow,
            "order_count": len(self.orders),
            "expense_count": len(self.expenses),
        }
        if include_rows:
            data["orders"] = [o.to_dict() for o in self.orders]
            data["expenses"] = [e.to_dict() for e in self.expenses]
        return data


def aggregate(
    orders: Iterable[OrderRecord],
    expenses: Iterable[ExpenseRecord],
    period: str,
    now: datetime | None = None,
) -> Report:
    """Pure aggregation over snapshots; no store access."""
    start, end = report_window(period, now)

    filtered_orders = tuple(o for o in orders if _in_window(o.created_at, start, end))
    filtered_expenses = tuple(e for e in expenses if _in_window(e.created_at, start, end))

    total_sales = sum((o.total_cost for o in filtered_orders), ZERO)
    cash_in = sum((o.paid_amount for o in filtered_orders if o.is_paid), ZERO)
    total_expenses = sum((e.cost for e in filtered_expenses), ZERO)

    return Report(
        period=period,
        start=start,
        end=end,
        total_sales=total_sales,
        total_expenses=total_expenses,
        profit=total_sales - total_expenses,
        cash_in=cash_in,
        cash_flow=cash_in - total_expenses,
        orders=filtered_orders,
        expenses=filtered_expenses,
    )


def build_report(
    store: DocumentStore,
    period: str,
    actor: AccountRecord | None,
    now: datetime | None = None,
) -> Report:
    authorize(actor, "VIEW_REPORTS")
    return aggregate(store.read_all("orders"), store.read_all("expenses"), period, now)


def _format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


def export_filename(period: str) -> str:
    return f"laporan_{period}.csv"


def export_csv(report: Report) -> str:
    """
    Flat CSV of the report window: one row per order (+total_cost) and one
    per expense (-cost).
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for order in report.orders:
        writer.writerow([
            CSV_SALE,
            order.created_at.date().isoformat(),
            f"Pesanan {order.customer_name}",
            _format_amount(order.total_cost),
        ])
    for expense in report.expenses:
        writer.writerow([
            CSV_EXPENSE,
            expense.created_at.date().isoformat(),
            expense.description,
            _format_amount(-expense.cost),
        ])
    return buffer.getvalue()


def export_report(
    store: DocumentStore,
    period: str,
    actor: AccountRecord | None,
    now: datetime | None = None,
) -> tuple[str, str]:
    """(filename, csv_text) for the period's window."""
    authorize(actor, "EXPORT_REPORTS")
    report = aggregate(store.read_all("orders"), store.read_all("expenses"), period, now)
    return export_filename(period), export_csv(report)


class ReportView:
    """
    Live report: subscribes to orders and expenses and re-aggregates on every
    change notification. `report` always reflects the latest snapshots.
    """

    def __init__(
        self,
        store: DocumentStore,
        period: str,
        actor: AccountRecord | None,
        clock: Callable[[], datetime] = localnow,
    ):
        authorize(actor, "VIEW_REPORTS")
        report_window(period)  # reject unknown periods before subscribing
        self.period = period
        self._clock = clock
        self._orders: list[OrderRecord] = []
        self._expenses: list[ExpenseRecord] = []
        self.report: Report | None = None
        self._subscriptions = [
            store.subscribe("orders", self._on_orders),
            store.subscribe("expenses", self._on_expenses),
        ]

    def _on_orders(self, snapshot) -> None:
        self._orders = list(snapshot)
        self._refresh()

    def _on_expenses(self, snapshot) -> None:
        self._expenses = list(snapshot)
        self._refresh()

    def _refresh(self) -> None:
        self.report = aggregate(self._orders, self._expenses, self.period, self._clock())

    def set_period(self, period: str) -> None:
        report_window(period)
        self.period = period
        self._refresh()

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
