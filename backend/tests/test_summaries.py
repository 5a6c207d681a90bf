"""
Unit tests for the financial reductions, invoice numbering, payment helpers
and display formatting. Records are plain namespaces standing in for ORM rows.
"""
from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from neobank.services import summaries
from neobank.services.card_service import default_controls, expiry_from
from neobank.services.invoice_service import compute_totals, next_invoice_number
from neobank.services.payment_service import LINK_CODE_ALPHABET, generate_link_code, link_expiry
from neobank.utils.formatting import format_card_expiry, format_display_date, format_relative_date
from neobank.utils.validators import validate_iban

NOW = datetime(2024, 6, 15, 12, 0, 0)


def tx(amount, type="debit", days_ago=0, **kw):
    fields = dict(
        id=f"tx-{amount}-{days_ago}", type=type, amount=amount, currency="AED",
        description=kw.pop("description", None), counterparty_name=None, reference=None,
        category=None, status="completed", created_at=NOW - timedelta(days=days_ago),
    )
    fields.update(kw)
    return SimpleNamespace(**fields)


def card_tx(amount, days_ago=0, last4="4242", merchant="Careem"):
    return SimpleNamespace(
        id=f"ctx-{amount}", amount=amount, currency="AED", merchant_name=merchant,
        merchant_category="transport", status="completed",
        created_at=NOW - timedelta(days=days_ago), card=SimpleNamespace(card_number_last4=last4),
    )


def expense(amount, category, status="approved", on=date(2024, 6, 3)):
    return SimpleNamespace(
        id=f"exp-{amount}", amount=amount, currency="AED", description="Lunch", vendor=None,
        category=category, status=status, expense_date=on,
    )


# ── Invoice numbering ───────────────────────────────────────────────────────

class TestInvoiceNumbering:
    def test_first_invoice_of_year(self):
        assert next_invoice_number([], year=2024) == "INV-2024-001"

    def test_follows_highest_sequence(self):
        assert next_invoice_number(["INV-2024-001", "INV-2024-003"], year=2024) == "INV-2024-004"

    def test_other_years_ignored(self):
        assert next_invoice_number(["INV-2023-050"], year=2024) == "INV-2024-001"

    def test_malformed_numbers_ignored(self):
        assert next_invoice_number(["draft", "INV-24-9", "INV-2024-000"], year=2024) == "INV-2024-001"

    def test_sequence_grows_past_three_digits(self):
        assert next_invoice_number(["INV-2024-999"], year=2024) == "INV-2024-1000"

    def test_totals(self):
        assert compute_totals([100, 50.5], 10) == {"subtotal": 150.5, "tax_amount": 15.05, "total": 165.55}


# ── Ledger ──────────────────────────────────────────────────────────────────

class TestLedger:
    def entries(self):
        return summaries.merge_ledger(
            [summaries.normalize_account_transaction(tx(500, "credit", 1, description="Client payment"))],
            [summaries.normalize_card_transaction(card_tx(40, 0))],
            [summaries.normalize_expense(expense(75, "Meals", on=date(2024, 6, 10)))],
        )

    def test_merged_newest_first(self):
        assert [e["source"] for e in self.entries()] == ["card", "account", "expense"]

    def test_card_reference_masks_number(self):
        assert self.entries()[0]["reference"] == "Card •••• 4242"

    def test_type_filter(self):
        credits = summaries.filter_ledger(self.entries(), type_filter="credit")
        assert [e["amount"] for e in credits] == [500.0]

    def test_search_is_case_insensitive(self):
        assert len(summaries.filter_ledger(self.entries(), search="CAREEM")) == 1
        assert summaries.filter_ledger(self.entries(), search="meals")[0]["source"] == "expense"

    def test_filters_commute(self):
        entries = self.entries()
        a = summaries.filter_ledger(summaries.filter_ledger(entries, search="a"), type_filter="debit")
        b = summaries.filter_ledger(summaries.filter_ledger(entries, type_filter="debit"), search="a")
        assert a == b

    def test_unknown_filter(self):
        with pytest.raises(ValueError):
            summaries.filter_ledger([], type_filter="refund")

    def test_stats(self):
        assert summaries.ledger_stats(self.entries()) == {
            "credits": 500.0, "debits": 115.0, "credit_count": 1, "debit_count": 2,
        }


# ── Dashboard ───────────────────────────────────────────────────────────────

class TestDashboard:
    def test_recent_activity_limited(self):
        recent = summaries.recent_activity([tx(i, days_ago=i) for i in range(1, 5)], [card_tx(9, 0)], limit=3)
        assert [e["amount"] for e in recent] == [9.0, 1.0, 2.0]

    def test_flow_summary_window(self):
        flows = summaries.flow_summary(
            [tx(100, "credit", 2), tx(30, "debit", 5), tx(999, "credit", 45)], now=NOW,
        )
        assert flows == {"incoming_total": 100.0, "incoming_count": 1, "outgoing_total": 30.0, "outgoing_count": 1}

    def test_pending_invoices(self):
        invoices = [SimpleNamespace(status=s, total=100) for s in ("sent", "viewed", "overdue", "paid", "draft")]
        assert summaries.pending_invoice_summary(invoices) == {"total": 300.0, "count": 3}


# ── Cards and expenses ──────────────────────────────────────────────────────

class TestCards:
    def test_stats(self):
        assert summaries.card_stats([card_tx(10), card_tx(15)]) == {
            "total_spent": 25.0, "transaction_count": 2, "avg_transaction": 12,
        }

    def test_stats_without_transactions(self):
        assert summaries.card_stats([])["avg_transaction"] == 0

    def test_default_controls(self):
        controls = default_controls(5000)
        assert controls["daily_limit"] == 1000
        assert controls["per_transaction_limit"] == 500
        assert controls["international_enabled"] is False

    def test_expiry_three_years_out(self):
        assert expiry_from(date(2024, 2, 29)) == date(2027, 2, 28)


class TestExpenses:
    def test_stats(self):
        expenses = [
            expense(100, "Travel"),
            expense(40, "Meals", status="pending"),
            expense(60, "Meals", on=date(2024, 5, 30)),
        ]
        assert summaries.expense_stats(expenses, today=date(2024, 6, 15)) == {
            "this_month": 140.0, "pending": 40.0, "pending_count": 1,
        }

    def test_category_breakdown_sorted_with_stable_colors(self):
        rows = summaries.category_breakdown([expense(10, "Meals"), expense(50, "Travel"), expense(5, None)])
        assert [r["name"] for r in rows] == ["Travel", "Meals", "Other"]
        assert rows[0]["color"] == "hsl(var(--chart-2))"
        assert rows[1]["color"] == "hsl(var(--chart-1))"

    def test_category_breakdown_sums_to_total(self):
        expenses = [expense(12.25, "Meals"), expense(30, "Travel"), expense(7.75, "Meals"), expense(1, "")]
        rows = summaries.category_breakdown(expenses)
        assert sum(r["value"] for r in rows) == pytest.approx(sum(e.amount for e in expenses))

    def test_category_breakdown_keeps_sub_cent_amounts(self):
        expenses = [expense(0.125, "Meals"), expense(0.125, "Travel"), expense(1.005, "Fuel")]
        rows = summaries.category_breakdown(expenses)
        assert sum(r["value"] for r in rows) == pytest.approx(1.255)
        assert {r["name"]: r["value"] for r in rows}["Meals"] == 0.125

    def test_invoice_stats(self):
        invoices = [
            SimpleNamespace(status="sent", total=200, paid_at=None, updated_at=NOW),
            SimpleNamespace(status="overdue", total=50, paid_at=None, updated_at=NOW),
            SimpleNamespace(status="paid", total=300, paid_at=NOW - timedelta(days=3), updated_at=NOW),
            SimpleNamespace(status="paid", total=700, paid_at=NOW - timedelta(days=60), updated_at=NOW),
        ]
        assert summaries.invoice_stats(invoices, now=NOW) == {
            "total_outstanding": 250.0, "paid_last_30_days": 300.0, "overdue": 50.0,
        }


# ── Payments ────────────────────────────────────────────────────────────────

class TestPayments:
    def test_link_code_shape(self):
        code = generate_link_code()
        assert len(code) == 8
        assert set(code) <= set(LINK_CODE_ALPHABET)

    def test_link_expires_in_thirty_days(self):
        assert link_expiry(NOW) == datetime(2024, 7, 15, 12, 0, 0)

    @pytest.mark.parametrize("iban,ok", [
        ("AE070331234567890123456", True),
        ("ae07 0331 2345 6789 0123 456", True),
        ("GB82WEST12345698765432", True),
        ("AE080331234567890123456", False),
        ("AE07", False),
        (None, False),
    ])
    def test_iban(self, iban, ok):
        assert validate_iban(iban) is ok


# ── Formatting ──────────────────────────────────────────────────────────────

class TestFormatting:
    def test_display_date(self):
        assert format_display_date(date(2025, 3, 5)) == "05 Mar 2025"
        assert format_display_date(None) == "N/A"

    def test_card_expiry(self):
        assert format_card_expiry(date(2027, 8, 31)) == "08/27"
        assert format_card_expiry(None) == "N/A"

    @pytest.mark.parametrize("delta,expected", [
        (timedelta(minutes=10), "Just now"),
        (timedelta(hours=5), "Today"),
        (timedelta(days=1, hours=2), "Yesterday"),
        (timedelta(days=4), "4 days ago"),
        (timedelta(days=10), "05/06/2024"),
    ])
    def test_relative_date(self, delta, expected):
        assert format_relative_date(NOW - delta, NOW) == expected
