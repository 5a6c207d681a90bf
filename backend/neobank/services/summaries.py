"""
Financial Summaries — pure reductions over already-fetched records.

Every function here takes plain records (ORM rows or anything exposing the
same attributes) and returns dicts ready for the response schemas. Nothing
here touches the database.
"""
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, List, Optional

TRANSACTION_TYPES = ("all", "credit", "debit")
OUTSTANDING_INVOICE_STATUSES = ("sent", "viewed", "overdue")
CHART_PALETTE_SIZE = 5
SUMMARY_WINDOW_DAYS = 30


def _as_datetime(value: date | datetime | None) -> datetime:
    if value is None:
        return datetime.min
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def _total(records: Iterable[Any], field: str = "amount") -> float:
    return round(sum(float(getattr(r, field) or 0) for r in records), 2)


# ─── Ledger normalization ────────────────────────────────────────────

def normalize_account_transaction(tx: Any) -> dict:
    return {
        "id": tx.id,
        "type": tx.type,
        "amount": float(tx.amount),
        "currency": tx.currency,
        "description": tx.description or tx.counterparty_name or "Transaction",
        "counterparty_name": tx.counterparty_name,
        "reference": tx.reference,
        "category": tx.category,
        "created_at": _as_datetime(tx.created_at),
        "status": tx.status,
        "source": "account",
    }


def normalize_card_transaction(tx: Any) -> dict:
    card = getattr(tx, "card", None)
    last4 = getattr(card, "card_number_last4", None) or "****"
    return {
        "id": tx.id,
        "type": "debit",
        "amount": float(tx.amount),
        "currency": tx.currency,
        "description": tx.merchant_name or "Card Transaction",
        "counterparty_name": tx.merchant_name,
        "reference": f"Card •••• {last4}",
        "category": tx.merchant_category,
        "created_at": _as_datetime(tx.created_at),
        "status": tx.status,
        "source": "card",
    }


def normalize_expense(expense: Any) -> dict:
    return {
        "id": expense.id,
        "type": "debit",
        "amount": float(expense.amount),
        "currency": expense.currency,
        "description": expense.description or expense.vendor or "Expense",
        "counterparty_name": expense.vendor,
        "reference": "Expense",
        "category": expense.category,
        "created_at": _as_datetime(expense.expense_date),
        "status": expense.status,
        "source": "expense",
    }


def merge_ledger(*groups: Iterable[dict]) -> List[dict]:
    """Concatenate normalized entries, newest first."""
    merged = [entry for group in groups for entry in group]
    merged.sort(key=lambda e: e["created_at"], reverse=True)
    return merged


def matches_search(entry: dict, query: str) -> bool:
    query = query.lower()
    for field in ("description", "reference", "counterparty_name", "category"):
        value = entry.get(field)
        if value and query in value.lower():
            return True
    return False


def filter_ledger(entries: Iterable[dict], search: str = "", type_filter: str = "all") -> List[dict]:
    """Apply the type filter and the free-text search.

    Both predicates are evaluated per entry, so the result does not depend on
    which one is applied first.
    """
    if type_filter not in TRANSACTION_TYPES:
        raise ValueError(f"Unknown transaction type filter '{type_filter}'")
    result = []
    for entry in entries:
        if type_filter != "all" and entry["type"] != type_filter:
            continue
        if search and not matches_search(entry, search):
            continue
        result.append(entry)
    return result


def ledger_stats(entries: Iterable[dict]) -> dict:
    credits = debits = 0.0
    credit_count = debit_count = 0
    for entry in entries:
        if entry["type"] == "credit":
            credits += entry["amount"]
            credit_count += 1
        elif entry["type"] == "debit":
            debits += entry["amount"]
            debit_count += 1
    return {
        "credits": round(credits, 2),
        "debits": round(debits, 2),
        "credit_count": credit_count,
        "debit_count": debit_count,
    }


# ─── Dashboard ───────────────────────────────────────────────────────

def recent_activity(account_transactions: Iterable[Any], card_transactions: Iterable[Any], limit: int = 5) -> List[dict]:
    """Latest movements across the account and its cards."""
    merged = merge_ledger(
        (normalize_account_transaction(tx) for tx in account_transactions),
        (normalize_card_transaction(tx) for tx in card_transactions),
    )
    return merged[:limit]


def flow_summary(transactions: Iterable[Any], now: Optional[datetime] = None, days: int = SUMMARY_WINDOW_DAYS) -> dict:
    """Incoming/outgoing totals over the trailing window."""
    now = now or datetime.utcnow()
    since = now - timedelta(days=days)
    window = [t for t in transactions if _as_datetime(t.created_at) >= since]
    incoming = [t for t in window if t.type == "credit"]
    outgoing = [t for t in window if t.type == "debit"]
    return {
        "incoming_total": _total(incoming),
        "incoming_count": len(incoming),
        "outgoing_total": _total(outgoing),
        "outgoing_count": len(outgoing),
    }


def pending_invoice_summary(invoices: Iterable[Any]) -> dict:
    pending = [i for i in invoices if i.status in OUTSTANDING_INVOICE_STATUSES]
    return {"total": _total(pending, "total"), "count": len(pending)}


# ─── Cards ───────────────────────────────────────────────────────────

def card_stats(transactions: Iterable[Any]) -> dict:
    transactions = list(transactions)
    total_spent = _total(transactions)
    count = len(transactions)
    return {
        "total_spent": total_spent,
        "transaction_count": count,
        "avg_transaction": round(total_spent / count) if count else 0,
    }


# ─── Expenses ────────────────────────────────────────────────────────

def expense_stats(expenses: Iterable[Any], today: Optional[date] = None) -> dict:
    today = today or date.today()
    expenses = list(expenses)
    this_month = [
        e for e in expenses
        if e.expense_date.month == today.month and e.expense_date.year == today.year
    ]
    pending = [e for e in expenses if e.status == "pending"]
    return {
        "this_month": _total(this_month),
        "pending": _total(pending),
        "pending_count": len(pending),
    }


def chart_color(index: int) -> str:
    return f"hsl(var(--chart-{(index % CHART_PALETTE_SIZE) + 1}))"


def category_breakdown(expenses: Iterable[Any]) -> List[dict]:
    """Totals per category, largest first.

    Colors are assigned by first-seen order before sorting, so a category
    keeps its color as long as the underlying list order is stable.
    Values are not rounded, so the rows sum to the expense total.
    """
    totals: dict[str, float] = {}
    for expense in expenses:
        category = expense.category or "Other"
        totals[category] = totals.get(category, 0.0) + float(expense.amount)

    rows = [
        {"name": name, "value": value, "color": chart_color(index)}
        for index, (name, value) in enumerate(totals.items())
    ]
    rows.sort(key=lambda r: r["value"], reverse=True)
    return rows


# ─── Invoices ────────────────────────────────────────────────────────

def invoice_stats(invoices: Iterable[Any], now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    since = now - timedelta(days=SUMMARY_WINDOW_DAYS)
    invoices = list(invoices)

    outstanding = [i for i in invoices if i.status in OUTSTANDING_INVOICE_STATUSES]
    paid_recently = [
        i for i in invoices
        if i.status == "paid" and _as_datetime(i.paid_at or i.updated_at) >= since
    ]
    overdue = [i for i in invoices if i.status == "overdue"]
    return {
        "total_outstanding": _total(outstanding, "total"),
        "paid_last_30_days": _total(paid_recently, "total"),
        "overdue": _total(overdue, "total"),
    }
