"""
Invoice Service — numbering, totals and the invoice mutations.
"""
import logging
import re
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from neobank.config import get_settings
from neobank.models.invoice import Invoice, InvoiceLineItem
from neobank.services.errors import NotFoundError

settings = get_settings()
logger = logging.getLogger(__name__)

INVOICE_STATUSES = ("draft", "sent", "viewed", "paid", "overdue", "cancelled")
_NUMBER_RE = re.compile(r"INV-(\d{4})-(\d+)")


def next_invoice_number(existing: Iterable[str], year: Optional[int] = None) -> str:
    """Next INV-<year>-<seq> after the highest sequence used this year.

    Two callers computing this at the same time get the same number; nothing
    downstream rejects the duplicate.
    """
    year = year or datetime.utcnow().year
    sequences = []
    for number in existing:
        match = _NUMBER_RE.search(number or "")
        if match and int(match.group(1)) == year:
            seq = int(match.group(2))
            if seq > 0:
                sequences.append(seq)
    return f"INV-{year}-{max(sequences, default=0) + 1:03d}"


def compute_totals(line_amounts: Iterable[float], tax_rate: float) -> dict:
    subtotal = round(sum(float(a) for a in line_amounts), 2)
    tax_amount = round(subtotal * (tax_rate / 100), 2)
    return {"subtotal": subtotal, "tax_amount": tax_amount, "total": round(subtotal + tax_amount, 2)}


class InvoiceService:
    """Invoice reads and writes for the demo organization."""

    @staticmethod
    def list(db: Session) -> List[Invoice]:
        return (
            db.query(Invoice)
            .options(selectinload(Invoice.line_items))
            .filter(Invoice.organization_id == settings.DEMO_ORG_ID)
            .order_by(Invoice.created_at.desc())
            .all()
        )

    @staticmethod
    def next_number(db: Session, year: Optional[int] = None) -> str:
        numbers = [
            n for (n,) in db.query(Invoice.invoice_number)
            .filter(Invoice.organization_id == settings.DEMO_ORG_ID)
            .all()
        ]
        return next_invoice_number(numbers, year)

    @staticmethod
    def create(db: Session, payload) -> Invoice:
        """Insert the invoice and its line items in one commit."""
        totals = compute_totals((item.amount for item in payload.line_items), payload.tax_rate)
        now = datetime.utcnow()

        invoice = Invoice(
            organization_id=settings.DEMO_ORG_ID,
            invoice_number=InvoiceService.next_number(db),
            client_name=payload.client_name,
            client_email=payload.client_email,
            client_address=payload.client_address,
            issue_date=payload.issue_date,
            due_date=payload.due_date,
            tax_rate=payload.tax_rate,
            currency=payload.currency or settings.DEFAULT_CURRENCY,
            notes=payload.notes,
            status="sent" if payload.send_immediately else "draft",
            sent_at=now if payload.send_immediately else None,
            **totals,
        )
        invoice.line_items = [
            InvoiceLineItem(
                position=index,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                amount=item.amount,
            )
            for index, item in enumerate(payload.line_items)
        ]
        db.add(invoice)
        db.commit()
        db.refresh(invoice)

        logger.info("Created invoice %s (%s %.2f)", invoice.invoice_number, invoice.currency, invoice.total)
        return invoice

    @staticmethod
    def update_status(db: Session, invoice_id: str, status: str) -> Invoice:
        invoice = db.query(Invoice).filter(
            Invoice.id == invoice_id,
            Invoice.organization_id == settings.DEMO_ORG_ID,
        ).first()
        if not invoice:
            raise NotFoundError("Invoice not found")

        invoice.status = status
        if status == "sent":
            invoice.sent_at = datetime.utcnow()
        elif status == "paid":
            invoice.paid_at = datetime.utcnow()

        db.commit()
        db.refresh(invoice)
        return invoice
