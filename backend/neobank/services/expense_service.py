"""
Expense Service — expense capture, receipts and the approval flow.
"""
import logging
import time
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from neobank.config import get_settings
from neobank.models.expense import Expense
from neobank.models.transaction import Transaction
from neobank.services.errors import NotFoundError
from neobank.services.storage_service import StorageService, RECEIPTS_BUCKET
from neobank.utils.validators import upload_extension

settings = get_settings()
logger = logging.getLogger(__name__)


class ExpenseService:
    """Expenses of the demo organization."""

    @staticmethod
    def list(db: Session) -> List[Expense]:
        return (
            db.query(Expense)
            .filter(Expense.organization_id == settings.DEMO_ORG_ID)
            .order_by(Expense.expense_date.desc(), Expense.created_at.desc())
            .all()
        )

    @staticmethod
    def upload_receipt(user_id: str, file_name: str, contents: bytes) -> str:
        """Store a receipt and return its public URL."""
        ext = upload_extension(file_name)
        if len(contents) > settings.MAX_UPLOAD_BYTES:
            raise OverflowError(f"File exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB limit")
        path = f"{user_id or 'anon'}/{int(time.time() * 1000)}.{ext}"
        StorageService.upload(RECEIPTS_BUCKET, path, contents)
        return StorageService.public_url(RECEIPTS_BUCKET, path)

    @staticmethod
    def create(db: Session, user_id: str, data: dict, receipt_url: Optional[str] = None) -> Expense:
        expense = Expense(
            organization_id=settings.DEMO_ORG_ID,
            user_id=user_id,
            currency=settings.DEFAULT_CURRENCY,
            receipt_url=receipt_url,
            status="pending" if data.get("needs_approval") else "approved",
            **data,
        )
        db.add(expense)
        db.commit()
        db.refresh(expense)
        return expense

    @staticmethod
    def update_status(
        db: Session, expense_id: str, status: str, user_id: str, expense_data: Optional[dict] = None,
    ) -> Expense:
        """Change status; approving with expense details books the debit transaction."""
        expense = db.query(Expense).filter(
            Expense.id == expense_id,
            Expense.organization_id == settings.DEMO_ORG_ID,
        ).first()
        if not expense:
            raise NotFoundError("Expense not found")

        expense.status = status
        if status == "approved":
            expense.approved_at = datetime.utcnow()
            expense.approved_by = user_id

            if expense_data:
                db.add(Transaction(
                    account_id=settings.DEMO_ACCOUNT_ID,
                    type="debit",
                    amount=expense_data["amount"],
                    currency=settings.DEFAULT_CURRENCY,
                    status="completed",
                    description=expense_data["description"],
                    reference=f"EXP-{expense_id[:8].upper()}",
                    counterparty_name=expense_data.get("vendor") or "Expense",
                    category=expense_data["category"],
                ))
                logger.info("Booked debit for approved expense %s", expense_id)

        db.commit()
        db.refresh(expense)
        return expense
