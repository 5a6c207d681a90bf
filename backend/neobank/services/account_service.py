"""
Account Service — account details and the unified transaction ledger.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from neobank.config import get_settings
from neobank.models.card import Card, CardTransaction
from neobank.models.expense import Expense
from neobank.models.organization import Account
from neobank.models.transaction import Transaction
from neobank.services import summaries

settings = get_settings()


class AccountService:
    """Reads scoped to the demo organization and account."""

    @staticmethod
    def get_account(db: Session) -> Optional[Account]:
        return (
            db.query(Account)
            .options(joinedload(Account.organization))
            .filter(Account.id == settings.DEMO_ACCOUNT_ID)
            .first()
        )

    @staticmethod
    def account_transactions(
        db: Session, limit: Optional[int] = None, since: Optional[datetime] = None,
    ) -> List[Transaction]:
        query = (
            db.query(Transaction)
            .filter(Transaction.account_id == settings.DEMO_ACCOUNT_ID)
            .order_by(Transaction.created_at.desc())
        )
        if since is not None:
            query = query.filter(Transaction.created_at >= since)
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def card_transactions(db: Session, limit: Optional[int] = None) -> List[CardTransaction]:
        query = (
            db.query(CardTransaction)
            .join(Card, CardTransaction.card_id == Card.id)
            .options(joinedload(CardTransaction.card))
            .filter(Card.organization_id == settings.DEMO_ORG_ID)
            .order_by(CardTransaction.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def approved_expenses(db: Session) -> List[Expense]:
        return (
            db.query(Expense)
            .filter(
                Expense.organization_id == settings.DEMO_ORG_ID,
                Expense.status == "approved",
            )
            .order_by(Expense.expense_date.desc())
            .all()
        )

    @staticmethod
    def ledger(db: Session) -> List[dict]:
        """Account, card and approved-expense movements, newest first."""
        return summaries.merge_ledger(
            (summaries.normalize_account_transaction(tx) for tx in AccountService.account_transactions(db)),
            (summaries.normalize_card_transaction(tx) for tx in AccountService.card_transactions(db)),
            (summaries.normalize_expense(e) for e in AccountService.approved_expenses(db)),
        )
