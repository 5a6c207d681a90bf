"""
Dashboard Service — assembles the home screen payload.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from neobank.config import get_settings
from neobank.models.invoice import Invoice
from neobank.models.organization import Organization
from neobank.services import summaries
from neobank.services.account_service import AccountService
from neobank.services.onboarding_service import OnboardingService
from neobank.utils.formatting import format_relative_date

settings = get_settings()

RECENT_FETCH_LIMIT = 10
RECENT_DISPLAY_LIMIT = 5


class DashboardService:

    @staticmethod
    def build(db: Session, now: Optional[datetime] = None) -> dict:
        now = now or datetime.utcnow()

        recent = summaries.recent_activity(
            AccountService.account_transactions(db, limit=RECENT_FETCH_LIMIT),
            AccountService.card_transactions(db, limit=RECENT_FETCH_LIMIT),
            limit=RECENT_DISPLAY_LIMIT,
        )
        for entry in recent:
            entry["relative_time"] = format_relative_date(entry["created_at"], now)

        window = AccountService.account_transactions(
            db, since=now - timedelta(days=summaries.SUMMARY_WINDOW_DAYS),
        )
        pending = (
            db.query(Invoice)
            .filter(
                Invoice.organization_id == settings.DEMO_ORG_ID,
                Invoice.status.in_(summaries.OUTSTANDING_INVOICE_STATUSES),
            )
            .all()
        )
        latest_case = OnboardingService.latest_case(db, settings.DEMO_USER_ID)

        return {
            "account": AccountService.get_account(db),
            "organization": db.get(Organization, settings.DEMO_ORG_ID),
            "transactions": recent,
            "transaction_summary": summaries.flow_summary(window, now=now),
            "pending_invoices": summaries.pending_invoice_summary(pending),
            "kyb_status": latest_case.status if latest_case else None,
        }
