"""
Payment Service — beneficiaries, outgoing payments awaiting approval and
payment links shared with customers.
"""
import logging
import random
import string
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from neobank.config import get_settings
from neobank.models.payment import Beneficiary, Payment, PaymentLink
from neobank.services.errors import NotFoundError
from neobank.utils.validators import validate_iban

settings = get_settings()
logger = logging.getLogger(__name__)

LINK_CODE_ALPHABET = string.ascii_lowercase + string.digits
LINK_CODE_LENGTH = 8
LINK_VALIDITY_DAYS = 30


def generate_link_code(length: int = LINK_CODE_LENGTH) -> str:
    return "".join(random.choice(LINK_CODE_ALPHABET) for _ in range(length))


def link_expiry(now: Optional[datetime] = None, days: int = LINK_VALIDITY_DAYS) -> datetime:
    return (now or datetime.utcnow()) + timedelta(days=days)


class PaymentService:
    """Payments of the demo organization."""

    # ─── Beneficiaries ───────────────────────────────────────────────

    @staticmethod
    def list_beneficiaries(db: Session) -> List[Beneficiary]:
        """Active beneficiaries, alphabetical."""
        return (
            db.query(Beneficiary)
            .filter(
                Beneficiary.organization_id == settings.DEMO_ORG_ID,
                Beneficiary.is_active.is_(True),
            )
            .order_by(Beneficiary.name)
            .all()
        )

    @staticmethod
    def get_beneficiary(db: Session, beneficiary_id: str) -> Beneficiary:
        beneficiary = db.query(Beneficiary).filter(
            Beneficiary.id == beneficiary_id,
            Beneficiary.organization_id == settings.DEMO_ORG_ID,
        ).first()
        if not beneficiary or not beneficiary.is_active:
            raise NotFoundError("Beneficiary not found")
        return beneficiary

    @staticmethod
    def create_beneficiary(db: Session, name: str, bank_name: str, iban: str, vendor_type: str) -> Beneficiary:
        """Save a UAE beneficiary in AED.

        Raises:
            ValueError: IBAN fails the format or checksum test.
        """
        if not validate_iban(iban):
            raise ValueError("Invalid IBAN")
        beneficiary = Beneficiary(
            organization_id=settings.DEMO_ORG_ID,
            name=name,
            bank_name=bank_name,
            iban="".join(iban.split()).upper(),
            vendor_type=vendor_type,
            currency=settings.DEFAULT_CURRENCY,
            country="UAE",
        )
        db.add(beneficiary)
        db.commit()
        db.refresh(beneficiary)

        logger.info("Added beneficiary %s (%s)", beneficiary.id, name)
        return beneficiary

    # ─── Payments ────────────────────────────────────────────────────

    @staticmethod
    def list_payments(db: Session) -> List[Payment]:
        return (
            db.query(Payment)
            .options(selectinload(Payment.beneficiary))
            .filter(Payment.organization_id == settings.DEMO_ORG_ID)
            .order_by(Payment.created_at.desc())
            .all()
        )

    @staticmethod
    def create_payment(
        db: Session,
        beneficiary_id: str,
        amount: float,
        currency: str,
        reference: Optional[str],
        purpose: Optional[str],
        created_by: Optional[str] = None,
    ) -> Payment:
        """Queue a transfer from the operating account; it waits for approval."""
        beneficiary = PaymentService.get_beneficiary(db, beneficiary_id)
        payment = Payment(
            organization_id=settings.DEMO_ORG_ID,
            account_id=settings.DEMO_ACCOUNT_ID,
            beneficiary_id=beneficiary.id,
            amount=amount,
            currency=currency,
            reference=reference,
            purpose=purpose,
            status="pending_approval",
            created_by=created_by,
        )
        db.add(payment)
        db.commit()
        db.refresh(payment)

        logger.info("Payment %s of %.2f %s to %s pending approval", payment.id, amount, currency, beneficiary.name)
        return payment

    # ─── Payment links ───────────────────────────────────────────────

    @staticmethod
    def list_links(db: Session) -> List[PaymentLink]:
        return (
            db.query(PaymentLink)
            .filter(PaymentLink.organization_id == settings.DEMO_ORG_ID)
            .order_by(PaymentLink.created_at.desc())
            .all()
        )

    @staticmethod
    def create_link(db: Session, amount: float, description: Optional[str]) -> PaymentLink:
        """Create an AED link that expires after LINK_VALIDITY_DAYS."""
        link = PaymentLink(
            organization_id=settings.DEMO_ORG_ID,
            amount=amount,
            currency=settings.DEFAULT_CURRENCY,
            description=description,
            link_code=generate_link_code(),
            expires_at=link_expiry(),
        )
        db.add(link)
        db.commit()
        db.refresh(link)

        logger.info("Created payment link %s for %.2f", link.link_code, amount)
        return link
