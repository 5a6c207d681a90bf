"""
Card Service — card issuance, controls and freeze state.
"""
import logging
import random
from datetime import date
from typing import List

from sqlalchemy.orm import Session, selectinload

from neobank.config import get_settings
from neobank.models.card import Card, CardControl, CardTransaction
from neobank.services.errors import NotFoundError, ConflictError

settings = get_settings()
logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_CATEGORIES = ["shopping", "travel", "dining", "transport"]
CARD_VALIDITY_YEARS = 3


def default_controls(monthly_limit: float) -> dict:
    """Controls attached to every new card, derived from its monthly limit."""
    return {
        "daily_limit": monthly_limit / 5,
        "monthly_limit": monthly_limit,
        "per_transaction_limit": monthly_limit / 10,
        "online_enabled": True,
        "contactless_enabled": True,
        "atm_enabled": True,
        "international_enabled": False,
        "allowed_categories": list(DEFAULT_ALLOWED_CATEGORIES),
        "blocked_categories": [],
    }


def expiry_from(today: date, years: int = CARD_VALIDITY_YEARS) -> date:
    try:
        return today.replace(year=today.year + years)
    except ValueError:   # 29 Feb
        return today.replace(year=today.year + years, day=28)


class CardService:
    """Cards of the demo organization."""

    @staticmethod
    def list(db: Session) -> List[Card]:
        return (
            db.query(Card)
            .options(selectinload(Card.controls))
            .filter(Card.organization_id == settings.DEMO_ORG_ID)
            .order_by(Card.created_at.desc())
            .all()
        )

    @staticmethod
    def get(db: Session, card_id: str) -> Card:
        card = db.query(Card).filter(
            Card.id == card_id,
            Card.organization_id == settings.DEMO_ORG_ID,
        ).first()
        if not card:
            raise NotFoundError("Card not found")
        return card

    @staticmethod
    def transactions(db: Session, card_id: str) -> List[CardTransaction]:
        return (
            db.query(CardTransaction)
            .filter(CardTransaction.card_id == card_id)
            .order_by(CardTransaction.created_at.desc())
            .all()
        )

    @staticmethod
    def create(db: Session, card_type: str, cardholder_name: str, monthly_limit: float) -> Card:
        """Issue a card; virtual cards are active at once, physical ones are requested."""
        card = Card(
            organization_id=settings.DEMO_ORG_ID,
            account_id=settings.DEMO_ACCOUNT_ID,
            card_type=card_type,
            cardholder_name=cardholder_name,
            card_number_last4=str(random.randint(1000, 9999)),
            monthly_limit=monthly_limit,
            spending_limit=monthly_limit,
            expires_at=expiry_from(date.today()),
            status="active" if card_type == "virtual" else "requested",
        )
        card.controls = CardControl(**default_controls(monthly_limit))
        db.add(card)
        db.commit()
        db.refresh(card)

        logger.info("Issued %s card %s for %s", card_type, card.id, cardholder_name)
        return card

    @staticmethod
    def update_controls(db: Session, card_id: str, updates: dict) -> CardControl:
        card = CardService.get(db, card_id)
        if card.controls is None:
            raise NotFoundError("Card controls not found")
        for field, value in updates.items():
            setattr(card.controls, field, value)
        db.commit()
        db.refresh(card.controls)
        return card.controls

    @staticmethod
    def set_frozen(db: Session, card_id: str, freeze: bool) -> Card:
        card = CardService.get(db, card_id)
        if card.status in ("cancelled", "expired"):
            raise ConflictError(f"Card is {card.status}")
        card.status = "frozen" if freeze else "active"
        db.commit()
        db.refresh(card)
        return card
