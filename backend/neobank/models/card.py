"""
Card Models — issued cards, their spending controls and card transactions.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Float, Boolean, JSON, ForeignKey
from sqlalchemy.orm import relationship

from neobank.database import Base
from neobank.models.organization import new_id


class Card(Base):
    __tablename__ = "cards"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id"))
    assigned_to = Column(String(36))

    card_type = Column(String(16), nullable=False)   # virtual | physical
    cardholder_name = Column(String(128), nullable=False)
    card_number_last4 = Column(String(4))
    monthly_limit = Column(Float)
    spending_limit = Column(Float)
    status = Column(String(16), default="requested")
    # Statuses: requested | active | frozen | cancelled | expired
    expires_at = Column(Date)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    controls = relationship("CardControl", back_populates="card", uselist=False, cascade="all, delete-orphan")
    transactions = relationship("CardTransaction", back_populates="card")


class CardControl(Base):
    __tablename__ = "card_controls"

    id = Column(String(36), primary_key=True, default=new_id)
    card_id = Column(String(36), ForeignKey("cards.id"), nullable=False, unique=True, index=True)

    daily_limit = Column(Float)
    monthly_limit = Column(Float)
    per_transaction_limit = Column(Float)
    online_enabled = Column(Boolean, default=True)
    contactless_enabled = Column(Boolean, default=True)
    atm_enabled = Column(Boolean, default=True)
    international_enabled = Column(Boolean, default=False)
    allowed_categories = Column(JSON, default=list)
    blocked_categories = Column(JSON, default=list)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    card = relationship("Card", back_populates="controls")


class CardTransaction(Base):
    __tablename__ = "card_transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    card_id = Column(String(36), ForeignKey("cards.id"), nullable=False, index=True)

    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="AED")
    merchant_name = Column(String(256))
    merchant_category = Column(String(64))
    status = Column(String(16), default="completed")
    declined_reason = Column(String(256))

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    card = relationship("Card", back_populates="transactions")
