"""
Transaction Model — account ledger movements (credits and debits).
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Float, JSON, ForeignKey

from neobank.database import Base
from neobank.models.organization import new_id


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)

    type = Column(String(8), nullable=False)         # credit | debit
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="AED")
    status = Column(String(16), default="completed")
    # Statuses: pending | processing | completed | failed | cancelled

    description = Column(String(512))
    counterparty_name = Column(String(256))
    counterparty_account = Column(String(64))
    reference = Column(String(64))
    category = Column(String(64))
    extra = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
