"""
Expense Model — employee expenses with an optional approval step.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Float, Boolean, ForeignKey

from neobank.database import Base
from neobank.models.organization import new_id


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)

    description = Column(String(512))
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="AED")
    expense_date = Column(Date, nullable=False)
    category = Column(String(64))
    vendor = Column(String(256))
    receipt_url = Column(String(1024))

    needs_approval = Column(Boolean, default=False)
    status = Column(String(16), default="pending")   # pending | approved | rejected | reimbursed
    approved_at = Column(DateTime, nullable=True)
    approved_by = Column(String(36))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
