"""
Payment Models — saved beneficiaries, outgoing payments and shareable
payment links.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Float, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from neobank.database import Base
from neobank.models.organization import new_id


class Beneficiary(Base):
    __tablename__ = "beneficiaries"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)

    name = Column(String(256), nullable=False)
    bank_name = Column(String(256))
    iban = Column(String(34))
    account_number = Column(String(64))
    swift_code = Column(String(11))
    address = Column(String(512))
    country = Column(String(64), default="UAE")
    currency = Column(String(3), default="AED")
    email = Column(String(256))
    phone = Column(String(32))
    vendor_type = Column(String(64))
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    payments = relationship("Payment", back_populates="beneficiary")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id"))
    beneficiary_id = Column(String(36), ForeignKey("beneficiaries.id"), index=True)

    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="AED")
    reference = Column(String(256))
    purpose = Column(String(256))
    status = Column(String(24), default="pending_approval")
    # Statuses: draft | pending_approval | scheduled | processing | completed | failed | cancelled
    created_by = Column(String(36))
    approved_by = Column(String(36))
    scheduled_date = Column(Date)
    processed_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    beneficiary = relationship("Beneficiary", back_populates="payments")

    @property
    def beneficiary_name(self):
        return self.beneficiary.name if self.beneficiary else None


class PaymentLink(Base):
    __tablename__ = "payment_links"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)

    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="AED")
    description = Column(String(512))
    link_code = Column(String(16), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime)
    is_paid = Column(Boolean, default=False)
    paid_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
