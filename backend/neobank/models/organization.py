"""
Organization & Account Models — the business and its bank accounts.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Float, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from neobank.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(256), nullable=False)
    owner_id = Column(String(36))

    legal_form = Column(String(32))      # fz_llc | llc | sole_establishment | branch | free_zone | other
    jurisdiction = Column(String(64))
    trade_license_number = Column(String(64))
    business_activity = Column(String(512))
    registered_address = Column(String(512))
    website = Column(String(256))
    expected_monthly_volume = Column(Float)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    accounts = relationship("Account", back_populates="organization")


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)

    account_name = Column(String(128), nullable=False)
    account_number = Column(String(34), nullable=False)
    iban = Column(String(34))
    balance = Column(Float, default=0.0)
    available_balance = Column(Float, default=0.0)
    currency = Column(String(3), default="AED")
    status = Column(String(16), default="active")
    is_primary = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    organization = relationship("Organization", back_populates="accounts")

    @property
    def organization_name(self):
        return self.organization.name if self.organization else None
