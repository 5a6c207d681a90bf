"""
Invoice Models — outgoing invoices and their line items.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Float, Integer, ForeignKey
from sqlalchemy.orm import relationship

from neobank.database import Base
from neobank.models.organization import new_id


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)

    # Numbering is computed client-side from the max existing suffix (INV-<year>-<seq>);
    # no uniqueness constraint backs it.
    invoice_number = Column(String(32), nullable=False, index=True)

    client_name = Column(String(256), nullable=False)
    client_email = Column(String(256))
    client_address = Column(String(512))
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date)

    subtotal = Column(Float, default=0.0)
    tax_rate = Column(Float, default=0.0)
    tax_amount = Column(Float, default=0.0)
    total = Column(Float, default=0.0)
    currency = Column(String(3), default="AED")
    notes = Column(String(1024))

    status = Column(String(16), default="draft")
    # Statuses: draft | sent | viewed | paid | overdue | cancelled
    sent_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    line_items = relationship(
        "InvoiceLineItem", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoiceLineItem.position",
    )


class InvoiceLineItem(Base):
    __tablename__ = "invoice_line_items"

    id = Column(String(36), primary_key=True, default=new_id)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=False, index=True)
    position = Column(Integer, default=0)

    description = Column(String(512), nullable=False)
    quantity = Column(Float, default=1.0)
    unit_price = Column(Float, default=0.0)
    amount = Column(Float, default=0.0)

    created_at = Column(DateTime, default=datetime.utcnow)

    invoice = relationship("Invoice", back_populates="line_items")
