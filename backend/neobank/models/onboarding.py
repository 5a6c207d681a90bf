"""
Onboarding Models — KYB case lifecycle and everything attached to a case.
Maps to the onboarding_* tables plus company_profiles / compliance_answers.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Integer, Boolean, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from neobank.database import Base
from neobank.models.organization import new_id


class OnboardingCase(Base):
    __tablename__ = "onboarding_cases"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=False, index=True)

    status = Column(String(16), default="draft")
    # Statuses: draft → submitted → in_review → needs_info → approved | not_approved
    progress_percent = Column(Integer, default=0)
    entity_type = Column(String(48), default="dubai_single_owner_uae_resident")
    sla_text = Column(String(256))
    risk_level = Column(String(8), default="low")    # low | medium | high

    created_at = Column(DateTime, default=datetime.utcnow)
    submitted_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company_profile = relationship("CompanyProfile", uselist=False, back_populates="case", cascade="all, delete-orphan")
    compliance = relationship("ComplianceAnswers", uselist=False, back_populates="case", cascade="all, delete-orphan")
    persons = relationship("OnboardingPerson", back_populates="case", cascade="all, delete-orphan",
                           order_by="OnboardingPerson.created_at")
    documents = relationship("OnboardingDocument", back_populates="case", cascade="all, delete-orphan")
    events = relationship("OnboardingEvent", back_populates="case", cascade="all, delete-orphan")


class CompanyProfile(Base):
    __tablename__ = "company_profiles"

    case_id = Column(String(36), ForeignKey("onboarding_cases.id"), primary_key=True)

    trade_license_number = Column(String(64))
    issuing_authority = Column(String(32))   # ded_dubai | dmcc | difc | jafza | dafza | tecom | dso | rakez | other
    company_legal_name = Column(String(256))
    legal_form = Column(String(64))
    registered_address = Column(String(512))
    business_activity = Column(String(512))
    operating_address = Column(String(512))
    website = Column(String(256))
    prefill_source = Column(String(16))      # registry_lookup | manual_entry
    confirmed_by_user = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    case = relationship("OnboardingCase", back_populates="company_profile")


class OnboardingPerson(Base):
    __tablename__ = "onboarding_persons"

    id = Column(String(36), primary_key=True, default=new_id)
    case_id = Column(String(36), ForeignKey("onboarding_cases.id"), nullable=False, index=True)

    full_name = Column(String(128))
    dob = Column(String(16))
    nationality = Column(String(64))
    roles = Column(JSON, default=list)       # owner | director | authorized_signatory
    ownership_percent = Column(Integer, default=100)
    email = Column(String(256))
    phone = Column(String(32))
    is_uae_resident = Column(Boolean, default=True)
    emirates_id_number = Column(String(18))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    case = relationship("OnboardingCase", back_populates="persons")


class ComplianceAnswers(Base):
    __tablename__ = "compliance_answers"

    case_id = Column(String(36), ForeignKey("onboarding_cases.id"), primary_key=True)

    account_use_purpose = Column(String(16))           # invoice_clients | pay_suppliers | both
    expected_monthly_volume_band = Column(String(16))  # 0_50k | 50_200k | 200k_plus
    customer_location = Column(String(16))             # uae | gcc | international
    cash_activity = Column(Boolean, nullable=True)
    pep_confirmation = Column(String(8))               # no | yes | unsure
    other_controllers = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    case = relationship("OnboardingCase", back_populates="compliance")


class OnboardingDocument(Base):
    __tablename__ = "onboarding_documents"
    __table_args__ = (UniqueConstraint("case_id", "document_type", name="uq_case_document_type"),)

    id = Column(String(36), primary_key=True, default=new_id)
    case_id = Column(String(36), ForeignKey("onboarding_cases.id"), nullable=False, index=True)
    owner_person_id = Column(String(36), ForeignKey("onboarding_persons.id"), nullable=True)

    document_type = Column(String(24), nullable=False)
    status = Column(String(16), default="missing")
    # Statuses: missing → uploaded → validating → accepted | rejected
    file_url = Column(String(1024))
    file_name = Column(String(256))
    checksum = Column(String(64))            # SHA-256 of the stored blob
    expiry_date = Column(Date, nullable=True)
    validation_notes = Column(String(1024))
    rejection_reason_code = Column(String(16))   # expired | unreadable | mismatch_name | missing_pages | other

    uploaded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    case = relationship("OnboardingCase", back_populates="documents")


class OnboardingEvent(Base):
    """Timeline entry for a case; written by the user or by the system."""
    __tablename__ = "onboarding_events"

    id = Column(String(36), primary_key=True, default=new_id)
    case_id = Column(String(36), ForeignKey("onboarding_cases.id"), nullable=False, index=True)

    event_type = Column(String(48), nullable=False)
    # Events: case_created, company_confirmed, document_uploaded, document_reviewed,
    #         case_submitted, case_in_review, case_needs_info, case_approved, case_not_approved
    actor = Column(String(8), nullable=False, default="user")   # user | system
    event_metadata = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    case = relationship("OnboardingCase", back_populates="events")
