"""
Onboarding Service — KYB case lifecycle, sections and document uploads.

A case is always created together with its company profile and compliance
answers. Review outcomes (document validation, case decisions) arrive through
the review/transition operations; nothing here decides them.
"""
import logging
import time
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.orm import Session

from neobank.config import get_settings
from neobank.database import SessionLocal
from neobank.models.onboarding import (
    OnboardingCase, CompanyProfile, OnboardingPerson, ComplianceAnswers, OnboardingDocument,
)
from neobank.services import progress as progress_rules
from neobank.services.errors import NotFoundError, ConflictError
from neobank.services.event_service import EventService
from neobank.services.risk_engine import RiskEngine
from neobank.services.storage_service import StorageService, DOCUMENTS_BUCKET
from neobank.services.verification import check_document_transition, get_spec, index_by_type
from neobank.utils.hashing import hash_bytes
from neobank.utils.validators import (
    upload_extension, validate_emirates_id, validate_email, validate_trade_license,
)

settings = get_settings()
logger = logging.getLogger(__name__)

# Allowed lifecycle moves. "submitted" is only reachable through submit().
CASE_TRANSITIONS: Dict[str, tuple] = {
    "draft": ("submitted",),
    "submitted": ("in_review",),
    "in_review": ("needs_info", "approved", "not_approved"),
    "needs_info": ("submitted", "in_review"),
    "approved": (),
    "not_approved": (),
}
SUBMITTABLE_STATUSES = ("draft", "needs_info")


class OnboardingService:
    """Reads and mutations behind the onboarding hub."""

    # ─── Case ────────────────────────────────────────────────────────

    @staticmethod
    def get_case(db: Session, case_id: str) -> OnboardingCase:
        case = db.query(OnboardingCase).filter(OnboardingCase.id == case_id).first()
        if not case:
            raise NotFoundError("Onboarding case not found")
        return case

    @staticmethod
    def latest_case(db: Session, user_id: str) -> Optional[OnboardingCase]:
        return (
            db.query(OnboardingCase)
            .filter(OnboardingCase.user_id == user_id)
            .order_by(OnboardingCase.created_at.desc())
            .first()
        )

    @staticmethod
    def create_case(db: Session, user_id: str) -> OnboardingCase:
        """Create a draft case with its company profile and compliance answers."""
        case = OnboardingCase(user_id=user_id, status="draft", sla_text=settings.ONBOARDING_SLA_TEXT)
        case.company_profile = CompanyProfile()
        case.compliance = ComplianceAnswers()
        db.add(case)
        db.flush()

        EventService.log(db, case.id, "case_created", actor="user", commit=False)
        db.commit()
        db.refresh(case)
        return case

    @staticmethod
    def update_case(db: Session, case_id: str, updates: dict) -> OnboardingCase:
        case = OnboardingService.get_case(db, case_id)
        for field, value in updates.items():
            setattr(case, field, value)
        db.commit()
        db.refresh(case)
        return case

    @staticmethod
    def overview(db: Session, case: OnboardingCase) -> dict:
        """Progress, section checks and the hub redirect for a case."""
        checks = OnboardingService.checks(case)
        progress = OnboardingService.refresh_progress(db, case)
        return {
            "case": case,
            "progress": progress,
            "checks": checks,
            "next_route": progress_rules.next_route(case.id, case.status, checks),
        }

    @staticmethod
    def _sections(case: OnboardingCase):
        owner = case.persons[0] if case.persons else None
        return case.company_profile, owner, case.compliance, index_by_type(case.documents)

    @staticmethod
    def checks(case: OnboardingCase) -> dict:
        return progress_rules.section_checks(*OnboardingService._sections(case))

    @staticmethod
    def calculate_progress(case: OnboardingCase) -> int:
        return progress_rules.calculate_progress(*OnboardingService._sections(case))

    @staticmethod
    def refresh_progress(db: Session, case: OnboardingCase) -> int:
        """Recompute progress for a draft and persist it if it moved."""
        progress = OnboardingService.calculate_progress(case)
        if case.status == "draft" and case.progress_percent != progress:
            case.progress_percent = progress
            db.commit()
            db.refresh(case)
        return progress

    # ─── Sections ────────────────────────────────────────────────────

    @staticmethod
    def _require_editable(case: OnboardingCase):
        if case.status not in SUBMITTABLE_STATUSES:
            raise ConflictError(f"Case is {case.status} and can no longer be edited")

    @staticmethod
    def update_company(db: Session, case_id: str, updates: dict) -> CompanyProfile:
        case = OnboardingService.get_case(db, case_id)
        OnboardingService._require_editable(case)
        license_number = updates.get("trade_license_number")
        if license_number and not validate_trade_license(license_number):
            raise ValueError("Trade license number looks invalid")

        profile = case.company_profile
        was_confirmed = bool(profile.confirmed_by_user)
        for field, value in updates.items():
            setattr(profile, field, value)
        db.flush()

        if profile.confirmed_by_user and not was_confirmed:
            EventService.log(
                db, case.id, "company_confirmed", actor="user",
                metadata={"prefill_source": profile.prefill_source}, commit=False,
            )
        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def upsert_person(db: Session, case_id: str, payload: dict) -> OnboardingPerson:
        """Update the person with the given id, or add a new one to the case."""
        case = OnboardingService.get_case(db, case_id)
        OnboardingService._require_editable(case)

        if payload.get("emirates_id_number") and not validate_emirates_id(payload["emirates_id_number"]):
            raise ValueError("Emirates ID must look like 784-XXXX-XXXXXXX-X")
        if payload.get("email") and not validate_email(payload["email"]):
            raise ValueError("Invalid email address")

        person_id = payload.pop("id", None)
        if person_id:
            person = db.query(OnboardingPerson).filter(
                OnboardingPerson.id == person_id,
                OnboardingPerson.case_id == case_id,
            ).first()
            if not person:
                raise NotFoundError("Person not found")
            for field, value in payload.items():
                setattr(person, field, value)
        else:
            person = OnboardingPerson(case_id=case_id, **payload)
            db.add(person)

        db.commit()
        db.refresh(person)
        return person

    @staticmethod
    def update_compliance(db: Session, case_id: str, updates: dict) -> ComplianceAnswers:
        case = OnboardingService.get_case(db, case_id)
        OnboardingService._require_editable(case)
        answers = case.compliance
        for field, value in updates.items():
            setattr(answers, field, value)
        db.commit()
        db.refresh(answers)
        return answers

    # ─── Documents ───────────────────────────────────────────────────

    @staticmethod
    def upload_document(
        db: Session,
        case_id: str,
        doc_type: str,
        file_name: str,
        contents: bytes,
        user_id: str,
    ) -> OnboardingDocument:
        """Store the file and move the document of that type to "uploaded".

        Raises:
            NotFoundError: unknown case.
            ConflictError: case no longer editable.
            ValueError: unknown document type, disallowed file or empty/oversized file.
        """
        get_spec(doc_type)
        case = OnboardingService.get_case(db, case_id)
        OnboardingService._require_editable(case)

        ext = upload_extension(file_name)
        if not contents:
            raise ValueError("Empty file uploaded")
        if len(contents) > settings.MAX_UPLOAD_BYTES:
            raise OverflowError(f"File exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB limit")

        object_path = f"{user_id}/{case_id}/{doc_type}_{int(time.time() * 1000)}.{ext}"
        StorageService.upload(DOCUMENTS_BUCKET, object_path, contents)

        document = db.query(OnboardingDocument).filter(
            OnboardingDocument.case_id == case_id,
            OnboardingDocument.document_type == doc_type,
        ).first()
        if document is None:
            document = OnboardingDocument(case_id=case_id, document_type=doc_type)
            db.add(document)

        document.status = "uploaded"
        document.file_url = StorageService.public_url(DOCUMENTS_BUCKET, object_path)
        document.file_name = file_name
        document.checksum = hash_bytes(contents)
        document.uploaded_at = datetime.utcnow()
        document.rejection_reason_code = None
        document.validation_notes = None
        db.flush()

        EventService.log(
            db, case_id, "document_uploaded", actor="user",
            metadata={"document_type": doc_type, "file_name": file_name}, commit=False,
        )
        db.commit()
        db.refresh(document)
        return document

    @staticmethod
    def review_document(
        db: Session,
        case_id: str,
        document_id: str,
        status: str,
        rejection_reason_code: Optional[str] = None,
        validation_notes: Optional[str] = None,
        expiry_date=None,
    ) -> OnboardingDocument:
        """Apply a reviewer/automated-check outcome to an uploaded document."""
        document = db.query(OnboardingDocument).filter(
            OnboardingDocument.id == document_id,
            OnboardingDocument.case_id == case_id,
        ).first()
        if not document:
            raise NotFoundError("Document not found")

        check_document_transition(document.status, status, rejection_reason_code)

        document.status = status
        document.rejection_reason_code = rejection_reason_code if status == "rejected" else None
        if validation_notes is not None:
            document.validation_notes = validation_notes
        if expiry_date is not None:
            document.expiry_date = expiry_date
        db.flush()

        EventService.log(
            db, case_id, "document_reviewed", actor="system",
            metadata={
                "document_type": document.document_type,
                "status": status,
                "reason": document.rejection_reason_code,
            },
            commit=False,
        )
        db.commit()
        db.refresh(document)
        return document

    # ─── Lifecycle ───────────────────────────────────────────────────

    @staticmethod
    def submit(db: Session, case_id: str) -> OnboardingCase:
        """Submit a complete case for review.

        Raises:
            ConflictError: case not in draft/needs_info, or a section is incomplete.
        """
        case = OnboardingService.get_case(db, case_id)
        if case.status not in SUBMITTABLE_STATUSES:
            raise ConflictError(f"Case is already {case.status}")

        checks = OnboardingService.checks(case)
        if not checks["can_submit"]:
            missing = [name for name, done in checks.items() if name != "can_submit" and not done]
            raise ConflictError(f"Please complete: {', '.join(missing)}")

        risk_level, reasons = RiskEngine.evaluate(case.compliance)
        case.status = "submitted"
        case.submitted_at = datetime.utcnow()
        case.progress_percent = OnboardingService.calculate_progress(case)
        case.risk_level = risk_level
        if RiskEngine.requires_edd(risk_level):
            case.sla_text = "Enhanced due diligence required; review may take up to 5 business days"

        EventService.log(
            db, case.id, "case_submitted", actor="user",
            metadata={"risk_level": risk_level, "reasons": reasons}, commit=False,
        )
        db.commit()
        db.refresh(case)
        logger.info("Case %s submitted (risk=%s)", case.id, risk_level)
        return case

    @staticmethod
    def transition(db: Session, case_id: str, status: str, note: Optional[str] = None) -> OnboardingCase:
        """Move a case along the review lifecycle on behalf of the system."""
        case = OnboardingService.get_case(db, case_id)
        if status == "submitted" or status not in CASE_TRANSITIONS.get(case.status, ()):
            raise ConflictError(f"Cannot move case from {case.status} to {status}")

        case.status = status
        EventService.log(
            db, case.id, f"case_{status}", actor="system",
            metadata={"note": note} if note else {}, commit=False,
        )
        db.commit()
        db.refresh(case)
        return case


def run_demo_validation(case_id: str, document_id: str, step_seconds: float) -> None:
    """Background task: walk a fresh upload through validating to accepted.

    Stands in for the automated document check in demo deployments. Stops
    quietly if the document was re-uploaded or reviewed in the meantime.
    """
    for status in ("validating", "accepted"):
        time.sleep(step_seconds)
        db = SessionLocal()
        try:
            OnboardingService.review_document(db, case_id, document_id, status)
        except (NotFoundError, ConflictError) as exc:
            logger.info("Demo validation of %s stopped: %s", document_id, exc)
            return
        finally:
            db.close()
