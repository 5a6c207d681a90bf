"""
Onboarding Routes — KYB case, company, ownership, compliance, documents,
timeline and the submission/review lifecycle.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from neobank.config import get_settings
from neobank.database import get_db
from neobank.schemas.schemas import (
    CaseOverview, CaseResponse, CaseUpdateRequest, CaseTransitionRequest,
    CompanyProfileResponse, CompanyProfileUpdate, RegistryLookupRequest, RegistryLookupResponse,
    PersonPayload, PersonResponse, ComplianceResponse, ComplianceUpdate,
    DocumentResponse, DocumentsResponse, DocumentReviewRequest, DocType,
    EventResponse, ProgressResponse,
)
from neobank.services.event_service import EventService
from neobank.services.onboarding_service import OnboardingService, run_demo_validation
from neobank.services.registry_service import RegistryService
from neobank.services.verification import index_by_type, summarize_documents
from neobank.routes.errors import mutation_errors
from neobank.utils.rate_limiter import rate_limit

settings = get_settings()
router = APIRouter(prefix="/api/onboarding", tags=["Onboarding"])


# ─── Case ────────────────────────────────────────────────────────────

@router.post("/cases", response_model=CaseOverview, status_code=201)
def create_case(db: Session = Depends(get_db)):
    """Start a new application with empty company and compliance sections."""
    with mutation_errors(db, "start application"):
        case = OnboardingService.create_case(db, settings.DEMO_USER_ID)
    return OnboardingService.overview(db, case)


@router.get("/cases/latest", response_model=CaseOverview)
def get_latest_case(db: Session = Depends(get_db)):
    """Most recent case of the current user; drives the resume redirect."""
    case = OnboardingService.latest_case(db, settings.DEMO_USER_ID)
    if not case:
        raise HTTPException(status_code=404, detail="No onboarding case yet")
    return OnboardingService.overview(db, case)


@router.get("/cases/{case_id}", response_model=CaseOverview)
def get_case(case_id: str, db: Session = Depends(get_db)):
    case = OnboardingService.get_case(db, case_id)
    return OnboardingService.overview(db, case)


@router.patch("/cases/{case_id}", response_model=CaseResponse)
def update_case(case_id: str, payload: CaseUpdateRequest, db: Session = Depends(get_db)):
    with mutation_errors(db, "update application"):
        return OnboardingService.update_case(db, case_id, payload.model_dump(exclude_unset=True))


@router.get("/cases/{case_id}/progress", response_model=ProgressResponse)
def get_progress(case_id: str, db: Session = Depends(get_db)):
    case = OnboardingService.get_case(db, case_id)
    return ProgressResponse(
        case_id=case.id,
        progress=OnboardingService.calculate_progress(case),
        checks=OnboardingService.checks(case),
    )


@router.post("/cases/{case_id}/submit", response_model=CaseOverview)
def submit_case(case_id: str, db: Session = Depends(get_db)):
    """Submit a complete application for review."""
    with mutation_errors(db, "submit application"):
        case = OnboardingService.submit(db, case_id)
    return OnboardingService.overview(db, case)


@router.post("/cases/{case_id}/transition", response_model=CaseResponse)
def transition_case(case_id: str, payload: CaseTransitionRequest, db: Session = Depends(get_db)):
    """Review-side status change (in_review, needs_info, approved, not_approved)."""
    with mutation_errors(db, "update application status"):
        return OnboardingService.transition(db, case_id, payload.status, payload.note)


@router.get("/cases/{case_id}/events", response_model=list[EventResponse])
def list_events(case_id: str, db: Session = Depends(get_db)):
    OnboardingService.get_case(db, case_id)
    return EventService.get_timeline(db, case_id)


# ─── Company ─────────────────────────────────────────────────────────

@router.get("/cases/{case_id}/company", response_model=CompanyProfileResponse)
def get_company(case_id: str, db: Session = Depends(get_db)):
    return OnboardingService.get_case(db, case_id).company_profile


@router.patch("/cases/{case_id}/company", response_model=CompanyProfileResponse)
def update_company(case_id: str, payload: CompanyProfileUpdate, db: Session = Depends(get_db)):
    with mutation_errors(db, "save company details"):
        return OnboardingService.update_company(db, case_id, payload.model_dump(exclude_unset=True))


@router.post("/registry/lookup", response_model=RegistryLookupResponse)
def registry_lookup(payload: RegistryLookupRequest):
    """Prefill company details from the trade license registry."""
    try:
        data = RegistryService.lookup(payload.issuing_authority, payload.trade_license_number)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if data is None:
        return RegistryLookupResponse(
            found=False,
            prefill_source="manual_entry",
            message="Company not found in registry. Please enter details manually.",
        )
    return RegistryLookupResponse(
        found=True,
        prefill_source="registry_lookup",
        data=data,
        message="Company details retrieved successfully",
    )


# ─── Ownership ───────────────────────────────────────────────────────

@router.get("/cases/{case_id}/persons", response_model=list[PersonResponse])
def list_persons(case_id: str, db: Session = Depends(get_db)):
    return OnboardingService.get_case(db, case_id).persons


@router.put("/cases/{case_id}/persons", response_model=PersonResponse)
def upsert_person(case_id: str, payload: PersonPayload, db: Session = Depends(get_db)):
    """Insert a person, or update it when the payload carries an id."""
    with mutation_errors(db, "save owner details"):
        return OnboardingService.upsert_person(db, case_id, payload.model_dump())


# ─── Compliance ──────────────────────────────────────────────────────

@router.get("/cases/{case_id}/compliance", response_model=ComplianceResponse)
def get_compliance(case_id: str, db: Session = Depends(get_db)):
    return OnboardingService.get_case(db, case_id).compliance


@router.patch("/cases/{case_id}/compliance", response_model=ComplianceResponse)
def update_compliance(case_id: str, payload: ComplianceUpdate, db: Session = Depends(get_db)):
    with mutation_errors(db, "save compliance answers"):
        return OnboardingService.update_compliance(db, case_id, payload.model_dump(exclude_unset=True))


# ─── Documents ───────────────────────────────────────────────────────

@router.get("/cases/{case_id}/documents", response_model=DocumentsResponse)
def list_documents(case_id: str, db: Session = Depends(get_db)):
    """Uploaded documents plus the required-documents checklist."""
    case = OnboardingService.get_case(db, case_id)
    return DocumentsResponse(
        documents=case.documents,
        verification=summarize_documents(index_by_type(case.documents)),
    )


@router.post("/cases/{case_id}/documents/{doc_type}", response_model=DocumentResponse)
async def upload_document(
    case_id: str,
    doc_type: DocType,
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    _throttle: bool = Depends(rate_limit(requests=20, window=60, scope="documents")),
):
    """Upload (or replace) one KYB document. Accepts images and PDF."""
    contents = await file.read()
    with mutation_errors(db, "upload document"):
        document = OnboardingService.upload_document(
            db, case_id, doc_type, file.filename, contents, settings.DEMO_USER_ID,
        )

    if settings.DEMO_AUTO_VALIDATE:
        background_tasks.add_task(
            run_demo_validation, case_id, document.id, settings.VALIDATION_STEP_SECONDS,
        )
    return document


@router.post("/cases/{case_id}/documents/{document_id}/review", response_model=DocumentResponse)
def review_document(
    case_id: str,
    document_id: str,
    payload: DocumentReviewRequest,
    db: Session = Depends(get_db),
):
    """Record the outcome of a document check (validating, accepted, rejected)."""
    with mutation_errors(db, "review document"):
        return OnboardingService.review_document(
            db, case_id, document_id,
            status=payload.status,
            rejection_reason_code=payload.rejection_reason_code,
            validation_notes=payload.validation_notes,
            expiry_date=payload.expiry_date,
        )
