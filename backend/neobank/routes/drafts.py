"""
Draft Routes — local, unauthenticated onboarding drafts.

Answers live in a JSON file per draft id instead of the database, so the
wizard can be filled in before a case exists.
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile

from neobank.config import get_settings
from neobank.schemas.schemas import (
    DocType, DocumentReviewRequest, DraftCompany, DraftCompliance, DraftDocumentRequest, DraftOwner,
    DraftResponse, OnboardingDraft, VerificationSummary,
)
from neobank.services.draft_store import DraftStore, run_draft_demo_validation
from neobank.services.verification import get_spec
from neobank.utils.rate_limiter import rate_limit
from neobank.utils.validators import to_data_url, upload_extension, ALLOWED_UPLOAD_TYPES

router = APIRouter(prefix="/api/drafts", tags=["Drafts"])


def get_store() -> DraftStore:
    return DraftStore(get_settings().DRAFT_DIR)


def _response(draft_id: str, draft: OnboardingDraft) -> DraftResponse:
    return DraftResponse(draft_id=draft_id, data=draft, progress=DraftStore.progress(draft))


def _schedule_validation(
    background_tasks: BackgroundTasks, store: DraftStore, draft_id: str, doc_type: str, draft: OnboardingDraft,
) -> None:
    settings = get_settings()
    if settings.DEMO_AUTO_VALIDATE:
        background_tasks.add_task(
            run_draft_demo_validation, str(store.directory), draft_id, doc_type,
            draft.documents[doc_type].uploaded_at, settings.VALIDATION_STEP_SECONDS,
        )


@router.post("", response_model=DraftResponse, status_code=201)
def create_draft(store: DraftStore = Depends(get_store)):
    draft_id, draft = store.create()
    return _response(draft_id, draft)


@router.get("/{draft_id}", response_model=DraftResponse)
def get_draft(draft_id: str, store: DraftStore = Depends(get_store)):
    return _response(draft_id, store.load(draft_id))


@router.get("/{draft_id}/exists")
def draft_exists(draft_id: str, store: DraftStore = Depends(get_store)):
    return {"exists": store.has_data(draft_id)}


@router.delete("/{draft_id}", status_code=204)
def clear_draft(draft_id: str, store: DraftStore = Depends(get_store)):
    store.clear(draft_id)


# ─── Sections ────────────────────────────────────────────────────────

@router.patch("/{draft_id}/company", response_model=DraftResponse)
def update_company(draft_id: str, payload: DraftCompany, store: DraftStore = Depends(get_store)):
    try:
        draft = store.update_company(draft_id, payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Failed to save company details: {e}")
    return _response(draft_id, draft)


@router.patch("/{draft_id}/owner", response_model=DraftResponse)
def update_owner(draft_id: str, payload: DraftOwner, store: DraftStore = Depends(get_store)):
    try:
        draft = store.update_owner(draft_id, payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Failed to save owner details: {e}")
    return _response(draft_id, draft)


@router.patch("/{draft_id}/compliance", response_model=DraftResponse)
def update_compliance(draft_id: str, payload: DraftCompliance, store: DraftStore = Depends(get_store)):
    try:
        draft = store.update_compliance(draft_id, payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Failed to save compliance answers: {e}")
    return _response(draft_id, draft)


# ─── Documents ───────────────────────────────────────────────────────

@router.post("/{draft_id}/documents/{doc_type}", response_model=DraftResponse)
def add_document(
    draft_id: str,
    doc_type: DocType,
    payload: DraftDocumentRequest,
    background_tasks: BackgroundTasks,
    store: DraftStore = Depends(get_store),
):
    """Attach a document already encoded as a data URL."""
    try:
        draft = store.add_document(draft_id, doc_type, payload.file_name, payload.file_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Failed to upload document: {e}")
    _schedule_validation(background_tasks, store, draft_id, doc_type, draft)
    return _response(draft_id, draft)


@router.post("/{draft_id}/documents/{doc_type}/upload", response_model=DraftResponse)
async def upload_document(
    draft_id: str,
    doc_type: DocType,
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    store: DraftStore = Depends(get_store),
    _throttle: bool = Depends(rate_limit(requests=20, window=60, scope="draft-documents")),
):
    """Multipart variant; the file is encoded into a data URL before storing."""
    settings = get_settings()
    contents = await file.read()
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB limit",
        )
    try:
        get_spec(doc_type)
        mime = ALLOWED_UPLOAD_TYPES[upload_extension(file.filename)]
        draft = store.add_document(draft_id, doc_type, file.filename, to_data_url(contents, mime))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Failed to upload document: {e}")
    _schedule_validation(background_tasks, store, draft_id, doc_type, draft)
    return _response(draft_id, draft)


@router.post("/{draft_id}/documents/{doc_type}/status", response_model=DraftResponse)
def set_document_status(
    draft_id: str,
    doc_type: DocType,
    payload: DocumentReviewRequest,
    store: DraftStore = Depends(get_store),
):
    """Record a validation outcome for a draft document."""
    try:
        draft = store.set_document_status(draft_id, doc_type, payload.status, payload.rejection_reason_code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Failed to review document: {e}")
    return _response(draft_id, draft)


# ─── Lifecycle ───────────────────────────────────────────────────────

@router.post("/{draft_id}/submit", response_model=DraftResponse)
def submit_draft(draft_id: str, store: DraftStore = Depends(get_store)):
    return _response(draft_id, store.mark_submitted(draft_id))


@router.post("/{draft_id}/skip-documents", response_model=DraftResponse)
def skip_documents(draft_id: str, store: DraftStore = Depends(get_store)):
    """Continue without documents; they can be uploaded later from settings."""
    return _response(draft_id, store.skip_documents(draft_id))


@router.get("/{draft_id}/progress")
def get_progress(draft_id: str, store: DraftStore = Depends(get_store)):
    return {"draft_id": draft_id, "progress": DraftStore.progress(store.load(draft_id))}


@router.get("/{draft_id}/verification", response_model=Optional[VerificationSummary])
def get_verification(draft_id: str, store: DraftStore = Depends(get_store)):
    """Document checklist for settings; null until onboarding has started."""
    return DraftStore.verification(store.load(draft_id))
