"""
Draft Store — local mirror of in-progress onboarding answers.

Each draft is one JSON file under DRAFT_DIR holding company, owner and
compliance answers plus uploaded documents (as data URLs) keyed by document
type. Writes replace the whole file, so concurrent readers see either the
old or the new draft.
"""
import logging
import os
import re
import tempfile
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from neobank.config import get_settings
from neobank.schemas.schemas import OnboardingDraft, DraftDocument
from neobank.services import progress as progress_rules
from neobank.services.errors import ConflictError, NotFoundError
from neobank.services.verification import check_document_transition, get_spec, verification_widget
from neobank.utils.validators import parse_data_url, upload_extension

logger = logging.getLogger(__name__)

_DRAFT_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def new_draft() -> OnboardingDraft:
    return OnboardingDraft(created_at=datetime.utcnow().isoformat())


class DraftStore:
    """File-backed onboarding drafts."""

    def __init__(self, directory: Optional[str] = None):
        self.directory = Path(directory or get_settings().DRAFT_DIR)

    def _path(self, draft_id: str) -> Path:
        if not _DRAFT_ID_RE.match(draft_id or ""):
            raise NotFoundError("Draft not found")
        return self.directory / f"{draft_id}.json"

    # ─── Persistence ─────────────────────────────────────────────────

    def has_data(self, draft_id: str) -> bool:
        try:
            return self._path(draft_id).exists()
        except NotFoundError:
            return False

    def load(self, draft_id: str) -> OnboardingDraft:
        """Read a draft; a corrupt file reads as a fresh default draft."""
        path = self._path(draft_id)
        if not path.exists():
            raise NotFoundError("Draft not found")
        try:
            return OnboardingDraft.model_validate_json(path.read_bytes().decode("utf-8"))
        except (UnicodeDecodeError, ValidationError):
            logger.warning("Draft %s is unreadable; starting over", draft_id)
            return new_draft()

    def save(self, draft_id: str, draft: OnboardingDraft) -> OnboardingDraft:
        path = self._path(draft_id)
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(draft.model_dump_json())
        os.replace(tmp, path)
        return draft

    def create(self) -> tuple[str, OnboardingDraft]:
        draft_id = uuid.uuid4().hex
        return draft_id, self.save(draft_id, new_draft())

    def clear(self, draft_id: str) -> None:
        path = self._path(draft_id)
        if path.exists():
            path.unlink()

    # ─── Mutations ───────────────────────────────────────────────────

    def _merge(self, draft_id: str, section: str, updates: dict) -> OnboardingDraft:
        draft = self.load(draft_id)
        current = getattr(draft, section)
        merged = current.model_copy(update=updates)
        # Re-validate so partial updates cannot smuggle in bad types
        setattr(draft, section, type(current).model_validate(merged.model_dump()))
        return self.save(draft_id, draft)

    def update_company(self, draft_id: str, updates: dict) -> OnboardingDraft:
        return self._merge(draft_id, "company", updates)

    def update_owner(self, draft_id: str, updates: dict) -> OnboardingDraft:
        return self._merge(draft_id, "owner", updates)

    def update_compliance(self, draft_id: str, updates: dict) -> OnboardingDraft:
        return self._merge(draft_id, "compliance", updates)

    def add_document(self, draft_id: str, doc_type: str, file_name: str, file_data: str) -> OnboardingDraft:
        """Attach a document as a data URL; replaces any earlier file of that type.

        Raises:
            ValueError: unknown type, disallowed file or malformed data URL.
            OverflowError: decoded file larger than MAX_UPLOAD_BYTES.
        """
        get_spec(doc_type)
        upload_extension(file_name)
        _, raw = parse_data_url(file_data)
        limit = get_settings().MAX_UPLOAD_BYTES
        if len(raw) > limit:
            raise OverflowError(f"File exceeds {limit // (1024 * 1024)} MB limit")

        draft = self.load(draft_id)
        draft.documents[doc_type] = DraftDocument(
            file_name=file_name,
            file_data=file_data,
            status="uploaded",
            uploaded_at=datetime.utcnow().isoformat(),
        )
        return self.save(draft_id, draft)

    def set_document_status(
        self, draft_id: str, doc_type: str, status: str, rejection_reason_code: Optional[str] = None,
    ) -> OnboardingDraft:
        """Record a validation outcome for a draft document.

        Raises:
            NotFoundError: no draft, or no document of that type.
            ConflictError: move not allowed from the current status.
            ValueError: rejected without a reason.
        """
        draft = self.load(draft_id)
        document = draft.documents.get(doc_type)
        if document is None:
            raise NotFoundError(f"No {doc_type} document in draft")
        check_document_transition(document.status, status, rejection_reason_code)
        draft.documents[doc_type] = document.model_copy(update={
            "status": status,
            "rejection_reason_code": rejection_reason_code if status == "rejected" else None,
        })
        return self.save(draft_id, draft)

    def mark_submitted(self, draft_id: str) -> OnboardingDraft:
        draft = self.load(draft_id)
        draft.submitted = True
        return self.save(draft_id, draft)

    def skip_documents(self, draft_id: str) -> OnboardingDraft:
        draft = self.load(draft_id)
        draft.documents_skipped = True
        return self.save(draft_id, draft)

    # ─── Derived state ───────────────────────────────────────────────

    @staticmethod
    def progress(draft: OnboardingDraft) -> int:
        return progress_rules.calculate_progress(
            draft.company, draft.owner, draft.compliance, draft.documents,
        )

    @staticmethod
    def verification(draft: OnboardingDraft) -> Optional[dict]:
        return verification_widget(
            draft.documents,
            company_confirmed=draft.company.confirmed_by_user,
            documents_skipped=draft.documents_skipped,
        )


def run_draft_demo_validation(
    directory: str, draft_id: str, doc_type: str, uploaded_at: str, step_seconds: float,
) -> None:
    """Background task: walk a draft upload through validating to accepted.

    Stops quietly if the draft was cleared, or the document replaced or
    reviewed in the meantime.
    """
    store = DraftStore(directory)
    for status in ("validating", "accepted"):
        time.sleep(step_seconds)
        try:
            document = store.load(draft_id).documents.get(doc_type)
            if document is None or document.uploaded_at != uploaded_at:
                logger.info("Demo validation of draft %s/%s stopped: file replaced", draft_id, doc_type)
                return
            store.set_document_status(draft_id, doc_type, status)
        except (NotFoundError, ConflictError) as exc:
            logger.info("Demo validation of draft %s/%s stopped: %s", draft_id, doc_type, exc)
            return
