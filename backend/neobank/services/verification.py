"""
Document Verification — catalogue of KYB documents and the status summary
rendered by the documents checklist.

Status transitions past "uploaded" are driven by a reviewer or an automated
check; both the persisted case and the local draft store apply the same
transition table through check_document_transition.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from neobank.services.errors import ConflictError


@dataclass(frozen=True)
class DocumentSpec:
    type: str
    label: str
    description: str
    required: bool
    section: str      # company | owner | optional


DOCUMENT_CATALOGUE: tuple[DocumentSpec, ...] = (
    DocumentSpec("trade_license", "Trade License", "Your valid Dubai trade license", True, "company"),
    DocumentSpec("moa_aoa", "MOA / AOA", "Memorandum or Articles of Association", True, "company"),
    DocumentSpec("emirates_id_front", "Emirates ID (Front)", "Front side of your Emirates ID", True, "owner"),
    DocumentSpec("emirates_id_back", "Emirates ID (Back)", "Back side of your Emirates ID", True, "owner"),
    DocumentSpec("passport", "Passport", "Data page of your valid passport", True, "owner"),
    DocumentSpec("proof_of_address", "Proof of Address",
                 "Utility bill or bank statement (last 3 months)", False, "optional"),
)

DOC_TYPES = tuple(spec.type for spec in DOCUMENT_CATALOGUE)
REQUIRED_DOC_TYPES = tuple(spec.type for spec in DOCUMENT_CATALOGUE if spec.required)
SECTIONS = ("company", "owner", "optional")

STATUS_LABELS = {
    "missing": "Missing",
    "uploaded": "Uploaded",
    "validating": "Validating",
    "accepted": "Accepted",
    "rejected": "Rejected",
}


def get_spec(doc_type: str) -> DocumentSpec:
    for spec in DOCUMENT_CATALOGUE:
        if spec.type == doc_type:
            return spec
    raise ValueError(f"Unknown document type '{doc_type}'. Expected one of: {', '.join(DOC_TYPES)}")


# Review moves; a fresh upload always resets to "uploaded".
DOCUMENT_TRANSITIONS: Dict[str, tuple] = {
    "uploaded": ("validating", "accepted", "rejected"),
    "validating": ("accepted", "rejected"),
    "accepted": ("rejected",),
    "rejected": (),
    "missing": (),
}


def check_document_transition(current: str, status: str, rejection_reason_code: Optional[str] = None) -> None:
    """Raises ConflictError for a disallowed move, ValueError for a rejection without a reason."""
    if status not in DOCUMENT_TRANSITIONS.get(current, ()):
        raise ConflictError(f"Cannot move document from {current} to {status}")
    if status == "rejected" and not rejection_reason_code:
        raise ValueError("A rejection reason is required")


def _field(record: Any, name: str) -> Any:
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def document_status(documents: Mapping[str, Any], doc_type: str) -> str:
    """Status of one document type; absent records count as missing."""
    status = _field(documents.get(doc_type), "status")
    return status or "missing"


def all_required_accepted(documents: Mapping[str, Any]) -> bool:
    """True iff every required document type is accepted."""
    return all(document_status(documents, t) == "accepted" for t in REQUIRED_DOC_TYPES)


def index_by_type(records: List[Any]) -> Dict[str, Any]:
    """Map persisted document rows by their document_type."""
    return {_field(r, "document_type"): r for r in records}


def summarize_documents(documents: Mapping[str, Any]) -> dict:
    """Build the per-section checklist with status badges.

    Args:
        documents: mapping of document type to an upload record. Records may be
            ORM rows or plain dicts (the draft store); only ``status``,
            ``file_name`` and ``uploaded_at`` are read.

    Returns:
        dict with ``sections`` (company/owner/optional rows), counts and the
        overall ``all_required_accepted`` flag.
    """
    sections: Dict[str, List[dict]] = {name: [] for name in SECTIONS}
    for spec in DOCUMENT_CATALOGUE:
        record = documents.get(spec.type)
        status = document_status(documents, spec.type)
        sections[spec.section].append({
            "type": spec.type,
            "label": spec.label,
            "description": spec.description,
            "required": spec.required,
            "status": status,
            "status_label": STATUS_LABELS[status],
            "file_name": _field(record, "file_name"),
            "uploaded_at": _field(record, "uploaded_at"),
            "rejection_reason_code": _field(record, "rejection_reason_code"),
        })

    accepted = sum(1 for t in REQUIRED_DOC_TYPES if document_status(documents, t) == "accepted")
    return {
        "sections": sections,
        "required_count": len(REQUIRED_DOC_TYPES),
        "accepted_count": accepted,
        "all_required_accepted": accepted == len(REQUIRED_DOC_TYPES),
    }


def verification_widget(
    documents: Mapping[str, Any],
    company_confirmed: bool,
    documents_skipped: bool = False,
) -> Optional[dict]:
    """Checklist shown under settings, or None when onboarding never started."""
    if not documents_skipped and len(documents) == 0 and not company_confirmed:
        return None
    return summarize_documents(documents)
