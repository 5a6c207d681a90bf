"""
Onboarding Progress — completion percentage and section checks shared by the
persisted case and the local draft store.

Weights: company confirmed 20, owner complete 20, compliance complete 20,
and 40 spread evenly over the required documents once accepted.
Owner completeness requires ownership_percent == 100, for drafts as well as cases.
"""
from typing import Any, Mapping, Optional

from neobank.services.verification import REQUIRED_DOC_TYPES, all_required_accepted, document_status

SECTION_WEIGHT = 20
DOCUMENTS_WEIGHT = 40

# Tab order of the onboarding hub
TABS = ("company", "ownership", "compliance", "documents", "review")


def _get(record: Any, name: str) -> Any:
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def company_complete(company: Any) -> bool:
    return bool(_get(company, "confirmed_by_user"))


def owner_complete(owner: Any) -> bool:
    return bool(
        _get(owner, "full_name")
        and _get(owner, "dob")
        and _get(owner, "nationality")
        and _get(owner, "ownership_percent") == 100
    )


def compliance_complete(compliance: Any) -> bool:
    return bool(
        _get(compliance, "account_use_purpose")
        and _get(compliance, "expected_monthly_volume_band")
        and _get(compliance, "customer_location")
        and _get(compliance, "pep_confirmation")
    )


def calculate_progress(company: Any, owner: Any, compliance: Any, documents: Mapping[str, Any]) -> int:
    """Completion percentage, 0-100."""
    progress = 0.0
    if company_complete(company):
        progress += SECTION_WEIGHT
    if owner_complete(owner):
        progress += SECTION_WEIGHT
    if compliance_complete(compliance):
        progress += SECTION_WEIGHT

    per_doc = DOCUMENTS_WEIGHT / len(REQUIRED_DOC_TYPES)
    for doc_type in REQUIRED_DOC_TYPES:
        if document_status(documents, doc_type) == "accepted":
            progress += per_doc

    return min(int(round(progress)), 100)


def section_checks(company: Any, owner: Any, compliance: Any, documents: Mapping[str, Any]) -> dict:
    """Review-tab checklist; submission needs every flag set."""
    checks = {
        "company": company_complete(company),
        "ownership": owner_complete(owner),
        "compliance": compliance_complete(compliance),
        "documents": all_required_accepted(documents),
    }
    checks["can_submit"] = all(checks.values())
    return checks


def next_route(case_id: str, status: str, checks: Optional[dict] = None) -> str:
    """Where the hub should send the user.

    Anything past draft is gated to the status page; a draft lands on the
    first incomplete tab, or review when everything is filled in.
    """
    if status != "draft":
        return f"/onboarding/{case_id}/status"
    checks = checks or {}
    for tab in TABS[:-1]:
        if not checks.get(tab):
            return f"/onboarding/{case_id}/{tab}"
    return f"/onboarding/{case_id}/review"
