"""
Tests for the file-backed onboarding draft store.
"""
import pytest
from pydantic import ValidationError

from neobank.config import get_settings
from neobank.services.draft_store import DraftStore, run_draft_demo_validation
from neobank.services.errors import ConflictError, NotFoundError
from neobank.services.verification import REQUIRED_DOC_TYPES
from neobank.utils.validators import parse_data_url, to_data_url, validate_emirates_id

PNG = to_data_url(b"\x89PNG\r\n\x1a\nfake", "image/png")


@pytest.fixture
def store(draft_dir):
    return DraftStore(draft_dir)


@pytest.fixture
def draft_id(store):
    draft_id, _ = store.create()
    return draft_id


class TestPersistence:
    def test_new_draft_defaults(self, store, draft_id):
        draft = store.load(draft_id)
        assert draft.company.confirmed_by_user is False
        assert draft.owner.ownership_percent == 100
        assert draft.owner.roles == ["owner", "director", "authorized_signatory"]
        assert draft.documents == {}
        assert draft.created_at
        assert store.progress(draft) == 0

    def test_has_data(self, store, draft_id):
        assert store.has_data(draft_id) is True
        assert store.has_data("0" * 32) is False
        assert store.has_data("../etc/passwd") is False

    def test_clear(self, store, draft_id):
        store.clear(draft_id)
        assert store.has_data(draft_id) is False
        with pytest.raises(NotFoundError):
            store.load(draft_id)

    def test_corrupt_file_reads_as_new_draft(self, store, draft_id):
        store._path(draft_id).write_text("{not json", encoding="utf-8")
        draft = store.load(draft_id)
        assert draft.company.company_legal_name == ""

    def test_undecodable_file_reads_as_new_draft(self, store, draft_id):
        store._path(draft_id).write_bytes(b"\xff\xfe\x00garbage")
        draft = store.load(draft_id)
        assert draft.documents == {}
        assert store.progress(draft) == 0

    def test_bad_id_is_not_found(self, store):
        with pytest.raises(NotFoundError):
            store.load("nope")


class TestSections:
    def test_partial_update_keeps_other_fields(self, store, draft_id):
        store.update_company(draft_id, {"company_legal_name": "TechServe Solutions LLC"})
        draft = store.update_company(draft_id, {"confirmed_by_user": True})
        assert draft.company.company_legal_name == "TechServe Solutions LLC"
        assert draft.company.confirmed_by_user is True
        assert store.progress(draft) == 20

    def test_invalid_update_rejected(self, store, draft_id):
        with pytest.raises(ValidationError):
            store.update_owner(draft_id, {"ownership_percent": "lots"})
        assert store.load(draft_id).owner.ownership_percent == 100

    def test_progress_follows_sections(self, store, draft_id):
        store.update_owner(draft_id, {"full_name": "Aisha Khan", "dob": "1990-01-01", "nationality": "AE"})
        draft = store.update_compliance(draft_id, {
            "account_use_purpose": "both",
            "expected_monthly_volume_band": "0_50k",
            "customer_location": "uae",
            "pep_confirmation": "no",
        })
        assert store.progress(draft) == 40

    def test_partial_ownership_leaves_owner_incomplete(self, store, draft_id):
        draft = store.update_owner(draft_id, {
            "full_name": "Aisha Khan", "dob": "1990-01-01", "nationality": "AE", "ownership_percent": 60,
        })
        assert store.progress(draft) == 0
        draft = store.update_owner(draft_id, {"ownership_percent": 100})
        assert store.progress(draft) == 20


class TestDocuments:
    def test_add_document(self, store, draft_id):
        draft = store.add_document(draft_id, "passport", "passport.png", PNG)
        assert draft.documents["passport"].status == "uploaded"
        assert store.progress(draft) == 0

    def test_accepted_documents_count(self, store, draft_id):
        for doc_type in REQUIRED_DOC_TYPES:
            store.add_document(draft_id, doc_type, f"{doc_type}.png", PNG)
            draft = store.set_document_status(draft_id, doc_type, "accepted")
        assert store.progress(draft) == 40

    def test_replacing_resets_status(self, store, draft_id):
        store.add_document(draft_id, "passport", "a.png", PNG)
        store.set_document_status(draft_id, "passport", "rejected", "unreadable")
        draft = store.add_document(draft_id, "passport", "b.png", PNG)
        assert draft.documents["passport"].status == "uploaded"
        assert draft.documents["passport"].file_name == "b.png"

    @pytest.mark.parametrize("doc_type,file_name,data", [
        ("selfie", "a.png", PNG),
        ("passport", "a.exe", PNG),
        ("passport", "a.png", "not-a-data-url"),
        ("passport", "a.png", "data:text/plain;base64,aGk="),
    ])
    def test_rejected_uploads(self, store, draft_id, doc_type, file_name, data):
        with pytest.raises(ValueError):
            store.add_document(draft_id, doc_type, file_name, data)

    def test_status_of_missing_document(self, store, draft_id):
        with pytest.raises(NotFoundError):
            store.set_document_status(draft_id, "passport", "accepted")

    def test_oversized_data_url_rejected(self, store, draft_id, monkeypatch):
        monkeypatch.setattr(get_settings(), "MAX_UPLOAD_BYTES", 4)
        with pytest.raises(OverflowError):
            store.add_document(draft_id, "passport", "passport.png", PNG)
        assert store.load(draft_id).documents == {}


class TestDocumentReview:
    def test_rejection_keeps_reason(self, store, draft_id):
        store.add_document(draft_id, "passport", "a.png", PNG)
        draft = store.set_document_status(draft_id, "passport", "rejected", "expired")
        assert draft.documents["passport"].status == "rejected"
        assert draft.documents["passport"].rejection_reason_code == "expired"

    def test_rejection_requires_reason(self, store, draft_id):
        store.add_document(draft_id, "passport", "a.png", PNG)
        with pytest.raises(ValueError):
            store.set_document_status(draft_id, "passport", "rejected")
        assert store.load(draft_id).documents["passport"].status == "uploaded"

    def test_rejected_cannot_be_accepted(self, store, draft_id):
        store.add_document(draft_id, "passport", "a.png", PNG)
        store.set_document_status(draft_id, "passport", "rejected", "unreadable")
        with pytest.raises(ConflictError):
            store.set_document_status(draft_id, "passport", "accepted")

    def test_accepted_cannot_go_back_to_validating(self, store, draft_id):
        store.add_document(draft_id, "passport", "a.png", PNG)
        store.set_document_status(draft_id, "passport", "accepted")
        with pytest.raises(ConflictError):
            store.set_document_status(draft_id, "passport", "validating")


class TestDemoValidation:
    def test_walks_upload_to_accepted(self, store, draft_id, draft_dir):
        draft = store.add_document(draft_id, "passport", "a.png", PNG)
        run_draft_demo_validation(draft_dir, draft_id, "passport", draft.documents["passport"].uploaded_at, 0)
        assert store.load(draft_id).documents["passport"].status == "accepted"

    def test_stops_when_document_replaced(self, store, draft_id, draft_dir):
        store.add_document(draft_id, "passport", "a.png", PNG)
        run_draft_demo_validation(draft_dir, draft_id, "passport", "2000-01-01T00:00:00", 0)
        assert store.load(draft_id).documents["passport"].status == "uploaded"

    def test_stops_after_rejection(self, store, draft_id, draft_dir):
        draft = store.add_document(draft_id, "passport", "a.png", PNG)
        store.set_document_status(draft_id, "passport", "rejected", "mismatch_name")
        run_draft_demo_validation(draft_dir, draft_id, "passport", draft.documents["passport"].uploaded_at, 0)
        assert store.load(draft_id).documents["passport"].status == "rejected"

    def test_stops_when_draft_cleared(self, store, draft_id, draft_dir):
        draft = store.add_document(draft_id, "passport", "a.png", PNG)
        store.clear(draft_id)
        run_draft_demo_validation(draft_dir, draft_id, "passport", draft.documents["passport"].uploaded_at, 0)
        assert store.has_data(draft_id) is False


class TestVerificationWidget:
    def test_hidden_for_untouched_draft(self, store, draft_id):
        assert store.verification(store.load(draft_id)) is None

    def test_shown_after_skip(self, store, draft_id):
        summary = store.verification(store.skip_documents(draft_id))
        assert summary["accepted_count"] == 0

    def test_submitted_flag(self, store, draft_id):
        assert store.mark_submitted(draft_id).submitted is True


class TestValidators:
    def test_data_url_round_trip(self):
        assert parse_data_url(PNG) == ("image/png", b"\x89PNG\r\n\x1a\nfake")

    @pytest.mark.parametrize("number,ok", [
        ("784-1990-1234567-1", True),
        ("784199012345671", True),
        ("785-1990-1234567-1", False),
        ("784-1990-123", False),
        (None, False),
    ])
    def test_emirates_id(self, number, ok):
        assert validate_emirates_id(number) is ok
