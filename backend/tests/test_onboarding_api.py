"""
API tests for the onboarding hub: case lifecycle, sections, documents,
timeline, registry prefill and local drafts.
"""
import time

import pytest

from neobank.config import get_settings
from neobank.services.verification import REQUIRED_DOC_TYPES
from neobank.utils.validators import to_data_url

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"

OWNER = {
    "full_name": "Aisha Khan",
    "dob": "1990-01-01",
    "nationality": "AE",
    "email": "aisha@techserve.ae",
    "emirates_id_number": "784-1990-1234567-1",
}
COMPLIANCE = {
    "account_use_purpose": "both",
    "expected_monthly_volume_band": "50_200k",
    "customer_location": "uae",
    "cash_activity": False,
    "pep_confirmation": "no",
}


def create_case(client):
    res = client.post("/api/onboarding/cases")
    assert res.status_code == 201
    return res.json()["case"]["id"]


def upload(client, case_id, doc_type, name="doc.png", content=PNG_BYTES):
    return client.post(
        f"/api/onboarding/cases/{case_id}/documents/{doc_type}",
        files={"file": (name, content, "image/png")},
    )


def accept_all_documents(client, case_id):
    for doc_type in REQUIRED_DOC_TYPES:
        doc = upload(client, case_id, doc_type).json()
        res = client.post(
            f"/api/onboarding/cases/{case_id}/documents/{doc['id']}/review",
            json={"status": "accepted"},
        )
        assert res.status_code == 200


def complete_case(client, case_id):
    client.patch(f"/api/onboarding/cases/{case_id}/company", json={
        "trade_license_number": "DEMO-12345",
        "issuing_authority": "ded_dubai",
        "company_legal_name": "TechServe Solutions LLC",
        "confirmed_by_user": True,
    })
    client.put(f"/api/onboarding/cases/{case_id}/persons", json=OWNER)
    client.patch(f"/api/onboarding/cases/{case_id}/compliance", json=COMPLIANCE)
    accept_all_documents(client, case_id)


# ── Case ────────────────────────────────────────────────────────────────────

class TestCase:
    def test_new_case_starts_on_company_tab(self, client):
        res = client.post("/api/onboarding/cases")
        body = res.json()
        case_id = body["case"]["id"]
        assert body["case"]["status"] == "draft"
        assert body["progress"] == 0
        assert body["next_route"] == f"/onboarding/{case_id}/company"
        assert client.get(f"/api/onboarding/cases/{case_id}/compliance").json()["case_id"] == case_id

    def test_latest_case(self, client):
        assert client.get("/api/onboarding/cases/latest").status_code == 404
        case_id = create_case(client)
        assert client.get("/api/onboarding/cases/latest").json()["case"]["id"] == case_id

    def test_unknown_case(self, client):
        res = client.get("/api/onboarding/cases/does-not-exist")
        assert res.status_code == 404
        assert res.json()["detail"] == "Onboarding case not found"

    def test_progress_tracks_sections(self, client):
        case_id = create_case(client)
        client.patch(f"/api/onboarding/cases/{case_id}/company", json={"confirmed_by_user": True})
        client.put(f"/api/onboarding/cases/{case_id}/persons", json=OWNER)
        body = client.get(f"/api/onboarding/cases/{case_id}/progress").json()
        assert body["progress"] == 40
        assert body["checks"]["ownership"] is True
        assert client.get(f"/api/onboarding/cases/{case_id}").json()["next_route"].endswith("/compliance")


# ── Sections ────────────────────────────────────────────────────────────────

class TestSections:
    def test_company_confirmation_logged_once(self, client):
        case_id = create_case(client)
        for _ in range(2):
            client.patch(f"/api/onboarding/cases/{case_id}/company", json={"confirmed_by_user": True})
        events = [e["event_type"] for e in client.get(f"/api/onboarding/cases/{case_id}/events").json()]
        assert events.count("company_confirmed") == 1

    def test_person_upsert(self, client):
        case_id = create_case(client)
        person = client.put(f"/api/onboarding/cases/{case_id}/persons", json=OWNER).json()
        updated = client.put(
            f"/api/onboarding/cases/{case_id}/persons",
            json={**OWNER, "id": person["id"], "phone": "+971500000000"},
        ).json()
        assert updated["id"] == person["id"]
        assert len(client.get(f"/api/onboarding/cases/{case_id}/persons").json()) == 1

    def test_invalid_emirates_id(self, client):
        case_id = create_case(client)
        res = client.put(
            f"/api/onboarding/cases/{case_id}/persons",
            json={**OWNER, "emirates_id_number": "123"},
        )
        assert res.status_code == 400
        assert res.json()["detail"].startswith("Failed to save owner details:")

    def test_invalid_trade_license(self, client):
        case_id = create_case(client)
        res = client.patch(f"/api/onboarding/cases/{case_id}/company", json={"trade_license_number": "#"})
        assert res.status_code == 400

    def test_compliance_values_validated(self, client):
        case_id = create_case(client)
        res = client.patch(f"/api/onboarding/cases/{case_id}/compliance", json={"pep_confirmation": "maybe"})
        assert res.status_code == 422


class TestRegistry:
    def test_demo_license_found(self, client):
        body = client.post("/api/onboarding/registry/lookup", json={
            "issuing_authority": "dmcc", "trade_license_number": "DMCC-12345",
        }).json()
        assert body["found"] is True
        assert body["prefill_source"] == "registry_lookup"
        assert body["data"]["company_legal_name"] == "TechServe Solutions LLC"

    def test_unknown_license_falls_back_to_manual(self, client):
        body = client.post("/api/onboarding/registry/lookup", json={
            "issuing_authority": "dmcc", "trade_license_number": "X-999",
        }).json()
        assert body["found"] is False
        assert body["prefill_source"] == "manual_entry"

    def test_unknown_authority(self, client):
        res = client.post("/api/onboarding/registry/lookup", json={
            "issuing_authority": "nowhere", "trade_license_number": "DEMO",
        })
        assert res.status_code == 400


# ── Documents ───────────────────────────────────────────────────────────────

class TestDocuments:
    def test_upload_stores_file(self, client):
        case_id = create_case(client)
        res = upload(client, case_id, "passport", "passport.png")
        assert res.status_code == 200
        doc = res.json()
        assert doc["status"] == "uploaded"
        assert doc["file_url"].startswith("http://localhost:8000/storage/onboarding-documents/")
        assert len(doc["checksum"]) == 64

        stored_path = doc["file_url"].split("/storage/", 1)[1]
        assert client.get(f"/storage/{stored_path}").content == PNG_BYTES

    def test_reupload_replaces_record(self, client):
        case_id = create_case(client)
        first = upload(client, case_id, "passport").json()
        client.post(
            f"/api/onboarding/cases/{case_id}/documents/{first['id']}/review",
            json={"status": "rejected", "rejection_reason_code": "unreadable"},
        )
        time.sleep(0.01)
        second = upload(client, case_id, "passport", "passport-v2.png").json()
        assert second["id"] == first["id"]
        assert second["status"] == "uploaded"
        assert second["rejection_reason_code"] is None

    def test_disallowed_file_type(self, client):
        case_id = create_case(client)
        res = upload(client, case_id, "passport", "passport.exe")
        assert res.status_code == 400
        assert "not allowed" in res.json()["detail"]

    def test_empty_file(self, client):
        case_id = create_case(client)
        assert upload(client, case_id, "passport", content=b"").status_code == 400

    def test_unknown_document_type(self, client):
        case_id = create_case(client)
        assert upload(client, case_id, "selfie").status_code == 422

    def test_rejection_needs_reason(self, client):
        case_id = create_case(client)
        doc = upload(client, case_id, "passport").json()
        res = client.post(
            f"/api/onboarding/cases/{case_id}/documents/{doc['id']}/review",
            json={"status": "rejected"},
        )
        assert res.status_code == 400

    def test_review_cannot_skip_backwards(self, client):
        case_id = create_case(client)
        doc = upload(client, case_id, "passport").json()
        url = f"/api/onboarding/cases/{case_id}/documents/{doc['id']}/review"
        assert client.post(url, json={"status": "accepted"}).status_code == 200
        assert client.post(url, json={"status": "validating"}).status_code == 409

    def test_checklist(self, client):
        case_id = create_case(client)
        accept_all_documents(client, case_id)
        body = client.get(f"/api/onboarding/cases/{case_id}/documents").json()
        assert len(body["documents"]) == 5
        assert body["verification"]["all_required_accepted"] is True
        assert body["verification"]["sections"]["optional"][0]["status"] == "missing"

    def test_upload_rate_limited(self, client):
        case_id = create_case(client)
        codes = set()
        for i in range(21):
            codes.add(upload(client, case_id, "passport", f"p{i}.png").status_code)
            time.sleep(0.002)
        assert 429 in codes


# ── Lifecycle ───────────────────────────────────────────────────────────────

class TestLifecycle:
    def test_incomplete_case_cannot_submit(self, client):
        case_id = create_case(client)
        res = client.post(f"/api/onboarding/cases/{case_id}/submit")
        assert res.status_code == 409
        assert res.json()["detail"] == "Please complete: company, ownership, compliance, documents"

    def test_submit_complete_case(self, client):
        case_id = create_case(client)
        complete_case(client, case_id)
        body = client.post(f"/api/onboarding/cases/{case_id}/submit").json()
        assert body["case"]["status"] == "submitted"
        assert body["case"]["risk_level"] == "low"
        assert body["progress"] == 100
        assert body["next_route"] == f"/onboarding/{case_id}/status"

        events = client.get(f"/api/onboarding/cases/{case_id}/events").json()
        assert events[0]["event_type"] == "case_submitted"
        assert events[-1]["event_type"] == "case_created"

    def test_pep_triggers_enhanced_review(self, client):
        case_id = create_case(client)
        complete_case(client, case_id)
        client.patch(f"/api/onboarding/cases/{case_id}/compliance", json={"pep_confirmation": "yes"})
        case = client.post(f"/api/onboarding/cases/{case_id}/submit").json()["case"]
        assert case["risk_level"] == "high"
        assert "Enhanced due diligence" in case["sla_text"]

    def test_submitted_case_is_locked(self, client):
        case_id = create_case(client)
        complete_case(client, case_id)
        client.post(f"/api/onboarding/cases/{case_id}/submit")
        res = client.patch(f"/api/onboarding/cases/{case_id}/company", json={"website": "https://x.ae"})
        assert res.status_code == 409
        assert client.post(f"/api/onboarding/cases/{case_id}/submit").status_code == 409

    def test_review_path(self, client):
        case_id = create_case(client)
        complete_case(client, case_id)
        client.post(f"/api/onboarding/cases/{case_id}/submit")
        url = f"/api/onboarding/cases/{case_id}/transition"

        assert client.post(url, json={"status": "approved"}).status_code == 409
        assert client.post(url, json={"status": "in_review"}).json()["status"] == "in_review"
        assert client.post(url, json={"status": "needs_info", "note": "Clearer passport"}).status_code == 200

        # needs_info reopens editing and allows a resubmit
        assert client.patch(f"/api/onboarding/cases/{case_id}/company", json={"website": "https://x.ae"}).status_code == 200
        assert client.post(f"/api/onboarding/cases/{case_id}/submit").status_code == 200
        client.post(url, json={"status": "in_review"})
        assert client.post(url, json={"status": "approved"}).json()["status"] == "approved"
        assert client.post(url, json={"status": "in_review"}).status_code == 409

        event = client.get(f"/api/onboarding/cases/{case_id}/events").json()[0]
        assert event["event_type"] == "case_approved"
        assert event["actor"] == "system"

    def test_dashboard_shows_kyb_status(self, client):
        case_id = create_case(client)
        assert client.get("/api/dashboard").json()["kyb_status"] == "draft"
        complete_case(client, case_id)
        client.post(f"/api/onboarding/cases/{case_id}/submit")
        assert client.get("/api/dashboard").json()["kyb_status"] == "submitted"


# ── Drafts ──────────────────────────────────────────────────────────────────

class TestDrafts:
    @pytest.fixture
    def draft_id(self, client):
        res = client.post("/api/drafts")
        assert res.status_code == 201
        return res.json()["draft_id"]

    def test_round_trip(self, client, draft_id):
        client.patch(f"/api/drafts/{draft_id}/company", json={"company_legal_name": "TechServe", "confirmed_by_user": True})
        body = client.get(f"/api/drafts/{draft_id}").json()
        assert body["data"]["company"]["company_legal_name"] == "TechServe"
        assert body["progress"] == 20
        assert client.get(f"/api/drafts/{draft_id}/exists").json() == {"exists": True}

    def test_document_as_data_url(self, client, draft_id):
        res = client.post(f"/api/drafts/{draft_id}/documents/passport", json={
            "file_name": "passport.png", "file_data": to_data_url(PNG_BYTES, "image/png"),
        })
        assert res.json()["data"]["documents"]["passport"]["status"] == "uploaded"

    def test_document_multipart(self, client, draft_id):
        res = client.post(
            f"/api/drafts/{draft_id}/documents/trade_license/upload",
            files={"file": ("license.pdf", b"%PDF-1.4", "application/pdf")},
        )
        doc = res.json()["data"]["documents"]["trade_license"]
        assert doc["file_data"].startswith("data:application/pdf;base64,")

    def test_accepted_document_moves_progress(self, client, draft_id):
        client.post(f"/api/drafts/{draft_id}/documents/passport", json={
            "file_name": "passport.png", "file_data": to_data_url(PNG_BYTES, "image/png"),
        })
        body = client.post(f"/api/drafts/{draft_id}/documents/passport/status", json={"status": "accepted"}).json()
        assert body["progress"] == 8
        missing = client.post(f"/api/drafts/{draft_id}/documents/moa_aoa/status", json={"status": "accepted"})
        assert missing.status_code == 404

    def test_review_follows_transition_table(self, client, draft_id):
        client.post(f"/api/drafts/{draft_id}/documents/passport", json={
            "file_name": "passport.png", "file_data": to_data_url(PNG_BYTES, "image/png"),
        })
        url = f"/api/drafts/{draft_id}/documents/passport/status"
        assert client.post(url, json={"status": "rejected"}).status_code == 400
        rejected = client.post(url, json={"status": "rejected", "rejection_reason_code": "expired"})
        assert rejected.json()["data"]["documents"]["passport"]["rejection_reason_code"] == "expired"
        res = client.post(url, json={"status": "accepted"})
        assert res.status_code == 409
        assert res.json()["error_code"] == "conflict"

    def test_oversized_data_url(self, client, draft_id, monkeypatch):
        monkeypatch.setattr(get_settings(), "MAX_UPLOAD_BYTES", 4)
        res = client.post(f"/api/drafts/{draft_id}/documents/passport", json={
            "file_name": "passport.png", "file_data": to_data_url(PNG_BYTES, "image/png"),
        })
        assert res.status_code == 413
        assert client.get(f"/api/drafts/{draft_id}").json()["data"]["documents"] == {}

    def test_demo_validation_accepts_upload(self, client, draft_id, monkeypatch):
        monkeypatch.setattr(get_settings(), "DEMO_AUTO_VALIDATE", True)
        monkeypatch.setattr(get_settings(), "VALIDATION_STEP_SECONDS", 0)
        res = client.post(
            f"/api/drafts/{draft_id}/documents/passport/upload",
            files={"file": ("passport.png", PNG_BYTES, "image/png")},
        )
        assert res.json()["data"]["documents"]["passport"]["status"] == "uploaded"
        body = client.get(f"/api/drafts/{draft_id}").json()
        assert body["data"]["documents"]["passport"]["status"] == "accepted"
        assert body["progress"] == 8

    def test_bad_document(self, client, draft_id):
        res = client.post(f"/api/drafts/{draft_id}/documents/passport", json={
            "file_name": "passport.png", "file_data": "hello",
        })
        assert res.status_code == 400

    def test_verification_hidden_until_started(self, client, draft_id):
        assert client.get(f"/api/drafts/{draft_id}/verification").json() is None
        client.post(f"/api/drafts/{draft_id}/skip-documents")
        assert client.get(f"/api/drafts/{draft_id}/verification").json()["required_count"] == 5

    def test_submit_and_clear(self, client, draft_id):
        assert client.post(f"/api/drafts/{draft_id}/submit").json()["data"]["submitted"] is True
        assert client.delete(f"/api/drafts/{draft_id}").status_code == 204
        assert client.get(f"/api/drafts/{draft_id}").status_code == 404
        assert client.get(f"/api/drafts/{draft_id}/exists").json() == {"exists": False}
