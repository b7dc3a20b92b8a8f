"""Tests for /cases endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from notebridge.core.orm.session import NotebridgeSession

NOTE = "Essential hypertension. Start lisinopril 10 mg once daily."


@pytest.fixture
def case(client, auth_headers) -> dict:
    resp = client.post("/cases", json={"technicalNote": NOTE, "uploadedFileNames": ["scan.png"]}, headers=auth_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestCreate:
    def test_created_as_draft(self, case):
        assert case["status"] == "draft"
        assert case["technical_note"] == NOTE
        assert case["uploaded_file_names"] == ["scan.png"]
        assert case["completed_at"] is None
        assert case["created_at"].endswith("+00:00")

    def test_blank_note_rejected(self, client, auth_headers):
        resp = client.post("/cases", json={"technicalNote": "   "}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_FAILED"

    def test_requires_auth(self, client):
        assert client.post("/cases", json={"technicalNote": NOTE}).status_code == 401


class TestScoping:
    """A clinician never sees another clinician's cases."""

    def test_other_user_gets_404(self, client, case, register):
        other = register(email="other@example.com")
        for method, path, body in [
            ("GET", f"/cases/{case['id']}", None),
            ("PATCH", f"/cases/{case['id']}", {"status": "completed"}),
            ("POST", f"/cases/{case['id']}/approval", {"approvedText": "x"}),
            ("POST", f"/cases/{case['id']}/analysis", {"aiDraftText": "x"}),
        ]:
            resp = client.request(method, path, json=body, headers=other["headers"])
            assert resp.status_code == 404, path
            assert resp.json()["detail"] == "Case not found"

    def test_list_is_scoped(self, client, case, register):
        other = register(email="other@example.com")
        assert client.get("/cases", headers=other["headers"]).json() == []


class TestUpdate:
    def test_empty_patch_rejected(self, client, auth_headers, case):
        resp = client.patch(f"/cases/{case['id']}", json={}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "At least one field must be provided"

    def test_completed_sets_timestamp(self, client, auth_headers, case):
        done = client.patch(f"/cases/{case['id']}", json={"status": "completed"}, headers=auth_headers).json()
        assert done["status"] == "completed"
        assert done["completed_at"] is not None

        reopened = client.patch(f"/cases/{case['id']}", json={"status": "approved"}, headers=auth_headers).json()
        assert reopened["completed_at"] is None

    def test_unknown_status_rejected(self, client, auth_headers, case):
        resp = client.patch(f"/cases/{case['id']}", json={"status": "archived"}, headers=auth_headers)
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "body",
        [{"status": None}, {"technicalNote": None}, {"uploadedFileNames": None}],
    )
    def test_null_field_rejected(self, client, auth_headers, case, body):
        resp = client.patch(f"/cases/{case['id']}", json=body, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_FAILED"
        unchanged = client.get(f"/cases/{case['id']}", headers=auth_headers).json()
        assert unchanged["status"] == "draft"
        assert unchanged["technical_note"] == NOTE

    def test_note_update(self, client, auth_headers, case):
        resp = client.patch(f"/cases/{case['id']}", json={"technicalNote": "revised"}, headers=auth_headers)
        assert resp.json()["technical_note"] == "revised"


class TestWorkflow:
    """draft → pending_approval → approved, with the detail view showing each child."""

    def test_full_flow(self, client, auth_headers, case):
        base = f"/cases/{case['id']}"

        profile = client.post(
            f"{base}/profile",
            json={"age": 67, "sex": "female", "healthLiteracy": "low", "comorbidities": ["diabetes"]},
            headers=auth_headers,
        )
        assert profile.status_code == 200
        assert profile.json()["age_bracket"] == "67"
        assert profile.json()["health_literacy"] == "low"

        analysis = client.post(
            f"{base}/analysis",
            json={"aiDraftText": "draft", "analysisData": {"primaryDiagnosis": "Hypertension"}, "modelUsed": "m"},
            headers=auth_headers,
        )
        assert analysis.status_code == 200
        assert client.get(base, headers=auth_headers).json()["status"] == "pending_approval"

        approval = client.post(f"{base}/approval", json={"approvedText": "final", "notes": "ok"}, headers=auth_headers)
        assert approval.status_code == 200
        assert approval.json()["approved_text"] == "final"

        detail = client.get(base, headers=auth_headers).json()
        assert detail["status"] == "approved"
        assert len(detail["patient_profiles"]) == 1
        assert detail["ai_analyses"][0]["analysis_data"] == {"primaryDiagnosis": "Hypertension"}
        assert len(detail["approvals"]) == 1

    def test_profile_replaced(self, client, auth_headers, case):
        base = f"/cases/{case['id']}"
        client.post(f"{base}/profile", json={"age": "60-69"}, headers=auth_headers)
        client.post(f"{base}/profile", json={"age": "70-79"}, headers=auth_headers)
        profiles = client.get(base, headers=auth_headers).json()["patient_profiles"]
        assert [p["age_bracket"] for p in profiles] == ["70-79"]

    def test_feedback(self, client, auth_headers, case):
        resp = client.post(
            f"/cases/{case['id']}/feedback",
            json={"selectedOptions": ["too_technical"], "additionalComments": "simplify"},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["selected_options"] == ["too_technical"]

    def test_empty_approval_rejected(self, client, auth_headers, case):
        resp = client.post(f"/cases/{case['id']}/approval", json={"approvedText": ""}, headers=auth_headers)
        assert resp.status_code == 400


class TestList:
    def test_newest_first_with_limit(self, client, auth_headers):
        ids = [
            client.post("/cases", json={"technicalNote": f"note {i}"}, headers=auth_headers).json()["id"]
            for i in range(3)
        ]
        resp = client.get("/cases", params={"limit": 2}, headers=auth_headers)
        assert resp.status_code == 200
        listed = resp.json()
        assert len(listed) == 2
        assert set(c["id"] for c in listed) <= set(ids)

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, client, auth_headers, limit):
        assert client.get("/cases", params={"limit": limit}, headers=auth_headers).status_code == 400


class TestCommitFailure:
    """A write that cannot be committed must not be reported as a success."""

    def test_failed_commit_is_500(self, app, monkeypatch):
        with TestClient(app, raise_server_exceptions=False) as c:
            signup = c.post("/auth/signup", json={"email": "commit@example.com", "password": "s3cure-passw0rd"})
            headers = {"Authorization": f"Bearer {signup.json()['accessToken']}"}

            def _fail(self):
                raise RuntimeError("disk full")

            monkeypatch.setattr(NotebridgeSession, "commit", _fail)
            resp = c.post("/cases", json={"technicalNote": NOTE}, headers=headers)
            monkeypatch.undo()

            assert resp.status_code == 500
            assert resp.json()["code"] == "INTERNAL"
            assert c.get("/cases", headers=headers).json() == []
