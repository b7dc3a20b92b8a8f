"""Tests for CaseService: ownership scoping and status transitions."""

from __future__ import annotations

from datetime import datetime

import pytest

from notebridge.core.errors import InvalidInputError, NotFoundError
from notebridge.services.auth import AuthService
from notebridge.services.cases import CaseService


@pytest.fixture
def users(db_session, settings) -> tuple[str, str]:
    auth = AuthService(db_session, settings)
    owner = auth.create_user("owner@example.com", "s3cure-passw0rd")
    other = auth.create_user("other@example.com", "s3cure-passw0rd")
    return owner.id, other.id


@pytest.fixture
def cases(db_session, users) -> CaseService:
    return CaseService(db_session, users[0])


class TestScoping:
    """Another clinician's case looks exactly like a missing one."""

    def test_other_user_gets_not_found(self, db_session, cases, users):
        case = cases.create_case("note")
        intruder = CaseService(db_session, users[1])
        with pytest.raises(NotFoundError, match="Case not found"):
            intruder.get_case(case.id)
        with pytest.raises(NotFoundError):
            intruder.add_approval(case.id, approved_text="x")

    def test_list_only_own(self, db_session, cases, users):
        cases.create_case("mine")
        CaseService(db_session, users[1]).create_case("theirs")
        assert [c.technical_note for c in cases.list_cases()] == ["mine"]


class TestLifecycle:
    def test_new_case_is_draft(self, cases):
        case = cases.create_case("note", ["scan.png"])
        assert case.status == "draft"
        assert case.uploaded_file_names == ["scan.png"]
        assert case.completed_at is None

    def test_analysis_moves_to_pending_approval(self, cases):
        case = cases.create_case("note")
        cases.add_analysis(case.id, ai_draft_text="draft", model_used="m")
        assert case.status == "pending_approval"

    def test_approval_moves_to_approved(self, cases):
        case = cases.create_case("note")
        cases.add_analysis(case.id, ai_draft_text="draft")
        approval = cases.add_approval(case.id, approved_text="final", notes="ok")
        assert case.status == "approved"
        assert approval.approved_by == cases.user_id
        assert cases.has_approval(case.id)

    def test_approval_keeps_completed(self, cases):
        case = cases.create_case("note")
        cases.update_case(case.id, {"status": "completed"})
        cases.add_approval(case.id, approved_text="late sign-off")
        assert case.status == "completed"

    def test_analysis_after_approval_keeps_status(self, cases):
        case = cases.create_case("note")
        cases.add_approval(case.id, approved_text="final")
        cases.add_analysis(case.id, ai_draft_text="another draft")
        assert case.status == "approved"

    def test_completed_at_set_and_cleared(self, cases):
        case = cases.create_case("note")
        cases.update_case(case.id, {"status": "completed"})
        assert case.completed_at is not None
        cases.update_case(case.id, {"status": "approved"})
        assert case.completed_at is None


class TestUpdate:
    def test_requires_a_field(self, cases):
        case = cases.create_case("note")
        with pytest.raises(InvalidInputError, match="At least one field must be provided"):
            cases.update_case(case.id, {})

    def test_unknown_fields_ignored(self, cases):
        case = cases.create_case("note")
        with pytest.raises(InvalidInputError):
            cases.update_case(case.id, {"created_by": "someone-else"})

    def test_note_and_files(self, cases):
        case = cases.create_case("note")
        cases.update_case(case.id, {"technical_note": "revised", "uploaded_file_names": ["a.pdf"]})
        assert case.technical_note == "revised"
        assert case.uploaded_file_names == ["a.pdf"]
        assert case.status == "draft"

    def test_null_values_count_as_missing(self, cases):
        case = cases.create_case("note")
        with pytest.raises(InvalidInputError, match="At least one field must be provided"):
            cases.update_case(case.id, {"status": None, "technical_note": None})
        assert case.technical_note == "note"


class TestChildren:
    def test_profile_upsert_single_row(self, cases):
        case = cases.create_case("note")
        first = cases.upsert_profile(case.id, {"age_bracket": "60-69", "comorbidities": ["diabetes"]})
        second = cases.upsert_profile(case.id, {"age_bracket": "70-79", "language": "est"})
        assert first.id == second.id
        assert second.age_bracket == "70-79"
        assert second.comorbidities == []

    def test_get_case_loads_children(self, cases):
        case = cases.create_case("note")
        cases.upsert_profile(case.id, {"sex": "female"})
        cases.add_analysis(case.id, ai_draft_text="draft")
        cases.add_approval(case.id, approved_text="final")
        loaded = cases.get_case(case.id)
        assert len(loaded.patient_profiles) == 1
        assert len(loaded.ai_analyses) == 1
        assert len(loaded.approvals) == 1

    def test_children_newest_first(self, db_session, cases):
        case = cases.create_case("note")
        later = cases.add_analysis(case.id, ai_draft_text="second draft")
        earlier = cases.add_analysis(case.id, ai_draft_text="first draft")
        later.created_at = datetime(2026, 3, 2, 9, 0)
        earlier.created_at = datetime(2026, 3, 1, 9, 0)
        final = cases.add_approval(case.id, approved_text="final")
        draft = cases.add_approval(case.id, approved_text="draft")
        final.approved_at = datetime(2026, 3, 4, 9, 0)
        draft.approved_at = datetime(2026, 3, 3, 9, 0)
        db_session.flush()
        db_session.expire_all()

        loaded = cases.get_case(case.id)
        assert [a.ai_draft_text for a in loaded.ai_analyses] == ["second draft", "first draft"]
        assert [a.approved_text for a in loaded.approvals] == ["final", "draft"]

    def test_feedback(self, cases):
        case = cases.create_case("note")
        feedback = cases.add_feedback(case.id, selected_options=["too_long"], additional_comments="shorter")
        assert feedback.submitted_by == cases.user_id
        assert feedback.selected_options == ["too_long"]


class TestListCases:
    def test_limit_bounds(self, cases):
        for bad in (0, 101):
            with pytest.raises(InvalidInputError):
                cases.list_cases(bad)

    def test_limit_applied(self, cases):
        for i in range(3):
            cases.create_case(f"note {i}")
        assert len(cases.list_cases(2)) == 2
