"""Tests for AccountService: profile, contacts and personal documents."""

from __future__ import annotations

import base64

import pytest

from notebridge.core.errors import InvalidInputError, NotFoundError
from notebridge.core.orm import ProfileTable, UserTable
from notebridge.core.storage import FileStorage
from notebridge.services.account import MAX_CONTACTS, AccountService
from notebridge.services.auth import AuthService


@pytest.fixture
def user_id(db_session, settings) -> str:
    return AuthService(db_session, settings).create_user("dr@example.com", "s3cure-passw0rd").id


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path / "files")


@pytest.fixture
def account(db_session, user_id, storage) -> AccountService:
    return AccountService(db_session, user_id, storage)


class TestProfile:
    def test_created_on_first_access(self, db_session):
        user = UserTable(email="bare@example.com", password_hash="x")
        db_session.add(user)
        db_session.flush()

        profile = AccountService(db_session, user.id).get_profile()
        assert profile.first_name == ""
        assert profile.language == "est"
        assert db_session.query(ProfileTable).filter_by(user_id=user.id).count() == 1

    def test_existing_profile_reused(self, db_session, account, user_id):
        assert account.get_profile().id == account.get_profile().id
        assert db_session.query(ProfileTable).filter_by(user_id=user_id).count() == 1

    def test_update(self, account):
        profile = account.update_profile(first_name="Mari", last_name="Tamm", role="Cardiologist", language="rus")
        assert (profile.first_name, profile.last_name, profile.role, profile.language) == (
            "Mari",
            "Tamm",
            "Cardiologist",
            "rus",
        )

    def test_blank_language_defaults(self, account):
        assert account.update_profile(language="").language == "est"


class TestContacts:
    def test_limit(self, account):
        for i in range(MAX_CONTACTS):
            account.create_contact({"name": f"Contact {i}"})
        with pytest.raises(InvalidInputError, match="Contact limit reached"):
            account.create_contact({"name": "One too many"})

    def test_single_primary_on_create(self, account):
        first = account.create_contact({"name": "A", "is_primary": True})
        second = account.create_contact({"name": "B", "is_primary": True})
        account.session.refresh(first)
        assert first.is_primary is False
        assert second.is_primary is True

    def test_single_primary_on_update(self, account):
        first = account.create_contact({"name": "A", "is_primary": True})
        second = account.create_contact({"name": "B"})
        account.update_contact(second.id, {"is_primary": True})
        account.session.refresh(first)
        assert first.is_primary is False
        assert second.is_primary is True

    def test_primary_listed_first(self, account):
        account.create_contact({"name": "A"})
        account.create_contact({"name": "B", "is_primary": True})
        account.create_contact({"name": "C"})
        assert account.list_contacts()[0].name == "B"

    def test_update_rejects_empty_name(self, account):
        contact = account.create_contact({"name": "A"})
        with pytest.raises(InvalidInputError):
            account.update_contact(contact.id, {"name": ""})

    def test_other_users_contact(self, db_session, settings, account):
        contact = account.create_contact({"name": "A"})
        other = AuthService(db_session, settings).create_user("x@example.com", "s3cure-passw0rd")
        with pytest.raises(NotFoundError, match="Contact not found"):
            AccountService(db_session, other.id).delete_contact(contact.id)

    def test_delete(self, account):
        contact = account.create_contact({"name": "A"})
        account.delete_contact(contact.id)
        assert account.list_contacts() == []


class TestDocuments:
    def test_upload_download_delete(self, db_session, account, storage, user_id):
        payload = base64.b64encode(b"%PDF-1.7 fake").decode()
        document = account.upload_document(file_name="lab results.pdf", file_type="application/pdf", file_data=payload)

        assert document.file_path.startswith(f"user-documents/{user_id}/")
        assert document.file_path.endswith("_lab_results.pdf")
        assert document.file_name == "lab results.pdf"
        assert document.file_size == len(b"%PDF-1.7 fake")

        row, data = account.download_document(document.id)
        assert row.id == document.id
        assert base64.b64decode(data) == b"%PDF-1.7 fake"

        account.delete_document(document.id)
        assert account.list_documents() == []
        assert (storage.root / document.file_path).exists()
        db_session.commit()
        assert not (storage.root / document.file_path).exists()

    def test_rolled_back_upload_removes_file(self, db_session, account, storage):
        payload = base64.b64encode(b"abc").decode()
        document = account.upload_document(file_name="a.txt", file_type="text/plain", file_data=payload)
        path = storage.root / document.file_path
        assert path.exists()
        db_session.rollback()
        assert not path.exists()
        assert account.list_documents() == []

    def test_rolled_back_delete_keeps_file(self, db_session, account, storage):
        payload = base64.b64encode(b"abc").decode()
        document = account.upload_document(file_name="a.txt", file_type="text/plain", file_data=payload)
        db_session.commit()
        account.delete_document(document.id)
        db_session.rollback()
        assert (storage.root / document.file_path).read_bytes() == b"abc"
        assert [d.id for d in account.list_documents()] == [document.id]

    def test_declared_size_kept(self, account):
        document = account.upload_document(
            file_name="a.txt", file_type="text/plain", file_data=base64.b64encode(b"abc").decode(), file_size=10
        )
        assert document.file_size == 10

    def test_invalid_base64(self, account):
        with pytest.raises(InvalidInputError):
            account.upload_document(file_name="a.txt", file_type="text/plain", file_data="***")
        assert account.list_documents() == []

    def test_missing_document(self, account):
        with pytest.raises(NotFoundError, match="Document not found"):
            account.download_document("missing")
