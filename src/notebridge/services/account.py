"""Account service - clinician profile, contacts and personal documents."""

from __future__ import annotations

import base64
from collections.abc import Mapping
from typing import Any

from sqlalchemy import event, func, select, update
from sqlalchemy.orm import Session

from notebridge.core.errors import InvalidInputError, NotFoundError
from notebridge.core.logging import get_logger
from notebridge.core.orm import ClinicianContactTable, ProfileTable, UserDocumentTable
from notebridge.core.storage import FileStorage, decode_file_data

logger = get_logger(__name__)

MAX_CONTACTS = 5
DEFAULT_LANGUAGE = "est"

_CONTACT_FIELDS = {"name", "specialty", "phone", "email", "notes", "is_primary"}

_FILE_HOOKS = "notebridge.file_hooks"


def _file_hooks(session: Session) -> dict[str, list[tuple[FileStorage, str]]]:
    """Storage keys to delete once the session's transaction commits or rolls back."""
    hooks = session.info.get(_FILE_HOOKS)
    if hooks is None:
        hooks = session.info[_FILE_HOOKS] = {"commit": [], "rollback": []}
        event.listen(session, "after_commit", lambda s: _run_file_hooks(s, "commit"))
        event.listen(session, "after_rollback", lambda s: _run_file_hooks(s, "rollback"))
    return hooks


def _run_file_hooks(session: Session, outcome: str) -> None:
    hooks = session.info[_FILE_HOOKS]
    for storage, key in hooks[outcome]:
        storage.delete(key)
    hooks["commit"] = []
    hooks["rollback"] = []


class AccountService:
    """Per-user account data; every query is filtered on ``user_id``."""

    def __init__(self, session: Session, user_id: str, storage: FileStorage | None = None):
        self.session = session
        self.user_id = user_id
        self.storage = storage

    # ── Profile ──────────────────────────────────────────────────────────

    def get_profile(self) -> ProfileTable:
        """Return the profile, creating an empty one on first access."""
        profile = self.session.scalars(
            select(ProfileTable).where(ProfileTable.user_id == self.user_id)
        ).first()
        if profile is None:
            profile = ProfileTable(
                user_id=self.user_id,
                first_name="",
                last_name="",
                role="",
                language=DEFAULT_LANGUAGE,
            )
            self.session.add(profile)
            self.session.flush()
            logger.info("profile_created", user_id=self.user_id)
        return profile

    def update_profile(
        self,
        *,
        first_name: str = "",
        last_name: str = "",
        role: str = "",
        language: str = DEFAULT_LANGUAGE,
    ) -> ProfileTable:
        profile = self.get_profile()
        profile.first_name = first_name
        profile.last_name = last_name
        profile.role = role
        profile.language = language or DEFAULT_LANGUAGE
        self.session.flush()
        logger.info("profile_updated", user_id=self.user_id)
        return profile

    # ── Contacts ─────────────────────────────────────────────────────────

    def _clear_primary(self, *, except_id: str | None = None) -> None:
        stmt = (
            update(ClinicianContactTable)
            .where(
                ClinicianContactTable.user_id == self.user_id,
                ClinicianContactTable.is_primary.is_(True),
            )
            .values(is_primary=False)
        )
        if except_id is not None:
            stmt = stmt.where(ClinicianContactTable.id != except_id)
        self.session.execute(stmt)

    def _owned_contact(self, contact_id: str) -> ClinicianContactTable:
        contact = self.session.scalars(
            select(ClinicianContactTable).where(
                ClinicianContactTable.id == contact_id,
                ClinicianContactTable.user_id == self.user_id,
            )
        ).first()
        if contact is None:
            raise NotFoundError("Contact not found")
        return contact

    def list_contacts(self) -> list[ClinicianContactTable]:
        """Primary contact first, then newest first."""
        stmt = (
            select(ClinicianContactTable)
            .where(ClinicianContactTable.user_id == self.user_id)
            .order_by(
                ClinicianContactTable.is_primary.desc(),
                ClinicianContactTable.created_at.desc(),
            )
        )
        return list(self.session.scalars(stmt))

    def create_contact(self, data: Mapping[str, Any]) -> ClinicianContactTable:
        count = self.session.scalar(
            select(func.count())
            .select_from(ClinicianContactTable)
            .where(ClinicianContactTable.user_id == self.user_id)
        )
        if (count or 0) >= MAX_CONTACTS:
            raise InvalidInputError("Contact limit reached")

        values = {k: v for k, v in data.items() if k in _CONTACT_FIELDS}
        if values.get("is_primary"):
            self._clear_primary()

        contact = ClinicianContactTable(user_id=self.user_id, **values)
        contact.is_primary = bool(values.get("is_primary"))
        self.session.add(contact)
        self.session.flush()
        logger.info("contact_created", contact_id=contact.id, primary=contact.is_primary)
        return contact

    def update_contact(self, contact_id: str, changes: Mapping[str, Any]) -> ClinicianContactTable:
        contact = self._owned_contact(contact_id)
        values = {k: v for k, v in changes.items() if k in _CONTACT_FIELDS}
        if values.get("is_primary"):
            self._clear_primary(except_id=contact.id)

        for key, value in values.items():
            if key == "is_primary":
                value = bool(value)
            elif key == "name" and not value:
                raise InvalidInputError("Contact name cannot be empty")
            setattr(contact, key, value)

        self.session.flush()
        logger.info("contact_updated", contact_id=contact.id)
        return contact

    def delete_contact(self, contact_id: str) -> None:
        contact = self._owned_contact(contact_id)
        self.session.delete(contact)
        self.session.flush()
        logger.info("contact_deleted", contact_id=contact_id)

    # ── Documents ────────────────────────────────────────────────────────

    def _require_storage(self) -> FileStorage:
        if self.storage is None:
            raise RuntimeError("AccountService was created without file storage")
        return self.storage

    def _owned_document(self, document_id: str) -> UserDocumentTable:
        document = self.session.scalars(
            select(UserDocumentTable).where(
                UserDocumentTable.id == document_id,
                UserDocumentTable.user_id == self.user_id,
            )
        ).first()
        if document is None:
            raise NotFoundError("Document not found")
        return document

    def upload_document(
        self,
        *,
        file_name: str,
        file_type: str,
        file_data: str,
        file_size: int | None = None,
    ) -> UserDocumentTable:
        storage = self._require_storage()
        content = decode_file_data(file_data)
        key = storage.user_key(self.user_id, file_name)
        storage.write(key, content)

        document = UserDocumentTable(
            user_id=self.user_id,
            file_name=file_name,
            file_path=key,
            file_type=file_type,
            file_size=file_size if file_size is not None else len(content),
        )
        self.session.add(document)
        try:
            self.session.flush()
        except Exception:
            storage.delete(key)
            raise
        _file_hooks(self.session)["rollback"].append((storage, key))
        logger.info("user_document_uploaded", document_id=document.id, size=document.file_size)
        return document

    def list_documents(self) -> list[UserDocumentTable]:
        stmt = (
            select(UserDocumentTable)
            .where(UserDocumentTable.user_id == self.user_id)
            .order_by(UserDocumentTable.uploaded_at.desc())
        )
        return list(self.session.scalars(stmt))

    def download_document(self, document_id: str) -> tuple[UserDocumentTable, str]:
        """Return the row and its content as base64."""
        document = self._owned_document(document_id)
        content = self._require_storage().read(document.file_path)
        return document, base64.b64encode(content).decode("ascii")

    def delete_document(self, document_id: str) -> None:
        """Delete the row now; the file goes once the deletion commits."""
        document = self._owned_document(document_id)
        storage = self._require_storage()
        self.session.delete(document)
        self.session.flush()
        _file_hooks(self.session)["commit"].append((storage, document.file_path))
        logger.info("user_document_deleted", document_id=document_id)
