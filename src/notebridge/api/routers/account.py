"""
Account router: the clinician's own profile, contacts and documents.

Endpoints:
    GET    /account/profile
    PATCH  /account/profile
    GET    /account/contacts
    POST   /account/contacts
    PATCH  /account/contacts/{contact_id}
    DELETE /account/contacts/{contact_id}
    GET    /account/documents
    POST   /account/documents
    GET    /account/documents/{document_id}
    DELETE /account/documents/{document_id}
"""

from __future__ import annotations

from fastapi import APIRouter, status

from notebridge.api.deps import CurrentUser, DbSession, Settings, Storage
from notebridge.api.schemas.auth import MessageResponse
from notebridge.api.schemas.payloads import (
    ContactRequest,
    ContactUpdateRequest,
    ProfileUpdateRequest,
    UploadDocumentRequest,
)
from notebridge.api.schemas.rows import (
    AccountProfileOut,
    ContactOut,
    UserDocumentDownload,
    UserDocumentOut,
)
from notebridge.core.security import AccessClaims
from notebridge.services.account import DEFAULT_LANGUAGE, AccountService
from notebridge.services.auth import AuthService

router = APIRouter(prefix="/account")


def _profile_out(user: AccessClaims, service: AccountService, email: str) -> AccountProfileOut:
    profile = service.get_profile()
    return AccountProfileOut(
        id=user.user_id,
        email=email,
        first_name=profile.first_name or "",
        last_name=profile.last_name or "",
        role=profile.role or "",
        language=profile.language or DEFAULT_LANGUAGE,
    )


# ── Profile ──────────────────────────────────────────────────────────────


@router.get("/profile", response_model=AccountProfileOut)
def get_profile(user: CurrentUser, db: DbSession, settings: Settings) -> AccountProfileOut:
    account = AuthService(db, settings).get_user(user.user_id)
    return _profile_out(user, AccountService(db, user.user_id), account.email)


@router.patch("/profile", response_model=AccountProfileOut)
def update_profile(
    body: ProfileUpdateRequest, user: CurrentUser, db: DbSession, settings: Settings
) -> AccountProfileOut:
    account = AuthService(db, settings).get_user(user.user_id)
    service = AccountService(db, user.user_id)
    service.update_profile(
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role,
        language=body.language,
    )
    return _profile_out(user, service, account.email)


# ── Contacts ─────────────────────────────────────────────────────────────


@router.get("/contacts", response_model=list[ContactOut])
def list_contacts(user: CurrentUser, db: DbSession) -> list[ContactOut]:
    return [ContactOut.model_validate(c) for c in AccountService(db, user.user_id).list_contacts()]


@router.post("/contacts", response_model=ContactOut, status_code=status.HTTP_201_CREATED)
def create_contact(body: ContactRequest, user: CurrentUser, db: DbSession) -> ContactOut:
    contact = AccountService(db, user.user_id).create_contact(body.model_dump())
    return ContactOut.model_validate(contact)


@router.patch("/contacts/{contact_id}", response_model=ContactOut)
def update_contact(
    contact_id: str, body: ContactUpdateRequest, user: CurrentUser, db: DbSession
) -> ContactOut:
    contact = AccountService(db, user.user_id).update_contact(
        contact_id, body.model_dump(exclude_unset=True)
    )
    return ContactOut.model_validate(contact)


@router.delete("/contacts/{contact_id}", response_model=MessageResponse)
def delete_contact(contact_id: str, user: CurrentUser, db: DbSession) -> MessageResponse:
    AccountService(db, user.user_id).delete_contact(contact_id)
    return MessageResponse(message="Deleted")


# ── Documents ────────────────────────────────────────────────────────────


@router.get("/documents", response_model=list[UserDocumentOut])
def list_documents(user: CurrentUser, db: DbSession) -> list[UserDocumentOut]:
    documents = AccountService(db, user.user_id).list_documents()
    return [UserDocumentOut.model_validate(d) for d in documents]


@router.post("/documents", response_model=UserDocumentOut, status_code=status.HTTP_201_CREATED)
def upload_document(
    body: UploadDocumentRequest, user: CurrentUser, db: DbSession, storage: Storage
) -> UserDocumentOut:
    document = AccountService(db, user.user_id, storage).upload_document(
        file_name=body.file_name,
        file_type=body.file_type,
        file_data=body.file_data,
        file_size=body.file_size,
    )
    return UserDocumentOut.model_validate(document)


@router.get("/documents/{document_id}/download", response_model=UserDocumentDownload)
def download_document(
    document_id: str, user: CurrentUser, db: DbSession, storage: Storage
) -> UserDocumentDownload:
    document, data = AccountService(db, user.user_id, storage).download_document(document_id)
    return UserDocumentDownload(
        id=document.id,
        file_name=document.file_name,
        file_type=document.file_type,
        file_data_base64=data,
    )


@router.delete("/documents/{document_id}", response_model=MessageResponse)
def delete_document(
    document_id: str, user: CurrentUser, db: DbSession, storage: Storage
) -> MessageResponse:
    AccountService(db, user.user_id, storage).delete_document(document_id)
    return MessageResponse(message="Deleted")
