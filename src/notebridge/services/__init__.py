"""Services - business logic over the ORM, scoped to the calling clinician."""

from notebridge.services.account import AccountService
from notebridge.services.auth import AuthService, IssuedTokens
from notebridge.services.cases import CaseService
from notebridge.services.documents import DocumentService, PublicDocumentService

__all__ = [
    "AccountService",
    "AuthService",
    "IssuedTokens",
    "CaseService",
    "DocumentService",
    "PublicDocumentService",
]
