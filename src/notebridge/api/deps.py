"""
FastAPI dependency injection: shared singletons and per-request factories.

Usage in routers::

    from notebridge.api.deps import CurrentUser, DbSession

    @router.get("/things")
    def list_things(user: CurrentUser, db: DbSession):
        ...

Manifesto:
    Routers declare what they need through ``Annotated`` aliases.  The
    database session commits before the response leaves, so a 2xx always
    means the write is durable.

Tags:
    notebridge, api, dependency-injection, session, auth

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from notebridge.ai.generator import DocumentGenerator
from notebridge.ai.watsonx import WatsonxClient
from notebridge.core.database import get_session_factory
from notebridge.core.errors import AuthenticationError
from notebridge.core.logging import bind_context
from notebridge.core.security import AccessClaims, decode_access_token
from notebridge.core.settings import NotebridgeSettings, get_settings
from notebridge.core.storage import FileStorage

_bearer = HTTPBearer(auto_error=False)


# ── Database session (per-request) ───────────────────────────────────────


def get_db() -> Generator[Session, None, None]:
    """Yield a session that commits when the endpoint returns.

    Used with ``scope="function"`` so the commit runs before the response
    is sent and a failed commit surfaces as a 500.
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ── Authentication ───────────────────────────────────────────────────────


def get_current_user(
    settings: Annotated[NotebridgeSettings, Depends(get_settings)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> AccessClaims:
    """Resolve ``Authorization: Bearer <jwt>`` into the caller's claims."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")
    claims = decode_access_token(settings, credentials.credentials)
    bind_context(user_id=claims.user_id)
    return claims


# ── External services ────────────────────────────────────────────────────


def get_watsonx_client(request: Request) -> WatsonxClient:
    """Process-wide client; it owns the cached IAM token."""
    return request.app.state.watsonx


def get_generator(
    settings: Annotated[NotebridgeSettings, Depends(get_settings)],
    client: Annotated[WatsonxClient, Depends(get_watsonx_client)],
) -> DocumentGenerator:
    return DocumentGenerator(
        client,
        model_id=settings.generation_model,
        vision_model_id=settings.vision_model,
    )


def get_storage(settings: Annotated[NotebridgeSettings, Depends(get_settings)]) -> FileStorage:
    return FileStorage(settings.file_storage_dir)


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[NotebridgeSettings, Depends(get_settings)]
DbSession = Annotated[Session, Depends(get_db, scope="function")]
CurrentUser = Annotated[AccessClaims, Depends(get_current_user)]
DocGenerator = Annotated[DocumentGenerator, Depends(get_generator)]
Storage = Annotated[FileStorage, Depends(get_storage)]
