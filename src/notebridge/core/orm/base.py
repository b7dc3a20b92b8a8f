"""Declarative base, mixins and type-map for all notebridge ORM models.

Uses SQLAlchemy 2.0 ``DeclarativeBase`` with a ``type_annotation_map``
that maps Python built-in types to portable SA column types, so the same
models run on SQLite (tests, local dev) and PostgreSQL (production).

Mixins
------
* **UUIDPrimaryKeyMixin**: ``id`` as a 36-char UUID string.
* **TimestampMixin**: ``created_at`` / ``updated_at`` set from Python.

Tags:
    notebridge, core, orm, sqlalchemy, declarative

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

import datetime
import uuid

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from notebridge.core.time import utc_now_naive


def new_id() -> str:
    return str(uuid.uuid4())


class NotebridgeBase(DeclarativeBase):
    """Shared declarative base for every notebridge table.

    * ``str``   → ``Text``
    * ``int``   → ``Integer``
    * ``bool``  → ``Boolean``
    * ``datetime.datetime`` → ``DateTime`` (naive UTC)
    * ``dict``  → ``JSON``
    * ``list``  → ``JSON``  (text arrays are stored as JSON lists)
    """

    type_annotation_map = {
        str: Text,
        int: Integer,
        bool: Boolean,
        datetime.datetime: DateTime,
        dict: JSON,
        list: JSON,
    }


class UUIDPrimaryKeyMixin:
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """Mixin that adds ``created_at`` and ``updated_at``."""

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive, onupdate=utc_now_naive
    )
