"""
Notely Backend — User SQLAlchemy Model
=======================================

What:  ORM model representing the `users` table.
Who:   Written by UserService.create_user(); read by the authenticator on
       every protected request.

Table Design Rationale:
    - UUID primary key, generated in Python so the same model works on
      PostgreSQL and SQLite
    - api_key: 64 hex chars from secrets.token_hex(32); unique index because
      the authenticator looks users up by key on every protected request
    - created_at / updated_at: UTC, timezone-aware
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notely.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered account (Identity).

    Lifecycle:
        1. Created by POST /v1/users with a server-generated api_key
        2. Never updated; the api_key is never rotated
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Secret credential presented as `Authorization: ApiKey <api_key>`
    api_key: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    notes: Mapped[List["Note"]] = relationship(  # noqa: F821
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        # api_key deliberately left out so it never lands in logs
        return f"<User(id={self.id}, name='{self.name}')>"
