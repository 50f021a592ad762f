"""
Notely Backend — Note SQLAlchemy Model
=======================================

What:  ORM model representing the `notes` table.
Who:   Written and read by NoteService, always filtered by owner.

Table Design Rationale:
    - user_id: NOT NULL foreign key to users.id; the owner is taken from the
      authenticated user, never from the request body
    - note: TEXT, no artificial length limit
    - Composite index on (user_id, created_at) matches the only read query:
      "this user's notes, oldest first"
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notely.database import Base
from notely.models.user import User, utc_now


class Note(Base):
    """
    A piece of text owned by exactly one User.

    Immutable after creation: there is no update or delete endpoint.
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    note: Mapped[str] = mapped_column(
        Text,
        nullable=False,
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

    owner: Mapped[User] = relationship(back_populates="notes")

    __table_args__ = (
        Index("idx_notes_user_id_created_at", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, created_at='{self.created_at}')>"
