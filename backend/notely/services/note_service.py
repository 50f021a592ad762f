"""
Notely Backend — Note Service
==============================

What:  Business logic for notes: creation and owner-scoped listing.
Who:   Called by the notes routes with the user resolved by the authenticator.

Ownership:
    Every method takes the owning User as an argument. There is no code path
    that reads an owner id from the request, so a note can only ever be
    created for, and listed by, the authenticated user.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notely.exceptions import StorageError, ValidationError
from notely.models import Note, User

logger = logging.getLogger(__name__)


class NoteService:
    """
    Responsibilities:
        - create_note(): validate the body, persist it for the owner
        - list_notes(): the owner's notes, oldest first
    """

    async def create_note(self, db: AsyncSession, owner: User, body: Optional[str]) -> Note:
        """
        Create a note owned by `owner`.

        Raises:
            ValidationError: body is missing or blank (→ 400)
            StorageError: the insert failed (→ 500)
        """
        if body is None or not body.strip():
            raise ValidationError(message="note is required", field="note")

        note = Note(user_id=owner.id, note=body)
        try:
            db.add(note)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating note for user %s: %s", owner.id, str(e), exc_info=True)
            raise StorageError(
                message="Could not create the note. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Note %s created for user %s", note.id, owner.id)
        return note

    async def list_notes(self, db: AsyncSession, owner: User) -> List[Note]:
        """
        List the notes owned by `owner`.

        Query plan:
            SELECT * FROM notes WHERE user_id = :owner ORDER BY created_at
            → served by idx_notes_user_id_created_at
        """
        try:
            result = await db.execute(
                select(Note)
                .where(Note.user_id == owner.id)
                .order_by(Note.created_at, Note.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes for user %s: %s", owner.id, str(e), exc_info=True)
            raise StorageError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e


note_service = NoteService()
