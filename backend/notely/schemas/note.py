"""
Notely Backend — Note Request/Response Schemas
===============================================

What:  Pydantic models defining the notes API contract.
How:   FastAPI validates request bodies against NoteCreate and serializes
       Note rows through NoteResponse (from_attributes).

Field naming:
    The text lives in `note`, matching the column. Clients may also send it
    as `body`; both spellings populate the same field.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class NoteCreate(BaseModel):
    """
    What:  Body of POST /v1/notes.
    Why optional: an absent or empty note is a business-rule violation
           reported by NoteService as a 400, not a schema error.
    """
    note: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("note", "body"),
        description="Text of the note",
    )


class NoteResponse(BaseModel):
    """
    What:  A single note as returned by POST and GET /v1/notes.
    """
    id: uuid.UUID = Field(description="Unique note identifier (UUID)")
    created_at: datetime = Field(description="When the note was created (UTC)")
    updated_at: datetime = Field(description="When the note was last updated (UTC)")
    note: str = Field(description="Text of the note")
    user_id: uuid.UUID = Field(description="Owner of the note")

    model_config = {"from_attributes": True}
