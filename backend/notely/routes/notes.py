"""
Notely Backend — Notes Route Handlers
======================================

What:  POST /v1/notes and GET /v1/notes, both authenticated.
How:   The owner comes exclusively from the authenticator dependency; the
       request body only carries the note text.

Body parsing:
    POST /v1/notes reads its JSON body inside the handler, after the
    authenticator has resolved. A request without credentials is a 401
    whatever its body looks like.
"""

from typing import Callable, List

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from notely.database import Database
from notely.exceptions import JSON_INVALID_MESSAGE, ValidationError, describe_validation_errors
from notely.models import User
from notely.schemas.common import ErrorResponse
from notely.schemas.note import NoteCreate, NoteResponse
from notely.services.note_service import note_service

_AUTH_RESPONSES = {
    401: {"description": "Missing, malformed or invalid API key", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


async def read_note_payload(request: Request) -> NoteCreate:
    """
    Parse and validate the POST /v1/notes body.

    Raises:
        ValidationError: the body is not JSON or not a JSON object with an
                         optional string `note` (or `body`) field.
    """
    try:
        data = await request.json()
    except ValueError as e:
        raise ValidationError(message=JSON_INVALID_MESSAGE) from e

    try:
        return NoteCreate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(message=describe_validation_errors(e.errors())) from e


def build_router(database: Database, authenticate: Callable) -> APIRouter:
    router = APIRouter(tags=["Notes"])

    @router.post(
        "/notes",
        status_code=201,
        response_model=NoteResponse,
        responses={
            400: {"description": "Missing or empty note", "model": ErrorResponse},
            **_AUTH_RESPONSES,
        },
        summary="Create a note for the authenticated user",
        openapi_extra={
            "requestBody": {
                "required": True,
                "content": {"application/json": {"schema": NoteCreate.model_json_schema()}},
            }
        },
    )
    async def create_note(
        request: Request,
        user: User = Depends(authenticate),
        db: AsyncSession = Depends(database.session),
    ) -> NoteResponse:
        payload = await read_note_payload(request)
        note = await note_service.create_note(db, user, payload.note)
        return NoteResponse.model_validate(note)

    @router.get(
        "/notes",
        response_model=List[NoteResponse],
        responses=_AUTH_RESPONSES,
        summary="List the authenticated user's notes",
    )
    async def list_notes(
        user: User = Depends(authenticate),
        db: AsyncSession = Depends(database.session),
    ) -> List[NoteResponse]:
        notes = await note_service.list_notes(db, user)
        return [NoteResponse.model_validate(n) for n in notes]

    return router
