"""
Notely Backend — Note Service Unit Tests
=========================================

What:  Tests for NoteService business logic (create, list).
How:   Uses mock DB sessions (no real DB).

What we test:
    ✅ Created notes are owned by the given user
    ✅ Empty bodies are rejected before touching the session
    ✅ Listing filters by owner
    ✅ Database failures surface as StorageError
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from notely.exceptions import StorageError, ValidationError
from notely.models import Note
from notely.services.note_service import NoteService


@pytest.fixture
def owner():
    user = MagicMock()
    user.id = uuid4()
    return user


class TestNoteServiceCreate:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_create_note_success(self, mock_db_session, owner):
        note = await self.service.create_note(mock_db_session, owner, "buy milk")

        assert isinstance(note, Note)
        assert note.user_id == owner.id
        assert note.note == "buy milk"
        mock_db_session.add.assert_called_once_with(note)
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [None, "", " \n\t "])
    async def test_create_note_requires_body(self, mock_db_session, owner, body):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_note(mock_db_session, owner, body)

        assert exc_info.value.message == "note is required"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_note_storage_failure(self, mock_db_session, owner):
        mock_db_session.commit = AsyncMock(
            side_effect=OperationalError("INSERT INTO notes", {}, Exception("locked"))
        )

        with pytest.raises(StorageError):
            await self.service.create_note(mock_db_session, owner, "buy milk")

        mock_db_session.rollback.assert_awaited_once()


class TestNoteServiceList:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_list_notes_empty(self, mock_db_session, owner):
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = mock_result

        assert await self.service.list_notes(mock_db_session, owner) == []

    @pytest.mark.asyncio
    async def test_list_notes_filters_by_owner(self, mock_db_session, owner):
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = mock_result

        await self.service.list_notes(mock_db_session, owner)

        statement = mock_db_session.execute.await_args.args[0]
        compiled = statement.compile()
        assert "notes.user_id" in str(compiled)
        assert owner.id in compiled.params.values()

    @pytest.mark.asyncio
    async def test_list_notes_storage_failure(self, mock_db_session, owner):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("gone"))
        )

        with pytest.raises(StorageError):
            await self.service.list_notes(mock_db_session, owner)
