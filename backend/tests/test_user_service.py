"""
Notely Backend — User Service Unit Tests
=========================================

What:  Tests for UserService business logic with a mocked session.
"""

import re
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from notely.exceptions import StorageError, ValidationError
from notely.models import User
from notely.services.user_service import UserService, generate_api_key


def test_generated_api_keys_are_64_hex_chars_and_unique():
    keys = {generate_api_key() for _ in range(50)}

    assert len(keys) == 50
    assert all(re.fullmatch(r"[0-9a-f]{64}", key) for key in keys)


class TestCreateUser:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_create_user_success(self, mock_db_session):
        user = await self.service.create_user(mock_db_session, "  alice  ")

        assert isinstance(user, User)
        assert user.name == "alice"
        assert len(user.api_key) == 64
        mock_db_session.add.assert_called_once_with(user)
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", [None, "", "   "])
    async def test_create_user_requires_name(self, mock_db_session, name):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_user(mock_db_session, name)

        assert exc_info.value.field == "name"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_user_storage_failure(self, mock_db_session):
        mock_db_session.commit = AsyncMock(
            side_effect=OperationalError("INSERT INTO users", {}, Exception("disk I/O error"))
        )

        with pytest.raises(StorageError) as exc_info:
            await self.service.create_user(mock_db_session, "alice")

        assert "INSERT" not in exc_info.value.message
        mock_db_session.rollback.assert_awaited_once()


class TestLookups:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_list_users(self, mock_db_session):
        users = [MagicMock(), MagicMock()]
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = users
        mock_db_session.execute.return_value = mock_result

        assert await self.service.list_users(mock_db_session) == users

    @pytest.mark.asyncio
    async def test_list_users_storage_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("gone"))
        )

        with pytest.raises(StorageError):
            await self.service.list_users(mock_db_session)

    @pytest.mark.asyncio
    async def test_get_by_api_key_found(self, mock_db_session):
        user = MagicMock()
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = user
        mock_db_session.execute.return_value = mock_result

        assert await self.service.get_by_api_key(mock_db_session, "abc") is user
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_by_api_key_unknown(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result

        assert await self.service.get_by_api_key(mock_db_session, "abc") is None
