"""
Notebox Backend — Auth Service Unit Tests
===========================================

What:  Tests for AuthService registration and authentication.
How:   Uses mock DB sessions; hashing is real bcrypt except where patched out.

What we test:
    ✅ Input is trimmed and length-checked before any database work
    ✅ Duplicate usernames become ConflictError, other failures DatabaseError
    ✅ Unknown user and wrong password give the same UnauthorizedError
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from notebox.exceptions import (
    ConflictError,
    DatabaseError,
    UnauthorizedError,
    ValidationError,
)
from notebox.models.user import User
from notebox.services.auth_service import INVALID_CREDENTIALS, AuthService, pwd_context


class TestRegister:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_register_trims_and_persists(self, mock_db_session):
        """Stored username is trimmed; stored password is a hash, not the plain text."""
        user = await self.service.register(mock_db_session, "  alice  ", " secret123 ")

        assert user.username == "alice"
        assert user.password != "secret123"
        assert pwd_context.verify("secret123", user.password)
        mock_db_session.add.assert_called_once_with(user)
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username,password",
        [
            ("ab", "secret123"),
            ("alice", "12345"),
            ("  ab  ", "secret123"),
            ("alice", "  12345  "),
            ("", ""),
        ],
    )
    async def test_register_rejects_short_input(self, mock_db_session, username, password):
        with pytest.raises(ValidationError):
            await self.service.register(mock_db_session, username, password)
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_minimum_lengths_accepted(self, mock_db_session):
        with patch.object(self.service, "hash_password", AsyncMock(return_value="hashed")):
            user = await self.service.register(mock_db_session, "abc", "123456")
        assert user.username == "abc"

    @pytest.mark.asyncio
    async def test_duplicate_username_raises_conflict(self, mock_db_session):
        mock_db_session.flush.side_effect = IntegrityError(
            "INSERT INTO users", {}, Exception("UNIQUE constraint failed")
        )
        with patch.object(self.service, "hash_password", AsyncMock(return_value="hashed")):
            with pytest.raises(ConflictError) as exc_info:
                await self.service.register(mock_db_session, "alice", "secret123")

        assert exc_info.value.message == "Username already exists"
        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_database_failure_raises_database_error(self, mock_db_session):
        mock_db_session.flush.side_effect = OperationalError(
            "INSERT INTO users", {}, Exception("connection lost")
        )
        with patch.object(self.service, "hash_password", AsyncMock(return_value="hashed")):
            with pytest.raises(DatabaseError) as exc_info:
                await self.service.register(mock_db_session, "alice", "secret123")

        assert exc_info.value.message == "Registration failed"


class TestAuthenticate:

    def setup_method(self):
        self.service = AuthService()

    def _returning(self, mock_db_session, user):
        result = MagicMock()
        result.scalar_one_or_none.return_value = user
        mock_db_session.execute.return_value = result

    @pytest.mark.asyncio
    async def test_correct_password(self, mock_db_session):
        stored = User(id=3, username="alice", password=pwd_context.hash("secret123"))
        self._returning(mock_db_session, stored)

        user = await self.service.authenticate(mock_db_session, "alice", "secret123")
        assert user.id == 3

    @pytest.mark.asyncio
    async def test_password_is_trimmed_like_registration(self, mock_db_session):
        stored = User(id=3, username="alice", password=pwd_context.hash("secret123"))
        self._returning(mock_db_session, stored)

        user = await self.service.authenticate(mock_db_session, " alice ", " secret123 ")
        assert user.id == 3

    @pytest.mark.asyncio
    async def test_wrong_password(self, mock_db_session):
        stored = User(id=3, username="alice", password=pwd_context.hash("secret123"))
        self._returning(mock_db_session, stored)

        with pytest.raises(UnauthorizedError) as exc_info:
            await self.service.authenticate(mock_db_session, "alice", "wrong-pass")
        assert exc_info.value.message == INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_unknown_user_same_message(self, mock_db_session):
        self._returning(mock_db_session, None)

        with pytest.raises(UnauthorizedError) as exc_info:
            await self.service.authenticate(mock_db_session, "nobody", "secret123")
        assert exc_info.value.message == INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_unrecognised_hash_is_a_mismatch(self, mock_db_session):
        stored = User(id=3, username="alice", password="not-a-bcrypt-hash")
        self._returning(mock_db_session, stored)

        with pytest.raises(UnauthorizedError):
            await self.service.authenticate(mock_db_session, "alice", "secret123")

    @pytest.mark.asyncio
    async def test_lookup_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await self.service.authenticate(mock_db_session, "alice", "secret123")
