"""
Notebox Backend — Note Service (Owner-Scoped Repository)
==========================================================

What:  Create/list/get/update/delete for personal notes.
How:   Every statement filters on the caller's user id in addition to the
       note id, so a note is never visible or mutable by a non-owner.
Who:   Called by the /api/notes route handlers with the user id produced by
       the authorization gate.

Owner-scoped queries:
    SELECT ... FROM notes WHERE id = :id AND user_id = :uid
    UPDATE notes SET ... WHERE id = :id AND user_id = :uid
    DELETE FROM notes     WHERE id = :id AND user_id = :uid

    A row that exists but belongs to someone else produces exactly the same
    NotFoundError as a row that does not exist.

Error Handling:
    Application exceptions (ValidationError, NotFoundError) propagate as-is.
    Anything else raised by the database layer is logged and wrapped in
    DatabaseError so internals never reach the client.
"""

import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy import delete, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notebox.exceptions import DatabaseError, NoteboxError, NotFoundError, ValidationError
from notebox.models.note import Note
from notebox.schemas.note import NoteResponse

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for note operations.

    Stateless: the session and the owning user id are passed to every call.
    Writes are committed before returning so the caller always observes the
    persisted state.
    """

    async def create_note(
        self,
        db: AsyncSession,
        user_id: int,
        title: str,
        content: str,
    ) -> int:
        """
        Insert a note owned by `user_id`.

        Returns:
            The new note id

        Raises:
            ValidationError: title or content is the empty string
            DatabaseError: insert failed
        """
        if title == "" or content == "":
            raise ValidationError(
                message="Title and content are required",
                field="title" if title == "" else "content",
            )

        try:
            note = Note(title=title, content=content, user_id=user_id)
            db.add(note)
            await db.flush()
            await db.commit()
            logger.info("Note %s created for user %s", note.id, user_id)
            return note.id

        except Exception as e:
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to create note",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

    async def list_notes(self, db: AsyncSession, user_id: int) -> List[NoteResponse]:
        """
        All notes owned by `user_id`, most recently updated first.

        Query plan:
            SELECT ... WHERE user_id = :uid ORDER BY updated_at DESC, id DESC
            → idx_notes_user_updated_at
        """
        try:
            result = await db.execute(
                select(Note)
                .where(Note.user_id == user_id)
                .order_by(desc(Note.updated_at), desc(Note.id))
            )
            notes = result.scalars().all()
            return [NoteResponse.model_validate(note) for note in notes]

        except Exception as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch notes",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

    async def get_note(self, db: AsyncSession, user_id: int, note_id: int) -> NoteResponse:
        """
        Raises:
            NotFoundError: no note `note_id` owned by `user_id` (→ 404)
            DatabaseError: query failed (→ 500)
        """
        try:
            note = await self._fetch_owned(db, user_id, note_id)
            if note is None:
                raise NotFoundError(resource="note", resource_id=str(note_id))
            return NoteResponse.model_validate(note)

        except NoteboxError:
            raise
        except Exception as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Failed to get note",
                context={"note_id": note_id, "user_id": user_id},
            )

    async def update_note(
        self,
        db: AsyncSession,
        user_id: int,
        note_id: int,
        title: str,
        content: str,
    ) -> NoteResponse:
        """
        Replace title/content of an owned note and return the stored row.

        How:
            1. Reject a blank title before touching the database
            2. UPDATE ... WHERE id AND user_id, stamping updated_at
            3. rowcount == 0 → NotFoundError
            4. Commit, then re-read the row so the response reflects what
               the database actually holds

        Raises:
            ValidationError: blank title (stored row unchanged)
            NotFoundError: no note `note_id` owned by `user_id`
            DatabaseError: statement failed
        """
        if not title.strip():
            raise ValidationError(message="Title cannot be empty", field="title")

        try:
            result = await db.execute(
                update(Note)
                .where(Note.id == note_id, Note.user_id == user_id)
                .values(
                    title=title,
                    content=content,
                    updated_at=datetime.now(timezone.utc),
                )
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="note", resource_id=str(note_id))
            await db.commit()

            note = await self._fetch_owned(db, user_id, note_id)
            if note is None:
                raise NotFoundError(resource="note", resource_id=str(note_id))
            logger.info("Note %s updated by user %s", note_id, user_id)
            return NoteResponse.model_validate(note)

        except NoteboxError:
            raise
        except Exception as e:
            logger.error("Database error updating note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to update note",
                context={"note_id": note_id, "user_id": user_id},
            )

    async def delete_note(self, db: AsyncSession, user_id: int, note_id: int) -> None:
        """
        Raises:
            NotFoundError: no note `note_id` owned by `user_id`
            DatabaseError: statement failed
        """
        try:
            result = await db.execute(
                delete(Note).where(Note.id == note_id, Note.user_id == user_id)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="note", resource_id=str(note_id))
            await db.commit()
            logger.info("Note %s deleted by user %s", note_id, user_id)

        except NoteboxError:
            raise
        except Exception as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Failed to delete note",
                context={"note_id": note_id, "user_id": user_id},
            )

    async def _fetch_owned(self, db: AsyncSession, user_id: int, note_id: int):
        result = await db.execute(
            select(Note)
            .where(Note.id == note_id, Note.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
