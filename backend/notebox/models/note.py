"""
Notebox Backend — Note SQLAlchemy Model
=========================================

What:  ORM model representing the `notes` table.
Who:   Used by NoteService for owner-scoped CRUD and by Alembic.

Table Design:
    - Integer identity primary key (clients address notes as /api/notes/{id})
    - user_id: FK → users.id ON DELETE CASCADE; every query filters on it
    - title / content: TEXT, NOT NULL
    - created_at / updated_at: UTC with timezone; updated_at is rewritten on
      every successful update

    Index on (user_id, updated_at DESC):
        Serves the list query "this user's notes, most recently updated first".
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from notebox.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A personal text note, visible only to its owner.

    Lifecycle:
        1. Created by an authenticated user
        2. Title/content replaced by the owner (updated_at moves forward)
        3. Deleted by the owner, or cascaded away with the owning user
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning user; part of every lookup",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_notes_user_updated_at", user_id, updated_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, user_id={self.user_id}, "
            f"updated_at='{self.updated_at}')>"
        )
