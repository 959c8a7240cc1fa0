"""
Notebox Backend — User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table (the credential store).
Who:   Used by AuthService for registration and login, and by Alembic.

Table Design:
    - Integer identity primary key
    - username: TEXT UNIQUE (no length cap), enforced by the database
      (duplicate insert → ConflictError)
    - password: salted bcrypt hash, never serialized by any response schema
    - created_at: UTC with timezone
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from notebox.database import Base


class User(Base):
    """
    A registered account.

    Lifecycle:
        Created at registration; never updated or deleted through the API.
        Deleting a row directly removes the user's notes (ON DELETE CASCADE).
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
        comment="Login name, trimmed, 3+ characters",
    )

    # bcrypt output is 60 characters; room left for other passlib schemes
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Salted password hash",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
