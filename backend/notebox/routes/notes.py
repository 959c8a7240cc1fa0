"""
Notebox Backend — Notes Route Handlers
========================================

What:  Owner-scoped CRUD under /api/notes.
How:   Every handler depends on get_current_user (the authorization gate) and
       passes the resulting user id to NoteService explicitly.
Who:   Called by the browser client served at / and by API consumers.

Path parameters:
    {note_id} must be an integer in 1..MAX_NOTE_ID; anything else is rejected
    with 400 "Invalid note ID" by the request-validation handler in main.py.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from notebox.database import get_db_session
from notebox.dependencies import AuthenticatedUser, get_current_user
from notebox.schemas.note import (
    ErrorResponse,
    MessageResponse,
    NoteCreatedResponse,
    NoteCreateRequest,
    NoteResponse,
    NoteUpdateRequest,
)
from notebox.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

_UNAUTHORIZED = {"description": "Missing, invalid or expired token", "model": ErrorResponse}
_NOT_FOUND = {"description": "Note not found (or not owned by caller)", "model": ErrorResponse}
_BAD_REQUEST = {"description": "Malformed id or body, or blank title", "model": ErrorResponse}
_SERVER_ERROR = {"description": "Server error", "model": ErrorResponse}

# notes.id is a 32-bit INTEGER column
MAX_NOTE_ID = 2**31 - 1


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteCreatedResponse,
    responses={400: _BAD_REQUEST, 401: _UNAUTHORIZED, 500: _SERVER_ERROR},
    summary="Create a note",
)
async def create_note(
    payload: NoteCreateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteCreatedResponse:
    note_id = await note_service.create_note(
        db=db,
        user_id=current_user.user_id,
        title=payload.title,
        content=payload.content,
    )
    return NoteCreatedResponse(id=note_id)


@router.get(
    "/notes",
    response_model=List[NoteResponse],
    responses={401: _UNAUTHORIZED, 500: _SERVER_ERROR},
    summary="List the caller's notes, most recently updated first",
)
async def list_notes(
    response: Response,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    """
    Returns a JSON array (possibly empty) of the caller's notes.

    The X-Total-Count header carries the array length for clients that only
    read headers.
    """
    notes = await note_service.list_notes(db=db, user_id=current_user.user_id)
    response.headers["X-Total-Count"] = str(len(notes))
    response.headers["Cache-Control"] = "private, no-cache"
    return notes


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={400: _BAD_REQUEST, 401: _UNAUTHORIZED, 404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Get one of the caller's notes",
)
async def get_note(
    response: Response,
    note_id: int = Path(ge=1, le=MAX_NOTE_ID),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    note = await note_service.get_note(db=db, user_id=current_user.user_id, note_id=note_id)
    # Notes are mutable; shared caches must not keep them
    response.headers["Cache-Control"] = "private, no-cache"
    return note


@router.put(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={400: _BAD_REQUEST, 401: _UNAUTHORIZED, 404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Replace title and content of one of the caller's notes",
)
async def update_note(
    payload: NoteUpdateRequest,
    note_id: int = Path(ge=1, le=MAX_NOTE_ID),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    """Returns the row as stored after the update, including the new updated_at."""
    return await note_service.update_note(
        db=db,
        user_id=current_user.user_id,
        note_id=note_id,
        title=payload.title,
        content=payload.content,
    )


@router.delete(
    "/notes/{note_id}",
    response_model=MessageResponse,
    responses={400: _BAD_REQUEST, 401: _UNAUTHORIZED, 404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Delete one of the caller's notes",
)
async def delete_note(
    note_id: int = Path(ge=1, le=MAX_NOTE_ID),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await note_service.delete_note(db=db, user_id=current_user.user_id, note_id=note_id)
    return MessageResponse(message="Note deleted successfully")
