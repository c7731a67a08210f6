from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel
from sqlmodel import Session
import structlog

from studyai.auth import get_current_user
from studyai.db import get_session
from studyai.middleware.rate_limit import ai_generation_limit
from studyai.models import Note, User
from studyai.services import store
from studyai.services.generation import ContentGenerator, get_generator, suggested_counts
from studyai.services.results import Failure
from studyai.services.text_extraction import clean_text, extract_text, get_text_preview, title_from_filename

logger = structlog.get_logger()

router = APIRouter(prefix="/notes", tags=["notes"])


class NoteCreate(BaseModel):
    title: str
    content: str


class NoteUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


def owned_note(note_id: int, user: User = Depends(get_current_user), session: Session = Depends(get_session)) -> Note:
    note = store.get_owned_note(session, user.id, note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


def _note_summary(note: Note) -> dict:
    return {
        "id": note.id,
        "title": note.title,
        "file_name": note.file_name,
        "file_type": note.file_type,
        "chars": len(note.content),
        "preview": get_text_preview(note.content),
        "created_at": note.created_at,
        "updated_at": note.updated_at,
    }


@router.post("/upload")
async def upload_note(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    content = await file.read()
    extracted = extract_text(content, filename=file.filename, content_type=file.content_type)
    if isinstance(extracted, Failure):
        raise HTTPException(status_code=400, detail=extracted.error)
    text = clean_text(extracted.value)
    if not text:
        raise HTTPException(status_code=400, detail="Could not extract any text from the document")
    note = store.create_note(
        session,
        user.id,
        title=title or title_from_filename(file.filename),
        content=text,
        file_name=file.filename,
        file_type=file.content_type,
    )
    return {"note_id": note.id, "chars": len(text)}


@router.post("")
def create_note(body: NoteCreate, user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    text = clean_text(body.content)
    if not text:
        raise HTTPException(status_code=400, detail="Note content is empty")
    note = store.create_note(session, user.id, title=body.title, content=text)
    return {"note_id": note.id, "chars": len(text)}


@router.get("")
def list_notes(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    return [_note_summary(n) for n in store.list_notes(session, user.id)]


@router.get("/{note_id}")
def get_note(note: Note = Depends(owned_note)):
    return note


@router.patch("/{note_id}")
def update_note(body: NoteUpdate, note: Note = Depends(owned_note), session: Session = Depends(get_session)):
    content = clean_text(body.content) if body.content is not None else None
    return store.update_note(session, note, title=body.title, content=content)


@router.delete("/{note_id}")
def delete_note(note: Note = Depends(owned_note), session: Session = Depends(get_session)):
    store.delete_note(session, note)
    return {"deleted": True}


@router.post("/{note_id}/process")
@ai_generation_limit()
async def process_note(
    request: Request,
    note: Note = Depends(owned_note),
    session: Session = Depends(get_session),
    generator: ContentGenerator = Depends(get_generator),
):
    """Upload pipeline: summary, then flashcards, then quiz, one after another."""
    flashcard_count, quiz_count = suggested_counts(note.content)
    outcome = {"note_id": note.id, "requested": {"flashcards": flashcard_count, "questions": quiz_count}}

    summary = await generator.generate_summary(note.content)
    if isinstance(summary, Failure):
        logger.error("summary_generation_failed", note_id=note.id, error=summary.error)
        outcome["summary"] = None
    else:
        outcome["summary"] = store.create_summary(session, note, summary.value).summary_text

    cards = await generator.generate_flashcards(note.content, flashcard_count)
    if isinstance(cards, Failure):
        logger.error("flashcard_generation_failed", note_id=note.id, error=cards.error)
        outcome["flashcards"] = 0
    else:
        outcome["flashcards"] = len(store.create_flashcards(session, note, cards.value))

    quiz = await generator.generate_quiz(note.content, quiz_count)
    if isinstance(quiz, Failure):
        logger.error("quiz_generation_failed", note_id=note.id, error=quiz.error)
        outcome["questions"] = 0
    else:
        outcome["questions"] = len(store.create_quiz(session, note, quiz.value))
        outcome["quiz"] = [asdict(q) for q in quiz.value]

    logger.info("note_processed", note_id=note.id, flashcards=outcome["flashcards"], questions=outcome["questions"])
    return outcome
