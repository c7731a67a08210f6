from fastapi import APIRouter, Depends, Form, HTTPException, Request
from sqlmodel import Session

from studyai.auth import get_current_user
from studyai.db import get_session
from studyai.middleware.rate_limit import ai_generation_limit
from studyai.models import Note, User
from studyai.routers.notes import owned_note
from studyai.services import store
from studyai.services.generation import ContentGenerator, get_generator
from studyai.services.results import Failure


router = APIRouter(tags=["flashcards"])


@router.post("/notes/{note_id}/flashcards")
@ai_generation_limit()
async def generate_flashcards(
    request: Request,
    count: int = Form(5, ge=1, le=50),
    note: Note = Depends(owned_note),
    session: Session = Depends(get_session),
    generator: ContentGenerator = Depends(get_generator),
):
    result = await generator.generate_flashcards(note.content, count)
    if isinstance(result, Failure):
        raise HTTPException(status_code=500, detail=result.error)
    created = store.create_flashcards(session, note, result.value)
    return {
        "created": len(created),
        "requested": count,
        "used_fallback": result.used_fallback,
        "flashcards": [{"id": f.id, "question": f.question, "answer": f.answer} for f in created],
    }


@router.get("/notes/{note_id}/flashcards")
def list_flashcards(note: Note = Depends(owned_note), session: Session = Depends(get_session)):
    return [{"id": f.id, "question": f.question, "answer": f.answer} for f in store.list_flashcards(session, note)]


@router.get("/flashcards")
def list_user_flashcards(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    return store.list_user_flashcards(session, user.id)
