from dataclasses import asdict
from typing import Dict

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from pydantic import BaseModel
from sqlmodel import Session

from studyai.auth import get_current_user
from studyai.db import get_session
from studyai.middleware.rate_limit import ai_generation_limit
from studyai.models import Note, User
from studyai.routers.notes import owned_note
from studyai.services import store
from studyai.services.generation import ContentGenerator, get_generator
from studyai.services.results import Failure


router = APIRouter(tags=["quizzes"])


class QuizAnswers(BaseModel):
    # quiz item id -> chosen option text
    answers: Dict[str, str]
    time_spent: int = 0


@router.post("/notes/{note_id}/quizzes")
@ai_generation_limit()
async def generate_quiz(
    request: Request,
    count: int = Form(5, ge=1, le=50),
    note: Note = Depends(owned_note),
    session: Session = Depends(get_session),
    generator: ContentGenerator = Depends(get_generator),
):
    result = await generator.generate_quiz(note.content, count)
    if isinstance(result, Failure):
        raise HTTPException(status_code=500, detail=result.error)
    items = store.create_quiz(session, note, result.value)
    return {
        "created": len(items),
        "requested": count,
        "used_fallback": result.used_fallback,
        "questions": [asdict(q) for q in result.value],
        "item_ids": [item.id for item in items],
    }


@router.get("/notes/{note_id}/quizzes")
def list_quizzes(note: Note = Depends(owned_note), session: Session = Depends(get_session)):
    return store.list_quizzes(session, note)


@router.delete("/notes/{note_id}/quizzes")
def delete_quizzes(note: Note = Depends(owned_note), session: Session = Depends(get_session)):
    store.delete_quizzes(session, note)
    return {"deleted": True}


@router.post("/notes/{note_id}/quizzes/score")
def score_quiz(body: QuizAnswers, note: Note = Depends(owned_note), session: Session = Depends(get_session)):
    result = store.score_quiz(body.answers, store.list_quizzes(session, note))
    result.time_spent = body.time_spent
    return asdict(result)


@router.get("/quizzes")
def list_user_quizzes(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    return store.list_user_quizzes(session, user.id)
