from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from studyai.auth import get_current_user
from studyai.db import get_session
from studyai.middleware.rate_limit import ai_generation_limit
from studyai.models import Note, User
from studyai.routers.notes import owned_note
from studyai.services import store
from studyai.services.generation import ContentGenerator, get_generator
from studyai.services.results import Failure


router = APIRouter(tags=["summaries"])


@router.post("/notes/{note_id}/summaries")
@ai_generation_limit()
async def generate_summary(
    request: Request,
    note: Note = Depends(owned_note),
    session: Session = Depends(get_session),
    generator: ContentGenerator = Depends(get_generator),
):
    result = await generator.generate_summary(note.content)
    if isinstance(result, Failure):
        raise HTTPException(status_code=500, detail=result.error)
    summary = store.create_summary(session, note, result.value)
    return {"id": summary.id, "summary_text": summary.summary_text, "used_fallback": result.used_fallback}


@router.get("/notes/{note_id}/summaries")
def list_summaries(note: Note = Depends(owned_note), session: Session = Depends(get_session)):
    return store.list_summaries(session, note)


@router.delete("/summaries/{summary_id}")
def delete_summary(summary_id: int, user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    summary = store.get_owned_summary(session, user.id, summary_id)
    if not summary:
        raise HTTPException(status_code=404, detail="Summary not found")
    store.delete_summary(session, summary)
    return {"deleted": True}
