from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlmodel import Session
import structlog

from studyai.auth import get_current_user
from studyai.db import get_session
from studyai.middleware.rate_limit import ai_generation_limit
from studyai.models import User
from studyai.services import store
from studyai.services.generation import ContentGenerator, get_generator
from studyai.services.results import Failure

logger = structlog.get_logger()

router = APIRouter(prefix="/chat", tags=["chat"])

FALLBACK_REPLY = "I'm sorry, I'm having trouble processing your request right now. Please try again later."


class ChatRequest(BaseModel):
    message: str
    note_id: Optional[int] = None


@router.post("")
@ai_generation_limit()
async def send_message(
    request: Request,
    body: ChatRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    generator: ContentGenerator = Depends(get_generator),
):
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is empty")

    context = None
    if body.note_id is not None:
        note = store.get_owned_note(session, user.id, body.note_id)
        if not note:
            raise HTTPException(status_code=404, detail="Note not found")
        context = note.content

    result = await generator.respond(body.message, context)
    if isinstance(result, Failure):
        logger.error("chat_response_failed", user_id=user.id, error=result.error)
        reply = FALLBACK_REPLY
        used_fallback = True
    else:
        reply = result.value
        used_fallback = result.used_fallback

    saved = store.save_chat_message(session, user.id, body.message, response=reply, note_id=body.note_id)
    return {"id": saved.id, "response": reply, "used_fallback": used_fallback}


@router.get("/history")
def chat_history(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    return store.get_chat_history(session, user.id)


@router.delete("/history")
def clear_history(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    store.clear_chat_history(session, user.id)
    return {"cleared": True}
