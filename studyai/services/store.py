"""
Owner-scoped persistence for notes and the content generated from them.

Every read or write goes through the owning note, so a user can only
touch rows that hang off their own notes.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import structlog
from sqlalchemy import delete
from sqlmodel import Session, select

from studyai.models import ChatMessage, Flashcard, Note, QuizItem, Summary
from studyai.services.flashcards import FlashcardPair
from studyai.services.quiz import QuizQuestion

logger = structlog.get_logger()


# -------------------- NOTES --------------------

def create_note(session: Session, user_id: int, title: str, content: str,
                file_name: Optional[str] = None, file_type: Optional[str] = None) -> Note:
    note = Note(user_id=user_id, title=title, content=content, file_name=file_name, file_type=file_type)
    session.add(note)
    session.commit()
    session.refresh(note)
    logger.info("note_created", note_id=note.id, user_id=user_id, chars=len(content))
    return note


def list_notes(session: Session, user_id: int) -> List[Note]:
    return list(session.exec(
        select(Note).where(Note.user_id == user_id).order_by(Note.created_at.desc(), Note.id.desc())
    ).all())


def get_owned_note(session: Session, user_id: int, note_id: int) -> Optional[Note]:
    return session.exec(select(Note).where(Note.id == note_id, Note.user_id == user_id)).first()


def update_note(session: Session, note: Note, **updates) -> Note:
    for field, value in updates.items():
        if value is not None:
            setattr(note, field, value)
    note.updated_at = datetime.utcnow()
    session.add(note)
    session.commit()
    session.refresh(note)
    return note


def delete_note(session: Session, note: Note) -> None:
    for model in (Summary, Flashcard, QuizItem, ChatMessage):
        session.exec(delete(model).where(model.note_id == note.id))
    session.delete(note)
    session.commit()
    logger.info("note_deleted", note_id=note.id, user_id=note.user_id)


# -------------------- SUMMARIES --------------------

def create_summary(session: Session, note: Note, summary_text: str) -> Summary:
    summary = Summary(note_id=note.id, summary_text=summary_text)
    session.add(summary)
    session.commit()
    session.refresh(summary)
    return summary


def list_summaries(session: Session, note: Note) -> List[Summary]:
    return list(session.exec(
        select(Summary).where(Summary.note_id == note.id).order_by(Summary.created_at.desc(), Summary.id.desc())
    ).all())


def get_owned_summary(session: Session, user_id: int, summary_id: int) -> Optional[Summary]:
    return session.exec(
        select(Summary).join(Note, Note.id == Summary.note_id)
        .where(Summary.id == summary_id, Note.user_id == user_id)
    ).first()


def delete_summary(session: Session, summary: Summary) -> None:
    session.delete(summary)
    session.commit()


# -------------------- FLASHCARDS --------------------

def create_flashcards(session: Session, note: Note, pairs: Sequence[FlashcardPair]) -> List[Flashcard]:
    cards = [Flashcard(note_id=note.id, question=p.question, answer=p.answer) for p in pairs]
    session.add_all(cards)
    session.commit()
    for card in cards:
        session.refresh(card)
    return cards


def list_flashcards(session: Session, note: Note) -> List[Flashcard]:
    return list(session.exec(
        select(Flashcard).where(Flashcard.note_id == note.id).order_by(Flashcard.created_at, Flashcard.id)
    ).all())


def list_user_flashcards(session: Session, user_id: int) -> List[dict]:
    rows = session.exec(
        select(Flashcard, Note.title).join(Note, Note.id == Flashcard.note_id)
        .where(Note.user_id == user_id)
        .order_by(Flashcard.created_at.desc(), Flashcard.id.desc())
    ).all()
    return [{**card.model_dump(), "note_title": title} for card, title in rows]


# -------------------- QUIZZES --------------------

def create_quiz(session: Session, note: Note, questions: Sequence[QuizQuestion]) -> List[QuizItem]:
    items = [
        QuizItem(
            note_id=note.id,
            question=q.question,
            options=list(q.options),
            correct_answer=q.options[q.correct],
            explanation=q.explanation,
        )
        for q in questions
    ]
    session.add_all(items)
    session.commit()
    for item in items:
        session.refresh(item)
    return items


def list_quizzes(session: Session, note: Note) -> List[QuizItem]:
    return list(session.exec(
        select(QuizItem).where(QuizItem.note_id == note.id).order_by(QuizItem.created_at, QuizItem.id)
    ).all())


def list_user_quizzes(session: Session, user_id: int) -> List[dict]:
    rows = session.exec(
        select(QuizItem, Note.title).join(Note, Note.id == QuizItem.note_id)
        .where(Note.user_id == user_id)
        .order_by(QuizItem.created_at.desc(), QuizItem.id.desc())
    ).all()
    return [{**item.model_dump(), "note_title": title} for item, title in rows]


def delete_quizzes(session: Session, note: Note) -> None:
    session.exec(delete(QuizItem).where(QuizItem.note_id == note.id))
    session.commit()


@dataclass
class QuizResult:
    total_questions: int
    correct_answers: int
    score: int
    time_spent: int = 0


def score_quiz(answers: Dict[str, str], items: Sequence[QuizItem]) -> QuizResult:
    """Answers map quiz item id (as a string) to the chosen option text."""
    total = len(items)
    correct = sum(1 for item in items if answers.get(str(item.id)) == item.correct_answer)
    score = round(correct / total * 100) if total else 0
    return QuizResult(total_questions=total, correct_answers=correct, score=score)


# -------------------- CHAT --------------------

def save_chat_message(session: Session, user_id: int, message: str, response: Optional[str] = None,
                      note_id: Optional[int] = None, is_user: bool = True) -> ChatMessage:
    chat_message = ChatMessage(user_id=user_id, note_id=note_id, message=message, response=response, is_user=is_user)
    session.add(chat_message)
    session.commit()
    session.refresh(chat_message)
    return chat_message


def get_chat_history(session: Session, user_id: int) -> List[ChatMessage]:
    return list(session.exec(
        select(ChatMessage).where(ChatMessage.user_id == user_id).order_by(ChatMessage.created_at, ChatMessage.id)
    ).all())


def clear_chat_history(session: Session, user_id: int) -> None:
    session.exec(delete(ChatMessage).where(ChatMessage.user_id == user_id))
    session.commit()
