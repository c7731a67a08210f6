from __future__ import annotations

from typing import List, Sequence

from studyai.services.text_analysis import split_sentences


IMPORTANCE_WORDS = ["important", "key", "main", "primary", "essential", "crucial", "significant"]
CHAT_IMPORTANCE_WORDS = IMPORTANCE_WORDS + ["fundamental"]


def _pick_sentences(text: str, keywords: Sequence[str], limit: int) -> List[str]:
    sentences = split_sentences(text, 20)
    important = [s for s in sentences if any(word in s.lower() for word in keywords)]
    return important[:limit] if important else sentences[:limit]


def _join(sentences: List[str]) -> str:
    if not sentences:
        return ""
    return ". ".join(sentences) + "."


def generate_local_summary(text: str) -> str:
    """Extractive summary: up to three sentences carrying importance words,
    else the first three sentences. Empty input gives an empty string."""
    return _join(_pick_sentences(text, IMPORTANCE_WORDS, 3))


def create_smart_summary(content: str) -> str:
    # shorter variant used when answering chat questions
    return _join(_pick_sentences(content, CHAT_IMPORTANCE_WORDS, 2))
