"""
Content generation facade: remote model first when configured, local heuristics otherwise.

Every public coroutine returns a ``Success`` even when the remote path
failed and the local generator was used instead; ``used_fallback`` tells
the two apart. ``Failure`` is reserved for unexpected errors in the local
generators themselves.
"""
from __future__ import annotations

import random
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from studyai.services.chat import respond_locally
from studyai.services.flashcards import generate_local_flashcards
from studyai.services.llm import RemoteGenerationClient, RemoteGenerationError
from studyai.services.logging import log_performance
from studyai.services.monitoring import AI_GENERATION_REQUESTS
from studyai.services.quiz import QuizBuilder
from studyai.services.results import Failure, Result, Success
from studyai.services.summary import generate_local_summary

logger = structlog.get_logger()

T = TypeVar("T")


def suggested_counts(text: str) -> tuple:
    """(flashcards, quiz questions) for a document: one card per 100 words
    clamped to 5..20, one question per 150 words clamped to 3..15."""
    word_count = len((text or "").split())
    flashcards = max(5, min(20, word_count // 100))
    questions = max(3, min(15, word_count // 150))
    return flashcards, questions


class ContentGenerator:
    def __init__(
        self,
        remote: Optional[RemoteGenerationClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self.remote = remote if remote is not None else RemoteGenerationClient()
        self.rng = rng or random.Random()

    async def _generate(self, kind: str, remote_call: Callable[[], Awaitable[T]], local_call: Callable[[], T]) -> Result:
        used_fallback = False
        if self.remote.configured:
            try:
                value = await remote_call()
                AI_GENERATION_REQUESTS.labels(type=kind, status="remote").inc()
                return Success(value)
            except RemoteGenerationError as e:
                logger.warning("remote_generation_failed", type=kind, error=str(e))
                used_fallback = True

        try:
            value = local_call()
        except Exception as e:
            logger.exception("local_generation_failed", type=kind)
            AI_GENERATION_REQUESTS.labels(type=kind, status="error").inc()
            return Failure(f"Failed to generate {kind}: {e}")

        AI_GENERATION_REQUESTS.labels(type=kind, status="fallback" if used_fallback else "local").inc()
        return Success(value, used_fallback=used_fallback)

    @log_performance("generate_summary")
    async def generate_summary(self, text: str) -> Result:
        return await self._generate(
            "summary",
            lambda: self.remote.summary(text),
            lambda: generate_local_summary(text),
        )

    @log_performance("generate_flashcards")
    async def generate_flashcards(self, text: str, count: int = 5) -> Result:
        return await self._generate(
            "flashcards",
            lambda: self.remote.flashcards(text, count),
            lambda: generate_local_flashcards(text, count),
        )

    @log_performance("generate_quiz")
    async def generate_quiz(self, text: str, count: int = 5) -> Result:
        return await self._generate(
            "quiz",
            lambda: self.remote.quiz(text, count),
            lambda: QuizBuilder(self.rng).build(text, count),
        )

    @log_performance("chat_response")
    async def respond(self, message: str, context: Optional[str] = None) -> Result:
        return await self._generate(
            "chat",
            lambda: self.remote.chat(message, context),
            lambda: respond_locally(message, context),
        )


_generator: Optional[ContentGenerator] = None


def get_generator() -> ContentGenerator:
    """FastAPI dependency; one generator per process."""
    global _generator
    if _generator is None:
        _generator = ContentGenerator()
    return _generator
