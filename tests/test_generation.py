"""
Tests for the generation facade: remote first, local fallback
"""
import random
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from studyai.services.cache import CacheService
from studyai.services.flashcards import FlashcardPair
from studyai.services.generation import ContentGenerator, suggested_counts
from studyai.services.llm import RemoteGenerationClient, RemoteGenerationError
from studyai.services.results import Failure, Success
from studyai.services.summary import generate_local_summary

from conftest import PHOTOSYNTHESIS


class FakeRemote:
    configured = True

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    async def _answer(self, kind, value):
        self.calls.append(kind)
        if self.fail:
            raise RemoteGenerationError("remote down")
        return value

    async def summary(self, text):
        return await self._answer("summary", "Remote summary")

    async def flashcards(self, text, count):
        return await self._answer("flashcards", [FlashcardPair("Remote Q", "Remote A")])

    async def quiz(self, text, count):
        return await self._answer("quiz", [])

    async def chat(self, message, context=None):
        return await self._answer("chat", "Remote reply")


def local_generator():
    return ContentGenerator(remote=RemoteGenerationClient(api_key="", cache=CacheService(None)), rng=random.Random(0))


class TestSuggestedCounts:
    def test_minimums(self):
        assert suggested_counts("") == (5, 3)

    def test_scaling(self):
        assert suggested_counts("word " * 1000) == (10, 6)

    def test_maximums(self):
        assert suggested_counts("word " * 5000) == (20, 15)


class TestContentGenerator:
    @pytest.mark.asyncio
    async def test_local_when_not_configured(self):
        result = await local_generator().generate_summary(PHOTOSYNTHESIS)
        assert isinstance(result, Success)
        assert not result.used_fallback
        assert result.value == generate_local_summary(PHOTOSYNTHESIS)

    @pytest.mark.asyncio
    async def test_remote_success(self):
        remote = FakeRemote()
        result = await ContentGenerator(remote=remote).generate_summary(PHOTOSYNTHESIS)
        assert result == Success("Remote summary")
        assert remote.calls == ["summary"]

    @pytest.mark.asyncio
    async def test_remote_failure_falls_back(self):
        remote = FakeRemote(fail=True)
        generator = ContentGenerator(remote=remote, rng=random.Random(0))

        summary = await generator.generate_summary(PHOTOSYNTHESIS)
        assert summary.used_fallback
        assert summary.value == generate_local_summary(PHOTOSYNTHESIS)

        cards = await generator.generate_flashcards(PHOTOSYNTHESIS, 1)
        assert cards.used_fallback
        assert cards.value[0].question == "What is Photosynthesis?"

        quiz = await generator.generate_quiz(PHOTOSYNTHESIS, 2)
        assert quiz.used_fallback
        assert len(quiz.value) == 2

        reply = await generator.respond("hello")
        assert reply.used_fallback
        assert "Hello" in reply.value

    @pytest.mark.asyncio
    async def test_null_remote_flashcards_fall_back(self):
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content='[{"question": null, "answer": null}]'))]
        ))
        remote = RemoteGenerationClient(api_key="test-key", client=sdk, cache=CacheService(None))
        result = await ContentGenerator(remote=remote).generate_flashcards(PHOTOSYNTHESIS, 1)
        assert result.used_fallback
        assert result.value == [FlashcardPair(
            "What is Photosynthesis?",
            "the process by which plants convert light energy into chemical energy",
        )]

    @pytest.mark.asyncio
    async def test_local_error_is_failure(self, monkeypatch):
        def boom(text):
            raise ValueError("broken")

        monkeypatch.setattr("studyai.services.generation.generate_local_summary", boom)
        result = await local_generator().generate_summary(PHOTOSYNTHESIS)
        assert isinstance(result, Failure)
        assert not result.ok
        assert "broken" in result.error

    @pytest.mark.asyncio
    async def test_chat_uses_note_context(self):
        context = "Osmosis is the movement of water across a membrane. Diffusion spreads molecules evenly."
        result = await local_generator().respond("What is osmosis?", context)
        assert result.value == "Osmosis is the movement of water across a membrane"
