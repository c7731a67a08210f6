from __future__ import annotations

import hashlib
import json
import os
from typing import Any, List, Optional

import structlog
from openai import AsyncOpenAI, OpenAIError

from studyai.services.cache import CacheService, cache as default_cache
from studyai.services.flashcards import FlashcardPair
from studyai.services.quiz import OPTION_COUNT, QuizQuestion

logger = structlog.get_logger()

DEFAULT_BASE_URL = "https://api.x.ai/v1"
DEFAULT_MODEL = "grok-beta"
PLACEHOLDER_KEYS = {"your_api_key_here"}
PLACEHOLDER_PREFIXES = ("gsk_your_",)
CACHE_TTL_SECONDS = 6 * 3600


class RemoteGenerationError(RuntimeError):
    """Raised for any failure on the remote model path."""


def get_api_key() -> Optional[str]:
    return os.getenv("LLM_API_KEY") or os.getenv("GROK_API_KEY")


def is_configured(api_key: Optional[str]) -> bool:
    if not api_key or not api_key.strip():
        return False
    if api_key in PLACEHOLDER_KEYS:
        return False
    return not api_key.startswith(PLACEHOLDER_PREFIXES)


def clean_json_like(content: str) -> str:
    # Strip common code fences ```json ... ``` or ``` ... ```
    text = content.strip()
    if text.startswith("```"):
        first_nl = text.find("\n")
        if first_nl != -1:
            text = text[first_nl + 1 :]
        if text.endswith("```"):
            text = text[:-3]
    # Outermost JSON array if present
    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end != -1 and end > start:
        return text[start : end + 1]
    return text


def _text(value: Any) -> str:
    # JSON null or numbers never count as text
    return value.strip() if isinstance(value, str) else ""


def _parse_array(content: str) -> List[Any]:
    try:
        data = json.loads(clean_json_like(content))
    except json.JSONDecodeError as e:
        raise RemoteGenerationError(f"Invalid AI response format: {e}") from e
    if not isinstance(data, list) or not data:
        raise RemoteGenerationError("AI response is not a non-empty JSON array")
    return data


FLASHCARD_SYSTEM_PROMPT = """You are an expert educator creating study flashcards. Create exactly {count} high-quality flashcards from the provided text. Focus on key concepts, definitions, important facts, and critical information that students should remember.

Return ONLY a valid JSON array in this exact format:
[
  {{
    "question": "Clear, specific question",
    "answer": "Comprehensive, accurate answer"
  }}
]

Do not include any other text, explanations, or formatting outside the JSON array."""

QUIZ_SYSTEM_PROMPT = """You are an expert educator creating multiple-choice quiz questions. Create exactly {count} high-quality questions based on the provided text. Each question should test comprehension, analysis, or application of the content with 4 options and clear explanations.

Return ONLY a valid JSON array in this exact format:
[
  {{
    "id": "q1",
    "question": "What is the main concept discussed?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correct": 0,
    "explanation": "Explanation of why this is correct"
  }}
]

Ensure the "correct" field is the index (0-3) of the correct option. Do not include any other text outside the JSON array."""

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert summarizer. Create concise, informative summaries that capture the key points "
    "and main ideas of the given text. Keep summaries between 100-200 words."
)

CHAT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. You can answer questions on any topic, provide explanations, "
    "help with problem-solving, engage in conversations, and assist with various tasks. "
    "Be accurate, helpful, and conversational."
)

CHAT_CONTEXT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant with access to information from the user's study materials. "
    "You can answer questions both from the provided context and from your general knowledge. "
    "Be accurate, helpful, and conversational.\n\nStudy Material Context: {context}"
)


class RemoteGenerationClient:
    """Thin wrapper over an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
        cache: Optional[CacheService] = None,
    ):
        self.api_key = api_key if api_key is not None else get_api_key()
        self.base_url = base_url or os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL)
        self.model = model or os.getenv("LLM_MODEL", DEFAULT_MODEL)
        self.timeout = float(os.getenv("LLM_TIMEOUT", "30"))
        self._client = client
        self.cache = cache if cache is not None else default_cache

    @property
    def configured(self) -> bool:
        return self._client is not None or is_configured(self.api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not is_configured(self.api_key):
                raise RemoteGenerationError("LLM API key not set")
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        return self._client

    def _cache_key(self, kind: str, text: str, count: int = 0) -> str:
        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        return f"llm:{kind}:{self.model}:{count}:{digest}"

    async def complete(self, messages: List[dict], max_tokens: int, temperature: float) -> str:
        client = self._get_client()
        try:
            rsp = await client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except OpenAIError as e:
            raise RemoteGenerationError(str(e)) from e
        if not rsp.choices:
            raise RemoteGenerationError("No choices in AI response")
        content = rsp.choices[0].message.content
        if not content or not content.strip():
            raise RemoteGenerationError("Empty AI response")
        return content

    async def summary(self, text: str) -> str:
        key = self._cache_key("summary", text)
        cached = self.cache.get(key)
        if cached:
            return cached
        content = await self.complete(
            [
                {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": f"Please summarize the following text:\n\n{text[:4000]}"},
            ],
            max_tokens=300,
            temperature=0.3,
        )
        summary = content.strip()
        self.cache.set(key, summary, expire=CACHE_TTL_SECONDS)
        return summary

    async def flashcards(self, text: str, count: int) -> List[FlashcardPair]:
        key = self._cache_key("flashcards", text, count)
        cached = self.cache.get(key)
        if cached:
            return [FlashcardPair(**item) for item in cached]
        content = await self.complete(
            [
                {"role": "system", "content": FLASHCARD_SYSTEM_PROMPT.format(count=count)},
                {"role": "user", "content": f"Create {count} flashcards from this text:\n\n{text[:3000]}"},
            ],
            max_tokens=1200,
            temperature=0.3,
        )
        cards = []
        for item in _parse_array(content):
            if not isinstance(item, dict):
                continue
            question = _text(item.get("question"))
            answer = _text(item.get("answer"))
            if question and answer:
                cards.append(FlashcardPair(question, answer))
        if not cards:
            raise RemoteGenerationError("No valid flashcards in AI response")
        cards = cards[:count]
        self.cache.set(key, [{"question": c.question, "answer": c.answer} for c in cards], expire=CACHE_TTL_SECONDS)
        return cards

    async def quiz(self, text: str, count: int) -> List[QuizQuestion]:
        key = self._cache_key("quiz", text, count)
        cached = self.cache.get(key)
        if cached:
            return [QuizQuestion(**item) for item in cached]
        content = await self.complete(
            [
                {"role": "system", "content": QUIZ_SYSTEM_PROMPT.format(count=count)},
                {
                    "role": "user",
                    "content": f"Create {count} multiple-choice quiz questions from this text:\n\n{text[:3000]}",
                },
            ],
            max_tokens=1800,
            temperature=0.3,
        )
        questions: List[QuizQuestion] = []
        for item in _parse_array(content):
            if not isinstance(item, dict):
                continue
            question = _text(item.get("question"))
            options = item.get("options")
            correct = item.get("correct")
            if not question or not isinstance(options, list) or len(options) != OPTION_COUNT:
                continue
            options = [_text(o) for o in options]
            if not all(options):
                continue
            if isinstance(correct, bool) or not isinstance(correct, int) or not 0 <= correct < OPTION_COUNT:
                continue
            questions.append(QuizQuestion(
                id="",
                question=question,
                options=options,
                correct=correct,
                explanation=_text(item.get("explanation")),
            ))
        if not questions:
            raise RemoteGenerationError("No valid quiz questions in AI response")
        questions = questions[:count]
        # ids are always renumbered in output order
        for index, q in enumerate(questions):
            q.id = f"q{index + 1}"
        self.cache.set(
            key,
            [
                {"id": q.id, "question": q.question, "options": q.options, "correct": q.correct, "explanation": q.explanation}
                for q in questions
            ],
            expire=CACHE_TTL_SECONDS,
        )
        return questions

    async def chat(self, message: str, context: Optional[str] = None) -> str:
        if context:
            system = CHAT_CONTEXT_SYSTEM_PROMPT.format(context=context[:2000])
        else:
            system = CHAT_SYSTEM_PROMPT
        content = await self.complete(
            [
                {"role": "system", "content": system},
                {"role": "user", "content": message},
            ],
            max_tokens=1000,
            temperature=0.7,
        )
        return content.strip()
