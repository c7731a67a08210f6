"""
Sentence splitting and concept extraction shared by the local generators
"""
from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional


# -------------------- SPLITTING --------------------

SENTENCE_DELIMITERS = re.compile(r"[.!?]+")
PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
NON_WORD_RE = re.compile(r"[^\w]")
LEADING_ARTICLE_RE = re.compile(r"^(the|a|an)\s+", re.IGNORECASE)

CONCEPT_SENTENCE_MIN = 30
CONTEXT_MAX_CHARS = 200
MAX_CONCEPTS = 10

# Ordered; the first pattern that yields an acceptable term wins for a sentence.
DEFINITION_PATTERNS = [
    re.compile(r"(.+?)\s+(?:is|are|means?|refers?\s+to|defined\s+as)\s+(.+)", re.IGNORECASE),
    re.compile(r"(.+?):\s*(.+)"),
    re.compile(r"The\s+(.+?)\s+(?:is|are)\s+(.+)", re.IGNORECASE),
]

FREQUENCY_STOPWORDS = set("""
that this with from they them were been have will would could should there where when what which
their these those other about after before being between through during under while because
also into more most some such than then very much many each every only over same
""".split())


def split_sentences(text: str, min_length: int = 0) -> List[str]:
    """Split on runs of . ! ? and keep trimmed sentences longer than min_length."""
    if not text:
        return []
    parts = (p.strip() for p in SENTENCE_DELIMITERS.split(text))
    return [p for p in parts if p and len(p) > min_length]


def split_paragraphs(text: str, min_length: int = 0) -> List[str]:
    if not text:
        return []
    parts = (p.strip() for p in PARAGRAPH_BREAK.split(text))
    return [p for p in parts if p and len(p) > min_length]


def truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


# -------------------- CONCEPTS --------------------

@dataclass
class ExtractedConcept:
    term: str
    definition: str
    context: str
    application: Optional[str] = None
    characteristics: Optional[str] = None


def _match_definition(sentence: str) -> Optional[tuple]:
    for pattern in DEFINITION_PATTERNS:
        match = pattern.search(sentence)
        if not match or not match.group(1) or not match.group(2):
            continue
        term = LEADING_ARTICLE_RE.sub("", match.group(1).strip())
        definition = match.group(2).strip()
        if 2 < len(term) < 50 and len(definition) > 10:
            return term, definition
    return None


def extract_important_terms(text: str, limit: int = 10) -> List[str]:
    """Most frequent meaningful words, ties in first-seen order."""
    freq: Counter = Counter()
    for word in (text or "").split():
        clean = NON_WORD_RE.sub("", word).lower()
        if len(clean) > 4 and clean not in FREQUENCY_STOPWORDS:
            freq[clean] += 1
    ranked = sorted(freq.items(), key=lambda item: -item[1])
    return [term for term, _ in ranked[:limit]]


def _concepts_from_frequency(text: str, sentences: List[str]) -> List[ExtractedConcept]:
    concepts: List[ExtractedConcept] = []
    for term in extract_important_terms(text):
        if len(term) >= 50:
            continue
        containing = [s for s in sentences if term in s.lower()]
        if not containing:
            continue
        concepts.append(ExtractedConcept(
            term=term,
            definition=containing[0],
            context=". ".join(containing[:2]),
        ))
    return concepts


def extract_concepts(text: str) -> List[ExtractedConcept]:
    """
    Find (term, definition, context) triples in free text.

    Definitional sentences ("X is Y", "X: Y", "The X is Y") are tried first;
    when none are found the most frequent terms are paired with the first
    sentence mentioning them. Never raises; at most MAX_CONCEPTS results.
    """
    sentences = split_sentences(text, CONCEPT_SENTENCE_MIN)
    concepts: List[ExtractedConcept] = []

    for index, sentence in enumerate(sentences):
        matched = _match_definition(sentence)
        if not matched:
            continue
        term, definition = matched
        window = sentences[max(0, index - 1): index + 2]
        context = ". ".join(window)
        concepts.append(ExtractedConcept(
            term=term,
            definition=definition,
            context=truncate(context, CONTEXT_MAX_CHARS),
            characteristics=f"Key aspects: {definition[:100]}...",
        ))

    if not concepts:
        concepts = _concepts_from_frequency(text, sentences)

    return concepts[:MAX_CONCEPTS]
