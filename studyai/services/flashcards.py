from __future__ import annotations

from dataclasses import dataclass
from typing import List

from studyai.services.text_analysis import ExtractedConcept, extract_concepts, split_sentences


@dataclass
class FlashcardPair:
    question: str
    answer: str


CARD_TYPES = ["definition", "context", "application", "characteristics"]


def _card_from_concept(concept: ExtractedConcept, card_type: str) -> FlashcardPair:
    if card_type == "definition":
        return FlashcardPair(f"What is {concept.term}?", concept.definition)
    if card_type == "context":
        return FlashcardPair(f'In what context is "{concept.term}" discussed?', concept.context)
    if card_type == "application":
        return FlashcardPair(
            f"How is {concept.term} applied or used?",
            concept.application or concept.definition,
        )
    return FlashcardPair(
        f"What are the key characteristics of {concept.term}?",
        concept.characteristics or concept.definition,
    )


def _sentence_question(sentence: str, key_word: str, position: int) -> str:
    phrasings = [
        f'What does "{key_word}" refer to in this context?',
        f"According to the text, what is mentioned about {key_word.lower()}?",
        f'Complete this statement from the text: "{sentence[:30]}..."',
        f"What information is provided about {key_word.lower()}?",
    ]
    return phrasings[position % len(phrasings)]


def generate_local_flashcards(text: str, count: int) -> List[FlashcardPair]:
    """
    Build up to ``count`` question/answer cards without a language model.

    Extracted concepts come first, rotating through the four card types.
    Remaining slots are filled from raw sentences. Sparse text returns
    fewer cards than requested.
    """
    if count <= 0 or not text:
        return []

    cards: List[FlashcardPair] = []
    concepts = extract_concepts(text)
    for i, concept in enumerate(concepts[:count]):
        cards.append(_card_from_concept(concept, CARD_TYPES[i % len(CARD_TYPES)]))

    for sentence in split_sentences(text, 20):
        if len(cards) >= count:
            break
        words = [w for w in sentence.split() if len(w) > 4]
        if len(words) < 3:
            continue
        key_word = words[len(words) // 2]
        cards.append(FlashcardPair(_sentence_question(sentence, key_word, len(cards)), sentence))

    return cards[:count]
