"""
Local multiple-choice quiz generation
"""
from __future__ import annotations

import random
import re
import string
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Tuple

from studyai.services.text_analysis import split_paragraphs, split_sentences, truncate


QUESTION_TYPES = ["fill_blank", "definition", "context", "comprehension"]
OPTION_COUNT = 4
BLANK = "_____"

QUIZ_STOPWORDS = set("""
the and but for are was were been have has will would could should very much many some most each every
""".split())

SUFFIX_VARIANTS = ["s", "ing", "ed", "y", "ly"]

RHYMES = {
    "tion": ["nation", "station", "creation"],
    "ing": ["thing", "ring", "sing"],
    "ed": ["red", "bed", "led"],
    "ly": ["my", "by", "try"],
}

DEFINITION_ANSWER = "The concept mentioned in the given context"

CONTEXT_DISTRACTORS = [
    "This information is not mentioned in the text",
    "The text suggests the opposite meaning",
    "This is partially correct but not the main point",
]

GENERIC_FILLERS = [
    "None of the above",
    "All of the above",
    "The text does not say",
    "It cannot be determined from the text",
]


@dataclass
class QuizQuestion:
    id: str
    question: str
    options: List[str] = field(default_factory=list)
    correct: int = 0
    explanation: str = ""

    @property
    def correct_answer(self) -> str:
        return self.options[self.correct]


def shuffle_options(options: List[str], rng: random.Random) -> None:
    """In-place Fisher-Yates shuffle."""
    for i in range(len(options) - 1, 0, -1):
        j = rng.randrange(i + 1)
        options[i], options[j] = options[j], options[i]


def complete_options(correct: str, distractors: Iterable[str], fillers: Iterable[str]) -> List[str]:
    """Correct answer first, then distinct distractors, padded from fillers."""
    options = [correct]
    seen: Set[str] = {correct}
    for candidate in list(distractors) + list(fillers):
        if len(options) == OPTION_COUNT:
            break
        if candidate and candidate not in seen:
            seen.add(candidate)
            options.append(candidate)
    return options


class QuizBuilder:
    """
    Turns text segments into multiple-choice questions.

    Question types rotate by output position. Segments are revisited in
    later passes, but a segment never produces the same question type
    twice; generation stops once ``count`` is reached or a full pass adds
    nothing.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    # ---------- segmentation ----------

    @staticmethod
    def segments(text: str) -> List[str]:
        paragraphs = split_paragraphs(text, 50)
        return paragraphs if paragraphs else split_sentences(text, 20)

    @staticmethod
    def candidate_words(sentence: str) -> List[str]:
        words = []
        for word in sentence.split():
            if len(word) <= 3 or word.lower() in QUIZ_STOPWORDS:
                continue
            if not word.strip(string.punctuation):
                continue
            words.append(word)
        return words

    @staticmethod
    def find_key_word(words: List[str]) -> str:
        """Prefer capitalised and longer words; inner hyphens and apostrophes are kept."""
        scored = [
            (len(word) + (5 if word[0].isupper() else 0), word.strip(string.punctuation))
            for word in words
        ]
        scored.sort(key=lambda item: -item[0])
        return scored[0][1]

    # ---------- distractors ----------

    def similar_word(self, word: str) -> str:
        suffix = self.rng.choice(SUFFIX_VARIANTS)
        if suffix == "y":
            return word[:-1] + "y"
        return word + suffix

    def rhyming_word(self, word: str) -> str:
        for ending, rhymes in RHYMES.items():
            if word.endswith(ending):
                candidates = [r for r in rhymes if r != word]
                if candidates:
                    return self.rng.choice(candidates)
        return word[::-1]

    def _finish(self, number: int, question: str, options: List[str], explanation: str) -> QuizQuestion:
        correct_value = options[0]
        shuffle_options(options, self.rng)
        return QuizQuestion(
            id=f"q{number}",
            question=question,
            options=options,
            correct=options.index(correct_value),
            explanation=explanation,
        )

    # ---------- question types ----------

    def fill_blank(self, sentence: str, target: str, number: int) -> Optional[QuizQuestion]:
        pattern = r"(?<!\w)" + re.escape(target) + r"(?!\w)"
        blanked, replaced = re.subn(pattern, BLANK, sentence, count=1, flags=re.IGNORECASE)
        if not replaced:
            return None
        distractors = [
            target.upper() if target.lower() == target else target.lower(),
            self.similar_word(target),
            self.rhyming_word(target),
        ]
        fillers = [target + suffix for suffix in ("s", "ing", "ed", "ly", "er", "ness")]
        options = complete_options(target, distractors, fillers)
        return self._finish(
            number,
            f"Fill in the blank: {blanked}",
            options,
            f'The correct answer is "{target}" as it fits the context of the sentence.',
        )

    def definition(self, segment: str, target: str, number: int) -> QuizQuestion:
        lowered = target.lower()
        distractors = [
            f"A type of {lowered}",
            f"The opposite of {lowered}",
            f"A synonym for {lowered}",
        ]
        options = complete_options(DEFINITION_ANSWER, distractors, GENERIC_FILLERS)
        context = segment[:150] + "..."
        return self._finish(
            number,
            f'Based on the context: "{context}", what does "{target}" refer to?',
            options,
            f'"{target}" is best understood from its usage in the given context.',
        )

    def context(self, segment: str, sentence: str, number: int) -> QuizQuestion:
        main_idea = truncate(sentence, 80)
        options = complete_options(main_idea, CONTEXT_DISTRACTORS, GENERIC_FILLERS)
        return self._finish(
            number,
            "Which statement best represents the main idea from the given text?",
            options,
            "This statement directly reflects the content and main idea presented in the text.",
        )

    def comprehension(self, segment: str, sentence: str, number: int) -> QuizQuestion:
        words = [w for w in sentence.split() if len(w) > 3]
        key_word = words[len(words) // 2].strip(string.punctuation) if words else ""
        key_word = key_word or "concept"
        distractors = [
            f"{key_word} is not discussed in this context",
            f"The text contradicts this information about {key_word}",
            f"{key_word} is mentioned but with different details",
        ]
        options = complete_options(f"The text discusses {key_word} as described", distractors, GENERIC_FILLERS)
        return self._finish(
            number,
            f"Based on the text, what can you conclude about {key_word}?",
            options,
            f"The text provides information about {key_word} that supports this conclusion.",
        )

    # ---------- driver ----------

    def _question_for(self, segment: str, question_type: str, number: int) -> Optional[QuizQuestion]:
        sentences = split_sentences(segment, 20)
        if not sentences:
            return None
        sentence = sentences[0]
        words = self.candidate_words(sentence)
        if len(words) < 2:
            return None
        target = self.find_key_word(words)

        if question_type == "fill_blank":
            return self.fill_blank(sentence, target, number)
        if question_type == "definition":
            return self.definition(segment, target, number)
        if question_type == "context":
            return self.context(segment, sentence, number)
        return self.comprehension(segment, sentence, number)

    def build(self, text: str, count: int) -> List[QuizQuestion]:
        if count <= 0 or not text:
            return []
        segments = self.segments(text)
        questions: List[QuizQuestion] = []
        used: Set[Tuple[int, str]] = set()

        while len(questions) < count:
            added = False
            for index, segment in enumerate(segments):
                if len(questions) >= count:
                    break
                question_type = QUESTION_TYPES[len(questions) % len(QUESTION_TYPES)]
                if (index, question_type) in used:
                    continue
                question = self._question_for(segment, question_type, len(questions) + 1)
                if question is None:
                    continue
                used.add((index, question_type))
                questions.append(question)
                added = True
            if not added:
                break

        return questions


def generate_local_quiz(text: str, count: int, rng: Optional[random.Random] = None) -> List[QuizQuestion]:
    return QuizBuilder(rng).build(text, count)
