"""
Local chat replies used when no language model is configured
"""
from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence, Tuple

from studyai.services.summary import create_smart_summary
from studyai.services.text_analysis import NON_WORD_RE, split_sentences, truncate


Predicate = Callable[[str], bool]

QUESTION_STOPWORDS = set("""
what is the a an and or but in on at to for of with by from up about into through during before after
above below between among can could should would how why when where
""".split())

PHYSICS_TERMS = [
    "refraction", "reflection", "light", "wave", "wavelength", "frequency", "interference",
    "diffraction", "optics", "physics", "phenomenon", "rainbow", "prism", "lens", "index",
]

GREETING_RE = re.compile(r"\b(hello|hi|hey)\b")
AI_RE = re.compile(r"\bai\b")

DEFAULT_REPLY = (
    "I'm here to help you with any questions! I can provide information on a wide range of topics, "
    "help with problem-solving, explain concepts, assist with writing, or just have a conversation. "
    "Could you provide a bit more detail about what you'd like to know?"
)


def _any(*terms: str) -> Predicate:
    return lambda message: any(term in message for term in terms)


def _all(*predicates: Predicate) -> Predicate:
    return lambda message: all(p(message) for p in predicates)


def _regex(pattern: re.Pattern) -> Predicate:
    return lambda message: bool(pattern.search(message))


_BIGGEST_UNIVERSITY = _any("biggest university", "largest university")

# Evaluated top to bottom against the lowercased message; first hit wins.
KNOWLEDGE_TABLE: List[Tuple[Predicate, str]] = [
    (
        _regex(GREETING_RE),
        "Hello! I'm your AI assistant. I can help you with any questions, provide explanations on "
        "various topics, assist with problem-solving, and much more. What can I help you with today?",
    ),
    (
        _any("biggest lake", "largest lake"),
        "The world's biggest lake by surface area is the Caspian Sea, located between Europe and Asia. "
        "It covers approximately 371,000 square kilometers (143,200 square miles). Despite being called "
        "a 'sea,' it's technically a lake because it's completely enclosed by land and not directly "
        "connected to the world's oceans.",
    ),
    (
        _any("quantum physics"),
        "Quantum physics is the branch of physics that studies matter and energy at the smallest scales, "
        "typically at the level of atoms and subatomic particles. Key principles include wave-particle "
        "duality (particles can behave like waves), the uncertainty principle (you can't precisely know "
        "both position and momentum), and quantum entanglement (particles can be correlated regardless "
        "of distance).",
    ),
    (
        lambda m: bool(AI_RE.search(m)) or "artificial intelligence" in m,
        "Artificial Intelligence (AI) refers to computer systems that can perform tasks typically "
        "requiring human intelligence, such as learning, reasoning, problem-solving, and understanding "
        "language. Modern AI includes machine learning, neural networks, and large language models.",
    ),
    (
        lambda m: "networking" in m or ("explain" in m and "network" in m),
        "Networking refers to the practice of connecting computers and devices to share resources and "
        "communicate. It covers computer networks (LANs, WANs, and Internet protocols such as TCP/IP, "
        "HTTP and DNS), network types (Ethernet, Wi-Fi, cellular), network security (firewalls, VPNs, "
        "encryption) and, in a career sense, building professional relationships.",
    ),
    (
        _any("blockchain"),
        "Blockchain is a distributed digital ledger technology that maintains a continuously growing "
        "list of records (blocks) linked and secured using cryptography. Each block contains "
        "transaction data, timestamps, and cryptographic hashes. It's the technology behind "
        "cryptocurrencies like Bitcoin and has applications in supply chain management, digital "
        "identity, and smart contracts.",
    ),
    (
        _any("productivity"),
        "Here are some effective productivity tips: 1) Use the Pomodoro Technique (25-minute focused "
        "work sessions), 2) Prioritize tasks using the Eisenhower Matrix (urgent vs important), "
        "3) Eliminate distractions during work time, 4) Take regular breaks, 5) Set specific, achievable "
        "goals, and 6) Use tools like calendars and task lists to stay organized.",
    ),
    (
        _all(_any("pakistan"), _BIGGEST_UNIVERSITY),
        "Pakistan's biggest university by enrollment is the University of the Punjab (PU) in Lahore, "
        "established in 1882. It is one of the oldest and largest universities in Pakistan, with "
        "hundreds of thousands of students across its campuses and affiliated colleges. Other major "
        "universities include Karachi University, Quaid-i-Azam University Islamabad, and LUMS.",
    ),
    (
        _all(_any("pakistan"), _any("university")),
        "Pakistan has many renowned universities including the University of the Punjab, Quaid-i-Azam "
        "University Islamabad, University of Karachi, Lahore University of Management Sciences (LUMS), "
        "National University of Sciences and Technology (NUST), and the Pakistan Institute of "
        "Engineering and Applied Sciences (PIEAS).",
    ),
    (
        _all(_any("india"), _BIGGEST_UNIVERSITY),
        "India's biggest university by enrollment is Indira Gandhi National Open University (IGNOU) in "
        "New Delhi, established in 1985, with millions of students in distance-learning programs. Among "
        "traditional universities, the University of Mumbai and the University of Calcutta are among the "
        "largest.",
    ),
    (
        _all(_any("india"), _any("university")),
        "India has many prestigious universities including IGNOU (the largest by enrollment), the "
        "Indian Institutes of Technology (IITs), the Indian Institutes of Management (IIMs), Jawaharlal "
        "Nehru University, Delhi University, University of Mumbai, University of Calcutta, Banaras Hindu "
        "University, and Aligarh Muslim University.",
    ),
    (
        _all(_any("pakistan"), _any("geography")),
        "Pakistan is in South Asia, bordered by India (east), Afghanistan and Iran (west), China (north) "
        "and the Arabian Sea (south). The Indus is its main river. The north holds the Himalaya, "
        "Karakoram (home of K2) and Hindu Kush ranges, the centre has fertile plains, and the Thar Desert "
        "lies in the southeast. The country covers about 796,095 square kilometers.",
    ),
    (
        _all(_any("president"), _any("america", "usa", "united states")),
        "Donald Trump took office as the 47th President of the United States on January 20, 2025. "
        "Political leadership can change, so check recent news sources for the most current information.",
    ),
    (
        _BIGGEST_UNIVERSITY,
        "The biggest university in the world by enrollment is typically considered to be Indira Gandhi "
        "National Open University (IGNOU) in India. For traditional campus-based universities, the "
        "University of Central Florida in the US and Anadolu University in Turkey are among the largest.",
    ),
]


def universal_response(message: str) -> str:
    lowered = message.lower()
    for predicate, response in KNOWLEDGE_TABLE:
        if predicate(lowered):
            return response
    return DEFAULT_REPLY


# -------------------- DOCUMENT CONTEXT --------------------

def extract_question_keywords(message: str) -> List[str]:
    keywords = []
    for word in message.lower().split():
        word = NON_WORD_RE.sub("", word)
        if len(word) > 3 and word not in QUESTION_STOPWORDS:
            keywords.append(word)
    return keywords[:5]


def find_relevant_content(context: str, keywords: Sequence[str]) -> str:
    """Top three context sentences by keyword hits, or the head of the context."""
    scored = []
    for sentence in split_sentences(context, 20):
        score = sum(len(re.findall(re.escape(k), sentence, re.IGNORECASE)) for k in keywords if k)
        if score > 0:
            scored.append((score, sentence))
    scored.sort(key=lambda item: -item[0])
    if scored:
        return ". ".join(sentence for _, sentence in scored[:3])
    return context[:500]


TERM_PATTERNS = [
    re.compile(r"what\s+is\s+([^?]+)", re.IGNORECASE),
    re.compile(r"define\s+([^?]+)", re.IGNORECASE),
    re.compile(r"explain\s+([^?]+)", re.IGNORECASE),
    re.compile(r"what\s+are\s+([^?]+)", re.IGNORECASE),
]


def extract_term_from_question(message: str) -> Optional[str]:
    for pattern in TERM_PATTERNS:
        match = pattern.search(message)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def extract_definition_from_context(context: str, term: str) -> Optional[str]:
    pattern = re.compile(re.escape(term) + r"\s+(?:is|are|refers\s+to|means)\s+\S", re.IGNORECASE)
    for sentence in split_sentences(context):
        if pattern.search(sentence):
            return sentence
    return None


def follow_up_suggestion(keywords: Sequence[str]) -> str:
    if keywords:
        return f"Would you like me to explain more about {keywords[0]}?"
    return "Feel free to ask more specific questions about your study material."


def contains_physics_terms(message: str) -> bool:
    lowered = message.lower()
    return any(term in lowered for term in PHYSICS_TERMS)


def physics_topic_response(message: str, relevant: str) -> Optional[str]:
    lowered = message.lower()
    if "refraction" in lowered:
        info = find_relevant_content(relevant, ["refraction", "light", "wave"]) if relevant else ""
        detail = (
            f"From your notes: {info}" if info else
            "It occurs because light travels at different speeds in different materials, causing the "
            "light ray to change direction at the boundary between two media."
        )
        return f"Refraction is the bending of light as it passes through different media. {detail}"
    if "rainbow" in lowered:
        return (
            "A rainbow forms through refraction and dispersion of white light. When sunlight enters "
            "water droplets, it refracts, separates into different colors (dispersion), reflects off the "
            "back of the droplet, and refracts again as it exits, creating the spectrum of colors we see."
        )
    if "interference" in lowered or "double slit" in lowered:
        return (
            "Young's double slit experiment demonstrates wave interference. When coherent light passes "
            "through two parallel slits, it creates an interference pattern of bright and dark fringes, "
            "showing the wave nature of light."
        )
    return None


def _has_word(message: str, *words: str) -> bool:
    return any(re.search(r"\b" + re.escape(w) + r"\b", message) for w in words)


def respond_with_context(message: str, context: str) -> str:
    lowered = message.lower()
    keywords = extract_question_keywords(message)
    relevant = find_relevant_content(context, keywords)

    topic = physics_topic_response(message, relevant)
    if topic:
        return topic

    if "what is" in lowered or _has_word(lowered, "define", "explain"):
        term = extract_term_from_question(message)
        if term and term.lower() in relevant.lower():
            definition = extract_definition_from_context(relevant, term)
            return definition or (
                f'Based on your notes, "{term}" is mentioned in the context of: {truncate(relevant, 300)}'
            )
        return f"I found this relevant information in your notes: {truncate(relevant, 400)}"

    if _has_word(lowered, "how", "why", "when"):
        return f"Based on your study material: {truncate(relevant, 400)} {follow_up_suggestion(keywords)}"

    if _has_word(lowered, "summary", "summarize"):
        return f"Here's a summary of the relevant content from your notes: {create_smart_summary(relevant)}"

    if _has_word(lowered, "example", "examples", "application", "applications"):
        return (
            f"From your study material, here are the key points about {', '.join(keywords)}: "
            f"{truncate(relevant, 350)}"
        )

    if contains_physics_terms(message):
        return f"Based on your physics study material: {truncate(relevant, 300)}"

    return (
        f'I found relevant information about "{", ".join(keywords)}" in your notes: '
        f"{truncate(relevant, 300)} Would you like me to elaborate on any specific aspect?"
    )


def respond_locally(message: str, context: Optional[str] = None) -> str:
    if not context or not context.strip():
        return universal_response(message)
    return respond_with_context(message, context)
