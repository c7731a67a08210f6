"""
Unit tests for sentence splitting and concept extraction
"""
from studyai.services.text_analysis import (
    extract_concepts, extract_important_terms, split_paragraphs, split_sentences, truncate,
)

from conftest import PHOTOSYNTHESIS


class TestSplitting:
    def test_split_sentences_filters_short(self):
        text = "Short one. This sentence is long enough to keep! Tiny? Another sentence that survives the cut."
        assert split_sentences(text, 20) == [
            "This sentence is long enough to keep",
            "Another sentence that survives the cut",
        ]

    def test_split_paragraphs(self):
        text = "First block of text.\n\n  \nSecond block of text.\n\n"
        assert split_paragraphs(text) == ["First block of text.", "Second block of text."]

    def test_truncate(self):
        assert truncate("abcdef", 10) == "abcdef"
        assert truncate("abcdef", 3) == "abc..."


class TestConceptExtraction:
    def test_empty_input(self):
        """Empty text yields no concepts"""
        assert extract_concepts("") == []
        assert extract_concepts("   ") == []

    def test_definition_sentence(self):
        concepts = extract_concepts(PHOTOSYNTHESIS)
        assert concepts[0].term == "Photosynthesis"
        assert concepts[0].definition.startswith("the process by which")
        assert concepts[0].definition == "the process by which plants convert light energy into chemical energy"
        assert concepts[0].characteristics.startswith("Key aspects: the process")

    def test_label_pattern(self):
        concepts = extract_concepts("Mitochondria: the powerhouse of the cell that makes energy.")
        assert len(concepts) == 1
        assert concepts[0].term == "Mitochondria"
        assert concepts[0].definition == "the powerhouse of the cell that makes energy"

    def test_leading_article_stripped(self):
        concepts = extract_concepts("The nucleus is the control center of every eukaryotic cell.")
        assert concepts[0].term == "nucleus"

    def test_context_window_truncated(self):
        filler = "word " * 60
        text = f"{filler}first. Osmosis is the movement of water across a membrane. {filler}last."
        concepts = extract_concepts(text)
        osmosis = [c for c in concepts if c.term == "Osmosis"][0]
        assert len(osmosis.context) == 203
        assert osmosis.context.endswith("...")

    def test_frequency_fallback(self):
        """Without definitional sentences the most frequent terms are used"""
        text = (
            "Volcanoes erupt molten rock during eruptions. "
            "Scientists monitor volcanoes with seismic sensors daily. "
            "Volcanoes shape islands over thousands of years."
        )
        concepts = extract_concepts(text)
        assert concepts[0].term == "volcanoes"
        assert concepts[0].definition == "Volcanoes erupt molten rock during eruptions"
        assert len(concepts) <= 10
        for concept in concepts:
            assert concept.term in concept.definition.lower()

    def test_output_capped_at_ten(self):
        text = " ".join(f"Term{i} is a definition of the numbered concept {i}." for i in range(15))
        assert len(extract_concepts(text)) == 10

    def test_important_terms_ranked_by_frequency(self):
        text = "gamma gamma gamma alpha alpha beta there there there there"
        assert extract_important_terms(text) == ["gamma", "alpha"]
