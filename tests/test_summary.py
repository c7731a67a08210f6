"""
Unit tests for extractive summaries
"""
from studyai.services.summary import create_smart_summary, generate_local_summary


class TestLocalSummary:
    def test_empty_text(self):
        assert generate_local_summary("") == ""
        assert generate_local_summary("Too short.") == ""

    def test_prefers_importance_words(self):
        text = (
            "Cells divide often in young tissue. "
            "The key idea is that DNA replicates first. "
            "Growth requires energy from food sources."
        )
        assert generate_local_summary(text) == "The key idea is that DNA replicates first."

    def test_falls_back_to_leading_sentences(self):
        text = (
            "Alpha particles travel short distances. "
            "Beta particles travel further distances. "
            "Gamma rays travel very long distances. "
            "Neutrons penetrate dense materials easily."
        )
        assert generate_local_summary(text) == (
            "Alpha particles travel short distances. "
            "Beta particles travel further distances. "
            "Gamma rays travel very long distances."
        )

    def test_at_most_three_sentences(self):
        text = " ".join(f"Important point number {i} appears here." for i in range(6))
        summary = generate_local_summary(text)
        assert summary.count(".") == 3


class TestSmartSummary:
    def test_two_sentence_limit(self):
        text = " ".join(f"Important point number {i} appears here." for i in range(6))
        assert create_smart_summary(text) == (
            "Important point number 0 appears here. Important point number 1 appears here."
        )

    def test_fundamental_counts_as_important(self):
        text = (
            "Ordinary sentence about nothing much. "
            "Gravity is a fundamental interaction of nature. "
            "Another ordinary sentence follows here."
        )
        assert create_smart_summary(text) == "Gravity is a fundamental interaction of nature."
        assert generate_local_summary(text).startswith("Ordinary sentence")
