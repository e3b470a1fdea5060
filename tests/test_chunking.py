"""Tests for sentence-aligned chunking."""

import re

import pytest

from docgraph.ingestion.chunking import chunk_text, split_sentences


def _sentence_bodies(text: str) -> list[str]:
    return [s.strip() for s in re.split(r"[.!?]+", text) if s.strip()]


class TestSplitSentences:
    """Tests for split_sentences helper."""

    def test_keeps_first_terminal_mark(self):
        """Runs of punctuation collapse to their first mark."""
        assert split_sentences("Wait?! Really... Yes.") == ["Wait?", "Really.", "Yes."]

    def test_trailing_fragment_gets_period(self):
        """Text without final punctuation still yields a sentence."""
        assert split_sentences("First. Second") == ["First.", "Second."]

    def test_whitespace_only(self):
        """Whitespace yields no sentences."""
        assert split_sentences("   \n ") == []


class TestChunkText:
    """Tests for chunk_text."""

    def test_three_single_sentence_chunks(self):
        """'A. B. C.' with max 3 gives one chunk per sentence."""
        assert chunk_text("A. B. C.", max_chars=3) == ["A.", "B.", "C."]

    def test_short_text_single_chunk(self):
        """Text under the budget stays in one chunk."""
        assert chunk_text("Hello world. How are you?") == ["Hello world. How are you?"]

    def test_exclamation_and_question_marks_split(self):
        """All three terminal marks are sentence boundaries."""
        assert chunk_text("Stop! Why? Because.", max_chars=8) == ["Stop!", "Why?", "Because."]

    def test_no_sentences_returns_original(self):
        """Punctuation-only text comes back unchanged."""
        assert chunk_text("...") == ["..."]
        assert chunk_text("") == [""]

    def test_oversized_sentence_kept_whole(self):
        """A sentence longer than the budget becomes its own chunk."""
        long_sentence = "x" * 50 + "."
        chunks = chunk_text(f"Short. {long_sentence} Tail.", max_chars=20)
        assert chunks == ["Short.", long_sentence, "Tail."]

    def test_rejects_non_positive_budget(self):
        """max_chars must be positive."""
        with pytest.raises(ValueError):
            chunk_text("A.", max_chars=0)

    @pytest.mark.parametrize("max_chars", [5, 20, 64, 200])
    def test_chunk_size_bound(self, max_chars):
        """Chunks respect the budget unless a single sentence exceeds it."""
        text = " ".join(
            f"Sentence number {i} talks about {'topic ' * (i % 7)}things." for i in range(40)
        )
        for chunk in chunk_text(text, max_chars=max_chars):
            if len(chunk) > max_chars:
                assert len(split_sentences(chunk)) == 1

    @pytest.mark.parametrize("max_chars", [10, 80, 8000])
    def test_chunk_completeness(self, max_chars):
        """Joined chunks reproduce every sentence of the input in order."""
        text = "Alpha beta. Gamma delta! Epsilon? Zeta eta theta. Iota kappa lambda mu."
        chunks = chunk_text(text, max_chars=max_chars)
        assert _sentence_bodies(" ".join(chunks)) == _sentence_bodies(text)

    def test_default_budget_packs_many_sentences(self):
        """Default budget of 8000 characters groups sentences together."""
        text = "This is a sentence. " * 1000
        chunks = chunk_text(text)
        assert len(chunks) == 3
        assert all(len(c) <= 8000 for c in chunks)
