"""Tests for sentence detection and the abbreviation table."""

import pytest

from readaloud.readalong.abbreviations import ends_with_abbreviation, is_abbreviation
from readaloud.readalong.sentence_splitter import (
    METHOD_FALLBACK,
    METHOD_LIBRARY,
    UNKNOWN_LANGUAGE,
    FallbackSegmenter,
    SentenceSplitter,
    detect_sentences,
)


class TestAbbreviations:

    @pytest.mark.parametrize("token", ["Dr.", "dr", "MRS.", "U.S.", "e.g.", "Blvd.", "LLC", "etc."])
    def test_known_abbreviations(self, token):
        assert is_abbreviation(token)

    @pytest.mark.parametrize("token", ["home.", "Smith", "1st.", "...", ""])
    def test_ordinary_tokens(self, token):
        assert not is_abbreviation(token)

    def test_ends_with_abbreviation_uses_last_token(self):
        assert ends_with_abbreviation("He met Prof.")
        assert not ends_with_abbreviation("Prof. Smith left.")

    def test_ends_with_abbreviation_empty(self):
        assert not ends_with_abbreviation("   ")


class TestFallbackSegmenter:

    def test_basic_punctuation(self):
        sentences = FallbackSegmenter().segment("Hello world! How are you today? This is a test.")
        assert sentences == ["Hello world!", "How are you today?", "This is a test."]

    def test_abbreviation_merge(self):
        sentences = FallbackSegmenter().segment("Dr. Smith went home. He left.")
        assert sentences == ["Dr. Smith went home.", "He left."]

    def test_several_abbreviations(self):
        text = "Dr. Smith went to the U.S.A. on Jan. 1st. He met Prof. Johnson there."
        sentences = FallbackSegmenter().segment(text)
        assert sentences == [
            "Dr. Smith went to the U.S.A. on Jan. 1st.",
            "He met Prof. Johnson there.",
        ]

    def test_dotted_acronym(self):
        sentences = FallbackSegmenter().segment("He moved to the U.S. Later he returned.")
        assert sentences == ["He moved to the U.S. Later he returned."]

    def test_lowercase_after_period_does_not_split(self):
        sentences = FallbackSegmenter().segment("Version 2. it works. Fine.")
        assert sentences == ["Version 2. it works.", "Fine."]

    def test_no_terminal_punctuation(self):
        assert FallbackSegmenter().segment("  just some words  ") == ["just some words"]

    @pytest.mark.parametrize("text", ["", "   ", "\n\t "])
    def test_empty_input(self, text):
        assert FallbackSegmenter().segment(text) == []

    def test_merge_joins_with_single_space(self):
        sentences = FallbackSegmenter().segment("Ask Mr.\n\nJones now.")
        assert sentences == ["Ask Mr. Jones now."]


class TestSentenceSplitter:

    def test_fallback_result_fields(self, fallback_splitter):
        result = fallback_splitter.detect("One. Two.", "en")
        assert result.method == METHOD_FALLBACK
        assert result.language == UNKNOWN_LANGUAGE
        assert result.total_sentences == 2

    def test_library_strategy_preferred(self, log):
        class Library:
            def segment(self, text, language):
                return [" first ", "", "second"]

        splitter = SentenceSplitter(library=Library(), use_library=True, log=log)
        result = splitter.detect("ignored", "de")
        assert result.method == METHOD_LIBRARY
        assert result.language == "de"
        assert result.sentences == ["first", "second"]

    def test_library_failure_falls_back(self, log):
        class BrokenLibrary:
            def segment(self, text, language):
                raise RuntimeError("boom")

        splitter = SentenceSplitter(library=BrokenLibrary(), use_library=True, log=log)
        result = splitter.detect("Dr. Smith went home. He left.")
        assert result.method == METHOD_FALLBACK
        assert result.sentences == ["Dr. Smith went home.", "He left."]
        assert len(log.warnings) == 1
        assert "boom" in log.warnings[0]

    @pytest.mark.parametrize("output", ["Hi. Bye.", None, ["Hi.", 3], ("Hi.", "Bye.")])
    def test_malformed_library_output_falls_back(self, log, output):
        class OddLibrary:
            def segment(self, text, language):
                return output

        splitter = SentenceSplitter(library=OddLibrary(), use_library=True, log=log)
        result = splitter.detect("Hi. Bye.", "en")
        assert result.method == METHOD_FALLBACK
        assert result.language == UNKNOWN_LANGUAGE
        assert result.sentences == ["Hi.", "Bye."]
        assert len(log.warnings) == 1
        assert "expected a list of strings" in log.warnings[0]

    def test_unsupported_language_falls_back(self, log):
        splitter = SentenceSplitter(use_library=True, log=log)
        result = splitter.detect("One here. Two here.", "xx")
        assert result.method == METHOD_FALLBACK
        assert result.sentences == ["One here.", "Two here."]
        assert log.warnings

    def test_pysbd_library(self, log):
        splitter = SentenceSplitter(use_library=True, log=log)
        result = splitter.detect("Dr. Smith went home. He left.", "en")
        assert result.method == METHOD_LIBRARY
        assert result.language == "en"
        assert len(result.sentences) == 2
        assert "Dr. Smith went home." in result.sentences[0]
        assert not log.warnings

    def test_to_dict(self, fallback_splitter):
        data = fallback_splitter.detect("A b. C d.").to_dict()
        assert data == {
            "sentences": ["A b.", "C d."],
            "totalSentences": 2,
            "method": "fallback",
            "language": "unknown",
        }


class TestDetectSentences:

    def test_abbreviation_example(self):
        result = detect_sentences("Dr. Smith went home. He left.")
        assert len(result.sentences) == 2
        assert "Dr. Smith went home." in result.sentences[0]

    @pytest.mark.parametrize("text", [
        "Hello world! How are you today? This is a test.",
        "Dr. Smith went to the U.S.A. on Jan. 1st. He met Prof. Johnson there.",
        "No punctuation at all",
        "Line one.\nLine two.\n\nLine three!",
    ])
    def test_no_character_loss_fallback(self, text):
        result = SentenceSplitter(use_library=False).detect(text)
        assert "".join(" ".join(result.sentences).split()) == "".join(text.split())

    @pytest.mark.parametrize("text", [
        "Hello world! How are you today? This is a test.",
        "No punctuation at all",
    ])
    def test_no_character_loss_library(self, text):
        result = SentenceSplitter(use_library=True).detect(text, "en")
        assert result.method == METHOD_LIBRARY
        assert "".join(" ".join(result.sentences).split()) == "".join(text.split())

    def test_empty_text(self):
        assert detect_sentences("").sentences == []
