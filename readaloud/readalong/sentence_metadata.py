"""
Sentence Metadata Module

Locates detected sentences in the source text and annotates them with
word counts, reading-time estimates and the SSML mark names used to
correlate playback progress with sentence boundaries.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from readaloud.readalong.sentence_splitter import DetectionResult, SentenceSplitter
from readaloud.utils import logger
from readaloud.utils.config import config


@dataclass
class Sentence:
    """A detected sentence with position information."""

    id: int  # Detection order, 0-based
    text: str  # Trimmed sentence text
    start_position: int  # Character offset in original text
    end_position: int  # End character offset
    word_count: int = 0
    estimated_duration_ms: int = 1
    start_mark: str = ""
    end_mark: str = ""

    @property
    def length(self) -> int:
        return len(self.text)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return {
            "id": self.id,
            "text": self.text,
            "startPosition": self.start_position,
            "endPosition": self.end_position,
            "length": self.length,
            "wordCount": self.word_count,
            "startMark": self.start_mark,
            "endMark": self.end_mark,
            "estimatedDuration": self.estimated_duration_ms,
        }


@dataclass
class SentenceMetadata:
    """Detection result plus per-sentence metadata and totals."""

    sentences: List[str]
    method: str
    language: str
    metadata: List[Sentence] = field(default_factory=list)

    @property
    def total_sentences(self) -> int:
        return len(self.sentences)

    @property
    def total_words(self) -> int:
        return sum(s.word_count for s in self.metadata)

    @property
    def total_estimated_duration_ms(self) -> int:
        return sum(s.estimated_duration_ms for s in self.metadata)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return {
            "sentences": list(self.sentences),
            "totalSentences": self.total_sentences,
            "method": self.method,
            "language": self.language,
            "metadata": [s.to_dict() for s in self.metadata],
            "totalWords": self.total_words,
            "estimatedTotalDuration": self.total_estimated_duration_ms,
        }


def count_words(text: str) -> int:
    """Count whitespace-delimited, non-empty tokens."""
    return len(text.split())


def estimate_duration_ms(word_count: int, words_per_minute: Optional[int] = None) -> int:
    """Estimate reading time in milliseconds, never below 1."""
    wpm = words_per_minute or config.words_per_minute
    return max(1, round((word_count / wpm) * 60 * 1000))


def map_positions(text: str, sentences: List[str], log: Any = logger) -> List[Sentence]:
    """
    Find each sentence's offsets in the original text.

    Searches advance through the text so repeated sentences map to
    successive occurrences. A sentence that cannot be found is placed at
    the current search position; the offsets are then approximate but
    the sequence stays non-decreasing.
    """
    positioned = []
    cursor = 0

    for index, sentence in enumerate(sentences):
        start = text.find(sentence, cursor)
        if start == -1:
            log.warning(
                f"Sentence {index} not found in source text after offset {cursor}; "
                "using approximate position"
            )
            start = cursor
        end = start + len(sentence)
        cursor = end

        positioned.append(Sentence(
            id=index,
            text=sentence,
            start_position=start,
            end_position=end,
        ))

    return positioned


def annotate(sentences: List[Sentence], words_per_minute: Optional[int] = None) -> List[Sentence]:
    """Fill in word count, duration estimate and mark names in place."""
    for sentence in sentences:
        sentence.word_count = count_words(sentence.text)
        sentence.estimated_duration_ms = estimate_duration_ms(sentence.word_count, words_per_minute)
        sentence.start_mark = f"s{sentence.id}"
        sentence.end_mark = f"s{sentence.id + 1}"
    return sentences


def build_metadata(
    text: str,
    result: DetectionResult,
    words_per_minute: Optional[int] = None,
    log: Any = logger,
) -> SentenceMetadata:
    """Position and annotate an existing detection result."""
    metadata = annotate(map_positions(text, result.sentences, log=log), words_per_minute)
    return SentenceMetadata(
        sentences=list(result.sentences),
        method=result.method,
        language=result.language,
        metadata=metadata,
    )


def get_sentence_metadata(
    text: str,
    language: Optional[str] = None,
    splitter: Optional[SentenceSplitter] = None,
) -> SentenceMetadata:
    """
    Detect sentences and build their metadata.

    Args:
        text: Original text
        language: Locale tag, e.g. "en"
        splitter: Splitter to use (default: a new SentenceSplitter)

    Returns:
        SentenceMetadata for SSML generation and highlighting
    """
    splitter = splitter or SentenceSplitter()
    result = splitter.detect(text, language)
    return build_metadata(text, result, log=splitter.log)
