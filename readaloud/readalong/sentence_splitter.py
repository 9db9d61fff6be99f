"""
Sentence Splitter Module

Splits selected text into sentences for sentence-level highlighting.

Two strategies are available:
- library: pysbd's rule-based segmenter, keyed by language
- fallback: a punctuation/capitalization regex followed by an
  abbreviation merge pass; always available and side-effect free

The library strategy is preferred when enabled. Any failure it raises is
logged and the fallback result is returned instead.

Known limitation of the fallback: quoted dialogue and ellipses get no
special treatment, so '"Wait..." She left.' splits wherever the generic
punctuation rule says it does.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pysbd

from readaloud.readalong.abbreviations import ends_with_abbreviation
from readaloud.utils import logger
from readaloud.utils.config import config

METHOD_LIBRARY = "library"
METHOD_FALLBACK = "fallback"
UNKNOWN_LANGUAGE = "unknown"


class SegmentationFailure(Exception):
    """The library segmenter raised or returned unusable output."""


@dataclass
class DetectionResult:
    """Ordered sentences plus which strategy produced them."""

    sentences: List[str] = field(default_factory=list)
    method: str = METHOD_FALLBACK
    language: str = UNKNOWN_LANGUAGE

    @property
    def total_sentences(self) -> int:
        return len(self.sentences)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return {
            "sentences": list(self.sentences),
            "totalSentences": self.total_sentences,
            "method": self.method,
            "language": self.language,
        }


def clean_sentences(sentences: List[str]) -> List[str]:
    """Trim each sentence and drop empty ones."""
    stripped = (s.strip() for s in sentences)
    return [s for s in stripped if s]


class LibrarySegmenter:
    """
    pysbd-backed segmentation.

    One pysbd Segmenter is built per language on first use and cached.
    Unsupported languages make pysbd raise, which the splitter treats as
    a segmentation failure.
    """

    name = METHOD_LIBRARY

    def __init__(self):
        self._segmenters: Dict[str, pysbd.Segmenter] = {}

    def _get_segmenter(self, language: str) -> pysbd.Segmenter:
        segmenter = self._segmenters.get(language)
        if segmenter is None:
            segmenter = pysbd.Segmenter(language=language, clean=False)
            self._segmenters[language] = segmenter
        return segmenter

    def segment(self, text: str, language: str) -> List[str]:
        return self._get_segmenter(language).segment(text)


class FallbackSegmenter:
    """Regex splitter with abbreviation merging."""

    name = METHOD_FALLBACK

    # Break before a capital that follows whitespace after . ! or ?
    SPLIT_PATTERN = re.compile(r"(?<=[.!?])\s+(?=[A-Z])")

    def segment(self, text: str, language: Optional[str] = None) -> List[str]:
        candidates = self.SPLIT_PATTERN.split(text)

        merged: List[str] = []
        for candidate in candidates:
            if merged and ends_with_abbreviation(merged[-1]):
                # "Dr. | Smith" was split at an abbreviation, rejoin it
                merged[-1] = f"{merged[-1]} {candidate}"
            else:
                merged.append(candidate)

        return clean_sentences(merged)


class SentenceSplitter:
    """
    Sentence boundary detector choosing between library and fallback.

    The strategy is selected on every call: the library segmenter when it
    is configured and enabled, otherwise the fallback.
    """

    def __init__(
        self,
        library: Optional[Any] = None,
        use_library: Optional[bool] = None,
        log: Any = logger,
    ):
        """
        Initialize the sentence splitter.

        Args:
            library: Object with a ``segment(text, language)`` method
                (default: pysbd-backed LibrarySegmenter)
            use_library: Prefer the library strategy (default: from config)
            log: Logging sink exposing ``warning`` and ``info``
        """
        self.use_library = (
            config.use_library_segmenter if use_library is None else use_library
        )
        self._library = library
        self.fallback = FallbackSegmenter()
        self.log = log

    @property
    def library(self) -> Any:
        """The library strategy, built on first access."""
        if self._library is None:
            self._library = LibrarySegmenter()
        return self._library

    def detect(self, text: str, language: Optional[str] = None) -> DetectionResult:
        """
        Split text into trimmed, non-empty sentences.

        Args:
            text: Text to split (may be empty)
            language: Locale tag for the library strategy (default: from config)

        Returns:
            DetectionResult with the sentences and the strategy used
        """
        language = language or config.language

        if self.use_library:
            try:
                sentences = self.library.segment(text, language)
                if not isinstance(sentences, list) or not all(isinstance(s, str) for s in sentences):
                    raise SegmentationFailure(
                        f"Segmenter returned {type(sentences).__name__}, expected a list of strings"
                    )
                return DetectionResult(
                    sentences=clean_sentences(sentences),
                    method=METHOD_LIBRARY,
                    language=language,
                )
            except Exception as e:
                self.log.warning(f"Library sentence detection failed, using fallback: {e}")

        return self.detect_fallback(text)

    def detect_fallback(self, text: str) -> DetectionResult:
        """Run only the regex/abbreviation strategy."""
        return DetectionResult(
            sentences=self.fallback.segment(text),
            method=METHOD_FALLBACK,
            language=UNKNOWN_LANGUAGE,
        )


def detect_sentences(text: str, language: Optional[str] = None) -> DetectionResult:
    """
    Convenience function to split text into sentences.

    Args:
        text: Text to split
        language: Locale tag, e.g. "en"

    Returns:
        DetectionResult
    """
    splitter = SentenceSplitter()
    return splitter.detect(text, language)
