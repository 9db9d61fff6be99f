"""
Read-Along Module

Sentence detection and SSML mark mapping for spoken text selections.
Produces the sentence positions and mark names a highlighter needs to
follow playback.
"""

from readaloud.readalong.sentence_splitter import (
    DetectionResult,
    SentenceSplitter,
    detect_sentences,
)
from readaloud.readalong.sentence_metadata import (
    Sentence,
    SentenceMetadata,
    get_sentence_metadata,
)
from readaloud.readalong.ssml_builder import (
    Mark,
    MarkPosition,
    SSMLResult,
    ValidationResult,
    assemble_markup,
    build_sentence_markup,
    extract_marks,
    extract_plain_text,
    validate_markup,
)
from readaloud.readalong.timing_map import SentenceTimingMap, TimingEntry

__all__ = [
    "DetectionResult",
    "SentenceSplitter",
    "detect_sentences",
    "Sentence",
    "SentenceMetadata",
    "get_sentence_metadata",
    "Mark",
    "MarkPosition",
    "SSMLResult",
    "ValidationResult",
    "assemble_markup",
    "build_sentence_markup",
    "extract_marks",
    "extract_plain_text",
    "validate_markup",
    "SentenceTimingMap",
    "TimingEntry",
]
