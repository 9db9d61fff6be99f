"""
SSML Builder Module

Wraps text in SSML with named <mark> elements so playback progress can be
correlated with the text being highlighted. Also inverts the markup back
to plain text, validates it, and lists the marks it contains.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from readaloud.readalong.sentence_metadata import Sentence, get_sentence_metadata
from readaloud.readalong.sentence_splitter import SentenceSplitter

START_MARK = "start"
END_MARK = "end"
EMPTY_SELECTION_TEXT = "No sentences detected"

# Order matters: & first so the entities added after it are not re-escaped
_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)

_STRIP_TAGS = re.compile(r"<speak[^>]*>|</speak>|<mark[^>]*/>|<mark[^>]*>|</mark>", re.IGNORECASE)
_MARK_TAG = re.compile(r'<mark\s+name="([^"]+)"[^>]*/?>', re.IGNORECASE)


@dataclass
class Mark:
    """Descriptor for one <mark> in generated markup."""

    name: str
    type: str
    text: Optional[str] = None
    sentence_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "type": self.type}
        if self.text is not None:
            data["text"] = self.text
        if self.sentence_id is not None:
            data["sentenceId"] = self.sentence_id
        return data


@dataclass
class SSMLResult:
    """Generated markup and the marks it references."""

    markup: str
    marks: List[Mark] = field(default_factory=list)
    sentences: List[str] = field(default_factory=list)
    metadata: List[Sentence] = field(default_factory=list)
    method: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        data: Dict[str, Any] = {
            "ssml": self.markup,
            "marks": [m.to_dict() for m in self.marks],
        }
        if self.metadata:
            data["sentences"] = list(self.sentences)
            data["metadata"] = [s.to_dict() for s in self.metadata]
            data["totalSentences"] = len(self.sentences)
            data["method"] = self.method
        return data


@dataclass
class ValidationResult:
    valid: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"valid": self.valid}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class MarkPosition:
    name: str
    position: int  # Offset of the tag in the markup string

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "position": self.position}


def escape_ssml_text(text: str) -> str:
    """Escape the five XML special characters."""
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def unescape_ssml_text(text: str) -> str:
    """Reverse escape_ssml_text; &amp; goes last so "&amp;lt;" stays "&lt;"."""
    for char, entity in reversed(_ESCAPES):
        text = text.replace(entity, char)
    return text


def _mark_tag(name: str) -> str:
    return f'<mark name="{name}"/>'


def assemble_markup(text: str) -> SSMLResult:
    """
    Wrap the whole text between a "start" and an "end" mark.

    Args:
        text: Plain text to speak

    Returns:
        SSMLResult with the markup and two highlight mark descriptors
    """
    markup = f"<speak>{_mark_tag(START_MARK)}{escape_ssml_text(text)}{_mark_tag(END_MARK)}</speak>"
    return SSMLResult(
        markup=markup,
        marks=[
            Mark(name=START_MARK, type="highlight_start", text=text),
            Mark(name=END_MARK, type="highlight_end", text=text),
        ],
    )


def build_sentence_markup(
    text: str,
    language: Optional[str] = None,
    splitter: Optional[SentenceSplitter] = None,
) -> SSMLResult:
    """
    Build markup with a mark at every sentence boundary.

    Layout: start, s0, sentence 0, s1, sentence 1, ..., s<n>, end. Each
    sentence is spoken between its start_mark and end_mark, and every
    mark name appears exactly once.

    Args:
        text: Plain text to speak
        language: Locale tag for sentence detection
        splitter: Splitter to use (default: a new SentenceSplitter)

    Returns:
        SSMLResult with sentences and metadata attached
    """
    sentence_data = get_sentence_metadata(text, language, splitter=splitter)

    if not sentence_data.metadata:
        return assemble_markup(EMPTY_SELECTION_TEXT)

    lines = ["<speak>", f"  {_mark_tag(START_MARK)}"]
    marks = [Mark(name=START_MARK, type="speech_start")]

    for sentence in sentence_data.metadata:
        lines.append(f"  {_mark_tag(sentence.start_mark)}")
        lines.append(f"  {escape_ssml_text(sentence.text)}")
        marks.append(Mark(
            name=sentence.start_mark,
            type="sentence_start",
            text=sentence.text,
            sentence_id=sentence.id,
        ))

    last = sentence_data.metadata[-1]
    lines.append(f"  {_mark_tag(last.end_mark)}")
    marks.append(Mark(name=last.end_mark, type="sentence_end", text=last.text, sentence_id=last.id))

    lines.append(f"  {_mark_tag(END_MARK)}")
    lines.append("</speak>")
    marks.append(Mark(name=END_MARK, type="speech_end"))

    return SSMLResult(
        markup="\n".join(lines),
        marks=marks,
        sentences=list(sentence_data.sentences),
        metadata=sentence_data.metadata,
        method=sentence_data.method,
    )


def extract_plain_text(markup: str) -> str:
    """Strip speak/mark tags and unescape entities (for character counting)."""
    return unescape_ssml_text(_STRIP_TAGS.sub("", markup)).strip()


def _local_name(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def validate_markup(markup: str) -> ValidationResult:
    """Check that markup parses as XML and contains a <speak> element."""
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as e:
        return ValidationResult(valid=False, error=f"Invalid SSML structure: {e}")
    except (ValueError, TypeError) as e:
        # e.g. lone surrogates that cannot be encoded for the parser
        return ValidationResult(valid=False, error=f"SSML validation failed: {e}")

    if not any(_local_name(el.tag) == "speak" for el in root.iter()):
        return ValidationResult(valid=False, error="SSML must contain a <speak> root element")

    return ValidationResult(valid=True)


def extract_marks(markup: str) -> List[MarkPosition]:
    """List every <mark name="..."/> in order with its offset."""
    return [
        MarkPosition(name=match.group(1), position=match.start())
        for match in _MARK_TAG.finditer(markup)
    ]
