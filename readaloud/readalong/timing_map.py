"""
Timing Map Module

Links playback time to sentence positions for the highlighter.
Built from the mark timepoints returned by synthesis, or from reading-time
estimates when the speech engine reports no marks.
Supports JSON export so a player can load it alongside the audio.
"""

import bisect
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from readaloud.readalong.sentence_metadata import Sentence
from readaloud.readalong.ssml_builder import END_MARK
from readaloud.utils import logger

SOURCE_TIMEPOINTS = "timepoints"
SOURCE_ESTIMATE = "estimate"


@dataclass
class TimingEntry:
    """Single timing entry linking audio time to a sentence."""

    sentence_id: int
    text: str
    start: float  # Start time in seconds
    end: float  # End time in seconds
    start_position: int = 0  # Character offsets in the original text
    end_position: int = 0
    estimated: bool = False

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return {
            "sentenceId": self.sentence_id,
            "text": self.text,
            "start": round(self.start, 3),
            "end": round(self.end, 3),
            "startPosition": self.start_position,
            "endPosition": self.end_position,
            "estimated": self.estimated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimingEntry":
        return cls(
            sentence_id=data["sentenceId"],
            text=data["text"],
            start=data["start"],
            end=data["end"],
            start_position=data.get("startPosition", 0),
            end_position=data.get("endPosition", 0),
            estimated=data.get("estimated", False),
        )


@dataclass
class SentenceTimingMap:
    """Timing entries for one synthesized selection."""

    entries: List[TimingEntry] = field(default_factory=list)
    source: str = SOURCE_ESTIMATE
    version: str = "1.0"

    @property
    def duration(self) -> float:
        return self.entries[-1].end if self.entries else 0.0

    def entry_at(self, seconds: float) -> Optional[TimingEntry]:
        """Return the entry playing at the given time, if any."""
        starts = [e.start for e in self.entries]
        index = bisect.bisect_right(starts, seconds) - 1
        if index < 0:
            return None
        entry = self.entries[index]
        if entry.start <= seconds < entry.end:
            return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return {
            "version": self.version,
            "source": self.source,
            "duration": round(self.duration, 3),
            "entryCount": len(self.entries),
            "entries": [e.to_dict() for e in self.entries],
        }

    def save(self, output_path: Path) -> Path:
        """Save timing map to JSON file."""
        output_path = Path(output_path).with_suffix(".json")
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        logger.success(f"Saved timing map: {output_path}")
        return output_path

    @classmethod
    def load(cls, path: Path) -> "SentenceTimingMap":
        """Load timing map from JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return cls(
            entries=[TimingEntry.from_dict(e) for e in data.get("entries", [])],
            source=data.get("source", SOURCE_ESTIMATE),
            version=data.get("version", "1.0"),
        )

    @classmethod
    def from_estimates(cls, sentences: List[Sentence], offset: float = 0.0) -> "SentenceTimingMap":
        """
        Lay sentences back to back using their estimated durations.

        Args:
            sentences: Annotated sentence metadata
            offset: Start time of the first sentence in seconds

        Returns:
            SentenceTimingMap with every entry marked as estimated
        """
        entries = []
        current = offset
        for sentence in sentences:
            end = current + sentence.estimated_duration_ms / 1000
            entries.append(_entry(sentence, current, end, estimated=True))
            current = end
        return cls(entries=entries, source=SOURCE_ESTIMATE)

    @classmethod
    def from_timepoints(
        cls,
        sentences: List[Sentence],
        timepoints: Mapping[str, float],
        audio_duration: Optional[float] = None,
        log: Any = logger,
    ) -> "SentenceTimingMap":
        """
        Build entries from synthesis mark timepoints.

        A sentence starts at its start_mark and ends where the next
        sentence starts; the last one ends at its end_mark, the "end"
        mark or the audio duration, whichever is found first. Sentences
        whose mark was not reported are placed after the previous entry
        using their estimate.

        Args:
            sentences: Annotated sentence metadata
            timepoints: Mark name -> time in seconds
            audio_duration: Total audio length in seconds, if known
            log: Logging sink exposing ``warning``

        Returns:
            SentenceTimingMap
        """
        starts: List[Optional[float]] = [timepoints.get(s.start_mark) for s in sentences]
        missing = [s.start_mark for s, t in zip(sentences, starts) if t is None]
        if missing:
            log.warning(f"No timepoint for marks {', '.join(missing)}; using estimates")

        entries: List[TimingEntry] = []
        previous_end = 0.0

        for index, sentence in enumerate(sentences):
            start = starts[index]
            estimated = start is None
            if estimated:
                start = previous_end
            start = max(start, previous_end)

            end = None
            if index + 1 < len(sentences):
                end = starts[index + 1]
            else:
                for candidate in (
                    timepoints.get(sentence.end_mark),
                    timepoints.get(END_MARK),
                    audio_duration,
                ):
                    if candidate is not None:
                        end = candidate
                        break

            if end is None or end < start:
                end = start + sentence.estimated_duration_ms / 1000
                estimated = True

            entries.append(_entry(sentence, start, end, estimated=estimated))
            previous_end = end

        return cls(entries=entries, source=SOURCE_TIMEPOINTS)


def _entry(sentence: Sentence, start: float, end: float, estimated: bool) -> TimingEntry:
    return TimingEntry(
        sentence_id=sentence.id,
        text=sentence.text,
        start=start,
        end=end,
        start_position=sentence.start_position,
        end_position=sentence.end_position,
        estimated=estimated,
    )
