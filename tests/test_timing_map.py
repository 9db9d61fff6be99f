"""Tests for timing maps built from timepoints and estimates."""

import json

import pytest

from readaloud.readalong.sentence_metadata import get_sentence_metadata
from readaloud.readalong.timing_map import (
    SOURCE_ESTIMATE,
    SOURCE_TIMEPOINTS,
    SentenceTimingMap,
)


@pytest.fixture
def metadata(fallback_splitter):
    return get_sentence_metadata("One two three. Four five.", splitter=fallback_splitter).metadata


class TestFromTimepoints:

    def test_sentence_times_from_marks(self, metadata, log):
        timepoints = {"start": 0.0, "s0": 0.05, "s1": 1.2, "s2": 2.0, "end": 2.1}
        timing = SentenceTimingMap.from_timepoints(metadata, timepoints, log=log)
        assert timing.source == SOURCE_TIMEPOINTS
        assert [(e.start, e.end) for e in timing.entries] == [(0.05, 1.2), (1.2, 2.0)]
        assert not any(e.estimated for e in timing.entries)
        assert not log.warnings

    def test_entries_carry_positions(self, metadata, log):
        timing = SentenceTimingMap.from_timepoints(metadata, {"s0": 0.0, "s1": 1.0, "s2": 2.0}, log=log)
        assert [(e.start_position, e.end_position) for e in timing.entries] == [(0, 14), (15, 25)]
        assert [e.sentence_id for e in timing.entries] == [0, 1]

    def test_last_entry_uses_end_mark_then_audio_duration(self, metadata, log):
        timing = SentenceTimingMap.from_timepoints(metadata, {"s0": 0.0, "s1": 1.0, "end": 1.8}, log=log)
        assert timing.entries[-1].end == 1.8

        timing = SentenceTimingMap.from_timepoints(
            metadata, {"s0": 0.0, "s1": 1.0}, audio_duration=2.5, log=log,
        )
        assert timing.entries[-1].end == 2.5
        assert not timing.entries[-1].estimated

    def test_missing_marks_are_estimated(self, metadata, log):
        timing = SentenceTimingMap.from_timepoints(metadata, {"s0": 0.0, "s2": 2.0}, log=log)
        first, second = timing.entries
        assert first.end == pytest.approx(0.9)
        assert first.estimated
        assert second.start == pytest.approx(0.9)
        assert second.end == 2.0
        assert second.estimated
        assert len(log.warnings) == 1
        assert "s1" in log.warnings[0]

    def test_no_end_information_uses_estimate(self, metadata, log):
        timing = SentenceTimingMap.from_timepoints(metadata, {"s0": 0.0, "s1": 1.0}, log=log)
        assert timing.entries[-1].end == pytest.approx(1.6)
        assert timing.entries[-1].estimated


class TestFromEstimates:

    def test_back_to_back(self, metadata):
        timing = SentenceTimingMap.from_estimates(metadata)
        assert timing.source == SOURCE_ESTIMATE
        assert [(e.start, e.end) for e in timing.entries] == [
            (0.0, pytest.approx(0.9)),
            (pytest.approx(0.9), pytest.approx(1.5)),
        ]
        assert timing.duration == pytest.approx(sum(s.estimated_duration_ms for s in metadata) / 1000)
        assert all(e.estimated for e in timing.entries)

    def test_offset(self, metadata):
        timing = SentenceTimingMap.from_estimates(metadata, offset=2.0)
        assert timing.entries[0].start == 2.0

    def test_empty(self):
        timing = SentenceTimingMap.from_estimates([])
        assert timing.entries == []
        assert timing.duration == 0.0


class TestEntryAt:

    def test_lookup(self, metadata, log):
        timing = SentenceTimingMap.from_timepoints(metadata, {"s0": 0.0, "s1": 1.0, "s2": 2.0}, log=log)
        assert timing.entry_at(0.5).sentence_id == 0
        assert timing.entry_at(1.0).sentence_id == 1
        assert timing.entry_at(2.0) is None
        assert timing.entry_at(-0.1) is None

    def test_gap_before_first_sentence(self, metadata, log):
        timing = SentenceTimingMap.from_timepoints(metadata, {"s0": 0.3, "s1": 1.0, "s2": 2.0}, log=log)
        assert timing.entry_at(0.1) is None


class TestPersistence:

    def test_save_and_load(self, metadata, tmp_path, log):
        timing = SentenceTimingMap.from_timepoints(metadata, {"s0": 0.0, "s1": 1.0, "s2": 2.0}, log=log)
        path = timing.save(tmp_path / "nested" / "speech")
        assert path.suffix == ".json"

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["entryCount"] == 2
        assert data["source"] == "timepoints"
        assert data["entries"][1]["text"] == "Four five."

        loaded = SentenceTimingMap.load(path)
        assert loaded.to_dict() == timing.to_dict()
