"""Shared fixtures for the readaloud test suite."""

import pytest

from readaloud.readalong.sentence_splitter import SentenceSplitter


class RecordingLog:
    """Logging sink that keeps messages instead of printing them."""

    def __init__(self):
        self.warnings = []
        self.infos = []

    def warning(self, message):
        self.warnings.append(message)

    def info(self, message):
        self.infos.append(message)


@pytest.fixture
def log():
    return RecordingLog()


@pytest.fixture
def fallback_splitter(log):
    """Splitter restricted to the regex/abbreviation strategy."""
    return SentenceSplitter(use_library=False, log=log)


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_TTS_API_KEY", raising=False)
