"""
Google Cloud Text-to-Speech client.

Sends SSML with sentence marks to the synthesize endpoint and returns the
MP3 audio together with the time each mark was reached. Callers fall back
to a local speech engine when this raises.
"""

import base64
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from readaloud.utils import logger
from readaloud.utils.config import config

DEFAULT_VOICE = {"voice": "en-US-Neural2-F", "lang": "en-US"}

# Local/browser voice names -> closest cloud voice
VOICE_MAP = {
    "Google US English": {"voice": "en-US-Neural2-F", "lang": "en-US"},
    "Google UK English Female": {"voice": "en-GB-Neural2-A", "lang": "en-GB"},
    "Google UK English Male": {"voice": "en-GB-Neural2-B", "lang": "en-GB"},
    "Microsoft David - English (United States)": {"voice": "en-US-Neural2-D", "lang": "en-US"},
    "Microsoft Zira - English (United States)": {"voice": "en-US-Neural2-F", "lang": "en-US"},
    "Alex": {"voice": "en-US-Neural2-D", "lang": "en-US"},
    "Samantha": {"voice": "en-US-Neural2-F", "lang": "en-US"},
}

_CLOUD_VOICE_NAME = re.compile(r"^([a-z]{2}-[A-Z]{2})-")


class TTSError(Exception):
    """Base error for cloud synthesis."""


class TTSConfigError(TTSError):
    """No API key configured."""


class TTSAPIError(TTSError):
    """The API answered with an error or without audio."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class Timepoint:
    mark_name: str
    time_seconds: float


@dataclass
class SynthesisResult:
    """Decoded audio plus mark timing from one synthesize call."""

    audio_content: bytes
    timepoints: List[Timepoint] = field(default_factory=list)
    audio_config: Dict[str, Any] = field(default_factory=dict)

    def timepoint_map(self) -> Dict[str, float]:
        """Mark name -> seconds, for building a timing map."""
        return {t.mark_name: t.time_seconds for t in self.timepoints}


def is_cloud_voice_name(voice_name: Optional[str]) -> bool:
    """Cloud voice names look like "en-US-Neural2-F"."""
    return bool(voice_name) and bool(_CLOUD_VOICE_NAME.match(voice_name))


def voice_config(voice_name: Optional[str]) -> Dict[str, str]:
    """Resolve a cloud or local voice name to a cloud voice and locale."""
    if is_cloud_voice_name(voice_name):
        return {"voice": voice_name, "lang": _CLOUD_VOICE_NAME.match(voice_name).group(1)}
    return dict(VOICE_MAP.get(voice_name, DEFAULT_VOICE))


def gender_label(ssml_gender: Optional[str]) -> str:
    return {"MALE": "male", "FEMALE": "female", "NEUTRAL": "neutral"}.get(ssml_gender, "unknown")


def voice_quality(voice_name: str) -> str:
    """Quality tier from the voice name."""
    for marker, tier in (
        ("Chirp", "Chirp3"),
        ("Neural2", "Neural2"),
        ("Wavenet", "WaveNet"),
        ("WaveNet", "WaveNet"),
        ("Studio", "Studio"),
    ):
        if marker in voice_name:
            return tier
    return "Standard"


class GoogleTTSClient:
    """
    Thin client for the Cloud Text-to-Speech REST API.

    Requests always enable SSML mark timepointing so the returned
    timepoints can drive sentence highlighting.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: API key (default: GOOGLE_TTS_API_KEY / config)
            endpoint: Base URL of the v1beta1 API (default: from config)
            timeout: Request timeout in seconds (default: from config)
            session: requests session to reuse
        """
        self._api_key = api_key
        self.endpoint = (endpoint or config.tts_endpoint).rstrip("/")
        self.timeout = timeout or config.request_timeout
        self.session = session or requests.Session()

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key or config.api_key

    @property
    def enabled(self) -> bool:
        """True when an API key is available."""
        return bool(self.api_key)

    def _require_key(self) -> str:
        key = self.api_key
        if not key:
            raise TTSConfigError(
                "Google TTS API key not configured. Set GOOGLE_TTS_API_KEY."
            )
        return key

    def build_request(
        self,
        ssml: str,
        voice_name: Optional[str] = None,
        speaking_rate: Optional[float] = None,
        pitch: Optional[float] = None,
        volume_gain_db: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Build the JSON body for text:synthesize (timepointing needs v1beta1)."""
        voice = voice_config(voice_name or config.voice)
        return {
            "input": {"ssml": ssml},
            "voice": {"languageCode": voice["lang"], "name": voice["voice"]},
            "audioConfig": {
                "audioEncoding": "MP3",
                "speakingRate": speaking_rate or config.speaking_rate,
                "pitch": config.pitch if pitch is None else pitch,
                "volumeGainDb": config.volume_gain_db if volume_gain_db is None else volume_gain_db,
            },
            "enableTimePointing": ["SSML_MARK"],
        }

    def synthesize(self, ssml: str, **options: Any) -> SynthesisResult:
        """
        Synthesize SSML to MP3.

        Args:
            ssml: Markup to speak
            **options: voice_name, speaking_rate, pitch, volume_gain_db

        Returns:
            SynthesisResult with decoded audio and mark timepoints

        Raises:
            TTSConfigError: No API key
            TTSAPIError: HTTP error or no audio in the response
        """
        key = self._require_key()
        body = self.build_request(ssml, **options)

        try:
            response = self.session.post(
                f"{self.endpoint}/text:synthesize",
                params={"key": key},
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TTSAPIError(f"Google TTS request failed: {e}") from e

        if not response.ok:
            raise TTSAPIError(
                f"Google TTS API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        data = response.json()
        audio = data.get("audioContent")
        if not audio:
            raise TTSAPIError("No audio content received from Google TTS", status_code=response.status_code)

        return SynthesisResult(
            audio_content=base64.b64decode(audio),
            timepoints=[
                Timepoint(mark_name=t["markName"], time_seconds=float(t.get("timeSeconds", 0.0)))
                for t in data.get("timepoints", [])
            ],
            audio_config=data.get("audioConfig", {}),
        )

    def list_voices(self, language_code: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List available cloud voices.

        Returns an empty list when no key is set or the request fails, so
        callers can offer local voices instead.
        """
        key = self.api_key
        if not key:
            return []

        params = {"key": key}
        if language_code:
            params["languageCode"] = language_code

        try:
            response = self.session.get(f"{self.endpoint}/voices", params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error fetching Google TTS voices: {e}")
            return []

        voices = []
        for voice in response.json().get("voices", []):
            languages = voice.get("languageCodes", [])
            voices.append({
                "name": voice["name"],
                "lang": languages[0] if languages else "unknown",
                "languages": languages,
                "gender": gender_label(voice.get("ssmlGender")),
                "quality": voice_quality(voice["name"]),
                "sample_rate": voice.get("naturalSampleRateHertz"),
            })
        return voices
