"""
Configuration loader for the read-aloud system.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class Config:
    """Configuration manager for sentence detection and speech synthesis."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not self._config:
            self._load_config()

    def _get_project_root(self) -> Path:
        """Get the project root directory."""
        # Navigate up from readaloud/utils to project root
        current = Path(__file__).resolve()
        return current.parent.parent.parent

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        config_path = Path(
            os.environ.get(
                "READALOUD_CONFIG",
                self._get_project_root() / "config" / "settings.yaml",
            )
        )

        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
        else:
            # Use defaults if config doesn't exist
            self._config = self._get_defaults()

    def _get_defaults(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "sentences": {
                "language": "en",
                "use_library": True,
                "words_per_minute": 200,
            },
            "voice": {
                "default": "en-US-Neural2-F",
                "speaking_rate": 1.0,
                "pitch": 0.0,
                "volume_gain_db": 0.0,
            },
            "google_tts": {
                "endpoint": "https://texttospeech.googleapis.com/v1beta1",
                "timeout": 30,
            },
        }

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example:
            config.get("sentences", "language") -> "en"
        """
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
            if value is None:
                return default
        return value

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        return self._get_project_root()

    @property
    def language(self) -> str:
        """Get the default detection language."""
        return self.get("sentences", "language", default="en")

    @property
    def use_library_segmenter(self) -> bool:
        """Check if the library segmenter should be preferred."""
        return self.get("sentences", "use_library", default=True)

    @property
    def words_per_minute(self) -> int:
        """Get the reading rate used for duration estimates."""
        return self.get("sentences", "words_per_minute", default=200)

    @property
    def voice(self) -> str:
        """Get the default cloud voice."""
        return self.get("voice", "default", default="en-US-Neural2-F")

    @property
    def speaking_rate(self) -> float:
        """Get the speaking rate."""
        return self.get("voice", "speaking_rate", default=1.0)

    @property
    def pitch(self) -> float:
        """Get the voice pitch in semitones."""
        return self.get("voice", "pitch", default=0.0)

    @property
    def volume_gain_db(self) -> float:
        """Get the volume gain in dB."""
        return self.get("voice", "volume_gain_db", default=0.0)

    @property
    def tts_endpoint(self) -> str:
        """Get the cloud TTS base URL."""
        return self.get(
            "google_tts", "endpoint",
            default="https://texttospeech.googleapis.com/v1beta1",
        )

    @property
    def request_timeout(self) -> float:
        """Get the HTTP timeout in seconds."""
        return self.get("google_tts", "timeout", default=30)

    @property
    def api_key(self) -> Optional[str]:
        """Get the cloud TTS API key (environment wins over the file)."""
        key = os.environ.get("GOOGLE_TTS_API_KEY") or self.get("google_tts", "api_key")
        if key and key.strip():
            return key.strip()
        return None


# Singleton instance
config = Config()
