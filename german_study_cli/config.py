#!/usr/bin/env python3
"""Configuration, credential and history storage for German Study CLI."""

import json
import logging
import os
import time
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .prompts import SUPPORTED_LANGUAGES
from .providers.base import Provider

logger = logging.getLogger(__name__)

THEMES = ("light", "dark", "system")

# Environment variables consulted when no key is stored
API_KEY_ENV_VARS = {
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.PERPLEXITY: "PERPLEXITY_API_KEY",
}


@dataclass
class HistoryItem:
    """One stored question/answer exchange."""

    prompt: str
    response: str
    provider: str
    image_path: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if data["image_path"] is None:
            del data["image_path"]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        return cls(
            id=data["id"],
            prompt=data.get("prompt", ""),
            response=data.get("response", ""),
            provider=data.get("provider", ""),
            image_path=data.get("image_path"),
            timestamp=data.get("timestamp", 0),
        )


class StudyConfig:
    """Manages settings, API keys and history on disk."""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None, skip_wizard: bool = False):
        """
        Initialize config manager and ensure directories exist.

        Args:
            base_dir: Data directory (default: $GERMAN_STUDY_HOME or ~/.german_study)
            skip_wizard: Skip setup wizard even if config doesn't exist (for testing)
        """
        if base_dir is None:
            base_dir = os.environ.get("GERMAN_STUDY_HOME") or Path.home() / ".german_study"

        self.data_dir = Path(base_dir).expanduser()
        self.config_file = self.data_dir / "config.json"
        self.api_keys_file = self.data_dir / "api_keys.json"
        self.history_file = self.data_dir / "history.json"
        self.images_dir = self.data_dir / "images"

        self._ensure_directories()

        self.config = self._load_config(skip_wizard=skip_wizard)

    def _ensure_directories(self):
        """Create necessary directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.images_dir.mkdir(exist_ok=True)

    def _load_config(self, skip_wizard: bool = False) -> Dict[str, Any]:
        """
        Load configuration from file or create default.

        Args:
            skip_wizard: Skip setup wizard even if config doesn't exist

        Returns:
            Configuration dictionary
        """
        if self.config_file.exists():
            loaded_config = self._read_json(self.config_file)
            default_config = self._get_default_config()
            if isinstance(loaded_config, dict):
                default_config.update(loaded_config)
            return default_config

        config = self._get_default_config()
        # First time setup
        if not skip_wizard:
            from .setup_wizard import SetupWizard

            wizard_result = SetupWizard.run()
            config["default_provider"] = wizard_result["default_provider"]
            self._write_json(self.config_file, config)
            self.save_api_key(wizard_result["default_provider"], wizard_result["api_key"])
        else:
            self._write_json(self.config_file, config)
        return config

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values."""
        return {
            "default_provider": Provider.ANTHROPIC.value,
            "theme": "system",
            "language": "en",
            "max_history": 100,
            "save_history": True,
            "render_markdown": True,
        }

    @staticmethod
    def _read_json(path: Path) -> Any:
        """Read a JSON file, returning None when missing or corrupted."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Ignoring unreadable %s: %s", path, e)
            return None

    @staticmethod
    def _write_json(path: Path, data: Any):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    # Settings

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        """Set a configuration value and save."""
        self.save_settings({key: value})

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self.config.copy()

    def get_settings(self) -> Dict[str, Any]:
        """Get the user-facing settings: default provider, theme and language."""
        return {
            "default_provider": self.default_provider.value,
            "theme": self.config.get("theme", "system"),
            "language": self.language,
        }

    def save_settings(self, settings: Dict[str, Any]):
        """Merge a partial settings dict into the stored settings."""
        settings = dict(settings)
        for key, value in settings.items():
            self._validate_setting(key, value)
        if "default_provider" in settings:
            settings["default_provider"] = Provider(settings["default_provider"]).value
        self.config.update(settings)
        self._write_json(self.config_file, self.config)

    @staticmethod
    def _validate_setting(key: str, value: Any):
        if key == "default_provider":
            try:
                Provider(value)
            except ValueError:
                raise ValueError(
                    f"Invalid provider: {value}. "
                    f"Choose from: {', '.join(p.value for p in Provider)}"
                ) from None
        if key == "theme" and value not in THEMES:
            raise ValueError(f"Invalid theme: {value}. Choose from: {', '.join(THEMES)}")
        if key == "language" and value not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Invalid language: {value}. Choose from: {', '.join(SUPPORTED_LANGUAGES)}"
            )
        if key == "max_history" and (not isinstance(value, int) or value < 1):
            raise ValueError("max_history must be a positive integer")

    @property
    def default_provider(self) -> Provider:
        """Provider used when none is given explicitly."""
        try:
            return Provider(self.config.get("default_provider"))
        except ValueError:
            return Provider.ANTHROPIC

    @property
    def language(self) -> str:
        """Interface language."""
        return self.config.get("language", "en")

    # API keys

    def get_api_keys(self) -> Dict[str, str]:
        """Get all stored API keys keyed by provider name."""
        keys = self._read_json(self.api_keys_file)
        return keys if isinstance(keys, dict) else {}

    def get_api_key(self, provider: Union[Provider, str]) -> Optional[str]:
        """
        Get the API key for a provider.

        Stored keys take precedence over the provider's environment variable.

        Args:
            provider: Provider or its name

        Returns:
            API key, or None if not configured
        """
        provider = Provider(str(provider))
        key = self.get_api_keys().get(provider.value)
        if key:
            return key
        return os.environ.get(API_KEY_ENV_VARS[provider]) or None

    def save_api_key(self, provider: Union[Provider, str], key: str):
        """Store the API key for a provider (file is readable by the owner only)."""
        provider = Provider(str(provider))
        keys = self.get_api_keys()
        keys[provider.value] = key

        # Created owner-only; chmod also tightens files from older versions
        fd = os.open(self.api_keys_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            os.chmod(self.api_keys_file, 0o600)
            json.dump(keys, f, indent=2, ensure_ascii=False)

    # History

    def save_history_item(self, item: HistoryItem):
        """
        Add an exchange to the front of the history.

        Oldest entries beyond max_history are dropped.
        """
        history = self._load_history_dicts()
        history.insert(0, item.to_dict())

        max_history = self.config.get("max_history", 100)
        if len(history) > max_history:
            history = history[:max_history]

        self._write_json(self.history_file, history)

    def get_history(self, limit: Optional[int] = None) -> List[HistoryItem]:
        """
        List stored exchanges, newest first.

        Args:
            limit: Optional maximum number of items to return (at least 1)

        Returns:
            List of HistoryItem objects

        Raises:
            ValueError: If limit is less than 1
        """
        if limit is not None and limit < 1:
            raise ValueError("limit must be a positive integer")

        items = []
        for data in self._load_history_dicts():
            try:
                items.append(HistoryItem.from_dict(data))
            except (KeyError, TypeError):
                continue

        if limit is not None:
            items = items[:limit]
        return items

    def delete_history_item(self, item_id: str) -> bool:
        """
        Delete one exchange.

        Returns:
            True if deleted, False if not found
        """
        history = self._load_history_dicts()
        remaining = [h for h in history if h.get("id") != item_id]
        if len(remaining) == len(history):
            return False
        self._write_json(self.history_file, remaining)
        return True

    def clear_history(self):
        """Remove all stored exchanges."""
        if self.history_file.exists():
            self.history_file.unlink()

    def _load_history_dicts(self) -> List[Dict[str, Any]]:
        history = self._read_json(self.history_file)
        if not isinstance(history, list):
            return []
        return [h for h in history if isinstance(h, dict)]
