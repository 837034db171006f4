from __future__ import annotations

"""Configuration loading and access helpers.

This module centralises the declarative settings of the toolkit (history
capacity, id generation, logging). It loads YAML files packaged with
*outline_toolkit* and merges them with user overrides.

On Windows: ``%LOCALAPPDATA%\\OutlineToolkit\\config\\*.yml``
On Unix: ``~/.outline_toolkit/*.yml``

``OUTLINE_TOOLKIT_CONFIG_DIR`` points the override lookup at another
directory.
"""

from importlib import resources
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

__all__ = ["ConfigManager"]

_DEFAULT_HISTORY_CAPACITY = 50
_DEFAULT_ID_LENGTH = 9


def _get_user_config_dir() -> Path:
    """Get the user configuration directory."""
    override = os.environ.get("OUTLINE_TOOLKIT_CONFIG_DIR")
    if override:
        return Path(override)
    if os.name == 'nt':  # Windows
        local_appdata = os.environ.get('LOCALAPPDATA')
        if local_appdata:
            return Path(local_appdata) / "OutlineToolkit" / "config"
        return Path.home() / "AppData" / "Local" / "OutlineToolkit" / "config"
    return Path.home() / ".outline_toolkit"


def _read_packaged(filename: str) -> str:
    return resources.files(__package__).joinpath(filename).read_text(encoding="utf-8")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge *override* into a copy of *base*."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class _Singleton(type):
    _instance: "ConfigManager" | None = None

    def __call__(cls, *args, **kwargs):  # type: ignore[no-self-use]
        if cls._instance is None:
            cls._instance = super().__call__(*args, **kwargs)
        return cls._instance


class ConfigManager(metaclass=_Singleton):
    """Lazy-loads and exposes configuration sections as dictionaries."""

    _DEFAULT_FILENAMES = {
        "editor": "default_editor.yml",
        "logging": "logging.yml",
    }

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._ensure_loaded()

    @classmethod
    def reset(cls) -> None:
        """Forget the shared instance so the next call reloads from disk."""
        cls._instance = None

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def get_editor_config(self) -> Dict[str, Any]:
        return self._data.get("editor", {})

    def get_logging_config(self) -> Dict[str, Any]:
        return self._data.get("logging", {})

    def get_history_capacity(self) -> int:
        history = self.get_editor_config().get("history") or {}
        try:
            return max(1, int(history.get("max_entries", _DEFAULT_HISTORY_CAPACITY)))
        except (TypeError, ValueError):
            logger.warning("Invalid history.max_entries=%r, using %d", history.get("max_entries"), _DEFAULT_HISTORY_CAPACITY)
            return _DEFAULT_HISTORY_CAPACITY

    def get_id_length(self) -> int:
        ids = self.get_editor_config().get("ids") or {}
        try:
            return int(ids.get("length", _DEFAULT_ID_LENGTH))
        except (TypeError, ValueError):
            logger.warning("Invalid ids.length=%r, using %d", ids.get("length"), _DEFAULT_ID_LENGTH)
            return _DEFAULT_ID_LENGTH

    # ------------------------------------------------------------------
    # Internal loading logic
    # ------------------------------------------------------------------
    def _ensure_loaded(self) -> None:
        if self._data:
            return  # already loaded

        startup_summary = []
        user_config_dir = _get_user_config_dir()

        for key, filename in self._DEFAULT_FILENAMES.items():
            merged_cfg: Dict[str, Any] = {}
            status = "missing"

            # 1. load packaged default
            try:
                packaged_data = yaml.safe_load(_read_packaged(filename)) or {}
                merged_cfg.update(packaged_data)
                status = "loaded"
            except (FileNotFoundError, OSError):
                logger.error("Missing packaged config for %s (%s)", key, filename)
                status = "missing"
            except yaml.YAMLError as exc:
                logger.error("Invalid packaged config for %s (%s): %s", key, filename, exc)
                status = "invalid"

            # 2. load user overrides
            user_path = user_config_dir / filename
            if user_path.exists():
                try:
                    user_data = yaml.safe_load(user_path.read_text(encoding="utf-8")) or {}
                    merged_cfg = _merge(merged_cfg, user_data)
                    if status == "loaded":
                        status = "loaded+overrides"
                except (OSError, yaml.YAMLError) as exc:
                    logger.error("Could not parse user config %s: %s", user_path, exc)

            self._data[key] = merged_cfg
            startup_summary.append(f"{key}: {status}")

        logger.info("Config startup: %s", " | ".join(startup_summary))
