"""Load, save and edit application settings stored as JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from diffstep.config.models import AppSettings
from diffstep.paths import settings_path
from diffstep.runtime_logging import get_runtime_logger


def parse_setting_value(raw: str) -> Any:
    """Interpret a command-line value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


class SettingsStore:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or settings_path()
        self._logger = get_runtime_logger()

    def load(self) -> AppSettings:
        if not self.path.exists():
            return self.reset()

        raw = self.path.read_text(encoding="utf-8")
        try:
            return AppSettings.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            backup = self.path.with_suffix(".corrupt.json")
            backup.write_text(raw, encoding="utf-8")
            self._logger.warning(
                "settings.corrupt",
                path=str(self.path),
                backup=str(backup),
                error=str(exc),
            )
            return self.reset()

    def save(self, settings: AppSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(settings.model_dump(mode="json"), indent=2, sort_keys=True, ensure_ascii=False)
        self.path.write_text(f"{payload}\n", encoding="utf-8")

    def reset(self) -> AppSettings:
        settings = AppSettings()
        self.save(settings)
        return settings

    def update(self, dotted_key: str, value: Any) -> AppSettings:
        """Set one leaf such as ``animation.duration_ms`` and persist the result.

        Raises ``KeyError`` for paths that do not name an existing setting and
        ``pydantic.ValidationError`` for values the schema rejects.
        """
        data = self.load().model_dump()

        *parents, leaf = dotted_key.split(".")
        section: dict[str, Any] = data
        for key in parents:
            nested = section.get(key)
            if not isinstance(nested, dict):
                raise KeyError(f"Unknown setting path: {dotted_key}")
            section = nested
        if leaf not in section or isinstance(section[leaf], dict):
            raise KeyError(f"Unknown setting path: {dotted_key}")
        section[leaf] = value

        updated = AppSettings.model_validate(data)
        self.save(updated)
        self._logger.info("settings.updated", key=dotted_key, value=value)
        return updated
