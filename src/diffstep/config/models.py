"""Settings schema for diffstep."""

from __future__ import annotations

from pydantic import BaseModel, Field

from diffstep.core.diff import DiffConfig


class DiffSettings(BaseModel):
    word_level: bool = Field(default=True, description="Pair replaced lines into word-level changes")
    context_lines: int = Field(default=3, ge=0, le=100)

    def to_config(self) -> DiffConfig:
        return DiffConfig(context_lines=self.context_lines, word_level=self.word_level)


class AnimationSettings(BaseModel):
    enabled: bool = Field(default=True)
    duration_ms: int = Field(default=180, ge=0, le=5000)
    frame_interval_ms: int = Field(default=16, ge=1, le=1000)


class NavigationSettings(BaseModel):
    hunk_mode: bool = Field(default=False, description="Step by hunk instead of by change")
    auto_advance_file: bool = Field(default=True)


class AppearanceSettings(BaseModel):
    theme: str = Field(default="textual-dark", description="Textual theme name")
    primary_marker: str = Field(default="▶", min_length=1, max_length=1)
    extent_marker: str = Field(default="│", min_length=1, max_length=1)
    strikethrough_deletions: bool = Field(default=True)


class AppSettings(BaseModel):
    schema_version: int = Field(default=1)
    diff: DiffSettings = Field(default_factory=DiffSettings)
    animation: AnimationSettings = Field(default_factory=AnimationSettings)
    navigation: NavigationSettings = Field(default_factory=NavigationSettings)
    appearance: AppearanceSettings = Field(default_factory=AppearanceSettings)

    def setting_items(self) -> list[tuple[str, str]]:
        """Flatten key/value pairs for display."""

        result: list[tuple[str, str]] = []

        def walk(prefix: str, value: object) -> None:
            if isinstance(value, BaseModel):
                for key, nested in value.model_dump().items():
                    walk(f"{prefix}.{key}" if prefix else key, nested)
            elif isinstance(value, dict):
                for key, nested in value.items():
                    walk(f"{prefix}.{key}" if prefix else key, nested)
            else:
                result.append((prefix, str(value)))

        walk("", self)
        return result
