"""Widget showing one frame of the active navigator."""

from __future__ import annotations

from textual.widgets import Static

from diffstep.config.models import AppearanceSettings
from diffstep.core.step import AnimationFrame, ViewLine
from diffstep.ui.render import render_lines


class DiffView(Static):
    DEFAULT_CSS = """
    DiffView {
        width: auto;
        min-width: 100%;
        height: auto;
    }
    """

    def __init__(self, appearance: AppearanceSettings, **kwargs) -> None:  # noqa: ANN003
        self.appearance = appearance
        self.lines: list[ViewLine] = []
        self.primary_row: int | None = None
        super().__init__("", **kwargs)

    def show_frame(self, lines: list[ViewLine], frame: AnimationFrame) -> None:
        self.lines = lines
        self.primary_row = next(
            (idx for idx, line in enumerate(lines) if line.is_primary_active),
            None,
        )
        self.update(render_lines(lines, frame, self.appearance))

    def plain_text(self) -> str:
        return "\n".join(line.text for line in self.lines)
