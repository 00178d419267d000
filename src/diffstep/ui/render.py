"""Rendering helpers turning navigator view lines into rich text and plain rows."""

from __future__ import annotations

from rich.color import Color, blend_rgb
from rich.color_triplet import ColorTriplet
from rich.style import Style
from rich.text import Text

from diffstep.config.models import AppearanceSettings
from diffstep.core.multi import MultiFileDiff
from diffstep.core.step import AnimationFrame, LineKind, StepDirection, ViewLine, ViewSpanKind

CONTEXT_RGB = ColorTriplet(150, 150, 150)
INSERT_RGB = ColorTriplet(80, 200, 120)
DELETE_RGB = ColorTriplet(230, 90, 90)
MODIFY_RGB = ColorTriplet(230, 190, 80)
LINE_NUMBER_RGB = ColorTriplet(100, 100, 110)
PRIMARY_RGB = ColorTriplet(120, 170, 255)

_SIGNS = {
    LineKind.CONTEXT: " ",
    LineKind.INSERTED: "+",
    LineKind.PENDING_INSERT: "+",
    LineKind.DELETED: "-",
    LineKind.PENDING_DELETE: "-",
    LineKind.MODIFIED: "~",
    LineKind.PENDING_MODIFY: "~",
}

_LINE_RGB = {
    LineKind.CONTEXT: LINE_NUMBER_RGB,
    LineKind.INSERTED: INSERT_RGB,
    LineKind.PENDING_INSERT: INSERT_RGB,
    LineKind.DELETED: DELETE_RGB,
    LineKind.PENDING_DELETE: DELETE_RGB,
    LineKind.MODIFIED: MODIFY_RGB,
    LineKind.PENDING_MODIFY: MODIFY_RGB,
}


def line_sign(kind: LineKind) -> str:
    return _SIGNS[kind]


def line_number(line: ViewLine) -> int:
    if line.old_line is not None:
        return line.old_line
    return line.new_line or 0


def _rgb(triplet: ColorTriplet) -> Color:
    return Color.from_triplet(triplet)


def transition_weight(frame: AnimationFrame) -> float:
    """How far a pending span has travelled toward its target color."""
    if frame.direction is StepDirection.BACKWARD:
        return 1.0 - frame.progress
    return frame.progress


def span_style(kind: ViewSpanKind, frame: AnimationFrame, appearance: AppearanceSettings) -> Style:
    strike = appearance.strikethrough_deletions
    if kind is ViewSpanKind.EQUAL:
        return Style(color=_rgb(CONTEXT_RGB))
    if kind is ViewSpanKind.INSERTED:
        return Style(color=_rgb(INSERT_RGB))
    if kind is ViewSpanKind.DELETED:
        return Style(color=_rgb(DELETE_RGB), strike=strike)

    weight = transition_weight(frame)
    if kind is ViewSpanKind.PENDING_INSERT:
        return Style(color=_rgb(blend_rgb(CONTEXT_RGB, INSERT_RGB, weight)))
    return Style(
        color=_rgb(blend_rgb(CONTEXT_RGB, DELETE_RGB, weight)),
        strike=strike and weight >= 0.5,
    )


def render_line(
    line: ViewLine,
    frame: AnimationFrame | None = None,
    appearance: AppearanceSettings | None = None,
) -> Text:
    frame = frame or AnimationFrame.idle()
    appearance = appearance or AppearanceSettings()

    text = Text(no_wrap=True, end="")
    if line.is_primary_active:
        text.append(appearance.primary_marker, Style(color=_rgb(PRIMARY_RGB), bold=True))
    elif line.show_hunk_extent:
        text.append(appearance.extent_marker, Style(color=_rgb(LINE_NUMBER_RGB)))
    else:
        text.append(" ")

    accent = Style(color=_rgb(_LINE_RGB[line.kind]))
    text.append(f"{line_number(line):4}", accent)
    text.append(" ")
    text.append(line_sign(line.kind), accent)
    text.append(" ")

    for span in line.spans:
        text.append(span.text, span_style(span.kind, frame, appearance))
    return text


def render_lines(
    lines: list[ViewLine],
    frame: AnimationFrame | None = None,
    appearance: AppearanceSettings | None = None,
) -> Text:
    return Text("\n", end="").join(render_line(line, frame, appearance) for line in lines)


def render_plain(
    lines: list[ViewLine],
    *,
    primary_marker: str = ">",
    extent_marker: str = "|",
) -> str:
    rows: list[str] = []
    for line in lines:
        if line.is_primary_active:
            marker = primary_marker
        elif line.show_hunk_extent:
            marker = extent_marker
        else:
            marker = " "
        rows.append(f"{marker}{line_number(line):>4} {line_sign(line.kind)} {line.text}".rstrip())
    return "\n".join(rows)


def render_summary(multi: MultiFileDiff) -> str:
    rows: list[str] = []
    for entry in multi.files():
        result = entry.file_diff.result
        status = f" [{entry.status}]" if entry.status is not None else ""
        rows.append(
            f"{entry.display_name}{status}: +{result.insertions} -{result.deletions} "
            f"({len(result.significant_changes)} changes, {len(result.hunks)} hunks)"
        )
    rows.append(f"total: +{multi.total_insertions()} -{multi.total_deletions()} in {len(multi)} files")
    return "\n".join(rows)
