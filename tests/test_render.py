from __future__ import annotations

import unittest

from diffstep.config.models import AppearanceSettings
from diffstep.core.multi import MultiFileDiff
from diffstep.core.step import (
    AnimationFrame,
    AnimationPhase,
    LineKind,
    StepDirection,
    ViewLine,
    ViewSpan,
    ViewSpanKind,
)
from diffstep.ui.render import (
    render_line,
    render_plain,
    render_summary,
    span_style,
    transition_weight,
)


def _line(kind: LineKind, *spans: tuple[str, ViewSpanKind], **flags) -> ViewLine:  # noqa: ANN003
    return ViewLine(
        kind=kind,
        spans=[ViewSpan(text, span_kind) for text, span_kind in spans],
        change_id=0,
        old_line=flags.pop("old_line", 3),
        new_line=flags.pop("new_line", 3),
        **flags,
    )


class RenderPlainTests(unittest.TestCase):
    def test_markers_signs_and_numbers(self) -> None:
        lines = [
            _line(LineKind.CONTEXT, ("keep", ViewSpanKind.EQUAL)),
            _line(LineKind.DELETED, ("gone", ViewSpanKind.DELETED), is_primary_active=True),
            _line(LineKind.INSERTED, ("new", ViewSpanKind.INSERTED), old_line=None, new_line=12, show_hunk_extent=True),
        ]
        self.assertEqual(
            render_plain(lines).splitlines(),
            ["    3   keep", ">   3 - gone", "|  12 + new"],
        )

    def test_custom_markers(self) -> None:
        line = _line(LineKind.MODIFIED, ("x", ViewSpanKind.INSERTED), is_primary_active=True)
        self.assertEqual(render_plain([line], primary_marker="*"), "*   3 ~ x")


class RenderLineTests(unittest.TestCase):
    def test_primary_marker_comes_from_appearance(self) -> None:
        line = _line(LineKind.CONTEXT, ("keep", ViewSpanKind.EQUAL), is_primary_active=True)
        text = render_line(line, AnimationFrame.idle(), AppearanceSettings(primary_marker="@"))
        self.assertEqual(text.plain, "@   3   keep")

    def test_deleted_spans_are_struck_through(self) -> None:
        frame = AnimationFrame.idle()
        self.assertTrue(span_style(ViewSpanKind.DELETED, frame, AppearanceSettings()).strike)
        plain = AppearanceSettings(strikethrough_deletions=False)
        self.assertFalse(span_style(ViewSpanKind.DELETED, frame, plain).strike)

    def test_pending_styles_blend_with_progress(self) -> None:
        appearance = AppearanceSettings()
        early = AnimationFrame(phase=AnimationPhase.FADE_IN, progress=0.1)
        late = AnimationFrame(phase=AnimationPhase.FADE_IN, progress=0.9)

        self.assertFalse(span_style(ViewSpanKind.PENDING_DELETE, early, appearance).strike)
        self.assertTrue(span_style(ViewSpanKind.PENDING_DELETE, late, appearance).strike)
        self.assertNotEqual(
            span_style(ViewSpanKind.PENDING_INSERT, early, appearance).color,
            span_style(ViewSpanKind.PENDING_INSERT, late, appearance).color,
        )

    def test_backward_transition_reverses_weight(self) -> None:
        frame = AnimationFrame(phase=AnimationPhase.FADE_OUT, progress=0.25, direction=StepDirection.BACKWARD)
        self.assertEqual(transition_weight(frame), 0.75)


class RenderSummaryTests(unittest.TestCase):
    def test_lists_each_file_and_totals(self) -> None:
        multi = MultiFileDiff.from_texts([("a.txt", "x\n", "y\n"), ("b.txt", "", "z\n")])
        self.assertEqual(
            render_summary(multi).splitlines(),
            [
                "a.txt: +1 -1 (1 changes, 1 hunks)",
                "b.txt: +1 -0 (1 changes, 1 hunks)",
                "total: +2 -1 in 2 files",
            ],
        )


if __name__ == "__main__":
    unittest.main()
