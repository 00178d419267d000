"""Step-through navigation over a diff result and per-frame view projection."""

from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field, replace
from enum import StrEnum

from diffstep.core.change import Change, ChangeKind, ChangeSpan
from diffstep.core.diff import DiffResult
from diffstep.runtime_logging import get_runtime_logger


class StepDirection(StrEnum):
    NONE = "none"
    FORWARD = "forward"
    BACKWARD = "backward"


class AnimationPhase(StrEnum):
    IDLE = "idle"
    FADE_OUT = "fade_out"
    FADE_IN = "fade_in"


class LineKind(StrEnum):
    CONTEXT = "context"
    INSERTED = "inserted"
    DELETED = "deleted"
    MODIFIED = "modified"
    PENDING_INSERT = "pending_insert"
    PENDING_DELETE = "pending_delete"
    PENDING_MODIFY = "pending_modify"


class ViewSpanKind(StrEnum):
    EQUAL = "equal"
    DELETED = "deleted"
    INSERTED = "inserted"
    PENDING_DELETE = "pending_delete"
    PENDING_INSERT = "pending_insert"


@dataclass(frozen=True, slots=True)
class AnimationFrame:
    """Where the current visual frame sits between two adjacent steps."""

    phase: AnimationPhase = AnimationPhase.IDLE
    progress: float = 1.0
    direction: StepDirection = StepDirection.FORWARD

    def __post_init__(self) -> None:
        progress = float(self.progress)
        if not math.isfinite(progress):
            progress = 1.0
        object.__setattr__(self, "progress", min(max(progress, 0.0), 1.0))

    @classmethod
    def idle(cls) -> AnimationFrame:
        return cls()

    def is_transitioning(self) -> bool:
        return self.phase is not AnimationPhase.IDLE and 0.0 < self.progress < 1.0


@dataclass(frozen=True, slots=True)
class ViewSpan:
    text: str
    kind: ViewSpanKind


@dataclass(slots=True)
class ViewLine:
    kind: LineKind
    spans: list[ViewSpan]
    change_id: int
    old_line: int | None = None
    new_line: int | None = None
    hunk_index: int | None = None
    has_changes: bool = False
    is_active: bool = False
    is_active_change: bool = False
    is_primary_active: bool = False
    show_hunk_extent: bool = False

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)


@dataclass(slots=True)
class StepState:
    active_index: int = 0
    total: int = 0
    step_direction: StepDirection = StepDirection.NONE
    hunk_preview_mode: bool = False
    current_hunk: int = 0
    active_change_ids: tuple[int, ...] = ()
    cursor_change: int | None = None

    @property
    def total_steps(self) -> int:
        return self.total + 1


_PENDING_LINE = {
    LineKind.INSERTED: LineKind.PENDING_INSERT,
    LineKind.DELETED: LineKind.PENDING_DELETE,
    LineKind.MODIFIED: LineKind.PENDING_MODIFY,
}


@dataclass(slots=True)
class _SpanBuffer:
    spans: list[ViewSpan] = field(default_factory=list)

    def push(self, text: str, kind: ViewSpanKind) -> None:
        if not text:
            return
        if self.spans and self.spans[-1].kind is kind:
            self.spans[-1] = ViewSpan(self.spans[-1].text + text, kind)
            return
        self.spans.append(ViewSpan(text, kind))


class DiffNavigator:
    """Walks a diff from the original document (0) to the final one (N).

    Only the position lives here; the diff result is never modified. Moving
    past either end is a no-op.
    """

    def __init__(self, diff: DiffResult, *, hunk_preview_mode: bool = False) -> None:
        self._diff = diff
        self._significant = diff.significant_changes
        self._positions = {change_id: pos for pos, change_id in enumerate(self._significant)}
        bounds = [0]
        for hunk in diff.hunks:
            bounds.append(bounds[-1] + len(hunk))
        self._hunk_bounds = bounds
        self._state = StepState(total=len(self._significant), hunk_preview_mode=hunk_preview_mode)
        self._logger = get_runtime_logger()

    def diff(self) -> DiffResult:
        return self._diff

    def state(self) -> StepState:
        return replace(self._state)

    @property
    def active_index(self) -> int:
        return self._state.active_index

    @property
    def total(self) -> int:
        return self._state.total

    def is_at_start(self) -> bool:
        return self._state.active_index == 0

    def is_at_end(self) -> bool:
        return self._state.active_index == self._state.total

    def progress_fraction(self) -> float:
        if self._state.total == 0:
            return 1.0
        return self._state.active_index / self._state.total

    def applied_change_ids(self) -> tuple[int, ...]:
        return self._significant[: self._state.active_index]

    def cursor_change_id(self) -> int | None:
        if self._state.cursor_change is not None:
            return self._state.cursor_change
        if not self._significant:
            return None
        index = min(self._state.active_index, len(self._significant) - 1)
        return self._significant[index]

    def active_change(self) -> Change | None:
        change_id = self.cursor_change_id()
        if change_id is None:
            return None
        return self._diff.get_change(change_id)

    def set_hunk_preview_mode(self, enabled: bool) -> None:
        self._state.hunk_preview_mode = enabled
        self._sync_current_hunk()

    def toggle_hunk_preview_mode(self) -> bool:
        self.set_hunk_preview_mode(not self._state.hunk_preview_mode)
        return self._state.hunk_preview_mode

    def step_forward(self) -> bool:
        if self._state.hunk_preview_mode:
            return self.next_hunk()
        return self._step_to(self._state.active_index + 1)

    def step_backward(self) -> bool:
        if self._state.hunk_preview_mode:
            return self.prev_hunk()
        return self._step_to(self._state.active_index - 1)

    def next_hunk(self) -> bool:
        bounds = self._hunk_bounds
        idx = bisect_right(bounds, self._state.active_index)
        target = bounds[idx] if idx < len(bounds) else self._state.total
        return self._step_to(target)

    def prev_hunk(self) -> bool:
        bounds = self._hunk_bounds
        idx = bisect_left(bounds, self._state.active_index) - 1
        target = bounds[idx] if idx >= 0 else 0
        return self._step_to(target)

    def goto(self, index: int) -> bool:
        """Jump to ``index`` without marking any change as in transition.

        The transition left by the previous step is cleared even when the
        position does not change; the result reports whether it moved.
        """
        target = min(max(index, 0), self._state.total)
        self._state.step_direction = StepDirection.NONE
        self._state.active_change_ids = ()
        self._state.cursor_change = None
        moved = target != self._state.active_index
        self._state.active_index = target
        self._sync_current_hunk()
        if moved:
            self._logger.debug("navigator.goto", active_index=target, total=self._state.total)
        return moved

    def goto_start(self) -> bool:
        return self.goto(0)

    def goto_end(self) -> bool:
        return self.goto(self._state.total)

    def _step_to(self, target: int) -> bool:
        target = min(max(target, 0), self._state.total)
        current = self._state.active_index
        if target == current:
            return False

        low, high = sorted((current, target))
        traversed = self._significant[low:high]
        self._state.active_index = target
        self._state.step_direction = (
            StepDirection.FORWARD if target > current else StepDirection.BACKWARD
        )
        self._state.active_change_ids = traversed
        self._state.cursor_change = traversed[0]
        self._sync_current_hunk()
        self._logger.debug(
            "navigator.step",
            direction=str(self._state.step_direction),
            active_index=target,
            total=self._state.total,
            changes=len(traversed),
            hunk_mode=self._state.hunk_preview_mode,
        )
        return True

    def _sync_current_hunk(self) -> None:
        change_id = self.cursor_change_id()
        if change_id is None:
            return
        hunk = self._diff.hunk_for_change(change_id)
        if hunk is not None:
            self._state.current_hunk = hunk.id

    def current_view(self, frame: AnimationFrame | None = None) -> list[ViewLine]:
        """Project the document at the current position into renderable lines."""
        frame = frame or AnimationFrame.idle()
        transitioning = frame.is_transitioning()
        active = set(self._state.active_change_ids)
        cursor = self.cursor_change_id()
        cursor_hunk = self._diff.hunk_for_change(cursor) if cursor is not None else None

        lines: list[ViewLine] = []
        primary: ViewLine | None = None
        primary_pending = False

        for change in self._diff.changes:
            position = self._positions.get(change.id)
            if position is None:
                emitted = [self._context_line(change)]
            else:
                is_active = change.id in active
                emitted = self._project(
                    change,
                    applied=position < self._state.active_index,
                    active=is_active,
                    pending=transitioning and is_active,
                )
                hunk = self._diff.hunk_for_change(change.id)
                for line in emitted:
                    line.hunk_index = hunk.id if hunk is not None else None
                    line.has_changes = True
                    line.is_active = is_active
                    line.is_active_change = change.id == cursor
                    line.show_hunk_extent = cursor_hunk is not None and hunk is cursor_hunk
                if change.id == cursor and primary is None:
                    if emitted:
                        primary = emitted[0]
                    else:
                        primary_pending = True

            if primary_pending and emitted:
                primary = emitted[0]
                primary_pending = False
            lines.extend(emitted)

        if primary_pending and lines:
            primary = lines[-1]
        if primary is not None:
            primary.is_primary_active = True
            primary.show_hunk_extent = False
        return lines

    def _context_line(self, change: Change) -> ViewLine:
        first = change.first_span
        buffer = _SpanBuffer()
        for span in change.spans:
            buffer.push(span.text, ViewSpanKind.EQUAL)
        return ViewLine(
            kind=LineKind.CONTEXT,
            spans=buffer.spans,
            change_id=change.id,
            old_line=first.old_line if first else None,
            new_line=first.new_line if first else None,
        )

    def _project(self, change: Change, *, applied: bool, active: bool, pending: bool) -> list[ViewLine]:
        first = change.first_span
        if first is None:
            return []

        if first.old_line is None:
            if not active and not applied:
                return []
            kind = ViewSpanKind.PENDING_INSERT if pending else ViewSpanKind.INSERTED
            return [self._line(LineKind.INSERTED, change, first, pending, [(change.new_text(), kind)])]

        if first.new_line is None:
            if not active and applied:
                return []
            if not active:
                return [self._line(LineKind.CONTEXT, change, first, False, [(change.old_text(), ViewSpanKind.EQUAL)])]
            kind = ViewSpanKind.PENDING_DELETE if pending else ViewSpanKind.DELETED
            return [self._line(LineKind.DELETED, change, first, pending, [(change.old_text(), kind)])]

        if active:
            parts = _both_sides(change.spans, pending)
            return [self._line(LineKind.MODIFIED, change, first, pending, parts)]
        if applied:
            parts = [(span.new_side(), _new_side_kind(span)) for span in change.spans]
            return [self._line(LineKind.MODIFIED, change, first, False, parts)]
        parts = [(span.old_side(), ViewSpanKind.EQUAL) for span in change.spans]
        return [self._line(LineKind.CONTEXT, change, first, False, parts)]

    @staticmethod
    def _line(
        kind: LineKind,
        change: Change,
        first: ChangeSpan,
        pending: bool,
        parts: list[tuple[str, ViewSpanKind]],
    ) -> ViewLine:
        buffer = _SpanBuffer()
        for text, span_kind in parts:
            buffer.push(text, span_kind)
        return ViewLine(
            kind=_PENDING_LINE.get(kind, kind) if pending else kind,
            spans=buffer.spans,
            change_id=change.id,
            old_line=first.old_line,
            new_line=first.new_line,
        )


def _new_side_kind(span: ChangeSpan) -> ViewSpanKind:
    if span.kind is ChangeKind.EQUAL:
        return ViewSpanKind.EQUAL
    return ViewSpanKind.INSERTED


def _both_sides(spans: tuple[ChangeSpan, ...], pending: bool) -> list[tuple[str, ViewSpanKind]]:
    deleted = ViewSpanKind.PENDING_DELETE if pending else ViewSpanKind.DELETED
    inserted = ViewSpanKind.PENDING_INSERT if pending else ViewSpanKind.INSERTED
    parts: list[tuple[str, ViewSpanKind]] = []
    for span in spans:
        if span.kind is ChangeKind.EQUAL:
            parts.append((span.text, ViewSpanKind.EQUAL))
        elif span.kind is ChangeKind.DELETE:
            parts.append((span.text, deleted))
        elif span.kind is ChangeKind.INSERT:
            parts.append((span.text, inserted))
        else:
            parts.append((span.text, deleted))
            parts.append((span.new_side(), inserted))
    return parts
