"""diffstep Textual application shell."""

from __future__ import annotations

import time
from pathlib import Path

from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.timer import Timer
from textual.widgets import Footer, Header, Static

from diffstep.config.models import AppSettings
from diffstep.config.store import SettingsStore
from diffstep.core.multi import MultiFileDiff
from diffstep.core.step import AnimationFrame, AnimationPhase, DiffNavigator, StepDirection
from diffstep.runtime_logging import configure_runtime_logging
from diffstep.widgets.diff_view import DiffView


class DiffStepApp(App[None]):
    TITLE = "diffstep"
    SUB_TITLE = "step through a diff one change at a time"

    BINDINGS = [
        ("right,l", "step_forward", "Next"),
        ("left,h", "step_backward", "Prev"),
        ("j", "next_hunk", "Next Hunk"),
        ("k", "prev_hunk", "Prev Hunk"),
        ("m", "toggle_hunk_mode", "Hunk Mode"),
        ("g,home", "goto_start", "Start"),
        ("e,end", "goto_end", "End"),
        ("n", "next_file", "Next File"),
        ("p", "prev_file", "Prev File"),
        ("q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        layout: vertical;
    }

    #status {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    #diff-scroll {
        height: 1fr;
    }

    #empty {
        height: 1fr;
        content-align: center middle;
        color: $text-muted;
    }
    """

    def __init__(
        self,
        *,
        multi: MultiFileDiff,
        settings: AppSettings | None = None,
        settings_path: Path | None = None,
        log_level: str | None = None,
        log_file: str | Path | None = None,
    ) -> None:
        self.multi = multi
        self.logger = configure_runtime_logging(level=log_level, log_file=log_file)
        self.settings = settings if settings is not None else SettingsStore(settings_path).load()

        self._frame = AnimationFrame.idle()
        self._animation_started = 0.0
        self._animation_timer: Timer | None = None

        self.multi.set_hunk_preview_mode(self.settings.navigation.hunk_mode)
        self.logger.info(
            "app.initialized",
            files=len(self.multi),
            hunk_mode=self.settings.navigation.hunk_mode,
            animation=self.settings.animation.enabled,
        )
        super().__init__()

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        yield Static("", id="status", markup=False)
        if self.multi.is_empty():
            yield Static("No changes to show", id="empty")
        else:
            with VerticalScroll(id="diff-scroll"):
                yield DiffView(self.settings.appearance, id="diff")
        yield Footer()

    def on_mount(self) -> None:
        self.theme = self.settings.appearance.theme
        interval = self.settings.animation.frame_interval_ms / 1000
        self._animation_timer = self.set_interval(interval, self._tick_animation, pause=True)
        for path, reason in self.multi.skipped:
            self.notify(f"Skipped {path.as_posix()}: {reason}", title="Load failed", severity="warning")
        self.logger.info("app.mounted", theme=self.theme)
        self.refresh_view()

    @property
    def navigator(self) -> DiffNavigator | None:
        return self.multi.current_navigator()

    @property
    def animation_frame(self) -> AnimationFrame:
        return self._frame

    def refresh_view(self) -> None:
        status = self.query_one("#status", Static)
        entry = self.multi.current()
        navigator = self.navigator
        if entry is None or navigator is None:
            status.update("no files")
            return

        state = navigator.state()
        mode = "hunk" if state.hunk_preview_mode else "change"
        status.update(
            f"[{self.multi.current_index + 1}/{len(self.multi)}] {entry.display_name}  "
            f"step {state.active_index}/{state.total}  hunk {state.current_hunk + 1}/"
            f"{len(navigator.diff().hunks)}  mode={mode}  "
            f"+{entry.file_diff.result.insertions} -{entry.file_diff.result.deletions}"
        )

        view = self.query_one("#diff", DiffView)
        view.show_frame(navigator.current_view(self._frame), self._frame)
        if view.primary_row is not None:
            scroll = self.query_one("#diff-scroll", VerticalScroll)
            target = max(view.primary_row - scroll.size.height // 2, 0)
            scroll.scroll_to(y=target, animate=False)

    def _start_animation(self, direction: StepDirection) -> None:
        animation = self.settings.animation
        if not animation.enabled or animation.duration_ms == 0 or self._animation_timer is None:
            self._frame = AnimationFrame.idle()
            return

        phase = AnimationPhase.FADE_IN if direction is StepDirection.FORWARD else AnimationPhase.FADE_OUT
        self._frame = AnimationFrame(phase=phase, progress=0.0, direction=direction)
        self._animation_started = time.monotonic()
        self._animation_timer.resume()

    def _settle(self) -> None:
        self._frame = AnimationFrame.idle()
        if self._animation_timer is not None:
            self._animation_timer.pause()

    def _tick_animation(self) -> None:
        duration = self.settings.animation.duration_ms / 1000
        elapsed = time.monotonic() - self._animation_started
        progress = min(elapsed / duration, 1.0) if duration > 0 else 1.0
        if progress >= 1.0:
            self._settle()
        else:
            self._frame = AnimationFrame(
                phase=self._frame.phase,
                progress=progress,
                direction=self._frame.direction,
            )
        self.refresh_view()

    def _after_move(self, moved: bool, direction: StepDirection, action: str) -> None:
        if not moved:
            return
        self.logger.debug("app.action", action=action, file_index=self.multi.current_index)
        self._start_animation(direction)
        self.refresh_view()

    def action_step_forward(self) -> None:
        navigator = self.navigator
        if navigator is None:
            return
        moved = navigator.step_forward()
        if not moved and self.settings.navigation.auto_advance_file and self.multi.next_file():
            self._settle()
            self.refresh_view()
            return
        self._after_move(moved, StepDirection.FORWARD, "step_forward")

    def action_step_backward(self) -> None:
        navigator = self.navigator
        if navigator is None:
            return
        moved = navigator.step_backward()
        if not moved and self.settings.navigation.auto_advance_file and self.multi.prev_file():
            self._settle()
            self.refresh_view()
            return
        self._after_move(moved, StepDirection.BACKWARD, "step_backward")

    def action_next_hunk(self) -> None:
        navigator = self.navigator
        if navigator is not None:
            self._after_move(navigator.next_hunk(), StepDirection.FORWARD, "next_hunk")

    def action_prev_hunk(self) -> None:
        navigator = self.navigator
        if navigator is not None:
            self._after_move(navigator.prev_hunk(), StepDirection.BACKWARD, "prev_hunk")

    def action_toggle_hunk_mode(self) -> None:
        navigator = self.navigator
        if navigator is None:
            return
        enabled = navigator.toggle_hunk_preview_mode()
        self.multi.set_hunk_preview_mode(enabled)
        self.notify(f"Stepping by {'hunk' if enabled else 'change'}")
        self.refresh_view()

    def action_goto_start(self) -> None:
        navigator = self.navigator
        if navigator is not None:
            navigator.goto_start()
            self._settle()
            self.refresh_view()

    def action_goto_end(self) -> None:
        navigator = self.navigator
        if navigator is not None:
            navigator.goto_end()
            self._settle()
            self.refresh_view()

    def action_next_file(self) -> None:
        if self.multi.next_file():
            self._settle()
            self.refresh_view()

    def action_prev_file(self) -> None:
        if self.multi.prev_file():
            self._settle()
            self.refresh_view()

    def on_exit(self) -> None:
        self.logger.info("app.exit", file_index=self.multi.current_index)
