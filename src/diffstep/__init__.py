"""diffstep: step through a diff one change at a time."""

from diffstep.core.change import Change, ChangeKind, ChangeSpan, Hunk
from diffstep.core.diff import (
    ComputeFailedError,
    DiffConfig,
    DiffEngine,
    DiffError,
    DiffResult,
    FileDiff,
    FileReadError,
)
from diffstep.core.multi import FileEntry, MultiFileDiff
from diffstep.core.step import (
    AnimationFrame,
    AnimationPhase,
    DiffNavigator,
    LineKind,
    StepDirection,
    StepState,
    ViewLine,
    ViewSpan,
    ViewSpanKind,
)
from diffstep.core.tokenize import tokenize
from diffstep.version import __version__

__all__ = [
    "AnimationFrame",
    "AnimationPhase",
    "Change",
    "ChangeKind",
    "ChangeSpan",
    "ComputeFailedError",
    "DiffConfig",
    "DiffEngine",
    "DiffError",
    "DiffNavigator",
    "DiffResult",
    "FileDiff",
    "FileEntry",
    "FileReadError",
    "Hunk",
    "LineKind",
    "MultiFileDiff",
    "StepDirection",
    "StepState",
    "ViewLine",
    "ViewSpan",
    "ViewSpanKind",
    "__version__",
    "tokenize",
]
