"""Line and word level diff engine with proximity-based hunk grouping."""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Iterator, Literal, Sequence

from diffstep.core.change import Change, ChangeKind, ChangeSpan, Hunk
from diffstep.core.tokenize import tokenize
from diffstep.runtime_logging import get_runtime_logger

AlignTag = Literal["equal", "delete", "insert"]

# Changes whose first lines are at most this far apart share a hunk.
PROXIMITY_THRESHOLD = 3


class DiffError(Exception):
    """Base class for diff computation failures."""


class FileReadError(DiffError):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to read file: {self.path}: {reason}")


class ComputeFailedError(DiffError):
    """Reserved for alignment backends that can fail; never raised in-memory."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Diff computation failed: {reason}")


@dataclass(frozen=True, slots=True)
class DiffConfig:
    # context_lines is carried for callers but does not change the result.
    context_lines: int = 3
    word_level: bool = True

    def __post_init__(self) -> None:
        if self.context_lines < 0:
            raise ValueError("context_lines must be >= 0")


@dataclass(frozen=True, slots=True)
class DiffResult:
    changes: tuple[Change, ...] = ()
    significant_changes: tuple[int, ...] = ()
    hunks: tuple[Hunk, ...] = ()
    insertions: int = 0
    deletions: int = 0
    _changes_by_id: dict[int, Change] = field(init=False, repr=False, compare=False)
    _hunks_by_id: dict[int, Hunk] = field(init=False, repr=False, compare=False)
    _hunk_by_change: dict[int, Hunk] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_change: dict[int, Hunk] = {}
        for hunk in self.hunks:
            for change_id in hunk.change_ids:
                by_change.setdefault(change_id, hunk)
        object.__setattr__(self, "_changes_by_id", {change.id: change for change in self.changes})
        object.__setattr__(self, "_hunks_by_id", {hunk.id: hunk for hunk in self.hunks})
        object.__setattr__(self, "_hunk_by_change", by_change)

    def is_empty(self) -> bool:
        return not self.significant_changes

    def get_change(self, change_id: int) -> Change | None:
        return self._changes_by_id.get(change_id)

    def get_significant_changes(self) -> list[Change]:
        return [
            self._changes_by_id[change_id]
            for change_id in self.significant_changes
            if change_id in self._changes_by_id
        ]

    def get_hunk(self, hunk_id: int) -> Hunk | None:
        return self._hunks_by_id.get(hunk_id)

    def hunk_for_change(self, change_id: int) -> Hunk | None:
        return self._hunk_by_change.get(change_id)


@dataclass(frozen=True, slots=True)
class FileDiff:
    result: DiffResult
    old_path: str | None = None
    new_path: str | None = None

    @property
    def display_name(self) -> str:
        if self.old_path and self.new_path and self.old_path != self.new_path:
            return f"{self.old_path} -> {self.new_path}"
        return self.new_path or self.old_path or "<text>"


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` and drop line terminators (including a CR before LF)."""
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def align(old: Sequence[str], new: Sequence[str]) -> Iterator[tuple[AlignTag, int, int]]:
    """Yield ``(tag, old_index, new_index)`` per element of the alignment.

    ``replace`` regions are emitted as their deletes followed by their inserts.
    """
    matcher = difflib.SequenceMatcher(None, old, new, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for offset in range(i2 - i1):
                yield "equal", i1 + offset, j1 + offset
            continue
        for i in range(i1, i2):
            yield "delete", i, j1
        for j in range(j1, j2):
            yield "insert", i2, j


def align_runs(old: Sequence[str], new: Sequence[str]) -> Iterator[tuple[AlignTag, str]]:
    """Yield maximal ``(tag, joined_text)`` runs of an element alignment."""
    matcher = difflib.SequenceMatcher(None, old, new, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            yield "equal", "".join(old[i1:i2])
            continue
        if i2 > i1:
            yield "delete", "".join(old[i1:i2])
        if j2 > j1:
            yield "insert", "".join(new[j1:j2])


@dataclass(slots=True)
class _Accumulator:
    """Fold state while walking a line alignment."""

    word_level: bool
    changes: list[Change] = field(default_factory=list)
    significant: list[int] = field(default_factory=list)
    pending_deletes: list[tuple[str, int]] = field(default_factory=list)
    pending_inserts: list[tuple[str, int]] = field(default_factory=list)
    old_line: int = 1
    new_line: int = 1
    insertions: int = 0
    deletions: int = 0

    def _emit(self, spans: Iterable[ChangeSpan]) -> Change:
        change = Change(id=len(self.changes), spans=tuple(spans))
        self.changes.append(change)
        if change.has_changes():
            self.significant.append(change.id)
        return change

    def push_equal(self, text: str) -> None:
        self.flush()
        self._emit([ChangeSpan.equal(text).with_lines(self.old_line, self.new_line)])
        self.old_line += 1
        self.new_line += 1

    def push_delete(self, text: str) -> None:
        self.pending_deletes.append((text, self.old_line))
        self.old_line += 1

    def push_insert(self, text: str) -> None:
        self.pending_inserts.append((text, self.new_line))
        self.new_line += 1

    def flush(self) -> None:
        if not self.pending_deletes and not self.pending_inserts:
            return

        if self.word_level and len(self.pending_deletes) == len(self.pending_inserts):
            for (old_text, old_line), (new_text, new_line) in zip(
                self.pending_deletes, self.pending_inserts
            ):
                self._emit(word_spans(old_text, new_text, old_line, new_line))
                self.insertions += 1
                self.deletions += 1
        else:
            for text, line in self.pending_deletes:
                self._emit([ChangeSpan.delete(text).with_lines(line, None)])
                self.deletions += 1
            for text, line in self.pending_inserts:
                self._emit([ChangeSpan.insert(text).with_lines(None, line)])
                self.insertions += 1

        self.pending_deletes.clear()
        self.pending_inserts.clear()


def word_spans(old: str, new: str, old_line: int, new_line: int) -> list[ChangeSpan]:
    """Token-align one replaced line pair into mixed equal/delete/insert spans."""
    factories = {
        "equal": ChangeSpan.equal,
        "delete": ChangeSpan.delete,
        "insert": ChangeSpan.insert,
    }
    return [
        factories[tag](text).with_lines(old_line, new_line)
        for tag, text in align_runs(tokenize(old), tokenize(new))
    ]


def compute_hunks(significant_changes: Sequence[int], changes: Sequence[Change]) -> list[Hunk]:
    """Group significant changes whose first lines sit close together.

    Proximity is measured on the old side when both the previous and the
    current change carry an old line number, otherwise on the new side. When
    neither side is comparable the change only joins an empty hunk.
    """
    by_id = {change.id: change for change in changes}
    hunks: list[Hunk] = []

    members: list[int] = []
    old_start: int | None = None
    new_start: int | None = None
    last_old: int | None = None
    last_new: int | None = None
    insertions = 0
    deletions = 0

    def finish() -> None:
        hunks.append(
            Hunk(
                id=len(hunks),
                change_ids=tuple(members),
                old_start=old_start,
                new_start=new_start,
                insertions=insertions,
                deletions=deletions,
            )
        )

    for change_id in significant_changes:
        change = by_id.get(change_id)
        if change is None:
            continue

        first = change.first_span
        old_line = first.old_line if first is not None else None
        new_line = first.new_line if first is not None else None

        if last_old is not None and old_line is not None:
            is_close = max(old_line - last_old, 0) <= PROXIMITY_THRESHOLD
        elif last_new is not None and new_line is not None:
            is_close = max(new_line - last_new, 0) <= PROXIMITY_THRESHOLD
        else:
            is_close = not members

        if is_close:
            members.append(change_id)
            if old_start is None:
                old_start = old_line
            if new_start is None:
                new_start = new_line
        else:
            if members:
                finish()
            members = [change_id]
            old_start = old_line
            new_start = new_line
            insertions = 0
            deletions = 0

        if old_line is not None:
            last_old = old_line
        if new_line is not None:
            last_new = new_line

        for span in change.spans:
            if span.kind is ChangeKind.INSERT:
                insertions += 1
            elif span.kind is ChangeKind.DELETE:
                deletions += 1
            elif span.kind is ChangeKind.REPLACE:
                insertions += 1
                deletions += 1

    if members:
        finish()

    return hunks


class DiffEngine:
    def __init__(self, config: DiffConfig | None = None) -> None:
        self._config = config or DiffConfig()
        self._logger = get_runtime_logger()

    @property
    def config(self) -> DiffConfig:
        return self._config

    def with_context(self, lines: int) -> DiffEngine:
        return DiffEngine(replace(self._config, context_lines=lines))

    def with_word_level(self, enabled: bool) -> DiffEngine:
        return DiffEngine(replace(self._config, word_level=enabled))

    def diff_strings(self, old: str, new: str) -> DiffResult:
        old_lines = split_lines(old)
        new_lines = split_lines(new)

        with self._logger.timed(
            "diff.computed",
            old_lines=len(old_lines),
            new_lines=len(new_lines),
            word_level=self._config.word_level,
        ) as stats:
            acc = _Accumulator(word_level=self._config.word_level)
            for tag, old_index, new_index in align(old_lines, new_lines):
                if tag == "equal":
                    acc.push_equal(old_lines[old_index])
                elif tag == "delete":
                    acc.push_delete(old_lines[old_index])
                else:
                    acc.push_insert(new_lines[new_index])
            acc.flush()

            result = DiffResult(
                changes=tuple(acc.changes),
                significant_changes=tuple(acc.significant),
                hunks=tuple(compute_hunks(acc.significant, acc.changes)),
                insertions=acc.insertions,
                deletions=acc.deletions,
            )
            stats.update(
                changes=len(result.changes),
                significant=len(result.significant_changes),
                hunks=len(result.hunks),
                insertions=result.insertions,
                deletions=result.deletions,
            )
        return result

    def diff_texts(
        self,
        old: str,
        new: str,
        *,
        old_path: str | None = None,
        new_path: str | None = None,
    ) -> FileDiff:
        return FileDiff(result=self.diff_strings(old, new), old_path=old_path, new_path=new_path)

    def diff_files(self, old_path: str | Path, new_path: str | Path) -> FileDiff:
        old_content = self._read(old_path)
        new_content = self._read(new_path)
        return self.diff_texts(
            old_content,
            new_content,
            old_path=str(old_path),
            new_path=str(new_path),
        )

    def _read(self, path: str | Path) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._logger.error("diff.file_read.failed", path=str(path), error=str(exc))
            raise FileReadError(path, str(exc)) from exc
