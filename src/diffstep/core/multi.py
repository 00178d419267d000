"""Multi-document composition: one navigator per file pair plus a selection."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from diffstep.core.diff import DiffEngine, DiffResult, FileDiff
from diffstep.core.step import DiffNavigator
from diffstep.runtime_logging import get_runtime_logger
from diffstep.vcs.git import (
    ChangedFile,
    FileStatus,
    GitError,
    get_changes_between,
    get_file_at_commit,
    get_head_content,
    get_repo_root,
    get_uncommitted_changes,
)


@dataclass(slots=True)
class FileEntry:
    file_diff: FileDiff
    navigator: DiffNavigator
    status: FileStatus | None = None

    @property
    def display_name(self) -> str:
        return self.file_diff.display_name


def _looks_binary(text: str) -> bool:
    return "\x00" in text


class MultiFileDiff:
    """Ordered file entries and the index of the one being viewed.

    Holds no diff logic; switching files keeps each navigator's position.
    """

    def __init__(
        self,
        entries: Iterable[FileEntry] = (),
        skipped: Iterable[tuple[Path, str]] = (),
    ) -> None:
        self._entries = list(entries)
        self.skipped: list[tuple[Path, str]] = list(skipped)
        self._current = 0
        self._logger = get_runtime_logger()

    @classmethod
    def from_file_diffs(
        cls,
        file_diffs: Iterable[FileDiff],
        *,
        hunk_mode: bool = False,
    ) -> MultiFileDiff:
        return cls(
            FileEntry(file_diff=file_diff, navigator=DiffNavigator(file_diff.result, hunk_preview_mode=hunk_mode))
            for file_diff in file_diffs
        )

    @classmethod
    def from_texts(
        cls,
        documents: Iterable[tuple[str, str, str]],
        *,
        engine: DiffEngine | None = None,
        hunk_mode: bool = False,
    ) -> MultiFileDiff:
        """Build from ``(name, old_text, new_text)`` triples."""
        engine = engine or DiffEngine()
        return cls.from_file_diffs(
            (engine.diff_texts(old, new, old_path=name, new_path=name) for name, old, new in documents),
            hunk_mode=hunk_mode,
        )

    @classmethod
    def from_paths(
        cls,
        pairs: Iterable[tuple[str | Path, str | Path]],
        *,
        engine: DiffEngine | None = None,
        hunk_mode: bool = False,
    ) -> MultiFileDiff:
        engine = engine or DiffEngine()
        return cls.from_file_diffs(
            (engine.diff_files(old, new) for old, new in pairs),
            hunk_mode=hunk_mode,
        )

    @classmethod
    def from_git_uncommitted(
        cls,
        repo_path: Path,
        *,
        engine: DiffEngine | None = None,
        hunk_mode: bool = False,
    ) -> MultiFileDiff:
        root = get_repo_root(repo_path)
        changed = get_uncommitted_changes(root)

        def load(change: ChangedFile) -> tuple[str, str]:
            if change.status in (FileStatus.ADDED, FileStatus.UNTRACKED):
                old = ""
            else:
                old = get_head_content(root, change.old_path or change.path)
            if change.status is FileStatus.DELETED:
                new = ""
            else:
                new = (root / change.path).read_text(encoding="utf-8", errors="replace")
            return old, new

        return cls._from_changed(
            changed,
            load,
            source=f"uncommitted:{root}",
            engine=engine,
            hunk_mode=hunk_mode,
        )

    @classmethod
    def from_git_range(
        cls,
        repo_path: Path,
        from_ref: str,
        to_ref: str,
        *,
        engine: DiffEngine | None = None,
        hunk_mode: bool = False,
    ) -> MultiFileDiff:
        root = get_repo_root(repo_path)
        changed = get_changes_between(root, from_ref, to_ref)

        def load(change: ChangedFile) -> tuple[str, str]:
            if change.status is FileStatus.ADDED:
                old = ""
            else:
                old = get_file_at_commit(root, from_ref, change.old_path or change.path)
            if change.status is FileStatus.DELETED:
                new = ""
            else:
                new = get_file_at_commit(root, to_ref, change.path)
            return old, new

        return cls._from_changed(
            changed,
            load,
            source=f"range:{from_ref}..{to_ref}",
            engine=engine,
            hunk_mode=hunk_mode,
        )

    @classmethod
    def _from_changed(
        cls,
        changed: list[ChangedFile],
        load: Callable[[ChangedFile], tuple[str, str]],
        *,
        source: str,
        engine: DiffEngine | None,
        hunk_mode: bool,
    ) -> MultiFileDiff:
        engine = engine or DiffEngine()
        logger = get_runtime_logger().bind(source=source)
        entries: list[FileEntry] = []
        skipped: list[tuple[Path, str]] = []
        for change in changed:
            try:
                old, new = load(change)
            except (GitError, OSError) as exc:
                logger.warning("multi.file.skipped", path=str(change.path), reason=str(exc))
                skipped.append((change.path, str(exc)))
                continue
            if _looks_binary(old) or _looks_binary(new):
                logger.info("multi.file.binary_skipped", path=str(change.path))
                continue

            old_path = change.old_path or change.path
            file_diff = engine.diff_texts(
                old,
                new,
                old_path=old_path.as_posix(),
                new_path=change.path.as_posix(),
            )
            entries.append(
                FileEntry(
                    file_diff=file_diff,
                    navigator=DiffNavigator(file_diff.result, hunk_preview_mode=hunk_mode),
                    status=change.status,
                )
            )
        logger.info("multi.git.loaded", files=len(entries), candidates=len(changed))
        return cls(entries, skipped)

    def __len__(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def files(self) -> list[FileEntry]:
        return list(self._entries)

    def entry(self, index: int) -> FileEntry | None:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    @property
    def current_index(self) -> int:
        return self._current

    def current(self) -> FileEntry | None:
        return self.entry(self._current)

    def current_navigator(self) -> DiffNavigator | None:
        entry = self.current()
        return entry.navigator if entry is not None else None

    def current_diff(self) -> DiffResult | None:
        entry = self.current()
        return entry.file_diff.result if entry is not None else None

    def select(self, index: int) -> bool:
        if not 0 <= index < len(self._entries) or index == self._current:
            return False
        self._current = index
        self._logger.debug(
            "multi.file.selected",
            index=index,
            name=self._entries[index].display_name,
        )
        return True

    def next_file(self) -> bool:
        return self.select(self._current + 1)

    def prev_file(self) -> bool:
        return self.select(self._current - 1)

    def set_hunk_preview_mode(self, enabled: bool) -> None:
        for entry in self._entries:
            entry.navigator.set_hunk_preview_mode(enabled)

    def total_insertions(self) -> int:
        return sum(entry.file_diff.result.insertions for entry in self._entries)

    def total_deletions(self) -> int:
        return sum(entry.file_diff.result.deletions for entry in self._entries)
