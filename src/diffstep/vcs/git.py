"""Git integration for listing changed files and reading their content."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from diffstep.runtime_logging import get_runtime_logger


class GitError(Exception):
    """Base class for git failures; callers treat these as "git unavailable"."""


class NotARepositoryError(GitError):
    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"Not a git repository: {self.path}")


class GitCommandError(GitError):
    def __init__(self, stderr: str) -> None:
        self.stderr = stderr
        super().__init__(f"Git command failed: {stderr.strip()}")


class GitIOError(GitError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"IO error: {reason}")


class FileStatus(StrEnum):
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    RENAMED = "renamed"
    UNTRACKED = "untracked"


_STATUS_CODES = {
    "M": FileStatus.MODIFIED,
    "A": FileStatus.ADDED,
    "D": FileStatus.DELETED,
    "R": FileStatus.RENAMED,
}


@dataclass(frozen=True, slots=True)
class ChangedFile:
    path: Path
    status: FileStatus
    old_path: Path | None = None


def _run(repo_path: Path, *args: str) -> subprocess.CompletedProcess[bytes]:
    command = ["git", "-C", str(repo_path), *args]
    try:
        return subprocess.run(command, capture_output=True, check=False)
    except OSError as exc:
        get_runtime_logger().error("git.launch.failed", args=list(args), error=str(exc))
        raise GitIOError(str(exc)) from exc


def _stdout(completed: subprocess.CompletedProcess[bytes]) -> str:
    return completed.stdout.decode("utf-8", errors="replace")


def _command_error(completed: subprocess.CompletedProcess[bytes], *args: str) -> GitCommandError:
    stderr = completed.stderr.decode("utf-8", errors="replace")
    get_runtime_logger().warning(
        "git.command.failed",
        args=list(args),
        returncode=completed.returncode,
        stderr=stderr.strip(),
    )
    return GitCommandError(stderr)


def is_git_repo(path: Path) -> bool:
    try:
        completed = _run(path, "rev-parse", "--git-dir")
    except GitError:
        return False
    return completed.returncode == 0


def get_current_branch(path: Path) -> str:
    completed = _run(path, "rev-parse", "--abbrev-ref", "HEAD")
    if completed.returncode != 0:
        raise NotARepositoryError(path)
    return _stdout(completed).strip()


def get_repo_root(path: Path) -> Path:
    completed = _run(path, "rev-parse", "--show-toplevel")
    if completed.returncode != 0:
        raise NotARepositoryError(path)
    return Path(_stdout(completed).strip())


def get_uncommitted_changes(repo_path: Path) -> list[ChangedFile]:
    """Staged, unstaged and untracked files, sorted and unique by path."""
    changes: list[ChangedFile] = []

    staged = _run(repo_path, "diff", "--cached", "--name-status")
    if staged.returncode == 0:
        changes.extend(parse_name_status(_stdout(staged)))

    unstaged = _run(repo_path, "diff", "--name-status")
    if unstaged.returncode == 0:
        changes.extend(parse_name_status(_stdout(unstaged)))

    untracked = _run(repo_path, "ls-files", "--others", "--exclude-standard")
    if untracked.returncode == 0:
        for line in _stdout(untracked).splitlines():
            line = line.strip()
            if line:
                changes.append(ChangedFile(path=Path(line), status=FileStatus.UNTRACKED))

    unique: list[ChangedFile] = []
    seen: set[Path] = set()
    for change in sorted(changes, key=lambda item: item.path):
        if change.path in seen:
            continue
        seen.add(change.path)
        unique.append(change)
    return unique


def get_changes_between(repo_path: Path, from_ref: str, to_ref: str) -> list[ChangedFile]:
    args = ("diff", "--name-status", f"{from_ref}..{to_ref}")
    completed = _run(repo_path, *args)
    if completed.returncode != 0:
        raise _command_error(completed, *args)
    return parse_name_status(_stdout(completed))


def get_file_at_commit(repo_path: Path, commit: str, file: Path) -> str:
    args = ("show", f"{commit}:{file.as_posix()}")
    completed = _run(repo_path, *args)
    if completed.returncode != 0:
        raise _command_error(completed, *args)
    return _stdout(completed)


def get_staged_content(repo_path: Path, file: Path) -> str:
    completed = _run(repo_path, "show", f":{file.as_posix()}")
    if completed.returncode != 0:
        # Not in the index; HEAD is the best remaining source.
        return get_file_at_commit(repo_path, "HEAD", file)
    return _stdout(completed)


def get_head_content(repo_path: Path, file: Path) -> str:
    return get_file_at_commit(repo_path, "HEAD", file)


def parse_name_status(output: str) -> list[ChangedFile]:
    """Parse ``git diff --name-status`` records of the form ``status<TAB>path``."""
    changes: list[ChangedFile] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        parts = line.split("\t")
        status = _STATUS_CODES.get(parts[0][:1])
        if status is None or len(parts) < 2:
            continue

        old_path = None
        if status is FileStatus.RENAMED and len(parts) >= 3:
            old_path = Path(parts[1])
        changes.append(ChangedFile(path=Path(parts[-1]), status=status, old_path=old_path))
    return changes
