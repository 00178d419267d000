"""Immutable change representation shared by the engine and the navigator."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Iterator


class ChangeKind(StrEnum):
    INSERT = "insert"
    DELETE = "delete"
    REPLACE = "replace"
    EQUAL = "equal"


@dataclass(frozen=True, slots=True)
class ChangeSpan:
    """A run of text tagged with one change kind.

    ``text`` holds the old content for delete/replace spans and the new content
    for insert spans. ``new_text`` is only set for replace spans.
    """

    kind: ChangeKind
    text: str
    new_text: str | None = None
    old_line: int | None = None
    new_line: int | None = None

    @classmethod
    def equal(cls, text: str) -> ChangeSpan:
        return cls(kind=ChangeKind.EQUAL, text=text)

    @classmethod
    def insert(cls, text: str) -> ChangeSpan:
        return cls(kind=ChangeKind.INSERT, text=text)

    @classmethod
    def delete(cls, text: str) -> ChangeSpan:
        return cls(kind=ChangeKind.DELETE, text=text)

    @classmethod
    def replace(cls, old: str, new: str) -> ChangeSpan:
        return cls(kind=ChangeKind.REPLACE, text=old, new_text=new)

    def with_lines(self, old_line: int | None, new_line: int | None) -> ChangeSpan:
        return replace(self, old_line=old_line, new_line=new_line)

    def is_change(self) -> bool:
        return self.kind is not ChangeKind.EQUAL

    def old_side(self) -> str:
        if self.kind is ChangeKind.INSERT:
            return ""
        return self.text

    def new_side(self) -> str:
        if self.kind is ChangeKind.DELETE:
            return ""
        if self.kind is ChangeKind.REPLACE:
            return self.new_text if self.new_text is not None else self.text
        return self.text


@dataclass(frozen=True, slots=True)
class Change:
    """One diff unit; holds several spans only for a word-level replacement."""

    id: int
    spans: tuple[ChangeSpan, ...]
    description: str | None = None

    @classmethod
    def single(cls, change_id: int, span: ChangeSpan) -> Change:
        return cls(id=change_id, spans=(span,))

    def with_description(self, description: str) -> Change:
        return replace(self, description=description)

    def changes(self) -> Iterator[ChangeSpan]:
        return (span for span in self.spans if span.is_change())

    def has_changes(self) -> bool:
        return any(span.is_change() for span in self.spans)

    @property
    def first_span(self) -> ChangeSpan | None:
        return self.spans[0] if self.spans else None

    def kinds(self) -> set[ChangeKind]:
        return {span.kind for span in self.spans}

    def old_text(self) -> str:
        return "".join(span.old_side() for span in self.spans)

    def new_text(self) -> str:
        return "".join(span.new_side() for span in self.spans)


@dataclass(frozen=True, slots=True)
class Hunk:
    """A proximity-grouped run of significant changes."""

    id: int
    change_ids: tuple[int, ...]
    old_start: int | None = None
    new_start: int | None = None
    insertions: int = 0
    deletions: int = 0
    _members: frozenset[int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_members", frozenset(self.change_ids))

    def __len__(self) -> int:
        return len(self.change_ids)

    def __contains__(self, change_id: object) -> bool:
        return change_id in self._members

    def is_empty(self) -> bool:
        return not self.change_ids
