"""Code-aware tokenizer feeding word-level alignment."""

from __future__ import annotations


def _is_word(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def tokenize(line: str) -> list[str]:
    """Split ``line`` into identifier, whitespace-run and punctuation tokens.

    Identifiers (alphanumerics and ``_``) and whitespace are grouped into
    maximal runs; every other character is its own token. Joining the result
    always reproduces ``line``.
    """
    tokens: list[str] = []
    start = 0
    length = len(line)

    while start < length:
        ch = line[start]
        end = start + 1
        if _is_word(ch):
            while end < length and _is_word(line[end]):
                end += 1
        elif ch.isspace():
            while end < length and line[end].isspace():
                end += 1
        tokens.append(line[start:end])
        start = end

    return tokens
