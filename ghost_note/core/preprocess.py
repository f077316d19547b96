"""Text clean-up and tokenisation ahead of phonetic analysis."""

from __future__ import annotations

import re
from typing import List

_CRLF = re.compile(r"\r\n?")
_TABS = re.compile(r"\t")
_SPACES = re.compile(r" {2,}")
_TRAILING_SPACE = re.compile(r"[ ]+$", re.MULTILINE)
_STANZA_BREAK = re.compile(r"\n[ ]*\n+")
_WORD_CHARS = re.compile(r"[\w']+(?:-[\w']+)*")
_DROPPED_G = re.compile(r"[aeiouy]n'$")


def normalize_text(text: str) -> str:
    """Normalise line endings and whitespace without touching words."""

    cleaned = _CRLF.sub("\n", text or "")
    cleaned = _TABS.sub(" ", cleaned)
    cleaned = _TRAILING_SPACE.sub("", cleaned)
    cleaned = _SPACES.sub(" ", cleaned)
    return cleaned.strip("\n")


def split_lines(text: str) -> List[str]:
    """Non-empty, stripped lines of ``text``."""

    return [line.strip() for line in normalize_text(text).split("\n") if line.strip()]


def split_stanzas(text: str) -> List[List[str]]:
    """Group lines into stanzas separated by one or more blank lines."""

    normalized = normalize_text(text)
    if not normalized.strip():
        return []

    stanzas: List[List[str]] = []
    for block in _STANZA_BREAK.split(normalized):
        lines = [line.strip() for line in block.split("\n") if line.strip()]
        if lines:
            stanzas.append(lines)
    return stanzas


def _clean_token(token: str) -> str:
    word = token.lstrip("'")
    if word.endswith("'") and not _DROPPED_G.search(word.lower()):
        word = word.rstrip("'")
    return word


def tokenize_words(line: str) -> List[str]:
    """Split ``line`` into words.

    Contractions (``don't``) and hyphenated compounds (``sun-kissed``) stay
    whole, quote marks are trimmed, and a trailing apostrophe survives only
    on dropped-g forms such as ``singin'``.
    """

    words: List[str] = []
    for chunk in (line or "").split():
        for match in _WORD_CHARS.finditer(chunk):
            word = _clean_token(match.group(0))
            if word and any(char.isalnum() for char in word):
                words.append(word)
    return words


def split_compound(word: str) -> List[str]:
    """Parts of a hyphenated compound, or ``[word]``."""

    parts = [part for part in word.split("-") if part]
    return parts or [word]


__all__ = [
    "normalize_text",
    "split_compound",
    "split_lines",
    "split_stanzas",
    "tokenize_words",
]
