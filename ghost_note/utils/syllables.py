"""Spelling heuristics for words missing from the pronouncing dictionary."""

from __future__ import annotations

import re


__all__ = ["estimate_syllable_count", "estimate_stress_pattern"]


_VOWEL_GROUP_PATTERN = re.compile(r"[aeiouy]+")
_CONSONANT_END = re.compile(r"[bcdfghjklmnpqrstvwxz]$")
_NON_LETTER = re.compile(r"[^a-z]")


def estimate_syllable_count(word: str) -> int:
    """Estimate the number of syllables in ``word`` from its spelling.

    Counts vowel groups (``y`` included), drops a silent final ``e`` after a
    consonant unless the word ends in ``-le``, and drops ``-ed`` unless it
    follows ``t`` or ``d``. Never returns less than one.
    """

    normalized = _NON_LETTER.sub("", (word or "").lower())
    syllable_count = len(_VOWEL_GROUP_PATTERN.findall(normalized))

    if (
        normalized.endswith("e")
        and not normalized.endswith("le")
        and syllable_count > 1
        and _CONSONANT_END.search(normalized[:-1])
    ):
        syllable_count -= 1

    if normalized.endswith("ed") and syllable_count > 1 and normalized[-3:-2] not in ("t", "d"):
        syllable_count -= 1

    return max(1, syllable_count)


def estimate_stress_pattern(word: str) -> str:
    """Guess a stress pattern (``"1"``, ``"10"``, ``"100"``, ``"0101..."``)."""

    if not word or not word.strip():
        return ""

    count = estimate_syllable_count(word)
    if count == 1:
        return "1"
    if count == 2:
        return "10"
    if count == 3:
        return "100"
    return "".join("1" if index % 2 else "0" for index in range(count))
