"""End rhyme, rhyme scheme and internal rhyme detection."""

from __future__ import annotations

import difflib
import re
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from ghost_note.utils.observability import get_logger

from .meter import FUNCTION_WORDS
from .models import InternalRhyme, RhymeAnalysis, RhymeGroup, RhymeType
from .phonetics import (
    PhoneticLookup,
    base_phoneme,
    is_consonant,
    is_vowel,
    phoneme_stress,
    primary_pronunciation,
)

_log = get_logger(__name__).bind(component="rhyme")

_TOKEN_PATTERN = re.compile(r"[a-zA-Z']+")
_TRAILING_PUNCTUATION = re.compile(r"[.,!?;:'\"()\[\]{}—–-]+$")
_NON_WORD_CHARS = re.compile(r"[^a-zA-Z']")

SAME_CLASS_CREDIT = 0.3
LENGTH_PENALTY = 0.5
SLANT_SIMILARITY = 0.6
PARTIAL_VOWEL_SIMILARITY = 0.4

RHYME_BASE_STRENGTH: Dict[RhymeType, float] = {
    RhymeType.PERFECT: 1.0,
    RhymeType.SLANT: 0.7,
    RhymeType.ASSONANCE: 0.6,
    RhymeType.CONSONANCE: 0.5,
    RhymeType.NONE: 0.0,
}
RHYME_QUALITY: Dict[RhymeType, float] = {
    RhymeType.PERFECT: 1.0,
    RhymeType.SLANT: 0.75,
    RhymeType.ASSONANCE: 0.5,
    RhymeType.CONSONANCE: 0.5,
    RhymeType.NONE: 0.0,
}
RHYME_HIERARCHY: Tuple[RhymeType, ...] = (
    RhymeType.PERFECT,
    RhymeType.SLANT,
    RhymeType.ASSONANCE,
    RhymeType.CONSONANCE,
    RhymeType.NONE,
)

END_CONSONANT_BONUS = 0.1
SPELLING_WEIGHT = 0.2
EYE_RHYME_SPELLING = 0.75
EYE_RHYME_STRENGTH = 0.5
SPELLING_TAIL = 4

# Internal rhymes are only looked for between words this close together.
INTERNAL_RHYME_WINDOW = 4

# Scheme letters: A-Z, a-z, then Latin Extended code points, then CJK.
_LATIN_EXTENDED_START = 0x0100
_LATIN_EXTENDED_SIZE = 0x0150
_CJK_START = 0x4E00

KNOWN_RHYME_FORMS: Dict[str, str] = {
    "AA": "couplet",
    "AABB": "couplets",
    "AABBCC": "couplets",
    "AABBCCDD": "couplets",
    "ABAB": "alternate",
    "ABCABC": "alternate",
    "ABBA": "enclosed",
    "ABBAABBA": "enclosed (octave)",
    "ABABCDCD": "alternate",
    "ABABCDCDEFEFGG": "Shakespearean sonnet",
    "ABBAABBACDECDE": "Petrarchan sonnet",
    "ABBAABBACDCDCD": "Petrarchan sonnet",
    "AAB": "triplet with tail",
    "ABA": "interlocking",
    "AABBA": "limerick",
}


# ---------------------------------------------------------------------------
# Phoneme level
# ---------------------------------------------------------------------------


def get_rhyming_part(phonemes: Optional[Sequence[str]]) -> List[str]:
    """Phonemes from the last stressed vowel to the end of the word.

    Primary stress wins, then secondary stress, then the last vowel of any
    stress. Returns an empty list when there is no vowel at all.
    """

    if not phonemes:
        return []

    sequence = list(phonemes)
    for wanted in (1, 2):
        for index in range(len(sequence) - 1, -1, -1):
            if phoneme_stress(sequence[index]) == wanted:
                return sequence[index:]
    for index in range(len(sequence) - 1, -1, -1):
        if is_vowel(sequence[index]):
            return sequence[index:]
    return []


def _bases(phonemes: Sequence[str]) -> List[str]:
    return [base_phoneme(phoneme) for phoneme in phonemes]


def _same_class(first: str, second: str) -> bool:
    return (is_vowel(first) and is_vowel(second)) or (is_consonant(first) and is_consonant(second))


def calculate_phonetic_similarity(first: Sequence[str], second: Sequence[str]) -> float:
    """Aligned similarity of two phoneme sequences in ``[0, 1]``.

    Identical phonemes earn 1, phonemes of the same class earn 0.3, and every
    phoneme of length difference costs 0.5 before normalising by the longer
    sequence.
    """

    if not first or not second:
        return 0.0

    norm_a = _bases(first)
    norm_b = _bases(second)
    longest = max(len(norm_a), len(norm_b))
    shortest = min(len(norm_a), len(norm_b))

    score = 0.0
    for left, right in zip(norm_a, norm_b):
        if left == right:
            score += 1.0
        elif _same_class(left, right):
            score += SAME_CLASS_CREDIT

    score = max(0.0, score - (longest - shortest) * LENGTH_PENALTY)
    return score / longest


def _classify_parts(rhyme_a: Sequence[str], rhyme_b: Sequence[str]) -> RhymeType:
    if not rhyme_a or not rhyme_b:
        return RhymeType.NONE

    if _bases(rhyme_a) == _bases(rhyme_b):
        return RhymeType.PERFECT

    vowels_a = [base_phoneme(p) for p in rhyme_a if is_vowel(p)]
    vowels_b = [base_phoneme(p) for p in rhyme_b if is_vowel(p)]
    consonants_a = [p for p in rhyme_a if is_consonant(p)]
    consonants_b = [p for p in rhyme_b if is_consonant(p)]
    vowels_match = vowels_a == vowels_b
    consonants_match = consonants_a == consonants_b

    if vowels_match and not consonants_match and vowels_a:
        return RhymeType.ASSONANCE
    if consonants_match and not vowels_match and consonants_a:
        return RhymeType.CONSONANCE

    similarity = calculate_phonetic_similarity(rhyme_a, rhyme_b)
    if similarity >= SLANT_SIMILARITY:
        return RhymeType.SLANT
    if similarity >= PARTIAL_VOWEL_SIMILARITY and set(vowels_a) & set(vowels_b):
        return RhymeType.SLANT
    return RhymeType.NONE


# ---------------------------------------------------------------------------
# Word level
# ---------------------------------------------------------------------------


def _phones(word: str, lookup: Optional[PhoneticLookup]) -> Optional[List[str]]:
    if not word:
        return None
    return primary_pronunciation(word, lookup)


def classify_rhyme(word1: str, word2: str, lookup: Optional[PhoneticLookup] = None) -> RhymeType:
    """Kind of rhyme between two words; ``NONE`` when either is unknown."""

    phones_a = _phones(word1, lookup)
    phones_b = _phones(word2, lookup)
    if not phones_a or not phones_b:
        return RhymeType.NONE
    return _classify_parts(get_rhyming_part(phones_a), get_rhyming_part(phones_b))


def _orthography_hint(word_a: str, word_b: str) -> float:
    tail_a = word_a.lower()[-SPELLING_TAIL:]
    tail_b = word_b.lower()[-SPELLING_TAIL:]
    if not tail_a or not tail_b:
        return 0.0
    return difflib.SequenceMatcher(None, tail_a, tail_b).ratio()


def _pair_strength(
    word_a: str,
    phones_a: Optional[Sequence[str]],
    word_b: str,
    phones_b: Optional[Sequence[str]],
) -> Tuple[RhymeType, float]:
    if not phones_a or not phones_b:
        return RhymeType.NONE, 0.0

    if word_a.lower() == word_b.lower():
        rhyme_type = RhymeType.PERFECT
    else:
        rhyme_type = _classify_parts(get_rhyming_part(phones_a), get_rhyming_part(phones_b))

    hint = _orthography_hint(word_a, word_b)
    last_a = base_phoneme(phones_a[-1])
    last_b = base_phoneme(phones_b[-1])

    if rhyme_type is RhymeType.NONE:
        # eye rhyme: spelled alike and ending on the same sound
        if hint >= EYE_RHYME_SPELLING and last_a == last_b:
            rhyme_type = RhymeType.SLANT
            strength = EYE_RHYME_STRENGTH
        else:
            return RhymeType.NONE, 0.0
    else:
        strength = RHYME_BASE_STRENGTH[rhyme_type]

    if last_a == last_b and is_consonant(last_a):
        strength += END_CONSONANT_BONUS
    strength += SPELLING_WEIGHT * hint
    return rhyme_type, strength


def rhyme_strength(
    word1: str,
    word2: str,
    lookup: Optional[PhoneticLookup] = None,
) -> Tuple[RhymeType, float]:
    """Rank how well two words rhyme.

    The strength starts from the rhyme type (perfect 1.0 down to consonance
    0.5), adds 0.1 when both words end on the same consonant and up to 0.2
    for similarly spelled endings. Words with no phonetic rhyme that still
    end alike in spelling and sound count as a weak slant (eye) rhyme.
    """

    return _pair_strength(word1, _phones(word1, lookup), word2, _phones(word2, lookup))


def is_perfect_rhyme(word1: str, word2: str, lookup: Optional[PhoneticLookup] = None) -> bool:
    return classify_rhyme(word1, word2, lookup) is RhymeType.PERFECT


def do_words_rhyme(word1: str, word2: str, lookup: Optional[PhoneticLookup] = None) -> bool:
    return classify_rhyme(word1, word2, lookup) is not RhymeType.NONE


def get_rhyme_quality_score(word1: str, word2: str, lookup: Optional[PhoneticLookup] = None) -> float:
    return RHYME_QUALITY[classify_rhyme(word1, word2, lookup)]


def find_rhyming_words(
    target: str,
    candidates: Sequence[str],
    min_type: RhymeType = RhymeType.SLANT,
    lookup: Optional[PhoneticLookup] = None,
) -> List[Tuple[str, RhymeType]]:
    """Candidates that rhyme with ``target`` at least as well as ``min_type``.

    Results are ordered best rhyme first; ``target`` itself is skipped.
    """

    limit = RHYME_HIERARCHY.index(min_type)
    found: List[Tuple[str, RhymeType]] = []
    for candidate in candidates:
        if candidate.lower() == target.lower():
            continue
        rhyme_type = classify_rhyme(target, candidate, lookup)
        if rhyme_type is not RhymeType.NONE and RHYME_HIERARCHY.index(rhyme_type) <= limit:
            found.append((candidate, rhyme_type))
    found.sort(key=lambda item: RHYME_HIERARCHY.index(item[1]))
    return found


# ---------------------------------------------------------------------------
# Line level
# ---------------------------------------------------------------------------


def get_last_word(line: str) -> str:
    """Last word of ``line``, lower-cased with punctuation removed."""

    if not line or not line.strip():
        return ""
    cleaned = _TRAILING_PUNCTUATION.sub("", line.strip()).strip()
    words = cleaned.split()
    if not words:
        return ""
    return _NON_WORD_CHARS.sub("", words[-1]).lower()


def tokenize_line(line: str) -> List[str]:
    return [match.group(0).lower() for match in _TOKEN_PATTERN.finditer(line or "")]


def scheme_letter(index: int) -> str:
    """Label of the ``index``-th rhyme group (``0 -> "A"``)."""

    if index < 26:
        return chr(ord("A") + index)
    index -= 26
    if index < 26:
        return chr(ord("a") + index)
    index -= 26
    if index < _LATIN_EXTENDED_SIZE:
        return chr(_LATIN_EXTENDED_START + index)
    return chr(_CJK_START + index - _LATIN_EXTENDED_SIZE)


def _group_lines(lines: Sequence[str], lookup: Optional[PhoneticLookup]) -> Tuple[str, List[str]]:
    end_words = [get_last_word(line) for line in lines]
    phones = {word: _phones(word, lookup) for word in set(end_words) if word}

    groups: List[List[str]] = []
    labels: List[str] = []
    letters: List[str] = []

    for word in end_words:
        best_index: Optional[int] = None
        best_strength = 0.0
        if word:
            for index, members in enumerate(groups):
                if not members:
                    continue
                strength = max(
                    _pair_strength(word, phones[word], member, phones[member])[1]
                    for member in members
                )
                if strength > best_strength:
                    best_index, best_strength = index, strength

        if best_index is None:
            letter = scheme_letter(len(letters))
            letters.append(letter)
            labels.append(letter)
            # lines without an end word never gather rhymes
            groups.append([word] if word else [])
        else:
            groups[best_index].append(word)
            labels.append(letters[best_index])

    return "".join(labels), end_words


def detect_rhyme_scheme(lines: Sequence[str], lookup: Optional[PhoneticLookup] = None) -> str:
    """Rhyme scheme letters for ``lines``, assigned by first occurrence.

    Each line joins the existing group its end word rhymes with most
    strongly (earlier groups win ties) or opens a new letter.
    """

    if not lines:
        return ""
    scheme, _ = _group_lines(lines, lookup)
    return scheme


def _internal_pairs(tokens: Sequence[str]):
    for first in range(len(tokens)):
        for second in range(first + 1, min(len(tokens), first + INTERNAL_RHYME_WINDOW + 1)):
            yield first, second


def _eligible(word_a: str, word_b: str) -> bool:
    return word_a != word_b and word_a not in FUNCTION_WORDS and word_b not in FUNCTION_WORDS


def find_internal_rhymes(
    line: str,
    line_number: int = 0,
    lookup: Optional[PhoneticLookup] = None,
) -> List[InternalRhyme]:
    """Rhyming word pairs inside ``line``, positions are word indices.

    Only words within ``INTERNAL_RHYME_WINDOW`` of each other are compared and
    function words are ignored.
    """

    tokens = tokenize_line(line)
    rhymes: List[InternalRhyme] = []
    for first, second in _internal_pairs(tokens):
        word_a, word_b = tokens[first], tokens[second]
        if not _eligible(word_a, word_b):
            continue
        if do_words_rhyme(word_a, word_b, lookup):
            rhymes.append(InternalRhyme(line=line_number, positions=(first, second), words=(word_a, word_b)))
    return rhymes


def calculate_rhyme_density(line: str, lookup: Optional[PhoneticLookup] = None) -> float:
    """Share of nearby word pairs in ``line`` that rhyme."""

    tokens = tokenize_line(line)
    total = 0
    rhyming = 0
    for first, second in _internal_pairs(tokens):
        total += 1
        if tokens[first] != tokens[second] and do_words_rhyme(tokens[first], tokens[second], lookup):
            rhyming += 1
    return rhyming / total if total else 0.0


def rhyme_consistency(scheme: str) -> float:
    """Fraction of lines whose letter is shared with at least one other line."""

    if not scheme:
        return 0.0
    counts = Counter(scheme)
    return sum(1 for letter in scheme if counts[letter] >= 2) / len(scheme)


def identify_rhyme_form(scheme: str) -> str:
    """Rough name for a rhyme scheme (``"ABAB"`` -> ``"alternate"``)."""

    if not scheme:
        return "none"
    if scheme in KNOWN_RHYME_FORMS:
        return KNOWN_RHYME_FORMS[scheme]

    if len(scheme) % 2 == 0 and all(scheme[i] == scheme[i + 1] for i in range(0, len(scheme), 2)):
        return "couplets"

    half = len(scheme) // 2
    if len(scheme) >= 4 and len(scheme) % 2 == 0 and scheme[:half] == scheme[half:]:
        return "repeating pattern"

    if len(scheme) >= 9 and len(scheme) % 3 == 0:
        if all(scheme[i - 2] == scheme[i] for i in range(3, len(scheme), 3)):
            return "terza rima"

    ratio = len(set(scheme)) / len(scheme)
    if ratio > 0.9:
        return "free verse (minimal rhyme)"
    if ratio > 0.7:
        return "loose rhyme"
    if ratio > 0.5:
        return "moderate rhyme"
    return "dense rhyme"


def analyze_rhymes(lines: Sequence[str], lookup: Optional[PhoneticLookup] = None) -> RhymeAnalysis:
    """Scheme, rhyme groups and internal rhymes for ``lines``."""

    if not lines:
        return RhymeAnalysis()

    scheme, end_words = _group_lines(lines, lookup)

    members: Dict[str, List[int]] = {}
    for index, letter in enumerate(scheme):
        members.setdefault(letter, []).append(index)

    groups: Dict[str, RhymeGroup] = {}
    for letter, indices in members.items():
        words = [end_words[index] for index in indices]
        rhyme_type = RhymeType.PERFECT
        if len(indices) >= 2:
            rhyme_type = classify_rhyme(words[0], words[1], lookup)
            if rhyme_type is RhymeType.NONE:
                rhyme_type = RhymeType.SLANT
        groups[letter] = RhymeGroup(lines=indices, rhyme_type=rhyme_type, end_words=words)

    internal: List[InternalRhyme] = []
    for index, line in enumerate(lines):
        internal.extend(find_internal_rhymes(line, index, lookup))

    _log.debug(
        "Rhyme analysis complete",
        context={"lines": len(lines), "scheme": scheme, "internal": len(internal)},
    )
    return RhymeAnalysis(scheme=scheme, rhyme_groups=groups, internal_rhymes=internal)


__all__ = [
    "INTERNAL_RHYME_WINDOW",
    "RHYME_BASE_STRENGTH",
    "analyze_rhymes",
    "calculate_phonetic_similarity",
    "calculate_rhyme_density",
    "classify_rhyme",
    "detect_rhyme_scheme",
    "do_words_rhyme",
    "find_internal_rhymes",
    "find_rhyming_words",
    "get_last_word",
    "get_rhyme_quality_score",
    "get_rhyming_part",
    "identify_rhyme_form",
    "is_perfect_rhyme",
    "rhyme_consistency",
    "rhyme_strength",
    "scheme_letter",
    "tokenize_line",
]
