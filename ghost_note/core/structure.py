"""Song structure: which stanzas are verses, choruses and bridges.

Stanzas are compared pairwise on their text and on their stress patterns.
Near-identical stanzas are grouped into a chorus, stanzas made mostly of
repeated lines become choruses on their own, and an outlier in the back half
of a longer poem is read as a bridge. Everything else is a verse.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, List, Optional, Sequence

from ghost_note.utils.observability import get_logger

from .meter import classify_foot, line_stress_pattern, string_similarity
from .models import (
    FootType,
    Refrain,
    Section,
    SectionType,
    SongStructure,
    StanzaSimilarity,
)
from .phonetics import PhoneticLookup
from .preprocess import tokenize_words

_log = get_logger(__name__).bind(component="structure")

CHORUS_SIMILARITY_THRESHOLD = 0.85
REFRAIN_SIMILARITY_THRESHOLD = 0.95
MIN_REFRAIN_OCCURRENCES = 2
MIN_REFRAIN_LENGTH = 3

EDIT_WEIGHT = 0.6
OVERLAP_WEIGHT = 0.4
TEXT_WEIGHT = 0.7
METER_WEIGHT = 0.3
LINE_COUNT_BASE = 0.7
FOOT_MATCH_BONUS = 0.1

REFRAIN_CHORUS_RATIO = 0.5
BRIDGE_MAX_SIMILARITY = 0.4
BRIDGE_MIN_STANZAS = 3
BRIDGE_POSITION = (0.4, 0.8)
DEFAULT_VERSE_CONFIDENCE = 0.5

_COMPARISON_PUNCTUATION = re.compile(r"[.,!?;:'\"—–\-()\[\]{}…]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text_for_comparison(text: str) -> str:
    """Lowercase ``text``, strip punctuation and collapse whitespace."""

    stripped = _COMPARISON_PUNCTUATION.sub("", (text or "").lower())
    return _WHITESPACE.sub(" ", stripped).strip()


def calculate_line_similarity(first: str, second: str) -> float:
    """Blend of edit similarity and word overlap; 0 when either line is empty."""

    first_norm = normalize_text_for_comparison(first)
    second_norm = normalize_text_for_comparison(second)
    if not first_norm or not second_norm:
        return 0.0
    if first_norm == second_norm:
        return 1.0

    first_words = set(tokenize_words(first_norm))
    second_words = set(tokenize_words(second_norm))
    union = first_words | second_words
    overlap = len(first_words & second_words) / len(union) if union else 0.0
    return EDIT_WEIGHT * string_similarity(first_norm, second_norm) + OVERLAP_WEIGHT * overlap


def calculate_stanza_text_similarity(first: Sequence[str], second: Sequence[str]) -> float:
    """Mean line similarity over paired lines, damped by unequal line counts."""

    if not first or not second:
        return 0.0
    shorter = min(len(first), len(second))
    ratio = shorter / max(len(first), len(second))
    average = sum(calculate_line_similarity(a, b) for a, b in zip(first, second)) / shorter
    return average * (LINE_COUNT_BASE + (1 - LINE_COUNT_BASE) * ratio)


def stanza_stress_patterns(stanza: Sequence[str], lookup: Optional[PhoneticLookup] = None) -> List[str]:
    return [line_stress_pattern(tokenize_words(line), lookup) for line in stanza]


def stanza_foot_type(patterns: Sequence[str]) -> FootType:
    """Most common known foot over the lines, or ``UNKNOWN``."""

    counts = Counter(classify_foot(pattern) for pattern in patterns)
    counts.pop(FootType.UNKNOWN, None)
    if not counts:
        return FootType.UNKNOWN
    return counts.most_common(1)[0][0]


def calculate_meter_similarity(first: Sequence[str], second: Sequence[str]) -> float:
    """Mean stress-pattern similarity over paired lines of two stanzas.

    ``first`` and ``second`` are the stanzas' per-line stress patterns.
    Sharing a known dominant foot adds a small bonus; the result is capped
    at 1.
    """

    if not first or not second:
        return 0.0
    shorter = min(len(first), len(second))
    average = sum(string_similarity(a, b) for a, b in zip(first, second)) / shorter
    foot = stanza_foot_type(first)
    bonus = FOOT_MATCH_BONUS if foot is not FootType.UNKNOWN and foot == stanza_foot_type(second) else 0.0
    return min(1.0, average + bonus)


def compare_stanzas(
    first: Sequence[str],
    second: Sequence[str],
    first_index: int,
    second_index: int,
    first_patterns: Optional[Sequence[str]] = None,
    second_patterns: Optional[Sequence[str]] = None,
    lookup: Optional[PhoneticLookup] = None,
) -> StanzaSimilarity:
    if first_patterns is None:
        first_patterns = stanza_stress_patterns(first, lookup)
    if second_patterns is None:
        second_patterns = stanza_stress_patterns(second, lookup)

    text_similarity = calculate_stanza_text_similarity(first, second)
    meter_similarity = calculate_meter_similarity(first_patterns, second_patterns)
    foot = stanza_foot_type(first_patterns)
    return StanzaSimilarity(
        stanza1=first_index,
        stanza2=second_index,
        overall_similarity=TEXT_WEIGHT * text_similarity + METER_WEIGHT * meter_similarity,
        text_similarity=text_similarity,
        meter_similarity=meter_similarity,
        line_count_match=len(first) == len(second),
        foot_type_match=foot is not FootType.UNKNOWN and foot == stanza_foot_type(second_patterns),
    )


def build_similarity_matrix(
    stanzas: Sequence[Sequence[str]],
    stress_patterns: Optional[Sequence[Sequence[str]]] = None,
    lookup: Optional[PhoneticLookup] = None,
) -> List[StanzaSimilarity]:
    """One comparison for every pair of stanzas, ``i < j``, in order."""

    if stress_patterns is None:
        stress_patterns = [stanza_stress_patterns(stanza, lookup) for stanza in stanzas]
    return [
        compare_stanzas(stanzas[i], stanzas[j], i, j, stress_patterns[i], stress_patterns[j])
        for i in range(len(stanzas))
        for j in range(i + 1, len(stanzas))
    ]


def detect_refrains(stanzas: Sequence[Sequence[str]]) -> List[Refrain]:
    """Lines repeated, exactly or nearly, across at least two stanzas."""

    exact: Dict[str, Refrain] = {}
    for stanza_index, stanza in enumerate(stanzas):
        for line_index, line in enumerate(stanza):
            normalized = normalize_text_for_comparison(line)
            if len(normalized) < MIN_REFRAIN_LENGTH:
                continue
            refrain = exact.setdefault(normalized, Refrain(text=line, normalized_text=normalized))
            refrain.occurrences.append((stanza_index, line_index))

    refrains = [
        refrain for refrain in exact.values()
        if len({index for index, _ in refrain.occurrences}) >= MIN_REFRAIN_OCCURRENCES
    ]
    known = {refrain.normalized_text for refrain in refrains}

    # Near matches: lines that differ only slightly from each other.
    processed = set()
    for stanza_index, stanza in enumerate(stanzas):
        for line_index, line in enumerate(stanza):
            normalized = normalize_text_for_comparison(line)
            if normalized in processed or len(normalized) < MIN_REFRAIN_LENGTH:
                continue
            processed.add(normalized)

            occurrences = [(stanza_index, line_index)]
            for other_stanza, other_lines in enumerate(stanzas):
                for other_line, other in enumerate(other_lines):
                    if (other_stanza, other_line) == (stanza_index, line_index):
                        continue
                    if normalize_text_for_comparison(other) == normalized:
                        continue
                    if calculate_line_similarity(line, other) >= REFRAIN_SIMILARITY_THRESHOLD:
                        occurrences.append((other_stanza, other_line))

            spread = len({index for index, _ in occurrences})
            if spread >= MIN_REFRAIN_OCCURRENCES and normalized not in known:
                refrains.append(Refrain(text=line, normalized_text=normalized, occurrences=occurrences))
                known.add(normalized)

    return refrains


def _chorus_groups(similarities: Sequence[StanzaSimilarity]) -> List[Section]:
    groups: List[Dict[str, object]] = []
    for item in similarities:
        if item.overall_similarity < CHORUS_SIMILARITY_THRESHOLD:
            continue
        pair = {item.stanza1, item.stanza2}
        for group in groups:
            if group["indices"] & pair:
                group["indices"] |= pair
                group["confidence"] = (group["confidence"] + item.overall_similarity) / 2
                break
        else:
            groups.append({"indices": pair, "confidence": item.overall_similarity})

    return [
        Section(
            type=SectionType.CHORUS,
            stanza_indices=sorted(group["indices"]),
            label="Chorus",
            confidence=group["confidence"],
        )
        for group in groups
    ]


def _refrain_lines(stanza_index: int, line_count: int, refrains: Sequence[Refrain]) -> int:
    positions = {item for refrain in refrains for item in refrain.occurrences}
    return sum(1 for line in range(line_count) if (stanza_index, line) in positions)


def _average_similarity(stanza_index: int, similarities: Sequence[StanzaSimilarity]) -> float:
    relevant = [
        item.overall_similarity for item in similarities
        if stanza_index in (item.stanza1, item.stanza2)
    ]
    if not relevant:
        return DEFAULT_VERSE_CONFIDENCE
    return sum(relevant) / len(relevant)


def classify_sections(
    stanzas: Sequence[Sequence[str]],
    similarities: Sequence[StanzaSimilarity],
    refrains: Sequence[Refrain],
) -> List[Section]:
    """Assign every stanza to exactly one section, ordered by first stanza.

    Chorus groups come first, then refrain-heavy stanzas, then bridges; the
    rest are verses numbered in order of appearance.
    """

    if not stanzas:
        return []

    sections = _chorus_groups(similarities)
    assigned = {index for section in sections for index in section.stanza_indices}

    for index, stanza in enumerate(stanzas):
        if index in assigned or len(stanza) < 2:
            continue
        ratio = _refrain_lines(index, len(stanza), refrains) / len(stanza)
        if ratio > REFRAIN_CHORUS_RATIO:
            sections.append(
                Section(type=SectionType.CHORUS, stanza_indices=[index], label="Chorus", confidence=ratio)
            )
            assigned.add(index)

    if len(stanzas) >= BRIDGE_MIN_STANZAS:
        low, high = BRIDGE_POSITION
        for index in range(len(stanzas)):
            if index in assigned:
                continue
            average = _average_similarity(index, similarities)
            position = index / len(stanzas)
            if average < BRIDGE_MAX_SIMILARITY and low < position < high:
                sections.append(
                    Section(
                        type=SectionType.BRIDGE,
                        stanza_indices=[index],
                        label="Bridge",
                        confidence=1 - average,
                    )
                )
                assigned.add(index)

    remaining = [index for index in range(len(stanzas)) if index not in assigned]
    for index in remaining:
        closest = max(
            (
                item.overall_similarity for item in similarities
                if index in (item.stanza1, item.stanza2)
                and item.stanza1 not in assigned
                and item.stanza2 not in assigned
            ),
            default=0.0,
        )
        sections.append(
            Section(
                type=SectionType.VERSE,
                stanza_indices=[index],
                confidence=closest if closest > 0 else DEFAULT_VERSE_CONFIDENCE,
            )
        )

    sections.sort(key=lambda section: section.stanza_indices[0])
    verse_number = 0
    for section in sections:
        if section.type is SectionType.VERSE:
            verse_number += 1
            section.label = f"Verse {verse_number}"
    return sections


def generate_structure_pattern(sections: Sequence[Section], stanza_count: int) -> str:
    """One letter per stanza; every chorus shares a letter, other stanzas get their own.

    A stanza outside every section is marked ``?``.
    """

    if stanza_count == 0 or not sections:
        return ""

    section_of = {index: section for section in sections for index in section.stanza_indices}
    chorus_letter: Optional[str] = None
    next_letter = ord("A")
    pattern = []
    for index in range(stanza_count):
        section = section_of.get(index)
        if section is None:
            pattern.append("?")
            continue
        if section.type is SectionType.CHORUS and chorus_letter is not None:
            pattern.append(chorus_letter)
            continue
        letter = chr(next_letter)
        next_letter += 1
        if section.type is SectionType.CHORUS:
            chorus_letter = letter
        pattern.append(letter)
    return "".join(pattern)


def _plural(count: int, noun: str, suffix: str = "s") -> str:
    return f"{count} {noun}{suffix if count > 1 else ''}"


def _summary(sections: Sequence[Section], refrains: Sequence[Refrain], verse_chorus: bool) -> str:
    counts = Counter(section.type for section in sections)
    parts = []
    if verse_chorus:
        parts.append("Verse/chorus structure detected")
    elif counts[SectionType.VERSE]:
        parts.append("Verse-based structure")
    if counts[SectionType.VERSE]:
        parts.append(_plural(counts[SectionType.VERSE], "verse"))
    if counts[SectionType.CHORUS]:
        parts.append(_plural(counts[SectionType.CHORUS], "chorus section"))
    if counts[SectionType.BRIDGE]:
        parts.append(f"{counts[SectionType.BRIDGE]} bridge")
    if refrains:
        parts.append(_plural(len(refrains), "refrain line"))
    return ", ".join(parts) or "No clear structure detected"


def analyze_structure(
    stanzas: Sequence[Sequence[str]],
    stress_patterns: Optional[Sequence[Sequence[str]]] = None,
    lookup: Optional[PhoneticLookup] = None,
) -> SongStructure:
    """Sections, refrains and stanza similarities of a poem.

    ``stanzas`` holds each stanza's line texts. ``stress_patterns`` mirrors
    it with each line's binary stress pattern; when omitted the patterns are
    derived through ``lookup``.
    """

    if not stanzas:
        return SongStructure()
    if len(stanzas) == 1:
        return SongStructure(
            sections=[Section(type=SectionType.VERSE, stanza_indices=[0], label="Verse 1", confidence=1.0)],
            structure_pattern="A",
            summary="Single stanza poem",
        )

    similarities = build_similarity_matrix(stanzas, stress_patterns, lookup)
    refrains = detect_refrains(stanzas)
    sections = classify_sections(stanzas, similarities, refrains)
    types = {section.type for section in sections}
    verse_chorus = SectionType.CHORUS in types and SectionType.VERSE in types

    structure = SongStructure(
        sections=sections,
        refrains=refrains,
        similarities=similarities,
        has_verse_chorus_structure=verse_chorus,
        structure_pattern=generate_structure_pattern(sections, len(stanzas)),
        summary=_summary(sections, refrains, verse_chorus),
    )
    _log.debug(
        "Song structure analysed",
        context={
            "stanzas": len(stanzas),
            "pattern": structure.structure_pattern,
            "refrains": len(refrains),
        },
    )
    return structure


def find_section(structure: SongStructure, stanza_index: int) -> Optional[Section]:
    for section in structure.sections:
        if stanza_index in section.stanza_indices:
            return section
    return None


def get_section_for_stanza(structure: SongStructure, stanza_index: int) -> SectionType:
    """Section type of a stanza; stanzas outside every section count as verses."""

    section = find_section(structure, stanza_index)
    return section.type if section is not None else SectionType.VERSE


def is_repeat_section(structure: SongStructure, stanza_index: int) -> bool:
    """True for every stanza of a section except its first."""

    section = find_section(structure, stanza_index)
    return section is not None and section.stanza_indices[0] != stanza_index


def is_section_transition(structure: SongStructure, stanza_index: int) -> bool:
    """True when the next stanza starts a different section."""

    current = find_section(structure, stanza_index)
    following = find_section(structure, stanza_index + 1)
    if current is None or following is None:
        return False
    return current is not following


__all__ = [
    "CHORUS_SIMILARITY_THRESHOLD",
    "REFRAIN_SIMILARITY_THRESHOLD",
    "analyze_structure",
    "build_similarity_matrix",
    "calculate_line_similarity",
    "calculate_meter_similarity",
    "calculate_stanza_text_similarity",
    "classify_sections",
    "compare_stanzas",
    "detect_refrains",
    "find_section",
    "generate_structure_pattern",
    "get_section_for_stanza",
    "is_repeat_section",
    "is_section_transition",
    "normalize_text_for_comparison",
    "stanza_foot_type",
    "stanza_stress_patterns",
]
