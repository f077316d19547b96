"""Stress patterns and metrical classification."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from ghost_note.utils.observability import get_logger

from .models import FootType, SyllabifiedWord
from .phonetics import PhoneticLookup, normalize_word
from .syllabifier import build_word

_log = get_logger(__name__).bind(component="meter")

FOOT_PATTERNS: Dict[FootType, str] = {
    FootType.IAMB: "01",
    FootType.TROCHEE: "10",
    FootType.ANAPEST: "001",
    FootType.DACTYL: "100",
    FootType.SPONDEE: "11",
}
CANDIDATE_FEET = tuple(FOOT_PATTERNS)

FOOT_ADJECTIVES: Dict[FootType, str] = {
    FootType.IAMB: "iambic",
    FootType.TROCHEE: "trochaic",
    FootType.ANAPEST: "anapestic",
    FootType.DACTYL: "dactylic",
    FootType.SPONDEE: "spondaic",
    FootType.UNKNOWN: "irregular",
}

LINE_LENGTH_NAMES: Dict[int, str] = {
    1: "monometer",
    2: "dimeter",
    3: "trimeter",
    4: "tetrameter",
    5: "pentameter",
    6: "hexameter",
    7: "heptameter",
    8: "octameter",
}

IRREGULAR = "irregular"
FOOT_MATCH_THRESHOLD = 0.7
METER_MATCH_FLOOR = 0.3
MAX_FEET = 8
SHORT_PATTERN_LENGTH = 4
SHORT_PATTERN_DAMPING = 0.7
DOMINANT_FOOT_SHARE = 0.4
REGULAR_DEVIATION_RATE = 0.1

# The dictionary stresses every monosyllable; in verse these usually fall.
FUNCTION_WORDS = frozenset(
    {
        "a", "an", "the",
        "at", "by", "for", "from", "in", "of", "on", "to", "up", "with",
        "and", "as", "but", "if", "nor", "or", "so", "yet",
        "he", "her", "him", "his", "i", "it", "its", "me", "my", "she",
        "that", "them", "they", "us", "we", "who", "you", "your",
        "am", "are", "be", "been", "can", "could", "did", "do", "does",
        "had", "has", "have", "is", "may", "might", "must", "shall",
        "should", "was", "were", "will", "would",
        "all", "each", "no", "not", "some", "than", "this", "too",
    }
)


@dataclass
class MeterMatch:
    meter: str
    score: float
    pattern: str
    foot_type: FootType
    feet_count: int


@dataclass
class LineMeter:
    """Meter of one line, or the dominant meter of several."""

    foot_type: FootType = FootType.UNKNOWN
    feet_per_line: int = 0
    pattern: str = ""
    regularity: float = 0.0
    confidence: float = 0.0
    meter_name: str = IRREGULAR
    deviations: List[int] = field(default_factory=list)


def to_binary_stress(pattern: str) -> str:
    """Fold secondary stress into primary and drop anything else."""

    digits = (char for char in (pattern or "") if char in "012")
    return "".join("0" if char == "0" else "1" for char in digits)


def foot_match_score(pattern: str, foot_type: FootType) -> float:
    """Share of positions agreeing with ``foot_type`` repeated over ``pattern``."""

    foot = FOOT_PATTERNS.get(foot_type, "")
    binary = to_binary_stress(pattern)
    if not binary or not foot:
        return 0.0
    hits = sum(1 for index, char in enumerate(binary) if char == foot[index % len(foot)])
    return hits / len(binary)


def classify_foot(pattern: str) -> FootType:
    binary = to_binary_stress(pattern)
    if len(binary) < 2:
        return FootType.UNKNOWN
    if len(binary) == 2:
        for foot_type, foot in FOOT_PATTERNS.items():
            if binary == foot:
                return foot_type
        return FootType.UNKNOWN

    best_foot = FootType.UNKNOWN
    best_score = 0.0
    for foot_type in CANDIDATE_FEET:
        score = foot_match_score(binary, foot_type)
        if score > best_score:
            best_foot, best_score = foot_type, score
    return best_foot if best_score >= FOOT_MATCH_THRESHOLD else FootType.UNKNOWN


def _ideal_pattern(foot: str, length: int) -> str:
    if not foot or length <= 0:
        return ""
    return (foot * (length // len(foot) + 1))[:length]


def detect_deviations(pattern: str, foot_type: FootType) -> List[int]:
    """Positions where ``pattern`` breaks the repeated ``foot_type``."""

    binary = to_binary_stress(pattern)
    ideal = _ideal_pattern(FOOT_PATTERNS.get(foot_type, ""), len(binary))
    if not ideal:
        return []
    return [index for index, (actual, expected) in enumerate(zip(binary, ideal)) if actual != expected]


def count_feet(pattern: str, foot_type: FootType) -> int:
    foot = FOOT_PATTERNS.get(foot_type, "")
    return math.ceil(len(pattern or "") / (len(foot) or 2))


def get_meter_name(foot_type: FootType, feet: int) -> str:
    """``"iambic_pentameter"`` style names; ``"irregular"`` for unknown feet."""

    if foot_type == FootType.UNKNOWN:
        return IRREGULAR
    length = LINE_LENGTH_NAMES.get(feet, f"{feet}-foot")
    return f"{FOOT_ADJECTIVES[foot_type]}_{length}"


def parse_meter_name(name: str) -> Optional[Dict[str, object]]:
    """Split a meter name back into foot type and feet, or ``None``."""

    lowered = (name or "").lower()
    foot_type = next(
        (foot for foot, adjective in FOOT_ADJECTIVES.items() if foot != FootType.UNKNOWN and adjective in lowered),
        FootType.UNKNOWN,
    )
    if foot_type == FootType.UNKNOWN and IRREGULAR not in lowered:
        return None
    feet = next((count for count, label in LINE_LENGTH_NAMES.items() if label in lowered), 0)
    return {"foot_type": foot_type, "feet": feet}


def create_meter_pattern(foot_type: FootType, feet: int) -> str:
    return FOOT_PATTERNS.get(foot_type, FOOT_PATTERNS[FootType.IAMB]) * max(0, feet)


def levenshtein_distance(first: str, second: str) -> int:
    if first == second:
        return 0
    if not first:
        return len(second)
    if not second:
        return len(first)

    previous = list(range(len(second) + 1))
    for row, char_a in enumerate(first, start=1):
        current = [row]
        for column, char_b in enumerate(second, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[column] + 1, current[column - 1] + 1, previous[column - 1] + cost))
        previous = current
    return previous[-1]


def string_similarity(first: str, second: str) -> float:
    """``1 - distance / longer length``; identical strings score 1."""

    if first == second:
        return 1.0
    if not first or not second:
        return 0.0
    return 1.0 - levenshtein_distance(first, second) / max(len(first), len(second))


def calculate_regularity(pattern: str, foot_type: FootType) -> float:
    binary = to_binary_stress(pattern)
    ideal = _ideal_pattern(FOOT_PATTERNS.get(foot_type, ""), len(binary))
    if not ideal:
        return 0.0
    return string_similarity(binary, ideal)


def find_best_meter_match(pattern: str) -> List[MeterMatch]:
    """Candidate meters for ``pattern``, best first, one entry per meter name."""

    binary = to_binary_stress(pattern)
    if not binary:
        return []

    matches: List[MeterMatch] = []
    for foot_type in CANDIDATE_FEET:
        foot = FOOT_PATTERNS[foot_type]
        for feet in sorted({len(binary) // len(foot), math.ceil(len(binary) / len(foot))}):
            if not 1 <= feet <= MAX_FEET:
                continue
            ideal = foot * feet
            score = string_similarity(binary, ideal)
            if score > METER_MATCH_FLOOR:
                matches.append(
                    MeterMatch(
                        meter=get_meter_name(foot_type, feet),
                        score=score,
                        pattern=ideal,
                        foot_type=foot_type,
                        feet_count=feet,
                    )
                )

    matches.sort(key=lambda match: match.score, reverse=True)
    unique: List[MeterMatch] = []
    seen = set()
    for match in matches:
        if match.meter in seen:
            continue
        seen.add(match.meter)
        unique.append(match)
    return unique


def detect_meter(pattern: str) -> LineMeter:
    binary = to_binary_stress(pattern)
    if not binary:
        return LineMeter()

    matches = find_best_meter_match(binary)
    if not matches:
        return LineMeter(feet_per_line=math.ceil(len(binary) / 2), pattern=binary)

    best = matches[0]
    confidence = best.score
    if len(matches) > 1:
        confidence = min(1.0, confidence + 0.5 * (best.score - matches[1].score))
    if len(binary) < SHORT_PATTERN_LENGTH:
        confidence *= SHORT_PATTERN_DAMPING

    return LineMeter(
        foot_type=best.foot_type,
        feet_per_line=best.feet_count,
        pattern=binary,
        regularity=calculate_regularity(binary, best.foot_type),
        confidence=max(0.0, min(1.0, confidence)),
        meter_name=best.meter,
        deviations=detect_deviations(binary, best.foot_type),
    )


def analyze_multi_line_meter(patterns: Sequence[str]) -> LineMeter:
    """Dominant meter across lines, weighted by how consistently it recurs."""

    if not patterns:
        return LineMeter()

    analyses = [detect_meter(pattern) for pattern in patterns]
    counts: Dict[str, int] = {}
    first_seen: Dict[str, LineMeter] = {}
    for analysis in analyses:
        counts[analysis.meter_name] = counts.get(analysis.meter_name, 0) + 1
        first_seen.setdefault(analysis.meter_name, analysis)

    dominant_name = max(counts, key=lambda name: counts[name])
    dominant = first_seen[dominant_name]
    consistency = counts[dominant_name] / len(patterns)
    matching = [analysis.regularity for analysis in analyses if analysis.meter_name == dominant_name]
    mean_regularity = sum(matching) / len(matching) if matching else 0.0

    _log.debug(
        "Dominant meter",
        context={"meter": dominant_name, "lines": counts[dominant_name], "total": len(patterns)},
    )
    return LineMeter(
        foot_type=dominant.foot_type,
        feet_per_line=dominant.feet_per_line,
        pattern=dominant.pattern,
        regularity=0.5 * consistency + 0.5 * mean_regularity,
        confidence=dominant.confidence * consistency,
        meter_name=dominant.meter_name,
        deviations=list(dominant.deviations),
    )


def get_dominant_foot(feet: Sequence[FootType]) -> FootType:
    """Most common known foot, if it covers at least 40% of lines."""

    if not feet:
        return FootType.UNKNOWN
    counts: Dict[FootType, int] = {}
    for foot in feet:
        if foot != FootType.UNKNOWN:
            counts[foot] = counts.get(foot, 0) + 1
    if not counts:
        return FootType.UNKNOWN
    dominant = max(counts, key=lambda foot: counts[foot])
    return dominant if counts[dominant] >= len(feet) * DOMINANT_FOOT_SHARE else FootType.UNKNOWN


def is_regular_pattern(pattern: str) -> bool:
    binary = to_binary_stress(pattern)
    if len(binary) < 2:
        return True
    foot_type = classify_foot(binary)
    if foot_type == FootType.UNKNOWN:
        return False
    return len(detect_deviations(binary, foot_type)) / len(binary) <= REGULAR_DEVIATION_RATE


def metrical_word_stress(word: SyllabifiedWord) -> str:
    """Binary stress of ``word`` as it usually falls in a line of verse."""

    pattern = "".join("1" if syllable.stress else "0" for syllable in word.syllables)
    if len(pattern) == 1 and normalize_word(word.text) in FUNCTION_WORDS:
        return "0"
    return pattern


def line_stress_pattern(
    words: Sequence[Union[str, SyllabifiedWord]],
    lookup: Optional[PhoneticLookup] = None,
) -> str:
    """Binary stress pattern of a line of words or syllabified words."""

    pattern = []
    for word in words:
        syllabified = word if isinstance(word, SyllabifiedWord) else build_word(word, lookup)
        pattern.append(metrical_word_stress(syllabified))
    return "".join(pattern)


__all__ = [
    "FOOT_ADJECTIVES",
    "FOOT_PATTERNS",
    "FUNCTION_WORDS",
    "LINE_LENGTH_NAMES",
    "LineMeter",
    "MeterMatch",
    "analyze_multi_line_meter",
    "calculate_regularity",
    "classify_foot",
    "count_feet",
    "create_meter_pattern",
    "detect_deviations",
    "detect_meter",
    "find_best_meter_match",
    "foot_match_score",
    "get_dominant_foot",
    "get_meter_name",
    "is_regular_pattern",
    "levenshtein_distance",
    "line_stress_pattern",
    "metrical_word_stress",
    "parse_meter_name",
    "string_similarity",
    "to_binary_stress",
]
