"""Phrase boundaries, breath points and enjambment within lines of verse.

Boundaries fall after a word. Punctuation gives the strongest evidence,
a conjunction or relative pronoun opens a new phrase before itself, and
prepositions offer weak breaks once a phrase has some weight. Overlong
phrases are split, and every line ends on a boundary.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ghost_note.utils.observability import get_logger
from ghost_note.utils.syllables import estimate_syllable_count

from .preprocess import tokenize_words

_log = get_logger(__name__).bind(component="phrases")


class PhraseBoundaryType(str, Enum):
    PUNCTUATION = "punctuation"
    CONJUNCTION = "conjunction"
    LINE_BREAK = "line_break"
    SEMANTIC = "semantic"
    LENGTH_SPLIT = "length_split"


class BoundaryStrength(str, Enum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


STRENGTH_RANK: Dict[BoundaryStrength, int] = {
    BoundaryStrength.WEAK: 0,
    BoundaryStrength.MEDIUM: 1,
    BoundaryStrength.STRONG: 2,
}

ELLIPSIS = "..."
BOUNDARY_PUNCTUATION: Dict[str, BoundaryStrength] = {
    ".": BoundaryStrength.STRONG,
    "!": BoundaryStrength.STRONG,
    "?": BoundaryStrength.STRONG,
    ";": BoundaryStrength.STRONG,
    ELLIPSIS: BoundaryStrength.STRONG,
    "…": BoundaryStrength.STRONG,
    ":": BoundaryStrength.MEDIUM,
    "—": BoundaryStrength.MEDIUM,
    "–": BoundaryStrength.MEDIUM,
    ",": BoundaryStrength.WEAK,
    "-": BoundaryStrength.WEAK,
}
PUNCTUATION_BREATHABILITY: Dict[BoundaryStrength, float] = {
    BoundaryStrength.STRONG: 1.0,
    BoundaryStrength.MEDIUM: 0.7,
    BoundaryStrength.WEAK: 0.4,
}

COORDINATING_CONJUNCTIONS = frozenset({"and", "but", "or", "nor", "for", "yet", "so"})
SUBORDINATING_CONJUNCTIONS = frozenset(
    {
        "although", "because", "before", "after", "while", "when", "where", "if",
        "unless", "until", "though", "since", "as", "whereas", "whenever",
        "wherever", "whether", "once",
    }
)
PREPOSITIONS = frozenset(
    {
        "in", "on", "at", "by", "to", "for", "with", "from", "of", "into", "onto",
        "upon", "within", "without", "through", "throughout", "across", "along",
        "among", "between", "beside", "besides", "before", "after", "above",
        "below", "beneath", "under", "over", "during", "toward", "towards",
        "against", "about",
    }
)
RELATIVE_PRONOUNS = frozenset({"who", "whom", "whose", "which", "that", "where", "when"})
DETERMINERS = frozenset({"a", "an", "the", "my", "your", "his", "her", "its", "our", "their"})

COORDINATING_BREATHABILITY = 0.6
SUBORDINATING_BREATHABILITY = 0.65
PREPOSITION_BREATHABILITY = 0.35
RELATIVE_BREATHABILITY = 0.4
LENGTH_SPLIT_BREATHABILITY = 0.3
LINE_BREAK_BREATHABILITY = 0.9
MIN_BREATHABILITY = 0.3

TARGET_PHRASE_SYLLABLES = 8
MAX_PHRASE_SYLLABLES = 12
MIN_PHRASE_SYLLABLES = 3
MIN_WORDS_AFTER_SPLIT = 2
MIN_BREAK_SPACING = 2

_CLOSED_LINE = re.compile(r"[.!?;:]$")
_LOWERCASE_START = re.compile(r"^[a-z]")


@dataclass
class PhraseBoundary:
    """A break after the word at ``position``."""

    position: int
    type: PhraseBoundaryType
    strength: BoundaryStrength
    trigger: str
    breathability: float


@dataclass
class Phrase:
    text: str
    words: List[str]
    start_word_index: int
    end_word_index: int
    syllable_count: int
    ends_at_line_break: bool = False


@dataclass
class LinePhrasing:
    text: str
    line_index: int
    boundaries: List[PhraseBoundary] = field(default_factory=list)
    phrases: List[Phrase] = field(default_factory=list)
    combine_with_next: bool = False


@dataclass(frozen=True)
class BreathPoint:
    line_index: int
    word_index: int
    strength: BoundaryStrength


@dataclass
class PoemPhrasing:
    lines: List[LinePhrasing] = field(default_factory=list)
    major_break_lines: List[int] = field(default_factory=list)
    average_phrase_length: float = 0.0
    breath_points: List[BreathPoint] = field(default_factory=list)


def _syllables(words: Sequence[str]) -> int:
    return sum(estimate_syllable_count(word) for word in words)


def _strongest_mark(tail: str) -> Optional[str]:
    marks = [ELLIPSIS] if ELLIPSIS in tail else []
    marks.extend(char for char in tail if char in BOUNDARY_PUNCTUATION)
    if not marks:
        return None
    return max(marks, key=lambda mark: STRENGTH_RANK[BOUNDARY_PUNCTUATION[mark]])


def _words_and_marks(line: str) -> Tuple[List[str], Dict[int, str]]:
    """Words of ``line`` and the strongest punctuation following each one.

    Punctuation standing alone, such as a spaced dash, belongs to the word
    before it.
    """

    words: List[str] = []
    marks: Dict[int, str] = {}
    for chunk in (line or "").split():
        chunk_words = tokenize_words(chunk)
        if chunk_words:
            words.extend(chunk_words)
            last = chunk_words[-1]
            tail = chunk[chunk.rfind(last) + len(last):]
        else:
            tail = chunk
        if not words:
            continue
        mark = _strongest_mark(tail)
        if mark is None:
            continue
        index = len(words) - 1
        current = marks.get(index)
        if current is None or STRENGTH_RANK[BOUNDARY_PUNCTUATION[mark]] > STRENGTH_RANK[BOUNDARY_PUNCTUATION[current]]:
            marks[index] = mark
    return words, marks


def _punctuation_boundaries(marks: Dict[int, str]) -> List[PhraseBoundary]:
    boundaries = []
    for position, mark in sorted(marks.items()):
        strength = BOUNDARY_PUNCTUATION[mark]
        boundaries.append(
            PhraseBoundary(
                position=position,
                type=PhraseBoundaryType.PUNCTUATION,
                strength=strength,
                trigger=mark,
                breathability=PUNCTUATION_BREATHABILITY[strength],
            )
        )
    return boundaries


def _word_boundaries(words: Sequence[str]) -> List[PhraseBoundary]:
    """Breaks before conjunctions, relative pronouns and prepositions."""

    boundaries = []
    for index, word in enumerate(words):
        if index == 0:
            continue
        lowered = word.lower()
        if lowered in COORDINATING_CONJUNCTIONS:
            boundaries.append(
                PhraseBoundary(
                    index - 1, PhraseBoundaryType.CONJUNCTION, BoundaryStrength.MEDIUM,
                    word, COORDINATING_BREATHABILITY,
                )
            )
        if lowered in SUBORDINATING_CONJUNCTIONS:
            boundaries.append(
                PhraseBoundary(
                    index - 1, PhraseBoundaryType.CONJUNCTION, BoundaryStrength.MEDIUM,
                    word, SUBORDINATING_BREATHABILITY,
                )
            )
        if lowered in PREPOSITIONS and index > 1 and _syllables(words[:index]) >= MIN_PHRASE_SYLLABLES:
            boundaries.append(
                PhraseBoundary(
                    index - 1, PhraseBoundaryType.SEMANTIC, BoundaryStrength.WEAK,
                    word, PREPOSITION_BREATHABILITY,
                )
            )
        if lowered in RELATIVE_PRONOUNS:
            boundaries.append(
                PhraseBoundary(
                    index - 1, PhraseBoundaryType.SEMANTIC, BoundaryStrength.WEAK,
                    word, RELATIVE_BREATHABILITY,
                )
            )
    return boundaries


def _strongest_per_position(boundaries: Sequence[PhraseBoundary]) -> List[PhraseBoundary]:
    """First boundary at each position unless a later one is strictly stronger."""

    chosen: Dict[int, PhraseBoundary] = {}
    for boundary in boundaries:
        existing = chosen.get(boundary.position)
        if existing is None or STRENGTH_RANK[boundary.strength] > STRENGTH_RANK[existing.strength]:
            chosen[boundary.position] = boundary
    return list(chosen.values())


def _length_splits(words: Sequence[str], boundaries: Sequence[PhraseBoundary]) -> List[PhraseBoundary]:
    taken = {boundary.position for boundary in boundaries}
    edges = [-1] + sorted(taken) + [len(words) - 1]
    splits = []
    for start_edge, end in zip(edges, edges[1:]):
        start = start_edge + 1
        if _syllables(words[start:end + 1]) <= MAX_PHRASE_SYLLABLES:
            continue
        running = 0
        for index in range(start, end):
            running += estimate_syllable_count(words[index])
            if running >= TARGET_PHRASE_SYLLABLES and index not in taken and end - index >= MIN_WORDS_AFTER_SPLIT:
                splits.append(
                    PhraseBoundary(
                        index,
                        PhraseBoundaryType.LENGTH_SPLIT,
                        BoundaryStrength.WEAK,
                        f"[length>{TARGET_PHRASE_SYLLABLES}]",
                        LENGTH_SPLIT_BREATHABILITY,
                    )
                )
                taken.add(index)
                running = 0
    return splits


def _phrases(words: Sequence[str], boundaries: Sequence[PhraseBoundary]) -> List[Phrase]:
    phrases = []
    start = 0
    for boundary in boundaries:
        end = boundary.position
        if end < start:
            continue
        chunk = list(words[start:end + 1])
        phrases.append(
            Phrase(
                text=" ".join(chunk),
                words=chunk,
                start_word_index=start,
                end_word_index=end,
                syllable_count=_syllables(chunk),
                ends_at_line_break=boundary.type is PhraseBoundaryType.LINE_BREAK,
            )
        )
        start = end + 1
    return phrases


def detect_enjambment(line: str, next_line: Optional[str] = None) -> bool:
    """True when ``line`` runs on into ``next_line`` without a pause.

    A line closed by ``.!?;:`` never runs on. Otherwise it does when the
    next line starts in lowercase, or when the line ends on a preposition,
    a coordinating conjunction or a determiner.
    """

    if not line or not next_line:
        return False
    if _CLOSED_LINE.search(line.strip()):
        return False
    if _LOWERCASE_START.search(next_line.strip()):
        return True
    words = tokenize_words(line)
    if not words:
        return False
    last = words[-1].lower()
    return last in PREPOSITIONS or last in COORDINATING_CONJUNCTIONS or last in DETERMINERS


def analyze_line_phrases(line: str, line_index: int = 0, next_line: Optional[str] = None) -> LinePhrasing:
    words, marks = _words_and_marks(line)
    if not words:
        return LinePhrasing(text=line or "", line_index=line_index)

    boundaries = _strongest_per_position(_punctuation_boundaries(marks) + _word_boundaries(words))
    boundaries.extend(_length_splits(words, boundaries))
    boundaries.sort(key=lambda boundary: boundary.position)

    last = len(words) - 1
    if not any(boundary.position == last for boundary in boundaries):
        boundaries.append(
            PhraseBoundary(
                last,
                PhraseBoundaryType.LINE_BREAK,
                BoundaryStrength.STRONG,
                "[line end]",
                LINE_BREAK_BREATHABILITY,
            )
        )

    return LinePhrasing(
        text=line,
        line_index=line_index,
        boundaries=boundaries,
        phrases=_phrases(words, boundaries),
        combine_with_next=detect_enjambment(line, next_line),
    )


def _ends_strongly(phrasing: LinePhrasing) -> bool:
    if not phrasing.phrases:
        return False
    last = phrasing.phrases[-1].end_word_index
    return any(
        boundary.position == last and boundary.strength is BoundaryStrength.STRONG
        for boundary in phrasing.boundaries
    )


def analyze_poem_phrases(stanzas: Sequence[Sequence[str]]) -> PoemPhrasing:
    """Phrase every line, numbering lines across the whole poem.

    Enjambment is only considered within a stanza. A major break is a line
    that does not run on and whose last boundary is strong.
    """

    lines: List[LinePhrasing] = []
    for stanza in stanzas:
        for offset, text in enumerate(stanza):
            following = stanza[offset + 1] if offset + 1 < len(stanza) else None
            lines.append(analyze_line_phrases(text, len(lines), following))

    phrases = [phrase for line in lines for phrase in line.phrases]
    result = PoemPhrasing(
        lines=lines,
        major_break_lines=[
            line.line_index for line in lines if not line.combine_with_next and _ends_strongly(line)
        ],
        average_phrase_length=(
            sum(phrase.syllable_count for phrase in phrases) / len(phrases) if phrases else 0.0
        ),
        breath_points=[
            BreathPoint(line.line_index, boundary.position, boundary.strength)
            for line in lines
            for boundary in line.boundaries
            if boundary.breathability >= MIN_BREATHABILITY
        ],
    )
    _log.debug(
        "Phrasing analysed",
        context={
            "lines": len(lines),
            "major_breaks": len(result.major_break_lines),
            "breath_points": len(result.breath_points),
        },
    )
    return result


def get_best_breath_points(phrasing: LinePhrasing, max_points: int = 3) -> List[PhraseBoundary]:
    return sorted(phrasing.boundaries, key=lambda boundary: -boundary.breathability)[:max_points]


def combine_short_phrases(phrases: Sequence[Phrase]) -> List[Phrase]:
    """Fold a short phrase into the phrases after it while they fit the target length.

    Only a phrase under the minimum length that does not end the line
    starts a merge.
    """

    if len(phrases) <= 1:
        return list(phrases)

    combined: List[Phrase] = []
    pending: Optional[Phrase] = None
    for phrase in phrases:
        if pending is None:
            if phrase.syllable_count < MIN_PHRASE_SYLLABLES and not phrase.ends_at_line_break:
                pending = phrase
            else:
                combined.append(phrase)
        elif pending.syllable_count + phrase.syllable_count <= TARGET_PHRASE_SYLLABLES:
            pending = Phrase(
                text=f"{pending.text} {phrase.text}",
                words=pending.words + phrase.words,
                start_word_index=pending.start_word_index,
                end_word_index=phrase.end_word_index,
                syllable_count=pending.syllable_count + phrase.syllable_count,
                ends_at_line_break=phrase.ends_at_line_break,
            )
        else:
            combined.append(pending)
            pending = phrase
    if pending is not None:
        combined.append(pending)
    return combined


def get_phrase_boundary_positions(text: str) -> List[int]:
    return [boundary.position for boundary in analyze_line_phrases(text).boundaries]


def is_natural_boundary(text: str, word_index: int) -> bool:
    """True when a phrase may end after word ``word_index`` of ``text``."""

    return word_index in get_phrase_boundary_positions(text)


def get_breathability_at_position(phrasing: LinePhrasing, word_index: int) -> float:
    for boundary in phrasing.boundaries:
        if boundary.position == word_index:
            return boundary.breathability
    return 0.0


def suggest_melody_phrase_breaks(phrasing: PoemPhrasing) -> List[int]:
    """Major break lines, thinned so that breaks are at least two lines apart."""

    breaks: List[int] = []
    for line_index in phrasing.major_break_lines:
        if not breaks or line_index - breaks[-1] >= MIN_BREAK_SPACING:
            breaks.append(line_index)
    return breaks


__all__ = [
    "BOUNDARY_PUNCTUATION",
    "BoundaryStrength",
    "BreathPoint",
    "LinePhrasing",
    "Phrase",
    "PhraseBoundary",
    "PhraseBoundaryType",
    "PoemPhrasing",
    "analyze_line_phrases",
    "analyze_poem_phrases",
    "combine_short_phrases",
    "detect_enjambment",
    "get_best_breath_points",
    "get_breathability_at_position",
    "get_phrase_boundary_positions",
    "is_natural_boundary",
    "suggest_melody_phrase_breaks",
]
