"""Alliteration, assonance and consonance inside lines."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ghost_note.utils.observability import get_logger

from .models import (
    LineSoundPatterns,
    SoundPatternAnalysis,
    SoundPatternOccurrence,
    SoundPatternSummary,
    SoundPatternType,
)
from .phonetics import PhoneticLookup, base_phoneme, is_consonant, is_vowel, primary_pronunciation
from .rhyme import tokenize_line

_log = get_logger(__name__).bind(component="sound_patterns")

# A group only grows while its next word is at most this many tokens away.
SOUND_PATTERN_WINDOW = 4

COMMON_CONSONANTS = frozenset({"T", "N", "S", "R", "L", "D"})
COMMON_CONSONANT_MIN_WORDS = 3
COMMON_CONSONANT_DAMPING = 0.7
TOP_SOUNDS = 3

IMPACT_CAP = 0.2

PHONEME_NAMES: Dict[str, str] = {
    "AA": "ah", "AE": "a", "AH": "uh", "AO": "aw", "AW": "ow", "AY": "i",
    "EH": "e", "ER": "er", "EY": "ay", "IH": "ih", "IY": "ee", "OW": "oh",
    "OY": "oy", "UH": "oo", "UW": "oo",
    "B": "b", "CH": "ch", "D": "d", "DH": "th (voiced)", "F": "f", "G": "g",
    "HH": "h", "JH": "j", "K": "k", "L": "l", "M": "m", "N": "n", "NG": "ng",
    "P": "p", "R": "r", "S": "s", "SH": "sh", "T": "t", "TH": "th", "V": "v",
    "W": "w", "Y": "y", "Z": "z", "ZH": "zh",
}


@dataclass(frozen=True)
class _WordSounds:
    word: str
    position: int
    initial: Optional[str]
    vowels: Tuple[str, ...]
    consonants: Tuple[str, ...]


def _unique(items: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(items))


def _word_sounds(word: str, position: int, phonemes: Sequence[str]) -> _WordSounds:
    initial = None
    for phoneme in phonemes:
        if is_vowel(phoneme):
            break
        if is_consonant(phoneme):
            initial = phoneme
            break
    return _WordSounds(
        word=word,
        position=position,
        initial=initial,
        vowels=_unique(base_phoneme(p) for p in phonemes if is_vowel(p)),
        consonants=_unique(p for p in phonemes if is_consonant(p)),
    )


def _line_words(tokens: Sequence[str], lookup: Optional[PhoneticLookup]) -> List[_WordSounds]:
    words: List[_WordSounds] = []
    for position, token in enumerate(tokens):
        phonemes = primary_pronunciation(token, lookup)
        if phonemes:
            words.append(_word_sounds(token, position, phonemes))
    return words


def pattern_strength(positions: Sequence[int], line_length: int) -> float:
    """Strength in ``[0, 1]``: more words and a tighter spread score higher."""

    count = len(positions)
    if count < 2 or line_length <= 0:
        return 0.0
    count_score = min(1.0, 0.3 + (count - 2) * 0.2)
    spread = max(positions) - min(positions)
    proximity = 1.0 - (spread / line_length) * 0.5
    return max(0.0, min(1.0, count_score * proximity))


def _windowed_groups(
    words: Sequence[_WordSounds],
    sounds_of: Callable[[_WordSounds], Iterable[str]],
) -> List[Tuple[str, List[_WordSounds]]]:
    """Runs of words sharing a sound, each member close to the previous one."""

    open_runs: Dict[str, List[_WordSounds]] = {}
    closed: List[Tuple[str, List[_WordSounds]]] = []

    for entry in words:
        for sound in sounds_of(entry):
            run = open_runs.get(sound)
            if run and entry.position - run[-1].position <= SOUND_PATTERN_WINDOW:
                run.append(entry)
                continue
            if run:
                closed.append((sound, run))
            open_runs[sound] = [entry]

    closed.extend(open_runs.items())
    closed.sort(key=lambda item: (item[1][0].position, item[0]))
    return closed


def _occurrences(
    pattern_type: SoundPatternType,
    groups: Sequence[Tuple[str, List[_WordSounds]]],
    line_number: int,
    line_length: int,
) -> List[SoundPatternOccurrence]:
    found: List[SoundPatternOccurrence] = []
    for sound, members in groups:
        common = pattern_type is SoundPatternType.CONSONANCE and sound in COMMON_CONSONANTS
        if len(members) < (COMMON_CONSONANT_MIN_WORDS if common else 2):
            continue
        positions = [member.position for member in members]
        strength = pattern_strength(positions, line_length)
        if common:
            strength *= COMMON_CONSONANT_DAMPING
        found.append(
            SoundPatternOccurrence(
                type=pattern_type,
                sound=sound,
                words=[member.word for member in members],
                positions=positions,
                line_number=line_number,
                strength=round(strength, 4),
            )
        )
    return found


def analyze_line_sound_patterns(
    line: str,
    line_number: int = 0,
    lookup: Optional[PhoneticLookup] = None,
) -> LineSoundPatterns:
    """Sound patterns in one line; positions are word indices."""

    tokens = tokenize_line(line)
    result = LineSoundPatterns(line_number=line_number, text=line)
    if len(tokens) < 2:
        return result

    words = _line_words(tokens, lookup)
    length = len(tokens)
    result.alliterations = _occurrences(
        SoundPatternType.ALLITERATION,
        _windowed_groups(words, lambda entry: (entry.initial,) if entry.initial else ()),
        line_number,
        length,
    )
    result.assonances = _occurrences(
        SoundPatternType.ASSONANCE,
        _windowed_groups(words, lambda entry: entry.vowels),
        line_number,
        length,
    )
    result.consonances = _occurrences(
        SoundPatternType.CONSONANCE,
        _windowed_groups(words, lambda entry: entry.consonants),
        line_number,
        length,
    )
    return result


def detect_alliteration(line: str, line_number: int = 0, lookup: Optional[PhoneticLookup] = None):
    return analyze_line_sound_patterns(line, line_number, lookup).alliterations


def detect_assonance(line: str, line_number: int = 0, lookup: Optional[PhoneticLookup] = None):
    return analyze_line_sound_patterns(line, line_number, lookup).assonances


def detect_consonance(line: str, line_number: int = 0, lookup: Optional[PhoneticLookup] = None):
    return analyze_line_sound_patterns(line, line_number, lookup).consonances


def analyze_sound_patterns(
    lines: Sequence[str],
    lookup: Optional[PhoneticLookup] = None,
) -> SoundPatternAnalysis:
    """Per-line patterns plus poem-wide counts, density and top sounds."""

    if not lines:
        return SoundPatternAnalysis()

    analyzed: List[LineSoundPatterns] = []
    alliterative: Counter = Counter()
    assonant: Counter = Counter()
    total_words = 0

    for index, line in enumerate(lines):
        patterns = analyze_line_sound_patterns(line, index, lookup)
        analyzed.append(patterns)
        total_words += len(tokenize_line(line))
        alliterative.update(item.sound for item in patterns.alliterations)
        assonant.update(item.sound for item in patterns.assonances)

    counts = {
        kind: sum(len(getattr(line, kind)) for line in analyzed)
        for kind in ("alliterations", "assonances", "consonances")
    }
    occurrences = sum(counts.values())
    density = min(1.0, occurrences / total_words) if total_words else 0.0

    summary = SoundPatternSummary(
        alliteration_count=counts["alliterations"],
        assonance_count=counts["assonances"],
        consonance_count=counts["consonances"],
        density=round(density, 4),
        top_alliterative_sounds=[sound for sound, _ in alliterative.most_common(TOP_SOUNDS)],
        top_assonance_sounds=[sound for sound, _ in assonant.most_common(TOP_SOUNDS)],
    )
    _log.debug(
        "Sound patterns detected",
        context={"lines": len(lines), "occurrences": occurrences, "density": summary.density},
    )
    return SoundPatternAnalysis(lines=analyzed, summary=summary)


def calculate_singability_impact(patterns: LineSoundPatterns) -> float:
    """Score change from a line's sound patterns, within +/- 0.2.

    A couple of alliterations and some assonance help a line flow; piling on
    alliteration starts to feel forced.
    """

    impact = 0.0

    alliterations = len(patterns.alliterations)
    if alliterations in (1, 2):
        impact += 0.05 * alliterations
    elif alliterations > 3:
        impact -= 0.02 * (alliterations - 3)

    assonances = len(patterns.assonances)
    if 1 <= assonances <= 3:
        impact += 0.04 * assonances

    impact += 0.02 * sum(1 for item in patterns.alliterations if item.strength > 0.7)
    impact += 0.03 * sum(1 for item in patterns.assonances if item.strength > 0.7)

    if 1 <= len(patterns.consonances) <= 2:
        impact += 0.02

    return max(-IMPACT_CAP, min(IMPACT_CAP, impact))


def describe_sound_pattern(pattern: SoundPatternOccurrence) -> str:
    name = PHONEME_NAMES.get(pattern.sound, pattern.sound)
    listed = ", ".join(pattern.words[:3])
    if len(pattern.words) > 3:
        listed += f" (+{len(pattern.words) - 3} more)"
    if pattern.type is SoundPatternType.ALLITERATION:
        return f'Alliteration on "{name}" sound: {listed}'
    if pattern.type is SoundPatternType.ASSONANCE:
        return f'Assonance with "{name}" vowel: {listed}'
    return f'Consonance on "{name}" sound: {listed}'


def has_sound_patterns(patterns: LineSoundPatterns) -> bool:
    return bool(patterns.alliterations or patterns.assonances or patterns.consonances)


def get_all_patterns(patterns: LineSoundPatterns) -> List[SoundPatternOccurrence]:
    return patterns.all_patterns()


def filter_by_strength(
    patterns: Iterable[SoundPatternOccurrence],
    min_strength: float,
) -> List[SoundPatternOccurrence]:
    return [pattern for pattern in patterns if pattern.strength >= min_strength]


def get_strongest_pattern(patterns: LineSoundPatterns) -> Optional[SoundPatternOccurrence]:
    best: Optional[SoundPatternOccurrence] = None
    for pattern in patterns.all_patterns():
        if best is None or pattern.strength > best.strength:
            best = pattern
    return best


__all__ = [
    "SOUND_PATTERN_WINDOW",
    "analyze_line_sound_patterns",
    "analyze_sound_patterns",
    "calculate_singability_impact",
    "describe_sound_pattern",
    "detect_alliteration",
    "detect_assonance",
    "detect_consonance",
    "filter_by_strength",
    "get_all_patterns",
    "get_strongest_pattern",
    "has_sound_patterns",
    "pattern_strength",
]
