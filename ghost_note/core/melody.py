"""Melody parameters derived from prosody, emotion and stanza layout."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from ghost_note.utils.observability import get_logger

from .emotion import music_for_emotion
from .models import (
    EmotionalAnalysis,
    FootType,
    MelodySuggestions,
    MeterAnalysis,
    MusicalMode,
    RhymeAnalysis,
    RhymeType,
    SectionType,
    SongStructure,
    TimeSignature,
)
from .phrases import PoemPhrasing, suggest_melody_phrase_breaks

_log = get_logger(__name__).bind(component="melody")

TERNARY_SIGNATURES = {
    FootType.ANAPEST: TimeSignature.SIX_EIGHT,
    FootType.DACTYL: TimeSignature.THREE_FOUR,
}
BINARY_FEET = frozenset({FootType.IAMB, FootType.TROCHEE, FootType.SPONDEE})
COMMON_TIME_MIN_FEET = 4

DEFAULT_KEYS = {MusicalMode.MAJOR: "C", MusicalMode.MINOR: "Am"}


def determine_time_signature(foot_type: FootType, feet_per_line: int) -> TimeSignature:
    if foot_type in TERNARY_SIGNATURES:
        return TERNARY_SIGNATURES[foot_type]
    if foot_type in BINARY_FEET:
        if feet_per_line >= COMMON_TIME_MIN_FEET:
            return TimeSignature.FOUR_FOUR
        return TimeSignature.TWO_FOUR
    return TimeSignature.FOUR_FOUR


def determine_tempo(arousal: float, tempo_range: Tuple[int, int]) -> int:
    """Interpolate within ``tempo_range`` by arousal."""

    low, high = tempo_range
    arousal = max(0.0, min(1.0, arousal))
    return int(round(low + (high - low) * arousal))


def determine_key(dominant_emotions: Sequence[str], mode: MusicalMode) -> str:
    music = music_for_emotion(dominant_emotions[0]) if dominant_emotions else None
    if music is not None and music.mode == mode:
        return music.key
    return DEFAULT_KEYS[mode]


def find_phrase_breaks(
    lines_per_stanza: Sequence[int],
    rhyme: Optional[RhymeAnalysis] = None,
    structure: Optional[SongStructure] = None,
    phrasing: Optional[PoemPhrasing] = None,
) -> List[int]:
    """Line indices where a sung phrase should end.

    Every stanza's last line breaks, so every section ends on a break. So
    does any line that completes a perfect rhyme with an earlier line of the
    same stanza, and any major break kept by ``phrasing``. Stanzas of one
    chorus share their in-stanza breaks.
    """

    breaks = set()
    stanza_of: List[int] = []
    starts: List[int] = []
    for stanza_index, size in enumerate(lines_per_stanza):
        starts.append(len(stanza_of))
        stanza_of.extend([stanza_index] * size)
        if size > 0:
            breaks.add(len(stanza_of) - 1)

    if rhyme is not None:
        for group in rhyme.rhyme_groups.values():
            if group.rhyme_type is not RhymeType.PERFECT:
                continue
            seen_stanzas = set()
            for line in sorted(group.lines):
                if line >= len(stanza_of):
                    continue
                stanza = stanza_of[line]
                if stanza in seen_stanzas:
                    breaks.add(line)
                seen_stanzas.add(stanza)

    if phrasing is not None:
        breaks.update(line for line in suggest_melody_phrase_breaks(phrasing) if line < len(stanza_of))

    if structure is not None:
        for section in structure.sections:
            if section.type is not SectionType.CHORUS:
                continue
            stanzas = [index for index in section.stanza_indices if index < len(lines_per_stanza)]
            offsets = {line - starts[stanza_of[line]] for line in breaks if stanza_of[line] in stanzas}
            for stanza in stanzas:
                breaks.update(
                    starts[stanza] + offset for offset in offsets if offset < lines_per_stanza[stanza]
                )

    return sorted(breaks)


def suggest_melody(
    meter: MeterAnalysis,
    emotion: EmotionalAnalysis,
    lines_per_stanza: Sequence[int],
    rhyme: Optional[RhymeAnalysis] = None,
    structure: Optional[SongStructure] = None,
    phrasing: Optional[PoemPhrasing] = None,
) -> MelodySuggestions:
    params = emotion.suggested_music_params
    suggestions = MelodySuggestions(
        time_signature=determine_time_signature(meter.foot_type, meter.feet_per_line),
        tempo=determine_tempo(emotion.arousal, params.tempo_range),
        key=determine_key(emotion.dominant_emotions, params.mode),
        mode=params.mode,
        phrase_breaks=find_phrase_breaks(lines_per_stanza, rhyme, structure, phrasing),
    )
    _log.debug(
        "Melody suggested",
        context={
            "time_signature": suggestions.time_signature.value,
            "tempo": suggestions.tempo,
            "key": suggestions.key,
            "breaks": len(suggestions.phrase_breaks),
        },
    )
    return suggestions


__all__ = [
    "determine_key",
    "determine_tempo",
    "determine_time_signature",
    "find_phrase_breaks",
    "suggest_melody",
]
