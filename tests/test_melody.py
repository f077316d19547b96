import pytest

from ghost_note.core.melody import (
    determine_key,
    determine_tempo,
    determine_time_signature,
    find_phrase_breaks,
    suggest_melody,
)
from ghost_note.core.models import (
    EmotionalAnalysis,
    FootType,
    MeterAnalysis,
    MusicalMode,
    MusicParams,
    RhymeAnalysis,
    RhymeGroup,
    RhymeType,
    Section,
    SectionType,
    SongStructure,
    TimeSignature,
    VocalRegister,
)
from ghost_note.core.phrases import analyze_poem_phrases


@pytest.mark.parametrize(
    "foot, feet, expected",
    [
        (FootType.ANAPEST, 3, TimeSignature.SIX_EIGHT),
        (FootType.DACTYL, 4, TimeSignature.THREE_FOUR),
        (FootType.IAMB, 5, TimeSignature.FOUR_FOUR),
        (FootType.TROCHEE, 3, TimeSignature.TWO_FOUR),
        (FootType.UNKNOWN, 0, TimeSignature.FOUR_FOUR),
    ],
)
def test_time_signature_follows_foot(foot, feet, expected):
    assert determine_time_signature(foot, feet) is expected


def test_tempo_interpolates_and_clamps():
    assert determine_tempo(0.25, (100, 140)) == 110
    assert determine_tempo(1.5, (60, 80)) == 80
    assert determine_tempo(-1.0, (60, 80)) == 60


def test_key_falls_back_when_mode_disagrees():
    assert determine_key(["happy"], MusicalMode.MAJOR) == "G"
    assert determine_key(["sad"], MusicalMode.MAJOR) == "C"
    assert determine_key([], MusicalMode.MINOR) == "Am"


def test_phrase_breaks_at_stanza_ends():
    assert find_phrase_breaks([4, 4]) == [3, 7]
    assert find_phrase_breaks([]) == []


def test_phrase_breaks_after_perfect_rhymes_in_same_stanza():
    rhyme = RhymeAnalysis(
        scheme="AABB",
        rhyme_groups={
            "A": RhymeGroup(lines=[0, 1], rhyme_type=RhymeType.PERFECT, end_words=["cat", "hat"]),
            "B": RhymeGroup(lines=[2, 3], rhyme_type=RhymeType.SLANT, end_words=["sun", "moon"]),
        },
    )

    assert find_phrase_breaks([4], rhyme) == [1, 3]
    assert find_phrase_breaks([1, 1, 2], rhyme) == [0, 1, 3]


def test_suggest_melody_combines_meter_and_emotion():
    meter = MeterAnalysis(foot_type=FootType.IAMB, feet_per_line=5, detected_meter="iambic_pentameter")
    emotion = EmotionalAnalysis(
        arousal=0.5,
        dominant_emotions=["sad"],
        suggested_music_params=MusicParams(
            mode=MusicalMode.MINOR, tempo_range=(60, 80), register=VocalRegister.LOW
        ),
    )

    melody = suggest_melody(meter, emotion, [2])

    assert melody.time_signature is TimeSignature.FOUR_FOUR
    assert melody.tempo == 70
    assert melody.key == "Am"
    assert melody.mode is MusicalMode.MINOR
    assert melody.phrase_breaks == [1]


def test_chorus_repeats_share_phrase_breaks():
    rhyme = RhymeAnalysis(
        scheme="AABCCDEF",
        rhyme_groups={
            "A": RhymeGroup(lines=[0, 1], rhyme_type=RhymeType.PERFECT, end_words=["cat", "hat"]),
        },
    )
    structure = SongStructure(
        sections=[
            Section(type=SectionType.CHORUS, stanza_indices=[0, 2], label="Chorus"),
            Section(type=SectionType.VERSE, stanza_indices=[1], label="Verse 1"),
        ]
    )

    assert find_phrase_breaks([3, 2, 3], rhyme) == [1, 2, 4, 7]
    assert find_phrase_breaks([3, 2, 3], rhyme, structure) == [1, 2, 4, 6, 7]


def test_major_phrase_breaks_are_spaced_out():
    phrasing = analyze_poem_phrases([["Stop.", "Go.", "Wait.", "Run."]])

    assert phrasing.major_break_lines == [0, 1, 2, 3]
    assert find_phrase_breaks([4], phrasing=phrasing) == [0, 2, 3]
