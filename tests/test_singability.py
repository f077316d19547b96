import pytest

from ghost_note.core.analyzer import analyze_line
from ghost_note.core.models import (
    LineSoundPatterns,
    Severity,
    SingabilityIssue,
    SingabilityScore,
    SoundPatternOccurrence,
    SoundPatternType,
    Syllable,
)
from ghost_note.core.singability import (
    adjust_singability_for_sound_patterns,
    analyze_line_singability,
    analyze_multiple_lines,
    calculate_average_singability,
    calculate_line_singability,
    collect_problem_spots,
    get_primary_vowel,
    has_difficult_clusters,
    identify_problem_spots,
    score_consonant_clusters,
    score_sustainability,
    score_vowel_openness,
    score_word_singability,
)


def test_vowel_openness_uses_first_vowel():
    assert score_vowel_openness(["AA1"]) == 1.0
    assert score_vowel_openness(["S", "IY1"]) == 0.4
    assert score_vowel_openness(["T"]) == 0.0
    assert score_vowel_openness([]) == 0.0
    assert score_vowel_openness(None) == 0.0


def test_closed_front_vowel_openness():
    assert score_vowel_openness(["IH0"]) == 0.3
    assert score_vowel_openness(["IH1"]) == score_vowel_openness(["IH0"])


def test_open_words_outscore_clustered_words(dummy_loader):
    love = score_word_singability("love", dummy_loader)
    strengths = score_word_singability("strengths", dummy_loader)
    heart = score_word_singability("heart", dummy_loader)
    glimpsed = score_word_singability("glimpsed", dummy_loader)

    assert love > strengths
    assert heart > glimpsed
    assert love == pytest.approx(0.5)
    assert heart == pytest.approx(0.9)
    assert glimpsed == 0.0


def test_average_singability_is_the_mean_line_score():
    scores = [SingabilityScore(line_score=0.8), SingabilityScore(line_score=0.6)]

    assert calculate_average_singability(scores) == pytest.approx(0.7)


def test_cluster_penalty_tiers_are_monotone():
    assert score_consonant_clusters(["L", "AH1", "V"]) == 0.0

    two = score_consonant_clusters(["S", "T", "AA1", "P"])
    three = score_consonant_clusters(["S", "T", "R", "AA1", "NG"])
    four = score_consonant_clusters(["S", "T", "R", "EH1", "NG", "K", "TH", "S"])

    assert 0.2 <= two <= 0.4
    assert 0.5 <= three <= 0.7
    assert four == 1.0
    assert two <= three <= four


def test_sustainability_rewards_open_syllables():
    open_syllable = Syllable(phonemes=("S", "IY1"), stress=1, vowel_phoneme="IY1", is_open=True)
    closed_syllable = Syllable(phonemes=("B", "IH1", "G"), stress=1, vowel_phoneme="IH1", is_open=False)

    assert score_sustainability(open_syllable) == pytest.approx(0.55)
    assert score_sustainability(closed_syllable) == pytest.approx(0.3)
    assert score_sustainability(None) == 0.0


def test_strengths_is_a_high_severity_cluster(dummy_loader):
    line = analyze_line("strengths", dummy_loader)
    clusters = [
        spot for spot in identify_problem_spots(line, dummy_loader)
        if spot.issue is SingabilityIssue.CONSONANT_CLUSTER
    ]

    assert clusters
    assert clusters[0].severity is Severity.HIGH
    assert clusters[0].word == "strengths"


def test_love_has_no_cluster_problem(dummy_loader):
    line = analyze_line("love", dummy_loader)

    assert not [
        spot for spot in identify_problem_spots(line, dummy_loader)
        if spot.issue is SingabilityIssue.CONSONANT_CLUSTER
    ]


def test_closed_vowel_flagged(dummy_loader):
    spots = identify_problem_spots(analyze_line("big", dummy_loader), dummy_loader)

    assert [(spot.issue, spot.severity) for spot in spots] == [
        (SingabilityIssue.CLOSED_VOWEL, Severity.MEDIUM)
    ]


def test_problem_spots_of_empty_line():
    assert identify_problem_spots(None) == []


def test_line_score_skips_placeholder_syllables(dummy_loader):
    line = analyze_line("zzyzx big", dummy_loader)
    score = analyze_line_singability(line, dummy_loader)

    assert len(score.syllable_scores) == line.syllable_count == 2
    assert score.syllable_scores[0] == 0.0
    assert score.line_score == pytest.approx(0.3)
    assert calculate_line_singability(line) == score.line_score


def test_word_level_helpers(dummy_loader):
    assert score_word_singability("strengths", dummy_loader) == pytest.approx(0.1)
    assert score_word_singability("zzyzx", dummy_loader) is None
    assert score_word_singability("  ", dummy_loader) is None
    assert has_difficult_clusters("strengths", dummy_loader)
    assert not has_difficult_clusters("love", dummy_loader)
    assert get_primary_vowel("window", dummy_loader) == "IH1"
    assert get_primary_vowel("zzyzx", dummy_loader) is None


def test_batch_helpers(dummy_loader):
    lines = [analyze_line(text, dummy_loader) for text in ("strengths", "love", "big")]
    scores = analyze_multiple_lines(lines, dummy_loader)

    assert len(scores) == 3
    assert calculate_average_singability([]) == 0.0
    assert 0.0 < calculate_average_singability(scores) <= 1.0

    high = collect_problem_spots(scores, Severity.HIGH)
    assert [index for index, _ in high] == [0]
    everything = collect_problem_spots(scores)
    assert {index for index, _ in everything} == {0, 2}


def test_sound_patterns_adjust_line_score():
    patterns = LineSoundPatterns(
        line_number=0,
        text="big bad",
        alliterations=[
            SoundPatternOccurrence(type=SoundPatternType.ALLITERATION, sound="B", strength=0.5)
        ],
    )
    base = SingabilityScore(syllable_scores=[0.5, 0.5], line_score=0.5)

    adjusted = adjust_singability_for_sound_patterns(base, patterns)

    assert adjusted.line_score == pytest.approx(0.55)
    assert base.line_score == 0.5
    assert adjust_singability_for_sound_patterns(
        SingabilityScore(line_score=0.99), patterns
    ).line_score == 1.0
