import pytest

from ghost_note.core.meter import (
    analyze_multi_line_meter,
    calculate_regularity,
    classify_foot,
    count_feet,
    create_meter_pattern,
    detect_deviations,
    detect_meter,
    find_best_meter_match,
    get_dominant_foot,
    get_meter_name,
    is_regular_pattern,
    levenshtein_distance,
    line_stress_pattern,
    parse_meter_name,
    string_similarity,
    to_binary_stress,
)
from ghost_note.core.models import FootType


def test_to_binary_stress_folds_secondary():
    assert to_binary_stress("0120") == "0110"
    assert to_binary_stress("") == ""


@pytest.mark.parametrize(
    "pattern, expected",
    [
        ("0101010101", FootType.IAMB),
        ("10101010", FootType.TROCHEE),
        ("001001001", FootType.ANAPEST),
        ("100100100", FootType.DACTYL),
        ("11", FootType.SPONDEE),
        ("1", FootType.UNKNOWN),
    ],
)
def test_classify_foot(pattern, expected):
    assert classify_foot(pattern) is expected


def test_detect_meter_iambic_pentameter():
    meter = detect_meter("0101010101")

    assert meter.foot_type is FootType.IAMB
    assert meter.feet_per_line == 5
    assert meter.meter_name == "iambic_pentameter"
    assert meter.regularity == 1.0
    assert meter.deviations == []
    assert meter.confidence == pytest.approx(1.0)


def test_detect_meter_empty_pattern():
    meter = detect_meter("")

    assert meter.foot_type is FootType.UNKNOWN
    assert meter.meter_name == "irregular"


def test_short_patterns_are_damped():
    assert detect_meter("01").confidence < detect_meter("01010101").confidence


def test_meter_names_round_trip():
    assert get_meter_name(FootType.TROCHEE, 4) == "trochaic_tetrameter"
    assert get_meter_name(FootType.UNKNOWN, 4) == "irregular"
    assert parse_meter_name("iambic_pentameter") == {"foot_type": FootType.IAMB, "feet": 5}
    assert parse_meter_name("nonsense") is None
    assert create_meter_pattern(FootType.ANAPEST, 2) == "001001"


def test_deviations_and_regularity():
    assert detect_deviations("0111", FootType.IAMB) == [2]
    assert calculate_regularity("0101", FootType.IAMB) == 1.0
    assert calculate_regularity("0101", FootType.UNKNOWN) == 0.0
    assert count_feet("001001", FootType.ANAPEST) == 2
    assert is_regular_pattern("01010101")
    assert not is_regular_pattern("0110100")


def test_string_distance_helpers():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert string_similarity("", "") == 1.0
    assert string_similarity("0101", "") == 0.0


def test_best_matches_are_sorted_and_unique():
    matches = find_best_meter_match("0101010101")
    names = [match.meter for match in matches]

    assert names[0] == "iambic_pentameter"
    assert len(names) == len(set(names))
    assert all(a.score >= b.score for a, b in zip(matches, matches[1:]))


def test_multi_line_meter_weights_consistency():
    meter = analyze_multi_line_meter(["0101010101"] * 3 + ["1010101010"])

    assert meter.meter_name == "iambic_pentameter"
    assert meter.regularity == pytest.approx(0.875)
    assert meter.confidence == pytest.approx(0.75)
    assert analyze_multi_line_meter([]).foot_type is FootType.UNKNOWN


def test_dominant_foot_needs_forty_percent():
    feet = [FootType.IAMB, FootType.IAMB, FootType.TROCHEE, FootType.UNKNOWN, FootType.UNKNOWN]

    assert get_dominant_foot(feet) is FootType.IAMB
    assert get_dominant_foot([FootType.IAMB] + [FootType.UNKNOWN] * 4) is FootType.UNKNOWN
    assert get_dominant_foot([]) is FootType.UNKNOWN


def test_line_stress_pattern_demotes_function_words(dummy_loader):
    words = ["the", "cat", "sat", "on", "the", "mat"]

    assert line_stress_pattern(words, dummy_loader) == "011001"
