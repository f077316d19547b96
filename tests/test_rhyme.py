import pytest

from ghost_note.core.models import RhymeType
from ghost_note.core.rhyme import (
    analyze_rhymes,
    calculate_phonetic_similarity,
    calculate_rhyme_density,
    classify_rhyme,
    detect_rhyme_scheme,
    do_words_rhyme,
    find_internal_rhymes,
    find_rhyming_words,
    get_last_word,
    get_rhyme_quality_score,
    get_rhyming_part,
    identify_rhyme_form,
    is_perfect_rhyme,
    rhyme_consistency,
    rhyme_strength,
    scheme_letter,
    tokenize_line,
)


def test_rhyming_part_starts_at_last_stressed_vowel():
    assert get_rhyming_part(["K", "AE1", "T"]) == ["AE1", "T"]
    assert get_rhyming_part(["AH0", "B", "AW1", "T"]) == ["AW1", "T"]
    assert get_rhyming_part(["W", "IH0", "N", "D", "OW0"]) == ["OW0"]
    assert get_rhyming_part(["HH", "M"]) == []
    assert get_rhyming_part(None) == []


def test_phonetic_similarity_bounds():
    assert calculate_phonetic_similarity(["AE1", "T"], ["AE1", "T"]) == 1.0
    assert calculate_phonetic_similarity([], ["AE1"]) == 0.0
    assert 0.0 <= calculate_phonetic_similarity(["AE1", "T"], ["AO1", "G"]) < 0.6


def test_classify_rhyme_kinds(dummy_loader):
    assert classify_rhyme("cat", "hat", dummy_loader) is RhymeType.PERFECT
    assert classify_rhyme("cat", "bad", dummy_loader) is RhymeType.ASSONANCE
    assert classify_rhyme("moon", "sun", dummy_loader) is RhymeType.CONSONANCE
    assert classify_rhyme("cat", "dog", dummy_loader) is RhymeType.NONE
    assert classify_rhyme("cat", "zzyzx", dummy_loader) is RhymeType.NONE


def test_word_level_helpers(dummy_loader):
    assert is_perfect_rhyme("moon", "june", dummy_loader)
    assert do_words_rhyme("cat", "bad", dummy_loader)
    assert not do_words_rhyme("cat", "dog", dummy_loader)
    assert get_rhyme_quality_score("cat", "hat", dummy_loader) == 1.0
    assert get_rhyme_quality_score("cat", "dog", dummy_loader) == 0.0


def test_rhyme_strength_ranks_perfect_above_assonance(dummy_loader):
    perfect_type, perfect = rhyme_strength("cat", "hat", dummy_loader)
    assonant_type, assonant = rhyme_strength("cat", "bad", dummy_loader)

    assert perfect_type is RhymeType.PERFECT
    assert assonant_type is RhymeType.ASSONANCE
    assert perfect > assonant
    assert rhyme_strength("cat", "zzyzx", dummy_loader) == (RhymeType.NONE, 0.0)


def test_find_rhyming_words_respects_minimum(dummy_loader):
    candidates = ["hat", "bad", "dog", "cat", "zzyzx"]

    assert find_rhyming_words("cat", candidates, lookup=dummy_loader) == [("hat", RhymeType.PERFECT)]
    assert find_rhyming_words("cat", candidates, RhymeType.ASSONANCE, dummy_loader) == [
        ("hat", RhymeType.PERFECT),
        ("bad", RhymeType.ASSONANCE),
    ]


def test_last_word_and_tokens():
    assert get_last_word("Shall I compare thee to a summer's day?") == "day"
    assert get_last_word("   ") == ""
    assert get_last_word("...") == ""
    assert tokenize_line("Don't STOP now!") == ["don't", "stop", "now"]


def test_scheme_letters_continue_past_z():
    assert scheme_letter(0) == "A"
    assert scheme_letter(25) == "Z"
    assert scheme_letter(26) == "a"
    assert scheme_letter(52) == chr(0x0100)


def test_detect_rhyme_scheme_alternating(dummy_loader):
    lines = ["The cat", "A dog", "The hat", "A log"]

    assert detect_rhyme_scheme(lines, dummy_loader) == "ABAB"
    assert detect_rhyme_scheme([], dummy_loader) == ""


def test_unknown_end_words_each_open_a_group(dummy_loader):
    scheme = detect_rhyme_scheme(["zzq"] * 27, dummy_loader)

    assert len(scheme) == 27
    assert scheme.endswith("Za")
    assert rhyme_consistency(scheme) == 0.0


def test_analyze_rhymes_groups(dummy_loader):
    analysis = analyze_rhymes(["The cat", "A dog", "The hat", "A log", "The sun"], dummy_loader)

    assert analysis.scheme == "ABABC"
    assert analysis.rhyme_groups["A"].lines == [0, 2]
    assert analysis.rhyme_groups["A"].rhyme_type is RhymeType.PERFECT
    assert analysis.rhyme_groups["B"].end_words == ["dog", "log"]
    assert analysis.rhyme_groups["C"].lines == [4]


def test_groups_are_disjoint(dummy_loader):
    analysis = analyze_rhymes(["cat", "hat", "bat", "dog", "log", "moon", "june"], dummy_loader)
    members = [line for group in analysis.rhyme_groups.values() for line in group.lines]

    assert sorted(members) == list(range(7))


def test_internal_rhymes_use_word_positions(dummy_loader):
    rhymes = find_internal_rhymes("the cat and the hat", 3, dummy_loader)

    assert len(rhymes) == 1
    assert rhymes[0].line == 3
    assert rhymes[0].positions == (1, 4)
    assert rhymes[0].words == ("cat", "hat")


def test_internal_rhymes_outside_window_are_ignored(dummy_loader):
    assert find_internal_rhymes("cat zq zq zq zq zq hat", 0, dummy_loader) == []


def test_rhyme_density(dummy_loader):
    assert calculate_rhyme_density("cat hat", dummy_loader) == 1.0
    assert calculate_rhyme_density("cat", dummy_loader) == 0.0


def test_consistency_and_form_names():
    assert rhyme_consistency("ABAB") == 1.0
    assert rhyme_consistency("ABCA") == pytest.approx(0.5)
    assert rhyme_consistency("") == 0.0
    assert identify_rhyme_form("AABB") == "couplets"
    assert identify_rhyme_form("ABAB") == "alternate"
    assert identify_rhyme_form("") == "none"
