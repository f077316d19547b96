import pytest

from ghost_note.core.models import (
    FootType,
    PoemAnalysis,
    Refrain,
    Section,
    SectionType,
    SongStructure,
    StanzaSimilarity,
)
from ghost_note.core.structure import (
    analyze_structure,
    calculate_line_similarity,
    calculate_meter_similarity,
    calculate_stanza_text_similarity,
    classify_sections,
    detect_refrains,
    generate_structure_pattern,
    get_section_for_stanza,
    is_repeat_section,
    is_section_transition,
    normalize_text_for_comparison,
    stanza_foot_type,
)

ROSES = [
    ["Roses are red", "Violets are blue"],
    ["Sugar is sweet", "And so are you"],
    ["Roses are red", "Violets are blue"],
]


def _similarity(first, second, overall):
    return StanzaSimilarity(stanza1=first, stanza2=second, overall_similarity=overall)


def test_normalization_ignores_case_and_punctuation():
    assert normalize_text_for_comparison("  Roses, are   RED!  ") == "roses are red"
    assert normalize_text_for_comparison("(Oh)... yes") == "oh yes"


def test_line_similarity():
    assert calculate_line_similarity("Roses are red!", "roses are red") == 1.0
    assert calculate_line_similarity("", "") == 0.0
    assert calculate_line_similarity("the cat sat", "the cat ran") == pytest.approx(0.6 * 9 / 11 + 0.2)


def test_stanza_text_similarity_is_damped_by_line_count():
    assert calculate_stanza_text_similarity(["the cat sat", "a dog"], ["the cat sat"]) == pytest.approx(0.85)
    assert calculate_stanza_text_similarity([], ["the cat sat"]) == 0.0


def test_meter_similarity_rewards_a_shared_foot():
    assert stanza_foot_type(["0101", "0101", "1010"]) is FootType.IAMB
    assert stanza_foot_type(["1"]) is FootType.UNKNOWN
    assert calculate_meter_similarity(["0101", "0101"], ["0101", "0100"]) == pytest.approx(0.975)
    assert calculate_meter_similarity(["0101"], ["0101"]) == 1.0
    assert calculate_meter_similarity(["01"], []) == 0.0


def test_exact_refrains_span_stanzas():
    refrains = detect_refrains(ROSES)

    assert [(refrain.text, refrain.occurrences) for refrain in refrains] == [
        ("Roses are red", [(0, 0), (2, 0)]),
        ("Violets are blue", [(0, 1), (2, 1)]),
    ]


def test_repeats_inside_one_stanza_are_not_refrains():
    assert detect_refrains([["oh my love", "oh my love"], ["goodbye now"]]) == []


def test_near_identical_lines_are_refrains():
    refrains = detect_refrains([["rock & roll all night long"], ["rock roll all night long"]])

    assert refrains[0].text == "rock & roll all night long"
    assert refrains[0].occurrences == [(0, 0), (1, 0)]
    assert len(refrains) == 2


def test_classify_chorus_verse_and_bridge():
    stanzas = [["one", "two"]] * 4
    similarities = [
        _similarity(0, 1, 0.5),
        _similarity(0, 2, 0.2),
        _similarity(0, 3, 0.95),
        _similarity(1, 2, 0.3),
        _similarity(1, 3, 0.5),
        _similarity(2, 3, 0.2),
    ]

    sections = classify_sections(stanzas, similarities, [])

    assert [(section.type, section.stanza_indices, section.label) for section in sections] == [
        (SectionType.CHORUS, [0, 3], "Chorus"),
        (SectionType.VERSE, [1], "Verse 1"),
        (SectionType.BRIDGE, [2], "Bridge"),
    ]
    assert sections[0].confidence == pytest.approx(0.95)
    assert sections[1].confidence == 0.5
    assert sections[2].confidence == pytest.approx(1 - 0.7 / 3)
    assert generate_structure_pattern(sections, 4) == "ABCA"


def test_refrain_heavy_stanza_becomes_a_chorus():
    stanzas = [["first", "second", "third"], ["hey", "hey", "ho"]]
    refrains = [
        Refrain(text="hey", normalized_text="hey", occurrences=[(1, 0), (1, 1)]),
    ]

    sections = classify_sections(stanzas, [_similarity(0, 1, 0.1)], refrains)

    assert [section.type for section in sections] == [SectionType.VERSE, SectionType.CHORUS]
    assert sections[1].confidence == pytest.approx(2 / 3)
    assert generate_structure_pattern(sections, 2) == "AB"


def test_pattern_marks_unassigned_stanzas():
    sections = [Section(type=SectionType.VERSE, stanza_indices=[0], label="Verse 1")]

    assert generate_structure_pattern(sections, 2) == "A?"
    assert generate_structure_pattern([], 2) == ""


def test_verse_chorus_poem(dummy_loader):
    structure = analyze_structure(ROSES, lookup=dummy_loader)

    assert structure.structure_pattern == "ABA"
    assert structure.has_verse_chorus_structure
    assert [section.stanza_indices for section in structure.sections] == [[0, 2], [1]]
    assert structure.sections[0].confidence == pytest.approx(1.0)
    assert len(structure.similarities) == 3
    assert structure.summary == "Verse/chorus structure detected, 1 verse, 1 chorus section, 2 refrain lines"


def test_explicit_stress_patterns_are_used():
    patterns = [["0101", "0101"], ["1010", "1010"], ["0101", "0101"]]

    structure = analyze_structure(ROSES, stress_patterns=patterns)

    first, repeat, last = structure.similarities
    assert first.meter_similarity == pytest.approx(0.5)
    assert not first.foot_type_match
    assert last.meter_similarity == pytest.approx(0.5)
    assert repeat.meter_similarity == 1.0
    assert repeat.foot_type_match
    assert repeat.line_count_match


def test_degenerate_poems():
    empty = analyze_structure([])
    single = analyze_structure([["Only one stanza here"]])

    assert empty == SongStructure()
    assert empty.summary == "No stanzas to analyze"
    assert single.structure_pattern == "A"
    assert single.summary == "Single stanza poem"
    assert [(section.label, section.confidence) for section in single.sections] == [("Verse 1", 1.0)]


def test_section_lookups(dummy_loader):
    structure = analyze_structure(ROSES, lookup=dummy_loader)

    assert get_section_for_stanza(structure, 1) is SectionType.VERSE
    assert get_section_for_stanza(structure, 2) is SectionType.CHORUS
    assert get_section_for_stanza(structure, 9) is SectionType.VERSE
    assert is_repeat_section(structure, 2)
    assert not is_repeat_section(structure, 0)
    assert not is_repeat_section(structure, 9)
    assert is_section_transition(structure, 0)
    assert is_section_transition(structure, 1)
    assert not is_section_transition(structure, 2)


def test_adjacent_stanzas_of_one_section_are_not_a_transition():
    structure = SongStructure(
        sections=[
            Section(type=SectionType.CHORUS, stanza_indices=[0, 1], label="Chorus"),
            Section(type=SectionType.VERSE, stanza_indices=[2], label="Verse 1"),
        ]
    )

    assert not is_section_transition(structure, 0)
    assert is_section_transition(structure, 1)


def test_song_structure_survives_the_analysis_record(dummy_loader):
    analysis = PoemAnalysis(song_structure=analyze_structure(ROSES, lookup=dummy_loader))

    payload = analysis.as_dict()
    restored = PoemAnalysis.from_dict(payload)

    assert payload["songStructure"]["structurePattern"] == "ABA"
    assert payload["songStructure"]["refrains"][0]["occurrences"] == [[0, 0], [2, 0]]
    assert restored == analysis
    assert "songStructure" not in PoemAnalysis().as_dict()
