import pytest
from prometheus_client import REGISTRY

from ghost_note.core.analyzer import analyze_line, analyze_poem, identify_problems
from ghost_note.core.models import (
    FormType,
    MeterAnalysis,
    ProblemType,
    RhymeAnalysis,
    Severity,
)
from ghost_note.core.serialization import is_poem_analysis
from ghost_note.utils.telemetry import StructuredTelemetry

SONNET_QUATRAIN = (
    "Shall I compare thee to a summer's day?\n"
    "Thou art more lovely and more temperate:\n"
    "Rough winds do shake the darling buds of May,\n"
    "And summer's lease hath all too short a date:"
)

TONGUE_TWISTER = (
    "She sells seashells by the seashore,\n"
    "The sixth sick sheik's sixth sheep's sick texts strengths"
)

STAGES = {
    "structure",
    "meter",
    "rhyme",
    "sound_patterns",
    "emotion",
    "form",
    "problems",
    "sections",
    "phrasing",
    "melody",
}


def _outcome_count(outcome):
    return REGISTRY.get_sample_value("ghost_note_analyses_total", {"outcome": outcome}) or 0.0


def test_sonnet_quatrain_end_to_end():
    analysis = analyze_poem(SONNET_QUATRAIN, title="Sonnet 18")

    assert analysis.meta.title == "Sonnet 18"
    assert analysis.meta.line_count == 4
    assert analysis.meta.stanza_count == 1
    assert analysis.prosody.rhyme.scheme == "ABAB"
    assert analysis.prosody.rhyme.rhyme_groups["A"].end_words == ["day", "may"]
    assert not [problem for problem in analysis.problems if problem.severity is Severity.HIGH]
    assert analysis.melody_suggestions.phrase_breaks[-1] == 3
    assert analysis.form.form_type is not FormType.UNKNOWN
    assert 0.0 <= analysis.prosody.regularity <= 1.0
    assert is_poem_analysis(analysis.as_dict())

    lines = analysis.structure.all_lines()
    assert all(line.syllable_count == len(line.stress_pattern) for line in lines)
    assert analysis.meta.syllable_count == sum(line.syllable_count for line in lines)


def test_tongue_twister_reports_hard_clusters():
    analysis = analyze_poem(TONGUE_TWISTER)

    high = [
        problem
        for problem in analysis.problems
        if problem.type is ProblemType.SINGABILITY and problem.severity is Severity.HIGH
    ]
    assert len(high) >= 2
    assert {problem.line for problem in high} == {1}
    assert any('"strengths"' in problem.description for problem in high)
    assert [problem.line for problem in analysis.problems] == sorted(
        problem.line for problem in analysis.problems
    )


def test_empty_text_returns_default_analysis():
    before = _outcome_count("empty")

    analysis = analyze_poem("  \n\n  ", title="Blank")

    assert analysis.meta.title == "Blank"
    assert analysis.meta.line_count == 0
    assert analysis.problems == []
    assert analysis.form.description == "No content to analyze."
    assert _outcome_count("empty") == before + 1


def test_telemetry_records_every_stage(dummy_loader):
    telemetry = StructuredTelemetry()

    analysis = analyze_poem("The cat sat on the mat\nThe dog and the log", dummy_loader, telemetry=telemetry)

    snapshot = telemetry.snapshot()
    assert set(snapshot["stages"]) == STAGES
    assert snapshot["name"] == "analyze_poem"
    assert snapshot["metadata"]["lines"] == 2
    assert snapshot["counters"]["problems"] == float(len(analysis.problems))
    rhyme_event = next(event for event in snapshot["events"] if event["name"] == "rhyme")
    assert rhyme_event["metadata"]["scheme"] == analysis.prosody.rhyme.scheme


def test_lookup_failures_propagate_and_are_counted():
    class BrokenLoader:
        def get_pronunciations(self, word):
            raise RuntimeError("dictionary offline")

    before = _outcome_count("error")

    with pytest.raises(RuntimeError, match="dictionary offline"):
        analyze_poem("The cat sat on the mat", BrokenLoader())

    assert _outcome_count("error") == before + 1


def test_rhyme_break_flagged_in_consistent_scheme(dummy_loader):
    lines = [analyze_line(text, dummy_loader) for text in ("the cat", "a hat", "the bat", "a dog")]
    rhyme = RhymeAnalysis(scheme="AAAB")

    problems = identify_problems(lines, MeterAnalysis(), rhyme)

    breaks = [problem for problem in problems if problem.type is ProblemType.RHYME_BREAK]
    assert [(problem.line, problem.severity) for problem in breaks] == [(3, Severity.LOW)]
    assert breaks[0].position == lines[3].syllable_count - 1
    assert '"dog"' in breaks[0].description


def test_verse_chorus_poem_end_to_end(dummy_loader):
    text = (
        "Roses are red\nViolets are blue\n\n"
        "Sugar is sweet\nAnd so are you\n\n"
        "Roses are red\nViolets are blue"
    )

    analysis = analyze_poem(text, dummy_loader)

    structure = analysis.song_structure
    assert structure.structure_pattern == "ABA"
    assert structure.has_verse_chorus_structure
    assert [refrain.text for refrain in structure.refrains] == ["Roses are red", "Violets are blue"]
    assert analysis.as_dict()["songStructure"]["structurePattern"] == "ABA"

    breaks = analysis.melody_suggestions.phrase_breaks
    assert {1, 3, 5} <= set(breaks)
    assert [line for line in breaks if line < 2] == [line - 4 for line in breaks if line >= 4]
