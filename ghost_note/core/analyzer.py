"""Full-poem analysis pipeline.

``analyze_poem`` runs every stage over one poem and assembles a
:class:`~ghost_note.core.models.PoemAnalysis`. Stages are timed through an
optional :class:`~ghost_note.utils.telemetry.StructuredTelemetry` collector,
and every run is counted, timed and traced.
"""

from __future__ import annotations

import time
from contextlib import nullcontext
from typing import List, Optional, Sequence

from ghost_note.utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)
from ghost_note.utils.telemetry import StructuredTelemetry

from .emotion import analyze_emotion
from .forms import create_form_detection_input, detect_poem_form
from .melody import suggest_melody
from .meter import (
    FOOT_ADJECTIVES,
    LineMeter,
    analyze_multi_line_meter,
    count_feet,
    detect_deviations,
    line_stress_pattern,
)
from .models import (
    AnalyzedLine,
    AnalyzedStanza,
    FootType,
    MeterAnalysis,
    PoemAnalysis,
    PoemMeta,
    ProblemReport,
    ProblemType,
    ProsodyAnalysis,
    RhymeAnalysis,
    Severity,
    StructureAnalysis,
    create_default_analysis,
)
from .phonetics import PhoneticLookup
from .phrases import analyze_poem_phrases
from .preprocess import normalize_text, split_stanzas, tokenize_words
from .rhyme import analyze_rhymes, get_last_word, rhyme_consistency
from .singability import analyze_line_singability
from .sound_patterns import analyze_sound_patterns
from .structure import analyze_structure
from .syllabifier import build_word, count_syllables

_log = get_logger(__name__).bind(component="analyzer")

ANALYSES_RUN = create_counter(
    "ghost_note_analyses_total",
    "Poem analyses run, by outcome.",
    ["outcome"],
)
ANALYSIS_DURATION = create_histogram(
    "ghost_note_analysis_duration_seconds",
    "Wall-clock time of a full poem analysis.",
)

STRESS_DEVIATION_SHARE = 0.3
SYLLABLE_VARIANCE_SHARE = 0.4
RHYME_BREAK_CONSISTENCY = 0.6
METER_REGULARITY_WEIGHT = 0.7
RHYME_REGULARITY_WEIGHT = 0.3
TERNARY_FEET = frozenset({FootType.ANAPEST, FootType.DACTYL})


def _stage(telemetry: Optional[StructuredTelemetry], name: str):
    if telemetry is None:
        return nullcontext({})
    return telemetry.stage(name)


def analyze_line(text: str, lookup: Optional[PhoneticLookup] = None) -> AnalyzedLine:
    """Syllabify, stress and score one line of verse."""

    words = [build_word(token, lookup) for token in tokenize_words(text)]
    line = AnalyzedLine(
        text=text,
        words=words,
        stress_pattern=line_stress_pattern(words, lookup),
        syllable_count=count_syllables(words),
    )
    line.singability = analyze_line_singability(line, lookup)
    return line


def _meter_analysis(lines: Sequence[AnalyzedLine], dominant: LineMeter) -> MeterAnalysis:
    patterns = [line.stress_pattern for line in lines]
    combined = "".join(patterns)
    foot_type = dominant.foot_type
    feet = 0
    if patterns:
        feet = int(round(sum(count_feet(pattern, foot_type) for pattern in patterns) / len(patterns)))
    return MeterAnalysis(
        pattern=combined,
        detected_meter=dominant.meter_name,
        foot_type=foot_type,
        feet_per_line=feet,
        confidence=round(dominant.confidence, 4),
        deviations=detect_deviations(combined, foot_type) if foot_type is not FootType.UNKNOWN else [],
    )


def _expected_syllables(meter: MeterAnalysis) -> int:
    return meter.feet_per_line * (3 if meter.foot_type in TERNARY_FEET else 2)


def identify_problems(
    lines: Sequence[AnalyzedLine],
    meter: MeterAnalysis,
    rhyme: RhymeAnalysis,
) -> List[ProblemReport]:
    """Problem reports for every line, in line order."""

    problems: List[ProblemReport] = []
    expected = _expected_syllables(meter)
    flag_breaks = rhyme_consistency(rhyme.scheme) >= RHYME_BREAK_CONSISTENCY
    letter_counts = {letter: rhyme.scheme.count(letter) for letter in set(rhyme.scheme)}

    for index, line in enumerate(lines):
        if meter.foot_type is not FootType.UNKNOWN:
            deviations = detect_deviations(line.stress_pattern, meter.foot_type)
            if len(deviations) > len(line.stress_pattern) * STRESS_DEVIATION_SHARE:
                adjective = FOOT_ADJECTIVES[meter.foot_type]
                for position in deviations:
                    problems.append(
                        ProblemReport(
                            line=index,
                            position=position,
                            type=ProblemType.STRESS_MISMATCH,
                            severity=Severity.MEDIUM,
                            description=f"Stress deviation at syllable {position + 1} breaks {adjective} pattern",
                        )
                    )

        for spot in line.singability.problem_spots:
            if spot.severity is Severity.LOW:
                continue
            problems.append(
                ProblemReport(
                    line=index,
                    position=spot.position,
                    type=ProblemType.SINGABILITY,
                    severity=spot.severity,
                    description=f'{spot.issue.value.replace("_", " ")} in "{spot.word}"',
                    suggested_fix=spot.suggestion or None,
                )
            )

        if expected > 0 and abs(line.syllable_count - expected) > expected * SYLLABLE_VARIANCE_SHARE:
            problems.append(
                ProblemReport(
                    line=index,
                    position=0,
                    type=ProblemType.SYLLABLE_VARIANCE,
                    severity=Severity.LOW,
                    description=f"Line has {line.syllable_count} syllables (expected ~{expected})",
                )
            )

        if flag_breaks and index < len(rhyme.scheme) and letter_counts[rhyme.scheme[index]] == 1:
            end_word = get_last_word(line.text)
            problems.append(
                ProblemReport(
                    line=index,
                    position=max(0, line.syllable_count - 1),
                    type=ProblemType.RHYME_BREAK,
                    severity=Severity.LOW,
                    description=f'"{end_word}" does not rhyme with any other line',
                    suggested_fix="End the line on a word that rhymes with a neighbouring line",
                )
            )

    return problems


def analyze_poem(
    text: str,
    lookup: Optional[PhoneticLookup] = None,
    *,
    title: Optional[str] = None,
    telemetry: Optional[StructuredTelemetry] = None,
) -> PoemAnalysis:
    """Analyse ``text`` end to end.

    Empty or whitespace-only text yields the default analysis. ``lookup``
    replaces the bundled pronouncing dictionary; ``telemetry`` receives a
    trace with one timed stage per pipeline step.
    """

    stanza_texts = split_stanzas(text)
    if not stanza_texts:
        ANALYSES_RUN.labels(outcome="empty").inc()
        return create_default_analysis(title)

    line_texts = [line for stanza in stanza_texts for line in stanza]
    started = time.perf_counter()
    if telemetry is not None:
        telemetry.start_trace("analyze_poem")
        telemetry.annotate("lines", len(line_texts))

    attributes = {"ghost_note.lines": len(line_texts), "ghost_note.stanzas": len(stanza_texts)}
    with start_span("ghost_note.analyze", attributes) as span:
        try:
            with _stage(telemetry, "structure") as details:
                stanzas = [
                    AnalyzedStanza(lines=[analyze_line(line, lookup) for line in stanza])
                    for stanza in stanza_texts
                ]
                lines = [line for stanza in stanzas for line in stanza.lines]
                details["syllables"] = sum(line.syllable_count for line in lines)

            with _stage(telemetry, "meter") as details:
                dominant = analyze_multi_line_meter([line.stress_pattern for line in lines])
                meter = _meter_analysis(lines, dominant)
                details["meter"] = meter.detected_meter

            with _stage(telemetry, "rhyme") as details:
                rhyme = analyze_rhymes(line_texts, lookup)
                details["scheme"] = rhyme.scheme

            with _stage(telemetry, "sound_patterns"):
                sound_patterns = analyze_sound_patterns(line_texts, lookup)

            with _stage(telemetry, "emotion"):
                emotion = analyze_emotion(normalize_text(text), stanza_texts)

            lines_per_stanza = [len(stanza.lines) for stanza in stanzas]
            with _stage(telemetry, "form") as details:
                form = detect_poem_form(
                    create_form_detection_input(
                        line_count=len(lines),
                        stanza_count=len(stanzas),
                        lines_per_stanza=lines_per_stanza,
                        meter_foot_type=meter.foot_type,
                        meter_name=meter.detected_meter,
                        meter_confidence=meter.confidence,
                        rhyme_scheme=rhyme.scheme,
                        syllables_per_line=[line.syllable_count for line in lines],
                        regularity=dominant.regularity,
                    )
                )
                details["form"] = form.form_type.value

            with _stage(telemetry, "problems") as details:
                problems = identify_problems(lines, meter, rhyme)
                details["problems"] = len(problems)

            with _stage(telemetry, "sections") as details:
                song_structure = analyze_structure(
                    stanza_texts,
                    [[line.stress_pattern for line in stanza.lines] for stanza in stanzas],
                )
                details["pattern"] = song_structure.structure_pattern

            with _stage(telemetry, "phrasing") as details:
                phrasing = analyze_poem_phrases(stanza_texts)
                details["major_breaks"] = len(phrasing.major_break_lines)

            with _stage(telemetry, "melody"):
                melody = suggest_melody(
                    meter, emotion, lines_per_stanza, rhyme, song_structure, phrasing
                )
        except Exception as error:
            record_exception(span, error)
            ANALYSES_RUN.labels(outcome="error").inc()
            _log.exception("Poem analysis failed", context={"lines": len(line_texts)})
            raise

        regularity = (
            METER_REGULARITY_WEIGHT * dominant.regularity
            + RHYME_REGULARITY_WEIGHT * rhyme_consistency(rhyme.scheme)
        )
        analysis = PoemAnalysis(
            meta=PoemMeta(
                title=title,
                line_count=len(lines),
                stanza_count=len(stanzas),
                word_count=sum(len(line.words) for line in lines),
                syllable_count=sum(line.syllable_count for line in lines),
            ),
            structure=StructureAnalysis(stanzas=stanzas),
            prosody=ProsodyAnalysis(meter=meter, rhyme=rhyme, regularity=round(regularity, 4)),
            emotion=emotion,
            form=form,
            problems=problems,
            melody_suggestions=melody,
            sound_patterns=sound_patterns,
            song_structure=song_structure,
        )
        add_span_attributes(
            span,
            {"ghost_note.form": form.form_type.value, "ghost_note.problems": len(problems)},
        )

    elapsed = time.perf_counter() - started
    ANALYSIS_DURATION.observe(elapsed)
    ANALYSES_RUN.labels(outcome="ok").inc()
    if telemetry is not None:
        telemetry.increment("problems", len(problems))
    _log.info(
        "Poem analysed",
        context={
            "lines": analysis.meta.line_count,
            "form": form.form_type.value,
            "meter": meter.detected_meter,
            "problems": len(problems),
            "elapsed_ms": round(elapsed * 1000, 2),
        },
    )
    return analysis


__all__ = [
    "ANALYSES_RUN",
    "ANALYSIS_DURATION",
    "analyze_line",
    "analyze_poem",
    "identify_problems",
]
