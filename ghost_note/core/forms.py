"""Classify a poem against a catalogue of named forms.

Each catalogue entry scores the poem's line/stanza counts, meter, rhyme
scheme and syllable counts, accumulating a confidence and the evidence that
produced it. Rhyme schemes are compared case-sensitively because letters
past ``Z`` continue in lower case.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple

from ghost_note.utils.observability import get_logger

from .models import (
    AlternativeForm,
    FootType,
    FormAnalysis,
    FormCategory,
    FormEvidence,
    FormType,
)

_log = get_logger(__name__).bind(component="forms")

MIN_ALTERNATIVE_CONFIDENCE = 0.3
MAX_ALTERNATIVES = 3

SONNET_FORMS = frozenset(
    {
        FormType.SHAKESPEAREAN_SONNET,
        FormType.PETRARCHAN_SONNET,
        FormType.SPENSERIAN_SONNET,
        FormType.SONNET,
    }
)


@dataclass
class FormDetectionInput:
    line_count: int = 0
    stanza_count: int = 0
    lines_per_stanza: List[int] = field(default_factory=list)
    meter_foot_type: FootType = FootType.UNKNOWN
    meter_name: str = ""
    meter_confidence: float = 0.0
    rhyme_scheme: str = ""
    syllables_per_line: List[int] = field(default_factory=list)
    avg_syllables_per_line: float = 0.0
    regularity: float = 0.0

    @property
    def pentameter(self) -> bool:
        return self.meter_foot_type is FootType.IAMB and "pentameter" in self.meter_name.lower()

    @property
    def iambic(self) -> bool:
        return self.meter_foot_type is FootType.IAMB


def create_form_detection_input(
    line_count: int,
    stanza_count: int,
    lines_per_stanza: Sequence[int],
    meter_foot_type: FootType,
    meter_name: str,
    meter_confidence: float,
    rhyme_scheme: str,
    syllables_per_line: Sequence[int],
    regularity: float,
) -> FormDetectionInput:
    total = sum(syllables_per_line)
    return FormDetectionInput(
        line_count=line_count,
        stanza_count=stanza_count,
        lines_per_stanza=list(lines_per_stanza),
        meter_foot_type=meter_foot_type,
        meter_name=meter_name,
        meter_confidence=meter_confidence,
        rhyme_scheme=rhyme_scheme,
        syllables_per_line=list(syllables_per_line),
        avg_syllables_per_line=total / line_count if line_count > 0 else 0.0,
        regularity=regularity,
    )


CheckResult = Tuple[float, FormEvidence]


@dataclass(frozen=True)
class FormDefinition:
    type: FormType
    name: str
    category: FormCategory
    description: str
    check: Callable[[FormDetectionInput], CheckResult]


# ---------------------------------------------------------------------------
# Matching helpers
# ---------------------------------------------------------------------------


def _matches(scheme: str, pattern: str) -> bool:
    return re.fullmatch(pattern, scheme) is not None


def _syllables_match(actual: Sequence[int], expected: Sequence[int], tolerance: int = 1) -> bool:
    if len(actual) != len(expected):
        return False
    return all(abs(count - target) <= tolerance for count, target in zip(actual, expected))


def _all_stanzas(lines_per_stanza: Sequence[int], size: int) -> bool:
    return all(lines == size for lines in lines_per_stanza)


def _unique_ratio(scheme: str) -> float:
    return len(set(scheme)) / max(1, len(scheme))


def _pairs_rhyme(scheme: str) -> bool:
    return all(scheme[index] == scheme[index + 1] for index in range(0, len(scheme) - 1, 2))


class _Tally:
    """Running confidence plus evidence for one form check."""

    def __init__(self) -> None:
        self.confidence = 0.0
        self.evidence = FormEvidence()

    def add(self, amount: float, note: str, flag: str = "") -> None:
        self.confidence += amount
        self.evidence.notes.append(note)
        if flag:
            setattr(self.evidence, flag, True)

    def result(self) -> CheckResult:
        return min(1.0, self.confidence), self.evidence


# ---------------------------------------------------------------------------
# Sonnets
# ---------------------------------------------------------------------------


def _check_shakespearean(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 14:
        tally.add(0.25, "Has 14 lines", "line_count_match")
    elif 12 <= data.line_count <= 16:
        tally.add(0.1, f"Has {data.line_count} lines (expected 14)")

    scheme = data.rhyme_scheme
    if scheme == "ABABCDCDEFEFGG":
        tally.add(0.35, "Perfect Shakespearean rhyme scheme ABABCDCDEFEFGG", "rhyme_scheme_match")
    elif _matches(scheme, r"ABAB.?CDCD.?EFEF.?GG"):
        tally.add(0.25, "Approximate Shakespearean rhyme scheme", "rhyme_scheme_match")
    elif scheme.endswith("GG"):
        tally.add(0.1, "Ends with couplet")

    if data.pentameter:
        tally.add(0.25, "Uses iambic pentameter", "meter_match")
    elif data.iambic:
        tally.add(0.1, "Uses iambic meter")

    if _syllables_match(data.syllables_per_line, [10] * 14, 2):
        tally.add(0.15, "~10 syllables per line", "syllable_pattern_match")
    elif 8 <= data.avg_syllables_per_line <= 12:
        tally.add(0.05, f"Average {data.avg_syllables_per_line:.1f} syllables per line")
    return tally.result()


_PETRARCHAN_SESTETS = ("CDCDCD", "CDECDE", "CDDCEE", "CDDECE")


def _check_petrarchan(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 14:
        tally.add(0.25, "Has 14 lines", "line_count_match")

    scheme = data.rhyme_scheme
    if any(scheme == "ABBAABBA" + sestet for sestet in _PETRARCHAN_SESTETS):
        tally.add(0.35, "Perfect Petrarchan rhyme scheme", "rhyme_scheme_match")
    elif scheme.startswith("ABBAABBA"):
        tally.add(0.25, "Has Petrarchan octave ABBAABBA", "rhyme_scheme_match")

    if data.pentameter:
        tally.add(0.25, "Uses iambic pentameter", "meter_match")

    if data.stanza_count == 2 and list(data.lines_per_stanza) == [8, 6]:
        tally.add(0.15, "Has octave and sestet structure", "stanza_structure_match")
    return tally.result()


def _check_spenserian(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 14:
        tally.add(0.25, "Has 14 lines", "line_count_match")

    scheme = data.rhyme_scheme
    if scheme == "ABABBCBCCDCDEE":
        tally.add(0.4, "Perfect Spenserian rhyme scheme ABABBCBCCDCDEE", "rhyme_scheme_match")
    elif _matches(scheme, r"ABAB.?BCBC.?CDCD.?EE"):
        tally.add(0.25, "Approximate Spenserian interlocking scheme", "rhyme_scheme_match")

    if data.pentameter:
        tally.add(0.25, "Uses iambic pentameter", "meter_match")
    return tally.result()


def _check_sonnet(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 14:
        tally.add(0.4, "Has 14 lines (sonnet length)", "line_count_match")
    elif 12 <= data.line_count <= 16:
        tally.add(0.15, f"Has {data.line_count} lines (near sonnet length)")

    if data.iambic:
        tally.evidence.meter_match = True
        if data.pentameter:
            tally.add(0.3, "Uses iambic pentameter")
        else:
            tally.add(0.15, "Uses iambic meter")

    if len(data.rhyme_scheme) >= 10 and _unique_ratio(data.rhyme_scheme) < 0.7:
        tally.add(0.2, "Has structured rhyme scheme", "rhyme_scheme_match")
    return tally.result()


# ---------------------------------------------------------------------------
# Syllabic forms
# ---------------------------------------------------------------------------


def _check_haiku(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 3:
        tally.add(0.3, "Has 3 lines", "line_count_match")

    if len(data.syllables_per_line) == 3:
        first, second, third = data.syllables_per_line
        if (first, second, third) == (5, 7, 5):
            tally.add(0.6, "Perfect 5-7-5 syllable pattern", "syllable_pattern_match")
        elif _syllables_match(data.syllables_per_line, [5, 7, 5], 1):
            tally.add(0.4, f"Near 5-7-5 pattern ({first}-{second}-{third})", "syllable_pattern_match")
        else:
            total = first + second + third
            if 15 <= total <= 19:
                tally.add(0.2, f"Total {total} syllables (near 17)")

    if len(set(data.rhyme_scheme)) == len(data.rhyme_scheme):
        tally.add(0.1, "No rhyme (typical for haiku)")
    return tally.result()


def _check_tanka(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 5:
        tally.add(0.25, "Has 5 lines", "line_count_match")

    counts = data.syllables_per_line
    if len(counts) == 5:
        expected = [5, 7, 5, 7, 7]
        if _syllables_match(counts, expected, 0):
            tally.add(0.6, "Perfect 5-7-5-7-7 syllable pattern", "syllable_pattern_match")
        elif _syllables_match(counts, expected, 1):
            pattern = "-".join(str(count) for count in counts)
            tally.add(0.4, f"Near 5-7-5-7-7 pattern ({pattern})", "syllable_pattern_match")
        elif 28 <= sum(counts) <= 34:
            tally.add(0.15, f"Total {sum(counts)} syllables (near 31)")
    return tally.result()


def _check_cinquain(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 5:
        tally.add(0.3, "Has 5 lines", "line_count_match")

    counts = data.syllables_per_line
    if len(counts) == 5:
        expected = [2, 4, 6, 8, 2]
        if _syllables_match(counts, expected, 0):
            tally.add(0.5, "Perfect 2-4-6-8-2 syllable pattern", "syllable_pattern_match")
        elif _syllables_match(counts, expected, 1):
            tally.add(0.35, "Near 2-4-6-8-2 syllable pattern", "syllable_pattern_match")
        elif counts[0] < counts[1] < counts[2] < counts[3] and counts[4] < counts[3]:
            tally.add(0.2, "Has building-tapering structure")

    if len(set(data.rhyme_scheme)) >= len(data.rhyme_scheme) - 1:
        tally.add(0.1, "Minimal rhyme (typical for cinquain)")
    return tally.result()


# ---------------------------------------------------------------------------
# Fixed forms
# ---------------------------------------------------------------------------


def _check_limerick(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 5:
        tally.add(0.25, "Has 5 lines", "line_count_match")

    scheme = data.rhyme_scheme
    if scheme == "AABBA":
        tally.add(0.35, "Perfect AABBA rhyme scheme", "rhyme_scheme_match")
    elif len(scheme) == 5 and scheme[0] == scheme[1] == scheme[4] and scheme[2] == scheme[3]:
        tally.add(0.25, "Has AABBA-style rhyme pattern", "rhyme_scheme_match")

    if data.meter_foot_type is FootType.ANAPEST:
        tally.add(0.25, "Uses anapestic meter", "meter_match")
    elif data.meter_foot_type in (FootType.IAMB, FootType.DACTYL):
        tally.add(0.1, "Uses compatible meter")

    counts = data.syllables_per_line
    if len(counts) == 5:
        s1, s2, s3, s4, s5 = counts
        if s1 > s3 and s2 > s4 and s5 > s3 and s3 < 7 and s4 < 7:
            tally.add(0.15, "Has long-long-short-short-long structure", "syllable_pattern_match")
    return tally.result()


def _check_villanelle(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 19:
        tally.add(0.3, "Has 19 lines", "line_count_match")
    elif 17 <= data.line_count <= 21:
        tally.add(0.1, f"Has {data.line_count} lines (near 19)")

    if data.stanza_count == 6 and list(data.lines_per_stanza) == [3, 3, 3, 3, 3, 4]:
        tally.add(0.3, "Has 5 tercets and 1 quatrain", "stanza_structure_match")

    scheme = data.rhyme_scheme
    if _matches(scheme, r"(?:ABA){5}ABAA") or _matches(scheme, r"A.A(?:.{3}){4}.{4}"):
        tally.add(0.3, "Has villanelle ABA rhyme pattern", "rhyme_scheme_match")
    elif re.match(r"(?:ABA)+", scheme[:15]):
        tally.add(0.15, "Has ABA tercet pattern")

    if data.pentameter:
        tally.add(0.1, "Uses iambic pentameter", "meter_match")
    return tally.result()


def _check_sestina(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.line_count == 39:
        tally.add(0.35, "Has 39 lines", "line_count_match")
    elif 36 <= data.line_count <= 42:
        tally.add(0.15, f"Has {data.line_count} lines (near 39)")

    if data.stanza_count == 7 and list(data.lines_per_stanza) == [6, 6, 6, 6, 6, 6, 3]:
        tally.add(0.35, "Has 6 sextets and 3-line envoi", "stanza_structure_match")
    elif data.stanza_count >= 6 and 6 in data.lines_per_stanza:
        tally.add(0.15, "Has six-line stanzas")

    if len(data.rhyme_scheme) >= 36 and len(set(data.rhyme_scheme)) <= 8:
        tally.add(0.2, "Has limited rhyme variety (suggests end-word rotation)")

    if data.iambic:
        tally.add(0.1, "Uses iambic meter", "meter_match")
    return tally.result()


def _check_terza_rima(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if _all_stanzas(data.lines_per_stanza, 3):
        tally.add(0.25, "Has 3-line stanzas (tercets)", "stanza_structure_match")

    scheme = data.rhyme_scheme
    if len(scheme) >= 6 and all(
        scheme[index + 1] == scheme[index + 3] for index in range(0, len(scheme) - 3, 3)
    ):
        tally.add(0.4, "Has interlocking ABA BCB rhyme pattern", "rhyme_scheme_match")

    if data.pentameter:
        tally.add(0.2, "Uses iambic pentameter", "meter_match")

    if data.line_count % 3 in (0, 1):
        tally.add(0.1, "Line count compatible with tercets", "line_count_match")
    return tally.result()


# ---------------------------------------------------------------------------
# Metrical forms
# ---------------------------------------------------------------------------


def _check_heroic_couplet(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    scheme = data.rhyme_scheme
    if _matches(scheme, r"(?:AA|BB|CC|DD|EE|FF|GG|HH|II|JJ)+"):
        tally.add(0.35, "Has rhyming couplet pattern", "rhyme_scheme_match")
    elif _pairs_rhyme(scheme) and len(scheme) >= 4:
        tally.add(0.3, "Lines rhyme in pairs", "rhyme_scheme_match")

    if data.pentameter:
        tally.add(0.4, "Uses iambic pentameter", "meter_match")
    elif data.iambic:
        tally.add(0.2, "Uses iambic meter")

    if 9 <= data.avg_syllables_per_line <= 11:
        tally.add(0.15, "~10 syllables per line", "syllable_pattern_match")

    if data.line_count >= 2 and data.line_count % 2 == 0:
        tally.add(0.1, "Even number of lines", "line_count_match")
    return tally.result()


def _check_blank_verse(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.pentameter:
        tally.add(0.45, "Uses iambic pentameter", "meter_match")
    elif data.iambic:
        tally.add(0.2, "Uses iambic meter")

    density = _unique_ratio(data.rhyme_scheme)
    if density >= 0.8:
        tally.add(0.35, "Unrhymed or minimal rhyme", "rhyme_scheme_match")
    elif density >= 0.6:
        tally.add(0.15, "Sparse rhyme")

    if 9 <= data.avg_syllables_per_line <= 11:
        tally.add(0.15, "~10 syllables per line", "syllable_pattern_match")

    if data.line_count >= 10:
        tally.add(0.05, "Substantial length", "line_count_match")
    return tally.result()


def _alternating(counts: Sequence[int], tolerance: int) -> bool:
    return all(abs(count - (8 if index % 2 == 0 else 6)) <= tolerance for index, count in enumerate(counts))


def _check_common_meter(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if _all_stanzas(data.lines_per_stanza, 4):
        tally.add(0.2, "Has 4-line stanzas", "stanza_structure_match")

    if data.iambic:
        tally.add(0.25, "Uses iambic meter", "meter_match")

    if len(data.syllables_per_line) >= 4 and _alternating(data.syllables_per_line, 1):
        tally.add(0.35, "Has strict 8-6-8-6 syllable pattern", "syllable_pattern_match")

    if _matches(data.rhyme_scheme, r"(?:ABAB)+") or _matches(data.rhyme_scheme, r"(?:ABCB)+"):
        tally.add(0.2, "Has common meter rhyme pattern", "rhyme_scheme_match")
    return tally.result()


# ---------------------------------------------------------------------------
# Stanzaic forms
# ---------------------------------------------------------------------------


def _check_ballad(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if _all_stanzas(data.lines_per_stanza, 4):
        tally.add(0.25, "Has 4-line stanzas (quatrains)", "stanza_structure_match")

    if any(_matches(data.rhyme_scheme, pattern) for pattern in (r"(?:ABAB)+", r"(?:ABCB)+", r"(?:XAXA)+")):
        tally.add(0.3, "Has ABAB/ABCB rhyme pattern", "rhyme_scheme_match")

    if data.iambic:
        tally.add(0.25, "Uses iambic meter", "meter_match")

    if len(data.syllables_per_line) >= 4 and _alternating(data.syllables_per_line, 2):
        tally.add(0.2, "Has alternating 8-6 syllable pattern", "syllable_pattern_match")
    return tally.result()


def _check_ode(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if data.stanza_count >= 3:
        tally.add(0.15, f"Has {data.stanza_count} stanzas", "stanza_structure_match")

    if data.lines_per_stanza:
        average = sum(data.lines_per_stanza) / len(data.lines_per_stanza)
        if average >= 6:
            tally.add(0.15, f"Average {average:.1f} lines per stanza")

    if data.rhyme_scheme and 0.3 < _unique_ratio(data.rhyme_scheme) < 0.8:
        tally.add(0.2, "Has moderate rhyme scheme complexity", "rhyme_scheme_match")

    if data.iambic:
        tally.add(0.15, "Uses iambic meter", "meter_match")

    if data.line_count >= 20:
        tally.add(0.15, "Has substantial length", "line_count_match")
    return tally.result()


def _any_meter(tally: _Tally, data: FormDetectionInput) -> None:
    if data.meter_foot_type is not FootType.UNKNOWN:
        tally.add(0.1, f"Uses {data.meter_foot_type.value} meter", "meter_match")


def _check_tercet(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if _all_stanzas(data.lines_per_stanza, 3):
        tally.add(0.35, "Has 3-line stanzas", "stanza_structure_match")
    if data.line_count >= 3 and data.line_count % 3 == 0:
        tally.add(0.2, "Line count divisible by 3", "line_count_match")
    if len(data.rhyme_scheme) >= 3:
        tally.add(0.15, "Has rhyme scheme", "rhyme_scheme_match")
    _any_meter(tally, data)
    return tally.result()


def _check_quatrain(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if _all_stanzas(data.lines_per_stanza, 4):
        tally.add(0.35, "Has 4-line stanzas", "stanza_structure_match")
    if data.line_count >= 4 and data.line_count % 4 == 0:
        tally.add(0.2, "Line count divisible by 4", "line_count_match")
    patterns = (r"(?:ABAB)+", r"(?:AABB)+", r"(?:ABBA)+", r"(?:ABCB)+")
    if any(_matches(data.rhyme_scheme, pattern) for pattern in patterns):
        tally.add(0.25, "Has quatrain rhyme pattern", "rhyme_scheme_match")
    _any_meter(tally, data)
    return tally.result()


def _check_couplet(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    if len(data.rhyme_scheme) >= 2 and _pairs_rhyme(data.rhyme_scheme):
        tally.add(0.4, "Lines rhyme in pairs", "rhyme_scheme_match")
    if data.line_count >= 2 and data.line_count % 2 == 0:
        tally.add(0.2, "Even number of lines", "line_count_match")
    if _all_stanzas(data.lines_per_stanza, 2):
        tally.add(0.2, "Has 2-line stanzas", "stanza_structure_match")
    _any_meter(tally, data)
    return tally.result()


# ---------------------------------------------------------------------------
# Free verse
# ---------------------------------------------------------------------------


def _check_free_verse(data: FormDetectionInput) -> CheckResult:
    tally = _Tally()
    tally.confidence = 0.2

    if data.regularity < 0.5:
        tally.add(0.2, "Irregular meter", "meter_match")

    if _unique_ratio(data.rhyme_scheme) >= 0.7:
        tally.add(0.2, "Minimal or no rhyme", "rhyme_scheme_match")

    counts = data.syllables_per_line
    if len(counts) >= 3 and max(counts) - min(counts) >= 5:
        tally.add(0.15, "Variable line lengths", "syllable_pattern_match")

    if len(data.lines_per_stanza) >= 2 and len(set(data.lines_per_stanza)) > 1:
        tally.add(0.1, "Variable stanza structure", "stanza_structure_match")

    if data.meter_confidence > 0.7:
        tally.confidence *= 0.7
        tally.evidence.notes.append("Strong meter detected")
    return tally.result()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

# Specific forms come first so they win confidence ties.
FORM_DEFINITIONS: List[FormDefinition] = [
    FormDefinition(
        FormType.SHAKESPEAREAN_SONNET,
        "Shakespearean Sonnet",
        FormCategory.FIXED_FORM,
        "A 14-line poem in iambic pentameter with rhyme scheme ABABCDCDEFEFGG "
        "(three quatrains and a couplet).",
        _check_shakespearean,
    ),
    FormDefinition(
        FormType.PETRARCHAN_SONNET,
        "Petrarchan Sonnet",
        FormCategory.FIXED_FORM,
        "A 14-line poem with an octave (ABBAABBA) and sestet (CDCDCD, CDECDE, or similar).",
        _check_petrarchan,
    ),
    FormDefinition(
        FormType.SPENSERIAN_SONNET,
        "Spenserian Sonnet",
        FormCategory.FIXED_FORM,
        "A 14-line poem with interlocking rhyme scheme ABABBCBCCDCDEE.",
        _check_spenserian,
    ),
    FormDefinition(
        FormType.HAIKU,
        "Haiku",
        FormCategory.SYLLABIC,
        "A Japanese form with 3 lines of 5-7-5 syllables (17 total), traditionally about nature.",
        _check_haiku,
    ),
    FormDefinition(
        FormType.TANKA,
        "Tanka",
        FormCategory.SYLLABIC,
        "A Japanese form with 5 lines of 5-7-5-7-7 syllables (31 total).",
        _check_tanka,
    ),
    FormDefinition(
        FormType.CINQUAIN,
        "Cinquain",
        FormCategory.SYLLABIC,
        "A 5-line poem with syllable pattern 2-4-6-8-2.",
        _check_cinquain,
    ),
    FormDefinition(
        FormType.LIMERICK,
        "Limerick",
        FormCategory.FIXED_FORM,
        "A 5-line humorous poem with AABBA rhyme scheme and anapestic meter.",
        _check_limerick,
    ),
    FormDefinition(
        FormType.VILLANELLE,
        "Villanelle",
        FormCategory.FIXED_FORM,
        "A 19-line poem with 5 tercets and a quatrain, using two refrains and ABA rhyme throughout.",
        _check_villanelle,
    ),
    FormDefinition(
        FormType.SESTINA,
        "Sestina",
        FormCategory.FIXED_FORM,
        "A 39-line poem with 6 six-line stanzas and a 3-line envoi, using end-word rotation.",
        _check_sestina,
    ),
    FormDefinition(
        FormType.TERZA_RIMA,
        "Terza Rima",
        FormCategory.FIXED_FORM,
        "Interlocking tercets with ABA BCB CDC... rhyme scheme.",
        _check_terza_rima,
    ),
    FormDefinition(
        FormType.HEROIC_COUPLET,
        "Heroic Couplet",
        FormCategory.METRICAL,
        "Pairs of rhyming lines in iambic pentameter.",
        _check_heroic_couplet,
    ),
    FormDefinition(
        FormType.BLANK_VERSE,
        "Blank Verse",
        FormCategory.METRICAL,
        "Unrhymed iambic pentameter.",
        _check_blank_verse,
    ),
    FormDefinition(
        FormType.COMMON_METER,
        "Common Meter",
        FormCategory.METRICAL,
        "Alternating lines of iambic tetrameter (8 syllables) and iambic trimeter (6 syllables) "
        "with ABAB or ABCB rhyme.",
        _check_common_meter,
    ),
    FormDefinition(
        FormType.BALLAD,
        "Ballad",
        FormCategory.STANZAIC,
        "A narrative poem with 4-line stanzas, alternating iambic tetrameter and trimeter, "
        "ABAB or ABCB rhyme.",
        _check_ballad,
    ),
    FormDefinition(
        FormType.ODE,
        "Ode",
        FormCategory.STANZAIC,
        "A lyric poem with elaborate structure, typically praising or addressing a subject.",
        _check_ode,
    ),
    FormDefinition(
        FormType.TERCET,
        "Tercet",
        FormCategory.STANZAIC,
        "A poem composed of three-line stanzas.",
        _check_tercet,
    ),
    FormDefinition(
        FormType.QUATRAIN,
        "Quatrain",
        FormCategory.STANZAIC,
        "A poem composed of four-line stanzas.",
        _check_quatrain,
    ),
    FormDefinition(
        FormType.COUPLET,
        "Couplet",
        FormCategory.STANZAIC,
        "A poem composed of rhyming pairs of lines.",
        _check_couplet,
    ),
    FormDefinition(
        FormType.SONNET,
        "Sonnet",
        FormCategory.FIXED_FORM,
        "A 14-line poem, typically in iambic pentameter with a defined rhyme scheme.",
        _check_sonnet,
    ),
    FormDefinition(
        FormType.FREE_VERSE,
        "Free Verse",
        FormCategory.FREE,
        "Poetry without consistent meter, rhyme scheme, or stanza structure.",
        _check_free_verse,
    ),
]

_BY_TYPE = {definition.type: definition for definition in FORM_DEFINITIONS}


def detect_poem_form(data: FormDetectionInput) -> FormAnalysis:
    """Best matching form with evidence and up to three alternatives."""

    if data.line_count == 0:
        return FormAnalysis(description="No content to analyze.")

    scored = []
    for definition in FORM_DEFINITIONS:
        confidence, evidence = definition.check(data)
        if confidence > 0:
            scored.append((definition, confidence, evidence))
    scored.sort(key=lambda item: item[1], reverse=True)

    if not scored:
        return FormAnalysis(
            form_name="Unknown Form",
            description="Could not identify a specific poem form.",
        )

    best, confidence, evidence = scored[0]
    alternatives = [
        AlternativeForm(form_type=item.type, form_name=item.name, confidence=round(score, 4))
        for item, score, _ in scored[1 : 1 + MAX_ALTERNATIVES]
        if score >= MIN_ALTERNATIVE_CONFIDENCE
    ]
    _log.debug(
        "Form detected",
        context={
            "form": best.type.value,
            "confidence": round(confidence, 4),
            "alternatives": [item.form_type.value for item in alternatives],
        },
    )
    return FormAnalysis(
        form_type=best.type,
        form_name=best.name,
        category=best.category,
        confidence=round(confidence, 4),
        evidence=evidence,
        alternatives=alternatives,
        description=best.description,
    )


def get_form_name(form_type: FormType) -> str:
    definition = _BY_TYPE.get(form_type)
    return definition.name if definition else "Unknown Form"


def get_form_description(form_type: FormType) -> str:
    definition = _BY_TYPE.get(form_type)
    return definition.description if definition else ""


def get_all_form_types() -> List[FormType]:
    return [definition.type for definition in FORM_DEFINITIONS]


def get_forms_by_category(category: FormCategory) -> List[FormType]:
    return [definition.type for definition in FORM_DEFINITIONS if definition.category is category]


def is_sonnet_form(form_type: FormType) -> bool:
    return form_type in SONNET_FORMS


__all__ = [
    "FORM_DEFINITIONS",
    "FormDefinition",
    "FormDetectionInput",
    "create_form_detection_input",
    "detect_poem_form",
    "get_all_form_types",
    "get_form_description",
    "get_form_name",
    "get_forms_by_category",
    "is_sonnet_form",
]
