"""Singability scoring: vowel openness, consonant clusters and sustain."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from ghost_note.utils.observability import get_logger

from .models import (
    SEVERITY_RANK,
    AnalyzedLine,
    LineSoundPatterns,
    ProblemSpot,
    Severity,
    SingabilityIssue,
    SingabilityScore,
    Syllable,
    SyllabifiedWord,
)
from .phonetics import (
    PhoneticLookup,
    base_phoneme,
    is_consonant,
    is_vowel,
    primary_pronunciation,
)
from .sound_patterns import calculate_singability_impact

_log = get_logger(__name__).bind(component="singability")

# Open vowels sustain best on long notes; closed ones tire the voice.
VOWEL_OPENNESS: Dict[str, float] = {
    "AA": 1.0,
    "AO": 0.9,
    "AE": 0.8,
    "OW": 0.8,
    "AY": 0.7,
    "EY": 0.7,
    "AW": 0.7,
    "OY": 0.65,
    "EH": 0.6,
    "ER": 0.5,
    "AH": 0.5,
    "IY": 0.4,
    "UW": 0.4,
    "IH": 0.3,
    "UH": 0.3,
}
UNKNOWN_VOWEL_OPENNESS = 0.5

DIFFICULT_CLUSTERS: List[Tuple[str, ...]] = [
    ("S", "T", "R"),
    ("S", "K", "R"),
    ("S", "P", "R"),
    ("S", "P", "L"),
    ("N", "G", "TH", "S"),
    ("K", "S", "T", "S"),
    ("L", "F", "TH", "S"),
    ("S", "T", "S"),
    ("S", "K", "S"),
    ("K", "S"),
    ("T", "S"),
    ("K", "T"),
    ("P", "T"),
    ("B", "D"),
    ("N", "K"),
    ("N", "G", "K"),
    ("M", "P", "T"),
    ("F", "TH"),
    ("TH", "S"),
]

CLUSTER_SUGGESTIONS: Dict[str, str] = {
    "S-T-R": 'Consider "st-" or softer opening',
    "N-G-TH-S": "Very difficult cluster; consider rephrasing",
    "K-S-T-S": "Multiple sibilants; consider simpler word",
    "S-T-S": 'Sibilant cluster; consider "-st" ending word',
    "S-K-S": "Harsh combination; consider rephrasing",
    "K-T": "Consider word ending in single consonant",
    "P-T": "Consider word ending in single consonant",
    "F-TH": "Difficult fricative combo; consider simpler word",
}

VOWEL_SUGGESTIONS: Dict[str, str] = {
    "IH": 'Short "i" is hard to sustain; consider open vowel',
    "UH": 'Short "u" is hard to sustain; consider open vowel',
    "IY": 'Long "ee" can be sustained but is brighter; consider "ah" or "oh"',
    "UW": 'Long "oo" can be sustained; consider if warmth is needed',
}

# Longest consonant run -> (base penalty, ceiling after difficult-cluster bonuses).
CLUSTER_TIERS: Dict[int, Tuple[float, float]] = {
    2: (0.2, 0.4),
    3: (0.5, 0.7),
    4: (0.8, 1.0),
}
DIFFICULT_CLUSTER_BONUS = 0.1

SONORANT_CODAS = frozenset({"L", "M", "N", "NG", "R"})
OPEN_SYLLABLE_BONUS = 0.15
SONORANT_CODA_BONUS = 0.1
SUSTAIN_CLUSTER_WEIGHT = 0.3
WORD_CLUSTER_WEIGHT = 0.5

CLOSED_VOWEL_THRESHOLD = 0.35
CLOSED_VOWEL_MEDIUM = 0.3
HIGH_SEVERITY_RUN = 4
MEDIUM_SEVERITY_RUN = 3
DIFFICULT_WORD_PENALTY = 0.4


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _consonant_runs(phonemes: Sequence[str]) -> List[List[str]]:
    runs: List[List[str]] = []
    current: List[str] = []
    for phoneme in phonemes:
        if is_consonant(phoneme):
            current.append(base_phoneme(phoneme))
            continue
        if current:
            runs.append(current)
        current = []
    if current:
        runs.append(current)
    return runs


def _is_subsequence(pattern: Sequence[str], target: Sequence[str]) -> bool:
    if len(pattern) > len(target):
        return False
    remaining = iter(target)
    return all(any(item == wanted for item in remaining) for wanted in pattern)


def longest_consonant_run(phonemes: Optional[Sequence[str]]) -> int:
    return max((len(run) for run in _consonant_runs(phonemes or ())), default=0)


def find_difficult_cluster(phonemes: Sequence[str]) -> Optional[str]:
    """Key of the first known difficult cluster inside a consonant run."""

    runs = _consonant_runs(phonemes)
    for pattern in DIFFICULT_CLUSTERS:
        if any(_is_subsequence(pattern, run) for run in runs):
            return "-".join(pattern)
    return None


def score_vowel_openness(phonemes: Optional[Sequence[str]]) -> float:
    """Openness of the first vowel in ``phonemes``; 0 when there is none."""

    for phoneme in phonemes or ():
        if is_vowel(phoneme):
            return VOWEL_OPENNESS.get(base_phoneme(phoneme), UNKNOWN_VOWEL_OPENNESS)
    return 0.0


def score_consonant_clusters(phonemes: Optional[Sequence[str]]) -> float:
    """Penalty in [0, 1] for consonant runs of two or more.

    The base comes from the longest run; every known difficult cluster found
    inside a run adds a little, never past the ceiling of that run's tier so
    a longer run always scores at least as high as a shorter one.
    """

    runs = [run for run in _consonant_runs(phonemes or ()) if len(run) > 1]
    if not runs:
        return 0.0

    longest = min(max(len(run) for run in runs), max(CLUSTER_TIERS))
    penalty, ceiling = CLUSTER_TIERS[longest]
    for run in runs:
        for pattern in DIFFICULT_CLUSTERS:
            if _is_subsequence(pattern, run):
                penalty += DIFFICULT_CLUSTER_BONUS
    return round(min(ceiling, penalty), 4)


def score_sustainability(syllable: Optional[Syllable]) -> float:
    """How well ``syllable`` holds a long note, in [0, 1]."""

    if syllable is None or not syllable.phonemes:
        return 0.0

    score = score_vowel_openness(syllable.phonemes)
    if syllable.is_open:
        score += OPEN_SYLLABLE_BONUS
    elif base_phoneme(syllable.phonemes[-1]) in SONORANT_CODAS:
        score += SONORANT_CODA_BONUS
    score -= SUSTAIN_CLUSTER_WEIGHT * score_consonant_clusters(syllable.phonemes)
    return round(_clamp(score), 4)


def _word_phonemes(word: SyllabifiedWord, lookup: Optional[PhoneticLookup]) -> List[str]:
    phonemes = [phoneme for syllable in word.syllables for phoneme in syllable.phonemes]
    if phonemes or lookup is None:
        return phonemes
    return primary_pronunciation(word.text, lookup) or []


def _onset(syllable: Syllable) -> List[str]:
    onset: List[str] = []
    for phoneme in syllable.phonemes:
        if not is_consonant(phoneme):
            break
        onset.append(phoneme)
    return onset


def _word_problems(word: str, phonemes: Sequence[str], position: int) -> List[ProblemSpot]:
    problems: List[ProblemSpot] = []

    run = longest_consonant_run(phonemes)
    if run >= MEDIUM_SEVERITY_RUN:
        cluster = find_difficult_cluster(phonemes)
        if cluster is not None:
            suggestion = CLUSTER_SUGGESTIONS.get(cluster, f'Difficult consonant cluster in "{word}"')
        else:
            suggestion = f'Consider simpler word instead of "{word}"'
        problems.append(
            ProblemSpot(
                position=position,
                issue=SingabilityIssue.CONSONANT_CLUSTER,
                severity=Severity.HIGH if run >= HIGH_SEVERITY_RUN else Severity.MEDIUM,
                word=word,
                suggestion=suggestion,
            )
        )

    openness = score_vowel_openness(phonemes)
    if 0 < openness <= CLOSED_VOWEL_THRESHOLD:
        vowel = next(base_phoneme(p) for p in phonemes if is_vowel(p))
        problems.append(
            ProblemSpot(
                position=position,
                issue=SingabilityIssue.CLOSED_VOWEL,
                severity=Severity.MEDIUM if openness <= CLOSED_VOWEL_MEDIUM else Severity.LOW,
                word=word,
                suggestion=VOWEL_SUGGESTIONS.get(vowel, f'Closed vowel in "{word}" may be hard to sustain'),
            )
        )

    return problems


def identify_problem_spots(
    line: Optional[AnalyzedLine],
    lookup: Optional[PhoneticLookup] = None,
) -> List[ProblemSpot]:
    """Singability trouble spots in ``line``, positioned by syllable index.

    Clusters are measured within each word so a word boundary never joins
    two runs.
    """

    if line is None or not line.words:
        return []

    problems: List[ProblemSpot] = []
    position = 0
    for word in line.words:
        phonemes = _word_phonemes(word, lookup)
        if phonemes:
            problems.extend(_word_problems(word.text, phonemes, position))

        for index, (current, following) in enumerate(zip(word.syllables, word.syllables[1:])):
            if current.phonemes and not current.is_open and len(_onset(following)) >= 2:
                problems.append(
                    ProblemSpot(
                        position=position + index,
                        issue=SingabilityIssue.AWKWARD_TRANSITION,
                        severity=Severity.LOW,
                        word=word.text,
                        suggestion=f'Transition within "{word.text}" may be choppy',
                    )
                )
        position += len(word.syllables)

    return problems


def _syllable_scores(line: AnalyzedLine) -> List[Tuple[float, bool]]:
    return [
        (score_sustainability(syllable), bool(syllable.phonemes))
        for word in line.words
        for syllable in word.syllables
    ]


def _mean_of_scored(scores: Sequence[Tuple[float, bool]]) -> float:
    scored = [value for value, has_phonemes in scores if has_phonemes]
    if not scored:
        return 0.0
    return round(sum(scored) / len(scored), 4)


def calculate_line_singability(line: Optional[AnalyzedLine]) -> float:
    """Mean sustainability of the line's dictionary-backed syllables."""

    if line is None or not line.words:
        return 0.0
    return _mean_of_scored(_syllable_scores(line))


def analyze_line_singability(
    line: Optional[AnalyzedLine],
    lookup: Optional[PhoneticLookup] = None,
) -> SingabilityScore:
    if line is None or not line.words:
        return SingabilityScore()

    scores = _syllable_scores(line)
    result = SingabilityScore(
        syllable_scores=[value for value, _ in scores],
        line_score=_mean_of_scored(scores),
        problem_spots=identify_problem_spots(line, lookup),
    )
    _log.debug(
        "Scored line",
        context={
            "line": line.text,
            "line_score": result.line_score,
            "problems": len(result.problem_spots),
        },
    )
    return result


# ---------------------------------------------------------------------------
# Word level
# ---------------------------------------------------------------------------


def score_word_singability(word: str, lookup: Optional[PhoneticLookup] = None) -> Optional[float]:
    """Openness minus half the cluster penalty; ``None`` for unknown words."""

    if not word or not word.strip():
        return None
    phonemes = primary_pronunciation(word, lookup)
    if not phonemes:
        return None
    score = score_vowel_openness(phonemes) - WORD_CLUSTER_WEIGHT * score_consonant_clusters(phonemes)
    return round(max(0.0, score), 4)


def get_primary_vowel(word: str, lookup: Optional[PhoneticLookup] = None) -> Optional[str]:
    phonemes = primary_pronunciation(word, lookup)
    if not phonemes:
        return None
    vowels = [phoneme for phoneme in phonemes if is_vowel(phoneme)]
    stressed = [phoneme for phoneme in vowels if phoneme.endswith("1")]
    if stressed:
        return stressed[0]
    return vowels[0] if vowels else None


def has_difficult_clusters(word: str, lookup: Optional[PhoneticLookup] = None) -> bool:
    phonemes = primary_pronunciation(word, lookup)
    if not phonemes:
        return False
    return score_consonant_clusters(phonemes) >= DIFFICULT_WORD_PENALTY


# ---------------------------------------------------------------------------
# Batch helpers
# ---------------------------------------------------------------------------


def analyze_multiple_lines(
    lines: Sequence[AnalyzedLine],
    lookup: Optional[PhoneticLookup] = None,
) -> List[SingabilityScore]:
    return [analyze_line_singability(line, lookup) for line in lines]


def calculate_average_singability(scores: Sequence[SingabilityScore]) -> float:
    if not scores:
        return 0.0
    return sum(score.line_score for score in scores) / len(scores)


def collect_problem_spots(
    scores: Sequence[SingabilityScore],
    min_severity: Optional[Severity] = None,
) -> List[Tuple[int, ProblemSpot]]:
    """All problem spots at or above ``min_severity``, tagged with line index."""

    floor = SEVERITY_RANK[Severity(min_severity)] if min_severity is not None else 0
    return [
        (line_index, problem)
        for line_index, score in enumerate(scores)
        for problem in score.problem_spots
        if SEVERITY_RANK[problem.severity] >= floor
    ]


def adjust_singability_for_sound_patterns(
    score: SingabilityScore,
    patterns: LineSoundPatterns,
) -> SingabilityScore:
    """Return a copy of ``score`` with the sound-pattern impact applied."""

    adjusted = _clamp(score.line_score + calculate_singability_impact(patterns))
    return SingabilityScore(
        syllable_scores=list(score.syllable_scores),
        line_score=round(adjusted, 4),
        problem_spots=list(score.problem_spots),
    )


__all__ = [
    "CLUSTER_SUGGESTIONS",
    "CLUSTER_TIERS",
    "DIFFICULT_CLUSTERS",
    "VOWEL_OPENNESS",
    "VOWEL_SUGGESTIONS",
    "adjust_singability_for_sound_patterns",
    "analyze_line_singability",
    "analyze_multiple_lines",
    "calculate_average_singability",
    "calculate_line_singability",
    "collect_problem_spots",
    "find_difficult_cluster",
    "get_primary_vowel",
    "has_difficult_clusters",
    "identify_problem_spots",
    "longest_consonant_run",
    "score_consonant_clusters",
    "score_sustainability",
    "score_vowel_openness",
    "score_word_singability",
]
