"""Typed records that make up a :class:`PoemAnalysis`.

Attributes are snake_case; ``as_dict`` renders the camelCase JSON shape that
callers persist and ``from_dict`` reads it back. Closed vocabularies are
``str`` enums so they compare equal to their JSON values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class RhymeType(str, Enum):
    PERFECT = "perfect"
    SLANT = "slant"
    ASSONANCE = "assonance"
    CONSONANCE = "consonance"
    NONE = "none"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


SEVERITY_RANK: Dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
}


class FootType(str, Enum):
    IAMB = "iamb"
    TROCHEE = "trochee"
    ANAPEST = "anapest"
    DACTYL = "dactyl"
    SPONDEE = "spondee"
    UNKNOWN = "unknown"


class ProblemType(str, Enum):
    STRESS_MISMATCH = "stress_mismatch"
    SYLLABLE_VARIANCE = "syllable_variance"
    SINGABILITY = "singability"
    RHYME_BREAK = "rhyme_break"


class SingabilityIssue(str, Enum):
    CONSONANT_CLUSTER = "consonant_cluster"
    CLOSED_VOWEL = "closed_vowel"
    AWKWARD_TRANSITION = "awkward_transition"


class SoundPatternType(str, Enum):
    ALLITERATION = "alliteration"
    ASSONANCE = "assonance"
    CONSONANCE = "consonance"


class MusicalMode(str, Enum):
    MAJOR = "major"
    MINOR = "minor"


class VocalRegister(str, Enum):
    LOW = "low"
    MIDDLE = "middle"
    HIGH = "high"
    VARIED = "varied"


class TimeSignature(str, Enum):
    FOUR_FOUR = "4/4"
    THREE_FOUR = "3/4"
    SIX_EIGHT = "6/8"
    TWO_FOUR = "2/4"


class FormType(str, Enum):
    SHAKESPEAREAN_SONNET = "shakespearean_sonnet"
    PETRARCHAN_SONNET = "petrarchan_sonnet"
    SPENSERIAN_SONNET = "spenserian_sonnet"
    SONNET = "sonnet"
    HAIKU = "haiku"
    TANKA = "tanka"
    LIMERICK = "limerick"
    BALLAD = "ballad"
    COMMON_METER = "common_meter"
    VILLANELLE = "villanelle"
    SESTINA = "sestina"
    ODE = "ode"
    HEROIC_COUPLET = "heroic_couplet"
    COUPLET = "couplet"
    TERZA_RIMA = "terza_rima"
    TERCET = "tercet"
    QUATRAIN = "quatrain"
    CINQUAIN = "cinquain"
    BLANK_VERSE = "blank_verse"
    FREE_VERSE = "free_verse"
    UNKNOWN = "unknown"


class SectionType(str, Enum):
    VERSE = "verse"
    CHORUS = "chorus"
    BRIDGE = "bridge"
    REFRAIN = "refrain"
    INTRO = "intro"
    OUTRO = "outro"


class FormCategory(str, Enum):
    FIXED_FORM = "fixed_form"
    SYLLABIC = "syllabic"
    STANZAIC = "stanzaic"
    METRICAL = "metrical"
    FREE = "free"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Words and lines
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Syllable:
    """One syllable; ``phonemes`` is empty for spelling-estimated syllables."""

    phonemes: Tuple[str, ...]
    stress: int
    vowel_phoneme: str
    is_open: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            "phonemes": list(self.phonemes),
            "stress": self.stress,
            "vowelPhoneme": self.vowel_phoneme,
            "isOpen": self.is_open,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Syllable":
        return cls(
            phonemes=tuple(data.get("phonemes", ())),
            stress=int(data.get("stress", 0)),
            vowel_phoneme=data.get("vowelPhoneme", ""),
            is_open=bool(data.get("isOpen", False)),
        )


@dataclass
class SyllabifiedWord:
    text: str
    syllables: List[Syllable] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "syllables": [syllable.as_dict() for syllable in self.syllables],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SyllabifiedWord":
        return cls(
            text=data.get("text", ""),
            syllables=[Syllable.from_dict(item) for item in data.get("syllables", [])],
        )


@dataclass
class ProblemSpot:
    """A singability issue at a syllable position within a line."""

    position: int
    issue: SingabilityIssue
    severity: Severity
    word: str = ""
    suggestion: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "issue": self.issue.value,
            "severity": self.severity.value,
            "word": self.word,
            "suggestion": self.suggestion,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProblemSpot":
        return cls(
            position=int(data.get("position", 0)),
            issue=SingabilityIssue(data.get("issue", SingabilityIssue.CLOSED_VOWEL.value)),
            severity=Severity(data.get("severity", Severity.LOW.value)),
            word=data.get("word", ""),
            suggestion=data.get("suggestion", ""),
        )


@dataclass
class SingabilityScore:
    syllable_scores: List[float] = field(default_factory=list)
    line_score: float = 0.0
    problem_spots: List[ProblemSpot] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "syllableScores": list(self.syllable_scores),
            "lineScore": self.line_score,
            "problemSpots": [spot.as_dict() for spot in self.problem_spots],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SingabilityScore":
        return cls(
            syllable_scores=[float(score) for score in data.get("syllableScores", [])],
            line_score=float(data.get("lineScore", 0.0)),
            problem_spots=[ProblemSpot.from_dict(item) for item in data.get("problemSpots", [])],
        )


@dataclass
class AnalyzedLine:
    text: str
    words: List[SyllabifiedWord] = field(default_factory=list)
    stress_pattern: str = ""
    syllable_count: int = 0
    singability: SingabilityScore = field(default_factory=SingabilityScore)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "words": [word.as_dict() for word in self.words],
            "stressPattern": self.stress_pattern,
            "syllableCount": self.syllable_count,
            "singability": self.singability.as_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalyzedLine":
        return cls(
            text=data.get("text", ""),
            words=[SyllabifiedWord.from_dict(item) for item in data.get("words", [])],
            stress_pattern=data.get("stressPattern", ""),
            syllable_count=int(data.get("syllableCount", 0)),
            singability=SingabilityScore.from_dict(data.get("singability", {})),
        )


@dataclass
class AnalyzedStanza:
    lines: List[AnalyzedLine] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"lines": [line.as_dict() for line in self.lines]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalyzedStanza":
        return cls(lines=[AnalyzedLine.from_dict(item) for item in data.get("lines", [])])


@dataclass
class StructureAnalysis:
    stanzas: List[AnalyzedStanza] = field(default_factory=list)

    def all_lines(self) -> List[AnalyzedLine]:
        return [line for stanza in self.stanzas for line in stanza.lines]

    def as_dict(self) -> Dict[str, Any]:
        return {"stanzas": [stanza.as_dict() for stanza in self.stanzas]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StructureAnalysis":
        return cls(stanzas=[AnalyzedStanza.from_dict(item) for item in data.get("stanzas", [])])


# ---------------------------------------------------------------------------
# Prosody
# ---------------------------------------------------------------------------


@dataclass
class MeterAnalysis:
    pattern: str = ""
    detected_meter: str = "irregular"
    foot_type: FootType = FootType.UNKNOWN
    feet_per_line: int = 0
    confidence: float = 0.0
    deviations: List[int] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern,
            "detectedMeter": self.detected_meter,
            "footType": self.foot_type.value,
            "feetPerLine": self.feet_per_line,
            "confidence": self.confidence,
            "deviations": list(self.deviations),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MeterAnalysis":
        return cls(
            pattern=data.get("pattern", ""),
            detected_meter=data.get("detectedMeter", "irregular"),
            foot_type=FootType(data.get("footType", FootType.UNKNOWN.value)),
            feet_per_line=int(data.get("feetPerLine", 0)),
            confidence=float(data.get("confidence", 0.0)),
            deviations=[int(item) for item in data.get("deviations", [])],
        )


@dataclass
class RhymeGroup:
    lines: List[int] = field(default_factory=list)
    rhyme_type: RhymeType = RhymeType.SLANT
    end_words: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "lines": list(self.lines),
            "rhymeType": self.rhyme_type.value,
            "endWords": list(self.end_words),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RhymeGroup":
        return cls(
            lines=[int(item) for item in data.get("lines", [])],
            rhyme_type=RhymeType(data.get("rhymeType", RhymeType.SLANT.value)),
            end_words=list(data.get("endWords", [])),
        )


@dataclass
class InternalRhyme:
    line: int
    positions: Tuple[int, int]
    words: Tuple[str, str] = ("", "")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "line": self.line,
            "positions": list(self.positions),
            "words": list(self.words),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InternalRhyme":
        first, second = (list(data.get("positions", [0, 0])) + [0, 0])[:2]
        word_a, word_b = (list(data.get("words", ["", ""])) + ["", ""])[:2]
        return cls(line=int(data.get("line", 0)), positions=(first, second), words=(word_a, word_b))


@dataclass
class RhymeAnalysis:
    scheme: str = ""
    rhyme_groups: Dict[str, RhymeGroup] = field(default_factory=dict)
    internal_rhymes: List[InternalRhyme] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "scheme": self.scheme,
            "rhymeGroups": {letter: group.as_dict() for letter, group in self.rhyme_groups.items()},
            "internalRhymes": [rhyme.as_dict() for rhyme in self.internal_rhymes],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RhymeAnalysis":
        return cls(
            scheme=data.get("scheme", ""),
            rhyme_groups={
                letter: RhymeGroup.from_dict(group)
                for letter, group in data.get("rhymeGroups", {}).items()
            },
            internal_rhymes=[InternalRhyme.from_dict(item) for item in data.get("internalRhymes", [])],
        )


@dataclass
class ProsodyAnalysis:
    meter: MeterAnalysis = field(default_factory=MeterAnalysis)
    rhyme: RhymeAnalysis = field(default_factory=RhymeAnalysis)
    regularity: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "meter": self.meter.as_dict(),
            "rhyme": self.rhyme.as_dict(),
            "regularity": self.regularity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProsodyAnalysis":
        return cls(
            meter=MeterAnalysis.from_dict(data.get("meter", {})),
            rhyme=RhymeAnalysis.from_dict(data.get("rhyme", {})),
            regularity=float(data.get("regularity", 0.0)),
        )


# ---------------------------------------------------------------------------
# Sound patterns
# ---------------------------------------------------------------------------


@dataclass
class SoundPatternOccurrence:
    type: SoundPatternType
    sound: str
    words: List[str] = field(default_factory=list)
    positions: List[int] = field(default_factory=list)
    line_number: int = 0
    strength: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "sound": self.sound,
            "words": list(self.words),
            "positions": list(self.positions),
            "lineNumber": self.line_number,
            "strength": self.strength,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SoundPatternOccurrence":
        return cls(
            type=SoundPatternType(data.get("type", SoundPatternType.ALLITERATION.value)),
            sound=data.get("sound", ""),
            words=list(data.get("words", [])),
            positions=[int(item) for item in data.get("positions", [])],
            line_number=int(data.get("lineNumber", 0)),
            strength=float(data.get("strength", 0.0)),
        )


@dataclass
class LineSoundPatterns:
    line_number: int
    text: str
    alliterations: List[SoundPatternOccurrence] = field(default_factory=list)
    assonances: List[SoundPatternOccurrence] = field(default_factory=list)
    consonances: List[SoundPatternOccurrence] = field(default_factory=list)

    def all_patterns(self) -> List[SoundPatternOccurrence]:
        return [*self.alliterations, *self.assonances, *self.consonances]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "lineNumber": self.line_number,
            "text": self.text,
            "alliterations": [item.as_dict() for item in self.alliterations],
            "assonances": [item.as_dict() for item in self.assonances],
            "consonances": [item.as_dict() for item in self.consonances],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LineSoundPatterns":
        def _items(key: str) -> List[SoundPatternOccurrence]:
            return [SoundPatternOccurrence.from_dict(item) for item in data.get(key, [])]

        return cls(
            line_number=int(data.get("lineNumber", 0)),
            text=data.get("text", ""),
            alliterations=_items("alliterations"),
            assonances=_items("assonances"),
            consonances=_items("consonances"),
        )


@dataclass
class SoundPatternSummary:
    alliteration_count: int = 0
    assonance_count: int = 0
    consonance_count: int = 0
    density: float = 0.0
    top_alliterative_sounds: List[str] = field(default_factory=list)
    top_assonance_sounds: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "alliterationCount": self.alliteration_count,
            "assonanceCount": self.assonance_count,
            "consonanceCount": self.consonance_count,
            "density": self.density,
            "topAlliterativeSounds": list(self.top_alliterative_sounds),
            "topAssonanceSounds": list(self.top_assonance_sounds),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SoundPatternSummary":
        return cls(
            alliteration_count=int(data.get("alliterationCount", 0)),
            assonance_count=int(data.get("assonanceCount", 0)),
            consonance_count=int(data.get("consonanceCount", 0)),
            density=float(data.get("density", 0.0)),
            top_alliterative_sounds=list(data.get("topAlliterativeSounds", [])),
            top_assonance_sounds=list(data.get("topAssonanceSounds", [])),
        )


@dataclass
class SoundPatternAnalysis:
    lines: List[LineSoundPatterns] = field(default_factory=list)
    summary: SoundPatternSummary = field(default_factory=SoundPatternSummary)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "lines": [line.as_dict() for line in self.lines],
            "summary": self.summary.as_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SoundPatternAnalysis":
        return cls(
            lines=[LineSoundPatterns.from_dict(item) for item in data.get("lines", [])],
            summary=SoundPatternSummary.from_dict(data.get("summary", {})),
        )


# ---------------------------------------------------------------------------
# Emotion
# ---------------------------------------------------------------------------


@dataclass
class EmotionalArcEntry:
    stanza: int
    sentiment: float
    keywords: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"stanza": self.stanza, "sentiment": self.sentiment, "keywords": list(self.keywords)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmotionalArcEntry":
        return cls(
            stanza=int(data.get("stanza", 0)),
            sentiment=float(data.get("sentiment", 0.0)),
            keywords=list(data.get("keywords", [])),
        )


@dataclass
class MusicParams:
    mode: MusicalMode = MusicalMode.MAJOR
    tempo_range: Tuple[int, int] = (80, 120)
    register: VocalRegister = VocalRegister.MIDDLE

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "tempoRange": list(self.tempo_range),
            "register": self.register.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MusicParams":
        low, high = (list(data.get("tempoRange", [80, 120])) + [80, 120])[:2]
        return cls(
            mode=MusicalMode(data.get("mode", MusicalMode.MAJOR.value)),
            tempo_range=(int(low), int(high)),
            register=VocalRegister(data.get("register", VocalRegister.MIDDLE.value)),
        )


@dataclass
class EmotionalAnalysis:
    overall_sentiment: float = 0.0
    arousal: float = 0.5
    dominant_emotions: List[str] = field(default_factory=list)
    emotional_arc: List[EmotionalArcEntry] = field(default_factory=list)
    suggested_music_params: MusicParams = field(default_factory=MusicParams)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "overallSentiment": self.overall_sentiment,
            "arousal": self.arousal,
            "dominantEmotions": list(self.dominant_emotions),
            "emotionalArc": [entry.as_dict() for entry in self.emotional_arc],
            "suggestedMusicParams": self.suggested_music_params.as_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmotionalAnalysis":
        return cls(
            overall_sentiment=float(data.get("overallSentiment", 0.0)),
            arousal=float(data.get("arousal", 0.5)),
            dominant_emotions=list(data.get("dominantEmotions", [])),
            emotional_arc=[EmotionalArcEntry.from_dict(item) for item in data.get("emotionalArc", [])],
            suggested_music_params=MusicParams.from_dict(data.get("suggestedMusicParams", {})),
        )


# ---------------------------------------------------------------------------
# Form
# ---------------------------------------------------------------------------


@dataclass
class FormEvidence:
    line_count_match: bool = False
    stanza_structure_match: bool = False
    meter_match: bool = False
    rhyme_scheme_match: bool = False
    syllable_pattern_match: bool = False
    notes: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "lineCountMatch": self.line_count_match,
            "stanzaStructureMatch": self.stanza_structure_match,
            "meterMatch": self.meter_match,
            "rhymeSchemeMatch": self.rhyme_scheme_match,
            "syllablePatternMatch": self.syllable_pattern_match,
            "notes": list(self.notes),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormEvidence":
        return cls(
            line_count_match=bool(data.get("lineCountMatch", False)),
            stanza_structure_match=bool(data.get("stanzaStructureMatch", False)),
            meter_match=bool(data.get("meterMatch", False)),
            rhyme_scheme_match=bool(data.get("rhymeSchemeMatch", False)),
            syllable_pattern_match=bool(data.get("syllablePatternMatch", False)),
            notes=list(data.get("notes", [])),
        )


@dataclass
class AlternativeForm:
    form_type: FormType
    form_name: str
    confidence: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "formType": self.form_type.value,
            "formName": self.form_name,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AlternativeForm":
        return cls(
            form_type=FormType(data.get("formType", FormType.UNKNOWN.value)),
            form_name=data.get("formName", ""),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass
class FormAnalysis:
    form_type: FormType = FormType.UNKNOWN
    form_name: str = "Unknown"
    category: FormCategory = FormCategory.UNKNOWN
    confidence: float = 0.0
    evidence: FormEvidence = field(default_factory=FormEvidence)
    alternatives: List[AlternativeForm] = field(default_factory=list)
    description: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {
            "formType": self.form_type.value,
            "formName": self.form_name,
            "category": self.category.value,
            "confidence": self.confidence,
            "evidence": self.evidence.as_dict(),
            "alternatives": [item.as_dict() for item in self.alternatives],
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormAnalysis":
        return cls(
            form_type=FormType(data.get("formType", FormType.UNKNOWN.value)),
            form_name=data.get("formName", "Unknown"),
            category=FormCategory(data.get("category", FormCategory.UNKNOWN.value)),
            confidence=float(data.get("confidence", 0.0)),
            evidence=FormEvidence.from_dict(data.get("evidence", {})),
            alternatives=[AlternativeForm.from_dict(item) for item in data.get("alternatives", [])],
            description=data.get("description", ""),
        )


# ---------------------------------------------------------------------------
# Song structure
# ---------------------------------------------------------------------------


@dataclass
class Section:
    """Stanzas sung to the same part of a song; a chorus spans its repeats."""

    type: SectionType
    stanza_indices: List[int] = field(default_factory=list)
    label: str = ""
    confidence: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "stanzaIndices": list(self.stanza_indices),
            "label": self.label,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Section":
        return cls(
            type=SectionType(data.get("type", SectionType.VERSE.value)),
            stanza_indices=[int(item) for item in data.get("stanzaIndices", [])],
            label=data.get("label", ""),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass
class Refrain:
    """A line repeated in two or more stanzas; occurrences are (stanza, line)."""

    text: str
    normalized_text: str
    occurrences: List[Tuple[int, int]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "normalizedText": self.normalized_text,
            "occurrences": [list(item) for item in self.occurrences],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Refrain":
        return cls(
            text=data.get("text", ""),
            normalized_text=data.get("normalizedText", ""),
            occurrences=[(int(stanza), int(line)) for stanza, line in data.get("occurrences", [])],
        )


@dataclass
class StanzaSimilarity:
    stanza1: int
    stanza2: int
    overall_similarity: float = 0.0
    text_similarity: float = 0.0
    meter_similarity: float = 0.0
    line_count_match: bool = False
    foot_type_match: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "stanza1": self.stanza1,
            "stanza2": self.stanza2,
            "overallSimilarity": self.overall_similarity,
            "textSimilarity": self.text_similarity,
            "meterSimilarity": self.meter_similarity,
            "lineCountMatch": self.line_count_match,
            "footTypeMatch": self.foot_type_match,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StanzaSimilarity":
        return cls(
            stanza1=int(data.get("stanza1", 0)),
            stanza2=int(data.get("stanza2", 0)),
            overall_similarity=float(data.get("overallSimilarity", 0.0)),
            text_similarity=float(data.get("textSimilarity", 0.0)),
            meter_similarity=float(data.get("meterSimilarity", 0.0)),
            line_count_match=bool(data.get("lineCountMatch", False)),
            foot_type_match=bool(data.get("footTypeMatch", False)),
        )


@dataclass
class SongStructure:
    sections: List[Section] = field(default_factory=list)
    refrains: List[Refrain] = field(default_factory=list)
    similarities: List[StanzaSimilarity] = field(default_factory=list)
    has_verse_chorus_structure: bool = False
    structure_pattern: str = ""
    summary: str = "No stanzas to analyze"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "sections": [section.as_dict() for section in self.sections],
            "refrains": [refrain.as_dict() for refrain in self.refrains],
            "similarities": [item.as_dict() for item in self.similarities],
            "hasVerseChorusStructure": self.has_verse_chorus_structure,
            "structurePattern": self.structure_pattern,
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SongStructure":
        return cls(
            sections=[Section.from_dict(item) for item in data.get("sections", [])],
            refrains=[Refrain.from_dict(item) for item in data.get("refrains", [])],
            similarities=[StanzaSimilarity.from_dict(item) for item in data.get("similarities", [])],
            has_verse_chorus_structure=bool(data.get("hasVerseChorusStructure", False)),
            structure_pattern=data.get("structurePattern", ""),
            summary=data.get("summary", "No stanzas to analyze"),
        )


# ---------------------------------------------------------------------------
# Problems, melody and the root record
# ---------------------------------------------------------------------------


@dataclass
class ProblemReport:
    line: int
    position: int
    type: ProblemType
    severity: Severity
    description: str
    suggested_fix: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "line": self.line,
            "position": self.position,
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
        }
        if self.suggested_fix is not None:
            payload["suggestedFix"] = self.suggested_fix
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProblemReport":
        return cls(
            line=int(data.get("line", 0)),
            position=int(data.get("position", 0)),
            type=ProblemType(data.get("type", ProblemType.SINGABILITY.value)),
            severity=Severity(data.get("severity", Severity.LOW.value)),
            description=data.get("description", ""),
            suggested_fix=data.get("suggestedFix"),
        )


@dataclass
class MelodySuggestions:
    time_signature: TimeSignature = TimeSignature.FOUR_FOUR
    tempo: int = 100
    key: str = "C"
    mode: MusicalMode = MusicalMode.MAJOR
    phrase_breaks: List[int] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "timeSignature": self.time_signature.value,
            "tempo": self.tempo,
            "key": self.key,
            "mode": self.mode.value,
            "phraseBreaks": list(self.phrase_breaks),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MelodySuggestions":
        return cls(
            time_signature=TimeSignature(data.get("timeSignature", TimeSignature.FOUR_FOUR.value)),
            tempo=int(data.get("tempo", 100)),
            key=data.get("key", "C"),
            mode=MusicalMode(data.get("mode", MusicalMode.MAJOR.value)),
            phrase_breaks=[int(item) for item in data.get("phraseBreaks", [])],
        )


@dataclass
class PoemMeta:
    title: Optional[str] = None
    line_count: int = 0
    stanza_count: int = 0
    word_count: int = 0
    syllable_count: int = 0

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.title is not None:
            payload["title"] = self.title
        payload.update(
            {
                "lineCount": self.line_count,
                "stanzaCount": self.stanza_count,
                "wordCount": self.word_count,
                "syllableCount": self.syllable_count,
            }
        )
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PoemMeta":
        return cls(
            title=data.get("title"),
            line_count=int(data.get("lineCount", 0)),
            stanza_count=int(data.get("stanzaCount", 0)),
            word_count=int(data.get("wordCount", 0)),
            syllable_count=int(data.get("syllableCount", 0)),
        )


@dataclass
class PoemAnalysis:
    meta: PoemMeta = field(default_factory=PoemMeta)
    structure: StructureAnalysis = field(default_factory=StructureAnalysis)
    prosody: ProsodyAnalysis = field(default_factory=ProsodyAnalysis)
    emotion: EmotionalAnalysis = field(default_factory=EmotionalAnalysis)
    form: FormAnalysis = field(default_factory=FormAnalysis)
    problems: List[ProblemReport] = field(default_factory=list)
    melody_suggestions: MelodySuggestions = field(default_factory=MelodySuggestions)
    sound_patterns: Optional[SoundPatternAnalysis] = None
    song_structure: Optional[SongStructure] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "meta": self.meta.as_dict(),
            "structure": self.structure.as_dict(),
            "prosody": self.prosody.as_dict(),
            "emotion": self.emotion.as_dict(),
            "form": self.form.as_dict(),
            "problems": [problem.as_dict() for problem in self.problems],
            "melodySuggestions": self.melody_suggestions.as_dict(),
        }
        if self.sound_patterns is not None:
            payload["soundPatterns"] = self.sound_patterns.as_dict()
        if self.song_structure is not None:
            payload["songStructure"] = self.song_structure.as_dict()
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PoemAnalysis":
        sound_patterns = data.get("soundPatterns")
        song_structure = data.get("songStructure")
        return cls(
            meta=PoemMeta.from_dict(data.get("meta", {})),
            structure=StructureAnalysis.from_dict(data.get("structure", {})),
            prosody=ProsodyAnalysis.from_dict(data.get("prosody", {})),
            emotion=EmotionalAnalysis.from_dict(data.get("emotion", {})),
            form=FormAnalysis.from_dict(data.get("form", {})),
            problems=[ProblemReport.from_dict(item) for item in data.get("problems", [])],
            melody_suggestions=MelodySuggestions.from_dict(data.get("melodySuggestions", {})),
            sound_patterns=(
                SoundPatternAnalysis.from_dict(sound_patterns) if sound_patterns is not None else None
            ),
            song_structure=(
                SongStructure.from_dict(song_structure) if song_structure is not None else None
            ),
        )


# ---------------------------------------------------------------------------
# Default constructors
# ---------------------------------------------------------------------------


def create_default_meta(title: Optional[str] = None) -> PoemMeta:
    return PoemMeta(title=title)


def create_default_structure() -> StructureAnalysis:
    return StructureAnalysis()


def create_default_meter() -> MeterAnalysis:
    return MeterAnalysis()


def create_default_rhyme() -> RhymeAnalysis:
    return RhymeAnalysis()


def create_default_prosody() -> ProsodyAnalysis:
    return ProsodyAnalysis()


def create_default_music_params() -> MusicParams:
    return MusicParams()


def create_default_emotion() -> EmotionalAnalysis:
    return EmotionalAnalysis()


def create_default_evidence() -> FormEvidence:
    return FormEvidence()


def create_default_form() -> FormAnalysis:
    return FormAnalysis(description="No content to analyze.")


def create_default_melody() -> MelodySuggestions:
    return MelodySuggestions()


def create_default_singability() -> SingabilityScore:
    return SingabilityScore()


def create_default_sound_patterns() -> SoundPatternAnalysis:
    return SoundPatternAnalysis()


def create_default_song_structure() -> SongStructure:
    return SongStructure()


def create_default_analysis(title: Optional[str] = None) -> PoemAnalysis:
    """A well-formed analysis of an empty poem."""

    return PoemAnalysis(meta=create_default_meta(title), form=create_default_form())


__all__ = [
    "AlternativeForm",
    "AnalyzedLine",
    "AnalyzedStanza",
    "EmotionalAnalysis",
    "EmotionalArcEntry",
    "FootType",
    "FormAnalysis",
    "FormCategory",
    "FormEvidence",
    "FormType",
    "InternalRhyme",
    "LineSoundPatterns",
    "MelodySuggestions",
    "MeterAnalysis",
    "MusicParams",
    "MusicalMode",
    "PoemAnalysis",
    "PoemMeta",
    "ProblemReport",
    "ProblemSpot",
    "ProblemType",
    "ProsodyAnalysis",
    "RhymeAnalysis",
    "RhymeGroup",
    "Refrain",
    "RhymeType",
    "SEVERITY_RANK",
    "Section",
    "SectionType",
    "Severity",
    "SingabilityIssue",
    "SingabilityScore",
    "SoundPatternAnalysis",
    "SoundPatternOccurrence",
    "SoundPatternSummary",
    "SongStructure",
    "SoundPatternType",
    "StanzaSimilarity",
    "StructureAnalysis",
    "Syllable",
    "SyllabifiedWord",
    "TimeSignature",
    "VocalRegister",
    "create_default_analysis",
    "create_default_emotion",
    "create_default_evidence",
    "create_default_form",
    "create_default_melody",
    "create_default_meta",
    "create_default_meter",
    "create_default_music_params",
    "create_default_prosody",
    "create_default_rhyme",
    "create_default_singability",
    "create_default_song_structure",
    "create_default_sound_patterns",
    "create_default_structure",
]
