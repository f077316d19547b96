"""Split ARPAbet pronunciations into syllables."""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ghost_note.utils.observability import get_logger
from ghost_note.utils.syllables import estimate_stress_pattern

from .models import Syllable, SyllabifiedWord
from .phonetics import (
    PhoneticLookup,
    base_phoneme,
    is_vowel,
    phoneme_stress,
    primary_pronunciation,
)
from .preprocess import split_compound

_log = get_logger(__name__).bind(component="syllabifier")

# Consonant sequences English allows at the start of a syllable. Intervocalic
# consonants are split so the following syllable takes the longest of these.
LEGAL_ONSETS: FrozenSet[Tuple[str, ...]] = frozenset(
    tuple(onset.split())
    for onset in (
        # stop or fricative + liquid / glide
        "P R", "P L", "P Y", "B R", "B L", "B Y", "T R", "T W", "D R", "D W",
        "K R", "K L", "K W", "K Y", "G R", "G L", "G W", "F R", "F L", "F Y",
        "V Y", "TH R", "TH W", "SH R", "HH Y", "HH W", "M Y", "N Y",
        # s + consonant
        "S P", "S T", "S K", "S M", "S N", "S L", "S W", "S F",
        "S P R", "S P L", "S P Y", "S T R", "S K R", "S K W", "S K L", "S K Y",
    )
)
_NO_ONSET = frozenset({"NG"})


def _is_legal_onset(consonants: Sequence[str]) -> bool:
    bases = tuple(base_phoneme(phoneme) for phoneme in consonants)
    if not bases:
        return True
    if len(bases) == 1:
        return bases[0] not in _NO_ONSET
    return bases in LEGAL_ONSETS


def _split_cluster(consonants: Sequence[str]) -> int:
    """Index where the coda of one syllable ends and the next onset begins."""

    for split in range(len(consonants) + 1):
        if _is_legal_onset(consonants[split:]):
            return split
    return len(consonants)


def syllabify(word: str, phonemes: Optional[Sequence[str]]) -> Optional[SyllabifiedWord]:
    """Group ``phonemes`` into syllables around their vowel nuclei.

    Consonants between two nuclei go to the later syllable as far as English
    onsets allow. Returns ``None`` when there is no vowel to build on.
    """

    if not phonemes:
        return None

    sequence = [phoneme for phoneme in phonemes if phoneme]
    nuclei = [index for index, phoneme in enumerate(sequence) if is_vowel(phoneme)]
    if not nuclei:
        _log.warning(
            "Pronunciation has no vowel; word skipped",
            context={"word": word, "phonemes": list(sequence)},
        )
        return None

    boundaries: List[int] = [0]
    for current, following in zip(nuclei, nuclei[1:]):
        between = sequence[current + 1 : following]
        boundaries.append(current + 1 + _split_cluster(between))
    boundaries.append(len(sequence))

    syllables: List[Syllable] = []
    for position, nucleus in enumerate(nuclei):
        chunk = tuple(sequence[boundaries[position] : boundaries[position + 1]])
        vowel = sequence[nucleus]
        syllables.append(
            Syllable(
                phonemes=chunk,
                stress=phoneme_stress(vowel) or 0,
                vowel_phoneme=vowel,
                is_open=chunk[-1] == vowel,
            )
        )

    return SyllabifiedWord(text=word, syllables=syllables)


def syllabify_word(word: str, lookup: Optional[PhoneticLookup] = None) -> Optional[SyllabifiedWord]:
    """Syllabify ``word`` from its primary pronunciation.

    Hyphenated compounds missing from the dictionary are assembled from their
    parts. Unknown words return ``None``.
    """

    phonemes = primary_pronunciation(word, lookup)
    if phonemes:
        return syllabify(word, phonemes)

    parts = split_compound(word)
    if len(parts) < 2:
        return None

    syllables: List[Syllable] = []
    for part in parts:
        piece = syllabify_word(part, lookup)
        if piece is None:
            return None
        syllables.extend(piece.syllables)
    return SyllabifiedWord(text=word, syllables=syllables)


def estimate_syllables(word: str) -> SyllabifiedWord:
    """Placeholder syllables for a word with no known pronunciation."""

    pattern = estimate_stress_pattern(word) or "1"
    last = len(pattern) - 1
    return SyllabifiedWord(
        text=word,
        syllables=[
            Syllable(phonemes=(), stress=int(digit), vowel_phoneme="", is_open=index == last)
            for index, digit in enumerate(pattern)
        ],
    )


def build_word(word: str, lookup: Optional[PhoneticLookup] = None) -> SyllabifiedWord:
    """Dictionary syllabification, falling back to the spelling estimate."""

    result = syllabify_word(word, lookup)
    return result if result is not None else estimate_syllables(word)


def is_estimated(word: SyllabifiedWord) -> bool:
    return bool(word.syllables) and all(not syllable.phonemes for syllable in word.syllables)


def count_syllables(words: Iterable[SyllabifiedWord]) -> int:
    return sum(len(word.syllables) for word in words)


def word_stress_pattern(word: SyllabifiedWord) -> str:
    """Raw stress digits of ``word`` (``"102"`` keeps secondary stress)."""

    return "".join(str(syllable.stress) for syllable in word.syllables)


def word_phonemes(word: SyllabifiedWord) -> List[str]:
    return [phoneme for syllable in word.syllables for phoneme in syllable.phonemes]


__all__ = [
    "LEGAL_ONSETS",
    "build_word",
    "count_syllables",
    "estimate_syllables",
    "is_estimated",
    "syllabify",
    "syllabify_word",
    "word_phonemes",
    "word_stress_pattern",
]
