"""Phonetic lookup backed by the CMU pronouncing dictionary."""

from __future__ import annotations

import os
import re
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Set, Tuple

import pronouncing

from ghost_note.utils.observability import create_counter, get_logger

CMUDICT_PATH_ENV = "GHOST_NOTE_CMUDICT_PATH"

VOWEL_PHONEMES: Set[str] = {
    "AA",
    "AE",
    "AH",
    "AO",
    "AW",
    "AY",
    "EH",
    "ER",
    "EY",
    "IH",
    "IY",
    "OW",
    "OY",
    "UH",
    "UW",
}

_WORD_VARIANT_PATTERN = re.compile(r"\(\d+\)$")
_DIGIT_PATTERN = re.compile(r"\d")
_STRESS_DIGIT = re.compile(r"([012])$")
_EDGE_PUNCTUATION = re.compile(r"^[^a-z0-9']+|[^a-z0-9']+$")

_log = get_logger(__name__).bind(component="phonetics")

LOOKUP_MISSES = create_counter(
    "ghost_note_lookup_misses_total",
    "Words the pronouncing dictionary had no entry for.",
)


class PhoneticLookup(Protocol):
    """Anything that maps a word to its stressed ARPAbet pronunciations."""

    def get_pronunciations(self, word: str) -> List[List[str]]:
        ...


def base_phoneme(phoneme: str) -> str:
    """Strip the stress digit from ``phoneme`` (``"AA1"`` -> ``"AA"``)."""

    return _DIGIT_PATTERN.sub("", phoneme or "")


def is_vowel(phoneme: str) -> bool:
    return base_phoneme(phoneme) in VOWEL_PHONEMES


def is_consonant(phoneme: str) -> bool:
    base = base_phoneme(phoneme)
    return bool(base) and base.isalpha() and base not in VOWEL_PHONEMES


def phoneme_stress(phoneme: str) -> Optional[int]:
    """Return the stress digit of a vowel phoneme, or ``None`` for consonants."""

    if not is_vowel(phoneme):
        return None
    match = _STRESS_DIGIT.search(phoneme)
    return int(match.group(1)) if match else 0


def normalize_word(word: str) -> str:
    """Lower-case ``word`` and trim punctuation that never appears in CMU keys."""

    cleaned = _EDGE_PUNCTUATION.sub("", (word or "").strip().lower())
    return cleaned.strip("'") if cleaned.startswith("'") else cleaned


def _strip_variant(word: str) -> str:
    return _WORD_VARIANT_PATTERN.sub("", word).lower()


class CMUDictLoader:
    """Lazy, read-only CMU dictionary.

    With no ``dict_path`` (and no ``GHOST_NOTE_CMUDICT_PATH``) the copy bundled
    with :mod:`pronouncing` is used. A path to a ``cmudict``-format file is
    parsed once on first use. Either way the dictionary is loaded at most once
    per loader, and lookups never raise.
    """

    def __init__(self, dict_path: Optional[Path | str] = None) -> None:
        if dict_path is None:
            dict_path = os.environ.get(CMUDICT_PATH_ENV) or None
        self.dict_path: Optional[Path] = Path(dict_path) if dict_path else None
        self._pronunciations: Dict[str, Tuple[Tuple[str, ...], ...]] = {}
        self._lock = threading.Lock()
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            if self.dict_path is None:
                pronouncing.init_cmu()
            else:
                self._pronunciations = self._read_dict_file(self.dict_path)
            self._loaded = True

    def _read_dict_file(self, path: Path) -> Dict[str, Tuple[Tuple[str, ...], ...]]:
        entries: Dict[str, List[Tuple[str, ...]]] = {}
        try:
            with path.open("r", encoding="utf-8", errors="replace") as handle:
                for line in handle:
                    entry = line.strip()
                    if not entry or entry.startswith(";;;"):
                        continue
                    raw_word, *phones = entry.split()
                    word = _strip_variant(raw_word)
                    if word and phones:
                        entries.setdefault(word, []).append(tuple(phones))
        except OSError as error:
            _log.warning(
                "CMU dictionary file unreadable; lookups will miss",
                context={"path": str(path), "error": str(error)},
            )
            return {}

        _log.info(
            "Loaded CMU dictionary file",
            context={"path": str(path), "words": len(entries)},
        )
        return {word: tuple(variants) for word, variants in entries.items()}

    def _raw_lookup(self, word: str) -> List[List[str]]:
        if self.dict_path is None:
            return [phones.split() for phones in pronouncing.phones_for_word(word)]
        return [list(entry) for entry in self._pronunciations.get(word, ())]

    def get_pronunciations(self, word: str) -> List[List[str]]:
        normalized = normalize_word(word)
        if not normalized:
            return []

        self._ensure_loaded()
        found = self._raw_lookup(normalized)
        if not found and normalized.endswith("in'"):
            # dropped-g spellings such as "singin'"
            found = self._raw_lookup(normalized[:-1] + "g")
        if not found:
            LOOKUP_MISSES.inc()
            _log.debug("No pronunciation", context={"word": normalized})
        return found

    def get_primary(self, word: str) -> Optional[List[str]]:
        variants = self.get_pronunciations(word)
        return variants[0] if variants else None

    def has_word(self, word: str) -> bool:
        return bool(self.get_pronunciations(word))


def primary_pronunciation(
    word: str,
    lookup: Optional[PhoneticLookup] = None,
) -> Optional[List[str]]:
    """First pronunciation variant of ``word`` from ``lookup`` (default loader)."""

    loader = lookup if lookup is not None else DEFAULT_CMU_LOADER
    variants = loader.get_pronunciations(word)
    return list(variants[0]) if variants else None


def extract_vowels(phonemes: Sequence[str]) -> List[str]:
    return [base_phoneme(p) for p in phonemes if is_vowel(p)]


def extract_consonants(phonemes: Sequence[str]) -> List[str]:
    return [p for p in phonemes if is_consonant(p)]


DEFAULT_CMU_LOADER = CMUDictLoader()

__all__ = [
    "CMUDictLoader",
    "CMUDICT_PATH_ENV",
    "DEFAULT_CMU_LOADER",
    "PhoneticLookup",
    "VOWEL_PHONEMES",
    "base_phoneme",
    "extract_consonants",
    "extract_vowels",
    "is_consonant",
    "is_vowel",
    "normalize_word",
    "phoneme_stress",
    "primary_pronunciation",
]
