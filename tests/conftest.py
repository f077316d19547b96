import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ghost_note.core.phonetics import normalize_word


PRONUNCIATIONS = {
    "a": "AH0",
    "the": "DH AH0",
    "and": "AH0 N D",
    "cat": "K AE1 T",
    "hat": "HH AE1 T",
    "bat": "B AE1 T",
    "dog": "D AO1 G",
    "log": "L AO1 G",
    "sun": "S AH1 N",
    "run": "R AH1 N",
    "fun": "F AH1 N",
    "moon": "M UW1 N",
    "june": "JH UW1 N",
    "soon": "S UW1 N",
    "love": "L AH1 V",
    "day": "D EY1",
    "may": "M EY1",
    "sat": "S AE1 T",
    "on": "AA1 N",
    "mat": "M AE1 T",
    "big": "B IH1 G",
    "bad": "B AE1 D",
    "bold": "B OW1 L D",
    "bright": "B R AY1 T",
    "blue": "B L UW1",
    "sea": "S IY1",
    "sings": "S IH1 NG Z",
    "sky": "S K AY1",
    "strengths": "S T R EH1 NG K TH S",
    "texts": "T EH1 K S T S",
    "extra": "EH1 K S T R AH0",
    "about": "AH0 B AW1 T",
    "open": "OW1 P AH0 N",
    "window": "W IH1 N D OW0",
    "happy": "HH AE1 P IY0",
    "hello": "HH AH0 L OW1",
    "father": "F AA1 DH ER0",
    "yellow": "Y EH1 L OW0",
    "heart": "HH AA1 R T",
    "glimpsed": "G L IH1 M P S T",
}


class DummyLoader:
    """Pronunciation lookup over a small fixed word list."""

    def __init__(self, entries=None) -> None:
        source = PRONUNCIATIONS if entries is None else entries
        self._entries = {word: [phones.split()] for word, phones in source.items()}
        self.calls = []

    def get_pronunciations(self, word):
        self.calls.append(word)
        return [list(variant) for variant in self._entries.get(normalize_word(word), [])]


@pytest.fixture
def dummy_loader():
    """Lookup that knows only ``PRONUNCIATIONS``."""

    return DummyLoader()
