from ghost_note.core.phonetics import (
    CMUDictLoader,
    base_phoneme,
    is_consonant,
    is_vowel,
    normalize_word,
    phoneme_stress,
    primary_pronunciation,
)
from ghost_note.core.preprocess import split_lines, split_stanzas, tokenize_words
from ghost_note.core.syllabifier import (
    build_word,
    count_syllables,
    estimate_syllables,
    is_estimated,
    syllabify,
    syllabify_word,
    word_stress_pattern,
)
from ghost_note.utils.syllables import estimate_stress_pattern, estimate_syllable_count


def test_phoneme_helpers_strip_and_read_stress():
    assert base_phoneme("AA1") == "AA"
    assert is_vowel("ER0")
    assert not is_vowel("NG")
    assert is_consonant("NG")
    assert phoneme_stress("EH2") == 2
    assert phoneme_stress("T") is None


def test_normalize_word_trims_edge_punctuation():
    assert normalize_word("Hello,") == "hello"
    assert normalize_word('"sun-kissed"') == "sun-kissed"


def test_loader_reads_dictionary_file_once(tmp_path):
    dict_path = tmp_path / "cmudict.dict"
    dict_path.write_text(
        ";;; comment line\nTEST  T EH1 S T\nTEST(1)  T EH1 S\n",
        encoding="utf-8",
    )
    loader = CMUDictLoader(dict_path=dict_path)

    assert loader.get_pronunciations("Test") == [["T", "EH1", "S", "T"], ["T", "EH1", "S"]]
    assert loader.get_primary("test") == ["T", "EH1", "S", "T"]
    assert loader.has_word("test")
    assert loader.get_pronunciations("missing") == []
    assert loader.get_primary("missing") is None


def test_loader_with_unreadable_file_misses_without_raising(tmp_path):
    loader = CMUDictLoader(dict_path=tmp_path / "absent.dict")

    assert loader.get_pronunciations("test") == []
    assert not loader.has_word("test")


def test_loader_uses_environment_path(tmp_path, monkeypatch):
    dict_path = tmp_path / "env.dict"
    dict_path.write_text("SINGING  S IH1 NG IH0 NG\n", encoding="utf-8")
    monkeypatch.setenv("GHOST_NOTE_CMUDICT_PATH", str(dict_path))

    loader = CMUDictLoader()

    assert loader.get_pronunciations("singing") == [["S", "IH1", "NG", "IH0", "NG"]]
    assert loader.get_pronunciations("singin'") == [["S", "IH1", "NG", "IH0", "NG"]]


def test_primary_pronunciation_uses_injected_lookup(dummy_loader):
    assert primary_pronunciation("Cat", dummy_loader) == ["K", "AE1", "T"]
    assert primary_pronunciation("zzyzx", dummy_loader) is None


def test_split_stanzas_on_blank_lines():
    text = "one line\r\ntwo line\n\n\n  three line\nfour line\n"

    assert split_stanzas(text) == [["one line", "two line"], ["three line", "four line"]]
    assert split_lines(text) == ["one line", "two line", "three line", "four line"]
    assert split_stanzas("   \n\n  ") == []


def test_tokenize_words_keeps_contractions_and_compounds():
    words = tokenize_words("Don't stop, sun-kissed singin' 'quoted'")

    assert words == ["Don't", "stop", "sun-kissed", "singin'", "quoted"]


def test_estimate_syllable_count_rules():
    assert estimate_syllable_count("table") == 2
    assert estimate_syllable_count("make") == 1
    assert estimate_syllable_count("jumped") == 1
    assert estimate_syllable_count("wanted") == 2
    assert estimate_syllable_count("rhythm") == 1
    assert estimate_syllable_count("") == 1


def test_estimate_stress_pattern_shapes():
    assert estimate_stress_pattern("cat") == "1"
    assert estimate_stress_pattern("banana") == "100"
    assert estimate_stress_pattern("") == ""


def test_syllabify_prefers_maximal_legal_onset():
    word = syllabify("extra", ["EH1", "K", "S", "T", "R", "AH0"])

    assert [syllable.phonemes for syllable in word.syllables] == [
        ("EH1", "K"),
        ("S", "T", "R", "AH0"),
    ]
    assert [syllable.is_open for syllable in word.syllables] == [False, True]
    assert [syllable.stress for syllable in word.syllables] == [1, 0]


def test_syllabify_splits_illegal_cluster():
    word = syllabify("window", ["W", "IH1", "N", "D", "OW0"])

    assert [syllable.phonemes for syllable in word.syllables] == [("W", "IH1", "N"), ("D", "OW0")]
    assert word.syllables[0].vowel_phoneme == "IH1"


def test_syllabify_without_vowel_returns_none():
    assert syllabify("hmm", ["HH", "M"]) is None
    assert syllabify("empty", []) is None


def test_syllabify_word_assembles_unknown_compounds(dummy_loader):
    word = syllabify_word("sun-sky", dummy_loader)

    assert word is not None
    assert len(word.syllables) == 2
    assert syllabify_word("zzyzx", dummy_loader) is None


def test_unknown_words_get_placeholder_syllables(dummy_loader):
    word = build_word("banana", dummy_loader)

    assert is_estimated(word)
    assert word_stress_pattern(word) == "100"
    assert all(not syllable.phonemes for syllable in word.syllables)
    assert estimate_syllables("cat").syllables[0].is_open


def test_count_syllables_sums_words(dummy_loader):
    words = [build_word(token, dummy_loader) for token in ("happy", "window", "cat")]

    assert count_syllables(words) == 5
    assert word_stress_pattern(words[0]) == "10"
