import json

import pytest

from ghost_note.core.analyzer import analyze_poem
from ghost_note.core.models import (
    MelodySuggestions,
    PoemAnalysis,
    PoemMeta,
    create_default_analysis,
)
from ghost_note.core.serialization import (
    REQUIRED_PROPERTIES,
    AnalysisValidationError,
    clone_poem_analysis,
    deserialize,
    is_poem_analysis,
    merge_poem_analysis,
    serialize,
)


@pytest.fixture
def analysis(dummy_loader):
    return analyze_poem("The cat sat on the mat\nThe dog and the log", dummy_loader, title="Pets")


def test_round_trip_preserves_structure(analysis):
    text = serialize(analysis)
    restored = deserialize(text)

    assert isinstance(restored, PoemAnalysis)
    assert restored == analysis
    assert restored.as_dict() == analysis.as_dict()
    assert json.loads(text)["meta"]["title"] == "Pets"


def test_compact_and_pretty_output(analysis):
    compact = serialize(analysis)
    pretty = serialize(analysis, pretty=True)

    assert "\n" not in compact
    assert '\n  "meta"' in pretty
    assert json.loads(compact) == json.loads(pretty)


@pytest.mark.parametrize("name", REQUIRED_PROPERTIES)
def test_missing_required_property_is_named(name):
    payload = create_default_analysis().as_dict()
    del payload[name]

    with pytest.raises(AnalysisValidationError) as excinfo:
        deserialize(json.dumps(payload))

    assert excinfo.value.property_name == name
    assert name in str(excinfo.value)


@pytest.mark.parametrize("text", ["{not json", "[1, 2]", '"meta"'])
def test_malformed_input_is_rejected(text):
    with pytest.raises(AnalysisValidationError) as excinfo:
        deserialize(text)

    assert excinfo.value.property_name is None


def test_shape_check():
    default = create_default_analysis()
    payload = default.as_dict()

    assert is_poem_analysis(default)
    assert is_poem_analysis(payload)
    assert not is_poem_analysis({"meta": {}})
    assert not is_poem_analysis({**payload, "problems": {}})
    assert not is_poem_analysis("meta")


def test_clone_is_independent(analysis):
    clone = clone_poem_analysis(analysis)

    assert clone == analysis
    clone.meta.title = "Changed"
    clone.structure.stanzas[0].lines[0].words.clear()

    assert analysis.meta.title == "Pets"
    assert analysis.structure.stanzas[0].lines[0].words


def test_merge_updates_meta_keys_and_keeps_base():
    base = create_default_analysis("Base")

    merged = merge_poem_analysis(base, {"meta": {"lineCount": 5}})

    assert merged.meta.line_count == 5
    assert merged.meta.title == "Base"
    assert base.meta.line_count == 0


def test_merge_accepts_snake_case_and_models():
    base = create_default_analysis("Base")

    merged = merge_poem_analysis(
        base,
        {"melody_suggestions": MelodySuggestions(tempo=90), "meta": {"stanza_count": 2}},
    )
    replaced = merge_poem_analysis(base, {"meta": PoemMeta(line_count=2)})

    assert merged.melody_suggestions.tempo == 90
    assert merged.meta.stanza_count == 2
    assert replaced.meta.line_count == 2
    assert replaced.meta.title == "Base"


def test_merge_rejects_removing_a_section():
    with pytest.raises(AnalysisValidationError) as excinfo:
        merge_poem_analysis(create_default_analysis(), {"form": None})

    assert excinfo.value.property_name == "form"


@pytest.mark.parametrize(
    "name, value, expected",
    [
        ("meta", 5, "must be an object"),
        ("prosody", [], "must be an object"),
        ("form", "x", "must be an object"),
        ("problems", {}, "must be a list"),
    ],
)
def test_wrongly_typed_section_is_named(name, value, expected):
    payload = create_default_analysis().as_dict()
    payload[name] = value

    with pytest.raises(AnalysisValidationError) as excinfo:
        deserialize(json.dumps(payload))

    assert excinfo.value.property_name == name
    assert expected in str(excinfo.value)


def test_nested_values_that_do_not_fit_are_rejected():
    payload = create_default_analysis().as_dict()
    payload["prosody"]["meter"]["footType"] = "bogus"

    with pytest.raises(AnalysisValidationError, match="bogus"):
        deserialize(json.dumps(payload))

    payload = create_default_analysis().as_dict()
    payload["structure"]["stanzas"] = [5]

    with pytest.raises(AnalysisValidationError):
        deserialize(json.dumps(payload))


def test_merge_rejects_wrongly_typed_sections():
    base = create_default_analysis()

    with pytest.raises(AnalysisValidationError) as excinfo:
        merge_poem_analysis(base, {"prosody": []})
    assert excinfo.value.property_name == "prosody"

    with pytest.raises(AnalysisValidationError):
        merge_poem_analysis(base, {"melodySuggestions": {"timeSignature": "5/4"}})
