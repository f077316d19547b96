"""JSON round trip, validation, cloning and partial merge of analyses."""

from __future__ import annotations

import copy
import json
import re
from dataclasses import fields, is_dataclass
from typing import Any, Dict, Mapping, Optional, Union

from ghost_note.utils.observability import get_logger

from .models import PoemAnalysis

_log = get_logger(__name__).bind(component="serialization")

REQUIRED_PROPERTIES = (
    "meta",
    "structure",
    "prosody",
    "emotion",
    "form",
    "problems",
    "melodySuggestions",
)

_SNAKE_SEGMENT = re.compile(r"_([a-z])")


class AnalysisValidationError(ValueError):
    """Raised when data does not have the shape of a ``PoemAnalysis``."""

    def __init__(self, property_name: Optional[str], message: Optional[str] = None) -> None:
        self.property_name = property_name
        if message is None:
            message = f"Invalid PoemAnalysis: missing required property '{property_name}'"
        super().__init__(message)


def _camel(name: str) -> str:
    return _SNAKE_SEGMENT.sub(lambda match: match.group(1).upper(), name)


def _plain(value: Any) -> Any:
    """Render model objects to their JSON-shaped dicts; leave the rest alone."""

    if hasattr(value, "as_dict"):
        return value.as_dict()
    return value


def _check_required(payload: Mapping[str, Any]) -> None:
    for name in REQUIRED_PROPERTIES:
        value = payload.get(name)
        if value is None:
            raise AnalysisValidationError(name)
        if name == "problems":
            if not isinstance(value, list):
                raise AnalysisValidationError(
                    name, f"Invalid PoemAnalysis: property '{name}' must be a list"
                )
        elif not isinstance(value, Mapping):
            raise AnalysisValidationError(
                name, f"Invalid PoemAnalysis: property '{name}' must be an object"
            )


def _build(payload: Mapping[str, Any]) -> PoemAnalysis:
    """``PoemAnalysis.from_dict`` with nested shape errors reported as validation errors."""

    try:
        return PoemAnalysis.from_dict(payload)
    except (TypeError, ValueError, AttributeError) as error:
        raise AnalysisValidationError(None, f"Invalid PoemAnalysis: {error}") from error


def serialize(analysis: PoemAnalysis, pretty: bool = False) -> str:
    """JSON text for ``analysis``; compact unless ``pretty``."""

    payload = analysis.as_dict()
    if pretty:
        return json.dumps(payload, indent=2, ensure_ascii=False)
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def deserialize(text: str) -> PoemAnalysis:
    """Parse JSON produced by :func:`serialize`.

    Raises :class:`AnalysisValidationError` for invalid JSON, a non-object
    root, a missing or wrongly typed top-level property, or nested data that
    does not fit the model.
    """

    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as error:
        raise AnalysisValidationError(None, f"Invalid PoemAnalysis: {error}") from error

    if not isinstance(payload, dict):
        raise AnalysisValidationError(None, "Invalid PoemAnalysis: expected a JSON object")

    _check_required(payload)
    return _build(payload)


def is_poem_analysis(value: Any) -> bool:
    """True when ``value`` is, or has the shape of, a ``PoemAnalysis``."""

    if isinstance(value, PoemAnalysis):
        return True
    if not isinstance(value, Mapping):
        return False
    for name in REQUIRED_PROPERTIES:
        item = value.get(name)
        if name == "problems":
            if not isinstance(item, list):
                return False
        elif not isinstance(item, Mapping):
            return False
    return True


def clone_poem_analysis(analysis: PoemAnalysis) -> PoemAnalysis:
    return copy.deepcopy(analysis)


def _partial_items(partial: Union[PoemAnalysis, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(partial, PoemAnalysis):
        return partial.as_dict()
    if is_dataclass(partial) and not isinstance(partial, type):
        return {_camel(item.name): _plain(getattr(partial, item.name)) for item in fields(partial)}
    if isinstance(partial, Mapping):
        return {_camel(str(key)): _plain(value) for key, value in partial.items()}
    raise AnalysisValidationError(None, "Invalid PoemAnalysis: partial must be a mapping")


def merge_poem_analysis(
    base: PoemAnalysis,
    partial: Union[PoemAnalysis, Mapping[str, Any]],
) -> PoemAnalysis:
    """New analysis with ``partial``'s top-level sections replacing ``base``'s.

    ``meta`` is merged key by key; every other section is replaced whole.
    ``base`` is never modified.
    """

    if isinstance(base, PoemAnalysis):
        merged = base.as_dict()
    elif isinstance(base, Mapping):
        merged = copy.deepcopy(dict(base))
    else:
        raise AnalysisValidationError(None, "Invalid PoemAnalysis: base must be an analysis")
    _check_required(merged)

    updates = _partial_items(partial)
    for key, value in updates.items():
        if key == "meta" and isinstance(value, Mapping):
            meta = dict(merged["meta"])
            meta.update({_camel(str(name)): item for name, item in value.items()})
            merged["meta"] = meta
        else:
            merged[key] = copy.deepcopy(value)

    _check_required(merged)
    _log.debug("Merged analysis", context={"keys": sorted(updates)})
    return _build(merged)


__all__ = [
    "AnalysisValidationError",
    "REQUIRED_PROPERTIES",
    "clone_poem_analysis",
    "deserialize",
    "is_poem_analysis",
    "merge_poem_analysis",
    "serialize",
]
