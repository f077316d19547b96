"""Core prosody and singability analysis for Ghost Note."""

from .analyzer import analyze_line, analyze_poem, identify_problems
from .emotion import analyze_emotion
from .forms import create_form_detection_input, detect_poem_form
from .melody import suggest_melody
from .meter import analyze_multi_line_meter, detect_meter
from .models import PoemAnalysis, create_default_analysis
from .phonetics import CMUDictLoader, DEFAULT_CMU_LOADER, PhoneticLookup
from .phrases import analyze_poem_phrases
from .rhyme import analyze_rhymes, detect_rhyme_scheme
from .serialization import (
    AnalysisValidationError,
    clone_poem_analysis,
    deserialize,
    is_poem_analysis,
    merge_poem_analysis,
    serialize,
)
from .singability import analyze_line_singability
from .sound_patterns import analyze_sound_patterns
from .structure import analyze_structure
from .syllabifier import syllabify, syllabify_word

__all__ = [
    "AnalysisValidationError",
    "CMUDictLoader",
    "DEFAULT_CMU_LOADER",
    "PhoneticLookup",
    "PoemAnalysis",
    "analyze_emotion",
    "analyze_line",
    "analyze_line_singability",
    "analyze_multi_line_meter",
    "analyze_poem",
    "analyze_poem_phrases",
    "analyze_rhymes",
    "analyze_sound_patterns",
    "analyze_structure",
    "clone_poem_analysis",
    "create_default_analysis",
    "create_form_detection_input",
    "deserialize",
    "detect_meter",
    "detect_poem_form",
    "detect_rhyme_scheme",
    "identify_problems",
    "is_poem_analysis",
    "merge_poem_analysis",
    "serialize",
    "suggest_melody",
    "syllabify",
    "syllabify_word",
]
