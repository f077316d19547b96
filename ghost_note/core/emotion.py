"""Sentiment, emotion keywords and the emotional arc of a poem.

Sentiment comes from VADER's lexicon-and-rules scorer; emotion categories
come from a hand-built keyword lexicon. Both are mapped into valence/arousal
space and from there to musical parameters.
"""

from __future__ import annotations

import math
import re
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from ghost_note.utils.observability import get_logger

from .models import EmotionalAnalysis, EmotionalArcEntry, MusicalMode, MusicParams, VocalRegister

_log = get_logger(__name__).bind(component="emotion")

_WORDS = re.compile(r"[a-z']+")

EMOTION_LEXICON: Dict[str, Dict[str, float]] = {
    "happy": {
        "joy": 1.0, "happy": 1.0, "joyful": 1.0, "delight": 0.9, "delighted": 0.9,
        "cheerful": 0.8, "merry": 0.8, "glad": 0.7, "pleased": 0.7, "content": 0.6,
        "smile": 0.7, "laugh": 0.8, "laughter": 0.8, "celebrate": 0.9, "bliss": 1.0,
        "blissful": 1.0, "ecstatic": 1.0, "elated": 0.9, "jubilant": 0.9, "radiant": 0.8,
        "bright": 0.6, "sunshine": 0.7, "wonderful": 0.8, "amazing": 0.8,
        "fantastic": 0.8, "brilliant": 0.7,
    },
    "sad": {
        "sad": 1.0, "sadness": 1.0, "sorrow": 1.0, "grief": 1.0, "grieve": 1.0,
        "mourn": 0.9, "mourning": 0.9, "weep": 0.9, "weeping": 0.9, "cry": 0.8,
        "crying": 0.8, "tears": 0.7, "tear": 0.6, "melancholy": 0.9, "melancholic": 0.9,
        "despair": 1.0, "hopeless": 0.9, "gloomy": 0.7, "gloom": 0.7, "misery": 1.0,
        "miserable": 1.0, "heartbreak": 1.0, "heartbroken": 1.0, "woe": 0.9,
        "lament": 0.8, "anguish": 1.0, "dejected": 0.8, "somber": 0.7, "bleak": 0.8,
    },
    "angry": {
        "angry": 1.0, "anger": 1.0, "rage": 1.0, "fury": 1.0, "furious": 1.0,
        "wrath": 1.0, "hate": 0.9, "hatred": 0.9, "loathe": 0.9, "despise": 0.8,
        "bitter": 0.7, "bitterness": 0.7, "resentment": 0.8, "resent": 0.7,
        "outrage": 0.9, "outraged": 0.9, "enraged": 1.0, "hostile": 0.8, "fierce": 0.7,
        "violent": 0.9, "vengeance": 0.9, "revenge": 0.8, "scorn": 0.7, "contempt": 0.8,
    },
    "peaceful": {
        "peace": 1.0, "peaceful": 1.0, "calm": 0.9, "calming": 0.9, "serene": 1.0,
        "serenity": 1.0, "tranquil": 1.0, "tranquility": 1.0, "quiet": 0.7,
        "stillness": 0.8, "still": 0.6, "gentle": 0.8, "soft": 0.6, "soothing": 0.9,
        "relaxed": 0.8, "rest": 0.6, "resting": 0.6, "harmony": 0.9, "harmonious": 0.9,
        "placid": 0.8, "mellow": 0.7, "ease": 0.7, "comfortable": 0.6, "content": 0.7,
        "dream": 0.6, "dreaming": 0.6,
    },
    "tense": {
        "tense": 1.0, "tension": 1.0, "anxious": 0.9, "anxiety": 0.9, "nervous": 0.8,
        "worry": 0.8, "worried": 0.8, "stress": 0.8, "stressed": 0.8, "restless": 0.7,
        "uneasy": 0.7, "dread": 0.9, "apprehension": 0.8, "suspense": 0.7,
        "agitated": 0.8, "turmoil": 0.9, "chaos": 0.8, "conflict": 0.7, "struggle": 0.7,
        "fight": 0.6, "storm": 0.7, "stormy": 0.7, "dark": 0.5, "darkness": 0.6,
        "shadow": 0.5, "shadows": 0.5,
    },
    "nostalgic": {
        "nostalgic": 1.0, "nostalgia": 1.0, "memory": 0.7, "memories": 0.7,
        "remember": 0.7, "remembrance": 0.8, "yesterday": 0.6, "past": 0.5, "ago": 0.4,
        "once": 0.4, "childhood": 0.7, "youth": 0.6, "young": 0.5, "old": 0.5,
        "ancient": 0.5, "forgotten": 0.7, "faded": 0.6, "bygone": 0.7, "longing": 0.8,
        "wistful": 0.9, "bittersweet": 0.8, "reminisce": 0.8, "echo": 0.5, "echoes": 0.5,
        "ghost": 0.6, "ghosts": 0.6,
    },
    "hopeful": {
        "hope": 1.0, "hopeful": 1.0, "hoping": 0.9, "dream": 0.7, "dreams": 0.7,
        "dreaming": 0.7, "wish": 0.7, "wishing": 0.7, "aspire": 0.8, "aspiration": 0.8,
        "believe": 0.8, "faith": 0.9, "trust": 0.7, "promise": 0.7, "tomorrow": 0.6,
        "future": 0.6, "new": 0.5, "begin": 0.6, "beginning": 0.6, "dawn": 0.7,
        "sunrise": 0.7, "light": 0.6, "rise": 0.6, "rising": 0.6, "grow": 0.5,
        "growing": 0.5, "bloom": 0.7, "spring": 0.6,
    },
    "fearful": {
        "fear": 1.0, "fearful": 1.0, "afraid": 1.0, "scared": 0.9, "terrified": 1.0,
        "terror": 1.0, "horror": 1.0, "horrified": 1.0, "dread": 0.9, "dreading": 0.9,
        "panic": 0.9, "fright": 0.8, "frightened": 0.8, "nightmare": 0.9, "haunt": 0.7,
        "haunted": 0.7, "creep": 0.6, "creeping": 0.6, "shiver": 0.6, "tremble": 0.7,
        "trembling": 0.7, "chill": 0.5, "cold": 0.4, "danger": 0.7, "dangerous": 0.7,
        "threat": 0.7, "doom": 0.9,
    },
    "loving": {
        "love": 1.0, "loving": 1.0, "beloved": 1.0, "adore": 0.9, "adoring": 0.9,
        "cherish": 0.9, "cherished": 0.9, "affection": 0.8, "affectionate": 0.8,
        "tender": 0.8, "tenderness": 0.8, "warm": 0.6, "warmth": 0.7, "embrace": 0.7,
        "embracing": 0.7, "kiss": 0.7, "caress": 0.7, "heart": 0.6, "sweetheart": 0.8,
        "darling": 0.8, "dear": 0.6, "devotion": 0.9, "devoted": 0.9, "passion": 0.9,
        "passionate": 0.9, "romance": 0.8, "romantic": 0.8,
    },
    "lonely": {
        "lonely": 1.0, "loneliness": 1.0, "alone": 0.8, "solitary": 0.7, "solitude": 0.6,
        "isolated": 0.8, "isolation": 0.8, "abandoned": 0.9, "forsaken": 0.9,
        "deserted": 0.8, "empty": 0.6, "emptiness": 0.7, "void": 0.7, "lost": 0.6,
        "missing": 0.6, "apart": 0.5, "distant": 0.5, "distance": 0.5, "far": 0.4,
        "away": 0.4, "gone": 0.5, "leaving": 0.5, "left": 0.5, "farewell": 0.6,
        "goodbye": 0.6, "parting": 0.6,
    },
}

# Russell's circumplex: (valence, arousal), both in [0, 1].
EMOTION_TO_VA: Dict[str, Tuple[float, float]] = {
    "happy": (0.9, 0.7),
    "sad": (0.2, 0.3),
    "angry": (0.2, 0.9),
    "peaceful": (0.7, 0.2),
    "tense": (0.3, 0.8),
    "nostalgic": (0.4, 0.3),
    "hopeful": (0.8, 0.5),
    "fearful": (0.1, 0.8),
    "loving": (0.9, 0.5),
    "lonely": (0.2, 0.2),
}


@dataclass(frozen=True)
class EmotionMusic:
    mode: MusicalMode
    tempo_range: Tuple[int, int]
    register: VocalRegister
    key: str
    dynamics: str

    def music_params(self) -> MusicParams:
        return MusicParams(mode=self.mode, tempo_range=self.tempo_range, register=self.register)


EMOTION_TO_MUSIC: Dict[str, EmotionMusic] = {
    "happy": EmotionMusic(MusicalMode.MAJOR, (100, 140), VocalRegister.HIGH, "G", "loud"),
    "sad": EmotionMusic(MusicalMode.MINOR, (60, 80), VocalRegister.LOW, "Am", "soft"),
    "angry": EmotionMusic(MusicalMode.MINOR, (120, 160), VocalRegister.VARIED, "Dm", "loud"),
    "peaceful": EmotionMusic(MusicalMode.MAJOR, (60, 90), VocalRegister.MIDDLE, "F", "soft"),
    "tense": EmotionMusic(MusicalMode.MINOR, (80, 110), VocalRegister.MIDDLE, "Em", "moderate"),
    "nostalgic": EmotionMusic(MusicalMode.MINOR, (70, 90), VocalRegister.MIDDLE, "Am", "moderate"),
    "hopeful": EmotionMusic(MusicalMode.MAJOR, (90, 120), VocalRegister.MIDDLE, "D", "moderate"),
    "fearful": EmotionMusic(MusicalMode.MINOR, (90, 130), VocalRegister.VARIED, "Dm", "moderate"),
    "loving": EmotionMusic(MusicalMode.MAJOR, (70, 100), VocalRegister.MIDDLE, "C", "soft"),
    "lonely": EmotionMusic(MusicalMode.MINOR, (60, 80), VocalRegister.LOW, "Em", "soft"),
}

SENTIMENT_VA_WEIGHT = 0.4
KEYWORD_VA_WEIGHT = 0.6
NEUTRAL_VA = (0.5, 0.5)
EMOTIONAL_WORD_SATURATION = 5
TRAJECTORY_THRESHOLD = 0.15
VARIED_VARIANCE = 0.15
DOMINANT_EMOTIONS = 3
FALLBACK_EMOTION = "peaceful"


@dataclass
class SentimentScore:
    compound: float = 0.0
    positive: float = 0.0
    negative: float = 0.0
    neutral: float = 1.0
    emotional_words: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class EmotionKeyword:
    word: str
    emotion: str
    intensity: float


@dataclass
class EmotionArc:
    entries: List[EmotionalArcEntry] = field(default_factory=list)
    trajectory: str = "stable"
    range: float = 0.0
    peak_stanza: int = 0


_analyzer: Optional[SentimentIntensityAnalyzer] = None
_analyzer_lock = threading.Lock()


def _sentiment_analyzer() -> SentimentIntensityAnalyzer:
    global _analyzer
    if _analyzer is None:
        with _analyzer_lock:
            if _analyzer is None:
                _analyzer = SentimentIntensityAnalyzer()
    return _analyzer


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def analyze_sentiment(text: str) -> SentimentScore:
    """VADER polarity of ``text`` plus the words its lexicon scored."""

    if not text or not text.strip():
        return SentimentScore()

    analyzer = _sentiment_analyzer()
    scores = analyzer.polarity_scores(text)
    emotional = [word for word in _WORDS.findall(text.lower()) if word in analyzer.lexicon]
    return SentimentScore(
        compound=_clamp(float(scores.get("compound", 0.0)), -1.0, 1.0),
        positive=float(scores.get("pos", 0.0)),
        negative=float(scores.get("neg", 0.0)),
        neutral=float(scores.get("neu", 1.0)),
        emotional_words=emotional,
    )


def detect_emotional_keywords(text: str) -> List[EmotionKeyword]:
    """Lexicon hits in ``text``; each distinct word is reported once per category."""

    found: List[EmotionKeyword] = []
    seen = set()
    for word in _WORDS.findall((text or "").lower()):
        word = word.strip("'")
        if not word or word in seen:
            continue
        seen.add(word)
        for emotion, lexicon in EMOTION_LEXICON.items():
            if word in lexicon:
                found.append(EmotionKeyword(word=word, emotion=emotion, intensity=lexicon[word]))
    return found


def map_to_valence_arousal(sentiment: SentimentScore) -> Tuple[float, float]:
    valence = (sentiment.compound + 1.0) / 2.0
    word_intensity = min(len(sentiment.emotional_words) / EMOTIONAL_WORD_SATURATION, 1.0)
    arousal = (abs(sentiment.compound) + word_intensity) / 2.0
    return valence, arousal


def blend_keyword_emotions(keywords: Sequence[EmotionKeyword]) -> Tuple[float, float]:
    """Intensity-weighted mean of the keywords' valence/arousal points."""

    total = sum(keyword.intensity for keyword in keywords)
    if not keywords or total <= 0:
        return NEUTRAL_VA
    valence = sum(EMOTION_TO_VA[k.emotion][0] * k.intensity for k in keywords) / total
    arousal = sum(EMOTION_TO_VA[k.emotion][1] * k.intensity for k in keywords) / total
    return valence, arousal


def nearest_emotion(valence: float, arousal: float) -> str:
    best = FALLBACK_EMOTION
    best_distance = math.inf
    for emotion, (target_valence, target_arousal) in EMOTION_TO_VA.items():
        distance = math.hypot(valence - target_valence, arousal - target_arousal)
        if distance < best_distance:
            best, best_distance = emotion, distance
    return best


def music_for_emotion(emotion: Optional[str]) -> Optional[EmotionMusic]:
    return EMOTION_TO_MUSIC.get(emotion or "")


def suggest_musical_parameters(
    dominant_emotions: Sequence[str],
    valence: float,
    arousal: float,
) -> EmotionMusic:
    """Musical settings for the first dominant emotion, else the nearest one in VA space."""

    if dominant_emotions and dominant_emotions[0] in EMOTION_TO_MUSIC:
        return EMOTION_TO_MUSIC[dominant_emotions[0]]
    return EMOTION_TO_MUSIC[nearest_emotion(valence, arousal)]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def determine_trajectory(sentiments: Sequence[float]) -> str:
    if len(sentiments) < 2:
        return "stable"

    third = math.ceil(len(sentiments) / 3)
    difference = _mean(sentiments[-third:]) - _mean(sentiments[:third])
    if abs(difference) > TRAJECTORY_THRESHOLD:
        return "rising" if difference > 0 else "falling"

    mean = _mean(sentiments)
    variance = _mean([(value - mean) ** 2 for value in sentiments])
    if variance > VARIED_VARIANCE:
        return "varied"
    return "stable"


def analyze_emotional_arc(stanzas: Sequence[Sequence[str]]) -> EmotionArc:
    """Per-stanza sentiment with trajectory, range and the most intense stanza."""

    if not stanzas:
        return EmotionArc()

    entries: List[EmotionalArcEntry] = []
    peak_stanza = 0
    peak = 0.0
    for index, stanza in enumerate(stanzas):
        text = " ".join(stanza)
        sentiment = analyze_sentiment(text).compound
        if abs(sentiment) > peak:
            peak, peak_stanza = abs(sentiment), index
        entries.append(
            EmotionalArcEntry(
                stanza=index,
                sentiment=round(sentiment, 4),
                keywords=[keyword.word for keyword in detect_emotional_keywords(text)],
            )
        )

    values = [entry.sentiment for entry in entries]
    return EmotionArc(
        entries=entries,
        trajectory=determine_trajectory(values),
        range=round(max(values) - min(values), 4),
        peak_stanza=peak_stanza,
    )


def dominant_emotions_for(keywords: Sequence[EmotionKeyword], valence: float, arousal: float) -> List[str]:
    totals: Dict[str, float] = {}
    for keyword in keywords:
        totals[keyword.emotion] = totals.get(keyword.emotion, 0.0) + keyword.intensity
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    dominant = [emotion for emotion, _ in ranked[:DOMINANT_EMOTIONS]]
    return dominant or [nearest_emotion(valence, arousal)]


def analyze_emotion(text: str, stanzas: Sequence[Sequence[str]]) -> EmotionalAnalysis:
    """Poem-wide sentiment, arousal, dominant emotions, arc and music parameters."""

    if not text or not text.strip():
        return EmotionalAnalysis()

    sentiment = analyze_sentiment(text)
    keywords = detect_emotional_keywords(text)

    sentiment_valence, sentiment_arousal = map_to_valence_arousal(sentiment)
    keyword_valence, keyword_arousal = blend_keyword_emotions(keywords)
    valence = SENTIMENT_VA_WEIGHT * sentiment_valence + KEYWORD_VA_WEIGHT * keyword_valence
    arousal = SENTIMENT_VA_WEIGHT * sentiment_arousal + KEYWORD_VA_WEIGHT * keyword_arousal

    dominant = dominant_emotions_for(keywords, valence, arousal)
    music = suggest_musical_parameters(dominant, valence, arousal)
    arc = analyze_emotional_arc(stanzas)

    _log.debug(
        "Emotion analysed",
        context={
            "compound": sentiment.compound,
            "arousal": round(arousal, 4),
            "dominant": dominant,
            "trajectory": arc.trajectory,
        },
    )
    return EmotionalAnalysis(
        overall_sentiment=round(sentiment.compound, 4),
        arousal=round(_clamp(arousal, 0.0, 1.0), 4),
        dominant_emotions=dominant,
        emotional_arc=arc.entries,
        suggested_music_params=music.music_params(),
    )


__all__ = [
    "EMOTION_LEXICON",
    "EMOTION_TO_MUSIC",
    "EMOTION_TO_VA",
    "EmotionArc",
    "EmotionKeyword",
    "EmotionMusic",
    "SentimentScore",
    "analyze_emotion",
    "analyze_emotional_arc",
    "analyze_sentiment",
    "blend_keyword_emotions",
    "detect_emotional_keywords",
    "determine_trajectory",
    "dominant_emotions_for",
    "map_to_valence_arousal",
    "music_for_emotion",
    "nearest_emotion",
    "suggest_musical_parameters",
]
