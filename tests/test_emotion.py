import pytest

from ghost_note.core.emotion import (
    EmotionKeyword,
    SentimentScore,
    analyze_emotion,
    analyze_emotional_arc,
    analyze_sentiment,
    blend_keyword_emotions,
    detect_emotional_keywords,
    determine_trajectory,
    dominant_emotions_for,
    map_to_valence_arousal,
    music_for_emotion,
    nearest_emotion,
    suggest_musical_parameters,
)
from ghost_note.core.models import EmotionalAnalysis, MusicalMode, VocalRegister

JOYFUL = "I am so happy and full of joy, I love the bright sunshine"
GRIEVING = "Grief and sorrow, I weep alone in despair and tears"


def test_sentiment_polarity_from_vader():
    assert analyze_sentiment(JOYFUL).compound > 0
    assert analyze_sentiment(GRIEVING).compound < 0
    assert analyze_sentiment("   ") == SentimentScore()


def test_keywords_are_reported_once_per_category():
    keywords = detect_emotional_keywords("Dream, dream of peace")
    pairs = {(keyword.word, keyword.emotion) for keyword in keywords}

    assert ("dream", "peaceful") in pairs
    assert ("dream", "hopeful") in pairs
    assert ("peace", "peaceful") in pairs
    assert len(keywords) == 3


def test_valence_arousal_mapping():
    sentiment = SentimentScore(compound=0.5, emotional_words=["a"] * 5)

    assert map_to_valence_arousal(sentiment) == pytest.approx((0.75, 0.75))
    assert blend_keyword_emotions([]) == (0.5, 0.5)
    blended = blend_keyword_emotions(
        [EmotionKeyword("joy", "happy", 1.0), EmotionKeyword("sad", "sad", 1.0)]
    )
    assert blended == pytest.approx((0.55, 0.5))


def test_nearest_emotion_and_music_table():
    assert nearest_emotion(0.2, 0.3) == "sad"
    assert suggest_musical_parameters([], 0.9, 0.7) is music_for_emotion("happy")
    assert music_for_emotion("sad").key == "Am"
    assert music_for_emotion("sad").register is VocalRegister.LOW
    assert music_for_emotion("bored") is None


def test_dominant_emotions_ranked_by_intensity():
    keywords = detect_emotional_keywords(JOYFUL)

    assert dominant_emotions_for(keywords, 0.5, 0.5)[0] == "happy"
    assert dominant_emotions_for([], 0.2, 0.2) == ["lonely"]


@pytest.mark.parametrize(
    "sentiments, expected",
    [
        ([-0.5, 0.0, 0.5], "rising"),
        ([0.5, 0.0, -0.5], "falling"),
        ([0.9, -0.9, 0.9], "varied"),
        ([0.1, 0.1], "stable"),
        ([0.8], "stable"),
    ],
)
def test_determine_trajectory(sentiments, expected):
    assert determine_trajectory(sentiments) == expected


def test_emotional_arc_per_stanza():
    arc = analyze_emotional_arc([[JOYFUL], [GRIEVING]])

    assert [entry.stanza for entry in arc.entries] == [0, 1]
    assert arc.entries[0].sentiment > 0 > arc.entries[1].sentiment
    assert "joy" in arc.entries[0].keywords
    assert arc.trajectory == "falling"
    assert arc.range > 0
    assert analyze_emotional_arc([]).entries == []


def test_positive_poem_suggests_major_mode():
    analysis = analyze_emotion(JOYFUL, [[JOYFUL]])

    assert analysis.overall_sentiment > 0
    assert analysis.dominant_emotions[0] == "happy"
    assert analysis.suggested_music_params.mode is MusicalMode.MAJOR
    assert 0.0 <= analysis.arousal <= 1.0
    assert len(analysis.emotional_arc) == 1


def test_sad_poem_suggests_minor_mode():
    analysis = analyze_emotion(GRIEVING, [[GRIEVING]])

    assert analysis.overall_sentiment < 0
    assert analysis.dominant_emotions[0] == "sad"
    assert analysis.suggested_music_params.mode is MusicalMode.MINOR


def test_empty_text_gives_neutral_analysis():
    analysis = analyze_emotion("", [])

    assert analysis == EmotionalAnalysis()
    assert analysis.arousal == 0.5
