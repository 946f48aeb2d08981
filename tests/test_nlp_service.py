from datetime import datetime

import pytest

from interntrack.services.FeedbackService import FeedbackCorpus, FeedbackItem
from interntrack.services.NLPService import FeedbackAnalyzer

from conftest import FakeScorer, fake_pos_tag


@pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
def test_empty_text_is_not_analyzed(analyzer: FeedbackAnalyzer, scorer: FakeScorer, text) -> None:
    result = analyzer.analyze(text)

    assert result.sentiment_label == "N/A"
    assert result.key_themes == []
    assert scorer.calls == []


@pytest.mark.parametrize(
    "score, label",
    [
        (0.31, "Positive"),
        (0.3, "Neutral"),
        (0.0, "Neutral"),
        (-0.3, "Neutral"),
        (-0.31, "Negative"),
        (None, "Neutral"),
    ],
)
def test_label_thresholds_are_strict(score, label) -> None:
    assert FeedbackAnalyzer.label_for(score) == label


@pytest.mark.parametrize("raw", [float("nan"), "not-a-number", None])
def test_unusable_scores_are_neutral(raw) -> None:
    analyzer = FeedbackAnalyzer(scorer=FakeScorer(fixed=raw), pos_tagger=fake_pos_tag)

    assert analyzer.score("anything") is None
    assert analyzer.analyze("Solid work on the backend").sentiment_label == "Neutral"


def test_sentiment_follows_scorer(analyzer: FeedbackAnalyzer) -> None:
    assert analyzer.analyze("Great and clean work").sentiment_label == "Positive"
    assert analyzer.analyze("Sloppy and slow delivery").sentiment_label == "Negative"
    assert analyzer.analyze("Good code but poor tests").sentiment_label == "Neutral"


def test_key_themes_rank_by_frequency_then_first_seen(analyzer: FeedbackAnalyzer) -> None:
    text = "testing review code review code quality code docs deploy"

    result = analyzer.analyze(text)

    assert result.key_themes == ["code", "review", "testing", "quality", "docs"]


def test_keywords_drop_stop_words_short_tokens_and_punctuation(analyzer: FeedbackAnalyzer) -> None:
    text = "The API is ok, and the UI is a 2nd priority for the team!"

    keywords = analyzer.extract_keywords(text)

    assert keywords == ["api", "priority", "team"]


def test_keywords_keep_only_nouns_verbs_adjectives(analyzer: FeedbackAnalyzer) -> None:
    keywords = analyzer.extract_keywords("She delivered excellent dashboards very quickly")

    # "quickly" is tagged as a noun by the fake tagger, "very" and "she" are function words
    assert keywords == ["delivered", "excellent", "dashboards", "quickly"]


def test_topics_are_nouns_with_frequency(analyzer: FeedbackAnalyzer) -> None:
    topics = analyzer.extract_topics("Great tests. Clean tests. Slow deploys.")

    assert topics == [{"topic": "tests", "frequency": 2}, {"topic": "deploys", "frequency": 1}]


def test_detect_emotions_normalises_lexicon_hits() -> None:
    emotions = FeedbackAnalyzer.detect_emotions("Happy with the great demo, a bit sad about the delay")

    assert emotions == {"joy": 0.667, "anger": 0.0, "sadness": 0.333, "fear": 0.0, "surprise": 0.0}


def test_detect_emotions_without_hits_is_all_zero() -> None:
    emotions = FeedbackAnalyzer.detect_emotions("Shipped the migration")

    assert set(emotions) == {"joy", "anger", "sadness", "fear", "surprise"}
    assert all(value == 0 for value in emotions.values())


def test_build_summary() -> None:
    summary = FeedbackAnalyzer.build_summary(
        "Positive",
        ["code", "tests", "docs", "review", "deploy", "extra"],
        [{"topic": "code", "frequency": 3}, {"topic": "tests", "frequency": 1}],
    )

    assert summary == (
        "Overall sentiment: Positive. Key themes: code, tests, docs, review, deploy. "
        "Main topics: code, tests."
    )
    assert FeedbackAnalyzer.build_summary("N/A", [], []) == "Overall sentiment: N/A."


def test_run_pipeline_payload(analyzer: FeedbackAnalyzer) -> None:
    corpus = FeedbackCorpus(
        intern_id="intern-1",
        items=[
            FeedbackItem(text="Great code and clean tests", date=datetime(2026, 3, 2, 10, 0)),
            FeedbackItem(text="Code was slow", date=datetime(2026, 2, 23, 9, 30)),
        ],
    )

    payload = analyzer.run_pipeline(corpus)

    assert payload["overallSentiment"] == "Positive"
    assert payload["sentimentScore"] == payload["overallSentiment"]
    assert payload["keywords"] == ["code", "great", "clean", "tests", "slow"]
    assert payload["keyThemes"] == payload["keywords"][:5]
    assert payload["topics"] == [{"topic": "code", "frequency": 2}, {"topic": "tests", "frequency": 1}]
    assert payload["sentimentTimeline"] == [
        {"date": "2026-03-02T10:00:00", "score": "positive"},
        {"date": "2026-02-23T09:30:00", "score": "negative"},
    ]
    assert payload["emotions"]["joy"] == 1.0
    assert payload["sentimentSummary"] == (
        "Overall sentiment: Positive. Key themes: code, great, clean, tests, slow. Main topics: code, tests."
    )


def test_key_theme_limit_is_configurable() -> None:
    analyzer = FeedbackAnalyzer(scorer=FakeScorer(), pos_tagger=fake_pos_tag, key_theme_limit=2)

    result = analyzer.analyze("alpha beta gamma delta")

    assert result.key_themes == ["alpha", "beta"]


def test_vader_scores_clear_praise_as_positive() -> None:
    analyzer = FeedbackAnalyzer(pos_tagger=fake_pos_tag)

    result = analyzer.analyze("Excellent work, great initiative and amazing results. We love it!")

    assert result.sentiment_label == "Positive"
    assert result.score is not None and result.score > 0.3
