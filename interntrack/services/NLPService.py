# interntrack/services/NLPService.py
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
import logging
import math

import nltk
from nltk.tokenize import wordpunct_tokenize
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from interntrack.core.config import settings
from interntrack.constants.constants import (
    CONTENT_POS_PREFIXES,
    EMOTION_LEXICON,
    KEYWORD_MIN_LENGTH,
    NEGATIVE_THRESHOLD,
    NOUN_POS_PREFIXES,
    POSITIVE_THRESHOLD,
    STOP_WORDS,
    SentimentLabel,
)
from interntrack.services.FeedbackService import FeedbackCorpus

# Setup logging
logger = logging.getLogger(__name__)

# (resource path, download package); newer NLTK releases ship the "_eng" tagger
NLTK_RESOURCES = [
    ("taggers/averaged_perceptron_tagger_eng", "averaged_perceptron_tagger_eng"),
    ("taggers/averaged_perceptron_tagger", "averaged_perceptron_tagger"),
]


def ensure_nltk_resources(download: bool = True) -> None:
    """Make sure the POS tagger data is present. Called once at application startup."""
    for resource, package in NLTK_RESOURCES:
        try:
            nltk.data.find(resource)
        except LookupError:
            if not download:
                logger.warning(f"⚠️ NLTK resource {resource} missing and downloads are disabled")
                continue
            logger.info(f"📥 Downloading NLTK resource {package}...")
            if not nltk.download(package, quiet=True):
                logger.warning(f"⚠️ Failed to download NLTK resource {package}")


@dataclass
class AnalysisResult:
    sentiment_label: str
    key_themes: List[str] = field(default_factory=list)
    score: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        return {"sentimentScore": self.sentiment_label, "keyThemes": list(self.key_themes)}


class FeedbackAnalyzer:
    """
    Rule-based sentiment and keyword extraction over feedback text.

    Stateless once constructed: the tokenizer, POS tagger and sentiment scorer
    are injected (defaults: NLTK and VADER) so one instance can be shared by
    every request.
    """

    def __init__(
        self,
        scorer: Optional[Any] = None,
        pos_tagger: Optional[Callable[[List[str]], List[Tuple[str, str]]]] = None,
        tokenizer: Optional[Callable[[str], List[str]]] = None,
        key_theme_limit: Optional[int] = None,
        keyword_limit: Optional[int] = None,
        topic_limit: Optional[int] = None,
    ):
        self.scorer = scorer or SentimentIntensityAnalyzer()
        self.pos_tagger = pos_tagger or nltk.pos_tag
        self.tokenizer = tokenizer or wordpunct_tokenize
        self.key_theme_limit = key_theme_limit or settings.NLP_KEY_THEME_LIMIT
        self.keyword_limit = keyword_limit or settings.NLP_KEYWORD_LIMIT
        self.topic_limit = topic_limit or settings.NLP_TOPIC_LIMIT

    # ------------------------------
    # Sentiment
    # ------------------------------
    def score(self, text: str) -> Optional[float]:
        """Continuous sentiment in [-1, 1], or None when the scorer gives nothing usable."""
        raw = (self.scorer.polarity_scores(text) or {}).get("compound")
        try:
            value = float(raw)
        except (TypeError, ValueError):
            return None
        return None if math.isnan(value) else value

    @staticmethod
    def label_for(score: Optional[float]) -> str:
        if score is None:
            return SentimentLabel.neutral.value
        if score > POSITIVE_THRESHOLD:
            return SentimentLabel.positive.value
        if score < NEGATIVE_THRESHOLD:
            return SentimentLabel.negative.value
        return SentimentLabel.neutral.value

    # ------------------------------
    # Keywords & topics
    # ------------------------------
    def _tagged_words(self, text: str) -> List[Tuple[str, str]]:
        tokens = [t for t in self.tokenizer(text) if t.isalpha()]
        if not tokens:
            return []
        return [(word, tag or "") for word, tag in self.pos_tagger(tokens)]

    @staticmethod
    def rank_terms(
        tagged: Iterable[Tuple[str, str]],
        pos_prefixes: Sequence[str],
        limit: int
    ) -> List[Tuple[str, int]]:
        """
        Most frequent lowercased terms whose tag starts with one of `pos_prefixes`.

        Counter keeps first-seen order and most_common sorts stably, so ties
        stay in first-encountered order.
        """
        freq: Counter = Counter()
        for word, tag in tagged:
            if not tag.startswith(tuple(pos_prefixes)):
                continue
            term = word.lower()
            if len(term) < KEYWORD_MIN_LENGTH or term in STOP_WORDS:
                continue
            freq[term] += 1
        return freq.most_common(limit)

    def extract_keywords(self, text: str, limit: Optional[int] = None) -> List[str]:
        tagged = self._tagged_words(text)
        return [term for term, _ in self.rank_terms(tagged, CONTENT_POS_PREFIXES, limit or self.keyword_limit)]

    def extract_topics(self, text: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        tagged = self._tagged_words(text)
        return [
            {"topic": term, "frequency": count}
            for term, count in self.rank_terms(tagged, NOUN_POS_PREFIXES, limit or self.topic_limit)
        ]

    @staticmethod
    def detect_emotions(text: str) -> Dict[str, float]:
        """Share of emotion lexicon hits per emotion (substring matches, so stems count)."""
        lower = (text or "").lower()
        counts = {
            emotion: sum(lower.count(word) for word in words)
            for emotion, words in EMOTION_LEXICON.items()
        }
        total = sum(counts.values())
        if total == 0:
            return {emotion: 0 for emotion in counts}
        return {emotion: round(count / total, 3) for emotion, count in counts.items()}

    @staticmethod
    def build_summary(sentiment: str, keywords: Sequence[str], topics: Sequence[Dict[str, Any]]) -> str:
        summary = f"Overall sentiment: {sentiment}. "
        if keywords:
            summary += f"Key themes: {', '.join(keywords[:5])}. "
        if topics:
            summary += f"Main topics: {', '.join(t['topic'] for t in topics[:3])}."
        return summary.strip()

    # ------------------------------
    # Public API
    # ------------------------------
    def analyze(self, text: Optional[str]) -> AnalysisResult:
        """Sentiment label and top key themes for one block of text."""
        if not text or not text.strip():
            return AnalysisResult(sentiment_label=SentimentLabel.unavailable.value, key_themes=[])

        score = self.score(text)
        key_themes = self.extract_keywords(text, limit=self.key_theme_limit)
        return AnalysisResult(sentiment_label=self.label_for(score), key_themes=key_themes, score=score)

    def run_pipeline(self, corpus: FeedbackCorpus) -> Dict[str, Any]:
        """
        Full summary payload for an intern's feedback corpus.

        The result carries both naming conventions consumers read:
        overallSentiment/sentimentScore and keywords/keyThemes hold the same values.
        """
        full_text = corpus.text
        result = self.analyze(full_text)

        timeline = []
        for item in corpus.items:
            date = item.date.isoformat() if isinstance(item.date, datetime) else item.date
            timeline.append({"date": date, "score": self.label_for(self.score(item.text)).lower()})

        tagged = self._tagged_words(full_text)
        keywords = [term for term, _ in self.rank_terms(tagged, CONTENT_POS_PREFIXES, self.keyword_limit)]
        topics = [
            {"topic": term, "frequency": count}
            for term, count in self.rank_terms(tagged, NOUN_POS_PREFIXES, self.topic_limit)
        ]
        key_themes = keywords[:self.key_theme_limit]

        return {
            "overallSentiment": result.sentiment_label,
            "sentimentSummary": self.build_summary(result.sentiment_label, keywords, topics),
            "sentimentTimeline": timeline,
            "keywords": keywords,
            "topics": topics,
            "emotions": self.detect_emotions(full_text),
            "sentimentScore": result.sentiment_label,
            "keyThemes": key_themes,
        }
