"""Constants for user roles, project and task statuses, evaluation types and feedback analysis."""

from enum import Enum


class UserRole(str, Enum):
    """Enumeration of platform roles."""

    admin = "ADMIN"
    hr = "HR"
    mentor = "MENTOR"
    intern = "INTERN"
    observer = "OBSERVER"

class ProjectStatus(str, Enum):
    """Enumeration of project statuses."""

    planning = "Planning"
    active = "Active"
    in_progress = "In Progress"
    completed = "Completed"
    on_hold = "On Hold"
    blocked = "Blocked"

class TaskStatus(str, Enum):
    """Enumeration of task statuses. `done` is the only terminal state."""

    todo = "To Do"
    in_progress = "In Progress"
    done = "Done"
    blocked = "Blocked"

class EvaluationType(str, Enum):
    """Enumeration of evaluation types."""

    weekly = "Weekly Note"
    midpoint = "Midpoint Review"
    final = "Final Review"
    self_review = "Self-Review"

class SentimentLabel(str, Enum):
    """Discrete sentiment labels stored in NLP summaries."""

    positive = "Positive"
    negative = "Negative"
    neutral = "Neutral"
    unavailable = "N/A"


# Sentiment thresholds (strict inequality, boundaries are neutral)
POSITIVE_THRESHOLD = 0.3
NEGATIVE_THRESHOLD = -0.3

# Penn Treebank tag prefixes for nouns, verbs and adjectives
CONTENT_POS_PREFIXES = ("NN", "VB", "JJ")
NOUN_POS_PREFIXES = ("NN",)

KEYWORD_MIN_LENGTH = 3

STOP_WORDS = frozenset(["the", "and", "is", "to", "in", "for", "with", "of", "a"])

EMOTION_LEXICON = {
    "joy": ["happy", "great", "excellent", "love", "amazing", "good"],
    "anger": ["angry", "mad", "annoy", "irritate", "hate"],
    "sadness": ["sad", "upset", "disappoint", "disappointed"],
    "fear": ["fear", "worried", "scared", "nervous"],
    "surprise": ["wow", "unexpected", "shock"],
}

FEEDBACK_DELIMITER = ". "

NO_FEEDBACK_MESSAGE = "No feedback available."


def no_feedback_summary() -> dict:
    """Placeholder NLP summary stored when an intern has no feedback yet."""
    return {
        "overallSentiment": SentimentLabel.unavailable.value,
        "sentimentSummary": NO_FEEDBACK_MESSAGE,
        "sentimentTimeline": [],
        "keywords": [],
        "topics": [],
        "emotions": {},
        "sentimentScore": SentimentLabel.unavailable.value,
        "keyThemes": [],
    }


def unavailable_nlp_summary() -> dict:
    """Minimal NLP block returned when the summary could not be computed."""
    return {
        "sentimentScore": SentimentLabel.unavailable.value,
        "keyThemes": [],
    }
