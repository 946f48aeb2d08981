import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from interntrack.constants.constants import SentimentLabel, UserRole
from interntrack.core.exceptions import NotFoundError
from interntrack.models.user import User
from interntrack.services.InsightsService import InsightsService

logger = logging.getLogger(__name__)

NO_THEMES_MESSAGE = "No specific themes identified."


@dataclass
class ReviewFacts:
    """The numbers a performance review draft is written from."""

    total_commits: int
    additions: int
    deletions: int
    completion_rate: str
    sentiment: str
    key_themes: str

    @property
    def has_activity(self) -> bool:
        return (
            self.total_commits > 0
            or self.additions > 0
            or self.deletions > 0
            or self.completion_rate != "0"
        )


def review_facts(insights: Mapping[str, Any]) -> ReviewFacts:
    """Read the insights object, substituting neutral values for anything missing."""
    github = insights.get("github") or {}
    nlp = insights.get("nlp") or {}
    tasks = insights.get("tasks") or {}

    rate = tasks.get("completionRate")
    sentiment = nlp.get("sentimentScore")
    themes = nlp.get("keyThemes")

    return ReviewFacts(
        total_commits=github.get("totalCommits") or 0,
        additions=github.get("totalAdditions") or 0,
        deletions=github.get("totalDeletions") or 0,
        completion_rate=f"{rate:.0f}" if rate else "0",
        sentiment=sentiment if sentiment and sentiment != SentimentLabel.unavailable.value else SentimentLabel.neutral.value,
        key_themes=", ".join(themes) if isinstance(themes, list) and themes else NO_THEMES_MESSAGE,
    )


def _first_name(user: User) -> str:
    return user.first_name or user.full_name


def build_review_prompt(intern: User, mentor: User, insights: Mapping[str, Any]) -> str:
    """Prompt for a mentor-voiced performance review of the intern."""
    facts = review_facts(insights)

    if facts.has_activity:
        summary = (
            f"{_first_name(intern)} has made {facts.total_commits} commits, with {facts.completion_rate}% task completion. "
            f"The overall feedback sentiment is {facts.sentiment}."
        )
    else:
        summary = (
            f"{_first_name(intern)} has recently joined and is beginning to familiarize themselves with the workflow. "
            "Their mentor anticipates strong future contributions as they get more involved."
        )

    return (
        f"Write a professional intern performance review for {intern.full_name}, based on the following data:\n"
        f"- Total commits: {facts.total_commits}\n"
        f"- Additions: {facts.additions}\n"
        f"- Deletions: {facts.deletions}\n"
        f"- Task completion: {facts.completion_rate}%\n"
        f"- Sentiment: {facts.sentiment}\n"
        f"- Key themes: {facts.key_themes}\n"
        "\n"
        "Summary context:\n"
        f"{summary}\n"
        "\n"
        "Tone: Supportive, encouraging, and written from a mentor's perspective.\n"
        "Length: 200-300 words.\n"
        f"Sign off as {mentor.full_name}."
    )


def build_mock_draft(intern: User, mentor: User, insights: Mapping[str, Any]) -> str:
    """Template review used in place of a language model."""
    facts = review_facts(insights)
    return (
        f"Dear {_first_name(intern)},\n"
        "\n"
        f"This is your performance summary. You've made {facts.total_commits} commits, "
        f"showing a {facts.completion_rate}% task completion rate.\n"
        "Your current progress reflects steady engagement and potential for continued growth.\n"
        "\n"
        "Keep up the positive attitude and collaborative spirit, your contributions will soon reflect in tangible results!\n"
        "\n"
        "Best regards,\n"
        f"{mentor.full_name}"
    )


class DraftingService:
    """Builds review drafts for a mentor from an intern's insights."""

    def __init__(self, insights_service: InsightsService):
        self.insights_service = insights_service

    async def _get_user(self, db: AsyncSession, user_id: str, role: UserRole) -> User:
        user = await db.get(User, user_id)
        if not user or user.role != role:
            label = role.value.capitalize()
            raise NotFoundError(f"{label} with ID '{user_id}' not found or invalid role.", extra={"user_id": user_id})
        return user

    async def generate_draft(self, db: AsyncSession, intern_id: str, mentor_id: str) -> Dict[str, str]:
        intern = await self._get_user(db, intern_id, UserRole.intern)
        mentor = await self._get_user(db, mentor_id, UserRole.mentor)

        # Plain values first: the insights steps may roll back and expire ORM objects
        intern_view = User(first_name=intern.first_name, last_name=intern.last_name, email=intern.email)
        mentor_view = User(first_name=mentor.first_name, last_name=mentor.last_name, email=mentor.email)

        logger.info(f"✍️ Generating review draft for intern {intern_id} by mentor {mentor_id}")
        insights = await self.insights_service.get_insights(db, intern_id)

        prompt = build_review_prompt(intern_view, mentor_view, insights)
        logger.debug(f"Review prompt prepared: {prompt}")
        return {
            "draft": build_mock_draft(intern_view, mentor_view, insights),
            "prompt": prompt,
        }
