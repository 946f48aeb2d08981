from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest
import pytest_asyncio
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from interntrack.constants.constants import EvaluationType, ProjectStatus, TaskStatus, UserRole
from interntrack.core.database import register_models
from interntrack.core.exceptions import InternalError
from interntrack.models.base import Base
from interntrack.models.evaluation import Evaluation
from interntrack.models.milestone import Milestone
from interntrack.models.project import Project, project_interns
from interntrack.models.task import Task
from interntrack.models.user import User
from interntrack.services.NLPService import FeedbackAnalyzer


FUNCTION_WORDS = {"the", "and", "is", "to", "in", "for", "with", "of", "a", "was", "very", "but", "on", "she", "he", "they"}
VERBS = {"delivered", "shows", "improve", "needs", "writes", "communicates"}
ADJECTIVES = {"great", "excellent", "clean", "slow", "poor", "amazing", "good", "sloppy"}

POSITIVE_WORDS = {"great", "excellent", "amazing", "good", "clean"}
NEGATIVE_WORDS = {"poor", "slow", "sloppy", "late"}


def fake_pos_tag(tokens: Sequence[str]) -> List[Tuple[str, str]]:
    """Deterministic stand-in for nltk.pos_tag: small word lists, everything else is a noun."""
    tagged = []
    for token in tokens:
        word = token.lower()
        if word in FUNCTION_WORDS:
            tag = "DT"
        elif word in VERBS:
            tag = "VBD"
        elif word in ADJECTIVES:
            tag = "JJ"
        else:
            tag = "NN"
        tagged.append((token, tag))
    return tagged


_UNSET = object()


class FakeScorer:
    """+0.4 per positive word, -0.4 per negative word, clamped to [-1, 1]."""

    def __init__(self, fixed: Any = _UNSET):
        self.fixed = fixed
        self.calls: List[str] = []

    def polarity_scores(self, text: str) -> Dict[str, Any]:
        self.calls.append(text)
        if self.fixed is not _UNSET:
            return {"compound": self.fixed}
        words = [w.strip(".,!?").lower() for w in text.split()]
        score = 0.4 * sum(w in POSITIVE_WORDS for w in words) - 0.4 * sum(w in NEGATIVE_WORDS for w in words)
        return {"compound": max(-1.0, min(1.0, score))}


def make_commit(sha: str, date: str) -> Dict[str, Any]:
    return {"sha": sha, "commit": {"author": {"name": "dev", "date": date}, "message": f"commit {sha}"}}


class FakeGitHubClient:
    """Records calls; serves canned commits per "owner/repo"."""

    def __init__(
        self,
        commits_by_repo: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        failing_repos: Sequence[str] = (),
        failing_shas: Sequence[str] = (),
        additions: int = 10,
        deletions: int = 2,
        unknown_users: Sequence[str] = (),
    ):
        self.commits_by_repo = commits_by_repo or {}
        self.failing_repos = set(failing_repos)
        self.failing_shas = set(failing_shas)
        self.additions = additions
        self.deletions = deletions
        self.unknown_users = set(unknown_users)
        self.list_calls: List[Dict[str, Any]] = []
        self.detail_calls: List[str] = []
        self.verify_calls: List[str] = []

    async def verify_username(self, username):
        self.verify_calls.append(username)
        return username not in self.unknown_users

    async def list_commits(self, owner, repo, author, since, per_page=None, max_pages=None):
        full_name = f"{owner}/{repo}"
        self.list_calls.append({"repo": full_name, "author": author, "since": since})
        if full_name in self.failing_repos:
            raise InternalError(f"GitHub API error 500 for {full_name}", extra={"repository": full_name})
        return list(self.commits_by_repo.get(full_name, []))

    async def get_commit(self, owner, repo, sha):
        self.detail_calls.append(sha)
        if sha in self.failing_shas:
            raise InternalError(f"GitHub API error 502 for {owner}/{repo}@{sha}")
        return {"sha": sha, "stats": {"additions": self.additions, "deletions": self.deletions}}

    async def aclose(self):
        return None


@pytest.fixture
def scorer() -> FakeScorer:
    return FakeScorer()


@pytest.fixture
def analyzer(scorer: FakeScorer) -> FeedbackAnalyzer:
    return FeedbackAnalyzer(scorer=scorer, pos_tagger=fake_pos_tag)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    register_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine) -> AsyncSession:
    factory = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        yield session


@pytest.fixture
def make_user(db: AsyncSession):
    counter = {"n": 0}

    async def _make(role: UserRole = UserRole.intern, github_username: Optional[str] = "octo-intern", **kwargs) -> User:
        counter["n"] += 1
        user = User(
            email=kwargs.pop("email", f"user{counter['n']}@interntrack.dev"),
            first_name=kwargs.pop("first_name", "Ada"),
            last_name=kwargs.pop("last_name", f"Intern{counter['n']}"),
            role=role,
            github_username=github_username,
            **kwargs,
        )
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_evaluation(db: AsyncSession):
    async def _make(
        intern: User,
        feedback_text: str,
        created_at: Optional[datetime] = None,
        submitted: bool = True,
        mentor: Optional[User] = None,
    ) -> Evaluation:
        evaluation = Evaluation(
            intern_id=intern.user_id,
            mentor_id=mentor.user_id if mentor else None,
            type=EvaluationType.weekly,
            score=4,
            feedback_text=feedback_text,
            submitted=submitted,
        )
        if created_at is not None:
            evaluation.created_at = created_at
        db.add(evaluation)
        await db.commit()
        return evaluation

    return _make


@pytest.fixture
def make_project(db: AsyncSession):
    async def _make(
        primary_intern: Optional[User] = None,
        members: Sequence[User] = (),
        task_statuses: Sequence[TaskStatus] = (),
        status: ProjectStatus = ProjectStatus.active,
    ) -> Project:
        project = Project(
            title="Analytics dashboard",
            status=status,
            intern_id=primary_intern.user_id if primary_intern else None,
        )
        db.add(project)
        await db.flush()

        milestone = Milestone(project_id=project.project_id, title="Week 1")
        db.add(milestone)
        await db.flush()

        for i, task_status in enumerate(task_statuses):
            db.add(Task(milestone_id=milestone.milestone_id, title=f"Task {i + 1}", status=task_status))

        for member in members:
            await db.execute(insert(project_interns).values(project_id=project.project_id, user_id=member.user_id))

        await db.commit()
        return project

    return _make
