import logging
import uuid
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from interntrack.core.config import settings
from interntrack.core.exceptions import InternalError, InternTrackAPIException, NotFoundError
from interntrack.models.base import utcnow
from interntrack.models.githubmetric import GitHubMetric
from interntrack.models.user import User
from interntrack.services.GitHubClient import GitHubClient

logger = logging.getLogger(__name__)


def split_repo(full_name: str) -> Tuple[str, str]:
    """Split "owner/repo" into its two parts."""
    owner, _, name = full_name.strip().strip("/").partition("/")
    if not owner or not name or "/" in name:
        raise InternalError(f"Monitored repository must look like 'owner/repo', got '{full_name}'")
    return owner, name


def _commit_date(commit: Dict[str, Any]) -> Optional[str]:
    date = ((commit.get("commit") or {}).get("author") or {}).get("date")
    return date[:10] if isinstance(date, str) and len(date) >= 10 else None


class GitHubMetricsService:
    """
    Read-through cache of GitHub commit activity.

    A stored row for (intern, repository) younger than the freshness window is
    served as-is; otherwise the commit listing is fetched and a new row is
    appended. There is no other invalidation.
    """

    def __init__(
        self,
        client: GitHubClient,
        monitored_repos: Optional[Sequence[str]] = None,
        cache_ttl: Optional[timedelta] = None,
        lookback_days: Optional[int] = None,
        fetch_commit_stats: Optional[bool] = None,
        commit_detail_limit: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.client = client
        self.monitored_repos = list(monitored_repos if monitored_repos is not None else settings.MONITORED_REPOS)
        self.cache_ttl = cache_ttl if cache_ttl is not None else timedelta(hours=settings.GITHUB_CACHE_TTL_HOURS)
        self.lookback_days = lookback_days if lookback_days is not None else settings.GITHUB_LOOKBACK_DAYS
        self.fetch_commit_stats = (
            fetch_commit_stats if fetch_commit_stats is not None else settings.GITHUB_FETCH_COMMIT_STATS
        )
        self.commit_detail_limit = (
            commit_detail_limit if commit_detail_limit is not None else settings.GITHUB_COMMIT_DETAIL_LIMIT
        )
        self.clock = clock

    def is_fresh(self, metric: GitHubMetric) -> bool:
        return metric.fetch_date is not None and self.clock() - metric.fetch_date < self.cache_ttl

    async def get_cached_metric(self, db: AsyncSession, intern_id: str, repo_name: str) -> Optional[GitHubMetric]:
        """Most recent stored row for (intern, repository)."""
        result = await db.execute(
            select(GitHubMetric)
            .where(
                GitHubMetric.intern_id == intern_id,
                GitHubMetric.repo_name == repo_name
            )
            .order_by(GitHubMetric.fetch_date.desc(), GitHubMetric.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def fetch_contributions(self, db: AsyncSession, intern_id: str) -> List[GitHubMetric]:
        """
        Return one metrics row per monitored repository for the intern.

        A repository that fails is logged and skipped. If every repository
        fails, the first error is raised. Before the first GitHub fetch the
        username is looked up; an unknown GitHub user raises NotFoundError.
        """
        intern = await db.get(User, intern_id)
        if not intern:
            logger.error(f"Intern with ID {intern_id} not found for fetching contributions.")
            raise NotFoundError(f"Intern '{intern_id}' not found", extra={"intern_id": intern_id})

        username = (intern.github_username or "").strip()
        if not username:
            logger.error(f"Intern {intern_id} has no GitHub username for fetching contributions.")
            raise NotFoundError("GitHub username not set for this intern.", extra={"intern_id": intern_id})

        if not self.monitored_repos:
            logger.warning("⚠️ No monitored repositories configured, skipping GitHub fetch")
            return []

        records: List[GitHubMetric] = []
        errors: List[InternTrackAPIException] = []
        username_verified = False

        for repo_name in self.monitored_repos:
            cached = await self.get_cached_metric(db, intern_id, repo_name)
            if cached is not None and self.is_fresh(cached):
                logger.info(f"📦 Cache hit for {username} on {repo_name} (fetched {cached.fetch_date.isoformat()})")
                records.append(cached)
                continue

            # Checked once per call, and only when GitHub is about to be queried
            if not username_verified:
                await self._verify_username(intern_id, username)
                username_verified = True

            try:
                logger.info(f"🌐 Cache miss for {username} on {repo_name}, fetching from GitHub")
                records.append(await self._fetch_and_store(db, intern_id, username, repo_name))
            except InternTrackAPIException as e:
                # Raised by the GitHub client before anything was added to the session
                logger.error(f"Error fetching commits for repo {repo_name} of {username}: {e.detail}")
                errors.append(e)
            except Exception as e:
                logger.error(f"Unexpected error fetching commits for repo {repo_name} of {username}: {e}")
                await db.rollback()
                for record in records:
                    await db.refresh(record)
                errors.append(InternalError(
                    f"Failed to fetch GitHub data for {repo_name}: {e}",
                    extra={"repository": repo_name}
                ))

        if errors and not records:
            raise errors[0]
        return records

    async def _verify_username(self, intern_id: str, username: str) -> None:
        if not await self.client.verify_username(username):
            logger.error(f"GitHub user {username} of intern {intern_id} does not exist.")
            raise NotFoundError(
                f"GitHub user '{username}' not found",
                extra={"intern_id": intern_id, "github_username": username}
            )

    async def _fetch_and_store(self, db: AsyncSession, intern_id: str, username: str, repo_name: str) -> GitHubMetric:
        owner, name = split_repo(repo_name)
        now = self.clock()
        since = now - timedelta(days=self.lookback_days)

        commits = await self.client.list_commits(owner, name, author=username, since=since)
        additions, deletions = await self._sum_commit_stats(owner, name, commits)

        metric = GitHubMetric(
            metric_id=str(uuid.uuid4()),
            intern_id=intern_id,
            github_username=username,
            repo_name=repo_name,
            fetch_date=now,
            commits=len(commits),
            additions=additions,
            deletions=deletions,
            raw_contributions=commits,
        )
        db.add(metric)
        await db.commit()
        await db.refresh(metric)
        return metric

    async def _sum_commit_stats(self, owner: str, name: str, commits: List[Dict[str, Any]]) -> Tuple[int, int]:
        """
        Sum additions/deletions from per-commit detail calls.

        Only the first `commit_detail_limit` commits are inspected; the sums are
        scaled up to the full commit count when a sample was used.
        """
        if not self.fetch_commit_stats or not commits or self.commit_detail_limit <= 0:
            return 0, 0

        additions = 0
        deletions = 0
        inspected = 0
        for commit in commits[:self.commit_detail_limit]:
            sha = commit.get("sha")
            if not sha:
                continue
            try:
                details = await self.client.get_commit(owner, name, sha)
            except InternTrackAPIException as e:
                logger.warning(f"Failed to get commit details for {sha} in {owner}/{name}: {e.detail}")
                continue
            stats = details.get("stats") or {}
            additions += int(stats.get("additions") or 0)
            deletions += int(stats.get("deletions") or 0)
            inspected += 1

        if inspected == 0:
            return 0, 0
        if inspected < len(commits):
            scale = len(commits) / inspected
            return round(additions * scale), round(deletions * scale)
        return additions, deletions

    async def get_metrics_for_intern(self, db: AsyncSession, intern_id: str) -> List[GitHubMetric]:
        """Every stored row for the intern, newest first."""
        result = await db.execute(
            select(GitHubMetric)
            .where(GitHubMetric.intern_id == intern_id)
            .order_by(GitHubMetric.fetch_date.desc())
        )
        return list(result.scalars().all())

    async def get_repo_details(self, db: AsyncSession, intern_id: str, repo_name: str) -> Dict[str, Any]:
        metric = await self.get_cached_metric(db, intern_id, repo_name)
        if not metric:
            raise NotFoundError(
                f'Repo "{repo_name}" not found for intern {intern_id}',
                extra={"intern_id": intern_id, "repository": repo_name}
            )
        return self.describe_repo(metric)

    @staticmethod
    def summarize(records: Sequence[GitHubMetric]) -> Dict[str, Any]:
        """Totals across records plus the most recent fetch time."""
        last_fetch = max((r.fetch_date for r in records if r.fetch_date), default=None)
        return {
            "totalCommits": sum(r.commits or 0 for r in records),
            "totalAdditions": sum(r.additions or 0 for r in records),
            "totalDeletions": sum(r.deletions or 0 for r in records),
            "lastFetchDate": last_fetch.isoformat() if last_fetch else None,
        }

    @staticmethod
    def build_repo_timeseries(metric: GitHubMetric) -> List[Dict[str, Any]]:
        """Daily commit counts reconstructed from the stored commit snapshot."""
        raw = metric.raw_contributions if isinstance(metric.raw_contributions, list) else []
        daily = Counter(date for date in (_commit_date(c) for c in raw if isinstance(c, dict)) if date)
        return [{"date": date, "commits": daily[date]} for date in sorted(daily)]

    @classmethod
    def describe_repo(cls, metric: GitHubMetric) -> Dict[str, Any]:
        return {
            "name": metric.repo_name,
            "url": f"https://github.com/{metric.repo_name}",
            "totalCommits": metric.commits,
            "additions": metric.additions,
            "deletions": metric.deletions,
            "lastFetched": metric.fetch_date.isoformat() if metric.fetch_date else None,
            "timeseries": cls.build_repo_timeseries(metric),
        }
