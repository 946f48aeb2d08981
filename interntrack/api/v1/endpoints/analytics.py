import logging
from typing import Any, Dict, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from interntrack.core.database import aget_db
from interntrack.core.dependencies import (
    get_analytics_service,
    get_drafting_service,
    get_feedback_analyzer,
    get_github_metrics_service,
    get_insights_service,
    get_nlp_summary_service,
    get_task_completion_service,
)
from interntrack.core.exceptions import NotFoundError
from interntrack.constants.constants import unavailable_nlp_summary
from interntrack.schemas.analyticsSchema import (
    DashboardSummaryResponse,
    GitHubMetricResponse,
    GitHubSummaryResponse,
    InsightsResponse,
    NlpAnalyzeRequest,
    NlpAnalyzeResponse,
    RepoDetailResponse,
    ReviewDraftResponse,
    TaskCompletionResponse,
)
from interntrack.services.AnalyticsService import AnalyticsService
from interntrack.services.DraftingService import DraftingService
from interntrack.services.GitHubMetricsService import GitHubMetricsService
from interntrack.services.InsightsService import InsightsService
from interntrack.services.NLPService import FeedbackAnalyzer
from interntrack.services.NlpSummaryService import NlpSummaryService
from interntrack.services.TaskCompletionService import TaskCompletionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/summary", response_model=DashboardSummaryResponse)
async def get_dashboard_summary(
    db: AsyncSession = Depends(aget_db),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Platform wide counters for the HR dashboard."""
    return await service.get_dashboard_summary(db)


@router.get("/github/{intern_id}", response_model=List[GitHubMetricResponse])
async def get_github_metrics(
    intern_id: str,
    db: AsyncSession = Depends(aget_db),
    service: GitHubMetricsService = Depends(get_github_metrics_service)
):
    """Cache-checked GitHub metrics, one row per monitored repository."""
    return await service.fetch_contributions(db, intern_id)


@router.get("/github/{intern_id}/history", response_model=List[GitHubMetricResponse])
async def get_github_history(
    intern_id: str,
    db: AsyncSession = Depends(aget_db),
    service: GitHubMetricsService = Depends(get_github_metrics_service)
):
    """Every stored metrics row for the intern, newest first. Never calls GitHub."""
    return await service.get_metrics_for_intern(db, intern_id)


@router.get("/github-summary/{intern_id}", response_model=GitHubSummaryResponse)
async def get_github_summary(
    intern_id: str,
    db: AsyncSession = Depends(aget_db),
    service: GitHubMetricsService = Depends(get_github_metrics_service)
):
    records = await service.fetch_contributions(db, intern_id)
    return {**service.summarize(records), "repositories": len(records)}


@router.get("/github/{intern_id}/repo/{owner}/{repo}", response_model=RepoDetailResponse)
async def get_repo_details(
    intern_id: str,
    owner: str,
    repo: str,
    db: AsyncSession = Depends(aget_db),
    service: GitHubMetricsService = Depends(get_github_metrics_service)
):
    """Latest stored metrics for one repository, with a daily commit timeseries."""
    return await service.get_repo_details(db, intern_id, f"{owner}/{repo}")


@router.get("/nlp-summary/{intern_id}")
async def get_nlp_summary(
    intern_id: str,
    db: AsyncSession = Depends(aget_db),
    service: NlpSummaryService = Depends(get_nlp_summary_service)
) -> Dict[str, Any]:
    """
    Recompute and return the stored feedback summary.
    An unknown intern gets the empty summary rather than a 404.
    """
    try:
        summary = await service.generate_and_store_summary(db, intern_id)
    except NotFoundError:
        logger.warning(f"NLP summary requested for unknown intern {intern_id}")
        return unavailable_nlp_summary()
    return summary.summary_json or unavailable_nlp_summary()


@router.get("/nlp-summary/{intern_id}/stored")
async def get_stored_nlp_summary(
    intern_id: str,
    db: AsyncSession = Depends(aget_db),
    service: NlpSummaryService = Depends(get_nlp_summary_service)
) -> Dict[str, Any]:
    """Last stored feedback summary, without recomputing it."""
    summary = await service.get_summary(db, intern_id)
    if summary is None or not summary.summary_json:
        return unavailable_nlp_summary()
    return summary.summary_json


@router.get("/intern/{intern_id}/insights", response_model=InsightsResponse)
async def get_intern_insights(
    intern_id: str,
    db: AsyncSession = Depends(aget_db),
    service: InsightsService = Depends(get_insights_service)
):
    return await service.get_insights(db, intern_id)


@router.get("/intern/{intern_id}/nlp")
async def get_intern_nlp_report(
    intern_id: str,
    db: AsyncSession = Depends(aget_db),
    service: InsightsService = Depends(get_insights_service)
) -> Dict[str, Any]:
    return await service.get_nlp_report(db, intern_id)


@router.get("/intern/{intern_id}/tasks", response_model=TaskCompletionResponse)
async def get_intern_tasks(
    intern_id: str,
    db: AsyncSession = Depends(aget_db),
    service: TaskCompletionService = Depends(get_task_completion_service)
):
    snapshot = await service.completion_rate(db, intern_id)
    return snapshot.as_dict()


@router.post("/nlp/analyze", response_model=NlpAnalyzeResponse)
async def analyze_text(
    payload: NlpAnalyzeRequest,
    analyzer: FeedbackAnalyzer = Depends(get_feedback_analyzer)
):
    """Sentiment label and key themes for ad-hoc text. Nothing is stored."""
    return analyzer.analyze(payload.text).as_dict()


@router.post("/intern/{intern_id}/draft", response_model=ReviewDraftResponse)
async def draft_review(
    intern_id: str,
    mentor_id: str,
    db: AsyncSession = Depends(aget_db),
    service: DraftingService = Depends(get_drafting_service)
):
    """Templated performance review plus the prompt a language model would receive."""
    return await service.generate_draft(db, intern_id, mentor_id)
