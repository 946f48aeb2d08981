"""FastAPI dependencies wiring the analytics services to shared app state."""

from fastapi import Depends, Request

from interntrack.core.exceptions import InternalError
from interntrack.services.AnalyticsService import AnalyticsService
from interntrack.services.DraftingService import DraftingService
from interntrack.services.GitHubClient import GitHubClient
from interntrack.services.GitHubMetricsService import GitHubMetricsService
from interntrack.services.InsightsService import InsightsService
from interntrack.services.NLPService import FeedbackAnalyzer
from interntrack.services.NlpSummaryService import NlpSummaryService
from interntrack.services.TaskCompletionService import TaskCompletionService


def get_feedback_analyzer(request: Request) -> FeedbackAnalyzer:
    analyzer = getattr(request.app.state, "feedback_analyzer", None)
    if analyzer is None:
        raise InternalError("Feedback analyzer is not initialized")
    return analyzer


def get_github_client(request: Request) -> GitHubClient:
    client = getattr(request.app.state, "github_client", None)
    if client is None:
        raise InternalError("GitHub client is not initialized")
    return client


def get_github_metrics_service(request: Request) -> GitHubMetricsService:
    return GitHubMetricsService(get_github_client(request))


def get_nlp_summary_service(request: Request) -> NlpSummaryService:
    return NlpSummaryService(get_feedback_analyzer(request))


def get_task_completion_service() -> TaskCompletionService:
    return TaskCompletionService()


def get_insights_service(request: Request) -> InsightsService:
    return InsightsService(
        github_service=get_github_metrics_service(request),
        nlp_summary_service=get_nlp_summary_service(request),
        task_service=get_task_completion_service(),
    )


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService()


def get_drafting_service(insights_service: InsightsService = Depends(get_insights_service)) -> DraftingService:
    return DraftingService(insights_service)
