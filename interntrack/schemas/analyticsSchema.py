from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class DashboardSummaryResponse(BaseModel):
    totalInterns: int
    totalMentors: int
    activeProjects: int
    pendingEvaluations: int


class GitHubMetricResponse(BaseModel):
    """Stored GitHub metrics row, without the raw commit snapshot."""
    metric_id: str
    intern_id: str
    github_username: str
    repo_name: str
    fetch_date: datetime
    commits: int
    additions: int
    deletions: int

    class Config:
        from_attributes = True


class TimeseriesPoint(BaseModel):
    date: str
    commits: int


class RepoDetailResponse(BaseModel):
    name: str
    url: str
    totalCommits: int
    additions: int
    deletions: int
    lastFetched: Optional[str] = None
    timeseries: List[TimeseriesPoint] = []


class GitHubSummaryResponse(BaseModel):
    totalCommits: int
    totalAdditions: int
    totalDeletions: int
    lastFetchDate: Optional[str] = None
    repositories: int


class GitHubInsights(BaseModel):
    totalCommits: int = 0
    totalAdditions: int = 0
    totalDeletions: int = 0
    repos: List[RepoDetailResponse] = []


class TaskItem(BaseModel):
    id: str
    title: str
    status: str


class TaskCompletionResponse(BaseModel):
    total: int
    completed: int
    completionRate: float
    # Serialized as "list"
    tasks: List[TaskItem] = Field(default_factory=list, alias="list")

    class Config:
        populate_by_name = True


class InsightsResponse(BaseModel):
    github: GitHubInsights
    # Either the full summary payload or the {sentimentScore, keyThemes} fallback
    nlp: Dict[str, Any]
    tasks: TaskCompletionResponse
    evaluationsDue: int


class NlpAnalyzeRequest(BaseModel):
    """Request schema for analyzing ad-hoc feedback text."""
    text: str = Field(..., max_length=20000)


class NlpAnalyzeResponse(BaseModel):
    sentimentScore: str
    keyThemes: List[str]


class ReviewDraftResponse(BaseModel):
    draft: str
    prompt: str
