from datetime import timedelta

import httpx
import pytest
import pytest_asyncio

from interntrack.constants.constants import TaskStatus, UserRole
from interntrack.core.database import aget_db
from interntrack.core.dependencies import get_github_metrics_service, get_insights_service
from interntrack.main import app
from interntrack.services.GitHubMetricsService import GitHubMetricsService
from interntrack.services.InsightsService import InsightsService
from interntrack.services.NlpSummaryService import NlpSummaryService

from conftest import FakeGitHubClient, make_commit


@pytest.fixture
def github_client() -> FakeGitHubClient:
    return FakeGitHubClient({
        "acme/portal": [make_commit("a", "2026-05-01T10:00:00Z"), make_commit("b", "2026-05-02T10:00:00Z")]
    })


@pytest_asyncio.fixture
async def client(db, analyzer, github_client):
    def metrics_service() -> GitHubMetricsService:
        return GitHubMetricsService(github_client, monitored_repos=["acme/portal"], cache_ttl=timedelta(hours=1))

    async def override_db():
        yield db

    app.state.feedback_analyzer = analyzer
    app.state.github_client = github_client
    app.state.limiter.enabled = False
    app.dependency_overrides[aget_db] = override_db
    app.dependency_overrides[get_github_metrics_service] = metrics_service
    app.dependency_overrides[get_insights_service] = lambda: InsightsService(metrics_service(), NlpSummaryService(analyzer))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client

    app.dependency_overrides.clear()
    app.state.limiter.enabled = True


@pytest.mark.asyncio
async def test_health_check(client) -> None:
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_nlp_summary_unknown_intern_returns_empty_result(client) -> None:
    response = await client.get("/api/v1/analytics/nlp-summary/missing")

    assert response.status_code == 200
    assert response.json() == {"sentimentScore": "N/A", "keyThemes": []}


@pytest.mark.asyncio
async def test_nlp_summary_for_intern(client, make_user, make_evaluation) -> None:
    intern = await make_user()
    await make_evaluation(intern, "Great code and clean tests")

    response = await client.get(f"/api/v1/analytics/nlp-summary/{intern.user_id}")

    body = response.json()
    assert response.status_code == 200
    assert body["sentimentScore"] == "Positive"
    assert body["keyThemes"] == body["keywords"][:5]


@pytest.mark.asyncio
async def test_insights_unknown_intern_is_404(client) -> None:
    response = await client.get("/api/v1/analytics/intern/missing/insights")

    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_insights_for_intern(client, make_user, make_project) -> None:
    intern = await make_user()
    await make_project(primary_intern=intern, task_statuses=[TaskStatus.done, TaskStatus.todo, TaskStatus.done])

    response = await client.get(f"/api/v1/analytics/intern/{intern.user_id}/insights")

    body = response.json()
    assert response.status_code == 200
    assert body["github"]["totalCommits"] == 2
    assert body["github"]["repos"][0]["name"] == "acme/portal"
    assert body["nlp"]["sentimentScore"] == "N/A"
    assert body["tasks"]["completionRate"] == 66.67
    assert body["evaluationsDue"] == 0


@pytest.mark.asyncio
async def test_intern_nlp_report(client, make_user) -> None:
    intern = await make_user()

    response = await client.get(f"/api/v1/analytics/intern/{intern.user_id}/nlp")

    assert response.status_code == 200
    assert response.json()["sentimentSummary"] == "No feedback available."


@pytest.mark.asyncio
async def test_intern_tasks(client, make_user, make_project) -> None:
    intern = await make_user()
    await make_project(primary_intern=intern, task_statuses=[TaskStatus.done])

    response = await client.get(f"/api/v1/analytics/intern/{intern.user_id}/tasks")

    body = response.json()
    assert body["total"] == 1
    assert body["completionRate"] == 100.0
    assert body["list"][0]["status"] == "Done"


@pytest.mark.asyncio
async def test_github_endpoints_share_the_cache(client, github_client, make_user) -> None:
    intern = await make_user()

    metrics = await client.get(f"/api/v1/analytics/github/{intern.user_id}")
    summary = await client.get(f"/api/v1/analytics/github-summary/{intern.user_id}")
    repo = await client.get(f"/api/v1/analytics/github/{intern.user_id}/repo/acme/portal")

    assert metrics.status_code == 200
    assert metrics.json()[0]["repo_name"] == "acme/portal"
    assert "raw_contributions" not in metrics.json()[0]
    assert summary.json()["totalCommits"] == 2
    assert summary.json()["repositories"] == 1
    assert repo.json()["timeseries"] == [
        {"date": "2026-05-01", "commits": 1},
        {"date": "2026-05-02", "commits": 1},
    ]
    assert len(github_client.list_calls) == 1


@pytest.mark.asyncio
async def test_github_for_intern_without_username_is_404(client, make_user) -> None:
    intern = await make_user(github_username=None)

    response = await client.get(f"/api/v1/analytics/github/{intern.user_id}")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_analyze_text(client) -> None:
    empty = await client.post("/api/v1/analytics/nlp/analyze", json={"text": "  "})
    praise = await client.post("/api/v1/analytics/nlp/analyze", json={"text": "Great and clean dashboard work"})

    assert empty.json() == {"sentimentScore": "N/A", "keyThemes": []}
    assert praise.json()["sentimentScore"] == "Positive"
    assert "dashboard" in praise.json()["keyThemes"]


@pytest.mark.asyncio
async def test_analyze_text_requires_body(client) -> None:
    response = await client.post("/api/v1/analytics/nlp/analyze", json={})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_dashboard_summary(client, make_user) -> None:
    await make_user()

    response = await client.get("/api/v1/analytics/summary")

    assert response.status_code == 200
    assert response.json()["totalInterns"] == 1


@pytest.mark.asyncio
async def test_github_history_reads_stored_rows_only(client, github_client, make_user) -> None:
    intern = await make_user()

    empty = await client.get(f"/api/v1/analytics/github/{intern.user_id}/history")
    await client.get(f"/api/v1/analytics/github/{intern.user_id}")
    history = await client.get(f"/api/v1/analytics/github/{intern.user_id}/history")

    assert empty.json() == []
    assert [row["repo_name"] for row in history.json()] == ["acme/portal"]
    assert history.json()[0]["commits"] == 2
    assert len(github_client.list_calls) == 1


@pytest.mark.asyncio
async def test_stored_nlp_summary_does_not_recompute(client, make_user, make_evaluation) -> None:
    intern = await make_user()
    await make_evaluation(intern, "Great code and clean tests")

    before = await client.get(f"/api/v1/analytics/nlp-summary/{intern.user_id}/stored")
    await client.get(f"/api/v1/analytics/nlp-summary/{intern.user_id}")
    await make_evaluation(intern, "Sloppy and slow delivery, poor tests")
    after = await client.get(f"/api/v1/analytics/nlp-summary/{intern.user_id}/stored")

    assert before.json() == {"sentimentScore": "N/A", "keyThemes": []}
    assert after.json()["sentimentScore"] == "Positive"


@pytest.mark.asyncio
async def test_draft_review(client, make_user, make_project) -> None:
    intern = await make_user(first_name="Ada", last_name="Obi")
    mentor = await make_user(role=UserRole.mentor, github_username=None, first_name="Kofi", last_name="Mensah")
    await make_project(primary_intern=intern, task_statuses=[TaskStatus.done])

    response = await client.post(f"/api/v1/analytics/intern/{intern.user_id}/draft", params={"mentor_id": mentor.user_id})
    wrong_role = await client.post(f"/api/v1/analytics/intern/{intern.user_id}/draft", params={"mentor_id": intern.user_id})

    body = response.json()
    assert response.status_code == 200
    assert "- Total commits: 2\n" in body["prompt"]
    assert "- Task completion: 100%\n" in body["prompt"]
    assert body["draft"].startswith("Dear Ada,")
    assert wrong_role.status_code == 404
