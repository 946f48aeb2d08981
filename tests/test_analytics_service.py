import pytest

from interntrack.constants.constants import ProjectStatus, UserRole
from interntrack.services.AnalyticsService import AnalyticsService


@pytest.mark.asyncio
async def test_dashboard_summary_counts(db, make_user, make_project, make_evaluation) -> None:
    intern = await make_user()
    await make_user(is_active=False)
    mentor = await make_user(role=UserRole.mentor, github_username=None)
    await make_user(role=UserRole.hr, github_username=None)
    await make_project(primary_intern=intern, status=ProjectStatus.active)
    await make_project(primary_intern=intern, status=ProjectStatus.in_progress)
    await make_project(primary_intern=intern, status=ProjectStatus.completed)
    await make_evaluation(intern, "Draft", submitted=False, mentor=mentor)
    await make_evaluation(intern, "Final", submitted=True, mentor=mentor)

    summary = await AnalyticsService().get_dashboard_summary(db)

    assert summary == {
        "totalInterns": 1,
        "totalMentors": 1,
        "activeProjects": 2,
        "pendingEvaluations": 1,
    }


@pytest.mark.asyncio
async def test_dashboard_summary_empty(db) -> None:
    assert await AnalyticsService().get_dashboard_summary(db) == {
        "totalInterns": 0,
        "totalMentors": 0,
        "activeProjects": 0,
        "pendingEvaluations": 0,
    }
