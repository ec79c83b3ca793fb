"""
RCPanel - Page Endpoints

Full HTML documents for the remotes, jobs and stats pages.
"""

import logging

from rcpanel import engine
from rcpanel.context import Context
from rcpanel.exceptions import RCError
from rcpanel.router import Router
from rcpanel.views import ErrorFragment, GetJobsInfo, GetRemotesInfo, GetStatsInfo, RenderTemplate

# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = Router(tags=["Pages"])


@router.page("/")
def remotes_page(ctx: Context) -> str:
    """Display configured remotes"""
    context = {"active_page": "remotes", "remotes": [], "error": None}
    try:
        context["remotes"] = GetRemotesInfo(engine.rc_client)
    except RCError as e:
        logger.error(f"Error listing remotes: {e}")
        context["error"] = str(e)
        context["error_fragment"] = ErrorFragment(str(e), "remotes-list")
    return RenderTemplate("remotes.html", **context)


@router.page("/jobs")
def jobs_page(ctx: Context) -> str:
    """Display engine jobs"""
    context = {"active_page": "jobs", "jobs": [], "error": None}
    try:
        context["jobs"] = GetJobsInfo(engine.rc_client)
    except RCError as e:
        logger.error(f"Error listing jobs: {e}")
        context["error"] = str(e)
        context["error_fragment"] = ErrorFragment(str(e), "jobs-list")
    return RenderTemplate("jobs.html", **context)


@router.page("/stats")
def stats_page(ctx: Context) -> str:
    """Display transfer statistics and engine version"""
    stats, version = GetStatsInfo(engine.rc_client)
    return RenderTemplate("stats.html", active_page="stats", stats=stats, version=version)
