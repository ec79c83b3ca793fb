"""
RCPanel - Job Endpoints

Streaming endpoints for the jobs list: refresh, stop and live watching.
"""

import logging

from rcpanel import engine
from rcpanel.context import Context
from rcpanel.exceptions import RCError
from rcpanel.router import Router
from rcpanel.views import DomId, ErrorFragment, GetJobsInfo, JobsInfoFromJobs, RenderTemplate

# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = Router(tags=["Jobs"])

JOBS_LIST_ID = "jobs-list"


def PatchJobsList(ctx: Context) -> bool:
    """
    Re-render the jobs list.

    Returns:
        False if the jobs could not be listed (the error was patched instead)
    """
    sse = ctx.sse()
    try:
        jobs = GetJobsInfo(engine.rc_client)
    except RCError as e:
        logger.error(f"Error listing jobs: {e}")
        sse.patch_html_by_id(JOBS_LIST_ID, ErrorFragment(str(e), JOBS_LIST_ID))
        return False
    sse.patch_html_by_id(JOBS_LIST_ID, RenderTemplate("partials/jobs_list.html", jobs=jobs))
    return True


@router.get("/api/jobs/refresh")
def refresh_jobs(ctx: Context):
    PatchJobsList(ctx)


@router.post("/api/jobs/{id}/stop")
def stop_job(ctx: Context):
    """Stop a job, then refresh the list"""
    sse = ctx.sse()
    raw_id = ctx.param("id")
    try:
        job_id = int(raw_id)
    except ValueError:
        sse.patch_html_by_id(JOBS_LIST_ID, ErrorFragment(f"Invalid job id '{raw_id}'", JOBS_LIST_ID))
        return

    try:
        engine.rc_client.stop_job(job_id)
    except RCError as e:
        logger.error(f"Error stopping job {job_id}: {e}")
        row_id = DomId("job", job_id)
        sse.patch_html_by_id(row_id, ErrorFragment(str(e), row_id))
        return
    PatchJobsList(ctx)


@router.get("/api/jobs/watch")
def watch_jobs(ctx: Context):
    """
    Keep the jobs list current until every job has finished or the
    client goes away.
    """
    sse = ctx.sse()
    tracker = engine.GetJobTracker()
    try:
        for jobs in tracker.watch(should_stop=sse.is_closed):
            html = RenderTemplate("partials/jobs_list.html", jobs=JobsInfoFromJobs(jobs))
            if not sse.patch_html_by_id(JOBS_LIST_ID, html):
                break
    except RCError as e:
        logger.error(f"Error watching jobs: {e}")
        sse.patch_html_by_id(JOBS_LIST_ID, ErrorFragment(str(e), JOBS_LIST_ID))
