"""
Tests for the job tracker

Tests polling, watching and waiting on jobs through a scripted engine.
"""

import pytest

from rcpanel.api import JobTracker
from rcpanel.exceptions import ProtocolError
from rcpanel.models import JobState


def _script_jobs(transport, timeline):
    """
    Serve job/list and job/status from a timeline of polls.

    Each timeline entry maps job id to its finished flag; the timeline
    advances on every job/list call and stays on its last entry.
    """
    state = {"poll": -1}

    def job_list(params):
        state["poll"] = min(state["poll"] + 1, len(timeline) - 1)
        return {"jobids": list(timeline[state["poll"]])}

    def job_status(params):
        jobs = timeline[max(state["poll"], 0)]
        if params["jobid"] not in jobs:
            return '{"error": "job not found", "status": 404}', 404
        finished = jobs[params["jobid"]]
        return {"finished": finished, "success": finished, "group": f"job/{params['jobid']}"}

    transport.respond("job/list", job_list)
    transport.respond("job/status", job_status)


def test_snapshot_sorted_by_id(transport, rc):
    """Test snapshots are ordered by job id"""
    _script_jobs(transport, [{3: True, 1: False, 2: True}])

    jobs = JobTracker(rc).snapshot()

    assert [job.id for job in jobs] == [1, 2, 3]


def test_pending(transport, rc):
    """Test pending only returns unfinished jobs"""
    _script_jobs(transport, [{1: False, 2: True}])

    assert [job.id for job in JobTracker(rc).pending()] == [1]


def test_watch_until_finished(transport, rc):
    """Test watching stops after the first snapshot without pending jobs"""
    _script_jobs(transport, [{1: False}, {1: False}, {1: True}])
    sleeps = []

    tracker = JobTracker(rc, poll_interval=1.5, sleep=sleeps.append)
    snapshots = list(tracker.watch())

    assert [[job.state for job in jobs] for jobs in snapshots] == [
        [JobState.PENDING],
        [JobState.PENDING],
        [JobState.SUCCEEDED],
    ]
    assert sleeps == [1.5, 1.5]


def test_watch_stops_on_request(transport, rc):
    """Test should_stop ends watching even while jobs are pending"""
    _script_jobs(transport, [{1: False}])
    polls = []

    tracker = JobTracker(rc, sleep=lambda seconds: None)
    for jobs in tracker.watch(should_stop=lambda: len(polls) >= 2):
        polls.append(jobs)

    assert len(polls) == 2


def test_watch_vanished_job(transport, rc):
    """Test a garbage-collected job simply disappears from the snapshots"""
    _script_jobs(transport, [{1: False, 2: False}, {2: True}])

    snapshots = list(JobTracker(rc, sleep=lambda seconds: None).watch())

    assert [job.id for job in snapshots[-1]] == [2]


def test_wait_returns_finished_job(transport, rc):
    """Test wait polls until the job finishes"""
    results = iter([False, False, True])
    transport.respond("job/status", lambda params: {"finished": next(results), "success": False, "error": "quota"})
    sleeps = []

    job = JobTracker(rc, poll_interval=0.5, sleep=sleeps.append).wait(4)

    assert job.id == 4
    assert job.state == JobState.FAILED
    assert job.error == "quota"
    assert sleeps == [0.5, 0.5]


def test_wait_timeout(transport, rc):
    """Test wait raises TimeoutError when the job does not finish in time"""
    transport.respond("job/status", {"finished": False, "success": False})

    with pytest.raises(TimeoutError):
        JobTracker(rc, sleep=lambda seconds: None).wait(1, timeout=0)


def test_wait_unknown_job(transport, rc):
    """Test wait propagates the engine error for an unknown job"""
    transport.fail("job/status", "job not found", status=404)

    with pytest.raises(ProtocolError):
        JobTracker(rc).wait(99)
