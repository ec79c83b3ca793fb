"""
RCPanel - Job Tracker

Polling discipline over RCClient.list_jobs/get_job/stop_job. The engine
never pushes job updates, so observers poll at an interval of their choosing.

A job is pending while it has not finished, succeeded when it finished
successfully, and failed when it finished with an error.

Author: RCPanel Project
"""

import logging
import time
from typing import Callable, Iterator, List, Optional

from rcpanel.models import Job, JobState

logger = logging.getLogger(__name__)

# Default seconds between polls
DEFAULT_POLL_INTERVAL = 2.0


class JobTracker:
    """
    Polls job state through an RC client.

    Holds no job state of its own between polls; every snapshot is a fresh
    listing from the engine.
    """

    def __init__(self, client, poll_interval: float = DEFAULT_POLL_INTERVAL,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize job tracker.

        Args:
            client: RCClient used for polling
            poll_interval: Seconds between polls
            sleep: Sleep function (injectable for tests)
        """
        self.client = client
        self.poll_interval = poll_interval
        self._sleep = sleep

    def snapshot(self) -> List[Job]:
        """Current jobs, ordered by id."""
        return sorted(self.client.list_jobs(), key=lambda job: job.id)

    def pending(self) -> List[Job]:
        """Jobs that have not finished yet."""
        return [job for job in self.snapshot() if job.state == JobState.PENDING]

    def watch(self, should_stop: Callable[[], bool] = lambda: False) -> Iterator[List[Job]]:
        """
        Yield job snapshots every poll_interval seconds.

        Stops after the first snapshot with no pending job, or as soon as
        should_stop() returns True (checked before every poll).
        """
        while not should_stop():
            jobs = self.snapshot()
            yield jobs
            if not any(job.state == JobState.PENDING for job in jobs):
                return
            self._sleep(self.poll_interval)

    def wait(self, job_id: int, timeout: Optional[float] = None) -> Job:
        """
        Block until a job finishes.

        Args:
            job_id: Job to wait for
            timeout: Maximum seconds to wait (None waits forever)

        Returns:
            The finished job

        Raises:
            TimeoutError: If the job is still pending after timeout
            ProtocolError: If the job is unknown to the engine (e.g. already garbage-collected)
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            job = self.client.get_job(job_id)
            if job.state != JobState.PENDING:
                logger.info(f"Job {job_id} {job.state.value}")
                return job
            if deadline is not None and time.monotonic() >= deadline:
                raise TimeoutError(f"Job {job_id} still running after {timeout}s")
            self._sleep(self.poll_interval)
