"""
RCPanel - Job Model

Pydantic model for an engine-tracked asynchronous operation (job/status).

The engine owns every state transition. The client never mutates a job; it
re-fetches it by id, and must expect the id to disappear once the engine
garbage-collects finished jobs.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JobState(str, Enum):
    """Polling view of a job"""
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Job(BaseModel):
    """Response model for job/status"""
    model_config = ConfigDict(populate_by_name=True)

    id: int = 0  # job/status does not always echo the id; the client fills it in
    group: str = ""
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    finished: bool
    success: bool
    error: Optional[str] = None

    @model_validator(mode="after")
    def _normalize(self) -> "Job":
        # Running jobs report error "" and a zero endTime; neither means anything yet
        if not self.finished:
            self.success = False
            self.error = None
            self.end_time = None
        elif not self.success and self.error is None:
            self.error = ""
        return self

    @property
    def state(self) -> JobState:
        if not self.finished:
            return JobState.PENDING
        if self.success:
            return JobState.SUCCEEDED
        return JobState.FAILED
