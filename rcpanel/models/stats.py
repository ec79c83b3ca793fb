"""
RCPanel - Stats Model

Pydantic model for core/stats. The engine omits fields that are not
currently meaningful, so every field defaults to zero.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StatsSnapshot(BaseModel):
    """Response model for core/stats"""
    model_config = ConfigDict(populate_by_name=True)

    bytes_transferred: int = Field(default=0, alias="bytes")
    speed_bytes_per_sec: float = Field(default=0.0, alias="speed")
    eta_seconds: float = Field(default=0.0, alias="eta")
    elapsed_seconds: float = Field(default=0.0, alias="elapsedTime")
    transfers: int = 0
    total_transfers: int = Field(default=0, alias="totalTransfers")
    checks: int = 0
    total_checks: int = Field(default=0, alias="totalChecks")
    errors: int = 0
    deletes: int = 0

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_zero(cls, value):
        # eta is null while nothing is transferring
        return 0 if value is None else value
