"""
RCPanel - Version Model

Pydantic model for core/version.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VersionInfo(BaseModel):
    """Response model for core/version"""
    model_config = ConfigDict(populate_by_name=True)

    version: str = "unknown"
    runtime_version: str = Field(default="unknown", alias="goVersion")
    os: str = "unknown"
    arch: str = "unknown"

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_unknown(cls, value):
        return "unknown" if value is None else value
