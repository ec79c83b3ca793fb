"""
RCPanel - List Entry Model

Pydantic model for one item of an operations/list result.
"""

from pydantic import BaseModel, ConfigDict, Field


class ListEntry(BaseModel):
    """File or directory returned by operations/list"""
    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(alias="Path")
    name: str = Field(alias="Name")
    size_bytes: int = Field(alias="Size")  # -1 when the backend does not know the size
    mod_time: str = Field(default="", alias="ModTime")
    is_dir: bool = Field(alias="IsDir")
