"""
RCPanel - Remote Configuration Model

Pydantic model for a configured rclone remote.
"""

from typing import Dict
from pydantic import BaseModel


class RemoteConfig(BaseModel):
    """A named storage location known to the engine"""
    name: str
    type: str
    options: Dict[str, str] = {}

    @classmethod
    def FromConfig(cls, name: str, config: Dict[str, str]) -> "RemoteConfig":
        """Build from a config/get result, splitting "type" out of the options"""
        options = {key: value for key, value in config.items() if key != "type"}
        return cls(name=name, type=config.get("type", "unknown"), options=options)
