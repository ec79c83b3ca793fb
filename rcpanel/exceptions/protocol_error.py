"""
RCPanel - Protocol Error Exception

Exception raised when the engine answers an RC call with a non-200 status.

Author: RCPanel Project
"""

import json

from .rc_error import RCError


class ProtocolError(RCError):
    """
    Exception for RC calls that did not return status 200.

    Attributes:
        method: RC method that failed (e.g., "job/stop")
        status_code: Status code reported by the transport
        raw_body: Response body as returned by the transport (opaque diagnostic text)
    """

    def __init__(self, method: str, status_code: int, raw_body: str):
        self.method = method
        self.status_code = status_code
        self.raw_body = raw_body
        super().__init__(f"rc error {status_code} calling {method}: {self.message}")

    @property
    def message(self) -> str:
        """Best effort human readable message extracted from the raw body."""
        try:
            data = json.loads(self.raw_body)
        except (TypeError, ValueError):
            return self.raw_body
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return self.raw_body
