"""
RCPanel - Decode Error Exception

Exception raised when an RC response does not have the expected JSON shape.

Author: RCPanel Project
"""

from .rc_error import RCError


class DecodeError(RCError):
    """Exception for malformed or unexpected RC response bodies."""

    def __init__(self, method: str, cause: Exception):
        self.method = method
        self.cause = cause
        super().__init__(f"unexpected response from {method}: {cause}")
