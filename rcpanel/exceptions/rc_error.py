"""
RCPanel - RC Error Exception

Base exception class for all RC client errors.

Author: RCPanel Project
"""


class RCError(Exception):
    """Base exception for RC client errors."""
    pass
