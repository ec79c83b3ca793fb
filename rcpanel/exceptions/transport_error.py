"""
RCPanel - Transport Error Exception

Exception raised when the engine could not be reached at all.

Author: RCPanel Project
"""

from .protocol_error import ProtocolError


class TransportError(ProtocolError):
    """Exception for connection, timeout and body-read failures (reported as status 500)."""
    pass
