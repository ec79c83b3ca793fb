"""
RCPanel - Exceptions Package

Contains all exception classes raised by the RC client.

Author: RCPanel Project
"""

from .rc_error import RCError
from .protocol_error import ProtocolError
from .transport_error import TransportError
from .decode_error import DecodeError

__all__ = [
    'RCError',
    'ProtocolError',
    'TransportError',
    'DecodeError'
]
