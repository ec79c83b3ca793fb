"""
RCPanel - API Package

This package contains the RC client, its transports and the job tracker.
"""

from rcpanel.api.transport import Transport
from rcpanel.api.http_transport import HTTPTransport
from rcpanel.api.embedded_transport import EmbeddedTransport
from rcpanel.api.rc_client import RCClient, fs_address
from rcpanel.api.job_tracker import JobTracker

__all__ = ['Transport', 'HTTPTransport', 'EmbeddedTransport', 'RCClient', 'fs_address', 'JobTracker']
