"""
RCPanel - Engine Module

This module exports the process-wide RC client shared by every request.
Initialized in the server lifespan handler and torn down once at shutdown.
"""

import logging
from typing import Optional

from rcpanel.api import RCClient, JobTracker
from rcpanel.managers import ConfigManager

logger = logging.getLogger(__name__)

# Global RC client instance
# Initialized in server.py lifespan handler (or directly by tests)
rc_client: RCClient = None

# Seconds between polls for watching streams
poll_interval: float = 2.0


def InitializeEngine(config: ConfigManager) -> RCClient:
    """
    Create the shared RC client from configuration.

    Args:
        config: Loaded configuration

    Returns:
        The RC client now stored in engine.rc_client
    """
    global rc_client, poll_interval

    poll_interval = float(config.get("poll_interval_seconds", 2))

    if config.get("backend") == "embedded":
        logger.info("Using embedded librclone backend")
        rc_client = RCClient.embedded(config.get("library_path"))
        return rc_client

    url = config.get("rclone_url")
    logger.info(f"Using rclone RC API at {url}")
    rc_client = RCClient.from_url(url)

    credentials = config.get_credentials()
    if credentials:
        username, password = credentials
        rc_client.with_auth(username, password)
        logger.info(f"Using Basic auth for RC user '{username}'")

    return rc_client


def SetEngine(client: Optional[RCClient], interval: Optional[float] = None):
    """Install an already built RC client (used by tests and embedding applications)"""
    global rc_client, poll_interval
    rc_client = client
    if interval is not None:
        poll_interval = interval


def GetJobTracker() -> JobTracker:
    """Job tracker polling through the shared client"""
    return JobTracker(rc_client, poll_interval=poll_interval)


def ShutdownEngine():
    """Close the shared client. Must only happen once, at process shutdown."""
    global rc_client
    if rc_client is not None:
        rc_client.close()
        rc_client = None
        logger.info("RC client closed")
