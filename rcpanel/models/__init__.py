"""
RCPanel - Models Package

Value types decoded from RC responses, and the signal models sent by the
browser. Response values are produced fresh per call; nothing here is
cached or mutated after decoding.
"""

from rcpanel.models.remote_config import RemoteConfig
from rcpanel.models.list_entry import ListEntry
from rcpanel.models.job import Job, JobState
from rcpanel.models.stats import StatsSnapshot
from rcpanel.models.version import VersionInfo
from rcpanel.models.signals import MkdirSignals, TransferSignals

__all__ = [
    'RemoteConfig',
    'ListEntry',
    'Job',
    'JobState',
    'StatsSnapshot',
    'VersionInfo',
    'MkdirSignals',
    'TransferSignals',
]
