"""
RCPanel - Views

View models and rendering helpers shared by the page and streaming routes.
Templates are rendered to strings so the same markup can be returned as a
full page or patched into a region over the update channel.
"""

import hashlib
import html
import logging
import posixpath
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from fastapi.templating import Jinja2Templates

from rcpanel.exceptions import RCError
from rcpanel.models import Job, JobState, VersionInfo

# Create logger
logger = logging.getLogger(__name__)

# Get the directory where this package is located
script_dir = Path(__file__).parent

# Initialize Jinja2 templates
templates = Jinja2Templates(directory=str(script_dir / "templates"))

# Region that receives errors not tied to a specific panel
ERROR_REGION_ID = "errors"

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")

_SIZE_UNIT = 1024
_SIZE_PREFIXES = "KMGTPE"

# Status labels shown for jobs
JOB_STATUS_LABELS = {
    JobState.PENDING: "running",
    JobState.SUCCEEDED: "finished",
    JobState.FAILED: "error",
}


@dataclass
class RemoteInfo:
    """A remote as shown in the remotes list"""
    name: str
    type: str = "unknown"


@dataclass
class FileItem:
    """One row of the file browser"""
    name: str
    path: str  # Path from the remote's root
    size: str
    mod_time: str
    is_dir: bool


@dataclass
class JobInfo:
    """One row of the jobs list"""
    id: int
    group: str
    start_time: str
    status: str
    error: str = ""


@dataclass
class StatsInfo:
    """Formatted transfer statistics"""
    bytes: str = "0 B"
    speed: str = "0 B/s"
    eta: str = "-"
    elapsed_time: str = "0s"
    transfers: int = 0
    total_transfers: int = 0
    checks: int = 0
    total_checks: int = 0
    errors: int = 0
    deletes: int = 0
    signals: dict = field(default_factory=dict)


def RenderTemplate(name: str, **context) -> str:
    """Render a template to a string"""
    return templates.get_template(name).render(**context)


def ErrorFragment(message: str, element_id: Optional[str] = None) -> str:
    """
    Render the inline error fragment.

    This is the only error markup the application produces: page handlers
    return it as the body of a 500 response and streaming handlers patch it
    into the region that failed.
    """
    id_attribute = f' id="{html.escape(element_id)}"' if element_id else ""
    return f'<div{id_attribute} class="error">{html.escape(message)}</div>'


def FormatSize(size: int) -> str:
    """
    Format a byte count using 1024 based units.

    Examples: 512 -> "512 B", 1536 -> "1.5 KB", 1048576 -> "1.0 MB"
    """
    if size < _SIZE_UNIT:
        return f"{size} B"
    div, exp = _SIZE_UNIT, 0
    n = size // _SIZE_UNIT
    while n >= _SIZE_UNIT and exp < len(_SIZE_PREFIXES) - 1:
        div *= _SIZE_UNIT
        exp += 1
        n //= _SIZE_UNIT
    return f"{size / div:.1f} {_SIZE_PREFIXES[exp]}B"


def DomId(prefix: str, value) -> str:
    """
    Build a DOM id usable in a "#id" selector.

    Characters outside [A-Za-z0-9_-] are replaced, and a short digest of the
    original value is appended when that happened so ids stay unique.
    """
    value = str(value)
    safe = _UNSAFE_ID_CHARS.sub("_", value)
    if safe != value:
        safe += "-" + hashlib.sha1(value.encode("utf-8")).hexdigest()[:8]
    return f"{prefix}-{safe}"


def ParentPath(path: str) -> str:
    """Parent directory of a remote path ("" for the root)"""
    return posixpath.dirname(path.rstrip("/"))


# ==================== View Model Builders ====================

def GetRemotesInfo(rc) -> List[RemoteInfo]:
    """
    List remotes with their backend type.

    A remote whose configuration cannot be read is still listed, with type
    "unknown"; failing to list the remotes at all raises.
    """
    remotes = []
    for name in rc.list_remotes():
        remote_type = "unknown"
        try:
            remote_type = rc.get_remote(name).get("type", "unknown")
        except RCError as e:
            logger.warning(f"Could not read configuration of remote '{name}': {e}")
        remotes.append(RemoteInfo(name=name, type=remote_type))
    return remotes


def GetFileItems(rc, remote: str, path: str) -> List[FileItem]:
    """List a directory as file browser rows (directories first)"""
    items = []
    for entry in rc.list(remote, path):
        items.append(FileItem(
            name=entry.name,
            path=posixpath.join(path, entry.name) if path else entry.name,
            size="-" if entry.is_dir else FormatSize(max(entry.size_bytes, 0)),
            mod_time=entry.mod_time,
            is_dir=entry.is_dir
        ))
    items.sort(key=lambda item: (not item.is_dir, item.name.lower()))
    return items


def JobsInfoFromJobs(jobs: List[Job]) -> List[JobInfo]:
    """Convert jobs to list rows"""
    return [
        JobInfo(
            id=job.id,
            group=job.group,
            start_time=job.start_time or "",
            status=JOB_STATUS_LABELS[job.state],
            error=job.error or ""
        )
        for job in jobs
    ]


def GetJobsInfo(rc) -> List[JobInfo]:
    return JobsInfoFromJobs(rc.list_jobs())


def GetStatsInfo(rc) -> Tuple[StatsInfo, VersionInfo]:
    """
    Get formatted stats and version information.

    The stats page always renders: if either call fails the defaults
    ("0 B", "unknown", ...) are shown and the failure is logged.
    """
    stats = StatsInfo()
    version = VersionInfo()

    try:
        snapshot = rc.stats()
        stats = StatsInfo(
            bytes=FormatSize(snapshot.bytes_transferred),
            speed=FormatSize(int(snapshot.speed_bytes_per_sec)) + "/s",
            eta=f"{snapshot.eta_seconds:.0f}s" if snapshot.eta_seconds else "-",
            elapsed_time=f"{snapshot.elapsed_seconds:.1f}s",
            transfers=snapshot.transfers,
            total_transfers=snapshot.total_transfers,
            checks=snapshot.checks,
            total_checks=snapshot.total_checks,
            errors=snapshot.errors,
            deletes=snapshot.deletes,
            signals=snapshot.model_dump()
        )
    except RCError as e:
        logger.warning(f"Could not read stats: {e}")

    try:
        version = rc.version()
    except RCError as e:
        logger.warning(f"Could not read version: {e}")

    return stats, version


# Helpers available inside templates
templates.env.globals["dom_id"] = DomId
