"""
RCPanel - RC Client Module

Typed facade over a Transport. Encodes domain operations (remotes, file
listings, delete/copy/move, jobs, statistics) as rclone RC calls and decodes
the JSON results into the value types in rcpanel.models.

The client holds no cache: every method is one or more fresh round-trips.
Errors are never retried here.

Author: RCPanel Project
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from rcpanel.api.embedded_transport import EmbeddedTransport
from rcpanel.api.http_transport import HTTPTransport
from rcpanel.api.transport import EMPTY_PARAMS, STATUS_OK, Transport, is_transport_failure
from rcpanel.exceptions import DecodeError, ProtocolError, TransportError
from rcpanel.models import Job, ListEntry, RemoteConfig, StatsSnapshot, VersionInfo

# Configure logging
logger = logging.getLogger(__name__)

_remote_options = TypeAdapter(Dict[str, str])


class _RemotesResult(BaseModel):
    remotes: Optional[List[str]] = None


class _ListResult(BaseModel):
    list: Optional[List[ListEntry]] = None


class _JobIdsResult(BaseModel):
    jobids: Optional[List[int]] = None


def fs_address(remote: str, path: str = "") -> str:
    """
    Build an engine filesystem address.

    Args:
        remote: Remote name (e.g., "gdrive")
        path: Path inside the remote; empty means the remote's root

    Returns:
        "<remote>:<path>" (e.g., "gdrive:sub/dir", or "gdrive:" for the root)
    """
    return f"{remote}:{path}"


class RCClient:
    """
    Client for the rclone RC API.

    The same methods work whether the transport is HTTP or embedded.
    Safe to share between request threads as long as the transport is.
    """

    def __init__(self, transport: Transport):
        """
        Initialize RC client.

        Args:
            transport: Transport used for every call
        """
        self.transport = transport

    @classmethod
    def from_url(cls, base_url: str, username: Optional[str] = None,
                 password: Optional[str] = None) -> "RCClient":
        """Create a client connected to a remote `rclone rcd` over HTTP."""
        return cls(HTTPTransport(base_url, username, password))

    @classmethod
    def embedded(cls, library_path: Optional[str] = None) -> "RCClient":
        """Create a client running rclone in-process through librclone."""
        return cls(EmbeddedTransport(library_path))

    def with_auth(self, username: str, password: str) -> "RCClient":
        """
        Set Basic auth credentials. Only meaningful for the HTTP transport;
        ignored otherwise.
        """
        if isinstance(self.transport, HTTPTransport):
            self.transport.with_auth(username, password)
        return self

    def close(self):
        """
        Release transport resources.

        For the embedded transport this finalizes librclone, so it should
        only happen once, at process shutdown.
        """
        self.transport.close()

    def _call(self, method: str, params: Optional[Dict[str, Any]] = None) -> str:
        """
        Make an RC call and return the raw JSON body.

        Raises:
            TransportError: If the engine could not be reached
            ProtocolError: If the engine returned a non-200 status
        """
        params_json = json.dumps(params) if params is not None else EMPTY_PARAMS

        body, status = self.transport.call(method, params_json)

        if status != STATUS_OK:
            if is_transport_failure(body):
                raise TransportError(method, status, body)
            logger.debug(f"RC {method} failed with status {status}: {body}")
            raise ProtocolError(method, status, body)

        return body

    def _decode(self, method: str, body: str, model):
        """
        Validate a JSON body against a pydantic model or TypeAdapter.

        Raises:
            DecodeError: If the body is not JSON or has an unexpected shape
        """
        try:
            if isinstance(model, TypeAdapter):
                return model.validate_json(body)
            return model.model_validate_json(body)
        except ValidationError as e:
            raise DecodeError(method, e) from e

    # ==================== Config Operations ====================

    def list_remotes(self) -> List[str]:
        """
        List configured remotes, in the order the engine returns them.

        Raises:
            ProtocolError: If the call fails
            DecodeError: If the response has an unexpected shape
        """
        body = self._call("config/listremotes")
        result = self._decode("config/listremotes", body, _RemotesResult)
        return result.remotes or []

    def get_remote(self, name: str) -> Dict[str, str]:
        """
        Get the configuration of a remote.

        Returns:
            Option mapping including "type" (e.g., {"type": "s3", "provider": "AWS"})
        """
        body = self._call("config/get", {"name": name})
        return self._decode("config/get", body, _remote_options)

    def get_remote_config(self, name: str) -> RemoteConfig:
        """Get the configuration of a remote as a RemoteConfig."""
        return RemoteConfig.FromConfig(name, self.get_remote(name))

    def delete_remote(self, name: str):
        """
        Delete a remote configuration.

        Deleting a remote that does not exist is reported by the engine and
        surfaces as ProtocolError like any other engine error.
        """
        self._call("config/delete", {"name": name})
        logger.info(f"Deleted remote: {name}")

    # ==================== File Operations ====================

    def list(self, remote: str, path: str = "") -> List[ListEntry]:
        """
        List a directory.

        Args:
            remote: Remote name
            path: Directory inside the remote ("" for the root)

        Returns:
            Entries of the directory
        """
        body = self._call("operations/list", {
            "fs": fs_address(remote, path),
            "remote": ""
        })
        result = self._decode("operations/list", body, _ListResult)
        return result.list or []

    def mkdir(self, remote: str, path: str):
        """Create a directory (and any missing parents)."""
        self._call("operations/mkdir", {
            "fs": fs_address(remote),
            "remote": path
        })

    def delete_file(self, remote: str, path: str):
        """Delete a single file."""
        self._call("operations/deletefile", {
            "fs": fs_address(remote),
            "remote": path
        })
        logger.info(f"Deleted file {fs_address(remote, path)}")

    def purge(self, remote: str, path: str):
        """Delete a directory and all of its contents."""
        self._call("operations/purge", {
            "fs": fs_address(remote),
            "remote": path
        })
        logger.info(f"Purged {fs_address(remote, path)}")

    # ==================== Sync Operations ====================

    def copy(self, src_remote: str, src_path: str, dst_remote: str, dst_path: str):
        """
        Start copying from source to destination.

        The engine runs the copy as a job and returns immediately; use
        list_jobs() to follow its progress.
        """
        self._call("sync/copy", {
            "srcFs": fs_address(src_remote, src_path),
            "dstFs": fs_address(dst_remote, dst_path),
            "_async": True
        })
        logger.info(f"Started copy {fs_address(src_remote, src_path)} -> {fs_address(dst_remote, dst_path)}")

    def move(self, src_remote: str, src_path: str, dst_remote: str, dst_path: str):
        """Start moving from source to destination (runs as a job, like copy())."""
        self._call("sync/move", {
            "srcFs": fs_address(src_remote, src_path),
            "dstFs": fs_address(dst_remote, dst_path),
            "_async": True
        })
        logger.info(f"Started move {fs_address(src_remote, src_path)} -> {fs_address(dst_remote, dst_path)}")

    # ==================== Core Operations ====================

    def version(self) -> VersionInfo:
        """Get engine version information. Missing fields default to "unknown"."""
        body = self._call("core/version")
        return self._decode("core/version", body, VersionInfo)

    def stats(self) -> StatsSnapshot:
        """Get current transfer statistics. Missing fields default to zero."""
        body = self._call("core/stats")
        return self._decode("core/stats", body, StatsSnapshot)

    # ==================== Job Operations ====================

    def list_jobs(self) -> List[Job]:
        """
        List all jobs the engine still knows about.

        Fetches the id list, then each job's status. A job whose status
        cannot be fetched (e.g. garbage-collected in between) is dropped
        from the result instead of failing the whole listing.

        Raises:
            ProtocolError: If job/list itself fails
            DecodeError: If job/list returns an unexpected shape
        """
        body = self._call("job/list")
        result = self._decode("job/list", body, _JobIdsResult)

        jobs = []
        for job_id in result.jobids or []:
            try:
                jobs.append(self.get_job(job_id))
            except (ProtocolError, DecodeError) as e:
                logger.warning(f"Dropping job {job_id} from listing: {e}")
        return jobs

    def get_job(self, job_id: int) -> Job:
        """
        Get the status of one job.

        Raises:
            ProtocolError: If the job does not exist (anymore) or the call fails
        """
        body = self._call("job/status", {"jobid": job_id})
        job = self._decode("job/status", body, Job)
        job.id = job_id
        return job

    def stop_job(self, job_id: int):
        """Stop a running job."""
        self._call("job/stop", {"jobid": job_id})
        logger.info(f"Stopped job {job_id}")
