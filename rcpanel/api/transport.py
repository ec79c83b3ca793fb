"""
RCPanel - Transport Contract

A transport executes one named RC call with a JSON argument bundle and
returns the JSON result together with an HTTP style status code.

Two implementations exist, selected when the client is constructed:
- HTTPTransport: POSTs to a remote rclone RC endpoint ("rclone rcd")
- EmbeddedTransport: calls librclone linked into this process

Transports never retry and never raise for remote failures. A failed call
is reported through the status code (anything other than 200) and an
error payload in the body.

Author: RCPanel Project
"""

import json
from typing import Protocol, Tuple, runtime_checkable

# Status code reported by transports on success
STATUS_OK = 200

# Status code used for failures synthesized by the transport itself
STATUS_TRANSPORT_FAILURE = 500

# The RC API always expects a JSON object, even for calls without arguments
EMPTY_PARAMS = "{}"


@runtime_checkable
class Transport(Protocol):
    """Capability shared by every transport."""

    def call(self, method: str, params: str) -> Tuple[str, int]:
        """
        Execute one RC call.

        Args:
            method: Slash separated namespace/action pair (e.g., "config/listremotes")
            params: JSON object encoded as a string ("" is treated as "{}")

        Returns:
            Tuple of (response body JSON, status code)
        """
        ...

    def close(self) -> None:
        """Release resources held by the transport."""
        ...


def normalize_params(params: str) -> str:
    """Replace an empty parameter string with an empty JSON object."""
    if not params:
        return EMPTY_PARAMS
    return params


def transport_failure(message: str) -> Tuple[str, int]:
    """
    Build the (body, status) pair reported when the engine could not be reached.

    The body is tagged with "transport": true so the client can tell these
    apart from errors reported by the engine itself.
    """
    body = json.dumps({
        "error": message,
        "status": STATUS_TRANSPORT_FAILURE,
        "transport": True
    })
    return body, STATUS_TRANSPORT_FAILURE


def is_transport_failure(body: str) -> bool:
    """Check whether a response body was synthesized by transport_failure()."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return False
    return isinstance(data, dict) and data.get("transport") is True
