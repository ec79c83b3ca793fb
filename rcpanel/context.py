"""
RCPanel - Request Context

Per-request accessors and response helpers handed to every route handler.
"""

import logging
from typing import Any, Callable, Dict, Optional, Type, TypeVar
from urllib.parse import parse_qs

from anyio import from_thread
from datastar_py.fastapi import read_signals as read_datastar_signals
from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel

from rcpanel.update_channel import UpdateChannel

logger = logging.getLogger(__name__)

# Accept header sent by the Datastar client
SSE_MEDIA_TYPE = "text/event-stream"

ModelT = TypeVar("ModelT", bound=BaseModel)


class Context:
    """
    Request data and response helpers for one inbound request.

    The request body is read once by the router before the handler runs,
    because handlers are plain functions executed on a worker thread.
    """

    def __init__(self, request: Request, body: bytes = b"",
                 channel_factory: Optional[Callable[[], UpdateChannel]] = None):
        """
        Initialize request context.

        Args:
            request: Incoming request
            body: Raw request body
            channel_factory: Opens the update channel; only set for streaming routes
        """
        self.request = request
        self.body = body
        self.response: Optional[Response] = None
        self.response_headers: Dict[str, str] = {}
        self._channel_factory = channel_factory
        self._channel: Optional[UpdateChannel] = None
        self._form: Optional[Dict[str, list]] = None

    # ==================== Request Data ====================

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.url.path

    def param(self, key: str) -> str:
        """Return a URL path parameter ("" if absent)."""
        return str(self.request.path_params.get(key, ""))

    def query(self, key: str) -> str:
        """Return a query string parameter ("" if absent)."""
        return self.request.query_params.get(key, "")

    def form_value(self, key: str) -> str:
        """Return a form field from a url-encoded body, falling back to the query string."""
        if self._form is None:
            self._form = {}
            content_type = self.header("content-type")
            if content_type.startswith("application/x-www-form-urlencoded"):
                self._form = parse_qs(self.body.decode("utf-8"))
        values = self._form.get(key)
        if values:
            return values[0]
        return self.query(key)

    def header(self, key: str) -> str:
        """Return a request header value ("" if absent)."""
        return self.request.headers.get(key, "")

    def is_datastar(self) -> bool:
        """True if the request was made by the Datastar client."""
        return self.header("accept") == SSE_MEDIA_TYPE or self.header("datastar-request") == "true"

    def read_signals(self, model: Optional[Type[ModelT]] = None) -> Any:
        """
        Extract Datastar signals from the request.

        Decoding is done by the Datastar SDK (the "datastar" query parameter
        for GET, the JSON body otherwise). Must be called from the worker
        thread the router runs the handler on.

        Args:
            model: Optional pydantic model to validate the signals against

        Returns:
            The signals as a dict ({} when the request carries none), or as
            an instance of model

        Raises:
            ValueError: If the signals are not valid JSON (or fail validation)
        """
        signals = from_thread.run(read_datastar_signals, self.request) or {}
        if model is not None:
            return model.model_validate(signals)
        return signals

    def bind(self, model: Type[ModelT]) -> ModelT:
        """Decode the JSON body into a pydantic model."""
        return model.model_validate_json(self.body or b"{}")

    # ==================== Streaming ====================

    def sse(self) -> UpdateChannel:
        """
        Open (or return the already open) update channel for this request.

        Raises:
            RuntimeError: If the route is not a streaming route
        """
        if self._channel is None:
            if self._channel_factory is None:
                raise RuntimeError(f"{self.method} {self.path} is not a streaming route")
            self._channel = self._channel_factory()
        return self._channel

    # ==================== Responses ====================

    def set_header(self, key: str, value: str):
        """Set a response header (page handlers)."""
        self.response_headers[key] = value

    def json(self, data: Any, status_code: int = 200):
        """Respond with JSON instead of the handler's HTML body."""
        self.response = JSONResponse(data, status_code=status_code, headers=self.response_headers)

    def redirect(self, url: str):
        """Respond with a 303 redirect instead of the handler's HTML body."""
        self.response = RedirectResponse(url, status_code=303, headers=self.response_headers)
