"""
Tests for the RC transports

Tests the HTTP transport against a mocked requests session and the embedded
transport against a fake librclone.
"""

import json
import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from rcpanel.api import EmbeddedTransport, HTTPTransport, Transport
from rcpanel.api.http_transport import REQUEST_TIMEOUT
from rcpanel.api.transport import is_transport_failure, normalize_params, transport_failure


def _response(status_code=200, text="{}"):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


# ==================== Shared Helpers ====================

def test_normalize_params():
    """Test that empty parameters become an empty JSON object"""
    assert normalize_params("") == "{}"
    assert normalize_params('{"a": 1}') == '{"a": 1}'


def test_transport_failure_marker():
    """Test synthesized failures are distinguishable from engine errors"""
    body, status = transport_failure("connection refused")

    assert status == 500
    assert json.loads(body) == {"error": "connection refused", "status": 500, "transport": True}
    assert is_transport_failure(body)
    assert not is_transport_failure('{"error": "boom", "status": 500}')
    assert not is_transport_failure("not json")


def test_transports_satisfy_protocol():
    """Test both transports implement the Transport protocol"""
    assert isinstance(HTTPTransport("http://localhost:5572"), Transport)
    assert isinstance(EmbeddedTransport(library_factory=lambda: FakeLibrary()), Transport)


# ==================== HTTP Transport ====================

def test_http_call_posts_json():
    """Test URL, body, headers and timeout of an HTTP call"""
    transport = HTTPTransport("http://localhost:5572/")

    with patch.object(requests.Session, "post", return_value=_response(text='{"remotes": []}')) as post:
        body, status = transport.call("config/listremotes", "")

    assert (body, status) == ('{"remotes": []}', 200)
    post.assert_called_once_with(
        "http://localhost:5572/config/listremotes",
        data=b"{}",
        headers={"Content-Type": "application/json"},
        timeout=REQUEST_TIMEOUT
    )


def test_http_call_passes_engine_errors_through():
    """Test that a non-200 response is returned, not raised"""
    transport = HTTPTransport("http://localhost:5572")

    with patch.object(requests.Session, "post", return_value=_response(404, '{"error": "not found"}')):
        body, status = transport.call("config/get", '{"name": "x"}')

    assert status == 404
    assert not is_transport_failure(body)


def test_http_basic_auth():
    """Test that credentials are attached and can be removed"""
    transport = HTTPTransport("http://localhost:5572", "user", "secret")
    assert transport.session.auth == ("user", "secret")

    transport.with_auth("", "")
    assert transport.session.auth is None


def test_http_connection_error_maps_to_500():
    """Test that connection failures become a synthesized status 500"""
    transport = HTTPTransport("http://localhost:5572")

    with patch.object(requests.Session, "post", side_effect=requests.exceptions.ConnectionError("refused")):
        body, status = transport.call("core/version", "{}")

    assert status == 500
    assert is_transport_failure(body)
    assert "refused" in json.loads(body)["error"]


def test_http_timeout_maps_to_500():
    """Test that timeouts become a synthesized status 500"""
    transport = HTTPTransport("http://localhost:5572")

    with patch.object(requests.Session, "post", side_effect=requests.exceptions.Timeout()):
        body, status = transport.call("core/stats", "{}")

    assert status == 500
    assert "timed out" in json.loads(body)["error"]


# ==================== Embedded Transport ====================

class FakeLibrary:
    """Stand-in for librclone recording lifecycle calls"""

    def __init__(self, fail=False):
        self.fail = fail
        self.initialized = 0
        self.finalized = 0
        self.calls = []

    def initialize(self):
        if self.fail:
            raise OSError("librclone.so: cannot open shared object file")
        self.initialized += 1

    def finalize(self):
        self.finalized += 1

    def rpc(self, method, params):
        self.calls.append((method, params))
        return '{"ok": true}', 200


def test_embedded_initializes_once_under_concurrency():
    """Test that concurrent first calls initialize librclone exactly once"""
    library = FakeLibrary()
    created = []

    def factory():
        created.append(library)
        return library

    transport = EmbeddedTransport(library_factory=factory)
    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append(transport.call("core/version", ""))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(created) == 1
    assert library.initialized == 1
    assert results == [('{"ok": true}', 200)] * 8


def test_embedded_empty_params():
    """Test that empty parameters are sent as "{}" """
    library = FakeLibrary()
    transport = EmbeddedTransport(library_factory=lambda: library)

    transport.call("core/stats", "")

    assert library.calls == [("core/stats", "{}")]


def test_embedded_initialization_failure_is_remembered():
    """Test that a failed initialization is reported on every call without retrying"""
    attempts = []

    def factory():
        attempts.append(1)
        return FakeLibrary(fail=True)

    transport = EmbeddedTransport(library_factory=factory)

    for _ in range(3):
        body, status = transport.call("core/version", "{}")
        assert status == 500
        assert is_transport_failure(body)
        assert "librclone" in json.loads(body)["error"]

    assert len(attempts) == 1


def test_embedded_close_finalizes_once():
    """Test that close finalizes the library once and later calls are rejected"""
    library = FakeLibrary()
    transport = EmbeddedTransport(library_factory=lambda: library)
    transport.call("core/version", "{}")

    transport.close()
    transport.close()

    assert library.finalized == 1
    with pytest.raises(RuntimeError):
        transport.call("core/version", "{}")


def test_embedded_close_without_calls():
    """Test that closing an unused transport never loads the library"""
    created = []
    transport = EmbeddedTransport(library_factory=lambda: created.append(1))

    transport.close()

    assert created == []
