"""
Shared fixtures for RCPanel tests

Provides a scripted in-memory transport so the client, the job tracker and
the web routes can be tested without an rclone engine.
"""

import json

import pytest
from fastapi.testclient import TestClient

from rcpanel import engine
from rcpanel.api import RCClient
from rcpanel.api.transport import transport_failure


class FakeTransport:
    """
    Transport returning canned responses.

    Responses are registered per method, either as a (body, status) pair, a
    dict (returned as a 200 JSON body) or a callable taking the decoded
    params. Every call is recorded as (method, params) in `calls`.
    """

    def __init__(self):
        self.responses = {}
        self.calls = []
        self.closed = False

    def respond(self, method, response):
        self.responses[method] = response
        return self

    def fail(self, method, message, status=500):
        self.responses[method] = (json.dumps({"error": message, "status": status}), status)
        return self

    def unreachable(self, method, message="connection refused"):
        self.responses[method] = transport_failure(message)
        return self

    def call(self, method, params):
        decoded = json.loads(params) if params else {}
        self.calls.append((method, decoded))
        response = self.responses.get(method)
        if response is None:
            return json.dumps({"error": f"couldn't find method {method}", "status": 404}), 404
        if callable(response):
            response = response(decoded)
        if isinstance(response, dict):
            return json.dumps(response), 200
        return response

    def close(self):
        self.closed = True

    def methods(self):
        return [method for method, _ in self.calls]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def rc(transport):
    return RCClient(transport)


@pytest.fixture
def app_client(rc):
    """TestClient for the web application backed by the fake transport"""
    from rcpanel.server import CreateApp

    app = CreateApp(rc, poll_interval=0)
    with TestClient(app) as client:
        yield client
    engine.SetEngine(None)
