from collections import namedtuple
import copy
from unittest.mock import MagicMock

import pytest

from ansible_collections.awx.automation.plugins.module_utils.awx.client import (
    AwxClient,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    AwxApiError,
)

Call = namedtuple("Call", "method path data query")


class FakeAwx(AwxClient):
    """
    An `AwxClient` serving canned responses per (method, path) and recording
    every request. A request without a registered route fails the test.
    """

    def __init__(self, module):
        super().__init__(module)
        self.routes = {}
        self.calls = []

    def on(self, method, path, body=None, status=200, error=None):
        """
        Registers a response. `body` may be a callable taking `(data, query)`;
        `error` is an HTTP status to raise as `AwxApiError`.
        """
        self.routes[(method, path)] = (body, status, error)
        return self

    def send_request(
        self, method, path, data=None, query_params=None, path_params=None
    ):
        if path_params:
            path = path.format(**path_params)
        self.calls.append(Call(method, path, copy.deepcopy(data), query_params))

        if (method, path) not in self.routes:
            raise AssertionError(f"Unexpected request: {method} {path}")

        body, status, error = self.routes[(method, path)]
        if error is not None:
            raise AwxApiError(error, path, f"HTTP Error {error}: upstream says no")
        if callable(body):
            body = body(data, query_params)
        return copy.deepcopy(body), status

    def requests(self, method=None):
        return [call for call in self.calls if method is None or call.method == method]


@pytest.fixture
def make_module():
    def _make(check_mode=False, **params):
        module = MagicMock()
        module.params = {
            "api_url": "https://awx.example.com",
            "access_token": "secret-token",
            "validate_certs": True,
            "request_timeout": 30,
        }
        module.params.update(params)
        module.check_mode = check_mode
        return module

    return _make


@pytest.fixture
def make_client():
    return FakeAwx


def paginated(*results):
    return {"count": len(results), "next": None, "previous": None, "results": list(results)}


@pytest.fixture
def page():
    return paginated
