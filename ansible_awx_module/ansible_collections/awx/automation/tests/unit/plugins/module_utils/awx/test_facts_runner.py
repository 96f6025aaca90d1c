import pytest

from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    AmbiguousResult,
    MissingSelector,
    NotFound,
)
from ansible_collections.awx.automation.plugins.module_utils.awx.facts_runner import (
    FactsRunner,
)
from ansible_collections.awx.automation.plugins.modules.credential_info import (
    RUNNER_CONTEXT,
)

CREDENTIALS = "/api/v2/credentials/"


@pytest.fixture
def setup(make_module, make_client):
    def _setup(**params):
        module = make_module(**{"id": None, "name": None, **params})
        client = make_client(module)
        return FactsRunner(module, RUNNER_CONTEXT, client=client), module, client

    return _setup


def test_lookup_by_name_fills_state(setup, page):
    runner, module, client = setup(name="svc-account")
    client.on(
        "GET",
        CREDENTIALS,
        page({"id": 42, "name": "svc-account", "kind": "ssh", "inputs": {"username": "svc"}}),
    )

    runner.run()

    module.exit_json.assert_called_once_with(
        changed=False,
        id="42",
        resource={"id": 42, "name": "svc-account", "username": "svc", "kind": "ssh"},
    )
    assert client.calls[0].query == {"name": "svc-account"}


def test_lookup_by_id_and_name(setup, page):
    runner, _, client = setup(id=42, name="svc-account")
    client.on("GET", CREDENTIALS, page({"id": 42, "name": "svc-account", "kind": "ssh"}))

    runner.read()

    assert runner.identity == "42"
    assert runner.state["username"] is None
    assert client.calls[0].query == {"id": "42", "name": "svc-account"}


@pytest.mark.parametrize(
    "results,error",
    [
        ([], NotFound),
        ([{"id": 1}, {"id": 2}], AmbiguousResult),
    ],
)
def test_lookup_failures_are_reported(setup, page, results, error):
    runner, module, client = setup(name="svc")
    client.on("GET", CREDENTIALS, page(*results))

    runner.run()

    assert module.fail_json.call_args.kwargs["summary"] == error.summary
    module.exit_json.assert_not_called()


def test_lookup_without_selectors_makes_no_request(setup):
    runner, module, client = setup()

    runner.run()

    assert module.fail_json.call_args.kwargs["summary"] == MissingSelector.summary
    assert client.calls == []
