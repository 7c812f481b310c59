"""Tests for the pytest plugin fixtures, run in isolated pytest sessions."""

from importlib.metadata import entry_points

import pytest

# Inner-session conftest: the session-scoped environment talks to an in-memory
# backend that already holds one export from an earlier run.
_STUB_CONFTEST = """
import json

import pytest

from tracecheck.harness import BackendClient, HarnessEnvironment

CLEAR_STATUS = {clear_status}

STALE = {{
    "resourceSpans": [
        {{"resource": {{"attributes": [
            {{"key": "service.name", "value": {{"stringValue": "stale"}}}}
        ]}}}}
    ]
}}


class StubResponse:
    def __init__(self, status_code, content=b""):
        self.status_code = status_code
        self.content = content
        self.ok = status_code < 400

    def raise_for_status(self):
        pass


class StubSession:
    def __init__(self):
        self.stored = [STALE]
        self.calls = []

    def get(self, url, timeout=None):
        if url.endswith("/clear-requests"):
            self.calls.append("clear")
            if CLEAR_STATUS < 400:
                self.stored.clear()
            return StubResponse(CLEAR_STATUS)
        self.calls.append("fetch")
        return StubResponse(200, json.dumps(self.stored).encode())

    def close(self):
        pass


@pytest.fixture(scope="session")
def tracecheck_environment(tracecheck_config):
    client = BackendClient(tracecheck_config.backend_url, session=StubSession())
    env = HarnessEnvironment(client, tracecheck_config)
    yield env
    env.close()
"""

_ISOLATION_TESTS = """
def test_first(trace_environment):
    assert trace_environment.backend.session.calls == ["clear"]
    graph = trace_environment.wait_for_traces()
    assert graph.find_resource_attributes("service.name").to_list() == []
    # the target emits during this test
    trace_environment.backend.session.stored.append({"resourceSpans": []})


def test_second(trace_environment):
    graph = trace_environment.wait_for_traces()
    assert graph.records == ()
"""


def _plugin_installed() -> bool:
    return any(
        ep.name == "tracecheck" and ep.value == "tracecheck.plugin"
        for ep in entry_points(group="pytest11")
    )


@pytest.fixture
def plugin_args() -> list[str]:
    """Load the plugin explicitly only when the entry point is not installed."""
    return [] if _plugin_installed() else ["-p", "tracecheck.plugin"]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TRACECHECK_CONFIG", "TRACECHECK_BACKEND_URL", "TRACECHECK_POLL_DEADLINE"):
        monkeypatch.delenv(name, raising=False)


def test_entry_point_registers_plugin(pytester: pytest.Pytester) -> None:
    """With the package installed, pytest loads the plugin without any -p flag."""
    if not _plugin_installed():
        pytest.skip("tracecheck is not installed; pytest11 entry point unavailable")

    result = pytester.runpytest("--help")

    result.stdout.fnmatch_lines(["*--tracecheck-backend-url*", "*--tracecheck-poll-deadline*"])


def test_backend_is_reset_before_each_test(pytester: pytest.Pytester, plugin_args) -> None:
    """Stale exports from before the session and from the previous test are never seen."""
    pytester.makeconftest(_STUB_CONFTEST.format(clear_status=200))
    pytester.makepyfile(test_isolation=_ISOLATION_TESTS)

    result = pytester.runpytest(*plugin_args, "--tracecheck-poll-deadline=0")

    result.assert_outcomes(passed=2)


def test_rejected_reset_is_a_setup_error(pytester: pytest.Pytester, plugin_args) -> None:
    """A backend that refuses to clear stops each test at setup, before it sees stale data."""
    pytester.makeconftest(_STUB_CONFTEST.format(clear_status=503))
    pytester.makepyfile(test_isolation=_ISOLATION_TESTS)

    result = pytester.runpytest(*plugin_args, "--tracecheck-poll-deadline=0")

    result.assert_outcomes(errors=2)
    result.stdout.fnmatch_lines(
        [
            "*ERROR at setup of test_first*",
            "*ResetFailure*HTTP 503*",
            "*ERROR at setup of test_second*",
        ]
    )


def test_command_line_options_override_config(pytester: pytest.Pytester, plugin_args) -> None:
    pytester.makepyfile(
        test_options="""
def test_config(tracecheck_config):
    assert tracecheck_config.backend_url == "http://backend:18080"
    assert tracecheck_config.poll_deadline == 1.5
    assert tracecheck_config.poll_interval == 0.5
"""
    )

    result = pytester.runpytest(
        *plugin_args,
        "--tracecheck-backend-url=http://backend:18080",
        "--tracecheck-poll-deadline=1.5",
    )

    result.assert_outcomes(passed=1)
