"""
pytest plugin providing the harness environment as fixtures.

Fixtures:
- tracecheck_config (session): HarnessConfig from --tracecheck-* options,
  --tracecheck-config / TRACECHECK_CONFIG and TRACECHECK_* env vars
- tracecheck_environment (session): HarnessEnvironment, closed at session end
- trace_environment (function): the session environment, with the backend
  reset before the test and again after it so no exports leak between test cases
"""

from dataclasses import replace

import pytest

from .config import HarnessConfig, load_config
from .harness.environment import HarnessEnvironment


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("tracecheck", "trace verification harness")
    group.addoption(
        "--tracecheck-config",
        dest="tracecheck_config",
        default=None,
        help="YAML config file for the harness (default: TRACECHECK_CONFIG)",
    )
    group.addoption(
        "--tracecheck-backend-url",
        dest="tracecheck_backend_url",
        default=None,
        help="Base URL of the fake trace backend",
    )
    group.addoption(
        "--tracecheck-poll-deadline",
        dest="tracecheck_poll_deadline",
        type=float,
        default=None,
        help="Seconds to wait for exports to stop arriving",
    )


@pytest.fixture(scope="session")
def tracecheck_config(pytestconfig: pytest.Config) -> HarnessConfig:
    config = load_config(pytestconfig.getoption("tracecheck_config"))
    backend_url = pytestconfig.getoption("tracecheck_backend_url")
    if backend_url:
        config = replace(config, backend_url=backend_url)
    deadline = pytestconfig.getoption("tracecheck_poll_deadline")
    if deadline is not None:
        config = replace(config, poll_deadline=deadline)
    return config


@pytest.fixture(scope="session")
def tracecheck_environment(tracecheck_config: HarnessConfig):
    env = HarnessEnvironment.from_config(tracecheck_config)
    yield env
    env.close()


@pytest.fixture
def trace_environment(tracecheck_environment: HarnessEnvironment):
    # ResetFailure here surfaces as a setup error of this test.
    tracecheck_environment.reset_backend()
    yield tracecheck_environment
    tracecheck_environment.reset_backend()
