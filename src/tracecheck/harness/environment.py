"""
Environment context shared by the test cases of one test class or session.

The environment owns the backend client and any other resources registered
with it (containers, networks, processes; anything with a stop() method), and
is the only place their lifecycle is controlled:

    with HarnessEnvironment(BackendClient(url), config) as env:
        ...drive the target...
        graph = env.wait_for_traces()
        env.reset_backend()

The backend store is shared mutable state, so one environment must never be
polled from two test cases at the same time.
"""

import logging
import threading
from collections.abc import Iterable
from typing import Protocol, TypeVar

from ..config import HarnessConfig
from ..decoding.export_decoder import DecodeReport, decode, decode_report
from ..errors import ConcurrentPollError, TeardownError
from ..inspection.trace_graph import TraceGraph
from ..polling.stabilizer import await_stable_content
from .backend import BackendClient

logger = logging.getLogger(__name__)


class ManagedResource(Protocol):
    def stop(self) -> None: ...


R = TypeVar("R", bound=ManagedResource)


class HarnessEnvironment:
    """Owns the backend client and managed resources for a group of test cases."""

    def __init__(
        self,
        backend: BackendClient,
        config: HarnessConfig | None = None,
        resources: Iterable[ManagedResource] = (),
    ):
        self.backend = backend
        self.config = config or HarnessConfig(backend_url=backend.base_url)
        self._resources: list[ManagedResource] = list(resources)
        self._poll_lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_config(cls, config: HarnessConfig) -> "HarnessEnvironment":
        backend = BackendClient(config.backend_url, timeout=config.request_timeout)
        return cls(backend, config)

    def add_resource(self, resource: R) -> R:
        """Take ownership of a resource; it is stopped when the environment closes."""
        self._resources.append(resource)
        return resource

    def reset_backend(self) -> None:
        """Clear the backend store. ResetFailure propagates and is not retried."""
        self.backend.clear_requests()

    def wait_for_content(self) -> bytes:
        """Poll the backend until the accumulated payload stops growing."""
        if not self._poll_lock.acquire(blocking=False):
            raise ConcurrentPollError(f"{self.backend!r} is already being polled")
        try:
            return await_stable_content(
                self.backend.fetch_requests,
                min_length=self.config.min_length,
                deadline=self.config.poll_deadline,
                poll_interval=self.config.poll_interval,
            )
        finally:
            self._poll_lock.release()

    def wait_for_report(self) -> DecodeReport:
        return decode_report(self.wait_for_content())

    def wait_for_traces(self) -> TraceGraph:
        """Poll until quiescent, decode the payload and wrap it for assertions."""
        return TraceGraph(decode(self.wait_for_content()))

    def close(self) -> None:
        """
        Stop every managed resource in reverse registration order, then close the backend client.

        All resources are attempted even if some fail; failures are raised
        together as TeardownError.
        """
        if self._closed:
            return
        self._closed = True
        errors: list[BaseException] = []
        while self._resources:
            resource = self._resources.pop()
            try:
                resource.stop()
            except Exception as e:
                logger.error("Failed to stop %r: %s", resource, e)
                errors.append(e)
        self.backend.close()
        if errors:
            raise TeardownError(errors)

    def __enter__(self) -> "HarnessEnvironment":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
