"""
Wait for an accumulating payload to stop growing.

The backend receives span batches asynchronously and offers no completion
signal, so delivery is considered finished once two consecutive fetches return
payloads of the same length. Length equality stands in for content equality:
two different payloads of coincidentally equal length are accepted as stable.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import AnyStr

from ..defaults import DEFAULT_MIN_LENGTH, DEFAULT_POLL_DEADLINE, DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)


@dataclass
class PollState:
    """Per-invocation poll bookkeeping; never shared between calls."""

    deadline: float
    last_observed_size: int | None = None
    attempts: int = 0

    def observe(self, size: int, min_length: int) -> bool:
        """Record a fetch of the given size; return True when it proves stability."""
        self.attempts += 1
        stable = size > min_length and size == self.last_observed_size
        self.last_observed_size = size
        return stable


def await_stable_content(
    fetch: Callable[[], AnyStr],
    min_length: int = DEFAULT_MIN_LENGTH,
    deadline: float = DEFAULT_POLL_DEADLINE,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    *,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> AnyStr:
    """
    Poll fetch() until its payload length stops changing.

    Args:
        fetch: Returns the current cumulative payload. Exceptions propagate.
        min_length: Payloads no longer than this never count as stable.
        deadline: Seconds to keep polling before giving up.
        poll_interval: Seconds to sleep between fetches.
        clock: Monotonic time source.
        sleep: Sleep function.

    Returns:
        The stable payload, or the last fetched payload when the deadline
        elapses first. A timeout is not an error.
    """
    state = PollState(deadline=clock() + deadline)
    while True:
        content = fetch()
        if state.observe(len(content), min_length):
            logger.debug(
                "Content stable at size %d after %d fetches", len(content), state.attempts
            )
            return content
        logger.debug("Current content size %d", state.last_observed_size)
        if clock() >= state.deadline:
            logger.warning(
                "Content did not stabilize within %.1fs (%d fetches, last size %d)",
                deadline,
                state.attempts,
                len(content),
            )
            return content
        sleep(poll_interval)
