"""Quiescence detection for the backend's accumulated export store."""

from .stabilizer import PollState, await_stable_content

__all__ = [
    "PollState",
    "await_stable_content",
]
