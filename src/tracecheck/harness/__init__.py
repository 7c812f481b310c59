"""Backend access and environment lifecycle for test cases."""

from .backend import BackendClient
from .environment import HarnessEnvironment, ManagedResource

__all__ = [
    "BackendClient",
    "HarnessEnvironment",
    "ManagedResource",
]
