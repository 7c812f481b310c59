"""
tracecheck - verification harness for distributed-tracing instrumentation.

Waits for a fake trace backend to stop receiving OTLP exports, decodes the
accumulated ExportTraceServiceRequest payloads and exposes queries over them
for test assertions.
"""

from .config import HarnessConfig, load_config
from .decoding import DecodeReport, ExportRecord, decode, decode_report
from .errors import ConcurrentPollError, DecodeError, ResetFailure, TeardownError
from .harness import BackendClient, HarnessEnvironment
from .inspection import AttributeValue, TraceGraph, find_resource_attributes
from .polling import await_stable_content

__version__ = "1.0.0"

__all__ = [
    "AttributeValue",
    "BackendClient",
    "ConcurrentPollError",
    "DecodeError",
    "DecodeReport",
    "ExportRecord",
    "HarnessConfig",
    "HarnessEnvironment",
    "ResetFailure",
    "TeardownError",
    "TraceGraph",
    "await_stable_content",
    "decode",
    "decode_report",
    "find_resource_attributes",
    "load_config",
]
