"""
Decode the backend's JSON payload into ExportTraceServiceRequest messages.

The backend stores every export request it received and returns them as one
JSON array, each element using the protobuf JSON mapping of
opentelemetry.proto.collector.trace.v1.ExportTraceServiceRequest.

Decoding is lenient per element:
- Unknown fields are ignored so newer collector schemas still parse
- An element that cannot be interpreted is reported and skipped; the rest of
  the payload is still returned
Only a payload whose top level is not a JSON array fails as a whole.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from google.protobuf import json_format
from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)
from opentelemetry.proto.trace.v1.trace_pb2 import ResourceSpans

from ..errors import DecodeError

logger = logging.getLogger(__name__)

# Longest excerpt of a failed element kept for diagnostics.
_RAW_EXCERPT_LEN = 200


@dataclass(frozen=True)
class ExportRecord:
    """One decoded export request and its position in the payload array."""

    index: int
    request: ExportTraceServiceRequest

    @property
    def resource_spans(self) -> tuple[ResourceSpans, ...]:
        """Resource span groups in wire order."""
        return tuple(self.request.resource_spans)


@dataclass(frozen=True)
class DecodedElement:
    """An array element that decoded successfully."""

    index: int
    record: ExportRecord


@dataclass(frozen=True)
class FailedElement:
    """An array element that could not be interpreted as an export request."""

    index: int
    reason: str
    raw: str

    def __str__(self) -> str:
        return f"element {self.index}: {self.reason}"


@dataclass
class DecodeReport:
    """Per-element outcome of decoding one payload."""

    results: list[DecodedElement | FailedElement] = field(default_factory=list)

    @property
    def records(self) -> list[ExportRecord]:
        return [r.record for r in self.results if isinstance(r, DecodedElement)]

    @property
    def failures(self) -> list[FailedElement]:
        return [r for r in self.results if isinstance(r, FailedElement)]

    @property
    def ok(self) -> bool:
        return not self.failures

    def __str__(self) -> str:
        lines = [f"Decoded {len(self.records)} of {len(self.results)} export requests"]
        for failure in self.failures:
            lines.append(f"  - {failure}")
        return "\n".join(lines)


def _excerpt(element: Any) -> str:
    text = json.dumps(element, default=str)
    if len(text) > _RAW_EXCERPT_LEN:
        return text[:_RAW_EXCERPT_LEN] + "..."
    return text


def decode_element(index: int, element: Any) -> DecodedElement | FailedElement:
    """Convert one array element into an ExportRecord, or describe why it failed."""
    if not isinstance(element, dict):
        return FailedElement(
            index=index,
            reason=f"expected a JSON object, got {type(element).__name__}",
            raw=_excerpt(element),
        )
    request = ExportTraceServiceRequest()
    try:
        json_format.ParseDict(element, request, ignore_unknown_fields=True)
    except json_format.ParseError as e:
        return FailedElement(index=index, reason=str(e), raw=_excerpt(element))
    return DecodedElement(index=index, record=ExportRecord(index=index, request=request))


def _load_array(payload: bytes | str) -> list[Any]:
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"Payload is not valid JSON: {e}", payload=payload) from e
    if not isinstance(data, list):
        raise DecodeError(
            f"Payload must be a JSON array of export requests, got {type(data).__name__}",
            payload=payload,
        )
    return data


def decode_report(payload: bytes | str) -> DecodeReport:
    """
    Decode a payload into per-element results.

    Raises:
        DecodeError: payload is not valid JSON or its top level is not an array.
    """
    report = DecodeReport()
    for index, element in enumerate(_load_array(payload)):
        report.results.append(decode_element(index, element))
    return report


def decode(payload: bytes | str) -> list[ExportRecord]:
    """Decode a payload, logging and skipping elements that fail to parse."""
    report = decode_report(payload)
    for failure in report.failures:
        logger.warning("Skipping undecodable export request %s (raw: %s)", failure, failure.raw)
    return report.records
