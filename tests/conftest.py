"""Shared fixtures: OTLP/JSON export request builders and a fake clock."""

import base64
import json
from typing import Any

import pytest


def _attribute(key: str, value: Any) -> dict[str, Any]:
    if isinstance(value, bool):
        any_value = {"boolValue": value}
    elif isinstance(value, int):
        # int64 is a string in the protobuf JSON mapping
        any_value = {"intValue": str(value)}
    elif isinstance(value, float):
        any_value = {"doubleValue": value}
    else:
        any_value = {"stringValue": value}
    return {"key": key, "value": any_value}


def _span(
    name: str,
    trace_id: str = "5b8efff798038103d269b633813fc60c",
    span_id: str = "eee19b7ec3c1b174",
    kind: str = "SPAN_KIND_INTERNAL",
    attributes: dict[str, Any] | None = None,
    events: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    # bytes fields are base64 in the protobuf JSON mapping
    return {
        "traceId": base64.b64encode(bytes.fromhex(trace_id)).decode(),
        "spanId": base64.b64encode(bytes.fromhex(span_id)).decode(),
        "name": name,
        "kind": kind,
        "attributes": [_attribute(k, v) for k, v in (attributes or {}).items()],
        "events": [
            {
                "name": e["name"],
                "attributes": [_attribute(k, v) for k, v in e.get("attributes", {}).items()],
            }
            for e in (events or [])
        ],
        "status": {},
    }


def _export_request(
    resource: dict[str, Any] | None = None,
    spans: list[dict[str, Any]] | None = None,
    scope: str = "io.opentelemetry.servlet",
) -> dict[str, Any]:
    return {
        "resourceSpans": [
            {
                "resource": {
                    "attributes": [_attribute(k, v) for k, v in (resource or {}).items()]
                },
                "scopeSpans": [{"scope": {"name": scope}, "spans": spans or []}],
            }
        ]
    }


@pytest.fixture
def attribute():
    return _attribute


@pytest.fixture
def make_span():
    return _span


@pytest.fixture
def make_request():
    return _export_request


@pytest.fixture
def to_payload():
    def build(elements: list[Any]) -> bytes:
        return json.dumps(elements).encode("utf-8")

    return build


class FakeClock:
    """Monotonic clock that only advances when sleep() is called."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
