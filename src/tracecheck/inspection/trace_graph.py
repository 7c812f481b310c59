"""
Query decoded export records for test assertions.

Every query follows the same pattern: traverse records, then their resource
span groups, scope span groups and spans, keep what matches, project a field.
Traversal order is record order, then group order within each record, so
results are deterministic for a given payload.

Example:
    graph = TraceGraph(decode(payload))
    assert [v.to_python() for v in graph.find_resource_attributes("service.name")] == ["checkout"]
    assert graph.count_spans_by_kind("SERVER") == 1
"""

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any, Generic, TypeVar

from opentelemetry.proto.common.v1.common_pb2 import KeyValue
from opentelemetry.proto.trace.v1.trace_pb2 import ResourceSpans, Span

from ..decoding.export_decoder import ExportRecord
from .attributes import AttributeValue

T = TypeVar("T")


class LazyQuery(Generic[T]):
    """
    A finite, restartable query result.

    Nothing is evaluated until iteration, and every iteration walks the
    records again.
    """

    def __init__(self, produce: Callable[[], Iterator[T]]):
        self._produce = produce

    def __iter__(self) -> Iterator[T]:
        return self._produce()

    def first(self, default: T | None = None) -> T | None:
        """Return the first result, or default when there is none."""
        return next(iter(self), default)

    def count(self) -> int:
        return sum(1 for _ in self)

    def to_list(self) -> list[T]:
        return list(self)

    def __repr__(self) -> str:
        return f"LazyQuery({self.to_list()!r})"


def _values_for_key(attributes: Iterable[KeyValue], key: str) -> Iterator[AttributeValue]:
    for kv in attributes:
        if kv.key == key:
            yield AttributeValue.from_proto(kv.value)


def _span_kind(kind: int | str) -> int:
    """Accept a Span.SpanKind number, 'SPAN_KIND_SERVER' or 'SERVER'."""
    if isinstance(kind, int):
        return kind
    name = kind.strip().upper()
    if not name.startswith("SPAN_KIND_"):
        name = f"SPAN_KIND_{name}"
    return Span.SpanKind.Value(name)


def iter_resource_spans(records: Iterable[ExportRecord]) -> Iterator[ResourceSpans]:
    """Every resource span group across all records, in traversal order."""
    for record in records:
        yield from record.resource_spans


def iter_spans(records: Iterable[ExportRecord]) -> Iterator[Span]:
    """Every span across all records, in traversal order."""
    for resource_spans in iter_resource_spans(records):
        for scope_spans in resource_spans.scope_spans:
            yield from scope_spans.spans


def find_resource_attributes(
    records: Iterable[ExportRecord], key: str
) -> LazyQuery[AttributeValue]:
    """Values of resource attribute `key` for every resource that carries it."""

    def produce() -> Iterator[AttributeValue]:
        for resource_spans in iter_resource_spans(records):
            yield from _values_for_key(resource_spans.resource.attributes, key)

    return LazyQuery(produce)


def find_span_attributes(records: Iterable[ExportRecord], key: str) -> LazyQuery[AttributeValue]:
    """Values of span attribute `key` for every span that carries it."""

    def produce() -> Iterator[AttributeValue]:
        for span in iter_spans(records):
            yield from _values_for_key(span.attributes, key)

    return LazyQuery(produce)


class TraceGraph:
    """Read-only view over the export records of one poll result."""

    def __init__(self, records: Sequence[ExportRecord]):
        self._records = tuple(records)

    @property
    def records(self) -> tuple[ExportRecord, ...]:
        return self._records

    def resource_spans(self) -> LazyQuery[ResourceSpans]:
        return LazyQuery(lambda: iter_resource_spans(self._records))

    def spans(self) -> LazyQuery[Span]:
        return LazyQuery(lambda: iter_spans(self._records))

    def find_resource_attributes(self, key: str) -> LazyQuery[AttributeValue]:
        return find_resource_attributes(self._records, key)

    def find_span_attributes(self, key: str) -> LazyQuery[AttributeValue]:
        return find_span_attributes(self._records, key)

    def span_names(self) -> list[str]:
        return [span.name for span in self.spans()]

    def count_spans_by_name(self, name: str) -> int:
        return sum(1 for span in self.spans() if span.name == name)

    def count_spans_by_kind(self, kind: int | str) -> int:
        wanted = _span_kind(kind)
        return sum(1 for span in self.spans() if span.kind == wanted)

    def count_filtered_attributes(self, key: str, value: Any) -> int:
        """Number of span attributes named `key` whose value equals `value`."""
        return sum(1 for v in self.find_span_attributes(key) if v.matches(value))

    def count_filtered_resource_attributes(self, key: str, value: Any) -> int:
        """Number of resource attributes named `key` whose value equals `value`."""
        return sum(1 for v in self.find_resource_attributes(key) if v.matches(value))

    def count_filtered_event_attributes(self, key: str, value: Any) -> int:
        """Number of span event attributes named `key` whose value equals `value`."""
        return sum(
            1
            for span in self.spans()
            for event in span.events
            for v in _values_for_key(event.attributes, key)
            if v.matches(value)
        )

    def trace_ids(self) -> set[str]:
        """Distinct trace ids as lowercase hex."""
        return {span.trace_id.hex() for span in self.spans()}

    def server_span_attribute(self, key: str) -> AttributeValue | None:
        """Value of `key` on the first SERVER span that carries it."""
        server = Span.SpanKind.SPAN_KIND_SERVER
        for span in self.spans():
            if span.kind != server:
                continue
            for value in _values_for_key(span.attributes, key):
                return value
        return None

    def is_empty(self) -> bool:
        return self.spans().first() is None

    def __len__(self) -> int:
        return self.spans().count()

    def __repr__(self) -> str:
        return f"TraceGraph(records={len(self._records)}, spans={len(self)})"
