"""Read-only queries over decoded export records."""

from .attributes import AttributeValue, ValueKind
from .trace_graph import (
    LazyQuery,
    TraceGraph,
    find_resource_attributes,
    find_span_attributes,
    iter_resource_spans,
    iter_spans,
)

__all__ = [
    "AttributeValue",
    "LazyQuery",
    "TraceGraph",
    "ValueKind",
    "find_resource_attributes",
    "find_span_attributes",
    "iter_resource_spans",
    "iter_spans",
]
