"""Decoding of the backend's accumulated export payload."""

from .export_decoder import (
    DecodedElement,
    DecodeReport,
    ExportRecord,
    FailedElement,
    decode,
    decode_element,
    decode_report,
)

__all__ = [
    "DecodedElement",
    "DecodeReport",
    "ExportRecord",
    "FailedElement",
    "decode",
    "decode_element",
    "decode_report",
]
