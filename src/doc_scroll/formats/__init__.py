"""Source format lookup and dispatch."""

from doc_scroll.formats.registry import ConverterRegistry, convert_document

__all__ = [
    "ConverterRegistry",
    "convert_document",
]
