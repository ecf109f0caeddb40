"""Registry of converters by source format."""

import logging
import re
from pathlib import PurePath

from doc_scroll.config import AppConfig
from doc_scroll.converter.base import BaseConverter, SourceDocument, SourceFormat
from doc_scroll.converter.html import HtmlConverter
from doc_scroll.converter.latex import LatexConverter
from doc_scroll.converter.markdown import MarkdownConverter

logger = logging.getLogger(__name__)

_HTML_SIGNATURE_RE = re.compile(r"^\s*<(?:!doctype|html|head|body|[a-z][a-z0-9]*[\s>/])", re.IGNORECASE)
_LATEX_SIGNATURE_RE = re.compile(r"\\(?:documentclass|begin\{|section\{|usepackage)")


class ConverterRegistry:
    """Registry of converters keyed by source format."""

    _converters: dict[SourceFormat, type[BaseConverter]] = {
        SourceFormat.HTML: HtmlConverter,
        SourceFormat.LATEX: LatexConverter,
        SourceFormat.MARKDOWN: MarkdownConverter,
    }

    _suffixes: dict[str, SourceFormat] = {
        ".html": SourceFormat.HTML,
        ".htm": SourceFormat.HTML,
        ".xhtml": SourceFormat.HTML,
        ".tex": SourceFormat.LATEX,
        ".latex": SourceFormat.LATEX,
        ".ltx": SourceFormat.LATEX,
        ".md": SourceFormat.MARKDOWN,
        ".markdown": SourceFormat.MARKDOWN,
        ".mdown": SourceFormat.MARKDOWN,
    }

    @classmethod
    def register(cls, source_format: SourceFormat | str, converter: type[BaseConverter]) -> None:
        """Register a converter class for a format."""
        cls._converters[SourceFormat(source_format)] = converter

    @classmethod
    def get(cls, source_format: SourceFormat | str) -> type[BaseConverter]:
        """Get the converter class for a format.

        Raises ValueError for names that are not a known ``SourceFormat``.
        """
        return cls._converters[SourceFormat(source_format)]

    @classmethod
    def list_formats(cls) -> list[SourceFormat]:
        """List all formats with a registered converter."""
        return list(cls._converters)

    @classmethod
    def create(
        cls, source_format: SourceFormat | str, config: AppConfig | None = None
    ) -> BaseConverter:
        """Instantiate the converter for a format with its section of ``config``."""
        source_format = SourceFormat(source_format)
        config = config or AppConfig()
        converter_cls = cls.get(source_format)
        section = {
            SourceFormat.HTML: config.html,
            SourceFormat.LATEX: config.latex,
            SourceFormat.MARKDOWN: config.markdown,
        }[source_format]
        return converter_cls(section)  # type: ignore[call-arg]

    @classmethod
    def detect(cls, name: str | None = None, text: str = "") -> SourceFormat:
        """Guess the format from a file name, falling back to content."""
        if name:
            suffix = PurePath(name).suffix.lower()
            if suffix in cls._suffixes:
                return cls._suffixes[suffix]

        if _HTML_SIGNATURE_RE.match(text):
            return SourceFormat.HTML

        if _LATEX_SIGNATURE_RE.search(text):
            return SourceFormat.LATEX

        return SourceFormat.MARKDOWN


def convert_document(document: SourceDocument, config: AppConfig | None = None) -> str:
    """Convert a tagged document to Scroll."""
    logger.debug("Converting %s document %s", document.format.value, document.name or "<inline>")
    converter = ConverterRegistry.create(document.format, config)
    return converter.convert_document(document)
