"""Base class for Scroll converters."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel


class SourceFormat(str, Enum):
    """Markup formats that can be converted to Scroll."""

    HTML = "html"
    LATEX = "latex"
    MARKDOWN = "markdown"


class SourceDocument(BaseModel):
    """Raw input text tagged with its format."""

    text: str
    format: SourceFormat
    name: str | None = None


class BaseConverter(ABC):
    """Abstract base class for format-to-Scroll converters."""

    format: ClassVar[SourceFormat]

    @abstractmethod
    def convert(self, text: str) -> str:
        """Convert source text to Scroll."""
        ...

    def convert_document(self, document: SourceDocument) -> str:
        """Convert a tagged document, checking its format first."""
        if document.format != self.format:
            raise ValueError(
                f"{type(self).__name__} cannot convert {document.format.value} "
                f"documents (expected {self.format.value})"
            )
        return self.convert(document.text)
