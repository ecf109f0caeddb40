"""HTML, LaTeX and Markdown to Scroll conversion."""

from doc_scroll.converter.base import BaseConverter, SourceDocument, SourceFormat
from doc_scroll.converter.cleanup import normalize_scroll
from doc_scroll.converter.html import HtmlConverter, html_to_scroll
from doc_scroll.converter.latex import LatexConverter, latex_to_scroll
from doc_scroll.converter.markdown import MarkdownConverter, markdown_to_scroll

__all__ = [
    "BaseConverter",
    "SourceDocument",
    "SourceFormat",
    "HtmlConverter",
    "LatexConverter",
    "MarkdownConverter",
    "html_to_scroll",
    "latex_to_scroll",
    "markdown_to_scroll",
    "normalize_scroll",
]
