"""
Pytest configuration and shared fixtures.
"""

import pytest

from doc_scroll.converter import HtmlConverter, LatexConverter, MarkdownConverter


@pytest.fixture
def html_converter():
    """Create an HTML converter with default tables."""
    return HtmlConverter()


@pytest.fixture
def latex_converter():
    """Create a LaTeX converter with default tables."""
    return LatexConverter()


@pytest.fixture
def markdown_converter():
    """Create a Markdown converter with default tables."""
    return MarkdownConverter()
