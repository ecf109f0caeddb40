"""Convert HTML, LaTeX and Markdown documents to Scroll."""

__version__ = "0.1.0"
