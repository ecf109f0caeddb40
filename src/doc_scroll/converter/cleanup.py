"""Whitespace normalization shared by all Scroll converters."""

import re

_TRAILING_WS_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def normalize_scroll(text: str) -> str:
    """Normalize whitespace in converted Scroll output.

    Strips trailing spaces and tabs from every line, collapses runs of
    blank lines to a single blank line and guarantees exactly one trailing
    newline. CRLF and lone CR line endings become LF. Applying it twice
    gives the same result as applying it once.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _TRAILING_WS_RE.sub("", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip() + "\n"


def indent_lines(text: str, indent: str = " ") -> str:
    """Prefix every line of ``text`` with ``indent``."""
    return "\n".join(indent + line for line in text.split("\n"))
