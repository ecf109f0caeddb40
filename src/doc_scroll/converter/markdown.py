"""Markdown to Scroll conversion."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import NamedTuple

from doc_scroll.config import MarkdownConfig
from doc_scroll.converter.base import BaseConverter, SourceFormat
from doc_scroll.converter.cleanup import indent_lines, normalize_scroll

logger = logging.getLogger(__name__)

TABLE_DELIMITER_RE = re.compile(r"^\|(?:\s*:?-+:?\s*\|)+\s*$")


class BlockRule(NamedTuple):
    """A line-level pattern and the function rendering its match."""

    name: str
    pattern: re.Pattern[str]
    render: Callable[[re.Match[str]], str]


class InlineRule(NamedTuple):
    """A span-level substitution applied once over a block's text."""

    name: str
    pattern: re.Pattern[str]
    replacement: str | Callable[[re.Match[str]], str]


@dataclass
class _ScanState:
    in_code: bool = False
    code_lines: list[str] = field(default_factory=list)
    table_rows: list[str] = field(default_factory=list)


class MarkdownConverter(BaseConverter):
    """Convert Markdown to Scroll with a single forward scan over lines.

    A line is first checked against the code fence and table modes, then
    against ``block_rules`` in order; the first matching rule wins. Lines
    that match nothing become paragraphs and blank lines are kept as block
    separators. Inline markup is rewritten by ``inline_rules`` in order,
    with images strictly before links.
    """

    format = SourceFormat.MARKDOWN

    def __init__(self, config: MarkdownConfig | None = None):
        self.config = config or MarkdownConfig()

        rules = [
            BlockRule("horizontal_rule", re.compile(r"^[*\-_]{3,}\s*$"), self._render_rule),
            BlockRule("header", re.compile(r"^(#{1,6})\s+(.+)$"), self._render_header),
            BlockRule("blockquote", re.compile(r"^>\s*(.*)$"), self._render_blockquote),
            BlockRule(
                "unordered_list",
                re.compile(r"^(\s*)[*\-+]\s+(.+)$"),
                self._list_renderer(self.config.unordered_marker),
            ),
            BlockRule(
                "ordered_list",
                re.compile(r"^(\s*)\d+\.\s+(.+)$"),
                self._list_renderer(self.config.ordered_marker),
            ),
        ]
        if self.config.footnotes:
            rules.append(
                BlockRule(
                    "footnote_definition",
                    re.compile(r"^\[\^(\w+)\]:\s*(.+)$"),
                    self._render_footnote,
                )
            )
        self.block_rules: tuple[BlockRule, ...] = tuple(rules)

        title = r'(?:\s+"([^"]*)")?\)(?:\{([^}]+)\})?'
        self.inline_rules: tuple[InlineRule, ...] = (
            InlineRule("image", re.compile(r"!\[([^\]]*)\]\(([^)\s]+)" + title), self._render_image),
            InlineRule("link", re.compile(r"\[([^\]]+)\]\(([^)\s]+)" + title), self._render_link),
            InlineRule("emphasis", re.compile(r"(?<!\*)\*(?![\s*])([^*]+?)\*(?!\*)"), r"_\1_"),
            InlineRule("bold", re.compile(r"\*\*(.+?)\*\*"), r"*\1*"),
            InlineRule("italic", re.compile(r"\b_(.+?)_\b"), r"_\1_"),
            InlineRule("code", re.compile(r"`(.+?)`"), r"`\1`"),
            InlineRule("strikethrough", re.compile(r"~~(.+?)~~"), r"strike \1"),
            InlineRule("footnote_reference", re.compile(r"\[\^(\w+)\]"), r"^\1"),
        )

    def convert(self, markdown: str) -> str:
        """Convert Markdown to Scroll."""
        state = _ScanState()
        lines = markdown.replace("\r\n", "\n").strip().split("\n")
        logger.debug("Converting %d lines of Markdown", len(lines))

        parts = [self._scan_line(line, state) for line in lines]
        parts.append(self._finish(state))
        return normalize_scroll("".join(parts))

    def convert_inline(self, text: str) -> str:
        """Rewrite inline markup in a block's text."""
        for rule in self.inline_rules:
            text = rule.pattern.sub(rule.replacement, text)
        return text

    def _scan_line(self, line: str, state: _ScanState) -> str:
        if line.startswith(self.config.fence):
            if state.in_code:
                state.in_code = False
                return self._flush_code(state)
            state.in_code = True
            return self._flush_table(state)

        if state.in_code:
            state.code_lines.append(line)
            return ""

        if self.config.tables and line.startswith("|"):
            if not TABLE_DELIMITER_RE.match(line):
                state.table_rows.append(line)
            return ""

        result = self._flush_table(state)

        for rule in self.block_rules:
            match = rule.pattern.match(line)
            if match:
                return result + rule.render(match)

        if line.strip():
            return result + self._render_paragraph(line.strip())
        return result + "\n"

    def _finish(self, state: _ScanState) -> str:
        if state.in_code:
            logger.debug("Closing unterminated code fence at end of input")
            state.in_code = False
            return self._flush_code(state)
        return self._flush_table(state)

    def _flush_code(self, state: _ScanState) -> str:
        code = "\n".join(state.code_lines).strip()
        state.code_lines = []
        if not code:
            return "code\n\n"
        return f"code\n{indent_lines(code, ' ')}\n\n"

    def _flush_table(self, state: _ScanState) -> str:
        if not state.table_rows:
            return ""
        result = "table\n data\n"
        for row in state.table_rows:
            cells = row.strip().removeprefix("|").removesuffix("|").split("|")
            result += "  " + ",".join(self.convert_inline(c.strip()) for c in cells) + "\n"
        state.table_rows = []
        return result + "\n"

    # Block renderers

    def _render_rule(self, match: re.Match[str]) -> str:
        return "---\n\n"

    def _render_header(self, match: re.Match[str]) -> str:
        return f"{match.group(1)} {self.convert_inline(match.group(2))}\n\n"

    def _render_blockquote(self, match: re.Match[str]) -> str:
        return f"> {self.convert_inline(match.group(1))}\n"

    def _list_renderer(self, marker: str) -> Callable[[re.Match[str]], str]:
        def render(match: re.Match[str]) -> str:
            # One space of Scroll nesting per two columns of source indent
            depth = len(match.group(1).expandtabs(4)) // 2
            return f"{' ' * depth}{marker}{self.convert_inline(match.group(2))}\n"

        return render

    def _render_footnote(self, match: re.Match[str]) -> str:
        return f"^{match.group(1)} {self.convert_inline(match.group(2))}\n"

    def _render_paragraph(self, text: str) -> str:
        converted = self.convert_inline(text)
        if converted.startswith("\n"):
            # Line opens with an image block, which stands on its own
            return converted.lstrip("\n") + "\n\n"
        return f"{self.config.paragraph_marker}{converted}\n\n"

    # Inline renderers

    def _render_image(self, match: re.Match[str]) -> str:
        alt, src = match.group(1), match.group(2)
        result = f"\nimage {src}"
        if alt:
            result += f"\n caption {alt}"
        return result

    def _render_link(self, match: re.Match[str]) -> str:
        text, url = match.group(1), match.group(2)
        result = f"{text}\n link {url} {text}"
        title = match.group(3) or match.group(4)
        if title and self.config.link_titles:
            result += f"\n  title {title}"
        return result


def markdown_to_scroll(markdown: str) -> str:
    """Convert Markdown to Scroll with the default configuration."""
    return MarkdownConverter().convert(markdown)
