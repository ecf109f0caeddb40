"""HTML to Scroll conversion."""

import logging
import re
from collections.abc import Callable

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString

from doc_scroll.config import HtmlConfig
from doc_scroll.converter.base import BaseConverter, SourceFormat
from doc_scroll.converter.cleanup import indent_lines, normalize_scroll

logger = logging.getLogger(__name__)


class HtmlConverter(BaseConverter):
    """Convert an HTML fragment or document to Scroll by walking its DOM."""

    format = SourceFormat.HTML

    def __init__(self, config: HtmlConfig | None = None):
        self.config = config or HtmlConfig()
        chars = self.config.escape_chars
        self._escape_re = re.compile(f"([{re.escape(chars)}])") if chars else None
        self._special: dict[str, Callable[[Tag, str], str]] = {
            "pre": self._convert_pre,
            "ul": self._convert_list,
            "ol": self._convert_list,
            "figure": self._convert_figure,
            "a": self._convert_link,
            "img": self._convert_image,
            "div": self._convert_div,
        }

    def convert(self, html: str) -> str:
        """Convert HTML to Scroll."""
        logger.debug("Converting %d characters of HTML", len(html))
        soup = BeautifulSoup(html, self.config.parser)

        for tag in soup.find_all(list(self.config.remove_tags)):
            tag.decompose()

        root = soup.body or soup
        return normalize_scroll(self.convert_node(root))

    def convert_node(self, node: PageElement, indent: str = "") -> str:
        """Convert a single node and its subtree."""
        if isinstance(node, NavigableString):
            # Comments, doctypes, CDATA and processing instructions
            if isinstance(node, PreformattedString):
                return ""
            text = node.strip()
            if not text:
                return ""
            return indent + self.escape(text)

        if not isinstance(node, Tag):
            return ""

        name = node.name.lower()
        if name in self.config.block_prefixes:
            prefix = self.config.block_prefixes[name]
            content = self._children(node, indent).strip()
            return f"{indent}{prefix}{content}\n"

        special = self._special.get(name)
        if special is not None:
            return special(node, indent)

        if name in self.config.inline_markers:
            marker = self.config.inline_markers[name]
            return marker + self._children(node, "").strip() + marker

        return self._children(node, indent)

    def escape(self, text: str) -> str:
        """Backslash-escape characters that carry meaning in Scroll."""
        if self._escape_re is None:
            return text
        return self._escape_re.sub(r"\\\1", text)

    def _children(self, node: Tag, indent: str) -> str:
        return "".join(self.convert_node(child, indent) for child in node.children)

    def _convert_pre(self, node: Tag, indent: str) -> str:
        """Emit a code block from the raw text, ignoring internal markup."""
        code = node.get_text().strip()
        result = f"{indent}code\n"
        if code:
            result += indent_lines(code, indent + " ") + "\n"
        return result

    def _convert_list(self, node: Tag, indent: str) -> str:
        marker = self.config.list_markers.get(node.name.lower(), "- ")
        result = "\n"
        for item in node.find_all("li", recursive=False):
            content = self._children(item, indent + " ").strip()
            result += f"{indent}{marker}{content}\n"
        return result

    def _convert_figure(self, node: Tag, indent: str) -> str:
        result = "\n"
        img = node.select_one("img")
        figcaption = node.select_one("figcaption")

        if img is not None:
            result += f"{indent}image {_attr(img, 'src') or ''}\n"

        if figcaption is not None:
            result += f"{indent} caption {figcaption.get_text().strip()}\n"

        return result

    def _convert_div(self, node: Tag, indent: str) -> str:
        class_name = _attr(node, "class")
        if not class_name:
            return self._children(node, indent)
        return f"\n{indent}class {class_name}\n" + self._children(node, indent + " ")

    def _convert_link(self, node: Tag, indent: str) -> str:
        href = _attr(node, "href")
        text = node.get_text().strip()
        if not href:
            return text

        result = f"{text}\n{indent} link {href} {text}"
        title = _attr(node, "title")
        if title:
            result += f"\n{indent}  title {title}"
        return result

    def _convert_image(self, node: Tag, indent: str) -> str:
        src = _attr(node, "src")
        if not src:
            return ""

        result = f"\nimage {src}"
        alt = _attr(node, "alt")
        if alt:
            result += f"\n caption {alt}"
        return result + "\n"


def _attr(node: Tag, name: str) -> str | None:
    """Read an attribute, joining multi-valued ones such as ``class``."""
    value = node.get(name)
    if isinstance(value, list):
        return " ".join(value) if value else None
    return value


def html_to_scroll(html: str) -> str:
    """Convert HTML to Scroll with the default configuration."""
    return HtmlConverter().convert(html)
