"""LaTeX to Scroll conversion."""

import logging
import re
from collections.abc import Callable
from typing import NamedTuple

from doc_scroll.config import LatexConfig
from doc_scroll.converter.base import BaseConverter, SourceFormat
from doc_scroll.converter.cleanup import indent_lines, normalize_scroll

logger = logging.getLogger(__name__)

COMMENT_RE = re.compile(r"(?<!\\)%.*$", re.MULTILINE)
INPUT_RE = re.compile(r"\\input\{([^}]+)\}")
ENV_DELIMITER_RE = re.compile(r"\\(begin|end)\{(\w+\*?)\}")
ITEM_RE = re.compile(r"\\item\b(?:\[[^\]]*\])?")
INCLUDEGRAPHICS_RE = re.compile(r"\\includegraphics(?:\[.*?\])?\{([^}]+)\}")
CAPTION_RE = re.compile(r"\\caption\{([^}]+)\}")
HREF_RE = re.compile(r"\\href\{([^}]*)\}\{([^}]*)\}")

Stage = tuple[str, Callable[[str], str]]


class Environment(NamedTuple):
    """A matched ``\\begin{name}...\\end{name}`` region."""

    name: str
    start: int
    end: int
    content: str


def _command_re(names: list[str], starred: bool = False) -> re.Pattern[str] | None:
    """Build ``\\name{arg}`` matching any of ``names``."""
    if not names:
        return None
    alternation = "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))
    star = r"\*?" if starred else ""
    return re.compile(rf"\\({alternation}){star}\{{([^}}]+)\}}")


class LatexConverter(BaseConverter):
    """Convert LaTeX source to Scroll with an ordered pipeline of rewrites.

    Every stage is one global substitution pass over the whole document and
    later stages see the output of earlier ones, so ``stages`` is applied
    strictly in order: environments are rewritten before sections, sections
    before inline commands, and so on.
    """

    format = SourceFormat.LATEX

    def __init__(self, config: LatexConfig | None = None):
        self.config = config or LatexConfig()
        self._section_re = _command_re(list(self.config.section_prefixes), starred=True)
        self._inline_res = {
            name: re.compile(rf"\\{re.escape(name)}\{{([^}}]+)\}}")
            for name in self.config.inline_markers
        }
        self._reference_re = _command_re(list(self.config.reference_commands))

        stages: list[Stage] = [("comments", self._strip_comments)]
        if self.config.resolve_inputs:
            stages.append(("inputs", self._rewrite_inputs))
        stages += [
            ("environments", self._rewrite_environments),
            ("sections", self._rewrite_sections),
            ("inline", self._rewrite_inline),
            ("special_characters", self._replace_special_characters),
            ("references", self._rewrite_references),
            ("cleanup", normalize_scroll),
        ]
        self.stages: tuple[Stage, ...] = tuple(stages)

    @property
    def stage_names(self) -> list[str]:
        return [name for name, _ in self.stages]

    def convert(self, latex: str) -> str:
        """Convert LaTeX to Scroll."""
        logger.debug("Converting %d characters of LaTeX", len(latex))
        scroll = latex
        for _, stage in self.stages:
            scroll = stage(scroll)
        return scroll

    def _strip_comments(self, text: str) -> str:
        return COMMENT_RE.sub("", text)

    def _rewrite_inputs(self, text: str) -> str:
        """Turn ``\\input{chapter}`` into a reference to ``chapter.scroll``."""
        extension = self.config.input_extension

        def replace(match: re.Match[str]) -> str:
            return match.group(1).removesuffix(".tex") + extension

        return INPUT_RE.sub(replace, text)

    # Environments

    def find_environments(self, text: str) -> list[Environment]:
        """Locate the outermost complete environments in ``text``.

        Delimiters are matched with a stack, so nested environments of the
        same name pair up correctly. Stray ``\\end`` markers and unterminated
        ``\\begin`` markers are skipped and stay in the text untouched.
        """
        stack: list[tuple[str, int, int]] = []
        closed: list[Environment] = []

        for match in ENV_DELIMITER_RE.finditer(text):
            kind, name = match.group(1), match.group(2)
            if kind == "begin":
                stack.append((name, match.start(), match.end()))
                continue

            for depth in range(len(stack) - 1, -1, -1):
                if stack[depth][0] == name:
                    break
            else:
                logger.debug("Ignoring unmatched \\end{%s}", name)
                continue

            _, start, content_start = stack[depth]
            del stack[depth:]
            closed.append(
                Environment(name, start, match.end(), text[content_start:match.start()])
            )

        for name, _, _ in stack:
            logger.debug("Leaving unterminated \\begin{%s} in place", name)

        outermost: list[Environment] = []
        last_end = -1
        for env in sorted(closed, key=lambda e: e.start):
            if env.start >= last_end:
                outermost.append(env)
                last_end = env.end
        return outermost

    def _rewrite_environments(self, text: str) -> str:
        environments = self.find_environments(text)
        if not environments:
            return text

        parts: list[str] = []
        pos = 0
        for env in environments:
            parts.append(text[pos:env.start])
            parts.append(self._render_environment(env.name, env.content))
            pos = env.end
        parts.append(text[pos:])
        return "".join(parts)

    def _render_environment(self, name: str, content: str) -> str:
        if name != "verbatim":
            content = self._rewrite_environments(content)

        if name in ("itemize", "enumerate"):
            return self._render_list(name, content)
        if name == "verbatim":
            return self._render_verbatim(content)
        if name in ("figure", "figure*"):
            return self._render_figure(content)

        prefix = self.config.environment_prefixes.get(name, "")
        return f"{prefix}{indent_lines(content.strip(), ' ')}\n"

    def _render_list(self, name: str, content: str) -> str:
        marker = self.config.environment_prefixes.get(name, "- ")
        items = []
        # Text before the first \item is not part of any item
        for item in ITEM_RE.split(content)[1:]:
            first, *rest = item.strip().split("\n")
            items.append("\n".join([marker + first, *(" " + line for line in rest)]))
        return "\n".join(items) + "\n"

    def _render_verbatim(self, content: str) -> str:
        header = self.config.environment_prefixes.get("verbatim", "code\n")
        code = content.strip()
        if not code:
            return header
        return f"{header}{indent_lines(code, ' ')}\n"

    def _render_figure(self, content: str) -> str:
        image = INCLUDEGRAPHICS_RE.search(content)
        caption = CAPTION_RE.search(content)
        path = image.group(1) if image else ""
        text = caption.group(1) if caption else ""
        return f"image {path}\n caption {text}\n"

    # Commands

    def _rewrite_sections(self, text: str) -> str:
        if self._section_re is None:
            return text
        prefixes = self.config.section_prefixes

        def replace(match: re.Match[str]) -> str:
            return f"{prefixes[match.group(1)]}{match.group(2).strip()}\n"

        return self._section_re.sub(replace, text)

    def _rewrite_inline(self, text: str) -> str:
        for name, pattern in self._inline_res.items():
            marker = self.config.inline_markers[name]
            text = pattern.sub(lambda m, mk=marker: f"{mk}{m.group(1)}{mk}", text)

        def link(match: re.Match[str]) -> str:
            url, label = match.group(1), match.group(2)
            return f"{label}\n link {url} {label}"

        return HREF_RE.sub(link, text)

    def _replace_special_characters(self, text: str) -> str:
        for sequence, literal in self.config.special_characters.items():
            text = text.replace(sequence, literal)
        return text

    def _rewrite_references(self, text: str) -> str:
        """Merge citations and cross-references into ``^key`` tokens."""
        if self._reference_re is None:
            return text
        return self._reference_re.sub(lambda m: f"^{m.group(2)}", text)


def latex_to_scroll(latex: str) -> str:
    """Convert LaTeX to Scroll with the default configuration."""
    return LatexConverter().convert(latex)
