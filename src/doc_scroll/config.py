"""Configuration management with Pydantic models."""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

# Prefix and marker tables are exposed as read-only views.
Table = Annotated[
    Mapping[str, str],
    AfterValidator(MappingProxyType),
    PlainSerializer(dict, return_type=dict[str, str]),
]


class HtmlConfig(BaseModel):
    """Prefix and marker tables for HTML conversion."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    parser: str = "lxml"
    block_prefixes: Table = Field(
        default_factory=lambda: {
            "h1": "# ",
            "h2": "## ",
            "h3": "### ",
            "h4": "#### ",
            "h5": "##### ",
            "p": "* ",
            "blockquote": "> ",
        }
    )
    inline_markers: Table = Field(
        default_factory=lambda: {
            "strong": "*",
            "b": "*",
            "em": "_",
            "i": "_",
            "code": "`",
        }
    )
    list_markers: Table = Field(
        default_factory=lambda: {
            "ul": "- ",
            "ol": "1. ",
        }
    )
    escape_chars: str = "*_`[]^"
    remove_tags: tuple[str, ...] = ("script", "style", "noscript")


class LatexConfig(BaseModel):
    """Prefix and marker tables for LaTeX conversion."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    section_prefixes: Table = Field(
        default_factory=lambda: {
            "section": "# ",
            "subsection": "## ",
            "subsubsection": "### ",
            "paragraph": "* ",
        }
    )
    environment_prefixes: Table = Field(
        default_factory=lambda: {
            "itemize": "- ",
            "enumerate": "1. ",
            "quote": "> ",
            "verbatim": "code\n",
            "center": "center\n",
        }
    )
    inline_markers: Table = Field(
        default_factory=lambda: {
            "textbf": "*",
            "textit": "_",
            "texttt": "`",
            "emph": "_",
        }
    )
    # Order matters: backslash escapes are replaced before quote pairs.
    special_characters: Table = Field(
        default_factory=lambda: {
            "\\&": "&",
            "\\%": "%",
            "\\$": "$",
            "\\#": "#",
            "\\_": "_",
            "\\{": "{",
            "\\}": "}",
            "~": " ",
            "``": '"',
            "''": '"',
        }
    )
    reference_commands: tuple[str, ...] = ("cite", "ref")
    resolve_inputs: bool = True
    input_extension: str = ".scroll"


class MarkdownConfig(BaseModel):
    """Feature switches for Markdown conversion."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    fence: str = "```"
    tables: bool = True
    footnotes: bool = True
    link_titles: bool = True
    unordered_marker: str = "- "
    ordered_marker: str = "1. "
    paragraph_marker: str = "* "


class AppConfig(BaseModel):
    """Main application configuration."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    html: HtmlConfig = Field(default_factory=HtmlConfig)
    latex: LatexConfig = Field(default_factory=LatexConfig)
    markdown: MarkdownConfig = Field(default_factory=MarkdownConfig)

    @classmethod
    def from_toml(cls, path: Path) -> "AppConfig":
        """Load config from a TOML file."""
        try:
            import tomllib  # type: ignore[import-not-found]
        except ModuleNotFoundError:
            import tomli as tomllib  # type: ignore[import-not-found,no-redef]
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)

    def to_toml(self) -> str:
        """Serialize config to TOML format."""
        data = self.model_dump(mode="json", exclude_defaults=True)
        return _dict_to_toml(data)


def _toml_value(v: object) -> str:
    """Format a Python value as a TOML literal."""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, int):
        return str(v)
    if isinstance(v, float):
        return f"{v}"
    if isinstance(v, str):
        escaped = (
            v.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        )
        return f'"{escaped}"'
    if isinstance(v, list):
        items = ", ".join(_toml_value(i) for i in v)
        return f"[{items}]"
    if isinstance(v, dict):
        items = ", ".join(f"{_toml_key(k)} = {_toml_value(i)}" for k, i in v.items())
        return "{ " + items + " }" if items else "{}"
    return f'"{v}"'


def _toml_key(key: str) -> str:
    """Quote a key unless it is a bare TOML key."""
    if key and all(c.isalnum() or c in "-_" for c in key):
        return key
    return _toml_value(key)


def _dict_to_toml(data: dict, prefix: str = "") -> str:
    """Convert a nested dict to TOML string (2 levels deep max)."""
    lines: list[str] = []
    # Emit top-level scalar keys first
    for k, v in data.items():
        if not isinstance(v, dict):
            lines.append(f"{k} = {_toml_value(v)}")
    # Emit table sections
    for k, v in data.items():
        if isinstance(v, dict):
            section = f"{prefix}{k}" if not prefix else f"{prefix}.{k}"
            lines.append(f"\n[{section}]")
            for sk, sv in v.items():
                lines.append(f"{_toml_key(sk)} = {_toml_value(sv)}")
    return "\n".join(lines) + "\n"
