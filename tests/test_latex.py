"""
Unit tests for the LaTeX converter.
"""

import pytest

from doc_scroll.config import LatexConfig
from doc_scroll.converter import LatexConverter, latex_to_scroll


class TestPipeline:
    """Tests for stage ordering and configuration."""

    def test_stage_order(self, latex_converter):
        assert latex_converter.stage_names == [
            "comments",
            "inputs",
            "environments",
            "sections",
            "inline",
            "special_characters",
            "references",
            "cleanup",
        ]

    def test_input_stage_can_be_disabled(self):
        converter = LatexConverter(LatexConfig(resolve_inputs=False))
        assert "inputs" not in converter.stage_names
        assert converter.convert("\\input{intro}") == "\\input{intro}\n"

    def test_special_characters_run_before_references(self, latex_converter):
        # The non-breaking space is gone by the time \ref is rewritten
        assert latex_converter.convert("Fig.~\\ref{a}") == "Fig. ^a\n"


class TestComments:
    """Tests for comment stripping."""

    def test_strips_comments(self, latex_converter):
        assert latex_converter.convert("text % comment\nmore") == "text\nmore\n"

    def test_keeps_escaped_percent(self, latex_converter):
        assert latex_converter.convert("50\\% off") == "50% off\n"


class TestInputs:
    """Tests for \\input rewriting."""

    def test_input_with_extension(self, latex_converter):
        assert latex_converter.convert("\\input{chapters/intro.tex}") == "chapters/intro.scroll\n"

    def test_input_without_extension(self, latex_converter):
        assert latex_converter.convert("\\input{intro}") == "intro.scroll\n"

    def test_custom_extension(self):
        converter = LatexConverter(LatexConfig(input_extension=".txt"))
        assert converter.convert("\\input{intro}") == "intro.txt\n"


class TestEnvironments:
    """Tests for \\begin...\\end rewriting."""

    def test_itemize(self, latex_converter):
        latex = "\\begin{itemize}\n\\item One\n\\item Two\n\\end{itemize}"
        assert latex_converter.convert(latex) == "- One\n- Two\n"

    def test_enumerate(self, latex_converter):
        latex = "\\begin{enumerate}\n  \\item One\n  \\item Two\n\\end{enumerate}"
        assert latex_converter.convert(latex) == "1. One\n1. Two\n"

    def test_text_before_first_item_is_dropped(self, latex_converter):
        latex = "\\begin{itemize}\npreamble\n\\item One\n\\end{itemize}"
        assert latex_converter.convert(latex) == "- One\n"

    def test_nested_lists(self, latex_converter):
        latex = (
            "\\begin{itemize}\n"
            "\\item A\n"
            "\\begin{itemize}\n\\item B\n\\end{itemize}\n"
            "\\item C\n"
            "\\end{itemize}"
        )
        assert latex_converter.convert(latex) == "- A\n - B\n- C\n"

    def test_verbatim(self, latex_converter):
        latex = "\\begin{verbatim}\nprint(1)\n\\end{verbatim}"
        assert latex_converter.convert(latex) == "code\n print(1)\n"

    def test_verbatim_keeps_nested_environments(self, latex_converter):
        latex = "\\begin{verbatim}\n\\begin{itemize}\\item x\\end{itemize}\n\\end{verbatim}"
        assert latex_converter.convert(latex) == (
            "code\n \\begin{itemize}\\item x\\end{itemize}\n"
        )

    def test_later_stages_still_apply_inside_verbatim(self, latex_converter):
        latex = "\\begin{verbatim}\n\\textbf{x} \\cite{k}\n\\end{verbatim}"
        assert latex_converter.convert(latex) == "code\n *x* ^k\n"

    def test_figure(self, latex_converter):
        latex = (
            "\\begin{figure}\n"
            "\\centering\n"
            "\\includegraphics[width=0.5\\textwidth]{img/plot.png}\n"
            "\\caption{A plot}\n"
            "\\end{figure}"
        )
        assert latex_converter.convert(latex) == "image img/plot.png\n caption A plot\n"

    def test_figure_missing_caption_degrades_to_empty(self, latex_converter):
        latex = "\\begin{figure}\\includegraphics{x.png}\\end{figure}"
        assert latex_converter.convert(latex) == "image x.png\n caption\n"

    def test_quote(self, latex_converter):
        latex = "\\begin{quote}\nWise words\n\\end{quote}"
        assert latex_converter.convert(latex) == ">  Wise words\n"

    def test_center(self, latex_converter):
        latex = "\\begin{center}\nCentered\n\\end{center}"
        assert latex_converter.convert(latex) == "center\n Centered\n"

    def test_unknown_environment_is_indented(self, latex_converter):
        latex = "Intro\n\\begin{abstract}\nSummary\n\\end{abstract}"
        assert latex_converter.convert(latex) == "Intro\n Summary\n"

    def test_same_name_nesting(self, latex_converter):
        latex = (
            "\\begin{quote}\nouter\n"
            "\\begin{quote}\ninner\n\\end{quote}\n"
            "\\end{quote}"
        )
        assert latex_converter.convert(latex) == ">  outer\n >  inner\n"

    def test_unterminated_environment_is_left_alone(self, latex_converter):
        latex = "\\begin{itemize}\n\\item a"
        assert latex_converter.convert(latex) == "\\begin{itemize}\n\\item a\n"

    def test_complete_environment_inside_unterminated_one(self, latex_converter):
        latex = "\\begin{center}\n\\begin{itemize}\\item a\\end{itemize}"
        assert latex_converter.convert(latex) == "\\begin{center}\n- a\n"

    def test_find_environments_returns_outermost(self, latex_converter):
        text = "\\begin{a}x\\begin{b}y\\end{b}\\end{a} \\begin{c}z\\end{c}"
        envs = latex_converter.find_environments(text)
        assert [env.name for env in envs] == ["a", "c"]
        assert envs[0].content == "x\\begin{b}y\\end{b}"


class TestCommands:
    """Tests for section, inline and reference commands."""

    def test_section(self, latex_converter):
        assert latex_converter.convert("\\section{Intro}") == "# Intro\n"

    @pytest.mark.parametrize(
        "latex,expected",
        [
            ("\\subsection{A}", "## A\n"),
            ("\\subsubsection{A}", "### A\n"),
            ("\\paragraph{A}", "* A\n"),
            ("\\section*{Starred}", "# Starred\n"),
            ("\\section{ Padded }", "# Padded\n"),
        ],
    )
    def test_section_levels(self, latex_converter, latex, expected):
        assert latex_converter.convert(latex) == expected

    def test_inline_markers(self, latex_converter):
        latex = "\\textbf{bold} \\textit{it} \\texttt{code} \\emph{em}"
        assert latex_converter.convert(latex) == "*bold* _it_ `code` _em_\n"

    def test_href(self, latex_converter):
        latex = "\\href{https://example.com}{Site}"
        assert latex_converter.convert(latex) == "Site\n link https://example.com Site\n"

    def test_special_characters(self, latex_converter):
        latex = "Tom \\& Jerry cost \\$5 for 100\\%~off ``quoted'' \\#1 a\\_b \\{x\\}"
        assert latex_converter.convert(latex) == (
            'Tom & Jerry cost $5 for 100% off "quoted" #1 a_b {x}\n'
        )

    def test_cite_and_ref_unify(self, latex_converter):
        latex = "See \\cite{knuth} and Figure~\\ref{fig:1}."
        assert latex_converter.convert(latex) == "See ^knuth and Figure ^fig:1.\n"

    def test_unknown_commands_pass_through(self, latex_converter):
        assert latex_converter.convert("\\maketitle") == "\\maketitle\n"


class TestDocument:
    """Tests for whole-document conversion."""

    def test_article(self, latex_converter):
        latex = r"""
\section{Introduction}
% drafted by hand
This is \textbf{important}, see \cite{doe}.


\subsection{Details}
\begin{itemize}
  \item First point
  \item Second point
\end{itemize}
"""
        assert latex_converter.convert(latex) == (
            "# Introduction\n"
            "\n"
            "This is *important*, see ^doe.\n"
            "\n"
            "## Details\n"
            "\n"
            "- First point\n"
            "- Second point\n"
        )

    @pytest.mark.parametrize(
        "latex",
        [
            "plain",
            "\\section{A}\n\n\n\n\\section{B}",
            "\\begin{verbatim}x\\end{verbatim}\n\n",
            "a\r\n\r\n\r\n\r\nb\r\n",
        ],
    )
    def test_single_trailing_newline(self, latex_converter, latex):
        result = latex_converter.convert(latex)
        assert result.endswith("\n")
        assert not result.endswith("\n\n")
        assert "\n\n\n" not in result
        assert "\r" not in result

    def test_crlf_line_endings(self, latex_converter):
        latex = "\\section{A}\r\n\r\n\r\n\r\nText\r\n"
        assert latex_converter.convert(latex) == "# A\n\nText\n"

    def test_module_helper(self):
        assert latex_to_scroll("\\section{Intro}") == "# Intro\n"
