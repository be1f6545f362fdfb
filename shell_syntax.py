# ============================================================================
# SHELL SYNTAX HIGHLIGHTING
# ============================================================================

from __future__ import annotations

from pygments.lexer import Lexer
from pygments.lexers.shell import BashLexer, FishShellLexer
from pygments.token import (
    Comment,
    Error,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)
from rich.style import Style
from rich.syntax import Syntax, SyntaxTheme

# zsh has no dedicated pygments lexer; BashLexer covers the `&&`/`||` syntax we show.
LEXERS: dict[str, type[Lexer]] = {
    "zsh": BashLexer,
    "fish": FishShellLexer,
}


class HistoryTheme(SyntaxTheme):
    """Rich syntax theme for side-by-side zsh/fish command listings.

    Operators are the interesting part of a conversion, so they get the
    loudest colors; everything else stays close to the terminal default.
    """

    _RED = "#E06C75"
    _GREEN = "#98C379"
    _YELLOW = "#E5C07B"
    _BLUE = "#61AFEF"
    _PURPLE = "#C678DD"
    _CYAN = "#56B6C2"
    _GRAY = "#5C6370"

    default_style = Style()

    styles = {
        Keyword: Style(color=_PURPLE, bold=True),  # and, or, if
        Operator: Style(color=_RED, bold=True),  # &&, ||, |
        Punctuation: Style(color=_YELLOW),  # ;
        Name.Builtin: Style(color=_CYAN, italic=True),
        Name.Variable: Style(color=_BLUE),
        Name.Attribute: Style(color=_YELLOW),
        Number: Style(color=_CYAN),
        String: Style(color=_GREEN),
        String.Escape: Style(color=_PURPLE),
        Comment: Style(color=_GRAY, italic=True),
        Error: Style(color=_RED, underline=True),
        Text: Style(),
    }

    @classmethod
    def get_style_for_token(cls, t):
        # Walk up the token hierarchy so e.g. String.Double picks up String.
        while t is not None:
            if t in cls.styles:
                return cls.styles[t]
            t = t.parent
        return cls.default_style

    @classmethod
    def get_background_style(cls):
        return Style()


def highlight(command: str, shell: str) -> Syntax:
    """→ Renders a single command with the lexer for `shell` ("zsh" or "fish")"""
    lexer = LEXERS[shell]()
    return Syntax(command, lexer, theme=HistoryTheme(), line_numbers=False, word_wrap=True)
