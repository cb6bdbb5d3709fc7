"""
Regex-based tokenizer for complexity analysis.

The tokenizer does not parse. It splits source text into a flat stream of
classified tokens (code, comment, string, whitespace, newline) so that the
language state machines only ever see a uniform, already-cleaned stream.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Pattern, Set, Tuple

from complexityscanner.core.types import Language, Token, TokenKind


TAB_SIZE = 8

# Operators lexed as a single token in every language. ">>" is left out on
# purpose so nested generics such as Map<string, Array<number>> close cleanly.
COMBINED_SYMBOLS = [
    "<<=", ">>=", "===", "!==", "**=", "...",
    "&&", "||", "==", "!=", "<=", ">=", "->", "=>",
    "++", "--", "+=", "-=", "*=", "/=", "%=", "^=", "&=", "|=",
    ":=", "::", "**",
]

BLOCK_COMMENT = r"/\*[\s\S]*?\*/"
TRIPLE_QUOTED = r'"""[\s\S]*?"""' + "|" + r"'''[\s\S]*?'''"
DOUBLE_QUOTED = r'"(?:\\[\s\S]|[^"\\\n])*"'
SINGLE_QUOTED = r"'(?:\\[\s\S]|[^'\\\n])*'"
BACKTICK_QUOTED = r"`(?:\\[\s\S]|[^`\\])*`"
NUMBER = r"\d+\.\d+(?:[eE][+-]?\d+)?"
IDENTIFIER = r"[\w$]+"


@dataclass(frozen=True)
class Lexicon:
    """Comment and string syntax for one language."""
    line_comments: Tuple[str, ...]
    block_comments: bool
    strings: Tuple[str, ...]
    extra_symbols: Tuple[str, ...] = ()


LEXICONS: Dict[Optional[Language], Lexicon] = {
    Language.TYPESCRIPT: Lexicon(
        line_comments=("//",),
        block_comments=True,
        strings=(DOUBLE_QUOTED, SINGLE_QUOTED, BACKTICK_QUOTED),
        extra_symbols=("??=", "?.", "??"),
    ),
    Language.JAVASCRIPT: Lexicon(
        line_comments=("//",),
        block_comments=True,
        strings=(DOUBLE_QUOTED, SINGLE_QUOTED, BACKTICK_QUOTED),
        extra_symbols=("??=", "?.", "??"),
    ),
    Language.GO: Lexicon(
        line_comments=("//",),
        block_comments=True,
        strings=(DOUBLE_QUOTED, SINGLE_QUOTED, BACKTICK_QUOTED),
        extra_symbols=("<-", "&^="),
    ),
    Language.PYTHON: Lexicon(
        line_comments=("#",),
        block_comments=False,
        strings=(TRIPLE_QUOTED, DOUBLE_QUOTED, SINGLE_QUOTED),
        extra_symbols=("//=",),
    ),
    # Unknown language: accept both comment styles
    None: Lexicon(
        line_comments=("//", "#"),
        block_comments=True,
        strings=(DOUBLE_QUOTED, SINGLE_QUOTED, BACKTICK_QUOTED),
    ),
}


def _compile(lexicon: Lexicon) -> Pattern:
    comments = [re.escape(marker) + r"[^\n]*" for marker in lexicon.line_comments]
    if lexicon.block_comments:
        comments.insert(0, BLOCK_COMMENT)

    symbols = sorted(set(COMBINED_SYMBOLS) | set(lexicon.extra_symbols), key=len, reverse=True)

    parts = [
        ("newline", r"\r?\n"),
        ("continuation", r"\\\r?\n"),
        ("whitespace", r"[^\S\n]+"),
        ("comment", "|".join(comments)),
        ("string", "|".join(lexicon.strings)),
        ("code", "|".join([NUMBER, IDENTIFIER] + [re.escape(s) for s in symbols] + [r"[\s\S]"])),
    ]
    return re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in parts))


_PATTERNS: Dict[Optional[Language], Pattern] = {
    language: _compile(lexicon) for language, lexicon in LEXICONS.items()
}

_GROUP_KINDS = {
    "newline": TokenKind.NEWLINE,
    "continuation": TokenKind.WHITESPACE,
    "whitespace": TokenKind.WHITESPACE,
    "comment": TokenKind.COMMENT,
    "string": TokenKind.STRING,
    "code": TokenKind.CODE,
}

_SEMANTIC_KINDS = (TokenKind.CODE, TokenKind.STRING)


def _advance_column(column: int, text: str) -> int:
    for char in text:
        if char == "\t":
            column = (column // TAB_SIZE + 1) * TAB_SIZE
        else:
            column += 1
    return column


class Tokenizer:
    """
    Splits source code into classified tokens.

    Tokenization is a single forward pass and never raises: characters
    that match no rule come out as one-character code tokens.
    """

    @staticmethod
    def generate_tokens(source: str, language: Optional[Language] = None) -> List[Token]:
        """
        Tokenize source code.

        Args:
            source: The source text.
            language: Selects comment and string syntax. ``None`` accepts
                both ``//`` and ``#`` comments.

        Returns:
            Every token in source order, whitespace and comments included.
        """
        pattern = _PATTERNS.get(language, _PATTERNS[None])
        tokens: List[Token] = []
        line = 1
        column = 0

        for match in pattern.finditer(source):
            text = match.group()
            kind = _GROUP_KINDS[match.lastgroup]
            tokens.append(Token(kind=kind, text=text, line=line, column=column))

            breaks = text.count("\n")
            if breaks:
                line += breaks
                column = _advance_column(0, text[text.rfind("\n") + 1:])
            else:
                column = _advance_column(column, text)

        return tokens

    @staticmethod
    def filter_code_tokens(tokens: Iterable[Token]) -> List[Token]:
        """
        Drop comments and whitespace, keeping code, strings and newlines.

        Strings are kept as single opaque tokens. Every line break hidden
        inside a multi-line comment, string or continuation is replaced
        by an implicit newline token so line counting stays exact.
        """
        filtered: List[Token] = []

        for token in tokens:
            if token.kind is TokenKind.NEWLINE:
                filtered.append(token)
                continue

            if token.kind in _SEMANTIC_KINDS:
                filtered.append(token)

            for offset in range(token.text.count("\n")):
                filtered.append(Token(
                    kind=TokenKind.NEWLINE,
                    text="\n",
                    line=token.line + offset,
                    column=0,
                    implicit=True,
                ))

        return filtered

    @staticmethod
    def count_nloc(source: str, language: Optional[Language] = None) -> int:
        """Count lines holding at least one code or string token."""
        lines: Set[int] = set()

        for token in Tokenizer.generate_tokens(source, language):
            if token.kind in _SEMANTIC_KINDS:
                lines.update(range(token.line, token.line + token.text.count("\n") + 1))

        return len(lines)
