"""Tokenizer for the schema language."""

import re
from dataclasses import dataclass
from typing import List

from crudscaffold.errors import Location, SchemaError

IDENT = "IDENT"
SEMI = ";"
LBRACE = "{"
RBRACE = "}"
COLON = ":"
COMMA = ","
EOF = "EOF"

PUNCTUATION = {SEMI, LBRACE, RBRACE, COLON, COMMA}

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class Token:
    """A lexical token with its starting location."""

    type: str
    text: str
    location: Location

    def describe(self) -> str:
        """Human-readable form used in diagnostics."""
        if self.type == EOF:
            return "end of input"
        return f"`{self.text}`"


def tokenize(text: str, source: str = "<schema>") -> List[Token]:
    """
    Split schema text into tokens.

    Whitespace and ``//`` / ``#`` line comments are skipped. The returned list
    always ends with an ``EOF`` token.

    Args:
        text: Schema source
        source: Name used in diagnostic locations (usually the file path)

    Returns:
        List of tokens

    Raises:
        SchemaError: On any character that cannot start a token
    """
    tokens: List[Token] = []
    pos = 0
    line = 1
    line_start = 0
    length = len(text)

    while pos < length:
        ch = text[pos]
        if ch == "\n":
            pos += 1
            line += 1
            line_start = pos
            continue
        if ch.isspace():
            pos += 1
            continue
        if ch == "#" or text.startswith("//", pos):
            end = text.find("\n", pos)
            pos = length if end == -1 else end
            continue

        location = Location(line=line, column=pos - line_start + 1, source=source)
        if ch in PUNCTUATION:
            tokens.append(Token(ch, ch, location))
            pos += 1
            continue

        match = _IDENT_RE.match(text, pos)
        if match is None:
            raise SchemaError.at(
                location,
                "UNEXPECTED_CHARACTER",
                f"unexpected character {ch!r}; identifiers use letters, digits and `_`",
            )
        tokens.append(Token(IDENT, match.group(0), location))
        pos = match.end()

    tokens.append(Token(EOF, "", Location(line=line, column=pos - line_start + 1, source=source)))
    return tokens
