"""Recursive-descent parser for the schema language.

Grammar::

    schema     := IDENT ';' object*
    object     := KIND IDENT '{' (property ','?)* '}'
    property   := KEY ':' IDENT (',' IDENT)*

Grammar errors stop the parse immediately. Duplicate and unknown property
keys are recorded and parsing continues, so one run reports all of them; the
parse still fails at the end.
"""

from typing import List

from crudscaffold.config.logging import get_logger
from crudscaffold.errors import Diagnostic, SchemaError
from crudscaffold.schema.ast import (
    KIND_KEYWORDS,
    PROPERTY_KEYS,
    ConfigAst,
    ObjectDecl,
    PropertyValue,
    property_keys_for,
)
from crudscaffold.schema.lexer import COLON, COMMA, EOF, IDENT, LBRACE, RBRACE, SEMI, Token, tokenize

logger = get_logger(__name__)

_KIND_LIST = ", ".join(f"`{k}`" for k in KIND_KEYWORDS)


class SchemaParser:
    """Parses a token stream into a :class:`ConfigAst`."""

    def __init__(self, tokens: List[Token]):
        self._tokens = tokens
        self._pos = 0
        self._diagnostics: List[Diagnostic] = []

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.type != EOF:
            self._pos += 1
        return token

    def _fail(self, token: Token, code: str, message: str) -> SchemaError:
        # Recoverable diagnostics collected so far are reported alongside
        return SchemaError(
            self._diagnostics + [Diagnostic(code=code, message=message, location=token.location)]
        )

    def _expect(self, token_type: str, code: str, message: str) -> Token:
        token = self._peek()
        if token.type != token_type:
            raise self._fail(token, code, f"{message}, found {token.describe()}")
        return self._advance()

    def parse(self) -> ConfigAst:
        """Parse the whole token stream."""
        first = self._peek()
        if first.type != IDENT:
            raise self._fail(
                first,
                "MISSING_REPOSITORY_NAME",
                "expected repository name followed by `;` (e.g., `MyRepo;`)",
            )
        if self._peek(1).type != SEMI:
            if first.text in KIND_KEYWORDS:
                raise self._fail(
                    first,
                    "MISSING_REPOSITORY_NAME",
                    "expected repository name before object definitions; "
                    "add an identifier and `;` (e.g., `MyRepo;`)",
                )
            raise self._fail(
                self._peek(1),
                "MISSING_SEMICOLON",
                "expected `;` after repository name (e.g., `MyRepo;`)",
            )
        self._advance()
        self._advance()

        ast = ConfigAst(repository_name=first.text, repository_location=first.location)
        while self._peek().type != EOF:
            ast.objects.append(self._parse_object())

        if self._diagnostics:
            raise SchemaError(self._diagnostics)
        logger.debug(f"Parsed repository {ast.repository_name} with {len(ast.objects)} objects")
        return ast

    def _parse_object(self) -> ObjectDecl:
        kind_token = self._expect(IDENT, "EXPECTED_KIND", f"expected an object kind ({_KIND_LIST})")
        kind = KIND_KEYWORDS.get(kind_token.text)
        if kind is None:
            raise self._fail(
                kind_token,
                "UNKNOWN_KIND",
                f"unknown type `{kind_token.text}`; expected one of: {_KIND_LIST}",
            )
        name_token = self._expect(IDENT, "EXPECTED_NAME", f"expected object name after `{kind.value}`")
        self._expect(LBRACE, "EXPECTED_LBRACE", f"expected `{{` after `{name_token.text}`")

        decl = ObjectDecl(kind=kind, name=name_token.text, location=name_token.location)
        while self._peek().type != RBRACE:
            if self._peek().type == EOF:
                raise self._fail(
                    self._peek(), "UNCLOSED_OBJECT", f"expected `}}` to close `{decl.name}`"
                )
            self._parse_property(decl)
            if self._peek().type == COMMA:
                self._advance()
        self._advance()
        return decl

    def _parse_property(self, decl: ObjectDecl) -> None:
        key_token = self._expect(IDENT, "EXPECTED_PROPERTY", "expected a property name or `}`")
        self._expect(COLON, "EXPECTED_COLON", f"expected `:` after `{key_token.text}`")
        names = self._parse_ident_list()

        key = key_token.text
        if key not in PROPERTY_KEYS:
            self._diagnostics.append(
                Diagnostic(
                    code="UNKNOWN_PROPERTY",
                    message=(
                        f"unknown property `{key}` on `{decl.name}`; `{decl.kind.value}` objects accept: "
                        + ", ".join(f"`{k}`" for k in property_keys_for(decl.kind))
                    ),
                    location=key_token.location,
                )
            )
        elif key in decl.properties:
            self._diagnostics.append(
                Diagnostic(
                    code="DUPLICATE_PROPERTY",
                    message=f"duplicate `{key}` property on `{decl.name}`",
                    location=key_token.location,
                )
            )
        else:
            decl.properties[key] = PropertyValue(names=names, location=key_token.location)

    def _parse_ident_list(self) -> List[str]:
        names = [self._expect(IDENT, "EXPECTED_IDENTIFIER", "expected identifier").text]
        while self._peek().type == COMMA:
            following = self._peek(1)
            if following.type == IDENT and self._peek(2).type == COLON:
                # The comma separates properties; leave it for the caller
                break
            if following.type != IDENT:
                raise self._fail(
                    following,
                    "TRAILING_COMMA",
                    f"expected identifier after `,`, found {following.describe()}",
                )
            self._advance()
            names.append(self._advance().text)
        return names


def parse_schema(text: str, source: str = "<schema>") -> ConfigAst:
    """
    Parse schema text into a syntax tree.

    Args:
        text: Schema source
        source: Name used in diagnostic locations

    Returns:
        Parsed ConfigAst

    Raises:
        SchemaError: With every diagnostic found before parsing stopped
    """
    return SchemaParser(tokenize(text, source)).parse()
