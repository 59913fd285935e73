from __future__ import annotations

import re
from dataclasses import fields
from typing import Any

from lexer import Lexer, Token
from nodes import NODE_KINDS, Node


class ParseError(ValueError):
    """Raised when parsing fails."""


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def attribute_name(raw: str) -> str:
    """Map an authored attribute name (``scaleX``, ``thumbUrl``) to its field name."""
    return _CAMEL_BOUNDARY.sub("_", raw).lower()


class Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.index = 0

    @classmethod
    def from_source(cls, source: str) -> Node:
        tokens = Lexer(source).tokenize()
        return cls(tokens).parse_document()

    def parse_document(self) -> Node:
        self._skip_newlines()
        if self._at_end():
            raise ParseError("Expected a root node.")
        root = self._parse_node()
        self._skip_newlines()
        if not self._at_end():
            self._error_here("Expected a single root node.")
        return root

    def _parse_node(self) -> Node:
        kind_token = self._consume_type("IDENT", "Expected a node kind.")
        node_cls = NODE_KINDS.get(kind_token.value.lower())
        if node_cls is None:
            raise ParseError(
                f"Unknown node kind '{kind_token.value}' (line {kind_token.line}, column {kind_token.column})"
            )
        allowed = {f.name for f in fields(node_cls) if f.init and f.name != "children"}

        attrs: dict[str, Any] = {}
        while self._check_type("IDENT"):
            name_token = self._advance()
            name = attribute_name(name_token.value)
            if name not in allowed:
                raise ParseError(
                    f"Unknown attribute '{name_token.value}' for '{kind_token.value}' "
                    f"(line {name_token.line}, column {name_token.column})"
                )
            if name in attrs:
                raise ParseError(
                    f"Duplicate attribute '{name_token.value}' (line {name_token.line}, column {name_token.column})"
                )
            if self._match_type("EQUALS"):
                attrs[name] = self._parse_value()
            else:
                attrs[name] = True

        children: list[Any] = []
        if self._match_type("LBRACE"):
            children = self._parse_body(kind_token)
        elif not (self._check_type("NEWLINE") or self._check_type("RBRACE") or self._at_end()):
            self._error_here(f"Unexpected token in '{kind_token.value}' header.")

        try:
            return node_cls(**attrs, children=children)
        except (TypeError, ValueError) as exc:
            raise ParseError(
                f"Invalid '{kind_token.value}' node at line {kind_token.line}, column {kind_token.column}: {exc}"
            ) from exc

    def _parse_body(self, owner: Token) -> list[Any]:
        items: list[Any] = []
        while True:
            self._skip_newlines()
            if self._at_end():
                self._error_here(f"Unterminated block for '{owner.value}'. Expected '}}'.")
            if self._match_type("RBRACE"):
                return items
            if self._check_type("IDENT"):
                items.append(self._parse_node())
            else:
                items.append(self._parse_value())
            if not (self._check_type("NEWLINE") or self._check_type("RBRACE")):
                self._error_here("Expected a newline or '}' after block item.")

    def _parse_value(self) -> Any:
        token = self._current()
        if token.type == "STRING":
            self._advance()
            return token.value
        if token.type == "NUMBER":
            self._advance()
            if "." in token.value:
                return float(token.value)
            return int(token.value)
        if token.type == "KEYWORD":
            self._advance()
            return {"true": True, "false": False, "null": None}[token.value]
        if token.type == "LBRACKET":
            self._advance()
            return self._parse_list()
        if token.type == "LBRACE":
            self._advance()
            return self._parse_map()
        self._error_here("Expected a value.")
        raise AssertionError("unreachable")

    def _parse_list(self) -> list[Any]:
        values: list[Any] = []
        self._skip_newlines()
        while not self._match_type("RBRACKET"):
            values.append(self._parse_value())
            self._skip_newlines()
            if self._match_type("COMMA"):
                self._skip_newlines()
                continue
            self._consume_type("RBRACKET", "Expected ',' or ']' in list.")
            break
        return values

    def _parse_map(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        self._skip_newlines()
        while not self._match_type("RBRACE"):
            key = self._parse_name_token()
            self._consume_type("COLON", "Expected ':' after map key.")
            values[key] = self._parse_value()
            self._skip_newlines()
            if self._match_type("COMMA"):
                self._skip_newlines()
                continue
            self._consume_type("RBRACE", "Expected ',' or '}' in map.")
            break
        return values

    def _parse_name_token(self) -> str:
        token = self._current()
        if token.type == "IDENT":
            self._advance()
            return token.value
        if token.type == "STRING":
            self._advance()
            return token.value
        self._error_here("Expected name.")
        raise AssertionError("unreachable")

    def _consume_type(self, token_type: str, message: str) -> Token:
        token = self._current()
        if token.type == token_type:
            self._advance()
            return token
        raise ParseError(f"{message} (line {token.line}, column {token.column})")

    def _match_type(self, token_type: str) -> bool:
        if self._check_type(token_type):
            self._advance()
            return True
        return False

    def _check_type(self, token_type: str) -> bool:
        return self._current().type == token_type

    def _skip_newlines(self) -> None:
        while self._check_type("NEWLINE"):
            self._advance()

    def _at_end(self) -> bool:
        return self._current().type == "EOF"

    def _current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _error_here(self, message: str) -> None:
        token = self._current()
        raise ParseError(f"{message} (line {token.line}, column {token.column})")
