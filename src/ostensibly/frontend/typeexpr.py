"""JSDoc type expressions.

The expression language understood inside ``{...}`` braces of documentation
tags:

- keywords (``string``, ``number``, ``*``, ``?`` ...) and literals
- references, optionally generic (``Array<T>``, ``Array.<T>``, ``Shapes.Foo``)
- unions ``A|B``, intersections ``A&B``, arrays ``T[]``
- type operators ``typeof X`` and ``keyof T``
- Closure function types ``function(A, B=): R`` and arrows ``(a: A) => R``
- record types ``{a: A, b?: B}``
- nullable ``?T``/``T?``, non-null ``!T``, optional ``T=`` and rest ``...T``

``#`` and ``~`` inside names are member separators and read as ``.``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ostensibly.frontend.identifiers import Identifier, QualifiedName

KEYWORDS = frozenset(
    {
        "any",
        "bigint",
        "boolean",
        "never",
        "null",
        "number",
        "object",
        "string",
        "symbol",
        "undefined",
        "unknown",
        "void",
    }
)


class TypeExpressionError(ValueError):
    """Raised when type text cannot be parsed."""


@dataclass(frozen=True, slots=True)
class KeywordExpr:
    name: str


@dataclass(frozen=True, slots=True)
class LiteralExpr:
    value: str | int | float | bool


@dataclass(frozen=True, slots=True)
class ReferenceExpr:
    name: Identifier | QualifiedName
    arguments: tuple[TypeExpr, ...] = ()


@dataclass(frozen=True, slots=True)
class UnionExpr:
    members: tuple[TypeExpr, ...]


@dataclass(frozen=True, slots=True)
class IntersectionExpr:
    members: tuple[TypeExpr, ...]


@dataclass(frozen=True, slots=True)
class ArrayExpr:
    element: TypeExpr


@dataclass(frozen=True, slots=True)
class OperatorExpr:
    """``typeof X`` or ``keyof T``."""

    operator: str
    operand: TypeExpr


@dataclass(frozen=True, slots=True)
class FunctionParamExpr:
    type: TypeExpr
    name: str | None = None
    optional: bool = False
    rest: bool = False


@dataclass(frozen=True, slots=True)
class FunctionExpr:
    parameters: tuple[FunctionParamExpr, ...] = ()
    returns: TypeExpr | None = None


@dataclass(frozen=True, slots=True)
class RecordMemberExpr:
    name: str
    type: TypeExpr | None = None
    optional: bool = False


@dataclass(frozen=True, slots=True)
class RecordExpr:
    members: tuple[RecordMemberExpr, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class OptionalExpr:
    """Closure ``T=``: the slot may be omitted."""

    inner: TypeExpr


@dataclass(frozen=True, slots=True)
class RestExpr:
    """Closure ``...T``: a variadic slot."""

    inner: TypeExpr


TypeExpr = (
    KeywordExpr
    | LiteralExpr
    | ReferenceExpr
    | UnionExpr
    | IntersectionExpr
    | ArrayExpr
    | OperatorExpr
    | FunctionExpr
    | RecordExpr
    | OptionalExpr
    | RestExpr
)


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<ellipsis>\.\.\.)
    |(?P<arrow>=>)
    |(?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    |(?P<number>-?\d+(?:\.\d+)?)
    |(?P<name>[A-Za-z_$][\w$]*)
    |(?P<punct>[|&<>,;\[\](){}:=?!*.~\#])
    """,
    re.VERBOSE,
)

# Tokens that can never start a type; a `?` before one of these is "unknown"
_TYPE_TERMINATORS = frozenset({",", ")", ">", "]", "|", "&", "=", "}", ";", ":", "=>"})


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    text: str


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise TypeExpressionError(f"Unexpected character {text[pos]!r} in {text!r}")
        pos = match.end()
        kind = match.lastgroup or ""
        if kind != "ws":
            tokens.append(_Token(kind, match.group()))
    return tokens


class _TypeParser:
    """Recursive-descent parser over a token list."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = _tokenize(text)
        self._pos = 0

    def parse(self) -> TypeExpr:
        result = self._parse_type()
        if self._peek() is not None:
            raise self._error("trailing input")
        return result

    # -- token helpers -------------------------------------------------

    def _peek(self, offset: int = 0) -> _Token | None:
        index = self._pos + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _at(self, text: str, offset: int = 0) -> bool:
        token = self._peek(offset)
        return token is not None and token.kind != "string" and token.text == text

    def _accept(self, text: str) -> bool:
        if self._at(text):
            self._pos += 1
            return True
        return False

    def _expect(self, text: str) -> None:
        if not self._accept(text):
            raise self._error(f"expected {text!r}")

    def _next(self) -> _Token:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of type")
        self._pos += 1
        return token

    def _error(self, reason: str) -> TypeExpressionError:
        return TypeExpressionError(f"{reason} at token {self._pos} in {self._text!r}")

    # -- grammar -------------------------------------------------------

    def _parse_type(self) -> TypeExpr:
        if self._at("(") and self._is_arrow_ahead():
            return self._parse_arrow()
        return self._parse_union()

    def _parse_union(self) -> TypeExpr:
        self._accept("|")
        members = [self._parse_intersection()]
        while self._accept("|"):
            members.append(self._parse_intersection())
        return members[0] if len(members) == 1 else UnionExpr(tuple(members))

    def _parse_intersection(self) -> TypeExpr:
        members = [self._parse_prefix()]
        while self._accept("&"):
            members.append(self._parse_prefix())
        return members[0] if len(members) == 1 else IntersectionExpr(tuple(members))

    def _parse_prefix(self) -> TypeExpr:
        if self._accept("..."):
            return RestExpr(self._parse_prefix())
        if self._accept("!"):
            return self._parse_prefix()
        if self._at("?") and not self._is_terminator(1):
            self._pos += 1
            return UnionExpr((self._parse_prefix(), KeywordExpr("null")))
        if self._at("keyof"):
            self._pos += 1
            return OperatorExpr("keyof", self._parse_prefix())
        if self._at("typeof"):
            self._pos += 1
            return OperatorExpr("typeof", ReferenceExpr(self._parse_name()))
        return self._parse_postfix()

    def _parse_postfix(self) -> TypeExpr:
        result = self._parse_primary()
        while True:
            if self._at("[") and self._at("]", 1):
                self._pos += 2
                result = ArrayExpr(result)
            elif self._at("?"):
                self._pos += 1
                result = UnionExpr((result, KeywordExpr("null")))
            elif self._at("="):
                self._pos += 1
                return OptionalExpr(result)
            else:
                return result

    def _parse_primary(self) -> TypeExpr:
        if self._accept("("):
            inner = self._parse_type()
            self._expect(")")
            return inner
        if self._accept("{"):
            return self._parse_record()
        if self._accept("*"):
            return KeywordExpr("any")
        if self._accept("?"):
            return KeywordExpr("any")

        token = self._peek()
        if token is None:
            raise self._error("unexpected end of type")
        if token.kind == "string":
            self._pos += 1
            return LiteralExpr(token.text[1:-1])
        if token.kind == "number":
            self._pos += 1
            return LiteralExpr(float(token.text) if "." in token.text else int(token.text))
        if token.kind != "name":
            raise self._error(f"unexpected {token.text!r}")

        if token.text == "function" and self._at("(", 1):
            self._pos += 1
            return self._parse_function()
        if token.text in ("true", "false"):
            self._pos += 1
            return LiteralExpr(token.text == "true")
        if token.text in KEYWORDS:
            self._pos += 1
            return KeywordExpr(token.text)

        name = self._parse_name()
        arguments: list[TypeExpr] = []
        if self._at(".") and self._at("<", 1):
            self._pos += 1
        if self._accept("<"):
            arguments.append(self._parse_type())
            while self._accept(","):
                arguments.append(self._parse_type())
            self._expect(">")
        return ReferenceExpr(name, tuple(arguments))

    def _parse_name(self) -> Identifier | QualifiedName:
        token = self._next()
        if token.kind != "name":
            raise self._error("expected a name")
        name: Identifier | QualifiedName = Identifier(token.text)
        while self._peek() is not None and self._peek(0).text in (".", "~", "#"):  # type: ignore[union-attr]
            following = self._peek(1)
            if following is None or following.kind != "name":
                break
            self._pos += 2
            name = QualifiedName(name, Identifier(following.text))
        return name

    def _parse_function(self) -> FunctionExpr:
        self._expect("(")
        parameters: list[FunctionParamExpr] = []
        while not self._at(")"):
            if self._peek() is not None and self._peek(0).text in ("this", "new") and self._at(":", 1):  # type: ignore[union-attr]
                # Receiver and constructor annotations carry no parameter slot
                self._pos += 2
                self._parse_type()
            else:
                parameters.append(self._param_from(self._parse_type()))
            if not self._accept(","):
                break
        self._expect(")")
        returns = self._parse_type() if self._accept(":") else None
        return FunctionExpr(tuple(parameters), returns)

    def _parse_arrow(self) -> FunctionExpr:
        self._expect("(")
        parameters: list[FunctionParamExpr] = []
        while not self._at(")"):
            rest = self._accept("...")
            name = self._next().text
            optional = self._accept("?")
            type_: TypeExpr = self._parse_type() if self._accept(":") else KeywordExpr("any")
            parameters.append(FunctionParamExpr(type_, name=name, optional=optional, rest=rest))
            if not self._accept(","):
                break
        self._expect(")")
        self._expect("=>")
        return FunctionExpr(tuple(parameters), self._parse_type())

    def _parse_record(self) -> RecordExpr:
        members: list[RecordMemberExpr] = []
        while not self._at("}"):
            token = self._next()
            if token.kind not in ("name", "string", "number"):
                raise self._error("expected a record key")
            key = token.text[1:-1] if token.kind == "string" else token.text
            optional = self._accept("?")
            type_ = self._parse_type() if self._accept(":") else None
            members.append(RecordMemberExpr(key, type_, optional))
            if not (self._accept(",") or self._accept(";")):
                break
        self._expect("}")
        return RecordExpr(tuple(members))

    # -- lookahead -----------------------------------------------------

    def _is_terminator(self, offset: int) -> bool:
        token = self._peek(offset)
        return token is None or (token.kind in ("punct", "arrow") and token.text in _TYPE_TERMINATORS)

    def _is_arrow_ahead(self) -> bool:
        depth = 0
        for index in range(self._pos, len(self._tokens)):
            text = self._tokens[index].text
            if text == "(":
                depth += 1
            elif text == ")":
                depth -= 1
                if depth == 0:
                    following = self._tokens[index + 1] if index + 1 < len(self._tokens) else None
                    return following is not None and following.kind == "arrow"
        return False

    @staticmethod
    def _param_from(expr: TypeExpr) -> FunctionParamExpr:
        if isinstance(expr, RestExpr):
            return FunctionParamExpr(expr.inner, rest=True)
        if isinstance(expr, OptionalExpr):
            return FunctionParamExpr(expr.inner, optional=True)
        return FunctionParamExpr(expr)


def parse_type_expression(text: str) -> TypeExpr:
    """Parse the text between a tag's braces into a type expression.

    Raises:
        TypeExpressionError: when the text is not a type expression.
    """
    if not text.strip():
        raise TypeExpressionError("empty type expression")
    return _TypeParser(text).parse()


def is_object_reference(expr: object) -> bool:
    """Whether a type is plain ``Object``/``object``, the marker for nested child tags."""
    if isinstance(expr, KeywordExpr):
        return expr.name == "object"
    return (
        isinstance(expr, ReferenceExpr)
        and not expr.arguments
        and isinstance(expr.name, Identifier)
        and expr.name.text in ("Object", "object")
    )


def is_object_array_reference(expr: object) -> bool:
    """``Object[]`` or ``Array.<Object>``."""
    if isinstance(expr, ArrayExpr):
        return is_object_reference(expr.element)
    return (
        isinstance(expr, ReferenceExpr)
        and isinstance(expr.name, Identifier)
        and expr.name.text == "Array"
        and len(expr.arguments) == 1
        and is_object_reference(expr.arguments[0])
    )
