"""Tests for the documented-names type checker."""

from __future__ import annotations

import pytest

from ostensibly.declare.types import (
    ANY,
    ERROR_TYPE,
    ArrayOf,
    FunctionType,
    Keyword,
    NamedType,
    Parameter,
    StructMember,
    StructType,
    UnionOf,
    VOID,
)
from ostensibly.frontend.checker import DocumentedChecker
from ostensibly.frontend.identifiers import parse_name
from ostensibly.frontend.nodes import HeritageExpression
from ostensibly.frontend.program import load_program
from ostensibly.frontend.typeexpr import parse_type_expression

SOURCE = """
import Emitter from 'events';

/**
 * @namespace Shapes.Foo
 */
class Foo {}

/** @typedef {number} Shapes.Foo~Size */
/** @callback Shapes.Visitor */
"""


@pytest.fixture(scope="module")
def checker() -> DocumentedChecker:
    return DocumentedChecker.from_program(load_program(sources={"shapes.js": SOURCE}))


class TestFromProgram:
    """Names learned from a program."""

    @pytest.mark.parametrize(
        "name",
        ["Foo", "Shapes.Foo", "Shapes.Foo.Size", "Size", "Shapes.Visitor", "Visitor", "Emitter", "Emitter.Event", "Map"],
    )
    def test_given_declared_name_when_checked_then_known(self, checker: DocumentedChecker, name: str) -> None:
        assert checker.is_known(name)

    def test_given_unknown_name_when_checked_then_not_known(self, checker: DocumentedChecker) -> None:
        assert not checker.is_known("Bar")


class TestGuess:
    """Best-guess types for expressions."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("string", Keyword("string")),
            ("String", Keyword("string")),
            ("Object", ANY),
            ("Array", ArrayOf(ANY)),
            ("Foo", NamedType("Foo")),
            ("Object<string, Foo>", NamedType("Record", (Keyword("string"), NamedType("Foo")))),
            ("Unknown", ERROR_TYPE),
            ("Unknown[]", ArrayOf(NamedType("Unknown"))),
            ("?Foo", UnionOf((NamedType("Foo"), Keyword("null")))),
        ],
    )
    def test_given_expression_when_guessed_then_expected(
        self, checker: DocumentedChecker, text: str, expected: object
    ) -> None:
        assert checker.guess(parse_type_expression(text)) == expected

    def test_given_function_when_guessed_then_positional_names(self, checker: DocumentedChecker) -> None:
        result = checker.guess(parse_type_expression("function(string, number=)"))

        assert result == FunctionType(
            (Parameter("arg0", Keyword("string")), Parameter("arg1", Keyword("number"), optional=True)),
            VOID,
        )

    def test_given_record_when_guessed_then_struct(self, checker: DocumentedChecker) -> None:
        result = checker.guess(parse_type_expression("{a: string, b}"))

        assert result == StructType((StructMember("a", Keyword("string")), StructMember("b", ANY)))


class TestConstructable:
    """Construct signatures of base types."""

    @pytest.mark.parametrize(("name", "expected"), [("Foo", True), ("Error", True), ("Emitter", True), ("Visitor", False)])
    def test_given_base_when_checked_then_constructable(
        self, checker: DocumentedChecker, name: str, expected: bool
    ) -> None:
        base = parse_name(name)
        assert base is not None

        assert checker.is_constructable(HeritageExpression(base)) is expected

    def test_given_type_to_string_when_reference_then_written_name(self, checker: DocumentedChecker) -> None:
        assert checker.type_to_string(parse_type_expression("Shapes.Foo")) == "Shapes.Foo"
        assert checker.type_to_string(parse_type_expression("number")) == "number"
        assert checker.type_to_string(None) == ""
        assert checker.type_to_string(parse_type_expression("A|B")) == ""
