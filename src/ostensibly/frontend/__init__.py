"""JavaScript and JSDoc front end.

Parses JavaScript sources into the syntax-node model, documentation comments
into tag blocks, and type expressions into a small expression tree. The
declaration core consumes only those models plus a :class:`TypeChecker`.
"""

from ostensibly.frontend.checker import DocumentedChecker, TypeChecker
from ostensibly.frontend.docparse import parse_doc_comment
from ostensibly.frontend.program import Program, load_program
from ostensibly.frontend.treesitter import JavaScriptFrontEnd
from ostensibly.frontend.typeexpr import TypeExpressionError, parse_type_expression

__all__ = [
    "DocumentedChecker",
    "JavaScriptFrontEnd",
    "Program",
    "TypeChecker",
    "TypeExpressionError",
    "load_program",
    "parse_doc_comment",
    "parse_type_expression",
]
