"""Lark parser setup and AST construction."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from lark import Lark

from named_array.internals.report import Reporter
from named_array.semantics.ast import Program
from named_array.semantics.ast_builder import ASTBuilder

GRAMMAR_PATH = Path(__file__).parent.parent / "grammar.lark"


class DeclarationSyntaxError(Exception):
    """Raised by the library API when a declaration file does not parse."""

    def __init__(self, reporter: Reporter) -> None:
        self.reporter = reporter
        super().__init__("\n".join(str(d) for d in reporter.errors))


@lru_cache(maxsize=1)
def _parser() -> Lark:
    # The parser holds no per-parse state, so one instance serves every file
    return Lark.open(
        str(GRAMMAR_PATH),
        parser="lalr",
        lexer="basic",
        propagate_positions=True,
        maybe_placeholders=False,
    )


def parse_to_ast(src: str, dump_parse: bool = False):
    """Parse declaration source into an AST.

    Returns:
        Tuple of (ast, parse_tree).
    """
    tree = _parser().parse(src)
    if dump_parse:
        print(tree.pretty())

    ast_builder = ASTBuilder(src)
    return ast_builder.build(tree), tree


def parse_declarations(src: str, filename: str = "<input>") -> Program:
    """Parse declarations, raising DeclarationSyntaxError on bad input."""
    from named_array.internals.parse_errors import handle_parse_exception

    try:
        ast, _ = parse_to_ast(src)
    except Exception as exc:
        reporter = Reporter(source=src, filename=filename)
        if handle_parse_exception(exc, reporter):
            raise DeclarationSyntaxError(reporter) from exc
        raise
    return ast
