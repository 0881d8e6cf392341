"""Build the record AST from a Lark parse tree.

The builder keeps each field type as written: its token sequence (the key
the uniformity check compares) and its source slice (for messages).
"""
from __future__ import annotations
from typing import Callable, List, Optional

from lark import Tree, Token

from named_array.semantics.ast import (
    Program, RecordDecl, FieldDecl, FieldMode, Attribute, TypeExpr,
)
from named_array.internals.errors import raise_internal_error
from named_array.internals.report import span_of


_BODY_MODES = {
    "named_body": FieldMode.NAMED,
    "tuple_body": FieldMode.POSITIONAL,
    "unit_body": FieldMode.NAMED,
}

_TYPE_NODES = {"path_type", "ref_type", "ptr_type", "array_type", "tuple_type", "dyn_type"}


def _first(children: List[object], pred: Callable) -> Optional[object]:
    """Find first child matching predicate."""
    for ch in children:
        if pred(ch):
            return ch
    return None


def _first_name(children: List[object]) -> Optional[Token]:
    """Get first direct NAME token from children."""
    return _first(children, lambda c: isinstance(c, Token) and c.type == "NAME")  # type: ignore[return-value]


def _trees(children: List[object], data: str) -> List[Tree]:
    return [c for c in children if isinstance(c, Tree) and c.data == data]


def _ident(tok: Token) -> str:
    """Identifier text with any raw-identifier prefix removed."""
    s = str(tok)
    return s[2:] if s.startswith("r#") else s


class ASTBuilder:
    def __init__(self, source: str = "") -> None:
        self.source = source

    def build(self, tree: Tree) -> Program:
        assert isinstance(tree, Tree) and tree.data == "start"
        records = [self._record(item) for item in _trees(tree.children, "item")]
        return Program(records=records, loc=span_of(tree))

    # --- records ---

    def _record(self, item: Tree) -> RecordDecl:
        name_tok = _first_name(item.children)
        body = _first(item.children, lambda c: isinstance(c, Tree) and c.data in _BODY_MODES)
        if name_tok is None or body is None:
            raise_internal_error("CE0001", node=item.data)

        if body.data == "named_body":
            fields = [self._named_field(f) for f in _trees(body.children, "named_field")]
        elif body.data == "tuple_body":
            fields = [self._tuple_field(f) for f in _trees(body.children, "tuple_field")]
        else:
            fields = []

        type_params: List[str] = []
        for gp in _trees(item.children, "generic_params"):
            for param in gp.children:
                if not isinstance(param, Tree):
                    continue
                name = _first_name(param.children)
                if name is not None:
                    type_params.append(_ident(name))

        return RecordDecl(
            name=_ident(name_tok),
            mode=_BODY_MODES[body.data],
            fields=fields,
            attributes=[self._attribute(a) for a in _trees(item.children, "attribute")],
            type_params=type_params,
            name_span=span_of(name_tok),
            loc=span_of(item),
        )

    def _named_field(self, node: Tree) -> FieldDecl:
        name_tok = _first_name(node.children)
        if name_tok is None:
            raise_internal_error("CE0001", node=node.data)
        return FieldDecl(
            name=_ident(name_tok),
            ty=self._type(node.children[-1]),
            loc=span_of(node),
            name_span=span_of(name_tok),
        )

    def _tuple_field(self, node: Tree) -> FieldDecl:
        return FieldDecl(name=None, ty=self._type(node.children[-1]), loc=span_of(node))

    # --- attributes ---

    def _attribute(self, node: Tree) -> Attribute:
        path = self._attr_path(node.children[0])
        args: List[str] = []
        for inp in _trees(node.children, "attr_input"):
            for arg in _trees(inp.children, "attr_arg"):
                head = arg.children[0]
                if isinstance(head, Tree) and head.data == "attr_path":
                    args.append(self._attr_path(head).split("::")[-1])
                else:
                    args.append(str(head))
        return Attribute(path=path, args=args, loc=span_of(node))

    @staticmethod
    def _attr_path(node: Tree) -> str:
        return "::".join(str(t) for t in node.children if isinstance(t, Token))

    # --- types ---

    def _type(self, node: object) -> TypeExpr:
        if not isinstance(node, Tree) or node.data not in _TYPE_NODES:
            raise_internal_error("CE0001", node=getattr(node, "data", node))
        tokens = tuple(str(t) for t in node.scan_values(lambda v: isinstance(v, Token)))
        meta = node.meta
        if self.source and not meta.empty:
            text = " ".join(self.source[meta.start_pos:meta.end_pos].split())
        else:
            text = " ".join(tokens)
        return TypeExpr(text=text, tokens=tokens, loc=span_of(node))
