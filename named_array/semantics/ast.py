# semantics/ast.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from named_array.internals.report import Span

# === Core node base ===

@dataclass
class Node:
    loc: Optional[Span]


class FieldMode(str, Enum):
    """How a record's fields are referred to by generated code."""
    NAMED = "named"            # struct Name { a: T, b: T }
    POSITIONAL = "positional"  # struct Name(T, T);


@dataclass
class TypeExpr:
    """A field type exactly as the author wrote it.

    `tokens` is the comparison key; `text` is only for diagnostics and
    generated comments.
    """
    text: str
    tokens: Tuple[str, ...]
    loc: Optional[Span] = None

    def __str__(self) -> str:
        return self.text


@dataclass
class Attribute(Node):
    """Outer attribute such as #[derive(Debug, named_array)]."""
    path: str                                        # "derive", "repr", ...
    args: List[str] = field(default_factory=list)    # last path segment of each argument


@dataclass
class FieldDecl:
    """Single field in a record declaration."""
    name: Optional[str]          # None for positional fields
    ty: TypeExpr
    loc: Optional[Span] = None
    name_span: Optional[Span] = None


@dataclass
class RecordDecl(Node):
    """Record type declaration (named, positional or unit)."""
    name: str
    mode: FieldMode
    fields: List[FieldDecl]
    attributes: List[Attribute] = field(default_factory=list)
    type_params: List[str] = field(default_factory=list)
    name_span: Optional[Span] = None

    @property
    def derives(self) -> List[str]:
        out: List[str] = []
        for attr in self.attributes:
            if attr.path == "derive":
                out.extend(attr.args)
        return out

    @property
    def requests_named_array(self) -> bool:
        return "named_array" in self.derives


@dataclass
class Program(Node):
    records: List[RecordDecl]


FieldIdentifier = Union[str, int]
