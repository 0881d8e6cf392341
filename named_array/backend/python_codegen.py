"""Python backend: validated field sets -> Python source.

Each record becomes a slotted class whose ``__getitem__`` and
``__setitem__`` dispatch on the index with a ``match`` statement: one
``case`` per field in declaration order and a wildcard case that raises
IndexOutOfRange. The same accessor text is what ``@named_array`` compiles
onto user classes.
"""
from __future__ import annotations

import keyword
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from named_array.semantics.ast import FieldIdentifier, FieldMode
from named_array.semantics.uniformity import ValidatedFieldSet

RUNTIME_ALIAS = "_IndexOutOfRange"
RUNTIME_IMPORT = f"from named_array.runtime import IndexOutOfRange as {RUNTIME_ALIAS}"
OPERATOR_ALIAS = "_operator"

# Names the generated module or its methods already bind
RESERVED_NAMES = frozenset({RUNTIME_ALIAS, OPERATOR_ALIAS, "self"})


def _is_reserved(name: str) -> bool:
    return keyword.iskeyword(name) or name in RESERVED_NAMES


def python_names(identifiers: Sequence[FieldIdentifier]) -> List[str]:
    """Distinct Python identifiers for `identifiers`, in order.

    Positions become `_0`, `_1`, ... Keywords and reserved names take
    trailing underscores until they clash with no other name in the list,
    so `r#pass` next to `pass_` becomes `pass__`.
    """
    plain = [f"_{i}" if isinstance(i, int) else i for i in identifiers]
    taken = {name for name in plain if not _is_reserved(name)}
    out: List[str] = []
    for name in plain:
        if _is_reserved(name):
            name += "_"
            while name in taken or _is_reserved(name):
                name += "_"
            taken.add(name)
        out.append(name)
    return out


def attribute_name(identifier: FieldIdentifier) -> str:
    """Python attribute holding a lone field: `a`, `pass_` or `_0`."""
    return python_names([identifier])[0]


@dataclass(frozen=True)
class GeneratedAccessors:
    """Source of the two accessor methods for one record."""
    record: str
    read_source: str
    write_source: str

    @property
    def source(self) -> str:
        return f"{self.read_source}\n{self.write_source}"


class _Lines:
    def __init__(self) -> None:
        self.lines: List[str] = []
        self.indent = 0

    def _line(self, text: str = "") -> None:
        if text:
            self.lines.append("    " * self.indent + text)
        else:
            self.lines.append("")

    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


def _emit_dispatch(out: _Lines, fieldset: ValidatedFieldSet,
                   attrs: Sequence[str], write: bool) -> None:
    n = len(fieldset)
    if write:
        out._line("def __setitem__(self, index, value):")
    else:
        out._line("def __getitem__(self, index):")
    out.indent += 1
    out._line(f"index = {OPERATOR_ALIAS}.index(index)")
    out._line("match index:")
    out.indent += 1
    for fd, attr in zip(fieldset.fields, attrs):
        out._line(f"case {fd.declaration_order}:")
        out.indent += 1
        out._line(f"self.{attr} = value" if write else f"return self.{attr}")
        out.indent -= 1
    out._line("case _:")
    out.indent += 1
    out._line(f"raise {RUNTIME_ALIAS}({n}, index)")
    out.indent -= 3


def generate_accessors(fieldset: ValidatedFieldSet,
                       attrs: Optional[Sequence[str]] = None) -> GeneratedAccessors:
    """Accessor method source for one record, unindented.

    `attrs` overrides the attribute each field is stored in; by default
    it comes from the field identifiers.
    """
    if attrs is None:
        attrs = python_names([fd.identifier for fd in fieldset.fields])
    if len(attrs) != len(fieldset):
        raise ValueError(f"expected {len(fieldset)} attribute names, got {len(attrs)}")

    read, write = _Lines(), _Lines()
    _emit_dispatch(read, fieldset, attrs, write=False)
    _emit_dispatch(write, fieldset, attrs, write=True)
    return GeneratedAccessors(fieldset.record, read.text(), write.text())


class PythonCodegen:
    """Emit a Python module holding one class per validated record."""

    def __init__(self, source_name: str = "<input>", version: str = "") -> None:
        self.source_name = source_name
        self.version = version
        self.out = _Lines()
        self.accessors: Dict[str, GeneratedAccessors] = {}

    def build_module(self, fieldsets: Sequence[ValidatedFieldSet]) -> str:
        out = self.out
        stamp = f"named-array {self.version}".strip()
        out._line(f"# Generated by {stamp} from {self.source_name}. Do not edit.")
        out._line("from __future__ import annotations")
        out._line()
        out._line(f"import operator as {OPERATOR_ALIAS}")
        out._line()
        out._line(RUNTIME_IMPORT)
        classes = python_names([fs.record for fs in fieldsets])
        names = ", ".join(repr(c) for c in classes)
        out._line()
        out._line(f"__all__ = [{names}]")
        for fieldset, class_name in zip(fieldsets, classes):
            out._line()
            out._line()
            self._emit_record(fieldset, class_name)
        return out.text()

    def _emit_record(self, fieldset: ValidatedFieldSet, class_name: str) -> None:
        out = self.out
        attrs = python_names([fd.identifier for fd in fieldset.fields])
        positional = fieldset.mode is FieldMode.POSITIONAL
        shape = "tuple record" if positional else "record"

        out._line(f"class {class_name}:")
        out.indent += 1
        out._line(f'"""{shape.capitalize()} of {len(fieldset)} `{fieldset.element_type}` '
                  f'fields, indexable in declaration order."""')
        out._line()
        slots = ", ".join(repr(a) for a in attrs)
        out._line(f"__slots__ = ({slots},)")
        out._line()
        out._line(f"def __init__(self, {', '.join(attrs)}):")
        out.indent += 1
        for attr in attrs:
            out._line(f"self.{attr} = {attr}")
        out.indent -= 1
        out._line()
        out._line("def __repr__(self):")
        out.indent += 1
        if positional:
            parts = ", ".join(f"{{self.{a}!r}}" for a in attrs)
        else:
            parts = ", ".join(f"{fd.identifier}={{self.{a}!r}}" for fd, a in zip(fieldset.fields, attrs))
        out._line(f'return f"{class_name}({parts})"')
        out.indent -= 1

        accessors = generate_accessors(fieldset, attrs)
        self.accessors[fieldset.record] = accessors
        for method in (accessors.read_source, accessors.write_source):
            out._line()
            for line in method.rstrip("\n").splitlines():
                out._line(line)
        out.indent -= 1
