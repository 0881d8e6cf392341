"""The ``@named_array`` class decorator.

Python classes get the same treatment as declarations in ``.na`` files:
the class-body annotations are the fields, their spellings must match
token for token, and the Python backend's ``__getitem__`` /
``__setitem__`` are compiled onto the class::

    @named_array
    class Rgb:
        r: int
        g: int
        b: int

        def __init__(self, r, g, b):
            self.r, self.g, self.b = r, g, b

    Rgb(1, 2, 3)[2]   # 3
    Rgb(1, 2, 3)[3]   # IndexOutOfRange

Mixed spellings (``x: int`` next to ``y: "int"``) raise
NonUniformFieldType while the class statement runs.
"""
from __future__ import annotations

import ast
import inspect
import io
import linecache
import operator
import textwrap
import tokenize
from typing import List, NamedTuple, Optional, Tuple

from named_array.backend.python_codegen import OPERATOR_ALIAS, RUNTIME_ALIAS, generate_accessors
from named_array.internals import errors as er
from named_array.internals.report import Reporter, Span
from named_array.runtime import IndexOutOfRange
from named_array.semantics.ast import FieldMode
from named_array.semantics.fields import FieldDescriptor
from named_array.semantics.uniformity import NamedArrayError, NonUniformFieldType, validate_uniform

ACCESSOR_NAMES = ("__getitem__", "__setitem__")

_LAYOUT_TOKENS = frozenset({
    tokenize.NEWLINE, tokenize.NL, tokenize.INDENT, tokenize.DEDENT,
    tokenize.ENDMARKER, tokenize.COMMENT,
})


class _Annotation(NamedTuple):
    name: str
    text: str
    span: Optional[Span]


def type_tokens(text: str) -> Tuple[str, ...]:
    """Python tokens of an annotation, layout and comments dropped."""
    readline = io.StringIO(text.strip()).readline
    return tuple(t.string for t in tokenize.generate_tokens(readline)
                 if t.type not in _LAYOUT_TOKENS)


def _is_classvar(tokens: Tuple[str, ...]) -> bool:
    return bool(tokens) and (tokens[0] == "ClassVar" or tokens[:3] == ("typing", ".", "ClassVar"))


def _annotations_from_source(cls: type) -> Optional[Tuple[List[_Annotation], str, str]]:
    """Annotated assignments of the class body, read from its source.

    Returns None when the source cannot be found (REPL, exec, frozen apps).
    """
    try:
        lines, first_line = inspect.getsourcelines(cls)
        filename = inspect.getsourcefile(cls) or "<unknown>"
    except (OSError, TypeError):
        return None

    src = textwrap.dedent("".join(lines))
    try:
        tree = ast.parse(src)
    except SyntaxError:
        return None
    classdef = next((n for n in tree.body if isinstance(n, ast.ClassDef)), None)
    if classdef is None or classdef.name != cls.__name__:
        return None

    # Spans point into the file, so undo the dedent and the line offset
    offset = first_line - 1
    indent = len(lines[0]) - len(lines[0].lstrip())
    out: List[_Annotation] = []
    for stmt in classdef.body:
        if not (isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name)):
            continue
        ann = stmt.annotation
        text = ast.get_source_segment(src, ann)
        if text is None:
            return None
        span = Span(ann.lineno + offset, ann.col_offset + indent + 1,
                    (ann.end_lineno or ann.lineno) + offset,
                    (ann.end_col_offset or ann.col_offset) + indent + 1)
        out.append(_Annotation(stmt.target.id, text, span))
    return out, "".join(linecache.getlines(filename)) or None, filename


def _annotations_from_strings(cls: type) -> List[_Annotation]:
    """Fallback when there is no source: string annotations only."""
    out: List[_Annotation] = []
    for name, value in inspect.get_annotations(cls).items():
        if not isinstance(value, str):
            raise TypeError(
                f"@named_array cannot read the annotation of {cls.__qualname__}.{name}: "
                f"class source is unavailable and the annotation is not a string"
            )
        out.append(_Annotation(name, value, None))
    return out


def _describe_fields(record: str, annotations: List[_Annotation],
                     reporter: Reporter) -> List[FieldDescriptor]:
    out: List[FieldDescriptor] = []
    seen = set()
    for ann in annotations:
        tokens = type_tokens(ann.text)
        if _is_classvar(tokens):
            continue
        # A repeated annotation in the class body redeclares the field
        if ann.name in seen:
            er.emit(reporter, er.ERR.CE2003, ann.span, name=ann.name, record=record)
            continue
        seen.add(ann.name)
        out.append(FieldDescriptor(
            identifier=ann.name,
            type_text=" ".join(ann.text.split()),
            type_tokens=tokens,
            declaration_order=len(out),
            span=ann.span,
            type_span=ann.span,
        ))
    return out


def named_array(cls: type) -> type:
    """Give `cls` indexed access to its annotated fields in declaration order.

    Raises:
        NonUniformFieldType: the annotations are not all spelled the same,
            or the class has no annotated fields.
        NamedArrayError: a field is annotated more than once (CE2003).
        TypeError: `cls` already defines __getitem__ or __setitem__, or its
            annotations cannot be read.
    """
    if not isinstance(cls, type):
        raise TypeError(f"@named_array expects a class, got {type(cls).__name__}")

    conflicts = [name for name in ACCESSOR_NAMES if name in cls.__dict__]
    if conflicts:
        raise TypeError(
            f"conflicting implementation: {cls.__qualname__} already defines {', '.join(conflicts)}"
        )

    found = _annotations_from_source(cls)
    if found is None:
        annotations = _annotations_from_strings(cls)
        reporter = Reporter(source=None, filename=f"<class {cls.__qualname__}>")
    else:
        annotations, src, filename = found
        reporter = Reporter(source=src, filename=filename)

    fields = _describe_fields(cls.__name__, annotations, reporter)
    if reporter.has_errors:
        raise NamedArrayError(reporter)
    record_span = fields[0].span if fields else None
    fieldset = validate_uniform(cls.__name__, FieldMode.NAMED, fields, reporter, record_span=record_span)
    if fieldset is None:
        raise NonUniformFieldType(reporter)

    accessors = generate_accessors(fieldset, attrs=[str(fd.identifier) for fd in fieldset.fields])
    namespace = {OPERATOR_ALIAS: operator, RUNTIME_ALIAS: IndexOutOfRange}
    exec(compile(accessors.source, f"<named_array {cls.__qualname__}>", "exec"), namespace)

    for name in ACCESSOR_NAMES:
        fn = namespace[name]
        fn.__qualname__ = f"{cls.__qualname__}.{name}"
        fn.__module__ = cls.__module__
        setattr(cls, name, fn)
    cls.__named_array_fields__ = tuple(str(fd.identifier) for fd in fieldset.fields)
    return cls
