"""Type-uniformity check over a record's field descriptors.

Field types are compared by token sequence only. At this stage there is
no resolved type information, so `Option<()>` and
`core::option::Option<()>` are different types here even though a type
checker would call them equal. Whitespace between tokens does not matter.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from named_array.internals import errors as er
from named_array.internals.report import Reporter, Span
from named_array.semantics.ast import FieldMode
from named_array.semantics.fields import FieldDescriptor


class NamedArrayError(Exception):
    """Base class for build-time failures raised by the library API."""

    def __init__(self, reporter: Reporter) -> None:
        self.reporter = reporter
        super().__init__("\n".join(str(d) for d in reporter.errors))

    @property
    def diagnostics(self):
        return self.reporter.errors


class NonUniformFieldType(NamedArrayError):
    """Field types differ, or the record has no fields (CE2001 / CE2002)."""


@dataclass(frozen=True)
class ValidatedFieldSet:
    """Non-empty field sequence whose types are all spelled identically."""
    record: str
    mode: FieldMode
    fields: Tuple[FieldDescriptor, ...]
    element_type: str
    element_tokens: Tuple[str, ...]
    type_params: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.fields)


def validate_uniform(
    record: str,
    mode: FieldMode,
    fields: Sequence[FieldDescriptor],
    reporter: Reporter,
    record_span: Optional[Span] = None,
    type_params: Tuple[str, ...] = (),
) -> Optional[ValidatedFieldSet]:
    """Check that every field has the first field's type tokens.

    Emits one CE2001 per mismatching field, or CE2002 for an empty record,
    and returns None in either case.
    """
    if not fields:
        er.emit(reporter, er.ERR.CE2002, record_span, record=record)
        return None

    first = fields[0]
    ok = True
    for fd in fields[1:]:
        if fd.type_tokens != first.type_tokens:
            ok = False
            er.emit(reporter, er.ERR.CE2001, fd.type_span or fd.span,
                    record=record,
                    field=fd.label, type_text=fd.type_text,
                    first_field=first.label, first_type_text=first.type_text)
    if not ok:
        return None

    return ValidatedFieldSet(
        record=record,
        mode=mode,
        fields=tuple(fields),
        element_type=first.type_text,
        element_tokens=first.type_tokens,
        type_params=type_params,
    )
