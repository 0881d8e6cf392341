"""Field extraction: record declaration -> ordered field descriptors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from named_array.internals import errors as er
from named_array.internals.report import Reporter, Span
from named_array.semantics.ast import FieldIdentifier, FieldMode, RecordDecl


@dataclass(frozen=True)
class FieldDescriptor:
    """One field as seen by the accessor generator.

    `identifier` is how generated code names the field (a name, or a
    position for positional records). `declaration_order` is the runtime
    index; the two coincide only for positional records.
    """
    identifier: FieldIdentifier
    type_text: str
    type_tokens: Tuple[str, ...]
    declaration_order: int
    span: Optional[Span] = None
    type_span: Optional[Span] = None

    @property
    def label(self) -> str:
        """Identifier as it appears in messages: `a` or `0`."""
        return f"`{self.identifier}`"


def extract_fields(record: RecordDecl, reporter: Optional[Reporter] = None) -> List[FieldDescriptor]:
    """Turn a record declaration into descriptors in declaration order.

    A zero-field record yields an empty list; rejecting it is the
    uniformity check's job. Duplicate named fields are reported (CE2003)
    and skipped so later stages see each name once.
    """
    out: List[FieldDescriptor] = []
    seen: set[str] = set()

    for position, fd in enumerate(record.fields):
        if record.mode is FieldMode.POSITIONAL:
            identifier: FieldIdentifier = position
        else:
            if fd.name is None:
                er.raise_internal_error("CE0001", node="unnamed field in named record")
            if fd.name in seen:
                if reporter is not None:
                    er.emit(reporter, er.ERR.CE2003, fd.name_span or fd.loc,
                            name=fd.name, record=record.name)
                continue
            seen.add(fd.name)
            identifier = fd.name

        out.append(FieldDescriptor(
            identifier=identifier,
            type_text=fd.ty.text,
            type_tokens=fd.ty.tokens,
            declaration_order=len(out),
            span=fd.loc,
            type_span=fd.ty.loc,
        ))

    return out
