"""Declaration checks run before any backend: extract, then validate.

Each record is handled in isolation. A failure in one record does not
stop the others from being checked, so one run reports every problem in
the file.
"""
from __future__ import annotations

from typing import Dict, List

from named_array.internals import errors as er
from named_array.internals.report import Reporter, Span
from named_array.semantics.ast import Program, RecordDecl
from named_array.semantics.fields import extract_fields
from named_array.semantics.uniformity import ValidatedFieldSet, validate_uniform

# Derives a Rust author would routinely put next to named_array
STANDARD_DERIVES = frozenset({
    "named_array", "Debug", "Clone", "Copy", "PartialEq", "Eq",
    "PartialOrd", "Ord", "Hash", "Default",
})


def analyze_record(record: RecordDecl, reporter: Reporter) -> ValidatedFieldSet | None:
    """Run the extractor and uniformity check for one record."""
    before = len(reporter.errors)
    fields = extract_fields(record, reporter)
    fieldset = validate_uniform(
        record.name, record.mode, fields, reporter,
        record_span=record.name_span or record.loc,
        type_params=tuple(record.type_params),
    )
    if len(reporter.errors) > before:
        return None
    return fieldset


def analyze_program(program: Program, reporter: Reporter) -> List[ValidatedFieldSet]:
    """Validated field sets for every record that derives named_array.

    Records without the derive are parsed but produce nothing.
    """
    seen: Dict[str, Span | None] = {}
    out: List[ValidatedFieldSet] = []

    for record in program.records:
        if record.name in seen:
            prev = seen[record.name]
            er.emit(reporter, er.ERR.CE2004, record.name_span,
                    name=record.name, prev_loc=str(prev) if prev else "<unknown>")
            continue
        seen[record.name] = record.name_span

        for name in record.derives:
            if name not in STANDARD_DERIVES:
                er.emit(reporter, er.ERR.CW2005, record.name_span, name=name, record=record.name)

        if not record.requests_named_array:
            continue

        fieldset = analyze_record(record, reporter)
        if fieldset is not None:
            out.append(fieldset)

    return out
