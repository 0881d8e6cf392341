# internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from named_array.internals.report import Span, Reporter


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    GENERAL   = "general"
    SYNTAX    = "syntax"
    TYPE      = "type"
    BACKEND   = "backend"
    RUNTIME   = "runtime"
    INTERNAL  = "internal"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    category: Category = Category.GENERAL
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)

def emit(r: Reporter, em: ErrorMessage, span: Optional[Span], **kwargs) -> None:
    text = _fmt(em.code, **kwargs)
    if em.severity == Severity.ERROR:
        r.error(em.code, text, span)
    else:
        r.warn(em.code, text, span)

def raise_internal_error(code: str, **kwargs) -> None:
    """Raise a RuntimeError for internal generator errors.

    Internal errors indicate bugs in named-array itself, not problems in
    the user's declarations.

    Raises:
        RuntimeError: Always raises with formatted error message
    """
    text = _fmt(code, **kwargs)
    raise RuntimeError(f"{code}: {text}")


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

def _fmt(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None

#
# --- Registry population
#

# Internal errors - CE0xxx range
_add(ErrorMessage("CE0001", Severity.ERROR,
    "unexpected parse node '{node}'",
    Category.INTERNAL, "The declaration tree contained a node the builder does not know (bug)."))

_add(ErrorMessage("CE0015", Severity.ERROR,
    "{message}",
    Category.INTERNAL, "Generated LLVM IR failed verification (bug)."))

_add(ErrorMessage("CW0001", Severity.WARNING,
    "missing trailing newline", Category.GENERAL,
    "Source file should end with a newline character."))

# Syntax errors - CE1xxx range
_add(ErrorMessage("CE1000", Severity.ERROR,
    "syntax error: {detail}",
    Category.SYNTAX, "The declaration file could not be parsed."))

# Record shape and field type errors - CE2xxx range
_add(ErrorMessage("CE2001", Severity.ERROR,
    "all fields of '{record}' must have the same type: field {field} has type "
    "`{type_text}` but field {first_field} has type `{first_type_text}`",
    Category.TYPE,
    "Field types are compared by their literal spelling. Two spellings of the same "
    "type (for example a qualified path and an alias) are rejected."))

_add(ErrorMessage("CE2002", Severity.ERROR,
    "record '{record}' has no fields; indexed access needs at least one field",
    Category.TYPE, "A zero-field record cannot be indexed."))

_add(ErrorMessage("CE2003", Severity.ERROR,
    "duplicate field '{name}' in record '{record}'",
    Category.TYPE, "A record declares the same field name more than once."))

_add(ErrorMessage("CE2004", Severity.ERROR,
    "record '{name}' already defined at {prev_loc}",
    Category.TYPE, "Two records in one file share a name."))

_add(ErrorMessage("CW2005", Severity.WARNING,
    "unknown derive '{name}' on '{record}' ignored",
    Category.GENERAL, "Only named_array is generated; other derives are passed over."))

# Backend errors - CE3xxx range
_add(ErrorMessage("CE3001", Severity.ERROR,
    "field type `{type_text}` of '{record}' has no LLVM representation",
    Category.BACKEND, "The LLVM backend supports integer, float, bool and char fields."))

_add(ErrorMessage("CE3002", Severity.ERROR,
    "generic record '{record}' cannot be lowered to LLVM",
    Category.BACKEND, "The LLVM backend needs concrete field types."))

_add(ErrorMessage("CE3500", Severity.ERROR,
    "output path '{path}' must end in {suffix}",
    Category.BACKEND, "The output file suffix does not match the requested emission."))

# Runtime errors - raised by generated code
_add(ErrorMessage("RE2020", Severity.ERROR,
    "index out of bounds: the len is {length} but the index is {index}",
    Category.RUNTIME, "Generated accessor called with an index outside [0, len)."))
