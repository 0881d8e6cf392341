"""
Runtime support emitted into generated LLVM modules.

- externs: libc declarations (fprintf, exit, stderr handle)
- errors: bounds-failure emission (print to stderr, exit)
"""
from __future__ import annotations

import typing

from named_array.backend.runtime.externs import LibC
from named_array.backend.runtime.errors import RuntimeErrors

if typing.TYPE_CHECKING:
    from named_array.backend.codegen_llvm import LLVMCodegen


class LLVMRuntime:
    """Groups the runtime helpers one module needs."""

    def __init__(self, codegen: LLVMCodegen) -> None:
        self.libc = LibC(codegen)
        self.errors = RuntimeErrors(codegen)

    def declare_externs(self) -> None:
        self.libc.declare_all()


__all__ = ["LLVMRuntime", "LibC", "RuntimeErrors"]
