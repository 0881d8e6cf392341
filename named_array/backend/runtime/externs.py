"""
External C library declarations used by the bounds-failure path:
- fprintf: formatted output to a stream
- exit: program termination
- stderr: standard error handle (platform-specific symbol name)
"""
from __future__ import annotations

import sys
import typing

from llvmlite import ir

if typing.TYPE_CHECKING:
    from named_array.backend.codegen_llvm import LLVMCodegen


def stderr_symbol() -> str:
    """Name of the libc global holding stderr's FILE*."""
    if sys.platform == "darwin":
        return "__stderrp"
    return "stderr"


class LibC:
    """Manages external declarations for the libc functions we call."""

    def __init__(self, codegen: LLVMCodegen) -> None:
        self.codegen = codegen
        self.fprintf: ir.Function
        self.exit: ir.Function
        self.stderr_handle: ir.GlobalVariable

    def declare_all(self) -> None:
        self._declare_fprintf()
        self._declare_exit()
        self._declare_stderr()

    def _declare_fprintf(self) -> None:
        """Declare fprintf: int fprintf(FILE* stream, const char* format, ...)"""
        i8p = self.codegen.types.i8.as_pointer()
        fn_ty = ir.FunctionType(self.codegen.types.i32, [i8p, i8p], var_arg=True)
        existing = self.codegen.module.globals.get("fprintf")
        if isinstance(existing, ir.Function):
            self.fprintf = existing
        else:
            self.fprintf = ir.Function(self.codegen.module, fn_ty, name="fprintf")

    def _declare_exit(self) -> None:
        """Declare exit: void exit(int status)"""
        fn_ty = ir.FunctionType(ir.VoidType(), [self.codegen.types.i32])
        existing = self.codegen.module.globals.get("exit")
        if isinstance(existing, ir.Function):
            self.exit = existing
        else:
            self.exit = ir.Function(self.codegen.module, fn_ty, name="exit")
            self.exit.attributes.add("noreturn")

    def _declare_stderr(self) -> None:
        name = stderr_symbol()
        existing = self.codegen.module.globals.get(name)
        if isinstance(existing, ir.GlobalVariable):
            self.stderr_handle = existing
            return
        self.stderr_handle = ir.GlobalVariable(
            self.codegen.module, self.codegen.types.i8.as_pointer(), name=name
        )
        self.stderr_handle.linkage = "external"
