"""
Runtime error emission for generated accessors.

The only runtime failure is an out-of-range index (RE2020). It prints a
message to stderr and exits; the caller never gets control back.
"""
from __future__ import annotations

import typing

from llvmlite import ir

from named_array.runtime import BOUNDS_ERROR_CODE

if typing.TYPE_CHECKING:
    from named_array.backend.codegen_llvm import LLVMCodegen

BOUNDS_FORMAT = "index out of bounds: the len is %lld but the index is %lld"


class RuntimeErrors:
    """Manages runtime error emission."""

    def __init__(self, codegen: LLVMCodegen) -> None:
        self.codegen = codegen

    def _format_constant(self, error_code: str, format_string: str) -> ir.GlobalVariable:
        """Private global holding "Runtime Error <code>: <format>\\n", shared per code."""
        full_format = f"Runtime Error {error_code}: {format_string}\n"
        data = bytearray(full_format.encode("utf-8")) + bytearray([0])
        fmt_name = f".runtime_err_fmt_{error_code}"

        existing = self.codegen.module.globals.get(fmt_name)
        if isinstance(existing, ir.GlobalVariable):
            return existing

        arr_ty = ir.ArrayType(self.codegen.types.i8, len(data))
        fmt_const = ir.GlobalVariable(self.codegen.module, arr_ty, name=fmt_name)
        fmt_const.linkage = "private"
        fmt_const.global_constant = True
        fmt_const.initializer = ir.Constant(arr_ty, data)
        return fmt_const

    def emit_runtime_error_with_values(
        self, builder: ir.IRBuilder, error_code: str, format_string: str, *values: ir.Value
    ) -> None:
        """Print a formatted runtime error to stderr and exit(1).

        Terminates the current block with `unreachable`.
        """
        libc = self.codegen.runtime.libc
        zero = ir.Constant(self.codegen.types.i32, 0)
        fmt_ptr = builder.gep(self._format_constant(error_code, format_string),
                              [zero, zero], inbounds=True, name="err_fmt_ptr")
        stderr_ptr = builder.load(libc.stderr_handle, name="stderr")
        builder.call(libc.fprintf, [stderr_ptr, fmt_ptr] + list(values))
        builder.call(libc.exit, [ir.Constant(self.codegen.types.i32, 1)])
        builder.unreachable()

    def emit_bounds_failure(self, builder: ir.IRBuilder, length: int, index: ir.Value) -> None:
        """RE2020 for `index` against a record of `length` fields."""
        length_const = ir.Constant(self.codegen.types.i64, length)
        self.emit_runtime_error_with_values(builder, BOUNDS_ERROR_CODE, BOUNDS_FORMAT,
                                            length_const, index)
