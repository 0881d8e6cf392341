"""
Field type mapping for the LLVM backend.

Only single-token primitive types are lowered. Anything else (paths,
references, arrays, generics) has no LLVM representation here and is
reported as CE3001 by the caller.
"""
from __future__ import annotations

from typing import Dict, Optional, Tuple

from llvmlite import ir

INT8_BIT_WIDTH = 8
INT32_BIT_WIDTH = 32
INT64_BIT_WIDTH = 64


class LLVMTypeSystem:
    """Maps primitive field type spellings to LLVM IR types."""

    def __init__(self) -> None:
        self.i8: ir.IntType = ir.IntType(INT8_BIT_WIDTH)
        self.i16: ir.IntType = ir.IntType(16)
        self.i32: ir.IntType = ir.IntType(INT32_BIT_WIDTH)
        self.i64: ir.IntType = ir.IntType(INT64_BIT_WIDTH)
        self.i128: ir.IntType = ir.IntType(128)
        self.f32 = ir.FloatType()
        self.f64 = ir.DoubleType()

        # Signed and unsigned share a representation; bool is a byte
        self._by_name: Dict[str, ir.Type] = {
            "i8": self.i8, "u8": self.i8,
            "i16": self.i16, "u16": self.i16,
            "i32": self.i32, "u32": self.i32,
            "i64": self.i64, "u64": self.i64,
            "i128": self.i128, "u128": self.i128,
            "isize": self.i64, "usize": self.i64,
            "f32": self.f32, "f64": self.f64,
            "bool": self.i8,
            "char": self.i32,
        }

    def ll_type(self, tokens: Tuple[str, ...]) -> Optional[ir.Type]:
        """LLVM type for a field type token sequence, or None if unsupported."""
        if len(tokens) != 1:
            return None
        return self._by_name.get(tokens[0])

    @property
    def index_type(self) -> ir.IntType:
        """Runtime index parameter type; signed so negatives reach the default case."""
        return self.i64
