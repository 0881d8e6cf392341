"""Shared fixtures: generated-module loading and an MCJIT harness for LLVM output."""
from __future__ import annotations

import ctypes
import sys

import pytest
from llvmlite import binding as llvm

CTYPES = {
    "i8": ctypes.c_int8, "i16": ctypes.c_int16, "i32": ctypes.c_int32, "i64": ctypes.c_int64,
    "u8": ctypes.c_uint8, "u16": ctypes.c_uint16, "u32": ctypes.c_uint32, "u64": ctypes.c_uint64,
    "f32": ctypes.c_float, "f64": ctypes.c_double,
}


def register_libc_symbols() -> None:
    """Make fprintf, exit and stderr resolvable from JIT-compiled code."""
    libc = ctypes.CDLL(None)
    for name in ("fprintf", "exit"):
        llvm.add_symbol(name, ctypes.cast(getattr(libc, name), ctypes.c_void_p).value)
    llvm.add_symbol("stderr", ctypes.addressof(ctypes.c_void_p.in_dll(libc, "stderr")))


class JitRecord:
    """ctypes view of one generated record plus its two accessors."""

    def __init__(self, engine: llvm.ExecutionEngine, name: str, elem, n: int) -> None:
        self.elem = elem
        self.struct = type(name, (ctypes.Structure,), {"_fields_": [(f"f{i}", elem) for i in range(n)]})
        ptr = ctypes.POINTER(self.struct)
        self.read = ctypes.CFUNCTYPE(elem, ptr, ctypes.c_int64)(
            engine.get_function_address(f"{name}.index"))
        self.write = ctypes.CFUNCTYPE(None, ptr, ctypes.c_int64, elem)(
            engine.get_function_address(f"{name}.index_set"))

    def new(self, *values):
        return self.struct(*values)


class JitModule:
    def __init__(self, ir_text: str) -> None:
        llmod = llvm.parse_assembly(ir_text)
        llmod.verify()
        tm = llvm.Target.from_default_triple().create_target_machine()
        self.engine = llvm.create_mcjit_compiler(llmod, tm)
        self.engine.finalize_object()

    def record(self, name: str, elem_type: str, n: int) -> JitRecord:
        return JitRecord(self.engine, name, CTYPES[elem_type], n)


@pytest.fixture(scope="session")
def jit():
    """Factory compiling IR text into a JitModule (Linux only)."""
    if not sys.platform.startswith("linux"):
        pytest.skip("JIT harness resolves libc symbols the glibc way")
    llvm.initialize_native_target()
    llvm.initialize_native_asmprinter()
    register_libc_symbols()
    return JitModule


@pytest.fixture
def load_module():
    """Exec generated Python source and return its namespace."""
    def _load(source: str) -> dict:
        namespace: dict = {"__name__": "generated_named_array"}
        exec(compile(source, "<generated>", "exec"), namespace)
        return namespace
    return _load
