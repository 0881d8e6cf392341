"""
LLVM backend for named-array.

For every validated record this emits an identified struct type and two
functions keyed by the record name:

    <T> @"Name.index"(%"Name"* self, i64 index)
    void @"Name.index_set"(%"Name"* self, i64 index, <T> value)

Both are a single `switch` on the index with one case per field in
declaration order. The default destination prints RE2020 to stderr and
exits, so negative indices and indices >= len fail the same way.

API:
    from named_array.backend.codegen_llvm import LLVMCodegen
    cg = LLVMCodegen()
    module = cg.build_module(fieldsets, reporter)
    cg.write_ir(Path("out.ll"))   # or cg.write_object(Path("out.o"))
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from llvmlite import ir, binding as llvm

from named_array.backend.llvm_optimization import LLVMOptimizer
from named_array.backend.llvm_types import LLVMTypeSystem
from named_array.backend.runtime import LLVMRuntime
from named_array.internals import errors as er
from named_array.internals.report import Reporter
from named_array.semantics.uniformity import ValidatedFieldSet

READ_SUFFIX = "index"
WRITE_SUFFIX = "index_set"


def read_symbol(record: str) -> str:
    return f"{record}.{READ_SUFFIX}"


def write_symbol(record: str) -> str:
    return f"{record}.{WRITE_SUFFIX}"


class LLVMCodegen:
    """Lowers validated field sets to an LLVM module."""

    def __init__(self, module_name: str = "named_array") -> None:
        # Own context so identified struct names never collide across modules
        self.context = ir.Context()
        self.module = ir.Module(name=module_name, context=self.context)
        self.types = LLVMTypeSystem()
        self.runtime = LLVMRuntime(self)
        self.optimizer = LLVMOptimizer()
        self.struct_types: Dict[str, ir.IdentifiedStructType] = {}
        self._llmod: Optional[llvm.ModuleRef] = None

    def build_module(self, fieldsets: Sequence[ValidatedFieldSet], reporter: Reporter) -> ir.Module:
        """Emit accessors for every record the backend can represent.

        Records with generic parameters (CE3002) or non-primitive field
        types (CE3001) are reported and skipped.
        """
        self.runtime.declare_externs()
        for fieldset in fieldsets:
            if fieldset.type_params:
                er.emit(reporter, er.ERR.CE3002, fieldset.fields[0].span, record=fieldset.record)
                continue
            elem = self.types.ll_type(fieldset.element_tokens)
            if elem is None:
                er.emit(reporter, er.ERR.CE3001, fieldset.fields[0].type_span,
                        type_text=fieldset.element_type, record=fieldset.record)
                continue
            self.emit_record(fieldset, elem)
        return self.module

    def emit_record(self, fieldset: ValidatedFieldSet, elem: ir.Type) -> None:
        struct_ty = self.context.get_identified_type(fieldset.record)
        struct_ty.set_body(*([elem] * len(fieldset)))
        self.struct_types[fieldset.record] = struct_ty
        self._emit_read(fieldset, struct_ty, elem)
        self._emit_write(fieldset, struct_ty, elem)

    def _field_ptr(self, builder: ir.IRBuilder, self_ptr: ir.Value, order: int) -> ir.Value:
        zero = ir.Constant(self.types.i32, 0)
        idx = ir.Constant(self.types.i32, order)
        return builder.gep(self_ptr, [zero, idx], inbounds=True, name=f"field{order}_ptr")

    def _dispatch(self, fn: ir.Function, fieldset: ValidatedFieldSet, index: ir.Value):
        """Entry switch plus the shared bounds-failure block.

        Returns (builder, [(field order, case block), ...]).
        """
        entry = fn.append_basic_block("entry")
        fail = fn.append_basic_block("index_out_of_bounds")
        builder = ir.IRBuilder(entry)
        switch = builder.switch(index, fail)

        cases = []
        for fd in fieldset.fields:
            block = fn.append_basic_block(f"field{fd.declaration_order}")
            switch.add_case(ir.Constant(self.types.index_type, fd.declaration_order), block)
            cases.append((fd.declaration_order, block))

        builder.position_at_end(fail)
        self.runtime.errors.emit_bounds_failure(builder, len(fieldset), index)
        return builder, cases

    def _emit_read(self, fieldset: ValidatedFieldSet, struct_ty: ir.Type, elem: ir.Type) -> None:
        fn_ty = ir.FunctionType(elem, [struct_ty.as_pointer(), self.types.index_type])
        fn = ir.Function(self.module, fn_ty, name=read_symbol(fieldset.record))
        self_ptr, index = fn.args
        self_ptr.name, index.name = "self", "index"

        builder, cases = self._dispatch(fn, fieldset, index)
        for order, block in cases:
            builder.position_at_end(block)
            value = builder.load(self._field_ptr(builder, self_ptr, order), name=f"field{order}")
            builder.ret(value)

    def _emit_write(self, fieldset: ValidatedFieldSet, struct_ty: ir.Type, elem: ir.Type) -> None:
        fn_ty = ir.FunctionType(ir.VoidType(), [struct_ty.as_pointer(), self.types.index_type, elem])
        fn = ir.Function(self.module, fn_ty, name=write_symbol(fieldset.record))
        self_ptr, index, value = fn.args
        self_ptr.name, index.name, value.name = "self", "index", "value"

        builder, cases = self._dispatch(fn, fieldset, index)
        for order, block in cases:
            builder.position_at_end(block)
            builder.store(value, self._field_ptr(builder, self_ptr, order))
            builder.ret_void()

    # --- finishing ---

    def finalize(self, opt: str = "mem2reg", verify: bool = True) -> llvm.ModuleRef:
        """Parse, verify and optimize the emitted IR."""
        llmod = llvm.parse_assembly(str(self.module))
        self.optimizer.ensure_target(llmod)
        if verify:
            self.optimizer.verify(llmod, "pre-optimization")
        self.optimizer.optimize(llmod, opt)
        if verify:
            self.optimizer.verify(llmod, "post-optimization")
        self._llmod = llmod
        return llmod

    def _finalized(self) -> llvm.ModuleRef:
        return self._llmod if self._llmod is not None else self.finalize()

    def ir_text(self) -> str:
        return str(self._finalized())

    def write_ir(self, out: Path) -> Path:
        out.write_text(self.ir_text(), encoding="utf-8")
        return out

    def write_object(self, out: Path) -> Path:
        llmod = self._finalized()
        tm = self.optimizer.ensure_target(llmod)
        out.write_bytes(tm.emit_object(llmod))
        return out

    def record_names(self) -> List[str]:
        return list(self.struct_types)
