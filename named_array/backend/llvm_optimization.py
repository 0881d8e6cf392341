"""
LLVM verification, optimization and target setup for generated modules.
"""
from __future__ import annotations

from typing import Dict, Optional

from llvmlite import binding as llvm
from named_array.internals.errors import raise_internal_error

OPT_LEVELS = ("none", "mem2reg", "O1", "O2", "O3")


class LLVMOptimizer:
    """Handles LLVM optimization pipeline, verification, and target setup."""

    def __init__(self) -> None:
        self._llvm_init = False
        self._tm_cache: Dict[str, llvm.TargetMachine] = {}

    def optimize(self, llmod: llvm.ModuleRef, mode: str = "mem2reg") -> None:
        """Apply optimization passes to a parsed module.

        Args:
            llmod: The LLVM module to optimize.
            mode: "none", "mem2reg", "O1", "O2" or "O3" (case-insensitive).
        """
        m = (mode or "none").lower()
        if m in ("none", "o0"):
            return

        tm = self.ensure_target(llmod)
        level = {"mem2reg": 0, "o1": 1, "o2": 2, "o3": 3}.get(m, 1)
        # Only speed_level is accepted by every supported llvmlite release
        pto = llvm.PipelineTuningOptions(speed_level=level)
        pb = llvm.PassBuilder(tm, pto)

        fpm = llvm.create_new_function_pass_manager()
        fpm.add_sroa_pass()
        if level >= 1:
            fpm.add_simplify_cfg_pass()
            fpm.add_instruction_combine_pass()
            fpm.add_dead_code_elimination_pass()
        if level >= 2:
            fpm.add_sccp_pass()
            fpm.add_aggressive_dce_pass()
            fpm.add_simplify_cfg_pass()

        for fn in llmod.functions:
            if not fn.is_declaration:
                fpm.run(fn, pb)

        if level >= 1:
            mpm = llvm.create_new_module_pass_manager()
            mpm.add_constant_merge_pass()
            mpm.add_strip_dead_prototype_pass()
            mpm.run(llmod, pb)

    @staticmethod
    def verify(llmod: llvm.ModuleRef, when: str = "unspecified") -> None:
        """Verify LLVM IR; a failure is a generator bug (CE0015)."""
        try:
            llmod.verify()
        except RuntimeError as e:
            raise_internal_error("CE0015", message=f"LLVM IR verification failed ({when}): {e}")

    def ensure_llvm(self) -> None:
        """Initialize LLVM native target and assembly printer once."""
        if self._llvm_init:
            return
        llvm.initialize_native_target()
        llvm.initialize_native_asmprinter()
        self._llvm_init = True

    def target_machine(self, target_triple: Optional[str] = None) -> llvm.TargetMachine:
        """Cached target machine; PIC on Linux, which requires it."""
        self.ensure_llvm()
        triple = target_triple or llvm.get_default_triple()
        tm = self._tm_cache.get(triple)
        if tm is None:
            target = llvm.Target.from_triple(triple)
            reloc = "pic" if "linux" in triple.lower() else "default"
            tm = target.create_target_machine(reloc=reloc)
            self._tm_cache[triple] = tm
        return tm

    def ensure_target(self, llmod: llvm.ModuleRef, target_triple: Optional[str] = None) -> llvm.TargetMachine:
        """Stamp the module with triple and data layout, return the TargetMachine."""
        tm = self.target_machine(target_triple)
        llmod.triple = target_triple or llvm.get_default_triple()
        llmod.data_layout = str(tm.target_data)
        return tm
