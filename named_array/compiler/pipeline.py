"""Compilation orchestration: parse, check, then run one backend."""
from __future__ import annotations

import traceback
from pathlib import Path
from typing import List, Optional, Tuple

from llvmlite import ir

from named_array.compiler.loader import load_source
from named_array.internals.parser import DeclarationSyntaxError
from named_array.internals.report import Reporter
from named_array.semantics.ast import Program
from named_array.semantics.pipeline import analyze_program
from named_array.semantics.uniformity import NamedArrayError, NonUniformFieldType, ValidatedFieldSet

UNIFORMITY_CODES = frozenset({"CE2001", "CE2002"})

OUTPUT_SUFFIXES = {
    ("python", None): ".py",
    ("llvm", "ll"): ".ll",
    ("llvm", "obj"): ".o",
}


def analyze_source(src: str, filename: str = "<input>",
                   dump_parse: bool = False) -> Tuple[Optional[Program], List[ValidatedFieldSet], Reporter]:
    """Parse and validate; never raises for problems in the declarations."""
    reporter = Reporter(source=src, filename=filename)
    program = load_source(src, reporter, dump_parse=dump_parse)
    if program is None:
        return None, [], reporter
    return program, analyze_program(program, reporter), reporter


def _raise_for(reporter: Reporter) -> None:
    """Turn collected errors into the matching library exception."""
    if not reporter.has_errors:
        return
    codes = {d.code for d in reporter.errors}
    if "CE1000" in codes:
        raise DeclarationSyntaxError(reporter)
    if codes & UNIFORMITY_CODES:
        raise NonUniformFieldType(reporter)
    raise NamedArrayError(reporter)


def generate_python(src: str, filename: str = "<input>") -> str:
    """Python module source with accessors for every derived record.

    Raises:
        DeclarationSyntaxError: the source does not parse.
        NonUniformFieldType: a record has mixed field types or no fields.
        NamedArrayError: any other declaration error.
    """
    from named_array import __version__
    from named_array.backend.python_codegen import PythonCodegen

    _, fieldsets, reporter = analyze_source(src, filename)
    _raise_for(reporter)
    return PythonCodegen(source_name=Path(filename).name, version=__version__).build_module(fieldsets)


def generate_llvm(src: str, filename: str = "<input>") -> ir.Module:
    """LLVM module with `<Name>.index` / `<Name>.index_set` per derived record."""
    from named_array.backend.codegen_llvm import LLVMCodegen

    _, fieldsets, reporter = analyze_source(src, filename)
    _raise_for(reporter)
    module = LLVMCodegen(module_name=Path(filename).stem or "named_array").build_module(fieldsets, reporter)
    _raise_for(reporter)
    return module


def default_output(src_path: Path, backend: str, emit: Optional[str]) -> Path:
    return src_path.with_suffix(OUTPUT_SUFFIXES[(backend, emit)])


def compile_file(src_path: Path, reporter: Reporter, args) -> int:
    """CLI compilation of one declaration file.

    Returns:
        Exit code (0=success, 1=warnings, 2=errors).
    """
    from named_array import __version__
    from named_array.internals import errors as er

    src = reporter.source or ""
    backend = args.backend
    emit = args.emit if backend == "llvm" else None
    suffix = OUTPUT_SUFFIXES[(backend, emit)]

    out_path = Path(args.out) if args.out else default_output(src_path, backend, emit)
    if out_path.suffix != suffix:
        er.emit(reporter, er.ERR.CE3500, None, path=str(out_path), suffix=suffix)
        return 2

    program = load_source(src, reporter, dump_parse=args.dump_parse)
    if program is None:
        return 2
    if args.dump_ast:
        print(program)
        print()

    fieldsets = analyze_program(program, reporter)
    if reporter.has_errors:
        return 2

    if backend == "python":
        from named_array.backend.python_codegen import PythonCodegen
        text = PythonCodegen(source_name=src_path.name, version=__version__).build_module(fieldsets)
        out_path.write_text(text, encoding="utf-8")
    else:
        from named_array.backend.codegen_llvm import LLVMCodegen
        cg = LLVMCodegen(module_name=src_path.stem)
        cg.build_module(fieldsets, reporter)
        if reporter.has_errors:
            return 2
        try:
            cg.finalize(opt=args.opt, verify=not args.no_verify)
            if args.dump_ll:
                print(cg.ir_text())
            if emit == "ll":
                cg.write_ir(out_path)
            else:
                cg.write_object(out_path)
        except RuntimeError as e:
            if args.traceback:
                traceback.print_exc()
            print(f"error: {e}")
            return 2

    if not args.quiet:
        print(f"Generated accessors for {len(fieldsets)} record(s) -> {out_path}")
    return reporter.exit_code()
