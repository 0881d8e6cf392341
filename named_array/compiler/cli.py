from __future__ import annotations
import argparse, sys
from pathlib import Path

from named_array.backend.llvm_optimization import OPT_LEVELS
from named_array.compiler.loader import resolve_path
from named_array.compiler.pipeline import compile_file
from named_array.internals.report import Reporter
from named_array.internals.version import print_banner, version_line


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="named-array",
        description="Generate indexed field accessors for records deriving named_array",
    )
    ap.add_argument("source", nargs='?', help="Path to declaration file (.na)")
    ap.add_argument("-o", "--out", metavar="OUT",
                    help="Output path (default: source path with the backend's suffix)")
    ap.add_argument("--backend", choices=["python", "llvm"], default="python",
                    help="Code generator to run (default: python)")
    ap.add_argument("--emit", choices=["ll", "obj"], default="ll",
                    help="LLVM output kind: textual IR or native object (llvm backend only)")
    ap.add_argument(
        "--opt",
        choices=list(OPT_LEVELS),
        default="mem2reg",
        help="LLVM optimization level. 'mem2reg' runs SROA only.",
    )
    ap.add_argument("--no-verify", action="store_true",
                    help="Disable LLVM IR verification (pre/post optimization).")
    ap.add_argument("--dump-parse", action="store_true", help="Print raw Lark tree")
    ap.add_argument("--dump-ast", action="store_true", help="Print AST")
    ap.add_argument("--dump-ll", action="store_true",
                    help="Dump generated LLVM IR to terminal")
    ap.add_argument("--traceback", action="store_true",
                    help="Print full traceback on backend errors (for debugging)")
    ap.add_argument("-q", "--quiet", action="store_true",
                    help="Suppress the banner and the success line")
    ap.add_argument("--version", action="store_true", help="Print version information and exit")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.version:
        print(version_line())
        return 0
    if not args.quiet:
        print_banner()

    if not args.source:
        print("error: source file required", file=sys.stderr)
        return 2

    src_path = resolve_path(args.source)
    if args.out:
        args.out = str(resolve_path(args.out))

    try:
        src = src_path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"error: cannot read {src_path}: {e}", file=sys.stderr)
        return 2

    reporter = Reporter(source=src, filename=str(src_path))
    try:
        result = compile_file(src_path, reporter, args)
    except RuntimeError as e:
        # Internal errors (CE0001, CE0015) surface here
        if args.traceback:
            import traceback
            traceback.print_exc()
        reporter.print()
        print(f"error: {e}", file=sys.stderr)
        return 2

    if reporter.items:
        reporter.print()
        print()
    return result


if __name__ == "__main__":
    sys.exit(main())
