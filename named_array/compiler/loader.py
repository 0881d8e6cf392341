"""Source file loading and path resolution."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from named_array.internals.parser import parse_to_ast
from named_array.internals.parse_errors import handle_parse_exception
from named_array.internals.report import Reporter
from named_array.semantics.ast import Program

SOURCE_SUFFIX = ".na"


def get_effective_cwd() -> Path:
    """Directory relative source and output paths are resolved against.

    NAMED_ARRAY_CWD overrides the process working directory (for wrappers
    that change directory before invoking the CLI).
    """
    override = os.environ.get('NAMED_ARRAY_CWD')
    if override:
        return Path(override)
    return Path.cwd()


def resolve_path(path: str | Path) -> Path:
    p = Path(path)
    if not p.is_absolute():
        p = get_effective_cwd() / p
    return p.resolve()


def load_source(src: str, reporter: Reporter, dump_parse: bool = False) -> Optional[Program]:
    """Parse source text, reporting syntax errors instead of raising them."""
    from named_array.internals import errors as er

    try:
        ast, _ = parse_to_ast(src, dump_parse=dump_parse)
    except Exception as exc:
        if handle_parse_exception(exc, reporter):
            return None
        raise

    if src and not src.endswith('\n'):
        er.emit(reporter, er.ERR.CW0001, None)
    return ast
