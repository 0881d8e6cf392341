"""named-array - indexed field accessors generated from record declarations."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("named-array")
    __dev__ = False
except PackageNotFoundError:
    # Development mode - read from pyproject.toml
    import tomllib
    from pathlib import Path
    try:
        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject, "rb") as f:
            __version__ = tomllib.load(f).get("project", {}).get("version", "unknown")
    except OSError:
        __version__ = "unknown"
    __dev__ = True

from named_array.runtime import IndexOutOfRange
from named_array.semantics.uniformity import NamedArrayError, NonUniformFieldType
from named_array.internals.parser import DeclarationSyntaxError, parse_declarations
from named_array.compiler.pipeline import generate_python, generate_llvm
from named_array.derive import named_array

__all__ = [
    "__version__",
    "IndexOutOfRange",
    "NamedArrayError",
    "NonUniformFieldType",
    "DeclarationSyntaxError",
    "parse_declarations",
    "generate_python",
    "generate_llvm",
    "named_array",
]
