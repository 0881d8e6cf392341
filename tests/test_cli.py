"""Command-line driver: outputs, exit codes and diagnostics rendering."""
import pytest

from named_array.compiler import cli
from named_array.compiler.loader import get_effective_cwd, resolve_path

POINT = "#[derive(named_array)]\nstruct Point { x: i32, y: i32 }\n"


@pytest.fixture
def source(tmp_path):
    def _write(text, name="decls.na"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


def test_python_backend_default_output(source, capsys):
    path = source(POINT)
    assert cli.main([str(path), "--quiet"]) == 0
    out = path.with_suffix(".py")
    assert "class Point:" in out.read_text()
    assert capsys.readouterr().out == ""


def test_success_line_and_banner(source, capsys):
    path = source(POINT)
    assert cli.main([str(path)]) == 0
    stdout = capsys.readouterr().out
    assert stdout.startswith("named-array")
    assert "Generated accessors for 1 record(s)" in stdout


def test_llvm_ir_output(source):
    path = source(POINT)
    assert cli.main([str(path), "--backend", "llvm", "--quiet"]) == 0
    assert "Point.index_set" in path.with_suffix(".ll").read_text()


def test_llvm_object_output(source, tmp_path):
    path = source(POINT)
    out = tmp_path / "point.o"
    assert cli.main([str(path), "--backend", "llvm", "--emit", "obj", "-o", str(out), "--opt", "O2", "-q"]) == 0
    assert out.stat().st_size > 0


def test_dump_ll(source, capsys):
    path = source(POINT)
    assert cli.main([str(path), "--backend", "llvm", "--dump-ll", "-q"]) == 0
    assert "Point.index" in capsys.readouterr().out


def test_wrong_output_suffix(source, capsys):
    path = source(POINT)
    assert cli.main([str(path), "-o", str(path.with_suffix(".ll")), "-q"]) == 2
    assert "[CE3500]" in capsys.readouterr().err


def test_type_mismatch_exits_2_without_output(source, capsys):
    path = source("#[derive(named_array)]\nstruct M { a: u8, b: u16 }\n")
    assert cli.main([str(path), "-q"]) == 2
    err = capsys.readouterr().err
    assert "[CE2001]" in err
    assert "b: u16" in err
    assert not path.with_suffix(".py").exists()


def test_warnings_exit_1(source, capsys):
    path = source("#[derive(named_array)]\nstruct P(u8);")
    assert cli.main([str(path), "-q"]) == 1
    assert "[CW0001]" in capsys.readouterr().err
    assert path.with_suffix(".py").exists()


def test_syntax_error(source, capsys):
    path = source("struct {\n")
    assert cli.main([str(path), "-q"]) == 2
    assert "[CE1000]" in capsys.readouterr().err


def test_missing_source(capsys):
    assert cli.main(["-q"]) == 2
    assert "source file required" in capsys.readouterr().err


def test_unreadable_source(tmp_path, capsys):
    assert cli.main([str(tmp_path / "missing.na"), "-q"]) == 2
    assert "cannot read" in capsys.readouterr().err


def test_version(capsys):
    assert cli.main(["--version"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("named-array ") and "llvmlite" in out


def test_dump_ast(source, capsys):
    path = source(POINT)
    assert cli.main([str(path), "--dump-ast", "-q"]) == 0
    assert "RecordDecl(" in capsys.readouterr().out


def test_effective_cwd(monkeypatch, tmp_path, source):
    monkeypatch.setenv("NAMED_ARRAY_CWD", str(tmp_path))
    assert get_effective_cwd() == tmp_path
    assert resolve_path("decls.na") == (tmp_path / "decls.na").resolve()

    source(POINT)
    assert cli.main(["decls.na", "-q"]) == 0
    assert (tmp_path / "decls.py").exists()


def test_effective_cwd_defaults_to_process_cwd(monkeypatch, tmp_path):
    monkeypatch.delenv("NAMED_ARRAY_CWD", raising=False)
    monkeypatch.chdir(tmp_path)
    assert get_effective_cwd().resolve() == tmp_path.resolve()


def test_declared_python_floor_covers_tomllib():
    import tomllib
    from pathlib import Path

    import named_array

    with open(Path(__file__).parent.parent / "pyproject.toml", "rb") as f:
        project = tomllib.load(f)["project"]
    assert project["requires-python"] == ">=3.11"
    assert named_array.__version__ == project["version"] or not named_array.__dev__
