"""Grammar and AST builder tests."""
import pytest

from named_array import DeclarationSyntaxError, parse_declarations
from named_array.semantics.ast import FieldMode


def test_named_record_fields_in_order():
    program = parse_declarations(
        "#[derive(named_array)]\n"
        "struct Point { x: i32, y: i32, z: i32 }\n"
    )
    (record,) = program.records
    assert record.name == "Point"
    assert record.mode is FieldMode.NAMED
    assert [f.name for f in record.fields] == ["x", "y", "z"]
    assert all(f.ty.tokens == ("i32",) for f in record.fields)
    assert record.requests_named_array


def test_positional_record():
    (record,) = parse_declarations("struct Pair(pub u8, u8);\n").records
    assert record.mode is FieldMode.POSITIONAL
    assert [f.name for f in record.fields] == [None, None]
    assert not record.requests_named_array


def test_unit_record_has_no_fields():
    (record,) = parse_declarations("#[derive(named_array)] struct Marker;\n").records
    assert record.fields == []
    assert record.mode is FieldMode.NAMED


def test_trailing_comma_and_comments():
    src = (
        "// leading comment\n"
        "#[derive(named_array)]\n"
        "struct A {\n"
        "    /* block */ a: u8, // trailing\n"
        "    b: u8,\n"
        "}\n"
    )
    (record,) = parse_declarations(src).records
    assert [f.name for f in record.fields] == ["a", "b"]


def test_nested_generics_split_closing_angles():
    (record,) = parse_declarations("struct A { a: Vec<Option<u8>> }\n").records
    assert record.fields[0].ty.tokens == ("Vec", "<", "Option", "<", "u8", ">", ">")


def test_type_text_collapses_whitespace():
    (record,) = parse_declarations("struct A { a: Option< Vec<u8> > }\n").records
    ty = record.fields[0].ty
    assert ty.text == "Option< Vec<u8> >"
    assert ty.tokens == ("Option", "<", "Vec", "<", "u8", ">", ">")


@pytest.mark.parametrize("type_src, tokens", [
    ("core::option::Option<()>", ("core", "::", "option", "::", "Option", "<", "(", ")", ">")),
    ("::std::string::String", ("::", "std", "::", "string", "::", "String")),
    ("&'a mut [u8]", ("&", "'a", "mut", "[", "u8", "]")),
    ("*const u8", ("*", "const", "u8")),
    ("[f32; 4]", ("[", "f32", ";", "4", "]")),
    ("(u8, u16)", ("(", "u8", ",", "u16", ")")),
    ("Box<dyn Send + 'static>", ("Box", "<", "dyn", "Send", "+", "'static", ">")),
])
def test_type_tokens(type_src, tokens):
    (record,) = parse_declarations(f"struct A {{ a: {type_src} }}\n").records
    assert record.fields[0].ty.tokens == tokens


def test_derive_paths_use_last_segment():
    (record,) = parse_declarations(
        "#[derive(Debug, named_array::named_array)]\n#[repr(C)]\nstruct A(u8);\n"
    ).records
    assert record.derives == ["Debug", "named_array"]
    assert [a.path for a in record.attributes] == ["derive", "repr"]


def test_generic_params_recorded():
    (record,) = parse_declarations("struct G<'a, T: Clone + 'a, const N: usize>(T, T);\n").records
    assert record.type_params == ["T", "N"]


def test_visibility_and_raw_identifiers():
    (record,) = parse_declarations(
        "pub(crate) struct r#A { pub r#type: u8, pub(super) b: u8 }\n"
    ).records
    assert record.name == "A"
    assert [f.name for f in record.fields] == ["type", "b"]


def test_field_spans_point_at_source():
    (record,) = parse_declarations("struct A {\n    a: u8,\n    b: u16,\n}\n").records
    b = record.fields[1]
    assert (b.name_span.line, b.name_span.col) == (3, 5)
    assert (b.ty.loc.line, b.ty.loc.col) == (3, 8)


def test_syntax_error_reports_ce1000():
    with pytest.raises(DeclarationSyntaxError) as info:
        parse_declarations("struct A { a: u8 b: u8 }\n", filename="bad.na")
    codes = [d.code for d in info.value.reporter.errors]
    assert codes == ["CE1000"]
    assert info.value.reporter.errors[0].span.line == 1


def test_missing_semicolon_after_tuple_record():
    with pytest.raises(DeclarationSyntaxError):
        parse_declarations("struct A(u8, u8)\n")
