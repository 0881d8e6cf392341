"""The @named_array class decorator."""
from dataclasses import dataclass
from typing import ClassVar

import pytest

from named_array import IndexOutOfRange, NamedArrayError, NonUniformFieldType, named_array
from named_array.derive import type_tokens


@named_array
class Rgb:
    r: int
    g: int
    b: int

    def __init__(self, r, g, b):
        self.r, self.g, self.b = r, g, b


def test_read_in_declaration_order():
    c = Rgb(1, 2, 3)
    assert (c[0], c[1], c[2]) == (1, 2, 3)


def test_write_touches_one_field():
    c = Rgb(1, 2, 3)
    c[2] = 30
    assert (c.r, c.g, c.b) == (1, 2, 30)


@pytest.mark.parametrize("index", [3, -1])
def test_out_of_range(index):
    c = Rgb(1, 2, 3)
    with pytest.raises(IndexOutOfRange, match=f"the len is 3 but the index is {index}"):
        c[index]
    with pytest.raises(IndexOutOfRange):
        c[index] = 0


def test_accessor_metadata():
    assert Rgb.__getitem__.__qualname__ == "Rgb.__getitem__"
    assert Rgb.__setitem__.__module__ == __name__
    assert Rgb.__named_array_fields__ == ("r", "g", "b")


def test_dataclass_innermost():
    @named_array
    @dataclass
    class Vec3:
        x: float
        y: float
        z: float = 0.0

    v = Vec3(1.0, 2.0)
    assert v[1] == 2.0
    v[2] = 5.0
    assert v == Vec3(1.0, 2.0, 5.0)


def test_dataclass_outermost_with_slots():
    @dataclass(slots=True)
    @named_array
    class Pair:
        left: str
        right: str

    p = Pair("a", "b")
    assert list(p) == ["a", "b"]


def test_single_field():
    @named_array
    class Box:
        only: bytes

        def __init__(self, only):
            self.only = only

    assert Box(b"x")[0] == b"x"
    with pytest.raises(IndexOutOfRange):
        Box(b"x")[1]


def test_whitespace_in_annotations_ignored():
    @named_array
    class Lists:
        a: list[ int ]
        b: list[int]

    assert Lists.__named_array_fields__ == ("a", "b")


def test_classvar_is_not_a_field():
    @named_array
    class Counted:
        instances: ClassVar[int] = 0
        a: int
        b: int

    assert Counted.__named_array_fields__ == ("a", "b")


def test_mixed_annotation_spellings_rejected():
    with pytest.raises(NonUniformFieldType) as info:
        @named_array
        class Mixed:
            a: int
            b: "int"

    (diag,) = info.value.diagnostics
    assert diag.code == "CE2001"
    assert "`b`" in diag.message and "`a`" in diag.message
    assert diag.filename == __file__
    assert diag.span is not None


def test_aliases_are_not_resolved():
    import typing

    with pytest.raises(NonUniformFieldType):
        @named_array
        class Opt:
            a: typing.Optional[int]
            b: "Optional[int]"


def test_no_fields_rejected():
    with pytest.raises(NonUniformFieldType) as info:
        @named_array
        class Nothing:
            pass

    assert [d.code for d in info.value.diagnostics] == ["CE2002"]


def test_repeated_annotation_rejected():
    with pytest.raises(NamedArrayError) as info:
        @named_array
        class Twice:
            a: int
            b: int
            a: int

    assert not isinstance(info.value, NonUniformFieldType)
    (diag,) = info.value.diagnostics
    assert diag.code == "CE2003"
    assert "duplicate field 'a' in record 'Twice'" in diag.message
    assert diag.span is not None
    assert diag.filename == __file__


def test_existing_getitem_is_a_conflict():
    with pytest.raises(TypeError, match="already defines __getitem__"):
        @named_array
        class Custom:
            a: int

            def __getitem__(self, index):
                return self.a


def test_not_a_class():
    with pytest.raises(TypeError):
        named_array(lambda: None)


def test_string_annotations_without_source():
    namespace = {"named_array": named_array}
    exec("@named_array\nclass Dyn:\n    a: 'int'\n    b: 'int'\n", namespace)
    Dyn = namespace["Dyn"]
    d = Dyn.__new__(Dyn)
    d.a, d.b = 1, 2
    assert d[1] == 2


def test_non_string_annotations_without_source():
    namespace = {"named_array": named_array}
    with pytest.raises(TypeError, match="source is unavailable"):
        exec("@named_array\nclass Dyn:\n    a: int\n    b: int\n", namespace)


def test_type_tokens():
    assert type_tokens("dict[str,  list[int]]") == ("dict", "[", "str", ",", "list", "[", "int", "]", "]")
    assert type_tokens("'int'") == ("'int'",)
