import pytest

from sysyc.irtypes import (
    ArrayType,
    BoolType,
    FloatType,
    HasSubType,
    Int64Type,
    IntType,
    IRDataType,
    PointerType,
    VoidType,
    type_from_enum,
)


@pytest.mark.parametrize(
    "cls, spelling",
    [(IntType, "i32"), (Int64Type, "i64"), (FloatType, "float"), (VoidType, "void"), (BoolType, "i1")],
)
def test_scalar_spelling(cls, spelling):
    assert str(cls.get()) == spelling


def test_scalars_are_singletons_per_class():
    assert IntType.get() is IntType.get()
    assert BoolType.get() is not IntType.get()


def test_scalar_sizes_and_kinds():
    assert IntType.get().size == 4
    assert Int64Type.get().size == 8
    assert VoidType.get().size == 0
    assert BoolType.get().kind is IRDataType.INT
    assert Int64Type.get().kind is IRDataType.INT64


def test_pointer_is_interned_and_spelled():
    i32 = IntType.get()
    ptr = PointerType.get(i32)
    assert ptr is PointerType.get(i32)
    assert ptr is not PointerType.get(FloatType.get())
    assert str(ptr) == "i32*"
    assert ptr.size == 8
    assert ptr.kind is IRDataType.PTR
    assert isinstance(ptr, HasSubType)


def test_array_spelling_size_and_interning():
    i32 = IntType.get()
    arr = ArrayType.get(3, i32)
    assert arr is ArrayType.get(3, i32)
    assert arr is not ArrayType.get(4, i32)
    assert arr.num == 3
    assert str(arr) == "[3 x i32]"
    assert arr.size == 3 * i32.size


def test_nested_array_layers_and_base_type():
    inner = ArrayType.get(2, FloatType.get())
    outer = ArrayType.get(5, inner)
    assert inner.layer == FloatType.get().layer + 1
    assert outer.layer == inner.layer + 1
    assert outer.base_type() is FloatType.get()
    assert str(outer) == "[5 x [2 x float]]"
    assert outer.size == 5 * inner.size


def test_pointer_to_array_base_type():
    arr = ArrayType.get(7, IntType.get())
    ptr = PointerType.get(arr)
    assert ptr.base_type() is IntType.get()
    assert ptr.subtype is arr
    assert str(ptr) == "[7 x i32]*"


@pytest.mark.parametrize(
    "kind, cls",
    [
        (IRDataType.INT, IntType),
        (IRDataType.INT64, Int64Type),
        (IRDataType.FLOAT, FloatType),
        (IRDataType.VOID, VoidType),
    ],
)
def test_type_from_enum(kind, cls):
    assert type_from_enum(kind) is cls.get()


@pytest.mark.parametrize("kind", [IRDataType.PTR, IRDataType.ARRAY, IRDataType.BACKEND_PTR])
def test_type_from_enum_rejects_wrappers(kind):
    with pytest.raises(ValueError):
        type_from_enum(kind)