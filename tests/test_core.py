import pytest

from sysyc.core import (
    ConstBool,
    ConstFloat,
    ConstInt,
    ConstPtr,
    ConstantData,
    Instruction,
    Opcode,
    User,
    Value,
)
from sysyc.irtypes import BoolType, FloatType, IntType, PointerType, VoidType


def _user():
    return Instruction(IntType.get(), Opcode.ADD, "u")


def test_add_use_links_both_sides():
    a = Value(IntType.get(), "a")
    user = _user()
    use = user.add_use(a)
    assert user.operand(0) is a
    assert a.uses == [use]
    assert use.user is user


def test_set_operand_moves_use():
    a = Value(IntType.get(), "a")
    b = Value(IntType.get(), "b")
    user = _user()
    user.add_use(a)
    user.set_operand(0, b)
    assert user.operand(0) is b
    assert a.uses == []
    assert len(b.uses) == 1


def test_replace_all_uses_with():
    a = Value(IntType.get(), "a")
    b = Value(IntType.get(), "b")
    u1, u2 = _user(), _user()
    u1.add_use(a)
    u2.add_use(a)
    a.replace_all_uses_with(b)
    assert u1.operand(0) is b and u2.operand(0) is b
    assert a.uses == []
    assert {use.user for use in b.uses} == {u1, u2}


def test_replace_all_uses_with_self_is_noop():
    a = Value(IntType.get(), "a")
    user = _user()
    user.add_use(a)
    a.replace_all_uses_with(a)
    assert len(a.uses) == 1


def test_remove_use_reports_presence():
    a = Value(IntType.get(), "a")
    user = _user()
    use = user.add_use(a)
    assert user.remove_use(use) is True
    assert user.operands == []
    assert a.uses == []
    assert user.remove_use(use) is False


def test_clear_uses_and_use_index():
    a = Value(IntType.get(), "a")
    b = Value(IntType.get(), "b")
    user = _user()
    user.add_use(a)
    second = user.add_use(b)
    assert user.use_index(second) == 1
    user.clear_uses()
    assert user.operands == []
    assert a.uses == [] and b.uses == []
    with pytest.raises(ValueError):
        user.use_index(second)


def test_ref_of_named_and_anonymous_values():
    assert Value(IntType.get(), "x").ref() == "%x"
    anon = Value(IntType.get())
    first = anon.ref()
    assert first == anon.ref()
    assert first.startswith("%")


def test_int_constants_are_interned_and_wrap():
    assert ConstInt.get(5) is ConstInt.get(5)
    assert ConstInt.get(2**31) is ConstInt.get(-(2**31))
    assert ConstInt.get(7).ref() == "7"


def test_float_constants():
    one = ConstFloat.get(1.0)
    assert one.ref() == "0x3FF0000000000000"
    tenth = ConstFloat.get(0.1)
    assert ConstFloat.get(tenth.value) is tenth
    assert ConstFloat.get(0.0) is not ConstFloat.get(-0.0)


def test_bool_constants():
    assert ConstBool.get(True).ref() == "true"
    assert ConstBool.get(False).ref() == "false"
    assert ConstBool.get(True).type is BoolType.get()


def test_zero_and_one_checks():
    assert ConstInt.get(0).is_const_zero()
    assert ConstFloat.get(0.0).is_const_zero()
    assert ConstBool.get(False).is_const_zero()
    assert ConstInt.get(1).is_const_one()
    assert not ConstInt.get(2).is_const_one()
    assert not Value(IntType.get(), "v").is_const_zero()


def test_is_const():
    assert ConstInt.get(3).is_const()
    assert not Value(IntType.get(), "v").is_const()


def test_null_value():
    assert ConstantData.null_value(IntType.get()) is ConstInt.get(0)
    assert ConstantData.null_value(FloatType.get()) is ConstFloat.get(0.0)
    assert ConstantData.null_value(BoolType.get()) is ConstBool.get(False)
    ptr = PointerType.get(IntType.get())
    assert ConstantData.null_value(ptr) is ConstPtr.get(ptr)
    with pytest.raises(ValueError):
        ConstantData.null_value(VoidType.get())


def test_const_ptr_requires_pointer():
    with pytest.raises(TypeError):
        ConstPtr.get(IntType.get())
    assert ConstPtr.get(PointerType.get(FloatType.get())).ref() == "null"


@pytest.mark.parametrize(
    "opcode, terminator, binary, memory, cast, cmp",
    [
        (Opcode.RET, True, False, False, False, False),
        (Opcode.ADD, False, True, False, False, False),
        (Opcode.LE, False, True, False, False, True),
        (Opcode.LOAD, False, False, True, False, False),
        (Opcode.ZEXT, False, False, False, True, False),
        (Opcode.PHI, False, False, False, False, False),
    ],
)
def test_opcode_predicates(opcode, terminator, binary, memory, cast, cmp):
    inst = Instruction(IntType.get(), opcode)
    assert inst.is_terminator() == terminator
    assert inst.is_binary() == binary
    assert inst.is_memory() == memory
    assert inst.is_cast() == cast
    assert inst.is_cmp() == cmp


def test_user_defaults_to_void():
    assert User().type is VoidType.get()