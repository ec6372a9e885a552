import pytest

from sysyc.core import ConstInt, Opcode, Value
from sysyc.instructions import (
    AllocaInst,
    BinaryInst,
    BinaryOp,
    BitCastInst,
    CallInst,
    CondInst,
    FP2SIInst,
    GepInst,
    LoadInst,
    MaxInst,
    MinInst,
    PhiInst,
    RetInst,
    SelectInst,
    SextInst,
    SI2FPInst,
    StoreInst,
    TruncInst,
    UnCondInst,
    UndefValue,
    ZextInst,
)
from sysyc.irtypes import (
    ArrayType,
    BoolType,
    FloatType,
    Int64Type,
    IntType,
    PointerType,
    VoidType,
)


class _Global(Value):
    def is_global(self):
        return True


def _int(name):
    return Value(IntType.get(), name)


def _float(name):
    return Value(FloatType.get(), name)


def test_binary_add_prints():
    inst = BinaryInst(_int("a"), BinaryOp.ADD, ConstInt.get(1), name="r")
    assert str(inst) == "%r = add i32 %a, 1"
    assert inst.op is BinaryOp.ADD
    assert inst.opcode is Opcode.ADD
    assert inst.type is IntType.get()


def test_float_compare():
    inst = BinaryInst(_float("x"), BinaryOp.G, _float("y"), name="c")
    assert "fcmp ugt" in str(inst)
    assert inst.type is BoolType.get()
    assert inst.is_cmp()


def test_int_compare():
    inst = BinaryInst(_int("a"), BinaryOp.L, _int("b"), name="c")
    assert "icmp slt" in str(inst)
    assert inst.type is BoolType.get()


def test_float_arith_uses_f_prefix():
    inst = BinaryInst(_float("x"), BinaryOp.DIV, _float("y"), name="q")
    assert "fdiv" in str(inst)
    assert inst.type is FloatType.get()


def test_atomic_add():
    inst = BinaryInst(_int("a"), BinaryOp.ADD, _int("b"), atomic=True, name="r")
    assert str(inst) == "%r = atomicadd i32 %a, i32 %b"


def test_load_and_store():
    ptr = Value(PointerType.get(IntType.get()), "p")
    load = LoadInst(ptr, name="v")
    assert load.type is IntType.get()
    assert load.is_memory()
    store = StoreInst(load, ptr)
    assert store.type is VoidType.get()
    assert store.operand_values == [load, ptr]
    with pytest.raises(TypeError):
        LoadInst(_int("a"))


def test_alloca():
    slot = AllocaInst(IntType.get(), "p")
    assert slot.type is PointerType.get(IntType.get())
    assert slot.element_type is IntType.get()
    assert str(slot) == "%p = alloca i32"


def test_ret():
    assert str(RetInst()) == "ret void"
    ret = RetInst(_int("a"))
    assert ret.is_terminator()
    assert str(ret).endswith("%a")


def test_branches():
    cond = Value(BoolType.get(), "c")
    then_block = Value(VoidType.get(), "then")
    else_block = Value(VoidType.get(), "else")
    br = CondInst(cond, then_block, else_block)
    assert "label %then" in str(br)
    assert br.is_terminator()
    assert len(then_block.uses) == 1
    jump = UnCondInst(else_block)
    assert jump.operand(0) is else_block
    assert jump.is_terminator()


def test_call():
    callee = _Global(IntType.get(), "f")
    a = _int("a")
    call = CallInst(callee, [a, ConstInt.get(2)], name="c")
    assert call.called_function is callee
    assert call.args == [a, ConstInt.get(2)]
    assert str(call).startswith("%c = call i32 @f(")
    void_call = CallInst(_Global(VoidType.get(), "g"))
    assert str(void_call).startswith("call void @g(")


def test_gep_types():
    array = ArrayType.get(4, IntType.get())
    base = Value(PointerType.get(array), "arr")
    gep = GepInst(base, [ConstInt.get(0)], name="g")
    assert gep.type is PointerType.get(array)
    gep.add_index(ConstInt.get(1))
    assert gep.type is PointerType.get(IntType.get())
    assert gep.indices == [ConstInt.get(0), ConstInt.get(1)]
    with pytest.raises(TypeError):
        GepInst(_int("a"))


def test_phi_incoming():
    a, b = _int("a"), _int("b")
    bb1 = Value(VoidType.get(), "bb1")
    bb2 = Value(VoidType.get(), "bb2")
    phi = PhiInst(IntType.get(), "p")
    phi.add_incoming(a, bb1)
    phi.add_incoming(b, bb2)
    assert len(phi) == 2
    assert phi.incoming_value(1) is b
    assert phi.incoming_block(0) is bb1
    assert phi.value_from(bb2) is b
    phi.remove_incoming_from(bb1)
    assert phi.incoming == [(b, bb2)]
    assert a.uses == []
    assert phi.value_from(bb1) is None


def test_phi_replace_incoming_block():
    a, b = _int("a"), _int("b")
    bb1 = Value(VoidType.get(), "bb1")
    bb2 = Value(VoidType.get(), "bb2")
    bb3 = Value(VoidType.get(), "bb3")
    phi = PhiInst(IntType.get(), "p")
    phi.add_incoming(a, bb1)
    phi.add_incoming(b, bb2)
    phi.replace_incoming_block(bb1, bb3)
    assert phi.incoming_block(0) is bb3
    phi.replace_incoming_block(bb3, bb2)
    assert phi.incoming == [(b, bb2)]


def test_phi_follows_replace_all_uses():
    a, c = _int("a"), _int("c")
    bb = Value(VoidType.get(), "bb")
    phi = PhiInst(IntType.get(), "p")
    phi.add_incoming(a, bb)
    a.replace_all_uses_with(c)
    assert phi.value_from(bb) is c


def test_undef_interned():
    assert UndefValue.get(IntType.get()) is UndefValue.get(IntType.get())
    assert UndefValue.get(FloatType.get()).ref() == "undef"
    assert UndefValue.get(FloatType.get()).type is FloatType.get()


def test_cast_types():
    assert ZextInst(Value(BoolType.get(), "b")).type is IntType.get()
    assert SextInst(_int("a")).type is Int64Type.get()
    assert TruncInst(Value(Int64Type.get(), "w")).type is IntType.get()
    fp2si = FP2SIInst(_float("x"))
    assert fp2si.type is IntType.get() and fp2si.is_cast()
    assert SI2FPInst(_int("a")).type is FloatType.get()
    target = PointerType.get(FloatType.get())
    cast = BitCastInst(Value(PointerType.get(IntType.get()), "p"), target)
    assert cast.type is target
    assert str(cast).endswith(f"to {target}")


def test_min_max():
    fmax = MaxInst(_float("x"), _float("y"), name="m")
    assert "@fmax(" in str(fmax)
    imin = MinInst(_int("a"), _int("b"), name="n")
    assert "@min(" in str(imin)
    assert imin.type is IntType.get()


def test_select():
    cond = Value(BoolType.get(), "c")
    sel = SelectInst(cond, _float("x"), _float("y"), name="s")
    assert sel.type is FloatType.get()
    assert sel.operand(0) is cond
    assert sel.opcode is Opcode.SELECT