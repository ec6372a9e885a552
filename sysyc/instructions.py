"""Concrete IR instructions and the undefined value."""

from __future__ import annotations

import enum
from typing import Iterable, Optional

from .core import ConstantData, Instruction, Opcode, Value
from .irtypes import (
    BoolType,
    FloatType,
    HasSubType,
    Int64Type,
    IntType,
    IRDataType,
    PointerType,
    Type,
    VoidType,
)


def _typed(value: Value) -> str:
    return f"{value.type} {value.ref()}"


def _is_int(value: Value) -> bool:
    return value.type.kind in (IRDataType.INT, IRDataType.INT64)


class UndefValue(ConstantData):
    """An undefined value of a given type."""

    _cache: dict[Type, "UndefValue"] = {}

    def __init__(self, tp: Type) -> None:
        super().__init__(tp, "undef")

    def ref(self) -> str:
        return "undef"

    @classmethod
    def get(cls, tp: Type) -> "UndefValue":
        undef = cls._cache.get(tp)
        if undef is None:
            undef = cls._cache[tp] = cls(tp)
        return undef


class LoadInst(Instruction):
    """Read the value a pointer points at."""

    def __init__(self, ptr: Value, name: str = "") -> None:
        if not isinstance(ptr.type, PointerType):
            raise TypeError(f"load needs a pointer, got {ptr.type}")
        super().__init__(ptr.type.subtype, Opcode.LOAD, name)
        self.add_use(ptr)

    def __str__(self) -> str:
        return f"{self.ref()} = load {self.type}, {_typed(self.operand(0))}"


class StoreInst(Instruction):
    """Write a value through a pointer."""

    def __init__(self, value: Value, ptr: Value) -> None:
        super().__init__(VoidType.get(), Opcode.STORE)
        self.is_used = False
        self.add_use(value)
        self.add_use(ptr)

    def __str__(self) -> str:
        return "store " + ", ".join(_typed(v) for v in self.operand_values)


class AllocaInst(Instruction):
    """Reserve a stack slot for a value of the given element type."""

    def __init__(self, element: Type, name: str = "") -> None:
        super().__init__(PointerType.get(element), Opcode.ALLOCA, name)
        self.all_zero = False
        self.has_stored = False

    @property
    def element_type(self) -> Type:
        return self.type.subtype

    def __str__(self) -> str:
        return f"{self.ref()} = alloca {self.element_type}"


class CallInst(Instruction):
    """Call a function; operand 0 is the callee, the rest are arguments."""

    def __init__(self, callee: Value, args: Iterable[Value] = (), name: str = "") -> None:
        super().__init__(callee.type, Opcode.CALL, name)
        self.add_use(callee)
        for arg in args:
            self.add_use(arg)

    @property
    def called_function(self) -> Value:
        return self.operand(0)

    @property
    def args(self) -> list[Value]:
        return self.operand_values[1:]

    def __str__(self) -> str:
        callee = self.called_function
        text = f"call {_typed(callee)}(" + ", ".join(_typed(a) for a in self.args) + ")"
        if isinstance(self.type, VoidType):
            return text
        return f"{self.ref()} = {text}"


class RetInst(Instruction):
    """Return from a function, with or without a value."""

    def __init__(self, value: Optional[Value] = None) -> None:
        super().__init__(VoidType.get(), Opcode.RET)
        if value is not None:
            self.add_use(value)

    def __str__(self) -> str:
        if not self.operands:
            return "ret void"
        return "ret " + " ".join(_typed(v) for v in self.operand_values)


class CondInst(Instruction):
    """Conditional branch."""

    def __init__(self, cond: Value, true_block: Value, false_block: Value) -> None:
        super().__init__(VoidType.get(), Opcode.COND)
        self.add_use(cond)
        self.add_use(true_block)
        self.add_use(false_block)

    def __str__(self) -> str:
        cond, true_block, false_block = self.operand_values
        return f"br {_typed(cond)}, label {true_block.ref()}, label {false_block.ref()}"


class UnCondInst(Instruction):
    """Unconditional branch."""

    def __init__(self, target: Value) -> None:
        super().__init__(VoidType.get(), Opcode.UNCOND)
        self.add_use(target)

    def __str__(self) -> str:
        return f"br label {self.operand(0).ref()}"


class BinaryOp(enum.Enum):
    """Operators of binary instructions."""

    ADD = Opcode.ADD
    SUB = Opcode.SUB
    MUL = Opcode.MUL
    DIV = Opcode.DIV
    MOD = Opcode.MOD
    AND = Opcode.AND
    OR = Opcode.OR
    XOR = Opcode.XOR
    E = Opcode.EQ
    NE = Opcode.NE
    GE = Opcode.GE
    L = Opcode.L
    LE = Opcode.LE
    G = Opcode.G

    @property
    def is_compare(self) -> bool:
        return Opcode.EQ <= self.value <= Opcode.G


_ARITH_MNEMONICS = {
    BinaryOp.ADD: ("add", "fadd"),
    BinaryOp.SUB: ("sub", "fsub"),
    BinaryOp.MUL: ("mul", "fmul"),
    BinaryOp.DIV: ("sdiv", "fdiv"),
    BinaryOp.MOD: ("srem", "frem"),
}
_BITWISE_MNEMONICS = {BinaryOp.AND: "and", BinaryOp.OR: "or", BinaryOp.XOR: "xor"}
_CMP_CONDITIONS = {
    BinaryOp.E: ("eq", "ueq"),
    BinaryOp.NE: ("ne", "une"),
    BinaryOp.G: ("sgt", "ugt"),
    BinaryOp.GE: ("sge", "uge"),
    BinaryOp.L: ("slt", "ult"),
    BinaryOp.LE: ("sle", "ule"),
}


class BinaryInst(Instruction):
    """Arithmetic, bitwise or comparison operation on two operands."""

    def __init__(self, lhs: Value, op: BinaryOp, rhs: Value, atomic: bool = False, name: str = "") -> None:
        tp = BoolType.get() if op.is_compare else lhs.type
        super().__init__(tp, op.value, name)
        self.op = op
        self.atomic = atomic
        self.add_use(lhs)
        self.add_use(rhs)

    def _mnemonic(self) -> str:
        lhs = self.operand(0)
        integer = _is_int(lhs)
        if self.op in _ARITH_MNEMONICS:
            if self.op is BinaryOp.ADD and self.atomic:
                return "atomicadd"
            int_name, float_name = _ARITH_MNEMONICS[self.op]
            return int_name if integer else float_name
        if self.op in _BITWISE_MNEMONICS:
            return _BITWISE_MNEMONICS[self.op]
        int_cond, float_cond = _CMP_CONDITIONS[self.op]
        return f"icmp {int_cond}" if integer else f"fcmp {float_cond}"

    def __str__(self) -> str:
        lhs, rhs = self.operand_values
        if self.atomic:
            operands = f"{_typed(lhs)}, {_typed(rhs)}"
        else:
            operands = f"{_typed(lhs)}, {rhs.ref()}"
        return f"{self.ref()} = {self._mnemonic()} {operands}"


class _UnaryCast(Instruction):
    _opcode: Opcode
    _spelling: str

    def __init__(self, value: Value, tp: Type, name: str = "") -> None:
        super().__init__(tp, self._opcode, name)
        self.add_use(value)

    def __str__(self) -> str:
        return f"{self.ref()} = {self._spelling} {_typed(self.operand(0))} to {self.type}"


class ZextInst(_UnaryCast):
    """Zero-extend an i1 to i32."""

    _opcode = Opcode.ZEXT
    _spelling = "zext"

    def __init__(self, value: Value, name: str = "") -> None:
        super().__init__(value, IntType.get(), name)

    def __str__(self) -> str:
        return f"{self.ref()} = zext i1 {self.operand(0).ref()} to i32"


class SextInst(_UnaryCast):
    """Sign-extend an i32 to i64."""

    _opcode = Opcode.SEXT
    _spelling = "sext"

    def __init__(self, value: Value, name: str = "") -> None:
        super().__init__(value, Int64Type.get(), name)

    def __str__(self) -> str:
        return f"{self.ref()} = sext i32 {self.operand(0).ref()} to i64"


class TruncInst(_UnaryCast):
    """Truncate an i64 to i32."""

    _opcode = Opcode.TRUNC
    _spelling = "trunc"

    def __init__(self, value: Value, name: str = "") -> None:
        super().__init__(value, IntType.get(), name)

    def __str__(self) -> str:
        return f"{self.ref()} = trunc i64 {self.operand(0).ref()} to i32"


class FP2SIInst(_UnaryCast):
    """Convert a float to a signed integer."""

    _opcode = Opcode.FP2SI
    _spelling = "fptosi"

    def __init__(self, value: Value, name: str = "") -> None:
        super().__init__(value, IntType.get(), name)


class SI2FPInst(_UnaryCast):
    """Convert a signed integer to a float."""

    _opcode = Opcode.SI2FP
    _spelling = "sitofp"

    def __init__(self, value: Value, name: str = "") -> None:
        super().__init__(value, FloatType.get(), name)


class BitCastInst(_UnaryCast):
    """Reinterpret a value as another type."""

    _opcode = Opcode.BITCAST
    _spelling = "bitcast"


class _MinMax(Instruction):
    _opcode: Opcode
    _int_name: str
    _float_name: str

    def __init__(self, lhs: Value, rhs: Value, name: str = "") -> None:
        super().__init__(lhs.type, self._opcode, name)
        self.add_use(lhs)
        self.add_use(rhs)

    def __str__(self) -> str:
        callee = self._float_name if self.type.kind == IRDataType.FLOAT else self._int_name
        lhs, rhs = self.operand_values
        return f"{self.ref()} = call {self.type} @{callee}({_typed(lhs)}, {_typed(rhs)})"


class MaxInst(_MinMax):
    """Larger of two values."""

    _opcode = Opcode.MAX
    _int_name = "max"
    _float_name = "fmax"


class MinInst(_MinMax):
    """Smaller of two values."""

    _opcode = Opcode.MIN
    _int_name = "min"
    _float_name = "fmin"


class SelectInst(Instruction):
    """Choose between two values by a condition."""

    def __init__(self, cond: Value, if_true: Value, if_false: Value, name: str = "") -> None:
        super().__init__(if_true.type, Opcode.SELECT, name)
        self.add_use(cond)
        self.add_use(if_true)
        self.add_use(if_false)

    def __str__(self) -> str:
        return f"{self.ref()} = select " + ", ".join(_typed(v) for v in self.operand_values)


class GepInst(Instruction):
    """Address computation into an aggregate; operand 0 is the base pointer."""

    def __init__(self, base: Value, indices: Iterable[Value] = (), name: str = "") -> None:
        if not isinstance(base.type, PointerType):
            raise TypeError(f"getelementptr needs a pointer base, got {base.type}")
        super().__init__(base.type, Opcode.GEP, name)
        self.add_use(base)
        for index in indices:
            self.add_use(index)
        self._recompute_type()

    @property
    def indices(self) -> list[Value]:
        return self.operand_values[1:]

    def add_index(self, value: Value) -> None:
        """Append another index and update the result type."""
        self.add_use(value)
        self._recompute_type()

    def _recompute_type(self) -> None:
        element: Type = self.operand(0).type.subtype
        for _ in self.indices[1:]:
            if not isinstance(element, HasSubType):
                raise TypeError(f"cannot index into {element}")
            element = element.subtype
        self.type = PointerType.get(element)

    def __str__(self) -> str:
        base = self.operand(0)
        parts = [str(base.type.subtype)] + [_typed(v) for v in self.operand_values]
        return f"{self.ref()} = getelementptr inbounds " + ", ".join(parts)


class PhiInst(Instruction):
    """SSA merge: one incoming value per predecessor block."""

    def __init__(self, tp: Type, name: str = "") -> None:
        super().__init__(tp, Opcode.PHI, name)
        self._blocks: list[Value] = []

    @property
    def incoming(self) -> list[tuple[Value, Value]]:
        return list(zip(self.operand_values, self._blocks))

    def __len__(self) -> int:
        return len(self._blocks)

    def add_incoming(self, value: Value, block: Value) -> None:
        self.add_use(value)
        self._blocks.append(block)

    def incoming_value(self, index: int) -> Value:
        return self.operand(index)

    def incoming_block(self, index: int) -> Value:
        return self._blocks[index]

    def value_from(self, block: Value) -> Optional[Value]:
        """Return the value flowing in from ``block``, or ``None``."""
        for value, pred in self.incoming:
            if pred is block:
                return value
        return None

    def remove_incoming_from(self, block: Value) -> None:
        """Drop every entry that comes from ``block``."""
        for index in reversed(range(len(self._blocks))):
            if self._blocks[index] is block:
                self.remove_use(self.operands[index])
                del self._blocks[index]

    def replace_incoming_block(self, old: Value, new: Value) -> None:
        """Rename predecessor ``old`` to ``new`` without creating duplicates."""
        if any(pred is new for pred in self._blocks):
            self.remove_incoming_from(old)
            return
        self._blocks = [new if pred is old else pred for pred in self._blocks]

    def __str__(self) -> str:
        entries = ", ".join(f"[ {v.ref()}, {b.ref()} ]" for v, b in self.incoming)
        return f"{self.ref()} = phi {self.type} {entries}"