"""Core IR values: uses, values, users, instructions and constants."""

from __future__ import annotations

import enum
import itertools
import struct
from typing import Optional

from .ilist import ListNode
from .irtypes import BoolType, IRDataType, IntType, FloatType, PointerType, Type, VoidType

_anonymous_names = itertools.count()


class Use:
    """An edge from a user to one of the values it uses."""

    __slots__ = ("user", "usee")

    def __init__(self, user: "User", usee: "Value") -> None:
        self.user = user
        self.usee = usee

    @property
    def value(self) -> "Value":
        return self.usee

    def detach(self) -> None:
        """Remove this use from the used value's list of uses."""
        if self.usee is None:
            return
        uses = self.usee.uses
        for index, use in enumerate(uses):
            if use is self:
                del uses[index]
                return

    def __repr__(self) -> str:
        return f"<Use {self.user!r} -> {self.usee!r}>"


class Value:
    """Anything that can be an operand: it has a type, a name and its uses."""

    def __init__(self, tp: Type, name: str = "") -> None:
        self.type = tp
        self.name = name
        self.version = 0
        self.uses: list[Use] = []

    @property
    def kind(self) -> IRDataType:
        return self.type.kind

    def ref(self) -> str:
        """Return how this value is spelled when used as an operand."""
        if not self.name:
            self.name = f"t{next(_anonymous_names)}"
        return ("@" if self.is_global() else "%") + self.name

    def replace_all_uses_with(self, value: "Value") -> None:
        """Redirect every use of this value to ``value``."""
        if value is self:
            return
        for use in self.uses:
            use.usee = value
            value.uses.append(use)
        self.uses.clear()

    def is_const(self) -> bool:
        return False

    def is_global(self) -> bool:
        return False

    def is_const_zero(self) -> bool:
        return False

    def is_const_one(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.ref()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name or '?'}: {self.type}>"


class User(Value):
    """A value that uses other values through an ordered list of operands."""

    def __init__(self, tp: Optional[Type] = None, name: str = "") -> None:
        super().__init__(tp if tp is not None else VoidType.get(), name)
        self.operands: list[Use] = []

    @property
    def operand_values(self) -> list[Value]:
        return [use.usee for use in self.operands]

    def add_use(self, value: Value) -> Use:
        """Append ``value`` as a new operand and return the created use."""
        use = Use(self, value)
        self.operands.append(use)
        value.uses.append(use)
        return use

    def operand(self, index: int) -> Value:
        return self.operands[index].usee

    def set_operand(self, index: int, value: Value) -> None:
        """Make operand ``index`` refer to ``value``."""
        use = self.operands[index]
        use.detach()
        use.usee = value
        value.uses.append(use)

    def remove_use(self, use: Use) -> bool:
        """Drop ``use`` from the operands; report whether it was present."""
        for index, candidate in enumerate(self.operands):
            if candidate is use:
                use.detach()
                del self.operands[index]
                return True
        return False

    def clear_uses(self) -> None:
        """Drop every operand."""
        for use in self.operands:
            use.detach()
        self.operands.clear()

    def use_index(self, use: Use) -> int:
        """Return the position of ``use`` among the operands."""
        for index, candidate in enumerate(self.operands):
            if candidate is use:
                return index
        raise ValueError("use does not belong to this user")


class Opcode(enum.IntEnum):
    """Instruction kinds."""

    NONE = 0
    UNCOND = enum.auto()
    COND = enum.auto()
    RET = enum.auto()
    ALLOCA = enum.auto()
    LOAD = enum.auto()
    STORE = enum.auto()
    MEMCPY = enum.auto()
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    MOD = enum.auto()
    AND = enum.auto()
    OR = enum.auto()
    XOR = enum.auto()
    EQ = enum.auto()
    NE = enum.auto()
    GE = enum.auto()
    L = enum.auto()
    LE = enum.auto()
    G = enum.auto()
    GEP = enum.auto()
    PHI = enum.auto()
    CALL = enum.auto()
    ZEXT = enum.auto()
    SEXT = enum.auto()
    TRUNC = enum.auto()
    FP2SI = enum.auto()
    SI2FP = enum.auto()
    BITCAST = enum.auto()
    BINARY_UNKNOWN = enum.auto()
    MAX = enum.auto()
    MIN = enum.auto()
    SELECT = enum.auto()


_CAST_OPCODES = frozenset(
    {Opcode.ZEXT, Opcode.SEXT, Opcode.TRUNC, Opcode.FP2SI, Opcode.SI2FP, Opcode.BITCAST}
)
_MEMORY_OPCODES = frozenset({Opcode.ALLOCA, Opcode.LOAD, Opcode.STORE, Opcode.MEMCPY})


class Instruction(User, ListNode):
    """A user that lives in a basic block."""

    def __init__(self, tp: Optional[Type] = None, opcode: Opcode = Opcode.NONE, name: str = "") -> None:
        super().__init__(tp, name)
        self.opcode = opcode

    @property
    def block(self):
        """The basic block holding this instruction, if any."""
        return self.parent

    def is_terminator(self) -> bool:
        return self.opcode in (Opcode.UNCOND, Opcode.COND, Opcode.RET)

    def is_binary(self) -> bool:
        return Opcode.ADD <= self.opcode <= Opcode.G

    def is_memory(self) -> bool:
        return self.opcode in _MEMORY_OPCODES

    def is_cast(self) -> bool:
        return self.opcode in _CAST_OPCODES

    def is_cmp(self) -> bool:
        return Opcode.EQ <= self.opcode <= Opcode.G

    def __str__(self) -> str:
        body = self.opcode.name.lower()
        if self.operands:
            body += " " + ", ".join(f"{v.type} {v.ref()}" for v in self.operand_values)
        if isinstance(self.type, VoidType):
            return body
        return f"{self.ref()} = {body}"


class ConstantData(Value):
    """Base of compile-time constants."""

    value: object = None

    def is_const(self) -> bool:
        return True

    def is_const_zero(self) -> bool:
        return self.value is not None and self.value == 0

    def is_const_one(self) -> bool:
        return self.value is not None and self.value == 1

    @classmethod
    def null_value(cls, tp: Type) -> "ConstantData":
        """Return the zero constant of ``tp``."""
        if isinstance(tp, BoolType):
            return ConstBool.get(False)
        if tp.kind in (IRDataType.INT, IRDataType.INT64):
            return ConstInt.get(0)
        if tp.kind == IRDataType.FLOAT:
            return ConstFloat.get(0.0)
        if tp.kind == IRDataType.PTR:
            return ConstPtr.get(tp)
        raise ValueError(f"no null value for type {tp}")


class ConstBool(ConstantData):
    """Boolean constant."""

    _cache: dict[bool, "ConstBool"] = {}

    def __init__(self, value: bool) -> None:
        super().__init__(BoolType.get(), "true" if value else "false")
        self.value = bool(value)

    def ref(self) -> str:
        return "true" if self.value else "false"

    @classmethod
    def get(cls, value: bool = False) -> "ConstBool":
        key = bool(value)
        constant = cls._cache.get(key)
        if constant is None:
            constant = cls._cache[key] = cls(key)
        return constant


def _wrap_i32(value: int) -> int:
    return (int(value) + 2**31) % 2**32 - 2**31


class ConstInt(ConstantData):
    """32-bit integer constant."""

    _cache: dict[int, "ConstInt"] = {}

    def __init__(self, value: int) -> None:
        value = _wrap_i32(value)
        super().__init__(IntType.get(), str(value))
        self.value = value

    def ref(self) -> str:
        return str(self.value)

    @classmethod
    def get(cls, value: int = 0) -> "ConstInt":
        key = _wrap_i32(value)
        constant = cls._cache.get(key)
        if constant is None:
            constant = cls._cache[key] = cls(key)
        return constant


def _float_bits(value: float) -> int:
    return struct.unpack("<I", struct.pack("<f", value))[0]


class ConstFloat(ConstantData):
    """Single-precision float constant."""

    _cache: dict[int, "ConstFloat"] = {}

    def __init__(self, value: float) -> None:
        value = struct.unpack("<f", struct.pack("<f", float(value)))[0]
        super().__init__(FloatType.get())
        self.value = value
        self.name = self.ref()

    def ref(self) -> str:
        bits = struct.unpack("<Q", struct.pack("<d", self.value))[0]
        return f"0x{bits:016X}"

    @classmethod
    def get(cls, value: float = 0.0) -> "ConstFloat":
        key = _float_bits(float(value))
        constant = cls._cache.get(key)
        if constant is None:
            constant = cls._cache[key] = cls(value)
        return constant


class ConstPtr(ConstantData):
    """Null pointer constant."""

    _cache: dict[Type, "ConstPtr"] = {}

    def __init__(self, tp: Type) -> None:
        super().__init__(tp, "null")

    def ref(self) -> str:
        return "null"

    def is_const_zero(self) -> bool:
        return True

    @classmethod
    def get(cls, tp: Type) -> "ConstPtr":
        if not isinstance(tp, PointerType):
            raise TypeError(f"null pointer needs a pointer type, got {tp}")
        constant = cls._cache.get(tp)
        if constant is None:
            constant = cls._cache[tp] = cls(tp)
        return constant