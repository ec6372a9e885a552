"""Control-flow graph containers: initializers, variables, blocks, functions, modules."""

from __future__ import annotations

import enum
from typing import Iterable, Optional, Sequence

from .core import ConstantData, ConstBool, ConstFloat, ConstInt, User, Value
from .ilist import IntrusiveList, ListNode
from .instructions import (
    AllocaInst,
    BinaryInst,
    BinaryOp,
    CallInst,
    CondInst,
    FP2SIInst,
    LoadInst,
    RetInst,
    SI2FPInst,
    StoreInst,
    UnCondInst,
    ZextInst,
)
from .irtypes import (
    ArrayType,
    BoolType,
    HasSubType,
    IRDataType,
    PointerType,
    Type,
    VoidType,
    type_from_enum,
)
from .symbols import SymbolTable


class Initializer(Value):
    """Constant initializer of an array; missing trailing elements are zero."""

    def __init__(self, tp: ArrayType, elements: Iterable[Value] = ()) -> None:
        if not isinstance(tp, ArrayType):
            raise TypeError(f"initializer needs an array type, got {tp}")
        super().__init__(tp)
        self.elements: list[Value] = list(elements)
        if len(self.elements) > tp.num:
            raise ValueError("too many elements for the array type")

    def init_value(self, indices: Sequence[int]) -> Value:
        """Return the value stored at ``indices``, or zero where nothing was given."""
        node: Value = self
        for index in indices:
            if not isinstance(node, Initializer):
                raise IndexError("too many indices for initializer")
            array = node.type
            if not 0 <= index < array.num:
                raise IndexError(f"index {index} out of range for {array}")
            if index >= len(node.elements):
                base = array.base_type() if isinstance(array, HasSubType) else array
                return ConstantData.null_value(base)
            node = node.elements[index]
        return node

    def ref(self) -> str:
        return str(self)

    def __str__(self) -> str:
        if not self.elements:
            return "zeroinitializer"
        array = self.type
        parts = []
        for position in range(array.num):
            if position < len(self.elements):
                parts.append(f"{array.subtype} {self.elements[position].ref()}")
            else:
                parts.append(f"{array.subtype} zeroinitializer")
        return "[" + ", ".join(parts) + "]"


class Var(User):
    """A global variable, a global constant or a function parameter.

    Globals and constants have a pointer type to their content; parameters
    have the content type itself. Operand 0, if present, is the initializer.
    """

    class Usage(enum.Enum):
        GLOBAL = "global"
        CONSTANT = "constant"
        PARAM = "param"

    def __init__(self, usage: "Var.Usage", tp: Type, name: str = "", init: Optional[Value] = None) -> None:
        self.usage = usage
        if usage is not Var.Usage.PARAM:
            tp = PointerType.get(tp)
        super().__init__(tp, name)
        self.for_parallel = False
        if init is not None:
            self.add_use(init)

    def is_global(self) -> bool:
        return self.usage is not Var.Usage.PARAM

    @property
    def is_param(self) -> bool:
        return self.usage is Var.Usage.PARAM

    def initializer(self) -> Optional[Value]:
        """Return the initial value, or ``None`` when zero-initialised."""
        return self.operand(0) if self.operands else None

    def __str__(self) -> str:
        if self.is_param:
            return self.ref()
        init = self.initializer()
        init_text = init.ref() if init is not None else "zeroinitializer"
        return f"{self.ref()} = {self.usage.value} {self.type.subtype} {init_text}"


def _replace_in(blocks: list, old, new) -> None:
    if old not in blocks:
        return
    if new in blocks:
        blocks.remove(old)
    else:
        blocks[blocks.index(old)] = new


class BasicBlock(Value, IntrusiveList, ListNode):
    """A straight-line run of instructions, owned by a function."""

    def __init__(self, name: str = "") -> None:
        super().__init__(VoidType.get(), name)
        self.index = 0
        self.loop_depth = 0
        self.visited = False
        self.reachable = False
        self.pred_blocks: list[BasicBlock] = []
        self.next_blocks: list[BasicBlock] = []

    @property
    def function(self) -> Optional["Function"]:
        return self.parent

    def add_next_block(self, block: "BasicBlock") -> None:
        if block not in self.next_blocks:
            self.next_blocks.append(block)

    def add_pred_block(self, block: "BasicBlock") -> None:
        if block not in self.pred_blocks:
            self.pred_blocks.append(block)

    def remove_next_block(self, block: "BasicBlock") -> None:
        if block in self.next_blocks:
            self.next_blocks.remove(block)

    def remove_pred_block(self, block: "BasicBlock") -> None:
        if block in self.pred_blocks:
            self.pred_blocks.remove(block)

    def replace_next_block(self, old: "BasicBlock", new: "BasicBlock") -> None:
        _replace_in(self.next_blocks, old, new)

    def replace_pred_block(self, old: "BasicBlock", new: "BasicBlock") -> None:
        _replace_in(self.pred_blocks, old, new)

    def terminator(self):
        """Return the closing branch or return, or ``None`` if the block is open."""
        last = self.back
        if last is not None and last.is_terminator():
            return last
        return None

    def _append(self, inst):
        self.push_back(inst)
        return inst

    def _to_float(self, value: Value) -> Value:
        if value.kind == IRDataType.FLOAT:
            return value
        if isinstance(value, (ConstInt, ConstBool)):
            return ConstFloat.get(float(value.value))
        if isinstance(value.type, BoolType):
            value = self._append(ZextInst(value))
        return self._append(SI2FPInst(value))

    def _to_int(self, value: Value) -> Value:
        if isinstance(value, ConstBool):
            return ConstInt.get(int(value.value))
        if isinstance(value, ConstFloat):
            return ConstInt.get(int(value.value))
        if isinstance(value.type, BoolType):
            return self._append(ZextInst(value))
        if value.kind == IRDataType.FLOAT:
            return self._append(FP2SIInst(value))
        return value

    def _coerce(self, value: Value, target: Type) -> Value:
        if target.kind == IRDataType.FLOAT:
            return self._to_float(value)
        if target.kind == IRDataType.INT and not isinstance(target, BoolType):
            return self._to_int(value)
        return value

    def generate_binary(self, lhs: Value, op: BinaryOp, rhs: Value) -> BinaryInst:
        """Append ``lhs op rhs``, widening booleans and mixing ints into floats."""
        both_bool = isinstance(lhs.type, BoolType) and isinstance(rhs.type, BoolType)
        logical = op in (BinaryOp.E, BinaryOp.NE, BinaryOp.AND, BinaryOp.OR, BinaryOp.XOR)
        if not (both_bool and logical):
            if lhs.kind == IRDataType.FLOAT or rhs.kind == IRDataType.FLOAT:
                lhs, rhs = self._to_float(lhs), self._to_float(rhs)
            else:
                lhs, rhs = self._to_int(lhs), self._to_int(rhs)
        return self._append(BinaryInst(lhs, op, rhs))

    def generate_load(self, ptr: Value) -> LoadInst:
        return self._append(LoadInst(ptr))

    def generate_store(self, value: Value, ptr: Value) -> StoreInst:
        """Append a store, converting ``value`` to the pointee type."""
        if isinstance(ptr.type, PointerType):
            value = self._coerce(value, ptr.type.subtype)
        return self._append(StoreInst(value, ptr))

    def generate_alloca(self, tp: Type, name: str = "") -> AllocaInst:
        """Create a stack slot at the head of the function's entry block."""
        function = self.parent
        entry = function.front if function is not None and function.front is not None else self
        alloca = AllocaInst(tp, name)
        last_alloca = None
        for inst in entry:
            if not isinstance(inst, AllocaInst):
                break
            last_alloca = inst
        if last_alloca is None:
            entry.push_front(alloca)
        else:
            entry.push_after(last_alloca, alloca)
        return alloca

    def _link(self, target: "BasicBlock") -> None:
        self.add_next_block(target)
        target.add_pred_block(self)

    def generate_cond(self, cond: Value, true_block: "BasicBlock", false_block: "BasicBlock") -> CondInst:
        inst = self._append(CondInst(cond, true_block, false_block))
        self._link(true_block)
        self._link(false_block)
        return inst

    def generate_uncond(self, target: "BasicBlock") -> UnCondInst:
        inst = self._append(UnCondInst(target))
        self._link(target)
        return inst

    def generate_ret(self, value: Optional[Value] = None) -> RetInst:
        """Append a return, converting ``value`` to the function's return type."""
        function = self.parent
        if value is not None and function is not None:
            value = self._coerce(value, function.type)
        return self._append(RetInst(value))

    def generate_call(self, callee: Value, args: Iterable[Value] = ()) -> CallInst:
        """Append a call, converting scalar arguments to the parameter types."""
        args = list(args)
        if isinstance(callee, Function):
            args = [
                self._coerce(arg, param.type) if index < len(callee.params) else arg
                for index, arg in enumerate(args)
                for param in [callee.params[index] if index < len(callee.params) else None]
            ]
        return self._append(CallInst(callee, args))

    def new_block(self) -> "BasicBlock":
        """Create an empty block at the end of this block's function."""
        function = self.parent
        if function is None:
            raise ValueError("block does not belong to a function")
        block = BasicBlock()
        function.add_block(block)
        return block

    def __str__(self) -> str:
        label = self.ref()[1:]
        return f"{label}:\n" + "".join(f"  {inst}\n" for inst in self)


class Function(Value, IntrusiveList):
    """A function: its parameters and its list of basic blocks."""

    def __init__(self, ret, name: str) -> None:
        tp = ret if isinstance(ret, Type) else type_from_enum(ret)
        super().__init__(tp, name)
        self.params: list[Var] = []
        self.has_side_effect = False
        self.changed_values: set[Value] = set()

    def is_global(self) -> bool:
        return True

    def add_block(self, block: BasicBlock) -> None:
        self.push_back(block)
        block.index = len(self) - 1

    def push_param(self, name: str, var: Var) -> None:
        var.name = name
        self.params.append(var)

    def return_blocks(self) -> list[BasicBlock]:
        return [block for block in self if isinstance(block.terminator(), RetInst)]

    def instruction_count(self) -> int:
        return sum(len(block) for block in self)

    def renumber_blocks(self) -> None:
        for index, block in enumerate(self):
            block.index = index

    def __str__(self) -> str:
        params = ", ".join(f"{param.type} {param.ref()}" for param in self.params)
        body = "".join(str(block) for block in self)
        return f"define {self.type} {self.ref()}({params}) {{\n{body}}}\n"


class Module(SymbolTable):
    """A translation unit: global variables, functions and the global scope."""

    def __init__(self) -> None:
        super().__init__()
        self.functions: list[Function] = []
        self.globals: list[Var] = []

    def add_function(self, function: Function) -> None:
        self.functions.append(function)

    def add_global(self, var: Var) -> None:
        self.globals.append(var)

    def main_function(self) -> Function:
        for function in self.functions:
            if function.name == "main":
                return function
        raise LookupError("module has no main function")

    def __str__(self) -> str:
        return "".join(f"{var}\n" for var in self.globals) + "".join(str(f) for f in self.functions)