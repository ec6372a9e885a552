"""Expression trees of the source language and their lowering to IR."""

from __future__ import annotations

import enum
from typing import Mapping, Protocol

from .cfg import BasicBlock
from .core import ConstBool, ConstFloat, ConstInt, ConstPtr, Value
from .instructions import BinaryOp
from .irtypes import BoolType, IRDataType


class AstOp(enum.Enum):
    """Type keywords and operators appearing in the syntax tree."""

    TYPE_INT = enum.auto()
    TYPE_FLOAT = enum.auto()
    TYPE_VOID = enum.auto()
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    MODULO = enum.auto()
    GREATER = enum.auto()
    GREATER_EQ = enum.auto()
    LESS = enum.auto()
    LESS_EQ = enum.auto()
    EQUAL = enum.auto()
    NOT_EQUAL = enum.auto()
    NOT = enum.auto()
    AND = enum.auto()
    OR = enum.auto()
    ASSIGN = enum.auto()


class _HasOperand(Protocol):
    def operand(self, block: BasicBlock) -> Value: ...


class _Branching(Protocol):
    def branch(self, block: BasicBlock, true_block: BasicBlock, false_block: BasicBlock) -> None: ...


_BINARY_OPS: Mapping[AstOp, BinaryOp] = {
    AstOp.ADD: BinaryOp.ADD,
    AstOp.SUB: BinaryOp.SUB,
    AstOp.MUL: BinaryOp.MUL,
    AstOp.DIV: BinaryOp.DIV,
    AstOp.MODULO: BinaryOp.MOD,
    AstOp.EQUAL: BinaryOp.E,
    AstOp.NOT_EQUAL: BinaryOp.NE,
    AstOp.AND: BinaryOp.AND,
    AstOp.OR: BinaryOp.OR,
    AstOp.GREATER: BinaryOp.G,
    AstOp.LESS: BinaryOp.L,
    AstOp.GREATER_EQ: BinaryOp.GE,
    AstOp.LESS_EQ: BinaryOp.LE,
}

_EQUALITY_OPS: Mapping[AstOp, BinaryOp] = {
    AstOp.EQUAL: BinaryOp.E,
    AstOp.NOT_EQUAL: BinaryOp.NE,
}


class ConstValue:
    """A literal integer or float."""

    def __init__(self, data: int | float) -> None:
        self.data = data

    def operand(self, block: BasicBlock) -> Value:
        if isinstance(self.data, int):
            return ConstInt.get(self.data)
        return ConstFloat.get(self.data)


class UnaryExp:
    """Prefix operators applied to one operand: ``UnaryExp(AstOp.NOT, AstOp.SUB, x)`` is ``!-x``."""

    def __init__(self, *parts) -> None:
        if not parts:
            raise TypeError("a unary expression needs an operand")
        *ops, self.item = parts
        for op in ops:
            if not isinstance(op, AstOp):
                raise TypeError(f"expected an operator, got {op!r}")
        self.ops: list[AstOp] = list(ops)

    @staticmethod
    def _negate_logically(block: BasicBlock, value: Value) -> Value:
        kind = value.type.kind
        if kind == IRDataType.INT:
            zero = ConstBool.get(False) if isinstance(value.type, BoolType) else ConstInt.get(0)
            return block.generate_binary(value, BinaryOp.E, zero)
        if kind == IRDataType.FLOAT:
            return block.generate_binary(ConstFloat.get(0.0), BinaryOp.E, value)
        if kind == IRDataType.PTR:
            return block.generate_binary(ConstPtr.get(value.type), BinaryOp.E, value)
        raise ValueError(f"unsupported type for '!': {value.type}")

    @staticmethod
    def _negate(block: BasicBlock, value: Value) -> Value:
        zero = ConstInt.get(0) if value.type.kind == IRDataType.INT else ConstFloat.get(0.0)
        return block.generate_binary(zero, BinaryOp.SUB, value)

    def operand(self, block: BasicBlock) -> Value:
        """Lower the operand, then apply the operators from the innermost outwards."""
        result = self.item.operand(block)
        for op in reversed(self.ops):
            if op is AstOp.NOT:
                result = self._negate_logically(block, result)
            elif op is AstOp.SUB:
                result = self._negate(block, result)
            elif op is not AstOp.ADD:
                raise ValueError(f"unsupported unary operator {op.name}")
        return result


class _BinaryExp:
    """Left-associative chain: ``first op1 second op2 third ...``."""

    _allowed: Mapping[AstOp, BinaryOp] = _BINARY_OPS

    def __init__(self, first, *rest) -> None:
        if len(rest) % 2:
            raise TypeError("expected operator/operand pairs after the first operand")
        self.items: list[_HasOperand] = [first]
        self.ops: list[AstOp] = []
        for op, item in zip(rest[::2], rest[1::2]):
            if not isinstance(op, AstOp):
                raise TypeError(f"expected an operator, got {op!r}")
            self.ops.append(op)
            self.items.append(item)

    def _lower_chain(self, block: BasicBlock) -> Value:
        result = self.items[0].operand(block)
        for op, item in zip(self.ops, self.items[1:]):
            rhs = item.operand(block)
            binop = self._allowed.get(op)
            if binop is None:
                raise ValueError(f"unsupported operator {op.name} in {type(self).__name__}")
            result = block.generate_binary(result, binop, rhs)
        return result


class MulExp(_BinaryExp):
    """Multiplicative chain of unary expressions."""

    def operand(self, block: BasicBlock) -> Value:
        """Lower the chain into binary instructions appended to ``block``."""
        return self._lower_chain(block)


class AddExp(_BinaryExp):
    """Additive chain of multiplicative expressions."""

    def operand(self, block: BasicBlock) -> Value:
        """Lower the chain into binary instructions appended to ``block``."""
        return self._lower_chain(block)


class RelExp(_BinaryExp):
    """Relational chain of additive expressions."""

    def operand(self, block: BasicBlock) -> Value:
        """Lower the chain into binary instructions appended to ``block``."""
        return self._lower_chain(block)


class EqExp(_BinaryExp):
    """Equality chain of relational expressions, always yielding a boolean."""

    _allowed = _EQUALITY_OPS

    def operand(self, block: BasicBlock) -> Value:
        """Lower the chain; a lone non-boolean operand is compared against zero."""
        if self.ops:
            return self._lower_chain(block)
        result = self.items[0].operand(block)
        if isinstance(result.type, BoolType):
            return result
        kind = result.type.kind
        if kind == IRDataType.PTR:
            zero: Value = ConstPtr.get(result.type)
        elif kind == IRDataType.INT:
            zero = ConstInt.get(0)
        elif kind == IRDataType.FLOAT:
            zero = ConstFloat.get(0.0)
        else:
            raise ValueError(f"unexpected operand type {result.type} in a condition")
        return block.generate_binary(result, BinaryOp.NE, zero)

    def branch(self, block: BasicBlock, true_block: BasicBlock, false_block: BasicBlock) -> None:
        """End ``block`` with a jump chosen by this condition."""
        cond = self.operand(block)
        if isinstance(cond, ConstBool):
            block.generate_uncond(true_block if cond.value else false_block)
        else:
            block.generate_cond(cond, true_block, false_block)


class LAndExp:
    """Short-circuit conjunction of equality expressions."""

    def __init__(self, *items: EqExp) -> None:
        if not items:
            raise TypeError("a conjunction needs at least one operand")
        self.items: list[EqExp] = list(items)

    def branch(self, block: BasicBlock, true_block: BasicBlock, false_block: BasicBlock) -> None:
        """Jump to ``true_block`` only if every operand holds, else to ``false_block``."""
        last = len(self.items) - 1
        for position, item in enumerate(self.items):
            cond = item.operand(block)
            if isinstance(cond, ConstBool):
                if not cond.value:
                    block.generate_uncond(false_block)
                    return
                if position == last:
                    block.generate_uncond(true_block)
                    return
                continue
            following = true_block if position == last else block.new_block()
            block.generate_cond(cond, following, false_block)
            block = following


class LOrExp:
    """Short-circuit disjunction of conjunctions."""

    def __init__(self, *items: _Branching) -> None:
        if not items:
            raise TypeError("a disjunction needs at least one operand")
        self.items: list[_Branching] = list(items)

    def branch(self, block: BasicBlock, true_block: BasicBlock, false_block: BasicBlock) -> None:
        """Jump to ``true_block`` as soon as one operand holds, else to ``false_block``."""
        last = len(self.items) - 1
        for position, item in enumerate(self.items):
            if position == last:
                item.branch(block, true_block, false_block)
                return
            following = block.new_block()
            item.branch(block, true_block, following)
            if not following.uses:
                following.erase_from_parent()
                return
            block = following