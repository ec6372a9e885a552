# sysyc

Building blocks for a compiler middle end for a small C-like language.
The package provides an LLVM-style SSA intermediate representation, a
dominator-tree analysis with iterated dominance frontiers, and lowering
of expression trees to IR.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `sysyc.irtypes`: IR types. `IntType.get()`, `Int64Type.get()`,
  `FloatType.get()`, `VoidType.get()` and `BoolType.get()` return shared
  instances; `PointerType.get(sub)` and `ArrayType.get(n, sub)` intern
  derived types. `str()` gives the textual form, such as `i32`,
  `float*` or `[4 x i32]`. `type_from_enum(kind)` maps an `IRDataType`
  to its scalar type and raises `ValueError` for kinds that need a subtype.
- `sysyc.ilist`: `IntrusiveList` and `ListNode`, the doubly linked list
  that holds blocks in a function and instructions in a block. Lists are
  iterable, reversible and sized, and support `push_back`, `push_front`,
  `push_after`, `pop_front`, `pop_back`, `erase`, `find`, `collect`,
  `split` and `replace_range`; nodes support `erase_from_parent`,
  `replace_with`, `insert_before` and `insert_after`.
- `sysyc.symbols`: `SymbolTable`, a scoped name table with `push_scope`,
  `pop_scope`, `register`, `lookup` (raises `KeyError` for unbound
  names) and `next_number`, a per-name counter.
- `sysyc.core`: `Value`, `User`, `Use`, `Instruction`, `Opcode` and the
  interned constants `ConstInt` (wrapped to 32 bits), `ConstFloat`
  (single precision), `ConstBool` and `ConstPtr` (null). Every operand
  edge is tracked in both directions, and `replace_all_uses_with`
  redirects all uses of a value.
- `sysyc.instructions`: the instruction set: `LoadInst`, `StoreInst`,
  `AllocaInst`, `CallInst`, `RetInst`, `CondInst`, `UnCondInst`,
  `BinaryInst` (with `BinaryOp`), `ZextInst`, `SextInst`, `TruncInst`,
  `FP2SIInst`, `SI2FPInst`, `BitCastInst`, `MaxInst`, `MinInst`,
  `SelectInst`, `GepInst` and `PhiInst`, plus `UndefValue`. `str()` of
  an instruction gives its textual IR line.
- `sysyc.cfg`: `BasicBlock`, `Function`, `Module`, `Var` and
  `Initializer`. Blocks have `generate_*` helpers (`generate_binary`,
  `generate_load`, `generate_store`, `generate_alloca`, `generate_cond`,
  `generate_uncond`, `generate_ret`, `generate_call`) that build an
  instruction, insert implicit int/float/bool conversions where needed
  and record predecessor and successor blocks. `new_block()` appends a
  fresh block to the block's function. `str()` of a `Module` prints the
  whole unit.
- `sysyc.dominance`: `DominatorTree` (Lengauer–Tarjan), computed from
  the branch instructions of a function, with `build`, `dominates`,
  `idom`, `children`, `predecessors`, `successors`, `levels` and
  `reachable`; and `IDFCalculator`, which returns the blocks that need a
  phi node for a set of defining blocks, optionally restricted to
  live-in blocks.
- `sysyc.expressions`: expression nodes `ConstValue`, `UnaryExp`,
  `MulExp`, `AddExp`, `RelExp` and `EqExp`, whose `operand(block)`
  lowers them to instructions, and `EqExp.branch`, `LAndExp.branch` and
  `LOrExp.branch`, which lower conditions to short-circuit branches.
  Operators are given as `AstOp` members.

## Example

```python
from sysyc.cfg import BasicBlock, Function, Module
from sysyc.core import ConstInt
from sysyc.instructions import BinaryOp
from sysyc.irtypes import IRDataType

module = Module()
main = Function(IRDataType.INT, "main")
module.add_function(main)

entry = BasicBlock()
main.add_block(entry)
total = entry.generate_binary(ConstInt.get(2), BinaryOp.ADD, ConstInt.get(3))
entry.generate_ret(total)

print(module)
```

Expressions are written as chains of operands and operators:

```python
from sysyc.expressions import AddExp, AstOp, ConstValue, MulExp, UnaryExp

expr = AddExp(
    MulExp(UnaryExp(ConstValue(1))),
    AstOp.ADD,
    MulExp(UnaryExp(AstOp.SUB, ConstValue(2))),
)
value = expr.operand(entry)
```

The dominator tree of a function is built on demand:

```python
from sysyc.dominance import DominatorTree

tree = DominatorTree(main).build()
assert tree.dominates(entry, entry)
assert tree.idom(entry) is None
```

## What this package does not do

It is a library of compiler building blocks, not a compiler. There is no
command-line program, no lexer or parser for source text, no lowering of
declarations, statements or function definitions (only expressions and
conditions), no optimization passes, and no code generation for a target
machine. IR is produced by calling the classes above and printed with
`str()`.