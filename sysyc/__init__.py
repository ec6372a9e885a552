"""SSA intermediate representation, dominance analysis and expression lowering."""

__version__ = "0.1.0"
__all__ = [
    "irtypes",
    "ilist",
    "symbols",
    "core",
    "instructions",
    "cfg",
    "dominance",
    "expressions",
]