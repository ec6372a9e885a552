"""IR type system: scalar, pointer and array types with interned instances."""

from __future__ import annotations

import abc
import enum


class IRDataType(enum.IntEnum):
    """Kind tag carried by every IR type."""

    INT = 0
    VOID = 1
    FLOAT = 2
    PTR = 3
    ARRAY = 4
    BACKEND_PTR = 5
    INT64 = 6


class Type(abc.ABC):
    """Base of all IR types. Instances are interned, so identity is equality."""

    kind: IRDataType
    size: int

    def __init__(self, kind: IRDataType, size: int = 0) -> None:
        self.kind = kind
        self.size = size

    @property
    def layer(self) -> int:
        """Nesting depth of pointer/array wrappers; zero for scalars."""
        return 0

    @abc.abstractmethod
    def __str__(self) -> str:
        """Textual IR spelling of the type."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self}>"


_scalar_instances: dict[type, Type] = {}


class _ScalarType(Type):
    _kind: IRDataType
    _size: int
    _spelling: str

    def __init__(self) -> None:
        super().__init__(self._kind, self._size)

    def __str__(self) -> str:
        return self._spelling

    @classmethod
    def _shared(cls):
        instance = _scalar_instances.get(cls)
        if instance is None:
            instance = cls()
            _scalar_instances[cls] = instance
        return instance


class IntType(_ScalarType):
    """32-bit signed integer."""

    _kind = IRDataType.INT
    _size = 4
    _spelling = "i32"

    @classmethod
    def get(cls) -> "IntType":
        """Return the single shared instance."""
        return cls._shared()


class Int64Type(_ScalarType):
    """64-bit signed integer."""

    _kind = IRDataType.INT64
    _size = 8
    _spelling = "i64"

    @classmethod
    def get(cls) -> "Int64Type":
        """Return the single shared instance."""
        return cls._shared()


class FloatType(_ScalarType):
    """32-bit floating point."""

    _kind = IRDataType.FLOAT
    _size = 4
    _spelling = "float"

    @classmethod
    def get(cls) -> "FloatType":
        """Return the single shared instance."""
        return cls._shared()


class VoidType(_ScalarType):
    """The empty type."""

    _kind = IRDataType.VOID
    _size = 0
    _spelling = "void"

    @classmethod
    def get(cls) -> "VoidType":
        """Return the single shared instance."""
        return cls._shared()


class BoolType(_ScalarType):
    """One-bit boolean, treated as an integer kind."""

    _kind = IRDataType.INT
    _size = 4
    _spelling = "i1"

    @classmethod
    def get(cls) -> "BoolType":
        """Return the single shared instance."""
        return cls._shared()


class HasSubType(Type):
    """A type wrapping another type (pointers and arrays)."""

    def __init__(self, kind: IRDataType, subtype: Type, size: int = 0) -> None:
        super().__init__(kind, size)
        self.subtype = subtype
        self._layer = subtype.layer + 1

    @property
    def layer(self) -> int:
        return self._layer

    def base_type(self) -> Type:
        """Strip every wrapper and return the innermost element type."""
        current: Type = self
        for _ in range(self._layer):
            if isinstance(current, HasSubType):
                current = current.subtype
        return current


class PointerType(HasSubType):
    """Pointer to a subtype."""

    _cache: dict[Type, "PointerType"] = {}

    def __init__(self, subtype: Type) -> None:
        super().__init__(IRDataType.PTR, subtype, 8)

    def __str__(self) -> str:
        return f"{self.subtype}*"

    @classmethod
    def get(cls, subtype: Type) -> "PointerType":
        """Return the interned pointer type to ``subtype``."""
        pointer = cls._cache.get(subtype)
        if pointer is None:
            pointer = cls(subtype)
            cls._cache[subtype] = pointer
        return pointer


class ArrayType(HasSubType):
    """Fixed-length array of a subtype."""

    _cache: dict[tuple[int, Type], "ArrayType"] = {}

    def __init__(self, num: int, subtype: Type) -> None:
        super().__init__(IRDataType.ARRAY, subtype, num * subtype.size)
        self.num = num

    def __str__(self) -> str:
        return f"[{self.num} x {self.subtype}]"

    @classmethod
    def get(cls, num: int, subtype: Type) -> "ArrayType":
        """Return the interned array type of ``num`` elements of ``subtype``."""
        key = (num, subtype)
        array = cls._cache.get(key)
        if array is None:
            array = cls(num, subtype)
            cls._cache[key] = array
        return array


_FROM_ENUM = {
    IRDataType.INT: IntType,
    IRDataType.INT64: Int64Type,
    IRDataType.FLOAT: FloatType,
    IRDataType.VOID: VoidType,
}


def type_from_enum(kind: IRDataType) -> Type:
    """Return the scalar type for a kind tag; wrapper kinds need a subtype."""
    try:
        return _FROM_ENUM[IRDataType(kind)].get()
    except KeyError:
        raise ValueError(f"no scalar type for kind {kind!r}") from None