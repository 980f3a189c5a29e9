"""
Runtime types referenced by generated declaration modules.

A generated record refers to other records through typed keys:
``AutoKey[Customer]`` holds the autoincremented key of a customer row and
``Key[Customer, Unique[CustomerEmail]]`` holds the value of the unique
``CustomerEmail``. Phantom classes derived from ``UniqueMarker`` keep keys of
different uniques of the same record apart.
"""

from typing import Any, Generic, TypeVar


E = TypeVar("E")
U = TypeVar("U")


class UniqueMarker(Generic[E]):
    """Base class of the phantom types generated for uniques of record ``E``."""


class Unique(Generic[U]):
    """Wraps a phantom type to mark the unique a ``Key`` is built on."""


class AutoKey(Generic[E]):
    """Autoincremented key of a row of record ``E``."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __eq__(self, other):
        return isinstance(other, AutoKey) and self.value == other.value

    def __hash__(self):
        return hash((AutoKey, self.value))

    def __repr__(self):
        return f"AutoKey({self.value!r})"


class Key(Generic[E, U]):
    """Key of a row of record ``E`` built from the unique ``U``; composite values are tuples."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __eq__(self, other):
        return isinstance(other, Key) and self.value == other.value

    def __hash__(self):
        return hash((Key, self.value))

    def __repr__(self):
        return f"Key({self.value!r})"


class Int32(int):
    """Integer stored in a 32-bit column on a platform whose native int is wider."""


class Int64(int):
    """Integer stored in a 64-bit column on a platform whose native int is narrower."""
