"""
Arbor utilities (internal helpers shared by definitions, commands and faults)

Overview
- UnsetType / Unset
  • Singleton sentinel for "not provided", distinct from None (a default of None
    is never a legitimate flag value, but a missing description and an empty one are).
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/""/0 are preserved.

- StorageGuard / view(name)
  • Write-once backing storage for immutable specs: fields are written under
    '-'-prefixed names during a guarded build phase, then exposed through
    read-only properties that hand out frozen copies.

- ordinal(number)
  • Human-friendly position labels for fault messages ("first", "12th", ...).

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> ordinal(2), ordinal(11), ordinal(23)
    ('second', '11th', '23rd')
"""
import functools
from collections.abc import Sequence, Mapping, Set
from contextlib import contextmanager
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and "".
    - Printable: repr(Unset) -> "Unset".
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, otherwise `object` unchanged.

    Falsey values such as None, 0 or "" are preserved; only the sentinel is replaced.
    """
    return object if object is not Unset else default


class StorageGuard:
    """
    Mixin protecting write-once backing storage.

    Attributes whose name starts with '-' are backing fields: they cannot be read
    through normal attribute access and can only be written while the instance is
    being built:

        with super().__new__(cls) as self:
            setattr(self, "-name", value)
        # from here on the backing fields are read-only

    Public fields are published with view(name).
    """
    __slots__ = ("__building",)

    @contextmanager
    def __new__(cls):
        self = super().__new__(cls)
        self.__building = True
        try:
            yield self
        finally:
            self.__building = False

    def __getattribute__(self, name, /):
        if isinstance(name, str) and name.startswith("-"):
            raise AttributeError("internal storage is not accessible")
        return object.__getattribute__(self, name)

    def __setattr__(self, name, value, /):
        if isinstance(name, str) and name.startswith("-") and not self.__building:
            raise AttributeError("internal storage is read-only")
        return object.__setattr__(self, name, value)

    def __delattr__(self, name, /):
        if isinstance(name, str) and name.startswith("-"):
            raise AttributeError("internal storage is read-only")
        return object.__delattr__(self, name)


def view(name, /):
    """
    Build a read-only property over the backing field "-{name}".

    Containers are handed out frozen: sequences as tuples, mappings as
    MappingProxyType, sets as frozensets. Scalars are returned as-is.
    """
    if not isinstance(name, str):
        raise TypeError("view() argument must be a string")

    def getter(self):
        value = object.__getattribute__(self, "-" + name)
        if isinstance(value, Sequence) and not isinstance(value, str):
            return tuple(value)
        if isinstance(value, Mapping):
            return MappingProxyType(value)
        if isinstance(value, Set):
            return frozenset(value)
        return value

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with English suffixes (11th, 21st, 112th).
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "StorageGuard",
    "view",
    "ordinal",
)
