"""
Argosy utilities.

Small helpers shared by the value, specification, definition and fault modules:

- Unset: the "argument not given" sentinel, for parameters where None is a real value.
- coalesce(object, default): Unset → default; every other object (None, 0, "") is kept.
- rename(name): decorator giving generated functions a readable __name__/__qualname__.
- mirror(name): read-only property over self._<name>; containers come back frozen.

    >>> coalesce(Unset, "fallback"), coalesce(None, "fallback")
    ('fallback', None)
"""
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel.

    There is exactly one instance per process; it is falsy, survives copy/pickle
    as itself, and can take part in PEP 604 unions (str | Unset) so isinstance()
    checks read naturally.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

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

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """Return `default` when `object` is Unset, `object` otherwise."""
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator form only: @rename("__repr__") sets both __name__ and __qualname__,
    so functions built inside factories show up under their real name in
    tracebacks and reprs.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    # shallow: tuple for sequences, proxy for mappings, frozenset for sets
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """Read-only property exposing self._<name>, frozen when it is a container."""
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)
