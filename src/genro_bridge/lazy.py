# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Lazy, memoized, writable attributes.

Purpose
=======
Request properties like ``cookies``, ``query`` and ``body`` are expensive to
parse and often never read. They are bound to a zero-argument producer and
computed on first access only.

Each field carries an explicit state::

    Unresolved(producer)  --first read-->  Resolved(value)
    Unresolved(producer)  --write------->  Resolved(written)
    Resolved(value)       --write------->  Resolved(written)

Definition::

    class Lazy:
        def get(self) -> Any
        def set(self, value: Any) -> None
        resolved: bool

    class LazyProperty:          # descriptor declared on the class
        def __set_name__(self, owner, name)
        def __get__(self, instance, owner)
        def __set__(self, instance, value)

    def bind_lazy(obj, name, producer) -> Lazy

Example::

    class Thing:
        __slots__ = ("_lazy",)
        value = LazyProperty()

        def __init__(self):
            self._lazy = {}

    thing = Thing()
    bind_lazy(thing, "value", lambda: expensive())
    thing.value   # calls expensive() once
    thing.value   # cached
    thing.value = 42

Design Notes
============
- A producer that raises leaves the field Unresolved: the next read retries.
- Rebinding a field never raises; it resets the state to Unresolved.
- Reading a field that was never bound raises ``AttributeError``.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

__all__ = ["Lazy", "LazyProperty", "bind_lazy"]

T = TypeVar("T")

_UNRESOLVED: Any = object()


class Lazy(Generic[T]):
    """Single lazily computed value with Unresolved/Resolved state."""

    __slots__ = ("_producer", "_value")

    def __init__(self, producer: Callable[[], T]) -> None:
        self._producer = producer
        self._value: Any = _UNRESOLVED

    @property
    def resolved(self) -> bool:
        """True once the value was computed or written."""
        return self._value is not _UNRESOLVED

    def get(self) -> T:
        """Return the value, calling the producer on first access."""
        if self._value is _UNRESOLVED:
            self._value = self._producer()
        value: T = self._value
        return value

    def set(self, value: T) -> None:
        """Replace the state with a resolved value."""
        self._value = value

    def __repr__(self) -> str:
        if self.resolved:
            return f"Lazy(resolved={self._value!r})"
        return "Lazy(unresolved)"


class LazyProperty:
    """
    Descriptor reading its state from ``instance._lazy[name]``.

    The owning class provides a ``_lazy`` dict (slot or attribute). Fields are
    activated per instance with ``bind_lazy()``.
    """

    __slots__ = ("name",)

    def __init__(self) -> None:
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        lazy = instance._lazy.get(self.name)
        if lazy is None:
            raise AttributeError(
                f"{type(instance).__name__!r} object has no bound attribute {self.name!r}"
            )
        return lazy.get()

    def __set__(self, instance: Any, value: Any) -> None:
        lazy = instance._lazy.get(self.name)
        if lazy is None:
            lazy = instance._lazy[self.name] = Lazy(_unbound)
        lazy.set(value)


def _unbound() -> Any:
    raise AttributeError("lazy attribute has no producer")


def bind_lazy(obj: Any, name: str, producer: Callable[[], T]) -> Lazy[T]:
    """Bind ``producer`` to the lazy field ``name`` of ``obj``."""
    lazy: Lazy[T] = Lazy(producer)
    obj._lazy[name] = lazy
    return lazy
