# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for lazy, memoized, writable attributes."""

from __future__ import annotations

from typing import Any

import pytest

from genro_bridge.lazy import Lazy, LazyProperty, bind_lazy


class Holder:
    """Minimal owner of lazy fields."""

    __slots__ = ("_lazy",)

    value = LazyProperty()
    other = LazyProperty()

    def __init__(self) -> None:
        self._lazy: dict[str, Any] = {}


class Counter:
    """Producer counting its calls."""

    def __init__(self, result: Any = "computed") -> None:
        self.calls = 0
        self.result = result

    def __call__(self) -> Any:
        self.calls += 1
        return self.result


class TestLazy:
    """Tests for the Lazy state object."""

    def test_starts_unresolved(self) -> None:
        lazy = Lazy(Counter())
        assert lazy.resolved is False

    def test_get_computes_once(self) -> None:
        producer = Counter()
        lazy = Lazy(producer)
        assert lazy.get() == "computed"
        assert lazy.get() == "computed"
        assert producer.calls == 1
        assert lazy.resolved is True

    def test_set_skips_producer(self) -> None:
        producer = Counter()
        lazy = Lazy(producer)
        lazy.set("written")
        assert lazy.get() == "written"
        assert producer.calls == 0

    def test_none_is_a_valid_resolved_value(self) -> None:
        producer = Counter(result=None)
        lazy = Lazy(producer)
        assert lazy.get() is None
        assert lazy.get() is None
        assert producer.calls == 1

    def test_failure_leaves_unresolved(self) -> None:
        calls = []

        def failing() -> Any:
            calls.append(1)
            raise ValueError("boom")

        lazy = Lazy(failing)
        with pytest.raises(ValueError, match="boom"):
            lazy.get()
        assert lazy.resolved is False
        with pytest.raises(ValueError):
            lazy.get()
        assert len(calls) == 2

    def test_repr(self) -> None:
        lazy = Lazy(Counter())
        assert "unresolved" in repr(lazy)
        lazy.get()
        assert "computed" in repr(lazy)


class TestLazyProperty:
    """Tests for LazyProperty and bind_lazy."""

    def test_first_read_calls_producer(self) -> None:
        holder = Holder()
        producer = Counter({"a": 1})
        bind_lazy(holder, "value", producer)
        assert producer.calls == 0
        assert holder.value == {"a": 1}
        assert producer.calls == 1

    def test_reads_return_same_object(self) -> None:
        holder = Holder()
        bind_lazy(holder, "value", lambda: {"a": 1})
        assert holder.value is holder.value

    def test_write_overrides(self) -> None:
        holder = Holder()
        producer = Counter()
        bind_lazy(holder, "value", producer)
        holder.value = "override"
        assert holder.value == "override"
        assert producer.calls == 0

    def test_write_after_read(self) -> None:
        holder = Holder()
        bind_lazy(holder, "value", Counter())
        assert holder.value == "computed"
        holder.value = "new"
        assert holder.value == "new"

    def test_write_without_binding(self) -> None:
        holder = Holder()
        holder.value = 5
        assert holder.value == 5

    def test_unbound_read_raises_attribute_error(self) -> None:
        holder = Holder()
        with pytest.raises(AttributeError):
            holder.value

    def test_rebinding_resets(self) -> None:
        holder = Holder()
        bind_lazy(holder, "value", lambda: 1)
        assert holder.value == 1
        bind_lazy(holder, "value", lambda: 2)
        assert holder.value == 2

    def test_fields_are_independent(self) -> None:
        holder = Holder()
        first = Counter("first")
        second = Counter("second")
        bind_lazy(holder, "value", first)
        bind_lazy(holder, "other", second)
        assert holder.value == "first"
        assert second.calls == 0
        assert holder.other == "second"

    def test_instances_are_independent(self) -> None:
        one, two = Holder(), Holder()
        bind_lazy(one, "value", lambda: "one")
        bind_lazy(two, "value", lambda: "two")
        assert one.value == "one"
        assert two.value == "two"

    def test_class_access_returns_descriptor(self) -> None:
        assert isinstance(Holder.value, LazyProperty)
        assert Holder.value.name == "value"

    def test_bind_returns_lazy(self) -> None:
        holder = Holder()
        lazy = bind_lazy(holder, "value", lambda: 3)
        assert isinstance(lazy, Lazy)
        assert holder.value == 3
        assert lazy.resolved is True
