"""Pin sets and pin-to-function configurations."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any


class Pins(frozenset):
    """An immutable set of pin names, always iterated in sorted order."""

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(frozenset.__iter__(self)))

    def intersect(self, other: Iterable[str]) -> bool:
        """Return True if the two pin sets share any pin."""
        return not self.isdisjoint(other)

    def to_string(self) -> str:
        return "{" + ", ".join(self) + "}"

    __str__ = to_string

    def __repr__(self) -> str:
        return f"Pins({list(self)!r})"

    def to_json(self) -> list[str]:
        return list(self)

    @classmethod
    def from_json(cls, data: Any) -> Pins:
        if isinstance(data, (str, bytes, Mapping)) or not isinstance(data, Iterable):
            raise TypeError(f"pins must be a list of strings, not {type(data).__name__}")
        items = list(data)
        if not all(isinstance(item, str) for item in items):
            raise TypeError("every pin must be a string")
        return cls(items)


class PinConfig(dict[str, str]):
    """Maps pin names to the function each pin serves, such as ``"TX"``."""

    def func_to_pin(self, func: str) -> str | None:
        """Return the first pin serving ``func``, or None if there is none."""
        return next((pin for pin, pin_func in self.items() if pin_func == func), None)

    def to_pins(self) -> Pins:
        return Pins(self)

    def to_string(self) -> str:
        inner = ", ".join(f"{{{pin}, {func}}}" for pin, func in self.items())
        return "{ " + inner + " }"

    __str__ = to_string

    def to_json(self) -> dict[str, str]:
        return dict(self)

    @classmethod
    def from_json(cls, data: Any) -> PinConfig:
        if not isinstance(data, Mapping):
            raise TypeError(f"pin configuration must be an object, not {type(data).__name__}")
        for pin, func in data.items():
            if not isinstance(pin, str) or not isinstance(func, str):
                raise TypeError(f"pin {pin!r} must map to a string function")
        return cls(data)