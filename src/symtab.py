"""Run-scoped symbol table: declared name -> typed slot.

The parser only declares and checks membership; the interpreter loads and
stores. Slots are never removed and never change their tag.
"""

import math
from typing import Dict, Iterator, Tuple

import tips


class SymbolTable:
    def __init__(self):
        self._slots: Dict[str, tips.Value] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[str]:
        return iter(self._slots)

    def items(self) -> Iterator[Tuple[str, tips.Value]]:
        return iter(self._slots.items())

    def declare(self, name: str, typ: tips.Type) -> None:
        """Create the slot for `name` holding the zero value of `typ`."""
        if name in self._slots:
            raise KeyError(f"duplicate declaration of {name}")
        self._slots[name] = tips.zero_value(typ)

    def tag(self, name: str) -> tips.Type:
        return tips.type_of(self._slots[name])

    def load(self, name: str) -> tips.Value:
        return self._slots[name]

    def store(self, name: str, value: tips.Value) -> tips.Value:
        """Store `value` coerced to the slot's tag and return what was stored."""
        current = self._slots[name]
        if tips.is_real(current):
            coerced = float(value)
        elif tips.is_real(value):
            if not math.isfinite(value):
                raise tips.TipsRuntimeError(f"cannot store non-finite REAL {value} into INTEGER {name}")
            coerced = tips.wrap_int(int(value))  # int() truncates toward zero
        else:
            coerced = tips.wrap_int(value)
        self._slots[name] = coerced
        return coerced
