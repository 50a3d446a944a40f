"""
Tagged values and the reactive variable store
---------------------------------------------
  Value           immutable Int / Float / Bool / String tagged union
  Variable        one current Value + ordered subscribers, change-gated
  VariableStore   name -> Variable registry with typed fallback getters

Example:
    store = VariableStore()
    store.set("temperature", Value.make_float(23.5))
    store.at("temperature").subscribe(lambda v: print(value_to_string(v)))
    store.set("temperature", Value.make_float(23.75))   # prints 23.75
    store.set("temperature", Value.make_float(23.75))   # equal, no notify

All access is single-threaded (the loop that owns the store).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
#  VALUE
# ═══════════════════════════════════════════════════════════════════════

class VType(Enum):
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"


@dataclass(frozen=True)
class Value:
    """One tagged payload. Values of different tags never compare equal."""

    type: VType = VType.INT
    data: Any = 0

    @classmethod
    def make_int(cls, v: int) -> Value:
        return cls(VType.INT, int(v))

    @classmethod
    def make_float(cls, v: float) -> Value:
        return cls(VType.FLOAT, float(v))

    @classmethod
    def make_bool(cls, v: bool) -> Value:
        return cls(VType.BOOL, bool(v))

    @classmethod
    def make_string(cls, v: str) -> Value:
        return cls(VType.STRING, str(v))

    def equals(self, other: Value) -> bool:
        if self.type is not other.type:
            return False
        return self.data == other.data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash((self.type, self.data))

    def is_int(self):    return self.type is VType.INT
    def is_float(self):  return self.type is VType.FLOAT
    def is_bool(self):   return self.type is VType.BOOL
    def is_string(self): return self.type is VType.STRING


def value_to_string(v: Value) -> str:
    """Canonical display text: 7, 23.50, true, verbatim string."""
    if v.type is VType.INT:
        return str(v.data)
    if v.type is VType.FLOAT:
        return f"{v.data:.2f}"
    if v.type is VType.BOOL:
        return "true" if v.data else "false"
    if v.type is VType.STRING:
        return v.data
    return ""


# ═══════════════════════════════════════════════════════════════════════
#  VARIABLE
# ═══════════════════════════════════════════════════════════════════════

Callback = Callable[[Value], None]


class Variable:
    """Holds a Value and notifies subscribers when it actually changes.

    Subscribing calls the callback once, right away, with the current value,
    so a bound widget never misses the initial state. ``set`` with a value
    equal to the current one is a no-op; that equality check is the only
    thing that stops feedback loops between subscribers that write back.
    """

    __slots__ = ("_value", "_subs", "_next_id")

    def __init__(self, initial: Value | None = None) -> None:
        self._value = initial if initial is not None else Value.make_int(0)
        self._subs: List[Tuple[int, Callback]] = []
        self._next_id = 0

    def get(self) -> Value:
        return self._value

    def set(self, v: Value) -> None:
        if self._value.equals(v):
            return
        self._value = v
        self._notify()

    def _notify(self) -> None:
        # snapshot: callbacks may (un)subscribe while we iterate
        for _, cb in list(self._subs):
            cb(self._value)

    def subscribe(self, cb: Callback) -> int:
        """Register ``cb`` and call it once with the current value.

        Returns:
            Subscription id for ``unsubscribe``.
        """
        self._next_id += 1
        sub_id = self._next_id
        self._subs.append((sub_id, cb))
        cb(self._value)
        return sub_id

    def unsubscribe(self, sub_id: int) -> None:
        for k, (sid, _) in enumerate(self._subs):
            if sid == sub_id:
                del self._subs[k]
                return

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)

    def __repr__(self) -> str:
        return f"<Variable: {self._value!r} subs={len(self._subs)}>"


# ═══════════════════════════════════════════════════════════════════════
#  STORE
# ═══════════════════════════════════════════════════════════════════════

class VariableNotFound(KeyError):
    """Indexed access to a name that was never ensured or set."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"no variable named {self.name!r}"


class VariableStore:
    """Maps 'dotted.name' -> Variable.

    ``ensure``/``set`` create variables lazily. ``at``/``get`` require the
    name to exist and raise ``VariableNotFound`` otherwise; the typed getters
    never raise and fall back to the caller's default instead.
    """

    def __init__(self) -> None:
        self._vars: Dict[str, Variable] = {}

    # ------------------------------------------------------------------
    def has(self, name: str) -> bool:
        return name in self._vars

    __contains__ = has

    def ensure(self, name: str, initial: Value) -> Variable:
        var = self._vars.get(name)
        if var is None:
            var = self._vars[name] = Variable(initial)
            logger.debug("created variable %s = %r", name, initial)
        return var

    def at(self, name: str) -> Variable:
        try:
            return self._vars[name]
        except KeyError:
            raise VariableNotFound(name) from None

    __getitem__ = at

    def set(self, name: str, value: Value) -> None:
        self.ensure(name, value).set(value)

    def get(self, name: str) -> Value:
        return self.at(name).get()

    # ------------------------------------------------------------------
    # Typed getters
    # ------------------------------------------------------------------
    def get_bool(self, name: str, fallback: bool) -> bool:
        var = self._vars.get(name)
        if var is None:
            return fallback
        v = var.get()
        return v.data if v.is_bool() else fallback

    def get_int(self, name: str, fallback: int) -> int:
        var = self._vars.get(name)
        if var is None:
            return fallback
        v = var.get()
        return v.data if v.is_int() else fallback

    def get_float(self, name: str, fallback: float) -> float:
        var = self._vars.get(name)
        if var is None:
            return fallback
        v = var.get()
        if v.is_float():
            return v.data
        if v.is_int():
            return float(v.data)
        return fallback

    def get_string(self, name: str, fallback: str) -> str:
        var = self._vars.get(name)
        if var is None:
            return fallback
        v = var.get()
        return v.data if v.is_string() else fallback

    # ------------------------------------------------------------------
    def names(self) -> List[str]:
        return sorted(self._vars)

    def as_dict(self) -> Dict[str, Value]:
        return {k: var.get() for k, var in self._vars.items()}

    def __len__(self) -> int:
        return len(self._vars)

    def __repr__(self) -> str:
        return f"VariableStore({self.as_dict()!r})"
