"""A single comparison predicate against one metadata key."""

from __future__ import annotations

import enum
import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from .policies import MissingKeyPolicy, NumberComparisonPolicy

_MISSING = object()

_MAX_SAFE_INTEGER_F64 = 9_007_199_254_740_992
_I64_MIN = -(1 << 63)
_I64_EXCLUSIVE_MAX = 1 << 63
_U64_EXCLUSIVE_MAX = 1 << 64


class Operator(enum.Enum):
    """Comparison operators, valued by their wire tags."""

    EQUAL = "eq"
    NOT_EQUAL = "ne"
    LESS = "lt"
    LESS_EQUAL = "le"
    GREATER = "gt"
    GREATER_EQUAL = "ge"
    IN = "in"
    NOT_IN = "not_in"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"


_RANGE_ORDERINGS = {
    Operator.LESS: (-1,),
    Operator.LESS_EQUAL: (-1, 0),
    Operator.GREATER: (1,),
    Operator.GREATER_EQUAL: (1, 0),
}


@dataclass(frozen=True)
class Condition:
    """One operator applied to one metadata key.

    ``value`` is used by the single-value operators, ``values`` by ``in`` and
    ``not_in``; ``exists`` and ``not_exists`` use neither.
    """

    op: Operator
    key: str
    value: Any = None
    values: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "op", Operator(self.op))
        object.__setattr__(self, "values", tuple(self.values))

    def matches(
        self,
        meta: Mapping[str, Any],
        missing_key_policy: MissingKeyPolicy = MissingKeyPolicy.MATCH,
        number_comparison_policy: NumberComparisonPolicy = NumberComparisonPolicy.CONSERVATIVE,
    ) -> bool:
        """Evaluate this condition against ``meta`` under the given policies."""
        op = self.op
        if op is Operator.EXISTS:
            return self.key in meta
        if op is Operator.NOT_EXISTS:
            return self.key not in meta

        stored = meta.get(self.key, _MISSING)
        if stored is _MISSING:
            if op in (Operator.NOT_EQUAL, Operator.NOT_IN):
                return MissingKeyPolicy(missing_key_policy).matches_negative_predicates()
            return False

        policy = NumberComparisonPolicy(number_comparison_policy)
        if op is Operator.EQUAL:
            return values_equal(stored, self.value, policy)
        if op is Operator.NOT_EQUAL:
            return not values_equal(stored, self.value, policy)
        if op is Operator.IN:
            return any(values_equal(stored, candidate, policy) for candidate in self.values)
        if op is Operator.NOT_IN:
            return not any(values_equal(stored, candidate, policy) for candidate in self.values)
        return compare_values(stored, self.value, policy) in _RANGE_ORDERINGS[op]


def values_equal(
    a: Any,
    b: Any,
    number_comparison_policy: NumberComparisonPolicy = NumberComparisonPolicy.CONSERVATIVE,
) -> bool:
    """Return whether two values are equal, comparing numbers by numeric value."""
    if _is_number(a) and _is_number(b):
        return _compare_numbers(a, b, NumberComparisonPolicy(number_comparison_policy)) == 0
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if _is_number(a) or _is_number(b):
        return False
    return a == b


def compare_values(
    a: Any,
    b: Any,
    number_comparison_policy: NumberComparisonPolicy = NumberComparisonPolicy.CONSERVATIVE,
) -> Optional[int]:
    """Order two numbers or two strings: -1, 0 or 1, or None if incomparable."""
    if _is_number(a) and _is_number(b):
        return _compare_numbers(a, b, NumberComparisonPolicy(number_comparison_policy))
    if isinstance(a, str) and isinstance(b, str):
        return _cmp(a, b)
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _cmp(x: Any, y: Any) -> int:
    return (x > y) - (x < y)


def _partial_cmp_float(x: float, y: float) -> Optional[int]:
    if math.isnan(x) or math.isnan(y):
        return None
    return _cmp(x, y)


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def _compare_numbers(a: Any, b: Any, policy: NumberComparisonPolicy) -> Optional[int]:
    if isinstance(a, Decimal) or isinstance(b, Decimal):
        return _compare_decimal(a, b, policy)
    if isinstance(a, int) and isinstance(b, int):
        return _cmp(a, b)
    if isinstance(a, float) and isinstance(b, float):
        return _partial_cmp_float(a, b)
    if isinstance(a, int):
        return _compare_int_float(a, b, policy)
    reverse = _compare_int_float(b, a, policy)
    return None if reverse is None else -reverse


def _compare_decimal(a: Any, b: Any, policy: NumberComparisonPolicy) -> Optional[int]:
    if not isinstance(a, float) and not isinstance(b, float):
        if any(isinstance(v, Decimal) and v.is_nan() for v in (a, b)):
            return None
        return _cmp(Decimal(a), Decimal(b))
    if policy is NumberComparisonPolicy.APPROXIMATE:
        return _partial_cmp_float(_to_float(a), _to_float(b))
    return None


def _compare_int_float(x: int, y: float, policy: NumberComparisonPolicy) -> Optional[int]:
    """Compare an integer with a float, giving up on risky cases unless approximate."""
    if _I64_MIN <= x < 0:
        if y.is_integer() and _I64_MIN <= y < _I64_EXCLUSIVE_MAX:
            return _cmp(x, int(y))
        if -x <= _MAX_SAFE_INTEGER_F64:
            return _partial_cmp_float(float(x), y)
    elif 0 <= x < _U64_EXCLUSIVE_MAX:
        if y < 0.0:
            return 1
        if y.is_integer() and y < _U64_EXCLUSIVE_MAX:
            return _cmp(x, int(y))
        if x <= _MAX_SAFE_INTEGER_F64:
            return _partial_cmp_float(float(x), y)
    if policy is NumberComparisonPolicy.APPROXIMATE:
        return _partial_cmp_float(_to_float(x), y)
    return None