"""Fluent builder for composable metadata filters."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .condition import Condition, Operator
from .expr import ConditionExpr, Expr, and_, negate, or_
from .filter import MetadataFilter
from .policies import FilterMatchOptions, MissingKeyPolicy, NumberComparisonPolicy


class InvalidFilterExpressionError(ValueError):
    """Raised when a filter expression is structurally invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


GroupBuild = Callable[["MetadataFilterBuilder"], "MetadataFilterBuilder"]


@dataclass(frozen=True)
class MetadataFilterBuilder:
    """Immutable builder for :class:`MetadataFilter`.

    Predicates without an explicit connector (``eq``, ``gt``, ``exists`` and
    so on) are combined with AND. Use the ``or_*`` methods or the group
    methods for more complex expressions. Every method returns a new builder.
    """

    expr: Optional[Expr] = None
    options: FilterMatchOptions = field(default_factory=FilterMatchOptions)
    error: Optional[str] = None
    has_condition: bool = False

    def build(self) -> MetadataFilter:
        """Build the filter, raising if the expression is structurally invalid."""
        if self.error is not None:
            raise InvalidFilterExpressionError(self.error)
        return MetadataFilter(expr=self.expr, options=self.options)

    # Policies

    def with_options(self, options: FilterMatchOptions) -> "MetadataFilterBuilder":
        """Replace the match options used by the built filter."""
        return replace(self, options=options)

    def missing_key_policy(self, missing_key_policy: MissingKeyPolicy) -> "MetadataFilterBuilder":
        """Set how negative predicates treat missing keys."""
        return replace(
            self, options=replace(self.options, missing_key_policy=missing_key_policy)
        )

    def number_comparison_policy(
        self, number_comparison_policy: NumberComparisonPolicy
    ) -> "MetadataFilterBuilder":
        """Set how mixed numeric comparisons are handled."""
        return replace(
            self,
            options=replace(self.options, number_comparison_policy=number_comparison_policy),
        )

    # Predicates joined with AND (short forms)

    def eq(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key == value``."""
        return self.and_eq(key, value)

    def ne(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key != value``."""
        return self.and_ne(key, value)

    def lt(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key < value``."""
        return self.and_lt(key, value)

    def le(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key <= value``."""
        return self.and_le(key, value)

    def gt(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key > value``."""
        return self.and_gt(key, value)

    def ge(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key >= value``."""
        return self.and_ge(key, value)

    def in_set(self, key: str, values: Iterable[Any]) -> "MetadataFilterBuilder":
        """AND ``key`` is one of ``values``."""
        return self.and_in_set(key, values)

    def not_in_set(self, key: str, values: Iterable[Any]) -> "MetadataFilterBuilder":
        """AND ``key`` is none of ``values``."""
        return self.and_not_in_set(key, values)

    def exists(self, key: str) -> "MetadataFilterBuilder":
        """AND ``key`` is present."""
        return self.and_exists(key)

    def not_exists(self, key: str) -> "MetadataFilterBuilder":
        """AND ``key`` is absent."""
        return self.and_not_exists(key)

    # Predicates joined with AND

    def and_eq(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key == value``."""
        return self._and_condition(Condition(Operator.EQUAL, key, value=value))

    def and_ne(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key != value``."""
        return self._and_condition(Condition(Operator.NOT_EQUAL, key, value=value))

    def and_lt(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key < value``."""
        return self._and_condition(Condition(Operator.LESS, key, value=value))

    def and_le(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key <= value``."""
        return self._and_condition(Condition(Operator.LESS_EQUAL, key, value=value))

    def and_gt(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key > value``."""
        return self._and_condition(Condition(Operator.GREATER, key, value=value))

    def and_ge(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """AND ``key >= value``."""
        return self._and_condition(Condition(Operator.GREATER_EQUAL, key, value=value))

    def and_in_set(self, key: str, values: Iterable[Any]) -> "MetadataFilterBuilder":
        """AND ``key`` is one of ``values``."""
        return self._and_condition(Condition(Operator.IN, key, values=tuple(values)))

    def and_not_in_set(self, key: str, values: Iterable[Any]) -> "MetadataFilterBuilder":
        """AND ``key`` is none of ``values``."""
        return self._and_condition(Condition(Operator.NOT_IN, key, values=tuple(values)))

    def and_exists(self, key: str) -> "MetadataFilterBuilder":
        """AND ``key`` is present."""
        return self._and_condition(Condition(Operator.EXISTS, key))

    def and_not_exists(self, key: str) -> "MetadataFilterBuilder":
        """AND ``key`` is absent."""
        return self._and_condition(Condition(Operator.NOT_EXISTS, key))

    # Predicates joined with OR

    def or_eq(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """OR ``key == value``."""
        return self._or_condition(Condition(Operator.EQUAL, key, value=value))

    def or_ne(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """OR ``key != value``."""
        return self._or_condition(Condition(Operator.NOT_EQUAL, key, value=value))

    def or_lt(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """OR ``key < value``."""
        return self._or_condition(Condition(Operator.LESS, key, value=value))

    def or_le(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """OR ``key <= value``."""
        return self._or_condition(Condition(Operator.LESS_EQUAL, key, value=value))

    def or_gt(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """OR ``key > value``."""
        return self._or_condition(Condition(Operator.GREATER, key, value=value))

    def or_ge(self, key: str, value: Any) -> "MetadataFilterBuilder":
        """OR ``key >= value``."""
        return self._or_condition(Condition(Operator.GREATER_EQUAL, key, value=value))

    def or_in_set(self, key: str, values: Iterable[Any]) -> "MetadataFilterBuilder":
        """OR ``key`` is one of ``values``."""
        return self._or_condition(Condition(Operator.IN, key, values=tuple(values)))

    def or_not_in_set(self, key: str, values: Iterable[Any]) -> "MetadataFilterBuilder":
        """OR ``key`` is none of ``values``."""
        return self._or_condition(Condition(Operator.NOT_IN, key, values=tuple(values)))

    def or_exists(self, key: str) -> "MetadataFilterBuilder":
        """OR ``key`` is present."""
        return self._or_condition(Condition(Operator.EXISTS, key))

    def or_not_exists(self, key: str) -> "MetadataFilterBuilder":
        """OR ``key`` is absent."""
        return self._or_condition(Condition(Operator.NOT_EXISTS, key))

    # Groups

    def and_group(self, build: GroupBuild) -> "MetadataFilterBuilder":
        """AND a group built by ``build`` from a fresh builder.

        Policies set inside the group are ignored.
        """
        return self._combine_group("and", build(MetadataFilterBuilder()), _and_optional)

    def or_group(self, build: GroupBuild) -> "MetadataFilterBuilder":
        """OR a group built by ``build`` from a fresh builder."""
        return self._combine_group("or", build(MetadataFilterBuilder()), _or_optional)

    def and_not(self, build: GroupBuild) -> "MetadataFilterBuilder":
        """AND the negation of a group built by ``build``."""
        group = build(MetadataFilterBuilder())._negate_non_empty_group()
        return self._combine_group("and_not", group, _and_optional)

    def or_not(self, build: GroupBuild) -> "MetadataFilterBuilder":
        """OR the negation of a group built by ``build``."""
        group = build(MetadataFilterBuilder())._negate_non_empty_group()
        return self._combine_group("or_not", group, _or_optional)

    def negate(self) -> "MetadataFilterBuilder":
        """Negate the whole expression built so far."""
        return replace(self, expr=negate(self.expr))

    def __invert__(self) -> "MetadataFilterBuilder":
        return self.negate()

    # Internals

    def _and_condition(self, condition: Condition) -> "MetadataFilterBuilder":
        return replace(
            self,
            expr=_and_optional(self.expr, ConditionExpr(condition)),
            has_condition=True,
        )

    def _or_condition(self, condition: Condition) -> "MetadataFilterBuilder":
        return replace(
            self,
            expr=_or_optional(self.expr, ConditionExpr(condition)),
            has_condition=True,
        )

    def _combine_group(
        self,
        operator: str,
        group: "MetadataFilterBuilder",
        combine: Callable[[Optional[Expr], Optional[Expr]], Optional[Expr]],
    ) -> "MetadataFilterBuilder":
        if group.error is not None:
            return self._with_error(group.error)
        if not group.has_condition:
            return self._with_error(f"empty '{operator}' filter group is not allowed")
        return replace(self, expr=combine(self.expr, group.expr), has_condition=True)

    def _negate_non_empty_group(self) -> "MetadataFilterBuilder":
        if self.expr is None:
            return self
        return replace(self, expr=negate(self.expr))

    def _with_error(self, message: str) -> "MetadataFilterBuilder":
        if self.error is not None:
            return self
        return replace(self, error=message)


def _and_optional(lhs: Optional[Expr], rhs: Optional[Expr]) -> Optional[Expr]:
    if lhs is None:
        return rhs
    if rhs is None:
        return lhs
    return and_(lhs, rhs)


def _or_optional(lhs: Optional[Expr], rhs: Optional[Expr]) -> Optional[Expr]:
    if lhs is None:
        return rhs
    if rhs is None:
        return lhs
    return or_(lhs, rhs)