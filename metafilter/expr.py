"""Expression trees that combine metadata conditions with boolean logic."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from .condition import Condition
from .policies import FilterMatchOptions


@dataclass(frozen=True)
class ConditionExpr:
    """A leaf expression holding one condition."""

    condition: Condition

    def matches(self, meta: Mapping[str, Any], options: FilterMatchOptions) -> bool:
        """Evaluate the wrapped condition against ``meta``."""
        return self.condition.matches(
            meta,
            options.missing_key_policy,
            options.number_comparison_policy,
        )


@dataclass(frozen=True)
class AndExpr:
    """Matches when every child expression matches."""

    children: tuple

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def matches(self, meta: Mapping[str, Any], options: FilterMatchOptions) -> bool:
        """Return whether all children match ``meta``."""
        return all(child.matches(meta, options) for child in self.children)


@dataclass(frozen=True)
class OrExpr:
    """Matches when at least one child expression matches."""

    children: tuple

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def matches(self, meta: Mapping[str, Any], options: FilterMatchOptions) -> bool:
        """Return whether any child matches ``meta``."""
        return any(child.matches(meta, options) for child in self.children)


@dataclass(frozen=True)
class NotExpr:
    """Negates its inner expression."""

    expr: "Expr"

    def matches(self, meta: Mapping[str, Any], options: FilterMatchOptions) -> bool:
        """Return the negation of the inner expression's result."""
        return not self.expr.matches(meta, options)


@dataclass(frozen=True)
class FalseExpr:
    """An expression that never matches."""

    def matches(self, meta: Mapping[str, Any], options: FilterMatchOptions) -> bool:
        """Always return ``False``."""
        return False


Expr = Union[ConditionExpr, AndExpr, OrExpr, NotExpr, FalseExpr]


def and_(lhs: Expr, rhs: Expr) -> Expr:
    """Combine two expressions with AND, flattening nested AND nodes."""
    if isinstance(lhs, FalseExpr) or isinstance(rhs, FalseExpr):
        return FalseExpr()
    children: list = []
    for expr in (lhs, rhs):
        if isinstance(expr, AndExpr):
            children.extend(expr.children)
        else:
            children.append(expr)
    return AndExpr(tuple(children))


def or_(lhs: Expr, rhs: Expr) -> Expr:
    """Combine two expressions with OR, flattening nested OR nodes."""
    if isinstance(lhs, FalseExpr):
        return rhs
    if isinstance(rhs, FalseExpr):
        return lhs
    children: list = []
    for expr in (lhs, rhs):
        if isinstance(expr, OrExpr):
            children.extend(expr.children)
        else:
            children.append(expr)
    return OrExpr(tuple(children))


def negate(expr: Optional[Expr]) -> Optional[Expr]:
    """Negate an optional expression, where ``None`` means match-all."""
    if expr is None:
        return FalseExpr()
    if isinstance(expr, FalseExpr):
        return None
    if isinstance(expr, NotExpr):
        return expr.expr
    return NotExpr(expr)


def iter_conditions(expr: Optional[Expr]) -> Iterator[Condition]:
    """Yield every leaf condition of ``expr`` in depth-first order."""
    if expr is None or isinstance(expr, FalseExpr):
        return
    if isinstance(expr, ConditionExpr):
        yield expr.condition
    elif isinstance(expr, (AndExpr, OrExpr)):
        for child in expr.children:
            yield from iter_conditions(child)
    elif isinstance(expr, NotExpr):
        yield from iter_conditions(expr.expr)