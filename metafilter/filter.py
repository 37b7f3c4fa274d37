"""Immutable, composable filters over metadata mappings."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .condition import Condition
from .expr import Expr, FalseExpr, iter_conditions, negate
from .policies import FilterMatchOptions, MissingKeyPolicy, NumberComparisonPolicy


@dataclass(frozen=True)
class MetadataFilter:
    """A filter expression with the policies used to evaluate it.

    An ``expr`` of ``None`` matches every metadata mapping.
    """

    expr: Optional[Expr] = None
    options: FilterMatchOptions = field(default_factory=FilterMatchOptions)

    @staticmethod
    def builder():
        """Return a fresh builder for a metadata filter."""
        from .builder import MetadataFilterBuilder

        return MetadataFilterBuilder()

    @classmethod
    def all(cls) -> "MetadataFilter":
        """Return a filter that matches every metadata mapping."""
        return cls()

    @classmethod
    def none(cls) -> "MetadataFilter":
        """Return a filter that matches no metadata mapping."""
        return cls(expr=FalseExpr())

    def with_options(self, options: FilterMatchOptions) -> "MetadataFilter":
        """Return a copy with the given match options."""
        return replace(self, options=options)

    def with_missing_key_policy(self, missing_key_policy: MissingKeyPolicy) -> "MetadataFilter":
        """Return a copy with the given missing-key policy."""
        return replace(
            self, options=replace(self.options, missing_key_policy=missing_key_policy)
        )

    def with_number_comparison_policy(
        self, number_comparison_policy: NumberComparisonPolicy
    ) -> "MetadataFilter":
        """Return a copy with the given number-comparison policy."""
        return replace(
            self,
            options=replace(self.options, number_comparison_policy=number_comparison_policy),
        )

    def negate(self) -> "MetadataFilter":
        """Return a filter that matches exactly what this one does not."""
        return replace(self, expr=negate(self.expr))

    def __invert__(self) -> "MetadataFilter":
        return self.negate()

    def matches(self, meta: Mapping[str, Any]) -> bool:
        """Return whether ``meta`` satisfies this filter."""
        return self.matches_with_options(meta, self.options)

    def matches_with_options(self, meta: Mapping[str, Any], options: FilterMatchOptions) -> bool:
        """Return whether ``meta`` satisfies this filter under ``options``."""
        return self.expr is None or self.expr.matches(meta, options)

    def conditions(self) -> Iterator[Condition]:
        """Yield every leaf condition of this filter."""
        return iter_conditions(self.expr)