"""Policies that control how metadata filters are evaluated."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class MissingKeyPolicy(enum.Enum):
    """How negative predicates (``ne`` and ``not_in``) treat a missing key.

    Other predicates are unaffected: ``eq`` and the range predicates need the
    key to be present, and ``exists``/``not_exists`` check presence directly.
    """

    MATCH = "Match"
    """A missing key satisfies negative predicates (the default)."""

    NO_MATCH = "NoMatch"
    """A missing key does not satisfy negative predicates."""

    def matches_negative_predicates(self) -> bool:
        """Return whether a missing key satisfies a negative predicate."""
        return self is MissingKeyPolicy.MATCH


class NumberComparisonPolicy(enum.Enum):
    """How comparisons between different numeric representations behave."""

    CONSERVATIVE = "Conservative"
    """Keep precision; risky mixed comparisons are incomparable (the default)."""

    APPROXIMATE = "Approximate"
    """Fall back to lossy float comparison where conservative mode gives up."""


@dataclass(frozen=True)
class FilterMatchOptions:
    """Match policies used when evaluating a metadata filter."""

    missing_key_policy: MissingKeyPolicy = MissingKeyPolicy.MATCH
    number_comparison_policy: NumberComparisonPolicy = NumberComparisonPolicy.CONSERVATIVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "missing_key_policy", MissingKeyPolicy(self.missing_key_policy))
        object.__setattr__(
            self,
            "number_comparison_policy",
            NumberComparisonPolicy(self.number_comparison_policy),
        )