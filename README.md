# metafilter

Composable filter expressions over key/value metadata, with explicit
policies for missing keys and mixed numeric comparisons. Metadata is any
mapping from string keys to values; the package has no dependencies beyond
the standard library.

## Installation

```
pip install metafilter
```

## Building filters

Filters are assembled with `MetadataFilterBuilder` (from
`metafilter.builder`), usually obtained from `MetadataFilter.builder()`.
Builders are immutable: every method returns a new builder.

- Predicates without a connector (`eq`, `ne`, `lt`, `le`, `gt`, `ge`,
  `in_set`, `not_in_set`, `exists`, `not_exists`) are joined with AND, as
  are their `and_*` forms.
- The `or_*` forms (`or_eq`, `or_ge`, `or_in_set`, ...) join with OR.
- Grouped expressions are added with `and_group`, `or_group`, `and_not` and
  `or_not`, each taking a function that receives a fresh builder and returns
  it with the group's predicates. Policies set inside a group are ignored.
- `negate()` (or the `~` operator) inverts everything built so far.

```python
from metafilter.filter import MetadataFilter

meta = {"status": "active", "score": 42, "tag": "rust"}

# status == "active" AND (score >= 80 OR tag == "rust")
flt = (
    MetadataFilter.builder()
    .eq("status", "active")
    .and_group(lambda g: g.ge("score", 80).or_eq("tag", "rust"))
    .build()
)
assert flt.matches(meta)
```

An empty builder builds a filter that matches everything.
`MetadataFilter.all()` and `MetadataFilter.none()` give the two constant
filters, and `MetadataFilter.negate()` (or `~flt`) returns the inverse of a
filter.

Empty groups are rejected: `build()` raises `InvalidFilterExpressionError`
(from `metafilter.builder`, a subclass of `ValueError`) with a message such
as `empty 'and' filter group is not allowed`.

## How values are compared

- Numbers (`int`, `float`, `decimal.Decimal`) compare by numeric value, so
  `42` equals `42.0`. `bool` values are not numbers here: `True` equals only
  `True`, never `1`.
- Range predicates (`lt`, `le`, `gt`, `ge`) apply to two numbers or two
  strings; any other pairing never matches.
- `eq`, `in_set` and the range predicates need the key to be present;
  `exists` and `not_exists` test presence only.

The comparison helpers `values_equal` and `compare_values` in
`metafilter.condition` are public; `compare_values` returns `-1`, `0`, `1`,
or `None` when the values are incomparable.

## Match policies

`FilterMatchOptions` (from `metafilter.policies`) carries two policies:

- `MissingKeyPolicy.MATCH` (default) lets a missing key satisfy `ne` and
  `not_in_set`; `MissingKeyPolicy.NO_MATCH` makes them fail instead.
- `NumberComparisonPolicy.CONSERVATIVE` (default) treats integer/float and
  decimal/float comparisons that could lose precision as incomparable;
  `NumberComparisonPolicy.APPROXIMATE` falls back to a float comparison.

```python
from metafilter.policies import MissingKeyPolicy, NumberComparisonPolicy

strict = (
    MetadataFilter.builder()
    .ne("missing", "x")
    .missing_key_policy(MissingKeyPolicy.NO_MATCH)
    .build()
)
assert not strict.matches(meta)

big = {"n": 9_007_199_254_740_993}
loose = (
    MetadataFilter.builder()
    .gt("n", 0.5)
    .number_comparison_policy(NumberComparisonPolicy.APPROXIMATE)
    .build()
)
assert loose.matches(big)
```

Options can be set on a builder with `with_options`, `missing_key_policy`
and `number_comparison_policy`; on a built filter with `with_options`,
`with_missing_key_policy` and `with_number_comparison_policy`; or supplied
for a single evaluation with `matches_with_options`.

## Inspecting filters

A filter's `expr` is a tree of `ConditionExpr`, `AndExpr`, `OrExpr`,
`NotExpr` and `FalseExpr` nodes (from `metafilter.expr`), or `None` for
match-all. `MetadataFilter.conditions()` yields every leaf `Condition`
(with its `op`, an `Operator`, its `key`, and `value` or `values`), which is
useful for checking a filter against a known set of fields before running
it.

## What this package does not do

Filters are plain Python objects: the package has no serialized form for
them (no JSON or other wire format) and does not validate filters or
metadata against a schema. Those are left to the application.

## Running the tests

```
pip install -e .[test]
pytest
```