import pytest

from metafilter.builder import InvalidFilterExpressionError, MetadataFilterBuilder
from metafilter.condition import Operator
from metafilter.expr import AndExpr, OrExpr
from metafilter.filter import MetadataFilter
from metafilter.policies import (
    FilterMatchOptions,
    MissingKeyPolicy,
    NumberComparisonPolicy,
)


def sample():
    return {"status": "active", "score": 42, "verified": True, "tag": "rust"}


def test_builder_default_builds_match_all_filter():
    f = MetadataFilterBuilder().build()
    assert f.matches({}) is True


def test_and_predicates_all_match():
    f = MetadataFilter.builder().eq("status", "active").and_ge("score", 10).and_exists("verified")
    assert f.build().matches(sample()) is True


def test_and_predicates_one_fails():
    f = MetadataFilter.builder().eq("status", "active").and_gt("score", 100)
    assert f.build().matches(sample()) is False


def test_or_predicates_one_matches():
    f = MetadataFilter.builder().eq("status", "inactive").or_eq("status", "active")
    assert f.build().matches(sample()) is True


def test_or_predicates_all_fail():
    f = MetadataFilter.builder().eq("status", "inactive").or_eq("status", "pending")
    assert f.build().matches(sample()) is False


def test_not_inverts_expression_result():
    yes = MetadataFilter.builder().eq("status", "active").negate()
    no = MetadataFilter.builder().eq("status", "inactive").negate()
    assert yes.build().matches(sample()) is False
    assert no.build().matches(sample()) is True


def test_invert_operator_on_builder():
    f = ~MetadataFilter.builder().eq("status", "active")
    assert f.build().matches(sample()) is False


def test_empty_filter_matches_anything():
    f = MetadataFilter.builder().build()
    assert f.matches(sample()) is True
    assert f.matches({}) is True


def test_negated_empty_filter_matches_nothing():
    f = MetadataFilter.builder().negate()
    assert f.build().matches(sample()) is False
    assert f.build().matches({}) is False


def test_group_composition_works():
    f = MetadataFilter.builder().eq("status", "active").and_group(
        lambda g: g.ge("score", 80).or_eq("tag", "rust")
    )
    assert f.build().matches(sample()) is True


def test_negated_group_composition_works():
    f = MetadataFilter.builder().eq("status", "active").and_not(
        lambda g: g.ge("score", 80).or_eq("tag", "java")
    )
    assert f.build().matches(sample()) is True


def test_missing_key_policy_can_be_configured_on_filter():
    f = MetadataFilter.builder().ne("missing", "x").missing_key_policy(MissingKeyPolicy.NO_MATCH)
    assert f.build().matches(sample()) is False


def test_number_comparison_policy_can_be_configured_on_filter():
    m = {"n": 9_007_199_254_740_993}
    conservative = MetadataFilter.builder().gt("n", 0.5)
    assert conservative.build().matches(m) is False
    approximate = conservative.number_comparison_policy(NumberComparisonPolicy.APPROXIMATE)
    assert approximate.build().matches(m) is True
    assert conservative.build().matches(m) is False


def test_options_round_trip_works():
    options = FilterMatchOptions(
        missing_key_policy=MissingKeyPolicy.NO_MATCH,
        number_comparison_policy=NumberComparisonPolicy.APPROXIMATE,
    )
    f = MetadataFilter.builder().eq("status", "active").with_options(options).build()
    assert f.options == options


def test_filter_constructors_and_option_setters_work():
    options = FilterMatchOptions(
        missing_key_policy=MissingKeyPolicy.NO_MATCH,
        number_comparison_policy=NumberComparisonPolicy.APPROXIMATE,
    )
    assert MetadataFilter.all().matches(sample()) is True
    assert MetadataFilter.none().matches(sample()) is False
    assert (~MetadataFilter.none()).matches(sample()) is True

    strict = (
        MetadataFilter.builder()
        .ne("missing", "x")
        .build()
        .with_missing_key_policy(MissingKeyPolicy.NO_MATCH)
    )
    assert strict.matches(sample()) is False

    approximate = (
        MetadataFilter.builder()
        .gt("score", 0.5)
        .build()
        .with_number_comparison_policy(NumberComparisonPolicy.APPROXIMATE)
        .with_options(options)
    )
    assert approximate.options == options


@pytest.mark.parametrize(
    "extend",
    [
        lambda b: b.or_ne("status", "inactive"),
        lambda b: b.or_lt("score", 50),
        lambda b: b.or_le("score", 42),
        lambda b: b.or_gt("score", 40),
        lambda b: b.or_ge("score", 42),
        lambda b: b.or_in_set("status", ["active", "pending"]),
        lambda b: b.or_not_in_set("status", ["pending"]),
        lambda b: b.or_exists("verified"),
        lambda b: b.or_not_exists("missing"),
    ],
)
def test_or_operator_methods_cover_each_predicate(extend):
    builder = extend(MetadataFilter.builder().eq("status", "inactive"))
    assert builder.build().matches(sample()) is True


@pytest.mark.parametrize(
    "extend",
    [
        lambda b: b.or_ne("status", "active"),
        lambda b: b.or_lt("score", 42),
        lambda b: b.or_le("score", 41),
        lambda b: b.or_gt("score", 42),
        lambda b: b.or_ge("score", 43),
        lambda b: b.or_in_set("status", ["pending"]),
        lambda b: b.or_not_in_set("status", ["active"]),
        lambda b: b.or_exists("missing"),
        lambda b: b.or_not_exists("verified"),
    ],
)
def test_or_operator_methods_can_fail(extend):
    builder = extend(MetadataFilter.builder().eq("status", "inactive"))
    assert builder.build().matches(sample()) is False


def test_builder_aliases_preserve_expected_identities():
    meta = sample()
    assert MetadataFilter.builder().not_in_set("status", ["inactive"]).build().matches(meta) is True
    assert (
        MetadataFilter.builder().or_group(lambda g: g.eq("status", "active")).build().matches(meta)
        is True
    )
    assert MetadataFilter.builder().negate().or_eq("status", "active").build().matches(meta) is True


def test_short_forms_match_and_forms():
    short = (
        MetadataFilter.builder()
        .eq("status", "active")
        .ne("status", "x")
        .lt("score", 100)
        .le("score", 42)
        .gt("score", 1)
        .ge("score", 42)
        .in_set("tag", ["rust"])
        .exists("verified")
        .not_exists("missing")
        .build()
    )
    long = (
        MetadataFilter.builder()
        .and_eq("status", "active")
        .and_ne("status", "x")
        .and_lt("score", 100)
        .and_le("score", 42)
        .and_gt("score", 1)
        .and_ge("score", 42)
        .and_in_set("tag", ["rust"])
        .and_exists("verified")
        .and_not_exists("missing")
        .build()
    )
    assert short == long
    assert short.matches(sample()) is True
    ops = [c.op for c in short.conditions()]
    assert ops == [
        Operator.EQUAL,
        Operator.NOT_EQUAL,
        Operator.LESS,
        Operator.LESS_EQUAL,
        Operator.GREATER,
        Operator.GREATER_EQUAL,
        Operator.IN,
        Operator.EXISTS,
        Operator.NOT_EXISTS,
    ]


@pytest.mark.parametrize(
    "operator, builder",
    [
        ("and", MetadataFilter.builder().and_group(lambda g: g)),
        ("or", MetadataFilter.builder().or_group(lambda g: g)),
        ("and_not", MetadataFilter.builder().and_not(lambda g: g)),
        ("or_not", MetadataFilter.builder().or_not(lambda g: g)),
        ("and", MetadataFilter.builder().and_group(lambda g: g.negate())),
    ],
)
def test_empty_group_build_returns_error(operator, builder):
    with pytest.raises(InvalidFilterExpressionError) as info:
        builder.build()
    assert f"empty '{operator}'" in info.value.message
    assert str(info.value) == f"empty '{operator}' filter group is not allowed"


def test_first_error_is_kept_and_nested_errors_propagate():
    builder = (
        MetadataFilter.builder()
        .or_group(lambda g: g.and_not(lambda h: h))
        .and_group(lambda g: g)
        .eq("status", "active")
    )
    with pytest.raises(InvalidFilterExpressionError, match="empty 'and_not'"):
        builder.build()


def test_chained_or_expressions_are_flattened():
    f = (
        MetadataFilter.builder()
        .eq("status", "inactive")
        .or_eq("tag", "java")
        .or_eq("status", "active")
        .build()
    )
    assert f.matches(sample()) is True
    assert isinstance(f.expr, OrExpr)
    assert len(f.expr.children) == 3


def test_chained_and_expressions_are_flattened():
    f = MetadataFilter.builder().eq("a", 1).eq("b", 2).eq("c", 3).build()
    assert isinstance(f.expr, AndExpr)
    assert [c.key for c in f.conditions()] == ["a", "b", "c"]


def test_builder_is_immutable():
    base = MetadataFilter.builder().eq("status", "active")
    extended = base.and_gt("score", 100)
    assert base.build().matches(sample()) is True
    assert extended.build().matches(sample()) is False


def test_group_policies_are_ignored():
    f = MetadataFilter.builder().and_group(
        lambda g: g.ne("missing", "x").missing_key_policy(MissingKeyPolicy.NO_MATCH)
    )
    built = f.build()
    assert built.options == FilterMatchOptions()
    assert built.matches(sample()) is True