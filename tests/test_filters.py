"""Tests for the $filter compiler and FilterBuilder."""

from __future__ import annotations

import pytest

from reso_odata import (
    FilterBuilder,
    FilterCompileError,
    FilterExpression,
    FilterOperator,
    InvalidFilterError,
    compile_filter,
)
from reso_odata.operators import LOGICAL_OPERATORS, resolve_operator

# -- Leaves -------------------------------------------------------------------


@pytest.mark.parametrize(
    ("op", "val", "expected"),
    [
        ("eq", "Austin", "City eq 'Austin'"),
        ("==", "Austin", "City eq 'Austin'"),
        ("ne", "Austin", "City ne 'Austin'"),
        ("contains", "Aus", "contains(City,'Aus')"),
        ("startswith", "Au", "startswith(City,'Au')"),
        ("ends_with", "in", "endswith(City,'in')"),
        ("in", ["Austin", "Dallas"], "City in ('Austin','Dallas')"),
        ("not_in", ["Austin"], "not (City in ('Austin'))"),
        ("is_null", None, "City eq null"),
        ("is_not_null", None, "City ne null"),
    ],
)
def test_leaf(op: str, val, expected: str):
    assert compile_filter({"op": op, "attr": "City", "val": val}).render() == expected


def test_numeric_comparison():
    expr = compile_filter({"op": ">=", "attr": "ListPrice", "val": 300000})
    assert str(expr) == "ListPrice ge 300000"


def test_between():
    expr = compile_filter({"op": "between", "attr": "ListPrice", "val": [1, 2]})
    assert expr.render() == "ListPrice ge 1 and ListPrice le 2"


def test_between_requires_two_values():
    with pytest.raises(FilterCompileError):
        compile_filter({"op": "between", "attr": "ListPrice", "val": [1]})


def test_in_requires_values():
    with pytest.raises(FilterCompileError):
        compile_filter({"op": "in", "attr": "City", "val": []})


def test_missing_attr():
    with pytest.raises(FilterCompileError):
        compile_filter({"op": "eq", "val": 1})


def test_unknown_operator():
    with pytest.raises(FilterCompileError):
        compile_filter({"op": "like", "attr": "City", "val": "A%"})


def test_resolve_operator():
    assert resolve_operator("GTE") is FilterOperator.GE
    assert resolve_operator(FilterOperator.OR) is FilterOperator.OR
    assert resolve_operator("nope") is None


# -- Composites ---------------------------------------------------------------


def test_nested_or_is_parenthesised():
    expr = compile_filter(
        {
            "op": "and",
            "conditions": [
                {
                    "op": "or",
                    "conditions": [
                        {"op": "eq", "attr": "City", "val": "Austin"},
                        {"op": "eq", "attr": "City", "val": "Dallas"},
                    ],
                },
                {"op": "eq", "attr": "StandardStatus", "val": "Active"},
            ],
        }
    )
    assert expr.render() == (
        "(City eq 'Austin' or City eq 'Dallas') and StandardStatus eq 'Active'"
    )


def test_not_inside_and():
    expr = compile_filter(
        {
            "op": "and",
            "conditions": [
                {"op": "not", "conditions": [{"op": "eq", "attr": "City", "val": "Austin"}]},
                {"op": "gt", "attr": "ListPrice", "val": 1},
            ],
        }
    )
    assert expr.render() == "not (City eq 'Austin') and ListPrice gt 1"


def test_logical_operators():
    assert LOGICAL_OPERATORS == {FilterOperator.AND, FilterOperator.OR, FilterOperator.NOT}


def test_single_condition_group_is_unwrapped():
    expr = compile_filter(
        {"op": "or", "conditions": [{"op": "eq", "attr": "City", "val": "Austin"}]}
    )
    assert expr.render() == "City eq 'Austin'"


def test_empty_group_rejected():
    with pytest.raises(FilterCompileError):
        compile_filter({"op": "and", "conditions": []})


def test_not_requires_one_condition():
    with pytest.raises(FilterCompileError):
        compile_filter({"op": "not", "conditions": []})


def test_raw_node():
    assert compile_filter({"raw": " City eq 'Austin' "}).render() == "City eq 'Austin'"


# -- Builder ------------------------------------------------------------------


def test_builder_implicit_and():
    expr = (
        FilterBuilder()
        .where("City", "eq", "Austin")
        .where("ListPrice", "gt", 300000)
        .build()
    )
    assert isinstance(expr, FilterExpression)
    assert expr.render() == "City eq 'Austin' and ListPrice gt 300000"


def test_builder_or_group():
    expr = (
        FilterBuilder()
        .or_group()
        .where("City", "eq", "Austin")
        .where("City", "eq", "Dallas")
        .end_group()
        .where("StandardStatus", "eq", "Active")
        .build()
    )
    assert expr.render() == (
        "(City eq 'Austin' or City eq 'Dallas') and StandardStatus eq 'Active'"
    )


def test_builder_not_group():
    expr = FilterBuilder().not_group().where("City", "eq", "Austin").end_group().build()
    assert expr.render() == "not (City eq 'Austin')"


def test_builder_between_inside_and_is_parenthesised():
    expr = (
        FilterBuilder()
        .where("ListPrice", "between", (100000, 200000))
        .where("City", "eq", "Austin")
        .build()
    )
    assert expr.render() == (
        "(ListPrice ge 100000 and ListPrice le 200000) and City eq 'Austin'"
    )


def test_builder_raw_inside_and_is_parenthesised():
    expr = FilterBuilder().raw("A eq 1 or B eq 2").where("City", "eq", "X").build()
    assert expr.render() == "(A eq 1 or B eq 2) and City eq 'X'"


def test_builder_rejects_blank_raw():
    with pytest.raises(InvalidFilterError):
        FilterBuilder().raw("  ")


def test_builder_rejects_unknown_operator():
    with pytest.raises(FilterCompileError):
        FilterBuilder().where("City", "like", "A%")


def test_builder_end_group_without_open_group():
    with pytest.raises(FilterCompileError):
        FilterBuilder().end_group()


def test_builder_empty_group():
    with pytest.raises(FilterCompileError):
        FilterBuilder().and_group().end_group()


def test_builder_unclosed_group():
    with pytest.raises(FilterCompileError, match="still open"):
        FilterBuilder().or_group().where("City", "eq", "Austin").build()


def test_builder_empty():
    with pytest.raises(FilterCompileError):
        FilterBuilder().build()


def test_builder_to_dict_and_reset():
    builder = FilterBuilder().where("City", "eq", "Austin")
    assert builder.to_dict() == {"op": "eq", "attr": "City", "val": "Austin"}
    with pytest.raises(FilterCompileError):
        builder.reset().build()


# -- Expression operators -----------------------------------------------------


def test_expression_combinators():
    a = FilterExpression("City eq 'Austin'")
    b = FilterExpression("ListPrice gt 1")
    assert (a & b).render() == "(City eq 'Austin') and (ListPrice gt 1)"
    assert (a | "Pool eq true").render() == "(City eq 'Austin') or (Pool eq true)"
    assert (~a).render() == "not (City eq 'Austin')"
