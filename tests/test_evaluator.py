"""Tests for conditional evaluation and schema visibility."""

import pytest

from formflow.conditions import Visibility, compute_visibility, evaluate, values_equal
from formflow.schemas import ConditionalRule, load_schema


def _rule(field="x", operator="equals", value=None, **extra):
    return ConditionalRule(field=field, operator=operator, value=value, **extra)


def _composite(logic, *rules):
    return ConditionalRule(logic=logic, rules=list(rules))


# -- operand semantics ---------------------------------------------------------


class TestValuesEqual:
    def test_booleans_never_equal_numbers(self):
        assert not values_equal(True, 1)
        assert not values_equal(0, False)
        assert values_equal(True, True)

    def test_numbers_compare_across_types(self):
        assert values_equal(1, 1.0)

    def test_deep_equality(self):
        assert values_equal(["a", 1], ["a", 1])
        assert not values_equal(["a", 1], ["a", True])
        assert values_equal({"k": [1]}, {"k": [1.0]})

    def test_strings_do_not_equal_numbers(self):
        assert not values_equal("1", 1)


# -- leaf operators ------------------------------------------------------------


class TestEvaluateLeaf:
    def test_none_rule_is_visible(self):
        assert evaluate(None, {}) is True

    def test_equals(self):
        assert evaluate(_rule(value="yes"), {"x": "yes"})
        assert not evaluate(_rule(value="yes"), {"x": "no"})
        assert not evaluate(_rule(value=True), {"x": 1})

    def test_not_equals_on_missing_answer(self):
        assert evaluate(_rule(operator="not_equals", value="yes"), {})

    def test_equals_on_lists(self):
        assert evaluate(_rule(value=["a", "b"]), {"x": ["a", "b"]})
        assert not evaluate(_rule(value=["a", "b"]), {"x": ["b", "a"]})

    @pytest.mark.parametrize(
        "answer, expected",
        [(10, True), ("10", True), (5, False), ("abc", False), (None, False), (True, False)],
    )
    def test_greater_than(self, answer, expected):
        assert evaluate(_rule(operator="greater_than", value=5), {"x": answer}) is expected

    def test_less_than(self):
        assert evaluate(_rule(operator="less_than", value="18"), {"x": 17})
        assert not evaluate(_rule(operator="less_than", value="adult"), {"x": 17})

    def test_contains(self):
        assert evaluate(_rule(operator="contains", value="b"), {"x": ["a", "b"]})
        assert evaluate(_rule(operator="contains", value="ell"), {"x": "hello"})
        assert evaluate(_rule(operator="contains", value=2), {"x": 123})
        assert not evaluate(_rule(operator="contains", value="z"), {"x": ["a"]})

    def test_missing_answer_is_an_empty_container(self):
        assert not evaluate(_rule(operator="contains", value="a"), {})
        assert evaluate(_rule(operator="not_contains", value="a"), {})

    def test_unknown_field_is_false(self):
        rule = _rule(field="ghost", operator="not_equals", value="x")
        assert evaluate(rule, {}, known_fields={"x"}) is False
        assert evaluate(rule, {}) is True

    def test_never_raises_on_odd_operands(self):
        assert evaluate(_rule(operator="greater_than", value={"a": 1}), {"x": object()}) is False
        assert evaluate(_rule(operator="contains", value=None), {"x": 5}) is False


# -- composite rules -----------------------------------------------------------


class TestEvaluateComposite:
    def test_and_is_default(self):
        rule = ConditionalRule(rules=[_rule(value=1), _rule(field="y", value=2)])
        assert evaluate(rule, {"x": 1, "y": 2})
        assert not evaluate(rule, {"x": 1, "y": 3})

    def test_or(self):
        rule = _composite("or", _rule(value=1), _rule(field="y", value=2))
        assert evaluate(rule, {"x": 0, "y": 2})
        assert not evaluate(rule, {"x": 0, "y": 0})

    def test_nested(self):
        rule = _composite(
            "and",
            _rule(operator="greater_than", value=17),
            _composite("or", _rule(field="y", value="a"), _rule(field="y", value="b")),
        )
        assert evaluate(rule, {"x": 18, "y": "b"})
        assert not evaluate(rule, {"x": 18, "y": "c"})

    def test_composite_ignores_own_leaf_fields(self):
        rule = ConditionalRule(field="x", operator="equals", value=999, rules=[_rule(value=1)])
        assert evaluate(rule, {"x": 1})


# -- schema visibility ---------------------------------------------------------


def _make_schema():
    return load_schema(
        {
            "id": "visibility",
            "title": "Visibility",
            "sections": [
                {
                    "id": "s-main",
                    "title": "Main",
                    "fields": [
                        {"id": "f1", "name": "age", "label": "Age", "type": "number"},
                        {"id": "f2", "name": "guardian", "label": "Guardian", "type": "text",
                         "conditional": {"field": "age", "operator": "less_than", "value": 18}},
                        {"id": "f3", "name": "internal", "label": "Internal", "type": "text",
                         "hidden": True},
                    ],
                },
                {
                    "id": "s-work",
                    "title": "Work",
                    "conditional": {"field": "age", "operator": "greater_than", "value": 15},
                    "fields": [
                        {"id": "f4", "name": "employer", "label": "Employer", "type": "text"},
                        {"id": "f5", "name": "salary", "label": "Salary", "type": "number",
                         "conditional": {"field": "employer", "operator": "not_equals", "value": ""}},
                    ],
                },
            ],
        }
    )


class TestComputeVisibility:
    def test_initial_snapshot(self):
        visibility = compute_visibility(_make_schema(), {})
        assert visibility.visible_section_ids == ["s-main"]
        assert visibility.visible_field_names == ["age"]
        assert "internal" in visibility.hidden_field_names

    def test_hidden_section_hides_its_fields(self):
        visibility = compute_visibility(_make_schema(), {"age": 10, "employer": "Acme"})
        assert not visibility.is_section_visible("s-work")
        assert not visibility.is_field_visible("employer")
        assert not visibility.is_field_visible("salary")
        assert visibility.is_field_visible("guardian")

    def test_field_conditional_inside_visible_section(self):
        visibility = compute_visibility(_make_schema(), {"age": 16, "employer": "Acme"})
        assert visibility.visible_field_names == ["age", "guardian", "employer", "salary"]

    def test_static_hidden_never_visible(self):
        visibility = compute_visibility(_make_schema(), {"internal": "x"})
        assert not visibility.is_field_visible("internal")

    def test_pure_function_of_snapshot(self):
        schema = _make_schema()
        answers = {"age": 30, "employer": "Acme"}
        first = compute_visibility(schema, answers)
        compute_visibility(schema, {"age": 3})
        second = compute_visibility(schema, answers)
        assert first == second
        assert answers == {"age": 30, "employer": "Acme"}

    def test_unknown_names_are_hidden(self):
        visibility = Visibility(sections={}, fields={})
        assert not visibility.is_field_visible("anything")
        assert not visibility.is_section_visible("anything")
