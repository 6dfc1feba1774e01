"""Tests for predefined rules."""

import pytest

from patients import Product
from validoctor.catalog import (
    all_or_none_set,
    at_most_one_set,
    collection_max_size,
    collection_not_empty,
    count_set,
    exactly_one_set,
    is_null,
    not_null,
    number_in_range,
    one_of,
    positive,
    string_matches,
    string_max_length,
    string_not_empty,
)
from validoctor.exceptions import PredicateError


class TestValueRules:
    """Single-value catalog rules."""

    @pytest.mark.parametrize("rule, passing, failing", [
        (not_null(), 0, None),
        (is_null(), None, ""),
        (string_not_empty(), "x", "  \t"),
        (string_max_length(3), "abc", "abcd"),
        (string_matches(r"[A-Z]{3}-\d+"), "SKU-12", "sku-12"),
        (number_in_range(1, 5), 5, 6),
        (positive(), 0.1, 0),
        (collection_not_empty(), [1], []),
        (collection_max_size(2), {1, 2}, [1, 2, 3]),
        (one_of(["S", "M", "L"]), "M", "XL"),
    ])
    def test_pass_and_fail(self, rule, passing, failing):
        assert rule.evaluate(passing) is None
        assert rule.evaluate(failing).invalid_value == failing

    @pytest.mark.parametrize("rule", [
        string_not_empty(),
        string_max_length(3),
        string_matches("x"),
        number_in_range(1, 5),
        positive(),
        collection_not_empty(),
        collection_max_size(1),
        one_of([1]),
    ])
    def test_none_passes_non_nullity_rules(self, rule):
        assert rule.evaluate(None) is None

    def test_names_and_params(self):
        ailment = number_in_range(1, 5).evaluate(0)

        assert ailment.name == "NUMBER_OUT_OF_RANGE"
        assert ailment.params == {"min": 1, "max": 5}
        assert string_max_length(3).evaluate("abcd").params == {"maxLength": 3}

    def test_empty_string_name(self):
        assert string_not_empty().evaluate("").name == "STRING_EMPTY"

    def test_range_bounds_are_checked(self):
        with pytest.raises(ValueError):
            number_in_range(5, 1)

    def test_wrong_type_is_fatal(self):
        with pytest.raises(PredicateError):
            number_in_range(1, 5).evaluate("three")


class TestReducers:
    """Reducer catalog rules."""

    def test_count_set(self):
        assert count_set([None, 0, "", None]) == 2

    def test_at_most_one_set(self):
        rule = at_most_one_set("discount_percent", "discount_amount")

        assert rule.evaluate(Product(discount_percent=1.0)) is None
        assert rule.evaluate(Product(discount_percent=1.0, discount_amount=2.0)).name == "MORE_THAN_ONE_SET"

    def test_exactly_one_set(self):
        rule = exactly_one_set("discount_percent", "coupon_code")

        assert rule.evaluate(Product(coupon_code="X")) is None
        assert rule.evaluate(Product()).invalid_value == 0

    def test_all_or_none_set(self):
        rule = all_or_none_set("sku_id", "nutrition_facts")

        assert rule.evaluate(Product()) is None
        assert rule.evaluate(Product(sku_id="S")).name == "PARTIALLY_SET"
