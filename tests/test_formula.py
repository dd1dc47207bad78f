"""Tests for random-effects formula construction."""

import pytest

from rcreg.exceptions import InvalidArgument
from rcreg.formula import (
    combine_formula,
    engine_re_formula,
    random_term,
    random_terms,
    validate_random,
)


class TestRandomTerm:
    def test_intercept(self):
        assert random_term("intercept", "id", "t") == "(1 | id)"

    def test_slope(self):
        assert random_term("slope", "id", "t") == "(0 + t | id)"

    def test_intercept_slope(self):
        assert random_term("intercept_slope", "id", "t") == "(1 + t | id)"

    def test_uses_given_names(self):
        assert random_term("intercept_slope", "subject", "week") == "(1 + week | subject)"

    def test_rejects_unknown_structure(self):
        with pytest.raises(InvalidArgument, match="Unknown random structure"):
            random_term("quadratic", "id", "t")


class TestCombineFormula:
    def test_appends_term(self):
        assert combine_formula("y ~ time + x1", "(1 | id)") == "y ~ time + x1 + (1 | id)"


class TestEngineReFormula:
    @pytest.mark.parametrize(
        ("random", "expected"),
        [("intercept", "1"), ("slope", "0 + t"), ("intercept_slope", "1 + t")],
    )
    def test_translation(self, random, expected):
        assert engine_re_formula(random, "t") == expected

    def test_rejects_unknown_structure(self):
        with pytest.raises(InvalidArgument):
            engine_re_formula("none", "t")


class TestRandomTerms:
    def test_intercept_first(self):
        assert random_terms("intercept_slope", "week") == ["(Intercept)", "week"]

    def test_slope_only(self):
        assert random_terms("slope", "week") == ["week"]


class TestValidateRandom:
    def test_returns_valid_keyword(self):
        assert validate_random("slope") == "slope"

    def test_invalid_is_value_error(self):
        # InvalidArgument subclasses ValueError
        with pytest.raises(ValueError):
            validate_random("Slope")
