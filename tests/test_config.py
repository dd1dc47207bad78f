"""Tests for the optimizer configuration system."""

import os

import pytest

from rcreg._config import get_optimizer, set_optimizer


class TestGetOptimizer:
    """Tests for get_optimizer() resolution order."""

    def setup_method(self):
        """Reset state before each test."""
        import rcreg._config as _cfg

        _cfg._optimizer_override = None
        os.environ.pop("RCREG_OPTIMIZER", None)

    def teardown_method(self):
        """Reset state after each test."""
        import rcreg._config as _cfg

        _cfg._optimizer_override = None
        os.environ.pop("RCREG_OPTIMIZER", None)

    def test_default_is_auto(self):
        assert get_optimizer() == "auto"

    def test_env_var_overrides_auto(self):
        os.environ["RCREG_OPTIMIZER"] = "lbfgs"
        assert get_optimizer() == "lbfgs"

    def test_env_var_case_insensitive(self):
        os.environ["RCREG_OPTIMIZER"] = "Powell"
        assert get_optimizer() == "powell"

    def test_unknown_env_var_ignored(self):
        os.environ["RCREG_OPTIMIZER"] = "adam"
        assert get_optimizer() == "auto"

    def test_programmatic_override_wins_over_env(self):
        os.environ["RCREG_OPTIMIZER"] = "lbfgs"
        set_optimizer("nm")
        assert get_optimizer() == "nm"

    def test_auto_restores_default(self):
        set_optimizer("bfgs")
        assert get_optimizer() == "bfgs"
        set_optimizer("auto")
        assert get_optimizer() == "auto"


class TestSetOptimizer:
    """Tests for set_optimizer() validation."""

    def setup_method(self):
        import rcreg._config as _cfg

        _cfg._optimizer_override = None

    def teardown_method(self):
        import rcreg._config as _cfg

        _cfg._optimizer_override = None

    def test_accepts_valid_names(self):
        for name in ("auto", "lbfgs", "bfgs", "cg", "nm", "powell"):
            set_optimizer(name)  # should not raise

    def test_case_insensitive(self):
        set_optimizer("LBFGS")
        assert get_optimizer() == "lbfgs"

    def test_rejects_invalid_name(self):
        with pytest.raises(ValueError, match="Unknown optimizer"):
            set_optimizer("newton-raphson")

    def test_exported_from_package(self):
        import rcreg

        assert rcreg.get_optimizer is get_optimizer
        assert rcreg.set_optimizer is set_optimizer
