# tests/core/test_exit.py
"""
Exit decider tests - definedness and the fail flags
"""

import pytest

from opaquery.core.exit import ExitSignal, decide_exit
from opaquery.core.value import is_empty


@pytest.mark.parametrize("value", [None, {}, [], ()])
def test_empty_values(value):
    assert is_empty(value) is True


@pytest.mark.parametrize("value", [False, 0, 0.0, "", {"allow": False}, [None]])
def test_defined_values(value):
    assert is_empty(value) is False


class TestDecideExit:
    def test_fail_defined_with_defined_result(self):
        assert decide_exit({"allow": True}, True, False) is ExitSignal.NON_ZERO_EXIT

    def test_fail_defined_with_empty_mapping(self):
        assert decide_exit({}, True, False) is ExitSignal.PROCEED

    def test_fail_undefined_with_null(self):
        assert decide_exit(None, False, True) is ExitSignal.NON_ZERO_EXIT

    def test_fail_undefined_with_defined_result(self):
        assert decide_exit({"allow": True}, False, True) is ExitSignal.PROCEED

    def test_false_is_defined(self):
        assert decide_exit(False, True, False) is ExitSignal.NON_ZERO_EXIT

    def test_no_flags_always_proceed(self):
        assert decide_exit(None, False, False) is ExitSignal.PROCEED
        assert decide_exit({"allow": True}, False, False) is ExitSignal.PROCEED

    @pytest.mark.parametrize("result", [None, {}, {"allow": True}])
    def test_both_flags_always_exit_non_zero(self, result):
        assert decide_exit(result, True, True) is ExitSignal.NON_ZERO_EXIT

    def test_exit_codes(self):
        assert ExitSignal.PROCEED.exit_code == 0
        assert ExitSignal.NON_ZERO_EXIT.exit_code == 1
