"""
Tests for the migration and gas optimization analyzers
"""

import re
import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from monad_migration_mcp.analyzer import (
    Analysis, Check, CheckResult, Importance, Polarity,
    all_of, analyze, contains, gas_checks, matches, migration_checks, negate,
)
from monad_migration_mcp.config import MonadConfig

FULLY_MIGRATED = """
const config = { chainId: 10143, gasPrice: 52000000000 };
const results = await Promise.all(calls.map((c) => multicall.aggregate3(c)));
const tx = await contract.transfer(to, amount, { gasLimit: 21000 });
"""


def _results(*passed):
    return Analysis(results=[CheckResult(name=f"c{i}", passed=p, description="") for i, p in enumerate(passed)])


class TestScore:
    """Test score rounding and edge cases."""

    def test_empty_check_list_scores_zero(self):
        """Test no checks gives a score of zero instead of dividing by zero."""
        assert analyze("anything", []).score == 0

    def test_all_passed(self):
        assert _results(True, True, True).score == 100

    def test_rounding(self):
        """Test the score is rounded to the nearest whole percent."""
        assert _results(True, False, False).score == 33
        assert _results(True, True, False).score == 67

    def test_half_rounds_up(self):
        """Test exact halves round up rather than to even."""
        assert _results(True, *[False] * 7).score == 13
        assert _results(True, True, True, *[False] * 5).score == 38

    def test_failed_and_by_importance(self):
        analysis = Analysis(results=[
            CheckResult(name="a", passed=True, description="", importance=Importance.HIGH),
            CheckResult(name="b", passed=False, description="", importance=Importance.MEDIUM),
        ])
        assert [r.name for r in analysis.failed] == ["b"]
        assert [r.name for r in analysis.by_importance(Importance.MEDIUM)] == ["b"]


class TestPolarity:
    """Test present/absent check evaluation."""

    def test_present_check(self):
        check = Check(name="x", predicate=contains("foo"))
        assert check.evaluate("a foo b")
        assert not check.evaluate("bar")

    def test_absent_check(self):
        """Test an absent check passes only when the pattern is missing."""
        check = Check(name="x", predicate=contains("foo"), polarity=Polarity.ABSENT)
        assert check.evaluate("bar")
        assert not check.evaluate("foo")

    def test_predicate_builders(self):
        assert contains("a", "b")("xbx")
        assert matches(r"gas\w+")("gasLimit")
        assert matches(r"batch", re.IGNORECASE)("BatchCall")
        assert all_of(contains("a"), negate(contains("b")))("a")
        assert not all_of(contains("a"), negate(contains("b")))("ab")


class TestMigrationChecks:
    """Test the rules behind validate_monad_migration."""

    def test_fully_migrated_code(self):
        """Test code carrying every marker scores 100."""
        analysis = analyze(FULLY_MIGRATED, migration_checks(MonadConfig()))
        assert analysis.total == 5
        assert analysis.score == 100
        assert analysis.failed == []

    def test_estimate_gas_fails_gas_limit_check(self):
        """Test gas estimation cancels out an explicit gas limit."""
        analysis = analyze(FULLY_MIGRATED + "await contract.estimateGas.transfer(to, amount);",
                           migration_checks(MonadConfig()))
        assert [r.name for r in analysis.failed] == ["Gas Limit Management"]
        assert analysis.score == 80

    def test_gwei_expression_counts_as_hardcoded(self):
        analysis = analyze("const gasPrice = 52 * 10**9;", migration_checks(MonadConfig()))
        passed = {r.name for r in analysis.results if r.passed}
        assert passed == {"Gas Price Optimization"}

    def test_empty_code(self):
        """Test empty input fails every check and each failure carries a recommendation."""
        analysis = analyze("", migration_checks(MonadConfig()))
        assert analysis.score == 0
        assert all(r.recommendation for r in analysis.failed)

    def test_multicall_is_case_sensitive(self):
        analysis = analyze("MULTICALL", migration_checks(MonadConfig()))
        assert analysis.passed == 0


class TestGasChecks:
    """Test the rules behind check_gas_optimization."""

    def test_empty_code_only_passes_no_estimation(self):
        """Test empty input passes only the absent-pattern check."""
        analysis = analyze("", gas_checks(MonadConfig()))
        assert [r.name for r in analysis.results if r.passed] == ["No Gas Estimation"]
        assert analysis.score == 20

    def test_optimized_code(self):
        code = (
            "const tx = { gasLimit: 21000n, gasPrice: 52000000000n, maxFeePerGas: 52000000000n };\n"
            "await sendBatch(txs);"
        )
        analysis = analyze(code, gas_checks(MonadConfig()))
        assert analysis.score == 100

    def test_importance_split(self):
        checks = gas_checks(MonadConfig())
        assert len([c for c in checks if c.importance is Importance.HIGH]) == 3
        assert len([c for c in checks if c.importance is Importance.MEDIUM]) == 2

    def test_gwei_expression(self):
        analysis = analyze("gasPrice = 52 * 10**9", gas_checks(MonadConfig()))
        assert analysis.results[0].passed

    def test_batch_is_case_insensitive(self):
        analysis = analyze("MultiCall", gas_checks(MonadConfig()))
        assert analysis.results[-1].passed


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
