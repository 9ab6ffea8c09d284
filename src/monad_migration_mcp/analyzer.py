"""Pattern-based migration checks and scoring.

A check is a named predicate over the submitted source text with a fixed
polarity: PRESENT checks pass when the pattern is found, ABSENT checks pass
when it is not. Rule sets are plain lists so they can be listed, tested and
extended without touching the report code.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .config import MonadConfig

Predicate = Callable[[str], bool]


class Polarity(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


class Importance(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Check:
    name: str
    predicate: Predicate
    description: str = ""
    polarity: Polarity = Polarity.PRESENT
    importance: Importance = Importance.HIGH
    recommendation: Optional[str] = None

    def evaluate(self, code: str) -> bool:
        found = self.predicate(code)
        return not found if self.polarity is Polarity.ABSENT else found


@dataclass(frozen=True)
class CheckResult:
    name: str
    passed: bool
    description: str
    importance: Importance = Importance.HIGH
    recommendation: Optional[str] = None


@dataclass(frozen=True)
class Analysis:
    results: list[CheckResult]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def score(self) -> int:
        """Percentage of passed checks, rounded half up. Zero when there are no checks."""
        if not self.results:
            return 0
        return (200 * self.passed + self.total) // (2 * self.total)

    def by_importance(self, importance: Importance) -> list[CheckResult]:
        return [r for r in self.results if r.importance is importance]

    @property
    def failed(self) -> list[CheckResult]:
        return [r for r in self.results if not r.passed]


def analyze(code: str, checks: list[Check]) -> Analysis:
    """Run each check against ``code`` in declaration order."""
    return Analysis(results=[
        CheckResult(
            name=check.name,
            passed=check.evaluate(code),
            description=check.description,
            importance=check.importance,
            recommendation=check.recommendation,
        )
        for check in checks
    ])


# =============================================================================
# Predicate builders
# =============================================================================

def contains(*needles: str) -> Predicate:
    """True when any of the substrings occurs (case-sensitive)."""
    return lambda code: any(n in code for n in needles)


def matches(pattern: str, flags: int = 0) -> Predicate:
    compiled = re.compile(pattern, flags)
    return lambda code: compiled.search(code) is not None


def all_of(*predicates: Predicate) -> Predicate:
    return lambda code: all(p(code) for p in predicates)


def negate(predicate: Predicate) -> Predicate:
    return lambda code: not predicate(code)


# =============================================================================
# Rule sets
# =============================================================================

def migration_checks(config: MonadConfig) -> list[Check]:
    """Checks for validate_monad_migration."""
    chain_id = str(config.network.chain_id)
    gas_price = str(config.gas.default_gas_price)
    gwei = config.gas.default_gas_price // 10 ** 9
    return [
        Check(
            name="Network Configuration",
            predicate=contains(chain_id),
            description=f"Uses correct Monad chain ID ({chain_id})",
            recommendation=f"Update network configuration to use Monad testnet (Chain ID: {chain_id})",
        ),
        Check(
            name="Gas Price Optimization",
            predicate=contains(gas_price, f"{gwei} * 10**9"),
            description="Uses hardcoded gas price instead of RPC calls",
            recommendation=f"Replace dynamic gas price calls with hardcoded value ({gwei} gwei)",
        ),
        Check(
            name="Multicall Integration",
            predicate=contains("multicall", "Multicall3"),
            description="Implements multicall for batch operations",
            recommendation="Implement Multicall3 for batching contract reads",
        ),
        Check(
            name="Concurrent Processing",
            predicate=contains("Promise.all"),
            description="Uses concurrent patterns for better performance",
            recommendation="Add concurrent processing with Promise.all for better performance",
        ),
        Check(
            name="Gas Limit Management",
            predicate=all_of(contains("gasLimit"), negate(contains("estimateGas"))),
            description="Uses explicit gas limits instead of estimation",
            recommendation="Use explicit gas limits instead of gas estimation",
        ),
    ]


def gas_checks(config: MonadConfig) -> list[Check]:
    """Checks for check_gas_optimization."""
    gas_price = config.gas.default_gas_price
    gwei = gas_price // 10 ** 9
    return [
        Check(
            name="Hardcoded Gas Values",
            predicate=matches(rf"gasPrice.*{gwei}.*10\*\*9|gasPrice.*{gas_price}"),
            description="Gas price is a literal instead of an eth_gasPrice call",
            importance=Importance.HIGH,
        ),
        Check(
            name="Explicit Gas Limits",
            predicate=matches(r"gasLimit.*\d+"),
            description="Transactions carry an explicit gas limit",
            importance=Importance.HIGH,
        ),
        Check(
            name="No Gas Estimation",
            predicate=matches(r"estimateGas"),
            polarity=Polarity.ABSENT,
            description="No estimateGas round trips",
            importance=Importance.MEDIUM,
        ),
        Check(
            name="EIP-1559 Support",
            predicate=matches(r"maxFeePerGas|maxPriorityFeePerGas"),
            description="Uses EIP-1559 fee fields",
            importance=Importance.MEDIUM,
        ),
        Check(
            name="Batch Operations",
            predicate=matches(r"batch|multicall", re.IGNORECASE),
            description="Batches calls or transactions",
            importance=Importance.HIGH,
        ),
    ]
