"""Reconciliation checks between computed and server-reported portfolio totals."""

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Sequence

from .config import Config
from .models import AggregateBalances, TokenHolding, WalletPortfolio

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.01


class ToleranceExceeded(AssertionError):
    """Raised when two monetary values differ by at least the tolerance."""

    def __init__(
        self,
        label: str,
        actual: float,
        expected: float,
        difference: float,
        tolerance: float,
    ):
        super().__init__(
            f"{label}: ${actual:.2f} vs ${expected:.2f} "
            f"differs by ${difference:.4f} (tolerance ${tolerance})"
        )
        self.label = label
        self.actual = actual
        self.expected = expected
        self.difference = difference
        self.tolerance = tolerance


class ReconciliationFailed(AssertionError):
    """Raised when one or more checks of a report failed."""

    def __init__(self, subject: str, errors: list[ToleranceExceeded]):
        lines = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"{len(errors)} check(s) failed for {subject}:\n{lines}")
        self.subject = subject
        self.errors = errors


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single tolerance comparison."""
    label: str
    actual: float
    expected: float
    difference: float
    tolerance: float
    error: ToleranceExceeded | None = None

    @property
    def passed(self) -> bool:
        return self.error is None


@dataclass
class ReconciliationReport:
    """All checks run for one wallet or one multi-wallet view."""
    subject: str
    checks: list[CheckResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failures(self) -> list[CheckResult]:
        return [c for c in self.checks if not c.passed]

    def raise_for_failures(self) -> None:
        errors = [c.error for c in self.checks if c.error is not None]
        if errors:
            raise ReconciliationFailed(self.subject, errors)


def _value(item: Any, attr: str, *path: str) -> Any:
    """Read a model attribute, or walk a raw wire dict by ``path``."""
    if isinstance(item, Mapping):
        for key in path:
            if not isinstance(item, Mapping):
                return None
            item = item.get(key)
        return item
    return getattr(item, attr, None)


class ReconciliationValidator:
    """
    Compares derived totals against server-reported totals.

    Comparison is absolute: two values match when their difference is
    strictly less than ``tolerance`` dollars. No rounding is applied first.
    This suits balances in the tens-to-thousands range and is too loose
    for portfolios near zero and too strict for very large ones.
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        if not math.isfinite(tolerance) or tolerance < 0:
            raise ValueError(f"tolerance must be a finite non-negative number, got {tolerance}")
        self._tolerance = float(tolerance)

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @classmethod
    def from_config(cls, config: Config) -> "ReconciliationValidator":
        return cls(tolerance=config.tolerances.value_usd)

    # =========================================================================
    # Calculations
    # =========================================================================

    @staticmethod
    def compute_sum(items: Iterable[Any] | None, selector: Callable[[Any], Any]) -> float:
        """Sum ``selector(item)`` over ``items``; ``None`` counts as zero."""
        total = 0.0
        for item in items or ():
            value = selector(item)
            if value is not None:
                total += float(value)
        return total

    @classmethod
    def compute_token_value(cls, tokens: Iterable[TokenHolding | Mapping] | None) -> float:
        """
        Sum of amount x unit price across token holdings.

        Accepts parsed ``TokenHolding`` objects or raw ``tokens[]`` entries
        from the portfolio endpoint. Missing amount or price counts as zero.
        """
        def token_value(token) -> float:
            amount = _value(token, "total_ui_amount", "totalUiAmount") or 0.0
            price = _value(token, "unit_price_usd", "price", "usdPrice") or 0.0
            return float(amount) * float(price)

        return cls.compute_sum(tokens, token_value)

    # =========================================================================
    # Assertions
    # =========================================================================

    def compare(self, actual: float, expected: float, label: str) -> CheckResult:
        """Compare two values and log the outcome, without raising."""
        difference = abs(actual - expected)

        logger.info("%s: $%.2f vs $%.2f", label, actual, expected)
        logger.info("Difference: $%.4f", difference)

        error = None
        if not difference < self._tolerance:
            error = ToleranceExceeded(label, actual, expected, difference, self._tolerance)
            logger.error("MISMATCH: %s", error)
        else:
            logger.info("VERIFY: match within tolerance ($%s)", self._tolerance)

        return CheckResult(
            label=label,
            actual=actual,
            expected=expected,
            difference=difference,
            tolerance=self._tolerance,
            error=error,
        )

    def assert_match(self, actual: float, expected: float, label: str) -> "ReconciliationValidator":
        """Raise ToleranceExceeded unless ``|actual - expected| < tolerance``."""
        result = self.compare(actual, expected, label)
        if result.error is not None:
            raise result.error
        return self

    # =========================================================================
    # Invariants
    # =========================================================================

    def _token_total(self, portfolio: WalletPortfolio) -> tuple[float, float, str]:
        return (
            self.compute_token_value(portfolio.tokens),
            portfolio.total_value,
            f"Calculated token total vs API total ({portfolio.address})",
        )

    def _value_breakdown(self, portfolio: WalletPortfolio) -> tuple[float, float, str]:
        return (
            portfolio.total_value,
            portfolio.tokens_value + portfolio.stocks_value,
            f"Total vs tokens + stocks ({portfolio.address})",
        )

    def _net_worth_vs_portfolios(
        self,
        balances: AggregateBalances,
        portfolios: Sequence[WalletPortfolio],
    ) -> tuple[float, float, str]:
        return (
            balances.net_worth,
            self.compute_sum(portfolios, lambda p: p.total_value),
            f"Net worth vs sum of {len(portfolios)} portfolio(s)",
        )

    def _net_worth_vs_breakdown(self, balances: AggregateBalances) -> tuple[float, float, str]:
        return (
            balances.net_worth,
            self.compute_sum(balances.per_wallet_values, lambda v: v),
            f"Net worth vs sum of {balances.wallet_count} data value(s)",
        )

    def check_token_total(self, portfolio: WalletPortfolio) -> "ReconciliationValidator":
        return self.assert_match(*self._token_total(portfolio))

    def check_value_breakdown(self, portfolio: WalletPortfolio) -> "ReconciliationValidator":
        return self.assert_match(*self._value_breakdown(portfolio))

    def check_net_worth_vs_portfolios(
        self,
        balances: AggregateBalances,
        portfolios: Sequence[WalletPortfolio],
    ) -> "ReconciliationValidator":
        return self.assert_match(*self._net_worth_vs_portfolios(balances, portfolios))

    def check_net_worth_vs_breakdown(self, balances: AggregateBalances) -> "ReconciliationValidator":
        return self.assert_match(*self._net_worth_vs_breakdown(balances))

    def reconcile_wallet(self, portfolio: WalletPortfolio) -> ReconciliationReport:
        """Run both per-wallet checks, reporting each independently."""
        report = ReconciliationReport(subject=portfolio.address)
        for actual, expected, label in (
            self._token_total(portfolio),
            self._value_breakdown(portfolio),
        ):
            report.checks.append(self.compare(actual, expected, label))
        return report

    def reconcile_aggregate(
        self,
        balances: AggregateBalances,
        portfolios: Sequence[WalletPortfolio],
    ) -> ReconciliationReport:
        """Run both net-worth checks, reporting each independently."""
        report = ReconciliationReport(subject=f"net worth of {len(portfolios)} wallet(s)")
        for actual, expected, label in (
            self._net_worth_vs_portfolios(balances, portfolios),
            self._net_worth_vs_breakdown(balances),
        ):
            report.checks.append(self.compare(actual, expected, label))
        return report

    def log_summary(self, title: str, data: Mapping[str, Any]) -> "ReconciliationValidator":
        """Log a titled summary; numbers are shown as dollar amounts."""
        logger.info("%s", title)
        for key, value in data.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                value = f"${value:.2f}"
            logger.info("  - %s: %s", key, value)
        return self
