# src/financial_history/processor.py
"""
Financial History Processor

Runs the full sparse -> dense pipeline for one organization:

1. Validate the sparse input
2. Densify every account (stock curves, flow distributions)
3. Pick the balancing account and compute its plug
4. Verify Assets = Liabilities + Equity
5. Audit retained earnings against net income (warnings only)

Any hard error aborts the run; nothing partial is returned.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional

import numpy as np

from .balancer.accounting_balancer import AccountingBalancer
from .balancer.classification import AccountClassifier
from .balancer.retained_earnings import audit_retained_earnings
from .balancer.selection import BalancingSelection, select_balancing_account
from .config import EngineConfig
from .core.exceptions import ConfigurationError
from .core.fiscal_calendar import validate_fiscal_year_end_month
from .core.seasonality import get_profile_weights
from .densifier.distribution import validate_noise_factor
from .densifier.flow import FlowDensifier
from .densifier.stock import densify_stock
from .models.dense_series import DenseFinancialHistory, DenseSeries
from .models.schema import InterpolationMethod, SparseFinancialHistory

logger = logging.getLogger(__name__)


class FinancialHistoryProcessor:
    """
    Sparse to dense financial history engine.

    Usage:
        processor = FinancialHistoryProcessor(EngineConfig(random_seed=7))
        result = processor.process(history)
        df = result.to_dataframe()
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        rng: Optional[np.random.Generator] = None
    ):
        self.config = config or EngineConfig()
        self._rng = rng

    def _run_rng(self) -> np.random.Generator:
        if self._rng is not None:
            return self._rng
        return np.random.default_rng(self.config.random_seed)

    # ================================================================
    # VALIDATION
    # ================================================================

    def validate(self, history: SparseFinancialHistory) -> None:
        """
        Reject malformed input before any computation.

        Raises:
            InvalidFiscalYearEndMonthError, InvalidNoiseFactorError,
            InvalidSeasonalityWeightsError, ConfigurationError
        """
        validate_fiscal_year_end_month(history.fiscal_year_end_month)

        counts = Counter(account.name for account in history.accounts)
        duplicates = sorted(name for name, count in counts.items() if count > 1)
        if duplicates:
            raise ConfigurationError(f"Duplicate account names: {', '.join(duplicates)}")

        flagged = [a.name for a in history.accounts if a.is_balancing_account]
        if len(flagged) > 1:
            raise ConfigurationError(
                f"Only one balancing account may be flagged, got: {', '.join(flagged)}"
            )

        for account in history.accounts:
            validate_noise_factor(account.noise_factor, account.name)

            if account.is_balancing_account and not account.account_type.is_balance_sheet:
                raise ConfigurationError(
                    f"Balancing account {account.name} must be an Asset, Liability or Equity "
                    f"account, got {account.account_type.value}"
                )

            if account.is_stock and account.constraints:
                raise ConfigurationError(
                    f"Stock account {account.name} cannot carry period constraints"
                )
            if account.is_flow and account.anchors and account.constraints:
                raise ConfigurationError(
                    f"Flow account {account.name} mixes anchors and period constraints"
                )
            if account.interpolation is InterpolationMethod.SEASONAL:
                get_profile_weights(account.seasonality)

    # ================================================================
    # PIPELINE
    # ================================================================

    def densify(
        self,
        history: SparseFinancialHistory,
        rng: Optional[np.random.Generator] = None,
        warnings: Optional[List[str]] = None
    ) -> Dict[str, DenseSeries]:
        """
        Densify every account in input order.

        The account balancing will overwrite is skipped when it has no data;
        the balancer produces its series. Selection tiers up to "any Equity"
        depend on the sparse input only, so the target is known up front.
        """
        rng = rng if rng is not None else self._run_rng()
        flow = FlowDensifier(
            history.fiscal_year_end_month,
            rng,
            constraint_tolerance=self.config.constraint_tolerance
        )

        plug_target = self.select_balancing_account(history, {}).name

        dense: Dict[str, DenseSeries] = {}
        for account in history.accounts:
            if account.name == plug_target and not account.has_data:
                logger.debug(f"{account.name}: balancing account without data, left to the balancer")
                continue

            if account.is_stock:
                dense[account.name] = densify_stock(account, rng)
            else:
                dense[account.name] = flow.densify(account)

        if warnings is not None:
            warnings.extend(flow.conflicts)
        return dense

    def select_balancing_account(
        self,
        history: SparseFinancialHistory,
        dense: Dict[str, DenseSeries]
    ) -> BalancingSelection:
        return select_balancing_account(
            history, dense, self.config.fallback_balancing_account
        )

    def balancer_for(
        self,
        history: SparseFinancialHistory,
        balancing_account: str
    ) -> AccountingBalancer:
        """Balancer that classifies `history` and counts the plug on its side."""
        return AccountingBalancer(
            AccountClassifier(history), self.config.balance_tolerance
        ).for_plug(balancing_account)

    def process(self, history: SparseFinancialHistory) -> DenseFinancialHistory:
        """
        Validate, densify, balance, verify and audit.

        Returns:
            DenseFinancialHistory with soft warnings attached

        Raises:
            ConfigurationError subclasses for bad input,
            AccountingEquationViolation if verification is enabled and fails
        """
        self.validate(history)
        rng = self._run_rng()
        warnings: List[str] = []

        dense = self.densify(history, rng, warnings)

        selection = self.select_balancing_account(history, dense)
        balancer = self.balancer_for(history, selection.name)
        balanced = balancer.enforce(dense, selection.name)

        if self.config.verify:
            balancer.verify(balanced)

        warnings.extend(audit_retained_earnings(
            balanced, balancer.classifier, self.config.retained_earnings_tolerance
        ))

        result = DenseFinancialHistory(
            organization_name=history.organization_name,
            fiscal_year_end_month=history.fiscal_year_end_month,
            series=balanced,
            balancing_account=selection.name,
            warnings=warnings
        )

        dates = result.all_dates()
        logger.info(
            f"{history.organization_name}: {len(balanced)} accounts, "
            f"{dates[0].isoformat() if dates else '-'}..{dates[-1].isoformat() if dates else '-'}, "
            f"balancing account {selection.name} ({selection.tier.value}), "
            f"{len(warnings)} warnings"
        )
        return result

    def process_with_verification(
        self,
        history: SparseFinancialHistory,
        tolerance: float
    ) -> DenseFinancialHistory:
        """Process, then verify the equation at an explicit tolerance."""
        result = self.process(history)
        self.balancer_for(history, result.balancing_account).verify(
            result.series, tolerance=tolerance
        )
        return result


def process_financial_history(
    history: SparseFinancialHistory,
    config: Optional[EngineConfig] = None,
    rng: Optional[np.random.Generator] = None
) -> DenseFinancialHistory:
    """Functional wrapper around FinancialHistoryProcessor.process."""
    return FinancialHistoryProcessor(config, rng).process(history)


def process_with_verification(
    history: SparseFinancialHistory,
    tolerance: float,
    config: Optional[EngineConfig] = None,
    rng: Optional[np.random.Generator] = None
) -> DenseFinancialHistory:
    """Functional wrapper around FinancialHistoryProcessor.process_with_verification."""
    return FinancialHistoryProcessor(config, rng).process_with_verification(history, tolerance)
