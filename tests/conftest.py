"""
Shared pytest fixtures for financial history tests.

Provides seeded random generators and small sparse histories used across
unit and integration tests.
"""

import pytest
import sys
from pathlib import Path
from datetime import date

import numpy as np

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from financial_history.core.seasonality import SeasonalityProfileId
from financial_history.models.schema import (
    AccountBehavior,
    AccountType,
    AnchorPoint,
    AnchorType,
    InterpolationMethod,
    PeriodConstraint,
    SourceMetadata,
    SparseAccount,
    SparseFinancialHistory,
)


TEST_SEED = 12345


@pytest.fixture
def rng():
    """Provide a freshly seeded generator for each test."""
    return np.random.default_rng(TEST_SEED)


@pytest.fixture
def cash_account():
    """Stock account with three year-end-ish snapshots."""
    return SparseAccount(
        name="Cash",
        account_type=AccountType.ASSET,
        behavior=AccountBehavior.STOCK,
        anchors=[
            AnchorPoint(date(2023, 1, 31), 10_000.0, source=SourceMetadata("bank_jan.pdf")),
            AnchorPoint(date(2023, 6, 30), 25_000.0),
            AnchorPoint(date(2023, 12, 31), 40_000.0, source=SourceMetadata("bank_dec.pdf", "Closing balance")),
        ],
    )


@pytest.fixture
def ytd_revenue_account():
    """Flow account with two cumulative YTD anchors in one calendar fiscal year."""
    return SparseAccount(
        name="Revenue",
        account_type=AccountType.REVENUE,
        behavior=AccountBehavior.FLOW,
        anchors=[
            AnchorPoint(date(2023, 6, 30), 300_000.0, AnchorType.CUMULATIVE),
            AnchorPoint(date(2023, 12, 31), 600_000.0, AnchorType.CUMULATIVE),
        ],
    )


@pytest.fixture
def simple_history():
    """Small balanced-by-plug business with a flagged retained earnings account."""
    return SparseFinancialHistory(
        organization_name="Simple Co",
        fiscal_year_end_month=12,
        accounts=[
            SparseAccount(
                name="Cash",
                account_type=AccountType.ASSET,
                behavior=AccountBehavior.STOCK,
                anchors=[
                    AnchorPoint(date(2023, 1, 31), 50_000.0),
                    AnchorPoint(date(2023, 12, 31), 80_000.0),
                ],
            ),
            SparseAccount(
                name="Accounts Payable",
                account_type=AccountType.LIABILITY,
                behavior=AccountBehavior.STOCK,
                anchors=[
                    AnchorPoint(date(2023, 1, 31), 20_000.0),
                    AnchorPoint(date(2023, 12, 31), 15_000.0),
                ],
            ),
            SparseAccount(
                name="Common Stock",
                account_type=AccountType.EQUITY,
                behavior=AccountBehavior.STOCK,
                interpolation=InterpolationMethod.STEP,
                anchors=[AnchorPoint(date(2023, 1, 31), 10_000.0), AnchorPoint(date(2023, 12, 31), 10_000.0)],
            ),
            SparseAccount(
                name="Retained Earnings",
                account_type=AccountType.EQUITY,
                behavior=AccountBehavior.STOCK,
                is_balancing_account=True,
            ),
            SparseAccount(
                name="Revenue",
                account_type=AccountType.REVENUE,
                behavior=AccountBehavior.FLOW,
                interpolation=InterpolationMethod.SEASONAL,
                seasonality=SeasonalityProfileId.RETAIL_PEAK,
                constraints=[PeriodConstraint.from_period("2023-01:2023-12", 120_000.0)],
            ),
            SparseAccount(
                name="Operating Expenses",
                account_type=AccountType.OPERATING_EXPENSE,
                behavior=AccountBehavior.FLOW,
                constraints=[PeriodConstraint.from_period("2023-01:2023-12", 84_000.0)],
            ),
        ],
    )
