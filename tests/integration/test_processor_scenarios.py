"""
End-to-end tests through FinancialHistoryProcessor.

Each scenario builds a realistic sparse history, runs the full pipeline and
checks totals, balancing and determinism.
"""

from datetime import date

import numpy as np
import pytest

from financial_history import (
    AccountBehavior,
    AccountType,
    AccountingEquationViolation,
    AnchorPoint,
    AnchorType,
    ConfigurationError,
    CustomProfile,
    DenseSeries,
    EngineConfig,
    FinancialHistoryProcessor,
    InterpolationMethod,
    PeriodConstraint,
    PointOrigin,
    SeasonalityProfileId,
    SparseAccount,
    SparseFinancialHistory,
    process_financial_history,
    process_with_verification,
)
from financial_history.balancer.accounting_balancer import AccountingBalancer
from financial_history.balancer.classification import AccountClassifier
from financial_history.core.exceptions import (
    InvalidFiscalYearEndMonthError,
    InvalidNoiseFactorError,
    InvalidSeasonalityWeightsError,
    NoAnchorsError,
)


def stock(name, account_type, points, interpolation=InterpolationMethod.LINEAR, noise=0.0, **kwargs):
    return SparseAccount(
        name=name,
        account_type=account_type,
        behavior=AccountBehavior.STOCK,
        interpolation=interpolation,
        noise_factor=noise,
        anchors=[AnchorPoint(d, v) for d, v in points],
        **kwargs
    )


def ytd_flow(name, account_type, points, interpolation=InterpolationMethod.LINEAR,
             seasonality=SeasonalityProfileId.FLAT, noise=0.0):
    return SparseAccount(
        name=name,
        account_type=account_type,
        behavior=AccountBehavior.FLOW,
        interpolation=interpolation,
        seasonality=seasonality,
        noise_factor=noise,
        anchors=[AnchorPoint(d, v, AnchorType.CUMULATIVE) for d, v in points],
    )


def year_ends(first, second):
    return [(date(2022, 12, 31), first), (date(2023, 12, 31), second)]


def balance_sheet_points(a, b, c):
    return [(date(2022, 1, 31), a), (date(2022, 12, 31), b), (date(2023, 12, 31), c)]


@pytest.fixture
def retail_history():
    seasonal = dict(interpolation=InterpolationMethod.SEASONAL, seasonality=SeasonalityProfileId.RETAIL_PEAK)
    return SparseFinancialHistory(
        organization_name="Retail Haven Inc",
        fiscal_year_end_month=12,
        accounts=[
            ytd_flow("Sales Revenue", AccountType.REVENUE, year_ends(2_400_000.0, 3_000_000.0), noise=0.05, **seasonal),
            ytd_flow("Cost of Goods Sold", AccountType.COST_OF_SALES, year_ends(1_440_000.0, 1_800_000.0), noise=0.05, **seasonal),
            ytd_flow("Store Rent", AccountType.OPERATING_EXPENSE, year_ends(120_000.0, 132_000.0)),
            ytd_flow("Salaries & Wages", AccountType.OPERATING_EXPENSE, year_ends(480_000.0, 540_000.0), noise=0.02),
            ytd_flow("Marketing Expenses", AccountType.OPERATING_EXPENSE, year_ends(144_000.0, 180_000.0), **seasonal),
            stock("Cash at Bank", AccountType.ASSET, balance_sheet_points(150_000.0, 180_000.0, 250_000.0),
                  InterpolationMethod.CURVE, noise=0.03),
            stock("Inventory", AccountType.ASSET, balance_sheet_points(200_000.0, 240_000.0, 300_000.0), noise=0.05),
            stock("Accounts Receivable", AccountType.ASSET, balance_sheet_points(80_000.0, 100_000.0, 130_000.0)),
            stock("Equipment", AccountType.ASSET, balance_sheet_points(100_000.0, 95_000.0, 90_000.0)),
            stock("Accounts Payable", AccountType.LIABILITY, balance_sheet_points(60_000.0, 75_000.0, 95_000.0)),
            stock("Bank Loan", AccountType.LIABILITY, balance_sheet_points(200_000.0, 180_000.0, 160_000.0),
                  InterpolationMethod.STEP),
            stock("Share Capital", AccountType.EQUITY, balance_sheet_points(250_000.0, 250_000.0, 250_000.0),
                  InterpolationMethod.STEP),
        ],
    )


class TestRetailBusiness:
    """Seasonal retail business across two calendar years."""

    def test_annual_totals_preserved(self, retail_history):
        result = process_financial_history(retail_history, EngineConfig(random_seed=1))
        sales = result["Sales Revenue"]
        assert sales.total(date(2022, 1, 1), date(2022, 12, 31)) == pytest.approx(2_400_000.0, abs=1.0)
        assert sales.total(date(2023, 1, 1), date(2023, 12, 31)) == pytest.approx(3_000_000.0, abs=1.0)

    def test_december_is_peak_without_noise(self, retail_history):
        for account in retail_history.accounts:
            account.noise_factor = 0.0
        result = process_financial_history(retail_history)
        sales = result["Sales Revenue"]
        december = sales[date(2023, 12, 31)].value
        assert december == pytest.approx(900_000.0)
        assert december == max(sales.amounts())

    def test_equation_closes_every_month(self, retail_history):
        result = process_with_verification(retail_history, 1.0, EngineConfig(random_seed=2))
        assert result.balancing_account == "Share Capital"
        frame = result.to_dataframe()
        assets = frame[["Cash at Bank", "Inventory", "Accounts Receivable", "Equipment"]].sum(axis=1)
        claims = frame[["Accounts Payable", "Bank Loan", "Share Capital"]].sum(axis=1)
        np.testing.assert_allclose(assets.values, claims.values, atol=0.01)

    def test_balance_sheet_anchors_exact(self, retail_history):
        result = process_financial_history(retail_history, EngineConfig(random_seed=3))
        cash = result["Cash at Bank"]
        assert cash[date(2022, 12, 31)].value == 180_000.0
        assert cash[date(2022, 12, 31)].origin is PointOrigin.ANCHOR
        assert len(cash) == 24

    def test_plug_series_marked(self, retail_history):
        result = process_financial_history(retail_history, EngineConfig(random_seed=4))
        plug = result["Share Capital"]
        assert all(p.origin is PointOrigin.BALANCING_PLUG for p in plug.points())
        assert all(p.note and "assets=" in p.note for p in plug.points())


class TestCustomSeasonalityNonCalendarYear:
    """June fiscal year end with a custom curve."""

    def test_custom_weights_rotated(self):
        weights = [0.04, 0.04, 0.06, 0.08, 0.10, 0.12, 0.14, 0.12, 0.10, 0.08, 0.06, 0.06]
        history = SparseFinancialHistory(
            organization_name="Summer Camps Ltd",
            fiscal_year_end_month=6,
            accounts=[
                ytd_flow("Program Fees", AccountType.REVENUE, [(date(2023, 6, 30), 1_000_000.0)],
                         InterpolationMethod.SEASONAL, CustomProfile(weights)),
                stock("Cash", AccountType.ASSET, [(date(2022, 7, 31), 50_000.0), (date(2023, 6, 30), 80_000.0)]),
                stock("Retained Earnings", AccountType.EQUITY, [(date(2022, 7, 31), 50_000.0)]),
            ],
        )
        result = process_financial_history(history)
        fees = result["Program Fees"]
        assert fees.first_date == date(2022, 7, 31)
        assert fees.last_date == date(2023, 6, 30)
        assert fees[date(2022, 7, 31)].value == pytest.approx(140_000.0)
        assert fees[date(2023, 1, 31)].value == pytest.approx(40_000.0)
        assert fees.total() == pytest.approx(1_000_000.0)
        assert result.balancing_account == "Retained Earnings"

    def test_invalid_custom_weights_rejected_before_run(self):
        history = SparseFinancialHistory("Co", 12, [
            ytd_flow("Sales", AccountType.REVENUE, [(date(2023, 12, 31), 1.0)],
                     InterpolationMethod.SEASONAL, CustomProfile([0.1] * 12)),
        ])
        with pytest.raises(InvalidSeasonalityWeightsError):
            process_financial_history(history)


class TestBalancingSelection:
    """The flagged account absorbs the plug."""

    def test_flag_beats_retained_earnings(self):
        history = SparseFinancialHistory("Co", 12, [
            stock("Cash", AccountType.ASSET, [(date(2023, 1, 31), 100.0), (date(2023, 3, 31), 300.0)]),
            stock("Retained Earnings", AccountType.EQUITY, [(date(2023, 1, 31), 10.0), (date(2023, 3, 31), 10.0)]),
            SparseAccount("Owner Contributions", AccountType.EQUITY, AccountBehavior.STOCK, is_balancing_account=True),
        ])
        result = process_financial_history(history)
        assert result.balancing_account == "Owner Contributions"
        assert result["Retained Earnings"][date(2023, 2, 28)].value == pytest.approx(10.0)
        feb_cash = result["Cash"][date(2023, 2, 28)].value
        assert result["Owner Contributions"][date(2023, 2, 28)].value == pytest.approx(feb_cash - 10.0)

    def test_synthesized_when_no_equity(self):
        history = SparseFinancialHistory("Co", 12, [
            stock("Cash", AccountType.ASSET, [(date(2023, 1, 31), 100.0)]),
            stock("Loan", AccountType.LIABILITY, [(date(2023, 1, 31), 40.0)]),
        ])
        result = process_financial_history(history, EngineConfig(fallback_balancing_account="Opening Balance Equity"))
        assert result.balancing_account == "Opening Balance Equity"
        assert result["Opening Balance Equity"][date(2023, 1, 31)].value == pytest.approx(60.0)

    def test_synthesized_name_without_hint_still_verifies(self):
        history = SparseFinancialHistory("Co", 12, [
            stock("Cash", AccountType.ASSET, [(date(2023, 1, 31), 100.0)]),
        ])
        result = process_with_verification(history, 0.01, EngineConfig(fallback_balancing_account="Suspense"))
        assert result["Suspense"][date(2023, 1, 31)].value == pytest.approx(100.0)

    def test_flagged_liability_passes_both_paths(self):
        history = SparseFinancialHistory("Co", 12, [
            stock("Cash", AccountType.ASSET, [(date(2023, 1, 31), 100.0)]),
            stock("Retained Earnings", AccountType.EQUITY, [(date(2023, 1, 31), 30.0)]),
            SparseAccount("Shareholder Loan", AccountType.LIABILITY, AccountBehavior.STOCK, is_balancing_account=True),
        ])
        plain = process_financial_history(history)
        verified = process_with_verification(history, 0.01)
        assert plain["Shareholder Loan"][date(2023, 1, 31)].value == pytest.approx(70.0)
        assert verified["Shareholder Loan"][date(2023, 1, 31)].value == pytest.approx(70.0)

    def test_retained_earnings_without_data_takes_plug(self):
        history = SparseFinancialHistory("Co", 12, [
            stock("Cash", AccountType.ASSET, [(date(2023, 12, 31), 10_000.0)]),
            stock("Loan", AccountType.LIABILITY, [(date(2023, 12, 31), 5_000.0)]),
            SparseAccount("Retained Earnings", AccountType.EQUITY, AccountBehavior.STOCK),
        ])
        result = process_with_verification(history, 0.01)
        assert result.balancing_account == "Retained Earnings"
        assert result["Retained Earnings"][date(2023, 12, 31)].value == pytest.approx(5_000.0)
        assert result["Retained Earnings"][date(2023, 12, 31)].origin is PointOrigin.BALANCING_PLUG

    def test_other_equity_without_data_still_rejected(self):
        history = SparseFinancialHistory("Co", 12, [
            stock("Cash", AccountType.ASSET, [(date(2023, 12, 31), 10_000.0)]),
            SparseAccount("Retained Earnings", AccountType.EQUITY, AccountBehavior.STOCK),
            SparseAccount("Paid-in Capital", AccountType.EQUITY, AccountBehavior.STOCK),
        ])
        with pytest.raises(NoAnchorsError, match="Paid-in Capital"):
            process_financial_history(history)


class TestMixedAndQuarterlyInput:
    """Period and cumulative figures from different documents."""

    def test_monthly_and_quarterly_constraints(self):
        history = SparseFinancialHistory("Co", 12, [
            SparseAccount(
                "Consulting Revenue", AccountType.REVENUE, AccountBehavior.FLOW,
                constraints=[
                    PeriodConstraint.from_period("2023-01", 10_000.0),
                    PeriodConstraint.from_period("2023-02", 0.0),
                    PeriodConstraint.from_period("2023-01:2023-03", 25_000.0),
                ],
            ),
        ])
        result = process_financial_history(history)
        assert result["Consulting Revenue"].amounts() == pytest.approx([10_000.0, 0.0, 15_000.0])
        assert result.warnings == []

    def test_discrete_quarter_after_half_year(self):
        history = SparseFinancialHistory("Co", 12, [
            SparseAccount(
                "Revenue", AccountType.REVENUE, AccountBehavior.FLOW,
                anchors=[
                    AnchorPoint(date(2023, 6, 30), 50_000.0, AnchorType.CUMULATIVE),
                    AnchorPoint(date(2023, 9, 30), 15_000.0, AnchorType.PERIOD),
                ],
            ),
        ])
        revenue = process_financial_history(history)["Revenue"]
        assert [revenue[d].value for d in (date(2023, 7, 31), date(2023, 8, 31), date(2023, 9, 30))] == \
            pytest.approx([5_000.0] * 3)

    def test_constraint_conflict_becomes_warning(self):
        history = SparseFinancialHistory("Co", 12, [
            SparseAccount(
                "Revenue", AccountType.REVENUE, AccountBehavior.FLOW,
                constraints=[
                    PeriodConstraint.from_period("2023-01", 100.0),
                    PeriodConstraint.from_period("2023-01:2023-01", 175.0),
                ],
            ),
        ])
        result = process_financial_history(history)
        assert len(result.warnings) == 1
        assert result["Revenue"][date(2023, 1, 31)].value == 100.0


class TestRetainedEarningsAudit:
    """Soft warnings from the roll-forward check."""

    def test_mismatch_returned_with_result(self, simple_history):
        result = process_financial_history(simple_history)
        assert result.balancing_account == "Retained Earnings"
        assert result.warnings
        assert all("Retained Earnings" in w for w in result.warnings)

    def test_audit_does_not_block_verification(self, simple_history):
        result = process_with_verification(simple_history, 0.01)
        assert result["Retained Earnings"][date(2023, 1, 31)].value == pytest.approx(20_000.0)


class TestDeterminism:
    """Seeded and noiseless runs repeat exactly."""

    def test_zero_noise_idempotent(self, simple_history):
        first = process_financial_history(simple_history).to_dataframe()
        second = process_financial_history(simple_history).to_dataframe()
        assert first.equals(second)

    def test_same_seed_same_output(self, retail_history):
        first = process_financial_history(retail_history, EngineConfig(random_seed=99)).to_dataframe()
        second = process_financial_history(retail_history, EngineConfig(random_seed=99)).to_dataframe()
        assert first.equals(second)

    def test_different_seed_different_output(self, retail_history):
        first = process_financial_history(retail_history, EngineConfig(random_seed=1)).to_dataframe()
        second = process_financial_history(retail_history, EngineConfig(random_seed=2)).to_dataframe()
        assert not first.equals(second)

    def test_injected_generator(self, retail_history):
        first = FinancialHistoryProcessor(rng=np.random.default_rng(5)).process(retail_history)
        second = FinancialHistoryProcessor(rng=np.random.default_rng(5)).process(retail_history)
        assert first.to_dataframe().equals(second.to_dataframe())


class TestValidation:
    """Malformed input fails before any computation."""

    def base_accounts(self):
        return [stock("Cash", AccountType.ASSET, [(date(2023, 1, 31), 1.0)])]

    def test_bad_fiscal_year_end(self):
        with pytest.raises(InvalidFiscalYearEndMonthError):
            process_financial_history(SparseFinancialHistory("Co", 0, self.base_accounts()))

    def test_duplicate_names(self):
        accounts = self.base_accounts() * 2
        with pytest.raises(ConfigurationError, match="Duplicate"):
            process_financial_history(SparseFinancialHistory("Co", 12, accounts))

    def test_two_balancing_flags(self):
        accounts = [
            SparseAccount("A", AccountType.EQUITY, AccountBehavior.STOCK, is_balancing_account=True),
            SparseAccount("B", AccountType.EQUITY, AccountBehavior.STOCK, is_balancing_account=True),
        ]
        with pytest.raises(ConfigurationError):
            process_financial_history(SparseFinancialHistory("Co", 12, accounts))

    def test_noise_out_of_range(self):
        accounts = [stock("Cash", AccountType.ASSET, [(date(2023, 1, 31), 1.0)], noise=1.5)]
        with pytest.raises(InvalidNoiseFactorError):
            process_financial_history(SparseFinancialHistory("Co", 12, accounts))

    def test_stock_with_constraints(self):
        account = stock("Cash", AccountType.ASSET, [(date(2023, 1, 31), 1.0)])
        account.constraints = [PeriodConstraint.from_period("2023-01", 1.0)]
        with pytest.raises(ConfigurationError):
            FinancialHistoryProcessor().validate(SparseFinancialHistory("Co", 12, [account]))

    @pytest.mark.parametrize("run", [
        process_financial_history,
        lambda history: process_with_verification(history, 0.01),
    ])
    def test_income_statement_account_cannot_be_flagged(self, run):
        accounts = self.base_accounts() + [
            SparseAccount("Other Income", AccountType.OTHER_INCOME, AccountBehavior.FLOW, is_balancing_account=True),
        ]
        with pytest.raises(ConfigurationError, match="Other Income"):
            run(SparseFinancialHistory("Co", 12, accounts))

    def test_account_without_data(self):
        accounts = [SparseAccount("Revenue", AccountType.REVENUE, AccountBehavior.FLOW)]
        with pytest.raises(NoAnchorsError):
            process_financial_history(SparseFinancialHistory("Co", 12, accounts))


class TestVerification:
    """Verification switches and tolerances."""

    def test_verify_can_be_disabled(self, simple_history):
        result = process_financial_history(simple_history, EngineConfig(verify=False))
        assert "Retained Earnings" in result

    def test_manual_edit_detected(self, simple_history):
        result = process_financial_history(simple_history)
        series = dict(result.series)
        series["Cash"] = DenseSeries.from_values(
            {d: v + 5.0 for d, v in zip(series["Cash"].dates(), series["Cash"].amounts())},
            PointOrigin.ANCHOR,
        )
        balancer = AccountingBalancer(AccountClassifier(simple_history))
        with pytest.raises(AccountingEquationViolation):
            balancer.verify(series)
