"""Unit tests for portfolio validation."""

import pytest

from realty_risk.analytics.exceptions import ErrorCategory, InvalidPortfolioError
from realty_risk.common.models import Portfolio, PortfolioAllocation
from realty_risk.common.validation import validate_allocation_total, validate_portfolio

from conftest import build_portfolio, build_property


class TestValidateAllocationTotal:
    """Test cases for validate_allocation_total function."""

    def test_exact_total(self):
        assert validate_allocation_total(1.0, 1e-6)

    def test_within_tolerance(self):
        assert validate_allocation_total(1.0 + 5e-7, 1e-6)

    def test_outside_tolerance(self):
        assert not validate_allocation_total(0.99, 1e-6)


class TestValidatePortfolio:
    """Test cases for validate_portfolio function."""

    def test_valid_portfolio_only_warns_about_missing_target(self, two_property_portfolio):
        """Test a clean portfolio without target returns a single warning."""
        warnings = validate_portfolio(two_property_portfolio)

        assert len(warnings) == 1
        assert "No target allocation" in warnings[0]

    def test_valid_portfolio_with_target_has_no_warnings(self):
        portfolio = build_portfolio(
            [build_property("a", 100_000)],
            target=PortfolioAllocation(residential=1.0),
        )

        assert validate_portfolio(portfolio) == []

    def test_empty_portfolio_raises_error(self):
        """Test portfolio without properties raises InvalidPortfolioError."""
        portfolio = build_portfolio([], total_value=100_000)

        with pytest.raises(InvalidPortfolioError) as exc_info:
            validate_portfolio(portfolio)

        assert "Portfolio has no properties" in exc_info.value.issues
        assert exc_info.value.error_code == "INVALID_PORTFOLIO"
        assert exc_info.value.category == ErrorCategory.VALIDATION
        assert exc_info.value.context['portfolio_id'] == "pf-1"

    def test_zero_total_value_raises_error(self):
        portfolio = build_portfolio([build_property("a", 0)], total_value=0)

        with pytest.raises(InvalidPortfolioError) as exc_info:
            validate_portfolio(portfolio)

        assert any("total value must be positive" in issue for issue in exc_info.value.issues)

    def test_current_allocation_not_summing_to_one(self):
        portfolio = build_portfolio(
            [build_property("a", 100_000)],
            allocation=PortfolioAllocation(residential=0.5, commercial=0.3),
        )

        with pytest.raises(InvalidPortfolioError) as exc_info:
            validate_portfolio(portfolio)

        assert "Current allocation weights must sum to 1.0" in str(exc_info.value)

    def test_target_allocation_not_summing_to_one(self):
        portfolio = build_portfolio(
            [build_property("a", 100_000)],
            target=PortfolioAllocation(residential=0.5),
        )

        with pytest.raises(InvalidPortfolioError) as exc_info:
            validate_portfolio(portfolio)

        assert "Target allocation weights must sum to 1.0" in str(exc_info.value)

    def test_all_issues_collected(self):
        """Test every structural issue is reported at once."""
        portfolio = build_portfolio(
            [],
            total_value=0,
            allocation=PortfolioAllocation(residential=0.2),
        )

        with pytest.raises(InvalidPortfolioError) as exc_info:
            validate_portfolio(portfolio)

        assert len(exc_info.value.issues) == 3

    def test_allocation_tolerance(self):
        """Test custom tolerance admits small rounding gaps."""
        portfolio = build_portfolio(
            [build_property("a", 100_000)],
            allocation=PortfolioAllocation(residential=0.333, commercial=0.333, land=0.333),
            target=PortfolioAllocation(residential=1.0),
        )

        with pytest.raises(InvalidPortfolioError):
            validate_portfolio(portfolio)
        assert validate_portfolio(portfolio, tolerance=0.01) == []

    def test_holdings_mismatch_warning(self):
        """Test holdings that do not add up to total value produce a warning."""
        portfolio = build_portfolio(
            [build_property("a", 400_000), build_property("b", 400_000)],
            total_value=1_000_000,
            target=PortfolioAllocation(residential=1.0),
        )

        warnings = validate_portfolio(portfolio)

        assert len(warnings) == 1
        assert "differs from total value" in warnings[0]

    def test_small_holdings_gap_is_tolerated(self):
        portfolio = build_portfolio(
            [build_property("a", 995_000)],
            total_value=1_000_000,
            target=PortfolioAllocation(residential=1.0),
        )

        assert validate_portfolio(portfolio) == []

    def test_zero_valued_holdings_warning(self):
        portfolio = build_portfolio(
            [build_property("a", 100_000), build_property("vacant-lot", 0)],
            target=PortfolioAllocation(residential=1.0),
        )

        warnings = validate_portfolio(portfolio)

        assert warnings == ["Zero-valued holdings: vacant-lot"]

    @pytest.mark.parametrize("total_value", [float("nan"), float("inf")])
    def test_non_finite_total_value_raises_error(self, total_value):
        """Test a snapshot built without model validation still needs a finite total."""
        portfolio = Portfolio.model_construct(
            id="pf-1",
            total_value=total_value,
            properties=[build_property("a", 100_000)],
            current_allocation=PortfolioAllocation(residential=1.0),
            target_allocation=PortfolioAllocation(residential=1.0),
        )

        with pytest.raises(InvalidPortfolioError) as exc_info:
            validate_portfolio(portfolio)

        assert exc_info.value.issues == [f"Portfolio total value must be positive and finite, got {total_value}"]


class TestInvalidPortfolioError:
    """Test cases for InvalidPortfolioError serialization."""

    def test_to_dict_fields(self):
        error = InvalidPortfolioError("Invalid portfolio pf-1", portfolio_id="pf-1", issues=["no properties"])

        data = error.to_dict()

        assert set(data) == {'error_code', 'message', 'severity', 'category', 'timestamp', 'context'}
        assert data['category'] == "validation"
        assert data['context']['portfolio_id'] == "pf-1"
