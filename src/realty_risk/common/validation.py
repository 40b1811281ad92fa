"""Validation of portfolio snapshots before risk analysis."""

import math
from typing import List

from .models import Portfolio
from ..analytics.exceptions import InvalidPortfolioError


# Relative gap between total_value and the sum of holdings that is reported
HOLDINGS_MISMATCH_WARNING = 0.01


def validate_allocation_total(total: float, tolerance: float) -> bool:
    """Check that allocation weights sum to 1.0 within tolerance."""
    return abs(total - 1.0) <= tolerance


def validate_portfolio(portfolio: Portfolio, tolerance: float = 1e-6) -> List[str]:
    """
    Validate a portfolio snapshot for risk analysis.

    Args:
        portfolio: Portfolio snapshot to validate
        tolerance: Allowed absolute deviation of allocation weights from 1.0

    Returns:
        List of non-critical warnings

    Raises:
        InvalidPortfolioError: If the portfolio cannot be analyzed as given
    """
    issues = []
    warnings = []

    if not portfolio.properties:
        issues.append("Portfolio has no properties")

    if not math.isfinite(portfolio.total_value) or portfolio.total_value <= 0:
        issues.append(f"Portfolio total value must be positive and finite, got {portfolio.total_value}")

    current_total = portfolio.current_allocation.total()
    if not validate_allocation_total(current_total, tolerance):
        issues.append(f"Current allocation weights must sum to 1.0, got {current_total:.6f}")

    if portfolio.target_allocation is not None:
        target_total = portfolio.target_allocation.total()
        if not validate_allocation_total(target_total, tolerance):
            issues.append(f"Target allocation weights must sum to 1.0, got {target_total:.6f}")
    else:
        warnings.append("No target allocation; rebalancing drift is not assessed")

    if issues:
        raise InvalidPortfolioError(
            f"Invalid portfolio {portfolio.id}: {'; '.join(issues)}",
            portfolio_id=portfolio.id,
            issues=issues
        )

    holdings_value = portfolio.holdings_value
    if abs(holdings_value - portfolio.total_value) > HOLDINGS_MISMATCH_WARNING * portfolio.total_value:
        warnings.append(
            f"Sum of holding values ({holdings_value:,.2f}) differs from total value "
            f"({portfolio.total_value:,.2f})"
        )

    zero_valued = [p.property_id for p in portfolio.properties if p.current_value == 0]
    if zero_valued:
        warnings.append(f"Zero-valued holdings: {', '.join(zero_valued)}")

    return warnings
