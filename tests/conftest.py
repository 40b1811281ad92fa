"""Shared fixtures for risk engine tests."""

import pytest

from realty_risk.common.config import RiskConfig
from realty_risk.common.models import (
    Portfolio, PortfolioAllocation, PortfolioProperty, PropertyMetadata
)


def build_property(property_id, current_value, total_return_percentage=8.0, **metadata):
    """Create a portfolio property; extra keyword arguments go to metadata."""
    monthly_rent = metadata.pop('monthly_rent', None)
    return PortfolioProperty(
        property_id=property_id,
        current_value=current_value,
        monthly_rent=monthly_rent,
        total_return_percentage=total_return_percentage,
        property_metadata=PropertyMetadata(**metadata),
    )


def build_portfolio(properties, total_value=None, allocation=None, target=None, portfolio_id="pf-1"):
    """Create a portfolio whose total value defaults to the sum of its holdings."""
    if total_value is None:
        total_value = sum(p.current_value for p in properties)
    return Portfolio(
        id=portfolio_id,
        total_value=total_value,
        properties=properties,
        current_allocation=allocation or PortfolioAllocation(residential=1.0),
        target_allocation=target,
    )


@pytest.fixture
def two_property_portfolio():
    """Two equal holdings returning 8% and -2% annually."""
    return build_portfolio(
        [
            build_property("prop-a", 500_000, 8.0),
            build_property("prop-b", 500_000, -2.0),
        ],
        total_value=1_000_000,
        allocation=PortfolioAllocation(residential=0.6, commercial=0.4),
    )


@pytest.fixture
def risk_config():
    """Deterministic, sequential risk configuration."""
    return RiskConfig(benchmark_seed=42, parallel_execution=False)
