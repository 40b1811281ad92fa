"""Rule-based risk mitigation recommendations."""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from ...common.models import Portfolio, PortfolioAllocation
from ..models import (
    Priority,
    RecommendationType,
    RiskFactor,
    RiskMetrics,
    RiskRecommendation,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecommendationContext:
    """Inputs available to every recommendation rule."""
    portfolio: Portfolio
    metrics: RiskMetrics
    factors: Tuple[RiskFactor, ...]
    rebalance_threshold: float = 0.05


@dataclass(frozen=True)
class RecommendationRule:
    """A predicate paired with the recommendation it emits."""
    name: str
    applies: Callable[[RecommendationContext], bool]
    recommendation: RiskRecommendation


def needs_rebalancing(current: PortfolioAllocation,
                      target: Optional[PortfolioAllocation],
                      threshold: float = 0.05) -> bool:
    """True when any asset class drifts from target by more than threshold."""
    if target is None:
        return False
    return any(drift > threshold for drift in current.drift_from(target).values())


DIVERSIFICATION_RULE = RecommendationRule(
    name="diversification",
    applies=lambda ctx: ctx.metrics.concentration_index > 0.7,
    recommendation=RiskRecommendation(
        type=RecommendationType.DIVERSIFICATION,
        priority=Priority.HIGH,
        description="Portfolio is highly concentrated in specific assets or locations",
        action="Diversify across different property types, locations, and investment strategies",
        expected_impact=0.3,
        implementation=(
            "Add properties in different geographic markets",
            "Consider different property types (residential, commercial, industrial)",
            "Include REITs for broader market exposure",
            "Set maximum allocation limits per property/location",
        ),
    ),
)

RISK_MANAGEMENT_RULE = RecommendationRule(
    name="risk_management",
    applies=lambda ctx: ctx.metrics.beta > 1.2,
    recommendation=RiskRecommendation(
        type=RecommendationType.RISK_MANAGEMENT,
        priority=Priority.MEDIUM,
        description="Portfolio has high market sensitivity (beta > 1.2)",
        action="Reduce market sensitivity through defensive investments",
        expected_impact=0.2,
        implementation=(
            "Add defensive property types (e.g., essential retail, healthcare)",
            "Consider fixed-income real estate investments",
            "Implement hedging strategies",
            "Increase cash reserves",
        ),
    ),
)

REBALANCING_RULE = RecommendationRule(
    name="rebalancing",
    applies=lambda ctx: needs_rebalancing(
        ctx.portfolio.current_allocation, ctx.portfolio.target_allocation, ctx.rebalance_threshold
    ),
    recommendation=RiskRecommendation(
        type=RecommendationType.REBALANCING,
        priority=Priority.MEDIUM,
        description="Portfolio allocation has drifted from target allocation",
        action="Rebalance portfolio to maintain target allocation",
        expected_impact=0.15,
        implementation=(
            "Calculate required trades to achieve target allocation",
            "Consider tax implications of rebalancing",
            "Implement gradual rebalancing to minimize transaction costs",
            "Update rebalancing schedule",
        ),
    ),
)

HEDGING_RULE = RecommendationRule(
    name="hedging",
    applies=lambda ctx: ctx.metrics.value_at_risk > ctx.portfolio.total_value * 0.1,
    recommendation=RiskRecommendation(
        type=RecommendationType.HEDGING,
        priority=Priority.HIGH,
        description="Portfolio has high Value at Risk (>10% of portfolio value)",
        action="Implement hedging strategies to reduce downside risk",
        expected_impact=0.25,
        implementation=(
            "Consider real estate derivatives",
            "Add inverse correlation assets",
            "Implement stop-loss strategies",
            "Increase diversification",
        ),
    ),
)

DEFAULT_RULES: Tuple[RecommendationRule, ...] = (
    DIVERSIFICATION_RULE,
    RISK_MANAGEMENT_RULE,
    REBALANCING_RULE,
    HEDGING_RULE,
)


def generate_recommendations(portfolio: Portfolio,
                             metrics: RiskMetrics,
                             factors: Iterable[RiskFactor],
                             rules: Iterable[RecommendationRule] = DEFAULT_RULES,
                             rebalance_threshold: float = 0.05) -> List[RiskRecommendation]:
    """
    Evaluate recommendation rules in order.

    Args:
        portfolio: Portfolio snapshot
        metrics: Calculated risk metrics
        factors: Identified risk factors
        rules: Ordered rules; each one that applies contributes its recommendation
        rebalance_threshold: Absolute weight drift that triggers rebalancing

    Returns:
        Recommendations in rule order
    """
    context = RecommendationContext(
        portfolio=portfolio,
        metrics=metrics,
        factors=tuple(factors),
        rebalance_threshold=rebalance_threshold,
    )

    recommendations = []
    for rule in rules:
        if rule.applies(context):
            logger.debug(f"Recommendation rule '{rule.name}' applies to portfolio {portfolio.id}")
            recommendations.append(rule.recommendation.model_copy(deep=True))

    return recommendations
