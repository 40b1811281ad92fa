"""Qualitative risk factor identification from portfolio structure."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from ...common.models import LiquidityTier, Portfolio, PortfolioProperty, PropertyType
from ..models import ImpactLevel, RiskFactor, RiskFactorType
from .return_series import ReturnSeries
from .risk_metrics import calculate_beta, calculate_concentration_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """Impact and probability assigned to a scored risk axis."""
    impact: ImpactLevel
    probability: float


@dataclass(frozen=True)
class ThresholdLadder:
    """
    Descending (threshold, impact, probability) bands.

    A value is assigned the first band whose threshold it strictly exceeds,
    or the floor classification if it exceeds none.
    """
    bands: Tuple[Tuple[float, ImpactLevel, float], ...]
    floor: Classification


def classify(value: float, ladder: ThresholdLadder) -> Classification:
    """Classify a risk score against a threshold ladder."""
    for threshold, impact, probability in ladder.bands:
        if value > threshold:
            return Classification(impact, probability)
    return ladder.floor


MARKET_LADDER = ThresholdLadder(
    bands=((1.5, ImpactLevel.CRITICAL, 0.8), (1.2, ImpactLevel.HIGH, 0.6), (0.8, ImpactLevel.MEDIUM, 0.4)),
    floor=Classification(ImpactLevel.LOW, 0.3),
)

CONCENTRATION_LADDER = ThresholdLadder(
    bands=((0.5, ImpactLevel.CRITICAL, 0.9), (0.3, ImpactLevel.HIGH, 0.7), (0.2, ImpactLevel.MEDIUM, 0.5)),
    floor=Classification(ImpactLevel.LOW, 0.3),
)

# Shared by the liquidity and credit axes
EXPOSURE_LADDER = ThresholdLadder(
    bands=((0.8, ImpactLevel.CRITICAL, 0.9), (0.6, ImpactLevel.HIGH, 0.7), (0.4, ImpactLevel.MEDIUM, 0.5)),
    floor=Classification(ImpactLevel.LOW, 0.3),
)

OPERATIONAL_LADDER = ThresholdLadder(
    bands=((0.7, ImpactLevel.HIGH, 0.8), (0.5, ImpactLevel.MEDIUM, 0.6), (0.3, ImpactLevel.LOW, 0.4)),
    floor=Classification(ImpactLevel.NEGLIGIBLE, 0.2),
)

# Impacts at or below LOW do not produce a risk factor
REPORTABLE_IMPACTS = (ImpactLevel.MEDIUM, ImpactLevel.HIGH, ImpactLevel.CRITICAL)


def calculate_liquidity_score(portfolio: Portfolio) -> float:
    """Share of total value not held in highly liquid properties."""
    liquid_value = sum(
        p.current_value for p in portfolio.properties
        if p.property_metadata.liquidity_tier == LiquidityTier.HIGH
    )
    return 1 - liquid_value / portfolio.total_value


def calculate_leverage_score(portfolio: Portfolio) -> float:
    """Mean loan-to-value across properties."""
    return sum(p.loan_to_value for p in portfolio.properties) / len(portfolio.properties)


def calculate_property_complexity(prop: PortfolioProperty) -> float:
    """Additive operational complexity of a single property, capped at 1.0."""
    metadata = prop.property_metadata
    score = 0.0
    if metadata.property_type == PropertyType.COMMERCIAL:
        score += 0.3
    if metadata.units is not None and metadata.units > 10:
        score += 0.2
    if metadata.age is not None and metadata.age > 20:
        score += 0.2
    if prop.monthly_rent is not None and prop.monthly_rent > 5000:
        score += 0.1
    return min(score, 1.0)


def calculate_operational_score(portfolio: Portfolio) -> float:
    """Mean per-property operational complexity."""
    total = sum(calculate_property_complexity(p) for p in portfolio.properties)
    return min(total / len(portfolio.properties), 1.0)


@dataclass(frozen=True)
class RiskAxis:
    """A scored risk dimension and the factor text it reports."""
    factor_type: RiskFactorType
    name: str
    description: str
    mitigation: Tuple[str, ...]
    ladder: ThresholdLadder
    score: Callable[[Portfolio, ReturnSeries], float]


RISK_AXES: Tuple[RiskAxis, ...] = (
    RiskAxis(
        factor_type=RiskFactorType.MARKET,
        name="Market Volatility",
        description="Portfolio is exposed to general market movements and economic cycles",
        mitigation=(
            "Diversify across different property types",
            "Consider hedging strategies",
            "Maintain adequate cash reserves",
        ),
        ladder=MARKET_LADDER,
        score=lambda portfolio, series: calculate_beta(series.portfolio_returns, series.benchmark_returns),
    ),
    RiskAxis(
        factor_type=RiskFactorType.CONCENTRATION,
        name="Geographic Concentration",
        description="Portfolio is heavily concentrated in specific geographic areas",
        mitigation=(
            "Diversify across multiple markets",
            "Consider REITs for broader exposure",
            "Monitor local market conditions",
        ),
        ladder=CONCENTRATION_LADDER,
        score=lambda portfolio, series: calculate_concentration_index(portfolio),
    ),
    RiskAxis(
        factor_type=RiskFactorType.LIQUIDITY,
        name="Low Liquidity",
        description="Portfolio may face challenges in quickly converting assets to cash",
        mitigation=(
            "Maintain liquid reserves",
            "Consider REIT investments",
            "Plan for longer holding periods",
        ),
        ladder=EXPOSURE_LADDER,
        score=lambda portfolio, series: calculate_liquidity_score(portfolio),
    ),
    RiskAxis(
        factor_type=RiskFactorType.CREDIT,
        name="High Leverage",
        description="Portfolio has high debt levels increasing credit risk",
        mitigation=(
            "Reduce leverage ratios",
            "Improve debt service coverage",
            "Refinance at better terms",
        ),
        ladder=EXPOSURE_LADDER,
        score=lambda portfolio, series: calculate_leverage_score(portfolio),
    ),
    RiskAxis(
        factor_type=RiskFactorType.OPERATIONAL,
        name="Operational Complexity",
        description="Portfolio requires significant operational management",
        mitigation=(
            "Hire professional property management",
            "Implement automated systems",
            "Regular property inspections",
        ),
        ladder=OPERATIONAL_LADDER,
        score=lambda portfolio, series: calculate_operational_score(portfolio),
    ),
)


def assess_risk_axes(portfolio: Portfolio, series: ReturnSeries) -> Dict[RiskFactorType, Tuple[float, Classification]]:
    """Score and classify every risk axis."""
    assessments = {}
    for axis in RISK_AXES:
        value = axis.score(portfolio, series)
        assessments[axis.factor_type] = (value, classify(value, axis.ladder))
    return assessments


def identify_risk_factors(portfolio: Portfolio, series: ReturnSeries) -> List[RiskFactor]:
    """
    Identify qualitative risk factors.

    Args:
        portfolio: Portfolio snapshot
        series: Return series, used only for the market (beta) axis

    Returns:
        One factor per axis classified above low impact, in axis order
    """
    assessments = assess_risk_axes(portfolio, series)
    factors = []

    for axis in RISK_AXES:
        value, classification = assessments[axis.factor_type]
        logger.debug(f"{axis.factor_type.value} risk score {value:.4f} -> {classification.impact.value}")
        if classification.impact not in REPORTABLE_IMPACTS:
            continue
        factors.append(RiskFactor(
            name=axis.name,
            type=axis.factor_type,
            impact=classification.impact,
            probability=classification.probability,
            description=axis.description,
            mitigation=axis.mitigation,
        ))

    return factors
