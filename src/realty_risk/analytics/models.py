"""Risk analysis result models using Pydantic."""

from datetime import date as Date
from typing import List, Optional, Tuple
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class ImpactLevel(str, Enum):
    """Impact levels for qualitative risk factors."""
    NEGLIGIBLE = "negligible"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskFactorType(str, Enum):
    """Axes along which qualitative risk is scored."""
    MARKET = "market"
    CONCENTRATION = "concentration"
    LIQUIDITY = "liquidity"
    CREDIT = "credit"
    OPERATIONAL = "operational"


class RecommendationType(str, Enum):
    """Categories of risk recommendations."""
    DIVERSIFICATION = "diversification"
    RISK_MANAGEMENT = "risk_management"
    REBALANCING = "rebalancing"
    HEDGING = "hedging"


class Priority(str, Enum):
    """Recommendation priorities."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RiskModel(BaseModel):
    """Base for immutable result models serialized with camelCase aliases."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class RiskFactor(RiskModel):
    """A qualitative risk factor identified from portfolio structure."""

    name: str = Field(..., description="Short factor name")
    type: RiskFactorType = Field(..., description="Risk axis")
    impact: ImpactLevel = Field(..., description="Impact level")
    probability: float = Field(..., ge=0, le=1, description="Likelihood of the risk materializing")
    description: str = Field(..., description="Human-readable description")
    mitigation: Tuple[str, ...] = Field(default_factory=tuple, description="Mitigation steps")


class RiskMetrics(RiskModel):
    """Quantitative risk statistics over monthly returns.

    Ratios whose denominator is zero for the given series are None.
    """

    value_at_risk: float = Field(..., description="Historical VaR (return at the configured percentile)")
    expected_shortfall: float = Field(..., description="Mean of returns at or below VaR")
    maximum_drawdown: float = Field(..., ge=0, description="Largest peak-to-trough decline of cumulative return")
    volatility: float = Field(..., ge=0, description="Population standard deviation of monthly returns")
    beta: float = Field(..., description="Sensitivity to benchmark returns")
    sharpe_ratio: Optional[float] = Field(None, description="Excess return per unit of volatility")
    sortino_ratio: Optional[float] = Field(None, description="Excess return per unit of downside volatility")
    calmar_ratio: Optional[float] = Field(None, description="Annualized return over maximum drawdown")
    information_ratio: Optional[float] = Field(None, description="Active return per unit of tracking error")
    tracking_error: float = Field(..., ge=0, description="Volatility of active returns")
    correlation_with_market: Optional[float] = Field(None, ge=-1, le=1, description="Pearson correlation with benchmark")
    concentration_index: float = Field(..., ge=0, description="Holding-level Herfindahl index")
    herfindahl_index: float = Field(..., ge=0, description="Asset-class Herfindahl index")


class RiskRecommendation(RiskModel):
    """An actionable risk mitigation recommendation."""

    type: RecommendationType = Field(..., description="Recommendation category")
    priority: Priority = Field(..., description="Recommendation priority")
    description: str = Field(..., description="Why the recommendation was made")
    action: str = Field(..., description="What to do")
    expected_impact: float = Field(..., ge=0, le=1, description="Expected fractional risk reduction")
    implementation: Tuple[str, ...] = Field(default_factory=tuple, description="Implementation checklist")


class RiskAnalysis(RiskModel):
    """Comprehensive risk analysis of a portfolio snapshot."""

    portfolio_id: str = Field(..., description="Portfolio identifier")
    analysis_date: Date = Field(default_factory=Date.today, description="Date of analysis")
    overall_risk: float = Field(..., ge=0, le=1, description="Composite risk score")
    systematic_risk: float = Field(..., description="Market-driven risk (beta scaled)")
    unsystematic_risk: float = Field(..., description="Residual variance not explained by the benchmark")
    concentration_risk: float = Field(..., ge=0, le=1, description="Asset-class concentration")
    liquidity_risk: float = Field(..., ge=0, le=1, description="Share of value not readily liquid")
    market_risk: float = Field(..., ge=0, le=1, description="Volatility scaled to a 20% ceiling")
    credit_risk: float = Field(..., ge=0, le=1, description="Mean loan-to-value, capped at 1")
    operational_risk: float = Field(..., ge=0, le=1, description="Mean operational complexity")
    risk_factors: List[RiskFactor] = Field(default_factory=list)
    risk_metrics: RiskMetrics
    recommendations: List[RiskRecommendation] = Field(default_factory=list)

    def high_impact_factors(self) -> List[RiskFactor]:
        """Factors with high or critical impact."""
        return [f for f in self.risk_factors if f.impact in (ImpactLevel.HIGH, ImpactLevel.CRITICAL)]
