"""Real-estate portfolio risk analysis engine."""

from .analytics.engines.risk_analysis import RiskAnalyzer, analyze_portfolio_risk
from .analytics.exceptions import InsufficientDataError, InvalidPortfolioError, RiskAnalysisError
from .analytics.models import RiskAnalysis, RiskFactor, RiskMetrics, RiskRecommendation
from .common.config import RiskConfig
from .common.models import Portfolio, PortfolioAllocation, PortfolioProperty, PropertyMetadata

__version__ = "0.1.0"

__all__ = [
    'RiskAnalyzer',
    'analyze_portfolio_risk',
    'RiskAnalysis',
    'RiskFactor',
    'RiskMetrics',
    'RiskRecommendation',
    'RiskConfig',
    'Portfolio',
    'PortfolioAllocation',
    'PortfolioProperty',
    'PropertyMetadata',
    'RiskAnalysisError',
    'InvalidPortfolioError',
    'InsufficientDataError',
]
