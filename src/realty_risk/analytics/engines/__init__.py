"""Risk analysis engines package."""

from .return_series import (
    ReturnSeries,
    StaticBenchmarkProvider,
    SyntheticBenchmarkProvider,
    build_return_series,
    build_return_series_from_history
)
from .risk_metrics import calculate_risk_metrics
from .risk_factors import classify, identify_risk_factors
from .recommendations import DEFAULT_RULES, RecommendationRule, generate_recommendations
from .risk_analysis import RiskAnalyzer, analyze_portfolio_risk

__all__ = [
    'ReturnSeries',
    'StaticBenchmarkProvider',
    'SyntheticBenchmarkProvider',
    'build_return_series',
    'build_return_series_from_history',
    'calculate_risk_metrics',
    'classify',
    'identify_risk_factors',
    'DEFAULT_RULES',
    'RecommendationRule',
    'generate_recommendations',
    'RiskAnalyzer',
    'analyze_portfolio_risk'
]
