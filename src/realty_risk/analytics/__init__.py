"""Portfolio risk analytics module."""

from .models import (
    ImpactLevel,
    Priority,
    RecommendationType,
    RiskAnalysis,
    RiskFactor,
    RiskFactorType,
    RiskMetrics,
    RiskRecommendation
)
from .exceptions import (
    ErrorCategory,
    ErrorSeverity,
    InsufficientDataError,
    InvalidPortfolioError,
    RiskAnalysisError
)
from .risk_reporting import (
    build_risk_response,
    classify_risk_level,
    export_report_json,
    generate_risk_report,
    recommendations_frame,
    risk_factors_frame
)

__all__ = [
    # Data models
    'ImpactLevel',
    'Priority',
    'RecommendationType',
    'RiskAnalysis',
    'RiskFactor',
    'RiskFactorType',
    'RiskMetrics',
    'RiskRecommendation',

    # Exceptions
    'ErrorCategory',
    'ErrorSeverity',
    'InsufficientDataError',
    'InvalidPortfolioError',
    'RiskAnalysisError',

    # Reporting
    'build_risk_response',
    'classify_risk_level',
    'export_report_json',
    'generate_risk_report',
    'recommendations_frame',
    'risk_factors_frame'
]
