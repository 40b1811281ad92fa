"""Exception hierarchy for portfolio risk analysis."""

import traceback
from typing import Dict, Any, Optional, List
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""
    DATA = "data"
    COMPUTATION = "computation"
    VALIDATION = "validation"


class RiskAnalysisError(Exception):
    """Base exception for risk analysis with structured context."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.COMPUTATION,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize risk analysis error.

        Args:
            message: Human-readable error message
            error_code: Unique error code for programmatic handling
            severity: Error severity level
            category: Error category for classification
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or 'RISK_ANALYSIS_ERROR'
        self.severity = severity
        self.category = category
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context['cause_type'] = type(cause).__name__
            self.context['cause_message'] = str(cause)
            self.context['stack_trace'] = ''.join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            'error_code': self.error_code,
            'message': self.message,
            'severity': self.severity.value,
            'category': self.category.value,
            'timestamp': self.timestamp.isoformat(),
            'context': self.context
        }

    def __str__(self) -> str:
        """String representation of the error."""
        return f"[{self.error_code}] {self.message}"


class InvalidPortfolioError(RiskAnalysisError):
    """Portfolio snapshot fails structural validation."""

    def __init__(
        self,
        message: str,
        portfolio_id: Optional[str] = None,
        issues: Optional[List[str]] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if portfolio_id is not None:
            context['portfolio_id'] = portfolio_id
        if issues:
            context['issues'] = issues

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'INVALID_PORTFOLIO')
        kwargs.setdefault('category', ErrorCategory.VALIDATION)
        kwargs.setdefault('severity', ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)
        self.issues = issues or []


class InsufficientDataError(RiskAnalysisError):
    """Not enough data, or a degenerate denominator, for a statistic."""

    def __init__(
        self,
        message: str,
        metric: Optional[str] = None,
        required_points: Optional[int] = None,
        available_points: Optional[int] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if metric is not None:
            context['metric'] = metric
        if required_points is not None:
            context['required_points'] = required_points
        if available_points is not None:
            context['available_points'] = available_points

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'INSUFFICIENT_DATA')
        kwargs.setdefault('category', ErrorCategory.DATA)
        kwargs.setdefault('severity', ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)
        self.metric = metric

