"""Quantitative risk statistics over monthly return series."""

import logging
import math
from typing import Callable, Optional, Sequence, Union
import numpy as np

from ...common.models import Portfolio, PortfolioAllocation
from ..exceptions import InsufficientDataError
from ..models import RiskMetrics
from .return_series import ReturnSeries, MONTHS_PER_YEAR

logger = logging.getLogger(__name__)

Returns = Union[Sequence[float], np.ndarray]

# Denominators at or below this are treated as zero
EPSILON = 1e-12


def _as_array(returns: Returns, metric: str, min_points: int = 2) -> np.ndarray:
    values = np.asarray(returns, dtype=float)
    if len(values) < min_points:
        raise InsufficientDataError(
            f"{metric} requires at least {min_points} returns, got {len(values)}",
            metric=metric,
            required_points=min_points,
            available_points=len(values)
        )
    return values


def _as_pair(first: Returns, second: Returns, metric: str):
    a = _as_array(first, metric)
    b = _as_array(second, metric)
    if len(a) != len(b):
        raise InsufficientDataError(
            f"{metric} requires aligned series, got {len(a)} and {len(b)} points",
            metric=metric,
            required_points=len(a),
            available_points=len(b)
        )
    return a, b


def _require_denominator(value: float, metric: str, what: str) -> None:
    if abs(value) <= EPSILON:
        raise InsufficientDataError(f"Cannot compute {metric}: {what} is zero", metric=metric)


def calculate_variance(returns: Returns) -> float:
    """Population variance."""
    return float(np.var(_as_array(returns, "variance")))


def calculate_volatility(returns: Returns) -> float:
    """Population standard deviation."""
    return float(np.std(_as_array(returns, "volatility")))


def calculate_covariance(first: Returns, second: Returns) -> float:
    """Population covariance of two aligned series."""
    a, b = _as_pair(first, second, "covariance")
    return float(np.mean((a - a.mean()) * (b - b.mean())))


def calculate_beta(portfolio_returns: Returns, benchmark_returns: Returns) -> float:
    """Covariance with the benchmark over benchmark variance."""
    p, b = _as_pair(portfolio_returns, benchmark_returns, "beta")
    benchmark_variance = float(np.var(b))
    _require_denominator(benchmark_variance, "beta", "benchmark variance")
    return calculate_covariance(p, b) / benchmark_variance


def calculate_correlation(first: Returns, second: Returns) -> float:
    """Pearson correlation of two aligned series."""
    a, b = _as_pair(first, second, "correlation")
    denominator = math.sqrt(float(np.var(a)) * float(np.var(b)))
    _require_denominator(denominator, "correlation", "series dispersion")
    correlation = calculate_covariance(a, b) / denominator
    return max(-1.0, min(1.0, correlation))


def calculate_sharpe_ratio(returns: Returns, risk_free_rate_annual: float = 0.02) -> float:
    """Monthly excess return over monthly volatility."""
    r = _as_array(returns, "sharpe_ratio")
    volatility = float(np.std(r))
    _require_denominator(volatility, "sharpe_ratio", "volatility")
    return (float(r.mean()) - risk_free_rate_annual / MONTHS_PER_YEAR) / volatility


def calculate_sortino_ratio(returns: Returns, risk_free_rate_annual: float = 0.02) -> float:
    """Monthly excess return over the volatility of negative returns."""
    r = _as_array(returns, "sortino_ratio")
    downside = r[r < 0]
    if len(downside) < 2:
        raise InsufficientDataError(
            f"sortino_ratio requires at least 2 negative returns, got {len(downside)}",
            metric="sortino_ratio",
            required_points=2,
            available_points=len(downside)
        )
    downside_deviation = float(np.std(downside))
    _require_denominator(downside_deviation, "sortino_ratio", "downside deviation")
    return (float(r.mean()) - risk_free_rate_annual / MONTHS_PER_YEAR) / downside_deviation


def calculate_max_drawdown(returns: Returns) -> float:
    """
    Largest decline from a running peak of the cumulative-sum return curve.

    The running peak starts at zero, so a series that only falls still
    reports its full decline. Always non-negative.
    """
    r = _as_array(returns, "maximum_drawdown", min_points=1)
    cumulative = np.cumsum(r)
    running_peak = np.maximum(np.maximum.accumulate(cumulative), 0.0)
    return max(float(np.max(running_peak - cumulative)), 0.0)


def calculate_calmar_ratio(returns: Returns) -> float:
    """Annualized summed return over maximum drawdown."""
    r = _as_array(returns, "calmar_ratio")
    max_drawdown = calculate_max_drawdown(r)
    _require_denominator(max_drawdown, "calmar_ratio", "maximum drawdown")
    return float(r.sum()) * MONTHS_PER_YEAR / abs(max_drawdown)


def calculate_tracking_error(portfolio_returns: Returns, benchmark_returns: Returns) -> float:
    """Volatility of active returns."""
    p, b = _as_pair(portfolio_returns, benchmark_returns, "tracking_error")
    return float(np.std(p - b))


def calculate_information_ratio(portfolio_returns: Returns, benchmark_returns: Returns) -> float:
    """Mean active return over tracking error."""
    p, b = _as_pair(portfolio_returns, benchmark_returns, "information_ratio")
    tracking_error = calculate_tracking_error(p, b)
    _require_denominator(tracking_error, "information_ratio", "tracking error")
    return float(np.mean(p - b)) / tracking_error


def calculate_value_at_risk(returns: Returns, confidence_level: float = 0.05) -> float:
    """Historical-simulation VaR: the return at the confidence percentile."""
    r = np.sort(_as_array(returns, "value_at_risk", min_points=1))
    index = min(int(math.floor(confidence_level * len(r))), len(r) - 1)
    return float(r[index])


def calculate_expected_shortfall(returns: Returns, confidence_level: float = 0.05) -> float:
    """Mean of all returns at or below VaR."""
    r = _as_array(returns, "expected_shortfall", min_points=1)
    var = calculate_value_at_risk(r, confidence_level)
    return float(r[r <= var].mean())


def calculate_concentration_index(portfolio: Portfolio) -> float:
    """Herfindahl index over holding values relative to total value."""
    if portfolio.total_value <= 0:
        raise InsufficientDataError(
            "concentration_index requires a positive total value",
            metric="concentration_index"
        )
    weights = np.array([p.current_value for p in portfolio.properties], dtype=float) / portfolio.total_value
    return float(np.sum(weights ** 2))


def calculate_herfindahl_index(allocation: PortfolioAllocation) -> float:
    """Herfindahl index over the six asset-class weights."""
    weights = np.array(list(allocation.weights().values()), dtype=float)
    return float(np.sum(weights ** 2))


def _undefined_as_none(metric: Callable[..., float], *args) -> Optional[float]:
    try:
        return metric(*args)
    except InsufficientDataError as e:
        logger.warning(f"{e.metric} is undefined for this return series: {e.message}")
        return None


def calculate_risk_metrics(series: ReturnSeries,
                           portfolio: Portfolio,
                           risk_free_rate_annual: float = 0.02,
                           var_confidence: float = 0.05) -> RiskMetrics:
    """
    Calculate all quantitative risk metrics.

    Ratios that depend on the dispersion of the portfolio series (Sharpe,
    Sortino, Calmar, information ratio, correlation) are None when that
    dispersion is zero, as it is for the constant-rate synthetic series.

    Raises:
        InsufficientDataError: If volatility, beta or the other required
            metrics cannot be computed
    """
    p = series.portfolio_returns
    b = series.benchmark_returns

    return RiskMetrics(
        value_at_risk=calculate_value_at_risk(p, var_confidence),
        expected_shortfall=calculate_expected_shortfall(p, var_confidence),
        maximum_drawdown=calculate_max_drawdown(p),
        volatility=calculate_volatility(p),
        beta=calculate_beta(p, b),
        sharpe_ratio=_undefined_as_none(calculate_sharpe_ratio, p, risk_free_rate_annual),
        sortino_ratio=_undefined_as_none(calculate_sortino_ratio, p, risk_free_rate_annual),
        calmar_ratio=_undefined_as_none(calculate_calmar_ratio, p),
        information_ratio=_undefined_as_none(calculate_information_ratio, p, b),
        tracking_error=calculate_tracking_error(p, b),
        correlation_with_market=_undefined_as_none(calculate_correlation, p, b),
        concentration_index=calculate_concentration_index(portfolio),
        herfindahl_index=calculate_herfindahl_index(portfolio.current_allocation),
    )
