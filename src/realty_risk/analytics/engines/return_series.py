"""Monthly portfolio and benchmark return series construction."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence
import numpy as np
import pandas as pd

from ...common.interfaces import BenchmarkReturnProvider
from ...common.models import Portfolio
from ..exceptions import InsufficientDataError

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12
MIN_PERIODS = 2


class SyntheticBenchmarkProvider(BenchmarkReturnProvider):
    """
    Benchmark proxy: a constant monthly market return plus uniform noise.

    Used when no benchmark feed is available so that beta, correlation and
    tracking error remain computable. Each call draws from a fresh generator
    seeded with `seed`, so a seeded provider always returns the same series.
    """

    def __init__(self,
                 market_return_annual: float = 0.08,
                 noise_amplitude: float = 0.02,
                 seed: Optional[int] = None):
        """
        Initialize synthetic benchmark provider.

        Args:
            market_return_annual: Annual market return
            noise_amplitude: Full width of the uniform noise band around the monthly return
            seed: Seed for reproducible noise; None draws fresh entropy
        """
        self.market_return_annual = market_return_annual
        self.noise_amplitude = noise_amplitude
        self.seed = seed

    def get_returns(self, periods: int) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        noise = (rng.random(periods) - 0.5) * self.noise_amplitude
        return self.market_return_annual / MONTHS_PER_YEAR + noise


class StaticBenchmarkProvider(BenchmarkReturnProvider):
    """Benchmark backed by a recorded series of monthly index returns."""

    def __init__(self, returns: Sequence[float]):
        self.returns = np.asarray(returns, dtype=float)
        if self.returns.ndim != 1:
            raise ValueError("Benchmark returns must be one-dimensional")
        if not np.all(np.isfinite(self.returns)):
            raise ValueError("Benchmark returns must be finite")

    def get_returns(self, periods: int) -> np.ndarray:
        if len(self.returns) < periods:
            raise InsufficientDataError(
                f"Benchmark has {len(self.returns)} periods, {periods} required",
                metric="benchmark_returns",
                required_points=periods,
                available_points=len(self.returns)
            )
        return self.returns[-periods:].copy()


@dataclass(frozen=True)
class ReturnSeries:
    """Aligned monthly portfolio and benchmark returns, oldest first."""
    portfolio_returns: np.ndarray
    benchmark_returns: np.ndarray

    def __post_init__(self):
        if len(self.portfolio_returns) != len(self.benchmark_returns):
            raise InsufficientDataError(
                "Portfolio and benchmark return series must be aligned",
                metric="return_series",
                required_points=len(self.portfolio_returns),
                available_points=len(self.benchmark_returns)
            )
        if len(self.portfolio_returns) < MIN_PERIODS:
            raise InsufficientDataError(
                f"At least {MIN_PERIODS} return periods are required",
                metric="return_series",
                required_points=MIN_PERIODS,
                available_points=len(self.portfolio_returns)
            )

    @property
    def periods(self) -> int:
        return len(self.portfolio_returns)

    @property
    def active_returns(self) -> np.ndarray:
        """Portfolio returns in excess of the benchmark."""
        return self.portfolio_returns - self.benchmark_returns


def _check_portfolio(portfolio: Portfolio) -> None:
    if not portfolio.properties:
        raise InsufficientDataError(
            f"Portfolio {portfolio.id} has no properties to derive returns from",
            metric="portfolio_returns",
            required_points=1,
            available_points=0
        )
    if portfolio.total_value <= 0:
        raise InsufficientDataError(
            f"Portfolio {portfolio.id} has non-positive total value",
            metric="portfolio_returns"
        )


def calculate_monthly_portfolio_return(portfolio: Portfolio) -> float:
    """Value-weighted monthly return implied by each property's annualized return."""
    _check_portfolio(portfolio)
    return sum(
        (p.total_return_percentage / 100 / MONTHS_PER_YEAR) * (p.current_value / portfolio.total_value)
        for p in portfolio.properties
    )


def build_return_series(portfolio: Portfolio,
                        benchmark_provider: BenchmarkReturnProvider,
                        periods: int = 12) -> ReturnSeries:
    """
    Build the trailing return series from annualized property returns.

    There is no per-period history on the snapshot, so every month carries
    the same value-weighted rate. Use build_return_series_from_history when
    true per-period returns exist.

    Args:
        portfolio: Portfolio snapshot
        benchmark_provider: Source of benchmark returns
        periods: Number of trailing months

    Returns:
        Aligned portfolio and benchmark returns
    """
    monthly_return = calculate_monthly_portfolio_return(portfolio)
    portfolio_returns = np.full(periods, monthly_return, dtype=float)
    benchmark_returns = np.asarray(benchmark_provider.get_returns(periods), dtype=float)

    logger.debug(f"Built synthetic return series for portfolio {portfolio.id}: "
                 f"{periods} periods at {monthly_return:.6f}")
    return ReturnSeries(portfolio_returns, benchmark_returns)


def build_return_series_from_history(portfolio: Portfolio,
                                     history: pd.DataFrame,
                                     benchmark_provider: BenchmarkReturnProvider,
                                     periods: Optional[int] = None) -> ReturnSeries:
    """
    Build the return series from per-property historical returns.

    Args:
        portfolio: Portfolio snapshot supplying the holding weights
        history: Per-period returns (rows oldest first, columns keyed by property id)
        benchmark_provider: Source of benchmark returns
        periods: Number of trailing periods to use; all rows when None

    Returns:
        Aligned portfolio and benchmark returns
    """
    _check_portfolio(portfolio)

    if periods is not None:
        history = history.tail(periods)

    if len(history) < MIN_PERIODS:
        raise InsufficientDataError(
            f"Historical returns cover {len(history)} periods, at least {MIN_PERIODS} required",
            metric="portfolio_returns",
            required_points=MIN_PERIODS,
            available_points=len(history)
        )

    weights = pd.Series(portfolio.property_weights())
    known = [column for column in history.columns if column in weights.index]
    unknown = [column for column in history.columns if column not in weights.index]
    if unknown:
        logger.warning(f"Ignoring history for properties not in portfolio {portfolio.id}: {unknown}")
    missing = [pid for pid in weights.index if pid not in history.columns]
    if missing:
        logger.warning(f"No history for properties {missing}; treating their returns as zero")

    aligned = history[known].astype(float).fillna(0.0)
    portfolio_returns = (aligned * weights[known]).sum(axis=1).to_numpy(dtype=float)

    benchmark_returns = np.asarray(benchmark_provider.get_returns(len(portfolio_returns)), dtype=float)
    return ReturnSeries(portfolio_returns, benchmark_returns)
