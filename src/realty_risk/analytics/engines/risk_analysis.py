"""Risk analysis engine for real-estate portfolio risk assessment."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Tuple
import numpy as np
import pandas as pd

from ...common.config import RiskConfig, get_config
from ...common.interfaces import BenchmarkReturnProvider
from ...common.logging import correlation_context, get_correlation_id, log_execution_time
from ...common.models import Portfolio
from ...common.validation import validate_portfolio
from ..exceptions import RiskAnalysisError
from ..models import ImpactLevel, RiskAnalysis, RiskFactor, RiskMetrics, RiskRecommendation
from .recommendations import DEFAULT_RULES, RecommendationRule, generate_recommendations
from .return_series import (
    ReturnSeries,
    SyntheticBenchmarkProvider,
    build_return_series,
    build_return_series_from_history,
)
from .risk_factors import (
    calculate_leverage_score,
    calculate_liquidity_score,
    calculate_operational_score,
    identify_risk_factors,
)
from .risk_metrics import calculate_risk_metrics, calculate_variance

logger = logging.getLogger(__name__)

MARKET_BETA = 1.0
# Volatility at which market risk saturates
MARKET_RISK_VOLATILITY_CAP = 0.2


def calculate_overall_risk(metrics: RiskMetrics,
                           factors: Sequence[RiskFactor],
                           var_normalization: float = 1_000_000.0) -> float:
    """
    Weighted composite risk score, clamped to [0, 1].

    The VaR term is divided by a fixed scale rather than one derived from
    portfolio size.
    """
    severe_factors = sum(1 for f in factors if f.impact in (ImpactLevel.HIGH, ImpactLevel.CRITICAL))
    score = (
        metrics.volatility * 0.3
        + metrics.beta * 0.2
        + metrics.concentration_index * 0.2
        + (metrics.value_at_risk / var_normalization) * 0.15
        + severe_factors * 0.15
    )
    return min(max(score, 0.0), 1.0)


def calculate_systematic_risk(beta: float) -> float:
    """Beta scaled by the market beta."""
    return beta * MARKET_BETA


def calculate_unsystematic_risk(series: ReturnSeries, beta: float) -> float:
    """Portfolio variance not explained by the benchmark."""
    return calculate_variance(series.portfolio_returns) - beta ** 2 * calculate_variance(series.benchmark_returns)


class RiskAnalyzer:
    """Portfolio risk analysis orchestrator."""

    def __init__(self,
                 config: Optional[RiskConfig] = None,
                 benchmark_provider: Optional[BenchmarkReturnProvider] = None,
                 extra_rules: Iterable[RecommendationRule] = ()):
        """
        Initialize risk analyzer.

        Args:
            config: Risk configuration; the global configuration when None
            benchmark_provider: Benchmark source; a synthetic provider built from config when None
            extra_rules: Recommendation rules evaluated after the default rules
        """
        self.config = config or get_config().risk
        self.benchmark_provider = benchmark_provider or SyntheticBenchmarkProvider(
            market_return_annual=self.config.market_return_annual,
            noise_amplitude=self.config.benchmark_noise,
            seed=self.config.benchmark_seed,
        )
        self.rules: Tuple[RecommendationRule, ...] = DEFAULT_RULES + tuple(extra_rules)

    def build_series(self, portfolio: Portfolio,
                     historical_returns: Optional[pd.DataFrame] = None) -> ReturnSeries:
        """Build the trailing return series, from history when supplied."""
        if historical_returns is not None:
            return build_return_series_from_history(
                portfolio, historical_returns, self.benchmark_provider, self.config.trailing_months
            )
        return build_return_series(portfolio, self.benchmark_provider, self.config.trailing_months)

    def _metrics_and_factors(self, portfolio: Portfolio,
                             series: ReturnSeries) -> Tuple[RiskMetrics, List[RiskFactor]]:
        def metrics():
            return calculate_risk_metrics(
                series, portfolio, self.config.risk_free_rate_annual, self.config.var_confidence
            )

        def factors():
            return identify_risk_factors(portfolio, series)

        if not self.config.parallel_execution:
            return metrics(), factors()

        # Correlation ids are thread-local, so each worker re-enters the caller's context
        correlation_id = get_correlation_id()

        def in_context(task):
            with correlation_context(correlation_id):
                return task()

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="risk-analysis") as executor:
            metrics_future = executor.submit(in_context, metrics)
            factors_future = executor.submit(in_context, factors)
            return metrics_future.result(), factors_future.result()

    def analyze_portfolio_risk(self, portfolio: Portfolio,
                               historical_returns: Optional[pd.DataFrame] = None) -> RiskAnalysis:
        """
        Comprehensive risk analysis of a portfolio snapshot.

        Args:
            portfolio: Portfolio snapshot
            historical_returns: Optional per-property monthly returns
                (rows oldest first, columns keyed by property id)

        Returns:
            Risk analysis results

        Raises:
            InvalidPortfolioError: If the portfolio fails validation
            InsufficientDataError: If required statistics cannot be computed
            RiskAnalysisError: If risk analysis fails for any other reason
        """
        with correlation_context():
            return self._analyze(portfolio, historical_returns)

    @log_execution_time(logger, "Portfolio risk analysis")
    def _analyze(self, portfolio: Portfolio,
                 historical_returns: Optional[pd.DataFrame]) -> RiskAnalysis:
        try:
            logger.info(f"Starting risk analysis for portfolio {portfolio.id}")

            for warning in validate_portfolio(portfolio, self.config.allocation_tolerance):
                logger.warning(f"Portfolio {portfolio.id}: {warning}")

            series = self.build_series(portfolio, historical_returns)
            metrics, factors = self._metrics_and_factors(portfolio, series)
            recommendations = generate_recommendations(
                portfolio, metrics, factors, self.rules, self.config.rebalance_threshold
            )

            analysis = self._assemble(portfolio, series, metrics, factors, recommendations)
            logger.info(
                f"Risk analysis completed for portfolio {portfolio.id}: "
                f"overall risk {analysis.overall_risk:.3f}, {len(factors)} factors, "
                f"{len(recommendations)} recommendations"
            )
            return analysis

        except RiskAnalysisError as e:
            logger.error(f"Risk analysis failed for portfolio {portfolio.id}: {e}")
            raise
        except Exception as e:
            logger.error(f"Risk analysis failed for portfolio {portfolio.id}: {e}")
            raise RiskAnalysisError(f"Risk analysis failed: {e}", cause=e) from e

    def _assemble(self, portfolio: Portfolio,
                  series: ReturnSeries,
                  metrics: RiskMetrics,
                  factors: List[RiskFactor],
                  recommendations: List[RiskRecommendation]) -> RiskAnalysis:
        return RiskAnalysis(
            portfolio_id=portfolio.id,
            overall_risk=calculate_overall_risk(metrics, factors, self.config.var_normalization),
            systematic_risk=calculate_systematic_risk(metrics.beta),
            unsystematic_risk=calculate_unsystematic_risk(series, metrics.beta),
            # Allocation weights are fractional, so the HHI is already on a 0-1 scale
            concentration_risk=min(metrics.herfindahl_index, 1.0),
            liquidity_risk=float(np.clip(calculate_liquidity_score(portfolio), 0.0, 1.0)),
            market_risk=min(metrics.volatility / MARKET_RISK_VOLATILITY_CAP, 1.0),
            credit_risk=min(calculate_leverage_score(portfolio), 1.0),
            operational_risk=calculate_operational_score(portfolio),
            risk_factors=factors,
            risk_metrics=metrics,
            recommendations=recommendations,
        )


def analyze_portfolio_risk(portfolio: Portfolio,
                           config: Optional[RiskConfig] = None,
                           benchmark_provider: Optional[BenchmarkReturnProvider] = None,
                           historical_returns: Optional[pd.DataFrame] = None) -> RiskAnalysis:
    """Analyze a portfolio with a one-off RiskAnalyzer."""
    analyzer = RiskAnalyzer(config=config, benchmark_provider=benchmark_provider)
    return analyzer.analyze_portfolio_risk(portfolio, historical_returns)
