"""Risk report generation over completed risk analyses."""

import json
import logging
from typing import Any, Dict, Optional

import pandas as pd

from .exceptions import RiskAnalysisError
from .models import ImpactLevel, Priority, RiskAnalysis

logger = logging.getLogger(__name__)

# Upper bounds (exclusive) of overall risk for each level; anything above is very-high
RISK_LEVEL_BANDS = (
    (0.25, "low"),
    (0.5, "moderate"),
    (0.75, "high"),
)

PRIORITY_ORDER = {
    Priority.URGENT.value: 0,
    Priority.HIGH.value: 1,
    Priority.MEDIUM.value: 2,
    Priority.LOW.value: 3,
}

FACTOR_COLUMNS = ['name', 'type', 'impact', 'probability', 'description', 'mitigation']
RECOMMENDATION_COLUMNS = ['type', 'priority', 'description', 'action', 'expected_impact', 'implementation']


def classify_risk_level(overall_risk: float) -> str:
    """Map an overall risk score to low / moderate / high / very-high."""
    for upper_bound, level in RISK_LEVEL_BANDS:
        if overall_risk < upper_bound:
            return level
    return "very-high"


def risk_factors_frame(analysis: RiskAnalysis) -> pd.DataFrame:
    """One row per risk factor."""
    rows = [factor.model_dump(mode='json') for factor in analysis.risk_factors]
    return pd.DataFrame(rows, columns=FACTOR_COLUMNS)


def recommendations_frame(analysis: RiskAnalysis) -> pd.DataFrame:
    """One row per recommendation, most urgent and most impactful first."""
    rows = [rec.model_dump(mode='json') for rec in analysis.recommendations]
    frame = pd.DataFrame(rows, columns=RECOMMENDATION_COLUMNS)
    if frame.empty:
        return frame

    frame['priority_rank'] = frame['priority'].map(PRIORITY_ORDER)
    frame = frame.sort_values(['priority_rank', 'expected_impact'], ascending=[True, False], kind='stable')
    return frame.drop(columns='priority_rank').reset_index(drop=True)


def generate_risk_report(analysis: RiskAnalysis) -> Dict[str, Any]:
    """
    Build a report dictionary from a risk analysis.

    Args:
        analysis: Completed risk analysis

    Returns:
        Report with summary, metrics, factors and recommendations
    """
    factors = risk_factors_frame(analysis)
    impact_counts = factors['impact'].value_counts() if not factors.empty else pd.Series(dtype=int)

    summary = {
        'portfolio_id': analysis.portfolio_id,
        'analysis_date': analysis.analysis_date.isoformat(),
        'overall_risk': analysis.overall_risk,
        'risk_level': classify_risk_level(analysis.overall_risk),
        'component_risks': {
            'systematic': analysis.systematic_risk,
            'unsystematic': analysis.unsystematic_risk,
            'concentration': analysis.concentration_risk,
            'liquidity': analysis.liquidity_risk,
            'market': analysis.market_risk,
            'credit': analysis.credit_risk,
            'operational': analysis.operational_risk,
        },
        'factor_counts': {
            level.value: int(impact_counts.get(level.value, 0))
            for level in (ImpactLevel.CRITICAL, ImpactLevel.HIGH, ImpactLevel.MEDIUM)
        },
        'recommendation_count': len(analysis.recommendations),
    }

    logger.debug(f"Generated risk report for portfolio {analysis.portfolio_id}")
    return {
        'summary': summary,
        'metrics': analysis.risk_metrics.model_dump(mode='json'),
        'risk_factors': factors.to_dict(orient='records'),
        'recommendations': recommendations_frame(analysis).to_dict(orient='records'),
    }


def build_risk_response(analysis: Optional[RiskAnalysis] = None,
                        error: Optional[Exception] = None) -> Dict[str, Any]:
    """Wrap an analysis, or the error that prevented one, in a response envelope."""
    if error is not None:
        if isinstance(error, RiskAnalysisError):
            message = error.message
        else:
            message = str(error) or type(error).__name__
        return {'analysis': None, 'success': False, 'message': message}

    if analysis is None:
        raise ValueError("Either analysis or error must be provided")

    return {
        'analysis': analysis.model_dump(mode='json', by_alias=True),
        'success': True,
        'message': None,
    }


def export_report_json(analysis: RiskAnalysis, indent: Optional[int] = 2) -> str:
    """Serialize an analysis with camelCase keys."""
    return json.dumps(analysis.model_dump(mode='json', by_alias=True), indent=indent)
