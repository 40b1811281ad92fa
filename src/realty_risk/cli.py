"""Command-line interface for portfolio risk analysis."""

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError

from .analytics.exceptions import RiskAnalysisError
from .analytics.engines.risk_analysis import RiskAnalyzer
from .analytics.risk_reporting import build_risk_response, generate_risk_report
from .common.config import ConfigManager, ConfigurationError
from .common.logging import get_logger, setup_logging
from .common.models import Portfolio

logger = get_logger("cli")


def load_portfolio(path: str) -> Portfolio:
    """Load a portfolio document from a JSON or YAML file."""
    file_path = Path(path)
    with open(file_path, 'r', encoding='utf-8') as f:
        if file_path.suffix.lower() in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    return Portfolio.model_validate(data)


def format_text_report(report: dict) -> str:
    """Render a report dictionary as plain text."""
    summary = report['summary']
    lines = [
        f"Portfolio: {summary['portfolio_id']}",
        f"Overall risk: {summary['overall_risk']:.3f} ({summary['risk_level']})",
        "",
        "Component risks:",
    ]
    for name, value in summary['component_risks'].items():
        lines.append(f"  {name:<14} {value:.4f}")

    lines.extend(["", "Metrics:"])
    for name, value in report['metrics'].items():
        rendered = "n/a" if value is None else f"{value:.6f}"
        lines.append(f"  {name:<24} {rendered}")

    lines.extend(["", f"Risk factors ({len(report['risk_factors'])}):"])
    for factor in report['risk_factors']:
        lines.append(f"  [{factor['impact']}] {factor['name']} (p={factor['probability']:.1f})")

    lines.extend(["", f"Recommendations ({len(report['recommendations'])}):"])
    for rec in report['recommendations']:
        lines.append(f"  [{rec['priority']}] {rec['action']}")

    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="realty-risk",
        description="Real-estate portfolio risk analysis"
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    analyze = subparsers.add_parser('analyze', help='Analyze a portfolio file')
    analyze.add_argument('portfolio_file', help='Portfolio document (JSON or YAML)')
    analyze.add_argument('--config', help='Configuration file (JSON or YAML)')
    analyze.add_argument('--seed', type=int, help='Seed for the synthetic benchmark')
    analyze.add_argument('--months', type=int, help='Number of trailing months')
    analyze.add_argument('--format', choices=['json', 'text'], default='text', help='Output format')
    analyze.add_argument('--sequential', action='store_true',
                         help='Compute metrics and risk factors on the calling thread')
    return parser


def run_analyze(args: argparse.Namespace) -> int:
    try:
        config = ConfigManager(config_file=args.config, auto_discover=args.config is None).load_config()
        overrides = {}
        if args.seed is not None:
            overrides['benchmark_seed'] = args.seed
        if args.months is not None:
            overrides['trailing_months'] = args.months
        if args.sequential:
            overrides['parallel_execution'] = False
        risk_config = dataclasses.replace(config.risk, **overrides)
    except (ConfigurationError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.logging)

    try:
        portfolio = load_portfolio(args.portfolio_file)
    except (OSError, json.JSONDecodeError, yaml.YAMLError, ValidationError) as e:
        logger.error(f"Could not load portfolio from {args.portfolio_file}: {e}")
        print(f"Could not load portfolio: {e}", file=sys.stderr)
        return 2
    logger.info(f"Loaded portfolio {portfolio.id} with {len(portfolio.properties)} properties "
                f"from {args.portfolio_file}")

    try:
        analysis = RiskAnalyzer(config=risk_config).analyze_portfolio_risk(portfolio)
    except RiskAnalysisError as e:
        if args.format == 'json':
            print(json.dumps(build_risk_response(error=e), indent=2))
        print(f"Risk analysis failed: {e}", file=sys.stderr)
        return 1

    report = generate_risk_report(analysis)
    if args.format == 'json':
        print(json.dumps(report, indent=2))
    else:
        print(format_text_report(report))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == 'analyze':
        return run_analyze(args)
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == '__main__':
    sys.exit(main())
