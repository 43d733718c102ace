#!/usr/bin/env python3
"""
CLI entry point for the churn risk pipeline.

Usage:
    # Score a CSV with the local heuristic
    python -m churn_risk score customers.csv --output-dir exports/

    # Score through the prediction service, falling back to the heuristic
    python -m churn_risk score customers.csv --remote https://api.example.com/dev --fallback

    # Generate sample input
    python -m churn_risk sample 25 > customers.csv

    # List past runs
    python -m churn_risk runs --logs-dir logs/
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import PipelineConfig
from .exceptions import RemoteServiceError, SchemaError, ValidationFailed
from .pipeline import BatchResult, ChurnPipeline
from .run_log import RunLogger
from .scorer import generate_sample_data


def format_summary(result: BatchResult) -> str:
    """Human-readable batch summary."""
    s = result.summary
    lines = [
        f"Batch {result.batch_id} ({result.source}, model {result.model_version})",
        f"  Customers:            {s.total_customers}",
        f"  Successful:           {s.successful_predictions}",
        f"  Failed:               {s.failed_predictions}",
        f"  Success rate:         {s.success_rate:.2f}%",
        f"  Avg churn probability: {s.average_churn_probability:.1%}",
        f"  High risk:            {s.high_risk_customers}",
        f"  Immediate attention:  {s.customers_needing_immediate_attention}",
        f"  Annual revenue at risk: GHS {s.total_annual_revenue_at_risk:,.2f}",
        "  Risk distribution:    "
        + ", ".join(f"{level}={count}" for level, count in s.risk_distribution.items()),
    ]
    if result.warnings:
        lines.append(f"  Skipped rows:         {len(result.warnings)}")
        lines.extend(f"    {w}" for w in result.warnings)
    return "\n".join(lines)


def _load_config(args: argparse.Namespace) -> PipelineConfig:
    config = PipelineConfig.from_yaml(args.config) if args.config else PipelineConfig()
    if args.remote:
        config.use_remote = True
        config.service.base_url = args.remote
    if args.timeout is not None:
        config.service.timeout_seconds = args.timeout
    if args.seed is not None:
        config.seed = args.seed
    if args.partial:
        config.allow_partial = True
    if args.fallback:
        config.fallback_to_heuristic = True
    if args.numeric_policy:
        config.numeric_policy = args.numeric_policy
    if args.logs_dir:
        config.logs_dir = args.logs_dir
    return config


def run_score(args: argparse.Namespace) -> int:
    path = Path(args.input)
    if not path.exists():
        print(f"Input not found: {args.input}")
        return 1

    pipeline = ChurnPipeline(_load_config(args))
    try:
        result = pipeline.run_batch(path.read_text())
    except SchemaError as e:
        print(f"SCHEMA ERROR: {e}")
        return 1
    except ValidationFailed as e:
        print(f"VALIDATION FAILED: {len(e.issues)} issue(s)")
        for issue in e.issues:
            print(f"  {issue}")
        return 1
    except RemoteServiceError as e:
        print(f"PREDICTION SERVICE ERROR: {e}")
        return 1

    print(format_summary(result))
    output = result.write_csv(args.output_dir)
    print(f"\nResults saved to: {output}")
    return 0


def run_sample(args: argparse.Namespace) -> int:
    df = generate_sample_data(n_customers=args.count, seed=args.seed)
    sys.stdout.write(df.to_csv(index=False))
    return 0


def run_list(args: argparse.Namespace) -> int:
    df = RunLogger(args.logs_dir).get_summary_dataframe()
    if df.empty:
        print("No runs found.")
    else:
        print(df.to_string(index=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="churn_risk",
        description="Customer churn risk pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m churn_risk score customers.csv
  python -m churn_risk score customers.csv --remote https://api.example.com/dev
  python -m churn_risk sample 25
  python -m churn_risk runs --logs-dir logs/
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    score = sub.add_parser("score", help="Score a CSV file")
    score.add_argument("input", help="Path to input CSV")
    score.add_argument("--output-dir", default=".", help="Directory for the results CSV")
    score.add_argument("--config", help="Path to YAML pipeline config")
    score.add_argument("--remote", help="Base URL of the prediction service")
    score.add_argument("--timeout", type=float, help="Request timeout in seconds")
    score.add_argument("--seed", type=int, help="Seed for the heuristic scorer")
    score.add_argument(
        "--partial",
        action="store_true",
        help="Score valid rows even if some rows fail validation",
    )
    score.add_argument(
        "--fallback",
        action="store_true",
        help="Use the heuristic scorer if the prediction service fails",
    )
    score.add_argument(
        "--numeric-policy",
        choices=["zero", "missing", "strict"],
        help="How to treat unparseable numbers",
    )
    score.add_argument("--logs-dir", help="Directory for JSON run logs")
    score.set_defaults(func=run_score)

    sample = sub.add_parser("sample", help="Print generated sample customers as CSV")
    sample.add_argument("count", type=int, nargs="?", default=10)
    sample.add_argument("--seed", type=int, default=42)
    sample.set_defaults(func=run_sample)

    runs = sub.add_parser("runs", help="List past runs")
    runs.add_argument("--logs-dir", default="logs", help="Directory of JSON run logs")
    runs.set_defaults(func=run_list)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
