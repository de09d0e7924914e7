#!/usr/bin/env python3
"""
Greedy Minimum Variance Portfolio Optimizer

Compute approximately minimum-variance weights from standard deviations and
a correlation matrix, given on the command line or estimated from a CSV of
daily returns. Without arguments, runs the two-asset demo.

Usage:
    python run.py
    python run.py --stddevs 0.2 0.3 0.25 --corr "[[1, 0.2, 0], [0.2, 1, 0.5], [0, 0.5, 1]]"
    python run.py --returns returns.csv --max-rounds 50000
"""

import argparse
import json
import logging
import sys

import numpy as np

from config import (
    DEFAULT_STEP,
    DEFAULT_MIN_SAVINGS_DELTA,
    MAX_ROUNDS,
    DEMO_STDDEVS,
    DEMO_CORRELATIONS,
)
from estimators import estimate_risk_inputs, load_returns_csv
from optimizer import optimize_greedy_min_variance, analyze_portfolio


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Greedy minimum variance portfolio optimizer'
    )
    parser.add_argument('--stddevs', nargs='+', type=float,
                        help='Standard deviation of each asset')
    parser.add_argument('--corr', type=str,
                        help='Correlation matrix as JSON, e.g. "[[1, 0], [0, 1]]"')
    parser.add_argument('--returns', type=str,
                        help='CSV of daily returns (date index, one column per asset)')
    parser.add_argument('--step', type=float, default=DEFAULT_STEP,
                        help='Weight moved per probe (default: %(default)s)')
    parser.add_argument('--min-savings-delta', type=float, default=DEFAULT_MIN_SAVINGS_DELTA,
                        help='Smallest variance reduction counted as improvement')
    parser.add_argument('--max-rounds', type=int, default=MAX_ROUNDS,
                        help='Stop after this many rounds (default: no cap)')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')
    return parser.parse_args(argv)


def resolve_inputs(args):
    """Return (stddevs, corr, asset_names) from the parsed arguments."""
    if args.returns:
        returns = load_returns_csv(args.returns)
        stddevs, corr = estimate_risk_inputs(returns)
        return stddevs, corr, list(returns.columns)

    if args.stddevs is not None:
        if args.corr is None:
            corr = np.eye(len(args.stddevs))
        else:
            corr = json.loads(args.corr)
        return args.stddevs, corr, None

    if args.corr is not None:
        raise ValueError("--corr needs --stddevs")

    return DEMO_STDDEVS, DEMO_CORRELATIONS, None


def main(argv=None):
    """Run the optimizer and print the allocation."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s - %(message)s'
    )

    try:
        stddevs, corr, asset_names = resolve_inputs(args)
    except (OSError, TypeError, ValueError) as e:
        print(f"❌ Could not read inputs: {e}")
        return 1

    print("🚀 Greedy Minimum Variance Portfolio Optimizer")
    print(f"   Stdevs input: {[round(float(s), 6) for s in stddevs]}")
    print(f"   Step: {args.step}, min savings: {args.min_savings_delta}")
    print()

    result = optimize_greedy_min_variance(
        stddevs, corr,
        step=args.step,
        min_savings_delta=args.min_savings_delta,
        max_rounds=args.max_rounds,
        asset_names=asset_names
    )

    if not result['success']:
        print(f"❌ {result['error']}")
        return 1

    analysis = analyze_portfolio(result['weights'], stddevs, corr,
                                 asset_names=list(result['weights_by_asset'].index))

    print(f"Risk before: {result['equal_weight_variance']:.10f}")
    print(f"Risk after:  {result['portfolio_variance']:.10f}")
    print(f"Volatility:  {result['portfolio_volatility']:.4%}")
    print(f"Rounds: {result['rounds']}, moves: {result['moves']} ({result['stop_reason']})")
    print()
    print("New optimum weights:")
    for row in analysis['asset_analysis']:
        print(f"   {row['asset']:<10} {row['weight']:8.4%}   risk contribution {row['risk_contrib_pct']:7.2%}")
    print()
    print(f"Diversification ratio: {analysis['diversification_ratio']:.3f}")
    print(f"Effective assets:      {analysis['effective_n_assets']:.2f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
