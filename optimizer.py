"""
Greedy Minimum Variance Portfolio Optimizer.

Step-wise local search instead of quadratic programming. Starting from equal
weights, every round probes moving a small step of weight into one asset
(taken evenly from all the others) and keeps the move that lowers portfolio
variance, until no probe saves more than a minimum delta.

Objective: minimize σ_p² = Σ w_i² σ_i² + 2 Σ_{i<j} w_i w_j σ_i σ_j ρ_ij
Subject to: Σw ≈ 1, w ≥ 0 (checked before each round)

The result is a step-size bounded local optimum, not the exact minimum.
"""

import logging
import warnings

import numpy as np
import pandas as pd

from config import (
    DEFAULT_STEP,
    DEFAULT_MIN_SAVINGS_DELTA,
    WEIGHT_SUM_LOWER,
    WEIGHT_SUM_UPPER,
    MAX_ROUNDS,
    MIN_WEIGHT,
)
from errors import (
    DegenerateInputError,
    InvalidInputError,
    NumericalInstabilityError,
    PortfolioInputError,
)
from variance import _variance, validate_risk_inputs, covariance_matrix, portfolio_stddev

logger = logging.getLogger(__name__)


def _weights_sum_to_one(weights: list) -> bool:
    total = 0.0
    for w in weights:
        total += w
    return WEIGHT_SUM_LOWER <= total <= WEIGHT_SUM_UPPER


def _weights_non_negative(weights: list) -> bool:
    return all(w >= 0.0 for w in weights)


def _greedy_search(stddevs: list, corr: list, step: float,
                   min_savings_delta: float, max_rounds: int = None) -> dict:
    """
    Run the greedy search on validated inputs.

    Within a round an improving candidate is adopted immediately, so the
    probes for later assets start from it, while savings are always measured
    against the variance at the start of the round. The bar a later probe has
    to clear is the savings of the round's first improving probe; ties go to
    the later asset.

    Returns
    -------
    dict
        - 'weights': list, vector held just before the last adopted move
          (equal weights if nothing was ever adopted)
        - 'last_adopted': list, vector held when the search stopped
        - 'rounds': int, rounds evaluated
        - 'moves': int, candidates adopted
        - 'stop_reason': 'no_improvement', 'constraint_violation' or 'max_rounds'
    """
    n_assets = len(stddevs)
    spread = step / (n_assets - 1)

    best_weights = [1.0 / n_assets] * n_assets
    weights_before = None

    rounds = 0
    moves = 0
    stop_reason = 'constraint_violation'

    while _weights_sum_to_one(best_weights) and _weights_non_negative(best_weights):
        if max_rounds is not None and rounds >= max_rounds:
            stop_reason = 'max_rounds'
            warnings.warn(f"Greedy search stopped after {rounds} rounds without converging",
                          RuntimeWarning)
            break

        rounds += 1
        variance_old = _variance(best_weights, stddevs, corr)
        max_savings = None

        # Choose the asset to increase the weight of
        for i in range(n_assets):
            new_weights = list(best_weights)
            for z in range(n_assets):
                if z == i:
                    new_weights[z] += step
                else:
                    new_weights[z] -= spread

            savings = variance_old - _variance(new_weights, stddevs, corr)

            if savings >= min_savings_delta:
                if max_savings is None:
                    max_savings = savings
                elif savings < max_savings:
                    continue
                weights_before = best_weights
                best_weights = new_weights
                moves += 1

        logger.debug("Round %d: variance %.6e, best savings %s", rounds, variance_old, max_savings)

        if max_savings is None:
            stop_reason = 'no_improvement'
            break

    logger.info("Greedy search finished after %d rounds and %d moves (%s)",
                rounds, moves, stop_reason)

    return {
        'weights': best_weights if weights_before is None else weights_before,
        'last_adopted': best_weights,
        'rounds': rounds,
        'moves': moves,
        'stop_reason': stop_reason,
    }


def _prepare(stddevs, corr, step: float) -> tuple[list, list]:
    s, k = validate_risk_inputs(stddevs, corr)

    if len(s) == 0:
        raise InvalidInputError("At least two assets are required, got none")
    if len(s) == 1:
        raise DegenerateInputError("A single asset cannot be reallocated; need at least two")
    if not step > 0:
        raise InvalidInputError(f"Step must be positive, got {step}")

    return s, k


def minimize_variance(stddevs, corr,
                      step: float = DEFAULT_STEP,
                      min_savings_delta: float = DEFAULT_MIN_SAVINGS_DELTA,
                      max_rounds: int = MAX_ROUNDS) -> np.ndarray:
    """
    Find approximately minimum-variance weights by greedy local search.

    Parameters
    ----------
    stddevs : sequence of float or np.ndarray
        Standard deviation of each asset
    corr : sequence of sequences or np.ndarray
        Correlation matrix (symmetric by convention)
    step : float, default 1e-5
        Weight moved into one asset per probe
    min_savings_delta : float, default 1e-13
        Smallest variance reduction that counts as an improvement
    max_rounds : int, optional
        Stop after this many rounds (with a RuntimeWarning); uncapped if None

    Returns
    -------
    np.ndarray
        The weight vector held immediately before the last accepted move,
        or equal weights if no move ever reduced variance

    Raises
    ------
    DegenerateInputError
        If fewer than two assets are given
    InvalidInputError
        If dimensions disagree or step is not positive
    """
    s, k = _prepare(stddevs, corr, step)
    result = _greedy_search(s, k, step, min_savings_delta, max_rounds)
    return np.array(result['weights'])


def optimize_greedy_min_variance(stddevs, corr,
                                 step: float = DEFAULT_STEP,
                                 min_savings_delta: float = DEFAULT_MIN_SAVINGS_DELTA,
                                 max_rounds: int = MAX_ROUNDS,
                                 asset_names: list = None) -> dict:
    """
    Optimize with the greedy search and report portfolio statistics.

    Parameters
    ----------
    stddevs : sequence of float or np.ndarray
        Standard deviation of each asset
    corr : sequence of sequences or np.ndarray
        Correlation matrix
    step, min_savings_delta, max_rounds
        As for minimize_variance
    asset_names : list, optional
        Labels for 'weights_by_asset'

    Returns
    -------
    dict
        Dictionary containing:
        - 'success': bool, whether the search ran
        - 'method': str
        - 'weights': np.ndarray, weights returned by minimize_variance
        - 'last_adopted_weights': np.ndarray, vector held when the search stopped
        - 'weights_by_asset': pd.Series, the same weights labelled by asset
        - 'portfolio_variance': float
        - 'portfolio_volatility': float
        - 'equal_weight_variance': float, variance of the starting portfolio
        - 'variance_reduction': float, equal-weight minus final variance
        - 'rounds': int, search rounds evaluated
        - 'moves': int, improving moves adopted
        - 'stop_reason': str
        - 'error': str, error message if the search failed
    """
    try:
        s, k = _prepare(stddevs, corr, step)
        n_assets = len(s)

        if asset_names is None:
            asset_names = [f"Asset_{i}" for i in range(n_assets)]
        elif len(asset_names) != n_assets:
            raise InvalidInputError(f"Got {len(asset_names)} asset names for {n_assets} assets")

        search = _greedy_search(s, k, step, min_savings_delta, max_rounds)

        weights = np.array(search['weights'])
        equal_weight_variance = _variance([1.0 / n_assets] * n_assets, s, k)
        portfolio_var = _variance(search['weights'], s, k)

        return {
            'success': True,
            'method': 'Greedy Minimum Variance',
            'weights': weights,
            'last_adopted_weights': np.array(search['last_adopted']),
            'weights_by_asset': pd.Series(weights, index=asset_names, name='weight'),
            'portfolio_variance': portfolio_var,
            'portfolio_volatility': portfolio_stddev(weights, s, k),
            'equal_weight_variance': equal_weight_variance,
            'variance_reduction': equal_weight_variance - portfolio_var,
            'rounds': search['rounds'],
            'moves': search['moves'],
            'stop_reason': search['stop_reason'],
            'error': None
        }

    except (PortfolioInputError, NumericalInstabilityError) as e:
        try:
            n_assets = len(stddevs)
        except TypeError:
            n_assets = 0
        fallback = np.ones(n_assets) / n_assets if n_assets > 0 else np.array([])
        if asset_names is None or len(asset_names) != n_assets:
            asset_names = [f"Asset_{i}" for i in range(n_assets)]
        return {
            'success': False,
            'method': 'Greedy Minimum Variance',
            'weights': fallback,
            'last_adopted_weights': fallback.copy(),
            'weights_by_asset': pd.Series(fallback, index=asset_names, name='weight', dtype=float),
            'portfolio_variance': 0.0,
            'portfolio_volatility': 0.0,
            'equal_weight_variance': 0.0,
            'variance_reduction': 0.0,
            'rounds': 0,
            'moves': 0,
            'stop_reason': None,
            'error': f"Optimization error: {str(e)}"
        }


def analyze_portfolio(weights, stddevs, corr, asset_names: list = None) -> dict:
    """
    Analyze a portfolio in detail.

    Parameters
    ----------
    weights : np.ndarray
        Portfolio weights
    stddevs : sequence of float or np.ndarray
        Standard deviation of each asset
    corr : sequence of sequences or np.ndarray
        Correlation matrix
    asset_names : list, optional
        Names of assets

    Returns
    -------
    dict
        Detailed portfolio analysis
    """
    cov = covariance_matrix(stddevs, corr)
    weights = np.asarray(weights, dtype=float)

    if weights.shape != (cov.shape[0],):
        raise InvalidInputError(f"Expected {cov.shape[0]} weights, got shape {weights.shape}")

    if asset_names is None:
        asset_names = [f"Asset_{i}" for i in range(len(weights))]

    portfolio_var = float(weights @ cov @ weights)
    if portfolio_var < 0:
        raise NumericalInstabilityError(f"Portfolio variance is {portfolio_var}")
    portfolio_vol = np.sqrt(portfolio_var)

    individual_vols = np.sqrt(np.diag(cov))

    # Risk contribution analysis
    marginal_risk = cov @ weights
    risk_contributions = weights * marginal_risk
    risk_contrib_pct = risk_contributions / portfolio_var if portfolio_var > 0 else np.zeros_like(weights)

    asset_analysis = []
    for i, asset in enumerate(asset_names):
        asset_analysis.append({
            'asset': asset,
            'weight': weights[i],
            'individual_vol': individual_vols[i],
            'marginal_risk': marginal_risk[i],
            'risk_contribution': risk_contributions[i],
            'risk_contrib_pct': risk_contrib_pct[i]
        })

    sum_sq = np.sum(weights ** 2)

    return {
        'portfolio_volatility': portfolio_vol,
        'portfolio_variance': portfolio_var,
        'diversification_ratio': (weights @ individual_vols) / portfolio_vol if portfolio_vol > 0 else 1.0,
        'effective_n_assets': 1.0 / sum_sq if sum_sq > 0 else 0.0,
        'weight_sum': float(np.sum(weights)),
        'max_weight': float(np.max(weights)),
        'n_nonzero_assets': int(np.sum(weights > MIN_WEIGHT)),
        'asset_analysis': asset_analysis
    }
