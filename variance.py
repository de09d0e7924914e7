"""
Portfolio variance evaluation from standard deviations and correlations.

Variance of a weighted portfolio:

    σ_p² = Σ w_i² σ_i²  +  Σ_{i<j} 2 w_i w_j σ_i σ_j ρ_ij

The correlation matrix is read row by row and every unordered pair of assets
is counted exactly once, so only the upper triangle (ρ_ij with i < j) ever
contributes. The diagonal is ignored.
"""

import numpy as np

from errors import InvalidInputError, NumericalInstabilityError


def validate_risk_inputs(stddevs, corr) -> tuple[list, list]:
    """
    Check standard deviations and correlations against each other.

    Parameters
    ----------
    stddevs : sequence of float or np.ndarray
        Standard deviation of each asset
    corr : sequence of sequences or np.ndarray
        n x n correlation matrix

    Returns
    -------
    tuple[list, list]
        (stddevs, corr) as plain Python lists of floats
    """
    try:
        s = np.asarray(stddevs, dtype=float)
        k = np.asarray(corr, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Inputs are not numeric arrays: {e}") from e

    if s.ndim != 1:
        raise InvalidInputError(f"Standard deviations must be a vector, got shape {s.shape}")
    if k.ndim != 2 or k.shape[0] != k.shape[1]:
        raise InvalidInputError(f"Correlation matrix must be square, got shape {k.shape}")
    if k.shape[0] != len(s):
        raise InvalidInputError(
            f"Correlation matrix is {k.shape[0]}x{k.shape[1]} but {len(s)} standard deviations were given"
        )

    return s.tolist(), k.tolist()


def _check_weights(weights, n_assets: int) -> list:
    try:
        w = np.asarray(weights, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Weights are not a numeric vector: {e}") from e

    if w.ndim != 1 or len(w) != n_assets:
        raise InvalidInputError(f"Expected {n_assets} weights, got shape {w.shape}")

    return w.tolist()


def _variance(w: list, s: list, k: list) -> float:
    # Hot path for the optimizer: inputs are already validated lists.
    total = 0.0

    for i in range(len(s)):
        total += (w[i] ** 2) * (s[i] ** 2)

    seen_pairs = set()

    for i in range(len(k)):
        for j in range(len(k[i])):
            if i == j:
                continue
            pair = (i, j) if i < j else (j, i)
            if pair in seen_pairs:
                continue
            total += 2 * w[i] * w[j] * s[i] * s[j] * k[i][j]
            seen_pairs.add(pair)

    return total


def portfolio_variance(weights, stddevs, corr) -> float:
    """
    Calculate portfolio variance for the given weights.

    Parameters
    ----------
    weights : sequence of float or np.ndarray
        Portfolio weights, one per asset
    stddevs : sequence of float or np.ndarray
        Standard deviation of each asset
    corr : sequence of sequences or np.ndarray
        Correlation matrix (only the upper triangle is used)

    Returns
    -------
    float
        Portfolio variance

    Raises
    ------
    InvalidInputError
        If the three inputs disagree on the number of assets
    """
    s, k = validate_risk_inputs(stddevs, corr)
    w = _check_weights(weights, len(s))
    return _variance(w, s, k)


def portfolio_stddev(weights, stddevs, corr) -> float:
    """
    Calculate portfolio standard deviation (square root of the variance).

    Raises
    ------
    NumericalInstabilityError
        If the variance is negative or not finite, which happens when the
        correlation matrix is not positive semi-definite
    """
    var = portfolio_variance(weights, stddevs, corr)

    if not np.isfinite(var) or var < 0:
        raise NumericalInstabilityError(
            f"Portfolio variance is {var}; check that the correlation matrix is positive semi-definite"
        )

    return float(np.sqrt(var))


def covariance_matrix(stddevs, corr) -> np.ndarray:
    """
    Build the covariance matrix Σ = D·ρ·D where D = diag(σ).

    The diagonal is set to σ_i² whatever the correlation diagonal holds,
    in line with the evaluator ignoring it.
    """
    s, k = validate_risk_inputs(stddevs, corr)
    vols = np.array(s)
    cov = np.outer(vols, vols) * np.array(k)
    np.fill_diagonal(cov, vols ** 2)
    return cov
