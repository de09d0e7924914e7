"""
Parameter estimation for the greedy minimum variance optimizer.

Turns a history of daily returns into the two inputs the optimizer needs:
per-asset volatilities and the correlation matrix. Expected returns are not
needed for minimum variance.
"""

import numpy as np
import pandas as pd
from config import SIGMA_WINDOW, RHO_WINDOW, TRADING_DAYS_PER_YEAR


def estimate_risk_inputs(returns: pd.DataFrame,
                         sigma_window: int = None,
                         rho_window: int = None,
                         annualize: bool = True) -> tuple[np.ndarray, np.ndarray]:
    """
    Estimate volatilities and correlations from daily returns.

    - σ (volatility): medium adaptation (default 60 days)
    - ρ (correlation): fast adaptation (default 30 days)

    Parameters
    ----------
    returns : pd.DataFrame
        Daily simple returns with assets as columns
    sigma_window : int, optional
        Window for volatility estimation (uses config default if None)
    rho_window : int, optional
        Window for correlation estimation (uses config default if None)
    annualize : bool, default True
        Scale daily volatilities by sqrt(252)

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        (volatilities, correlation_matrix)
    """
    n_days = len(returns)

    if n_days < 20:  # Minimum reasonable sample
        raise ValueError(f"Need at least 20 days of data, got {n_days}")

    if sigma_window is None:
        sigma_window = SIGMA_WINDOW
    if rho_window is None:
        rho_window = RHO_WINDOW

    vol_window = min(sigma_window, n_days)
    volatilities = returns.tail(vol_window).std().values
    if annualize:
        volatilities = volatilities * np.sqrt(TRADING_DAYS_PER_YEAR)

    # Constant series (e.g. cash) have undefined std
    volatilities = np.nan_to_num(volatilities, nan=0.0)

    corr_window = min(rho_window, n_days)
    correlation_matrix = returns.tail(corr_window).corr().values

    # Undefined correlations (constant series) count as uncorrelated
    correlation_matrix = np.nan_to_num(correlation_matrix, nan=0.0)
    np.fill_diagonal(correlation_matrix, 1.0)

    return volatilities, correlation_matrix


def load_returns_csv(path) -> pd.DataFrame:
    """Read daily returns from a CSV with a date index and one column per asset."""
    returns = pd.read_csv(path, index_col=0, parse_dates=True)
    return returns.dropna(how='all')
