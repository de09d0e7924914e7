"""
Test suite for volatility and correlation estimation and the command line runner.
"""

import numpy as np
import pandas as pd
import sys
import os
import tempfile

# Add current directory to path for imports
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from estimators import estimate_risk_inputs, load_returns_csv
from optimizer import optimize_greedy_min_variance
from config import TRADING_DAYS_PER_YEAR
import run


def _simulated_returns(n_days=120, seed=42):
    rng = np.random.default_rng(seed)
    dates = pd.date_range('2023-01-02', periods=n_days, freq='B')
    return pd.DataFrame({
        'SPY': rng.normal(0.0005, 0.012, n_days),
        'TLT': rng.normal(0.0002, 0.004, n_days),
        'GLD': rng.normal(0.0003, 0.010, n_days),
        'Cash': [0.0] * n_days,
    }, index=dates)


def test_estimate_risk_inputs():
    """Test window handling, annualization and cash handling."""
    print("Testing risk input estimation...")

    returns = _simulated_returns()
    vols, corr = estimate_risk_inputs(returns, sigma_window=60, rho_window=30)

    expected_spy = returns['SPY'].tail(60).std() * np.sqrt(TRADING_DAYS_PER_YEAR)
    assert np.isclose(vols[0], expected_spy), f"Wrong SPY volatility: {vols[0]}"
    assert vols[3] == 0.0, "Constant cash series should have zero volatility"

    assert corr.shape == (4, 4)
    assert np.allclose(np.diag(corr), 1.0)
    assert np.allclose(corr, corr.T)
    assert np.all(corr[3, :3] == 0.0), "Cash should be uncorrelated"
    assert np.isclose(corr[0, 1], returns[['SPY', 'TLT']].tail(30).corr().iloc[0, 1])

    daily_vols, _ = estimate_risk_inputs(returns, annualize=False)
    assert np.allclose(daily_vols * np.sqrt(TRADING_DAYS_PER_YEAR), estimate_risk_inputs(returns)[0])

    print("✅ Risk input estimation test passed")


def test_short_history_rejected():
    """Test that too little data raises."""
    print("\nTesting short history...")

    try:
        estimate_risk_inputs(_simulated_returns(n_days=10))
        raise AssertionError("Expected ValueError")
    except ValueError as e:
        print(f"Raised as expected: {e}")

    print("✅ Short history test passed")


def test_estimates_feed_optimizer():
    """Test the estimated inputs end to end."""
    print("\nTesting estimation into optimization...")

    returns = _simulated_returns()[['SPY', 'TLT', 'GLD']]
    vols, corr = estimate_risk_inputs(returns)

    result = optimize_greedy_min_variance(vols, corr, step=1e-3, asset_names=list(returns.columns))
    print(f"Weights: {result['weights_by_asset'].round(3).to_dict()}")

    assert result['success'], result['error']
    assert result['portfolio_variance'] < result['equal_weight_variance']
    assert result['weights_by_asset'].idxmax() == 'TLT', "Lowest volatility asset should dominate"

    print("✅ Estimation into optimization test passed")


def test_run_demo_and_csv():
    """Test the command line entry point."""
    print("\nTesting command line runner...")

    assert run.main([]) == 0, "Demo run should succeed"
    assert run.main(['--stddevs', '0.2', '0.3', '0.25', '--step', '0.001']) == 0
    assert run.main(['--stddevs', '0.2', '--step', '0.001']) == 1, "Single asset should fail"
    assert run.main(['--corr', '[[1, 0], [0, 1]]']) == 1, "Correlations alone are not enough"

    with tempfile.TemporaryDirectory() as tmp_dir:
        csv_path = os.path.join(tmp_dir, 'returns.csv')
        _simulated_returns()[['SPY', 'TLT', 'GLD']].to_csv(csv_path)

        loaded = load_returns_csv(csv_path)
        assert list(loaded.columns) == ['SPY', 'TLT', 'GLD']
        assert isinstance(loaded.index, pd.DatetimeIndex)

        assert run.main(['--returns', csv_path, '--step', '0.001']) == 0
        assert run.main(['--returns', os.path.join(tmp_dir, 'missing.csv')]) == 1

        # Non-numeric columns are reported, not raised
        text_path = os.path.join(tmp_dir, 'text_returns.csv')
        with_text = _simulated_returns()[['SPY', 'TLT']]
        with_text['Ticker'] = 'GLD'
        with_text.to_csv(text_path)
        assert run.main(['--returns', text_path]) == 1, "Non-numeric returns should fail cleanly"

    print("✅ Command line runner test passed")


def main():
    """Run all estimator and runner tests."""
    print("=" * 50)
    print("ESTIMATOR AND RUNNER TESTS")
    print("=" * 50)

    try:
        test_estimate_risk_inputs()
        test_short_history_rejected()
        test_estimates_feed_optimizer()
        test_run_demo_and_csv()

        print("\n" + "=" * 50)
        print("ALL ESTIMATOR TESTS PASSED! 🎉")
        print("=" * 50)
        return True

    except Exception as e:
        print(f"\n❌ TEST FAILED: {str(e)}")
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
