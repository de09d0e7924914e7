"""
Configuration for the Greedy Minimum Variance Portfolio Optimizer.

Simple and focused configuration for the step-wise search.
"""

# Greedy search parameters
DEFAULT_STEP = 0.00001                 # Weight moved into one asset per probe
DEFAULT_MIN_SAVINGS_DELTA = 1e-13      # Smallest variance reduction treated as real

# Weight simplex guard (checked before every round)
WEIGHT_SUM_LOWER = 0.99
WEIGHT_SUM_UPPER = 1.01

# Optional cap on search rounds (None = run until no improving move)
MAX_ROUNDS = None

# Portfolio analysis
MIN_WEIGHT = 1e-4  # Weights below this count as zero positions

# Time series parameters
TRADING_DAYS_PER_YEAR = 252

# Estimation windows
SIGMA_WINDOW = 60  # Medium adaptation for volatility
RHO_WINDOW = 30    # Fast adaptation for correlations

# Demo inputs (two independent assets)
DEMO_STDDEVS = [0.2, 0.3]
DEMO_CORRELATIONS = [
    [1.0, 0.0],
    [0.0, 1.0],
]
