"""
Exceptions raised by the variance evaluator and the greedy optimizer.
"""


class PortfolioInputError(ValueError):
    """Base class for inputs the optimizer cannot work with."""


class InvalidInputError(PortfolioInputError):
    """Weights, standard deviations and correlations do not line up."""


class DegenerateInputError(PortfolioInputError):
    """Fewer than two assets: there is nothing to reallocate between."""


class NumericalInstabilityError(ArithmeticError):
    """Portfolio variance came out negative or non-finite.

    Usually means the correlation matrix is not positive semi-definite.
    """
