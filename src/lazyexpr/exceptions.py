"""Custom exceptions for lazyexpr."""


class LazyExprError(Exception):
    """Base exception for all lazyexpr errors."""

    pass


class UnboundParameterError(LazyExprError):
    """Raised when a Parameter is evaluated before a value was set."""

    pass


class ConsumedExpressionError(LazyExprError):
    """Raised when an expression is used after being evaluated or composed."""

    pass
