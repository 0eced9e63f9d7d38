"""lazyexpr: Deferred Expressions with Late-Bound Parameters.

A small library for building trees of operations that run later. Every
expression is a future computation; calling evaluate() runs it once and
consumes it.

Features:
- Value and function leaves, map() and arithmetic operators to compose them
- Parameters that are bound after the tree is built
- clone() to evaluate the same tree shape again with new bindings
- Zero runtime dependencies

Example:
    import math
    from lazyexpr import Parameter, lazy

    x, set_x = Parameter.empty()
    y, set_y = Parameter.empty()
    magnitude = (x.map(lambda n: n ** 2) + y.map(lambda n: n ** 2)).map(math.sqrt)
    again = magnitude.clone()

    set_x.set(5.0)
    set_y.set(12.0)
    magnitude.evaluate()  # 13.0

    set_y.set(3.0)
    set_x.set(5.0)
    again.evaluate()  # 5.830951894845301

Plain values mix with expressions:

    (lazy(2) + 3).map(str).evaluate()  # '5'

To observe evaluation:

    from lazyexpr import configure_tracer

    class PrintTracer:
        def node_evaluated(self, node, value):
            print(type(node).__name__, value)

    configure_tracer(PrintTracer())
"""

from .core import (
    EvaluationTracer,
    Expression,
    Lazy,
    Map,
    Thunk,
    Value,
    configure_tracer,
    get_tracer,
    lazy,
    lazyf,
)
from .exceptions import ConsumedExpressionError, LazyExprError, UnboundParameterError
from .ops import BinaryOp, as_expression, combine
from .param import EMPTY, Parameter, ParameterContent, Slot

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "Expression",
    "Lazy",
    "Value",
    "Thunk",
    "Map",
    "BinaryOp",
    # Constructors
    "lazy",
    "lazyf",
    "combine",
    "as_expression",
    # Parameters
    "Parameter",
    "ParameterContent",
    "Slot",
    "EMPTY",
    # Tracer configuration
    "EvaluationTracer",
    "configure_tracer",
    "get_tracer",
    # Exceptions
    "LazyExprError",
    "UnboundParameterError",
    "ConsumedExpressionError",
]
