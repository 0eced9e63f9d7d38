"""Binary arithmetic combinators.

Operators on Lazy expressions do not compute anything; they build a BinaryOp
node holding both operands and the operator function:

    from lazyexpr import combine, lazy

    expr = lazy(7) - lazy(2)   # Lazy(BinaryOp(Value(7) - Value(2)))
    expr.evaluate()            # 5

Any two-argument callable can be deferred the same way with combine():

    combine(lazy(3), lazy(4), max).evaluate()  # 4
"""

import operator
from typing import Any, Callable, TypeVar

from .core import Expression, Lazy, Value, _adopt
from .exceptions import ConsumedExpressionError

T = TypeVar("T")

_SYMBOLS = {
    operator.add: "+",
    operator.sub: "-",
    operator.mul: "*",
    operator.truediv: "/",
    operator.floordiv: "//",
    operator.mod: "%",
    operator.pow: "**",
}


def as_expression(value: Any) -> Expression:
    """Return value if it is already an Expression, otherwise wrap it in Value."""
    if isinstance(value, Expression):
        return value
    return Value(value)


class BinaryOp(Expression[T]):
    """
    Combines two expressions with a binary operator.

    Evaluates the left operand, then the right one, and returns
    op(left_value, right_value). Lazy operands are unwrapped, so a long
    chain like `total = total + x` nests one node per term.
    """

    def __init__(self, left: Expression[T], right: Expression[T], op: Callable[[T, T], T]):
        # Both operands must be live and distinct before either one is taken
        left._check_live()
        right._check_live()
        if left is right:
            raise ConsumedExpressionError(
                "The same expression cannot be both operands; clone() one of them."
            )
        self._left = _adopt(left)
        self._right = _adopt(right)
        self._op = op

    @property
    def symbol(self) -> str:
        """Infix symbol for the operator, or its name if it has none."""
        self._check_live()
        return _SYMBOLS.get(self._op) or getattr(self._op, "__name__", repr(self._op))

    def _children(self) -> "tuple[Expression, ...]":
        return (self._left, self._right)

    def _apply(self, values: list) -> T:
        return self._op(values[0], values[1])

    def _rebuild(self, copies: list) -> "BinaryOp[T]":
        return BinaryOp(copies[0], copies[1], self._op)

    def _describe(self, parts: list) -> str:
        return f"BinaryOp({parts[0]} {self.symbol} {parts[1]})"


def combine(left: Any, right: Any, op: Callable[[Any, Any], Any]) -> Lazy:
    """
    Defer op(left, right) until evaluation.

    Args:
        left: Left operand; an Expression or a plain value
        right: Right operand; an Expression or a plain value
        op: Two-argument callable applied to the evaluated operands

    Returns:
        A Lazy expression owning both operands

    Raises:
        ConsumedExpressionError: If either operand was already used, including
            passing the same expression as both operands
    """
    return Lazy(BinaryOp(as_expression(left), as_expression(right), op))
