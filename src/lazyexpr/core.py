"""Core expression system for deferred computation.

An expression represents a computation that will be performed later. Trees
are built from leaves (Value, Thunk, Parameter) and combinators (Map,
BinaryOp), then evaluated exactly once.

Example:
    from lazyexpr import lazy, lazyf

    cube = lazy(2).map(lambda n: n ** 3)  # Nothing computed yet
    print(cube.evaluate())  # 8

    greeting = lazyf(lambda: "potatoland")
    print(greeting.evaluate())  # 'potatoland'

Evaluating a node consumes it, and so does composing it into a larger node:
its state moves into the new owner and the original handle is left empty.
Using an emptied handle raises ConsumedExpressionError.
"""

import copy
import logging
import operator
from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

from .exceptions import ConsumedExpressionError

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


# -----------------------------------------------------------------------------
# Tracer Protocol
# -----------------------------------------------------------------------------


@runtime_checkable
class EvaluationTracer(Protocol):
    """Protocol for observers that are notified as nodes are evaluated.

    Implement this protocol to record evaluation order or intermediate values.
    """

    def node_evaluated(self, node: "Expression", value: Any) -> None:
        """
        Called after a node has produced its value.

        Children are reported before their parents. Lazy wrappers are not
        reported since they only forward to the node they hold.

        Args:
            node: The node that was just evaluated. It must not be
                  evaluated again; it is released once this call returns.
            value: The value the node produced
        """
        ...


# Global tracer (None means no tracing)
_tracer: EvaluationTracer | None = None


def configure_tracer(tracer: EvaluationTracer | None) -> None:
    """
    Configure the global evaluation tracer.

    Args:
        tracer: An EvaluationTracer implementation, or None to disable tracing.

    Example:
        from lazyexpr import configure_tracer

        class PrintTracer:
            def node_evaluated(self, node, value):
                print(type(node).__name__, value)

        configure_tracer(PrintTracer())
    """
    global _tracer
    logger.debug("Evaluation tracer set to %r", tracer)
    _tracer = tracer


def get_tracer() -> EvaluationTracer | None:
    """Get the currently configured evaluation tracer."""
    return _tracer


def _callable_name(fn: Callable) -> str:
    return getattr(fn, "__name__", None) or repr(fn)


def _fold(root: "Expression", visit: Callable[["Expression", list], Any], take: bool = False) -> Any:
    """
    Walk a tree in post-order without recursion.

    visit(node, child_results) is called once per node, children first and
    left to right; its return value becomes the node's result.

    Args:
        root: Node to start from
        visit: Combines a node with the results of its children
        take: If True, each child is moved out of its parent before it is
              visited (used by evaluate)

    Returns:
        The result of visiting root
    """
    stack: list[tuple[Expression, list]] = [(root, [])]
    while True:
        node, results = stack[-1]
        children = () if node._consumed else node._children()
        if len(results) < len(children):
            child = children[len(results)]
            stack.append((child._take() if take else child, []))
            continue

        stack.pop()
        result = visit(node, results)
        if not stack:
            return result
        stack[-1][1].append(result)


def _evaluate_node(node: "Expression", values: list) -> Any:
    value = node._apply(values)
    if not node._transparent:
        logger.debug("Evaluated %s node", type(node).__name__)
        tracer = get_tracer()
        if tracer is not None:
            tracer.node_evaluated(node, value)
    node._release()
    return value


def _clone_node(node: "Expression", copies: list) -> "Expression":
    node._check_live()
    return node._rebuild(copies)


def _describe_node(node: "Expression", parts: list) -> str:
    if node._consumed:
        return f"<consumed {type(node).__name__}>"
    return node._describe(parts)


def _adopt(expr: "Expression[T]") -> "Expression[T]":
    """Take ownership of expr, dropping any Lazy wrappers around it."""
    node = expr._take()
    while isinstance(node, Lazy):
        node = node._expr
    return node


# -----------------------------------------------------------------------------
# Expression Classes
# -----------------------------------------------------------------------------


class Expression(Generic[T]):
    """
    Represents a future computation.

    Subclasses implement _apply() to compute their value from the values of
    _children(), and _rebuild() to copy themselves around already-copied
    children. Trees are walked with an explicit stack, so depth is limited
    only by memory. Expressions are composed with map() or, when wrapped in
    Lazy, with arithmetic operators.
    """

    _consumed: bool = False
    # Transparent nodes are not reported to the tracer
    _transparent: bool = False

    @property
    def is_consumed(self) -> bool:
        """True once this handle was evaluated or moved into another node."""
        return self._consumed

    def evaluate(self) -> T:
        """
        Execute the expression.

        Consumes the expression, applying all operations and returning their
        value. Child nodes are evaluated before their parent, left operands
        before right ones.

        Raises:
            ConsumedExpressionError: If this expression was already evaluated
                or composed into another expression
            UnboundParameterError: If a Parameter in the tree has no value
        """
        return _fold(self._take(), _evaluate_node, take=True)

    def map(self, transform: Callable[[T], U]) -> "Lazy[U]":
        """
        Transform the value of an expression.

        Analogous to the builtin map(): creates an expression which takes the
        value returned by transform. The transform is only called when the
        result is evaluated.

        Args:
            transform: Single-argument function applied to this value

        Returns:
            A Lazy expression owning this one
        """
        return Lazy(Map(self, transform))

    def clone(self) -> "Expression[T]":
        """
        Copy an unevaluated expression tree.

        Held values are deep-copied and callables are shared. Parameters in
        the copy read from the same slot as the originals, so their
        ParameterContent handles bind both trees.
        """
        self._check_live()
        return _fold(self, _clone_node)

    def __repr__(self) -> str:
        return _fold(self, _describe_node)

    def _children(self) -> "tuple[Expression, ...]":
        return ()

    def _apply(self, values: list) -> T:
        raise NotImplementedError

    def _rebuild(self, copies: list) -> "Expression[T]":
        raise NotImplementedError

    def _describe(self, parts: list) -> str:
        return f"{type(self).__name__}()"

    def _check_live(self) -> None:
        if self._consumed:
            raise ConsumedExpressionError(
                f"{type(self).__name__} was already evaluated or composed into "
                f"another expression and cannot be used again."
            )

    def _take(self) -> "Expression[T]":
        """Move this node's state into a new object and empty this handle."""
        self._check_live()
        moved = copy.copy(self)
        self._release()
        return moved

    def _release(self) -> None:
        self.__dict__.clear()
        self._consumed = True


class Value(Expression[T]):
    """A known, unchanging value."""

    def __init__(self, value: T):
        self._value = value

    def _apply(self, values: list) -> T:
        return self._value

    def _rebuild(self, copies: list) -> "Value[T]":
        return Value(copy.deepcopy(self._value))

    def _describe(self, parts: list) -> str:
        return f"Value({self._value!r})"


class Thunk(Expression[T]):
    """
    Wraps an argument-less function.

    Resolves to the function's return value. The function is called once,
    when the thunk is evaluated; anything it raises propagates as-is.
    """

    def __init__(self, fn: Callable[[], T]):
        self._fn = fn

    def _apply(self, values: list) -> T:
        return self._fn()

    def _rebuild(self, copies: list) -> "Thunk[T]":
        return Thunk(self._fn)

    def _describe(self, parts: list) -> str:
        return f"Thunk({_callable_name(self._fn)})"


class Map(Expression[U]):
    """
    Node returned by Expression.map().

    Evaluates the inner expression, then applies the transform to its value.
    """

    def __init__(self, inner: Expression[T], transform: Callable[[T], U]):
        self._inner = _adopt(inner)
        self._transform = transform

    def _children(self) -> "tuple[Expression, ...]":
        return (self._inner,)

    def _apply(self, values: list) -> U:
        return self._transform(values[0])

    def _rebuild(self, copies: list) -> "Map[U]":
        return Map(copies[0], self._transform)

    def _describe(self, parts: list) -> str:
        return f"Map({parts[0]}, {_callable_name(self._transform)})"


class Lazy(Expression[T]):
    """
    Wrapper which delegates operators into expressions.

    Holds exactly one expression and forwards evaluate(), map() and clone()
    to it. Arithmetic on a Lazy builds a BinaryOp instead of computing:

        total = lazy(2) + lazy(3) * 4   # Lazy(BinaryOp(...))
        total.evaluate()                # 14

    Plain operands are wrapped in Value, so `lazy(2) + 3` and `3 + lazy(2)`
    both work. A Lazy composed into another node is unwrapped, so only the
    outermost handle of a tree is a Lazy.
    """

    _transparent = True

    # Makes numpy defer to our reflected operators: ndarray + Lazy -> Lazy
    __array_ufunc__ = None

    def __init__(self, expr: Expression[T]):
        self._expr = _adopt(expr)

    def _children(self) -> "tuple[Expression, ...]":
        return (self._expr,)

    def _apply(self, values: list) -> T:
        return values[0]

    def _rebuild(self, copies: list) -> "Lazy[T]":
        return Lazy(copies[0])

    def _describe(self, parts: list) -> str:
        return f"Lazy({parts[0]})"

    def _combine(self, other: Any, op: Callable[[Any, Any], Any]) -> "Lazy":
        # Import here to avoid circular imports
        from .ops import combine

        return combine(self, other, op)

    def _rcombine(self, other: Any, op: Callable[[Any, Any], Any]) -> "Lazy":
        from .ops import combine

        return combine(other, self, op)

    def __add__(self, other: Any) -> "Lazy":
        return self._combine(other, operator.add)

    def __radd__(self, other: Any) -> "Lazy":
        return self._rcombine(other, operator.add)

    def __sub__(self, other: Any) -> "Lazy":
        return self._combine(other, operator.sub)

    def __rsub__(self, other: Any) -> "Lazy":
        return self._rcombine(other, operator.sub)

    def __mul__(self, other: Any) -> "Lazy":
        return self._combine(other, operator.mul)

    def __rmul__(self, other: Any) -> "Lazy":
        return self._rcombine(other, operator.mul)

    def __truediv__(self, other: Any) -> "Lazy":
        return self._combine(other, operator.truediv)

    def __rtruediv__(self, other: Any) -> "Lazy":
        return self._rcombine(other, operator.truediv)

    def __floordiv__(self, other: Any) -> "Lazy":
        return self._combine(other, operator.floordiv)

    def __rfloordiv__(self, other: Any) -> "Lazy":
        return self._rcombine(other, operator.floordiv)

    def __mod__(self, other: Any) -> "Lazy":
        return self._combine(other, operator.mod)

    def __rmod__(self, other: Any) -> "Lazy":
        return self._rcombine(other, operator.mod)

    def __pow__(self, other: Any) -> "Lazy":
        return self._combine(other, operator.pow)

    def __rpow__(self, other: Any) -> "Lazy":
        return self._rcombine(other, operator.pow)

    def __neg__(self) -> "Lazy[T]":
        return self.map(operator.neg)

    def __pos__(self) -> "Lazy[T]":
        return self.map(operator.pos)

    def __abs__(self) -> "Lazy[T]":
        return self.map(abs)


# -----------------------------------------------------------------------------
# Constructors
# -----------------------------------------------------------------------------


def lazy(value: T) -> Lazy[T]:
    """Create a Value expression wrapped in Lazy."""
    return Lazy(Value(value))


def lazyf(fn: Callable[[], T]) -> Lazy[T]:
    """Create a Thunk expression wrapped in Lazy."""
    return Lazy(Thunk(fn))
