"""Parameters: values which can be filled in after the expression is built.

A Parameter is a leaf whose value is unknown when the expression is defined
but will be known before it is evaluated. Creating one returns two handles
that share a single slot: the Parameter itself, which goes into the tree,
and a ParameterContent used to set the value from outside.

Example:
    from lazyexpr import Parameter

    param, setter = Parameter.empty()
    expr = param.map(lambda n: n ** 3)
    setter.set(10)
    expr.evaluate()  # 1000

The slot is plain single-threaded state; build, bind and evaluate a graph
from one thread.
"""

import logging
from typing import Generic, TypeVar

from .core import Expression
from .exceptions import UnboundParameterError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Empty:
    """Marker for a slot that holds no value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "EMPTY"


# EMPTY singleton, so that None can be a bound value
EMPTY = _Empty()


class Slot(Generic[T]):
    """
    Single-value cell shared by a Parameter and its ParameterContent handles.

    Either empty or holding one value. take() empties it.
    """

    def __init__(self, value: "T | _Empty" = EMPTY):
        self._value = value

    @property
    def is_occupied(self) -> bool:
        return self._value is not EMPTY

    def put(self, value: T) -> None:
        """Store value, discarding whatever was there."""
        self._value = value

    def take(self) -> "T | _Empty":
        """Return the stored value (or EMPTY) and leave the slot empty."""
        value, self._value = self._value, EMPTY
        return value

    def __repr__(self) -> str:
        return f"Slot({'occupied' if self.is_occupied else 'empty'})"


class ParameterContent(Generic[T]):
    """
    A handle to assign the parameter's value.

    Can be used to set the value after the Parameter has been composed into
    an expression, but before that expression is evaluated. Setting a value
    after evaluation has no effect on the evaluated tree.
    """

    def __init__(self, slot: Slot[T]):
        self._slot = slot

    @property
    def is_set(self) -> bool:
        """True if the slot currently holds a value."""
        return self._slot.is_occupied

    def set(self, value: T) -> None:
        """Store value in the slot, replacing any previous value."""
        logger.debug("Parameter value set (replacing=%s)", self._slot.is_occupied)
        self._slot.put(value)

    def clone(self) -> "ParameterContent[T]":
        """Another handle on the same slot."""
        return ParameterContent(self._slot)

    def __repr__(self) -> str:
        return f"ParameterContent(set={self.is_set})"


class Parameter(Expression[T]):
    """
    Parameter which can be defined later.

    A value that is unknown at the time of the expression's definition, but
    will be known before it is evaluated. Use Parameter.empty() or
    Parameter.new() to get the parameter together with its setter.
    """

    def __init__(self, slot: Slot[T]):
        self._slot = slot

    @classmethod
    def _create_with(cls, slot: Slot[T]) -> "tuple[Parameter[T], ParameterContent[T]]":
        return cls(slot), ParameterContent(slot)

    @classmethod
    def empty(cls) -> "tuple[Parameter[T], ParameterContent[T]]":
        """Create a parameter with no initial value."""
        return cls._create_with(Slot())

    @classmethod
    def new(cls, value: T) -> "tuple[Parameter[T], ParameterContent[T]]":
        """
        Create a parameter with an initial value.

        The value can still be changed through the returned ParameterContent.
        """
        return cls._create_with(Slot(value))

    @property
    def is_bound(self) -> bool:
        """True if evaluating now would find a value."""
        self._check_live()
        return self._slot.is_occupied

    def _apply(self, values: list) -> T:
        value = self._slot.take()
        if value is EMPTY:
            raise UnboundParameterError(
                "Parameter value not provided. Call set() on its "
                "ParameterContent before evaluating."
            )
        return value

    def _rebuild(self, copies: list) -> "Parameter[T]":
        return Parameter(self._slot)

    def _describe(self, parts: list) -> str:
        return f"Parameter({'bound' if self._slot.is_occupied else 'unbound'})"
