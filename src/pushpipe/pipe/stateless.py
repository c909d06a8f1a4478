"""Stages that handle one element at a time and never buffer."""
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from pushpipe.util.data_manipulation import require_callable

if TYPE_CHECKING:
    from pushpipe.pipe.core import Stage

T = TypeVar('T')
U = TypeVar('U')


class StatelessOperations(Generic[T]):
    """Filter, map and peek builders.

    Each returns a new stage whose push function nests inside the push
    function of the stage after it, so a run of stateless stages executes as
    one call chain per element.
    """

    def filter(self, predicate: Callable[[T], bool]) -> 'Stage[T]':
        """Forward only the elements for which predicate is true."""
        require_callable(predicate, "predicate")

        def push(successor, element):
            if predicate(element):
                successor.push(successor.successor, element)

        return self._derive(push)

    def map(self, function: Callable[[T], U]) -> 'Stage[U]':
        """Forward function(element) in place of each element."""
        require_callable(function, "function")

        def push(successor, element):
            successor.push(successor.successor, function(element))

        return self._derive(push)

    def peek(self, consumer: Callable[[T], None]) -> 'Stage[T]':
        """Call consumer on each element, then forward the element unchanged."""
        require_callable(consumer, "consumer")

        def push(successor, element):
            consumer(element)
            successor.push(successor.successor, element)

        return self._derive(push)
