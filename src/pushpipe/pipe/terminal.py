"""Terminal operations: drive the chain once and return a value instead of a stage."""
from typing import Callable, Dict, Generic, Hashable, List, Optional, Tuple, TypeVar

from pushpipe.util.data_manipulation import require_appendable, require_callable

T = TypeVar('T')
K = TypeVar('K', bound=Hashable)


class TerminalOperations(Generic[T]):

    def for_each(self, consumer: Callable[[T], None]) -> None:
        """Call consumer on every element that reaches this stage.

        In parallel mode consumer is called concurrently from worker threads.
        """
        require_callable(consumer, "consumer")

        def push(successor, element):
            consumer(element)

        self._derive(push).evaluate(self._new_context())

    def reduce(self, function: Callable[[T, T], T], default: Optional[T] = None) -> Optional[T]:
        """Fold the elements with function(accumulator, element).

        The accumulator starts as the first element observed. Returns default
        when no element reaches this stage. In parallel mode the fold order is
        arbitrary, so function should be commutative and associative.
        """
        require_callable(function, "function")
        context = self._new_context()

        def push(successor, element):
            with context.guard():
                if context.has_value:
                    context.value = function(context.value, element)
                else:
                    context.set_value(element)

        self._derive(push).evaluate(context)
        return context.result(default)

    def count(self) -> int:
        return len(self._materialize())

    def _match(self, predicate: Callable[[T], bool], stop_on: bool) -> Tuple[bool, bool]:
        """Evaluate until predicate(element) == stop_on.

        Returns:
            Tuple[bool, bool]: (any element was tested, evaluation was stopped)
        """
        require_callable(predicate, "predicate")
        context = self._new_context()

        def push(successor, element):
            context.entered = True
            if bool(predicate(element)) == stop_on:
                context.request_stop()

        self._derive(push).evaluate(context)
        return context.entered, context.stop_requested

    def any_match(self, predicate: Callable[[T], bool]) -> bool:
        """True if some element satisfies predicate. False on an empty stream."""
        entered, stopped = self._match(predicate, True)
        if entered:
            return stopped
        return False

    def all_match(self, predicate: Callable[[T], bool]) -> bool:
        """True if every element satisfies predicate.

        An empty stream gives False, not the vacuous True.
        """
        entered, stopped = self._match(predicate, False)
        if entered:
            return not stopped
        return False

    def none_match(self, predicate: Callable[[T], bool]) -> bool:
        return not self.any_match(predicate)

    def find_first(self, predicate: Callable[[T], bool], default: Optional[T] = None) -> Optional[T]:
        """Return the first element satisfying predicate, or default.

        Sequential evaluation stops at the match. In parallel mode the result
        is some matching element, not necessarily the one with the lowest index.
        """
        require_callable(predicate, "predicate")
        context = self._new_context()

        def push(successor, element):
            if context.has_value or not predicate(element):
                return
            with context.guard():
                if not context.has_value:
                    context.set_value(element)
                    context.request_stop()

        self._derive(push).evaluate(context)
        return context.result(default)

    def max_min(self, comparator: Callable[[T, T], bool], default: Optional[T] = None) -> Optional[T]:
        """Keep whichever element wins under comparator(a, b) -> a wins.

        comparator(a, b) = a > b gives the maximum, a < b the minimum.
        """
        require_callable(comparator, "comparator")
        return self.reduce(lambda a, b: a if comparator(a, b) else b, default=default)

    def to_list(self, target: Optional[List[T]] = None) -> List[T]:
        """Append every element, in evaluation order, to target and return it.

        A new list is used when target is omitted. Raises TypeError before
        evaluating if target has no append method.
        """
        if target is None:
            target = []
        else:
            require_appendable(target)
        context = self._new_context()

        def push(successor, element):
            with context.guard():
                target.append(element)

        self._derive(push).evaluate(context)
        return target

    def group(self, function: Callable[[T], Optional[K]]) -> Dict[K, List[T]]:
        """Group elements by key = function(element), skipping None keys.

        Within a key, elements are in evaluation order.
        """
        require_callable(function, "function")
        context = self._new_context()
        groups: Dict[K, List[T]] = {}

        def push(successor, element):
            key = function(element)
            if key is None:
                return
            with context.guard():
                groups.setdefault(key, []).append(element)

        self._derive(push).evaluate(context)
        return groups
