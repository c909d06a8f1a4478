"""Stages that need the full upstream output before producing anything.

Every builder here follows the same pattern: append each incoming element to
a scratch buffer, evaluate the upstream chain immediately, transform the
buffer in bulk and return a new Source seeded with it.
"""
from typing import TYPE_CHECKING, Callable, Generic, List, Optional, Sequence, TypeVar

from pushpipe.util.data_manipulation import precedes_to_key, require_callable, require_count, to_sequence

if TYPE_CHECKING:
    from pushpipe.pipe.core import Source

T = TypeVar('T')
U = TypeVar('U')


class StatefulOperations(Generic[T]):

    def _materialize(self) -> List[T]:
        """Run the chain ending at this stage once and return its output."""
        context = self._new_context()

        def push(successor, element):
            with context.guard():
                context.buffer.append(element)

        self._derive(push).evaluate(context)
        return context.buffer

    def sorted(self, comparator: Callable[[T, T], bool]) -> 'Source[T]':
        """Stable sort where comparator(a, b) means a strictly precedes b.

        Elements that do not precede each other keep their relative order.
        """
        require_callable(comparator, "comparator")
        buffer = self._materialize()
        buffer.sort(key=precedes_to_key(comparator))
        return self._reseed(buffer)

    def distinct(self, comparator: Callable[[T, T], bool]) -> 'Source[T]':
        """Drop elements equal, by comparator(kept, candidate), to one already kept.

        The first occurrence wins and order is preserved. In parallel mode
        arrival order is nondeterministic, so which duplicate survives is too.
        """
        require_callable(comparator, "comparator")
        kept: List[T] = []
        for candidate in self._materialize():
            if not any(comparator(existing, candidate) for existing in kept):
                kept.append(candidate)
        return self._reseed(kept)

    def skip(self, n: int) -> 'Source[T]':
        """Drop the first n elements. Negative n counts as 0."""
        n = max(require_count(n), 0)
        buffer = self._materialize()
        return self._reseed(buffer[min(n, len(buffer)):])

    def limit(self, max_size: int) -> 'Source[T]':
        """Keep at most the first max_size elements. Negative max_size counts as 0."""
        max_size = max(require_count(max_size, "max_size"), 0)
        buffer = self._materialize()
        return self._reseed(buffer[:min(max_size, len(buffer))])

    def flat_map(self, function: Callable[[T], Optional[Sequence[U]]]) -> 'Source[U]':
        """Replace each element with the items of the sequence function(element) returns.

        A None result contributes no items. Any other non-sequence result
        raises TypeError.
        """
        require_callable(function, "function")
        context = self._new_context()

        def push(successor, element):
            out = function(element)
            if out is None:
                return
            items = to_sequence(out, "flat_map result")
            with context.guard():
                context.buffer.extend(items)

        self._derive(push).evaluate(context)
        return self._reseed(context.buffer)
