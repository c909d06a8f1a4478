"""Core definitions for the push-based evaluation engine.

A pipeline is a chain of Stage objects. Each builder call wraps the stage it
was called on, so a chain is only linked backward (``producer``) while it is
being built. When a terminal or stateful operation needs results, the
requesting stage calls evaluate(), which first binds the forward
(``successor``) links and then pushes every resident element of the Source
through the chain of push functions.
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Annotated, Any, Callable, Generic, List, Optional, Sequence, TypeVar
import logging
import threading

from pushpipe.pipe.context import EvaluationContext
from pushpipe.pipe.stateful import StatefulOperations
from pushpipe.pipe.stateless import StatelessOperations
from pushpipe.pipe.terminal import TerminalOperations
from pushpipe.util.config import get_settings
from pushpipe.util.data_manipulation import to_sequence

logger = logging.getLogger(__name__)

T = TypeVar('T')

PushFunction = Callable[[Optional['Stage'], Any], None]


class Stage(StatelessOperations[T], StatefulOperations[T], TerminalOperations[T], Generic[T]):
    """One link in a pipeline chain producing elements of type T.

    Attributes:
        producer: The stage this one was built on, or None for a Source.
        source: The head of the chain. Every stage of one chain shares it.
        successor: The next stage. Only set while binding for an evaluation
            and rebound on every evaluation.
        push: ``push(successor, element)`` implementing this stage's behavior.
            Forwarding stages call ``successor.push(successor.successor, value)``;
            terminal stages absorb the element.
    """

    def __init__(self,
                 push: Annotated[PushFunction, "Called with (successor, element) for every element reaching this stage"],
                 producer: Annotated[Optional['Stage[Any]'], "The stage this one wraps"] = None,
                 source: Annotated[Optional['Source[Any]'], "Head of the chain; defaults to self"] = None):
        self.producer = producer
        self.source = source if source is not None else self
        self.successor: Optional['Stage[Any]'] = None
        self.push = push

    @property
    def is_parallel(self) -> bool:
        return self.source.parallel

    def _derive(self, push: PushFunction) -> 'Stage[Any]':
        """Build the next stage of this chain."""
        return Stage(push, producer=self, source=self.source)

    def _new_context(self) -> EvaluationContext:
        return EvaluationContext(parallel=self.source.parallel)

    def _reseed(self, elements: List[Any]) -> 'Source[Any]':
        """Start a new chain whose resident sequence is ``elements``.

        The list is handed over, not copied. The new source inherits the
        parallel flag and has no link back to this chain.
        """
        logger.debug(f"Re-seeding pipeline with {len(elements)} materialized elements")
        return Source(elements, parallel=self.source.parallel)

    def _bind(self) -> int:
        """Set the successor links from the source down to this stage.

        Returns:
            int: Number of stages below the source, this one included.
        """
        length = 0
        stage = self
        while stage.producer is not None:
            stage.producer.successor = stage
            stage = stage.producer
            length += 1
        if stage is not self.source:
            raise RuntimeError("Stage chain does not end at its source")
        return length

    def evaluate(self, context: EvaluationContext):
        """Drive every resident element of the source through the chain ending here.

        Sequential mode pushes elements in index order and stops early once
        ``context.stop_requested`` is set. Parallel mode submits one task per
        element and waits for all of them; the stop flag is not consulted
        between launches, so short-circuiting there is best effort only.
        An exception raised by a caller callable propagates out of this call
        in both modes.

        Evaluations of chains sharing a source hold the source's evaluation
        lock from binding to the end of the pass, so they run one at a time
        and never see each other's successor links. A callable that starts
        another evaluation on the same source from a parallel worker thread
        therefore deadlocks.

        Raises:
            RuntimeError: If called on a Source; only stages built on a
                source can be evaluated.
        """
        if self is self.source:
            raise RuntimeError("A source has no stages to evaluate; build a stage on it first")
        source = self.source
        with source.evaluation_lock:
            length = self._bind()
            elements = source.elements
            head = source.successor
            logger.debug(f"Evaluating {length} stage(s) over {len(elements)} element(s), parallel={source.parallel}")

            if not elements:
                return

            if source.parallel:
                self._evaluate_parallel(head, elements)
            else:
                for element in elements:
                    head.push(head.successor, element)
                    if context.stop_requested:
                        logger.debug("Stop requested, ending sequential evaluation early")
                        break
            logger.debug("Finished evaluation")

    @staticmethod
    def _evaluate_parallel(head: 'Stage[Any]', elements: List[Any]):
        settings = get_settings()
        if len(elements) > settings.parallel_warn_threshold:
            logger.warning(f"Parallel evaluation fanning out to {len(elements)} threads "
                           f"(threshold {settings.parallel_warn_threshold})")
        # One task per element, no batching; the pool may start up to one thread per task
        with ThreadPoolExecutor(max_workers=len(elements),
                                thread_name_prefix=settings.thread_name_prefix) as executor:
            futures = [executor.submit(head.push, head.successor, element) for element in elements]
        for future in futures:
            future.result()

    def __repr__(self):
        return f"{self.__class__.__name__}(parallel={self.source.parallel})"


def _source_push(successor, element):
    raise RuntimeError("A source stage does not accept pushed elements")


class Source(Stage[T]):
    """Head stage of a chain, holding the resident elements and the run mode."""

    def __init__(self,
                 elements: Annotated[List[T], "Resident elements; owned by the source from now on"],
                 parallel: Annotated[bool, "If True, evaluate with one concurrent task per element"] = False):
        super().__init__(_source_push)
        self.elements = elements
        self.parallel = parallel
        self.evaluation_lock = threading.RLock()

    def __repr__(self):
        return f"Source(elements={len(self.elements)}, parallel={self.parallel})"


def create(sequence: Sequence[T]) -> Source[T]:
    """Start a sequential pipeline over a copy of ``sequence``.

    Raises:
        TypeError: If sequence is None or not a list/tuple-like sequence.
    """
    return Source(to_sequence(sequence), parallel=False)


def create_parallel(sequence: Sequence[T]) -> Source[T]:
    """Start a pipeline evaluated with one concurrent task per element.

    Element order is not preserved between tasks and short-circuiting
    operations (find_first, any_match, all_match) are only best effort: tasks
    already started keep running after a result is known.

    Raises:
        TypeError: If sequence is None or not a list/tuple-like sequence.
    """
    return Source(to_sequence(sequence), parallel=True)
