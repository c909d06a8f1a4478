"""Per-evaluation run state shared by the stages of one terminal-driver pass."""
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Any, List
import threading


@dataclass
class EvaluationContext:
    """Mutable state for exactly one evaluation pass.

    The stage that triggers an evaluation creates the context and its push
    function captures it. Nothing here outlives the pass, so two terminal
    calls on the same chain never observe each other's flags or buffers.

    Attributes:
        parallel: Whether the pass runs one task per element.
        buffer: Scratch buffer written during the pass.
        stop_requested: Set by short-circuiting stages; checked by the
            sequential driver after every element.
        entered: Set once any element reached the requesting stage.
        has_value: Whether ``value`` holds a result (reduce, find_first).
        value: Single-value result slot.
    """
    parallel: bool = False
    buffer: List[Any] = field(default_factory=list)
    stop_requested: bool = False
    entered: bool = False
    has_value: bool = False
    value: Any = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def guard(self):
        """Lock for mutating shared state; a no-op in sequential mode."""
        return self.lock if self.parallel else nullcontext()

    def request_stop(self):
        self.stop_requested = True

    def set_value(self, value: Any):
        self.value = value
        self.has_value = True

    def result(self, default: Any = None) -> Any:
        return self.value if self.has_value else default
