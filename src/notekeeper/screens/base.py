"""Shared machinery for screen controllers.

A screen is an immutable state object plus a pure reducer mapping
``(state, event)`` to ``(new_state, effects)``. A controller holds the
current state, feeds events to the reducer, runs the requested effects
against the note service, and turns their outcomes back into events.
"""

from collections import deque
from typing import Callable, Deque, Generic, List, Optional, Sequence, Tuple, TypeVar

from notekeeper.exceptions import NotekeeperError
from notekeeper.observability import get_logger

S = TypeVar("S")

Listener = Callable[[S], None]


def error_text(error: NotekeeperError, prefix: Optional[str] = None) -> str:
    """User-visible text for an error, optionally prefixed with the action."""
    message = error.message or type(error).__name__
    return f"{prefix}: {message}" if prefix else message


class ScreenController(Generic[S]):
    """Runs a screen's reducer and effects on the calling thread.

    Subclasses implement ``reduce`` and ``run_effect``. Effects run in the
    order the reducer returned them; an effect may return a follow-up
    event, which is queued behind the events already pending.
    """

    component = "screen"

    def __init__(self, initial_state: S):
        self._state = initial_state
        self._listeners: List[Listener] = []
        self.log = get_logger(self.component)

    @property
    def state(self) -> S:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every change.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event: object) -> S:
        """Apply ``event`` and everything it triggers; return the final state."""
        pending: Deque[object] = deque([event])
        while pending:
            current = pending.popleft()
            self.log.debug("event", event=type(current).__name__)
            new_state, effects = self.reduce(self._state, current)
            if new_state != self._state:
                self._state = new_state
                for listener in list(self._listeners):
                    listener(new_state)
            for effect in effects:
                follow_up = self.run_effect(effect)
                if follow_up is not None:
                    pending.append(follow_up)
        return self._state

    def reduce(self, state: S, event: object) -> Tuple[S, Sequence[object]]:
        raise NotImplementedError

    def run_effect(self, effect: object) -> Optional[object]:
        raise NotImplementedError
