"""
Observer pattern implementation for s2k framework.

Lets front ends (the CLI, or any host embedding the pipeline) follow
progress without the pipeline knowing how it is displayed.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, List, Union


class EventType(Enum):
    """Types of events that can be observed."""

    PROGRESS_START = "progress_start"
    PROGRESS_UPDATE = "progress_update"
    PROGRESS_COMPLETE = "progress_complete"
    SCORE_LOADED = "score_loaded"
    ARRANGEMENT_COMPLETE = "arrangement_complete"
    ERROR = "error"


@dataclass
class Event:
    """Event data passed to observers."""

    type: EventType
    data: Any = None
    message: str = ""


class Observer(ABC):
    """Abstract observer interface."""

    @abstractmethod
    def update(self, event: Event) -> None:
        """
        Called when observed object changes.

        Args:
            event: Event object containing type, data, and message
        """


class FunctionObserver(Observer):
    """Observer that forwards every event to a callback."""

    def __init__(self, callback: Callable[[Event], None]):
        self.callback = callback

    def update(self, event: Event) -> None:
        self.callback(event)


class Observable:
    """Subject that keeps a list of observers and notifies them in order."""

    def __init__(self):
        self._observers: List[Observer] = []

    def attach(self, observer: Union[Observer, Callable[[Event], None]]) -> Observer:
        """
        Attach an observer (plain callables are wrapped in FunctionObserver).

        Returns:
            The attached Observer, for a later detach()
        """
        if not isinstance(observer, Observer):
            observer = FunctionObserver(observer)
        if observer not in self._observers:
            self._observers.append(observer)
        return observer

    def detach(self, observer: Observer) -> None:
        """Detach an observer; unknown observers are ignored."""
        if observer in self._observers:
            self._observers.remove(observer)

    def notify(self, event: Event) -> None:
        for observer in list(self._observers):
            observer.update(event)

    def clear_observers(self) -> None:
        self._observers.clear()


class ProgressTracker(Observable):
    """
    Reports the steps of an operation to observers.

    Usage:
        tracker = ProgressTracker()
        tracker.attach(print_event)
        with tracker.track("Arranging", total_steps=2):
            tracker.advance("Folding keys...")
            tracker.advance("Checking keymap...")

    Leaving the block normally sends PROGRESS_COMPLETE; an exception sends
    ERROR and is re-raised.
    """

    def __init__(self):
        super().__init__()
        self.operation = ""
        self.current = 0
        self.total = 0

    def start(self, operation: str, total_steps: int = 0) -> None:
        """
        Begin a new operation.

        Args:
            operation: Description of the operation
            total_steps: Number of steps (0 when unknown)
        """
        self.operation = operation
        self.current = 0
        self.total = total_steps
        self.notify(
            Event(
                type=EventType.PROGRESS_START,
                data={"operation": operation, "total": total_steps},
                message=operation,
            )
        )

    def advance(self, message: str = "") -> None:
        """Move to the next step."""
        self.current += 1
        fraction = self.current / self.total if self.total > 0 else 0.0
        self.notify(
            Event(
                type=EventType.PROGRESS_UPDATE,
                data={
                    "operation": self.operation,
                    "current": self.current,
                    "total": self.total,
                    "progress": fraction,
                },
                message=message or f"{self.operation}: {self.current}/{self.total}",
            )
        )

    def complete(self, message: str = "Complete") -> None:
        self.notify(
            Event(
                type=EventType.PROGRESS_COMPLETE,
                data={"operation": self.operation},
                message=message,
            )
        )

    def error(self, error_message: str) -> None:
        self.notify(
            Event(
                type=EventType.ERROR,
                data={"operation": self.operation},
                message=error_message,
            )
        )

    @contextmanager
    def track(
        self, operation: str, total_steps: int = 0, done_message: str = "Complete"
    ) -> Iterator["ProgressTracker"]:
        """Run a block as one tracked operation."""
        self.start(operation, total_steps)
        try:
            yield self
        except Exception as e:
            self.error(f"Error: {e}")
            raise
        self.complete(done_message)
