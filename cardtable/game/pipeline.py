"""Ordered, abortable step runner."""
from datetime import datetime, timezone
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from cardtable.utils.ids import generate_id
from cardtable.utils.logger import get_logger

logger = get_logger(__name__)


class StepResult(str, Enum):
    """Outcome of a single pipeline step."""
    CONTINUE = "continue"
    ABORT = "abort"


@dataclass
class Event:
    """Record handed to every step of a pipeline run."""
    name: str
    source: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=generate_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Step = Callable[[Event], StepResult]
Terminal = Callable[[Event], None]


@dataclass
class PipelineResult:
    """What happened during a pipeline run."""
    event: Event
    completed: bool
    aborted_at: Optional[str] = None  # Name of the step that aborted


def step_name(step: Step) -> str:
    return getattr(step, "__name__", type(step).__name__).lstrip("_")


class Pipeline:
    """Runs steps strictly in order, then a terminal action.

    Each step returns CONTINUE to hand the event to the next step or ABORT to
    stop the run. The terminal action runs exactly once, and only when every
    step continued. Steps may enrich ``event.data`` for later steps.
    """

    def __init__(self, source: str = ""):
        self.source = source

    def run(
        self,
        event_name: str,
        initial_data: Optional[dict[str, Any]],
        steps: Sequence[Step],
        terminal: Terminal,
    ) -> PipelineResult:
        """Run a pipeline.

        Args:
            event_name: Name recorded on the event.
            initial_data: Seed values for ``event.data``.
            steps: Gate and transform steps, run in order.
            terminal: Action run after the last step continues.

        Returns:
            Result naming the aborting step, if any.
        """
        event = Event(
            name=event_name,
            source=self.source,
            data=dict(initial_data or {}),
        )

        for step in steps:
            result = step(event)
            if result is not StepResult.CONTINUE:
                name = step_name(step)
                logger.debug(f"Pipeline {event_name} aborted at {name}")
                return PipelineResult(event=event, completed=False, aborted_at=name)

        terminal(event)
        return PipelineResult(event=event, completed=True)
