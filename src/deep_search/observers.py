"""
Agent loop observers.

The loop reports progress through observers at the start of every iteration,
for every chosen action, and when it ends, either with an answer or with an
error. Observers are called synchronously in registration order.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .actions import Action, action_to_dict
from .types import MessageAnnotation


@dataclass(frozen=True)
class LoopOutcome:
    """Summary of a finished loop run."""

    steps: int
    best_effort: bool
    answer_length: int


class LoopObserver(Protocol):
    def on_iteration_start(self, step: int) -> None: ...

    def on_action_chosen(self, step: int, action: Action) -> None: ...

    def on_loop_terminated(self, outcome: LoopOutcome) -> None: ...

    def on_loop_failed(self, error: BaseException) -> None: ...


class BaseObserver:
    """No-op observer to subclass when only some hooks matter."""

    def on_iteration_start(self, step: int) -> None:
        pass

    def on_action_chosen(self, step: int, action: Action) -> None:
        pass

    def on_loop_terminated(self, outcome: LoopOutcome) -> None:
        pass

    def on_loop_failed(self, error: BaseException) -> None:
        pass


class LoggingObserver(BaseObserver):
    """Writes loop progress to the deep_search logger."""

    def __init__(self, logger: logging.Logger | None = None, run_id: str = ""):
        self.logger = logger or logging.getLogger("deep_search")
        self.prefix = f"[{run_id}] " if run_id else ""

    def on_iteration_start(self, step: int) -> None:
        self.logger.info(f"🔁 {self.prefix}Starting step {step}")

    def on_action_chosen(self, step: int, action: Action) -> None:
        if action.type == "search":
            detail = f"query='{action.query}'"
        elif action.type == "scrape":
            detail = f"urls={list(action.urls)}"
        else:
            detail = "answering"
        self.logger.info(
            f"🧭 {self.prefix}Step {step}: {action.title} ({detail}) - {action.reasoning}"
        )

    def on_loop_terminated(self, outcome: LoopOutcome) -> None:
        mode = "best-effort" if outcome.best_effort else "comprehensive"
        self.logger.info(
            f"🎯 {self.prefix}Loop finished after {outcome.steps} steps with a {mode} answer "
            f"({outcome.answer_length} chars)"
        )

    def on_loop_failed(self, error: BaseException) -> None:
        self.logger.error(
            f"💥 {self.prefix}Loop failed: {type(error).__name__}: {error}"
        )


class TracingObserver(BaseObserver):
    """
    Records the loop as an OpenTelemetry span.

    The span is opened on the first iteration and closed when the loop answers
    or fails; a failure is recorded as an exception with an error status. Every
    iteration and chosen action is added as a span event. Spans are exported
    wherever the strands telemetry provider sends them.
    """

    def __init__(self, question: str, tracer: trace.Tracer | None = None):
        self.question = question
        self.tracer = tracer or trace.get_tracer("deep_search")
        self.span: trace.Span | None = None

    def _ensure_span(self) -> trace.Span:
        if self.span is None:
            self.span = self.tracer.start_span(
                "deep_search.agent_loop",
                attributes={"deep_search.question": self.question},
            )
        return self.span

    def on_iteration_start(self, step: int) -> None:
        self._ensure_span().add_event(
            "deep_search.iteration", attributes={"deep_search.step": step}
        )

    def on_action_chosen(self, step: int, action: Action) -> None:
        attributes: dict[str, str | int] = {
            "deep_search.step": step,
            "deep_search.action.type": action.type,
            "deep_search.action.title": action.title,
        }
        if action.type == "search":
            attributes["deep_search.action.query"] = action.query
        elif action.type == "scrape":
            attributes["deep_search.action.urls"] = ",".join(action.urls)
        self._ensure_span().add_event("deep_search.action", attributes=attributes)

    def on_loop_terminated(self, outcome: LoopOutcome) -> None:
        span = self._ensure_span()
        span.set_attribute("deep_search.steps", outcome.steps)
        span.set_attribute("deep_search.best_effort", outcome.best_effort)
        span.set_attribute("deep_search.answer_length", outcome.answer_length)
        span.end()
        self.span = None

    def on_loop_failed(self, error: BaseException) -> None:
        span = self._ensure_span()
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, f"{type(error).__name__}: {error}"))
        span.end()
        self.span = None


class AnnotationObserver(BaseObserver):
    """Forwards every chosen action to a single-argument annotation callback."""

    def __init__(self, write_message_annotation: Callable[[MessageAnnotation], None]):
        self.write_message_annotation = write_message_annotation

    def on_action_chosen(self, step: int, action: Action) -> None:
        self.write_message_annotation(
            {"type": "NEW_ACTION", "action": action_to_dict(action)}
        )


class RecordingObserver(BaseObserver):
    """Keeps every chosen action and how the loop ended."""

    def __init__(self):
        self.actions: list[Action] = []
        self.outcome: LoopOutcome | None = None
        self.error: BaseException | None = None

    def on_action_chosen(self, step: int, action: Action) -> None:
        self.actions.append(action)

    def on_loop_terminated(self, outcome: LoopOutcome) -> None:
        self.outcome = outcome

    def on_loop_failed(self, error: BaseException) -> None:
        self.error = error
