"""
Agent Loop

Bounded research loop: choose an action, execute it, record the evidence and
repeat until the model answers or the step budget runs out.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from .actions import Action
from .context import DEFAULT_MAX_STEPS, SystemContext
from .observers import AnnotationObserver, LoopObserver, LoopOutcome
from .types import (
    BulkCrawlResult,
    MessageAnnotation,
    QueryResult,
    ScrapeResult,
    SearchResultItem,
)

SearchFn = Callable[[str], Awaitable[list[SearchResultItem]]]
ScrapeFn = Callable[[list[str]], Awaitable[BulkCrawlResult]]


class NextActionChooser(Protocol):
    async def get_next_action(
        self, context: SystemContext, question: str
    ) -> Action: ...


class QuestionAnswerer(Protocol):
    async def answer_question(
        self, context: SystemContext, question: str, *, is_final: bool
    ) -> str: ...


class AgentLoop:
    """
    Drives the action chooser, the search and scrape collaborators and the
    answerer for one question at a time.

    The loop is strictly sequential and never recovers from collaborator
    errors; observers are told through on_loop_failed and the error propagates
    to the caller. Exhausting the step budget is not an error:
    it produces a best-effort answer.
    """

    def __init__(
        self,
        chooser: NextActionChooser,
        answerer: QuestionAnswerer,
        search: SearchFn,
        scrape: ScrapeFn,
        observers: Sequence[LoopObserver] = (),
        max_steps: int = DEFAULT_MAX_STEPS,
    ):
        self.chooser = chooser
        self.answerer = answerer
        self.search = search
        self.scrape = scrape
        self.observers = list(observers)
        self.max_steps = max_steps

    async def run(
        self, question: str, observers: Sequence[LoopObserver] = ()
    ) -> str:
        """
        Answer a question.

        Args:
            question: The user's question
            observers: Extra observers for this run only, notified after the loop's own

        Returns:
            The generated answer

        Raises:
            Any collaborator error, after observers were told through on_loop_failed
        """
        run_observers = [*self.observers, *observers]
        ctx = SystemContext(max_steps=self.max_steps)

        try:
            return await self._run(ctx, question, run_observers)
        except BaseException as e:
            for observer in run_observers:
                observer.on_loop_failed(e)
            raise

    async def _run(
        self,
        ctx: SystemContext,
        question: str,
        run_observers: Sequence[LoopObserver],
    ) -> str:
        while not ctx.should_stop():
            for observer in run_observers:
                observer.on_iteration_start(ctx.step)

            next_action = await self.chooser.get_next_action(ctx, question)

            for observer in run_observers:
                observer.on_action_chosen(ctx.step, next_action)

            if next_action.type == "search":
                search_results = await self.search(next_action.query)
                ctx.report_queries(
                    [
                        QueryResult(
                            query=next_action.query,
                            results=[
                                {
                                    "date": result["date"],
                                    "title": result["title"],
                                    "url": result["link"],
                                    "snippet": result["snippet"],
                                }
                                for result in search_results
                            ],
                        )
                    ]
                )
            elif next_action.type == "scrape":
                scrape_results = await self.scrape(list(next_action.urls))
                ctx.report_scrapes(
                    [
                        ScrapeResult(url=result["url"], result=result["result"]["data"])
                        for result in scrape_results["results"]
                        if result["result"]["success"]
                    ]
                )
            else:
                return await self._answer(ctx, question, run_observers, is_final=False)

            ctx.increment_step()

        return await self._answer(ctx, question, run_observers, is_final=True)

    async def _answer(
        self,
        ctx: SystemContext,
        question: str,
        observers: Sequence[LoopObserver],
        *,
        is_final: bool,
    ) -> str:
        answer = await self.answerer.answer_question(ctx, question, is_final=is_final)

        outcome = LoopOutcome(
            steps=ctx.step, best_effort=is_final, answer_length=len(answer)
        )
        for observer in observers:
            observer.on_loop_terminated(outcome)
        return answer


async def run_agent_loop(
    question: str,
    *,
    chooser: NextActionChooser,
    answerer: QuestionAnswerer,
    search: SearchFn,
    scrape: ScrapeFn,
    write_message_annotation: Callable[[MessageAnnotation], None] | None = None,
    observers: Sequence[LoopObserver] = (),
    max_steps: int = DEFAULT_MAX_STEPS,
) -> str:
    """Convenience wrapper running a single loop with an optional annotation sink."""
    run_observers = list(observers)
    if write_message_annotation is not None:
        run_observers.insert(0, AnnotationObserver(write_message_annotation))

    loop = AgentLoop(
        chooser, answerer, search, scrape, observers=run_observers, max_steps=max_steps
    )
    return await loop.run(question)
