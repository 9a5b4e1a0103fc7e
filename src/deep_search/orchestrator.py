"""
Deep Search Orchestration

Wires the model, the search and scrape collaborators and the observers into
an agent loop, and turns loop failures into a single error type for callers.
"""

import time
import uuid
from collections.abc import Callable
from datetime import datetime

from .actions import action_to_dict
from .agent_loop import AgentLoop
from .agents import ActionChooser, Answerer
from .errors import DeepSearchError
from .logger import setup_logging
from .models import create_model
from .observers import (
    AnnotationObserver,
    LoggingObserver,
    LoopObserver,
    RecordingObserver,
    TracingObserver,
)
from .settings import Settings, get_settings
from .types import AgentLoopResult, BulkCrawlResult, MessageAnnotation, SearchResultItem
from .web.crawler import WebCrawler
from .web.search import SearchCache, search_serper


class DeepSearchOrchestrator:
    """Answers questions by running one fresh agent loop per question."""

    def __init__(
        self,
        annotation_callback: Callable[[MessageAnnotation], None] | None = None,
        *,
        cache: SearchCache | None,
        crawler: WebCrawler,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.model = create_model(settings=self.settings)
        self.research_logger = setup_logging()
        self.annotation_callback = annotation_callback

        self.cache = cache
        self.crawler = crawler
        self.chooser = ActionChooser(self.model)
        self.answerer = Answerer(self.model)

    async def search_web(self, query: str) -> list[SearchResultItem]:
        results = await search_serper(
            query,
            self.settings.search_results_count,
            api_key=self.settings.serper_api_key,
            cache=self.cache,
        )
        return results["results"]

    async def scrape_urls(self, urls: list[str]) -> BulkCrawlResult:
        return await self.crawler.bulk_crawl_websites(urls)

    def create_loop(self, observers: list[LoopObserver]) -> AgentLoop:
        return AgentLoop(
            self.chooser,
            self.answerer,
            self.search_web,
            self.scrape_urls,
            observers=observers,
            max_steps=self.settings.max_steps,
        )

    async def answer(self, question: str) -> AgentLoopResult:
        """
        Research and answer a question.

        Raises:
            DeepSearchError: If any collaborator call fails during the loop
        """
        run_id = str(uuid.uuid4())
        start = time.time()
        self.research_logger.info(f"🚀 [{run_id}] Answering: {question}")

        recorder = RecordingObserver()
        observers: list[LoopObserver] = [
            LoggingObserver(self.research_logger, run_id),
            TracingObserver(question),
            recorder,
        ]
        if self.annotation_callback is not None:
            observers.insert(0, AnnotationObserver(self.annotation_callback))

        try:
            answer = await self.create_loop(observers).run(question)
        except Exception as e:
            self.research_logger.error(
                f"❌ [{run_id}] Failed to answer '{question}' after {time.time() - start:.2f} seconds: {e}"
            )
            raise DeepSearchError(
                f"Deep search failed for question '{question}': {str(e)}"
            ) from e

        self.research_logger.info(
            f"✨ [{run_id}] Answered in {time.time() - start:.2f} seconds"
        )

        outcome = recorder.outcome
        return AgentLoopResult(
            question=question,
            answer=answer,
            actions=[action_to_dict(action) for action in recorder.actions],
            steps=outcome.steps if outcome else 0,
            best_effort=outcome.best_effort if outcome else False,
            generated_at=datetime.now().isoformat(),
        )


def create_orchestrator(
    annotation_callback: Callable[[MessageAnnotation], None] | None = None,
    settings: Settings | None = None,
) -> DeepSearchOrchestrator:
    """Create an orchestrator with a search cache and crawler configured from settings."""
    settings = settings or get_settings()
    cache = SearchCache(
        cache_dir=settings.search_cache_dir,
        cache_ttl_hours=settings.search_cache_ttl_hours,
    )
    crawler = WebCrawler(
        timeout=settings.crawler_timeout,
        max_content_length=settings.crawler_max_content_length,
        max_retries=settings.crawler_max_retries,
        user_agent=settings.crawler_user_agent,
        respect_robots_txt=settings.respect_robots_txt,
    )
    return DeepSearchOrchestrator(
        annotation_callback, cache=cache, crawler=crawler, settings=settings
    )
