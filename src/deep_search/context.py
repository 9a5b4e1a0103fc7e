"""
System context for the agent loop.

Accumulates search and scrape evidence across loop iterations and renders it
into prompt text. One instance lives for exactly one question.
"""

from .types import QueryResult, QueryResultSearchResult, ScrapeResult

DEFAULT_MAX_STEPS = 10


def to_query_result(result: QueryResultSearchResult) -> str:
    """Render a single search result as a markdown block."""
    return "\n\n".join(
        [f"### {result['date']} - {result['title']}", result["url"], result["snippet"]]
    )


class SystemContext:
    """Step counter plus append-only query and scrape histories."""

    def __init__(self, max_steps: int = DEFAULT_MAX_STEPS):
        self.max_steps = max_steps
        self._step = 0
        self._query_history: list[QueryResult] = []
        self._scrape_history: list[ScrapeResult] = []

    @property
    def step(self) -> int:
        return self._step

    @property
    def query_history(self) -> list[QueryResult]:
        return list(self._query_history)

    @property
    def scrape_history(self) -> list[ScrapeResult]:
        return list(self._scrape_history)

    def should_stop(self) -> bool:
        return self._step >= self.max_steps

    def increment_step(self) -> None:
        self._step += 1

    def report_queries(self, queries: list[QueryResult]) -> None:
        self._query_history.extend(queries)

    def report_scrapes(self, scrapes: list[ScrapeResult]) -> None:
        self._scrape_history.extend(scrapes)

    def get_query_history(self) -> str:
        """Render every query and its results, in the order they were reported."""
        return "\n\n".join(
            "\n\n".join(
                [
                    f'## Query: "{query["query"]}"',
                    *map(to_query_result, query["results"]),
                ]
            )
            for query in self._query_history
        )

    def get_scrape_history(self) -> str:
        """Render every scraped page, in the order it was reported."""
        return "\n\n".join(
            "\n\n".join(
                [
                    f'## Scrape: "{scrape["url"]}"',
                    "<scrape_result>",
                    scrape["result"],
                    "</scrape_result>",
                ]
            )
            for scrape in self._scrape_history
        )
