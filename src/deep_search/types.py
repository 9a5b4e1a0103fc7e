"""
Common type definitions for the deep search agent.

TypedDict definitions for search results, evidence records and crawl results.
"""

from typing import Any, Literal, NotRequired, TypedDict


class SearchResultItem(TypedDict):
    """Individual organic result from the web search API."""

    title: str
    link: str
    snippet: str
    date: str


class SearchResults(TypedDict):
    """Complete search results from web search."""

    query: str
    results: list[SearchResultItem]
    total_results: int
    cached: bool  # Served from the search cache


class QueryResultSearchResult(TypedDict):
    """A search result as it is kept in the evidence context."""

    date: str
    title: str
    url: str
    snippet: str


class QueryResult(TypedDict):
    """One executed query together with its ordered results."""

    query: str
    results: list[QueryResultSearchResult]


class ScrapeResult(TypedDict):
    """Extracted text of one successfully scraped URL."""

    url: str
    result: str


class CrawlResult(TypedDict):
    """Outcome of crawling a single URL."""

    success: bool
    data: NotRequired[str]
    error: NotRequired[str]


class UrlCrawlResult(TypedDict):
    url: str
    result: CrawlResult


class BulkCrawlResult(TypedDict):
    """Outcome of crawling several URLs; success only if every URL succeeded."""

    success: bool
    results: list[UrlCrawlResult]
    error: NotRequired[str]


class MessageAnnotation(TypedDict):
    """Annotation streamed to the client for every chosen action."""

    type: Literal["NEW_ACTION"]
    action: dict[str, Any]


class AgentLoopResult(TypedDict):
    """Complete result of answering one question."""

    question: str
    answer: str
    actions: list[dict[str, Any]]
    steps: int
    best_effort: bool
    generated_at: str
