import asyncio
import itertools
import logging
from typing import Any

import httpx
from httpcore._async.connection import exponential_backoff

from ...types import SearchResultItem, SearchResults
from .cache import SearchCache

logger = logging.getLogger("deep_search")

SERPER_SEARCH_URL = "https://google.serper.dev/search"


def parse_organic_results(data: Any) -> list[SearchResultItem]:
    """Map Serper's organic results to search result items."""
    if not isinstance(data, dict):
        raise httpx.HTTPError(
            f"Search API returned an unexpected response body: {type(data).__name__}"
        )

    return [
        SearchResultItem(
            title=result.get("title", ""),
            link=result.get("link", ""),
            snippet=result.get("snippet", ""),
            date=result.get("date", "") or "",
        )
        for result in data.get("organic", [])
        if isinstance(result, dict)
    ]


async def search_serper(
    query: str,
    num: int = 10,
    *,
    api_key: str | None,
    cache: SearchCache | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    max_retries: int = 5,
    backoff_factor: float = 1.0,
) -> SearchResults:
    """
    Perform a web search using the Serper (Google) Search API with caching.

    The call can be cancelled cooperatively by cancelling the awaiting task.

    Args:
        query: The search query string
        num: Number of results to return (default: 10)
        api_key: Serper API key
        cache: Optional cache consulted before calling the API
        transport: Optional httpx transport (used by tests)
        max_retries: Retries for rate-limited requests
        backoff_factor: Base delay in seconds of the exponential backoff

    Returns:
        The organic results for the query

    Raises:
        ValueError: If no API key is configured
        httpx.HTTPError: If the API request fails
    """
    payload = {"q": query, "num": num}

    if cache is not None:
        cached_results = cache.get(payload)
        if cached_results is not None:
            return SearchResults(
                query=query,
                results=cached_results,
                total_results=len(cached_results),
                cached=True,
            )

    if not api_key:
        raise ValueError("SERPER_API_KEY environment variable is required")

    headers = {
        "X-API-KEY": api_key,
        "Content-Type": "application/json",
    }

    async with httpx.AsyncClient(timeout=60.0, transport=transport) as client:
        for attempt, delay in enumerate(
            itertools.islice(exponential_backoff(factor=backoff_factor), max_retries + 1)
        ):
            await asyncio.sleep(delay)  # 0, 1, 2, 4, 8, 16 seconds by default

            try:
                response = await client.post(
                    SERPER_SEARCH_URL, headers=headers, json=payload
                )
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise httpx.HTTPError("Search request timed out") from e
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429 and attempt < max_retries:
                    logger.warning(
                        f"Rate limited, retrying... (attempt {attempt + 1}/{max_retries + 1})"
                    )
                    continue
                raise httpx.HTTPError(
                    f"Search API returned status {e.response.status_code}: {e.response.text}"
                ) from e
            except (httpx.RequestError, ValueError) as e:
                raise httpx.HTTPError(f"Search request failed: {str(e)}") from e

            results = parse_organic_results(data)
            if cache is not None:
                cache.put(payload, results)

            logger.info(f"🔎 Search '{query}' returned {len(results)} results")
            return SearchResults(
                query=query,
                results=results,
                total_results=len(results),
                cached=False,
            )

    raise httpx.HTTPError("Maximum retries exceeded for rate limited requests")
