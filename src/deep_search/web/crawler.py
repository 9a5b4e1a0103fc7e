"""
Web Crawler

Fetches pages politely (robots.txt, retries with backoff) and extracts their
readable text with BeautifulSoup.
"""

import asyncio
import itertools
import logging
import re
from urllib.parse import urlparse
from urllib.robotparser import RobotFileParser

import httpx
from bs4 import BeautifulSoup, Tag
from bs4.element import Comment, NavigableString
from httpcore._async.connection import exponential_backoff

from ..types import BulkCrawlResult, CrawlResult, UrlCrawlResult
from ..utils import crawl_error, is_url_blocked, is_valid_url

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class WebCrawler:
    """Crawls URLs with robots.txt etiquette and extracts clean page text."""

    # HTML elements that add noise to content
    NOISE_ELEMENTS = [
        "script",
        "style",
        "noscript",
        "iframe",
        "svg",
        "form",
        "nav",
        "header",
        "footer",
        "aside",
    ]

    # CSS selectors for noise removal
    NOISE_SELECTORS = [
        '[class*="advert"]',
        '[class*="sidebar"]',
        '[class*="cookie"]',
        '[class*="popup"]',
        '[class*="modal"]',
        '[class*="newsletter"]',
        '[id*="sidebar"]',
        '[id*="cookie"]',
        '[role="navigation"]',
    ]

    # CSS selectors for finding main content
    CONTENT_SELECTORS = [
        "main",
        "article",
        '[role="main"]',
        ".content",
        ".post-content",
        ".article-content",
        ".entry-content",
        "#content",
        "#main-content",
        ".post-body",
        ".article-body",
    ]

    BLOCK_ELEMENTS = {
        "p",
        "div",
        "section",
        "article",
        "main",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "table",
        "tr",
        "blockquote",
        "pre",
    }

    def __init__(
        self,
        timeout: float = 30.0,
        max_content_length: int = 12000,
        max_retries: int = 3,
        user_agent: str = "DeepSearchBot/1.0",
        respect_robots_txt: bool = True,
        backoff_factor: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.max_content_length = max_content_length
        self.max_retries = max_retries
        self.user_agent = user_agent
        self.respect_robots_txt = respect_robots_txt
        self.backoff_factor = backoff_factor
        self.transport = transport
        self.logger = logging.getLogger("web_content")
        self._robots: dict[str, RobotFileParser] = {}

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers=self.headers,
            transport=self.transport,
        )

    async def crawl_website(
        self, url: str, client: httpx.AsyncClient | None = None
    ) -> CrawlResult:
        """
        Crawl a single URL and extract its text.

        Failures are reported in the result, never raised.
        """
        if not is_valid_url(url):
            return crawl_error(
                "Invalid URL format. Must start with http:// or https://"
            )
        if is_url_blocked(url):
            return crawl_error("URL blocked - domain not allowed for crawling")

        if client is None:
            async with self._client() as own_client:
                return await self._crawl(own_client, url)
        return await self._crawl(client, url)

    async def bulk_crawl_websites(self, urls: list[str]) -> BulkCrawlResult:
        """
        Crawl several URLs concurrently.

        Returns:
            Per-URL results in input order; ``success`` is True only when every URL succeeded
        """
        if not urls:
            return {"success": True, "results": []}

        self.logger.info(f"🚀 Starting bulk crawl of {len(urls)} URLs")

        async with self._client() as client:
            crawl_results = await asyncio.gather(
                *(self.crawl_website(url, client) for url in urls)
            )

        results: list[UrlCrawlResult] = [
            {"url": url, "result": result} for url, result in zip(urls, crawl_results)
        ]
        failures = [r for r in results if not r["result"]["success"]]

        self.logger.info(
            f"📊 Bulk crawl completed: {len(results) - len(failures)} success, {len(failures)} errors"
        )

        if failures:
            return {
                "success": False,
                "results": results,
                "error": "Failed to crawl some websites:\n"
                + "\n".join(
                    f"{r['url']}: {r['result'].get('error', 'Unknown error')}"
                    for r in failures
                ),
            }
        return {"success": True, "results": results}

    async def _crawl(self, client: httpx.AsyncClient, url: str) -> CrawlResult:
        if self.respect_robots_txt and not await self.is_allowed(client, url):
            self.logger.warning(f"🤖 Disallowed by robots.txt: {url}")
            return crawl_error("Crawling this URL is disallowed by robots.txt")

        response = await self._fetch_with_retry(client, url)
        if isinstance(response, str):
            self.logger.warning(f"❌ Failed to crawl {url}: {response}")
            return crawl_error(response)

        content = self.extract_text(response.text)
        if not content:
            return crawl_error("No readable content found on page")

        self.logger.info(f"✅ Crawled {url} ({len(content)} chars)")
        return {"success": True, "data": content}

    async def is_allowed(self, client: httpx.AsyncClient, url: str) -> bool:
        """Check the site's robots.txt, fetching and caching it once per origin."""
        parsed = urlparse(url)
        origin = f"{parsed.scheme}://{parsed.netloc}"

        parser = self._robots.get(origin)
        if parser is None:
            parser = await self._load_robots(client, origin)
            self._robots[origin] = parser
        return parser.can_fetch(self.user_agent, url)

    async def _load_robots(
        self, client: httpx.AsyncClient, origin: str
    ) -> RobotFileParser:
        parser = RobotFileParser(f"{origin}/robots.txt")
        try:
            response = await client.get(f"{origin}/robots.txt")
        except (httpx.RequestError, httpx.InvalidURL) as e:
            self.logger.debug(f"robots.txt unavailable for {origin}: {e}")
            parser.allow_all = True
            return parser

        # 401/403 lock the crawler out, any other error means no restrictions
        if response.status_code in (401, 403):
            parser.disallow_all = True
        elif response.status_code >= 400:
            parser.allow_all = True
        else:
            parser.parse(response.text.splitlines())
        return parser

    async def _fetch_with_retry(
        self, client: httpx.AsyncClient, url: str
    ) -> httpx.Response | str:
        """Fetch URL, retrying rate limits, server errors and network failures."""
        error = "Unknown error"
        for attempt, delay in enumerate(
            itertools.islice(
                exponential_backoff(factor=self.backoff_factor), self.max_retries + 1
            )
        ):
            await asyncio.sleep(delay)
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.InvalidURL as e:
                return f"Invalid URL: {e}"
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                error = f"HTTP {status}: {e.response.reason_phrase}"
                if status not in RETRYABLE_STATUS_CODES:
                    return error
            except httpx.RequestError as e:
                error = f"Request failed: {str(e)}"
            else:
                self.logger.debug(
                    f"🔍 {url}: {response.status_code} "
                    f"{response.headers.get('content-type', 'unknown')} "
                    f"{len(response.content)} bytes"
                )
                return response

            self.logger.debug(
                f"Retrying {url} after attempt {attempt + 1}/{self.max_retries + 1}: {error}"
            )

        return f"{error} (after {self.max_retries + 1} attempts)"

    def extract_text(self, html: str) -> str:
        """Parse HTML and return the cleaned main-content text, truncated if needed."""
        soup = BeautifulSoup(html, "html.parser")

        title = self._extract_title(soup)
        self._remove_noise_elements(soup)
        main_content = self._find_main_content(soup)
        text_content = self._extract_clean_text(main_content)

        if title and text_content and not text_content.startswith(title):
            text_content = f"# {title}\n\n{text_content}"

        if len(text_content) > self.max_content_length:
            text_content = (
                text_content[: self.max_content_length]
                + "\n\n... [Content truncated for brevity]"
            )
        return text_content

    def _extract_title(self, soup: BeautifulSoup) -> str:
        title_tag = soup.find("title")
        return title_tag.get_text().strip() if title_tag else ""

    def _remove_noise_elements(self, soup: BeautifulSoup) -> None:
        for element in soup(self.NOISE_ELEMENTS):
            element.decompose()

        for selector in self.NOISE_SELECTORS:
            for element in soup.select(selector):
                element.decompose()

    def _find_main_content(self, soup: BeautifulSoup) -> Tag | BeautifulSoup:
        for selector in self.CONTENT_SELECTORS:
            main_content = soup.select_one(selector)
            if main_content:
                return main_content

        body_element = soup.find("body")
        if body_element and isinstance(body_element, Tag):
            return body_element
        return soup

    def _extract_clean_text(self, element: Tag | BeautifulSoup) -> str:
        """Extract text with spacing between block elements."""

        def extract_text_with_spacing(elem) -> str:
            if isinstance(elem, Comment):
                return ""
            if isinstance(elem, NavigableString):
                return str(elem).strip()

            text_parts = [
                child_text
                for child_text in map(extract_text_with_spacing, elem.children)
                if child_text
            ]

            if elem.name in self.BLOCK_ELEMENTS:
                return " ".join(text_parts) + "\n\n" if text_parts else ""
            elif elem.name == "li":
                return "• " + " ".join(text_parts) + "\n" if text_parts else ""
            elif elem.name == "br":
                return "\n"
            else:
                return " ".join(text_parts) + " " if text_parts else ""

        text_content = extract_text_with_spacing(element)

        text_content = re.sub(r"\n\s*\n\s*\n", "\n\n", text_content)
        text_content = re.sub(r" +", " ", text_content)
        return text_content.strip()
