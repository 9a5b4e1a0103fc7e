"""
Web collaborators: search and crawling.
"""

from .crawler import WebCrawler
from .search import SearchCache, search_serper

__all__ = ["WebCrawler", "SearchCache", "search_serper"]
