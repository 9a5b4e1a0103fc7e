"""
Search and Caching Package

Provides web search capabilities with caching for the agent loop.
"""

from .cache import SearchCache
from .serper import search_serper

__all__ = ["search_serper", "SearchCache"]
