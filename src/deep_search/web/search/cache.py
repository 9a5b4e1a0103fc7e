"""
Serper Response Cache

Stores the organic results of Serper requests on disk so repeated queries in
and across runs skip the API. Every entry is a single JSON file holding the
request it answers, when it was written and the result items.
"""

import hashlib
import json
import logging
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from ...types import SearchResultItem

logger = logging.getLogger("deep_search")


class CachedResult(BaseModel):
    title: str
    link: str
    snippet: str
    date: str = ""


class CacheEntry(BaseModel):
    request: dict[str, Any]
    cached_at: datetime
    results: list[CachedResult]


def normalize_request(request: dict[str, Any]) -> dict[str, Any]:
    """Case and whitespace differences in the query hit the same entry."""
    normalized = dict(request)
    if isinstance(normalized.get("q"), str):
        normalized["q"] = re.sub(r"\s+", " ", normalized["q"]).strip().casefold()
    return normalized


class SearchCache:
    """File-backed cache of Serper organic results, keyed on the request body."""

    def __init__(self, cache_dir: str = "cache", cache_ttl_hours: float = 24):
        self.cache_dir = Path(cache_dir)
        self.ttl = timedelta(hours=cache_ttl_hours)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def key_for(self, request: dict[str, Any]) -> str:
        canonical = json.dumps(
            normalize_request(request), sort_keys=True, ensure_ascii=False
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def path_for(self, request: dict[str, Any]) -> Path:
        return self.cache_dir / f"serper-{self.key_for(request)}.json"

    def _entries(self) -> list[Path]:
        return sorted(self.cache_dir.glob("serper-*.json"))

    def _read(self, path: Path) -> CacheEntry | None:
        """Load an entry, discarding files that are unreadable or malformed."""
        try:
            return CacheEntry.model_validate_json(path.read_bytes())
        except FileNotFoundError:
            return None
        except (OSError, ValidationError) as e:
            logger.warning(f"Discarding unreadable cache entry {path.name}: {e}")
            path.unlink(missing_ok=True)
            return None

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return datetime.now() - entry.cached_at <= self.ttl

    def get(self, request: dict[str, Any]) -> list[SearchResultItem] | None:
        """
        Look up the results for a Serper request body.

        Returns:
            The cached result items, or None on a miss or an expired entry
        """
        path = self.path_for(request)
        entry = self._read(path)
        if entry is None:
            return None

        if not self._is_fresh(entry):
            path.unlink(missing_ok=True)
            return None

        logger.info(f"🔄 Using cached results for: {request.get('q')}")
        return [SearchResultItem(**item.model_dump()) for item in entry.results]

    def put(self, request: dict[str, Any], results: list[SearchResultItem]) -> None:
        """Store the result items for a request, replacing any previous entry."""
        entry = CacheEntry(
            request=normalize_request(request),
            cached_at=datetime.now(),
            results=[CachedResult(**item) for item in results],
        )
        path = self.path_for(request)
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            logger.warning(f"Failed to cache results for {request.get('q')}: {e}")
            tmp_path.unlink(missing_ok=True)
            return

        logger.info(f"💾 Cached {len(results)} results for: {request.get('q')}")

    def prune(self) -> int:
        """Delete expired and unreadable entries; returns how many were removed."""
        removed = 0
        for path in self._entries():
            entry = self._read(path)
            if entry is None:
                removed += 1
            elif not self._is_fresh(entry):
                path.unlink(missing_ok=True)
                removed += 1

        if removed:
            logger.info(f"🧹 Pruned {removed} cache entries")
        return removed

    def clear(self) -> int:
        """Delete every entry; returns how many were removed."""
        entries = self._entries()
        for path in entries:
            path.unlink(missing_ok=True)
        logger.info(f"🗑️ Cleared {len(entries)} cached searches")
        return len(entries)
