# voicenav/core/api_client.py

"""
Client for the backend search/article API.

    GET  /api/article?id={id}
    POST /api/search/{type}   {"query": ..., "limit": ...}

No method raises on transport or backend errors: failed searches return
an empty list, failed article fetches return None.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

import requests

from .models import Article, SearchResult


SEARCH_TYPES = ("title", "lexical", "semantic")

# Older backends used different type names for the same searches.
LEGACY_SEARCH_TYPES = {
    "title": "title",
    "lexical": "content",
    "semantic": "vectors",
}


class WikiApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        legacy: bool = False,
        session: Optional[requests.Session] = None,
    ):
        self.logger = logging.getLogger("voicenav.api")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.legacy = legacy
        self.session = session or requests.Session()

    # ---------- search ----------

    def search(self, query: str, search_type: str = "lexical", limit: int = 5) -> List[SearchResult]:
        endpoint = self._search_type(search_type)
        url = f"{self.base_url}/api/search/{endpoint}"
        try:
            r = self.session.post(
                url,
                json={"query": query, "limit": int(limit)},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            self.logger.error(f"Search '{search_type}' failed: {e}")
            return []
        except ValueError as e:
            self.logger.error(f"Search '{search_type}' returned invalid JSON: {e}")
            return []

        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message") if isinstance(data, dict) else data
            self.logger.error(f"Search '{search_type}' error: {message}")
            return []

        results: List[SearchResult] = []
        for item in data.get("results") or []:
            try:
                results.append(SearchResult.from_payload(item))
            except (KeyError, TypeError, ValueError) as e:
                self.logger.warning(f"Skipping malformed search result {item!r}: {e}")
        self.logger.info(f"Search '{search_type}' for '{query}': {len(results)} result(s)")
        return results

    def search_all(self, query: str, search_types: Iterable[str], limit: int = 5) -> List[SearchResult]:
        """
        One search per type, all in flight at once, concatenated in type
        order; an article found by several types is kept once, at its first
        position.
        """
        search_types = list(search_types)
        if not search_types:
            return []
        with ThreadPoolExecutor(max_workers=len(search_types)) as pool:
            batches = list(pool.map(lambda t: self.search(query, t, limit), search_types))

        merged: List[SearchResult] = []
        seen = set()
        for batch in batches:
            for result in batch:
                if result.id in seen:
                    continue
                seen.add(result.id)
                merged.append(result)
        return merged

    # ---------- article ----------

    def fetch_article(self, article_id: int) -> Optional[Article]:
        url = f"{self.base_url}/api/article"
        try:
            r = self.session.get(url, params={"id": article_id}, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            self.logger.error(f"Article {article_id} fetch failed: {e}")
            return None
        except ValueError as e:
            self.logger.error(f"Article {article_id} returned invalid JSON: {e}")
            return None

        if not isinstance(data, dict) or data.get("status") != "success" or not data.get("article"):
            message = data.get("message") if isinstance(data, dict) else data
            self.logger.error(f"Article {article_id} error: {message}")
            return None

        try:
            article = Article.from_payload(data["article"], article_id=article_id)
        except (AttributeError, TypeError, ValueError) as e:
            self.logger.error(f"Article {article_id} has an unexpected shape: {e}")
            return None
        self.logger.info(f"Article {article_id} fetched: '{article.title}'")
        return article

    def _search_type(self, search_type: str) -> str:
        if search_type not in SEARCH_TYPES and search_type not in LEGACY_SEARCH_TYPES.values():
            self.logger.warning(f"Unknown search type '{search_type}'")
        if self.legacy:
            return LEGACY_SEARCH_TYPES.get(search_type, search_type)
        return search_type
