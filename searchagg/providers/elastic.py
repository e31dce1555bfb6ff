"""Provider backed by an Elasticsearch `_search` endpoint."""

import asyncio
import re
import time
from typing import Any, Dict, List

import requests

from ..logger import get_logger
from ..result import InvalidResultError, ScoredResult
from ..retry import RetryError, exponential_backoff, should_retry_http_status

logger = get_logger()

# Lucene query-string syntax characters that must be escaped in user terms
_LUCENE_SPECIAL = re.compile(r'([+\-=&|><!(){}\[\]^"~*?:\\/])')


class RetryableStatusError(requests.exceptions.HTTPError):
    """HTTP status worth retrying (429, 5xx gateway errors)."""
    pass


_RETRYABLE = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    RetryableStatusError,
)

# maps Elasticsearch hit keys to ScoredResult fields
_HIT_FIELDS = {"_id": "id", "_source": "object", "_score": "score"}


def _get_before(url: str, params: Dict[str, Any], deadline: float) -> requests.Response:
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise requests.exceptions.Timeout(f"Deadline passed before requesting {url}")
    resp = requests.get(url, params=params, timeout=remaining)
    if should_retry_http_status(resp.status_code):
        raise RetryableStatusError(f"status {resp.status_code}", response=resp)
    return resp


def get_within(url: str, params: Dict[str, Any], timeout: float) -> requests.Response:
    """GET with retries on transient failures, all inside `timeout` seconds.

    Each attempt gets only the time left, and no retry starts once the
    budget would be spent.
    """
    deadline = time.monotonic() + timeout
    fetch = exponential_backoff(
        max_retries=2,
        base_delay=0.1,
        max_delay=1.0,
        exceptions=_RETRYABLE,
        give_up_after=timeout,
    )(_get_before)
    return fetch(url, params, deadline)


def escape_term(word: str) -> str:
    return _LUCENE_SPECIAL.sub(r"\\\1", word)


def build_query_string(term: str, field: str = "name") -> str:
    """Build a wildcard query-string matching every word of the term."""
    return " AND ".join(f"{field}:*{escape_term(w)}*" for w in term.split())


def parse_hits(payload: Dict[str, Any]) -> List[ScoredResult]:
    """Map an Elasticsearch response body to scored results.

    Raises InvalidResultError for a hit without a usable `_id` or `_score`.
    """
    try:
        hits = payload["hits"]["hits"]
    except (KeyError, TypeError):
        raise ValueError("Elasticsearch response has no hits.hits list")
    results = []
    for h in hits:
        if not isinstance(h, dict):
            raise InvalidResultError(f"Elasticsearch hit is not an object: {h!r}")
        results.append(ScoredResult.from_dict(
            {field: h[key] for key, field in _HIT_FIELDS.items() if key in h}
        ))
    return results


class ElasticSearchProvider:
    """
    Search provider querying `<root>/_search` with a query-string search.

    The blocking HTTP call runs in a worker thread. Failures surface as
    ValueError with a readable message; the aggregator isolates them.
    """

    def __init__(self, root: str, field: str = "name", name: str = "elasticsearch"):
        self.root = root.rstrip("/")
        self.field = field
        self.name = name

    @property
    def search_url(self) -> str:
        return f"{self.root}/_search"

    async def query(self, term: str, max_results: int, timeout_ms: int) -> List[ScoredResult]:
        query_string = build_query_string(term, self.field)
        if not query_string:
            return []
        params = {"q": query_string, "size": max_results}
        return await asyncio.to_thread(self._search, params, timeout_ms / 1000.0)

    def _search(self, params: Dict[str, Any], timeout: float) -> List[ScoredResult]:
        url = self.search_url
        try:
            resp = get_within(url, params, timeout)
            resp.raise_for_status()
        except RetryError as e:
            cause = e.__cause__
            if isinstance(cause, requests.exceptions.Timeout):
                logger.warning("Elasticsearch request timed out", url=url)
                raise ValueError("Elasticsearch request timed out. Try again later.")
            logger.error("Elasticsearch request kept failing", url=url, error=str(cause))
            raise ValueError(f"Elasticsearch request failed after retries: {cause}")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "HTTPError"
            logger.error("Elasticsearch request failed", url=url, status=status)
            raise ValueError(f"Elasticsearch request failed ({status}): {url}")
        except requests.exceptions.RequestException as e:
            logger.error("Elasticsearch request error", url=url, error=str(e))
            raise ValueError(f"Elasticsearch request error: {e}")

        try:
            payload = resp.json()
        except ValueError:
            raise ValueError(f"Elasticsearch returned a non-JSON body: {url}")
        return parse_hits(payload)
