from typing import Any, Iterable, List, Tuple

from ..result import ScoredResult


def coverage_score(term: str, text: str) -> float:
    """Fraction of `text` covered by case-insensitive occurrences of `term`."""
    term = term.strip().lower()
    text = (text or "").lower()
    if not term or not text:
        return 0.0
    return len(term) * text.count(term) / len(text)


class InMemoryProvider:
    """
    Provider over a fixed list of `(id, object, text)` items.

    Useful for local indexes and for exercising the aggregator without a
    backend.
    """

    def __init__(self, items: Iterable[Tuple[Any, Any, str]], name: str = "memory"):
        self.items = list(items)
        self.name = name

    async def query(self, term: str, max_results: int, timeout_ms: int) -> List[ScoredResult]:
        hits = []
        for item_id, obj, text in self.items:
            score = coverage_score(term, text)
            if score > 0:
                hits.append(ScoredResult(id=item_id, object=obj, score=score))
        hits.sort(key=lambda r: r.score, reverse=True)
        return hits[:max_results]
