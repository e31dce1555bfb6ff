"""
Merging of scored results collected from several providers.

Two passes: collapse results sharing an id down to the best-scoring one,
then order what is left by score, highest first.
"""

from typing import Any, Dict, Iterable, List

from .result import ScoredResult, validate_result_strict


def filter_repeats(results: Iterable[ScoredResult]) -> List[ScoredResult]:
    """Keep one result per id: the highest score, earliest on ties.

    Output follows the order in which each id was first seen.
    """
    best: Dict[Any, ScoredResult] = {}
    for r in results:
        current = best.get(r.id)
        # strict comparison so the first result reaching the max stays
        if current is None or r.score > current.score:
            best[r.id] = r
    # dict keeps first-insertion order even when a value is replaced
    return list(best.values())


def order_by_score(results: Iterable[ScoredResult]) -> List[ScoredResult]:
    """Sort by score descending. Stable: equal scores keep their input order."""
    return sorted(results, key=lambda r: r.score, reverse=True)


def merge_results(results: Iterable[ScoredResult]) -> List[ScoredResult]:
    """
    Deduplicate by id and order by score.

    Raises InvalidResultError if any element lacks a usable id or score;
    nothing is merged in that case.
    """
    results = list(results)
    for r in results:
        validate_result_strict(r)
    return order_by_score(filter_repeats(results))
