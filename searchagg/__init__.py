"""Fan-out/merge search aggregation over independent search providers."""

__version__ = "0.1.0"

from .result import ScoredResult, InvalidResultError
from .merge import merge_results
from .config import AggregatorConfig
from .aggregator import SearchAggregator

__all__ = [
    "ScoredResult",
    "InvalidResultError",
    "merge_results",
    "AggregatorConfig",
    "SearchAggregator",
]
