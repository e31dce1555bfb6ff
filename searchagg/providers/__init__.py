"""Search providers: the protocol the aggregator consumes plus stock implementations."""

from .base import SearchProvider, as_provider, provider_name
from .memory import InMemoryProvider
from .elastic import ElasticSearchProvider

__all__ = [
    "SearchProvider",
    "as_provider",
    "provider_name",
    "InMemoryProvider",
    "ElasticSearchProvider",
]
