import asyncio
import inspect
from typing import Any, Callable, Optional, Protocol, Sequence, runtime_checkable

from ..result import ScoredResult


@runtime_checkable
class SearchProvider(Protocol):
    """Anything that can asynchronously answer a search term with scored results."""

    async def query(
        self, term: str, max_results: int, timeout_ms: int
    ) -> Sequence[ScoredResult]:
        ...


def provider_name(provider: Any) -> str:
    """Name used in logs and metrics: a `name` attribute, else the class name."""
    name = getattr(provider, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(provider).__name__


class _CallableProvider:
    def __init__(self, func: Callable, name: str):
        self._func = func
        self.name = name

    async def query(self, term: str, max_results: int, timeout_ms: int) -> Sequence[ScoredResult]:
        if inspect.iscoroutinefunction(self._func):
            return await self._func(term, max_results, timeout_ms)
        # blocking callables run off the event loop so they can be timed out
        return await asyncio.to_thread(self._func, term, max_results, timeout_ms)

    def __repr__(self) -> str:
        return f"<provider {self.name}>"


def as_provider(func: Callable, name: Optional[str] = None) -> SearchProvider:
    """Wrap a function `(term, max_results, timeout_ms) -> results` as a provider.

    Coroutine functions are awaited; plain functions run in a worker thread.
    """
    return _CallableProvider(func, name or getattr(func, "__name__", "provider"))
