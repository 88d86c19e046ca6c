"""Thread-safe in-memory cache of compiled rule expressions."""
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional
import logging
import threading

if TYPE_CHECKING:
    from rulesdemo.rules.compiler import CompiledExpression

logger = logging.getLogger(__name__)


class ExpressionCache:
    """
    Cache mapping expression text to its compiled tree.

    Compiled output is a pure function of the text, so entries never expire.
    Compilation runs outside the lock: two threads compiling the same text at
    once both succeed and the last write wins with an equal tree.

    Example:
        >>> cache = ExpressionCache()
        >>> compiled = cache.get_or_compile("input1.Age >= 18")
        >>> cache.get("input1.Age >= 18") is compiled
        True
    """

    def __init__(self, compiler: Optional[Callable[[str], "CompiledExpression"]] = None):
        if compiler is None:
            from rulesdemo.rules.compiler import compile_expression as compiler
        self._compiler = compiler
        self._cache: Dict[str, "CompiledExpression"] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, source: str) -> Optional["CompiledExpression"]:
        """
        Return the cached tree for `source`, or None on a miss.

        Thread-safe.
        """
        with self._lock:
            compiled = self._cache.get(source)
            if compiled is None:
                self._misses += 1
            else:
                self._hits += 1
            return compiled

    def set(self, source: str, compiled: "CompiledExpression") -> None:
        """
        Store a compiled tree. Thread-safe.
        """
        with self._lock:
            self._cache[source] = compiled

    def get_or_compile(self, source: str) -> "CompiledExpression":
        """
        Return the cached tree for `source`, compiling and storing it on a miss.

        Raises:
            ParseError: If `source` does not compile (nothing is cached)
        """
        compiled = self.get(source)
        if compiled is not None:
            logger.debug("Expression cache hit: %s", source)
            return compiled

        logger.debug("Compiling expression: %s", source)
        compiled = self._compiler(source)
        self.set(source, compiled)
        return compiled

    def clear(self, source: str) -> None:
        """
        Drop a single entry. Thread-safe.
        """
        with self._lock:
            self._cache.pop(source, None)

    def clear_all(self) -> None:
        """
        Clear all entries and reset hit/miss counters.

        Useful for testing or full reset.

        Thread-safe.
        """
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def size(self) -> int:
        """
        Get current number of compiled expressions in cache.
        """
        with self._lock:
            return len(self._cache)

    def stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with 'size', 'hits' and 'misses' keys

        Example:
            >>> stats = cache.stats()
            >>> print(f"Cache: {stats['size']} expressions, {stats['hits']} hits")
            Cache: 5 expressions, 12 hits
        """
        with self._lock:
            return {
                "size": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
            }
