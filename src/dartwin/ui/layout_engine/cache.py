"""
Layout Caching

Caches positioned graphs so the CLI can skip re-layout of unchanged models.
The cache key covers the graph, the layout metrics and the engine version,
so any change to one of them misses the cache.
"""

import hashlib
import json
import logging
from dataclasses import asdict
from pathlib import Path

from pydantic import ValidationError

from dartwin.core import ir
from dartwin.core.interchange import graph_to_data, positioned_graph_to_json

from .metrics import DEFAULT_METRICS, LayoutMetrics
from .plan import ENGINE_VERSION

logger = logging.getLogger(__name__)


class LayoutCache:
    """Cache for computed layouts."""

    def __init__(self, cache_dir: Path):
        """
        Initialize layout cache.

        Args:
            cache_dir: Directory to store cache files
        """
        self.cache_dir = cache_dir
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _compute_hash(
        self,
        graph: ir.Graph,
        metrics: LayoutMetrics = DEFAULT_METRICS,
        engine_version: str = ENGINE_VERSION,
    ) -> str:
        """
        Compute hash for graph + metrics + engine version.

        Returns:
            SHA-256 hash string
        """
        key_data = {
            "graph": graph_to_data(graph),
            "metrics": asdict(metrics),
            "engine_version": engine_version,
        }
        json_str = json.dumps(key_data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()

    def _get_cache_path(self, cache_key: str) -> Path:
        return self.cache_dir / f"{cache_key}.json"

    def get(
        self, graph: ir.Graph, metrics: LayoutMetrics = DEFAULT_METRICS
    ) -> ir.PositionedGraph | None:
        """
        Get the cached layout of a graph.

        Returns:
            Cached positioned graph if found, None otherwise
        """
        cache_path = self._get_cache_path(self._compute_hash(graph, metrics))

        if not cache_path.exists():
            return None

        try:
            return ir.PositionedGraph.model_validate_json(cache_path.read_text(encoding="utf-8"))
        except (OSError, ValidationError):
            # Cache corrupted, ignore
            logger.debug("Ignoring unreadable cache entry %s", cache_path)
            return None

    def set(
        self,
        graph: ir.Graph,
        positioned: ir.PositionedGraph,
        metrics: LayoutMetrics = DEFAULT_METRICS,
    ) -> None:
        """Cache the layout of a graph."""
        cache_path = self._get_cache_path(self._compute_hash(graph, metrics))
        cache_path.write_text(positioned_graph_to_json(positioned), encoding="utf-8")

    def clear(self) -> None:
        """Clear all cached layouts."""
        for cache_file in self.cache_dir.glob("*.json"):
            cache_file.unlink()

    def invalidate(self, graph: ir.Graph, metrics: LayoutMetrics = DEFAULT_METRICS) -> None:
        """Invalidate the cached layout of a specific graph."""
        cache_path = self._get_cache_path(self._compute_hash(graph, metrics))

        if cache_path.exists():
            cache_path.unlink()


def get_layout_cache(project_root: Path) -> LayoutCache:
    """
    Get layout cache for project.

    Args:
        project_root: Project root directory

    Returns:
        Layout cache instance
    """
    cache_dir = project_root / ".dartwin" / "cache" / "layouts"
    return LayoutCache(cache_dir)


__all__ = ["LayoutCache", "get_layout_cache"]
