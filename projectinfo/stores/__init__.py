"""Persistence helpers for projectinfo."""

from .result_cache import ResultCache, cache_path

__all__ = ["ResultCache", "cache_path"]
