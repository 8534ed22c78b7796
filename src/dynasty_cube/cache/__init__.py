"""In-process caches — best-effort accelerators, never a source of truth."""

from dynasty_cube.cache.draft_cache import DraftCache
from dynasty_cube.cache.request_memo import RequestMemo

__all__ = ["DraftCache", "RequestMemo"]
