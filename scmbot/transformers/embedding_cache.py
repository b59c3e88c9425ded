"""
Persisted co-occurrence matrices.

Each matrix is stored as a plain JSON file named after the SHA-256 of the
window size, the stop word set and the corpus that produced it, so a cached
matrix can never be served for a different corpus or tokenization. Writes go to a temporary file in the cache
directory and are swapped in with os.replace(); readers see either the old
file or the new one, never a partial write.
"""

import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import AbstractSet, Any, Dict, Optional

from .embeddings import CooccurrenceMatrix

logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = 1


def cache_key(corpus: str, window_size: int, stop_words: AbstractSet[str] = frozenset()) -> str:
    digest = hashlib.sha256()
    digest.update(f"{window_size}\n".encode("utf-8"))
    digest.update(" ".join(sorted(stop_words)).encode("utf-8"))
    digest.update(b"\n")
    digest.update(corpus.encode("utf-8"))
    return digest.hexdigest()


class EmbeddingCache:
    """Directory of cached co-occurrence matrices, oldest entries pruned first."""

    def __init__(self, cache_dir: str, max_entries: int = 8):
        self.cache_dir = Path(cache_dir)
        self.max_entries = max(1, max_entries)

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def load(self, corpus: str, window_size: int,
             stop_words: AbstractSet[str] = frozenset()) -> Optional[CooccurrenceMatrix]:
        """Return the cached matrix for this corpus, window size and stop words, or None."""
        key = cache_key(corpus, window_size, stop_words)
        path = self._path(key)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"[CACHE] Unreadable cache entry {path.name}: {e}")
            return None

        if not isinstance(payload, dict) or not isinstance(payload.get("matrix"), dict):
            logger.warning(f"[CACHE] Malformed cache entry {path.name}")
            return None

        if payload.get("version") != CACHE_FORMAT_VERSION or payload.get("key") != key:
            logger.warning(f"[CACHE] Ignoring mismatched cache entry {path.name}")
            return None

        logger.info(f"[CACHE] Hit for window {window_size} ({len(payload['matrix'])} words)")
        return payload["matrix"]

    def store(self, corpus: str, window_size: int, matrix: CooccurrenceMatrix,
              stop_words: AbstractSet[str] = frozenset()) -> Path:
        """Atomically write the matrix and prune old entries."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        key = cache_key(corpus, window_size, stop_words)
        path = self._path(key)
        payload = {
            "version": CACHE_FORMAT_VERSION,
            "key": key,
            "window_size": window_size,
            "built_at": time.time(),
            "matrix": matrix,
        }

        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self.cache_dir, suffix=".tmp", delete=False
        ) as tmp:
            tmp_path = tmp.name
            try:
                json.dump(payload, tmp, ensure_ascii=False)
            except Exception:
                tmp.close()
                os.unlink(tmp_path)
                raise
        os.replace(tmp_path, path)

        logger.info(f"[CACHE] Stored matrix for window {window_size} ({len(matrix)} words) as {path.name}")
        self._prune()
        return path

    def _entries(self):
        return sorted(self.cache_dir.glob("*.json"), key=lambda p: p.stat().st_mtime)

    def _prune(self) -> None:
        entries = self._entries()
        for stale in entries[: max(0, len(entries) - self.max_entries)]:
            try:
                stale.unlink()
                logger.info(f"[CACHE] Pruned {stale.name}")
            except FileNotFoundError:
                pass

    def clear(self) -> int:
        """Remove every cache entry. Returns the number removed."""
        if not self.cache_dir.exists():
            return 0
        removed = 0
        for entry in self.cache_dir.glob("*.json"):
            entry.unlink(missing_ok=True)
            removed += 1
        logger.info(f"[CACHE] Cleared {removed} entries")
        return removed

    def info(self) -> Dict[str, Any]:
        if not self.cache_dir.exists():
            return {"path": str(self.cache_dir), "entries": 0, "bytes": 0}
        entries = self._entries()
        return {
            "path": str(self.cache_dir),
            "entries": len(entries),
            "bytes": sum(entry.stat().st_size for entry in entries),
        }
