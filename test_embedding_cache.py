#!/usr/bin/env python3
"""
Test script for the persisted embedding cache
"""
import json
import os
import time

from scmbot.transformers.embedding_cache import EmbeddingCache, cache_key

CORPUS = "Cats are mammals. Dogs are mammals too."
MATRIX = {"cats": {"mammals": 2, "dogs": 1}, "mammals": {"cats": 2}}


def test_store_then_load(tmp_path):
    cache = EmbeddingCache(str(tmp_path / "cache"))
    assert cache.load(CORPUS, 3) is None

    path = cache.store(CORPUS, 3, MATRIX)
    print(f"Stored at {path}")
    assert path.exists()
    assert cache.load(CORPUS, 3) == MATRIX
    # No temporary files left behind
    assert not list((tmp_path / "cache").glob("*.tmp"))


def test_key_depends_on_corpus_and_window(tmp_path):
    cache = EmbeddingCache(str(tmp_path))
    cache.store(CORPUS, 3, MATRIX)
    assert cache.load(CORPUS + " The sky is blue.", 3) is None
    assert cache.load(CORPUS, 2) is None
    assert cache_key(CORPUS, 3) != cache_key(CORPUS, 2)


def test_key_depends_on_stop_words(tmp_path):
    cache = EmbeddingCache(str(tmp_path))
    cache.store(CORPUS, 3, MATRIX, frozenset())
    assert cache.load(CORPUS, 3, frozenset({"are", "too"})) is None
    assert cache.load(CORPUS, 3, frozenset()) == MATRIX
    # Order of the stop words does not matter
    assert cache_key(CORPUS, 3, {"are", "too"}) == cache_key(CORPUS, 3, frozenset(["too", "are"]))
    assert cache_key(CORPUS, 3, {"are"}) != cache_key(CORPUS, 3)


def test_corrupt_entry_is_ignored(tmp_path):
    cache = EmbeddingCache(str(tmp_path))
    path = cache.store(CORPUS, 3, MATRIX)
    path.write_text("{not json", encoding="utf-8")
    assert cache.load(CORPUS, 3) is None


def test_malformed_entry_is_ignored(tmp_path):
    cache = EmbeddingCache(str(tmp_path))
    path = cache.store(CORPUS, 3, MATRIX)
    key = cache_key(CORPUS, 3)
    for content in ("[]", "null", "42", json.dumps({"version": 1, "key": key}),
                    json.dumps({"version": 1, "key": key, "matrix": ["cats"]})):
        path.write_text(content, encoding="utf-8")
        assert cache.load(CORPUS, 3) is None


def test_mismatched_key_is_ignored(tmp_path):
    cache = EmbeddingCache(str(tmp_path))
    path = cache.store(CORPUS, 3, MATRIX)
    payload = json.loads(path.read_text(encoding="utf-8"))
    payload["key"] = "something else"
    path.write_text(json.dumps(payload), encoding="utf-8")
    assert cache.load(CORPUS, 3) is None


def test_store_replaces_existing_entry(tmp_path):
    cache = EmbeddingCache(str(tmp_path))
    cache.store(CORPUS, 3, MATRIX)
    cache.store(CORPUS, 3, {"cats": {}})
    assert cache.load(CORPUS, 3) == {"cats": {}}
    assert cache.info()["entries"] == 1


def test_oldest_entries_are_pruned(tmp_path):
    cache = EmbeddingCache(str(tmp_path), max_entries=2)
    paths = []
    for i in range(3):
        path = cache.store(f"corpus {i}", 3, {"word": {}})
        # Make modification times strictly increasing
        stamp = time.time() - 100 + i
        os.utime(path, (stamp, stamp))
        paths.append(path)
    cache.store("corpus 3", 3, {"word": {}})

    assert cache.info()["entries"] == 2
    assert cache.load("corpus 0", 3) is None
    assert cache.load("corpus 1", 3) is None
    assert cache.load("corpus 2", 3) == {"word": {}}
    assert cache.load("corpus 3", 3) == {"word": {}}


def test_info_and_clear(tmp_path):
    cache = EmbeddingCache(str(tmp_path / "missing"))
    assert cache.info()["entries"] == 0
    assert cache.clear() == 0

    cache.store(CORPUS, 3, MATRIX)
    info = cache.info()
    assert info["entries"] == 1
    assert info["bytes"] > 0
    assert cache.clear() == 1
    assert cache.load(CORPUS, 3) is None


if __name__ == "__main__":
    import tempfile
    from pathlib import Path

    for test in (test_store_then_load, test_key_depends_on_corpus_and_window, test_corrupt_entry_is_ignored,
                 test_key_depends_on_stop_words, test_malformed_entry_is_ignored,
                 test_mismatched_key_is_ignored, test_store_replaces_existing_entry,
                 test_oldest_entries_are_pruned, test_info_and_clear):
        with tempfile.TemporaryDirectory() as tmp:
            test(Path(tmp))
    print("✅ ALL CACHE TESTS PASSED!")
