#!/usr/bin/env python3
"""
Test script for corpus suppliers, content cleanup and the relevance index
"""
import math

import pytest

from scmbot.content.relevance_index import RelevanceIndex, build_relevance_scores, rebuild_relevance_index
from scmbot.content.supplier import (
    IndexedCorpusSupplier,
    PublishedContentSupplier,
    StaticCorpusSupplier,
    combine_documents,
    create_supplier,
)
from scmbot.transformers.stop_words import load_stop_words
from scmbot.utils.text_cleanup import clean_content

DOCUMENTS = {
    1: "<p>Cats are mammals.</p><p>Cats purr when happy.</p>",
    2: "<p>The sky is blue.</p> Clouds drift across the sky.",
    3: "Dogs are mammals too. Dogs bark at night.",
}
STOP_WORDS = load_stop_words()


def fetch_by_ids(ids):
    return [{"id": i, "content": DOCUMENTS[i]} for i in ids if i in DOCUMENTS]


class RecordingSupplier:
    def __init__(self, text):
        self.text = text
        self.calls = 0

    def fetch_relevant_text(self, query):
        self.calls += 1
        return self.text


def make_index():
    return RelevanceIndex.from_documents({i: clean_content(t) for i, t in DOCUMENTS.items()}, STOP_WORDS)


def test_clean_content():
    assert clean_content("<p>One.</p><p>Two &amp; three.</p>") == "One. Two & three."
    assert clean_content("Before<script>var x = 1;</script> after [gallery ids=\"1,2\"] end") == "Before after end"
    # &nbsp; decodes to U+00A0, collapsed like any other whitespace
    assert clean_content("&quot;Quoted&quot;&nbsp;text") == "\"Quoted\" text"
    assert clean_content("") == ""
    assert clean_content(None) == ""


def test_static_supplier_cleans_and_joins():
    supplier = StaticCorpusSupplier(["<b>Cats</b> are mammals.", "Dogs are mammals too."])
    assert supplier.fetch_relevant_text("anything") == "Cats are mammals. Dogs are mammals too."
    assert StaticCorpusSupplier([]).fetch_relevant_text("anything") == ""


def test_published_content_supplier():
    rows = [{"id": i, "content": t} for i, t in DOCUMENTS.items()]
    supplier = PublishedContentSupplier(fetch_documents=lambda: rows)
    text = supplier.fetch_relevant_text("cats")
    print(f"Corpus: {text}")
    assert text.startswith("Cats are mammals. Cats purr when happy. The sky is blue.")
    assert "<p>" not in text
    assert PublishedContentSupplier(fetch_documents=lambda: []).fetch_relevant_text("cats") == ""


def test_published_content_supplier_propagates_errors():
    def broken():
        raise RuntimeError("database down")

    with pytest.raises(RuntimeError):
        PublishedContentSupplier(fetch_documents=broken).fetch_relevant_text("cats")


def test_combine_documents_handles_missing_content():
    assert combine_documents([{"content": None}, {"content": "Text."}]) == "Text."


def test_relevance_scores():
    scores = build_relevance_scores({"a": "cats cats dogs", "b": "dogs birds"})
    idf_shared = math.log(3 / 3) + 1.0
    idf_unique = math.log(3 / 2) + 1.0
    assert scores["cats"] == {"a": pytest.approx(2 / 3 * idf_unique)}
    assert scores["dogs"]["a"] == pytest.approx(1 / 3 * idf_shared)
    assert scores["dogs"]["b"] == pytest.approx(1 / 2 * idf_shared)
    assert set(scores["birds"]) == {"b"}
    assert build_relevance_scores({}) == {}


def test_relevance_index_lookup_and_rows():
    index = make_index()
    found = index.lookup(["cats", "unknown"])
    assert set(found) == {"cats"}
    assert set(found["cats"]) == {1}
    assert ("cats", 1, found["cats"][1]) in index.to_rows()
    assert len(index) > 0


def test_indexed_supplier_fetches_matching_documents():
    fallback = RecordingSupplier("everything")
    supplier = IndexedCorpusSupplier(make_index(), fetch_by_ids, fallback=fallback, stop_words=STOP_WORDS)
    assert supplier.match_documents("Do cats purr?")[0][0] == 1
    text = supplier.fetch_relevant_text("Do cats purr?")
    assert text == "Cats are mammals. Cats purr when happy."
    assert fallback.calls == 0


def test_indexed_supplier_group_then_single_words():
    supplier = IndexedCorpusSupplier(make_index(), fetch_by_ids, stop_words=STOP_WORDS, word_window=2)
    # "mammals dogs" appear together in document 3 only
    assert [doc for doc, _ in supplier.match_documents("mammals dogs")] == [3]
    # "sky cats" never appear together, so single words are used
    assert {doc for doc, _ in supplier.match_documents("sky cats")} == {1, 2}


def test_indexed_supplier_limits_documents():
    supplier = IndexedCorpusSupplier(make_index(), fetch_by_ids, stop_words=STOP_WORDS,
                                     word_window=1, max_documents=1)
    matches = supplier.match_documents("mammals")
    assert len(matches) == 1


def test_indexed_supplier_falls_back_to_full_scan():
    fallback = RecordingSupplier("All published content.")
    supplier = IndexedCorpusSupplier(make_index(), fetch_by_ids, fallback=fallback, stop_words=STOP_WORDS)
    assert supplier.fetch_relevant_text("quantum physics") == "All published content."
    assert fallback.calls == 1

    no_fallback = IndexedCorpusSupplier(make_index(), fetch_by_ids, stop_words=STOP_WORDS)
    assert no_fallback.fetch_relevant_text("quantum physics") == ""
    assert no_fallback.fetch_relevant_text("") == ""


def test_indexed_supplier_validates_arguments():
    with pytest.raises(ValueError):
        IndexedCorpusSupplier(make_index(), fetch_by_ids, word_window=0)
    with pytest.raises(ValueError):
        IndexedCorpusSupplier(make_index(), fetch_by_ids, max_documents=0)


def test_rebuild_relevance_index_hands_index_to_store():
    class MemoryStore:
        stored = None

        def store(self, index):
            self.stored = index

    store = MemoryStore()
    rows = [{"id": i, "content": t} for i, t in DOCUMENTS.items()]
    index = rebuild_relevance_index(lambda: rows, store, STOP_WORDS)
    assert store.stored is index
    assert set(index.lookup(["purr"])["purr"]) == {1}
    # HTML never reaches the index
    assert not index.lookup(["p"])


def test_create_supplier_rejects_unknown_strategy():
    with pytest.raises(ValueError):
        create_supplier("everything")


def test_create_supplier_strategies():
    assert isinstance(create_supplier("full"), PublishedContentSupplier)
    indexed = create_supplier("indexed", stop_words=STOP_WORDS)
    assert isinstance(indexed, IndexedCorpusSupplier)
    assert isinstance(indexed.fallback, PublishedContentSupplier)


if __name__ == "__main__":
    test_clean_content()
    test_static_supplier_cleans_and_joins()
    test_published_content_supplier()
    test_published_content_supplier_propagates_errors()
    test_combine_documents_handles_missing_content()
    test_relevance_scores()
    test_relevance_index_lookup_and_rows()
    test_indexed_supplier_fetches_matching_documents()
    test_indexed_supplier_group_then_single_words()
    test_indexed_supplier_limits_documents()
    test_indexed_supplier_falls_back_to_full_scan()
    test_indexed_supplier_validates_arguments()
    test_rebuild_relevance_index_hands_index_to_store()
    test_create_supplier_rejects_unknown_strategy()
    test_create_supplier_strategies()
    print("✅ ALL SUPPLIER TESTS PASSED!")
