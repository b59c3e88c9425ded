"""
Content access for the scmbot responder.

Components:
    - supplier: Corpus supplier strategies (full scan, relevance-indexed subset)
    - relevance_index: TF-IDF word/document scores used to narrow the corpus
"""
