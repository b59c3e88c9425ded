"""
Sentential Context Model (SCM) for the scmbot responder.

A local, non-neural stand-in for an LLM responder: it builds word
co-occurrence embeddings from the site content, finds the sentence most
similar to the visitor's question, and stitches the neighbouring sentences
around it into an answer.

Components:
    - stop_words: Built-in stop word list and loader
    - tokenizer: Unicode-aware normalization, tokenization and sentence splitting
    - embeddings: Sliding-window co-occurrence matrix
    - similarity: Sentence vectors and cosine similarity
    - retriever: Sentence ranking and key statistics
    - assembler: Budgeted expansion of the best sentence into a response
    - embedding_cache: Persisted co-occurrence matrices keyed by corpus
    - sentential_context_model: The query-to-response pipeline
"""
