"""Range-bounded text summarization.

This package provides:
- Whitespace normalization and token-bounded chunking
- A background-loaded seq2seq model gateway
- The iterative re-summarization loop and its single-worker dispatcher
- The FastAPI app serving ``POST /api/summarize``
"""
