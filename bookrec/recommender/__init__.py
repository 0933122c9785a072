"""Recommendation and aggregation engines for BookRec.

This module contains genre tokenization, the immutable catalog and borrow
history stores, per-user viewing history, content-based recommendation and
frequency-based top-N rankings.
"""
