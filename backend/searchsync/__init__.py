"""Searchsync: replicate a hierarchical document store into a search index."""
