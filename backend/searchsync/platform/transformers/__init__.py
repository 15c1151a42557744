"""Transformers that shape source data before it reaches the index."""
