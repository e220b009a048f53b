"""Feature engineering module for CatalogRec.

This module computes normalization bounds, categorical index tables and
purchaser-age aggregates over a catalog, assembles them into an immutable
feature context, and encodes each product into a weighted feature vector.
"""
