"""FastAPI application module for CatalogRec.

This module exposes the model training worker over HTTP: training commands,
recommendation queries, worker events and status endpoints.
"""
