"""CatalogRec: feature vectors and recommendations for a product catalog.

This package builds fixed-length numeric feature vectors for every product in
a catalog and uses them to answer personalized recommendation queries. Training
runs inside a background worker that reports its progress through events.

Modules:
    api: FastAPI application and REST API endpoints
    features: Feature context construction, vectorization and lookup
    worker: Command dispatch, catalog loading and context publication
"""

__version__ = "0.1.0"
