"""Background worker for CatalogRec.

Receives train and recommend commands, loads the catalog, publishes the
resulting feature context and reports progress through outbound events.
"""
