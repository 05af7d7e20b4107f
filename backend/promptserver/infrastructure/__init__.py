"""Infrastructure Layer — database, cache and logging adapters.

Invariants:
    - Infrastructure never imports from core/ domain logic except errors
    - Driver exceptions are mapped to core errors at this boundary
"""
