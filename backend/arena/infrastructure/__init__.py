"""Infrastructure Layer — database engine, transaction runner, logging.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All driver errors mapped to core/errors.py types before leaving this layer
"""
