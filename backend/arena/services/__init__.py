"""Service Layer — async components of the entry lifecycle.

Invariants:
    - Components operate on a caller-supplied AsyncSession and never commit
    - EntryLifecycleCoordinator owns every transaction boundary
"""
