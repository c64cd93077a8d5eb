"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Every time-dependent decision takes the reference instant as an argument

Design Decisions:
    - Functional core separated from imperative shell: gates and projections are
      plain functions the services call at the moment of decision
"""
