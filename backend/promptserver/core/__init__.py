"""Core Layer — pure domain rules, commands and value objects. No IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Invalid commands fail at construction time with InvalidCommandError

Design Decisions:
    - Functional core separated from imperative shell (ADR: services orchestrate IO around pure rules)
"""
