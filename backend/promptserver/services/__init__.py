"""Services Layer — use cases that orchestrate IO around core rules.

Invariants:
    - Services receive validated commands/queries, never raw request bodies
    - Services raise PromptServerError subclasses; routes never translate errors

Design Decisions:
    - One service per aggregate/use-case family for locality
"""
