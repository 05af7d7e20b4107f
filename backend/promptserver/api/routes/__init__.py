"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic (build command -> call service -> map response)

Design Decisions:
    - Explicit registration in main.py; fixed paths under /api/v1/prompts are
      registered before the /{prompt_uuid} routes
"""
