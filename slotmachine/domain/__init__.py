"""Session aggregate and value types.

Kept free of FastAPI and Redis concerns so the use cases, API routes and tests
can share them.
"""
